import functools

from ..base_module import BaseModule


def create(ctx, title: str, body: str = "") -> dict:
    if not title:
        raise ValueError("post title must not be empty")
    return ctx["store"].add("posts", {"title": title, "body": body})


def list_posts(ctx) -> list:
    return ctx["store"].all("posts")


def post_list(context, actions, page_size: int = 10, **props) -> str:
    posts = actions.posts.list()[:page_size]
    header = f"{context.get('site_name', 'modweave')}: {len(posts)} post(s)"
    return "\n".join([header] + [f"#{p['id']} {p['title']}" for p in posts])


class PostsModule(BaseModule):
    """Blog posts: ``posts.create``/``posts.list`` and the ``/posts`` page."""

    name = "posts"

    def actions(self):
        return {"posts": {"create": create, "list": list_posts}}

    def routes(self, inject) -> None:
        page = functools.partial(post_list, page_size=self.params.get("page_size", 10))
        inject.context["router"].register("/posts", inject(page, namespaces=["posts"]))
