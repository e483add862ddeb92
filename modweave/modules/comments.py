from ..base_module import BaseModule


def create(ctx, post_id: int, text: str) -> dict:
    store = ctx["store"]
    if not any(p["id"] == post_id for p in store.all("posts")):
        raise LookupError(f"no post with id {post_id}")
    return store.add("comments", {"post_id": post_id, "text": text})


def for_post(ctx, post_id: int) -> list:
    return [c for c in ctx["store"].all("comments") if c["post_id"] == post_id]


def comment_thread(context, actions, post_id: int = 1, **props) -> str:
    # reads the posts namespace, which may be registered by a later module
    post = next((p for p in actions.posts.list() if p["id"] == post_id), None)
    if post is None:
        return f"post {post_id} not found"
    lines = [f"#{post['id']} {post['title']}"]
    lines += [f"  - {c['text']}" for c in actions.comments.for_post(post_id)]
    return "\n".join(lines)


class CommentsModule(BaseModule):
    """Comments attached to posts."""

    name = "comments"

    def actions(self):
        return {"comments": {"create": create, "for_post": for_post}}

    def routes(self, inject) -> None:
        inject.context["router"].register("/posts/comments", inject(comment_thread))
