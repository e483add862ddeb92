from tqdm import tqdm

from ..base_module import BaseModule

DEFAULT_TITLES = ["Hello, world", "Composing modules", "Read-only context"]


class SeedModule(BaseModule):
    """Fills the store with sample posts once every module is loaded."""

    name = "seed"

    def load(self, ctx, actions) -> None:
        titles = self.params.get("titles", DEFAULT_TITLES)
        for title in tqdm(titles, desc="Seeding", disable=not self.params.get("progress", True)):
            actions.posts.create(ctx, title)
