from __future__ import annotations

from urllib.parse import quote


class ImageResolver:
    def image_for(self, recipe_name: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class PlaceholderImageResolver(ImageResolver):
    """
    Synthesizes a placeholder image URL from the recipe name.
    No network call; the URL is rendered by placehold.co when the client loads it.
    """
    def __init__(self, base_url: str = "https://placehold.co", size: str = "800x600",
                 colors: str = "FF6B6B/FFFFFF", max_chars: int = 30):
        self.base_url = base_url.rstrip("/")
        self.size = size
        self.colors = colors
        self.max_chars = max_chars

    def image_for(self, recipe_name: str) -> str:
        text = quote(recipe_name[: self.max_chars], safe="")
        return f"{self.base_url}/{self.size}/{self.colors}?text={text}"
