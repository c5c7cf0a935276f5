from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .config import ConverterConfig
from .fetch import FetchResult, ImageFetcher, default_fetcher, is_remote, read_local_image


@dataclass
class RenderState:
    """Per-conversion traversal context; never shared between conversions."""

    config: ConverterConfig = field(default_factory=ConverterConfig)
    fetcher: ImageFetcher | None = None
    asset_root: Path | None = None
    list_depth: int = 0
    # each image source is loaded at most once per conversion
    images: dict[str, FetchResult] = field(default_factory=dict, repr=False)

    def load_image(self, url: str) -> FetchResult:
        if url not in self.images:
            self.images[url] = self._load(url)
        return self.images[url]

    def _load(self, url: str) -> FetchResult:
        if is_remote(url):
            fetcher = self.fetcher or default_fetcher()
            return fetcher.fetch(url)
        return read_local_image(url, self.asset_root)
