"""Image retrieval returning explicit success/failure results."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Final, Union
from urllib.parse import urlsplit

import httpx

from .config import DEFAULT_FETCH_TIMEOUT_S, DEFAULT_USER_AGENT, ConverterConfig

logger = logging.getLogger(__name__)

REMOTE_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})

_MAX_REDIRECTS: Final[int] = 5


@dataclass(frozen=True)
class FetchSuccess:
    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class FetchFailure:
    reason: str


FetchResult = Union[FetchSuccess, FetchFailure]


def is_remote(url: str) -> bool:
    try:
        scheme = urlsplit(url).scheme
    except ValueError:
        return False
    return scheme.lower() in REMOTE_SCHEMES


class ImageFetcher:
    """GET-only image fetcher around one reusable ``httpx.Client``.

    The fetcher keeps no per-document state, so a single instance can serve
    concurrent conversions.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout: float = DEFAULT_FETCH_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            max_redirects=_MAX_REDIRECTS,
        )

    @classmethod
    def from_config(cls, config: ConverterConfig) -> "ImageFetcher":
        return cls(timeout=config.fetch_timeout_s, user_agent=config.user_agent)

    def fetch(self, url: str) -> FetchResult:
        """Fetch ``url``; every failure is returned, never raised."""
        if not is_remote(url):
            return FetchFailure(f"Unsupported URL scheme for {url!r}")
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            return FetchFailure(f"HTTP {exc.response.status_code} from {url}")
        except httpx.TimeoutException:
            return FetchFailure(f"Timed out fetching {url}")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return FetchFailure(f"Failed to fetch {url}: {exc}")

        if not response.content:
            return FetchFailure(f"Empty response body from {url}")
        return FetchSuccess(content=response.content, content_type=response.headers.get("content-type"))

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ImageFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@lru_cache(maxsize=1)
def default_fetcher() -> ImageFetcher:
    """Process-wide fetcher shared by conversions that do not supply one."""
    return ImageFetcher.from_config(ConverterConfig.from_env())


def read_local_image(src: str, asset_root: Path | None) -> FetchResult:
    """Read an image referenced by a path relative to ``asset_root``.

    Without an asset root (text submitted directly rather than read from a
    file) local references are not resolved at all.
    """
    if asset_root is None:
        return FetchFailure(f"No asset root to resolve {src!r}")
    root = asset_root.resolve()
    path = (root / src).resolve()
    if not path.is_relative_to(root):
        return FetchFailure(f"Image path {src!r} escapes {root}")
    try:
        content = path.read_bytes()
    except OSError as exc:
        return FetchFailure(f"Cannot read image {path}: {exc}")
    if not content:
        return FetchFailure(f"Image file {path} is empty")
    return FetchSuccess(content=content)
