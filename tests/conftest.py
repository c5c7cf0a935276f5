from __future__ import annotations

from typing import Callable

import httpx
import pytest

from MarkDocx.fetch import ImageFetcher
from MarkDocx.markdown_parser import parse_markdown
from MarkDocx.renderer_docx import build_document
from MarkDocx.state import RenderState

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def make_fetcher() -> Callable[[Callable[[httpx.Request], httpx.Response]], ImageFetcher]:
    """Build an ImageFetcher whose HTTP traffic is answered by ``handler``."""
    clients: list[httpx.Client] = []

    def factory(handler) -> ImageFetcher:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return ImageFetcher(client=client)

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_fetcher(make_fetcher) -> ImageFetcher:
    return make_fetcher(lambda request: httpx.Response(200, content=PNG_BYTES))


@pytest.fixture
def render():
    """Render Markdown text into an in-memory python-docx document."""

    def _render(md_text: str, **state_kwargs):
        state = RenderState(**state_kwargs)
        return build_document(parse_markdown(md_text), state)

    return _render
