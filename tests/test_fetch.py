"""Tests for the image fetch boundary."""

from __future__ import annotations

import httpx

from MarkDocx.fetch import FetchFailure, FetchSuccess, ImageFetcher, is_remote, read_local_image


def test_success_returns_bytes_and_content_type(make_fetcher, png_bytes):
    fetcher = make_fetcher(
        lambda request: httpx.Response(200, content=png_bytes, headers={"content-type": "image/png"})
    )
    result = fetcher.fetch("https://img.example.com/a.png")
    assert result == FetchSuccess(content=png_bytes, content_type="image/png")


def test_not_found_is_a_failure(make_fetcher):
    result = make_fetcher(lambda request: httpx.Response(404)).fetch("https://img.example.com/a.png")
    assert isinstance(result, FetchFailure)
    assert "404" in result.reason


def test_timeout_is_a_failure(make_fetcher):
    def handler(request):
        raise httpx.ConnectTimeout("too slow", request=request)

    result = make_fetcher(handler).fetch("https://img.example.com/a.png")
    assert isinstance(result, FetchFailure)
    assert "Timed out" in result.reason


def test_connection_error_is_a_failure(make_fetcher):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert isinstance(make_fetcher(handler).fetch("https://img.example.com/a.png"), FetchFailure)


def test_empty_body_is_a_failure(make_fetcher):
    result = make_fetcher(lambda request: httpx.Response(200, content=b"")).fetch("https://img.example.com/a.png")
    assert isinstance(result, FetchFailure)


def test_non_http_urls_are_not_requested(make_fetcher):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, content=b"x")

    result = make_fetcher(handler).fetch("ftp://files.example.com/a.png")
    assert isinstance(result, FetchFailure)
    assert calls == []


def test_fetcher_only_sends_get(make_fetcher, png_bytes):
    methods = []

    def handler(request):
        methods.append(request.method)
        return httpx.Response(200, content=png_bytes)

    fetcher = make_fetcher(handler)
    fetcher.fetch("https://a.example/1.png")
    fetcher.fetch("https://a.example/2.png")
    assert methods == ["GET", "GET"]


def test_owned_client_closed_by_context_manager():
    with ImageFetcher(timeout=1.0) as fetcher:
        client = fetcher._client
        assert client.timeout.read == 1.0
    assert client.is_closed


def test_borrowed_client_left_open():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
    ImageFetcher(client=client).close()
    assert not client.is_closed
    client.close()


def test_is_remote():
    assert is_remote("https://a.example/x.png")
    assert is_remote("HTTP://a.example/x.png")
    assert not is_remote("images/x.png")
    assert not is_remote("http://[::1")


def test_read_local_image(tmp_path, png_bytes):
    (tmp_path / "a.png").write_bytes(png_bytes)
    assert read_local_image("a.png", tmp_path) == FetchSuccess(content=png_bytes)
    assert isinstance(read_local_image("missing.png", tmp_path), FetchFailure)
    assert isinstance(read_local_image("a.png", None), FetchFailure)
