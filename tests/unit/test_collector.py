import pytest
from selectolax.parser import HTMLParser

from gluestick import collector as collector_module
from gluestick.collector import Collector, HTMLElement
from gluestick.fetcher import FetcherError, FetchResult

PAGE = """
<html><body>
  <h1>Heading</h1>
  <article><h3>One</h3></article>
  <div class="note">note</div>
  <article><h3>Two</h3></article>
</body></html>
"""


def _fetch_returning(html: str, status: int = 200):
    calls: list[str] = []

    async def fake_fetch(url: str) -> FetchResult:
        calls.append(url)
        return FetchResult(url=url, status=status, html=html)

    fake_fetch.calls = calls
    return fake_fetch


def _recording_collector(fetch) -> tuple[Collector, list]:
    collector = Collector(fetch=fetch)
    events: list = []
    collector.on_request(lambda url: events.append(("request", url)))
    collector.on_scraped(lambda response: events.append(("scraped", response.url)))
    collector.on_error(lambda url, code: events.append(("error", code)))
    return collector, events


@pytest.mark.asyncio
async def test_visit_fires_callbacks_in_document_order() -> None:
    fetch = _fetch_returning(PAGE)
    collector, events = _recording_collector(fetch)
    collector.on_html("article", lambda element: events.append(("article", element.select("h3")[0].text)))
    collector.on_html("div.note", lambda element: events.append(("note", element.text)))

    await collector.visit("https://example.com/page")

    assert fetch.calls == ["https://example.com/page"]
    assert events == [
        ("request", "https://example.com/page"),
        ("article", "One"),
        ("article", "Two"),
        ("note", "note"),
        ("scraped", "https://example.com/page"),
    ]


@pytest.mark.asyncio
async def test_visit_reports_fetch_errors_once() -> None:
    async def failing_fetch(url: str) -> FetchResult:
        raise FetcherError("timeout")

    collector, events = _recording_collector(failing_fetch)
    collector.on_html("article", lambda element: events.append("unexpected"))

    await collector.visit("https://example.com")

    assert events == [("request", "https://example.com"), ("error", "timeout")]


@pytest.mark.asyncio
async def test_visit_reports_http_error_status() -> None:
    collector, events = _recording_collector(_fetch_returning(PAGE, status=404))
    collector.on_html("article", lambda element: events.append("unexpected"))

    await collector.visit("https://example.com")

    assert events[-1] == ("error", "http_404")
    assert "unexpected" not in events


@pytest.mark.asyncio
async def test_callback_failure_becomes_parse_error() -> None:
    collector, events = _recording_collector(_fetch_returning(PAGE))

    def broken(element: HTMLElement) -> None:
        raise KeyError("boom")

    collector.on_html("article", broken)
    await collector.visit("https://example.com")

    assert events[-1] == ("error", "parse_failed")
    assert not any(event[0] == "scraped" for event in events)


def test_invalid_selector_matches_nothing() -> None:
    class RejectingScope:
        def css(self, selector: str):
            raise ValueError("Bad CSS Selectors")

    assert collector_module._css(RejectingScope(), "h3[") == []


def test_element_select_is_scoped_to_descendants() -> None:
    tree = HTMLParser("<div class='box' id='outer'><div class='box' id='inner'></div></div><div class='box'></div>")
    outer = HTMLElement(tree.css_first("#outer"))
    matched = outer.select("div.box")
    assert [element.attr("id") for element in matched] == ["inner"]
    assert outer.tag == "div"
