from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from selectolax.parser import HTMLParser, Node

from gluestick.fetcher import FetcherError, FetchResult, fetch_html

logger = logging.getLogger(__name__)

FetchFunc = Callable[[str], Awaitable[FetchResult]]
RequestHook = Callable[[str], None]
HTMLHook = Callable[["HTMLElement"], None]
ScrapedHook = Callable[[FetchResult], None]
ErrorHook = Callable[[str, str], None]


class HTMLElement:
    """A matched document node as seen by ``on_html`` callbacks."""

    def __init__(self, node: Node, url: str | None = None) -> None:
        self._node = node
        self.url = url

    @property
    def tag(self) -> str:
        return self._node.tag

    @property
    def text(self) -> str:
        return (self._node.text(deep=True) or "").strip()

    def attr(self, name: str) -> str | None:
        attributes = self._node.attributes
        if name not in attributes:
            return None
        value = attributes[name]
        # valueless attributes (<input disabled>) are present but empty
        return "" if value is None else value

    def select(self, selector: str) -> list[HTMLElement]:
        own_id = self._node.mem_id
        return [
            HTMLElement(node, self.url)
            for node in _css(self._node, selector)
            if node.mem_id != own_id
        ]


@dataclass(frozen=True)
class _HTMLCallback:
    selector: str
    callback: HTMLHook


class Collector:
    """Fetch one page and hand selector matches to registered callbacks.

    ``visit`` fires exactly one of the scraped or error hooks. HTML callbacks
    run in registration order, each over its matches in document order.
    """

    def __init__(self, fetch: FetchFunc | None = None) -> None:
        self._fetch = fetch or fetch_html
        self._request_hooks: list[RequestHook] = []
        self._html_callbacks: list[_HTMLCallback] = []
        self._scraped_hooks: list[ScrapedHook] = []
        self._error_hooks: list[ErrorHook] = []

    def on_request(self, hook: RequestHook) -> None:
        self._request_hooks.append(hook)

    def on_html(self, selector: str, callback: HTMLHook) -> None:
        self._html_callbacks.append(_HTMLCallback(selector=selector, callback=callback))

    def on_scraped(self, hook: ScrapedHook) -> None:
        self._scraped_hooks.append(hook)

    def on_error(self, hook: ErrorHook) -> None:
        self._error_hooks.append(hook)

    async def visit(self, url: str) -> None:
        for hook in self._request_hooks:
            hook(url)
        try:
            result = await self._fetch(url)
        except FetcherError as exc:
            self._emit_error(url, exc.code)
            return
        if not result.ok:
            self._emit_error(url, f"http_{result.status}")
            return
        try:
            self._walk(HTMLParser(result.html), result.url or url)
        except Exception:
            logger.exception("walk_failed: %s", url)
            self._emit_error(url, "parse_failed")
            return
        for hook in self._scraped_hooks:
            hook(result)

    def _walk(self, tree: HTMLParser, url: str) -> None:
        for registered in self._html_callbacks:
            for node in _css(tree, registered.selector):
                registered.callback(HTMLElement(node, url))

    def _emit_error(self, url: str, code: str) -> None:
        for hook in self._error_hooks:
            hook(url, code)


def _css(scope: HTMLParser | Node, selector: str) -> list[Node]:
    try:
        matches = scope.css(selector)
    except ValueError as exc:
        logger.warning("invalid_selector: %r %s", selector, exc)
        return []
    # modest returns grouped selectors ("h3, a") one group after another
    if "," not in selector or len(matches) < 2:
        return matches
    return _in_document_order(scope, matches)


def _in_document_order(scope: HTMLParser | Node, matches: list[Node]) -> list[Node]:
    root = scope.root if isinstance(scope, HTMLParser) else scope
    if root is None:
        return matches
    position = {node.mem_id: index for index, node in enumerate(root.traverse())}
    unique = {node.mem_id: node for node in matches}
    return sorted(unique.values(), key=lambda node: position.get(node.mem_id, len(position)))
