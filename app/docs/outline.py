"""Heading outline for rendered documentation pages.

`extract_headings` walks h1-h3 in document order, gives each a unique slug id
(written back onto the element) and returns the outline. `DocumentTree`
publishes body mutations; `HeadingWatcher` re-runs the extraction from scratch
on each of them.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import asdict, dataclass
from typing import Callable

from bs4 import BeautifulSoup

log = logging.getLogger("app.docs")

HEADING_TAGS = ["h1", "h2", "h3"]

# ASCII word characters, as browsers slug anchors. Only whitespace is trimmed.
_STRIP = re.compile(r"[^A-Za-z0-9_\s-]")
_SPACES = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


@dataclass(frozen=True)
class Heading:
    id: str
    text: str
    level: int

    def to_dict(self) -> dict:
        return asdict(self)


def slugify(text: str) -> str:
    s = (text or "").lower()
    s = _STRIP.sub("", s)
    s = _SPACES.sub("-", s)
    s = _HYPHENS.sub("-", s)
    return s.strip()


def extract_headings(soup: BeautifulSoup) -> list[Heading]:
    out: list[Heading] = []
    seen: dict[str, int] = {}

    for el in soup.find_all(HEADING_TAGS):
        text = el.get_text()
        base = el.get("id") or slugify(text)
        if not base:
            continue

        count = seen.get(base, 0)
        unique = f"{base}-{count}" if count else base
        seen[base] = count + 1

        el["id"] = unique
        out.append(Heading(id=unique, text=text.strip(), level=int(el.name[1])))
    return out


MutationListener = Callable[[str], None]


class DocumentTree:
    """Parsed HTML document whose body mutations are published to subscribers."""

    def __init__(self, html: str) -> None:
        self.soup = BeautifulSoup(html or "", "html.parser")
        self.lock = threading.RLock()
        self._listeners: list[MutationListener] = []

    def subscribe(self, listener: MutationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, kind: str) -> None:
        for listener in list(self._listeners):
            listener(kind)

    def _container(self):
        return self.soup.body or self.soup

    def append_html(self, html: str) -> None:
        with self.lock:
            fragment = BeautifulSoup(html, "html.parser")
            container = self._container()
            for node in list(fragment.contents):
                container.append(node.extract())
        self._notify("append")

    def replace_body(self, html: str) -> None:
        with self.lock:
            self.soup = BeautifulSoup(html or "", "html.parser")
        self._notify("replace")

    def remove(self, selector: str) -> int:
        with self.lock:
            nodes = self.soup.select(selector)
            for node in nodes:
                node.decompose()
        if nodes:
            self._notify("remove")
        return len(nodes)

    def html(self) -> str:
        with self.lock:
            return str(self.soup)


class HeadingWatcher:
    """Keeps an outline of a DocumentTree current.

    Runs once after `initial_delay` seconds (immediately when <= 0), then on
    every mutation notification. Each run re-numbers from scratch.
    """

    def __init__(
        self,
        tree: DocumentTree,
        on_change: Callable[[list[Heading]], None] | None = None,
        *,
        initial_delay: float = 0.1,
    ) -> None:
        self.tree = tree
        self.on_change = on_change
        self.initial_delay = initial_delay
        self.headings: list[Heading] = []
        self._timer: threading.Timer | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def start(self) -> "HeadingWatcher":
        self._unsubscribe = self.tree.subscribe(lambda _kind: self.refresh())
        if self.initial_delay <= 0:
            self.refresh()
        else:
            self._timer = threading.Timer(self.initial_delay, self.refresh)
            self._timer.daemon = True
            self._timer.start()
        return self

    def refresh(self) -> list[Heading]:
        with self.tree.lock:
            headings = extract_headings(self.tree.soup)
        self.headings = headings
        log.debug("Outline refreshed: %s heading(s)", len(headings))
        if self.on_change:
            self.on_change(headings)
        return headings

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
