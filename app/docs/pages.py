from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path

from app.core.config import settings
from app.docs.outline import DocumentTree, Heading, HeadingWatcher

log = logging.getLogger("app.docs")

_PAGE_NAME = re.compile(r"^[A-Za-z0-9_-]+$")

# Upper bound on how long a request waits past the initial delay for the first outline.
_FIRST_OUTLINE_GRACE_S = 5.0


@dataclass
class _Entry:
    tree: DocumentTree
    watcher: HeadingWatcher
    mtime_ns: int
    headings: list[Heading] = field(default_factory=list)
    ready: threading.Event = field(default_factory=threading.Event)


@dataclass(frozen=True)
class DocPage:
    name: str
    html: str
    headings: list[Heading]


class DocsLibrary:
    """HTML documentation pages from a directory, each with a live heading outline.

    A page is parsed once and watched; when its file changes on disk the tree
    body is replaced and the watcher re-derives the outline. The first outline
    runs after `initial_delay` seconds (TOC_INITIAL_DELAY_S when not given) and
    the first request for a page waits for it.
    """

    def __init__(self, root: str | Path, *, initial_delay: float | None = None) -> None:
        self.root = Path(root)
        self.initial_delay = initial_delay
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def pages(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.glob("*.html") if _PAGE_NAME.match(p.stem))

    def _path(self, name: str) -> Path | None:
        if not _PAGE_NAME.match(name or ""):
            return None
        path = self.root / f"{name}.html"
        return path if path.is_file() else None

    def _delay(self) -> float:
        if self.initial_delay is not None:
            return self.initial_delay
        return settings.TOC_INITIAL_DELAY_S

    def page(self, name: str) -> DocPage | None:
        path = self._path(name)
        if path is None:
            return None

        mtime_ns = path.stat().st_mtime_ns
        with self._lock:
            entry = self._entries.get(name)
            if entry is None:
                entry = self._open(path)
                self._entries[name] = entry
            elif entry.mtime_ns != mtime_ns:
                log.info("Doc page %s changed on disk; reloading", name)
                entry.mtime_ns = mtime_ns
                entry.tree.replace_body(path.read_text(encoding="utf-8"))

        if not entry.ready.wait(max(entry.watcher.initial_delay, 0) + _FIRST_OUTLINE_GRACE_S):
            log.warning("Doc page %s: outline not ready; serving without headings", name)
        return DocPage(name=name, html=entry.tree.html(), headings=list(entry.headings))

    def _open(self, path: Path) -> _Entry:
        tree = DocumentTree(path.read_text(encoding="utf-8"))
        watcher = HeadingWatcher(tree, initial_delay=self._delay())
        entry = _Entry(tree=tree, watcher=watcher, mtime_ns=path.stat().st_mtime_ns)

        def _on_change(headings: list[Heading]) -> None:
            entry.headings = headings
            entry.ready.set()

        watcher.on_change = _on_change
        watcher.start()
        return entry

    def watcher(self, name: str) -> HeadingWatcher | None:
        entry = self._entries.get(name)
        return entry.watcher if entry else None

    def close(self) -> None:
        with self._lock:
            for entry in self._entries.values():
                entry.watcher.stop()
            self._entries.clear()
