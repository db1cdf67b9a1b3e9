from __future__ import annotations

from dataclasses import dataclass
from html import escape

from app.docs.outline import Heading

# Viewport band used to pick the active entry: top 100px and bottom 66% excluded.
BAND_TOP_PX = 100
BAND_BOTTOM_FRACTION = 0.66

_LEVEL_CLASSES = {
    1: ["toc-l1", "font-semibold"],
    2: ["toc-l2", "pl-4"],
    3: ["toc-l3", "pl-8", "text-muted"],
}


@dataclass(frozen=True)
class HeadingBox:
    id: str
    top: float
    bottom: float


def active_heading_id(boxes: list[HeadingBox], viewport_height: float) -> str | None:
    """Last heading (document order) whose box intersects the viewport band."""
    band_top = BAND_TOP_PX
    band_bottom = viewport_height * (1 - BAND_BOTTOM_FRACTION)
    active = None
    for b in boxes:
        if b.bottom >= band_top and b.top <= band_bottom:
            active = b.id
    return active


def render_toc(headings: list[Heading], active_id: str | None = None) -> str:
    if not headings:
        return ""

    items = []
    for h in headings:
        classes = list(_LEVEL_CLASSES.get(h.level, []))
        if h.id == active_id:
            # active colour replaces the level's muted one
            classes = [c for c in classes if c != "text-muted"] + ["active"]
        elif "text-muted" not in classes:
            classes.append("text-muted")
        items.append(f'<li><a href="#{escape(h.id)}" class="{" ".join(classes)}">{escape(h.text)}</a></li>')

    return (
        '<nav class="toc">'
        '<h3 class="toc-title">On this page</h3>'
        f'<ul>{"".join(items)}</ul>'
        "</nav>"
    )
