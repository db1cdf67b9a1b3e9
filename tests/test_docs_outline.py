from __future__ import annotations

import threading

from app.docs.outline import DocumentTree, HeadingWatcher, extract_headings, slugify
from app.docs.toc import HeadingBox, active_heading_id, render_toc


def test_slugify():
    assert slugify("Getting Started") == "getting-started"
    assert slugify("What's new?  (v2)") == "whats-new-v2"
    assert slugify("a -- b") == "a-b"
    assert slugify("—") == ""
    # only whitespace is trimmed; a leading symbol leaves its hyphen
    assert slugify("→ Next steps") == "-next-steps"
    assert slugify("Done ✓") == "done-"
    assert slugify("") == ""


def test_duplicate_headings_get_counters():
    tree = DocumentTree("<h1>A</h1><p>x</p><h2>B</h2><h1>A</h1><h3>A</h3>")
    headings = extract_headings(tree.soup)
    assert [h.id for h in headings] == ["a", "b", "a-1", "a-2"]
    assert [h.level for h in headings] == [1, 2, 1, 3]
    # ids are written back onto the elements
    assert [el["id"] for el in tree.soup.find_all(["h1", "h2", "h3"])] == ["a", "b", "a-1", "a-2"]


def test_explicit_ids_and_empty_slugs():
    tree = DocumentTree('<h2 id="intro">Welcome</h2><h2>—</h2><h2>Intro</h2><h4>Deep</h4>')
    headings = extract_headings(tree.soup)
    assert [(h.id, h.text) for h in headings] == [("intro", "Welcome"), ("intro-1", "Intro")]
    assert not tree.soup.find_all("h2")[1].has_attr("id")


def test_reextraction_is_idempotent():
    tree = DocumentTree("<h1>A</h1><h1>A</h1>")
    first = extract_headings(tree.soup)
    second = extract_headings(tree.soup)
    # second pass sees explicit ids a, a-1 and keeps them
    assert [h.id for h in first] == [h.id for h in second] == ["a", "a-1"]


def test_watcher_runs_on_every_mutation_and_detaches():
    tree = DocumentTree("<body><h1>Intro</h1></body>")
    seen: list[list[str]] = []
    watcher = HeadingWatcher(tree, lambda hs: seen.append([h.id for h in hs]), initial_delay=0).start()
    assert seen == [["intro"]]

    tree.append_html("<h2>Usage</h2>")
    tree.append_html("<h2>Usage</h2>")
    assert seen[-1] == ["intro", "usage", "usage-1"]
    assert len(seen) == 3

    tree.remove("h2")
    assert seen[-1] == ["intro"]

    tree.replace_body("<h3>Other</h3>")
    assert watcher.headings[0].id == "other"

    watcher.stop()
    tree.append_html("<h1>Ignored</h1>")
    assert len(seen) == 5


def test_watcher_initial_delay_and_cancel():
    tree = DocumentTree("<h1>Late</h1>")
    done = threading.Event()
    watcher = HeadingWatcher(tree, lambda hs: done.set(), initial_delay=0.01).start()
    assert done.wait(2.0)
    assert watcher.headings[0].id == "late"

    fired = threading.Event()
    cancelled = HeadingWatcher(tree, lambda hs: fired.set(), initial_delay=0.5).start()
    cancelled.stop()
    assert not fired.wait(0.7)


def test_render_toc():
    tree = DocumentTree("<h1>Top</h1><h2>Mid</h2><h3>Low &amp; deep</h3>")
    headings = extract_headings(tree.soup)
    html = render_toc(headings, active_id="mid")
    assert 'href="#top" class="toc-l1 font-semibold text-muted"' in html
    assert 'href="#mid" class="toc-l2 pl-4 active"' in html
    assert 'class="toc-l3 pl-8 text-muted"' in html
    assert "Low &amp; deep" in html

    low = render_toc(headings, active_id="low-deep")
    assert 'href="#low-deep" class="toc-l3 pl-8 active"' in low
    assert render_toc([]) == ""


def test_active_heading_band():
    # viewport 1000px -> band is [100, 340]
    boxes = [
        HeadingBox("above", top=20, bottom=60),
        HeadingBox("in-band", top=150, bottom=180),
        HeadingBox("also-in-band", top=300, bottom=330),
        HeadingBox("below", top=500, bottom=540),
    ]
    assert active_heading_id(boxes, 1000) == "also-in-band"
    assert active_heading_id(boxes[:1] + boxes[3:], 1000) is None
