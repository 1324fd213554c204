"""Tests for element context and the elements summary digest."""
from datetime import datetime, timedelta, timezone

from spark.storage.dao import Element
from spark.thinking.context import build_element_context, build_elements_summary


def _make_el(i: int, content: str = "", **kwargs) -> Element:
    """Element i minutes after a fixed base time (higher i = more recent)."""
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    defaults = {
        "id": f"el-{i}",
        "type": "thought",
        "created_at": (base + timedelta(minutes=i)).isoformat(),
        "content": content or f"element {i}",
    }
    defaults.update(kwargs)
    return Element(**defaults)


# ── build_element_context ────────────────────────────────────────


class TestBuildElementContext:
    def test_content_only(self):
        assert build_element_context("hello", "thought", {}, None, "File") == "hello"

    def test_full_article_order(self):
        result = build_element_context(
            None,
            "article",
            {"title": "T", "description": "D"},
            "https://x.com",
            "File",
        )
        assert result == "URL: https://x.com\nTitle: T\nDescription: D"

    def test_file_line_for_attachments(self):
        result = build_element_context(None, "image", {}, "https://x/i.png", "i.png")
        assert result == "URL: https://x/i.png\nFile: i.png"

    def test_no_file_line_for_thoughts(self):
        assert "File:" not in build_element_context("x", "thought", {}, None, "File")


# ── build_elements_summary ───────────────────────────────────────


class TestSummaryBasics:
    def test_empty_input(self):
        assert build_elements_summary([]) == ""

    def test_prefixes(self):
        els = [
            _make_el(1, "mine"),
            _make_el(2, "reply", type="spark", source="ai"),
        ]
        lines = build_elements_summary(els).split("\n")
        assert lines == ["[spark] reply", "[thought] mine"]

    def test_most_recent_first(self):
        els = [_make_el(1, "old"), _make_el(3, "newest"), _make_el(2, "middle")]
        lines = build_elements_summary(els).split("\n")
        assert [l.split(" ", 1)[1] for l in lines] == ["newest", "middle", "old"]

    def test_missing_timestamps_keep_encounter_order(self):
        els = [
            _make_el(1, "first", created_at=None),
            _make_el(2, "second", created_at=None),
        ]
        assert build_elements_summary(els) == "[thought] first\n[thought] second"


class TestSummaryContent:
    def test_title_preferred_over_content(self):
        el = _make_el(1, "body", metadata={"title": "Headline"})
        assert build_elements_summary([el]) == "[thought] Headline"

    def test_description_appended(self):
        el = _make_el(1, type="article", content=None, metadata={"title": "T", "description": "D"})
        assert build_elements_summary([el]) == "[article] T — D"

    def test_description_not_repeated(self):
        el = _make_el(1, "Some long text with D inside", metadata={"description": "D"})
        assert build_elements_summary([el]) == "[thought] Some long text with D inside"

    def test_description_alone(self):
        el = Element(id="a", type="article", created_at="2025-01-01", metadata={"description": "Only desc"})
        assert build_elements_summary([el]) == "[article] Only desc"

    def test_url_fallback(self):
        el = Element(id="a", type="article", created_at="2025-01-01", metadata={"url": "https://x.com"})
        assert build_elements_summary([el]) == "[article] https://x.com"

    def test_legacy_url_fallback(self):
        el = Element(id="a", type="image", created_at="2025-01-01", metadata={"public_url": "https://x/i.png"})
        assert build_elements_summary([el]) == "[image] https://x/i.png"

    def test_filename_fallback_without_url(self):
        el = Element(id="a", type="file", created_at="2025-01-01", metadata={"file_name": "notes.pdf"})
        assert build_elements_summary([el]) == "[file] notes.pdf"

    def test_no_placeholder_filename(self):
        el = Element(id="a", type="file", created_at="2025-01-01")
        assert build_elements_summary([el]) == "[file] "


class TestSummaryTruncation:
    def test_small_collection_uses_300_limit(self):
        els = [_make_el(i, "x" * 400) for i in range(10)]
        for line in build_elements_summary(els).split("\n"):
            body = line.split(" ", 1)[1]
            assert body == "x" * 300 + "..."

    def test_content_at_limit_untouched(self):
        el = _make_el(1, "y" * 300)
        assert build_elements_summary([el]) == "[thought] " + "y" * 300

    def test_older_elements_truncated_to_80(self):
        els = [_make_el(i, "z" * 200) for i in range(12)]
        lines = [l for l in build_elements_summary(els).split("\n") if l.startswith("[thought]")]
        assert len(lines) == 12
        assert all(l == "[thought] " + "z" * 200 for l in lines[:10])
        assert all(l == "[thought] " + "z" * 80 + "..." for l in lines[10:])

    def test_note_survives_truncation(self):
        els = [_make_el(i + 1, "n" * 200) for i in range(10)]
        oldest = _make_el(0, "o" * 200, metadata={"note": "keep this in mind"})
        summary = build_elements_summary([oldest, *els])
        last = summary.split("\n")[-1]
        assert last == "[thought] " + "o" * 80 + '... [user note: "keep this in mind"]'

    def test_note_truncated_to_100(self):
        el = _make_el(1, "short", metadata={"note": "q" * 150})
        assert build_elements_summary([el]) == '[thought] short [user note: "' + "q" * 100 + '..."]'


class TestSummaryMarker:
    def test_no_marker_at_ten(self):
        els = [_make_el(i) for i in range(10)]
        assert "earlier elements" not in build_elements_summary(els)

    def test_marker_after_tenth_line(self):
        els = [_make_el(i) for i in range(14)]
        summary = build_elements_summary(els)
        assert summary.count("earlier elements, summarized") == 1

        parts = summary.split("\n")
        # 10 content lines, blank line from the marker's leading newline, marker
        assert all(p.startswith("[thought]") for p in parts[:10])
        assert parts[10] == ""
        assert parts[11] == "[...4 earlier elements, summarized...]"
        assert parts[12] == "[thought] element 3"
        assert len(parts) == 16
