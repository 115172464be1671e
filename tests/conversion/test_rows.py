"""Unit tests for the row parser (one CSV row -> one element record)."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest

from sketch_excalidraw.conversion.rows import coerce_cell, parse_row

NOW = 1_700_000_000_000


def parse(header: str, row: str, **kwargs) -> dict:
    """Parse comma-joined header and row strings with a pinned clock."""
    return parse_row(header.split(","), row.split(","), now_ms=NOW, **kwargs)


class TestFieldCoercion:

    def test_numeric_fields_are_numbers(self):
        element = parse("x,y,width,height", "10,20,30.5,abc")
        assert element["x"] == 10
        assert element["y"] == 20
        assert element["width"] == 30.5
        assert element["height"] == 0

    def test_is_deleted_exact_literal(self):
        assert parse("isDeleted", "true")["isDeleted"] is True
        assert parse("isDeleted", "True")["isDeleted"] is False
        assert parse("isDeleted", "1")["isDeleted"] is False

    def test_font_family_remap(self):
        assert parse("fontFamily", "20")["fontFamily"] == "Arial"
        assert parse("fontFamily", "1")["fontFamily"] == "1"

    def test_structured_literal_parsed(self):
        element = parse_row(["startBinding"], ["{'elementId':'box1'}"], now_ms=NOW)
        assert element["startBinding"] == {"elementId": "box1"}

    @pytest.mark.parametrize(
        "column,expected",
        [("points", [[0, 0]]), ("boundElements", []), ("groupIds", []), ("startBinding", None), ("endBinding", None)],
    )
    def test_malformed_structured_literal_falls_back(self, column, expected):
        element = parse_row([column], ["[[not json"], now_ms=NOW)
        assert element[column] == expected

    @pytest.mark.parametrize("raw", ["[[0,NaN],[Infinity,5]]", "[[0,-Infinity]]"])
    def test_non_finite_points_fall_back(self, raw):
        events = []
        element = parse_row(["points"], [raw], now_ms=NOW, on_fallback=events.append)
        assert element["points"] == [[0, 0]]
        assert [e.field for e in events] == ["points"]

    def test_points_parsed_from_quoted_cell(self):
        element = parse_row(["points"], ["[[0,0],[100,50]]"], now_ms=NOW)
        assert element["points"] == [[0, 0], [100, 50]]

    def test_passthrough_value(self):
        assert parse("strokeColor", "#1e1e1e")["strokeColor"] == "#1e1e1e"

    def test_passthrough_with_quotes_reparsed(self):
        element = parse_row(["roundness"], ['{"type":3}'], now_ms=NOW)
        assert element["roundness"] == {"type": 3}

    def test_passthrough_with_unparsable_quotes_stripped(self):
        element = parse_row(["label"], ['the "big" box'], now_ms=NOW)
        assert element["label"] == "the big box"


class TestAbsentFields:

    def test_empty_cells_omitted(self):
        element = parse("type,x,text", "rectangle,5,")
        assert "text" not in element
        assert element["x"] == 5

    def test_whitespace_only_cells_omitted(self):
        element = parse_row(["type", "strokeColor"], ["ellipse", "   "], now_ms=NOW)
        assert "strokeColor" not in element

    def test_short_row_fills_rule_defaults(self):
        element = parse_row(["type", "x", "y", "points", "isDeleted", "startBinding"], ["rectangle"], now_ms=NOW)
        assert element["x"] == 0
        assert element["y"] == 0
        assert element["points"] == [[0, 0]]
        assert element["isDeleted"] is False
        assert element["startBinding"] is None

    def test_short_row_leaves_passthrough_and_font_family_absent(self):
        element = parse("type,x,strokeColor,fontFamily", "diamond,1")
        assert element["x"] == 1
        assert "strokeColor" not in element
        assert "fontFamily" not in element

    def test_short_row_defaults_reported(self):
        events = []
        parse_row(["type", "width", "groupIds"], ["ellipse"], now_ms=NOW, on_fallback=events.append)
        assert [(e.field, e.fallback, e.reason) for e in events] == [("width", 0, "missing cell"), ("groupIds", [], "missing cell")]

    def test_cells_are_trimmed(self):
        element = parse_row(["type", "x"], ["  arrow ", " 7 "], now_ms=NOW)
        assert element["type"] == "arrow"
        assert element["x"] == 7

    def test_extra_cells_ignored(self):
        element = parse("type", "line,99,extra")
        assert element["type"] == "line"
        assert "99" not in element.values()


class TestFixedFields:

    def test_fixed_fields_asserted(self):
        element = parse("type,link,locked", "rectangle,http://example.com,true")
        assert element["frameId"] is None
        assert element["updated"] == NOW
        assert element["link"] is None
        assert element["locked"] is False

    def test_frame_id_kept_when_set(self):
        assert parse("type,frameId", "rectangle,frame1")["frameId"] == "frame1"

    def test_updated_reads_clock_by_default(self):
        element = parse_row(["type"], ["rectangle"])
        assert isinstance(element["updated"], int)
        assert element["updated"] > NOW

    def test_text_element_fields(self):
        element = parse("type,text,lineHeight,baseline,containerId,autoResize", "text,Hello,3,9,box1,false")
        assert element["originalText"] == "Hello"
        assert element["lineHeight"] == 1.25
        assert element["baseline"] == 0
        assert element["containerId"] is None
        assert element["autoResize"] is True

    def test_text_element_without_text(self):
        element = parse("type", "text")
        assert element["originalText"] == ""

    def test_non_text_element_has_no_text_fields(self):
        element = parse("type,text", "rectangle,label")
        assert "originalText" not in element
        assert "lineHeight" not in element

    def test_group_ids_string_forced_to_list(self):
        element = parse_row(["groupIds", "boundElements"], ["'g1'", "'b1'"], now_ms=NOW)
        assert element["groupIds"] == []
        assert element["boundElements"] == []

    def test_group_ids_list_kept(self):
        element = parse_row(["groupIds"], ["['g1']"], now_ms=NOW)
        assert element["groupIds"] == ["g1"]


class TestFallbackEvents:

    def test_events_reported(self):
        events = []
        parse_row(["x", "points", "type"], ["abc", "[[", "rectangle"], now_ms=NOW, on_fallback=events.append)
        assert [e.field for e in events] == ["x", "points"]
        assert events[0].fallback == 0
        assert events[1].fallback == [[0, 0]]

    def test_no_events_for_clean_row(self):
        events = []
        parse("type,x,y", "rectangle,1,2", on_fallback=events.append)
        assert not events

    def test_coerce_cell_never_raises(self):
        for column in ("x", "points", "isDeleted", "fontFamily", "label", "groupIds"):
            coerce_cell(column, "\"'{[}]'\"")
