"""Tests for hyperpaper.ingest.ocr_tsv — pdftotext TSV loading and normalization."""

from __future__ import annotations

import io

import pytest

from hyperpaper.config import MatchConfig
from hyperpaper.errors import FormatError
from hyperpaper.ingest.ocr_tsv import load_bounding_boxes, load_ocr_export
from hyperpaper.models import Rect

# ── Happy path ─────────────────────────────────────────────────────────


class TestLoadBoundingBoxes:
    def test_single_word_normalized(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 500, 1000, 100, 50, "90", "hello"))
        boxes = load_bounding_boxes(io.BytesIO(data))

        assert len(boxes) == 1
        box = boxes[0]
        assert box.page == 1
        assert box.text == "hello"
        assert box.rect == Rect(0.5, 0.5, 0.1, 0.025)
        assert box.confidence == 90.0

    def test_row_order_preserved(self, tsv_doc, tsv_row_of):
        data = tsv_doc(
            tsv_row_of(1, 10, 10, 5, 5, "90", "c"),
            tsv_row_of(1, 0, 0, 5, 5, "90", "a"),
            tsv_row_of(2, 0, 0, 5, 5, "90", "b"),
        )
        assert [b.text for b in load_bounding_boxes(data)] == ["c", "a", "b"]

    def test_structural_rows_skipped(self, tsv_doc, tsv_row_of):
        data = tsv_doc(
            tsv_row_of(1, 0, 0, 1000, 2000, "-1", "###FLOW###", level=2),
            tsv_row_of(1, 1, 1, 1, 1, "95", "one"),
            tsv_row_of(1, 0, 0, 0, 0, "-1", "###LINE###", level=4),
            tsv_row_of(1, 0, 0, 0, 0, "-1", "", level=3),
            tsv_row_of(1, 2, 2, 1, 1, "95", "two"),
            tsv_row_of(1, 0, 0, 0, 0, "-1", "stray"),
        )
        assert [b.text for b in load_bounding_boxes(data)] == ["one", "two"]

    def test_header_and_page_row_only(self, tsv_doc):
        assert load_bounding_boxes(tsv_doc()) == []

    def test_fractional_pixels(self, tsv_doc, tsv_row_of):
        data = tsv_doc(
            tsv_row_of(1, "61.200000", "79.200000", "30.600000", "7.920000", "100", "x"),
            width="612.000000",
            height="792.000000",
        )
        (box,) = load_bounding_boxes(data)
        assert box.rect.x == pytest.approx(0.1)
        assert box.rect.y == pytest.approx(0.1)
        assert box.rect.width == pytest.approx(0.05)
        assert box.rect.height == pytest.approx(0.01)

    def test_quote_characters_kept_verbatim(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", '"quoted'))
        assert load_bounding_boxes(data)[0].text == '"quoted'

    def test_utf8_text(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", "本文"))
        assert load_bounding_boxes(data)[0].text == "本文"

    def test_bom_tolerated(self, tsv_doc, tsv_row_of):
        data = b"\xef\xbb\xbf" + tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", "x"))
        assert len(load_bounding_boxes(data)) == 1

    def test_blank_lines_ignored(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", "x")) + b"\n\n"
        assert len(load_bounding_boxes(data)) == 1

    def test_crlf_line_endings(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", "x")).replace(b"\n", b"\r\n")
        assert [b.text for b in load_bounding_boxes(data)] == ["x"]


class TestInputKinds:
    def test_bytes(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", "x"))
        assert len(load_bounding_boxes(data)) == 1

    def test_str(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", "x")).decode("utf-8")
        assert len(load_bounding_boxes(data)) == 1

    def test_text_stream(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", "x")).decode("utf-8")
        assert len(load_bounding_boxes(io.StringIO(data, newline=""))) == 1

    def test_binary_stream_left_open(self, tsv_doc, tsv_row_of):
        stream = io.BytesIO(tsv_doc(tsv_row_of(1, 1, 1, 1, 1, "90", "x")))
        load_bounding_boxes(stream)
        assert not stream.closed


class TestLoadOcrExport:
    def test_dimensions_reported(self, tsv_doc):
        export = load_ocr_export(tsv_doc(width=612, height=792))
        assert export.dimensions.width == 612.0
        assert export.dimensions.height == 792.0
        assert export.boxes == []


# ── Format errors ──────────────────────────────────────────────────────


class TestFormatErrors:
    def test_empty_input(self):
        with pytest.raises(FormatError, match="header"):
            load_bounding_boxes(b"")

    def test_missing_page_row(self):
        with pytest.raises(FormatError, match="page-size row"):
            load_bounding_boxes(b"level\tpage_num\n")

    def test_wrong_sentinel(self, raw_tsv, tsv_row_of):
        data = raw_tsv(tsv_row_of(1, 0, 0, 1000, 2000, "-1", "hello"))
        with pytest.raises(FormatError, match="expected ###PAGE###, but got hello"):
            load_bounding_boxes(data)

    def test_wrong_page_row_confidence(self, raw_tsv, tsv_row_of):
        data = raw_tsv(tsv_row_of(1, 0, 0, 1000, 2000, "95", "###PAGE###"))
        with pytest.raises(FormatError, match="expected conf is -1, but got 95") as ei:
            load_bounding_boxes(data)
        assert ei.value.field == "conf"
        assert ei.value.line == 2

    def test_unparseable_page_width(self, raw_tsv, tsv_row_of):
        data = raw_tsv(tsv_row_of(1, 0, 0, "wide", 2000, "-1", "###PAGE###"))
        with pytest.raises(FormatError, match="width"):
            load_bounding_boxes(data)

    def test_zero_page_size_rejected(self, tsv_doc):
        with pytest.raises(FormatError, match="page size must be positive"):
            load_bounding_boxes(tsv_doc(width=0, height=2000))

    def test_zero_page_size_propagates_when_allowed(self, tsv_doc, tsv_row_of):
        cfg = MatchConfig(reject_degenerate_pages=False)
        data = tsv_doc(tsv_row_of(1, 10, 10, 5, 5, "90", "x"), width=0, height=0)
        (box,) = load_bounding_boxes(data, cfg)
        assert box.rect.x == float("inf")

    def test_unparseable_coordinate(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, "abc", 10, 5, 5, "90", "x"))
        with pytest.raises(FormatError, match="left") as ei:
            load_bounding_boxes(data)
        assert ei.value.field == "left"
        assert ei.value.line == 3

    def test_non_integer_page(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of("1.5", 10, 10, 5, 5, "90", "x"))
        with pytest.raises(FormatError, match="page_num"):
            load_bounding_boxes(data)

    def test_unparseable_confidence(self, tsv_doc, tsv_row_of):
        data = tsv_doc(tsv_row_of(1, 10, 10, 5, 5, "high", "x"))
        with pytest.raises(FormatError, match="conf"):
            load_bounding_boxes(data)

    def test_short_row(self, tsv_doc):
        data = tsv_doc("5\t1\t0\t0")
        with pytest.raises(FormatError, match="at least 12 columns"):
            load_bounding_boxes(data)

    def test_invalid_utf8(self, tsv_doc):
        with pytest.raises(FormatError, match="UTF-8"):
            load_bounding_boxes(tsv_doc() + b"\xff\xfe\n")

    def test_invalid_utf8_stream(self, tsv_doc):
        with pytest.raises(FormatError):
            load_bounding_boxes(io.BytesIO(tsv_doc() + b"\xff\xfe\n"))

    def test_custom_sentinel(self, raw_tsv, tsv_row_of):
        cfg = MatchConfig(page_sentinel="<page>")
        data = raw_tsv(
            tsv_row_of(1, 0, 0, 100, 100, "-1", "<page>"),
            tsv_row_of(1, 50, 50, 10, 10, "90", "x"),
        )
        (box,) = load_bounding_boxes(data, cfg)
        assert box.rect == Rect(0.5, 0.5, 0.1, 0.1)
