"""Loader for the tab-separated word-box export written by ``pdftotext -tsv``.

Layout of the export
--------------------
One header row, then one row per word.  The columns read here are::

    1  page_num
    6  left        (page pixel width on the page-size row)
    7  top         (page pixel height on the page-size row)
    8  width
    9  height
    10 conf        (-1 on structural rows)
    11 text        (``###PAGE###`` on the page-size row)

The first data row declares the page size.  Every later row with
``conf == -1`` is structural (page / flow / block / line markers) and is
skipped; the remaining rows become :class:`~hyperpaper.models.BoundingBox`
records normalized by the declared page size.
"""

from __future__ import annotations

import csv
import io
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import IO, Iterator, List, Optional, Union

from ..config import MatchConfig
from ..errors import FormatError
from ..models import BoundingBox, PageDimensions

COL_PAGE = 1
COL_LEFT = 6
COL_TOP = 7
COL_WIDTH = 8
COL_HEIGHT = 9
COL_CONF = 10
COL_TEXT = 11

_MIN_COLUMNS = COL_TEXT + 1

_COLUMN_NAMES = {
    COL_PAGE: "page_num",
    COL_LEFT: "left",
    COL_TOP: "top",
    COL_WIDTH: "width",
    COL_HEIGHT: "height",
    COL_CONF: "conf",
    COL_TEXT: "text",
}

Source = Union[bytes, str, IO[bytes], IO[str]]


@dataclass
class OcrExport:
    """Parsed OCR export: declared page size plus the word boxes."""

    dimensions: PageDimensions
    boxes: List[BoundingBox] = field(default_factory=list)


@contextmanager
def _text_stream(source: Source) -> Iterator[IO[str]]:
    """Yield a text view of *source* without closing the caller's stream."""
    if isinstance(source, bytes):
        try:
            decoded = source.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise FormatError(f"OCR export is not valid UTF-8: {exc}") from exc
        yield io.StringIO(decoded, newline="")
        return
    if isinstance(source, str):
        yield io.StringIO(source, newline="")
        return
    if isinstance(source.read(0), str):
        yield source
        return
    wrapper = io.TextIOWrapper(source, encoding="utf-8-sig", newline="")
    try:
        yield wrapper
    finally:
        wrapper.detach()


def _parse_number(row: list[str], col: int, line: int, kind: type = float):
    raw = row[col]
    try:
        return kind(raw)
    except ValueError:
        name = _COLUMN_NAMES[col]
        raise FormatError(
            f"cannot parse {name} column as {kind.__name__}: {raw!r}",
            line=line,
            field=name,
        ) from None


def _check_width(row: list[str], line: int) -> None:
    if len(row) < _MIN_COLUMNS:
        raise FormatError(
            f"expected at least {_MIN_COLUMNS} columns, got {len(row)}", line=line
        )


def _read_page_size(reader, cfg: MatchConfig) -> PageDimensions:
    try:
        row = next(reader)
    except StopIteration:
        raise FormatError("missing page-size row") from None
    line = reader.line_num
    _check_width(row, line)

    if row[COL_TEXT] != cfg.page_sentinel:
        raise FormatError(
            f"expected {cfg.page_sentinel}, but got {row[COL_TEXT]}",
            line=line,
            field="text",
        )
    if row[COL_CONF] != cfg.structural_confidence:
        raise FormatError(
            f"expected conf is {cfg.structural_confidence}, but got {row[COL_CONF]}",
            line=line,
            field="conf",
        )

    dims = PageDimensions(
        width=_parse_number(row, COL_WIDTH, line),
        height=_parse_number(row, COL_HEIGHT, line),
    )
    if cfg.reject_degenerate_pages and dims.is_degenerate():
        raise FormatError(
            f"page size must be positive, got {dims.width}x{dims.height}", line=line
        )
    return dims


def load_ocr_export(source: Source, cfg: Optional[MatchConfig] = None) -> OcrExport:
    """Parse an OCR export into its page size and normalized word boxes.

    Parameters
    ----------
    source : bytes, str, or a binary / text stream
        The TSV document.  Binary input is decoded as UTF-8 (a BOM is
        tolerated).  Streams are read to the end but not closed.
    cfg : MatchConfig, optional
        Supplies the page sentinel, the structural confidence marker and
        the degenerate-page policy.

    Raises
    ------
    FormatError
        Missing header or page-size row, wrong sentinel / confidence on the
        page-size row, short rows, or unparseable numeric columns.
    """
    if cfg is None:
        cfg = MatchConfig()

    with _text_stream(source) as text:
        reader = csv.reader(text, delimiter="\t", quoting=csv.QUOTE_NONE)
        try:
            next(reader)
        except StopIteration:
            raise FormatError("missing header row") from None
        except (csv.Error, UnicodeDecodeError) as exc:
            raise FormatError(f"unreadable header row: {exc}") from exc

        try:
            dims = _read_page_size(reader, cfg)

            boxes: List[BoundingBox] = []
            for row in reader:
                line = reader.line_num
                if not row:
                    continue
                _check_width(row, line)
                if row[COL_CONF] == cfg.structural_confidence:
                    continue

                page = _parse_number(row, COL_PAGE, line, int)
                x = _parse_number(row, COL_LEFT, line)
                y = _parse_number(row, COL_TOP, line)
                width = _parse_number(row, COL_WIDTH, line)
                height = _parse_number(row, COL_HEIGHT, line)
                conf = _parse_number(row, COL_CONF, line)

                boxes.append(
                    BoundingBox(
                        page=page,
                        rect=dims.normalize(x, y, width, height),
                        text=row[COL_TEXT],
                        confidence=conf,
                    )
                )
        except (csv.Error, UnicodeDecodeError) as exc:
            raise FormatError(str(exc), line=reader.line_num) from exc

    return OcrExport(dimensions=dims, boxes=boxes)


def load_bounding_boxes(
    source: Source, cfg: Optional[MatchConfig] = None
) -> List[BoundingBox]:
    """Return the word boxes of an OCR export in input row order."""
    return load_ocr_export(source, cfg).boxes
