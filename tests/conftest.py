"""Shared test fixtures for hyperpaper."""

import pytest

from hyperpaper.config import MatchConfig
from hyperpaper.models import BoundingBox, LayoutLine, Rect

TSV_HEADER = (
    "level\tpage_num\tpar_num\tblock_num\tline_num\tword_num\t"
    "left\ttop\twidth\theight\tconf\ttext"
)

# ── Helpers ────────────────────────────────────────────────────────────


def tsv_row(
    page: int = 1,
    left: float = 0,
    top: float = 0,
    width: float = 0,
    height: float = 0,
    conf: str = "90",
    text: str = "",
    level: int = 5,
) -> str:
    """One ``pdftotext -tsv`` row with the columns the loader reads."""
    return "\t".join(
        str(v)
        for v in (level, page, 0, 0, 0, 0, left, top, width, height, conf, text)
    )


def page_row(width: float = 1000, height: float = 2000, page: int = 1) -> str:
    """The page-size declaration row."""
    return tsv_row(page, 0, 0, width, height, "-1", "###PAGE###", level=1)


def build_tsv(*rows: str, width: float = 1000, height: float = 2000) -> bytes:
    """Header + page-size row + *rows*, encoded as UTF-8."""
    lines = [TSV_HEADER, page_row(width, height), *rows]
    return ("\n".join(lines) + "\n").encode("utf-8")


def build_layout(*lines: str, width: int = 1000, height: int = 2000) -> bytes:
    """A single PAGE element wrapping raw LINE markup."""
    body = "".join(lines)
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<DOC><PAGE WIDTH="{width}" HEIGHT="{height}">{body}</PAGE></DOC>'
    ).encode("utf-8")


def line_tag(
    x: int, y: int, width: int, height: int, type_: str = "本文", text: str = ""
) -> str:
    string_attr = f' STRING="{text}"' if text else ""
    return (
        f'<LINE TYPE="{type_}" X="{x}" Y="{y}" '
        f'WIDTH="{width}" HEIGHT="{height}"{string_attr}/>'
    )


def make_box(
    x: float,
    y: float,
    width: float,
    height: float,
    text: str = "",
    page: int = 1,
) -> BoundingBox:
    """Create a BoundingBox from normalized coordinates."""
    return BoundingBox(page=page, rect=Rect(x, y, width, height), text=text)


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> MatchConfig:
    """Return a default MatchConfig."""
    return MatchConfig()


@pytest.fixture
def tsv_doc():
    """Factory building TSV exports: ``tsv_doc(*rows, width=, height=)``."""
    return build_tsv


@pytest.fixture
def raw_tsv():
    """Factory building a TSV export with only a header before *rows*."""

    def _build(*rows: str) -> bytes:
        return "\n".join([TSV_HEADER, *rows]).encode("utf-8")

    return _build


@pytest.fixture
def tsv_row_of():
    """Factory building single TSV word rows."""
    return tsv_row


@pytest.fixture
def layout_doc():
    """Factory building single-page layout documents."""
    return build_layout


@pytest.fixture
def line_of():
    """Factory building LINE start tags."""
    return line_tag


@pytest.fixture
def box_of():
    """Factory building BoundingBoxes from normalized coordinates."""
    return make_box


@pytest.fixture
def sample_tsv() -> bytes:
    """A 1000x2000 page with two body words, a caption word and a page-2 word.

    Word      pixel rect (x, y, w, h)   page
    "hello"   (100, 200, 40, 20)        1
    "world"   (150, 200, 50, 20)        1
    "Fig."    (100, 1800, 30, 20)       1
    "other"   (100, 200, 40, 20)        2
    """
    return build_tsv(
        tsv_row(1, 0, 0, 1000, 2000, "-1", "###FLOW###", level=2),
        tsv_row(1, 100, 200, 40, 20, "96.5", "hello"),
        tsv_row(1, 0, 0, 0, 0, "-1", "###LINE###", level=4),
        tsv_row(1, 150, 200, 50, 20, "91", "world"),
        tsv_row(1, 100, 1800, 30, 20, "88", "Fig."),
        tsv_row(2, 100, 200, 40, 20, "90", "other"),
    )


@pytest.fixture
def sample_layout() -> bytes:
    """Layout for :func:`sample_tsv`: one body line at y=200, one caption at y=1800."""
    return build_layout(
        line_tag(90, 195, 200, 30, text="hello world"),
        line_tag(90, 1795, 100, 30, type_="キャプション", text="Fig."),
    )


@pytest.fixture
def layout_lines() -> list[LayoutLine]:
    return [
        LayoutLine(rect=Rect(0.1, 0.1, 0.3, 0.02), page=1),
        LayoutLine(rect=Rect(0.1, 0.5, 0.3, 0.02), page=2),
    ]
