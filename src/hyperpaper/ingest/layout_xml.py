"""Body-text line extraction from an XML layout document.

The document is pulled through :class:`xml.etree.ElementTree.XMLPullParser`
in fixed-size chunks and processed as a forward-only event stream.  Only
start tags carry meaning:

``PAGE``
    ``WIDTH`` / ``HEIGHT`` (integers, pixels) replace the current page
    dimensions for every following ``LINE``.
``LINE``
    Lines whose ``TYPE`` equals the configured body-text value contribute
    one normalized rect built from ``X`` / ``Y`` / ``WIDTH`` / ``HEIGHT``.

Public API
----------
extract_layout_lines   – body-text lines with page ordinal and text
extract_visible_rects  – just the normalized rects, in document order
"""

from __future__ import annotations

from typing import IO, Dict, Iterator, List, Optional, Union
from xml.etree import ElementTree as ET

from ..config import MatchConfig
from ..errors import FormatError, InternalConsistencyError
from ..models import LayoutLine, PageDimensions, Rect

Source = Union[bytes, str, IO[bytes], IO[str]]

_EVENTS = ("start", "end", "comment", "pi", "start-ns", "end-ns")
_INERT_EVENTS = frozenset(_EVENTS) - {"start"}


def _local(name: str) -> str:
    """Strip a ``{namespace}`` prefix from a tag or attribute name."""
    return name.rsplit("}", 1)[-1]


def _attributes(elem: ET.Element) -> Dict[str, str]:
    return {_local(k): v for k, v in elem.attrib.items()}


def _int_attr(attrs: Dict[str, str], name: str, element: str) -> int:
    try:
        raw = attrs[name]
    except KeyError:
        raise FormatError(
            f"{element} element has no {name} attribute", field=name
        ) from None
    try:
        return int(raw)
    except ValueError:
        raise FormatError(
            f"{element} element has non-integer {name} attribute: {raw!r}", field=name
        ) from None


def _chunks(source: Source, size: int) -> Iterator[Union[bytes, str]]:
    if isinstance(source, (bytes, str)):
        for start in range(0, len(source), size):
            yield source[start : start + size]
        return
    while True:
        chunk = source.read(size)
        if not chunk:
            return
        yield chunk


def _page_dimensions(attrs: Dict[str, str], cfg: MatchConfig) -> PageDimensions:
    dims = PageDimensions(
        width=_int_attr(attrs, "WIDTH", "PAGE"),
        height=_int_attr(attrs, "HEIGHT", "PAGE"),
    )
    if cfg.reject_degenerate_pages and dims.is_degenerate():
        raise FormatError(
            f"PAGE size must be positive, got {dims.width}x{dims.height}"
        )
    return dims


def _line_rect(
    attrs: Dict[str, str],
    dims: Optional[PageDimensions],
    cfg: MatchConfig,
) -> Optional[Rect]:
    """Return the normalized rect of a body-text LINE, else None."""
    if "TYPE" not in attrs:
        raise FormatError("LINE element has no TYPE attribute", field="TYPE")
    if attrs["TYPE"] != cfg.body_text_type:
        return None

    x = _int_attr(attrs, "X", "LINE")
    y = _int_attr(attrs, "Y", "LINE")
    width = _int_attr(attrs, "WIDTH", "LINE")
    height = _int_attr(attrs, "HEIGHT", "LINE")

    if dims is None:
        if cfg.reject_degenerate_pages:
            raise FormatError("LINE element appears before any PAGE element")
        return None
    return dims.normalize(x, y, width, height)


def extract_layout_lines(
    source: Source, cfg: Optional[MatchConfig] = None
) -> List[LayoutLine]:
    """Extract every body-text line of a layout document in document order.

    Parameters
    ----------
    source : bytes, str, or a binary / text stream
        The XML document.  Streams are read to the end but not closed.
    cfg : MatchConfig, optional
        Supplies the body-text TYPE value, the degenerate-page policy and
        the read chunk size.

    Raises
    ------
    FormatError
        Malformed XML, or a PAGE / LINE element missing a required
        attribute or carrying a non-integer one.
    InternalConsistencyError
        The pull parser produced an event kind outside the requested set.
    """
    if cfg is None:
        cfg = MatchConfig()

    parser = ET.XMLPullParser(events=_EVENTS)
    lines: List[LayoutLine] = []
    dims: Optional[PageDimensions] = None
    page_ordinal = 0
    seen_data = False

    def _drain() -> None:
        nonlocal dims, page_ordinal
        for event, elem in parser.read_events():
            if event == "start":
                tag = _local(elem.tag)
                if tag == "PAGE":
                    dims = _page_dimensions(_attributes(elem), cfg)
                    page_ordinal += 1
                elif tag == "LINE":
                    attrs = _attributes(elem)
                    rect = _line_rect(attrs, dims, cfg)
                    if rect is not None:
                        lines.append(
                            LayoutLine(
                                rect=rect,
                                page=page_ordinal,
                                text=attrs.get("STRING", ""),
                            )
                        )
            elif event in _INERT_EVENTS:
                if event == "end":
                    elem.clear()
            else:
                raise InternalConsistencyError(f"unknown XML event: {event!r}")

    try:
        for chunk in _chunks(source, cfg.xml_chunk_size):
            seen_data = seen_data or bool(chunk.strip())
            parser.feed(chunk)
            _drain()
        if not seen_data:
            return lines
        parser.close()
        _drain()
    except ET.ParseError as exc:
        raise FormatError(f"malformed layout XML: {exc}") from exc

    return lines


def extract_visible_rects(
    source: Source, cfg: Optional[MatchConfig] = None
) -> List[Rect]:
    """Return the normalized rects of all body-text lines."""
    return [line.rect for line in extract_layout_lines(source, cfg)]
