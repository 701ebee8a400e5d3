"""Visibility matching: which OCR boxes fall inside body-text layout lines.

A box on the target page is *visible* when its rect overlaps at least one
layout rect (inclusive edges, see :func:`hyperpaper.models.overlaps`).  Each
box is reported at most once, in input order, together with the index of
the first layout rect it overlaps.

Callers that need a looser match pass ``margin``: every layout rect is grown
by that many normalized units before the overlap test.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .models import BoundingBox, LayoutLine, Rect, overlap_matrix


@dataclass(frozen=True)
class VisibilityMatch:
    """A visible box and the first layout rect it overlaps."""

    box: BoundingBox
    box_index: int
    rect_index: int

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "box_index": self.box_index,
            "rect_index": self.rect_index,
            "box": self.box.to_dict(),
        }


def _match(
    boxes: Sequence[BoundingBox],
    target_page: int,
    rects: Sequence[Rect],
    rect_ids: Sequence[int],
    margin: float,
) -> List[VisibilityMatch]:
    candidates = [(i, b) for i, b in enumerate(boxes) if b.page == target_page]
    if not candidates or not rects:
        return []

    grown = [r.expanded(margin) for r in rects]
    hits = overlap_matrix([b.rect for _, b in candidates], grown)

    matches: List[VisibilityMatch] = []
    for (box_index, box), row in zip(candidates, hits):
        if row.any():
            # argmax on a bool row is the first True column.
            first = int(row.argmax())
            matches.append(
                VisibilityMatch(
                    box=box, box_index=box_index, rect_index=rect_ids[first]
                )
            )
    return matches


def match_visible_boxes(
    boxes: Sequence[BoundingBox],
    target_page: int,
    layout_rects: Sequence[Rect],
    margin: float = 0.0,
) -> List[VisibilityMatch]:
    """Return a :class:`VisibilityMatch` for every visible box on *target_page*."""
    ids = range(len(layout_rects))
    return _match(boxes, target_page, layout_rects, ids, margin)


def match_layout_lines(
    boxes: Sequence[BoundingBox],
    target_page: int,
    lines: Sequence[LayoutLine],
    margin: float = 0.0,
    strict_page: bool = False,
) -> List[VisibilityMatch]:
    """Like :func:`match_visible_boxes` but over :class:`LayoutLine` records.

    With *strict_page* only lines read under the *target_page*-th PAGE
    marker are candidates.  ``rect_index`` always indexes *lines*.
    """
    ids = [
        i
        for i, line in enumerate(lines)
        if not strict_page or line.page == target_page
    ]
    return _match(boxes, target_page, [lines[i].rect for i in ids], ids, margin)


def find_visible_text(
    boxes: Sequence[BoundingBox],
    target_page: int,
    layout_rects: Sequence[Rect],
    margin: float = 0.0,
) -> List[str]:
    """Return the text of every visible box on *target_page*, in box order."""
    matches = match_visible_boxes(boxes, target_page, layout_rects, margin)
    return [m.box.text for m in matches]
