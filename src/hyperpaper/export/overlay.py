"""Debug overlay for visibility matching.

Public API
----------
draw_visibility_overlay   – render OCR boxes against body-text layout lines
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..models import BoundingBox, LayoutLine, Rect
from ..visibility import VisibilityMatch

log = logging.getLogger("hyperpaper.overlay")

_LAYOUT_COLOR = (0, 120, 255, 140)
_HIDDEN_COLOR = (160, 160, 160, 160)
_VISIBLE_COLOR = (0, 200, 0, 220)


def draw_visibility_overlay(
    boxes: Sequence[BoundingBox],
    layout_lines: Sequence[LayoutLine],
    matches: Sequence[VisibilityMatch],
    page_width: float,
    page_height: float,
    out_path: Path | str,
    scale: float = 1.0,
    background: Optional[Image.Image] = None,
    show_labels: bool = True,
) -> None:
    """Render a PNG showing which OCR boxes landed in body-text lines.

    Colour key
    ----------
    * **Blue outline** – body-text layout lines.
    * **Grey outline** – OCR boxes that overlap no layout line.
    * **Green box + label** – visible OCR boxes.

    Parameters
    ----------
    boxes : sequence of BoundingBox
        OCR boxes to draw (normally those on the reported page).
    layout_lines : sequence of LayoutLine
        Body-text lines from the layout document.
    matches : sequence of VisibilityMatch
        Output of the matcher; decides which boxes are green.
    page_width, page_height : float
        Page size in pixels, as declared by the OCR export.
    out_path : Path | str
        Where to save the PNG.
    scale : float
        Overlay pixels per page pixel.
    background : Image, optional
        Page render drawn underneath.  If None, uses white.
    show_labels : bool
        If True, draw the recognized text above each visible box.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    canvas_w = max(1, int(page_width * scale))
    canvas_h = max(1, int(page_height * scale))

    if background is not None:
        base = background.copy().convert("RGBA")
        if base.size != (canvas_w, canvas_h):
            base = base.resize((canvas_w, canvas_h), Image.LANCZOS)
    else:
        base = Image.new("RGBA", (canvas_w, canvas_h), (255, 255, 255, 255))

    overlay = Image.new("RGBA", (canvas_w, canvas_h), (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    try:
        font = ImageFont.truetype("arial.ttf", max(10, int(10 * scale)))
    except OSError:
        font = ImageFont.load_default()

    def _px(r: Rect) -> Optional[Tuple[float, float, float, float]]:
        """Scale a rect to canvas pixels; None for non-finite rects."""
        x0, y0, x1, y1 = r.scaled(canvas_w, canvas_h)
        if not all(math.isfinite(v) for v in (x0, y0, x1, y1)):
            return None
        # Pillow rejects inverted rectangles.
        return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))

    for line in layout_lines:
        r = _px(line.rect)
        if r is not None:
            draw.rectangle(r, outline=_LAYOUT_COLOR, width=2)

    visible_ids = {id(m.box) for m in matches}
    for b in boxes:
        r = _px(b.rect)
        if r is not None and id(b) not in visible_ids:
            draw.rectangle(r, outline=_HIDDEN_COLOR, width=1)

    for m in matches:
        r = _px(m.box.rect)
        if r is None:
            continue
        draw.rectangle(r, outline=_VISIBLE_COLOR, width=2)
        if show_labels and m.box.text:
            draw.text(
                (r[0], r[1] - 12 * scale),
                m.box.text,
                fill=_VISIBLE_COLOR,
                font=font,
            )

    out = Image.alpha_composite(base, overlay)
    out.convert("RGB").save(str(out_path))
    log.info(
        "Visibility overlay saved: %s (%d visible / %d boxes, %d lines)",
        out_path.name,
        len(matches),
        len(boxes),
        len(layout_lines),
    )
