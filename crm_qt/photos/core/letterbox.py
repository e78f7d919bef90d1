from __future__ import annotations
from crm_qt.photos.core.data_models import Placement


def fit_placement(img_w: float, img_h: float, canvas_w: float, canvas_h: float) -> Placement:
    """
    Aspect-fit an image into the canvas and centre it on the axis with leftover space.

    Wider than the canvas  -> full width, bars above/below.
    Otherwise              -> full height, bars left/right.

    Raises:
        ValueError: any size is not positive
    """
    if img_w <= 0 or img_h <= 0:
        raise ValueError(f"invalid image size {img_w}x{img_h}")
    if canvas_w <= 0 or canvas_h <= 0:
        raise ValueError(f"invalid canvas size {canvas_w}x{canvas_h}")

    img_ratio = img_w / img_h
    canvas_ratio = canvas_w / canvas_h

    if img_ratio > canvas_ratio:
        draw_w = float(canvas_w)
        draw_h = canvas_w / img_ratio
        return Placement(0.0, (canvas_h - draw_h) / 2, draw_w, draw_h)

    draw_h = float(canvas_h)
    draw_w = canvas_h * img_ratio
    return Placement((canvas_w - draw_w) / 2, 0.0, draw_w, draw_h)
