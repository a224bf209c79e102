from __future__ import annotations

from typing import Tuple, Union

from atmopics.core.dto.blob import AspectRatio, FitLayout

Canvas = Union[Tuple[int, int], FitLayout]


def _round_div(num: int, den: int) -> int:
    # half-up, integers only
    return (2 * num + den) // (2 * den)


def fit_layout(aspect: AspectRatio, canvas: Canvas) -> FitLayout:
    """
    Scale ``aspect`` to fit inside ``canvas`` while keeping its ratio.

    Ratios are compared by cross-multiplication. The result fills the full
    canvas width or the full canvas height; equal ratios fill both.

    Raises:
        ValueError: when any dimension is zero or negative.
    """
    if isinstance(canvas, FitLayout):
        cw, ch = canvas.width, canvas.height
    else:
        cw, ch = canvas
    for name, dim in (("width", aspect.width), ("height", aspect.height),
                      ("canvas width", cw), ("canvas height", ch)):
        if dim <= 0:
            raise ValueError(f"{name} must be positive, got {dim}")

    source = aspect.width * ch
    target = cw * aspect.height
    if source > target:
        # wider than the canvas
        return FitLayout(width=cw, height=max(1, _round_div(cw * aspect.height, aspect.width)))
    if source < target:
        return FitLayout(width=max(1, _round_div(ch * aspect.width, aspect.height)), height=ch)
    return FitLayout(width=cw, height=ch)
