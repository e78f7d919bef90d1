from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Tuple

RGBA = Tuple[int, int, int, int]

MARKUP_RED: RGBA = (255, 0, 0, 255)
SIGNATURE_BLACK: RGBA = (0, 0, 0, 255)


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


# Committed strokes never change; the session only appends or pops the last one.
@dataclass(frozen=True)
class Stroke:
    points: Tuple[Point, ...]
    rgba: RGBA = MARKUP_RED
    width: int = 5


@dataclass(frozen=True)
class StrokeStyle:
    rgba: RGBA = MARKUP_RED
    width: int = 5

    def make_stroke(self, points: Iterable[Point]) -> Stroke:
        return Stroke(points=tuple(points), rgba=self.rgba, width=self.width)


@dataclass(frozen=True)
class Placement:
    """Where the background image lands inside the canvas (fractional px)."""
    x: float
    y: float
    width: float
    height: float
