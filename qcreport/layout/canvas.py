from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, Union


Align = Literal['left', 'center', 'right']

BLACK = '#000000'


@dataclass(frozen=True)
class RectStyle:
    stroke_color: str = BLACK
    line_width: float = 0.5
    radius: float = 0.0


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    width: float
    height: float
    stroke_color: str
    line_width: float
    radius: float = 0.0


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    line_width: float


@dataclass(frozen=True)
class TextOp:
    content: str
    x: float
    y: float
    align: Align
    font: str
    size: float
    color: str


@dataclass(frozen=True)
class FillOp:
    x: float
    y: float
    width: float
    height: float
    color: str


DrawOp = Union[RectOp, LineOp, TextOp, FillOp]


@dataclass(frozen=True)
class LayoutBlock:
    kind: str
    top: float
    height: float
    key: tuple = ()


class Canvas:
    """Page-scoped drawing surface that records primitives.

    Coordinates are page-local points with the origin at the top-left
    corner; ``y`` of a text op is its baseline. Nothing is rasterized here,
    so a recorded text op can still be rewritten until the canvas is sealed.
    """

    def __init__(self, width: float, height: float, *, font: str = 'Helvetica', size: float = 10.0):
        self.width = float(width)
        self.height = float(height)
        self._ops: list[DrawOp] = []
        self._cursor_y = 0.0
        self._sealed = False

        self.font = font
        self.font_size = float(size)
        self.text_color = BLACK
        self.stroke = RectStyle()

    @property
    def ops(self) -> tuple[DrawOp, ...]:
        return tuple(self._ops)

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def cursor_y(self) -> float:
        return self._cursor_y

    @cursor_y.setter
    def cursor_y(self, value: float) -> None:
        self._ensure_open()
        self._cursor_y = float(value)

    def set_font(self, font: str, size: float) -> None:
        self.font = font
        self.font_size = float(size)

    def set_text_color(self, color: str) -> None:
        self.text_color = color

    def set_stroke(self, color: str = BLACK, line_width: float = 0.5) -> None:
        self.stroke = RectStyle(stroke_color=color, line_width=line_width, radius=self.stroke.radius)

    def rect(self, x: float, y: float, w: float, h: float, style: RectStyle | None = None) -> int:
        style = style or self.stroke
        return self._record(
            RectOp(
                x=x,
                y=y,
                width=w,
                height=h,
                stroke_color=style.stroke_color,
                line_width=style.line_width,
                radius=style.radius,
            )
        )

    def line(self, x1: float, y1: float, x2: float, y2: float) -> int:
        return self._record(
            LineOp(
                x1=x1,
                y1=y1,
                x2=x2,
                y2=y2,
                color=self.stroke.stroke_color,
                line_width=self.stroke.line_width,
            )
        )

    def text(self, content: str, x: float, y: float, align: Align = 'left') -> int:
        return self._record(
            TextOp(
                content=str(content),
                x=x,
                y=y,
                align=align,
                font=self.font,
                size=self.font_size,
                color=self.text_color,
            )
        )

    def filled_background(self, x: float, y: float, w: float, h: float, color: str) -> int:
        return self._record(FillOp(x=x, y=y, width=w, height=h, color=color))

    def replace_text(self, index: int, content: str) -> None:
        self._ensure_open()
        op = self._ops[index]
        if not isinstance(op, TextOp):
            raise TypeError(f'op {index} is a {type(op).__name__}, not a text op')
        self._ops[index] = replace(op, content=str(content))

    def text_ops(self) -> list[TextOp]:
        return [op for op in self._ops if isinstance(op, TextOp)]

    def seal(self) -> None:
        self._sealed = True

    def _record(self, op: DrawOp) -> int:
        self._ensure_open()
        self._ops.append(op)
        return len(self._ops) - 1

    def _ensure_open(self) -> None:
        if self._sealed:
            raise RuntimeError('canvas is finalized and can no longer be drawn on')


@dataclass
class Page:
    index: int
    canvas: Canvas
    page_number_slot: int | None = None
    blocks: list[LayoutBlock] = field(default_factory=list)
    content_closed: bool = False

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def finalized(self) -> bool:
        return self.canvas.sealed

    def blocks_of(self, kind: str) -> list[LayoutBlock]:
        return [block for block in self.blocks if block.kind == kind]
