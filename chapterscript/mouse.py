# mouse.py — spatial registry that routes pointer press/hover to regions
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Protocol, Tuple


@dataclass(frozen=True)
class Bounds:
    """Rectangle stored relative to the frame's bottom-left corner.

    ``y_start`` is the lower edge and ``y_end`` the upper edge, both measured
    upwards from the bottom of the frame.
    """
    x_start: float
    y_start: float
    x_end: float
    y_end: float

    @property
    def width(self) -> float:
        return self.x_end - self.x_start

    @property
    def height(self) -> float:
        return self.y_end - self.y_start

    def contains(self, x: float, flipped_y: float) -> bool:
        return (self.x_start <= x <= self.x_end
                and self.y_start <= flipped_y <= self.y_end)


class MouseOperable(Protocol):
    @property
    def bounds(self) -> Bounds: ...

    def on_pressed(self) -> None: ...

    def on_over(self) -> None: ...

    def update(self) -> None: ...


class MouseDispatcher:
    """Hit-tests screen-space pointer events against registered regions.

    Input y is screen space (origin top-left); region bounds are
    bottom-left relative, so y is flipped against the frame height first.
    Regions may overlap: every match is notified.
    """

    def __init__(self, frame_width: int, frame_height: int):
        self.frame_width = int(frame_width)
        self.frame_height = int(frame_height)
        self._operables: List[MouseOperable] = []

    # ----- registry -----
    def add(self, op: MouseOperable):
        self._operables.append(op)

    def remove(self, op: MouseOperable):
        self._operables = [o for o in self._operables if o is not op]

    def clear(self):
        self._operables = []

    @property
    def operables(self) -> Tuple[MouseOperable, ...]:
        return tuple(self._operables)

    def resize(self, frame_width: int, frame_height: int):
        self.frame_width = int(frame_width)
        self.frame_height = int(frame_height)

    # ----- hit testing -----
    def contains(self, op: MouseOperable, x: float, y: float) -> bool:
        return op.bounds.contains(x, self.frame_height - y)

    def hits(self, x: float, y: float) -> List[MouseOperable]:
        return [op for op in self._operables if self.contains(op, x, y)]

    def press(self, x: float, y: float) -> bool:
        pressed = False
        for op in self.hits(x, y):
            op.on_pressed()
            pressed = True
        return pressed

    def hover(self, x: float, y: float):
        for op in self.hits(x, y):
            op.on_over()

    def update(self):
        for op in list(self._operables):
            op.update()
