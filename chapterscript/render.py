# render.py — redraw list of overlay regions and its pygame painter
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union
import pygame

from .mouse import Bounds

RGB = Tuple[int, int, int]

_OUTLINE_DIRS = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))


@dataclass(frozen=True)
class SolidRegion:
    bounds: Bounds
    color: RGB
    alpha: int = 255


@dataclass(frozen=True)
class TextRegion:
    bounds: Bounds
    text: str
    color: RGB = (255, 255, 255)
    outline_color: Optional[RGB] = None
    outline_width: int = 0
    font_px: int = 0


Region = Union[SolidRegion, TextRegion]


class RedrawList:
    """Ordered regions to composite on top of the video frame."""

    def __init__(self):
        self._regions: List[Region] = []

    def push_background(self, bounds: Bounds, color: RGB, alpha: int = 255) -> SolidRegion:
        r = SolidRegion(bounds, tuple(color), max(0, min(255, int(alpha))))
        self._regions.append(r)
        return r

    def push_text(self, bounds: Bounds, text: str, color: RGB, *,
                  outline_color: Optional[RGB] = None, outline_width: int = 0,
                  font_px: int = 0) -> TextRegion:
        r = TextRegion(bounds, text or "", tuple(color),
                       tuple(outline_color) if outline_color else None,
                       max(0, int(outline_width)), int(font_px))
        self._regions.append(r)
        return r

    def clear(self):
        self._regions = []

    def __iter__(self) -> Iterator[Region]:
        return iter(list(self._regions))

    def __len__(self) -> int:
        return len(self._regions)


def to_screen_rect(bounds: Bounds, frame_height: int) -> pygame.Rect:
    """Bottom-left relative bounds -> top-left screen rect."""
    top = frame_height - bounds.y_end
    return pygame.Rect(int(round(bounds.x_start)), int(round(top)),
                       max(0, int(round(bounds.width))), max(0, int(round(bounds.height))))


def _font(px: int) -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, max(8, int(px)))


def _blit_text(surface: pygame.Surface, region: TextRegion, rect: pygame.Rect):
    if not region.text:
        return
    font = _font(region.font_px or rect.height * 0.6)
    label = font.render(region.text, True, region.color)
    pos = label.get_rect(center=rect.center)
    if region.outline_color and region.outline_width > 0:
        edge = font.render(region.text, True, region.outline_color)
        w = region.outline_width
        for dx, dy in _OUTLINE_DIRS:
            surface.blit(edge, pos.move(dx * w, dy * w))
    surface.blit(label, pos)


def paint(redraw: RedrawList, surface: pygame.Surface):
    """Composite every region of *redraw* onto *surface*."""
    h = surface.get_height()
    for region in redraw:
        rect = to_screen_rect(region.bounds, h)
        if rect.width <= 0 or rect.height <= 0:
            continue
        if isinstance(region, SolidRegion):
            if region.alpha <= 0:
                continue
            panel = pygame.Surface(rect.size, flags=pygame.SRCALPHA)
            panel.fill((*region.color, region.alpha))
            surface.blit(panel, rect.topleft)
        else:
            _blit_text(surface, region, rect)
