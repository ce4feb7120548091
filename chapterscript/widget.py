# widget.py — Qt preview of the choice overlay, painted through pygame
from __future__ import annotations
from typing import Optional, Tuple
import pygame
from PySide6 import QtCore, QtGui, QtWidgets

from .config import PREVIEW
from .navigation import ChapterNavigator
from .overlay import OverlayController
from .render import paint


class ChoiceOverlayWidget(QtWidgets.QWidget):
    """Shows the committed choice bar over a plain backdrop.

    Clicks go through the navigator (as the player would route them);
    hover goes straight to the overlay. A timer drives the dirty-gated
    refresh and repaints only when the overlay recomputed its regions.
    """

    selectionChanged = QtCore.Signal()

    def __init__(self, navigator: ChapterNavigator, overlay: OverlayController, parent=None):
        super().__init__(parent)
        self.setMinimumSize(640, 360)
        self.setMouseTracking(True)
        self.navigator = navigator
        self.overlay = overlay
        self.frame_size: Tuple[int, int] = (overlay.frame_width, overlay.frame_height)

        if not pygame.get_init():
            pygame.init()
        self._surface: Optional[pygame.Surface] = None

        self._timer = QtCore.QTimer(self)
        self._timer.timeout.connect(self._tick)
        self._timer.start(PREVIEW.refresh_ms)

    # ----- coordinates -----
    def _to_frame_pt(self, pos: QtCore.QPointF) -> Tuple[float, float]:
        fw, fh = self.frame_size
        sx = fw / max(1, self.width())
        sy = fh / max(1, self.height())
        return pos.x() * sx, pos.y() * sy

    # ----- input -----
    def mousePressEvent(self, e: QtGui.QMouseEvent):
        if e.button() == QtCore.Qt.LeftButton:
            x, y = self._to_frame_pt(e.position())
            self.navigator.handle_mouse_clicked(x, y)
            e.accept()
            return
        super().mousePressEvent(e)

    def mouseMoveEvent(self, e: QtGui.QMouseEvent):
        x, y = self._to_frame_pt(e.position())
        self.overlay.try_mouse_over(x, y)
        super().mouseMoveEvent(e)

    # ----- tick -----
    def _tick(self):
        if self.overlay.update():
            self._surface = None
            self.selectionChanged.emit()
            self.update()

    # ----- paint -----
    def _render(self) -> pygame.Surface:
        if self._surface is None:
            surf = pygame.Surface(self.frame_size, flags=pygame.SRCALPHA)
            surf.fill(PREVIEW.backdrop_rgb)
            paint(self.overlay.redraw, surf)
            self._surface = surf
        return self._surface

    def paintEvent(self, _):
        surf = self._render()
        raw = pygame.image.tostring(surf, "RGBA", False)
        img = QtGui.QImage(raw, surf.get_width(), surf.get_height(), QtGui.QImage.Format.Format_RGBA8888)
        p = QtGui.QPainter(self)
        p.drawImage(self.rect(), img)
        p.end()
