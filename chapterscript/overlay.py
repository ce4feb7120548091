# overlay.py — choice bar: one button per committed choice, tiled along the bottom
from __future__ import annotations
import logging
from typing import List, Mapping, Optional, Tuple

from .choices import ChapterChoice, ChoiceGroup, ChoiceRegistry, ChoiceUid
from .config import CHOICE_BAR, ChoiceBarLayout
from .mouse import Bounds, MouseDispatcher
from .palettes import DEFAULT_CHOICE_PALETTE, ChoicePalette
from .render import RedrawList

logger = logging.getLogger(__name__)


class ChoiceButton:
    """Interactive region bound to one choice. Geometry is fixed at creation."""

    def __init__(self, controller: "OverlayController", uid: ChoiceUid,
                 choice: ChapterChoice, index: int):
        self.controller = controller
        self.uid = uid
        self.choice = choice
        self.index = index
        self.text = choice.display_text()
        self._bounds = self._layout(controller.button_width, controller.button_height, index)

    @staticmethod
    def _layout(button_width: float, button_height: float, i: int) -> Bounds:
        x0 = button_width * i
        return Bounds(x0, 0, x0 + button_width, button_height)

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def selected(self) -> bool:
        return self.controller.is_choice_selected(self.uid, self.choice.group)

    def on_pressed(self):
        self.controller.mark_group_choice_selected(self.uid, self.choice.group)

    def on_over(self):
        """Hover leaves a choice button unchanged; only presses select."""

    def update(self):
        c = self.controller
        pal = c.palette
        c.redraw.push_background(self._bounds, pal.button, pal.button_alpha)
        if self.selected:
            width = int(c.button_width / c.layout.outline_divisor)
            c.redraw.push_text(self._bounds, self.text, pal.text,
                               outline_color=pal.outline, outline_width=width,
                               font_px=int(c.button_height * c.layout.font_ratio))
        else:
            c.redraw.push_text(self._bounds, self.text, pal.text,
                               font_px=int(c.button_height * c.layout.font_ratio))

    def __repr__(self) -> str:
        return f"ChoiceButton({self.uid!r}, index={self.index}, bounds={self._bounds})"


class OverlayController:
    """Owns the batch of choice buttons for one menu presentation.

    Selection lives in the ChoiceRegistry; a button's look is derived from it
    on every recompute. Recomputation only happens after a press matched a
    button, so idle refresh ticks are free.
    """

    def __init__(self, registry: ChoiceRegistry, frame_width: int, frame_height: int, *,
                 redraw: Optional[RedrawList] = None,
                 palette: ChoicePalette = DEFAULT_CHOICE_PALETTE,
                 layout: ChoiceBarLayout = CHOICE_BAR):
        self.registry = registry
        self.redraw = redraw if redraw is not None else RedrawList()
        self.palette = palette
        self.layout = layout
        self.dispatcher = MouseDispatcher(frame_width, frame_height)
        self.frame_width = int(frame_width)
        self.frame_height = int(frame_height)
        self.button_width: float = float(self.frame_width)
        self.button_height: float = self.frame_height * layout.height_ratio
        self._buttons: List[ChoiceButton] = []
        self._dirty = False

    # ----- batch lifecycle -----
    def set_number_of_buttons(self, n_buttons: int):
        self.button_width = self.frame_width / max(1, int(n_buttons))

    def create_button(self, uid: ChoiceUid, choice: ChapterChoice) -> ChoiceButton:
        btn = ChoiceButton(self, uid, choice, len(self._buttons))
        self._buttons.append(btn)
        self.dispatcher.add(btn)
        return btn

    def clear_buttons(self):
        for btn in self._buttons:
            self.dispatcher.remove(btn)
        self._buttons = []
        self.redraw.clear()

    def build(self, choice_set: Optional[Mapping[ChoiceUid, ChapterChoice]] = None) -> Tuple[ChoiceButton, ...]:
        """Replace the current batch with one button per entry, in order."""
        entries = list((choice_set if choice_set is not None else self.registry.choices).items())
        self.clear_buttons()
        self.set_number_of_buttons(len(entries))
        for uid, choice in entries:
            self.create_button(uid, choice)
        logger.debug("[OVERLAY] built %d choice buttons", len(self._buttons))
        self._repaint()
        return self.buttons

    def resize(self, frame_width: int, frame_height: int):
        self.frame_width = int(frame_width)
        self.frame_height = int(frame_height)
        self.button_height = self.frame_height * self.layout.height_ratio
        self.dispatcher.resize(frame_width, frame_height)
        if self._buttons:
            self.build({b.uid: b.choice for b in self._buttons})

    @property
    def buttons(self) -> Tuple[ChoiceButton, ...]:
        return tuple(self._buttons)

    @property
    def dirty(self) -> bool:
        return self._dirty

    # ----- input -----
    def try_mouse_click(self, x: float, y: float) -> bool:
        if self.dispatcher.press(x, y):
            self._dirty = True
            return True
        return False

    def try_mouse_over(self, x: float, y: float):
        self.dispatcher.hover(x, y)

    # ----- visuals -----
    def update(self) -> bool:
        """Recompute the redraw list if a press changed anything."""
        if not self._dirty:
            return False
        self._dirty = False
        self._repaint()
        return True

    def _repaint(self):
        self.redraw.clear()
        self.dispatcher.update()

    # ----- selection -----
    def mark_group_choice_selected(self, uid: ChoiceUid, group: ChoiceGroup):
        self.registry.set_selected(uid, group)

    def is_choice_selected(self, uid: ChoiceUid, group: ChoiceGroup) -> bool:
        return self.registry.get_selected(group) == uid
