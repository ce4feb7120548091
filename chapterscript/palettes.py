from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class ChoicePalette:
    key: str
    name: str
    button: Tuple[int, int, int]
    button_alpha: int
    text: Tuple[int, int, int]
    outline: Tuple[int, int, int]


CHOICE_PALETTES: Dict[str, ChoicePalette] = {
    "plain": ChoicePalette(
        key="plain",
        name="Plain",
        button=(0x10, 0x10, 0x10),
        button_alpha=0,
        text=(255, 255, 255),
        outline=(0xF4, 0x8B, 0x00),
    ),
    "midnight": ChoicePalette(
        key="midnight",
        name="Midnight",
        button=(16, 18, 32),
        button_alpha=220,
        text=(240, 242, 255),
        outline=(54, 97, 255),
    ),
    "ember": ChoicePalette(
        key="ember",
        name="Ember",
        button=(45, 18, 12),
        button_alpha=215,
        text=(255, 237, 224),
        outline=(230, 98, 43),
    ),
}

DEFAULT_CHOICE_PALETTE = CHOICE_PALETTES["plain"]


def palette_for(key: str) -> ChoicePalette:
    return CHOICE_PALETTES.get((key or "").strip().lower(), DEFAULT_CHOICE_PALETTE)
