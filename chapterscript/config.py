from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

# ---- Interpreter ----
# Wall-clock budget for one script evaluation. Not exposed
# through any runtime setting.
INTERPRETER_TIMEOUT_SEC: float = 3.0

# Language used only by CommitChoices for its own diagnostic output.
DIAGNOSTIC_LANGUAGE: str = "en"

# Filename given to compiled chapter scripts; the step hook only watches
# frames whose code carries this name.
SCRIPT_FILENAME: str = "<chapter-script>"

# Builtins visible to chapter scripts
SCRIPT_BUILTINS: Tuple[str, ...] = (
    "abs", "all", "any", "bool", "dict", "enumerate", "float", "int",
    "isinstance", "len", "list", "max", "min", "range", "reversed",
    "sorted", "str", "sum", "tuple", "zip",
    "Exception", "KeyError", "TypeError", "ValueError",
)


# ---- Choice bar geometry ----
@dataclass(frozen=True)
class ChoiceBarLayout:
    height_ratio: float = 0.1      # bar height as a fraction of the frame height
    outline_divisor: int = 30      # highlight outline = button width / divisor
    font_ratio: float = 0.45       # label size relative to the bar height

CHOICE_BAR = ChoiceBarLayout()


# ---- Preview window ----
@dataclass(frozen=True)
class PreviewDefaults:
    frame_size: Tuple[int, int] = (960, 540)
    refresh_ms: int = 16  # ~60 FPS
    backdrop_rgb: Tuple[int, int, int] = (28, 32, 40)

PREVIEW = PreviewDefaults()
