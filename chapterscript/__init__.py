from __future__ import annotations
from typing import Any

__all__ = [
    "ChoiceRegistry", "ChapterChoice", "MouseDispatcher", "Bounds",
    "OverlayController", "ScriptCommandInterpreter", "ChapterNavigator",
    "ChapterScriptCodec", "ChoiceOverlayWidget",
]

_LOCATIONS = {
    "ChoiceRegistry": ".choices",
    "ChapterChoice": ".choices",
    "MouseDispatcher": ".mouse",
    "Bounds": ".mouse",
    "OverlayController": ".overlay",
    "ScriptCommandInterpreter": ".interpreter",
    "ChapterNavigator": ".navigation",
    "ChapterScriptCodec": ".codec",
    "ChoiceOverlayWidget": ".widget",  # delayed: pulls in Qt
}


def __getattr__(name: str) -> Any:
    if name in _LOCATIONS:
        from importlib import import_module
        return getattr(import_module(_LOCATIONS[name], __name__), name)
    raise AttributeError(f"module 'chapterscript' has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(__all__)
