# navigation.py — chapter graph facade the interpreter navigates through
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Protocol, Tuple

from .choices import ChapterChoice, ChoiceGroup, ChoiceRegistry, ChoiceUid

if TYPE_CHECKING:
    from .overlay import OverlayController

logger = logging.getLogger(__name__)


@dataclass
class Chapter:
    uid: str
    name: str = ""
    enter: bytes = b""    # script run when playback enters the chapter
    leave: bytes = b""    # script run when playback leaves it


@dataclass
class Segment:
    uid: str
    chapters: List[Chapter] = field(default_factory=list)


ChapterHandle = Tuple[Segment, Chapter]


class NavigationFacade(Protocol):
    """What the interpreter needs from the playback side."""

    def find_chapter_by_uid(self, uid: str) -> Optional[ChapterHandle]: ...

    def current_chapter(self) -> Optional[Chapter]: ...

    def enter_and_leave(self, chapter: Chapter, current: Optional[Chapter], force: bool) -> bool: ...

    def jump_to(self, segment: Segment, chapter: Chapter) -> None: ...

    def add_choices(self, choices: Mapping[ChoiceUid, ChapterChoice]) -> None: ...

    def get_choice(self, group: ChoiceGroup) -> Optional[ChoiceUid]: ...

    def handle_mouse_clicked(self, x: float, y: float) -> None: ...


class ChapterNavigator:
    """In-memory chapter graph with session-scoped choice storage.

    Jumps are not executed against any media; they move ``current`` and are
    recorded in ``jumps``. Committed choices replace the previous set
    wholesale and, when an overlay is attached, rebuild its buttons.
    """

    def __init__(self, segments: List[Segment], choices: Optional[ChoiceRegistry] = None):
        self.segments = list(segments)
        self.choices = choices if choices is not None else ChoiceRegistry()
        self.committed: Dict[ChoiceUid, ChapterChoice] = {}
        self.jumps: List[ChapterHandle] = []
        self.overlay: Optional["OverlayController"] = None
        self._current: Optional[ChapterHandle] = None

    # ----- lookup -----
    def find_chapter_by_uid(self, uid: str) -> Optional[ChapterHandle]:
        key = str(uid).strip()
        for seg in self.segments:
            for ch in seg.chapters:
                if ch.uid == key:
                    return seg, ch
        return None

    def current_chapter(self) -> Optional[Chapter]:
        return self._current[1] if self._current else None

    def set_current(self, uid: str) -> bool:
        found = self.find_chapter_by_uid(uid)
        if found is None:
            logger.warning("[NAV] cannot start at unknown chapter %s", uid)
            return False
        self._current = found
        return True

    # ----- navigation -----
    def enter_and_leave(self, chapter: Chapter, current: Optional[Chapter], force: bool) -> bool:
        # True suppresses the jump: the target is already playing
        return current is not None and current is chapter and not force

    def jump_to(self, segment: Segment, chapter: Chapter):
        logger.debug("[NAV] jump to chapter %s (segment %s)", chapter.uid, segment.uid)
        self._current = (segment, chapter)
        self.jumps.append((segment, chapter))

    # ----- choices -----
    def attach_overlay(self, overlay: "OverlayController"):
        self.overlay = overlay

    def add_choices(self, choices: Mapping[ChoiceUid, ChapterChoice]):
        self.committed = {uid: c.copy() for uid, c in choices.items()}
        if self.overlay is not None:
            self.overlay.build(self.committed)

    def get_choice(self, group: ChoiceGroup) -> Optional[ChoiceUid]:
        return self.choices.get_selected(group)

    def handle_mouse_clicked(self, x: float, y: float):
        if self.overlay is not None:
            self.overlay.try_mouse_click(x, y)


def _script_bytes(value) -> bytes:
    if not value:
        return b""
    if isinstance(value, list):
        value = "\n".join(str(v) for v in value)
    return str(value).encode("utf-8")


def chapters_from_dict(doc: dict) -> List[Segment]:
    segments: List[Segment] = []
    for i, seg in enumerate(doc.get("segments") or []):
        chapters = [
            Chapter(
                uid=str(ch.get("uid", "")).strip(),
                name=str(ch.get("name", "")),
                enter=_script_bytes(ch.get("enter")),
                leave=_script_bytes(ch.get("leave")),
            )
            for ch in seg.get("chapters") or []
            if str(ch.get("uid", "")).strip()
        ]
        segments.append(Segment(str(seg.get("uid", i)), chapters))
    return segments


def load_chapters(path: Path | str) -> List[Segment]:
    """Load a chapter graph from JSON.

    Format: {"segments": [{"uid": .., "chapters": [{"uid": .., "name": ..,
    "enter": "script", "leave": "script"}]}]}; scripts may be a string or a
    list of lines.
    """
    with open(path, "r", encoding="utf-8") as fh:
        doc = json.load(fh)
    return chapters_from_dict(doc if isinstance(doc, dict) else {})
