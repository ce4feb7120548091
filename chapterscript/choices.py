# choices.py — per-session choice set and per-group selection state
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional, Tuple
from types import MappingProxyType

from .errors import ChoiceLookupMiss

logger = logging.getLogger(__name__)

ChoiceUid = str
ChoiceGroup = Optional[str]


@dataclass
class ChapterChoice:
    """One selectable option: text per language plus an optional group."""
    per_language_text: Dict[str, str] = field(default_factory=dict)
    group: ChoiceGroup = None

    def text_for(self, lang: str) -> Optional[str]:
        # exact match only, no fallback chain
        return self.per_language_text.get(lang)

    def display_text(self) -> str:
        """Label used on the button: the first text that was set, if any."""
        for text in self.per_language_text.values():
            return text
        return ""

    def copy(self) -> "ChapterChoice":
        return ChapterChoice(dict(self.per_language_text), self.group)


class ChoiceRegistry:
    """Holds the choice set being built and the selection for each group.

    The whole state is the pair (choice set, selection state); every
    operation below is either a pure read or a single overwrite.
    """

    def __init__(self):
        self._choices: Dict[ChoiceUid, ChapterChoice] = {}
        self._selected: Dict[ChoiceGroup, ChoiceUid] = {}

    # ----- choice set -----
    def add(self, uid: ChoiceUid, group: ChoiceGroup = None) -> ChapterChoice:
        choice = ChapterChoice({}, group)
        self._choices[uid] = choice  # last write wins
        return choice

    def set_text(self, uid: ChoiceUid, text: str, lang: str) -> None:
        choice = self._choices.get(uid)
        if choice is None:
            raise ChoiceLookupMiss(uid)
        choice.per_language_text[lang] = text

    def text(self, uid: ChoiceUid, lang: str) -> Optional[str]:
        choice = self._choices.get(uid)
        return choice.text_for(lang) if choice is not None else None

    def get(self, uid: ChoiceUid) -> Optional[ChapterChoice]:
        return self._choices.get(uid)

    def reset_choices(self):
        """Start a fresh building phase. Selections survive."""
        self._choices = {}

    def snapshot(self) -> Dict[ChoiceUid, ChapterChoice]:
        return {uid: c.copy() for uid, c in self._choices.items()}

    @property
    def choices(self) -> Mapping[ChoiceUid, ChapterChoice]:
        return MappingProxyType(self._choices)

    def items(self) -> Iterator[Tuple[ChoiceUid, ChapterChoice]]:
        return iter(list(self._choices.items()))

    def __len__(self) -> int:
        return len(self._choices)

    def __iter__(self) -> Iterator[ChoiceUid]:
        return iter(list(self._choices))

    def __contains__(self, uid: object) -> bool:
        return uid in self._choices

    # ----- selection -----
    def set_selected(self, uid: ChoiceUid, group: ChoiceGroup):
        prev = self._selected.get(group)
        self._selected[group] = uid
        if prev != uid:
            logger.debug("[CHOICE] group %r: %r -> %r", group, prev, uid)

    def get_selected(self, group: ChoiceGroup) -> Optional[ChoiceUid]:
        return self._selected.get(group)

    def is_selected(self, uid: ChoiceUid, group: ChoiceGroup) -> bool:
        return self._selected.get(group) == uid

    @property
    def selections(self) -> Mapping[ChoiceGroup, ChoiceUid]:
        return MappingProxyType(self._selected)
