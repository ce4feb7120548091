import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from typing import List, Optional

import pytest

from chapterscript.choices import ChoiceRegistry
from chapterscript.interpreter import ScriptCommandInterpreter
from chapterscript.navigation import Chapter, Segment


class RecordingNavigation:
    """Navigation facade double that records every call made into it."""

    def __init__(self, uids=("100", "200"), choices: Optional[ChoiceRegistry] = None):
        self.segment = Segment("seg-0", [Chapter(uid) for uid in uids])
        self.current: Optional[Chapter] = self.segment.chapters[0] if self.segment.chapters else None
        self.calls: List[tuple] = []
        self.published: List[dict] = []
        self.suppress_jump = False
        self.choices = choices
        self.stored_choices: dict = {}

    def find_chapter_by_uid(self, uid):
        self.calls.append(("find_chapter_by_uid", uid))
        for ch in self.segment.chapters:
            if ch.uid == uid:
                return self.segment, ch
        return None

    def current_chapter(self):
        return self.current

    def enter_and_leave(self, chapter, current, force):
        self.calls.append(("enter_and_leave", chapter.uid, current.uid if current else None, force))
        return self.suppress_jump

    def jump_to(self, segment, chapter):
        self.calls.append(("jump_to", segment.uid, chapter.uid))
        self.current = chapter

    def add_choices(self, choices):
        self.calls.append(("add_choices", tuple(choices)))
        self.published.append(dict(choices))

    def get_choice(self, group):
        self.calls.append(("get_choice", group))
        if group in self.stored_choices:
            return self.stored_choices[group]
        return self.choices.get_selected(group) if self.choices is not None else None

    def handle_mouse_clicked(self, x, y):
        self.calls.append(("handle_mouse_clicked", x, y))

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def nav(registry: ChoiceRegistry) -> RecordingNavigation:
    return RecordingNavigation(choices=registry)


@pytest.fixture
def registry() -> ChoiceRegistry:
    return ChoiceRegistry()


@pytest.fixture
def interp(nav: RecordingNavigation, registry: ChoiceRegistry) -> ScriptCommandInterpreter:
    return ScriptCommandInterpreter(nav, registry)


def run(interp: ScriptCommandInterpreter, source: str) -> bool:
    data = source.encode("utf-8")
    return interp.interpret(data, len(data))
