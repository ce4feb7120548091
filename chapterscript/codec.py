# codec.py — runs a chapter's enter/leave scripts through the interpreter
from __future__ import annotations
import logging
from typing import List, Optional

from .interpreter import ScriptCommandInterpreter
from .navigation import Chapter, ChapterNavigator

logger = logging.getLogger(__name__)

MAX_CHAPTER_HOPS = 16


class ChapterScriptCodec:
    """Chapter codec: entering or leaving a chapter evaluates its script."""

    def __init__(self, interpreter: ScriptCommandInterpreter):
        self.interpreter = interpreter

    def enter(self, chapter: Chapter) -> bool:
        return self._run(chapter, chapter.enter, "enter")

    def leave(self, chapter: Chapter) -> bool:
        return self._run(chapter, chapter.leave, "leave")

    def _run(self, chapter: Chapter, script: bytes, phase: str) -> bool:
        if not script:
            return True
        logger.debug("[CODEC] %s chapter %s", phase, chapter.uid)
        ok = self.interpreter.interpret(script, len(script))
        if not ok:
            logger.warning("[CODEC] %s script of chapter %s failed", phase, chapter.uid)
        return ok


def play_from(navigator: ChapterNavigator, codec: ChapterScriptCodec, uid: str,
              max_hops: int = MAX_CHAPTER_HOPS) -> List[str]:
    """Enter *uid* and follow the jumps its scripts request.

    Returns the uids of the chapters entered, in order. Stops after
    ``max_hops`` entries so two chapters jumping to each other terminate.
    """
    if not navigator.set_current(uid):
        return []
    visited: List[str] = []
    chapter: Optional[Chapter] = navigator.current_chapter()
    while chapter is not None and len(visited) < max_hops:
        visited.append(chapter.uid)
        jumps_before = len(navigator.jumps)
        codec.enter(chapter)
        if len(navigator.jumps) == jumps_before:
            break
        nxt = navigator.current_chapter()
        codec.leave(chapter)
        chapter = nxt
    else:
        if chapter is not None:
            logger.warning("[CODEC] stopped after %d chapter hops", max_hops)
    return visited
