# interpreter.py — time-bounded evaluation of chapter scripts and their host commands
from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from .choices import ChoiceGroup, ChoiceRegistry, ChoiceUid
from .config import DIAGNOSTIC_LANGUAGE, INTERPRETER_TIMEOUT_SEC
from .engine import ScriptEngine
from .errors import ArgumentTypeError, ChoiceLookupMiss, EngineFatalError
from .navigation import NavigationFacade

logger = logging.getLogger(__name__)
script_log = logging.getLogger("chapterscript.script")

# Command names are the contract with existing chapter scripts
CMD_GOTO_AND_PLAY = "GotoAndPlay"
CMD_LOG_MSG = "LogMsg"
CMD_ADD_CHOICE = "AddChoice"
CMD_COMMIT_CHOICES = "CommitChoices"
CMD_SET_CHOICE_TEXT = "SetChoiceText"
CMD_SET_CHOICE_DEFAULT = "SetChoiceDefault"
CMD_GET_CHOICE = "GetChoice"

_ORDINALS = ("First", "Second", "Third")


@dataclass(frozen=True)
class Command:
    name: str
    arity: int
    handler: Callable[..., Any]


def _require_str(command: str, value: Any, pos: int) -> str:
    if not isinstance(value, str):
        raise ArgumentTypeError(command, f"{_ORDINALS[pos]} argument must be a string")
    return value


def _optional_str(command: str, value: Any, pos: int) -> Optional[str]:
    if value is None:
        return None
    return _require_str(command, value, pos)


# ----- host command adapters: validate first, then call into the interpreter -----
def _goto_and_play(interp: "ScriptCommandInterpreter", uid: Any) -> bool:
    uid = _require_str(CMD_GOTO_AND_PLAY, uid, 0)
    return interp.execute_goto_and_play(uid)


def _log_msg(interp: "ScriptCommandInterpreter", text: Any) -> None:
    text = _require_str(CMD_LOG_MSG, text, 0)
    interp.execute_log_msg(text)


def _add_choice(interp: "ScriptCommandInterpreter", uid: Any, group: Any) -> bool:
    uid = _require_str(CMD_ADD_CHOICE, uid, 0)
    group = _optional_str(CMD_ADD_CHOICE, group, 1)
    return interp.execute_add_choice(uid, group)


def _set_choice_text(interp: "ScriptCommandInterpreter", uid: Any, text: Any, lang: Any) -> bool:
    uid = _require_str(CMD_SET_CHOICE_TEXT, uid, 0)
    text = _require_str(CMD_SET_CHOICE_TEXT, text, 1)
    lang = _require_str(CMD_SET_CHOICE_TEXT, lang, 2)
    return interp.execute_set_choice_text(uid, text, lang)


def _set_choice_default(interp: "ScriptCommandInterpreter", uid: Any, group: Any) -> None:
    uid = _require_str(CMD_SET_CHOICE_DEFAULT, uid, 0)
    group = _require_str(CMD_SET_CHOICE_DEFAULT, group, 1)
    interp.execute_set_choice_default(uid, group)


def _commit_choices(interp: "ScriptCommandInterpreter") -> None:
    interp.execute_commit_choices()


def _get_choice(interp: "ScriptCommandInterpreter", group: Any) -> Optional[str]:
    group = _optional_str(CMD_GET_CHOICE, group, 0)
    return interp.execute_get_choice(group)


COMMANDS = (
    Command(CMD_GOTO_AND_PLAY, 1, _goto_and_play),
    Command(CMD_LOG_MSG, 1, _log_msg),
    Command(CMD_ADD_CHOICE, 2, _add_choice),
    Command(CMD_COMMIT_CHOICES, 0, _commit_choices),
    Command(CMD_SET_CHOICE_DEFAULT, 2, _set_choice_default),
    Command(CMD_SET_CHOICE_TEXT, 3, _set_choice_text),
    Command(CMD_GET_CHOICE, 1, _get_choice),
)


class ScriptCommandInterpreter:
    """Runs chapter scripts against a navigation facade and a choice registry.

    One engine instance lives as long as the interpreter. Each
    :meth:`interpret` call gets its own one-shot timer; when it fires it only
    sets the ``timed_out`` event, which the engine polls between script lines.
    The interpreter is not reentrant.
    """

    timeout_sec = INTERPRETER_TIMEOUT_SEC

    def __init__(self, vm: NavigationFacade, choices: Optional[ChoiceRegistry] = None):
        self.vm = vm
        self.choices = choices if choices is not None else ChoiceRegistry()
        self.timed_out = threading.Event()
        self._timer: Optional[threading.Timer] = None
        self._busy = threading.Lock()
        self._commands: Dict[str, Command] = {c.name: c for c in COMMANDS}
        self.engine = ScriptEngine(self, self.timed_out.is_set)
        for cmd in self._commands.values():
            self.engine.register(cmd.name, cmd.arity, cmd.handler)

    @property
    def commands(self) -> Mapping[str, Command]:
        return MappingProxyType(self._commands)

    # ----- evaluation -----
    def interpret(self, data: bytes, length: Optional[int] = None) -> bool:
        if length is not None:
            data = data[:max(0, int(length))]
        source = bytes(data).decode("utf-8", errors="replace")

        if not self._busy.acquire(blocking=False):
            logger.error("[SCRIPT] interpreter is already evaluating a script")
            return False
        try:
            return self._interpret(source)
        finally:
            self._busy.release()

    def _interpret(self, source: str) -> bool:
        logger.debug("[SCRIPT] command input : %s", source)
        self.timed_out.clear()
        timer = threading.Timer(self.timeout_sec, self._on_timeout)
        timer.daemon = True
        try:
            timer.start()
        except RuntimeError as exc:
            logger.error("[SCRIPT] timer initialization failed: %s", exc)
            return False
        self._timer = timer

        try:
            result = self.engine.evaluate(source)
        except EngineFatalError as exc:
            logger.error("[SCRIPT] fatal error during script execution:\n %s", exc)
            return False
        finally:
            timer.cancel()
            timer.join()
            self._timer = None

        if self.timed_out.is_set():
            logger.error("[SCRIPT] execution timed out!\n%s", result.stack)
            return False
        if not result.ok:
            logger.error("[SCRIPT] evaluation failed!\n%s", result.stack)
            return False
        logger.debug("[SCRIPT] evaluation complete")
        return True

    def _on_timeout(self):
        logger.error("[SCRIPT] script taking too long (%g s) to execute, stopping", self.timeout_sec)
        self.timed_out.set()

    def handle_mouse_pressed(self, x: float, y: float):
        self.vm.handle_mouse_clicked(x, y)

    # ----- command executors -----
    def execute_goto_and_play(self, uid: str) -> bool:
        found = self.vm.find_chapter_by_uid(uid)
        if found is None:
            logger.debug("[NAV] chapter %s not found", uid)
            return False
        segment, chapter = found
        if not self.vm.enter_and_leave(chapter, self.vm.current_chapter(), False):
            self.vm.jump_to(segment, chapter)
        return True

    def execute_log_msg(self, text: str) -> bool:
        script_log.info("%s", text)
        return True

    def execute_add_choice(self, uid: ChoiceUid, group: ChoiceGroup) -> bool:
        self.choices.add(uid, group)
        return True

    def execute_set_choice_text(self, uid: ChoiceUid, text: str, lang: str) -> bool:
        try:
            self.choices.set_text(uid, text, lang)
        except ChoiceLookupMiss as exc:
            logger.debug("[CHOICE] %s", exc)
            return False
        return True

    def execute_set_choice_default(self, uid: ChoiceUid, group: ChoiceGroup):
        self.choices.set_selected(uid, group)

    def execute_commit_choices(self):
        if not len(self.choices):
            logger.debug("[CHOICE] no choices to process")
            return
        published = self.choices.snapshot()
        self.vm.add_choices(published)
        self.choices.reset_choices()

        for uid, choice in published.items():
            group = choice.group if choice.group is not None else "Null"
            text = choice.text_for(DIAGNOSTIC_LANGUAGE)
            if text is None:
                logger.debug("[CHOICE] unspecified choice text for uid: %s, group: %s", uid, group)
                continue
            logger.debug("[CHOICE] displaying choice with uid: %s, string: %s, group: %s",
                         uid, text, group)

    def execute_get_choice(self, group: ChoiceGroup) -> Optional[ChoiceUid]:
        return self.vm.get_choice(group)
