# errors.py — failure taxonomy shared by the interpreter, engine and registry
from __future__ import annotations


class ChapterScriptError(Exception):
    """Base class for chapterscript failures."""


class ArgumentTypeError(ChapterScriptError, TypeError):
    """A script passed a wrongly typed argument to a host command.

    Raised into the running script before the command touches any state.
    """

    def __init__(self, command: str, message: str):
        super().__init__(f"{command}: {message}")
        self.command = command


class ChoiceLookupMiss(ChapterScriptError, KeyError):
    """A choice uid was referenced before AddChoice declared it."""

    def __init__(self, uid: str):
        super().__init__(uid)
        self.uid = uid

    def __str__(self) -> str:
        return f"The choice with uid '{self.uid}' does not exist"


class EngineFatalError(ChapterScriptError):
    """The scripting engine hit a condition it cannot recover from."""


class ScriptTimeout(BaseException):
    """Raised inside a script once its evaluation budget is spent."""
    # not an Exception subclass: script-level handlers must not catch it
