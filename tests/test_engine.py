import sys

import pytest

from chapterscript.engine import ScriptEngine
from chapterscript.errors import ArgumentTypeError, EngineFatalError


class Context:
    def __init__(self):
        self.seen = []
        self.stop = False


def make_engine(ctx=None) -> ScriptEngine:
    ctx = ctx or Context()
    return ScriptEngine(ctx, lambda: ctx.stop)


def test_host_functions_receive_explicit_context() -> None:
    ctx = Context()
    engine = make_engine(ctx)
    engine.register("Note", 2, lambda c, a, b: c.seen.append((a, b)))

    result = engine.evaluate('Note("x")\nNote("y", 2)\n')

    assert result.ok
    assert ctx.seen == [("x", None), ("y", 2)]


def test_extra_arguments_raise_argument_type_error() -> None:
    engine = make_engine()
    engine.register("One", 1, lambda c, a: a)
    src = (
        "try:\n"
        "    One(1, 2)\n"
        "except TypeError as exc:\n"
        "    message = str(exc)\n"
    )
    assert engine.evaluate(src).ok
    assert engine.globals["message"] == "One: takes at most 1 argument(s), got 2"


def test_host_errors_propagate_into_script() -> None:
    engine = make_engine()

    def reject(ctx, value):
        raise ArgumentTypeError("Check", "First argument must be a string")

    engine.register("Check", 1, reject)
    result = engine.evaluate("Check(3)\n")
    assert not result.ok
    assert "Check: First argument must be a string" in result.stack


def test_globals_persist_but_host_functions_are_restored() -> None:
    engine = make_engine()
    engine.register("Ping", 0, lambda c: "pong")

    assert engine.evaluate("counter = 1\nPing = None\n").ok
    assert engine.evaluate("counter += 1\nanswer = Ping()\n").ok
    assert engine.globals["counter"] == 2
    assert engine.globals["answer"] == "pong"


def test_only_allowed_builtins_are_visible() -> None:
    engine = make_engine()
    assert engine.evaluate("n = len(list(range(3)))\n").ok
    assert engine.globals["n"] == 3

    result = engine.evaluate('open("/etc/passwd")\n')
    assert not result.ok
    assert "NameError" in result.stack
    assert not engine.evaluate("__import__('os')\n").ok


def test_step_hook_stops_script_and_previous_tracer_is_restored() -> None:
    ctx = Context()
    engine = make_engine(ctx)
    calls = {"n": 0}

    def tick(c):
        calls["n"] += 1
        c.stop = calls["n"] >= 5

    engine.register("Tick", 0, tick)
    before = sys.gettrace()

    result = engine.evaluate("while True:\n    Tick()\n")

    assert not result.ok
    assert "ScriptTimeout" in result.stack
    assert calls["n"] == 5
    assert sys.gettrace() is before


def test_memory_error_is_fatal() -> None:
    engine = make_engine()

    def exhaust(ctx):
        raise MemoryError("out of heap")

    engine.register("Exhaust", 0, exhaust)
    with pytest.raises(EngineFatalError, match="out of heap"):
        engine.evaluate("Exhaust()\n")



def test_private_attribute_walk_fails_to_compile() -> None:
    engine = make_engine()
    src = (
        "for c in ().__class__.__base__.__subclasses__():\n"
        "    g = c.__init__.__globals__\n"
        "    if 'sys' in g:\n"
        "        pid = g['sys'].modules['os'].getpid()\n"
    )
    result = engine.evaluate(src)
    assert not result.ok
    assert "SyntaxError" in result.stack
    assert "private attribute" in result.stack
    assert "pid" not in engine.globals


def test_reserved_names_fail_to_compile() -> None:
    engine = make_engine()
    for src in (
        "def __checkpoint__():\n    pass\n",
        "__builtins__ = {}\n",
        "x = __name__\n",
        "def f(__a):\n    return __a\n",
        "s = 'x'._private\n",
    ):
        result = engine.evaluate(src)
        assert not result.ok, src
        assert "SyntaxError" in result.stack


def test_compiled_checks_stop_loops_without_the_tracer(monkeypatch) -> None:
    ctx = Context()
    engine = make_engine(ctx)
    monkeypatch.setattr(engine, "_trace_calls", lambda frame, event, arg: None)
    ctx.stop = True

    for src in (
        "total = sum([n for n in range(10 ** 9)])\n",
        "while True:\n    pass\n",
        "for n in range(10 ** 9):\n    pass\n",
        "def f():\n    return 1\nf()\n",
    ):
        result = engine.evaluate(src)
        assert not result.ok, src
        assert "ScriptTimeout" in result.stack

    ctx.stop = False
    assert engine.evaluate("total = sum([n for n in range(10)])\n").ok
    assert engine.globals["total"] == 45
