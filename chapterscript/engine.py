# engine.py — embedded script engine: restricted Python evaluated with a step hook
from __future__ import annotations
import ast
import builtins
import linecache
import sys
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Tuple

from .config import SCRIPT_BUILTINS, SCRIPT_FILENAME
from .errors import ArgumentTypeError, EngineFatalError, ScriptTimeout


# Exceptions the engine cannot recover from; everything else is a script fault.
_FATAL = (MemoryError, SystemError)

# Injected into compiled scripts. "__" names are reserved, so scripts cannot rebind them.
CHECKPOINT = "__checkpoint__"
GUARD = "__guarded__"


@dataclass
class EvalResult:
    ok: bool
    stack: str = ""


def _safe_builtins() -> Dict[str, Any]:
    return {name: getattr(builtins, name) for name in SCRIPT_BUILTINS}


def _rejected(node: ast.AST, message: str) -> SyntaxError:
    return SyntaxError(message, (SCRIPT_FILENAME, getattr(node, "lineno", 1),
                                 getattr(node, "col_offset", 0) + 1, None))


def _bound_names(node: ast.AST) -> Tuple[str, ...]:
    if isinstance(node, ast.Name):
        return (node.id,)
    if isinstance(node, ast.arg):
        return (node.arg,)
    if isinstance(node, (ast.Global, ast.Nonlocal)):
        return tuple(node.names)
    if isinstance(node, ast.alias):
        return tuple(n for n in (node.name, node.asname) if n)
    return tuple(n for n in (getattr(node, "name", None), getattr(node, "rest", None))
                 if isinstance(n, str))


def _checkpoint_stmt(anchor: ast.AST) -> ast.stmt:
    call = ast.Call(ast.Name(CHECKPOINT, ast.Load()), [], [])
    return ast.copy_location(ast.Expr(call), anchor)


class _Checkpoints(ast.NodeTransformer):
    """Puts a budget check at the top of every loop and function body.

    Comprehensions get their iterable wrapped instead. The checks are plain
    calls, so they keep firing after a trace function has been dropped.
    """

    def _prefix(self, node):
        self.generic_visit(node)
        node.body.insert(0, _checkpoint_stmt(node))
        return node

    visit_While = visit_For = visit_AsyncFor = _prefix
    visit_FunctionDef = visit_AsyncFunctionDef = _prefix

    def visit_comprehension(self, node):
        self.generic_visit(node)
        if not node.is_async:
            wrapped = ast.Call(ast.Name(GUARD, ast.Load()), [node.iter], [])
            node.iter = ast.copy_location(wrapped, node.iter)
        return node


class ScriptEngine:
    """Evaluates chapter scripts on the calling thread.

    Host functions are installed with :meth:`register` and are invoked as
    ``handler(context, *args)``; the context is the handle given at
    construction, so handlers never look their owner up from a global.

    ``step_hook`` is polled at every line executed inside script code, and
    again at the top of every loop iteration and function call through checks
    compiled into the script. Once it returns True the engine raises
    :class:`ScriptTimeout` into the script. The compiled checks keep firing
    inside ``finally`` blocks and handlers after the trace function is gone.
    A single long native call cannot be interrupted this way.

    Scripts may not touch attributes starting with ``_`` or bind names
    starting with ``__``; such sources fail to compile.
    """

    def __init__(self, context: Any, step_hook: Callable[[], bool]):
        self.context = context
        self._step_hook = step_hook
        self._host: Dict[str, Callable[..., Any]] = {}
        # one global namespace for the engine's whole lifetime
        self._globals: Dict[str, Any] = {
            "__builtins__": _safe_builtins(),
            "__name__": "__chapter_script__",
        }

    # ----- host functions -----
    def register(self, name: str, arity: int, handler: Callable[..., Any]):
        context = self.context

        def host_call(*args, **kwargs):
            if kwargs:
                raise ArgumentTypeError(name, "keyword arguments are not supported")
            if len(args) > arity:
                raise ArgumentTypeError(name, f"takes at most {arity} argument(s), got {len(args)}")
            padded = args + (None,) * (arity - len(args))
            return handler(context, *padded)

        host_call.__name__ = name
        host_call.__qualname__ = name
        self._host[name] = host_call

    @property
    def host_functions(self) -> Dict[str, Callable[..., Any]]:
        return dict(self._host)

    @property
    def globals(self) -> Dict[str, Any]:
        return self._globals

    # ----- evaluation -----
    def evaluate(self, source: str) -> EvalResult:
        """Run *source*; script faults come back as a failed result.

        Raises EngineFatalError for conditions the engine cannot survive.
        """
        linecache.cache[SCRIPT_FILENAME] = (len(source), None, source.splitlines(True), SCRIPT_FILENAME)
        try:
            code = self._compile(source)
        except (SyntaxError, ValueError) as exc:
            return EvalResult(False, self._format(exc))

        # host functions always win over names a previous script assigned
        self._globals.update(self._host)
        self._globals[CHECKPOINT] = self._checkpoint
        self._globals[GUARD] = self._guarded

        previous = sys.gettrace()
        try:
            sys.settrace(self._trace_calls)
        except (TypeError, ValueError) as exc:
            raise EngineFatalError(f"cannot install step hook: {exc}") from exc
        try:
            exec(code, self._globals)
        except _FATAL as exc:
            raise EngineFatalError(f"{type(exc).__name__}: {exc}") from exc
        except (Exception, ScriptTimeout) as exc:
            return EvalResult(False, self._format(exc))
        finally:
            sys.settrace(previous)
        return EvalResult(True)

    def _compile(self, source: str):
        tree = ast.parse(source, SCRIPT_FILENAME, "exec")
        for node in ast.walk(tree):
            if isinstance(node, ast.ExceptHandler) and node.type is None:
                raise _rejected(node, "bare 'except:' is not allowed in chapter scripts")
            if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
                raise _rejected(node, f"access to private attribute '{node.attr}' is not allowed")
            for ident in _bound_names(node):
                if ident.startswith("__"):
                    raise _rejected(node, f"name '{ident}' is reserved")
        tree = ast.fix_missing_locations(_Checkpoints().visit(tree))
        return compile(tree, SCRIPT_FILENAME, "exec")

    # ----- step hook -----
    def _checkpoint(self):
        if self._step_hook():
            raise ScriptTimeout("script evaluation budget exhausted")

    def _guarded(self, iterable: Iterable[Any]) -> Iterator[Any]:
        for item in iterable:
            self._checkpoint()
            yield item

    def _trace_calls(self, frame, event, arg):
        if frame.f_code.co_filename != SCRIPT_FILENAME:
            return None
        return self._trace_lines

    def _trace_lines(self, frame, event, arg):
        if event == "line" and self._step_hook():
            raise ScriptTimeout("script evaluation budget exhausted")
        return self._trace_lines

    # ----- diagnostics -----
    @staticmethod
    def _format(exc: BaseException) -> str:
        frames = [f for f in traceback.extract_tb(exc.__traceback__)
                  if f.filename == SCRIPT_FILENAME]
        lines = ["Traceback (most recent call last):\n"] if frames else []
        lines.extend(traceback.format_list(frames))
        lines.extend(traceback.format_exception_only(type(exc), exc))
        return "".join(lines).rstrip("\n")
