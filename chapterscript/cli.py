from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .choices import ChoiceRegistry
from .codec import ChapterScriptCodec, play_from
from .config import PREVIEW
from .interpreter import ScriptCommandInterpreter
from .navigation import ChapterNavigator, Segment, load_chapters
from .overlay import OverlayController
from .palettes import CHOICE_PALETTES, DEFAULT_CHOICE_PALETTE, ChoicePalette, palette_for


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


class Session:
    """Everything one playback session needs, wired together."""

    def __init__(self, segments: List[Segment], frame_size=PREVIEW.frame_size,
                 palette: ChoicePalette = DEFAULT_CHOICE_PALETTE):
        self.choices = ChoiceRegistry()
        self.navigator = ChapterNavigator(segments, self.choices)
        self.overlay = OverlayController(self.choices, *frame_size, palette=palette)
        self.navigator.attach_overlay(self.overlay)
        self.interpreter = ScriptCommandInterpreter(self.navigator, self.choices)
        self.codec = ChapterScriptCodec(self.interpreter)


def _build_session(args) -> Session:
    segments = load_chapters(args.chapters) if args.chapters else []
    session = Session(segments, palette=palette_for(getattr(args, "palette", None)))
    if args.current:
        session.navigator.set_current(args.current)
    return session


def _report(session: Session):
    nav = session.navigator
    current = nav.current_chapter()
    print(f"Current chapter: {current.uid if current else '-'}")
    for seg, ch in nav.jumps:
        print(f"  jumped to {ch.uid} (segment {seg.uid})")
    for uid, choice in nav.committed.items():
        label = choice.display_text() or "(no text)"
        print(f"  choice {uid}: {label} [group {choice.group}]")
    for group, uid in nav.choices.selections.items():
        print(f"  selected {uid} in group {group}")


def _run_script(session: Session, path: Path) -> bool:
    data = path.read_bytes()
    return session.interpreter.interpret(data, len(data))


def cmd_run(args) -> int:
    session = _build_session(args)
    ok = _run_script(session, args.script)
    _report(session)
    return 0 if ok else 1


def cmd_play(args) -> int:
    session = _build_session(args)
    visited = play_from(session.navigator, session.codec, args.start)
    if not visited:
        print(f"Unknown chapter: {args.start}", file=sys.stderr)
        return 1
    print("Entered: " + " -> ".join(visited))
    _report(session)
    return 0


def cmd_preview(args) -> int:
    from PySide6 import QtWidgets
    from .widget import ChoiceOverlayWidget

    session = _build_session(args)
    if not _run_script(session, args.script):
        return 1
    app = QtWidgets.QApplication(sys.argv[:1])
    w = ChoiceOverlayWidget(session.navigator, session.overlay)
    w.setWindowTitle("Chapter choices")
    w.selectionChanged.connect(lambda: _report(session))
    w.resize(*PREVIEW.frame_size)
    w.show()
    return app.exec()


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(prog="chapterscript",
                                     description="Evaluate chapter scripts and preview their choice menus.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def common(p):
        p.add_argument("--chapters", type=Path, help="Chapter graph JSON file")
        p.add_argument("--current", help="Chapter uid playback is currently in")

    p_run = sub.add_parser("run", help="Evaluate a script headless")
    p_run.add_argument("script", type=Path)
    common(p_run)
    p_run.set_defaults(func=cmd_run)

    p_play = sub.add_parser("play", help="Enter a chapter and follow the jumps its scripts request")
    p_play.add_argument("start", help="Chapter uid to enter first")
    common(p_play)
    p_play.set_defaults(func=cmd_play)

    p_prev = sub.add_parser("preview", help="Evaluate a script and show its choice bar")
    p_prev.add_argument("script", type=Path)
    p_prev.add_argument("--palette", default=DEFAULT_CHOICE_PALETTE.key,
                        help="Choice button palette: " + ", ".join(CHOICE_PALETTES))
    common(p_prev)
    p_prev.set_defaults(func=cmd_preview)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
