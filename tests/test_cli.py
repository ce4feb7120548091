import json
from pathlib import Path

from chapterscript.cli import Session, _build_session, main, parse_args
from chapterscript.palettes import CHOICE_PALETTES, DEFAULT_CHOICE_PALETTE


def test_run_reports_committed_choices(tmp_path: Path, capsys) -> None:
    script = tmp_path / "menu.py"
    script.write_text(
        'AddChoice("yes", "q")\n'
        'SetChoiceText("yes", "Yes", "en")\n'
        'SetChoiceDefault("yes", "q")\n'
        'GotoAndPlay("7")\n'
        "CommitChoices()\n",
        encoding="utf-8",
    )
    chapters = tmp_path / "chapters.json"
    chapters.write_text(json.dumps({"segments": [{"uid": "s", "chapters": [{"uid": "6"}, {"uid": "7"}]}]}))

    code = main(["run", str(script), "--chapters", str(chapters), "--current", "6"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Current chapter: 7" in out
    assert "choice yes: Yes [group q]" in out
    assert "selected yes in group q" in out


def test_run_failing_script_exits_nonzero(tmp_path: Path) -> None:
    script = tmp_path / "broken.py"
    script.write_text("LogMsg(42)\n", encoding="utf-8")
    assert main(["run", str(script)]) == 1


def test_play_unknown_start(tmp_path: Path, capsys) -> None:
    assert main(["play", "nowhere"]) == 1
    assert "Unknown chapter" in capsys.readouterr().err


def test_session_shares_one_registry() -> None:
    session = Session([], frame_size=(300, 100))
    assert session.navigator.choices is session.choices
    assert session.overlay.registry is session.choices
    assert session.interpreter.choices is session.choices
    assert session.navigator.overlay is session.overlay


def test_preview_palette_option_styles_the_overlay(tmp_path: Path) -> None:
    args = parse_args(["preview", str(tmp_path / "menu.py"), "--palette", "Ember"])
    assert _build_session(args).overlay.palette is CHOICE_PALETTES["ember"]

    args = parse_args(["preview", str(tmp_path / "menu.py")])
    assert _build_session(args).overlay.palette is DEFAULT_CHOICE_PALETTE

    args = parse_args(["run", str(tmp_path / "menu.py")])
    assert _build_session(args).overlay.palette is DEFAULT_CHOICE_PALETTE
