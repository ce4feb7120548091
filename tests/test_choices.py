import pytest

from chapterscript.choices import ChapterChoice, ChoiceRegistry
from chapterscript.errors import ChoiceLookupMiss


def test_add_choice_overwrites_instead_of_accumulating(registry: ChoiceRegistry) -> None:
    registry.add("u", "g1")
    registry.set_text("u", "Hello", "en")
    registry.add("u", "g2")

    assert len(registry) == 1
    assert registry.get("u").group == "g2"
    assert registry.get("u").per_language_text == {}


def test_set_text_on_unknown_uid_leaves_set_untouched(registry: ChoiceRegistry) -> None:
    registry.add("a")
    before = registry.snapshot()

    with pytest.raises(ChoiceLookupMiss) as info:
        registry.set_text("missing", "text", "en")

    assert info.value.uid == "missing"
    assert "missing" not in registry
    assert registry.snapshot() == before


def test_selection_is_last_write_wins_per_group(registry: ChoiceRegistry) -> None:
    registry.set_selected("u", "g")
    registry.set_selected("v", "g")
    registry.set_selected("w", "other")

    assert registry.get_selected("g") == "v"
    assert registry.get_selected("other") == "w"
    assert registry.is_selected("v", "g")
    assert not registry.is_selected("u", "g")


def test_ungrouped_choices_share_one_selection_slot(registry: ChoiceRegistry) -> None:
    registry.set_selected("a", None)
    assert registry.get_selected(None) == "a"
    assert registry.get_selected("g") is None


def test_text_lookup_is_exact_match_only(registry: ChoiceRegistry) -> None:
    registry.add("a")
    registry.set_text("a", "Bonjour", "fr")

    assert registry.text("a", "fr") == "Bonjour"
    assert registry.text("a", "en") is None
    assert registry.text("nope", "fr") is None


def test_display_text_is_first_text_set() -> None:
    choice = ChapterChoice()
    assert choice.display_text() == ""
    choice.per_language_text["de"] = "Ja"
    choice.per_language_text["en"] = "Yes"
    assert choice.display_text() == "Ja"


def test_reset_keeps_selections_and_snapshot_is_a_copy(registry: ChoiceRegistry) -> None:
    registry.add("a", "g")
    registry.set_selected("a", "g")
    snap = registry.snapshot()
    snap["a"].per_language_text["en"] = "changed"

    assert registry.text("a", "en") is None

    registry.reset_choices()
    assert len(registry) == 0
    assert registry.get_selected("g") == "a"


def test_iteration_follows_insertion_order(registry: ChoiceRegistry) -> None:
    for uid in ("C", "A", "B"):
        registry.add(uid)
    assert list(registry) == ["C", "A", "B"]
    assert [uid for uid, _ in registry.items()] == ["C", "A", "B"]
