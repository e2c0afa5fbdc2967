from pathlib import Path

import pytest
import yaml

from core.commands import Utterance
from core.entity_extractor import extract_item_name
from core.fallback_classifier import classify
from core.lexicon import DEFAULT_LEXICON, load_lexicon


def test_canonical_lookup_is_plural_tolerant():
    assert DEFAULT_LEXICON.canonical("Doodh") == "दूध"
    assert DEFAULT_LEXICON.canonical("tomatoes") == "टमाटर"
    assert DEFAULT_LEXICON.canonical("eggs") == "अंडा"
    assert DEFAULT_LEXICON.canonical("paneer") is None


def test_missing_path_returns_base():
    assert load_lexicon(None) is DEFAULT_LEXICON


def test_yaml_extends_tables(tmp_path):
    path = tmp_path / "lexicon.yml"
    path.write_text(
        "synonyms:\n"
        "  पनीर: [paneer, chhena]\n"
        "  दही: dahi\n"
        "stop_words: [zara]\n"
        "markers:\n"
        "  purchase: [mangwana]\n",
        encoding="utf-8",
    )

    lexicon = load_lexicon(path)

    assert lexicon.canonical("paneer") == "पनीर"
    assert lexicon.canonical("dahi") == "दही"
    assert lexicon.canonical("doodh") == "दूध"
    assert lexicon.is_stop_word("zara")
    assert "mangwana" in lexicon.purchase
    assert extract_item_name("zara paneer mangwana", lexicon) == "पनीर"
    command = classify(Utterance("zara paneer mangwana", "hi"), lexicon)
    assert command.intent.value == "reminder"
    assert command.title == "पनीर खरीदना"


def test_extension_does_not_change_defaults(tmp_path):
    path = tmp_path / "lexicon.yml"
    path.write_text("synonyms:\n  पनीर: [paneer]\n", encoding="utf-8")

    load_lexicon(path)

    assert DEFAULT_LEXICON.canonical("paneer") is None


def test_unknown_marker_table_is_rejected(tmp_path):
    path = tmp_path / "lexicon.yml"
    path.write_text("markers:\n  greetings: [namaste]\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_lexicon(path)


def test_non_mapping_document_is_rejected(tmp_path):
    path = tmp_path / "lexicon.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_lexicon(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_lexicon(tmp_path / "absent.yml")


def test_bundled_example_file_uses_single_word_aliases():
    path = Path(__file__).resolve().parents[1] / "config" / "lexicon.yml"
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))

    lexicon = load_lexicon(path)

    for canonical, aliases in raw["synonyms"].items():
        for alias in aliases:
            assert len(alias.split()) == 1
            assert extract_item_name(f"mujhe {alias} lena hai", lexicon) == canonical
