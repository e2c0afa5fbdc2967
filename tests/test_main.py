from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from app import main as cli
from core.command_interpreter import CommandInterpreter

NOW = datetime(2025, 1, 15, 10, 30)


def scripted(*answers: str):
    queue = list(answers)
    prompts: list[str] = []

    def ask(prompt: str) -> str:
        prompts.append(prompt)
        return queue.pop(0)

    ask.prompts = prompts  # type: ignore[attr-defined]
    return ask


def _run(text: str, *answers: str, language: str = "en") -> str:
    result = CommandInterpreter().interpret(text, language, now=NOW)
    return cli.complete_interaction(result, scripted(*answers), now=NOW)


def test_reminder_asks_for_time():
    assert _run("mujhe 2 kilo doodh lena hai", "6 pm", language="hi") == "Reminder: दूध खरीदना at 2025-01-15 18:00"


def test_blank_time_uses_default_delay():
    assert _run("buy onions", "") == "Reminder: Buy प्याज at 2025-01-15 11:30"


def test_resolved_reminder_needs_no_questions():
    ask = scripted()
    result = CommandInterpreter().interpret("doodh lena hai 6 baje", "hi", now=NOW)

    summary = cli.complete_interaction(result, ask, now=NOW)

    assert summary == "Reminder: दूध खरीदना at 2025-01-15 18:00"
    assert ask.prompts == []


@pytest.mark.parametrize("answer", ["y", "Yes", "haan", "हाँ"])
def test_confirmed_pantry_addition(answer):
    assert _run("I bought milk", answer) == "Pantry: दूध (1 pieces)"


def test_declined_pantry_addition_schedules_shopping_reminder():
    assert _run("I bought milk", "n", "") == "Reminder: Buy दूध at 2025-01-15 11:30"


def test_missing_item_is_asked_for():
    assert _run("I bought it", "milk", "y") == "Pantry: दूध (1 pieces)"


def test_unusable_item_answer_saves_nothing():
    assert _run("I bought it", "") == "No item name given; nothing saved."


def test_other_intents_are_summarized():
    assert _run("what can I cook for dinner") == "recipe_request (0.60) {'query': 'what can I cook for dinner'}"


def test_build_interpreter_reads_environment(tmp_path: Path):
    lexicon = tmp_path / "lexicon.yml"
    lexicon.write_text("synonyms:\n  पनीर: [paneer]\n", encoding="utf-8")
    env = {"LOGGING_ENABLED": "false", "LEXICON_PATH": str(lexicon), "LOG_DIR": str(tmp_path / "logs")}

    interpreter = cli.build_interpreter(env)
    result = interpreter.interpret("paneer lena hai", "hi", now=NOW)

    assert interpreter.remote_enabled is False
    assert result.command.item_name == "पनीर"
    assert not (tmp_path / "logs").exists()


def test_explicit_transport_enables_remote():
    class Transport:
        def complete(self, messages, *, temperature, max_tokens, response_format=None):
            return '{"intent": "pantry_query", "data": {"itemName": "milk"}}'

    interpreter = cli.build_interpreter({"LOGGING_ENABLED": "false"}, transport=Transport())

    assert interpreter.remote_enabled is True
    assert interpreter.interpret("do I have milk?", now=NOW).command.item_name == "दूध"


def test_main_loop_handles_language_prefix(monkeypatch, capsys, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LLM_PROVIDER", "none")
    monkeypatch.setenv("LOGGING_ENABLED", "false")
    monkeypatch.delenv("LEXICON_PATH", raising=False)
    answers = iter(["hi: doodh lena hai 6 baje", "", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    cli.main()

    output = capsys.readouterr().out
    assert "fallback rules only" in output
    assert "Assistant: Reminder: दूध खरीदना at" in output
    assert "Goodbye!" in output


def test_unreadable_time_falls_back_to_default(capsys):
    assert _run("buy onions", "whenever") == "Reminder: Buy प्याज at 2025-01-15 11:30"
    assert "Could not read that time" in capsys.readouterr().out
