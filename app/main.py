"""Assemble the command interpreter and run the interactive CLI loop."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from app.config import (
    build_provider_config,
    get_default_language,
    get_interpretation_log_path,
    get_lexicon_path,
    get_llm_timeout,
    get_log_backup_count,
    get_log_max_bytes,
    get_log_redaction_patterns,
    is_log_redaction_enabled,
    is_logging_enabled,
)
from core.command_interpreter import CommandInterpreter, InputRequest, InterpretationResult
from core.errors import NoExtractableEntity, UnresolvedTime
from core.followups import confirm_pantry_addition, read_chosen_time, schedule_reminder, supply_item_name
from core.interpretation_log import InterpretationLogger
from core.lexicon import load_lexicon
from core.recipes import RecipeSuggester
from core.remote_interpreter import RemoteInterpreter
from core.transport import ChatTransport, build_transport


# -- Interpreter construction --------------------------------------------------
def build_transport_from_env(env: Dict[str, str] | None = None) -> Optional[ChatTransport]:
    config = build_provider_config(env)
    if config is None:
        return None
    return build_transport(config, timeout=get_llm_timeout(env))


def build_interpreter(
    env: Dict[str, str] | None = None,
    *,
    transport: Optional[ChatTransport] = None,
) -> CommandInterpreter:
    """Wire lexicon, transport and audit log for the CLI and the web API.

    WHAT: read provider, vocabulary and logging settings from ``app.config``.
    HOW: an explicit ``transport`` wins over the configured provider; with
    neither, the interpreter runs on the fallback classifier alone.
    """

    lexicon = load_lexicon(get_lexicon_path(env))
    transport = transport or build_transport_from_env(env)
    remote = RemoteInterpreter(transport) if transport is not None else None
    log = InterpretationLogger(
        log_path=get_interpretation_log_path(env),
        enabled=is_logging_enabled(env),
        redact=is_log_redaction_enabled(env),
        patterns=get_log_redaction_patterns(env),
        max_bytes=get_log_max_bytes(env),
        backup_count=get_log_backup_count(env),
    )
    return CommandInterpreter(remote, lexicon=lexicon, log=log)


def build_recipe_suggester(
    env: Dict[str, str] | None = None,
    *,
    transport: Optional[ChatTransport] = None,
) -> RecipeSuggester:
    return RecipeSuggester(transport or build_transport_from_env(env))


# -- Follow-up prompts ---------------------------------------------------------
Prompt = Callable[[str], str]


def _ask_yes_no(ask: Prompt, question: str) -> bool:
    return ask(f"{question} [y/n]: ").strip().lower() in {"y", "yes", "haan", "ha", "हाँ", "हां"}


def _ask_time(ask: Prompt, reference: datetime) -> Optional[datetime]:
    answer = ask("When should I remind you? (blank = in 1 hour) ")
    try:
        return read_chosen_time(answer, reference)
    except UnresolvedTime:
        print("Could not read that time; using the default.")
        return None


def complete_interaction(
    result: InterpretationResult,
    ask: Prompt,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Resolve pending requests by asking on the console; return a summary line."""

    reference = now or datetime.now()

    if result.needs(InputRequest.ITEM_NAME):
        try:
            result = supply_item_name(result, ask("Which item? "))
        except NoExtractableEntity:
            return "No item name given; nothing saved."

    if result.needs(InputRequest.PANTRY_CONFIRMATION):
        outcome = confirm_pantry_addition(result, _ask_yes_no(ask, "Add to pantry?"), reference)
        if isinstance(outcome, list):
            names = ", ".join(f"{draft.item_name} ({draft.quantity} {draft.unit})" for draft in outcome)
            return f"Pantry: {names}"
        reminder = schedule_reminder(result, _ask_time(ask, reference), reference)
        return f"Reminder: {reminder.title} at {reminder.due_at:%Y-%m-%d %H:%M}"

    if result.intent == "reminder":
        chosen = _ask_time(ask, reference) if result.needs(InputRequest.MANUAL_TIME) else None
        reminder = schedule_reminder(result, chosen, reference)
        return f"Reminder: {reminder.title} at {reminder.due_at:%Y-%m-%d %H:%M}"

    fields = result.command.fields()
    return f"{result.intent} ({result.command.confidence:.2f}) {fields}"


# -- Interactive CLI loop ------------------------------------------------------
def main() -> None:
    """Read phrases from stdin and walk through any follow-up questions.

    A leading ``hi:`` or ``en:`` switches the language for that phrase.
    """

    logging.basicConfig(level=logging.WARNING)
    interpreter = build_interpreter()
    language = get_default_language()
    source = "remote model" if interpreter.remote_enabled else "fallback rules only"
    print(f"Command interpreter ready ({source}). Type 'quit' or 'exit' to stop.")

    while True:
        try:
            message = input("You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if message.strip().lower() in {"quit", "exit"}:
            print("Goodbye!")
            break
        if not message.strip():
            continue

        phrase_language = language
        prefix, _, rest = message.partition(":")
        if prefix.strip().lower() in {"en", "hi"} and rest.strip():
            phrase_language, message = prefix.strip().lower(), rest

        result = interpreter.interpret(message, phrase_language)
        try:
            summary = complete_interaction(result, input)
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break
        print()
        print(f"Assistant: {summary}")
        print()


if __name__ == "__main__":
    main()
