"""Single-call remote interpretation through a chat transport.

The interpreter asks the model for one JSON object following the command
schema and turns it into a typed command. Anything other than a well-formed
object with a known ``intent`` is reported as :class:`UnparsableReply`; the
caller decides how to recover.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from core.commands import InterpretedCommand, Utterance, build_command, clamp_confidence, parse_intent
from core.errors import UnparsableReply
from core.prompts import command_system_prompt
from core.transport import ChatTransport

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.7
TEMPERATURE = 0.2
MAX_TOKENS = 500

_FENCED_JSON = re.compile(r"```json\s*(.*?)```", re.IGNORECASE | re.DOTALL)
_DECODER = json.JSONDecoder()


def first_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Return the first substring of ``text`` that decodes as a JSON object."""

    start = text.find("{")
    while start != -1:
        try:
            value, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None


def parse_reply(reply: str) -> InterpretedCommand:
    """Parse the model reply into a typed command or raise ``UnparsableReply``."""

    fenced = _FENCED_JSON.search(reply or "")
    text = fenced.group(1) if fenced else (reply or "")
    data = first_json_object(text)
    if data is None:
        raise UnparsableReply("Reply does not contain a JSON object.")

    intent = parse_intent(data.get("intent")) if data.get("intent") is not None else None
    if intent is None:
        raise UnparsableReply(f"Reply has a missing or unknown intent: {data.get('intent')!r}")

    fields = data.get("data")
    if fields is None:
        fields = data.get("fields")
    if not isinstance(fields, dict):
        fields = {}
    confidence = clamp_confidence(data.get("confidence"), DEFAULT_CONFIDENCE)
    return build_command(intent, confidence, fields)


class RemoteInterpreter:
    """Builds the bilingual instruction prompt and issues exactly one request."""

    def __init__(self, transport: ChatTransport):
        self._transport = transport

    def build_messages(self, utterance: Utterance) -> list:
        return [
            {"role": "system", "content": command_system_prompt(utterance.language, utterance.context)},
            {"role": "user", "content": utterance.text},
        ]

    def interpret(self, utterance: Utterance) -> InterpretedCommand:
        """Raise ``TransportFailure``/``UnparsableReply``; never falls back itself."""

        reply = self._transport.complete(
            self.build_messages(utterance),
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )
        logger.debug("Remote reply received (%d chars)", len(reply))
        return parse_reply(reply)


__all__ = ["DEFAULT_CONFIDENCE", "RemoteInterpreter", "first_json_object", "parse_reply"]
