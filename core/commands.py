"""Typed command variants produced by the interpretation pipeline.

Each intent has its own dataclass with the fields that make sense for it.
Keys the pipeline does not model (or that do not belong to the intent) are
kept verbatim in ``extras`` so nothing the model returned is silently lost.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, Union

SUPPORTED_LANGUAGES = ("en", "hi")


class Intent(str, Enum):
    REMINDER = "reminder"
    PANTRY_ADD = "pantry_add"
    PANTRY_QUERY = "pantry_query"
    RECIPE_REQUEST = "recipe_request"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Utterance:
    """One raw phrase plus its language tag and optional pantry context."""

    text: str
    language: str = "en"
    context: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language '{self.language}'. Expected one of {SUPPORTED_LANGUAGES}.")
        object.__setattr__(self, "text", self.text or "")
        object.__setattr__(self, "context", tuple(str(item) for item in self.context or () if str(item).strip()))


FIELD_ALIASES = {
    "item": "itemName",
    "items": "itemName",
    "item_name": "itemName",
    "item_names": "itemName",
    "itemNames": "itemName",
    "name": "itemName",
    "time": "when",
    "due": "when",
    "due_at": "when",
    "qty": "quantity",
    "amount": "quantity",
    "is_negated": "isNegated",
    "negated": "isNegated",
    "add_to_pantry": "addToPantry",
    "reminder_type": "reminderType",
    "meal_type": "mealType",
}


def normalize_fields(payload: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Return a copy with canonical field names; ``None`` values are dropped."""

    if not payload:
        return {}
    normalized: Dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            continue
        target = FIELD_ALIASES.get(key, key)
        normalized.setdefault(target, value)
    return normalized


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    return bool(value)


def _as_names(value: Any) -> List[str]:
    if value is None:
        return []
    values: Iterable[Any] = value if isinstance(value, (list, tuple)) else [value]
    names: List[str] = []
    for item in values:
        text = _as_text(item)
        if text and text not in names:
            names.append(text)
    return names


def _prune(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


class _WireFormat:
    """Shared ``to_dict`` for the command variants."""

    def to_dict(self) -> Dict[str, Any]:
        return command_to_dict(self)  # type: ignore[arg-type]


@dataclass
class ReminderCommand(_WireFormat):
    intent: ClassVar[Intent] = Intent.REMINDER
    known_fields: ClassVar[Tuple[str, ...]] = (
        "title", "when", "itemName", "quantity", "unit", "isNegated", "addToPantry", "reminderType",
    )

    confidence: float = 0.0
    title: Optional[str] = None
    when: Optional[str] = None
    item_name: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    is_negated: bool = False
    add_to_pantry: bool = False
    reminder_type: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, confidence: float, fields: Dict[str, Any], extras: Dict[str, Any]) -> "ReminderCommand":
        names = _as_names(fields.get("itemName"))
        return cls(
            confidence=confidence,
            title=_as_text(fields.get("title")),
            when=_as_text(fields.get("when")),
            item_name=names[0] if names else None,
            quantity=_as_number(fields.get("quantity")),
            unit=_as_text(fields.get("unit")),
            is_negated=_as_bool(fields.get("isNegated")),
            add_to_pantry=_as_bool(fields.get("addToPantry")),
            reminder_type=_as_text(fields.get("reminderType")),
            extras=extras,
        )

    def fields(self) -> Dict[str, Any]:
        return _prune(
            {
                "title": self.title,
                "when": self.when,
                "itemName": self.item_name,
                "quantity": self.quantity,
                "unit": self.unit,
                "isNegated": self.is_negated,
                "addToPantry": self.add_to_pantry,
                "reminderType": self.reminder_type,
            }
        )


@dataclass
class PantryAddCommand(_WireFormat):
    intent: ClassVar[Intent] = Intent.PANTRY_ADD
    known_fields: ClassVar[Tuple[str, ...]] = ("itemName", "quantity", "unit", "isNegated", "addToPantry")

    confidence: float = 0.0
    item_names: List[str] = field(default_factory=list)
    quantity: Optional[float] = None
    unit: Optional[str] = None
    is_negated: bool = False
    add_to_pantry: bool = False
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, confidence: float, fields: Dict[str, Any], extras: Dict[str, Any]) -> "PantryAddCommand":
        return cls(
            confidence=confidence,
            item_names=_as_names(fields.get("itemName")),
            quantity=_as_number(fields.get("quantity")),
            unit=_as_text(fields.get("unit")),
            is_negated=_as_bool(fields.get("isNegated")),
            add_to_pantry=_as_bool(fields.get("addToPantry")),
            extras=extras,
        )

    def fields(self) -> Dict[str, Any]:
        item: Any = None
        if len(self.item_names) == 1:
            item = self.item_names[0]
        elif self.item_names:
            item = list(self.item_names)
        return _prune(
            {
                "itemName": item,
                "quantity": self.quantity,
                "unit": self.unit,
                "isNegated": self.is_negated,
                "addToPantry": self.add_to_pantry,
            }
        )


@dataclass
class PantryQueryCommand(_WireFormat):
    intent: ClassVar[Intent] = Intent.PANTRY_QUERY
    known_fields: ClassVar[Tuple[str, ...]] = ("itemName",)

    confidence: float = 0.0
    item_name: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, confidence: float, fields: Dict[str, Any], extras: Dict[str, Any]) -> "PantryQueryCommand":
        names = _as_names(fields.get("itemName"))
        return cls(confidence=confidence, item_name=names[0] if names else None, extras=extras)

    def fields(self) -> Dict[str, Any]:
        return _prune({"itemName": self.item_name})


@dataclass
class RecipeRequestCommand(_WireFormat):
    intent: ClassVar[Intent] = Intent.RECIPE_REQUEST
    known_fields: ClassVar[Tuple[str, ...]] = ("query", "mealType")

    confidence: float = 0.0
    query: Optional[str] = None
    meal_type: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, confidence: float, fields: Dict[str, Any], extras: Dict[str, Any]) -> "RecipeRequestCommand":
        return cls(
            confidence=confidence,
            query=_as_text(fields.get("query")),
            meal_type=_as_text(fields.get("mealType")),
            extras=extras,
        )

    def fields(self) -> Dict[str, Any]:
        return _prune({"query": self.query, "mealType": self.meal_type})


@dataclass
class UnknownCommand(_WireFormat):
    intent: ClassVar[Intent] = Intent.UNKNOWN
    known_fields: ClassVar[Tuple[str, ...]] = ()

    confidence: float = 0.3
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, confidence: float, fields: Dict[str, Any], extras: Dict[str, Any]) -> "UnknownCommand":
        return cls(confidence=confidence, extras=extras)

    def fields(self) -> Dict[str, Any]:
        return {}


InterpretedCommand = Union[ReminderCommand, PantryAddCommand, PantryQueryCommand, RecipeRequestCommand, UnknownCommand]

_VARIANTS = {
    Intent.REMINDER: ReminderCommand,
    Intent.PANTRY_ADD: PantryAddCommand,
    Intent.PANTRY_QUERY: PantryQueryCommand,
    Intent.RECIPE_REQUEST: RecipeRequestCommand,
    Intent.UNKNOWN: UnknownCommand,
}


def parse_intent(value: Any) -> Optional[Intent]:
    try:
        return Intent(str(value).strip().lower())
    except ValueError:
        return None


def clamp_confidence(value: Any, default: float) -> float:
    number = _as_number(value)
    if number is None:
        return default
    return min(max(float(number), 0.0), 1.0)


def build_command(intent: Intent, confidence: float, payload: Mapping[str, Any] | None) -> InterpretedCommand:
    """Build the typed variant for ``intent`` from a loosely-typed field mapping."""

    variant = _VARIANTS[intent]
    fields = normalize_fields(payload)
    known = {key: value for key, value in fields.items() if key in variant.known_fields}
    extras = {key: value for key, value in fields.items() if key not in variant.known_fields}
    return variant.from_fields(confidence, known, extras)


def command_to_dict(command: InterpretedCommand) -> Dict[str, Any]:
    """Render the wire shape ``{intent, confidence, fields}``."""

    payload: Dict[str, Any] = {
        "intent": command.intent.value,
        "confidence": command.confidence,
        "fields": command.fields(),
    }
    if command.extras:
        payload["extras"] = dict(command.extras)
    return payload


__all__ = [
    "FIELD_ALIASES",
    "Intent",
    "InterpretedCommand",
    "PantryAddCommand",
    "PantryQueryCommand",
    "RecipeRequestCommand",
    "ReminderCommand",
    "SUPPORTED_LANGUAGES",
    "UnknownCommand",
    "Utterance",
    "build_command",
    "clamp_confidence",
    "command_to_dict",
    "normalize_fields",
    "parse_intent",
]
