"""Exception types raised inside the interpretation pipeline."""

from __future__ import annotations


class InterpreterError(Exception):
    """Base class for failures the orchestrator recovers from locally."""

    reason = "interpreter_error"


class TransportFailure(InterpreterError):
    """The remote model could not be reached or answered with a non-success status."""

    reason = "transport_failure"


class UnparsableReply(InterpreterError):
    """The remote reply held no usable JSON object or lacked required fields."""

    reason = "unparsable_reply"


class NoExtractableEntity(ValueError):
    """Raised when a re-prompt for an item name still yields nothing usable."""


class UnresolvedTime(ValueError):
    """Raised when a time the caller typed in still cannot be read."""


__all__ = ["InterpreterError", "TransportFailure", "UnparsableReply", "NoExtractableEntity", "UnresolvedTime"]
