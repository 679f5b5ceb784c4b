"""Stale-catalog detection for tools/call failures.

Servers do not agree on an error code for "the tool you asked for is gone",
so recovery keys off the error text. The phrase list is a policy choice, not a
protocol guarantee; keep every such heuristic behind this one predicate.
"""

RECOVERABLE_PHRASES: tuple[str, ...] = (
    "tool not found",
    "method not found",
    "unknown tool",
    "stale",
    "no response",
    "not available",
)


def is_recoverable_catalog_error(exc: BaseException) -> bool:
    """True when a failed call may succeed after refreshing the catalog."""
    message = str(getattr(exc, "message", None) or exc).lower()
    return any(phrase in message for phrase in RECOVERABLE_PHRASES)
