"""Scope levels and their fixed precedence.

Four scopes can hold configuration, highest precedence first:
Task > Project > User > System.
"""

from __future__ import annotations

from enum import StrEnum


class ScopeLevel(StrEnum):
    """Levels of the scope hierarchy."""

    TASK = "task"
    PROJECT = "project"
    USER = "user"
    SYSTEM = "system"


# Highest precedence first.
SCOPE_PRECEDENCE: tuple[ScopeLevel, ...] = (
    ScopeLevel.TASK,
    ScopeLevel.PROJECT,
    ScopeLevel.USER,
    ScopeLevel.SYSTEM,
)


def coerce_scope(value: ScopeLevel | str) -> ScopeLevel:
    """Return *value* as a :class:`ScopeLevel`.

    Raises:
        ValueError: If *value* is not one of the four scope names.
    """
    if isinstance(value, ScopeLevel):
        return value
    try:
        return ScopeLevel(value)
    except ValueError:
        msg = f"Unknown scope: {value!r}"
        raise ValueError(msg) from None
