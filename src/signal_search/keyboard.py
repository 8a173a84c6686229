"""
Keyboard handling for the unified search input.

``resolve_keyboard_action`` maps a key press plus a snapshot of UI state to
the action the caller should apply. It holds no state of its own.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

type Direction = Literal[1, -1]


class KeyboardActionType(str, Enum):
    NONE = "none"
    STEP_OPERATOR = "step-operator"
    STEP_RESULT = "step-result"
    APPLY_OPERATOR = "apply-operator"
    OPEN_RESULT = "open-result"
    COMMIT_QUERY = "commit-query"
    DISMISS_OPERATOR = "dismiss-operator"
    CLEAR_ACTIVE_RESULT = "clear-active-result"
    CLEAR_QUERY = "clear-query"


@dataclass(frozen=True)
class KeyboardAction:
    type: KeyboardActionType
    direction: Optional[Direction] = None  # Only set for step actions


@dataclass(frozen=True)
class KeyboardInput:
    """A key press and the UI state it happens in."""

    key: str
    has_operator_suggestions: bool = False
    has_navigable_results: bool = False
    has_active_result: bool = False
    has_query: bool = False


NO_ACTION = KeyboardAction(KeyboardActionType.NONE)


def resolve_keyboard_action(event: KeyboardInput) -> KeyboardAction:
    """Resolve a key press; the first matching rule wins.

    - ArrowUp/ArrowDown: step operator suggestions, else step results
    - Tab: apply the operator suggestion
    - Enter: apply the suggestion, else open the active result, else commit
    - Escape: dismiss suggestions, else clear the active result, else clear the query
    """
    match event.key:
        case "ArrowDown" | "ArrowUp":
            direction: Direction = 1 if event.key == "ArrowDown" else -1
            if event.has_operator_suggestions:
                return KeyboardAction(KeyboardActionType.STEP_OPERATOR, direction)
            if event.has_navigable_results:
                return KeyboardAction(KeyboardActionType.STEP_RESULT, direction)
        case "Tab":
            if event.has_operator_suggestions:
                return KeyboardAction(KeyboardActionType.APPLY_OPERATOR)
        case "Enter":
            if event.has_operator_suggestions:
                return KeyboardAction(KeyboardActionType.APPLY_OPERATOR)
            if event.has_active_result:
                return KeyboardAction(KeyboardActionType.OPEN_RESULT)
            return KeyboardAction(KeyboardActionType.COMMIT_QUERY)
        case "Escape":
            if event.has_operator_suggestions:
                return KeyboardAction(KeyboardActionType.DISMISS_OPERATOR)
            if event.has_active_result:
                return KeyboardAction(KeyboardActionType.CLEAR_ACTIVE_RESULT)
            if event.has_query:
                return KeyboardAction(KeyboardActionType.CLEAR_QUERY)
    return NO_ACTION


def step_circular_index(length: int, current: int, direction: int) -> int:
    """Move ``current`` one step in ``direction``, wrapping around ``length``.

    Returns -1 for an empty list. From no selection (``current < 0``) stepping
    forward lands on the first item and stepping back on the last.
    """
    if length <= 0:
        return -1
    if current < 0:
        return 0 if direction > 0 else length - 1
    return (current + direction) % length
