"""Models for structural edits and key transforms."""

from enum import Enum


class EditAction(str, Enum):
    """Structural edits offered by the edit tool."""

    SET = "set"
    DELETE = "delete"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    ADD_ITEM = "add_item"


class MoveDirection(str, Enum):
    """Direction in which an array item swaps places with its neighbour."""

    UP = "up"
    DOWN = "down"

    @property
    def offset(self) -> int:
        return -1 if self is MoveDirection.UP else 1


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class KeyCase(str, Enum):
    """Naming conventions object keys can be converted to."""

    CAMEL = "camelCase"
    PASCAL = "PascalCase"
    SNAKE = "snake_case"
    KEBAB = "kebab-case"
    UPPER = "UPPER_CASE"
    NONE = "none"
