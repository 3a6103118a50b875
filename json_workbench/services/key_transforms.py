"""Bulk transforms of object keys: naming-convention changes and renames."""

import logging
import re
from typing import Any, Callable

from ..models.edit import KeyCase
from ..models.errors import InvalidEdit

logger = logging.getLogger(__name__)

_SEPARATED_CHAR = re.compile(r"[-_\s](.)")
_UPPER_CHAR = re.compile(r"([A-Z])")


def to_camel_case(key: str) -> str:
    joined = _SEPARATED_CHAR.sub(lambda m: m.group(1).upper(), key)
    return joined[:1].lower() + joined[1:]


def to_pascal_case(key: str) -> str:
    joined = _SEPARATED_CHAR.sub(lambda m: m.group(1).upper(), key)
    return joined[:1].upper() + joined[1:]


def _separate(key: str, separator: str, replaced: str) -> str:
    text = _UPPER_CHAR.sub(separator + r"\1", key)
    text = re.sub(replaced, separator, text)
    if text.startswith(separator):
        text = text[1:]
    return text.lower()


def to_snake_case(key: str) -> str:
    return _separate(key, "_", r"[-\s]")


def to_kebab_case(key: str) -> str:
    return _separate(key, "-", r"[_\s]")


def to_upper_case(key: str) -> str:
    return to_snake_case(key).upper()


_CASE_CONVERTERS = {
    KeyCase.CAMEL: to_camel_case,
    KeyCase.PASCAL: to_pascal_case,
    KeyCase.SNAKE: to_snake_case,
    KeyCase.KEBAB: to_kebab_case,
    KeyCase.UPPER: to_upper_case,
}


def transform_case(key: str, case: KeyCase) -> str:
    """Rewrite ``key`` in the naming convention ``case``; ``NONE`` keeps it."""
    converter = _CASE_CONVERTERS.get(case)
    return key if converter is None else converter(key)


def transform_keys(document: Any, transformer: Callable[[str], str]) -> Any:
    """Copy of ``document`` with every object key passed through ``transformer``.

    When two keys of one object map to the same new key, the later value wins
    and keeps the position of the first.
    """
    if isinstance(document, list):
        return [transform_keys(item, transformer) for item in document]
    if isinstance(document, dict):
        return {transformer(key): transform_keys(value, transformer) for key, value in document.items()}
    return document


def change_key_case(document: Any, case: KeyCase) -> Any:
    """Convert every key of every object to ``case``."""
    return transform_keys(document, lambda key: transform_case(key, case))


def rename_keys(
    document: Any,
    find: str = "",
    replace: str = "",
    use_regex: bool = False,
    prefix: str = "",
    suffix: str = "",
) -> Any:
    """Rename every key: replace all occurrences of ``find``, then add ``prefix`` and ``suffix``.

    Args:
        document: Any JSON value
        find: Text, or a regular expression when ``use_regex`` is set; empty skips replacing
        replace: Replacement; with ``use_regex`` it may refer to groups as ``\\1``
        use_regex: Treat ``find`` as a regular expression
        prefix: Text put in front of every key
        suffix: Text put after every key

    Raises:
        InvalidEdit: If ``find`` is not a valid regular expression or ``replace``
            refers to a group the pattern does not have
    """
    pattern = None
    if find and use_regex:
        try:
            pattern = re.compile(find)
        except re.error as e:
            raise InvalidEdit(f"Invalid regular expression {find!r}: {e}", details={"pattern": find})

    def rename(key: str) -> str:
        if pattern is not None:
            key = pattern.sub(replace, key)
        elif find:
            key = key.replace(find, replace)
        return f"{prefix}{key}{suffix}"

    try:
        return transform_keys(document, rename)
    except re.error as e:
        raise InvalidEdit(f"Invalid replacement {replace!r}: {e}", details={"replacement": replace})
