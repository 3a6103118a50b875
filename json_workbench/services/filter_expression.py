"""Parser and evaluator for filter expressions.

Supported syntax::

    $                   document root
    .name  ['name']     child property ("name" quoting works too)
    .*  [*]             every child
    ..name  ..*  ..[]   recursive descent
    [0]  [-1]  [0,2]    indices (negative counts from the end), unions
    [1:5:2]             slices with Python semantics
    ['a','b']           property unions
    [?(predicate)]      keep the children for which the predicate holds

Predicates combine operands (``@`` for the child under test, ``$`` for the
root, numbers, strings, ``true``, ``false``, ``null``, ``/regex/flags``) with
``== != > >= < <=``, ``=~``, ``!``, ``&&``, ``||`` and parentheses. A bare
operand holds when it exists and is truthy.

Results are ``(value, path)`` pairs in document order, where ``path`` is the
bracket-quoted form ``$['store']['books'][0]``.
"""

import logging
import re
from functools import lru_cache
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

from ..models.core import JsonType, json_type_of
from ..models.errors import QuerySyntaxError

logger = logging.getLogger(__name__)

Parts = Tuple[Union[str, int], ...]
Node = Tuple[Any, Parts]

_NAME = re.compile(r"[^\s.\[\]()=!<>&|,'\"~/]+")
_INT = re.compile(r"-?\d+")
_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_KEYWORD = re.compile(r"(true|false|null)\b")
_COMPARISON = re.compile(r"===|!==|==|!=|>=|<=|=~|>|<")
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "g": 0, "u": 0, "y": 0}
_STRING_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f",
    "/": "/", "\\": "\\", "'": "'", '"': '"',
}
_KEYWORD_VALUES = {"true": True, "false": False, "null": None}


class _Missing:
    def __repr__(self):
        return "<missing>"


MISSING = _Missing()


def _truthy(value: Any) -> bool:
    """Truthiness of a JSON value; empty arrays and objects count as true."""
    if value is MISSING or value is None or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == value and value != 0
    if isinstance(value, str):
        return value != ""
    return True


def _children(value: Any, parts: Parts) -> Iterator[Node]:
    if isinstance(value, list):
        for index, item in enumerate(value):
            yield item, parts + (index,)
    elif isinstance(value, dict):
        for name, item in value.items():
            yield item, parts + (name,)


# Selectors ------------------------------------------------------------------

class _Name:
    def __init__(self, names: Sequence[str]):
        self.names = tuple(names)

    def select(self, value: Any, parts: Parts, root: Any) -> Iterator[Node]:
        if isinstance(value, dict):
            for name in self.names:
                if name in value:
                    yield value[name], parts + (name,)


class _Wildcard:
    def select(self, value: Any, parts: Parts, root: Any) -> Iterator[Node]:
        return _children(value, parts)


class _Indices:
    def __init__(self, indices: Sequence[int]):
        self.indices = tuple(indices)

    def select(self, value: Any, parts: Parts, root: Any) -> Iterator[Node]:
        if not isinstance(value, list):
            return
        length = len(value)
        for index in self.indices:
            position = index + length if index < 0 else index
            if 0 <= position < length:
                yield value[position], parts + (position,)


class _Slice:
    def __init__(self, start: Optional[int], stop: Optional[int], step: Optional[int]):
        self.bounds = slice(start, stop, step)

    def select(self, value: Any, parts: Parts, root: Any) -> Iterator[Node]:
        if not isinstance(value, list):
            return
        for position in range(*self.bounds.indices(len(value))):
            yield value[position], parts + (position,)


class _Filter:
    def __init__(self, predicate: "_Expression"):
        self.predicate = predicate

    def select(self, value: Any, parts: Parts, root: Any) -> Iterator[Node]:
        for child, child_parts in _children(value, parts):
            if self.predicate.test(child, root):
                yield child, child_parts


class _Descendants:
    """Applies ``inner`` to a node and every node below it, in document order."""

    def __init__(self, inner):
        self.inner = inner

    def select(self, value: Any, parts: Parts, root: Any) -> Iterator[Node]:
        stack: List[Node] = [(value, parts)]
        while stack:
            node, node_parts = stack.pop()
            yield from self.inner.select(node, node_parts, root)
            stack.extend(reversed(list(_children(node, node_parts))))


def _apply(selectors: Sequence[Any], value: Any, root: Any) -> List[Node]:
    current: List[Node] = [(value, ())]
    for selector in selectors:
        selected: List[Node] = []
        for node, parts in current:
            selected.extend(selector.select(node, parts, root))
        current = selected
    return current


# Predicate expressions --------------------------------------------------------

class _Literal:
    def __init__(self, value: Any):
        self.value = value

    def resolve(self, current: Any, root: Any) -> Any:
        return self.value


class _PathOperand:
    def __init__(self, anchor: str, selectors: Sequence[Any]):
        self.anchor = anchor
        self.selectors = tuple(selectors)

    def resolve(self, current: Any, root: Any) -> Any:
        start = current if self.anchor == "@" else root
        found = _apply(self.selectors, start, root)
        return found[0][0] if found else MISSING


class _Regex:
    def __init__(self, pattern: "re.Pattern"):
        self.pattern = pattern


class _Expression:
    def test(self, current: Any, root: Any) -> bool:
        raise NotImplementedError


class _Or(_Expression):
    def __init__(self, left: _Expression, right: _Expression):
        self.left, self.right = left, right

    def test(self, current, root):
        return self.left.test(current, root) or self.right.test(current, root)


class _And(_Expression):
    def __init__(self, left: _Expression, right: _Expression):
        self.left, self.right = left, right

    def test(self, current, root):
        return self.left.test(current, root) and self.right.test(current, root)


class _Not(_Expression):
    def __init__(self, operand: _Expression):
        self.operand = operand

    def test(self, current, root):
        return not self.operand.test(current, root)


class _Truthy(_Expression):
    def __init__(self, operand):
        self.operand = operand

    def test(self, current, root):
        return _truthy(self.operand.resolve(current, root))


def _same_value(left: Any, right: Any) -> bool:
    if left is MISSING or right is MISSING:
        return False
    return json_type_of(left) == json_type_of(right) and left == right


def _ordered(left: Any, right: Any) -> bool:
    if left is MISSING or right is MISSING:
        return False
    kind = json_type_of(left)
    return kind in (JsonType.NUMBER, JsonType.STRING) and kind == json_type_of(right)


def _regex_subject(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if value is MISSING or value is None or isinstance(value, (list, dict)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return repr(value) if isinstance(value, float) else str(value)


class _Compare(_Expression):
    def __init__(self, operator: str, left, right):
        self.operator, self.left, self.right = operator, left, right

    def test(self, current, root):
        left = self.left.resolve(current, root)
        if self.operator == "=~":
            subject = _regex_subject(left)
            return subject is not None and self.right.pattern.search(subject) is not None

        right = self.right.resolve(current, root)
        if self.operator == "==":
            return _same_value(left, right)
        if self.operator == "!=":
            return not _same_value(left, right)
        if not _ordered(left, right):
            return False
        if self.operator == ">":
            return left > right
        if self.operator == ">=":
            return left >= right
        if self.operator == "<":
            return left < right
        return left <= right


# Parser -------------------------------------------------------------------------

class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str, position: Optional[int] = None) -> QuerySyntaxError:
        position = self.pos if position is None else position
        return QuerySyntaxError(f"{message} at position {position}", self.text, position)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def expect(self, token: str) -> None:
        self.skip_ws()
        if not self.text.startswith(token, self.pos):
            found = self.peek()
            raise self.error(f"Expected '{token}' but found {repr(found) if found else 'end of expression'}")
        self.pos += len(token)

    def parse_query(self) -> List[Any]:
        self.skip_ws()
        if self.peek() == "$":
            self.pos += 1
        elif self.peek() not in (".", "["):
            raise self.error("Expression must start with '$'")
        selectors = self.parse_segments()
        self.skip_ws()
        if self.pos < len(self.text):
            raise self.error(f"Unexpected character {self.peek()!r}")
        return selectors

    def parse_segments(self) -> List[Any]:
        selectors: List[Any] = []
        while True:
            if self.text.startswith("..", self.pos):
                self.pos += 2
                if self.peek() == "[":
                    inner = self.parse_bracket()
                else:
                    inner = self.parse_member()
                selectors.append(_Descendants(inner))
            elif self.peek() == ".":
                self.pos += 1
                selectors.append(self.parse_member())
            elif self.peek() == "[":
                selectors.append(self.parse_bracket())
            else:
                return selectors

    def parse_member(self):
        if self.peek() == "*":
            self.pos += 1
            return _Wildcard()
        match = _NAME.match(self.text, self.pos)
        if not match:
            raise self.error("Expected a property name")
        self.pos = match.end()
        return _Name((match.group(),))

    def parse_bracket(self):
        start = self.pos
        self.pos += 1
        self.skip_ws()
        ch = self.peek()

        if ch == "*":
            self.pos += 1
            selector = _Wildcard()
        elif ch == "?":
            self.pos += 1
            selector = _Filter(self.parse_or())
        elif ch in ("'", '"'):
            names = [self.read_string()]
            self.skip_ws()
            while self.peek() == ",":
                self.pos += 1
                self.skip_ws()
                if self.peek() not in ("'", '"'):
                    raise self.error("Expected a quoted property name")
                names.append(self.read_string())
                self.skip_ws()
            selector = _Name(names)
        elif ch == "-" or ch == ":" or ch.isdigit():
            selector = self.parse_index_or_slice()
        elif ch == "]":
            raise self.error("Empty brackets", start)
        else:
            match = _NAME.match(self.text, self.pos)
            if not match:
                raise self.error(f"Unexpected character {ch!r}" if ch else "Unclosed '['")
            self.pos = match.end()
            selector = _Name((match.group(),))

        self.expect("]")
        return selector

    def read_int(self) -> Optional[int]:
        self.skip_ws()
        match = _INT.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        self.skip_ws()
        return int(match.group())

    def parse_index_or_slice(self):
        bounds = [self.read_int()]
        while self.peek() == ":" and len(bounds) < 3:
            self.pos += 1
            bounds.append(self.read_int())

        if len(bounds) > 1:
            start, stop = bounds[0], bounds[1]
            step = bounds[2] if len(bounds) == 3 else None
            if step == 0:
                raise self.error("Slice step cannot be zero")
            return _Slice(start, stop, step)

        if bounds[0] is None:
            raise self.error("Expected an index")
        indices = [bounds[0]]
        while self.peek() == ",":
            self.pos += 1
            index = self.read_int()
            if index is None:
                raise self.error("Expected an index")
            indices.append(index)
        return _Indices(indices)

    def parse_or(self) -> _Expression:
        left = self.parse_and()
        while True:
            self.skip_ws()
            if not self.text.startswith("||", self.pos):
                return left
            self.pos += 2
            left = _Or(left, self.parse_and())

    def parse_and(self) -> _Expression:
        left = self.parse_unary()
        while True:
            self.skip_ws()
            if not self.text.startswith("&&", self.pos):
                return left
            self.pos += 2
            left = _And(left, self.parse_unary())

    def parse_unary(self) -> _Expression:
        self.skip_ws()
        if self.peek() == "!" and self.peek(1) != "=":
            self.pos += 1
            return _Not(self.parse_unary())
        return self.parse_comparison()

    def parse_comparison(self) -> _Expression:
        self.skip_ws()
        if self.peek() == "(":
            self.pos += 1
            inner = self.parse_or()
            self.expect(")")
            return inner

        operand_start = self.pos
        left = self.parse_operand()
        if isinstance(left, _Regex):
            raise self.error("A regular expression can only follow '=~'", operand_start)

        self.skip_ws()
        match = _COMPARISON.match(self.text, self.pos)
        if not match:
            return _Truthy(left)
        operator = {"===": "==", "!==": "!="}.get(match.group(), match.group())
        self.pos = match.end()

        self.skip_ws()
        right_start = self.pos
        right = self.parse_operand()
        if operator == "=~":
            if isinstance(right, _Literal) and isinstance(right.value, str):
                right = _Regex(self.compile_regex(right.value, 0, right_start))
            elif not isinstance(right, _Regex):
                raise self.error("'=~' needs a regular expression or a string pattern", right_start)
        elif isinstance(right, _Regex):
            raise self.error("A regular expression can only follow '=~'", right_start)
        return _Compare(operator, left, right)

    def parse_operand(self):
        self.skip_ws()
        ch = self.peek()
        if ch in ("@", "$"):
            self.pos += 1
            return _PathOperand(ch, self.parse_segments())
        if ch in ("'", '"'):
            return _Literal(self.read_string())
        if ch == "/":
            return self.read_regex()
        match = _NUMBER.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            literal = match.group()
            if any(marker in literal for marker in ".eE"):
                return _Literal(float(literal))
            return _Literal(int(literal))
        match = _KEYWORD.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            return _Literal(_KEYWORD_VALUES[match.group()])
        if not ch:
            raise self.error("Unexpected end of expression")
        raise self.error(f"Expected a value but found {ch!r}")

    def read_string(self) -> str:
        start = self.pos
        quote = self.text[self.pos]
        self.pos += 1
        chars: List[str] = []
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(chars)
            if ch == "\\" and self.pos + 1 < len(self.text):
                escape = self.text[self.pos + 1]
                if escape == "u":
                    code = self.text[self.pos + 2:self.pos + 6]
                    if len(code) != 4 or not all(c in "0123456789abcdefABCDEF" for c in code):
                        raise self.error("Invalid unicode escape", self.pos)
                    chars.append(chr(int(code, 16)))
                    self.pos += 6
                    continue
                chars.append(_STRING_ESCAPES.get(escape, escape))
                self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1
        raise self.error("Unterminated string", start)

    def read_regex(self) -> _Regex:
        start = self.pos
        self.pos += 1
        body_start = self.pos
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == "\\":
                self.pos += 2
                continue
            if ch == "/":
                break
            self.pos += 1
        else:
            raise self.error("Unterminated regular expression", start)

        body = self.text[body_start:self.pos]
        self.pos += 1
        flags = 0
        while self.peek().isalpha():
            letter = self.peek()
            if letter not in _REGEX_FLAGS:
                raise self.error(f"Unknown regular expression flag {letter!r}")
            flags |= _REGEX_FLAGS[letter]
            self.pos += 1
        return _Regex(self.compile_regex(body, flags, start))

    def compile_regex(self, pattern: str, flags: int, position: int) -> "re.Pattern":
        try:
            return re.compile(pattern, flags)
        except re.error as e:
            raise self.error(f"Invalid regular expression: {e}", position)


class FilterExpression:
    """A parsed filter expression, reusable across documents."""

    def __init__(self, text: str):
        self.text = text
        try:
            self.selectors = _Parser(text).parse_query()
        except RecursionError:
            raise QuerySyntaxError("Expression is too deeply nested", text, 0) from None

    def find(self, document: Any) -> List[Node]:
        """Return ``(value, parts)`` pairs in document order."""
        return _apply(self.selectors, document, document)


@lru_cache(maxsize=128)
def compile_expression(text: str) -> FilterExpression:
    """Parse ``text`` once; repeated expressions are served from a cache.

    Raises:
        QuerySyntaxError: If the expression cannot be parsed
    """
    return FilterExpression(text)


def render_path(parts: Parts) -> str:
    """Render path parts in bracket-quoted form, e.g. ``$['a'][0]``."""
    rendered = ["$"]
    for part in parts:
        if isinstance(part, int):
            rendered.append(f"[{part}]")
        else:
            escaped = part.replace("\\", "\\\\").replace("'", "\\'")
            rendered.append(f"['{escaped}']")
    return "".join(rendered)


def evaluate(document: Any, text: str) -> List[Tuple[Any, str]]:
    """Evaluate ``text`` against ``document``.

    Returns:
        ``(value, path)`` pairs in document order, with bracket-quoted paths

    Raises:
        QuerySyntaxError: If the expression cannot be parsed
    """
    expression = compile_expression(text)
    found = expression.find(document)
    logger.debug("Expression %r matched %d nodes", text, len(found))
    return [(value, render_path(parts)) for value, parts in found]
