"""Query execution: textual filter expressions and structured conditions.

Structured conditions are compiled to a filter expression first, so both
modes run through the same evaluator.
"""

import logging
import re
from typing import Any, List, Optional, Sequence

from ..models.core import IndexSegment
from ..models.errors import MalformedPath, QuerySyntaxError, WorkbenchException
from ..models.query import Combinator, QueryCondition, QueryMatch, QueryOperator, QueryResult
from . import filter_expression
from .path_address import from_foreign_path_notation, parse_path

logger = logging.getLogger(__name__)

EMPTY_EXPRESSION_MESSAGE = "Please enter a filter expression"

_DECIMAL_LITERAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_RADIX_LITERAL = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_INFINITIES = {"Infinity": "1e999", "+Infinity": "1e999", "-Infinity": "-1e999"}
_PLAIN_PROPERTY = re.compile(r"^[^\s.\[\]()=!<>&|,'\"~/]+$")
_BARE_LITERALS = ("true", "false", "null")


def quote_literal(text: str) -> str:
    """Double-quote ``text`` as a filter-expression string literal."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def numeric_literal(literal: str) -> Optional[str]:
    """Number text the filter parser reads, or None when ``literal`` is not numeric.

    Accepts what a typed-in number usually looks like: surrounding blanks, a
    leading ``+``, ``0x``/``0o``/``0b`` integers and ``Infinity``. Radix
    integers become decimal; infinities become ``1e999``, which parses to an
    infinite float. Blank text is not a number.
    """
    text = literal.strip()
    if text in _INFINITIES:
        return _INFINITIES[text]
    if _RADIX_LITERAL.match(text):
        return str(int(text, 0))
    if _DECIMAL_LITERAL.match(text):
        return text.lstrip("+")
    return None


def _format_literal(literal: str) -> str:
    if literal in _BARE_LITERALS:
        return literal
    number = numeric_literal(literal)
    return quote_literal(literal) if number is None else number


def member_text(name: str) -> str:
    """Render a child step: ``.name``, or ``["name"]`` when the name needs quoting."""
    if _PLAIN_PROPERTY.match(name) and name != "*":
        return f".{name}"
    return f"[{quote_literal(name)}]"


def _operand_path(property_path: str) -> str:
    """``@`` followed by the steps of ``property_path``; ``tags[0]`` indexes an array."""
    try:
        segments = parse_path(property_path).segments
    except MalformedPath:
        return "@" + "".join(member_text(name) for name in property_path.split("."))
    return "@" + "".join(
        f"[{segment.index}]" if isinstance(segment, IndexSegment) else member_text(segment.name)
        for segment in segments
    )


def _compile_condition(condition: QueryCondition) -> str:
    operand = _operand_path(condition.property_path)
    if condition.operator is QueryOperator.CONTAINS:
        pattern = condition.literal.replace("/", "\\/")
        return f"{operand} =~ /{pattern}/i"
    if condition.operator is QueryOperator.REGEX:
        return f"{operand} =~ {quote_literal(condition.literal)}"
    return f"{operand} {condition.operator.token} {_format_literal(condition.literal)}"


def compile_conditions(
    conditions: Sequence[QueryCondition],
    combinator: Combinator = Combinator.AND,
) -> str:
    """Compile structured conditions into one filter expression.

    ``price > 100`` becomes ``$[?(@.price > 100)]``. Literals that read as
    numbers (see :func:`numeric_literal`), ``true``, ``false`` or ``null``
    stay unquoted; anything else is double-quoted. Property paths may index
    arrays, as in ``tags[0]``. ``contains`` renders as a case-insensitive regex literal.
    An empty condition list selects every root-level item (``$[*]``).
    """
    if not conditions:
        return "$[*]"
    joined = combinator.token.join(_compile_condition(condition) for condition in conditions)
    return f"$[?({joined})]"


def execute(document: Any, expression: str) -> List[QueryMatch]:
    """Evaluate ``expression`` against ``document``.

    Matches come back in document order, each with the canonical address of
    the matched node. No matches is an empty list.

    Raises:
        QuerySyntaxError: If the expression is empty or cannot be parsed
    """
    if not expression or not expression.strip():
        raise QuerySyntaxError(EMPTY_EXPRESSION_MESSAGE, expression or "", 0)

    matches = []
    for value, foreign_path in filter_expression.evaluate(document, expression.strip()):
        matches.append(QueryMatch(
            value=value,
            address=from_foreign_path_notation(foreign_path),
            foreign_path=foreign_path,
        ))
    return matches


def run_query(document: Any, expression: str) -> QueryResult:
    """Evaluate ``expression`` and report failures in the result instead of raising."""
    if not expression or not expression.strip():
        return QueryResult(success=False, expression=expression or "", error=EMPTY_EXPRESSION_MESSAGE)

    try:
        matches = execute(document, expression)
    except WorkbenchException as e:
        logger.debug("Query %r failed: %s", expression, e.message)
        return QueryResult(success=False, expression=expression, error=e.message)
    except RecursionError:
        return QueryResult(success=False, expression=expression, error="Document is too deeply nested to query")

    return QueryResult(success=True, expression=expression, matches=matches)


def run_conditions(
    document: Any,
    conditions: Sequence[QueryCondition],
    combinator: Combinator = Combinator.AND,
) -> QueryResult:
    """Compile structured conditions and run them like a typed expression."""
    return run_query(document, compile_conditions(conditions, combinator))
