"""Structural analysis of JSON documents.

The analyzer walks a document once, depth-first and pre-order, collecting
statistics and structural anomalies at the same time. The walk uses an explicit
stack, so very deep documents do not hit the interpreter recursion limit.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config.models import AnalyzerConfig
from ..models.analysis import (
    AnalysisIssue,
    AnalysisResult,
    AnalysisStats,
    IssueCategory,
    Severity,
)
from ..models.core import JsonType, PathAddress, json_type_of
from ..models.errors import UnrepresentableDocument

logger = logging.getLogger(__name__)

Parts = Tuple[Union[str, int], ...]

# Marks the point where a container's subtree has been fully visited.
_EXIT = object()


def _describe_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


class _Walk:
    """State for one analysis call."""

    def __init__(self, config: AnalyzerConfig):
        self.config = config
        self.issues: List[AnalysisIssue] = []
        self.stats = AnalysisStats()
        self.key_frequency: Dict[str, int] = {}
        self.on_path: set = set()

    def report(
        self,
        category: IssueCategory,
        severity: Severity,
        parts: Parts,
        message: str,
        detail: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        self.issues.append(AnalysisIssue(
            category=category,
            severity=severity,
            address=PathAddress.of(*parts),
            message=message,
            detail=detail,
            key=key,
        ))

    def run(self, document: Any) -> None:
        stack: List[Any] = [(document, (), 0, False)]

        while stack:
            frame = stack.pop()
            if frame[0] is _EXIT:
                self.on_path.discard(frame[1])
                continue

            value, parts, depth, is_property = frame
            kind = json_type_of(value)

            if is_property and kind is JsonType.NULL:
                self.report(
                    IssueCategory.NULL_VALUE, Severity.INFO, parts,
                    "Property has null value",
                    "Consider removing or providing a default value",
                    key=parts[-1],
                )

            self.stats.max_depth = max(self.stats.max_depth, depth)
            if depth > self.config.max_depth:
                self.report(
                    IssueCategory.DEEP_NESTING, Severity.WARNING, parts,
                    f"Deeply nested structure (depth: {depth})",
                    "Consider flattening the data structure for better performance",
                )

            if kind is JsonType.ARRAY:
                self._enter(value, parts)
                self._visit_array(value, parts)
                stack.append((_EXIT, id(value)))
                for index in range(len(value) - 1, -1, -1):
                    stack.append((value[index], parts + (index,), depth + 1, False))
            elif kind is JsonType.OBJECT:
                self._enter(value, parts)
                self._visit_object(value, parts)
                stack.append((_EXIT, id(value)))
                for name in reversed(list(value)):
                    stack.append((value[name], parts + (name,), depth + 1, True))
            elif kind is JsonType.STRING:
                self.stats.largest_string = max(self.stats.largest_string, len(value))
                if len(value) > self.config.max_string_length:
                    self.report(
                        IssueCategory.LARGE_STRING, Severity.WARNING, parts,
                        f"Large string value ({len(value)} characters)",
                        "Consider storing large text in separate files or databases",
                    )

        for key, count in self.key_frequency.items():
            if count > self.config.repeated_key_threshold:
                self.report(
                    IssueCategory.REPEATED_KEY, Severity.INFO, (),
                    f'Key "{key}" appears {count} times',
                    "High repetition might indicate denormalized data",
                    key=key,
                )

    def _enter(self, container: Any, parts: Parts) -> None:
        marker = id(container)
        if marker in self.on_path:
            at = str(PathAddress.of(*parts))
            raise UnrepresentableDocument(
                f"Document contains a reference cycle at '{at}'",
                details={"at": at}
            )
        self.on_path.add(marker)

    def _visit_array(self, array: List[Any], parts: Parts) -> None:
        self.stats.total_arrays += 1
        self.stats.largest_array = max(self.stats.largest_array, len(array))

        if len(array) > self.config.max_array_length:
            self.report(
                IssueCategory.LARGE_ARRAY, Severity.WARNING, parts,
                f"Large array with {len(array)} items",
                "Consider pagination or chunking for better performance",
            )

        if not array:
            self.report(
                IssueCategory.EMPTY_STRUCTURE, Severity.INFO, parts,
                "Empty array", "This array contains no items",
            )
            return

        if isinstance(array[0], dict):
            self._check_duplicate_identifiers(array, parts)
            self._check_consistent_keys(array, parts)

    def _check_duplicate_identifiers(self, array: List[Any], parts: Parts) -> None:
        # Only the first identifier key present in element 0 is inspected.
        id_field = next((key for key in self.config.identifier_keys if key in array[0]), None)
        if id_field is None:
            return

        seen = set()
        duplicates: List[Tuple[Any, int]] = []
        for index, item in enumerate(array):
            if not isinstance(item, dict) or id_field not in item:
                continue
            value = item[id_field]
            kind = json_type_of(value)
            if kind in (JsonType.NULL, JsonType.ARRAY, JsonType.OBJECT):
                continue
            marker = (kind, value)
            if marker in seen:
                duplicates.append((value, index))
            seen.add(marker)

        if not duplicates:
            return

        preview = self.config.duplicate_preview
        listed = ", ".join(f"{_describe_value(value)} (index {index})" for value, index in duplicates[:preview])
        suffix = "..." if len(duplicates) > preview else ""
        self.report(
            IssueCategory.DUPLICATE_IDENTIFIER, Severity.ERROR, parts,
            f"Found {len(duplicates)} duplicate {id_field} value(s)",
            f"Duplicates: {listed}{suffix}",
            key=id_field,
        )

    def _check_consistent_keys(self, array: List[Any], parts: Parts) -> None:
        expected = sorted(array[0])
        preview = self.config.key_preview
        shown = ", ".join(expected[:preview]) if expected else "(no keys)"
        suffix = "..." if len(expected) > preview else ""

        for index, item in enumerate(array):
            if isinstance(item, dict) and sorted(item) != expected:
                self.report(
                    IssueCategory.INCONSISTENT_STRUCTURE, Severity.WARNING, parts + (index,),
                    "Object has different keys than first item",
                    f"Expected: {shown}{suffix}",
                )

    def _visit_object(self, obj: Dict[str, Any], parts: Parts) -> None:
        self.stats.total_objects += 1

        if not obj:
            self.report(
                IssueCategory.EMPTY_STRUCTURE, Severity.INFO, parts,
                "Empty object", "This object has no properties",
            )
            return

        self.stats.total_keys += len(obj)
        for key in obj:
            if not isinstance(key, str):
                raise UnrepresentableDocument(
                    f"Object key {key!r} is not a string",
                    details={"at": str(PathAddress.of(*parts)), "key_type": type(key).__name__}
                )
            self.key_frequency[key] = self.key_frequency.get(key, 0) + 1


def analyze(document: Any, config: Optional[AnalyzerConfig] = None) -> AnalysisResult:
    """Walk ``document`` and report statistics and structural issues.

    Issues are ordered by severity (errors first) and, within one severity,
    by the order in which they were found. The same input always yields the
    same list.

    Args:
        document: Parsed JSON value (dict, list or scalar)
        config: Thresholds; defaults to ``AnalyzerConfig()``

    Returns:
        AnalysisResult with ordered issues and statistics

    Raises:
        UnrepresentableDocument: If the value contains a reference cycle or a
            non-JSON type
    """
    walk = _Walk(config or AnalyzerConfig())
    walk.run(document)

    issues = sorted(walk.issues, key=lambda issue: issue.severity.rank)
    logger.debug(
        "Analyzed document: %d issues, %d objects, %d arrays",
        len(issues), walk.stats.total_objects, walk.stats.total_arrays
    )
    return AnalysisResult(issues=issues, stats=walk.stats)
