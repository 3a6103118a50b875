"""Structural and textual comparison of two documents.

Ordering of structural changes is deterministic:

- objects: removed keys, then added keys, then common keys (recursed), each
  group in document order
- arrays: by index; common positions first, then removals or additions at the tail
- a change of type replaces the whole node
- int and float compare numerically
"""

import difflib
from typing import Any, List

from ..models.core import JsonType, PathAddress, json_type_of
from ..models.diff import ChangeKind, DocumentChange


def diff_documents(old: Any, new: Any) -> List[DocumentChange]:
    """List the changes that turn ``old`` into ``new``."""
    changes: List[DocumentChange] = []
    _diff(old, new, PathAddress.root(), changes)
    return changes


def _diff(old: Any, new: Any, address: PathAddress, changes: List[DocumentChange]) -> None:
    old_type, new_type = json_type_of(old), json_type_of(new)

    if old_type is not new_type:
        changes.append(DocumentChange(kind=ChangeKind.CHANGED, address=address, old_value=old, new_value=new))
        return

    if old_type is JsonType.OBJECT:
        for key in old:
            if key not in new:
                changes.append(DocumentChange(kind=ChangeKind.REMOVED, address=address.key(key), old_value=old[key]))
        for key in new:
            if key not in old:
                changes.append(DocumentChange(kind=ChangeKind.ADDED, address=address.key(key), new_value=new[key]))
        for key in old:
            if key in new:
                _diff(old[key], new[key], address.key(key), changes)
        return

    if old_type is JsonType.ARRAY:
        common = min(len(old), len(new))
        for index in range(common):
            _diff(old[index], new[index], address.item(index), changes)
        for index in range(common, len(old)):
            changes.append(DocumentChange(kind=ChangeKind.REMOVED, address=address.item(index), old_value=old[index]))
        for index in range(common, len(new)):
            changes.append(DocumentChange(kind=ChangeKind.ADDED, address=address.item(index), new_value=new[index]))
        return

    if old != new:
        changes.append(DocumentChange(kind=ChangeKind.CHANGED, address=address, old_value=old, new_value=new))


def diff_text(old_text: str, new_text: str, old_label: str = "original", new_label: str = "modified",
              context: int = 3) -> str:
    """Unified line diff of two renderings; empty when they are identical."""
    lines = difflib.unified_diff(
        old_text.splitlines(),
        new_text.splitlines(),
        fromfile=old_label,
        tofile=new_label,
        n=context,
        lineterm="",
    )
    return "\n".join(lines)
