"""Document services for the JSON workbench."""

from .path_address import (
    parse_path,
    path_to_text,
    is_prefix_of,
    resolve_path,
    path_exists,
    to_foreign_path_notation,
    from_foreign_path_notation,
)
from .schema_inferencer import (
    infer_type,
    validate_type,
    infer_schema,
    infer_schema_from_sample,
    default_value,
    synthesize,
)
from .object_identity import get_identifier_key, get_object_identifier, get_object_copy_label
from .structural_analyzer import analyze
from .query_engine import compile_conditions, execute, run_query, run_conditions
from .query_suggestions import available_properties, suggest_examples
from .serializer import serialize, deserialize, serialize_with_line_map, SerializedDocument
from .text_range_mapper import find_line_range
from .version_history import VersionHistory
from .document_diff import diff_documents, diff_text
from .document_search import search_document
from .document_editor import set_value, delete_node, move_item, new_item, add_item, copy_sources, sort_array
from .key_transforms import transform_case, transform_keys, change_key_case, rename_keys
from .session_storage import SessionStorageInterface, InMemorySessionStorage, RedisSessionStorage
from .session_store import SessionStore

__all__ = [
    "parse_path",
    "path_to_text",
    "is_prefix_of",
    "resolve_path",
    "path_exists",
    "to_foreign_path_notation",
    "from_foreign_path_notation",
    "infer_type",
    "validate_type",
    "infer_schema",
    "infer_schema_from_sample",
    "default_value",
    "synthesize",
    "get_identifier_key",
    "get_object_identifier",
    "get_object_copy_label",
    "analyze",
    "compile_conditions",
    "execute",
    "run_query",
    "run_conditions",
    "available_properties",
    "suggest_examples",
    "serialize",
    "deserialize",
    "serialize_with_line_map",
    "SerializedDocument",
    "find_line_range",
    "VersionHistory",
    "diff_documents",
    "diff_text",
    "search_document",
    "set_value",
    "delete_node",
    "move_item",
    "new_item",
    "add_item",
    "copy_sources",
    "sort_array",
    "transform_case",
    "transform_keys",
    "change_key_case",
    "rename_keys",
    "SessionStorageInterface",
    "InMemorySessionStorage",
    "RedisSessionStorage",
    "SessionStore",
]
