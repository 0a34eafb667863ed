"""JSON key merging and text patching.

Generic primitives the engine uses for files railctl only partly owns:

- JSON documents where railctl owns a declared set of dot-path keys. The
  schema's merge/unmerge functions compute the new document, and the
  result is clipped back to the declared keys so a careless merge
  function can never touch anything else.
- Text files where railctl prepends or appends a fixed block, detected by
  a plain substring marker.
"""

import copy
import json
import logging
from typing import TYPE_CHECKING, Any

from railctl.models.schema import JsonDocument, JsonMergeDefinition, PatchOperation, TextPatchDefinition

if TYPE_CHECKING:
    from railctl.core.context import ProjectContext

logger = logging.getLogger(__name__)

DEFAULT_INDENT = 2


class MalformedJsonError(Exception):
    """Raised when a merge target is not a JSON object."""


# =============================================================================
# Dot-path helpers
# =============================================================================


def _parts(path: str) -> list[str]:
    return path.split(".")


def has_path(doc: JsonDocument, path: str) -> bool:
    """Check whether a dot-path exists in a document."""
    node: Any = doc
    for part in _parts(path):
        if not isinstance(node, dict) or part not in node:
            return False
        node = node[part]
    return True


def get_path(doc: JsonDocument, path: str, default: Any = None) -> Any:
    """Get the value at a dot-path, or default if absent."""
    node: Any = doc
    for part in _parts(path):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def set_path(doc: JsonDocument, path: str, value: Any) -> None:
    """Set the value at a dot-path, creating intermediate objects.

    An existing key keeps its position; new keys are appended. A
    non-object value in the way of an intermediate key is replaced.
    """
    parts = _parts(path)
    node = doc
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def delete_path(doc: JsonDocument, path: str, keep: JsonDocument | None = None) -> bool:
    """Delete the value at a dot-path.

    When ``keep`` is given, parents left empty by the deletion are pruned
    as well, unless ``keep`` still contains that parent path.

    Args:
        doc: Document to modify in place.
        path: Dot-path to delete.
        keep: Reference document deciding which emptied parents survive.

    Returns:
        True if something was deleted.
    """
    parts = _parts(path)
    chain: list[JsonDocument] = [doc]
    node: Any = doc
    for part in parts[:-1]:
        node = node.get(part) if isinstance(node, dict) else None
        if not isinstance(node, dict):
            return False
        chain.append(node)
    if parts[-1] not in node:
        return False
    del node[parts[-1]]

    if keep is not None:
        for depth in range(len(parts) - 1, 0, -1):
            parent = chain[depth]
            parent_path = ".".join(parts[:depth])
            if parent or has_path(keep, parent_path):
                break
            del chain[depth - 1][parts[depth - 1]]
    return True


# =============================================================================
# JSON merging
# =============================================================================


def clip_to_keys(existing: JsonDocument, output: JsonDocument, keys: list[str]) -> JsonDocument:
    """Apply only the declared keys of ``output`` on top of ``existing``.

    Each declared key is copied from ``output`` when present there and
    deleted otherwise; every other key of ``existing`` is left as is, in
    its original position.

    Args:
        existing: Document currently on disk.
        output: Document returned by a merge or unmerge function.
        keys: Dot-paths railctl owns.

    Returns:
        New document; ``existing`` is not modified.
    """
    result = copy.deepcopy(existing)
    for key in keys:
        if has_path(output, key):
            set_path(result, key, copy.deepcopy(get_path(output, key)))
        else:
            delete_path(result, key, keep=output)
    return result


def _call(function: Any, existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    output = function(copy.deepcopy(existing), ctx)
    if not isinstance(output, dict):
        msg = f"merge function returned {type(output).__name__}, expected a JSON object"
        raise TypeError(msg)
    return output


def merge_json_keys(existing: JsonDocument, definition: JsonMergeDefinition, ctx: "ProjectContext") -> JsonDocument:
    """Merge railctl's keys into a document.

    Args:
        existing: Parsed document (an empty dict for a new file).
        definition: Merge definition from the schema.
        ctx: Project context.

    Returns:
        Merged document, clipped to the keys active for this context.

    Raises:
        TypeError: If the merge function does not return a dict.
    """
    return clip_to_keys(existing, _call(definition.merge, existing, ctx), definition.active_keys(ctx))


def unmerge_json_keys(existing: JsonDocument, definition: JsonMergeDefinition, ctx: "ProjectContext") -> JsonDocument:
    """Remove railctl's keys from a document.

    Every key the definition could own is considered, whether or not its
    predicate currently holds, so keys added under an earlier context are
    cleaned up too.

    Raises:
        TypeError: If the unmerge function does not return a dict.
    """
    return clip_to_keys(existing, _call(definition.unmerge, existing, ctx), definition.all_keys())


def added_parents(before: JsonDocument, after: JsonDocument, keys: list[str]) -> set[str]:
    """Find the objects a merge brought into existence above its keys.

    Args:
        before: Document before the merge.
        after: Merged document.
        keys: Dot-paths the merge owns.

    Returns:
        Dot-paths of parent objects present in ``after`` but not ``before``.
    """
    parents: set[str] = set()
    for key in keys:
        parts = _parts(key)
        for depth in range(1, len(parts)):
            parent = ".".join(parts[:depth])
            if not has_path(before, parent) and isinstance(get_path(after, parent), dict):
                parents.add(parent)
    return parents


def prune_empty_parents(doc: JsonDocument, parents: set[str]) -> None:
    """Delete the given objects from a document where they are empty.

    Deepest paths go first, so a parent emptied by removing its child
    object is removed as well.
    """
    for parent in sorted(parents, key=lambda p: len(_parts(p)), reverse=True):
        if get_path(doc, parent) == {}:
            delete_path(doc, parent)


def has_meaningful_content(doc: JsonDocument, ignore_empty: bool = False) -> bool:
    """Check whether any top-level key holds a value.

    Null values never count. Empty objects, arrays and strings count unless
    ignore_empty is set.
    """
    for value in doc.values():
        if value is None:
            continue
        if ignore_empty and isinstance(value, (dict, list, str)) and not value:
            continue
        return True
    return False


def load_json_document(text: str) -> JsonDocument:
    """Parse a merge target.

    Raises:
        MalformedJsonError: If the text is not valid JSON or not an object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON: {e}"
        raise MalformedJsonError(msg) from e
    if not isinstance(data, dict):
        msg = f"Expected a JSON object, found {type(data).__name__}"
        raise MalformedJsonError(msg)
    return data


def detect_indent(text: str) -> int | str:
    """Detect the indentation unit of a pretty-printed JSON document.

    Returns:
        Number of spaces, a tab string, or DEFAULT_INDENT if unknown.
    """
    for line in text.splitlines()[1:]:
        stripped = line.lstrip()
        if not stripped:
            continue
        prefix = line[: len(line) - len(stripped)]
        if not prefix:
            break
        if prefix[0] == "\t":
            return "\t"
        return len(prefix)
    return DEFAULT_INDENT


def dump_json(doc: JsonDocument, indent: int | str = DEFAULT_INDENT) -> str:
    """Serialize a document the way railctl writes JSON files."""
    return json.dumps(doc, indent=indent, ensure_ascii=False) + "\n"


# =============================================================================
# Text patching
# =============================================================================


def patch_text(existing: str | None, definition: TextPatchDefinition) -> str | None:
    """Apply a text patch.

    Args:
        existing: Current file content, or None if the file is absent.
        definition: Patch definition.

    Returns:
        New content, or None if nothing should change (marker present, or
        file absent and not to be created).
    """
    if existing is None:
        return definition.content if definition.create_if_missing else None
    if definition.marker in existing:
        return None
    if definition.operation is PatchOperation.PREPEND:
        return definition.content + existing
    return existing + definition.content


def unpatch_text(existing: str, definition: TextPatchDefinition) -> str | None:
    """Remove a text patch.

    Exactly one occurrence of the patch content is removed; the rest of
    the file is untouched.

    Returns:
        New content, or None if the marker is absent or the block was
        edited and can no longer be found verbatim.
    """
    if definition.marker not in existing:
        return None
    content = definition.content
    if definition.operation is PatchOperation.PREPEND:
        if existing.startswith(content):
            return existing[len(content) :]
        index = existing.find(content)
    else:
        if existing.endswith(content):
            return existing[: len(existing) - len(content)]
        index = existing.rfind(content)
    if index < 0:
        logger.debug("Patch block not found verbatim; leaving file untouched")
        return None
    return existing[:index] + existing[index + len(content) :]
