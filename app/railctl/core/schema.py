"""Schema loading and validation.

Builds the bundled Schema from the language packs in railctl.schema and
turns every authoring mistake into a SchemaError before any file is
touched.
"""

import logging
from typing import Any

from pydantic import ValidationError

from railctl.core.context import PREDICATES
from railctl.models.schema import Schema

logger = logging.getLogger(__name__)


class SchemaError(Exception):
    """Raised when a schema is malformed."""


def check_predicates(schema: Schema) -> None:
    """Verify every predicate the schema refers to is known.

    Args:
        schema: Schema to check.

    Raises:
        SchemaError: If an unknown predicate name is used.
    """
    unknown = sorted(name for name in schema.predicate_names() if name not in PREDICATES)
    if unknown:
        msg = f"Unknown predicate(s) in schema: {', '.join(unknown)}"
        raise SchemaError(msg)


def build_schema(data: dict[str, Any]) -> Schema:
    """Validate raw schema data into a Schema.

    Args:
        data: Keyword data for the Schema model.

    Returns:
        Validated Schema.

    Raises:
        SchemaError: If the data does not form a valid schema.
    """
    try:
        schema = Schema(**data)
    except ValidationError as e:
        errors = e.errors()
        if errors:
            first = errors[0]
            loc = ".".join(str(x) for x in first["loc"])
            detail = f"{loc}: {first['msg']}" if loc else first["msg"]
            msg = f"Invalid schema: {detail}"
        else:
            msg = f"Invalid schema: {e}"
        raise SchemaError(msg) from e
    except ValueError as e:
        msg = f"Invalid schema: {e}"
        raise SchemaError(msg) from e
    check_predicates(schema)
    return schema


def load_schema() -> Schema:
    """Load the schema bundled with railctl.

    Returns:
        Validated built-in Schema.

    Raises:
        SchemaError: If the bundled schema is malformed.
    """
    from railctl.schema import schema_data

    schema = build_schema(schema_data())
    logger.debug(
        "Loaded schema %s: %d owned, %d managed, %d merges, %d patches",
        schema.version,
        len(schema.owned_files),
        len(schema.managed_files),
        len(schema.json_merges),
        len(schema.text_patches),
    )
    return schema
