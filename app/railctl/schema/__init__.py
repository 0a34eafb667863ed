"""Built-in railctl schema.

The schema is assembled from a language-agnostic core and one pack per
ecosystem. Packs only contribute plain mappings; validation happens in
railctl.core.schema.build_schema().

Adding a file? Declare it in the matching pack and setup, upgrade and
reset handle it.
"""

from typing import Any

from railctl import __version__
from railctl.schema import core, golang, python, rust, typescript

# The schema is versioned with the tool
SCHEMA_VERSION = __version__


def schema_data() -> dict[str, Any]:
    """Collect the keyword data of the built-in Schema.

    Returns:
        Mapping suitable for railctl.core.schema.build_schema().
    """
    return {
        "version": SCHEMA_VERSION,
        "owned_directories": list(core.OWNED_DIRECTORIES),
        "shared_directories": list(core.SHARED_DIRECTORIES),
        "preserved_directories": list(core.PRESERVED_DIRECTORIES),
        "owned_files": {
            **core.OWNED_FILES,
            **typescript.OWNED_FILES,
            **python.OWNED_FILES,
        },
        "managed_files": {
            **typescript.MANAGED_FILES,
            **python.MANAGED_FILES,
            **golang.MANAGED_FILES,
            **rust.MANAGED_FILES,
        },
        "json_merges": {**core.JSON_MERGES, **typescript.JSON_MERGES},
        "text_patches": dict(core.TEXT_PATCHES),
        "deprecated_files": list(core.DEPRECATED_FILES),
        "deprecated_directories": list(core.DEPRECATED_DIRECTORIES),
        "deprecated_packages": list(typescript.DEPRECATED_PACKAGES),
        "packages": typescript.PACKAGES,
    }
