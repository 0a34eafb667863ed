"""TypeScript/JavaScript pack of the built-in schema.

ESLint, Prettier, Knip, dependency-cruiser and tsconfig files, the
package.json scripts railctl adds, Biome exclusions, and the npm packages
the tooling needs.
"""

import json
import re
from typing import TYPE_CHECKING, Any

from railctl.models.schema import (
    SKIP,
    Content,
    FileDefinition,
    FileOutcome,
    GeneratedFile,
    JsonDocument,
    JsonMergeDefinition,
    PackageSpec,
)

if TYPE_CHECKING:
    from railctl.core.context import ProjectContext

ESLINT_PLUGIN = "eslint-plugin-railctl"

PRETTIER_DEFAULTS: dict[str, Any] = {
    "semi": True,
    "singleQuote": True,
    "tabWidth": 2,
    "trailingComma": "all",
    "printWidth": 100,
    "endOfLine": "lf",
    "useTabs": False,
    "bracketSpacing": True,
    "arrowParens": "avoid",
}

# Script name -> command railctl adds when the script is missing
LINT_SCRIPT = "eslint ."
SCRIPTS: dict[str, str] = {
    "lint": LINT_SCRIPT,
    "lint:eslint": LINT_SCRIPT,
    "format": "prettier --write .",
    "format:check": "prettier --check .",
    "knip": "knip",
    "publint": "publint",
    "lint:sh": "shellcheck **/*.sh",
    "prepare": "husky",
}

LINT_STAGED: dict[str, list[str]] = {
    "*.{js,jsx,ts,tsx,mjs,cjs}": ["eslint --fix"],
    "*.{json,md,yml,yaml,css}": ["prettier --write"],
}

BIOME_EXCLUDES = ("!eslint.config.mjs", "!.railctl")


def _json(data: Any) -> str:
    return json.dumps(data, indent=2) + "\n"


def prettier_plugins(ctx: "ProjectContext") -> list[str]:
    """Prettier plugins a project needs; Tailwind must come last."""
    plugins: list[str] = []
    if ctx.frameworks.astro:
        plugins.append("prettier-plugin-astro")
    if ctx.frameworks.shell:
        plugins.append("prettier-plugin-sh")
    if ctx.frameworks.tailwind:
        plugins.append("prettier-plugin-tailwindcss")
    return plugins


# =============================================================================
# Generators
# =============================================================================


def _base_config(ctx: "ProjectContext") -> str:
    if ctx.frameworks.nextjs:
        return "recommendedTypeScriptNext"
    if ctx.frameworks.react:
        return "recommendedTypeScriptReact"
    if ctx.frameworks.astro:
        return "astro"
    if ctx.frameworks.typescript:
        return "recommendedTypeScript"
    return "recommended"


def eslint_config(ctx: "ProjectContext") -> FileOutcome:
    """Project-level ESLint flat config, unless the project has its own."""
    if not ctx.languages.javascript or ctx.tooling.eslint_config or ctx.tooling.legacy_eslint_config:
        return SKIP
    lines = [f'import railctl from "{ESLINT_PLUGIN}";']
    if not ctx.tooling.formatter:
        lines.append('import eslintConfigPrettier from "eslint-config-prettier";')
    lines += [
        "",
        "export default [",
        '  { ignores: ["**/node_modules/", "**/dist/", "**/build/", "**/coverage/"] },',
        f"  ...railctl.configs.{_base_config(ctx)},",
    ]
    if ctx.frameworks.vitest:
        lines.append("  ...railctl.configs.vitest,")
    if ctx.frameworks.playwright:
        lines.append("  ...railctl.configs.playwright,")
    if not ctx.tooling.formatter:
        lines.append("  eslintConfigPrettier,")
    lines.append("];")
    return Content("\n".join(lines) + "\n")


def hook_eslint_config(ctx: "ProjectContext") -> FileOutcome:
    """Stricter config the hooks lint with; extends the project config when there is one."""
    if not ctx.languages.javascript:
        return SKIP
    lines = [f'import railctl from "{ESLINT_PLUGIN}";']
    if ctx.tooling.eslint_config:
        lines.append('import projectConfig from "../eslint.config.mjs";')
    elif ctx.tooling.legacy_eslint_config:
        lines.append('import { FlatCompat } from "@eslint/eslintrc";')
        lines.append("const compat = new FlatCompat({ baseDirectory: import.meta.dirname + '/..' });")
    lines.append("")
    lines.append("export default [")
    if ctx.tooling.eslint_config:
        lines.append("  ...projectConfig,")
    elif ctx.tooling.legacy_eslint_config:
        lines.append('  ...compat.extends("./.eslintrc"),')
    lines.append(f"  ...railctl.configs.{_base_config(ctx)},")
    lines.append("  ...railctl.configs.strict,")
    lines.append("];")
    return Content("\n".join(lines) + "\n")


def prettier_config(ctx: "ProjectContext") -> FileOutcome:
    """Project-level Prettier config with the style defaults."""
    if not ctx.languages.javascript or ctx.tooling.formatter or ctx.tooling.prettier_config:
        return SKIP
    return Content(_json(PRETTIER_DEFAULTS))


def hook_prettier_config(ctx: "ProjectContext") -> FileOutcome:
    """Prettier config used by the hooks, with the plugins the project needs."""
    if not ctx.languages.javascript or ctx.tooling.formatter:
        return SKIP
    config = dict(PRETTIER_DEFAULTS)
    plugins = prettier_plugins(ctx)
    if plugins:
        config["plugins"] = plugins
    return Content(_json(config))


def tsconfig(ctx: "ProjectContext") -> FileOutcome:
    """Minimal tsconfig for type-checked linting of TypeScript projects."""
    if not ctx.languages.javascript:
        return SKIP
    if "typescript" not in ctx.dev_dependencies and "typescript-eslint" not in ctx.dev_dependencies:
        return SKIP
    return Content(
        _json(
            {
                "compilerOptions": {
                    "target": "ES2022",
                    "module": "NodeNext",
                    "moduleResolution": "NodeNext",
                    "strict": True,
                    "esModuleInterop": True,
                    "skipLibCheck": True,
                    "noEmit": True,
                },
                "include": ["**/*.ts", "**/*.tsx"],
                "exclude": ["node_modules", "dist", "build"],
            }
        )
    )


def knip_config(ctx: "ProjectContext") -> FileOutcome:
    """Knip config for dead code detection."""
    if not ctx.languages.javascript:
        return SKIP
    return Content(_json({"ignore": [".railctl/**"], "ignoreDependencies": [ESLINT_PLUGIN]}))


def husky_pre_commit(ctx: "ProjectContext") -> FileOutcome:
    """Pre-commit hook running lint-staged."""
    if not ctx.languages.javascript or not ctx.is_version_controlled:
        return SKIP
    return Content("npx lint-staged\n")


# Layer -> layers it may import; any other detected layer is off limits
LAYER_IMPORTS: dict[str, tuple[str, ...]] = {
    "types": (),
    "utils": ("types",),
    "lib": ("utils", "types"),
    "hooks": ("lib", "utils", "types"),
    "services": ("lib", "utils", "types"),
    "components": ("hooks", "services", "lib", "utils", "types"),
    "features": ("components", "hooks", "services", "lib", "utils", "types"),
    "app": ("features", "components", "hooks", "services", "lib", "utils", "types"),
}

# Workspace root -> workspace roots it must not import from
WORKSPACE_IMPORTS_FORBIDDEN: dict[str, tuple[str, ...]] = {
    "libs": ("packages", "apps"),
    "packages": ("apps",),
}

DEPCRUISE_BASE_RULES: list[dict[str, Any]] = [
    {
        "name": "no-circular",
        "comment": "Circular dependencies cause runtime issues and make code hard to reason about",
        "severity": "error",
        "from": {},
        "to": {"circular": True},
    },
    {
        "name": "no-deprecated-deps",
        "comment": "Deprecated npm packages should be replaced",
        "severity": "error",
        "from": {},
        "to": {"dependencyTypes": ["deprecated"]},
    },
    {
        "name": "no-dev-deps-in-src",
        "comment": "Production code should not import devDependencies",
        "severity": "warn",
        "from": {"path": "^(packages/[^/]+/)?src", "pathNot": "\\.test\\.[tj]sx?$"},
        "to": {"dependencyTypes": ["npm-dev"]},
    },
    {
        "name": "no-orphans",
        "comment": "Orphan modules are not imported anywhere and may be dead code",
        "severity": "warn",
        "from": {
            "orphan": True,
            "pathNot": [
                "(^|/)index\\.[tj]sx?$",
                "(^|/)main\\.[tj]sx?$",
                "(^|/)cli\\.[tj]s$",
                "\\.config\\.[cm]?[tj]s$",
                "\\.test\\.[tj]sx?$",
                "\\.spec\\.[tj]sx?$",
                "/tests/",
                "/__tests__/",
                "/src/content/",
                "/src/pages/",
                "/app/",
            ],
        },
        "to": {},
    },
]

DEPCRUISE_MAIN_CONFIG = """// Add project rules to forbidden; railctl regenerates the rules it imports.
const generated = require('./.railctl/depcruise-config.cjs');

/** @type {import('dependency-cruiser').IConfiguration} */
module.exports = {
  forbidden: [...generated.forbidden],
  options: { ...generated.options },
};
"""


def _layer_base(directory: str) -> str:
    """Package directory a layer directory belongs to ("" for the root)."""
    parent = directory.rpartition("/")[0]
    if parent == "src" or parent.endswith("/src"):
        parent = parent[: -len("src")].rstrip("/")
    return parent


def _path_pattern(directories: list[str]) -> str:
    escaped = [re.escape(directory) for directory in directories]
    if len(escaped) == 1:
        return f"^{escaped[0]}/"
    return f"^({'|'.join(escaped)})/"


def workspace_rules(ctx: "ProjectContext") -> list[dict[str, Any]]:
    """Rules keeping lower workspace roots from importing higher ones."""
    rules: list[dict[str, Any]] = []
    for root, forbidden in WORKSPACE_IMPORTS_FORBIDDEN.items():
        targets = [target for target in forbidden if target in ctx.js_workspaces]
        if root not in ctx.js_workspaces or not targets:
            continue
        rules.append(
            {
                "name": f"{root}-cannot-import-{'-or-'.join(targets)}",
                "severity": "error",
                "from": {"path": f"^{root}/"},
                "to": {"path": _path_pattern(targets)},
            }
        )
    return rules


def layer_rules(ctx: "ProjectContext") -> list[dict[str, Any]]:
    """Rules keeping each detected layer from importing layers above it.

    Layers are compared only with layers of the same package.
    """
    by_base: dict[str, dict[str, str]] = {}
    for layer, directory in ctx.js_layers:
        by_base.setdefault(_layer_base(directory), {})[layer] = directory

    rules: list[dict[str, Any]] = []
    for base, layers in by_base.items():
        for layer, directory in layers.items():
            forbidden = [
                other for other in layers if other != layer and other not in LAYER_IMPORTS.get(layer, ())
            ]
            if not forbidden:
                continue
            prefix = f"{base.replace('/', '-')}-" if base else ""
            rules.append(
                {
                    "name": f"{prefix}{layer}-cannot-import-{'-or-'.join(forbidden)}",
                    "severity": "error",
                    "from": {"path": _path_pattern([directory])},
                    "to": {"path": _path_pattern([layers[other] for other in forbidden])},
                }
            )
    return rules


def depcruise_config(ctx: "ProjectContext") -> FileOutcome:
    """dependency-cruiser rules and options derived from the project layout."""
    if not ctx.languages.javascript:
        return SKIP
    options: dict[str, Any] = {
        "doNotFollow": {"path": ["node_modules", ".railctl"]},
        "exclude": {"path": ["node_modules", "dist", "build", "coverage", "\\.d\\.ts$"]},
        "enhancedResolveOptions": {
            "extensions": [".ts", ".tsx", ".js", ".jsx"],
            "exportsFields": ["exports"],
            "conditionNames": ["import", "require", "node", "default"],
        },
    }
    if ctx.frameworks.typescript:
        options["tsPreCompilationDeps"] = True
        options["tsConfig"] = {"fileName": "tsconfig.json"}
    config = {
        "forbidden": [*DEPCRUISE_BASE_RULES, *workspace_rules(ctx), *layer_rules(ctx)],
        "options": options,
    }
    header = "// Generated by railctl from the project layout.\n"
    return Content(f"{header}module.exports = {json.dumps(config, indent=2)};\n")


def depcruise_main_config(ctx: "ProjectContext") -> FileOutcome:
    """Root dependency-cruiser config importing the generated rules."""
    if not ctx.languages.javascript or ctx.tooling.dependency_cruiser_config:
        return SKIP
    return Content(DEPCRUISE_MAIN_CONFIG)


OWNED_FILES: dict[str, FileDefinition] = {
    ".railctl/eslint.config.mjs": GeneratedFile(hook_eslint_config),
    ".railctl/.prettierrc": GeneratedFile(hook_prettier_config),
    ".railctl/depcruise-config.cjs": GeneratedFile(depcruise_config),
}

MANAGED_FILES: dict[str, FileDefinition] = {
    "eslint.config.mjs": GeneratedFile(eslint_config),
    "tsconfig.json": GeneratedFile(tsconfig),
    "knip.json": GeneratedFile(knip_config),
    ".prettierrc": GeneratedFile(prettier_config),
    ".husky/pre-commit": GeneratedFile(husky_pre_commit),
    ".dependency-cruiser.cjs": GeneratedFile(depcruise_main_config),
}

# =============================================================================
# JSON merges
# =============================================================================


def _scripts(doc: JsonDocument) -> dict[str, Any]:
    scripts = doc.get("scripts")
    return dict(scripts) if isinstance(scripts, dict) else {}


def merge_package_json(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Add railctl's scripts where the project does not define them."""
    scripts = _scripts(existing)
    wanted = ["lint:eslint" if ctx.tooling.linter else "lint", "knip"]
    if not ctx.tooling.formatter:
        wanted += ["format", "format:check"]
    if ctx.frameworks.publishable_library:
        wanted.append("publint")
    if ctx.frameworks.shell:
        wanted.append("lint:sh")
    if ctx.is_version_controlled:
        wanted.append("prepare")
    for name in wanted:
        scripts.setdefault(name, SCRIPTS[name])

    result = {**existing, "scripts": scripts}
    if ctx.is_version_controlled and "lint-staged" not in result:
        result["lint-staged"] = dict(LINT_STAGED)
    return result


def unmerge_package_json(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Remove scripts that still hold railctl's commands; edited ones stay.

    The scripts object itself is kept, even when empty; the engine drops it
    if railctl added it.
    """
    scripts = {name: command for name, command in _scripts(existing).items() if SCRIPTS.get(name) != command}
    result = {**existing, "scripts": scripts} if "scripts" in existing else dict(existing)
    if result.get("lint-staged") == LINT_STAGED:
        del result["lint-staged"]
    return result


def _includes(doc: JsonDocument) -> list[Any]:
    files = doc.get("files")
    includes = files.get("includes") if isinstance(files, dict) else None
    return list(includes) if isinstance(includes, list) else []


def merge_biome(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Exclude railctl's files from Biome (v2 ``!`` include patterns)."""
    includes = _includes(existing)
    includes += [pattern for pattern in BIOME_EXCLUDES if pattern not in includes]
    files = existing.get("files")
    return {**existing, "files": {**(files if isinstance(files, dict) else {}), "includes": includes}}


def unmerge_biome(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Drop railctl's Biome exclusions."""
    includes = [pattern for pattern in _includes(existing) if pattern not in BIOME_EXCLUDES]
    files = dict(existing.get("files") or {})
    if includes:
        files["includes"] = includes
    else:
        files.pop("includes", None)
    result = dict(existing)
    if files:
        result["files"] = files
    else:
        result.pop("files", None)
    return result


BIOME_JSON_MERGE = JsonMergeDefinition(
    keys=("files.includes",),
    merge=merge_biome,
    unmerge=unmerge_biome,
    skip_if_missing=True,
)

JSON_MERGES: dict[str, JsonMergeDefinition] = {
    # Never created: a project without package.json is not a JS project
    "package.json": JsonMergeDefinition(
        keys=("scripts.lint", "scripts.format", "scripts.format:check", "scripts.knip"),
        conditional_keys={
            "existing_linter": ("scripts.lint:eslint",),
            "publishable_library": ("scripts.publint",),
            "shell": ("scripts.lint:sh",),
            "git": ("scripts.prepare", "lint-staged"),
        },
        merge=merge_package_json,
        unmerge=unmerge_package_json,
        skip_if_missing=True,
    ),
    "biome.json": BIOME_JSON_MERGE,
    "biome.jsonc": BIOME_JSON_MERGE,
}

# =============================================================================
# Packages
# =============================================================================

PACKAGES = PackageSpec(
    requires="javascript",
    base=["eslint", ESLINT_PLUGIN, "dependency-cruiser", "knip"],
    conditional={
        "standard": ["prettier", "eslint-config-prettier"],
        "astro": ["prettier-plugin-astro"],
        "tailwind": ["prettier-plugin-tailwindcss"],
        "shell": ["prettier-plugin-sh"],
        "publishable_library": ["publint"],
        "legacy_eslint": ["@eslint/eslintrc"],
        "git": ["husky", "lint-staged"],
    },
)

DEPRECATED_PACKAGES = [
    # Bundled into eslint-plugin-railctl
    "eslint-plugin-import-x",
    "eslint-import-resolver-typescript",
    "eslint-plugin-sonarjs",
    "eslint-plugin-boundaries",
    "eslint-plugin-simple-import-sort",
    "eslint-plugin-security",
    "eslint-plugin-regexp",
    "eslint-plugin-promise",
]
