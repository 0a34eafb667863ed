"""Unit tests for the TypeScript pack of the built-in schema."""

import json
from pathlib import Path
from typing import Any

import pytest
from railctl.core.context import ExistingTooling, Frameworks, Languages, ProjectContext
from railctl.models.schema import SKIP, Content
from railctl.schema.typescript import (
    LINT_STAGED,
    PRETTIER_DEFAULTS,
    depcruise_config,
    depcruise_main_config,
    eslint_config,
    hook_eslint_config,
    hook_prettier_config,
    husky_pre_commit,
    layer_rules,
    merge_biome,
    merge_package_json,
    prettier_config,
    prettier_plugins,
    tsconfig,
    unmerge_biome,
    unmerge_package_json,
    workspace_rules,
)

JS = Languages(javascript=True)


def _text(outcome: object) -> str:
    assert isinstance(outcome, Content)
    return outcome.text


@pytest.fixture
def js_context(project: Path) -> ProjectContext:
    """A plain JavaScript project under git."""
    return ProjectContext(root=project, languages=JS, is_version_controlled=True)


class TestEslintConfig:
    """Tests for the ESLint config generators."""

    def test_skips_non_javascript(self, context: ProjectContext) -> None:
        """Projects without package.json get no ESLint config."""
        assert eslint_config(context) is SKIP
        assert hook_eslint_config(context) is SKIP

    @pytest.mark.parametrize("tooling", [ExistingTooling(eslint_config=True), ExistingTooling(legacy_eslint_config=True)])
    def test_keeps_existing_config(self, project: Path, tooling: ExistingTooling) -> None:
        """A project with its own ESLint config gets no project-level file."""
        assert eslint_config(ProjectContext(root=project, languages=JS, tooling=tooling)) is SKIP

    @pytest.mark.parametrize(
        ("frameworks", "preset"),
        [
            (Frameworks(), "recommended"),
            (Frameworks(typescript=True), "recommendedTypeScript"),
            (Frameworks(typescript=True, react=True), "recommendedTypeScriptReact"),
            (Frameworks(nextjs=True, react=True), "recommendedTypeScriptNext"),
            (Frameworks(astro=True), "astro"),
        ],
    )
    def test_preset_follows_frameworks(self, project: Path, frameworks: Frameworks, preset: str) -> None:
        """The base preset matches the most specific framework."""
        text = _text(eslint_config(ProjectContext(root=project, languages=JS, frameworks=frameworks)))
        assert f"...railctl.configs.{preset}," in text

    def test_test_framework_presets(self, project: Path) -> None:
        """Vitest and Playwright presets are added when detected."""
        ctx = ProjectContext(root=project, languages=JS, frameworks=Frameworks(vitest=True, playwright=True))
        text = _text(eslint_config(ctx))
        assert "railctl.configs.vitest" in text
        assert "railctl.configs.playwright" in text

    def test_prettier_compat_only_without_other_formatter(self, project: Path, js_context: ProjectContext) -> None:
        """eslint-config-prettier is used only when Prettier is the formatter."""
        assert "  eslintConfigPrettier," in _text(eslint_config(js_context))
        ctx = ProjectContext(root=project, languages=JS, tooling=ExistingTooling(formatter=True))
        assert "  eslintConfigPrettier," not in _text(eslint_config(ctx))

    def test_hook_config_extends_project_config(self, project: Path) -> None:
        """The hook config builds on the user's flat config."""
        ctx = ProjectContext(root=project, languages=JS, tooling=ExistingTooling(eslint_config=True))
        text = _text(hook_eslint_config(ctx))
        assert 'import projectConfig from "../eslint.config.mjs";' in text
        assert "...railctl.configs.strict," in text

    def test_hook_config_bridges_legacy_config(self, project: Path) -> None:
        """Legacy .eslintrc configs are included through FlatCompat."""
        ctx = ProjectContext(root=project, languages=JS, tooling=ExistingTooling(legacy_eslint_config=True))
        assert "FlatCompat" in _text(hook_eslint_config(ctx))


class TestPrettierConfig:
    """Tests for the Prettier config generators."""

    def test_project_config(self, js_context: ProjectContext) -> None:
        """The project config holds the style defaults."""
        assert json.loads(_text(prettier_config(js_context))) == PRETTIER_DEFAULTS

    def test_skipped_with_existing_config(self, project: Path) -> None:
        """Existing Prettier or alternative formatter configs win."""
        for tooling in (ExistingTooling(prettier_config=True), ExistingTooling(formatter=True)):
            assert prettier_config(ProjectContext(root=project, languages=JS, tooling=tooling)) is SKIP

    def test_plugins_order(self, project: Path) -> None:
        """The Tailwind plugin is always last."""
        ctx = ProjectContext(root=project, languages=JS, frameworks=Frameworks(tailwind=True, astro=True, shell=True))
        assert prettier_plugins(ctx) == ["prettier-plugin-astro", "prettier-plugin-sh", "prettier-plugin-tailwindcss"]
        assert json.loads(_text(hook_prettier_config(ctx)))["plugins"][-1] == "prettier-plugin-tailwindcss"

    def test_hook_config_without_plugins(self, js_context: ProjectContext) -> None:
        """No plugins key is written when none are needed."""
        assert "plugins" not in json.loads(_text(hook_prettier_config(js_context)))


class TestOtherGenerators:
    """Tests for tsconfig and the husky hook."""

    def test_tsconfig_requires_typescript_dev_dependency(self, project: Path, js_context: ProjectContext) -> None:
        """tsconfig.json is generated only for TypeScript projects."""
        assert tsconfig(js_context) is SKIP
        ctx = ProjectContext(root=project, languages=JS, dev_dependencies={"typescript": "^5.6.0"})
        assert json.loads(_text(tsconfig(ctx)))["compilerOptions"]["strict"] is True

    def test_husky_requires_git(self, project: Path, js_context: ProjectContext) -> None:
        """The pre-commit hook is generated only in git repositories."""
        assert _text(husky_pre_commit(js_context)) == "npx lint-staged\n"
        assert husky_pre_commit(ProjectContext(root=project, languages=JS)) is SKIP


def _depcruise(ctx: ProjectContext) -> dict[str, Any]:
    text = _text(depcruise_config(ctx))
    body = text.split("module.exports = ", 1)[1]
    return json.loads(body.removesuffix(";\n"))


class TestDependencyCruiserConfig:
    """Tests for the dependency-cruiser config generators."""

    def test_skips_non_javascript(self, context: ProjectContext) -> None:
        """Projects without package.json get no dependency-cruiser config."""
        assert depcruise_config(context) is SKIP
        assert depcruise_main_config(context) is SKIP

    def test_base_rules_without_layers(self, js_context: ProjectContext) -> None:
        """A flat project still gets the circular dependency rule."""
        config = _depcruise(js_context)

        names = [rule["name"] for rule in config["forbidden"]]
        assert names == ["no-circular", "no-deprecated-deps", "no-dev-deps-in-src", "no-orphans"]
        assert config["forbidden"][0]["to"] == {"circular": True}
        assert "tsConfig" not in config["options"]

    def test_typescript_options(self, project: Path) -> None:
        """TypeScript projects resolve imports through tsconfig.json."""
        ctx = ProjectContext(root=project, languages=JS, frameworks=Frameworks(typescript=True))
        options = _depcruise(ctx)["options"]
        assert options["tsConfig"] == {"fileName": "tsconfig.json"}
        assert options["tsPreCompilationDeps"] is True

    def test_layer_rules(self, project: Path) -> None:
        """Lower layers may not import higher ones."""
        ctx = ProjectContext(
            root=project,
            languages=JS,
            js_layers=(("types", "src/types"), ("utils", "src/utils"), ("components", "src/components")),
        )

        rules = {rule["name"]: rule for rule in layer_rules(ctx)}

        assert set(rules) == {"types-cannot-import-utils-or-components", "utils-cannot-import-components"}
        assert rules["utils-cannot-import-components"]["from"] == {"path": "^src/utils/"}
        assert rules["utils-cannot-import-components"]["to"] == {"path": "^src/components/"}
        assert rules["types-cannot-import-utils-or-components"]["to"] == {"path": "^(src/utils|src/components)/"}

    def test_layers_compared_within_a_package(self, project: Path) -> None:
        """Layers of different workspace packages get separate rules."""
        ctx = ProjectContext(
            root=project,
            languages=JS,
            js_layers=(
                ("utils", "packages/a/src/utils"),
                ("components", "packages/a/src/components"),
                ("utils", "packages/b/utils"),
            ),
        )

        rules = layer_rules(ctx)

        assert [rule["name"] for rule in rules] == ["packages-a-utils-cannot-import-components"]
        assert rules[0]["to"] == {"path": "^packages/a/src/components/"}

    def test_sibling_layers_may_not_import_each_other(self, project: Path) -> None:
        """hooks and services sit at the same level and stay apart."""
        ctx = ProjectContext(root=project, languages=JS, js_layers=(("hooks", "hooks"), ("services", "services")))

        names = [rule["name"] for rule in layer_rules(ctx)]

        assert names == ["hooks-cannot-import-services", "services-cannot-import-hooks"]

    def test_workspace_rules(self, project: Path) -> None:
        """libs may not import packages or apps; packages may not import apps."""
        ctx = ProjectContext(root=project, languages=JS, js_workspaces=("apps", "libs", "packages"))

        rules = {rule["name"]: rule for rule in workspace_rules(ctx)}

        assert rules["libs-cannot-import-packages-or-apps"]["from"] == {"path": "^libs/"}
        assert rules["libs-cannot-import-packages-or-apps"]["to"] == {"path": "^(packages|apps)/"}
        assert rules["packages-cannot-import-apps"]["to"] == {"path": "^apps/"}

    def test_single_workspace_root_has_no_rules(self, project: Path) -> None:
        """With only one workspace root there is nothing to separate."""
        ctx = ProjectContext(root=project, languages=JS, js_workspaces=("packages",))
        assert workspace_rules(ctx) == []

    def test_main_config_imports_generated_rules(self, js_context: ProjectContext) -> None:
        """The root config spreads the generated config."""
        text = _text(depcruise_main_config(js_context))
        assert "require('./.railctl/depcruise-config.cjs')" in text
        assert "forbidden: [...generated.forbidden]," in text

    def test_main_config_skipped_with_existing_config(self, project: Path) -> None:
        """A user's own dependency-cruiser config is left alone."""
        ctx = ProjectContext(root=project, languages=JS, tooling=ExistingTooling(dependency_cruiser_config=True))
        assert depcruise_main_config(ctx) is SKIP
        assert isinstance(depcruise_config(ctx), Content)


class TestPackageJsonMerge:
    """Tests for the package.json scripts merge."""

    def test_adds_missing_scripts(self, js_context: ProjectContext) -> None:
        """Scripts are added without touching the user's."""
        merged = merge_package_json({"name": "app", "scripts": {"build": "vite build", "lint": "oxlint"}}, js_context)

        assert merged["name"] == "app"
        assert merged["scripts"]["build"] == "vite build"
        assert merged["scripts"]["lint"] == "oxlint"
        assert merged["scripts"]["knip"] == "knip"
        assert merged["scripts"]["prepare"] == "husky"
        assert merged["lint-staged"] == LINT_STAGED

    def test_existing_linter_gets_separate_script(self, project: Path) -> None:
        """With a custom lint script, ESLint runs under lint:eslint."""
        ctx = ProjectContext(root=project, languages=JS, tooling=ExistingTooling(linter=True))
        scripts = merge_package_json({"scripts": {"lint": "oxlint"}}, ctx)["scripts"]
        assert scripts["lint"] == "oxlint"
        assert scripts["lint:eslint"] == "eslint ."

    def test_formatter_scripts_skipped_with_other_formatter(self, project: Path) -> None:
        """Prettier scripts are not added for Biome or dprint projects."""
        ctx = ProjectContext(root=project, languages=JS, tooling=ExistingTooling(formatter=True))
        assert "format" not in merge_package_json({}, ctx)["scripts"]

    def test_unmerge_keeps_edited_scripts(self, js_context: ProjectContext) -> None:
        """Only scripts still holding railctl's commands are removed."""
        merged = merge_package_json({"scripts": {"build": "tsc"}}, js_context)
        merged["scripts"]["knip"] = "knip --production"

        unmerged = unmerge_package_json(merged, js_context)

        assert unmerged["scripts"] == {"build": "tsc", "knip": "knip --production"}
        assert "lint-staged" not in unmerged

    def test_unmerge_keeps_scripts_object(self, js_context: ProjectContext) -> None:
        """An emptied scripts object is left for the engine to decide on."""
        merged = merge_package_json({"name": "app"}, js_context)
        assert unmerge_package_json(merged, js_context) == {"name": "app", "scripts": {}}

    def test_unmerge_without_scripts(self, js_context: ProjectContext) -> None:
        """A document without scripts gets none added."""
        assert unmerge_package_json({"name": "app"}, js_context) == {"name": "app"}


class TestBiomeMerge:
    """Tests for the Biome exclusion merge."""

    def test_round_trip(self, js_context: ProjectContext) -> None:
        """Exclusions are added once and removed cleanly."""
        original = {"files": {"includes": ["src/**"], "maxSize": 1000}}

        merged = merge_biome(merge_biome(original, js_context), js_context)

        assert merged["files"]["includes"] == ["src/**", "!eslint.config.mjs", "!.railctl"]
        assert unmerge_biome(merged, js_context) == original

    def test_unmerge_drops_empty_files(self, js_context: ProjectContext) -> None:
        """A files object emptied by unmerge is removed."""
        merged = merge_biome({"$schema": "x"}, js_context)
        assert unmerge_biome(merged, js_context) == {"$schema": "x"}
