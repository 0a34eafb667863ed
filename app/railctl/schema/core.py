"""Language-agnostic part of the built-in schema.

Directories, the guidance documents and hook scripts every project gets,
the agent/editor settings railctl merges into, and the AGENTS.md link.
"""

import copy
from typing import TYPE_CHECKING, Any

from railctl.models.schema import (
    FileDefinition,
    JsonDocument,
    JsonMergeDefinition,
    PatchOperation,
    TemplateFile,
    TextPatchDefinition,
)

if TYPE_CHECKING:
    from railctl.core.context import ProjectContext

# Substring identifying railctl's entries in agent hook settings
HOOK_COMMAND_MARKER = ".railctl"

# =============================================================================
# Directories
# =============================================================================

OWNED_DIRECTORIES = [
    ".railctl",
    ".railctl/hooks",
    ".railctl/hooks/cursor",
    ".railctl/guides",
    ".railctl/templates",
    ".railctl/prompts",
    ".railctl/scripts",
]

# Directories other tools use too; only railctl's own files are removed
SHARED_DIRECTORIES = [
    ".claude",
    ".claude/skills",
    ".claude/commands",
    ".cursor",
    ".cursor/rules",
    ".cursor/commands",
]

# User data; created on setup, never deleted while non-empty
PRESERVED_DIRECTORIES = [
    ".railctl/learnings",
    ".railctl/logs",
    ".railctl-project/tickets",
    ".railctl-project/tickets/completed",
    ".railctl-project/tmp",
]

# =============================================================================
# Owned files
# =============================================================================


def _templates(mapping: dict[str, str]) -> dict[str, FileDefinition]:
    return {path: TemplateFile(template) for path, template in mapping.items()}


OWNED_FILES: dict[str, FileDefinition] = _templates(
    {
        ".jscpd.json": ".jscpd.json",
        ".railctl/RAILCTL.md": "RAILCTL.md",
        ".railctl/AGENTS.md": "AGENTS.md",
        # Guides
        ".railctl/guides/architecture-guide.md": "guides/architecture-guide.md",
        ".railctl/guides/planning-guide.md": "guides/planning-guide.md",
        ".railctl/guides/testing-guide.md": "guides/testing-guide.md",
        # Document templates
        ".railctl/templates/design-doc-template.md": "doc-templates/design-doc-template.md",
        ".railctl/templates/ticket-template.md": "doc-templates/ticket-template.md",
        ".railctl/templates/work-log-template.md": "doc-templates/work-log-template.md",
        # Prompts and scripts
        ".railctl/prompts/quality-review.md": "prompts/quality-review.md",
        ".railctl/scripts/cleanup-zombies.sh": "scripts/cleanup-zombies.sh",
        # Hooks
        ".railctl/hooks/session-lint-check.sh": "hooks/session-lint-check.sh",
        ".railctl/hooks/post-tool-lint.sh": "hooks/post-tool-lint.sh",
        ".railctl/hooks/stop-quality.sh": "hooks/stop-quality.sh",
        ".railctl/hooks/cursor/after-file-edit.sh": "hooks/cursor/after-file-edit.sh",
        # Claude skills and commands
        ".claude/skills/railctl-debugging/SKILL.md": "skills/railctl-debugging/SKILL.md",
        ".claude/skills/railctl-refactoring/SKILL.md": "skills/railctl-refactoring/SKILL.md",
        ".claude/commands/audit.md": "commands/audit.md",
        ".claude/commands/lint.md": "commands/lint.md",
        # Cursor rules and commands
        ".cursor/rules/railctl-core.mdc": "cursor/rules/railctl-core.mdc",
        ".cursor/commands/audit.md": "commands/audit.md",
        ".cursor/commands/lint.md": "commands/lint.md",
    }
)

# =============================================================================
# JSON merges
# =============================================================================

MCP_SERVERS: dict[str, dict[str, Any]] = {
    "context7": {"command": "npx", "args": ["-y", "@upstash/context7-mcp@latest"]},
    "playwright": {"command": "npx", "args": ["@playwright/mcp@latest"]},
}


def _hook(script: str) -> dict[str, Any]:
    return {"hooks": [{"type": "command", "command": f'"$CLAUDE_PROJECT_DIR"/.railctl/hooks/{script}'}]}


# Claude Code hooks (.claude/settings.json), by event
SETTINGS_HOOKS: dict[str, list[dict[str, Any]]] = {
    "SessionStart": [_hook("session-lint-check.sh")],
    "Stop": [_hook("stop-quality.sh")],
    "PostToolUse": [{"matcher": "Write|Edit|MultiEdit|NotebookEdit", **_hook("post-tool-lint.sh")}],
}

# Cursor hooks (.cursor/hooks.json)
CURSOR_HOOKS: dict[str, list[dict[str, str]]] = {
    "afterFileEdit": [{"command": "./.railctl/hooks/cursor/after-file-edit.sh"}],
    "stop": [{"command": "./.railctl/hooks/stop-quality.sh"}],
}


def is_railctl_hook(entry: object) -> bool:
    """Check whether a hook entry runs one of railctl's hook scripts."""
    if not isinstance(entry, dict) or not isinstance(entry.get("hooks"), list):
        return False
    return any(
        isinstance(command, dict)
        and isinstance(command.get("command"), str)
        and HOOK_COMMAND_MARKER in command["command"]
        for command in entry["hooks"]
    )


def _object(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def merge_settings_hooks(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Add railctl's hooks, keeping every hook the user configured."""
    hooks = dict(_object(existing.get("hooks")))
    for event, entries in SETTINGS_HOOKS.items():
        current = hooks.get(event)
        kept = [e for e in current if not is_railctl_hook(e)] if isinstance(current, list) else []
        hooks[event] = kept + copy.deepcopy(entries)
    return {**existing, "hooks": hooks}


def unmerge_settings_hooks(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Remove railctl's hooks, dropping events left without any."""
    cleaned: dict[str, Any] = {}
    for event, entries in _object(existing.get("hooks")).items():
        if not isinstance(entries, list):
            cleaned[event] = entries
            continue
        kept = [e for e in entries if not is_railctl_hook(e)]
        if kept:
            cleaned[event] = kept
    result = dict(existing)
    if cleaned:
        result["hooks"] = cleaned
    else:
        result.pop("hooks", None)
    return result


def merge_mcp_servers(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Register railctl's MCP servers."""
    servers = {**_object(existing.get("mcpServers")), **copy.deepcopy(MCP_SERVERS)}
    return {**existing, "mcpServers": servers}


def unmerge_mcp_servers(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Remove railctl's MCP servers."""
    servers = {k: v for k, v in _object(existing.get("mcpServers")).items() if k not in MCP_SERVERS}
    result = dict(existing)
    if servers:
        result["mcpServers"] = servers
    else:
        result.pop("mcpServers", None)
    return result


def merge_cursor_hooks(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Register railctl's Cursor hooks."""
    hooks = {**_object(existing.get("hooks")), **copy.deepcopy(CURSOR_HOOKS)}
    # Cursor requires a version key
    return {**existing, "version": 1, "hooks": hooks}


def unmerge_cursor_hooks(existing: JsonDocument, ctx: "ProjectContext") -> JsonDocument:
    """Remove railctl's Cursor hooks; the version key goes with the last hook."""
    hooks = {k: v for k, v in _object(existing.get("hooks")).items() if k not in CURSOR_HOOKS}
    result = dict(existing)
    if hooks:
        result["hooks"] = hooks
    else:
        result.pop("hooks", None)
        result.pop("version", None)
    return result


MCP_JSON_MERGE = JsonMergeDefinition(
    keys=("mcpServers.context7", "mcpServers.playwright"),
    merge=merge_mcp_servers,
    unmerge=unmerge_mcp_servers,
    remove_file_if_empty=True,
)

JSON_MERGES: dict[str, JsonMergeDefinition] = {
    ".claude/settings.json": JsonMergeDefinition(
        keys=("hooks",),
        merge=merge_settings_hooks,
        unmerge=unmerge_settings_hooks,
    ),
    ".mcp.json": MCP_JSON_MERGE,
    ".cursor/mcp.json": MCP_JSON_MERGE,
    ".cursor/hooks.json": JsonMergeDefinition(
        keys=("version", "hooks.afterFileEdit", "hooks.stop"),
        merge=merge_cursor_hooks,
        unmerge=unmerge_cursor_hooks,
        remove_file_if_empty=True,
    ),
}

# =============================================================================
# Text patches
# =============================================================================

AGENTS_MD_MARKER = ".railctl/RAILCTL.md"

AGENTS_MD_LINK = (
    "**ALWAYS READ FIRST:** `.railctl/RAILCTL.md`\n"
    "\n"
    "RAILCTL.md holds the development patterns, workflows and conventions of this project.\n"
    "Read it before working on any task.\n"
    "\n"
    "---\n"
    "\n"
)

TEXT_PATCHES: dict[str, TextPatchDefinition] = {
    "AGENTS.md": TextPatchDefinition(
        operation=PatchOperation.PREPEND,
        content=AGENTS_MD_LINK,
        marker=AGENTS_MD_MARKER,
        create_if_missing=True,
    ),
    # AGENTS.md is primary; CLAUDE.md is only patched when the project has one
    "CLAUDE.md": TextPatchDefinition(
        operation=PatchOperation.PREPEND,
        content=AGENTS_MD_LINK,
        marker=AGENTS_MD_MARKER,
    ),
}

# =============================================================================
# Deprecations
# =============================================================================

DEPRECATED_FILES = [
    # Merged into planning-guide.md and testing-guide.md in 0.4
    ".railctl/guides/development-workflow.md",
    ".railctl/guides/tdd-best-practices.md",
    ".railctl/templates/user-stories-template.md",
    # TDD command folded into the testing guide in 0.5
    ".claude/commands/tdd.md",
    ".cursor/commands/tdd.md",
    ".cursor/rules/railctl-enforcing-tdd.mdc",
    # Replaced by session-lint-check.sh in 0.5
    ".railctl/hooks/session-verify-agents.sh",
]

DEPRECATED_DIRECTORIES = [
    ".railctl/lib",
    # Tickets moved to .railctl-project/tickets in 0.5
    ".railctl/tickets",
    ".claude/skills/railctl-enforcing-tdd",
]
