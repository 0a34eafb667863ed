"""Package manager models.

A PackageAction is one install or removal of a development dependency;
operators answer each with a PackageResult.
"""

from dataclasses import dataclass
from enum import Enum


class NodeClient(Enum):
    """JavaScript package manager client.

    Attributes:
        NPM: npm (package-lock.json).
        PNPM: pnpm (pnpm-lock.yaml).
        YARN: Yarn (yarn.lock).
        BUN: Bun (bun.lock / bun.lockb).
    """

    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"
    BUN = "bun"

    @property
    def lockfiles(self) -> tuple[str, ...]:
        """Lock files that identify this client."""
        return _LOCKFILES[self]


_LOCKFILES: dict[NodeClient, tuple[str, ...]] = {
    NodeClient.NPM: ("package-lock.json", "npm-shrinkwrap.json"),
    NodeClient.PNPM: ("pnpm-lock.yaml",),
    NodeClient.YARN: ("yarn.lock",),
    NodeClient.BUN: ("bun.lock", "bun.lockb"),
}


class PackageChange(Enum):
    """Direction of a package action."""

    INSTALL = "install"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class PackageAction:
    """A development dependency to install or remove.

    Attributes:
        change: Install or remove.
        package: Package name as the package manager knows it.
        client: Package manager that handles the package.
        reason: Why railctl wants the change, for display.
    """

    change: PackageChange
    package: str
    client: NodeClient
    reason: str | None = None

    def __post_init__(self) -> None:
        """Reject empty package names."""
        if not self.package:
            msg = "Package name cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class PackageResult:
    """Outcome of a package action.

    Attributes:
        action: The action that was run.
        error: Package manager error output, or None on success.
    """

    action: PackageAction
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the package manager applied the action."""
        return self.error is None


def package_actions(
    change: PackageChange,
    packages: list[str],
    client: NodeClient,
    reason: str | None = None,
) -> list[PackageAction]:
    """Build one action per package.

    Args:
        change: Install or remove.
        packages: Package names.
        client: Package manager client.
        reason: Shared reason for display.

    Returns:
        List of PackageAction in input order.
    """
    return [PackageAction(change, name, client, reason) for name in packages]
