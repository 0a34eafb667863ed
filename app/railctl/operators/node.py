"""JavaScript package operator implementation.

Installs and removes development dependencies with npm, pnpm, Yarn or Bun.
"""

import logging
import subprocess
from pathlib import Path

from railctl.models.package import NodeClient, PackageAction, PackageChange, PackageResult, package_actions
from railctl.operators.base import PackageOperator
from railctl.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

# client -> (install args, dev flag, remove args)
_COMMANDS: dict[NodeClient, tuple[list[str], str, list[str]]] = {
    NodeClient.NPM: (["npm", "install"], "--save-dev", ["npm", "uninstall"]),
    NodeClient.PNPM: (["pnpm", "add"], "--save-dev", ["pnpm", "remove"]),
    NodeClient.YARN: (["yarn", "add"], "--dev", ["yarn", "remove"]),
    NodeClient.BUN: (["bun", "add"], "--dev", ["bun", "remove"]),
}


class NodeOperator(PackageOperator):
    """Operator for JavaScript package managers.

    Attributes:
        root: Project root containing package.json.
        timeout: Seconds to wait for each call.
    """

    def __init__(self, root: Path, client: NodeClient = NodeClient.NPM, timeout: float | None = None) -> None:
        """Initialize the operator.

        Args:
            root: Project root directory.
            client: Which package manager to run.
            timeout: Timeout in seconds per call.
        """
        super().__init__(root, timeout)
        self._client = client

    @property
    def client(self) -> NodeClient:
        """Return the configured client."""
        return self._client

    def is_available(self) -> bool:
        """Check if the client executable is on PATH."""
        return command_exists(self._client.value)

    def install(
        self,
        packages: list[str],
        dev: bool = True,
        timeout: float | None = None,
    ) -> list[PackageResult]:
        """Install packages, as devDependencies by default."""
        if not packages:
            return []
        base, dev_flag, _ = _COMMANDS[self._client]
        args = [*base, dev_flag, *packages] if dev else [*base, *packages]
        return self._execute(args, package_actions(PackageChange.INSTALL, packages, self._client), timeout)

    def remove(self, packages: list[str], timeout: float | None = None) -> list[PackageResult]:
        """Remove packages."""
        if not packages:
            return []
        _, _, base = _COMMANDS[self._client]
        return self._execute([*base, *packages], package_actions(PackageChange.REMOVE, packages, self._client), timeout)

    def _execute(self, args: list[str], actions: list[PackageAction], timeout: float | None) -> list[PackageResult]:
        """Run one package manager command for a group of packages.

        The whole group succeeds or fails together, matching how the
        package managers apply a single command.
        """
        limit = timeout if timeout is not None else self.timeout
        logger.info("Running %s", " ".join(args))
        try:
            result = run_command(args, cwd=self.root, timeout=limit)
        except subprocess.TimeoutExpired:
            error = f"{self._client.value} timed out after {limit:g}s"
        except FileNotFoundError:
            error = f"{self._client.value} executable not found"
        else:
            if result.success:
                return [PackageResult(action) for action in actions]
            error = result.error_summary()
        logger.warning("%s failed: %s", " ".join(args[:2]), error)
        return [PackageResult(action, error=error) for action in actions]
