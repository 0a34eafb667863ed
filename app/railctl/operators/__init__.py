"""Package operators.

Operators run a project's package manager to install and remove the
development dependencies the schema declares.
"""

import logging
from pathlib import Path

from railctl.core.config import RailctlConfig
from railctl.models.package import NodeClient
from railctl.operators.base import PackageOperator
from railctl.operators.node import NodeOperator

logger = logging.getLogger(__name__)

__all__ = [
    "NodeOperator",
    "PackageOperator",
    "detect_node_client",
    "get_package_operator",
]

# Checked in order; the first lock file found decides
_CLIENT_PRIORITY = (NodeClient.BUN, NodeClient.PNPM, NodeClient.YARN, NodeClient.NPM)


def detect_node_client(root: Path) -> NodeClient:
    """Pick the package manager from the project's lock files.

    Args:
        root: Project root directory.

    Returns:
        The client whose lock file is present, npm if none is.
    """
    for client in _CLIENT_PRIORITY:
        if any((root / lockfile).is_file() for lockfile in client.lockfiles):
            return client
    return NodeClient.NPM


def get_package_operator(root: Path, config: RailctlConfig) -> PackageOperator | None:
    """Get the package operator for a project.

    Args:
        root: Project root directory.
        config: User configuration.

    Returns:
        A ready operator, or None if package installs are disabled or the
        package manager is not installed (packages are then reported as
        pending).
    """
    if not config.install_packages:
        logger.debug("Package installation disabled by configuration")
        return None
    client = config.package_manager or detect_node_client(root)
    operator = NodeOperator(root, client, timeout=config.package_timeout_seconds)
    if not operator.is_available():
        logger.warning("%s is not available; packages will need manual install", client.value)
        return None
    return operator
