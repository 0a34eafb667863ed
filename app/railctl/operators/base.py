"""Abstract base class for package operators.

This module defines the PackageOperator interface that package manager
integrations must implement.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from railctl.models.package import NodeClient, PackageResult


class PackageOperator(ABC):
    """Abstract base class for all package operators.

    Operators install and remove development dependencies in a project
    by running its package manager. Each call is a blocking, all-or-nothing
    subprocess subject to the operator's timeout.

    Attributes:
        root: Project root the package manager runs in.
        timeout: Seconds to wait for each package manager call.

    Example:
        >>> operator = NodeOperator(Path("."), NodeClient.NPM)
        >>> if operator.is_available():
        ...     results = operator.install(["eslint", "knip"])
        ...     for result in results:
        ...         print(result.action.package, result.success)
    """

    DEFAULT_TIMEOUT: float = 300.0

    def __init__(self, root: Path, timeout: float | None = None) -> None:
        """Initialize the operator.

        Args:
            root: Project root directory.
            timeout: Timeout in seconds per call (default: DEFAULT_TIMEOUT).
        """
        self.root = root
        self.timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT

    @property
    @abstractmethod
    def client(self) -> NodeClient:
        """Return the package manager client this operator drives."""

    @abstractmethod
    def install(
        self,
        packages: list[str],
        dev: bool = True,
        timeout: float | None = None,
    ) -> list[PackageResult]:
        """Install one or more packages.

        Args:
            packages: Package names to install.
            dev: Install as development dependencies.
            timeout: Override of the operator timeout for this call.

        Returns:
            List of PackageResult for each package.
        """

    @abstractmethod
    def remove(self, packages: list[str], timeout: float | None = None) -> list[PackageResult]:
        """Remove one or more packages.

        Args:
            packages: Package names to remove.
            timeout: Override of the operator timeout for this call.

        Returns:
            List of PackageResult for each package.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the package manager is available on the system.

        Returns:
            True if the package manager can be used, False otherwise.
        """
