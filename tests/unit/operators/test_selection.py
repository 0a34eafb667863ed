"""Unit tests for package manager selection."""

from pathlib import Path
from unittest.mock import patch

import pytest
from railctl.core.config import RailctlConfig
from railctl.models.package import NodeClient
from railctl.operators import NodeOperator, detect_node_client, get_package_operator


class TestDetectNodeClient:
    """Tests for detect_node_client."""

    @pytest.mark.parametrize(
        ("lockfile", "client"),
        [
            ("bun.lockb", NodeClient.BUN),
            ("bun.lock", NodeClient.BUN),
            ("pnpm-lock.yaml", NodeClient.PNPM),
            ("yarn.lock", NodeClient.YARN),
            ("package-lock.json", NodeClient.NPM),
        ],
    )
    def test_lockfiles(self, tmp_path: Path, lockfile: str, client: NodeClient) -> None:
        """The lock file decides the client."""
        (tmp_path / lockfile).write_text("")
        assert detect_node_client(tmp_path) is client

    def test_default_is_npm(self, tmp_path: Path) -> None:
        """Without a lock file npm is used."""
        assert detect_node_client(tmp_path) is NodeClient.NPM

    def test_priority(self, tmp_path: Path) -> None:
        """Bun wins over pnpm, which wins over yarn."""
        for lockfile in ("yarn.lock", "pnpm-lock.yaml"):
            (tmp_path / lockfile).write_text("")
        assert detect_node_client(tmp_path) is NodeClient.PNPM


class TestGetPackageOperator:
    """Tests for get_package_operator."""

    def test_disabled_by_config(self, tmp_path: Path) -> None:
        """install_packages = false means no operator."""
        assert get_package_operator(tmp_path, RailctlConfig(install_packages=False)) is None

    def test_configured_client(self, tmp_path: Path) -> None:
        """A configured package manager overrides lock file detection."""
        (tmp_path / "yarn.lock").write_text("")
        config = RailctlConfig(package_manager=NodeClient.BUN, package_timeout_seconds=60)

        with patch("railctl.operators.node.command_exists", return_value=True):
            operator = get_package_operator(tmp_path, config)

        assert isinstance(operator, NodeOperator)
        assert operator.client is NodeClient.BUN
        assert operator.timeout == 60

    def test_unavailable_client(self, tmp_path: Path) -> None:
        """A missing executable means no operator."""
        with patch("railctl.operators.node.command_exists", return_value=False):
            assert get_package_operator(tmp_path, RailctlConfig()) is None
