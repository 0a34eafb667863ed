"""Unit tests for PythonDetector."""

from pathlib import Path

import pytest
from railctl.scanners.python import PythonDetector, parse_requirement, read_pyproject


class TestParseRequirement:
    """Tests for parse_requirement."""

    @pytest.mark.parametrize(
        ("requirement", "expected"),
        [
            ("pydantic>=2.0", ("pydantic", ">=2.0")),
            ("Typer", ("typer", "")),
            ("rich[jupyter] >= 13", ("rich", "[jupyter] >= 13")),
            ('tomli>=2; python_version < "3.11"', ("tomli", ">=2")),
        ],
    )
    def test_parse(self, requirement: str, expected: tuple[str, str]) -> None:
        """Names are lowercased and markers dropped."""
        assert parse_requirement(requirement) == expected

    def test_unparseable(self) -> None:
        """Strings without a name yield None."""
        assert parse_requirement(">=1.0") is None


class TestReadPyproject:
    """Tests for read_pyproject."""

    def test_missing(self, tmp_path: Path) -> None:
        """A missing file reads as empty."""
        assert read_pyproject(tmp_path / "pyproject.toml") == {}

    def test_malformed(self, tmp_path: Path) -> None:
        """Invalid TOML reads as empty."""
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\n")
        assert read_pyproject(path) == {}


class TestPythonDetector:
    """Tests for PythonDetector."""

    @pytest.mark.parametrize("marker", ["pyproject.toml", "setup.py", "setup.cfg", "requirements.txt"])
    def test_presence(self, project: Path, marker: str) -> None:
        """Any of the usual manifests marks a Python project."""
        detector = PythonDetector(project)
        assert not detector.is_present()
        (project / marker).write_text("")
        assert detector.is_present()

    def test_dependencies(self, project: Path) -> None:
        """Project, optional and group dependencies are read."""
        (project / "pyproject.toml").write_text(
            "[project]\n"
            'name = "My-Service"\n'
            'dependencies = ["fastapi>=0.110"]\n'
            "[project.optional-dependencies]\n"
            'test = ["pytest>=8"]\n'
            "[dependency-groups]\n"
            'dev = ["ruff"]\n'
        )

        detection = PythonDetector(project).detect()

        assert detection.languages == {"python"}
        assert detection.dependencies == {"fastapi": ">=0.110", "pytest": ">=8", "ruff": ""}
        assert detection.dev_dependencies == {"pytest": ">=8", "ruff": ""}
        assert detection.python_package == "my_service"

    def test_tool_configuration(self, project: Path) -> None:
        """Ruff and mypy configuration in pyproject.toml is reported."""
        (project / "pyproject.toml").write_text("[tool.ruff]\nline-length = 100\n[tool.mypy]\nstrict = true\n")
        assert PythonDetector(project).detect().tooling == {"ruff_config", "mypy_config"}

    def test_config_files(self, project: Path) -> None:
        """Standalone config files are reported unless ignored."""
        (project / "setup.py").write_text("")
        (project / "ruff.toml").write_text("")
        (project / "mypy.ini").write_text("")

        assert PythonDetector(project).detect().tooling == {"ruff_config", "mypy_config"}
        ignored = PythonDetector(project, ignore=frozenset({"ruff.toml"}))
        assert ignored.detect().tooling == {"mypy_config"}

    def test_root_package_fallbacks(self, tmp_path: Path) -> None:
        """Without a project name, src/ or the directory name is used."""
        root = tmp_path / "data-tool"
        root.mkdir()
        (root / "setup.py").write_text("")
        assert PythonDetector(root).detect().python_package == "data_tool"

        (root / "src").mkdir()
        assert PythonDetector(root).detect().python_package == "src"

    def test_layers(self, project: Path) -> None:
        """Layers are reported in dependency order."""
        (project / "setup.py").write_text("")
        for name in ("src/api", "src/models", "services"):
            (project / name).mkdir(parents=True)

        assert PythonDetector(project).detect().python_layers == ("domain", "services", "api")
