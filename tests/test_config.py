"""Tests for jrender.config."""

import tempfile
from pathlib import Path

import pytest

from jrender.config import JrenderConfig


class TestJrenderConfig:
    """JrenderConfig — frozen dataclass with sensible defaults."""

    def test_defaults(self) -> None:
        config = JrenderConfig()
        assert config.evaluator == "jsonnet"
        assert config.converter == "yq"
        assert config.converter_args == ("-P",)
        assert config.vcs == "git"
        assert config.separator == "---"
        assert config.extensions == (".jsonnet", ".libsonnet")
        assert config.jpath == ()
        assert config.verbose is False

    def test_frozen(self) -> None:
        config = JrenderConfig()
        with pytest.raises(AttributeError):
            config.evaluator = "go-jsonnet"  # type: ignore[misc]

    def test_relative_root_resolved_to_absolute(self) -> None:
        config = JrenderConfig(root=Path("site"))
        assert config.root.is_absolute()

    def test_relative_jpath_resolved_against_root(self, tmp_path: Path) -> None:
        config = JrenderConfig(root=tmp_path, jpath=(Path("vendor"), Path("/opt/lib")))
        assert config.jpath == (tmp_path / "vendor", Path("/opt/lib"))

    def test_required_tools(self) -> None:
        config = JrenderConfig(evaluator="go-jsonnet", converter="yq4")
        assert config.required_tools == ("go-jsonnet", "yq4")


class TestCheckoutParent:

    def test_defaults_to_temp_dir(self) -> None:
        assert JrenderConfig().checkout_parent == Path(tempfile.gettempdir())

    def test_relative_checkout_dir(self, tmp_path: Path) -> None:
        config = JrenderConfig(root=tmp_path, checkout_dir=Path(".cache"))
        assert config.checkout_parent == tmp_path / ".cache"

    def test_absolute_checkout_dir(self, tmp_path: Path) -> None:
        config = JrenderConfig(root=tmp_path, checkout_dir=Path("/var/tmp/jr"))
        assert config.checkout_parent == Path("/var/tmp/jr")


class TestIsSupported:

    @pytest.mark.parametrize("name", ["main.jsonnet", "lib.libsonnet", "a.b.jsonnet"])
    def test_supported(self, name: str) -> None:
        assert JrenderConfig().is_supported(Path(name))

    @pytest.mark.parametrize("name", ["notes.txt", "main.json", "jsonnet", "main.jsonnet.bak"])
    def test_unsupported(self, name: str) -> None:
        assert not JrenderConfig().is_supported(Path(name))
