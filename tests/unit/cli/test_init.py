"""Unit tests for the init command."""

from pathlib import Path

from filetidy.cli.main import app
from filetidy.core.rules import load_rule_file, starter_rules
from typer.testing import CliRunner

runner = CliRunner()


class TestInitCommand:
    """Tests for `filetidy init`."""

    def test_writes_default_location(self, xdg_dirs: dict[str, Path]) -> None:
        """Starter rules land in the XDG config dir."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "Rule file written" in result.stdout
        assert "Archive PDFs" in result.stdout
        assert "(disabled)" in result.stdout
        assert load_rule_file(xdg_dirs["config"] / "rules.toml") == starter_rules()

    def test_custom_output(self, tmp_path: Path, xdg_dirs: dict[str, Path]) -> None:
        """--output writes elsewhere."""
        target = tmp_path / "custom" / "rules.toml"

        result = runner.invoke(app, ["init", "-o", str(target)])

        assert result.exit_code == 0
        assert target.exists()
        assert not (xdg_dirs["config"] / "rules.toml").exists()

    def test_refuses_to_overwrite(self, tmp_path: Path, xdg_dirs: dict[str, Path]) -> None:
        """An existing file is kept unless --force is given."""
        target = tmp_path / "rules.toml"
        target.write_text("# mine\n")

        result = runner.invoke(app, ["init", "-o", str(target)])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert target.read_text() == "# mine\n"

    def test_force_overwrites(self, tmp_path: Path, xdg_dirs: dict[str, Path]) -> None:
        """--force replaces the file."""
        target = tmp_path / "rules.toml"
        target.write_text("# mine\n")

        result = runner.invoke(app, ["init", "-o", str(target), "--force"])

        assert result.exit_code == 0
        assert load_rule_file(target) == starter_rules()
