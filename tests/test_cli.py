"""CLI tests — schema creation and seeding against a throwaway SQLite file."""

from click.testing import CliRunner

from datagov import __version__
from datagov.cli.main import SEED_EMAIL, cli


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_db_then_seed_is_idempotent(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    runner = CliRunner()

    result = runner.invoke(cli, ["init-db", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert "schema created" in result.output

    result = runner.invoke(cli, ["seed", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert SEED_EMAIL in result.output
    assert "My Workspace" in result.output

    result = runner.invoke(cli, ["seed", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert "already exists" in result.output


def test_help_lists_commands():
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("serve", "init-db", "seed", "health"):
        assert command in result.output
