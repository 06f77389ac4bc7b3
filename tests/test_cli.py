"""Tests for the spendlog command line."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from spendlog.cli import app
from spendlog.store.ledger import LedgerStore

runner = CliRunner()


@pytest.fixture
def db_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "data" / "spendlog.db"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("SPENDLOG_DB_PATH", str(path))
    return path


class TestInit:
    """Tests for the init command."""

    def test_creates_database_and_config(self, db_path: Path, tmp_path: Path) -> None:
        """Should create both files."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert db_path.exists()
        assert (tmp_path / "config" / "spendlog" / "config.toml").exists()

    def test_refuses_to_overwrite(self, db_path: Path) -> None:
        """Should fail without --force when files exist."""
        runner.invoke(app, ["init"])
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_migrate_requires_database(self, db_path: Path) -> None:
        """Should fail to migrate a missing database."""
        result = runner.invoke(app, ["init", "--migrate"])

        assert result.exit_code == 1
        assert "No database found" in result.output


class TestAdd:
    """Tests for the add command."""

    def test_adds_expense(self, db_path: Path) -> None:
        """Should store the expense in minor units."""
        result = runner.invoke(
            app, ["add", "199.50", "Food", "--date", "2025-03-15", "--user", "alice", "--key", "key-1"]
        )

        assert result.exit_code == 0
        assert "Expense added" in result.output
        with LedgerStore(db_path) as store:
            expense = store.find_by_key("key-1")  # type: ignore[arg-type]
        assert expense is not None
        assert expense.amount_minor == 19950

    def test_same_key_replays(self, db_path: Path) -> None:
        """Should report an existing expense instead of adding another."""
        args = ["add", "10", "Food", "--date", "2025-03-15", "--user", "alice", "--key", "key-1"]
        runner.invoke(app, args)
        result = runner.invoke(app, args)

        assert result.exit_code == 0
        assert "already existed" in result.output
        with LedgerStore(db_path) as store:
            assert store.list_expenses().count == 1

    def test_validation_errors(self, db_path: Path) -> None:
        """Should print each field error and exit 1."""
        result = runner.invoke(app, ["add", "--date", "2025-02-30", "--user", "alice", "--", "-10.00", "Food"])

        assert result.exit_code == 1
        assert "amount:" in result.output
        assert "date:" in result.output
        with LedgerStore(db_path) as store:
            assert store.list_expenses().count == 0

    def test_requires_user(self, db_path: Path) -> None:
        """Should fail when no user is given or configured."""
        result = runner.invoke(app, ["add", "10.00", "Food", "--date", "2025-03-15"])

        assert result.exit_code == 1
        assert "user is required" in result.output


class TestQueries:
    """Tests for list, summary and users."""

    @pytest.fixture(autouse=True)
    def seed(self, db_path: Path) -> None:
        for key, amount, category, user in [
            ("a", "10.00", "Food", "alice"),
            ("b", "30.00", "Travel", "bob"),
            ("c", "5.00", "Food", "alice"),
        ]:
            runner.invoke(app, ["add", amount, category, "--date", "2025-03-15", "--user", user, "--key", key])

    def test_list(self) -> None:
        """Should show the total."""
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "45.00" in result.output

    def test_list_filtered(self) -> None:
        """Should show only the filtered total."""
        result = runner.invoke(app, ["list", "--user", "alice"])

        assert result.exit_code == 0
        assert "15.00" in result.output
        assert "45.00" not in result.output

    def test_summary(self) -> None:
        """Should show the grand total."""
        result = runner.invoke(app, ["summary"])

        assert result.exit_code == 0
        assert "Grand total" in result.output
        assert "Travel" in result.output

    def test_users(self) -> None:
        """Should list each user once."""
        result = runner.invoke(app, ["users"])

        assert result.exit_code == 0
        assert result.output.split() == ["alice", "bob"]
