"""Tests for account commands."""

from microledger.cli.main import cli


def test_init_accounts(cli_runner, temp_db):
    """Test seeding the chart twice only creates accounts once."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])

    assert result.exit_code == 0
    assert "Created 45 account(s)." in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])
    assert result.exit_code == 0
    assert "already initialized" in result.output


def test_account_create(cli_runner, temp_db):
    """Test creating an account with an opening balance."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "account",
            "create",
            "3010",
            "Capital",
            "--type",
            "equity",
            "--opening-balance=-5000",
        ],
    )

    assert result.exit_code == 0
    assert "Created account 3010 'Capital' (equity)" in result.output
    assert temp_db.get_account("3010").opening_balance == -5000


def test_account_create_duplicate(cli_runner, temp_db):
    """Test creating a duplicate account code fails."""
    args = ["--db-path", temp_db.database_path, "account", "create", "1010", "Cash", "--type", "asset"]
    result1 = cli_runner.invoke(cli, args)
    assert result1.exit_code == 0

    result2 = cli_runner.invoke(cli, args)

    assert result2.exit_code == 1
    assert "already exists" in result2.output.lower()


def test_account_create_parent_type_mismatch(cli_runner, temp_db):
    cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])

    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "account",
            "create",
            "4090",
            "Odd revenue",
            "--type",
            "revenue",
            "--parent",
            "1000",
        ],
    )

    assert result.exit_code == 1
    assert "Invalid parent '1000'" in result.output


def test_account_list_empty(cli_runner, temp_db):
    """Test listing accounts when none exist."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "No accounts found" in result.output


def test_account_list_with_filter_and_tree(cli_runner, temp_db):
    """Test listing seeded accounts by type and as a tree."""
    cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "list", "--type", "liability"]
    )
    assert result.exit_code == 0
    assert "Output tax" in result.output
    assert "Cash" not in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list", "--tree"])
    assert result.exit_code == 0
    assert "        2041 Output tax" in result.output


def test_account_show_by_name(cli_runner, temp_db):
    cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "show", "bank"])

    assert result.exit_code == 0
    assert "Code:            1020" in result.output
    assert "Lines posted:    0" in result.output


def test_account_show_unknown(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "show", "Nowhere"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_account_rename(cli_runner, temp_db):
    cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])

    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "account", "rename", "1010", "Cash box", "--description", "Till"],
    )

    assert result.exit_code == 0
    assert "Renamed account 1010 to 'Cash box'" in result.output
    account = temp_db.get_account("1010")
    assert account.name == "Cash box"
    assert account.description == "Till"


def test_account_delete(cli_runner, temp_db):
    """Test deleting an account, with and without confirmation."""
    cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "delete", "5060"], input="n\n"
    )
    assert result.exit_code == 0
    assert "Deletion cancelled." in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "delete", "5060", "--yes"]
    )
    assert result.exit_code == 0
    assert "Deleted account 5060 'Maintenance'" in result.output
    assert temp_db.get_account("5060") is None


def test_account_delete_blocked(cli_runner, temp_db):
    """Test that accounts with children or journal lines are kept."""
    cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])
    cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "quick", "receipt", "50"])

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "delete", "1010", "--yes"]
    )
    assert result.exit_code == 1
    assert "referenced by 1 transaction" in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "delete", "2040", "--yes"]
    )
    assert result.exit_code == 1
    assert "child accounts 2041, 2045" in result.output
