"""CLI tests."""

from ministrygrants.cli import app


def test_version(cli_runner):
    result = cli_runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "Ministry-Grants v1.0.0" in result.output


def test_help_lists_command_groups(cli_runner):
    result = cli_runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("db", "ministries", "grants", "funds", "serve", "stats"):
        assert command in result.output


def test_db_init_seed_and_stats(cli_runner):
    init = cli_runner.invoke(app, ["db", "init", "--drop-existing"])
    assert init.exit_code == 0, init.output
    assert "Database initialized" in init.output

    seed = cli_runner.invoke(app, ["db", "seed"])
    assert seed.exit_code == 0, seed.output
    assert "11 ministries (10 verified)" in seed.output

    stats = cli_runner.invoke(app, ["stats"])
    assert stats.exit_code == 0, stats.output
    assert "43000.00" in stats.output


def test_ministries_list(cli_runner):
    cli_runner.invoke(app, ["db", "seed"])

    result = cli_runner.invoke(app, ["ministries", "list", "--category", "HUMANITARIAN"])

    assert result.exit_code == 0, result.output
    assert "World Vision" in result.output
    assert "Wheaton College" not in result.output


def test_ministries_list_rejects_bad_cursor(cli_runner):
    result = cli_runner.invoke(app, ["ministries", "list", "--after", "bogus"])

    assert result.exit_code == 1
    assert "INVALID_CURSOR" in result.output


def test_grant_commands(cli_runner):
    cli_runner.invoke(app, ["db", "seed"])

    # Seeded grant 3 is APPROVED for $10,000 from a $50,000 fund
    funded = cli_runner.invoke(app, ["grants", "fund", "3"])
    assert funded.exit_code == 0, funded.output
    assert "Grant 3 funded" in funded.output

    again = cli_runner.invoke(app, ["grants", "fund", "3"])
    assert again.exit_code == 1
    assert "INVALID_TRANSITION" in again.output

    approved = cli_runner.invoke(app, ["grants", "approve", "1"])
    assert approved.exit_code == 0, approved.output

    rejected = cli_runner.invoke(app, ["grants", "reject", "2", "--reason", "Duplicate"])
    assert rejected.exit_code == 0, rejected.output

    missing = cli_runner.invoke(app, ["grants", "approve", "999"])
    assert missing.exit_code == 1
    assert "GRANT_NOT_FOUND" in missing.output


def test_funds_contribute(cli_runner):
    cli_runner.invoke(app, ["db", "seed"])

    result = cli_runner.invoke(app, ["funds", "contribute", "1", "2500.00"])
    assert result.exit_code == 0, result.output
    assert "52500.00" in result.output

    invalid = cli_runner.invoke(app, ["funds", "contribute", "1", "0"])
    assert invalid.exit_code == 1
    assert "INVALID_AMOUNT" in invalid.output


def test_out_of_range_grant_id_is_a_usage_error(cli_runner):
    result = cli_runner.invoke(app, ["grants", "fund", "99999999999999999999"])

    assert result.exit_code == 2
