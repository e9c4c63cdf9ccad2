"""CLI smoke tests against the app's own (in-memory) engine."""

from click.testing import CliRunner

from coordinator.cli import cli


def test_init_db_then_expire_proposals():
    runner = CliRunner()

    created = runner.invoke(cli, ["init-db"])
    assert created.exit_code == 0, created.output
    assert "tables" in created.output

    swept = runner.invoke(cli, ["expire-proposals"])
    assert swept.exit_code == 0, swept.output
    assert "Expired 0 proposal(s)" in swept.output
