# Overview: Pytest coverage for the Flask CLI commands.

import pytest


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.mark.cli
class TestStoreDemo:
    def test_demo_runs_four_sales(self, runner):
        result = runner.invoke(args=["store", "demo"])

        assert result.exit_code == 0, result.output
        assert "PASS Receipt #1: 17.31 BGN" in result.output
        assert "PASS Receipt #4: 6.96 BGN" in result.output
        assert "Insufficient quantity for Milk. Requested: 20, Available: 6" in result.output
        assert "Revenue:           40.74 BGN" in result.output
        assert "Receipts issued:   4" in result.output
        assert "Milk: 6 units remaining" in result.output


@pytest.mark.cli
class TestReceiptCommands:
    def test_show_and_load(self, runner):
        runner.invoke(args=["store", "demo"])

        shown = runner.invoke(args=["receipts", "show", "2"])
        assert shown.exit_code == 0
        assert shown.output.startswith("Receipt #2\n")
        assert "Total: 6.63 BGN" in shown.output

        loaded = runner.invoke(args=["receipts", "load", "2"])
        assert loaded.exit_code == 0
        assert "Cashier: John Doe (register 1)" in loaded.output
        assert "Total: 6.63 BGN" in loaded.output

    def test_missing_receipt(self, runner):
        result = runner.invoke(args=["receipts", "show", "99"])
        assert result.exit_code != 0
        assert "Receipt #99 not found" in result.output
