"""Smoke tests for the click CLI against a throwaway SQLite file."""

import pytest
from click.testing import CliRunner

from storefront.infrastructure import bootstrap
from storefront.infrastructure.cli.main import cli
from storefront.infrastructure.config import get_settings

SHIP = "full_name=Jane Doe;street=1 Main St;city=Springfield;postal_code=12345;country=US"


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    get_settings.cache_clear()
    bootstrap.session_factory.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()
    bootstrap.session_factory.cache_clear()


def _invoke(runner: CliRunner, *args: str):
    return runner.invoke(cli, list(args), catch_exceptions=False)


class TestCheckoutFlow:

    def test_add_product_reserve_and_order(self, runner):
        result = _invoke(runner, "product", "add", "--name", "Widget", "--price", "10.00", "--stock", "10")
        assert result.exit_code == 0
        assert "Product #1 'Widget' added" in result.output

        result = _invoke(runner, "cart", "add", "--user", "alice", "--product", "1", "--quantity", "2")
        assert result.exit_code == 0
        assert "$20.00" in result.output

        result = _invoke(runner, "inventory", "show")
        assert "Widget" in result.output

        result = _invoke(runner, "order", "create", "--user", "alice", "--payment-method", "cod", "--ship", SHIP)
        assert result.exit_code == 0
        assert "PENDING" in result.output

        result = _invoke(runner, "order", "list", "--user", "alice")
        assert "pending" in result.output

    def test_insufficient_stock_is_reported(self, runner):
        _invoke(runner, "product", "add", "--name", "Widget", "--price", "10.00", "--stock", "1")
        result = _invoke(runner, "cart", "add", "--user", "alice", "--product", "1", "--quantity", "2")
        assert result.exit_code == 1
        assert "Insufficient stock" in result.output

    def test_empty_cart_order_refused(self, runner):
        result = _invoke(runner, "order", "create", "--user", "bob", "--payment-method", "cc", "--ship", SHIP)
        assert result.exit_code == 1
        assert "Cart is empty" in result.output

    def test_bad_address(self, runner):
        result = _invoke(runner, "order", "create", "--user", "bob", "--payment-method", "cc", "--ship", "city")
        assert result.exit_code == 2
        assert "key=value" in result.output


class TestMaintenance:

    def test_purge_and_reconcile(self, runner):
        result = _invoke(runner, "maintenance", "purge-reservations")
        assert "Removed 0 expired reservation(s)." in result.output
        result = _invoke(runner, "maintenance", "reconcile-payments")
        assert "Nothing to reconcile." in result.output
