"""End-to-end tests for the click CLI over a temporary data directory."""

import pytest
from click.testing import CliRunner

from storefront.infrastructure.cli.main import cli


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()
    env = {"STOREFRONT_DATA_DIR": str(tmp_path), "STOREFRONT_OPS_EMAIL": "ops@example.com"}

    def _run(*args):
        return runner.invoke(cli, list(args), env=env)

    return _run


@pytest.fixture
def seeded(run):
    result = run(
        "product", "add", "--name", "Panjabi", "--price", "500",
        "--colors", "Red,Blue", "--sizes", "M,L", "--stock", "3",
    )
    assert result.exit_code == 0, result.output
    return run


def _place(run, items="1:Red:M:2", *extra):
    return run(
        "order", "create",
        "--user", "u1",
        "--name", "Alice Rahman",
        "--email", "alice@example.com",
        "--phone", "01700000000",
        "--address", "Road 7, Dhanmondi, Dhaka",
        "--items", items,
        *extra,
    )


class TestProductAndInventory:

    def test_product_list(self, seeded):
        result = seeded("product", "list")
        assert "Panjabi" in result.output
        assert "৳500.00" in result.output

    def test_inventory_show_and_set(self, seeded):
        result = seeded("inventory", "set", "--product", "1", "--color", "Red", "--size", "M",
                        "--quantity", "7", "--operation", "add")
        assert result.exit_code == 0, result.output
        assert "is now 10" in result.output
        assert "Red-M" in seeded("inventory", "show").output

    def test_inventory_set_unknown_variant(self, seeded):
        result = seeded("inventory", "set", "--product", "1", "--color", "Pink", "--size", "M",
                        "--quantity", "1")
        assert result.exit_code != 0
        assert "variant not found" in result.output

    def test_alerts(self, seeded):
        result = seeded("inventory", "alerts")
        assert "[low_stock] Panjabi (Red-M) is low on stock (3 left)" in result.output


class TestOrderCommands:

    def test_quote(self, run):
        result = run("order", "quote", "--items", "1:Red:M:2@500",
                     "--address", "Dhanmondi, Dhaka", "--promo", "WELCOME10")
        assert result.exit_code == 0, result.output
        assert "৳970.00" in result.output
        assert "Welcome 10% off applied successfully" in result.output

    def test_create_show_and_walk_lifecycle(self, seeded):
        result = _place(seeded)
        assert result.exit_code == 0, result.output
        assert "status=pending" in result.output
        assert "Total: ৳1070.00" in result.output

        shown = seeded("order", "show", "--id", "1")
        assert "Panjabi" in shown.output
        assert "৳1070.00" in shown.output

        assert seeded("order", "confirm", "--id", "1").exit_code == 0
        advanced = seeded("order", "advance", "--id", "1")
        assert "is now processing" in advanced.output
        assert "processing" in seeded("order", "list").output

    def test_create_rejects_out_of_stock(self, seeded):
        result = _place(seeded, "1:Red:M:5")
        assert result.exit_code != 0
        assert "Some items are out of stock" in result.output
        assert "only 3 available, requested 5" in result.output
        assert "No orders found." in seeded("order", "list").output

    def test_create_lists_every_validation_error(self, seeded):
        result = seeded(
            "order", "create", "--user", "u1", "--name", "A", "--email", "bad",
            "--phone", "1", "--address", "x", "--items", "1:Red:M:1",
        )
        assert result.exit_code != 0
        assert "4 validation error(s) found" in result.output
        assert "Valid email address is required" in result.output

    def test_bad_item_format(self, seeded):
        result = _place(seeded, "1:Red:2")
        assert result.exit_code != 0
        assert "Expected 'ProductId:Color:Size:Qty'" in result.output

    def test_cancel_restores_stock(self, seeded):
        _place(seeded)
        result = seeded("order", "cancel", "--id", "1", "--reason", "changed mind")
        assert result.exit_code == 0, result.output
        stock_line = f"{'Panjabi':<20} {'Red-M':<14} {3:>8} {0:>10}"
        assert stock_line in seeded("inventory", "show").output
        shown = seeded("order", "show", "--id", "1")
        assert "status=cancelled" in shown.output

    def test_show_unknown_order(self, run):
        result = run("order", "show", "--id", "9")
        assert result.exit_code != 0
        assert "Order #9 not found" in result.output


class TestPromoCommands:

    def test_add_and_check(self, run):
        result = run("promo", "add", "--code", "eid25", "--type", "percentage", "--value", "25",
                     "--minimum", "1000", "--usage-limit", "5")
        assert result.exit_code == 0, result.output
        assert "Promo EID25 added" in result.output

        checked = run("promo", "check", "--code", "EID25", "--subtotal", "2000")
        assert "-৳500.00 (dynamic)" in checked.output

    def test_check_below_minimum(self, run):
        checked = run("promo", "check", "--code", "FIRST100", "--subtotal", "200")
        assert "Minimum order of ৳1000.00 required" in checked.output


class TestConfiguration:

    def test_bad_environment_is_reported(self, tmp_path):
        result = CliRunner().invoke(
            cli, ["order", "list"],
            env={"STOREFRONT_DATA_DIR": str(tmp_path), "STOREFRONT_DEDUCTION_POLICY": "rollback"},
        )
        assert result.exit_code != 0
        assert "STOREFRONT_DEDUCTION_POLICY" in result.output
