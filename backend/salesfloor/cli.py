# Overview: Flask CLI command groups for receipt inspection and the sample store run.

# backend/salesfloor/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to salesfloor (PowerShell: $env:FLASK_APP="salesfloor").
# - Use: python -m flask <group> <command> [options]
#
# Receipts:
# - python -m flask receipts show 1
#   Print the stored text rendering of receipt #1.
# - python -m flask receipts load 1
#   Decode the stored snapshot of receipt #1 and print a summary.
#
# Store:
# - python -m flask store demo
#   Stock Milk/Bread/Soap, put a cashier on register 1, ring up four sales,
#   try an oversized one and print the financials.

import click
from datetime import timedelta
from flask.cli import with_appcontext

from .extensions import get_store
from .models import Product, ProductCategory, Cashier
from .services import reporting_service
from .services.persistence_service import ReceiptNotFoundError, ReceiptPersistenceError
from .services.sales_service import InsufficientQuantityError


@click.group('receipts')
def receipts_group():
    """Stored receipt inspection commands."""


@receipts_group.command('show')
@click.argument('number', type=int)
@with_appcontext
def show_receipt(number):
    """
    Print a receipt's text file.

    Example:
        flask receipts show 1
    """
    try:
        click.echo(get_store().read_receipt_text(number), nl=False)
    except ReceiptNotFoundError:
        raise click.ClickException(f"Receipt #{number} not found")
    except ReceiptPersistenceError as e:
        raise click.ClickException(e.message)


@receipts_group.command('load')
@click.argument('number', type=int)
@with_appcontext
def load_receipt(number):
    """
    Decode a receipt snapshot and print a summary.

    Example:
        flask receipts load 1
    """
    store = get_store()
    try:
        receipt = store.reload_receipt(number)
    except ReceiptNotFoundError:
        raise click.ClickException(f"Receipt #{number} not found")
    except ReceiptPersistenceError as e:
        raise click.ClickException(e.message)

    currency = store.config.currency
    click.echo(f"Receipt #{receipt.number} ({receipt.issued_at.isoformat()})")
    click.echo(f"   Cashier: {receipt.cashier.name} (register {receipt.register_number})")
    for line in receipt.lines:
        click.echo(f"   {line.product.name} x{line.quantity} @ {line.unit_price} = {line.line_total:.2f} {currency}")
    click.echo(f"   Total: {receipt.total:.2f} {currency}")


@click.group('store')
def store_group():
    """Store walkthrough commands."""


DEMO_SALES = [
    {1: 2, 2: 1, 3: 3},
    {1: 1, 2: 3},
    {1: 1, 3: 2},
    {2: 2, 3: 1},
]


@store_group.command('demo')
@with_appcontext
def demo():
    """
    Run the sample store: three products, one cashier, four sales.

    Example:
        flask store demo
    """
    store = get_store()
    currency = store.config.currency
    today = store.catalog.today()

    for product in (
        Product(1, "Milk", "2.0", ProductCategory.FOOD, today + timedelta(days=5), 10),
        Product(2, "Bread", "1.5", ProductCategory.FOOD, today + timedelta(days=3), 15),
        Product(3, "Soap", "3.0", ProductCategory.NON_FOOD, today + timedelta(days=365), 20),
    ):
        store.add_product(product)

    cashier = store.add_cashier(Cashier(1, "John Doe", "1500.0"))
    store.assign_cashier_to_register(cashier.id, 1)

    click.echo("START Store demo")
    click.echo("\nInitial inventory:")
    for product in store.delivered_products():
        click.echo(f"   - {product.describe()}")

    for basket in DEMO_SALES:
        receipt = store.create_sale(1, basket)
        click.echo(f"\nPASS Receipt #{receipt.number}: {receipt.total:.2f} {currency}")
        click.echo(f"   Saved to {store.persistence.text_path(receipt.number)}")

    try:
        store.create_sale(1, {1: 20})
    except InsufficientQuantityError as e:
        click.echo(f"\nWARN  {e.message}")

    click.echo("\nFinal inventory:")
    for product in store.delivered_products():
        click.echo(f"   - {product.name}: {product.quantity} units remaining")

    summary = reporting_service.financial_summary(store)
    click.echo("\n" + "=" * 60)
    click.echo(f"Revenue:           {summary['revenue']} {currency}")
    click.echo(f"Delivery expenses: {summary['delivery_expenses']} {currency}")
    click.echo(f"Salary expenses:   {summary['salary_expenses']} {currency}")
    click.echo(f"Income:            {summary['income']} {currency}")
    click.echo(f"Profit:            {summary['profit']} {currency}")
    click.echo(f"Receipts issued:   {summary['receipt_count']}")
    click.echo("=" * 60)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(receipts_group)
    app.cli.add_command(store_group)
