# Overview: Flask CLI command groups for bootstrap, store setup, and ledger repair.

# backend/shopledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to shopledger (PowerShell: $env:FLASK_APP="shopledger").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Stores:
# - python -m flask stores create-business --name "Acme Retail"
# - python -m flask stores create --business-id 1 --name "Downtown" --code DT01
#   Creates the store and its customer-number counter.
# - python -m flask stores list
# - python -m flask stores next-number --store-id 1
#   Show the customer number the next allocation will return.
# - python -m flask stores allocate-number --store-id 1
#   Allocate (and consume) one customer number.
#
# Ledger:
# - python -m flask ledger rebuild-profit-loss --store-id 1
#   Recompute every ProfitLoss row of a store from orders and inventory.
# - python -m flask ledger events --store-id 1 --limit 20

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Business, Store, Customer, InventoryItem
from .services import ledger_service, profit_loss_service, sequence_service, store_service
from .services.errors import LedgerError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask stores create-business' next.")


@click.group('stores')
def stores_group():
    """Business and store management commands."""


@stores_group.command('create-business')
@click.option('--name', required=True, help='Business name')
@with_appcontext
def create_business_cli(name):
    """Create a new business (tenant)."""
    try:
        business = store_service.create_business(name)
    except LedgerError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Created business: {business.name} (ID: {business.id})")


@stores_group.command('create')
@click.option('--business-id', type=int, required=True, help='Business ID')
@click.option('--name', required=True, help='Store name')
@click.option('--code', required=True, help='Store code, 1-10 letters or digits')
@click.option('--currency', default='NGN', show_default=True, help='Currency code')
@with_appcontext
def create_store_cli(business_id, name, code, currency):
    """Add a store to a business."""
    try:
        store = store_service.create_store(business_id=business_id, name=name, code=code, currency=currency)
    except LedgerError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Created store: {store.name} (ID: {store.id}, Code: {store.code})")


@stores_group.command('list')
@with_appcontext
def list_stores_cli():
    """List all stores with their customer and item counts."""
    stores = db.session.query(Store).order_by(Store.business_id, Store.id).all()
    if not stores:
        click.echo("No stores found.")
        return

    click.echo("\n" + "=" * 80)
    click.echo(f"{'ID':<5} {'Business':<25} {'Name':<25} {'Code':<10} {'Customers':<10} {'Items'}")
    click.echo("=" * 80)
    for store in stores:
        business = db.session.get(Business, store.business_id)
        customers = db.session.query(Customer).filter_by(store_id=store.id).count()
        items = db.session.query(InventoryItem).filter_by(store_id=store.id).count()
        click.echo(f"{store.id:<5} {business.name:<25} {store.name:<25} {store.code:<10} {customers:<10} {items}")
    click.echo("=" * 80 + "\n")


@stores_group.command('next-number')
@click.option('--store-id', type=int, required=True, help='Store ID')
@with_appcontext
def next_number_cli(store_id):
    """Preview the next customer number (does not consume it)."""
    try:
        click.echo(sequence_service.peek_next_customer_number(store_id))
    except LedgerError as e:
        raise click.ClickException(e.message)


@stores_group.command('allocate-number')
@click.option('--store-id', type=int, required=True, help='Store ID')
@with_appcontext
def allocate_number_cli(store_id):
    """Allocate one customer number."""
    try:
        click.echo(sequence_service.allocate_customer_number(store_id))
    except LedgerError as e:
        raise click.ClickException(e.message)


@click.group('ledger')
def ledger_group():
    """Sales ledger inspection and repair commands."""


@ledger_group.command('rebuild-profit-loss')
@click.option('--store-id', type=int, required=True, help='Store ID')
@with_appcontext
def rebuild_profit_loss_cli(store_id):
    """Recompute every profit/loss row of a store from source records."""
    try:
        store_service.get_store(store_id)
    except LedgerError as e:
        raise click.ClickException(e.message)
    count = profit_loss_service.rebuild_store_profit_loss(store_id)
    click.echo(f"PASS Rebuilt {count} profit/loss row(s) for store {store_id}")


@ledger_group.command('events')
@click.option('--store-id', type=int, required=True, help='Store ID')
@click.option('--limit', type=int, default=50, show_default=True)
@with_appcontext
def list_events_cli(store_id, limit):
    """Show the most recent ledger events of a store."""
    events = ledger_service.list_ledger_events(store_id=store_id, limit=limit)
    if not events:
        click.echo("No ledger events found.")
        return
    for ev in events:
        click.echo(f"{ev.id:<6} {ev.occurred_at:%Y-%m-%d %H:%M:%S}  {ev.event_type:<22} {ev.entity_type}#{ev.entity_id}  {ev.note or ''}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(stores_group)
    app.cli.add_command(ledger_group)
