# Overview: Flask CLI command groups for the master shop network and cross-shop ledger.

# backend/retail360/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: python -m flask --app retail360 <group> <command> [options]
#
# System bootstrap:
# - python -m flask --app retail360 system init-db
#   Create all tables (idempotent).
# - python -m flask --app retail360 system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Shops and hierarchy:
# - python -m flask --app retail360 shops create --name "Osu Mart" --phone 0240000000 --owner-id 1 --master
# - python -m flask --app retail360 shops show 1
# - python -m flask --app retail360 shops designate-master 1
# - python -m flask --app retail360 shops connect 2 --master-id 1 --type branch --share-revenue
# - python -m flask --app retail360 shops disconnect 2 --master-id 1
# - python -m flask --app retail360 shops connections 1 [--all]
# - python -m flask --app retail360 shops network-revenue 1
# - python -m flask --app retail360 shops record-revenue 1 15000
#
# Users and debts:
# - python -m flask --app retail360 users create --name "Ama" --email ama@shop.gh --phone 0241111111
# - python -m flask --app retail360 users show 1
# - python -m flask --app retail360 users set-master 1 1
# - python -m flask --app retail360 users network 1
# - python -m flask --app retail360 users set-debt 1 2 5000
# - python -m flask --app retail360 users debt 1 [--shop-id 2]
# - python -m flask --app retail360 users report 1
#
# Cross-shop transactions:
# - python -m flask --app retail360 transactions record --from-shop 2 --to-shop 1 --user-id 1 --type loan --amount 2000
# - python -m flask --app retail360 transactions show 1
# - python -m flask --app retail360 transactions complete 1
# - python -m flask --app retail360 transactions cancel 1 --reason "entered twice"
# - python -m flask --app retail360 transactions post 1
# - python -m flask --app retail360 transactions list [--shop-id 1] [--status pending]

import functools
import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Shop, ShopConnection, UserOwnedShop
from .models.ledger import TRANSACTION_TYPES
from .models.shops import BUSINESS_TYPES, CONNECTION_TYPES
from .models.users import USER_ROLES
from .services.errors import MasterShopError
from .services.hierarchy_service import HierarchyService
from .services.ledger_service import LedgerService
from .services.report_service import consolidated_financial_report
from .services.shop_service import ShopService
from .services.store import ShopStore
from .time_utils import parse_due_date


def service_command(func):
    """Translate service failures into CLI errors; log anything unexpected."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MasterShopError as exc:
            raise click.ClickException(str(exc)) from exc
        except click.ClickException:
            raise
        except Exception:
            current_app.logger.exception("Command %s failed", func.__name__)
            raise
    return wrapper


def _describe_connection(connection: ShopConnection) -> str:
    settings = connection.financial_settings()
    flags = ", ".join(key for key, value in settings.items() if value) or "none"
    state = "active" if connection.is_active else "inactive"
    return (
        f"  [{connection.id}] shop {connection.child_shop_id} "
        f"({connection.connection_type}, {state}) settings: {flags}"
    )


def _format_cents(amount: int) -> str:
    return f"{amount / 100:.2f}"


def _parse_due_date(ctx, param, value):
    try:
        return parse_due_date(value)
    except ValueError as exc:
        raise click.BadParameter(f"{value!r} is not an ISO-8601 date") from exc


# ----------------------------------------------------------------------
# system
# ----------------------------------------------------------------------

@click.group('system')
def system_group():
    """Database bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables. Safe to run repeatedly."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


# ----------------------------------------------------------------------
# shops
# ----------------------------------------------------------------------

@click.group('shops')
def shops_group():
    """Shop creation and master shop hierarchy."""


@shops_group.command('create')
@click.option('--name', required=True, help='Shop name')
@click.option('--phone', required=True, help='Shop phone number')
@click.option('--business-type', type=click.Choice(BUSINESS_TYPES), default='other', show_default=True)
@click.option('--owner-id', type=int, help='Owning user ID')
@click.option('--master', 'set_as_master', is_flag=True, help="Make this the owner's master shop")
@click.option('--email', help='Shop email')
@with_appcontext
@service_command
def create_shop(name, phone, business_type, owner_id, set_as_master, email):
    """Create a shop."""
    shop = ShopService(ShopStore()).create_shop(
        name,
        phone,
        business_type,
        owner_user_id=owner_id,
        set_as_master=set_as_master,
        email=email,
    )
    click.echo(f"PASS Created shop: {shop.name} (ID: {shop.id}, level: {shop.shop_level})")


@shops_group.command('list')
@with_appcontext
def list_shops():
    """List all shops with their hierarchy level."""
    shops = db.session.query(Shop).order_by(Shop.id.asc()).all()
    if not shops:
        click.echo("No shops found")
        return
    for shop in shops:
        parent = f" -> master {shop.master_shop_id}" if shop.master_shop_id else ""
        click.echo(f"  [{shop.id}] {shop.name} ({shop.shop_level}){parent}")


@shops_group.command('show')
@click.argument('shop_id', type=int)
@with_appcontext
@service_command
def show_shop(shop_id):
    """Print a shop and all of its connections as JSON."""
    store = ShopStore()
    shop = store.get_shop(shop_id)
    payload = shop.to_dict()
    payload["connected_shops"] = [
        connection.to_dict() for connection in store.connections_for(shop.id, active_only=False)
    ]
    click.echo(json.dumps(payload, indent=2))


@shops_group.command('designate-master')
@click.argument('shop_id', type=int)
@with_appcontext
@service_command
def designate_master(shop_id):
    """Make a shop the root of its own network."""
    shop = HierarchyService(ShopStore()).designate_master(shop_id)
    click.echo(f"PASS Shop {shop.id} is now a master shop")


@shops_group.command('connect')
@click.argument('child_shop_id', type=int)
@click.option('--master-id', type=int, required=True, help='Master shop ID')
@click.option('--type', 'connection_type', type=click.Choice(CONNECTION_TYPES), default='branch', show_default=True)
@click.option('--share-revenue', is_flag=True, help='Count this shop in network revenue')
@click.option('--no-consolidate', is_flag=True, help='Leave this shop out of consolidated reports')
@click.option('--shared-inventory', is_flag=True, help='Share inventory with the master')
@click.option('--update', 'update_if_exists', is_flag=True, help='Overwrite an existing connection')
@with_appcontext
@service_command
def connect_shop(child_shop_id, master_id, connection_type, share_revenue, no_consolidate,
                 shared_inventory, update_if_exists):
    """Connect a shop to a master shop."""
    connection = HierarchyService(ShopStore()).connect(
        child_shop_id,
        master_id,
        connection_type,
        {
            "share_revenue": share_revenue,
            "consolidate_reports": not no_consolidate,
            "shared_inventory": shared_inventory,
        },
        update_if_exists=update_if_exists,
    )
    click.echo(f"PASS Shop {child_shop_id} connected to master shop {master_id}")
    click.echo(_describe_connection(connection))


@shops_group.command('disconnect')
@click.argument('child_shop_id', type=int)
@click.option('--master-id', type=int, required=True, help='Master shop ID')
@with_appcontext
@service_command
def disconnect_shop(child_shop_id, master_id):
    """Detach a shop from a master shop."""
    HierarchyService(ShopStore()).disconnect(child_shop_id, master_id)
    click.echo(f"PASS Shop {child_shop_id} disconnected from master shop {master_id}")


@shops_group.command('connections')
@click.argument('master_shop_id', type=int)
@click.option('--all', 'show_all', is_flag=True, help='Include inactive connections')
@with_appcontext
@service_command
def list_connections(master_shop_id, show_all):
    """List a master shop's connected shops in connection order."""
    connections = HierarchyService(ShopStore()).list_connected_shops(master_shop_id, active_only=not show_all)
    if not connections:
        click.echo("No connected shops")
        return
    for connection in connections:
        click.echo(_describe_connection(connection))


@shops_group.command('network-revenue')
@click.argument('master_shop_id', type=int)
@with_appcontext
@service_command
def network_revenue(master_shop_id):
    """Revenue of a master shop plus revenue-sharing connected shops."""
    total = LedgerService(ShopStore()).network_revenue(master_shop_id)
    click.echo(f"Network revenue for shop {master_shop_id}: {_format_cents(total)}")


@shops_group.command('record-revenue')
@click.argument('shop_id', type=int)
@click.argument('amount', type=int)
@with_appcontext
@service_command
def record_revenue(shop_id, amount):
    """Add AMOUNT (minor units) to a shop's total revenue."""
    shop = LedgerService(ShopStore()).record_revenue(shop_id, amount)
    click.echo(f"PASS Shop {shop.id} revenue: {_format_cents(shop.total_revenue_cents)}")


@shops_group.command('record-expense')
@click.argument('shop_id', type=int)
@click.argument('amount', type=int)
@with_appcontext
@service_command
def record_expense(shop_id, amount):
    """Add AMOUNT (minor units) to a shop's total expenses."""
    shop = LedgerService(ShopStore()).record_expense(shop_id, amount)
    click.echo(f"PASS Shop {shop.id} expenses: {_format_cents(shop.total_expenses_cents)}")


# ----------------------------------------------------------------------
# users
# ----------------------------------------------------------------------

@click.group('users')
def users_group():
    """Users, shop ownership and per-shop debts."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Full name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--phone', prompt=True, help='Phone number')
@click.option('--role', type=click.Choice(USER_ROLES), default='owner', show_default=True)
@with_appcontext
@service_command
def create_user(name, email, phone, role):
    """Create a user."""
    user = ShopService(ShopStore()).create_user(name, email, phone, role)
    click.echo(f"PASS Created user: {user.email} (ID: {user.id}, role: {user.role})")


@users_group.command('show')
@click.argument('user_id', type=int)
@with_appcontext
@service_command
def show_user(user_id):
    """Print a user with owned shops and per-shop debts as JSON."""
    store = ShopStore()
    user = store.get_user(user_id)
    payload = user.to_dict()
    payload["owned_shops"] = [owned.to_dict() for owned in store.owned_shops_for(user.id)]
    payload["shop_debts"] = [debt.to_dict() for debt in store.debts_for(user.id)]
    click.echo(json.dumps(payload, indent=2))


@users_group.command('add-shop')
@click.argument('user_id', type=int)
@click.argument('shop_id', type=int)
@click.option('--master', 'is_master', is_flag=True, help="Also make it the user's master shop")
@with_appcontext
@service_command
def add_owned_shop(user_id, shop_id, is_master):
    """Record that a user owns a shop."""
    ShopService(ShopStore()).add_owned_shop(user_id, shop_id, is_master=is_master)
    click.echo(f"PASS User {user_id} owns shop {shop_id}")


@users_group.command('set-master')
@click.argument('user_id', type=int)
@click.argument('shop_id', type=int)
@with_appcontext
@service_command
def set_master(user_id, shop_id):
    """Set a user's master shop."""
    HierarchyService(ShopStore()).set_user_master_shop(user_id, shop_id)
    click.echo(f"PASS User {user_id} master shop set to {shop_id}")


@users_group.command('network')
@click.argument('user_id', type=int)
@with_appcontext
@service_command
def user_network(user_id):
    """List the shops in a user's network."""
    network = HierarchyService(ShopStore()).resolve_network(user_id)
    if not network:
        click.echo("No shops in network")
        return
    for item in network:
        if isinstance(item, UserOwnedShop):
            marker = " (master)" if item.is_master else ""
            click.echo(f"  owned shop {item.shop_id}{marker}")
        else:
            click.echo(f"  [{item.id}] {item.name} ({item.shop_level})")


@users_group.command('set-debt')
@click.argument('user_id', type=int)
@click.argument('shop_id', type=int)
@click.argument('amount', type=int)
@with_appcontext
@service_command
def set_debt(user_id, shop_id, amount):
    """Set what a user owes a shop (minor units, replaces the old value)."""
    ledger = LedgerService(ShopStore())
    ledger.set_debt(user_id, shop_id, amount)
    click.echo(
        f"PASS User {user_id} owes shop {shop_id}: {_format_cents(amount)} "
        f"(total {_format_cents(ledger.get_total_debt(user_id))})"
    )


@users_group.command('debt')
@click.argument('user_id', type=int)
@click.option('--shop-id', type=int, help='Only the debt to this shop')
@with_appcontext
@service_command
def show_debt(user_id, shop_id):
    """Show a user's debt to one shop or across all shops."""
    ledger = LedgerService(ShopStore())
    if shop_id is not None:
        click.echo(f"User {user_id} owes shop {shop_id}: {_format_cents(ledger.get_debt(user_id, shop_id))}")
    else:
        click.echo(f"User {user_id} owes in total: {_format_cents(ledger.get_total_debt(user_id))}")


@users_group.command('report')
@click.argument('user_id', type=int)
@with_appcontext
@service_command
def user_report(user_id):
    """Print the consolidated financial report for a user's network as JSON."""
    report = consolidated_financial_report(ShopStore(), user_id)
    click.echo(json.dumps(report, indent=2))


# ----------------------------------------------------------------------
# transactions
# ----------------------------------------------------------------------

@click.group('transactions')
def transactions_group():
    """Cross-shop transactions."""


@transactions_group.command('record')
@click.option('--from-shop', 'from_shop_id', type=int, required=True)
@click.option('--to-shop', 'to_shop_id', type=int, required=True)
@click.option('--user-id', type=int, required=True, help='Acting user')
@click.option('--type', 'transaction_type', type=click.Choice(TRANSACTION_TYPES), required=True)
@click.option('--amount', type=int, required=True, help='Amount in minor units')
@click.option('--master-id', type=int, help='Master shop the transaction belongs to')
@click.option('--description', help='Free-text description')
@click.option('--reference', help='External reference')
@click.option('--due-date', callback=_parse_due_date, help='Due date, YYYY-MM-DD or ISO-8601 datetime')
@with_appcontext
@service_command
def record_transaction(from_shop_id, to_shop_id, user_id, transaction_type, amount, master_id,
                       description, reference, due_date):
    """Record a pending cross-shop transaction."""
    transaction = LedgerService(ShopStore()).record_transaction(
        from_shop_id,
        to_shop_id,
        user_id,
        transaction_type,
        amount,
        master_id,
        description=description,
        reference=reference,
        due_date=due_date,
    )
    click.echo(f"PASS Recorded transaction {transaction.id} ({transaction.status})")


@transactions_group.command('show')
@click.argument('transaction_id', type=int)
@with_appcontext
@service_command
def show_transaction(transaction_id):
    """Print a transaction and its posted log entries as JSON."""
    transaction = ShopStore().get_transaction(transaction_id)
    payload = transaction.to_dict()
    payload["entries"] = [entry.to_dict() for entry in transaction.entries]
    click.echo(json.dumps(payload, indent=2))


@transactions_group.command('complete')
@click.argument('transaction_id', type=int)
@with_appcontext
@service_command
def complete_transaction(transaction_id):
    """Mark a pending transaction completed."""
    transaction = LedgerService(ShopStore()).complete_transaction(transaction_id)
    click.echo(f"PASS Transaction {transaction.id} {transaction.status}")


@transactions_group.command('cancel')
@click.argument('transaction_id', type=int)
@click.option('--reason', help='Cancellation reason')
@with_appcontext
@service_command
def cancel_transaction(transaction_id, reason):
    """Cancel a pending transaction."""
    transaction = LedgerService(ShopStore()).cancel_transaction(transaction_id, reason)
    click.echo(f"PASS Transaction {transaction.id} {transaction.status}")


@transactions_group.command('post')
@click.argument('transaction_id', type=int)
@with_appcontext
@service_command
def post_transaction(transaction_id):
    """Write the per-shop log entries for a completed transaction."""
    entries = LedgerService(ShopStore()).post_transaction(transaction_id)
    click.echo(f"PASS Posted transaction {transaction_id} ({len(entries)} entries)")


@transactions_group.command('list')
@click.option('--shop-id', type=int, help='Filter by either side of the transaction')
@click.option('--status', type=click.Choice(['pending', 'completed', 'cancelled']), help='Filter by status')
@with_appcontext
@service_command
def list_transactions(shop_id, status):
    """List cross-shop transactions, newest first."""
    transactions = LedgerService(ShopStore()).list_transactions(shop_id=shop_id, status=status)
    if not transactions:
        click.echo("No transactions found")
        return
    for transaction in transactions:
        click.echo(
            f"  [{transaction.id}] {transaction.transaction_type} "
            f"{transaction.from_shop_id} -> {transaction.to_shop_id} "
            f"{_format_cents(transaction.amount_cents)} {transaction.currency} ({transaction.status})"
        )


def register_commands(app):
    """Register CLI command groups with the Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(shops_group)
    app.cli.add_command(users_group)
    app.cli.add_command(transactions_group)
