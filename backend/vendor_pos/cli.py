# backend/vendor_pos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db upgrade
#   Apply migrations (preferred for persistent databases).
# - python -m flask system init-db
#   Create any missing tables straight from the models.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Vendor accounts:
# - python -m flask vendors list
# - python -m flask vendors create --username acme --display-name "Acme" --password "Password123!" [--admin]
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 7
#   Delete expired or revoked sessions older than the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Vendor
from .services import auth_service
from .services import maintenance_service
from .services.auth_service import PasswordValidationError
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask vendors create' to add a vendor.")


@click.group('vendors')
def vendors_group():
    """Vendor account commands."""


@vendors_group.command('list')
@with_appcontext
def list_vendors():
    vendors = db.session.query(Vendor).order_by(Vendor.username.asc()).all()
    if not vendors:
        click.echo("No vendors found.")
        return

    for v in vendors:
        admin_flag = " [admin]" if v.is_admin else ""
        click.echo(f"{v.id}  {v.username:<24} {v.display_name}{admin_flag}")


@vendors_group.command('create')
@click.option('--username', prompt=True)
@click.option('--display-name', default=None, help='Defaults to the username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--admin', 'is_admin', is_flag=True, help='Grant access to admin endpoints')
@with_appcontext
def create_vendor(username, display_name, password, is_admin):
    """Create a vendor account."""
    try:
        vendor = auth_service.register_vendor(username, password, display_name, is_admin=is_admin)
    except (ValidationError, PasswordValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created vendor {vendor.username} (ID: {vendor.id})")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=7, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    """Delete expired or revoked sessions older than the retention window."""
    deleted = maintenance_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} sessions older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(vendors_group)
    app.cli.add_command(maintenance_group)
