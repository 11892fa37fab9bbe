# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/wapmarket/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates the default admin from ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_PHONE.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list [--role seller]
#   List users with role and active status.
# - python -m flask users create-admin --email ops@wapmarket.local --password "Admin12345"
#   Create an additional admin account.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import User, ROLE_ADMIN, ROLES
from .services.auth_service import (
    create_user,
    get_user_by_email,
    PasswordValidationError,
    DuplicateEmailError,
)


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables if missing and make sure the default admin exists."""
    db.create_all()

    email = current_app.config["ADMIN_EMAIL"]
    existing = get_user_by_email(email)
    if existing:
        click.echo(f"PASS Admin already exists: {existing.email} (ID: {existing.id})")
        return

    try:
        admin = create_user(
            email,
            current_app.config["ADMIN_PASSWORD"],
            name="Administrador",
            phone=current_app.config["ADMIN_PHONE"],
            role=ROLE_ADMIN,
        )
    except PasswordValidationError as e:
        click.echo(f"FAIL ADMIN_PASSWORD rejected: {e}")
        raise SystemExit(1)

    click.echo(f"PASS Created admin: {admin.email} (ID: {admin.id})")
    click.echo("WARN  Change the default admin password in production!")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@click.option('--role', type=click.Choice(ROLES), default=None, help='Filter by role')
@with_appcontext
def list_users(role):
    query = db.session.query(User)
    if role:
        query = query.filter_by(role=role)
    users = query.order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 72)
    click.echo(f"{'ID':<5} {'Email':<35} {'Role':<8} {'Active':<8} {'Name'}")
    click.echo("=" * 72)
    for user in users:
        active_str = "yes" if user.is_active else "no"
        click.echo(f"{user.id:<5} {user.email:<35} {user.role:<8} {active_str:<8} {user.name or '-'}")
    click.echo("=" * 72 + "\n")


@users_group.command('create-admin')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--name', default=None, help='Display name')
@with_appcontext
def create_admin(email, password, name):
    try:
        user = create_user(email, password, name=name, role=ROLE_ADMIN)
    except (PasswordValidationError, DuplicateEmailError) as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    click.echo(f"PASS Created admin: {user.email} (ID: {user.id})")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
