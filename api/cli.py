"""
Flask CLI commands for provisioning accounts out of band.

    flask --app api create-user alice alice@example.com --password '...'
    flask --app api create-user bob bob@example.com --mfa
"""
from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import or_

from models import storage
from models.user import User
from utils.security import hash_password


@click.command("create-user")
@click.argument("username")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--mfa/--no-mfa", default=False, help="Require an emailed code after the password.")
@click.option("--inactive", is_flag=True, default=False, help="Create the account disabled.")
@with_appcontext
def create_user(username: str, email: str, password: str, mfa: bool, inactive: bool):
    """Create a user that can log in through /api/auth/login."""
    email = email.strip().lower()
    min_length = current_app.config["PASSWORD_MIN_LENGTH"]
    if len(password) < min_length:
        raise click.BadParameter(f"must be at least {min_length} characters", param_hint="--password")

    session = storage.get_session()
    if session.query(User).filter(or_(User.username == username, User.email == email)).first():
        raise click.ClickException("username or email already registered")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        mfa_enabled=mfa,
        is_active=not inactive,
    )
    storage.new(user)
    storage.save()
    click.echo(f"created user {user.username} ({user.id})")


def register_commands(app):
    app.cli.add_command(create_user)
