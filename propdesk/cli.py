import click
from flask import current_app

from .extensions import db
from .models import Account
from .services import invites


@click.command("init-db")
def init_db_command():
    """Create all tables."""
    db.create_all()
    click.echo("Database initialized.")


@click.command("create-admin")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--name", default=None, help="Display name.")
def create_admin_command(email, password, name):
    """Create an admin account, or reset its password if it exists."""
    email = email.strip().lower()
    account = Account.query.filter_by(email=email).first()
    if account is None:
        account = Account(email=email, role="admin")
        db.session.add(account)
    account.role = "admin"
    if name:
        account.display_name = name
    account.set_password(password)
    db.session.commit()
    current_app.logger.info("Admin ensured: %s", email)
    click.echo(f"Admin ensured: {email}")


@click.command("stranded-invites")
def stranded_invites_command():
    """List consumed invites whose tenant was never activated."""
    rows = invites.stranded_invites()
    if not rows:
        click.echo("No stranded invites.")
        return
    for invite, tenant in rows:
        click.echo(f"{invite.code}\ttenant={tenant.id}\t{tenant.email}\tused_at={invite.used_at.isoformat()}")
    click.echo(f"{len(rows)} stranded invite(s); reissue with POST /api/tenants/<id>/invite")


def register_cli(app):
    for command in (init_db_command, create_admin_command, stranded_invites_command):
        app.cli.add_command(command)
