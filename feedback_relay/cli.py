import click
from flask import current_app
from flask.cli import with_appcontext

from feedback_relay.services import storage

EPHEMERAL_HINT = (
    "Note: the store is in-memory SQLite, so this command only sees records "
    "created in its own process. Set DATABASE_URL to inspect a running server."
)


@click.group()
def users():
    """User management."""

@users.command("create")
@click.option("--username", required=True)
@click.option("--password", required=True)
@with_appcontext
def users_create(username, password):
    try:
        user = storage.create_user(username, password)
    except storage.DuplicateUsernameError:
        raise click.ClickException("User already exists")
    click.echo(f"User created id={user.id} username={user.username}")


@click.group()
def feedback():
    """
    Inspect stored feedback.

    Without DATABASE_URL the store is in-memory and per process: these
    commands cannot see what a running server has stored.
    """


def _hint_if_ephemeral():
    from feedback_relay import db_is_ephemeral
    if db_is_ephemeral(current_app.config["SQLALCHEMY_DATABASE_URI"]):
        click.echo(EPHEMERAL_HINT, err=True)

@feedback.command("list")
@with_appcontext
def feedback_list():
    _hint_if_ephemeral()
    items = storage.list_feedbacks()
    if not items:
        click.echo("No feedback stored.")
        return
    for fb in items:
        click.echo(
            f"{fb.id}  {fb.created_at:%Y-%m-%d %H:%M}  {fb.feedback_type:<8}  "
            f"{fb.impact_level or '-':<7}  {fb.company_name}"
        )

@feedback.command("deliveries")
@click.argument("feedback_id")
@with_appcontext
def feedback_deliveries(feedback_id):
    _hint_if_ephemeral()
    if storage.get_feedback(feedback_id) is None:
        raise click.ClickException(f"Feedback {feedback_id} not found")
    rows = storage.list_delivery_attempts(feedback_id)
    if not rows:
        click.echo("No delivery attempts recorded.")
        return
    for row in rows:
        outcome = "ok" if row.ok else (row.error or "failed")
        click.echo(f"{row.strategy:<9}  {row.status_code:>3}  {row.latency_ms:>5}ms  {row.url}  {outcome}")


def register_cli(app):
    app.cli.add_command(users)
    app.cli.add_command(feedback)
