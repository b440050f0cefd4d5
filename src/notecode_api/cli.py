# cli.py
from datetime import datetime, timedelta, timezone

import click
from bson import ObjectId

from database.schemas import USERS_COLLECTION
from notecode_api.auth import token_codec
from notecode_api.config.settings import get_settings
from notecode_api.main import create_store


@click.group()
def cli():
    """Operator commands for the NoteCode API"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  API Prefix: {settings.api_prefix}")
    if settings.deployment_mode == "prod":
        click.echo(f"  MongoDB Database: {settings.mongodb_database}")
        click.echo(f"  MongoDB URI set: {'yes' if settings.mongodb_uri else 'no'}")
    else:
        click.echo(f"  SQLite Path: {settings.sqlite_db_path}")
    click.echo(f"  JWT Secret set: {'yes' if settings.jwt_secret else 'no'}")
    click.echo(f"  JWT Algorithm: {settings.jwt_algorithm}")
    click.echo(f"  CORS Origins: {', '.join(settings.cors_origins)}")
    click.echo(f"  Log Level: {settings.log_level}")


@cli.command()
def init_db():
    """Create collections and indexes"""
    store = create_store(get_settings())
    store.close()
    click.echo("Document store initialized")


@cli.command()
@click.option("--name", required=True, help="Display name")
@click.option("--email", default=None, help="Contact email")
@click.option("--user-id", default=None, help="Identifier to use instead of a generated one")
def create_user(name, email, user_id):
    """Register a user record that tokens can refer to"""
    store = create_store(get_settings())
    try:
        user_id = store.create_document(USERS_COLLECTION, {
            "id": user_id or str(ObjectId()),
            "name": name,
            "email": email,
            "created_at": datetime.now(timezone.utc),
        })
    finally:
        store.close()
    click.echo(user_id)


@cli.command()
@click.argument("user_id")
@click.option("--hours", type=int, default=None, help="Token lifetime (defaults to JWT_EXPIRY_HOURS)")
def issue_token(user_id, hours):
    """Mint a bearer token for USER_ID"""
    settings = get_settings()
    if not settings.jwt_secret:
        raise click.ClickException("JWT_SECRET is not set")

    store = create_store(settings)
    try:
        if store.get_document(USERS_COLLECTION, user_id) is None:
            raise click.ClickException(f"No user with id {user_id}")
    finally:
        store.close()

    token = token_codec.issue(
        user_id,
        settings.jwt_secret,
        expires_in=timedelta(hours=hours or settings.jwt_expiry_hours),
        algorithm=settings.jwt_algorithm,
    )
    click.echo(token)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", type=int, default=8000, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    uvicorn.run("notecode_api.main:create_app", factory=True, host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
