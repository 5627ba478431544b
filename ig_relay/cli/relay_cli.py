"""Typer-based operator CLI."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import asyncio
import json
from typing import Optional

import typer
from dotenv import load_dotenv

load_dotenv(".env")
load_dotenv(".env.local", override=True)

from ig_relay.config import get_settings
from ig_relay.constants import DEFAULT_CONVERSATION_LIMIT
from ig_relay.services.graph_service import (
    describe_graph_error,
    list_conversations,
    resolve_instagram_account_id,
)

app = typer.Typer(help="Instagram DM relay operator commands.")


@app.command()
def check():
    """Validate configuration and resolve the Instagram business account."""
    settings = get_settings()

    missing = settings.missing_required()
    if missing:
        typer.secho(f"Missing env vars: {', '.join(missing)}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not settings.app_secret:
        typer.secho(
            "APP_SECRET not set: webhook signatures will not be verified.",
            fg=typer.colors.YELLOW,
        )

    try:
        ig_user_id = asyncio.run(
            resolve_instagram_account_id(settings.page_access_token)
        )
    except Exception as e:
        typer.secho(f"Resolution failed: {describe_graph_error(e)}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho(f"Instagram business account: {ig_user_id}", fg=typer.colors.GREEN)


@app.command()
def conversations(
    limit: int = typer.Option(DEFAULT_CONVERSATION_LIMIT, min=1, help="Page size"),
    before: Optional[str] = typer.Option(None, help="Cursor for the previous page"),
    after: Optional[str] = typer.Option(None, help="Cursor for the next page"),
):
    """Print one page of conversation threads as JSON."""
    settings = get_settings()
    try:
        page = asyncio.run(
            list_conversations(
                settings.page_access_token, limit=limit, before=before, after=after
            )
        )
    except Exception as e:
        typer.secho(f"Listing failed: {describe_graph_error(e)}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(page.model_dump(), indent=2))


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, help="Listen port (defaults to PORT)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the webhook relay with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ig_relay.main:app",
        host="0.0.0.0",
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
