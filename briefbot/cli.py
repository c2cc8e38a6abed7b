"""Click CLI: run the bot, check audit logs, sign test requests."""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

import click
import uvicorn

from briefbot.audit.logger import validate_audit_chain
from briefbot.config import ConfigurationError, Settings
from briefbot.webhook.signature import compute_signature


@click.group()
@click.option("--log-level", default="INFO", help="Python logging level.")
def cli(log_level: str) -> None:
    """Creative brief builder Slack bot."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port (default: $PORT or 3000).")
def serve(host: str, port: int | None) -> None:
    """Run the webhook server."""
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    uvicorn.run(
        "briefbot.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port or settings.port,
    )


@cli.group("audit")
def audit_group() -> None:
    """Inspect the audit log."""


@audit_group.command("verify")
@click.argument("log_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def audit_verify(log_path: Path) -> None:
    """Validate the hash chain of an audit log file."""
    result = validate_audit_chain(log_path)
    if result.valid:
        click.echo(f"{log_path}: chain intact")
        return
    click.echo(f"{log_path}: chain broken at line {result.broken_at_line}", err=True)
    sys.exit(1)


@cli.command()
@click.option("--secret", envvar="SLACK_SIGNING_SECRET", required=True, help="Signing secret.")
@click.option("--timestamp", type=int, default=None, help="Request timestamp (default: now).")
@click.argument("body")
def sign(secret: str, timestamp: int | None, body: str) -> None:
    """Print Slack signature headers for BODY, for use with curl."""
    ts = str(timestamp if timestamp is not None else int(time.time()))
    click.echo(f"X-Slack-Request-Timestamp: {ts}")
    click.echo(f"X-Slack-Signature: {compute_signature(secret, ts, body.encode())}")


if __name__ == "__main__":
    cli()
