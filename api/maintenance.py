"""
Out-of-band maintenance: delete expired token records.

    flask --app api purge-tokens [--before 2026-01-01T00:00:00+00:00]

Not part of request handling; nothing depends on it for correctness.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

import click
from flask import current_app
from flask.cli import with_appcontext

from api.transaction import HandlerResult

logger = logging.getLogger(__name__)


def purge_expired_tokens(cutoff: datetime) -> dict:
    """Delete access and refresh records expiring before cutoff, in one transaction."""
    daos = current_app.extensions["daos"]

    def handler(session, request_context):
        return HandlerResult(
            200,
            {
                "access_tokens": daos.access_tokens.expire_sweep(session, cutoff),
                "refresh_tokens": daos.refresh_tokens.expire_sweep(session, cutoff),
            },
        )

    result = current_app.extensions["transaction_coordinator"].run(handler, {"cutoff": cutoff})
    logger.info("Purged tokens expiring before %s: %s", cutoff.isoformat(), result.payload)
    return result.payload


@click.command("purge-tokens")
@click.option("--before", "before", default=None, help="ISO-8601 cutoff, defaults to now (UTC).")
@with_appcontext
def purge_tokens_command(before):
    if before:
        try:
            cutoff = datetime.fromisoformat(before)
        except ValueError:
            raise click.BadParameter("expected an ISO-8601 datetime", param_hint="--before")
        if cutoff.tzinfo is None:
            cutoff = cutoff.replace(tzinfo=timezone.utc)
    else:
        cutoff = current_app.extensions["clock"].now()
    counts = purge_expired_tokens(cutoff)
    click.echo(
        f"Deleted {counts['access_tokens']} access token(s) and "
        f"{counts['refresh_tokens']} refresh token(s) expiring before {cutoff.isoformat()}"
    )
