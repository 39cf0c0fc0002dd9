"""
Error reporting to Sentry.

Only server faults are reported. Client outcomes (401, 403, 404, 422)
raised as BlogApiError are dropped before sending, and bearer tokens
and cookies never leave the process.

Enabled by setting SENTRY_DSN; create_app() calls init_sentry().
"""

from __future__ import annotations

import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from blogapi.config import Settings, get_settings
from blogapi.errors import BlogApiError

logger = logging.getLogger(__name__)

SCRUBBED_HEADERS = {"authorization", "cookie"}
UNTRACED_PATHS = {"/health"}


def init_sentry(settings: Settings | None = None) -> bool:
    """
    Start the Sentry client when a DSN is configured.

    Returns True if the client was started.
    """
    settings = settings or get_settings()

    if not settings.sentry_dsn:
        logger.info("Sentry disabled (no SENTRY_DSN)")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            # Breadcrumbs from INFO, events from ERROR
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        send_default_pii=False,
        before_send=_filter_events,
        before_send_transaction=_filter_transactions,
    )

    logger.info("Sentry reporting for %s", settings.environment)
    return True


def _filter_events(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    exc_info = hint.get("exc_info")
    if exc_info:
        error = exc_info[1]
        if isinstance(error, BlogApiError) and error.status_code < 500:
            return None

    headers = event.get("request", {}).get("headers", {})
    for name in list(headers):
        if name.lower() in SCRUBBED_HEADERS:
            headers[name] = "[Filtered]"

    return event


def _filter_transactions(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    if event.get("transaction") in UNTRACED_PATHS:
        return None
    return event


def capture_exception(error: Exception, **context: Any) -> str | None:
    """
    Report one exception with extra context attached.

    Returns the Sentry event ID, or None when Sentry is not running.
    """
    if not sentry_sdk.get_client().is_active():
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(error)
