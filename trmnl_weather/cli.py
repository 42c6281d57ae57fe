import asyncio
import functools
import inspect
import logging
import signal
import sys
from collections.abc import Callable
from typing import Any

import click
import structlog
from pydantic import ValidationError

from .config import DEFAULT_RESULTS_LIMIT, Settings, env
from .integrations.ambient import AmbientClient
from .integrations.common import DEFAULT_TIMEOUT_SECONDS, IntegrationAPIError
from .integrations.trmnl import TrmnlWebhookClient
from .scheduler import PollScheduler
from .update import collect_payload, run_update

logger = structlog.get_logger()


class AsyncAwareContext(click.Context):
    """
    A click context that invokes async functions with asyncio.run.
    """

    def invoke(self, *args, **kwargs):
        r = super().invoke(*args, **kwargs)
        if inspect.isawaitable(r):
            return asyncio.run(r)
        else:
            return r


click.Command.context_class = AsyncAwareContext


def configure_logging(*, debug: bool) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.CallsiteParameterAdder(
                {
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                }
            ),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def load_settings(**options: Any) -> Settings:
    """
    Validate the command line options, exiting with status 1 if they're
    invalid.
    """

    try:
        return Settings.model_validate(
            {key: value for key, value in options.items() if value is not None}
        )
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise click.ClickException(f"Invalid configuration: {errors}") from e


def require_webhook_url(settings: Settings) -> str:
    if settings.webhook_url is None:
        raise click.ClickException(
            f"Missing webhook URL, set --webhook-url or {env('webhook_url')}"
        )
    return str(settings.webhook_url)


def source_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Options needed to talk to Ambient Weather.
    """

    options = [
        click.option(
            "--application-key",
            envvar=env("application_key"),
            help="API 'application' key",
        ),
        click.option("--api-key", envvar=env("api_key"), help="API key"),
        click.option("--device", envvar=env("device"), help="Device MAC address"),
        click.option(
            "--results-limit",
            type=int,
            envvar=env("results_limit"),
            help="Number of historical records to request "
            f"[default: {DEFAULT_RESULTS_LIMIT}]",
        ),
        click.option(
            "--request-timeout",
            type=float,
            envvar=env("request_timeout"),
            help="HTTP request timeout in seconds "
            f"[default: {DEFAULT_TIMEOUT_SECONDS:g}]",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


webhook_option = click.option(
    "--webhook-url", envvar=env("webhook_url"), help="TRMNL webhook URL"
)


@click.group(help="Ambient Weather webhook server for TRMNL displays")
@click.option(
    "--debug", "-D", is_flag=True, envvar=env("debug"), help="Enable debug mode"
)
def cli(*, debug: bool) -> None:
    configure_logging(debug=debug)


@cli.command(help="Run the webhook server")
@source_options
@webhook_option
@click.option(
    "--interval",
    envvar=env("interval"),
    help="Update interval, e.g. 15m or 1h [default: 15m]",
)
async def server(**options: Any) -> None:
    settings = load_settings(**options)
    webhook_url = require_webhook_url(settings)

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _on_signal(sig: signal.Signals) -> None:
        logger.info("Received signal, shutting down", signal=sig.name)
        shutdown.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _on_signal, sig)

    try:
        async with (
            AmbientClient(
                application_key=settings.application_key,
                api_key=settings.api_key,
                timeout=settings.request_timeout,
            ) as source,
            TrmnlWebhookClient(
                webhook_url=webhook_url, timeout=settings.request_timeout
            ) as webhook,
        ):
            scheduler = PollScheduler(
                functools.partial(
                    run_update,
                    source,
                    webhook,
                    mac_address=settings.device,
                    limit=settings.results_limit,
                ),
                interval=settings.interval,
            )
            await scheduler.run(shutdown)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)


@cli.command(help="Send a single update to the webhook and exit")
@source_options
@webhook_option
async def update(**options: Any) -> None:
    settings = load_settings(**options)
    webhook_url = require_webhook_url(settings)

    async with (
        AmbientClient(
            application_key=settings.application_key,
            api_key=settings.api_key,
            timeout=settings.request_timeout,
        ) as source,
        TrmnlWebhookClient(
            webhook_url=webhook_url, timeout=settings.request_timeout
        ) as webhook,
    ):
        try:
            await run_update(
                source,
                webhook,
                mac_address=settings.device,
                limit=settings.results_limit,
            )
        except IntegrationAPIError as e:
            logger.error("Failed to update", error=str(e))
            raise click.ClickException(str(e)) from e
        except Exception as e:
            logger.exception("Failed to update")
            raise click.ClickException(f"Unexpected error: {e!r}") from e


@cli.command(help="Print the webhook payload without sending it")
@source_options
async def preview(**options: Any) -> None:
    settings = load_settings(**options)

    async with AmbientClient(
        application_key=settings.application_key,
        api_key=settings.api_key,
        timeout=settings.request_timeout,
    ) as source:
        try:
            payload = await collect_payload(
                source, mac_address=settings.device, limit=settings.results_limit
            )
        except IntegrationAPIError as e:
            raise click.ClickException(str(e)) from e

    click.echo(payload.model_dump_json(indent=2))


def main() -> None:
    cli(prog_name="trmnl-weather")
