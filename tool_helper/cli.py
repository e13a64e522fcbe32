"""CLI for the automation helpers."""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Optional

import click
from dotenv import load_dotenv
from playwright.async_api import async_playwright
from telegram.error import TelegramError

from .antidetect import AntidetectConfig, ConnectAntidetectHelper
from .http_client import HttpRequestError
from .telegram_client import TelegramClient
from .tracking import NetworkTracker, PlaywrightDriver, TrackerConfig, WaitTimeoutError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

LOGGER = logging.getLogger(__name__)


def _dump(data: Any) -> None:
    click.echo(json.dumps(data, ensure_ascii=False, indent=2, default=str))


@click.group()
def cli():
    """Browser automation helpers."""
    load_dotenv()


@cli.command()
@click.argument("url")
@click.option("--match", "pattern", default=None, help="Wait for a response whose URL contains this text")
@click.option("--timeout", default=None, type=float, help="Wait timeout in milliseconds")
@click.option("--headed", is_flag=True, help="Show the browser window")
@click.option("--debug", is_flag=True, help="Verbose tracker logging")
def track(url: str, pattern: Optional[str], timeout: Optional[float], headed: bool, debug: bool) -> None:
    """Open URL and print the captured requests and responses as JSON."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
    config = TrackerConfig.from_env()
    if debug:
        config.debug = True

    try:
        result = asyncio.run(_track(url, pattern, timeout, headed, config))
    except WaitTimeoutError as exc:
        raise click.ClickException(str(exc)) from exc
    _dump(result)


async def _track(
    url: str,
    pattern: Optional[str],
    timeout: Optional[float],
    headed: bool,
    config: TrackerConfig,
) -> dict:
    tracker = NetworkTracker(config)
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=not headed)
        try:
            page = await browser.new_page()
            async with tracker.session(PlaywrightDriver(page)):
                await page.goto(url)
                matched = None
                if pattern:
                    matched = await tracker.wait_for_response(pattern, timeout=timeout)
                await tracker.flush()
                return {
                    "matched": matched.to_dict() if matched is not None else None,
                    "requests": [record.to_dict() for record in tracker.get_all_requests()],
                    "responses": [record.to_dict() for record in tracker.get_all_responses()],
                }
        finally:
            await browser.close()


@cli.group()
@click.option("--type", "platform", envvar="ANTIDETECT_TYPE", help="xlogin, gpm or gologin")
@click.option("--base-url", envvar="ANTIDETECT_BASE_URL", help="Local API base URL")
@click.option("--api-key", envvar="ANTIDETECT_API_KEY", default=None, help="API key (GoLogin)")
@click.pass_context
def antidetect(ctx: click.Context, platform: Optional[str], base_url: Optional[str], api_key: Optional[str]) -> None:
    """Manage antidetect browser profiles."""
    ctx.obj = AntidetectConfig(type=platform, base_url=base_url, api_key=api_key)


def _run_antidetect(config: AntidetectConfig, operation: str, *args: Any) -> Any:
    async def runner() -> Any:
        async with ConnectAntidetectHelper(config) as helper:
            return await getattr(helper, operation)(*args)

    try:
        return asyncio.run(runner())
    except (ValueError, HttpRequestError) as exc:
        raise click.ClickException(str(exc)) from exc


@antidetect.command()
@click.pass_obj
def folders(config: AntidetectConfig) -> None:
    """List folders (groups)."""
    _dump([folder.model_dump() for folder in _run_antidetect(config, "get_folders")])


@antidetect.command()
@click.argument("folder_id")
@click.pass_obj
def profiles(config: AntidetectConfig, folder_id: str) -> None:
    """List profiles in FOLDER_ID."""
    _dump([profile.model_dump() for profile in _run_antidetect(config, "get_profiles", folder_id)])


@antidetect.command()
@click.argument("profile_id")
@click.pass_obj
def start(config: AntidetectConfig, profile_id: str) -> None:
    """Start PROFILE_ID and print its debugging port."""
    _dump(_run_antidetect(config, "start_profile", profile_id).model_dump())


@antidetect.command()
@click.argument("profile_id")
@click.pass_obj
def stop(config: AntidetectConfig, profile_id: str) -> None:
    """Stop PROFILE_ID."""
    _dump(_run_antidetect(config, "stop_profile", profile_id).model_dump())


@cli.command()
@click.argument("text")
@click.option("--chat-id", default=None, help="Target chat (defaults to TELEGRAM_CHAT_ID)")
def notify(text: str, chat_id: Optional[str]) -> None:
    """Send TEXT through the Telegram bot."""
    try:
        client = TelegramClient()
        asyncio.run(client.send_message(text, chat_id))
    except (ValueError, TelegramError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"✅ Sent message {client.last_message_id}")


if __name__ == "__main__":
    cli()
