"""CLI interface for Babylon"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
import yaml

from babylon.domain.errors import to_error_response
from babylon.infrastructure.api_client import ApiRequestError, BabylonApiClient
from babylon.infrastructure.config.config_manager import ConfigManager, ConfigurationError

logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    """One JSON object per log line (production output)"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(verbose: bool = False, level: str = "info", json_output: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Force DEBUG level
        level: Level name from configuration
        json_output: Emit JSON lines instead of human-readable text
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    if json_output:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(JsonFormatter())
    logging.getLogger().setLevel(log_level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _load_config(ctx: click.Context) -> ConfigManager:
    verbose = ctx.obj.get("verbose", False)
    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=verbose, exc=e)
    logging_config = config_manager.get_logging_config()
    setup_logging(verbose, logging_config.level, logging_config.json_output)
    return config_manager


def _error_message(config_manager: ConfigManager, error: Exception) -> str:
    """Message for an unexpected error; generic in production"""
    return to_error_response(error, production=config_manager.is_production())["error"]["message"]


def _create_client(config_manager: ConfigManager, api_url: Optional[str]) -> BabylonApiClient:
    client = BabylonApiClient.from_config(
        config_manager.get_api_config(), config_manager.get_retry_config()
    )
    if api_url:
        client.base_url = api_url.rstrip("/")
    return client


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .babylon.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """Babylon - social network service tools"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command("config")
@click.pass_context
def show_config(ctx):
    """Print the validated configuration."""
    config_manager = _load_config(ctx)
    data = config_manager.config.model_dump()
    if data["api"].get("token"):
        data["api"]["token"] = "***"
    click.echo(yaml.safe_dump(data, sort_keys=False).rstrip())


@cli.command()
@click.option("--api-url", type=str, help="API base URL. Overrides config.")
@click.pass_context
def health(ctx, api_url: Optional[str]):
    """Check server health."""
    config_manager = _load_config(ctx)
    verbose = ctx.obj.get("verbose", False)
    client = _create_client(config_manager, api_url)

    try:
        report = asyncio.run(client.health())
    except Exception as e:
        _die(f"Health check failed: {_error_message(config_manager, e)}", verbose=verbose, exc=e)

    status = report.get("status", "unknown")
    click.echo(f"Status: {status}")
    for name, service in (report.get("services") or {}).items():
        line = f"  {name}: {service.get('status')} ({service.get('latencyMs')} ms)"
        if service.get("error"):
            line += f" - {service['error']}"
        click.echo(line)
    if status != "healthy":
        raise click.ClickException(f"Server is {status}")


@cli.command()
@click.argument("username", type=str)
@click.option("--api-url", type=str, help="API base URL. Overrides config.")
@click.pass_context
def user(ctx, username: str, api_url: Optional[str]):
    """Show a public user profile.

    USERNAME: Babylon username
    """
    config_manager = _load_config(ctx)
    verbose = ctx.obj.get("verbose", False)
    client = _create_client(config_manager, api_url)

    try:
        profile = asyncio.run(client.get_user_by_username(username))
    except ApiRequestError as e:
        _die(f"{e.code}: {e.message}", verbose=verbose, exc=e)
    except Exception as e:
        _die(f"Fatal error: {_error_message(config_manager, e)}", verbose=verbose, exc=e)

    display_name = profile.get("displayName") or profile.get("username")
    click.echo(f"{display_name} (@{profile.get('username')})")
    if profile.get("bio"):
        click.echo(profile["bio"])
    click.echo(
        f"Posts: {profile.get('postsCount', 0)}  "
        f"Followers: {profile.get('followersCount', 0)}  "
        f"Following: {profile.get('followingCount', 0)}"
    )


@cli.command("username-available")
@click.argument("username", type=str)
@click.option("--api-url", type=str, help="API base URL. Overrides config.")
@click.pass_context
def username_available(ctx, username: str, api_url: Optional[str]):
    """Check whether a username can be claimed.

    USERNAME: Username to check
    """
    config_manager = _load_config(ctx)
    verbose = ctx.obj.get("verbose", False)
    client = _create_client(config_manager, api_url)

    try:
        available = asyncio.run(client.check_username(username))
    except ApiRequestError as e:
        _die(f"{e.code}: {e.message}", verbose=verbose, exc=e)
    except Exception as e:
        _die(f"Fatal error: {_error_message(config_manager, e)}", verbose=verbose, exc=e)

    click.echo(f"{username} is {'available' if available else 'taken'}")


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
