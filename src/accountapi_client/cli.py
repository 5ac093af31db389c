import json
import logging
import sys
from functools import wraps

import click
import yaml
from pydantic import ValidationError

from accountapi_client.accounts import AccountsClient
from accountapi_client.cancellation import CancellationToken
from accountapi_client.config import ClientSettings, TransportConfig
from accountapi_client.exceptions import AccountAPIClientError
from accountapi_client.http import TransportAdapter
from accountapi_client.schemas import Account


def run_async(coro):
    """Helper to run async functions synchronously in Click commands."""
    import asyncio
    return asyncio.run(coro)


def handle_api_exceptions(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AccountAPIClientError as e:
            click.echo(f"[{click.style(type(e).__name__, fg='red')}] {e}", err=True)
            sys.exit(1)

    return wrapper


async def _call(settings: ClientSettings, deadline, operation, *args):
    token = CancellationToken.with_timeout(deadline) if deadline else None
    async with TransportAdapter(settings.transport) as adapter:
        client = AccountsClient(settings, adapter=adapter)
        return await getattr(client, operation)(*args, token=token)


def echo_response(response):
    color = "green" if response.is_success else "red"
    click.echo(f"[{click.style(str(response.status_code), fg=color)}]")
    if response.body:
        try:
            click.echo(json.dumps(response.json(), indent=4))
        except ValueError:
            click.echo(response.body)


def load_account(path: str) -> Account:
    with open(path, "r") as file:
        data = yaml.safe_load(file)
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} does not contain an account document")
    if "data" not in data:
        data = {"data": data}
    try:
        return Account.model_validate(data)
    except ValidationError as e:
        raise click.BadParameter(f"{path} is not a valid account: {e}")


@click.group()
@click.option("--base-url", envvar="FORM3_ACCOUNTS_API_URL", help="URL of the accounts collection")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML settings profile")
@click.option("--timeout", type=float, help="Request timeout in seconds")
@click.option("--deadline", type=float, help="Deadline for the whole call in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, base_url, config_path, timeout, deadline, verbose):
    """Accounts API client."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = ClientSettings.from_yaml(config_path) if config_path else ClientSettings.from_env()
    if base_url:
        settings = settings.model_copy(update={"base_url": base_url.rstrip("/")})
    if timeout:
        settings = settings.model_copy(
            update={"transport": (settings.transport or TransportConfig()).model_copy(update={"timeout": timeout})}
        )

    ctx.ensure_object(dict)
    ctx.obj["SETTINGS"] = settings
    ctx.obj["DEADLINE"] = deadline


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@handle_api_exceptions
def create(ctx, file):
    """Create the account described in FILE (YAML or JSON)."""
    account = load_account(file)
    response = run_async(_call(ctx.obj["SETTINGS"], ctx.obj["DEADLINE"], "create", account))
    echo_response(response)


@cli.command()
@click.argument("id")
@click.pass_context
@handle_api_exceptions
def fetch(ctx, id):
    """Fetch the account ID."""
    response = run_async(_call(ctx.obj["SETTINGS"], ctx.obj["DEADLINE"], "fetch", id))
    echo_response(response)


@cli.command()
@click.argument("id")
@click.option("--version", type=int, default=0, show_default=True, help="Version of the account to delete")
@click.pass_context
@handle_api_exceptions
def delete(ctx, id, version):
    """Delete the account ID."""
    response = run_async(_call(ctx.obj["SETTINGS"], ctx.obj["DEADLINE"], "delete", id, version))
    echo_response(response)


if __name__ == '__main__':
    cli()
