"""
Command line interface for the Mercado Libre SDK.

Configuration is read from MELI_* environment variables (see
MeliOAuthConfig.from_env). When MELI_TOKEN_FILE is set, tokens obtained
by ``authorize`` or by an automatic refresh are written to that file and
reused by later invocations.

Usage:
    meli auth-url --redirect-uri https://example.com/callback
    meli authorize TG-CODE --redirect-uri https://example.com/callback
    meli get /users/me
    meli get /items -p ids=MLA1 -p ids=MLA2
    meli status
"""

import json
import logging
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

import click

from .api.client import MeliClient
from .api.exceptions import MeliAPIError
from .oauth.config import MeliOAuthConfig
from .oauth.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """Context object passed to all CLI commands.

    Configuration and client are built on first use, so ``--help`` works
    without any MELI_* variables set.

    Attributes:
        verbose: Verbose output enabled
    """

    verbose: bool
    _config: Optional[MeliOAuthConfig] = None
    _client: Optional[MeliClient] = None

    @property
    def config(self) -> MeliOAuthConfig:
        """Configuration loaded from the environment (exits with status 2 if invalid)."""
        if self._config is None:
            try:
                self._config = MeliOAuthConfig.from_env()
            except ConfigurationError as e:
                click.echo(f"Error: {e}", err=True)
                sys.exit(2)
        return self._config

    @property
    def client(self) -> MeliClient:
        """Client built from the configuration."""
        if self._client is None:
            self._client = MeliClient.from_config(self.config)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


def _parse_param(raw: str) -> Tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"expected key=value, got {raw!r}")
    return key, value


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Mercado Libre API command line tool."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ctx.obj = CLIContext(verbose=verbose)
    ctx.call_on_close(ctx.obj.close)


@cli.command("auth-url")
@click.option("--redirect-uri", envvar="MELI_REDIRECT_URI", required=True, help="Registered callback URL")
@click.pass_obj
def auth_url(obj: CLIContext, redirect_uri: str) -> None:
    """Print the URL a user opens to authorize the application."""
    config = obj.config
    click.echo(MeliClient.get_auth_url(config.client_id, config.site, redirect_uri))


@cli.command()
@click.argument("code")
@click.option("--redirect-uri", envvar="MELI_REDIRECT_URI", required=True, help="Registered callback URL")
@click.pass_obj
def authorize(obj: CLIContext, code: str, redirect_uri: str) -> None:
    """Exchange an authorization CODE for tokens."""
    if not obj.client.authorize(code, redirect_uri):
        click.echo("Authorization failed. Request a new code and try again.", err=True)
        sys.exit(1)

    click.echo("Authorization successful.")
    if obj.config.token_file:
        click.echo(f"Tokens saved to {obj.config.token_file}")
    else:
        click.echo("MELI_TOKEN_FILE is not set; tokens were not persisted.")


@cli.command()
@click.argument("path")
@click.option("--param", "-p", "params", multiple=True, help="Query parameter as key=value (repeatable)")
@click.option("--access-token", default=None, help="Use this access token instead of the stored one")
@click.pass_obj
def get(obj: CLIContext, path: str, params: Tuple[str, ...], access_token: Optional[str]) -> None:
    """GET a resource PATH and print the JSON response."""
    pairs = [_parse_param(raw) for raw in params]

    try:
        response = obj.client.get(path, pairs, access_token=access_token)
    except MeliAPIError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    try:
        output = json.dumps(response.json(), indent=2, ensure_ascii=False)
    except ValueError:
        output = response.text

    click.echo(output)
    if not response.ok:
        click.echo(f"HTTP {response.status_code}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_obj
def status(obj: CLIContext) -> None:
    """Show the configured site and whether tokens are available."""
    credentials = obj.client.credentials
    click.echo(f"Site: {obj.config.site.site_id} ({obj.config.site.country})")
    click.echo(f"Client id: {obj.config.client_id}")
    click.echo(f"Authorized: {'yes' if credentials.is_authorized else 'no'}")
    click.echo(f"Refresh token: {'yes' if credentials.refresh_token else 'no'}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
