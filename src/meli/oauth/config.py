"""
OAuth configuration for the Mercado Libre SDK.

Configuration can be provided programmatically or loaded from
environment variables.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..__version__ import __version__
from ..sites import MeliSite
from .credentials import MeliCredentials
from .exceptions import ConfigurationError

DEFAULT_API_URL = "https://api.mercadolibre.com"
TOKEN_PATH = "/oauth/token"
USER_AGENT = f"MELI-PYTHON-SDK/{__version__}"


class ExpiryDetection(str, Enum):
    """
    How a 401 response is recognised as an expired access token.

    STATUS: any 401 qualifies while a refresh token is available.
    INVALID_TOKEN_MESSAGE: the 401 body must also be an error payload whose
        message reads "invalid_token" (or "invalid access token").
    """

    STATUS = "status"
    INVALID_TOKEN_MESSAGE = "invalid_token_message"


@dataclass
class MeliOAuthConfig:
    """
    Configuration for the Mercado Libre client.

    Attributes:
        client_id: Application id from the Mercado Libre developers portal
        client_secret: Application secret from the developers portal
        site: Site used for authorization URLs (default: Argentina)
        redirect_uri: Callback URL registered for the application
        access_token: Initial access token, if already authorized
        refresh_token: Initial refresh token, if already authorized
        token_file: Path of the JSON file tokens are persisted to (optional)
        api_url: API base URL
        timeout: Per-request timeout in seconds
        expiry_detection: Strategy used to recognise expired access tokens
    """

    client_id: str
    client_secret: str
    site: MeliSite = MeliSite.ARGENTINA
    redirect_uri: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_file: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    timeout: float = 30
    expiry_detection: ExpiryDetection = ExpiryDetection.STATUS

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if not self.client_secret:
            raise ConfigurationError("client_secret cannot be empty")

        try:
            self.site = MeliSite.from_value(self.site)
            self.expiry_detection = ExpiryDetection(self.expiry_detection)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"api_url must be an http(s) URL, got {self.api_url!r}")

        if self.refresh_token and not self.access_token:
            raise ConfigurationError("refresh_token requires an access_token")

    @property
    def token_url(self) -> str:
        return f"{self.api_url.rstrip('/')}{TOKEN_PATH}"

    @classmethod
    def from_env(cls) -> "MeliOAuthConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            MELI_CLIENT_ID: Application id
            MELI_CLIENT_SECRET: Application secret

        Optional environment variables:
            MELI_SITE: Site id or country (default: MLA)
            MELI_REDIRECT_URI: Registered callback URL
            MELI_ACCESS_TOKEN / MELI_REFRESH_TOKEN: Existing tokens
            MELI_TOKEN_FILE: Token persistence file
            MELI_API_URL: API base URL (default: https://api.mercadolibre.com)
            MELI_TIMEOUT: Request timeout in seconds (default: 30)
            MELI_EXPIRY_DETECTION: "status" or "invalid_token_message"

        Returns:
            MeliOAuthConfig instance

        Raises:
            ConfigurationError: If required variables are missing or invalid
        """
        client_id = os.environ.get("MELI_CLIENT_ID")
        client_secret = os.environ.get("MELI_CLIENT_SECRET")

        if not client_id or not client_secret:
            raise ConfigurationError(
                "Missing Mercado Libre credentials. Set environment variables:\n"
                "  MELI_CLIENT_ID=your_app_id\n"
                "  MELI_CLIENT_SECRET=your_app_secret\n"
                "\n"
                "Create an application at: https://developers.mercadolibre.com"
            )

        timeout = os.environ.get("MELI_TIMEOUT", "30")
        try:
            timeout_value = float(timeout)
        except ValueError as e:
            raise ConfigurationError(f"MELI_TIMEOUT must be a number, got {timeout!r}") from e

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            site=os.environ.get("MELI_SITE", "MLA"),
            redirect_uri=os.environ.get("MELI_REDIRECT_URI") or None,
            access_token=os.environ.get("MELI_ACCESS_TOKEN") or None,
            refresh_token=os.environ.get("MELI_REFRESH_TOKEN") or None,
            token_file=os.environ.get("MELI_TOKEN_FILE") or None,
            api_url=os.environ.get("MELI_API_URL", DEFAULT_API_URL),
            timeout=timeout_value,
            expiry_detection=os.environ.get("MELI_EXPIRY_DETECTION", "status"),
        )

    def build_credentials(self, storage=None) -> MeliCredentials:
        """
        Create credentials from this configuration.

        Tokens persisted in ``storage`` take precedence over the configured
        ones, since they are the result of the latest exchange.

        Args:
            storage: Optional TokenStorage to seed tokens from

        Returns:
            MeliCredentials instance
        """
        access_token = self.access_token
        refresh_token = self.refresh_token

        if storage is not None:
            stored = storage.load()
            if stored is not None:
                access_token = stored.access_token
                refresh_token = stored.refresh_token

        return MeliCredentials(
            site=self.site,
            client_id=self.client_id,
            client_secret=self.client_secret,
            access_token=access_token,
            refresh_token=refresh_token,
        )
