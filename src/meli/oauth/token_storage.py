"""
File-based token persistence for the Mercado Libre SDK.

Refreshed tokens only live in memory unless the application stores them.
TokenStorage writes them to a JSON file and can be registered directly
as a MeliCredentials listener:

    storage = TokenStorage("~/.meli_tokens.json")
    credentials.add_listener(storage.on_tokens_changed)
"""

import json
import logging
from pathlib import Path
from typing import Optional

from .credentials import TokensChangedEvent
from .exceptions import TokenStorageError
from .token_response import TokenResponse

logger = logging.getLogger(__name__)


class TokenStorage:
    """File-based token storage (plaintext JSON, user-only permissions)."""

    def __init__(self, token_file: str):
        """
        Initialize token storage.

        Args:
            token_file: Path to the token storage file ("~" is expanded)
        """
        self.token_file = Path(token_file).expanduser()
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Create parent directory if needed."""
        self.token_file.parent.mkdir(parents=True, exist_ok=True)

    def _set_secure_permissions(self) -> None:
        """Set file permissions to user-only read/write (600)."""
        try:
            self.token_file.chmod(0o600)
            logger.debug(f"Set secure permissions (600) on {self.token_file}")
        except OSError as e:
            logger.warning(f"Could not set secure permissions: {e}")

    def save(self, tokens: TokenResponse) -> None:
        """
        Save tokens to file.

        Args:
            tokens: Token data to save

        Raises:
            TokenStorageError: If the file cannot be written
        """
        try:
            with open(self.token_file, "w") as f:
                json.dump(tokens.to_dict(), f, indent=2)

            self._set_secure_permissions()

            logger.info(f"Tokens saved to {self.token_file}")
        except OSError as e:
            logger.error(f"Failed to save tokens: {e}")
            raise TokenStorageError(f"Failed to save tokens: {e}") from e

    def load(self) -> Optional[TokenResponse]:
        """
        Load tokens from file.

        Returns:
            TokenResponse if the file exists and is valid, None otherwise
            (a missing or corrupted file is logged, never raised)
        """
        if not self.token_file.exists():
            logger.debug(f"No token file found at {self.token_file}")
            return None

        try:
            with open(self.token_file, "r") as f:
                data = json.load(f)

            tokens = TokenResponse.from_dict(data)
            logger.debug(f"Tokens loaded from {self.token_file}")
            return tokens

        except (KeyError, TypeError, ValueError) as e:
            logger.warning(
                f"Invalid token file at {self.token_file}, "
                f"will need re-authorization: {e}"
            )
            return None
        except OSError as e:
            logger.warning(f"Could not read token file: {e}")
            return None

    def delete(self) -> bool:
        """
        Delete the token file.

        Returns:
            True if the file was deleted, False if it did not exist

        Raises:
            TokenStorageError: If the file exists but cannot be removed
        """
        if not self.token_file.exists():
            logger.debug(f"Token file does not exist: {self.token_file}")
            return False

        try:
            self.token_file.unlink()
        except OSError as e:
            logger.error(f"Failed to delete token file: {e}")
            raise TokenStorageError(f"Failed to delete token file: {e}") from e

        logger.info(f"Token file deleted: {self.token_file}")
        return True

    def exists(self) -> bool:
        return self.token_file.exists()

    def on_tokens_changed(self, event: TokensChangedEvent) -> None:
        """Credential listener that persists every token change."""
        self.save(event.info)
