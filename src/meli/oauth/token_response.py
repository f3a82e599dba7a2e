"""
Token response model for the Mercado Libre OAuth token endpoint.

A TokenResponse is produced once per successful token exchange and is
applied as a whole to a MeliCredentials instance.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class TokenResponse:
    """
    Result of an authorization-code or refresh-token exchange.

    Attributes:
        access_token: Short-lived access token for API calls
        refresh_token: Long-lived token for obtaining new access tokens
                       (None when the endpoint did not return one)
        token_type: Token type (typically "Bearer")
        expires_in: Access token lifetime in seconds (21600 on Mercado Libre)
        scope: Granted scopes, space separated ("offline_access read write")
        user_id: Mercado Libre user the tokens belong to
        previous_access_token: Access token that was replaced when these
                               tokens were applied to a credential
        issued_at: ISO timestamp of when the tokens were received
    """

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    expires_in: int = 0
    scope: str = ""
    user_id: Optional[int] = None
    previous_access_token: Optional[str] = None
    issued_at: str = field(default_factory=_utc_now_iso)

    @property
    def expires_at(self) -> datetime:
        """Datetime (timezone-aware UTC) at which the access token expires."""
        issued = datetime.fromisoformat(self.issued_at)
        if issued.tzinfo is None:
            issued = issued.replace(tzinfo=timezone.utc)
        return issued + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at

    def expires_within(self, seconds: int) -> bool:
        """
        Check if the access token expires within the given number of seconds.

        Args:
            seconds: Look-ahead window in seconds

        Returns:
            True if the token will be expired at the end of the window
        """
        return datetime.now(timezone.utc) + timedelta(seconds=seconds) >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenResponse":
        """
        Create a TokenResponse from a token endpoint payload or a stored dict.

        Unknown keys are ignored. An empty refresh token is treated as absent.

        Raises:
            KeyError: If access_token is missing
            ValueError: If access_token is empty or numeric fields are invalid
        """
        if not isinstance(data, dict):
            raise ValueError(f"Token payload must be an object, got {type(data).__name__}")

        access_token = data["access_token"]
        if not access_token:
            raise ValueError("Token payload has an empty access_token")

        user_id = data.get("user_id")

        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token") or None,
            token_type=data.get("token_type") or "Bearer",
            expires_in=int(data.get("expires_in") or 0),
            scope=data.get("scope") or "",
            user_id=int(user_id) if user_id is not None else None,
            previous_access_token=data.get("previous_access_token"),
            issued_at=data.get("issued_at") or _utc_now_iso(),
        )
