"""Authorization URL construction for the authorization code grant."""

from typing import Union
from urllib.parse import urlencode

from ..sites import MeliSite


def build_authorization_url(
    client_id: Union[int, str], site: Union[MeliSite, str], redirect_uri: str
) -> str:
    """
    Build the URL a user is sent to in order to authorize the application.

    Mercado Libre redirects back to ``redirect_uri`` with ``?code=...``
    appended once the user grants access. Parameters are always emitted in
    the order response_type, client_id, redirect_uri.

    Args:
        client_id: Mercado Libre application id
        site: Site whose auth domain the user logs into
        redirect_uri: Callback URL registered for the application

    Returns:
        Authorization URL, e.g.
        https://auth.mercadolibre.com.mx/authorization?response_type=code&client_id=123456&redirect_uri=http%3A%2F%2Fsomeurl.com
    """
    site = MeliSite.from_value(site)
    query = urlencode(
        [
            ("response_type", "code"),
            ("client_id", str(client_id)),
            ("redirect_uri", redirect_uri),
        ]
    )
    return f"https://{site.auth_host}/authorization?{query}"
