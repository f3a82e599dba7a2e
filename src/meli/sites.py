"""
Mercado Libre site definitions.

Each site is a country marketplace with its own site identifier and its
own authorization domain (users of ``MLM`` authorize on
``auth.mercadolibre.com.mx``, users of ``MLB`` on
``auth.mercadolivre.com.br`` and so on).
"""

from enum import Enum
from typing import Union


class MeliSite(Enum):
    """Mercado Libre sites keyed by site identifier."""

    ARGENTINA = ("MLA", "Argentina", "mercadolibre.com.ar")
    BOLIVIA = ("MBO", "Bolivia", "mercadolibre.com.bo")
    BRAZIL = ("MLB", "Brasil", "mercadolivre.com.br")
    CHILE = ("MLC", "Chile", "mercadolibre.cl")
    COLOMBIA = ("MCO", "Colombia", "mercadolibre.com.co")
    COSTA_RICA = ("MCR", "Costa Rica", "mercadolibre.co.cr")
    DOMINICAN_REPUBLIC = ("MRD", "Dominicana", "mercadolibre.com.do")
    ECUADOR = ("MEC", "Ecuador", "mercadolibre.com.ec")
    GUATEMALA = ("MGT", "Guatemala", "mercadolibre.com.gt")
    HONDURAS = ("MHN", "Honduras", "mercadolibre.com.hn")
    MEXICO = ("MLM", "Mexico", "mercadolibre.com.mx")
    NICARAGUA = ("MNI", "Nicaragua", "mercadolibre.com.ni")
    PANAMA = ("MPA", "Panamá", "mercadolibre.com.pa")
    PARAGUAY = ("MPY", "Paraguay", "mercadolibre.com.py")
    PERU = ("MPE", "Perú", "mercadolibre.com.pe")
    EL_SALVADOR = ("MSV", "El Salvador", "mercadolibre.com.sv")
    URUGUAY = ("MLU", "Uruguay", "mercadolibre.com.uy")
    VENEZUELA = ("MLV", "Venezuela", "mercadolibre.com.ve")

    def __init__(self, site_id: str, country: str, domain: str):
        self.site_id = site_id
        self.country = country
        self.domain = domain

    def to_domain(self) -> str:
        """Return the marketplace domain used to build authorization URLs."""
        return self.domain

    @property
    def auth_host(self) -> str:
        return f"auth.{self.domain}"

    @classmethod
    def from_value(cls, value: Union[str, "MeliSite"]) -> "MeliSite":
        """
        Resolve a site from a site id ("MLA"), a member name ("ARGENTINA")
        or a country name ("Argentina"), ignoring case.

        Raises:
            ValueError: If the value names no known site
        """
        if isinstance(value, cls):
            return value

        wanted = str(value).strip().upper()
        for site in cls:
            if wanted in (site.site_id, site.name, site.country.upper()):
                return site

        raise ValueError(f"Unknown Mercado Libre site: {value!r}")
