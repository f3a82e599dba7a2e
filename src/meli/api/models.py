"""
Data models for Mercado Libre API payloads.

These are pydantic models so they can be passed as the ``model`` of a
client call and decoded straight from the JSON response.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """
    Body returned by the API when a request is not successful.

    Attributes:
        message: Human-readable message (e.g. "invalid_token")
        error: Error code (e.g. "not_found")
        status: HTTP status (e.g. 401)
        cause: Optional list of detailed causes
    """

    model_config = ConfigDict(extra="ignore")

    message: str
    error: Optional[str] = None
    status: Optional[int] = None
    cause: Optional[list] = None


class Site(BaseModel):
    """A Mercado Libre site as listed by ``/sites``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    default_currency_id: Optional[str] = None


class Picture(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    url: str
    secure_url: Optional[str] = None


class Item(BaseModel):
    """A listing as returned by ``/items/{id}``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    site_id: str
    seller_id: Optional[int] = None
    category_id: Optional[str] = None
    price: Optional[float] = None
    currency_id: Optional[str] = None
    initial_quantity: int = 0
    available_quantity: int = 0
    sold_quantity: int = 0
    buying_mode: Optional[str] = None
    condition: Optional[str] = None
    status: Optional[str] = None
    permalink: Optional[str] = None
    start_time: Optional[datetime] = None
    stop_time: Optional[datetime] = None
    pictures: List[Picture] = Field(default_factory=list)


class ItemResponse(BaseModel):
    """One entry of the multi-get ``/items?ids=...`` response."""

    model_config = ConfigDict(extra="ignore")

    code: int
    body: Optional[Item] = None
