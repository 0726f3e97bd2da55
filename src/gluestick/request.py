from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError

from gluestick.fields import FieldSpec, compile_fields


class BadRequestError(ValueError):
    """A scrape request that cannot be run as given."""


class ScrapeItem(BaseModel):
    selector: str = ""
    # name -> "selector|attr" string, or name -> {nested fields}
    fields: dict[str, Any] = Field(default_factory=dict)

    def compiled_fields(self, path: str = "fields") -> dict[str, FieldSpec]:
        return compile_fields(self.fields, path)


class ScrapeRequest(BaseModel):
    url: str = ""
    items: dict[str, ScrapeItem] = Field(default_factory=dict)


def decode_request(payload: str | bytes) -> ScrapeRequest:
    try:
        return ScrapeRequest.model_validate_json(payload)
    except ValidationError as exc:
        raise BadRequestError(str(exc)) from exc


def validate_request(request: ScrapeRequest | None) -> None:
    """Check the request shape before anything is fetched.

    Individual field definitions are not checked here; a malformed field is
    dropped when the item's fields are compiled and the scrape goes on.
    """
    if request is None:
        raise BadRequestError("request was missing")
    _validate_url(request.url)
    if not request.items:
        raise BadRequestError("request.items was empty")
    for name, item in request.items.items():
        if not item.selector:
            raise BadRequestError(f"request.items[{name!r}].selector was empty")
        if not item.fields:
            raise BadRequestError(f"request.items[{name!r}].fields was empty")


def _validate_url(url: str) -> None:
    if not url:
        raise BadRequestError("request.url was empty")
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as exc:
        raise BadRequestError(f"request.url {url!r} could not be parsed: {exc}") from exc
    if parsed.scheme not in {"http", "https"} or not host:
        raise BadRequestError(f"request.url {url!r} is not an absolute http(s) URL")
