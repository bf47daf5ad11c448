"""
Shared pydantic bases and field validators for the API layer.

JSON bodies use camelCase; Python attributes stay snake_case.
"""
import re
from functools import partial
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from domain.slugs import is_valid_slug

URL_PATTERN = re.compile(r"^(https?://[^\s/$.?#][^\s]*|/[^\s]*)$", re.IGNORECASE)
COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def optional_url(value: Any) -> Optional[str]:
    """Accept an absolute http(s) URL or a site-relative path; empty means absent."""
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    if not URL_PATTERN.match(value):
        raise ValueError("Invalid URL")
    return value


def required_url(value: Any) -> str:
    checked = optional_url(value)
    if checked is None:
        raise ValueError("URL is required")
    return checked


def optional_slug(value: Any, *, min_length: int = 2) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    if len(value) < min_length:
        raise ValueError(f"Slug must have at least {min_length} characters")
    if not is_valid_slug(value):
        raise ValueError("Slug may only contain lowercase letters, digits and hyphens")
    return value


def color(value: Any) -> str:
    value = str(value).strip()
    if not COLOR_PATTERN.match(value):
        raise ValueError("Color must be in #RRGGBB format")
    return value


OptionalUrl = Annotated[Optional[str], BeforeValidator(optional_url)]
RequiredUrl = Annotated[str, BeforeValidator(required_url)]
OptionalSlug = Annotated[Optional[str], BeforeValidator(optional_slug)]
NameSlug = Annotated[Optional[str], BeforeValidator(partial(optional_slug, min_length=3))]
Color = Annotated[str, BeforeValidator(color)]


class MessageResponse(BaseModel):
    message: str
