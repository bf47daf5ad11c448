"""Slug helpers shared by the catalog entities."""
import re
import unicodedata

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(value: str) -> str:
    """Lowercase, strip accents and join words with hyphens ("Ficção" -> "ficcao")."""
    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_only.lower())
    return slug.strip("-")


def is_valid_slug(value: str) -> bool:
    return bool(SLUG_PATTERN.match(value))
