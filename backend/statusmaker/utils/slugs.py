import re
import unicodedata
from typing import Iterable, Optional

from sqlalchemy.orm import Session

# Slug columns are String(255); the base leaves room for a "-N" suffix
SLUG_MAX_LENGTH = 255
SLUG_SUFFIX_RESERVE = 10


def generate_slug(name: str) -> str:
    """
    Generate URL-friendly slug from a display name.

    Args:
        name: Display name

    Returns:
        URL-safe slug (lowercase, hyphens, alphanumeric)

    Example:
        >>> generate_slug("Happy Birthday Celebration!")
        "happy-birthday-celebration"
    """
    # Fold accents to ASCII ("Café" -> "cafe")
    slug = unicodedata.normalize("NFKD", name or "").encode("ascii", "ignore").decode("ascii")

    # Convert to lowercase
    slug = slug.lower()

    # Replace spaces and special chars with hyphens
    slug = re.sub(r'[^\w\s-]', '', slug)
    slug = re.sub(r'[-\s_]+', '-', slug)

    # Remove leading/trailing hyphens
    slug = slug.strip('-')

    return slug


def first_free_slug(base: str, taken: Iterable[str]) -> str:
    """
    Pick `base`, or the first of `base-1`, `base-2`, ... not in `taken`.

    Example:
        >>> first_free_slug("birthday", {"birthday", "birthday-1"})
        "birthday-2"
    """
    taken = set(taken)
    if base not in taken:
        return base

    suffix = 1
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


def unique_slug(
    db: Session,
    model,
    name: str,
    fallback: str,
    exclude_id: Optional[int] = None,
) -> str:
    """
    Generate a slug for `name` that is not yet used by any `model` row.

    This is a check-then-insert: two concurrent requests can still pick the
    same slug, in which case the unique constraint rejects the second insert.

    Args:
        db: Database session
        model: Mapped class with `id` and `slug` columns
        name: Display name to derive the slug from
        fallback: Base slug used when `name` has no sluggable characters
        exclude_id: Row to ignore (the record being updated)

    Returns:
        Unused slug
    """
    base = generate_slug(name)[:SLUG_MAX_LENGTH - SLUG_SUFFIX_RESERVE].rstrip("-") or fallback

    query = db.query(model.slug).filter(
        (model.slug == base) | (model.slug.like(f"{base}-%"))
    )
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)

    return first_free_slug(base, (row[0] for row in query.all()))
