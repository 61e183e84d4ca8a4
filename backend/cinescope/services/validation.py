"""
validation.py

Construction-time checks for signal entities. These run before anything touches
the database or TMDB, and raise ValidationError naming the offending field.
"""
import math
from typing import Any, Dict, Optional

from cinescope.core.exceptions import ValidationError
from cinescope.models import WATCHLIST_PRIORITIES

RATING_MIN = 1
RATING_MAX = 10
REVIEW_TITLE_MAX = 100
REVIEW_CONTENT_MAX = 2000
WATCHLIST_NOTES_MAX = 500

REVIEW_UPDATABLE_FIELDS = ("rating", "title", "content", "spoilers")


def validate_tmdb_id(tmdb_id: Any) -> int:
    if isinstance(tmdb_id, bool) or not isinstance(tmdb_id, int) or tmdb_id <= 0:
        raise ValidationError("TMDB id must be a positive integer", field="tmdb_id")
    return tmdb_id


def validate_rating(rating: Any) -> float:
    if isinstance(rating, bool) or not isinstance(rating, (int, float)) or math.isnan(rating):
        raise ValidationError("Rating must be a number", field="rating")
    if rating < RATING_MIN or rating > RATING_MAX:
        raise ValidationError(f"Rating must be between {RATING_MIN} and {RATING_MAX}", field="rating")
    return rating


def _validate_text(value: Any, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    value = value.strip()
    if not value:
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    if len(value) > max_length:
        raise ValidationError(f"{field.capitalize()} cannot be more than {max_length} characters", field=field)
    return value


def validate_review_title(title: Any) -> str:
    return _validate_text(title, "title", REVIEW_TITLE_MAX)


def validate_review_content(content: Any) -> str:
    return _validate_text(content, "content", REVIEW_CONTENT_MAX)


def validate_review_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a partial review update and return the cleaned values.

    Unknown keys are rejected; None values are treated as "not supplied".
    """
    unknown = set(fields) - set(REVIEW_UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown review field(s): {', '.join(sorted(unknown))}")

    cleaned: Dict[str, Any] = {}
    if fields.get("rating") is not None:
        cleaned["rating"] = validate_rating(fields["rating"])
    if fields.get("title") is not None:
        cleaned["title"] = validate_review_title(fields["title"])
    if fields.get("content") is not None:
        cleaned["content"] = validate_review_content(fields["content"])
    if fields.get("spoilers") is not None:
        cleaned["spoilers"] = bool(fields["spoilers"])
    return cleaned


def validate_priority(priority: Any) -> str:
    if priority not in WATCHLIST_PRIORITIES:
        raise ValidationError(f"Priority must be one of: {', '.join(WATCHLIST_PRIORITIES)}", field="priority")
    return priority


def validate_notes(notes: Optional[Any]) -> Optional[str]:
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise ValidationError("Notes must be text", field="notes")
    if len(notes) > WATCHLIST_NOTES_MAX:
        raise ValidationError(f"Notes cannot be more than {WATCHLIST_NOTES_MAX} characters", field="notes")
    return notes
