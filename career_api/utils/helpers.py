"""Small shared helpers: date handling, document shaping and display names."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

# Large base64 payloads kept off list/summary responses
FILE_DATA_FIELDS = ("transcript_data", "final_transcript_data", "file_data")


def to_document(value):
    """
    Make validated request data storable in MongoDB:
    enums become their values and plain dates become ISO strings.
    """
    if isinstance(value, dict):
        return {k: to_document(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_document(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    return value


def without_file_data(doc: dict) -> dict:
    """Copy of a record with embedded file payloads removed."""
    slim = {k: v for k, v in doc.items() if k not in FILE_DATA_FIELDS and k != "password_hash"}
    if isinstance(slim.get("certificates"), list):
        slim["certificates"] = [
            {k: v for k, v in cert.items() if k != "data"} if isinstance(cert, dict) else cert
            for cert in slim["certificates"]
        ]
    return slim


def as_utc(value) -> Optional[datetime]:
    """
    Coerce a stored/submitted date to an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC) and ISO-8601 strings.
    Returns None for anything else.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_past(value, now: Optional[datetime] = None) -> bool:
    """True when value is a date strictly before now. Missing dates never pass."""
    deadline = as_utc(value)
    if deadline is None:
        return False
    return deadline < (now or datetime.now(timezone.utc))


def full_name(person: dict) -> str:
    return f"{person.get('first_name', '')} {person.get('last_name', '')}".strip()
