import re
from datetime import datetime

DEFAULT_TITLE = "Untitled Resume"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_RESUME_EXTENSION = re.compile(r"\.(pdf|docx)$", re.IGNORECASE)
_WORD_SEPARATORS = re.compile(r"[_-]")


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [A-Za-z0-9._-] with '_'."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def blob_path(user_id: str, filename: str, now: datetime) -> str:
    """Build the storage key: {user_id}/{timestamp}_{sanitized filename}.

    The timestamp has microsecond resolution; `now` should be timezone-aware UTC.
    """
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S-%fZ")
    return f"{user_id}/{timestamp}_{sanitize_filename(filename)}"


def derive_title(filename: str) -> str:
    """'john_doe_resume_2024.pdf' -> 'John Doe Resume 2024'."""
    cleaned = _WORD_SEPARATORS.sub(" ", _RESUME_EXTENSION.sub("", filename))
    title = " ".join(word[:1].upper() + word[1:].lower() for word in cleaned.split(" "))
    return title if title.strip() else DEFAULT_TITLE


def text_preview(text: str, limit: int = 500) -> str:
    return f"{text[:limit]}..."
