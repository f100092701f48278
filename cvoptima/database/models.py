from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ResumeInsert:
    """Column values for a new row in the resumes table."""

    user_id: str
    title: str
    file_path: str
    file_url: str
    raw_text: str
    file_size: int
    file_type: str


@dataclass
class ResumeRecord:
    """Represents a row from the resumes table."""

    id: str
    user_id: str
    title: str
    file_path: str
    file_url: str
    raw_text: str | None = None
    file_size: int | None = None
    file_type: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
