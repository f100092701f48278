from typing import Any

from psycopg.rows import dict_row

from cvoptima.database.connection import get_connection
from cvoptima.database.models import ResumeInsert, ResumeRecord

_COLUMNS = """
    id, user_id, title, file_path, file_url, raw_text,
    file_size, file_type, created_at, updated_at
"""


class ResumesRepository:
    """Database operations for the resumes table."""

    def insert(self, resume: ResumeInsert) -> ResumeRecord:
        """Insert a resume row and return it with its generated id."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO resumes
                    (user_id, title, file_path, file_url, raw_text, file_size, file_type)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (
                        resume.user_id,
                        resume.title,
                        resume.file_path,
                        resume.file_url,
                        resume.raw_text,
                        resume.file_size,
                        resume.file_type,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT ... RETURNING produced no row")
        return self._to_record(row)

    def find_by_id(self, resume_id: str) -> ResumeRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM resumes WHERE id = %s",
                    (resume_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return self._to_record(row)

    def delete_by_id(self, resume_id: str) -> bool:
        """Delete a resume row. Dependent analyses go with it (ON DELETE CASCADE).

        Returns:
            True if a row was deleted.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM resumes WHERE id = %s", (resume_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    def list_by_user(self, user_id: str) -> list[ResumeRecord]:
        """Return a user's resumes, newest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM resumes
                    WHERE user_id = %s
                    ORDER BY created_at DESC
                    """,
                    (user_id,),
                )
                rows = cur.fetchall()
        return [self._to_record(row) for row in rows]

    def list_file_paths(self) -> set[str]:
        """Return every blob key referenced by a resume row."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT file_path FROM resumes")
                rows = cur.fetchall()
        return {row[0] for row in rows}

    def total_file_size(self, user_id: str) -> int:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COALESCE(SUM(file_size), 0) FROM resumes WHERE user_id = %s",
                    (user_id,),
                )
                row = cur.fetchone()
        return int(row[0]) if row is not None else 0

    @staticmethod
    def _to_record(row: dict[str, Any]) -> ResumeRecord:
        return ResumeRecord(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            title=row["title"],
            file_path=row["file_path"],
            file_url=row["file_url"],
            raw_text=row["raw_text"],
            file_size=row["file_size"],
            file_type=row["file_type"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
