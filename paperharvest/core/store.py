"""
SQLite-backed paper store
"""
from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from .models import Paper


logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when a store read or write fails."""


SCHEMA = """
CREATE TABLE IF NOT EXISTS paper (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    authors TEXT NOT NULL DEFAULT '[]',
    abstract TEXT NOT NULL DEFAULT '',
    url TEXT NOT NULL DEFAULT '',
    pdf TEXT NOT NULL DEFAULT '',
    software_names TEXT NOT NULL DEFAULT '[]',
    published_time TEXT,
    created_at TEXT NOT NULL
);
"""

_COLUMNS = "id, title, authors, abstract, url, pdf, software_names, published_time, created_at"


class PaperStore:
    """
    Paper table with authors and software names kept as JSON arrays.

    One connection is shared by every worker thread; statements are
    serialized with a lock.
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to open database: {self.db_path}") from exc
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()

    def __enter__(self) -> "PaperStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    def create_schema(self) -> None:
        with self._lock:
            try:
                self.conn.executescript(SCHEMA)
            except sqlite3.Error as exc:
                raise StoreError("Unable to create schema") from exc

    def find_by_identifier(self, identifier: str) -> Optional[Paper]:
        with self._lock:
            try:
                row = self.conn.execute(
                    f"SELECT {_COLUMNS} FROM paper WHERE id = ?", (identifier,)
                ).fetchone()
                return self._row_to_paper(row) if row else None
            except (sqlite3.Error, ValueError) as exc:
                raise StoreError(f"Lookup failed for {identifier}") from exc

    def insert(self, paper: Paper) -> None:
        logger.info("Inserting paper %s for %s", paper.identifier, paper.software_names)
        values = (
            paper.identifier,
            paper.title,
            json.dumps(paper.authors, ensure_ascii=False),
            paper.abstract,
            paper.url,
            paper.pdf_url,
            json.dumps(paper.software_names, ensure_ascii=False),
            paper.published_at.isoformat() if paper.published_at else None,
            (paper.created_at or datetime.now().astimezone()).isoformat(),
        )
        with self._lock:
            try:
                with self.conn:
                    self.conn.execute(
                        f"INSERT INTO paper ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                        values,
                    )
            except sqlite3.Error as exc:
                raise StoreError(f"Insert failed for {paper.identifier}") from exc

    def update_software_names(self, identifier: str, software_names: List[str]) -> None:
        with self._lock:
            try:
                with self.conn:
                    cursor = self.conn.execute(
                        "UPDATE paper SET software_names = ? WHERE id = ?",
                        (json.dumps(software_names, ensure_ascii=False), identifier),
                    )
            except sqlite3.Error as exc:
                raise StoreError(f"Update failed for {identifier}") from exc
        if cursor.rowcount == 0:
            raise StoreError(f"Paper not found: {identifier}")

    def papers_for_software(self, software_name: str) -> List[Paper]:
        """Papers associated with software_name, compared case-insensitively"""
        with self._lock:
            try:
                rows = self.conn.execute(
                    f"SELECT {_COLUMNS} FROM paper ORDER BY id"
                ).fetchall()
                papers = [self._row_to_paper(row) for row in rows]
            except (sqlite3.Error, ValueError) as exc:
                raise StoreError(f"Listing failed for {software_name}") from exc

        wanted = software_name.lower()
        return [
            paper
            for paper in papers
            if any(name.lower() == wanted for name in paper.software_names)
        ]

    @staticmethod
    def _row_to_paper(row: sqlite3.Row) -> Paper:
        """Decode one row; malformed JSON arrays or timestamps raise ValueError"""
        published = row["published_time"]
        return Paper(
            identifier=row["id"],
            title=row["title"],
            authors=_decode_list(row["authors"]),
            abstract=row["abstract"],
            url=row["url"],
            pdf_url=row["pdf"],
            software_names=_decode_list(row["software_names"]),
            published_at=datetime.fromisoformat(published) if published else None,
            created_at=datetime.fromisoformat(row["created_at"]),
        )


def _decode_list(raw: str) -> List[str]:
    value = json.loads(raw)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"Expected a JSON array of strings, got {raw!r}")
    return value
