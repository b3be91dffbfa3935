# projects_api/db.py
# SQLite-backed record store for projects and users.
#
# One connection per process: Database.open() at application startup,
# Database.close() at shutdown. Handlers receive the stores through
# FastAPI dependencies (see dependencies.py), never through module state.

from __future__ import annotations

import json
import re
import secrets
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path as FsPath
from typing import Any, Dict, Generator, List, Optional

from projects_api.logger import get_logger

log = get_logger("db")

# Store keys: 24 lowercase hex characters (12 random bytes)
RECORD_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_record_id() -> str:
    return secrets.token_hex(12)


def is_valid_record_id(record_id: Any) -> bool:
    """True if record_id has the store's key format. Says nothing about existence."""
    return isinstance(record_id, str) and bool(RECORD_ID_RE.match(record_id))


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS projects (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        categories TEXT NOT NULL DEFAULT '[]',
        created_at TEXT,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        is_admin INTEGER NOT NULL DEFAULT 0,
        created_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_users_email ON users(email)",
)


# ---------------------------------------------------------
# Record types
# ---------------------------------------------------------
@dataclass
class Project:
    id: str
    name: str
    categories: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Project":
        try:
            categories = json.loads(row["categories"]) if row["categories"] else []
        except (json.JSONDecodeError, TypeError):
            log.warning(f"[DB] Unreadable categories for project_id={row['id']}, treating as empty")
            categories = []
        return cls(id=row["id"], name=row["name"], categories=categories)

    def to_dict(self) -> Dict[str, Any]:
        return {"_id": self.id, "name": self.name, "categories": list(self.categories)}


@dataclass
class User:
    id: str
    name: str
    email: str
    password_hash: str
    is_admin: bool = False

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "User":
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            is_admin=bool(row["is_admin"]),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """User fields safe to return to clients (no password hash)."""
        return {"_id": self.id, "name": self.name, "email": self.email, "is_admin": self.is_admin}


class DuplicateKeyError(Exception):
    """Raised when an insert collides with a unique constraint."""


# ---------------------------------------------------------
# Connection handle
# ---------------------------------------------------------
class Database:
    """
    Owns the single SQLite connection.

    Statements from concurrent requests are serialized by an internal lock;
    handlers never hold it across more than one store call.
    """

    def __init__(self, path: str):
        self.path = path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> "Database":
        if self._conn is not None:
            return self

        if self.path != ":memory:":
            FsPath(self.path).resolve().parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        for statement in SCHEMA:
            conn.execute(statement)
        conn.commit()

        self._conn = conn
        log.info(f"[DB] Opened SQLite store at {self.path}")
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        log.info(f"[DB] Closed SQLite store at {self.path}")

    @contextmanager
    def cursor(self) -> Generator[sqlite3.Cursor, None, None]:
        """
        Locked cursor. Commits on success, rolls back and re-raises on error.

        Raises:
            sqlite3.ProgrammingError: If the store has not been opened
        """
        with self._lock:
            if self._conn is None:
                raise sqlite3.ProgrammingError("Database is not open")
            cur = self._conn.cursor()
            try:
                yield cur
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise
            finally:
                cur.close()


# ---------------------------------------------------------
# Project store
# ---------------------------------------------------------
class ProjectStore:
    """CRUD operations on project records. Each method is one store round-trip."""

    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> List[Project]:
        with self.db.cursor() as cur:
            cur.execute("SELECT id, name, categories FROM projects ORDER BY rowid")
            return [Project.from_row(row) for row in cur.fetchall()]

    def list_by_category(self, label: str) -> List[Project]:
        """Projects with at least one category label containing `label` (case-sensitive)."""
        with self.db.cursor() as cur:
            cur.execute(
                """
                SELECT p.id, p.name, p.categories
                FROM projects p
                WHERE EXISTS (
                    SELECT 1 FROM json_each(p.categories) c
                    WHERE instr(c.value, ?) > 0
                )
                ORDER BY p.rowid
                """,
                (label,),
            )
            return [Project.from_row(row) for row in cur.fetchall()]

    def get(self, project_id: str) -> Optional[Project]:
        if not is_valid_record_id(project_id):
            return None
        with self.db.cursor() as cur:
            cur.execute(
                "SELECT id, name, categories FROM projects WHERE id = ?",
                (project_id.lower(),),
            )
            row = cur.fetchone()
        return Project.from_row(row) if row else None

    def create(self, name: str, categories: Optional[List[str]] = None) -> Project:
        project = Project(id=new_record_id(), name=name, categories=list(categories or []))
        now = now_iso()
        with self.db.cursor() as cur:
            cur.execute(
                "INSERT INTO projects (id, name, categories, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (project.id, project.name, json.dumps(project.categories), now, now),
            )
        return project

    def update_name(self, project_id: str, name: str) -> Optional[Project]:
        """Rewrite the name in place. Returns the updated record, or None if absent."""
        if not is_valid_record_id(project_id):
            return None
        with self.db.cursor() as cur:
            cur.execute(
                "UPDATE projects SET name = ?, updated_at = ? WHERE id = ?",
                (name, now_iso(), project_id.lower()),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(
                "SELECT id, name, categories FROM projects WHERE id = ?",
                (project_id.lower(),),
            )
            row = cur.fetchone()
        return Project.from_row(row)

    def delete(self, project_id: str) -> Optional[Project]:
        """Remove the record. Returns its prior state, or None if absent."""
        if not is_valid_record_id(project_id):
            return None
        with self.db.cursor() as cur:
            cur.execute(
                "SELECT id, name, categories FROM projects WHERE id = ?",
                (project_id.lower(),),
            )
            row = cur.fetchone()
            if not row:
                return None
            cur.execute("DELETE FROM projects WHERE id = ?", (row["id"],))
        return Project.from_row(row)


# ---------------------------------------------------------
# User store
# ---------------------------------------------------------
class UserStore:
    def __init__(self, db: Database):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        if not is_valid_record_id(user_id):
            return None
        with self.db.cursor() as cur:
            cur.execute("SELECT * FROM users WHERE id = ?", (user_id.lower(),))
            row = cur.fetchone()
        return User.from_row(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with self.db.cursor() as cur:
            cur.execute("SELECT * FROM users WHERE email = ?", (email,))
            row = cur.fetchone()
        return User.from_row(row) if row else None

    def create(self, name: str, email: str, password_hash: str, is_admin: bool = False) -> User:
        """
        Insert a user.

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        user = User(
            id=new_record_id(),
            name=name,
            email=email,
            password_hash=password_hash,
            is_admin=is_admin,
        )
        try:
            with self.db.cursor() as cur:
                cur.execute(
                    "INSERT INTO users (id, name, email, password_hash, is_admin, created_at) VALUES (?, ?, ?, ?, ?, ?)",
                    (user.id, user.name, user.email, user.password_hash, int(user.is_admin), now_iso()),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError(str(e)) from e
        return user
