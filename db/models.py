"""
db/models.py — Portfolio Data Model & Data Access
==================================================

Design principles:
  1. Five entity tables plus one association table, nothing else
  2. Every operation is one (or a few) parameterized SQL statements
  3. Multi-statement mutations run inside a single transaction
  4. Integrity rules live in the schema; errors are translated, not pre-checked
  5. SQLite backing store - portable, zero infra

Tables:
  profile          → Singleton (id is always 1, enforced by CHECK)
  education        → Degrees, in-progress when end_year is NULL
  work_experience  → Positions, current when end_date is NULL
  skills           → Unique names with an optional category
  projects         → Work items, linked to skills through project_skills
  project_skills   → (project_id, skill_id) association, no own attributes

Skill lists on projects are always plain name lists, built by grouping the
rows of a LEFT JOIN in Python. Projects without skills get [].
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from db.errors import ConflictError, NotFoundError, StoreError, ValidationError

DB_PATH = Path(__file__).parent / "portfolio.db"

PROFILE_ID = 1

# SQLite INTEGER is a signed 64-bit value.
MIN_INTEGER = -(2 ** 63)
MAX_INTEGER = 2 ** 63 - 1


# --- SCHEMA DDL ---

SCHEMA = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

-- ── Profile (singleton) ─────────────────────────────────────────────────────
CREATE TABLE IF NOT EXISTS profile (
    id            INTEGER PRIMARY KEY CHECK (id = 1),
    name          TEXT NOT NULL,
    email         TEXT NOT NULL,
    github_url    TEXT,
    linkedin_url  TEXT,
    portfolio_url TEXT
);

-- ── Career timeline ─────────────────────────────────────────────────────────
CREATE TABLE IF NOT EXISTS education (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    institution TEXT NOT NULL,
    degree      TEXT NOT NULL,
    start_year  INTEGER,
    end_year    INTEGER                 -- null = in progress
);

CREATE TABLE IF NOT EXISTS work_experience (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    company     TEXT NOT NULL,
    position    TEXT NOT NULL,
    start_date  TEXT,                   -- ISO-8601 date or partial (2020-01)
    end_date    TEXT,                   -- null = present
    description TEXT
);
CREATE INDEX IF NOT EXISTS idx_work_start ON work_experience(start_date);

-- ── Skills & projects (many-to-many) ────────────────────────────────────────
CREATE TABLE IF NOT EXISTS skills (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    name     TEXT NOT NULL UNIQUE,
    category TEXT
);

CREATE TABLE IF NOT EXISTS projects (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT NOT NULL,
    description TEXT NOT NULL,
    repo_link   TEXT,
    live_link   TEXT
);

CREATE TABLE IF NOT EXISTS project_skills (
    project_id INTEGER NOT NULL REFERENCES projects(id),
    skill_id   INTEGER NOT NULL REFERENCES skills(id) ON DELETE RESTRICT,
    PRIMARY KEY (project_id, skill_id)
);
CREATE INDEX IF NOT EXISTS idx_project_skills_skill ON project_skills(skill_id);
"""

# Writable columns per table; also the whitelist for interpolated table names.
COLUMNS = {
    "profile":         ("name", "email", "github_url", "linkedin_url", "portfolio_url"),
    "education":       ("institution", "degree", "start_year", "end_year"),
    "work_experience": ("company", "position", "start_date", "end_date", "description"),
    "skills":          ("name", "category"),
    "projects":        ("title", "description", "repo_link", "live_link"),
}

REQUIRED = {
    "profile":         ("name", "email"),
    "education":       ("institution", "degree"),
    "work_experience": ("company", "position"),
    "skills":          ("name",),
    "projects":        ("title", "description"),
}

LABELS = {
    "education":       "Education",
    "work_experience": "Work experience",
    "skills":          "Skill",
    "projects":        "Project",
}


# --- DB CONNECTION ---

def get_db(path: Path = DB_PATH) -> sqlite3.Connection:
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def init_db(path: Path = DB_PATH):
    """Create the schema if it does not exist yet."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_db(path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Commit on success, roll back on any exception."""
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


# --- GENERIC HELPERS ---

def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _in_range(value: int) -> bool:
    return MIN_INTEGER <= value <= MAX_INTEGER


def _check_id(entity: str, row_id: int) -> None:
    """An id the driver cannot bind can never match a row."""
    if not _in_range(row_id):
        raise NotFoundError.for_entity(entity, row_id)


def _require(table: str, data: dict) -> None:
    missing = [f for f in REQUIRED[table] if not _present(data.get(f))]
    if missing:
        raise ValidationError.missing(missing)


def _values(table: str, data: dict) -> dict:
    return {col: data.get(col) for col in COLUMNS[table]}


def _insert(conn: sqlite3.Connection, table: str, data: dict) -> int:
    _require(table, data)
    values = _values(table, data)
    cols = ", ".join(values)
    marks = ", ".join(f":{c}" for c in values)
    cur = conn.execute(f"INSERT INTO {table} ({cols}) VALUES ({marks})", values)
    return cur.lastrowid


def _update(conn: sqlite3.Connection, table: str, row_id: int, data: dict) -> None:
    _require(table, data)
    _check_id(LABELS[table], row_id)
    values = _values(table, data)
    assignments = ", ".join(f"{c}=:{c}" for c in values)
    cur = conn.execute(
        f"UPDATE {table} SET {assignments} WHERE id=:id", {**values, "id": row_id}
    )
    if cur.rowcount == 0:
        raise NotFoundError.for_entity(LABELS[table], row_id)


def _delete(conn: sqlite3.Connection, table: str, row_id: int) -> None:
    _check_id(LABELS[table], row_id)
    cur = conn.execute(f"DELETE FROM {table} WHERE id=?", (row_id,))
    if cur.rowcount == 0:
        raise NotFoundError.for_entity(LABELS[table], row_id)


def _get(conn: sqlite3.Connection, table: str, row_id: int) -> dict:
    _check_id(LABELS[table], row_id)
    row = conn.execute(f"SELECT * FROM {table} WHERE id=?", (row_id,)).fetchone()
    if not row:
        raise NotFoundError.for_entity(LABELS[table], row_id)
    return dict(row)


# --- PROFILE ---

def get_profile_aggregate(conn: sqlite3.Connection) -> dict:
    """
    Profile row plus its full education and work history in one dict.

    A missing profile row is a deployment problem (the seed never ran), so it
    raises StoreError rather than NotFoundError.
    """
    row = conn.execute("SELECT * FROM profile WHERE id=?", (PROFILE_ID,)).fetchone()
    if not row:
        raise StoreError("Profile row is missing; the database has not been seeded")

    education = conn.execute(
        "SELECT * FROM education ORDER BY end_year DESC NULLS FIRST, start_year DESC"
    ).fetchall()
    work = conn.execute(
        "SELECT * FROM work_experience ORDER BY start_date DESC NULLS LAST, id DESC"
    ).fetchall()

    profile = dict(row)
    profile["education"] = [dict(r) for r in education]
    profile["work_experience"] = [dict(r) for r in work]
    return profile


def update_profile(conn: sqlite3.Connection, data: dict) -> None:
    """Update the singleton profile row in place (never inserts)."""
    _require("profile", data)
    values = _values("profile", data)
    assignments = ", ".join(f"{c}=:{c}" for c in values)
    with transaction(conn):
        cur = conn.execute(
            f"UPDATE profile SET {assignments} WHERE id=:id", {**values, "id": PROFILE_ID}
        )
        if cur.rowcount == 0:
            raise StoreError("Profile row is missing; the database has not been seeded")


# --- SKILLS ---

def list_skills(conn: sqlite3.Connection) -> list[dict]:
    rows = conn.execute("SELECT * FROM skills ORDER BY name ASC").fetchall()
    return [dict(r) for r in rows]


def get_skill(conn: sqlite3.Connection, skill_id: int) -> dict:
    return _get(conn, "skills", skill_id)


def top_skills(conn: sqlite3.Connection, limit: int = 5) -> list[dict]:
    """
    Skills ranked by the number of projects using them.

    Inner join: skills without any project never appear.
    Ties are broken by name so the result is deterministic.
    """
    rows = conn.execute("""
        SELECT s.id, s.name, s.category,
               COUNT(ps.project_id) AS project_count
        FROM skills s
        JOIN project_skills ps ON ps.skill_id = s.id
        GROUP BY s.id
        ORDER BY project_count DESC, s.name ASC
        LIMIT ?
    """, (limit,)).fetchall()
    return [dict(r) for r in rows]


def create_skill(conn: sqlite3.Connection, data: dict) -> dict:
    with transaction(conn):
        try:
            skill_id = _insert(conn, "skills", data)
        except sqlite3.IntegrityError:
            raise ConflictError(f"Skill '{data['name']}' already exists")
    return get_skill(conn, skill_id)


def update_skill(conn: sqlite3.Connection, skill_id: int, data: dict) -> None:
    with transaction(conn):
        try:
            _update(conn, "skills", skill_id, data)
        except sqlite3.IntegrityError:
            raise ConflictError(f"Skill '{data['name']}' already exists")


def delete_skill(conn: sqlite3.Connection, skill_id: int) -> None:
    """
    Delete a skill unless a project still references it.

    The ON DELETE RESTRICT foreign key rejects the delete atomically; the
    IntegrityError is translated into a ConflictError.
    """
    with transaction(conn):
        try:
            _delete(conn, "skills", skill_id)
        except sqlite3.IntegrityError:
            in_use = conn.execute(
                "SELECT COUNT(*) FROM project_skills WHERE skill_id=?", (skill_id,)
            ).fetchone()[0]
            raise ConflictError(f"Skill {skill_id} is used by {in_use} project(s)")


# --- EDUCATION & WORK ---

def create_education(conn: sqlite3.Connection, data: dict) -> dict:
    with transaction(conn):
        row_id = _insert(conn, "education", data)
    return _get(conn, "education", row_id)


def update_education(conn: sqlite3.Connection, education_id: int, data: dict) -> None:
    with transaction(conn):
        _update(conn, "education", education_id, data)


def delete_education(conn: sqlite3.Connection, education_id: int) -> None:
    with transaction(conn):
        _delete(conn, "education", education_id)


def create_work(conn: sqlite3.Connection, data: dict) -> dict:
    with transaction(conn):
        row_id = _insert(conn, "work_experience", data)
    return _get(conn, "work_experience", row_id)


def update_work(conn: sqlite3.Connection, work_id: int, data: dict) -> None:
    with transaction(conn):
        _update(conn, "work_experience", work_id, data)


def delete_work(conn: sqlite3.Connection, work_id: int) -> None:
    with transaction(conn):
        _delete(conn, "work_experience", work_id)


# --- PROJECTS ---

PROJECT_SELECT = """
    SELECT p.id, p.title, p.description, p.repo_link, p.live_link,
           s.name AS skill_name
    FROM projects p
    LEFT JOIN project_skills ps ON ps.project_id = p.id
    LEFT JOIN skills s ON s.id = ps.skill_id
"""

PROJECT_ORDER = " ORDER BY p.id, s.name"


def _group_projects(rows: list[sqlite3.Row]) -> list[dict]:
    """Collapse one-row-per-(project, skill) into one dict per project."""
    projects: dict[int, dict] = {}
    for row in rows:
        project = projects.get(row["id"])
        if project is None:
            project = {col: row[col] for col in ("id",) + COLUMNS["projects"]}
            project["skills"] = []
            projects[row["id"]] = project
        if row["skill_name"] is not None:
            project["skills"].append(row["skill_name"])
    return list(projects.values())


def list_projects(conn: sqlite3.Connection, skill: Optional[str] = None) -> list[dict]:
    """
    All projects with their skill names.

    skill filter: keep projects with at least one skill whose name contains
    *skill* as a case-sensitive substring. The matching project still lists
    all of its skills.
    """
    sql = PROJECT_SELECT
    params: list[Any] = []
    if skill:
        sql += """
            WHERE EXISTS (
                SELECT 1 FROM project_skills fps
                JOIN skills fs ON fs.id = fps.skill_id
                WHERE fps.project_id = p.id AND instr(fs.name, ?) > 0
            )
        """
        params.append(skill)
    sql += PROJECT_ORDER
    return _group_projects(conn.execute(sql, params).fetchall())


def search_projects(conn: sqlite3.Connection, term: Optional[str]) -> list[dict]:
    """Projects whose title or description contains *term* (case-sensitive)."""
    if not _present(term):
        raise ValidationError.missing(["q"])
    sql = PROJECT_SELECT + """
        WHERE instr(p.title, :term) > 0 OR instr(p.description, :term) > 0
    """ + PROJECT_ORDER
    return _group_projects(conn.execute(sql, {"term": term}).fetchall())


def get_project(conn: sqlite3.Connection, project_id: int) -> dict:
    _check_id("Project", project_id)
    rows = conn.execute(
        PROJECT_SELECT + " WHERE p.id = ?" + PROJECT_ORDER, (project_id,)
    ).fetchall()
    if not rows:
        raise NotFoundError.for_entity("Project", project_id)
    return _group_projects(rows)[0]


def _link_skills(conn: sqlite3.Connection, project_id: int, skill_ids: list[int]) -> None:
    """Replace the association set of a project. Caller owns the transaction."""
    wanted = list(dict.fromkeys(skill_ids))
    if wanted:
        bindable = [sid for sid in wanted if _in_range(sid)]
        marks = ", ".join("?" * len(bindable))
        known = {
            r["id"] for r in conn.execute(
                f"SELECT id FROM skills WHERE id IN ({marks})", bindable
            ).fetchall()
        } if bindable else set()
        unknown = [sid for sid in wanted if sid not in known]
        if unknown:
            raise ValidationError(
                f"Unknown skill id(s): {', '.join(str(s) for s in unknown)}"
            )

    conn.execute("DELETE FROM project_skills WHERE project_id=?", (project_id,))
    conn.executemany(
        "INSERT INTO project_skills (project_id, skill_id) VALUES (?, ?)",
        [(project_id, sid) for sid in wanted],
    )


def create_project(conn: sqlite3.Connection, data: dict) -> dict:
    """Insert a project and, when given, its skill associations."""
    with transaction(conn):
        project_id = _insert(conn, "projects", data)
        if data.get("skill_ids"):
            _link_skills(conn, project_id, data["skill_ids"])
    return get_project(conn, project_id)


def update_project(conn: sqlite3.Connection, project_id: int, data: dict) -> None:
    """
    Replace a project's fields. skill_ids=None leaves the associations as
    they are; a list (even empty) replaces them.
    """
    with transaction(conn):
        _update(conn, "projects", project_id, data)
        if data.get("skill_ids") is not None:
            _link_skills(conn, project_id, data["skill_ids"])


def delete_project(conn: sqlite3.Connection, project_id: int) -> None:
    """Remove the project's associations, then the project, as one unit."""
    _check_id("Project", project_id)
    with transaction(conn):
        conn.execute("DELETE FROM project_skills WHERE project_id=?", (project_id,))
        _delete(conn, "projects", project_id)


# --- STATS ---

def table_counts(conn: sqlite3.Connection) -> dict[str, int]:
    """Row count per table (fixed table list, safe to interpolate)."""
    return {
        table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        for table in (*COLUMNS, "project_skills")
    }
