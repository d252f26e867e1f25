"""
db/seed.py — One-time seed of the portfolio database
=====================================================
Populates an empty database with a fixed dataset at startup.
Idempotent: if the profile row already exists, nothing is touched.
"""

import logging
import sqlite3
from pathlib import Path

from db.models import DB_PATH, PROFILE_ID, get_db, init_db, transaction

log = logging.getLogger(__name__)


PROFILE = {
    "name":          "Gemini",
    "email":         "gemini.ai@google.com",
    "github_url":    "https://github.com",
    "linkedin_url":  "https://linkedin.com",
    "portfolio_url": "https://deepmind.google/",
}

EDUCATION = [
    {
        "institution": "Google Labs",
        "degree":      "Ph.D. in Large Language Models",
        "start_year":  2021,
        "end_year":    2023,
    },
]

WORK_EXPERIENCE = [
    {
        "company":     "Google",
        "position":    "Senior AI Engineer",
        "start_date":  "2023-Present",
        "end_date":    None,
        "description": "Developing next-generation AI models and systems.",
    },
]

SKILL_CATEGORY = "Technology"
SKILLS = [
    "Python", "JavaScript", "Node.js", "SQL", "React", "Docker",
    "Natural Language Processing",
]

PROJECTS = [
    {
        "title":       "Code Generation Service",
        "description": "An API that generates code snippets in multiple languages "
                       "based on natural language prompts.",
        "repo_link":   "https://github.com/project/codegen",
        "skills":      ["Python", "Natural Language Processing"],
    },
    {
        "title":       "Portfolio API",
        "description": "The very API we are building now. A RESTful service to "
                       "manage and display professional profile data.",
        "repo_link":   "https://github.com/project/portfolio-api",
        "skills":      ["JavaScript", "Node.js", "SQL", "Docker"],
    },
]


def is_seeded(conn: sqlite3.Connection) -> bool:
    return conn.execute("SELECT 1 FROM profile LIMIT 1").fetchone() is not None


def seed_if_empty(conn: sqlite3.Connection) -> bool:
    """
    Insert the fixed dataset when the profile table is empty.

    Returns True when data was inserted, False when the database already
    held a profile and the seed was skipped.
    """
    if is_seeded(conn):
        log.info("Database already contains a profile. Skipping seed.")
        return False

    log.info("Database is empty. Seeding with initial data...")
    with transaction(conn):
        conn.execute(
            "INSERT INTO profile (id, name, email, github_url, linkedin_url, portfolio_url) "
            "VALUES (:id, :name, :email, :github_url, :linkedin_url, :portfolio_url)",
            {"id": PROFILE_ID, **PROFILE},
        )
        conn.executemany(
            "INSERT INTO education (institution, degree, start_year, end_year) "
            "VALUES (:institution, :degree, :start_year, :end_year)",
            EDUCATION,
        )
        conn.executemany(
            "INSERT INTO work_experience (company, position, start_date, end_date, description) "
            "VALUES (:company, :position, :start_date, :end_date, :description)",
            WORK_EXPERIENCE,
        )

        skill_ids: dict[str, int] = {}
        for name in SKILLS:
            cur = conn.execute(
                "INSERT INTO skills (name, category) VALUES (?, ?)", (name, SKILL_CATEGORY)
            )
            skill_ids[name] = cur.lastrowid

        for project in PROJECTS:
            cur = conn.execute(
                "INSERT INTO projects (title, description, repo_link) VALUES (?, ?, ?)",
                (project["title"], project["description"], project["repo_link"]),
            )
            conn.executemany(
                "INSERT INTO project_skills (project_id, skill_id) VALUES (?, ?)",
                [(cur.lastrowid, skill_ids[name]) for name in project["skills"]],
            )

    log.info(
        "Seeding complete: %d skills, %d projects", len(SKILLS), len(PROJECTS)
    )
    return True


def bootstrap(path: Path = DB_PATH, seed: bool = True) -> None:
    """
    Ensure the schema exists and seed an empty database.

    Any failure is logged and re-raised: the service must not start on top
    of a store it could not prepare.
    """
    try:
        init_db(path)
        if seed:
            conn = get_db(path)
            try:
                seed_if_empty(conn)
            finally:
                conn.close()
    except Exception:
        log.exception("Failed to initialize database at %s", path)
        raise
    log.info("Database initialized successfully (%s)", path)
