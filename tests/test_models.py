# Data-Access Tests
# Exercises db/models.py directly against a seeded SQLite file.
# Dependent files: db/models.py, db/seed.py, db/errors.py

import sqlite3

import pytest

from db import models
from db.errors import ConflictError, NotFoundError, StoreError, ValidationError
from db.seed import PROJECTS, SKILLS, bootstrap, seed_if_empty


def _skill_id(conn, name):
    return conn.execute("SELECT id FROM skills WHERE name=?", (name,)).fetchone()["id"]


# --- Schema & seed ---

def test_seed_populates_fixed_dataset(conn):
    counts = models.table_counts(conn)
    assert counts["profile"] == 1
    assert counts["education"] == 1
    assert counts["work_experience"] == 1
    assert counts["skills"] == len(SKILLS)
    assert counts["projects"] == len(PROJECTS)
    assert counts["project_skills"] == sum(len(p["skills"]) for p in PROJECTS)


def test_seed_is_idempotent(conn, db_path):
    before = models.table_counts(conn)
    assert seed_if_empty(conn) is False
    bootstrap(db_path)
    assert models.table_counts(conn) == before


def test_profile_is_a_singleton(conn):
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO profile (id, name, email) VALUES (2, 'Other', 'o@example.com')")
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO profile (id, name, email) VALUES (1, 'Other', 'o@example.com')")
    conn.rollback()
    assert models.table_counts(conn)["profile"] == 1


# --- Profile ---

def test_profile_aggregate(conn):
    profile = models.get_profile_aggregate(conn)
    assert profile["id"] == models.PROFILE_ID
    assert profile["name"] == "Gemini"
    assert [e["institution"] for e in profile["education"]] == ["Google Labs"]
    assert [w["company"] for w in profile["work_experience"]] == ["Google"]


def test_profile_aggregate_orders_history(conn):
    models.create_education(conn, {"institution": "Old School", "degree": "BSc",
                                   "start_year": 2010, "end_year": 2014})
    models.create_education(conn, {"institution": "Night School", "degree": "MSc",
                                   "start_year": 2024, "end_year": None})
    models.create_work(conn, {"company": "Early Corp", "position": "Intern",
                              "start_date": "2015-06"})

    profile = models.get_profile_aggregate(conn)
    assert [e["institution"] for e in profile["education"]] == [
        "Night School", "Google Labs", "Old School",
    ]
    starts = [w["start_date"] for w in profile["work_experience"]]
    assert starts == sorted(starts, reverse=True)


def test_profile_aggregate_without_profile_is_store_error(db_path):
    bootstrap(db_path, seed=False)
    conn = models.get_db(db_path)
    try:
        with pytest.raises(StoreError):
            models.get_profile_aggregate(conn)
    finally:
        conn.close()


def test_update_profile_in_place(conn):
    models.update_profile(conn, {"name": "Ada", "email": "ada@example.com"})
    profile = models.get_profile_aggregate(conn)
    assert profile["name"] == "Ada"
    assert profile["github_url"] is None
    assert models.table_counts(conn)["profile"] == 1


def test_update_profile_requires_name_and_email(conn):
    with pytest.raises(ValidationError) as exc:
        models.update_profile(conn, {"name": "Ada", "email": " "})
    assert "email" in exc.value.message


# --- Skills ---

def test_list_skills_sorted_by_name(conn):
    names = [s["name"] for s in models.list_skills(conn)]
    assert names == sorted(names)


def test_top_skills_properties(conn):
    models.create_project(conn, {
        "title": "Data Pipeline", "description": "ETL jobs",
        "skill_ids": [_skill_id(conn, "Python"), _skill_id(conn, "SQL")],
    })

    top = models.top_skills(conn)
    counts = [s["project_count"] for s in top]
    assert len(top) <= 5
    assert counts == sorted(counts, reverse=True)
    assert all(c > 0 for c in counts)
    assert [s["name"] for s in top[:2]] == ["Python", "SQL"]
    assert "React" not in [s["name"] for s in models.top_skills(conn, limit=50)]


def test_create_skill_duplicate_name_conflicts(conn):
    with pytest.raises(ConflictError):
        models.create_skill(conn, {"name": "Python"})


def test_update_skill_not_found(conn):
    with pytest.raises(NotFoundError):
        models.update_skill(conn, 999999, {"name": "Nope"})


def test_delete_skill_in_use_is_conflict(conn):
    python_id = _skill_id(conn, "Python")
    with pytest.raises(ConflictError) as exc:
        models.delete_skill(conn, python_id)
    assert "1 project" in exc.value.message
    assert models.get_skill(conn, python_id)["name"] == "Python"


def test_delete_unused_skill(conn):
    react_id = _skill_id(conn, "React")
    models.delete_skill(conn, react_id)
    with pytest.raises(NotFoundError):
        models.get_skill(conn, react_id)


# --- Projects ---

def test_project_without_skills_has_empty_list(conn):
    created = models.create_project(conn, {"title": "Bare", "description": "No skills"})
    assert created["skills"] == []
    listed = {p["id"]: p for p in models.list_projects(conn)}
    assert listed[created["id"]]["skills"] == []


def test_list_projects_returns_skill_names(conn):
    projects = {p["title"]: p for p in models.list_projects(conn)}
    assert projects["Portfolio API"]["skills"] == ["Docker", "JavaScript", "Node.js", "SQL"]
    assert projects["Code Generation Service"]["skills"] == [
        "Natural Language Processing", "Python",
    ]


@pytest.mark.parametrize("term", ["Script", "SQL", "Py", "o", "script", "zzz"])
def test_skill_filter_is_subset_with_matching_skill(conn, term):
    all_ids = {p["id"] for p in models.list_projects(conn)}
    filtered = models.list_projects(conn, term)
    assert {p["id"] for p in filtered} <= all_ids
    for project in filtered:
        assert any(term in name for name in project["skills"])


def test_skill_filter_is_case_sensitive(conn):
    assert [p["title"] for p in models.list_projects(conn, "Script")] == ["Portfolio API"]
    assert models.list_projects(conn, "script") == []


def test_skill_names_containing_commas_survive(conn):
    skill = models.create_skill(conn, {"name": "C, C++", "category": "Language"})
    project = models.create_project(conn, {
        "title": "Compiler", "description": "Toy compiler", "skill_ids": [skill["id"]],
    })
    assert project["skills"] == ["C, C++"]


def test_search_projects(conn):
    assert [p["title"] for p in models.search_projects(conn, "Portfolio")] == ["Portfolio API"]
    assert [p["title"] for p in models.search_projects(conn, "natural language")] == [
        "Code Generation Service",
    ]
    assert models.search_projects(conn, "nothing like this") == []


@pytest.mark.parametrize("term", ["", "   ", None])
def test_search_projects_requires_term(conn, term):
    with pytest.raises(ValidationError):
        models.search_projects(conn, term)


def test_update_project_replaces_skills_only_when_given(conn):
    project = models.create_project(conn, {
        "title": "Tool", "description": "CLI", "skill_ids": [_skill_id(conn, "Python")],
    })
    models.update_project(conn, project["id"], {"title": "Tool v2", "description": "CLI"})
    assert models.get_project(conn, project["id"])["skills"] == ["Python"]

    models.update_project(conn, project["id"],
                          {"title": "Tool v2", "description": "CLI", "skill_ids": []})
    updated = models.get_project(conn, project["id"])
    assert updated["title"] == "Tool v2"
    assert updated["skills"] == []


def test_create_project_with_unknown_skill_rolls_back(conn):
    before = models.table_counts(conn)["projects"]
    with pytest.raises(ValidationError) as exc:
        models.create_project(conn, {"title": "X", "description": "Y", "skill_ids": [424242]})
    assert "424242" in exc.value.message
    assert models.table_counts(conn)["projects"] == before


def test_delete_project_removes_associations(conn):
    portfolio = next(p for p in models.list_projects(conn) if p["title"] == "Portfolio API")
    models.delete_project(conn, portfolio["id"])

    assert portfolio["id"] not in {p["id"] for p in models.list_projects(conn)}
    left = conn.execute(
        "SELECT COUNT(*) FROM project_skills WHERE project_id=?", (portfolio["id"],)
    ).fetchone()[0]
    assert left == 0
    # Docker was only used by the deleted project, so it is free to go now
    models.delete_skill(conn, _skill_id(conn, "Docker"))


# --- Not found for every entity ---

@pytest.mark.parametrize("update, delete, data", [
    (models.update_skill, models.delete_skill, {"name": "X"}),
    (models.update_education, models.delete_education, {"institution": "X", "degree": "Y"}),
    (models.update_work, models.delete_work, {"company": "X", "position": "Y"}),
    (models.update_project, models.delete_project, {"title": "X", "description": "Y"}),
])
def test_missing_id_is_not_found(conn, update, delete, data):
    with pytest.raises(NotFoundError):
        update(conn, 999999, data)
    with pytest.raises(NotFoundError):
        delete(conn, 999999)


@pytest.mark.parametrize("create, data, missing", [
    (models.create_skill, {}, "name"),
    (models.create_education, {"institution": "X"}, "degree"),
    (models.create_work, {"position": "Y"}, "company"),
    (models.create_project, {"title": "X", "description": ""}, "description"),
])
def test_create_requires_mandatory_fields(conn, create, data, missing):
    with pytest.raises(ValidationError) as exc:
        create(conn, data)
    assert missing in exc.value.message


# --- Ids beyond SQLite's 64-bit range ---

@pytest.mark.parametrize("row_id", [models.MAX_INTEGER + 1, models.MIN_INTEGER - 1])
def test_unbindable_id_is_not_found(conn, row_id):
    with pytest.raises(NotFoundError):
        models.get_skill(conn, row_id)
    with pytest.raises(NotFoundError):
        models.get_project(conn, row_id)
    with pytest.raises(NotFoundError):
        models.update_work(conn, row_id, {"company": "X", "position": "Y"})
    with pytest.raises(NotFoundError):
        models.delete_project(conn, row_id)


def test_unbindable_skill_id_is_unknown(conn):
    with pytest.raises(ValidationError) as exc:
        models.create_project(conn, {
            "title": "X", "description": "Y", "skill_ids": [models.MAX_INTEGER + 1],
        })
    assert str(models.MAX_INTEGER + 1) in exc.value.message
