# Database CLI Tests
# Dependent files: scripts/manage_db.py

import pytest

from scripts.manage_db import main


def test_init_then_stats(db_path, capsys):
    main(["--db", str(db_path), "init"])
    assert db_path.exists()

    main(["--db", str(db_path), "stats"])
    out = capsys.readouterr().out
    assert "skills" in out
    assert "project_skills" in out


def test_init_without_seed(db_path, capsys):
    main(["--db", str(db_path), "init", "--no-seed"])
    main(["--db", str(db_path), "top-skills"])
    assert "No skill is linked" in capsys.readouterr().out


def test_top_skills(db_path, capsys):
    main(["--db", str(db_path), "init"])
    capsys.readouterr()
    main(["--db", str(db_path), "top-skills", "--limit", "3"])
    out = capsys.readouterr().out
    assert "Docker" in out
    assert " 3. " in out
    assert " 4. " not in out


def test_stats_on_missing_database(tmp_path):
    with pytest.raises(SystemExit):
        main(["--db", str(tmp_path / "absent.db"), "stats"])


def test_token(capsys):
    main(["token"])
    assert "PORTFOLIO_API_TOKEN" in capsys.readouterr().out
