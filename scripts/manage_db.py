#!/usr/bin/env python3
"""
scripts/manage_db.py — Portfolio Database CLI
==============================================

Usage:
  python -m scripts.manage_db init        [--no-seed]
  python -m scripts.manage_db stats
  python -m scripts.manage_db top-skills  [--limit N]
  python -m scripts.manage_db token

Commands:
  init        Create the schema and seed the fixed dataset if the DB is empty.
  stats       Show row counts per table.
  top-skills  Show skills ranked by the number of projects using them.
  token       Generate a random API token for PORTFOLIO_API_TOKEN.

The database path comes from config.tech.yaml / PORTFOLIO_DB_PATH, or --db.
"""

import argparse
import logging
import secrets
import sys
from pathlib import Path

from config_loader import load_config, resolve_db_path
from db.models import get_db, table_counts, top_skills
from db.seed import bootstrap


# ── Terminal colours (graceful no-op if not supported) ───────────────────────

class C:
    RESET  = "\033[0m"
    BOLD   = "\033[1m"
    DIM    = "\033[2m"
    CYAN   = "\033[36m"

def _bold(s):  return f"{C.BOLD}{s}{C.RESET}"
def _dim(s):   return f"{C.DIM}{s}{C.RESET}"
def _cyan(s):  return f"{C.CYAN}{s}{C.RESET}"


# ── DB helpers ────────────────────────────────────────────────────────────────

def _db_path(args) -> Path:
    return Path(args.db) if args.db else resolve_db_path(load_config())


def _open(args):
    path = _db_path(args)
    if not path.exists():
        sys.exit(f"Database not found at {path} — run 'init' first.")
    return get_db(path)


# ── Commands ──────────────────────────────────────────────────────────────────

def cmd_init(args):
    path = _db_path(args)
    bootstrap(path, seed=not args.no_seed)
    print(f"\n  Database ready at {_cyan(str(path))}\n")


def cmd_stats(args):
    conn = _open(args)
    try:
        counts = table_counts(conn)
    finally:
        conn.close()

    print()
    print(_bold(f"  {'Table':<18} {'Rows':>6}"))
    for table, count in counts.items():
        print(f"  {table:<18} {count:>6}")
    print()


def cmd_top_skills(args):
    conn = _open(args)
    try:
        rows = top_skills(conn, args.limit)
    finally:
        conn.close()

    print()
    if not rows:
        print(_dim("  No skill is linked to a project yet."))
    for rank, row in enumerate(rows, 1):
        print(f"  {rank:>2}. {row['name']:<32} {_cyan(str(row['project_count']))} project(s)")
    print()


def cmd_token(args):
    token = secrets.token_urlsafe(32)
    print()
    print(f"  {'Token':<8} {_bold(token)}")
    print(_dim("  export PORTFOLIO_API_TOKEN=<token> before starting the server."))
    print()


# ── Entry point ───────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="manage_db",
        description="Manage the portfolio database.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--db", metavar="PATH", help="Database file (default: from config)")
    sub = p.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init", help="Create schema and seed if empty")
    p_init.add_argument("--no-seed", action="store_true", help="Create the schema only")

    sub.add_parser("stats", help="Row counts per table")

    p_top = sub.add_parser("top-skills", help="Skills ranked by project count")
    p_top.add_argument("--limit", type=int, default=5, metavar="N",
                       help="Number of skills to show (default: 5)")

    sub.add_parser("token", help="Generate a random API token")

    return p


def main(argv=None):
    parser = build_parser()
    args   = parser.parse_args(argv)

    dispatch = {
        "init":       cmd_init,
        "stats":      cmd_stats,
        "top-skills": cmd_top_skills,
        "token":      cmd_token,
    }
    dispatch[args.command](args)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
