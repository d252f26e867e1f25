"""
app/routers/public.py — Public read endpoints
==============================================

Endpoints (mounted under /api):
  GET /profile          → profile + education[] + work_experience[]
  GET /skills           → all skills, by name
  GET /skills/top       → skills ranked by project count (?limit=, default 5)
  GET /skills/{id}      → single skill
  GET /projects         → all projects with skill names (?skill= substring filter)
  GET /projects/{id}    → single project
  GET /search?q=        → projects whose title or description contains q

No authentication. Store calls run in a worker thread so the event loop
only waits on them.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.dependencies.database import get_conn
from db import models

router = APIRouter(tags=["Portfolio"])


@router.get("/profile", summary="Profile with education and work history")
async def profile(conn=Depends(get_conn)):
    return await asyncio.to_thread(models.get_profile_aggregate, conn)


@router.get("/skills", summary="All skills")
async def skills_list(conn=Depends(get_conn)):
    return await asyncio.to_thread(models.list_skills, conn)


@router.get("/skills/top", summary="Most used skills with project counts")
async def skills_top(
    limit: int = Query(5, ge=1, le=50, description="Maximum number of skills"),
    conn=Depends(get_conn),
):
    return await asyncio.to_thread(models.top_skills, conn, limit)


@router.get("/skills/{skill_id}", summary="Single skill")
async def skill_detail(skill_id: int, conn=Depends(get_conn)):
    return await asyncio.to_thread(models.get_skill, conn, skill_id)


@router.get("/projects", summary="Projects, optionally filtered by skill")
async def projects_list(
    skill: Optional[str] = Query(None, description="Substring of a skill name (case-sensitive)"),
    conn=Depends(get_conn),
):
    return await asyncio.to_thread(models.list_projects, conn, skill or None)


@router.get("/projects/{project_id}", summary="Single project")
async def project_detail(project_id: int, conn=Depends(get_conn)):
    return await asyncio.to_thread(models.get_project, conn, project_id)


@router.get("/search", summary="Search projects by title or description")
async def search(
    q: Optional[str] = Query(None, description="Substring to look for (case-sensitive)"),
    conn=Depends(get_conn),
):
    projects = await asyncio.to_thread(models.search_projects, conn, q)
    return {"projects": projects}
