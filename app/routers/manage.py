"""
app/routers/manage.py — Token-gated write endpoints
====================================================

Endpoints (mounted under /api, every route behind the bearer gate):
  PUT    /profile               → update the singleton profile
  POST   /skills                → create skill            (201)
  PUT    /skills/{id}           → update skill
  DELETE /skills/{id}           → delete skill            (204, 409 while in use)
  POST   /education             → create education entry  (201)
  PUT    /education/{id}        → update education entry
  DELETE /education/{id}        → delete education entry  (204)
  POST   /work                  → create work entry       (201)
  PUT    /work/{id}             → update work entry
  DELETE /work/{id}             → delete work entry       (204)
  POST   /projects              → create project          (201, optional skill_ids)
  PUT    /projects/{id}         → update project          (skill_ids replaces links)
  DELETE /projects/{id}         → delete project + links  (204)

The gate is not referenced here: app/main.py attaches it when it includes
this router, so the secret never leaves the app factory.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Response, status

from app.dependencies.database import get_conn
from app.schemas import EducationIn, ProfileUpdate, ProjectIn, SkillIn, WorkIn
from db import models

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Manage"])


def _no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# PROFILE
# ============================================================================

@router.put("/profile", summary="Update profile")
async def profile_update(body: ProfileUpdate, conn=Depends(get_conn)):
    await asyncio.to_thread(models.update_profile, conn, body.model_dump())
    logger.info("Updated profile")
    return {"message": "Profile updated"}


# ============================================================================
# SKILLS
# ============================================================================

@router.post("/skills", status_code=status.HTTP_201_CREATED, summary="Create skill")
async def skill_create(body: SkillIn, conn=Depends(get_conn)):
    skill = await asyncio.to_thread(models.create_skill, conn, body.model_dump())
    logger.info(f"Created skill #{skill['id']} ({skill['name']})")
    return skill


@router.put("/skills/{skill_id}", summary="Update skill")
async def skill_update(skill_id: int, body: SkillIn, conn=Depends(get_conn)):
    await asyncio.to_thread(models.update_skill, conn, skill_id, body.model_dump())
    logger.info(f"Updated skill #{skill_id}")
    return {"message": f"Skill {skill_id} updated"}


@router.delete("/skills/{skill_id}", status_code=status.HTTP_204_NO_CONTENT,
               response_class=Response, summary="Delete skill")
async def skill_delete(skill_id: int, conn=Depends(get_conn)):
    await asyncio.to_thread(models.delete_skill, conn, skill_id)
    logger.info(f"Deleted skill #{skill_id}")
    return _no_content()


# ============================================================================
# EDUCATION
# ============================================================================

@router.post("/education", status_code=status.HTTP_201_CREATED, summary="Create education entry")
async def education_create(body: EducationIn, conn=Depends(get_conn)):
    entry = await asyncio.to_thread(models.create_education, conn, body.model_dump())
    logger.info(f"Created education #{entry['id']}")
    return entry


@router.put("/education/{education_id}", summary="Update education entry")
async def education_update(education_id: int, body: EducationIn, conn=Depends(get_conn)):
    await asyncio.to_thread(models.update_education, conn, education_id, body.model_dump())
    logger.info(f"Updated education #{education_id}")
    return {"message": f"Education {education_id} updated"}


@router.delete("/education/{education_id}", status_code=status.HTTP_204_NO_CONTENT,
               response_class=Response, summary="Delete education entry")
async def education_delete(education_id: int, conn=Depends(get_conn)):
    await asyncio.to_thread(models.delete_education, conn, education_id)
    logger.info(f"Deleted education #{education_id}")
    return _no_content()


# ============================================================================
# WORK EXPERIENCE
# ============================================================================

@router.post("/work", status_code=status.HTTP_201_CREATED, summary="Create work entry")
async def work_create(body: WorkIn, conn=Depends(get_conn)):
    entry = await asyncio.to_thread(models.create_work, conn, body.model_dump())
    logger.info(f"Created work experience #{entry['id']}")
    return entry


@router.put("/work/{work_id}", summary="Update work entry")
async def work_update(work_id: int, body: WorkIn, conn=Depends(get_conn)):
    await asyncio.to_thread(models.update_work, conn, work_id, body.model_dump())
    logger.info(f"Updated work experience #{work_id}")
    return {"message": f"Work experience {work_id} updated"}


@router.delete("/work/{work_id}", status_code=status.HTTP_204_NO_CONTENT,
               response_class=Response, summary="Delete work entry")
async def work_delete(work_id: int, conn=Depends(get_conn)):
    await asyncio.to_thread(models.delete_work, conn, work_id)
    logger.info(f"Deleted work experience #{work_id}")
    return _no_content()


# ============================================================================
# PROJECTS
# ============================================================================

@router.post("/projects", status_code=status.HTTP_201_CREATED, summary="Create project")
async def project_create(body: ProjectIn, conn=Depends(get_conn)):
    project = await asyncio.to_thread(models.create_project, conn, body.model_dump())
    logger.info(f"Created project #{project['id']} with {len(project['skills'])} skill(s)")
    return project


@router.put("/projects/{project_id}", summary="Update project")
async def project_update(project_id: int, body: ProjectIn, conn=Depends(get_conn)):
    await asyncio.to_thread(models.update_project, conn, project_id, body.model_dump())
    logger.info(f"Updated project #{project_id}")
    return {"message": f"Project {project_id} updated"}


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT,
               response_class=Response, summary="Delete project")
async def project_delete(project_id: int, conn=Depends(get_conn)):
    await asyncio.to_thread(models.delete_project, conn, project_id)
    logger.info(f"Deleted project #{project_id}")
    return _no_content()
