"""
app/schemas.py — Request bodies for the mutating endpoints.

Required strings must be non-blank; surrounding whitespace is stripped.
Integers must fit SQLite's 64-bit INTEGER.
Validation failures are answered with 400 by the handler in app/main.py.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from db.models import MAX_INTEGER, MIN_INTEGER

SqlInt = Annotated[int, Field(ge=MIN_INTEGER, le=MAX_INTEGER)]


class _Body(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class ProfileUpdate(_Body):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None


class SkillIn(_Body):
    name: str = Field(min_length=1)
    category: Optional[str] = None


class EducationIn(_Body):
    institution: str = Field(min_length=1)
    degree: str = Field(min_length=1)
    start_year: Optional[SqlInt] = None
    end_year: Optional[SqlInt] = None


class WorkIn(_Body):
    company: str = Field(min_length=1)
    position: str = Field(min_length=1)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    description: Optional[str] = None


class ProjectIn(_Body):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    repo_link: Optional[str] = None
    live_link: Optional[str] = None
    # None leaves associations untouched on update; a list replaces them.
    skill_ids: Optional[list[SqlInt]] = None
