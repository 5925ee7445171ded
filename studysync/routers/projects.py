"""
Project endpoints (resumes, research projects, career plans).

``data`` holds whatever the owning widget stores; the backend never inspects it.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.database import get_db
from studysync.dependencies.auth import get_or_create_user
from studysync.models.database_models import Project, User
from studysync.models.schemas import ProjectCreate, ProjectResponse, ProjectUpdate, SuccessResponse
from studysync.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter()

projects = Repository(Project, order_by=[Project.updated_at.desc()])


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await projects.list_for_user(db, user.id)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await projects.create(db, user.id, body.model_dump())


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    project = await projects.update(db, project_id, user.id, body.model_dump(exclude_unset=True))
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    project_id: int,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    await projects.delete(db, project_id, user.id)
    return SuccessResponse()
