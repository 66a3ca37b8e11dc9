"""
Ownership checks for projects and tasks.

A resource that exists but belongs to someone else is reported exactly like a
missing one (404), so callers cannot probe for other users' ids.
"""

import logging

from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from models import Project, Task

logger = logging.getLogger(__name__)


def get_owned_project(db: Session, project_id: str, user_id: str) -> Project:
    """
    Load a project owned by ``user_id``.

    Args:
        db: Database session
        project_id: Opaque project identifier from the URL
        user_id: Authenticated caller's id

    Returns:
        The Project row

    Raises:
        HTTPException: 404 if the project does not exist or is owned by another user
    """
    logger.debug(f"Checking ownership of project {project_id} for user {user_id}")

    project = (
        db.query(Project)
        .filter(Project.id == project_id, Project.user_id == user_id)
        .first()
    )
    if project is None:
        logger.info(f"Project {project_id} not found for user {user_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    return project


def get_owned_task(db: Session, task_id: str, user_id: str) -> Task:
    """
    Load a task whose project is owned by ``user_id``.

    Raises:
        HTTPException: 404 if the task does not exist or its project belongs to another user
    """
    logger.debug(f"Checking ownership of task {task_id} for user {user_id}")

    task = (
        db.query(Task)
        .join(Task.project)
        .filter(Task.id == task_id, Project.user_id == user_id)
        .first()
    )
    if task is None:
        logger.info(f"Task {task_id} not found for user {user_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    return task
