from fastapi import FastAPI, Depends, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional
import logging
import os

from database import get_db, engine, Base
import models
import schemas
from auth.routes import router as auth_router
from auth.dependencies import get_current_user
from auth.permissions import get_owned_project, get_owned_task
from errors import register_error_handlers

# Configure logging
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Task Manager API",
    description="Personal task management with projects, tasks, and a dashboard",
    version="1.0.0"
)

# CORS middleware for frontend
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register authentication router
app.include_router(auth_router)


@app.on_event("startup")
def create_tables():
    """Create any missing tables on startup."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


@app.get("/")
def root():
    return {"message": "Task Manager API is running"}


# Health check
@app.get("/health")
def health_check():
    return {"status": "healthy"}


# ============== Projects ==============

@app.get("/api/projects", response_model=List[schemas.Project])
def list_projects(
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all projects owned by the current user, with their tasks."""
    logger.debug(f"User {current_user.user_id} listing projects")

    projects = (
        db.query(models.Project)
        .filter(models.Project.user_id == current_user.user_id)
        .order_by(models.Project.created_at)
        .all()
    )

    logger.info(f"User {current_user.user_id} retrieved {len(projects)} projects")
    return projects


@app.post("/api/projects", response_model=schemas.Project, status_code=status.HTTP_201_CREATED)
def create_project(
    project: schemas.ProjectCreate,
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new project owned by the current user."""
    logger.debug(f"User {current_user.user_id} creating project: {project.name}")

    db_project = models.Project(name=project.name, user_id=current_user.user_id)
    db.add(db_project)
    db.commit()
    db.refresh(db_project)

    logger.info(f"Project created: {db_project.name} (ID: {db_project.id}) by user {current_user.user_id}")
    return db_project


@app.put("/api/projects/{project_id}", response_model=schemas.Project)
def update_project(
    project_id: str,
    project_update: schemas.ProjectUpdate,
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Rename a project (owner only)."""
    logger.debug(f"User {current_user.user_id} updating project {project_id}")

    project = get_owned_project(db, project_id, current_user.user_id)

    update_data = project_update.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(project, key, value)

    db.commit()
    db.refresh(project)

    logger.info(f"Project updated: {project.name} (ID: {project_id})")
    return project


@app.delete("/api/projects/{project_id}", response_model=schemas.MessageResponse)
def delete_project(
    project_id: str,
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a project and every task in it (owner only)."""
    logger.debug(f"User {current_user.user_id} deleting project {project_id}")

    project = get_owned_project(db, project_id, current_user.user_id)

    deleted_tasks = (
        db.query(models.Task)
        .filter(models.Task.project_id == project.id)
        .delete(synchronize_session="fetch")
    )
    db.delete(project)
    db.commit()

    logger.info(f"Project deleted: {project_id} with {deleted_tasks} task(s)")
    return {"message": "Project deleted successfully"}


# ============== Tasks ==============

@app.get("/api/projects/{project_id}/tasks", response_model=List[schemas.Task])
def list_project_tasks(
    project_id: str,
    task_filter: Optional[str] = Query(None, alias="filter", description="'active', 'completed', or omit for all"),
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a project's tasks, newest first, optionally filtered by completion."""
    logger.debug(f"User {current_user.user_id} listing tasks of project {project_id} (filter={task_filter})")

    project = get_owned_project(db, project_id, current_user.user_id)

    query = db.query(models.Task).filter(models.Task.project_id == project.id)
    # Unrecognized filter values fall back to listing everything
    if task_filter == schemas.TaskFilter.active.value:
        query = query.filter(models.Task.completed.is_(False))
    elif task_filter == schemas.TaskFilter.completed.value:
        query = query.filter(models.Task.completed.is_(True))

    return query.order_by(models.Task.created_at.desc()).all()


@app.post("/api/projects/{project_id}/tasks", response_model=schemas.Task, status_code=status.HTTP_201_CREATED)
def create_task(
    project_id: str,
    task: schemas.TaskCreate,
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a task under a project owned by the current user."""
    logger.debug(f"User {current_user.user_id} creating task in project {project_id}")

    project = get_owned_project(db, project_id, current_user.user_id)

    db_task = models.Task(title=task.title, completed=False, project_id=project.id)
    db.add(db_task)
    db.commit()
    db.refresh(db_task)

    logger.info(f"Task created: {db_task.id} in project {project_id}")
    return db_task


@app.put("/api/tasks/{task_id}", response_model=schemas.Task)
def update_task(
    task_id: str,
    task_update: schemas.TaskUpdate,
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a task's title and/or completion; omitted fields are left untouched."""
    logger.debug(f"User {current_user.user_id} updating task {task_id}")

    task = get_owned_task(db, task_id, current_user.user_id)

    update_data = task_update.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(task, key, value)

    db.commit()
    db.refresh(task)

    logger.info(f"Task {task_id} updated fields: {sorted(update_data)}")
    return task


@app.delete("/api/tasks/{task_id}", response_model=schemas.MessageResponse)
def delete_task(
    task_id: str,
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a task (project owner only)."""
    logger.debug(f"User {current_user.user_id} deleting task {task_id}")

    task = get_owned_task(db, task_id, current_user.user_id)

    db.delete(task)
    db.commit()

    logger.info(f"Task {task_id} deleted by user {current_user.user_id}")
    return {"message": "Task deleted successfully"}


# ============== Dashboard Stats ==============

@app.get("/api/dashboard/stats", response_model=schemas.DashboardStats)
def get_dashboard_stats(
    current_user: schemas.AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get project and task counts for the current user.

    The four counts are independent scalar subqueries sent in one statement,
    so none of them waits on another.
    """
    logger.debug(f"User {current_user.user_id} requesting dashboard stats")

    user_id = current_user.user_id
    owned_tasks = (
        db.query(func.count(models.Task.id))
        .select_from(models.Task)
        .join(models.Task.project)
        .filter(models.Project.user_id == user_id)
    )

    counts = db.query(
        db.query(func.count(models.Project.id))
        .filter(models.Project.user_id == user_id)
        .scalar_subquery()
        .label("total_projects"),
        owned_tasks.scalar_subquery().label("total_tasks"),
        owned_tasks.filter(models.Task.completed.is_(True)).scalar_subquery().label("completed_tasks"),
        owned_tasks.filter(models.Task.completed.is_(False)).scalar_subquery().label("active_tasks"),
    ).one()

    return schemas.DashboardStats(
        total_projects=counts.total_projects or 0,
        total_tasks=counts.total_tasks or 0,
        completed_tasks=counts.completed_tasks or 0,
        active_tasks=counts.active_tasks or 0,
    )


# ============== Fallback ==============

@app.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def route_not_found(path: str):
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Route not found")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )
