from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum


class TaskFilter(str, Enum):
    active = "active"
    completed = "completed"


# Identity attached to a request by the auth gate
class AuthenticatedUser(BaseModel):
    user_id: str
    email: Optional[str] = None


# Task schemas
class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class TaskCreate(TaskBase):
    pass


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    completed: Optional[bool] = None


class Task(TaskBase):
    id: str
    completed: bool
    project_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Project schemas
class ProjectBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class Project(ProjectBase):
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime
    tasks: List[Task] = Field(default_factory=list)
    task_count: int = 0

    class Config:
        from_attributes = True


# Dashboard schemas
class DashboardStats(BaseModel):
    """Per-user workload counts, serialized with the camelCase keys clients expect."""
    total_projects: int = Field(0, alias="totalProjects")
    total_tasks: int = Field(0, alias="totalTasks")
    completed_tasks: int = Field(0, alias="completedTasks")
    active_tasks: int = Field(0, alias="activeTasks")

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
