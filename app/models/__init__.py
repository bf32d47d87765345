"""
Models package for the application.
"""

from .user import User, UserRole
from .project import Project
from .project_member import ProjectMember, ProjectRole
from .task import Task, TaskAssignee, TaskStatus, TaskPriority
from .comment import Comment
from .notification import Notification

__all__ = [
    "User",
    "UserRole",
    "Project",
    "ProjectMember",
    "ProjectRole",
    "Task",
    "TaskAssignee",
    "TaskStatus",
    "TaskPriority",
    "Comment",
    "Notification",
]
