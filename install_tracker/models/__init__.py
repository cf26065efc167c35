"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que create_all les détecte.
Import all models here so create_all can detect them.
"""

from install_tracker.models.vehicle import Vehicle, VehicleStatus
from install_tracker.models.task import Task, TaskPriority, TaskStatus
from install_tracker.models.location import Location
from install_tracker.models.team_member import TeamMember
from install_tracker.models.project_settings import ProjectSettings
from install_tracker.models.comment import Comment

__all__ = [
    "Vehicle",
    "VehicleStatus",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "Location",
    "TeamMember",
    "ProjectSettings",
    "Comment",
]
