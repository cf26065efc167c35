"""Routes API / API routes."""

from fastapi import APIRouter

from install_tracker.api import (
    admin,
    exports,
    imports,
    locations,
    planning,
    project_settings,
    sql,
    tasks,
    team_members,
    vehicles,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(locations.router, prefix="/locations", tags=["locations"])
api_router.include_router(team_members.router, prefix="/team-members", tags=["team-members"])
api_router.include_router(project_settings.router, prefix="/project-settings", tags=["project-settings"])
api_router.include_router(planning.router, tags=["planning"])
api_router.include_router(imports.router, prefix="/imports", tags=["imports"])
api_router.include_router(exports.router, prefix="/exports", tags=["exports"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(sql.router, prefix="/sql", tags=["sql"])
