"""Routes Membres d'equipe / Team member API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.api.ws_changes import queue_change
from install_tracker.database import get_db
from install_tracker.models.team_member import TeamMember
from install_tracker.schemas.team_member import (
    TeamMemberCreate,
    TeamMemberRead,
    TeamMemberStats,
    TeamMemberUpdate,
    TeamMemberWorkload,
)
from install_tracker.services.data_service import load_tasks, load_team_members, utc_now
from install_tracker.services.stats_service import StatsService

router = APIRouter()


@router.get("/", response_model=list[TeamMemberRead])
async def list_team_members(db: AsyncSession = Depends(get_db)):
    """Lister les membres / List team members."""
    return await load_team_members(db)


@router.get("/stats", response_model=list[TeamMemberStats])
async def team_member_stats(db: AsyncSession = Depends(get_db)):
    """Taches et taux de completion par membre / Tasks and completion rate per member."""
    tasks = await load_tasks(db)
    return [StatsService.member_stats(m, tasks) for m in await load_team_members(db)]


@router.get("/{member_id}", response_model=TeamMemberRead)
async def get_team_member(member_id: str, db: AsyncSession = Depends(get_db)):
    """Voir un membre / Get team member detail."""
    member = await db.get(TeamMember, member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found")
    return member


@router.post("/", response_model=TeamMemberRead, status_code=201)
async def create_team_member(data: TeamMemberCreate, db: AsyncSession = Depends(get_db)):
    """Creer un membre / Create team member."""
    if await db.get(TeamMember, data.id):
        raise HTTPException(status_code=409, detail=f"Team member {data.id} already exists")
    member = TeamMember(**data.model_dump(), created_at=utc_now())
    db.add(member)
    await db.flush()
    await db.refresh(member)
    queue_change(db, "team_members", "INSERT", member.id)
    return member


@router.put("/{member_id}", response_model=TeamMemberRead)
async def update_team_member(member_id: str, data: TeamMemberUpdate, db: AsyncSession = Depends(get_db)):
    """Modifier un membre / Update team member."""
    member = await db.get(TeamMember, member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(member, key, value)
    await db.flush()
    await db.refresh(member)
    queue_change(db, "team_members", "UPDATE", member.id)
    return member


@router.delete("/{member_id}", status_code=204)
async def delete_team_member(member_id: str, db: AsyncSession = Depends(get_db)):
    """Supprimer un membre / Delete team member."""
    member = await db.get(TeamMember, member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found")
    await db.delete(member)
    await db.flush()
    queue_change(db, "team_members", "DELETE", member_id)


@router.post("/{member_id}/recompute-metrics", response_model=TeamMemberRead)
async def recompute_metrics(member_id: str, db: AsyncSession = Depends(get_db)):
    """Recalculer les indicateurs depuis les taches / Recompute metrics from tasks."""
    member = await db.get(TeamMember, member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found")
    for key, value in StatsService.member_metrics(member, await load_tasks(db)).items():
        setattr(member, key, value)
    await db.flush()
    await db.refresh(member)
    queue_change(db, "team_members", "UPDATE", member.id)
    return member


@router.get("/{member_id}/workload", response_model=TeamMemberWorkload)
async def member_workload(member_id: str, db: AsyncSession = Depends(get_db)):
    """Charge de travail d'un membre / Team member workload."""
    member = await db.get(TeamMember, member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found")
    return StatsService.member_workload(member, await load_tasks(db))
