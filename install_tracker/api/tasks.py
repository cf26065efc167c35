"""Routes Taches / Task API routes."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.api.ws_changes import queue_change
from install_tracker.database import get_db
from install_tracker.models.comment import Comment
from install_tracker.models.task import Task, TaskPriority, TaskStatus
from install_tracker.schemas.comment import CommentCreate, CommentRead
from install_tracker.schemas.planning import ConflictReportRead
from install_tracker.schemas.task import (
    TaskBulkStatusUpdate,
    TaskCreate,
    TaskDraft,
    TaskRead,
    TaskStats,
    TaskStatusUpdate,
    TaskUpdate,
)
from install_tracker.services.conflict_detector import ConflictDetectorService
from install_tracker.services.data_service import load_tasks, load_team_members, load_vehicles, utc_now
from install_tracker.services.stats_service import StatsService
from install_tracker.services.task_validation import TaskValidationService

router = APIRouter()


@router.get("/", response_model=list[TaskRead])
async def list_tasks(
    vehicle_id: str | None = None,
    assigned_to: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Lister les taches, plus recentes d'abord / List tasks, newest first."""
    query = select(Task).order_by(Task.created_at.desc(), Task.id)
    try:
        if status and status != "All":
            query = query.where(Task.status == TaskStatus(status))
        if priority and priority != "All":
            query = query.where(Task.priority == TaskPriority(priority))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    result = await db.execute(query)
    tasks = list(result.scalars().all())

    # Colonnes JSON (valeur simple ou liste) filtrees en Python /
    # JSON columns (single value or list) filtered in Python
    if vehicle_id:
        tasks = [t for t in tasks if vehicle_id in t.vehicle_ids]
    if assigned_to:
        tasks = [t for t in tasks if assigned_to in t.assignees]
    if search and search.strip():
        term = search.strip().lower()
        tasks = [
            t for t in tasks
            if term in t.name.lower()
            or term in (t.description or "").lower()
            or any(term in a.lower() for a in t.assignees)
        ]
    return tasks


@router.get("/stats", response_model=TaskStats)
async def task_stats(db: AsyncSession = Depends(get_db)):
    """Statistiques des taches / Task statistics."""
    return StatsService.task_stats(await load_tasks(db))


@router.post("/validate")
async def validate_task(data: TaskDraft, db: AsyncSession = Depends(get_db)):
    """Valider une tache sans l'enregistrer / Validate a task without saving it."""
    result = TaskValidationService.validate(
        data.model_dump(),
        vehicles=await load_vehicles(db),
        team_members=await load_team_members(db),
        existing_tasks=await load_tasks(db),
    )
    return result.to_dict()


@router.get("/conflicts", response_model=ConflictReportRead)
async def stored_task_conflicts(db: AsyncSession = Depends(get_db)):
    """Conflits entre taches enregistrees / Conflicts between stored tasks."""
    return ConflictDetectorService.detect(await load_tasks(db))


@router.post("/conflicts", response_model=ConflictReportRead)
async def task_list_conflicts(tasks: list[TaskDraft]):
    """Conflits d'une liste de taches fournie / Conflicts in a posted task list."""
    return ConflictDetectorService.detect([t.model_dump() for t in tasks])


@router.post("/bulk-status", response_model=list[TaskRead])
async def bulk_update_status(data: TaskBulkStatusUpdate, db: AsyncSession = Depends(get_db)):
    """Changer le statut de plusieurs taches / Update status of several tasks."""
    if not data.task_ids:
        return []
    result = await db.execute(select(Task).where(Task.id.in_(data.task_ids)))
    tasks = result.scalars().all()
    now = utc_now()
    for task in tasks:
        task.status = data.status
        task.updated_at = now
    await db.flush()
    for task in tasks:
        queue_change(db, "tasks", "UPDATE", task.id)
    return tasks


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(comment_id: int, db: AsyncSession = Depends(get_db)):
    """Supprimer un commentaire / Delete a comment."""
    comment = await db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    await db.delete(comment)
    await db.flush()
    queue_change(db, "comments", "DELETE", comment_id)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task_id: str, db: AsyncSession = Depends(get_db)):
    """Voir une tache / Get task detail."""
    task = await db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.post("/", response_model=TaskRead, status_code=201)
async def create_task(data: TaskCreate, db: AsyncSession = Depends(get_db)):
    """Creer une tache / Create task."""
    dump = data.model_dump()
    dump["id"] = dump.get("id") or uuid.uuid4().hex
    if await db.get(Task, dump["id"]):
        raise HTTPException(status_code=409, detail=f"Task {dump['id']} already exists")
    now = utc_now()
    task = Task(**dump, created_at=now, updated_at=now)
    db.add(task)
    await db.flush()
    await db.refresh(task)
    queue_change(db, "tasks", "INSERT", task.id)
    return task


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(task_id: str, data: TaskUpdate, db: AsyncSession = Depends(get_db)):
    """Modifier une tache / Update task."""
    task = await db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(task, key, value)
    task.updated_at = utc_now()

    await db.flush()
    await db.refresh(task)
    queue_change(db, "tasks", "UPDATE", task.id)
    return task


@router.patch("/{task_id}/status", response_model=TaskRead)
async def update_task_status(task_id: str, data: TaskStatusUpdate, db: AsyncSession = Depends(get_db)):
    """Changer le statut / Update task status."""
    task = await db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    task.status = data.status
    task.updated_at = utc_now()
    await db.flush()
    await db.refresh(task)
    queue_change(db, "tasks", "UPDATE", task.id)
    return task


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: str, db: AsyncSession = Depends(get_db)):
    """Supprimer une tache et ses commentaires / Delete task and its comments."""
    task = await db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    await db.delete(task)
    await db.flush()
    queue_change(db, "tasks", "DELETE", task_id)


@router.get("/{task_id}/comments", response_model=list[CommentRead])
async def list_comments(task_id: str, db: AsyncSession = Depends(get_db)):
    """Commentaires d'une tache / Task comments, oldest first."""
    if not await db.get(Task, task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    result = await db.execute(
        select(Comment).where(Comment.task_id == task_id).order_by(Comment.created_at, Comment.id)
    )
    return result.scalars().all()


@router.post("/{task_id}/comments", response_model=CommentRead, status_code=201)
async def add_comment(task_id: str, data: CommentCreate, db: AsyncSession = Depends(get_db)):
    """Ajouter un commentaire / Add a comment."""
    if not await db.get(Task, task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    comment = Comment(task_id=task_id, text=data.text, author=data.author, created_at=utc_now())
    db.add(comment)
    await db.flush()
    await db.refresh(comment)
    queue_change(db, "comments", "INSERT", comment.id)
    return comment

