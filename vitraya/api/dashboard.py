import json
import uuid
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from vitraya.api.appointments import AppointmentResponse, appointment_response, upcoming_appointments
from vitraya.api.articles import ArticleResponse, article_response, list_article_rows
from vitraya.api.auth import get_current_user
from vitraya.api.quiz import latest_quiz_result
from vitraya.core.health_metrics import round_half_up
from vitraya.db.models import DailyTask, HealthTracking, User
from vitraya.db.session import get_db

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

MAX_GLASSES = 8
WEEK_DAYS = 7
UPCOMING_APPOINTMENT_LIMIT = 5
DASHBOARD_ARTICLE_LIMIT = 3


class TaskItem(BaseModel):
    id: int
    title: str
    completed: bool


class TrackingSummary(BaseModel):
    weekly_activity: list[int]
    water_intake: int
    sleep_quality: int
    nutrition: int
    today_activity: int
    glasses_count: int


class LatestQuizSummary(BaseModel):
    id: int
    risk_level: str
    risk_score: int
    bmi: float
    bmi_category: str
    bmr: int
    water_needed: float
    ai_analyzed: bool
    completed_at: datetime


class TasksResponse(BaseModel):
    tasks: list[TaskItem]
    today_progress: int


class TaskToggleResponse(TasksResponse):
    tracking: TrackingSummary
    streak_days: int
    completed_goals: int


class WaterResponse(BaseModel):
    glasses_count: int
    water_intake: int
    tasks: list[TaskItem]
    today_progress: int
    tracking: TrackingSummary


class DashboardSummaryResponse(BaseModel):
    name: str
    has_data: bool
    latest_quiz: Optional[LatestQuizSummary] = None
    streak_days: int
    completed_goals: int
    tasks: list[TaskItem]
    today_progress: int
    tracking: TrackingSummary
    upcoming_appointments: list[AppointmentResponse]
    articles: list[ArticleResponse]


class AddTaskRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)


class WaterUpdateRequest(BaseModel):
    increment: bool = True


class TrackingUpdateRequest(BaseModel):
    sleep_quality: Optional[int] = Field(default=None, ge=0, le=100)
    nutrition: Optional[int] = Field(default=None, ge=0, le=100)


def greeting_name(user: User) -> str:
    if user.display_name and user.display_name.strip():
        return user.display_name.strip()
    local_part = (user.email or "").split("@")[0]
    return local_part[:1].upper() + local_part[1:]


def is_water_task(title: str) -> bool:
    lowered = (title or "").lower()
    return "water" in lowered or "glass" in lowered


def task_progress(tasks: list[DailyTask]) -> int:
    if not tasks:
        return 0
    completed = sum(1 for task in tasks if task.completed)
    return round_half_up(completed / len(tasks) * 100)


def _weekly_activity(tracking: HealthTracking) -> list[int]:
    values = json.loads(tracking.weekly_activity_json or "[]")
    values = [int(value) for value in values][:WEEK_DAYS]
    return values + [0] * (WEEK_DAYS - len(values))


def _ensure_tracking(db: Session, user: User) -> HealthTracking:
    tracking = db.query(HealthTracking).filter(HealthTracking.user_id == user.id).first()
    if tracking:
        return tracking
    tracking = HealthTracking(user_id=user.id, weekly_activity_json=json.dumps([0] * WEEK_DAYS))
    db.add(tracking)
    db.flush()
    return tracking


def _tasks(db: Session, user: User) -> list[DailyTask]:
    return (
        db.query(DailyTask)
        .filter(DailyTask.user_id == user.id)
        .order_by(DailyTask.position.asc(), DailyTask.id.asc())
        .all()
    )


def _task_items(tasks: list[DailyTask]) -> list[TaskItem]:
    return [TaskItem(id=task.id, title=task.title, completed=task.completed) for task in tasks]


def _tracking_summary(tracking: HealthTracking) -> TrackingSummary:
    return TrackingSummary(
        weekly_activity=_weekly_activity(tracking),
        water_intake=tracking.water_intake,
        sleep_quality=tracking.sleep_quality,
        nutrition=tracking.nutrition,
        today_activity=tracking.today_activity,
        glasses_count=tracking.glasses_count,
    )


def _latest_quiz_summary(db: Session, user: User) -> Optional[LatestQuizSummary]:
    row = latest_quiz_result(db, user)
    if not row:
        return None
    return LatestQuizSummary(
        id=row.id,
        risk_level=row.risk_level,
        risk_score=row.risk_score,
        bmi=row.bmi,
        bmi_category=row.bmi_category,
        bmr=row.bmr,
        water_needed=row.water_needed,
        ai_analyzed=row.ai_analyzed,
        completed_at=row.completed_at,
    )


def toggle_task(user: User, tasks: list[DailyTask], task: DailyTask, tracking: HealthTracking, today: date) -> int:
    """Flip one task and apply its side effects. Returns the new daily progress."""
    completing = not task.completed
    task.completed = completing
    progress = task_progress(tasks)

    if is_water_task(task.title):
        tracking.water_intake = 100 if completing else 0
        tracking.glasses_count = MAX_GLASSES if completing else 0

    if completing:
        tracking.today_activity = progress
        user.streak_days = (user.streak_days or 0) + 1
        user.completed_goals = (user.completed_goals or 0) + 1
        weekly = _weekly_activity(tracking)
        weekly[today.weekday()] = progress
        tracking.weekly_activity_json = json.dumps(weekly)
    return progress


@router.get("/summary", response_model=DashboardSummaryResponse)
def get_dashboard_summary(
    user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> DashboardSummaryResponse:
    tracking = _ensure_tracking(db, user)
    db.commit()
    tasks = _tasks(db, user)
    latest = _latest_quiz_summary(db, user)
    appointments = upcoming_appointments(db, user.id, date.today(), limit=UPCOMING_APPOINTMENT_LIMIT)
    articles = list_article_rows(db, DASHBOARD_ARTICLE_LIMIT)

    return DashboardSummaryResponse(
        name=greeting_name(user),
        has_data=latest is not None or bool(tasks),
        latest_quiz=latest,
        streak_days=user.streak_days,
        completed_goals=user.completed_goals,
        tasks=_task_items(tasks),
        today_progress=task_progress(tasks),
        tracking=_tracking_summary(tracking),
        upcoming_appointments=[appointment_response(row) for row in appointments],
        articles=[article_response(row) for row in articles],
    )


@router.post("/tasks", response_model=TasksResponse, status_code=status.HTTP_201_CREATED)
def add_task(
    payload: AddTaskRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TasksResponse:
    title = payload.title.strip()
    if not title:
        raise HTTPException(status_code=422, detail="Task title is required")
    tasks = _tasks(db, user)
    position = (tasks[-1].position + 1) if tasks else 0
    task = DailyTask(
        user_id=user.id,
        task_key=f"task{uuid.uuid4().hex[:12]}",
        title=title,
        completed=False,
        position=position,
    )
    db.add(task)
    db.commit()
    tasks = _tasks(db, user)
    return TasksResponse(tasks=_task_items(tasks), today_progress=task_progress(tasks))


@router.post("/tasks/{task_id}/toggle", response_model=TaskToggleResponse)
def toggle_task_completion(
    task_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskToggleResponse:
    tasks = _tasks(db, user)
    task = next((item for item in tasks if item.id == task_id), None)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    tracking = _ensure_tracking(db, user)

    progress = toggle_task(user, tasks, task, tracking, date.today())
    db.commit()

    return TaskToggleResponse(
        tasks=_task_items(tasks),
        today_progress=progress,
        tracking=_tracking_summary(tracking),
        streak_days=user.streak_days,
        completed_goals=user.completed_goals,
    )


@router.post("/water", response_model=WaterResponse)
def update_water_intake(
    payload: WaterUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WaterResponse:
    tracking = _ensure_tracking(db, user)
    tasks = _tasks(db, user)

    step = 1 if payload.increment else -1
    glasses = min(max((tracking.glasses_count or 0) + step, 0), MAX_GLASSES)
    percentage = round_half_up(glasses / MAX_GLASSES * 100)

    water_task = next((task for task in tasks if is_water_task(task.title)), None)
    if water_task and water_task.completed != (glasses >= MAX_GLASSES):
        toggle_task(user, tasks, water_task, tracking, date.today())

    # The glass count stays authoritative even when the water task flipped.
    tracking.glasses_count = glasses
    tracking.water_intake = percentage
    db.commit()

    return WaterResponse(
        glasses_count=glasses,
        water_intake=percentage,
        tasks=_task_items(tasks),
        today_progress=task_progress(tasks),
        tracking=_tracking_summary(tracking),
    )


@router.put("/tracking", response_model=TrackingSummary)
def update_tracking(
    payload: TrackingUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TrackingSummary:
    tracking = _ensure_tracking(db, user)
    if payload.sleep_quality is not None:
        tracking.sleep_quality = payload.sleep_quality
    if payload.nutrition is not None:
        tracking.nutrition = payload.nutrition
    db.commit()
    return _tracking_summary(tracking)
