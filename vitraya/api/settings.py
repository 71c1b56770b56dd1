import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from vitraya.api.auth import StatusResponse, UserProfileResponse, clear_session_cookie, get_current_user, profile_response
from vitraya.db.models import Appointment, DailyTask, HealthTracking, QuizResult, User, UserSettings
from vitraya.db.session import get_db

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/settings", tags=["settings"])


class ActivityGoal(str, Enum):
    light = "light"
    moderate = "moderate"
    intense = "intense"


class WaterGoal(str, Enum):
    litres_1_5 = "1.5"
    litres_2_0 = "2.0"
    litres_2_5 = "2.5"
    litres_3_0 = "3.0"
    litres_3_5 = "3.5"


class WeightUnit(str, Enum):
    kg = "kg"
    lb = "lb"


class HeightUnit(str, Enum):
    cm = "cm"
    ft = "ft"


class FontSize(str, Enum):
    small = "small"
    medium = "medium"
    large = "large"


class ProfileSettings(BaseModel):
    display_name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=64)
    bio: Optional[str] = Field(default=None, max_length=2000)


class HealthPreferences(BaseModel):
    activity_goal: ActivityGoal = ActivityGoal.moderate
    water_reminder_enabled: bool = True
    water_goal: WaterGoal = WaterGoal.litres_2_5
    medication_reminders_enabled: bool = False
    weight_unit: WeightUnit = WeightUnit.kg
    height_unit: HeightUnit = HeightUnit.cm


class NotificationSettings(BaseModel):
    email_enabled: bool = True
    app_enabled: bool = True
    health_tips: bool = True
    appointment_reminders: bool = True


class DisplaySettings(BaseModel):
    dark_mode: bool = False
    colorblind_mode: bool = False
    font_size: FontSize = FontSize.medium


class SettingsUpdateRequest(BaseModel):
    profile: ProfileSettings = Field(default_factory=ProfileSettings)
    health_preferences: HealthPreferences = Field(default_factory=HealthPreferences)
    notification_settings: NotificationSettings = Field(default_factory=NotificationSettings)
    display_settings: DisplaySettings = Field(default_factory=DisplaySettings)


class SettingsResponse(SettingsUpdateRequest):
    email: str
    updated_at: Optional[datetime] = None


class AccountExportResponse(BaseModel):
    user: UserProfileResponse
    settings: SettingsResponse
    quiz_results: list[dict[str, Any]]
    daily_tasks: list[dict[str, Any]]
    health_tracking: Optional[dict[str, Any]] = None
    appointments: list[dict[str, Any]]


def _settings_row(db: Session, user: User) -> Optional[UserSettings]:
    return db.query(UserSettings).filter(UserSettings.user_id == user.id).first()


def _settings_response(user: User, row: Optional[UserSettings]) -> SettingsResponse:
    profile = ProfileSettings(display_name=user.display_name, phone=user.phone, bio=user.bio)
    if not row:
        return SettingsResponse(email=user.email, profile=profile)
    return SettingsResponse(
        email=user.email,
        profile=profile,
        health_preferences=HealthPreferences(
            activity_goal=row.activity_goal,
            water_reminder_enabled=row.water_reminder_enabled,
            water_goal=row.water_goal,
            medication_reminders_enabled=row.medication_reminders_enabled,
            weight_unit=row.weight_unit,
            height_unit=row.height_unit,
        ),
        notification_settings=NotificationSettings(
            email_enabled=row.email_notifications,
            app_enabled=row.app_notifications,
            health_tips=row.health_tips,
            appointment_reminders=row.appointment_reminders,
        ),
        display_settings=DisplaySettings(
            dark_mode=row.dark_mode,
            colorblind_mode=row.colorblind_mode,
            font_size=row.font_size,
        ),
        updated_at=row.updated_at,
    )


@router.get("", response_model=SettingsResponse)
def get_settings(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> SettingsResponse:
    return _settings_response(user, _settings_row(db, user))


@router.put("", response_model=SettingsResponse)
def replace_settings(
    payload: SettingsUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SettingsResponse:
    row = _settings_row(db, user)
    if not row:
        row = UserSettings(user_id=user.id)
        db.add(row)

    user.display_name = (payload.profile.display_name or "").strip() or None
    user.phone = (payload.profile.phone or "").strip() or None
    user.bio = (payload.profile.bio or "").strip() or None

    health = payload.health_preferences
    row.activity_goal = health.activity_goal.value
    row.water_reminder_enabled = health.water_reminder_enabled
    row.water_goal = health.water_goal.value
    row.medication_reminders_enabled = health.medication_reminders_enabled
    row.weight_unit = health.weight_unit.value
    row.height_unit = health.height_unit.value

    notifications = payload.notification_settings
    row.email_notifications = notifications.email_enabled
    row.app_notifications = notifications.app_enabled
    row.health_tips = notifications.health_tips
    row.appointment_reminders = notifications.appointment_reminders

    display = payload.display_settings
    row.dark_mode = display.dark_mode
    row.colorblind_mode = display.colorblind_mode
    row.font_size = display.font_size.value

    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    return _settings_response(user, row)


@router.get("/export", response_model=AccountExportResponse)
def export_account(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> AccountExportResponse:
    quiz_rows = (
        db.query(QuizResult)
        .filter(QuizResult.user_id == user.id)
        .order_by(QuizResult.completed_at.desc(), QuizResult.id.desc())
        .all()
    )
    task_rows = db.query(DailyTask).filter(DailyTask.user_id == user.id).order_by(DailyTask.position.asc()).all()
    tracking = db.query(HealthTracking).filter(HealthTracking.user_id == user.id).first()
    appointment_rows = db.query(Appointment).filter(Appointment.user_id == user.id).order_by(Appointment.id.asc()).all()

    return AccountExportResponse(
        user=profile_response(user),
        settings=_settings_response(user, _settings_row(db, user)),
        quiz_results=[
            {
                "id": row.id,
                "answers": json.loads(row.answers_json or "{}"),
                "bmi": row.bmi,
                "bmi_category": row.bmi_category,
                "ideal_weight_min": row.ideal_weight_min,
                "ideal_weight_max": row.ideal_weight_max,
                "bmr": row.bmr,
                "water_needed": row.water_needed,
                "risk_level": row.risk_level,
                "risk_score": row.risk_score,
                "ai_analyzed": row.ai_analyzed,
                "analysis_source": row.analysis_source,
                "analysis": json.loads(row.ai_analysis_json) if row.ai_analysis_json else None,
                "completed_at": row.completed_at.isoformat(),
            }
            for row in quiz_rows
        ],
        daily_tasks=[{"id": row.id, "title": row.title, "completed": row.completed} for row in task_rows],
        health_tracking=(
            {
                "weekly_activity": json.loads(tracking.weekly_activity_json or "[]"),
                "water_intake": tracking.water_intake,
                "sleep_quality": tracking.sleep_quality,
                "nutrition": tracking.nutrition,
                "today_activity": tracking.today_activity,
                "glasses_count": tracking.glasses_count,
            }
            if tracking
            else None
        ),
        appointments=[
            {
                "id": row.id,
                "doctor_name": row.doctor_name,
                "specialty": row.specialty,
                "date": row.date,
                "time": row.time,
                "type": row.type,
                "status": row.status,
            }
            for row in appointment_rows
        ],
    )


@router.delete("/account", response_model=StatusResponse)
def delete_account(
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StatusResponse:
    user_id = user.id
    db.delete(user)
    db.commit()
    clear_session_cookie(response)
    logger.info("account_deleted user_id=%s", user_id)
    return StatusResponse()
