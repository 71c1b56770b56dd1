from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    firebase_uid: Mapped[Optional[str]] = mapped_column(String(128), unique=True, index=True, nullable=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    auth_provider: Mapped[str] = mapped_column(String(32), nullable=False, default="password")

    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    streak_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_goals: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    latest_quiz_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quiz_results: Mapped[list["QuizResult"]] = relationship(
        "QuizResult", back_populates="user", cascade="all, delete-orphan"
    )
    daily_tasks: Mapped[list["DailyTask"]] = relationship(
        "DailyTask", back_populates="user", cascade="all, delete-orphan", order_by="DailyTask.position"
    )
    health_tracking: Mapped["HealthTracking"] = relationship(
        "HealthTracking", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    settings: Mapped["UserSettings"] = relationship(
        "UserSettings", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    appointments: Mapped[list["Appointment"]] = relationship(
        "Appointment", back_populates="user", cascade="all, delete-orphan"
    )


class QuizResult(Base):
    __tablename__ = "quiz_results"
    __table_args__ = (Index("ix_quiz_results_user_completed", "user_id", "completed_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    answers_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    bmi: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    bmi_category: Mapped[str] = mapped_column(String(32), nullable=False, default="Unknown")
    ideal_weight_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ideal_weight_max: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bmr: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    water_needed: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    risk_level: Mapped[str] = mapped_column(String(32), nullable=False, default="Low")
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ai_analyzed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    analysis_source: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    ai_analysis_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    completed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user: Mapped[User] = relationship("User", back_populates="quiz_results")


class DailyTask(Base):
    __tablename__ = "daily_tasks"
    __table_args__ = (UniqueConstraint("user_id", "task_key", name="uq_daily_tasks_user_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    task_key: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped[User] = relationship("User", back_populates="daily_tasks")


class HealthTracking(Base):
    __tablename__ = "health_tracking"
    __table_args__ = (UniqueConstraint("user_id", name="uq_health_tracking_user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    weekly_activity_json: Mapped[str] = mapped_column(Text, nullable=False, default="[0,0,0,0,0,0,0]")
    water_intake: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sleep_quality: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    nutrition: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    today_activity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    glasses_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped[User] = relationship("User", back_populates="health_tracking")


class UserSettings(Base):
    __tablename__ = "user_settings"
    __table_args__ = (UniqueConstraint("user_id", name="uq_user_settings_user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    activity_goal: Mapped[str] = mapped_column(String(32), nullable=False, default="moderate")
    water_reminder_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    water_goal: Mapped[str] = mapped_column(String(16), nullable=False, default="2.5")
    medication_reminders_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    weight_unit: Mapped[str] = mapped_column(String(8), nullable=False, default="kg")
    height_unit: Mapped[str] = mapped_column(String(8), nullable=False, default="cm")

    email_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    app_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    health_tips: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    appointment_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    dark_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    colorblind_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    font_size: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")

    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped[User] = relationship("User", back_populates="settings")


class Doctor(Base):
    __tablename__ = "doctors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    specialty: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    hospital: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    education: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    languages_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")


class Article(Base):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    read_time: Mapped[str] = mapped_column(String(32), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    published_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (Index("ix_appointments_user_date_time", "user_id", "date", "time"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id"), nullable=False, index=True)
    doctor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    specialty: Mapped[str] = mapped_column(String(128), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    time: Mapped[str] = mapped_column(String(16), nullable=False)
    type: Mapped[str] = mapped_column(String(160), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="scheduled")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    user: Mapped[User] = relationship("User", back_populates="appointments")
