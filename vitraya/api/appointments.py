import json
import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm import Session

from vitraya.api.auth import get_current_user
from vitraya.core.seed import APPOINTMENT_TIME_SLOTS, SPECIALTIES
from vitraya.db.models import Appointment, Doctor, User
from vitraya.db.session import get_db

logger = logging.getLogger("uvicorn.error")

doctors_router = APIRouter(prefix="/doctors", tags=["appointments"])
router = APIRouter(prefix="/appointments", tags=["appointments"])

STATUS_SCHEDULED = "scheduled"
STATUS_CANCELLED = "cancelled"


class DoctorResponse(BaseModel):
    id: int
    name: str
    specialty: str
    hospital: Optional[str] = None
    experience: int
    education: Optional[str] = None
    rating: float
    description: Optional[str] = None
    languages: list[str]


class BookAppointmentRequest(BaseModel):
    doctor_id: int
    date: date
    time: str = Field(min_length=1, max_length=16)


class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    doctor_name: str
    specialty: str
    date: str
    time: str
    type: str
    status: str
    created_at: datetime


def slot_minutes(slot: str) -> int:
    """Minutes after midnight for a slot label such as '1:30 PM'; unparseable labels sort last."""
    try:
        parsed = datetime.strptime(slot.strip().upper(), "%I:%M %p")
    except ValueError:
        return 24 * 60
    return parsed.hour * 60 + parsed.minute


def sort_appointments(rows: list[Appointment]) -> list[Appointment]:
    return sorted(rows, key=lambda row: (row.date, slot_minutes(row.time), row.id))


def doctor_response(row: Doctor) -> DoctorResponse:
    return DoctorResponse(
        id=row.id,
        name=row.name,
        specialty=row.specialty,
        hospital=row.hospital,
        experience=row.experience,
        education=row.education,
        rating=row.rating,
        description=row.description,
        languages=json.loads(row.languages_json or "[]"),
    )


def appointment_response(row: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=row.id,
        doctor_id=row.doctor_id,
        doctor_name=row.doctor_name,
        specialty=row.specialty,
        date=row.date,
        time=row.time,
        type=row.type,
        status=row.status,
        created_at=row.created_at,
    )


def upcoming_appointments(db: Session, user_id: int, today: date, limit: int = 5) -> list[Appointment]:
    rows = (
        db.query(Appointment)
        .filter(
            Appointment.user_id == user_id,
            Appointment.status == STATUS_SCHEDULED,
            Appointment.date >= today.isoformat(),
        )
        .all()
    )
    return sort_appointments(rows)[:limit]


@doctors_router.get("", response_model=list[DoctorResponse])
def list_doctors(
    search: Optional[str] = Query(default=None, max_length=128),
    specialty: Optional[str] = Query(default=None, max_length=128),
    db: Session = Depends(get_db),
) -> list[DoctorResponse]:
    query = db.query(Doctor)
    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(or_(Doctor.name.ilike(pattern), Doctor.specialty.ilike(pattern)))
    if specialty:
        query = query.filter(Doctor.specialty == specialty)
    return [doctor_response(row) for row in query.order_by(Doctor.name.asc()).all()]


@doctors_router.get("/specialties", response_model=list[str])
def list_specialties() -> list[str]:
    return SPECIALTIES


@router.get("/time-slots", response_model=list[str])
def list_time_slots() -> list[str]:
    return APPOINTMENT_TIME_SLOTS


@router.get("", response_model=list[AppointmentResponse])
def list_appointments(
    include_cancelled: bool = True,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[AppointmentResponse]:
    query = db.query(Appointment).filter(Appointment.user_id == user.id)
    if not include_cancelled:
        query = query.filter(Appointment.status != STATUS_CANCELLED)
    return [appointment_response(row) for row in sort_appointments(query.all())]


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(
    payload: BookAppointmentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppointmentResponse:
    doctor = db.query(Doctor).filter(Doctor.id == payload.doctor_id).first()
    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found")
    time_slot = payload.time.strip()
    if time_slot not in APPOINTMENT_TIME_SLOTS:
        raise HTTPException(status_code=422, detail="Unknown time slot")
    if payload.date < date.today():
        raise HTTPException(status_code=422, detail="Appointment date is in the past")

    row = Appointment(
        user_id=user.id,
        doctor_id=doctor.id,
        doctor_name=doctor.name,
        specialty=doctor.specialty,
        date=payload.date.isoformat(),
        time=time_slot,
        type=f"{doctor.specialty} Consultation",
        status=STATUS_SCHEDULED,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("appointment_booked user_id=%s appointment_id=%s doctor_id=%s", user.id, row.id, doctor.id)
    return appointment_response(row)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppointmentResponse:
    row = (
        db.query(Appointment)
        .filter(Appointment.id == appointment_id, Appointment.user_id == user.id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Appointment not found")
    row.status = STATUS_CANCELLED
    db.commit()
    db.refresh(row)
    return appointment_response(row)
