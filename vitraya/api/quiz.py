import json
import logging
from datetime import datetime
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from vitraya.api.auth import get_current_user
from vitraya.core.analysis import (
    AnalysisFormatError,
    HealthAnalysis,
    build_analysis_prompt,
    keyword_fallback_analysis,
    request_health_analysis,
)
from vitraya.core.health_metrics import HealthMetrics, calculate_health_metrics
from vitraya.core.quiz import (
    DEFAULT_ANSWERS,
    QUIZ_QUESTIONS,
    QuizQuestion,
    metrics_inputs_from_answers,
    unanswered_question_ids,
)
from vitraya.db.models import QuizResult, User
from vitraya.db.session import get_db
from vitraya.services.llm import LLMClient, LLMRequestError, get_llm_client

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/quiz", tags=["quiz"])

AnswerValue = Union[str, int, float]
ANALYSIS_UNAVAILABLE = "AI analysis unavailable"


class QuizCatalogResponse(BaseModel):
    questions: list[QuizQuestion]
    default_answers: dict[str, str]


class QuizAnswersRequest(BaseModel):
    answers: dict[str, AnswerValue] = Field(default_factory=dict)


class QuizSubmitRequest(QuizAnswersRequest):
    analyze: bool = True


class QuizMetricsResponse(HealthMetrics):
    activity_level: str
    unanswered: list[int]


class QuizResultResponse(BaseModel):
    id: int
    answers: dict[str, Any]
    metrics: HealthMetrics
    risk_level: str
    risk_score: int
    ai_analyzed: bool
    analysis_source: Optional[str] = None
    analysis: Optional[HealthAnalysis] = None
    analysis_error: Optional[str] = None
    completed_at: datetime


def _row_metrics(row: QuizResult) -> HealthMetrics:
    return HealthMetrics(
        bmi=row.bmi,
        bmi_category=row.bmi_category,
        ideal_weight_min=row.ideal_weight_min,
        ideal_weight_max=row.ideal_weight_max,
        bmr=row.bmr,
        water_needed=row.water_needed,
    )


def _result_response(row: QuizResult, analysis_error: Optional[str] = None) -> QuizResultResponse:
    analysis = None
    if row.ai_analysis_json:
        analysis = HealthAnalysis.model_validate(json.loads(row.ai_analysis_json))
    return QuizResultResponse(
        id=row.id,
        answers=json.loads(row.answers_json or "{}"),
        metrics=_row_metrics(row),
        risk_level=row.risk_level,
        risk_score=row.risk_score,
        ai_analyzed=row.ai_analyzed,
        analysis_source=row.analysis_source,
        analysis=analysis,
        analysis_error=analysis_error,
        completed_at=row.completed_at,
    )


def _get_owned_result(db: Session, user: User, quiz_id: int) -> QuizResult:
    row = db.query(QuizResult).filter(QuizResult.id == quiz_id, QuizResult.user_id == user.id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Quiz result not found")
    return row


def run_quiz_analysis(
    llm_client: LLMClient, user_id: int, answers: dict[str, Any], metrics: HealthMetrics, activity_level: str
) -> tuple[HealthAnalysis, str]:
    """Ask the model for an analysis; malformed output becomes the keyword fallback.

    LLMRequestError propagates so callers can decide how to report it.
    """
    prompt = build_analysis_prompt(answers, metrics, activity_level)
    try:
        return request_health_analysis(llm_client, prompt), "model"
    except AnalysisFormatError as exc:
        logger.warning("quiz_analysis_parse_error user_id=%s detail=%s", user_id, str(exc))
        return keyword_fallback_analysis(prompt), "fallback"


def _apply_analysis(row: QuizResult, analysis: HealthAnalysis, source: str) -> None:
    row.risk_level = analysis.risk_level
    row.risk_score = analysis.risk_score
    row.ai_analyzed = True
    row.analysis_source = source
    row.ai_analysis_json = analysis.to_json()


@router.get("/questions", response_model=QuizCatalogResponse)
def get_questions() -> QuizCatalogResponse:
    return QuizCatalogResponse(questions=QUIZ_QUESTIONS, default_answers=DEFAULT_ANSWERS)


@router.post("/metrics", response_model=QuizMetricsResponse)
def preview_metrics(payload: QuizAnswersRequest) -> QuizMetricsResponse:
    inputs = metrics_inputs_from_answers(payload.answers)
    metrics = calculate_health_metrics(**inputs)
    return QuizMetricsResponse(
        **metrics.model_dump(),
        activity_level=inputs["activity_level"],
        unanswered=unanswered_question_ids(payload.answers),
    )


@router.post("/submit", response_model=QuizResultResponse, status_code=status.HTTP_201_CREATED)
def submit_quiz(
    payload: QuizSubmitRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client),
) -> QuizResultResponse:
    inputs = metrics_inputs_from_answers(payload.answers)
    if inputs["height_cm"] <= 0 or inputs["weight_kg"] <= 0:
        raise HTTPException(status_code=422, detail="Height and weight are required")
    metrics = calculate_health_metrics(**inputs)

    row = QuizResult(
        user_id=user.id,
        answers_json=json.dumps(payload.answers),
        **metrics.model_dump(),
        risk_level="Low",
        risk_score=0,
        ai_analyzed=False,
        completed_at=datetime.utcnow(),
    )

    analysis_error = None
    if payload.analyze:
        try:
            analysis, source = run_quiz_analysis(
                llm_client, user.id, payload.answers, metrics, inputs["activity_level"]
            )
            _apply_analysis(row, analysis, source)
        except LLMRequestError as exc:
            logger.exception("quiz_llm_request_error user_id=%s detail=%s", user.id, str(exc))
            analysis_error = ANALYSIS_UNAVAILABLE

    db.add(row)
    db.flush()
    user.latest_quiz_id = row.id
    db.commit()
    db.refresh(row)
    return _result_response(row, analysis_error=analysis_error)


@router.get("/history", response_model=list[QuizResultResponse])
def quiz_history(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[QuizResultResponse]:
    rows = (
        db.query(QuizResult)
        .filter(QuizResult.user_id == user.id)
        .order_by(QuizResult.completed_at.desc(), QuizResult.id.desc())
        .all()
    )
    return [_result_response(row) for row in rows]


def latest_quiz_result(db: Session, user: User) -> Optional[QuizResult]:
    if user.latest_quiz_id:
        row = (
            db.query(QuizResult)
            .filter(QuizResult.id == user.latest_quiz_id, QuizResult.user_id == user.id)
            .first()
        )
        if row:
            return row
    return (
        db.query(QuizResult)
        .filter(QuizResult.user_id == user.id)
        .order_by(QuizResult.completed_at.desc(), QuizResult.id.desc())
        .first()
    )


@router.get("/latest", response_model=QuizResultResponse)
def latest_quiz(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> QuizResultResponse:
    row = latest_quiz_result(db, user)
    if not row:
        raise HTTPException(status_code=404, detail="No quiz results yet")
    return _result_response(row)


@router.get("/{quiz_id}", response_model=QuizResultResponse)
def get_quiz(
    quiz_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> QuizResultResponse:
    return _result_response(_get_owned_result(db, user, quiz_id))


@router.post("/{quiz_id}/analysis", response_model=QuizResultResponse)
def reanalyze_quiz(
    quiz_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client),
) -> QuizResultResponse:
    row = _get_owned_result(db, user, quiz_id)
    answers = json.loads(row.answers_json or "{}")
    inputs = metrics_inputs_from_answers(answers)
    metrics = _row_metrics(row)
    try:
        analysis, source = run_quiz_analysis(llm_client, user.id, answers, metrics, inputs["activity_level"])
    except LLMRequestError as exc:
        logger.exception("quiz_reanalysis_llm_error user_id=%s quiz_id=%s detail=%s", user.id, quiz_id, str(exc))
        raise HTTPException(status_code=500, detail=ANALYSIS_UNAVAILABLE)

    _apply_analysis(row, analysis, source)
    db.commit()
    db.refresh(row)
    return _result_response(row)
