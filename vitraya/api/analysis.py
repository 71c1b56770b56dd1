import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from vitraya.core.analysis import (
    ANALYZE_HEALTH_SYSTEM_PROMPT,
    ANALYZE_HEALTH_TEMPERATURE,
    QUIZ_ANALYSIS_SYSTEM_PROMPT,
    QUIZ_ANALYSIS_TEMPERATURE,
    AnalysisFormatError,
    HealthAnalysis,
    keyword_fallback_analysis,
    request_health_analysis,
    static_fallback_analysis,
)
from vitraya.services.llm import LLMClient, LLMRequestError, get_llm_client

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api", tags=["analysis"])


class PromptAnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
    user_prompt: str = Field(default="", alias="userPrompt")


def _health_data_message(health_data: dict[str, Any]) -> str:
    formatted = json.dumps(health_data, indent=2)
    return (
        f"Here is my health assessment data: {formatted}\n"
        "Remember to ONLY return a valid JSON object with no other text."
    )


@router.post("/analyze-health", response_model=HealthAnalysis)
def analyze_health(
    health_data: dict[str, Any] = Body(...),
    llm_client: LLMClient = Depends(get_llm_client),
) -> HealthAnalysis:
    try:
        return request_health_analysis(
            llm_client,
            _health_data_message(health_data),
            system_prompt=ANALYZE_HEALTH_SYSTEM_PROMPT,
            temperature=ANALYZE_HEALTH_TEMPERATURE,
        )
    except AnalysisFormatError as exc:
        logger.warning("analysis_parse_error endpoint=analyze-health detail=%s", str(exc))
        return static_fallback_analysis()
    except LLMRequestError as exc:
        logger.exception("analysis_llm_request_error endpoint=analyze-health detail=%s", str(exc))
        raise HTTPException(status_code=500, detail="Failed to analyze health data")


@router.post("/health-ai-analysis", response_model=HealthAnalysis)
def health_ai_analysis(
    payload: PromptAnalysisRequest,
    llm_client: LLMClient = Depends(get_llm_client),
) -> HealthAnalysis:
    """Analysis for a caller-built prompt; any failure yields the keyword-conditioned fallback."""
    try:
        return request_health_analysis(
            llm_client,
            payload.user_prompt,
            system_prompt=payload.system_prompt or QUIZ_ANALYSIS_SYSTEM_PROMPT,
            temperature=QUIZ_ANALYSIS_TEMPERATURE,
        )
    except AnalysisFormatError as exc:
        logger.warning("analysis_parse_error endpoint=health-ai-analysis detail=%s", str(exc))
    except LLMRequestError as exc:
        logger.exception("analysis_llm_request_error endpoint=health-ai-analysis detail=%s", str(exc))
    return keyword_fallback_analysis(payload.user_prompt)
