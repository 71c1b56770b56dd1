"""Health-risk analysis contract for chat-completion output.

The model is asked for a single JSON object. Replies are cleaned of
markdown code fences, parsed, and checked for the four top-level keys
before use; callers substitute one of the fallbacks below when that fails.
"""
import json
import math
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vitraya.core.health_metrics import HealthMetrics, round_half_up
from vitraya.core.quiz import answer_for, resolve_activity_level
from vitraya.services.llm import LLMClient

REQUIRED_KEYS = ("riskLevel", "riskScore", "recommendations", "healthInsights")

ANALYSIS_JSON_SHAPE = """{
  "riskLevel": "Low|Moderate|High",
  "riskScore": <integer between 0-100>,
  "recommendations": {
    "exercise": "<specific exercise recommendation>",
    "nutrition": "<specific nutrition recommendation>",
    "sleep": "<specific sleep recommendation>",
    "mentalHealth": "<specific mental health recommendation>"
  },
  "healthInsights": {
    "strengths": ["<strength 1>", "<strength 2>", "<strength 3>"],
    "areasForImprovement": ["<area 1>", "<area 2>", "<area 3>"],
    "longTermRisks": ["<risk 1>", "<risk 2>", "<risk 3>"]
  }
}"""

ANALYZE_HEALTH_SYSTEM_PROMPT = f"""
You are a health analysis AI expert. Based on the provided health assessment data, analyze the information and provide a structured response.

RESPONSE FORMAT REQUIREMENTS:
You MUST respond with ONLY a valid JSON object. No other text, explanations, or markdown formatting.
The JSON structure MUST be exactly as follows:

{ANALYSIS_JSON_SHAPE}

DO NOT include any explanatory text before or after the JSON.
DO NOT wrap the JSON in code blocks or markdown syntax.
Ensure all JSON values are properly escaped if they contain quotes.
Make sure the riskScore is a NUMBER, not a string.

Base your analysis on these factors:
1. BMI and weight status - BMI < 18.5 is underweight, 18.5-24.9 is healthy, 25-29.9 is overweight, 30+ is obese
2. Physical activity frequency and intensity - More activity means lower health risk
3. Nutrition habits, especially fruits and vegetables intake
4. Sleep duration and quality - 7-8 hours is optimal
5. Smoking status - Increases health risks
6. Stress levels - Higher stress increases health risks
7. Age and gender - Consider age-appropriate recommendations
"""

QUIZ_ANALYSIS_SYSTEM_PROMPT = f"""
You are a health analysis AI expert. Based on the provided health assessment data, analyze the information and provide a structured response.
You MUST respond ONLY with the following JSON format, with no other text or explanation:

{ANALYSIS_JSON_SHAPE}

IMPORTANT: Do NOT use markdown formatting. Do NOT wrap the JSON in code blocks. Return ONLY the raw JSON object.

Base your analysis on these factors:
1. BMI and weight status
2. Physical activity frequency and intensity
3. Nutrition habits, especially fruits and vegetables intake
4. Sleep duration and quality
5. Smoking status
6. Stress levels
7. Age and gender

Ensure you provide personalized, actionable recommendations.
"""

ANALYZE_HEALTH_TEMPERATURE = 0.1
QUIZ_ANALYSIS_TEMPERATURE = 0.0

_FENCED_OBJECT = re.compile(r"```(?:json)?\s*({[\s\S]*?})\s*```")


class AnalysisFormatError(ValueError):
    pass


class Recommendations(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exercise: str = ""
    nutrition: str = ""
    sleep: str = ""
    mental_health: str = Field(default="", alias="mentalHealth")


class HealthInsights(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list, alias="areasForImprovement")
    long_term_risks: list[str] = Field(default_factory=list, alias="longTermRisks")


class HealthAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    risk_level: str = Field(alias="riskLevel")
    risk_score: int = Field(alias="riskScore")
    recommendations: Recommendations
    health_insights: HealthInsights = Field(alias="healthInsights")

    @field_validator("risk_level", mode="before")
    @classmethod
    def _risk_level_present(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("riskLevel is empty")
        return text

    @field_validator("risk_score", mode="before")
    @classmethod
    def _coerce_risk_score(cls, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("riskScore must be a number")
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError as exc:
                raise ValueError("riskScore must be a number") from exc
        if isinstance(value, (int, float)):
            try:
                number = float(value)
            except OverflowError as exc:
                raise ValueError("riskScore must be a finite number") from exc
            if not math.isfinite(number):
                raise ValueError("riskScore must be a finite number")
            return round_half_up(number)
        raise ValueError("riskScore must be a number")

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), separators=(",", ":"))


def extract_json_text(raw_text: Optional[str]) -> str:
    text = raw_text or ""
    match = _FENCED_OBJECT.search(text)
    if match:
        return match.group(1).strip()
    return text.replace("```json", "").replace("```", "").strip()


def parse_health_analysis(raw_text: Optional[str]) -> HealthAnalysis:
    cleaned = extract_json_text(raw_text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise AnalysisFormatError("Analysis response is not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise AnalysisFormatError("Analysis response is not a JSON object")
    missing = [key for key in REQUIRED_KEYS if key not in parsed]
    if missing:
        raise AnalysisFormatError(f"Analysis response missing keys: {', '.join(missing)}")
    try:
        return HealthAnalysis.model_validate(parsed)
    except ValidationError as exc:
        raise AnalysisFormatError("Invalid response structure") from exc


def request_health_analysis(
    llm_client: LLMClient,
    user_prompt: str,
    system_prompt: str = QUIZ_ANALYSIS_SYSTEM_PROMPT,
    temperature: float = QUIZ_ANALYSIS_TEMPERATURE,
) -> HealthAnalysis:
    raw = llm_client.complete(
        [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=temperature,
    )
    return parse_health_analysis(raw)


def static_fallback_analysis() -> HealthAnalysis:
    return HealthAnalysis(
        risk_level="Moderate",
        risk_score=65,
        recommendations=Recommendations(
            exercise=(
                "Aim for at least 150 minutes of moderate-intensity exercise per week, "
                "such as brisk walking, swimming, or cycling."
            ),
            nutrition="Focus on a balanced diet with plenty of fruits, vegetables, lean proteins, and whole grains.",
            sleep=(
                "Prioritize getting 7-8 hours of quality sleep each night by maintaining "
                "a consistent sleep schedule."
            ),
            mental_health=(
                "Practice stress management techniques such as mindfulness, deep breathing, "
                "or short meditation sessions."
            ),
        ),
        health_insights=HealthInsights(
            strengths=[
                "Awareness of health status through assessment",
                "Taking initiative to improve health outcomes",
                "Interest in personalized health recommendations",
            ],
            areas_for_improvement=[
                "Regular health check-ups with healthcare professionals",
                "Consistent physical activity routine",
                "Balanced nutrition and adequate hydration",
            ],
            long_term_risks=[
                "Lifestyle-related health conditions if habits aren't maintained",
                "Stress-related health issues without proper management",
                "Age-related health challenges without preventive care",
            ],
        ),
    )


def keyword_fallback_analysis(prompt: str) -> HealthAnalysis:
    text = prompt or ""

    def has(*needles: str) -> bool:
        return any(needle in text for needle in needles)

    obese = has("BMI Category: Obese")
    overweight = has("BMI Category: Overweight")

    if obese or has("Smoking status: yes"):
        risk_level = "High"
    elif overweight:
        risk_level = "Moderate"
    else:
        risk_level = "Low"

    if obese:
        risk_score = 75
    elif overweight:
        risk_score = 55
    else:
        risk_score = 30

    recommendations = Recommendations(
        exercise=(
            "Start with gentle walks for 10 minutes daily, gradually increasing to 30 minutes three times per week."
            if has("activity days per week: 0-1")
            else "Continue your current exercise routine, but add variety with strength training twice weekly."
        ),
        nutrition=(
            "Focus on adding one fruit at breakfast and vegetables with lunch and dinner daily."
            if has("Fruits and vegetables intake: 0-1")
            else "Maintain your balanced diet, but consider adding more plant-based proteins and reducing processed foods."
        ),
        sleep=(
            "Prioritize getting at least 6 hours of sleep by establishing a regular sleep schedule and bedtime routine."
            if has("Sleep duration: less-than-5")
            else "Your sleep duration is good; focus on improving quality by limiting screen time before bed."
        ),
        mental_health=(
            "Practice 5-minute deep breathing exercises twice daily and consider a 10-minute daily meditation practice."
            if has("Stress level: high")
            else "Continue your good stress management practices and add outdoor activities to further boost mood."
        ),
    )

    insights = HealthInsights(
        strengths=[
            (
                "Maintaining a healthy weight range"
                if has("BMI Category: Healthy Weight")
                else "Taking initiative for health improvement"
            ),
            (
                "Consistent physical activity routine"
                if has("activity days per week: 4-5", "activity days per week: 6-7")
                else "Awareness of personal health metrics"
            ),
            "Prioritizing adequate sleep" if has("Sleep duration: 7-8") else "Engaging with health assessment tools",
        ],
        areas_for_improvement=[
            (
                "Increasing daily water intake to at least 2 liters"
                if has("Water intake: 0-2")
                else "Maintaining hydration throughout the day"
            ),
            (
                "Adding more fruits and vegetables to your diet"
                if has("Fruits and vegetables intake: 0-1", "Fruits and vegetables intake: 2-3")
                else "Varying your nutritional sources"
            ),
            (
                "Increasing overall physical activity level"
                if has("Activity level: sedentary", "Activity level: light")
                else "Adding variety to exercise routine"
            ),
        ],
        long_term_risks=[
            (
                "Increased risk of cardiovascular issues if weight remains elevated"
                if has("BMI: 3")
                else "Monitor cholesterol levels regularly as you age"
            ),
            (
                "High risk of respiratory and cardiovascular disease due to smoking"
                if has("Smoking status: yes")
                else "Watch for signs of joint issues as you maintain your exercise routine"
            ),
            (
                "Increased risk of cognitive decline with chronic sleep deprivation"
                if has("Sleep duration: less-than-5")
                else "Pay attention to stress management as life demands change"
            ),
        ],
    )
    return HealthAnalysis(
        risk_level=risk_level,
        risk_score=risk_score,
        recommendations=recommendations,
        health_insights=insights,
    )


def build_analysis_prompt(
    answers: dict[str, Any], metrics: HealthMetrics, activity_level: Optional[str] = None
) -> str:
    activity_level = activity_level or resolve_activity_level(answers)
    lines = [
        "Please analyze my health assessment:",
        f"Age: {answer_for(answers, 'age') or 'unknown'}",
        f"Gender: {answer_for(answers, 'gender') or 'unknown'}",
        f"Height (cm): {answer_for(answers, 'height') or 'unknown'}",
        f"Weight (kg): {answer_for(answers, 'weight') or 'unknown'}",
        f"BMI: {metrics.bmi}",
        f"BMI Category: {metrics.bmi_category}",
        f"Ideal weight range (kg): {metrics.ideal_weight_min}-{metrics.ideal_weight_max}",
        f"Daily calorie needs (BMR adjusted): {metrics.bmr}",
        f"Daily water need (L): {metrics.water_needed}",
        f"Physical activity days per week: {answer_for(answers, 'activity_days') or 'unknown'}",
        f"Activity level: {activity_level}",
        f"Fruits and vegetables intake: {answer_for(answers, 'produce_servings') or 'unknown'}",
        f"Water intake: {answer_for(answers, 'water_glasses') or 'unknown'}",
        f"Sleep duration: {answer_for(answers, 'sleep') or 'unknown'}",
        f"Smoking status: {answer_for(answers, 'smoking') or 'unknown'}",
        f"Stress level: {answer_for(answers, 'stress') or 'unknown'}",
    ]
    return "\n".join(lines)
