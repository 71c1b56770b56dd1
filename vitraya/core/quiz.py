from typing import Any, Optional

from pydantic import BaseModel

from vitraya.core.health_metrics import ActivityLevel, HealthMetrics, calculate_health_metrics


class QuizOption(BaseModel):
    value: str
    label: str
    description: Optional[str] = None


class QuizQuestion(BaseModel):
    id: int
    key: str
    text: str
    category: str
    description: Optional[str] = None
    type: str = "radio"
    options: list[QuizOption] = []
    min: Optional[float] = None
    max: Optional[float] = None
    unit: Optional[str] = None


def _options(*items: tuple[str, str, Optional[str]]) -> list[QuizOption]:
    return [QuizOption(value=value, label=label, description=description) for value, label, description in items]


QUIZ_QUESTIONS: list[QuizQuestion] = [
    QuizQuestion(
        id=1,
        key="age",
        text="What is your age?",
        category="Personal Info",
        description="Your age helps us determine appropriate health recommendations",
        type="numeric",
        min=18,
        max=100,
        unit="years",
    ),
    QuizQuestion(
        id=2,
        key="gender",
        text="What is your gender?",
        category="Personal Info",
        options=_options(
            ("male", "Male", None),
            ("female", "Female", None),
            ("other", "Other", None),
            ("prefer_not_to_say", "Prefer not to say", None),
        ),
    ),
    QuizQuestion(
        id=3,
        key="height",
        text="What is your height?",
        category="Body Metrics",
        description="Used to calculate your BMI and other health metrics",
        type="numeric",
        min=120,
        max=220,
        unit="cm",
    ),
    QuizQuestion(
        id=4,
        key="weight",
        text="What is your weight?",
        category="Body Metrics",
        description="Used to calculate your BMI and other health metrics",
        type="numeric",
        min=40,
        max=200,
        unit="kg",
    ),
    QuizQuestion(
        id=5,
        key="activity_days",
        text="On average, how many days per week do you engage in moderate physical activity?",
        category="Physical Activity",
        description="Examples include brisk walking, cycling, or swimming for at least 30 minutes",
        options=_options(
            ("0-1", "0-1 days", "Rarely exercise"),
            ("2-3", "2-3 days", "Occasional exercise"),
            ("4-5", "4-5 days", "Regular exercise"),
            ("6-7", "6-7 days", "Daily exercise"),
        ),
    ),
    QuizQuestion(
        id=6,
        key="activity_level",
        text="How would you rate your physical activity level?",
        category="Physical Activity",
        options=_options(
            ("sedentary", "Sedentary", "Little to no exercise"),
            ("light", "Lightly Active", "Light exercise 1-3 days/week"),
            ("moderate", "Moderately Active", "Moderate exercise 3-5 days/week"),
            ("active", "Very Active", "Hard exercise 6-7 days/week"),
            ("very_active", "Extremely Active", "Very hard exercise & physical job or training twice a day"),
        ),
    ),
    QuizQuestion(
        id=7,
        key="produce_servings",
        text="How many servings of fruits and vegetables do you typically eat per day?",
        category="Nutrition",
        description="A serving is about 1 cup of raw vegetables or 1 medium piece of fruit",
        options=_options(
            ("0-1", "0-1 servings", "Minimal produce"),
            ("2-3", "2-3 servings", "Some produce"),
            ("4-5", "4-5 servings", "Good amount"),
            ("5+", "5+ servings", "Excellent intake"),
        ),
    ),
    QuizQuestion(
        id=8,
        key="water_glasses",
        text="How much water do you typically drink per day?",
        category="Nutrition",
        description="One glass is approximately 250ml",
        options=_options(
            ("0-2", "0-2 glasses", "Less than 500ml"),
            ("3-5", "3-5 glasses", "About 1 liter"),
            ("6-8", "6-8 glasses", "About 1.5-2 liters"),
            ("8+", "8+ glasses", "More than 2 liters"),
        ),
    ),
    QuizQuestion(
        id=9,
        key="sleep",
        text="How many hours of sleep do you usually get per night?",
        category="Sleep",
        options=_options(
            ("less-than-5", "Less than 5 hours", "Very short sleep"),
            ("5-6", "5-6 hours", "Short sleep"),
            ("7-8", "7-8 hours", "Recommended amount"),
            ("9+", "More than 9 hours", "Long sleep"),
        ),
    ),
    QuizQuestion(
        id=10,
        key="smoking",
        text="Do you currently smoke tobacco products?",
        category="Lifestyle",
        options=_options(
            ("yes", "Yes", "Current smoker"),
            ("occasionally", "Occasionally", "Social smoker"),
            ("former", "Former smoker", "Quit smoking"),
            ("no", "No", "Never smoked"),
        ),
    ),
    QuizQuestion(
        id=11,
        key="stress",
        text="How would you rate your typical stress level?",
        category="Mental Health",
        description="Consider your general feelings over the past month",
        options=_options(
            ("high", "High", "Frequently overwhelmed"),
            ("moderate", "Moderate", "Occasionally stressed"),
            ("low", "Low", "Generally relaxed"),
            ("minimal", "Minimal", "Rarely stressed"),
        ),
    ),
]

QUESTIONS_BY_KEY: dict[str, QuizQuestion] = {question.key: question for question in QUIZ_QUESTIONS}

DEFAULT_ANSWERS: dict[str, str] = {
    "1": "35",
    "2": "male",
    "3": "175",
    "4": "70",
    "5": "2-3",
    "6": "moderate",
    "7": "2-3",
    "8": "6-8",
    "9": "7-8",
    "10": "no",
    "11": "moderate",
}

ACTIVITY_DAYS_TO_LEVEL: dict[str, str] = {
    "0-1": ActivityLevel.sedentary.value,
    "2-3": ActivityLevel.light.value,
    "4-5": ActivityLevel.moderate.value,
    "6-7": ActivityLevel.active.value,
}

DEFAULT_AGE = 30
DEFAULT_GENDER = "male"


def answer_for(answers: dict[str, Any], key: str) -> str:
    question = QUESTIONS_BY_KEY[key]
    raw = answers.get(str(question.id))
    if raw is None:
        return ""
    return str(raw).strip()


def _as_float(value: str, default: float) -> float:
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _as_int(value: str, default: int) -> int:
    if not value:
        return default
    try:
        return int(float(value))
    except ValueError:
        return default


def resolve_activity_level(answers: dict[str, Any]) -> str:
    explicit = answer_for(answers, "activity_level").lower()
    if explicit in {level.value for level in ActivityLevel}:
        return explicit
    days = answer_for(answers, "activity_days")
    return ACTIVITY_DAYS_TO_LEVEL.get(days, ActivityLevel.moderate.value)


def metrics_inputs_from_answers(answers: dict[str, Any]) -> dict[str, Any]:
    return {
        "height_cm": _as_float(answer_for(answers, "height"), 0.0),
        "weight_kg": _as_float(answer_for(answers, "weight"), 0.0),
        "age": _as_int(answer_for(answers, "age"), DEFAULT_AGE),
        "gender": answer_for(answers, "gender") or DEFAULT_GENDER,
        "activity_level": resolve_activity_level(answers),
    }


def metrics_from_answers(answers: dict[str, Any]) -> HealthMetrics:
    return calculate_health_metrics(**metrics_inputs_from_answers(answers))


def unanswered_question_ids(answers: dict[str, Any]) -> list[int]:
    return [q.id for q in QUIZ_QUESTIONS if not str(answers.get(str(q.id), "") or "").strip()]
