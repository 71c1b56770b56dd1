"""Deterministic body metrics derived from the quiz answers.

All values are computed from height (cm), weight (kg), age, gender and an
activity level bucket. Nothing here touches the database or the network.
"""
import math
from enum import Enum

from pydantic import BaseModel


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    active = "active"
    very_active = "very_active"


ACTIVITY_MULTIPLIERS: dict[str, float] = {
    ActivityLevel.sedentary.value: 1.2,
    ActivityLevel.light.value: 1.375,
    ActivityLevel.moderate.value: 1.55,
    ActivityLevel.active.value: 1.725,
    ActivityLevel.very_active.value: 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.2

HEALTHY_BMI_MIN = 18.5
HEALTHY_BMI_MAX = 24.9
WATER_LITRES_PER_KG = 0.033

BMI_UNDERWEIGHT = "Underweight"
BMI_HEALTHY = "Healthy Weight"
BMI_OVERWEIGHT = "Overweight"
BMI_OBESE = "Obese"
BMI_UNKNOWN = "Unknown"


class HealthMetrics(BaseModel):
    bmi: float
    bmi_category: str
    ideal_weight_min: int
    ideal_weight_max: int
    bmr: int
    water_needed: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, unlike round()."""
    return int(math.floor(value + 0.5))


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return BMI_UNDERWEIGHT
    if bmi < 25:
        return BMI_HEALTHY
    if bmi < 30:
        return BMI_OVERWEIGHT
    return BMI_OBESE


def activity_multiplier(activity_level: str) -> float:
    normalized = (activity_level or "").strip().lower()
    return ACTIVITY_MULTIPLIERS.get(normalized, DEFAULT_ACTIVITY_MULTIPLIER)


def basal_metabolic_rate(height_cm: float, weight_kg: float, age: float, gender: str) -> float:
    """Mifflin-St Jeor; any gender other than male uses the female constant."""
    base = (10 * weight_kg) + (6.25 * height_cm) - (5 * age)
    if (gender or "").strip().lower() == "male":
        return base + 5
    return base - 161


def daily_water_litres(weight_kg: float) -> float:
    return round(weight_kg * WATER_LITRES_PER_KG, 1)


def calculate_health_metrics(
    height_cm: float,
    weight_kg: float,
    age: float,
    gender: str,
    activity_level: str,
) -> HealthMetrics:
    height_cm = float(height_cm or 0)
    weight_kg = float(weight_kg or 0)
    age = float(age or 0)

    height_m = height_cm / 100
    if height_m > 0:
        raw_bmi = weight_kg / (height_m * height_m)
        category = bmi_category(raw_bmi)
        ideal_min = round_half_up(HEALTHY_BMI_MIN * height_m * height_m)
        ideal_max = round_half_up(HEALTHY_BMI_MAX * height_m * height_m)
    else:
        raw_bmi = 0.0
        category = BMI_UNKNOWN
        ideal_min = 0
        ideal_max = 0

    bmr = basal_metabolic_rate(height_cm, weight_kg, age, gender) * activity_multiplier(activity_level)

    return HealthMetrics(
        bmi=round(raw_bmi, 1),
        bmi_category=category,
        ideal_weight_min=ideal_min,
        ideal_weight_max=ideal_max,
        bmr=round_half_up(bmr),
        water_needed=daily_water_litres(weight_kg),
    )
