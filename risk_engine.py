# risk_engine.py
# Health Risk Scoring Engine v1.0
#
# Pure, rule-based scoring of one health profile:
# - Metric categories (lab values + vitals + lifestyle display tags)
# - Composite risk score (additive, nominal 0–300, no upper clamp) + overall band
# - Disease-specific risks (CVD, type 2 diabetes, stroke, metabolic syndrome):
#     sub-score → scaled % (capped) ; level banded on the UNSCALED sub-score
# - Recommendations in fixed rule order (not sorted by priority)
# - Health summary (strengths / areas to monitor / immediate actions)
# Rule trace:
#     - trace: every composite-score rule that fired, with value + points
#
# No validation here: bounds are the caller's job (see profile_builder.py).

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


VERSION = {
    "engine": "v1.0",
    "compositeScore": "Additive ladders, bands ≤60 / ≤120 / ≤180 / >180",
    "specificRisks": "CVD ×1.2 cap 85; T2D ×0.8 cap 75; Stroke ×0.6 cap 60; MetS ×1.1 cap 80",
}

# Nominal top of the composite scale (display only; the score is not clamped).
SCORE_GAUGE_MAX = 300

GENDERS = ("male", "female")
SMOKING_STATUSES = ("never", "former", "current")
EXERCISE_FREQUENCIES = ("none", "low", "moderate", "high")
EXERCISE_INTENSITIES = ("light", "moderate", "vigorous")
QUALITY_LEVELS = ("poor", "fair", "good", "excellent")
STRESS_LEVELS = ("low", "moderate", "high", "very-high")
ALCOHOL_LEVELS = ("none", "light", "moderate", "heavy")
CHECKUP_INTERVALS = ("less-than-6-months", "6-12-months", "1-2-years", "more-than-2-years")

RISK_LEVELS = ("low", "moderate", "high", "very-high")
PRIORITIES = ("medium", "high", "critical")

# Display severities (colour only, never scored)
GOOD = "good"
CAUTION = "caution"
ELEVATED = "elevated"
DANGER = "danger"

HDL_FLOOR = {"male": 40, "female": 50}


# ----------------------------
# Records
# ----------------------------
@dataclass(frozen=True)
class Profile:
    age: int
    gender: str
    weight: float
    height: float
    waist_circumference: float
    systolic_bp: int
    diastolic_bp: int
    resting_heart_rate: int
    glucose: float
    cholesterol: float
    hdl_cholesterol: float
    ldl_cholesterol: float
    triglycerides: float
    hba1c: float
    smoking_status: str
    smoking_years: int
    cigarettes_per_day: int
    exercise_frequency: str
    exercise_intensity: str
    sleep_hours: float
    sleep_quality: str
    stress_level: str
    alcohol_consumption: str
    diet_quality: str
    water_intake: int
    mental_health_status: str
    last_checkup: str
    heart_disease_family: bool = False
    diabetes_family: bool = False
    stroke_family: bool = False
    cancer_family: bool = False
    medications: Tuple[str, ...] = ()
    chronic_conditions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Category:
    category: str
    severity: str


@dataclass(frozen=True)
class RiskLevel:
    level: str
    score: int
    description: str


@dataclass(frozen=True)
class SpecificRisk:
    type: str
    level: str
    percentage: float
    description: str


@dataclass(frozen=True)
class Recommendation:
    category: str
    priority: str
    text: str


@dataclass(frozen=True)
class HealthSummary:
    strengths: Tuple[str, ...]
    areas_to_monitor: Tuple[str, ...]
    immediate_actions: Tuple[str, ...]


@dataclass(frozen=True)
class Derived:
    bmi: float
    waist_to_height_ratio: float


@dataclass(frozen=True)
class Assessment:
    overall_risk: RiskLevel
    specific_risks: Tuple[SpecificRisk, ...]
    categorized_metrics: Mapping[str, Category]
    recommendations: Tuple[Recommendation, ...]
    derived: Derived
    summary: HealthSummary
    # mapping fields are read-only views
    trace: Tuple[Mapping[str, Any], ...] = field(default=())
    version: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(VERSION)))


# ----------------------------
# Derived values
# ----------------------------
def calculate_bmi(p: Profile) -> float:
    height_m = p.height / 100
    return p.weight / (height_m * height_m)


def waist_to_height_ratio(p: Profile) -> float:
    return p.waist_circumference / p.height


def hdl_floor(gender: str) -> int:
    return HDL_FLOOR["male"] if gender == "male" else HDL_FLOOR["female"]


def fmt_pct(x: float) -> str:
    # half-up, matches how the percentages have always been displayed
    return str(int(math.floor(x + 0.5)))


# ----------------------------
# Trace helper (auditable rules)
# ----------------------------
def add_trace(trace: List[Dict[str, Any]], rule: str, value: Any = None, points: int = 0) -> int:
    trace.append({"rule": rule, "value": value, "points": points})
    return points


# ----------------------------
# Metric categorizer
# ----------------------------
def bmi_category(bmi: float) -> Category:
    if bmi < 18.5: return Category("Underweight", CAUTION)
    if bmi < 25: return Category("Normal", GOOD)
    if bmi < 30: return Category("Overweight", CAUTION)
    return Category("Obese", DANGER)

def waist_to_height_category(ratio: float) -> Category:
    if ratio > 0.5:
        return Category("High Risk", DANGER)
    return Category("Normal", GOOD)

def blood_pressure_category(systolic: float, diastolic: float) -> Category:
    # Stage 1 is an OR: a high systolic with diastolic < 90 stays in stage 1.
    if systolic < 120 and diastolic < 80: return Category("Normal", GOOD)
    if systolic < 130 and diastolic < 80: return Category("Elevated", CAUTION)
    if systolic < 140 or diastolic < 90: return Category("High (Stage 1)", ELEVATED)
    return Category("High (Stage 2)", DANGER)

def glucose_category(glucose: float) -> Category:
    if glucose < 100: return Category("Normal", GOOD)
    if glucose < 126: return Category("Pre-diabetes", CAUTION)
    return Category("Diabetes", DANGER)

def hba1c_category(hba1c: float) -> Category:
    if hba1c < 5.7: return Category("Normal", GOOD)
    if hba1c < 6.5: return Category("Pre-diabetes", CAUTION)
    return Category("Diabetes", DANGER)

def cholesterol_category(cholesterol: float) -> Category:
    if cholesterol < 200: return Category("Desirable", GOOD)
    if cholesterol < 240: return Category("Borderline High", CAUTION)
    return Category("High", DANGER)

def hdl_category(hdl: float, gender: str) -> Category:
    if hdl >= 60: return Category("High (Protective)", GOOD)
    if hdl >= hdl_floor(gender): return Category("Normal", GOOD)
    return Category("Low (Risk Factor)", DANGER)

def ldl_category(ldl: float) -> Category:
    if ldl < 100: return Category("Optimal", GOOD)
    if ldl < 130: return Category("Near Optimal", CAUTION)
    if ldl < 160: return Category("Borderline High", ELEVATED)
    return Category("High", DANGER)

def triglycerides_category(triglycerides: float) -> Category:
    if triglycerides < 150: return Category("Normal", GOOD)
    if triglycerides < 200: return Category("Borderline High", CAUTION)
    if triglycerides < 500: return Category("High", ELEVATED)
    return Category("Very High", DANGER)

def heart_rate_category(bpm: float) -> Category:
    if bpm < 60: return Category("Low (Athletic)", GOOD)
    if bpm <= 100: return Category("Normal", GOOD)
    return Category("High", DANGER)


def _cap(s: str) -> str:
    return s[:1].upper() + s[1:] if s else s

def exercise_category(frequency: str) -> Category:
    sev = GOOD if frequency == "high" else (CAUTION if frequency == "moderate" else DANGER)
    return Category(_cap(frequency), sev)

def sleep_category(hours: float, quality: str) -> Category:
    sev = GOOD if quality in ("excellent", "good") else DANGER
    return Category(f"{hours:g}h ({quality})", sev)

def stress_category(stress: str) -> Category:
    sev = GOOD if stress == "low" else (CAUTION if stress == "moderate" else DANGER)
    return Category(_cap(stress), sev)

def smoking_category(status: str) -> Category:
    sev = GOOD if status == "never" else (CAUTION if status == "former" else DANGER)
    return Category(_cap(status), sev)

def family_history_category(p: Profile) -> Category:
    # cancer history is not part of this display flag
    if p.heart_disease_family or p.diabetes_family or p.stroke_family:
        return Category("Present", DANGER)
    return Category("None", GOOD)


def categorize_metrics(p: Profile, bmi: float, whtr: float) -> Dict[str, Category]:
    return {
        "bmi": bmi_category(bmi),
        "waist_to_height": waist_to_height_category(whtr),
        "blood_pressure": blood_pressure_category(p.systolic_bp, p.diastolic_bp),
        "resting_heart_rate": heart_rate_category(p.resting_heart_rate),
        "glucose": glucose_category(p.glucose),
        "hba1c": hba1c_category(p.hba1c),
        "cholesterol": cholesterol_category(p.cholesterol),
        "hdl_cholesterol": hdl_category(p.hdl_cholesterol, p.gender),
        "ldl_cholesterol": ldl_category(p.ldl_cholesterol),
        "triglycerides": triglycerides_category(p.triglycerides),
        "exercise": exercise_category(p.exercise_frequency),
        "sleep": sleep_category(p.sleep_hours, p.sleep_quality),
        "stress": stress_category(p.stress_level),
        "smoking": smoking_category(p.smoking_status),
        "family_history": family_history_category(p),
    }


# ----------------------------
# Composite risk score
# ----------------------------
def composite_score(p: Profile, bmi: float, whtr: float, trace: List[Dict[str, Any]]) -> int:
    score = 0

    # Age
    if p.age > 75: score += add_trace(trace, "Age>75", p.age, 35)
    elif p.age > 65: score += add_trace(trace, "Age>65", p.age, 28)
    elif p.age > 55: score += add_trace(trace, "Age>55", p.age, 20)
    elif p.age > 45: score += add_trace(trace, "Age>45", p.age, 12)
    elif p.age > 35: score += add_trace(trace, "Age>35", p.age, 6)

    if p.gender == "male":
        score += add_trace(trace, "Gender_male", p.gender, 10)

    # Body composition
    if bmi >= 35: score += add_trace(trace, "BMI≥35", round(bmi, 1), 30)
    elif bmi >= 30: score += add_trace(trace, "BMI≥30", round(bmi, 1), 22)
    elif bmi >= 25: score += add_trace(trace, "BMI≥25", round(bmi, 1), 12)

    if whtr > 0.6: score += add_trace(trace, "WHtR>0.6", round(whtr, 2), 8)
    elif whtr > 0.5: score += add_trace(trace, "WHtR>0.5", round(whtr, 2), 4)

    # Cardiovascular
    bp = f"{p.systolic_bp}/{p.diastolic_bp}"
    if p.systolic_bp >= 160 or p.diastolic_bp >= 100:
        score += add_trace(trace, "BP≥160/100", bp, 25)
    elif p.systolic_bp >= 140 or p.diastolic_bp >= 90:
        score += add_trace(trace, "BP≥140/90", bp, 18)
    elif p.systolic_bp >= 130 or p.diastolic_bp >= 80:
        score += add_trace(trace, "BP≥130/80", bp, 10)

    if p.resting_heart_rate > 100: score += add_trace(trace, "HR>100", p.resting_heart_rate, 8)
    elif p.resting_heart_rate > 80: score += add_trace(trace, "HR>80", p.resting_heart_rate, 4)

    # Metabolic
    if p.glucose >= 126: score += add_trace(trace, "Glucose≥126", p.glucose, 25)
    elif p.glucose >= 100: score += add_trace(trace, "Glucose≥100", p.glucose, 12)

    if p.hba1c >= 6.5: score += add_trace(trace, "HbA1c≥6.5", p.hba1c, 20)
    elif p.hba1c >= 5.7: score += add_trace(trace, "HbA1c≥5.7", p.hba1c, 10)

    # Lipids
    if p.cholesterol >= 240: score += add_trace(trace, "Cholesterol≥240", p.cholesterol, 15)
    elif p.cholesterol >= 200: score += add_trace(trace, "Cholesterol≥200", p.cholesterol, 8)

    if p.hdl_cholesterol < hdl_floor(p.gender):
        score += add_trace(trace, "HDL_low", p.hdl_cholesterol, 10)

    if p.ldl_cholesterol >= 160: score += add_trace(trace, "LDL≥160", p.ldl_cholesterol, 12)
    elif p.ldl_cholesterol >= 130: score += add_trace(trace, "LDL≥130", p.ldl_cholesterol, 6)

    if p.triglycerides >= 200: score += add_trace(trace, "TG≥200", p.triglycerides, 8)
    elif p.triglycerides >= 150: score += add_trace(trace, "TG≥150", p.triglycerides, 4)

    # Smoking
    if p.smoking_status == "current":
        score += add_trace(trace, "Smoking_current", p.smoking_status, 25)
        if p.cigarettes_per_day > 20:
            score += add_trace(trace, "Cigarettes>20/day", p.cigarettes_per_day, 10)
        if p.smoking_years > 20:
            score += add_trace(trace, "SmokingYears>20", p.smoking_years, 8)
    elif p.smoking_status == "former":
        score += add_trace(trace, "Smoking_former", p.smoking_status, 8)

    # Activity / alcohol
    if p.exercise_frequency == "none":
        score += add_trace(trace, "Exercise_none", p.exercise_frequency, 15)
    elif p.exercise_frequency == "low":
        score += add_trace(trace, "Exercise_low", p.exercise_frequency, 8)
    elif p.exercise_frequency == "high" and p.exercise_intensity == "vigorous":
        score += add_trace(trace, "Exercise_high_vigorous", p.exercise_intensity, -5)

    if p.alcohol_consumption == "heavy": score += add_trace(trace, "Alcohol_heavy", p.alcohol_consumption, 12)
    elif p.alcohol_consumption == "moderate": score += add_trace(trace, "Alcohol_moderate", p.alcohol_consumption, 4)

    # Sleep / stress
    if p.sleep_hours < 6 or p.sleep_hours > 9:
        score += add_trace(trace, "SleepHours_out_of_range", p.sleep_hours, 6)
    if p.sleep_quality == "poor": score += add_trace(trace, "SleepQuality_poor", p.sleep_quality, 8)
    elif p.sleep_quality == "fair": score += add_trace(trace, "SleepQuality_fair", p.sleep_quality, 4)

    if p.stress_level == "very-high": score += add_trace(trace, "Stress_very_high", p.stress_level, 12)
    elif p.stress_level == "high": score += add_trace(trace, "Stress_high", p.stress_level, 8)
    elif p.stress_level == "moderate": score += add_trace(trace, "Stress_moderate", p.stress_level, 3)

    # Diet / hydration
    if p.diet_quality == "poor": score += add_trace(trace, "Diet_poor", p.diet_quality, 12)
    elif p.diet_quality == "fair": score += add_trace(trace, "Diet_fair", p.diet_quality, 6)
    elif p.diet_quality == "excellent": score += add_trace(trace, "Diet_excellent", p.diet_quality, -3)

    if p.water_intake < 6:
        score += add_trace(trace, "Water<6", p.water_intake, 3)

    # Family history (each stacks)
    if p.heart_disease_family: score += add_trace(trace, "FHx_heart_disease", True, 12)
    if p.diabetes_family: score += add_trace(trace, "FHx_diabetes", True, 10)
    if p.stroke_family: score += add_trace(trace, "FHx_stroke", True, 8)
    if p.cancer_family: score += add_trace(trace, "FHx_cancer", True, 5)

    # Mental health
    if p.mental_health_status == "poor": score += add_trace(trace, "MentalHealth_poor", p.mental_health_status, 15)
    elif p.mental_health_status == "fair": score += add_trace(trace, "MentalHealth_fair", p.mental_health_status, 8)
    elif p.mental_health_status == "excellent": score += add_trace(trace, "MentalHealth_excellent", p.mental_health_status, -3)

    # Medical care
    if p.last_checkup == "more-than-2-years": score += add_trace(trace, "Checkup>2y", p.last_checkup, 10)
    elif p.last_checkup == "1-2-years": score += add_trace(trace, "Checkup_1-2y", p.last_checkup, 5)

    # Conditions / medications (unbounded)
    if p.chronic_conditions:
        n = len(p.chronic_conditions)
        score += add_trace(trace, "ChronicConditions", n, 8 * n)
    if p.medications:
        n = len(p.medications)
        score += add_trace(trace, "Medications", n, 3 * n)

    return score


_LEVEL_DESCRIPTIONS = {
    "low": "Low risk - Excellent health profile!",
    "moderate": "Moderate risk - Some areas for improvement",
    "high": "High risk - Important to address key factors",
    "very-high": "Very high risk - Immediate attention recommended",
}

def overall_risk_level(score: int) -> RiskLevel:
    if score <= 60: level = "low"
    elif score <= 120: level = "moderate"
    elif score <= 180: level = "high"
    else: level = "very-high"
    return RiskLevel(level=level, score=score, description=_LEVEL_DESCRIPTIONS[level])


# ----------------------------
# Disease-specific risks
# ----------------------------
def band(sub_score: int, thresholds: Tuple[int, int, int]) -> str:
    low, moderate, high = thresholds
    if sub_score <= low: return "low"
    if sub_score <= moderate: return "moderate"
    if sub_score <= high: return "high"
    return "very-high"


def cardiovascular_sub_score(p: Profile, bmi: float) -> int:
    s = 0
    if p.age > 65: s += 25
    elif p.age > 50: s += 15
    elif p.age > 35: s += 8

    if p.gender == "male": s += 8
    if p.systolic_bp >= 140 or p.diastolic_bp >= 90: s += 20
    elif p.systolic_bp >= 130: s += 12

    if p.cholesterol >= 240: s += 15
    if p.hdl_cholesterol < hdl_floor(p.gender): s += 10
    if p.ldl_cholesterol >= 160: s += 12

    if p.smoking_status == "current": s += 20
    elif p.smoking_status == "former": s += 8

    if bmi >= 30: s += 15
    elif bmi >= 25: s += 8

    if p.heart_disease_family: s += 12
    if p.exercise_frequency == "none": s += 10
    if p.stress_level == "very-high": s += 8
    return s


def diabetes_sub_score(p: Profile, bmi: float, whtr: float) -> int:
    s = 0
    if p.age > 65: s += 20
    elif p.age > 45: s += 12

    if bmi >= 30: s += 25
    elif bmi >= 25: s += 15

    if p.glucose >= 126: s += 40
    elif p.glucose >= 100: s += 20

    if p.hba1c >= 6.5: s += 40
    elif p.hba1c >= 5.7: s += 20

    if p.diabetes_family: s += 15
    if whtr > 0.5: s += 10
    if p.exercise_frequency == "none": s += 8
    return s


def stroke_sub_score(p: Profile) -> int:
    s = 0
    if p.age > 75: s += 25
    elif p.age > 65: s += 18
    elif p.age > 55: s += 10

    if p.systolic_bp >= 160: s += 25
    elif p.systolic_bp >= 140: s += 15

    if p.smoking_status == "current": s += 20
    if p.heart_disease_family or p.stroke_family: s += 12
    if p.diabetes_family and p.glucose >= 100: s += 10
    return s


def metabolic_syndrome_sub_score(p: Profile, whtr: float) -> int:
    s = 0
    if whtr > 0.5: s += 20
    if p.triglycerides >= 150: s += 15
    if p.hdl_cholesterol < hdl_floor(p.gender): s += 15
    if p.systolic_bp >= 130 or p.diastolic_bp >= 85: s += 15
    if p.glucose >= 100: s += 15
    return s


# (type, scale, cap %, level thresholds on the sub-score, description template)
DISEASE_RULES = {
    "cardiovascular": ("Cardiovascular Disease", 1.2, 85, (30, 60, 90), "{pct}% 10-year risk based on current factors"),
    "diabetes": ("Type 2 Diabetes", 0.8, 75, (25, 50, 75), "{pct}% 10-year risk based on current factors"),
    "stroke": ("Stroke", 0.6, 60, (20, 40, 60), "{pct}% 10-year risk based on current factors"),
    "metabolic_syndrome": ("Metabolic Syndrome", 1.1, 80, (20, 40, 60), "{pct}% current risk based on metabolic factors"),
}

def specific_risk(key: str, sub_score: int) -> SpecificRisk:
    name, scale, cap, thresholds, template = DISEASE_RULES[key]
    pct = min(sub_score * scale, cap)
    return SpecificRisk(
        type=name,
        level=band(sub_score, thresholds),
        percentage=pct,
        description=template.format(pct=fmt_pct(pct)),
    )

def specific_risks(p: Profile, bmi: float, whtr: float) -> Tuple[SpecificRisk, ...]:
    return (
        specific_risk("cardiovascular", cardiovascular_sub_score(p, bmi)),
        specific_risk("diabetes", diabetes_sub_score(p, bmi, whtr)),
        specific_risk("stroke", stroke_sub_score(p)),
        specific_risk("metabolic_syndrome", metabolic_syndrome_sub_score(p, whtr)),
    )


# ----------------------------
# Recommendations (fixed rule order)
# ----------------------------
def recommendations(p: Profile, bmi: float) -> Tuple[Recommendation, ...]:
    recs = []
    if bmi >= 25:
        recs.append(Recommendation(
            "Weight Management", "high",
            f"Your BMI is {bmi:.1f}. Aim to lose 5-10% of body weight through diet and exercise.",
        ))
    if p.systolic_bp >= 130 or p.diastolic_bp >= 80:
        recs.append(Recommendation(
            "Blood Pressure", "high",
            "Monitor blood pressure daily, reduce sodium intake, and consider DASH diet principles.",
        ))
    if p.glucose >= 100 or p.hba1c >= 5.7:
        recs.append(Recommendation(
            "Blood Sugar", "high",
            "Focus on low glycemic index foods, regular meal timing, and post-meal walks.",
        ))
    if p.exercise_frequency in ("none", "low"):
        recs.append(Recommendation(
            "Physical Activity", "high",
            "Aim for 150 minutes of moderate exercise weekly. Start with 10-minute walks after meals.",
        ))
    if p.smoking_status == "current":
        recs.append(Recommendation(
            "Smoking Cessation", "critical",
            "Quitting smoking is the single most important step for your health. Consider nicotine replacement therapy.",
        ))
    if p.sleep_hours < 7 or p.sleep_quality == "poor":
        recs.append(Recommendation(
            "Sleep Quality", "medium",
            "Aim for 7-9 hours of quality sleep. Maintain consistent sleep schedule and create a relaxing bedtime routine.",
        ))
    if p.stress_level in ("high", "very-high"):
        recs.append(Recommendation(
            "Stress Management", "medium",
            "Practice stress reduction techniques like meditation, deep breathing, or yoga for 10-15 minutes daily.",
        ))
    if p.diet_quality in ("poor", "fair"):
        recs.append(Recommendation(
            "Nutrition", "medium",
            "Focus on whole foods: fruits, vegetables, lean proteins, and whole grains. Limit processed foods.",
        ))
    if p.last_checkup in ("1-2-years", "more-than-2-years"):
        recs.append(Recommendation(
            "Medical Care", "medium",
            "Schedule regular checkups and screenings appropriate for your age and risk factors.",
        ))
    return tuple(recs)


# ----------------------------
# Health summary
# ----------------------------
IMMEDIATE_ACTIONS = (
    "Schedule doctor visit",
    "Start health tracking",
    "Set realistic goals",
    "Build support system",
    "Regular monitoring",
)

def health_summary(p: Profile, bmi: float) -> HealthSummary:
    strengths = []
    if p.smoking_status == "never": strengths.append("Non-smoker")
    if p.exercise_frequency == "high": strengths.append("Regular exercise")
    # Sleep/diet strengths (and the stress area below) only list for the second
    # operand of the published `a || b && item` predicate.
    if p.sleep_quality == "good": strengths.append("Good sleep quality")
    if p.diet_quality == "good": strengths.append("Healthy diet")
    if p.stress_level == "low": strengths.append("Low stress levels")

    areas = []
    if bmi >= 25: areas.append("Weight management")
    if p.systolic_bp >= 130: areas.append("Blood pressure")
    if p.glucose >= 100: areas.append("Blood sugar levels")
    if p.cholesterol >= 200: areas.append("Cholesterol levels")
    if p.stress_level == "very-high": areas.append("Stress management")

    return HealthSummary(tuple(strengths), tuple(areas), IMMEDIATE_ACTIONS)


# ----------------------------
# Public API
# ----------------------------
def assess(p: Profile) -> Assessment:
    trace: List[Dict[str, Any]] = []

    bmi = calculate_bmi(p)
    whtr = waist_to_height_ratio(p)

    overall = overall_risk_level(composite_score(p, bmi, whtr, trace))

    out = Assessment(
        overall_risk=overall,
        specific_risks=specific_risks(p, bmi, whtr),
        categorized_metrics=MappingProxyType(categorize_metrics(p, bmi, whtr)),
        recommendations=recommendations(p, bmi),
        derived=Derived(bmi=bmi, waist_to_height_ratio=whtr),
        summary=health_summary(p, bmi),
        trace=tuple(MappingProxyType(t) for t in trace),
    )

    logger.debug(
        "assessment_complete",
        score=overall.score,
        level=overall.level,
        rules_fired=len(trace),
        recommendations=len(out.recommendations),
    )
    return out


def render_quick_text(out: Assessment, p: Optional[Profile] = None) -> str:
    lvl = out.overall_risk
    d = out.derived

    lines = []
    lines.append(f"Health Risk Assessment {out.version['engine']} — Quick Reference")
    lines.append(f"Overall risk: {lvl.level} (score {lvl.score}) — {lvl.description}")
    lines.append(f"BMI {d.bmi:.1f} ({out.categorized_metrics['bmi'].category}) / "
                 f"waist-to-height {d.waist_to_height_ratio:.2f} ({out.categorized_metrics['waist_to_height'].category})")
    if p is not None:
        lines.append(f"BP {p.systolic_bp}/{p.diastolic_bp} ({out.categorized_metrics['blood_pressure'].category}); "
                     f"glucose {p.glucose:g} ({out.categorized_metrics['glucose'].category}); "
                     f"HbA1c {p.hba1c:g}% ({out.categorized_metrics['hba1c'].category})")
    lines.append("")
    lines.append("Disease-specific risk")
    for r in out.specific_risks:
        lines.append(f"• {r.type}: {r.level} — {r.description}")

    if out.recommendations:
        lines.append("")
        lines.append("Recommendations")
        for rec in out.recommendations:
            lines.append(f"• [{rec.priority}] {rec.category}: {rec.text}")

    s = out.summary
    if s.strengths:
        lines.append("")
        lines.append("Strengths: " + "; ".join(s.strengths))
    if s.areas_to_monitor:
        lines.append("Monitor: " + "; ".join(s.areas_to_monitor))
    return "\n".join(lines)
