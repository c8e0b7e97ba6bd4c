import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from risk_engine import (
    ALCOHOL_LEVELS,
    CHECKUP_INTERVALS,
    EXERCISE_FREQUENCIES,
    EXERCISE_INTENSITIES,
    GENDERS,
    PRIORITIES,
    QUALITY_LEVELS,
    RISK_LEVELS,
    SMOKING_STATUSES,
    STRESS_LEVELS,
    Profile,
    assess,
    overall_risk_level,
    render_quick_text,
)


# Starting values of the input form; composite score 33 (low)
BASE = {
    "age": 30,
    "gender": "male",
    "weight": 70,
    "height": 175,
    "waist_circumference": 85,
    "systolic_bp": 120,
    "diastolic_bp": 80,
    "resting_heart_rate": 70,
    "glucose": 90,
    "cholesterol": 180,
    "hdl_cholesterol": 50,
    "ldl_cholesterol": 100,
    "triglycerides": 150,
    "hba1c": 5.5,
    "smoking_status": "never",
    "smoking_years": 0,
    "cigarettes_per_day": 0,
    "exercise_frequency": "moderate",
    "exercise_intensity": "moderate",
    "sleep_hours": 7,
    "sleep_quality": "good",
    "stress_level": "moderate",
    "alcohol_consumption": "light",
    "diet_quality": "fair",
    "water_intake": 8,
    "mental_health_status": "good",
    "last_checkup": "6-12-months",
}

HEAVY = {
    **BASE,
    "age": 70,
    "systolic_bp": 165,
    "diastolic_bp": 102,
    "glucose": 130,
    "hba1c": 7.0,
    "cholesterol": 250,
    "hdl_cholesterol": 35,
    "ldl_cholesterol": 170,
    "triglycerides": 220,
    "smoking_status": "current",
    "cigarettes_per_day": 25,
    "smoking_years": 25,
    "exercise_frequency": "none",
    "weight": 95,
    "height": 170,
    "waist_circumference": 110,
    "heart_disease_family": True,
}

IDEAL = {
    **BASE,
    "age": 25,
    "gender": "female",
    "weight": 67.4,
    "height": 175,
    "waist_circumference": 80,
    "systolic_bp": 110,
    "diastolic_bp": 70,
    "resting_heart_rate": 60,
    "glucose": 85,
    "hba1c": 5.0,
    "cholesterol": 170,
    "hdl_cholesterol": 65,
    "ldl_cholesterol": 90,
    "triglycerides": 100,
    "exercise_frequency": "high",
    "exercise_intensity": "vigorous",
    "sleep_hours": 8,
    "sleep_quality": "excellent",
    "stress_level": "low",
    "alcohol_consumption": "none",
    "diet_quality": "excellent",
    "mental_health_status": "excellent",
    "last_checkup": "less-than-6-months",
}

RULE_ORDER = [
    "Weight Management",
    "Blood Pressure",
    "Blood Sugar",
    "Physical Activity",
    "Smoking Cessation",
    "Sleep Quality",
    "Stress Management",
    "Nutrition",
    "Medical Care",
]


def _profile(**overrides) -> Profile:
    return Profile(**{**BASE, **overrides})


def _rand_profile(rng: random.Random) -> Profile:
    """Bounded synthetic profiles inside the form's input ranges."""
    n_cond = rng.randint(0, 4)
    n_meds = rng.randint(0, 6)
    return Profile(
        age=rng.randint(18, 95),
        gender=rng.choice(GENDERS),
        weight=round(rng.uniform(45, 160), 1),
        height=round(rng.uniform(150, 200), 1),
        waist_circumference=round(rng.uniform(60, 140), 1),
        systolic_bp=rng.randint(95, 200),
        diastolic_bp=rng.randint(55, 120),
        resting_heart_rate=rng.randint(45, 120),
        glucose=rng.randint(70, 250),
        cholesterol=rng.randint(120, 320),
        hdl_cholesterol=rng.randint(25, 90),
        ldl_cholesterol=rng.randint(50, 240),
        triglycerides=rng.randint(60, 600),
        hba1c=round(rng.uniform(4.5, 10.0), 1),
        smoking_status=rng.choice(SMOKING_STATUSES),
        smoking_years=rng.randint(0, 50),
        cigarettes_per_day=rng.randint(0, 40),
        exercise_frequency=rng.choice(EXERCISE_FREQUENCIES),
        exercise_intensity=rng.choice(EXERCISE_INTENSITIES),
        sleep_hours=rng.choice([4, 5.5, 6, 7, 8, 9, 9.5, 11]),
        sleep_quality=rng.choice(QUALITY_LEVELS),
        stress_level=rng.choice(STRESS_LEVELS),
        alcohol_consumption=rng.choice(ALCOHOL_LEVELS),
        diet_quality=rng.choice(QUALITY_LEVELS),
        water_intake=rng.randint(0, 12),
        mental_health_status=rng.choice(QUALITY_LEVELS),
        last_checkup=rng.choice(CHECKUP_INTERVALS),
        heart_disease_family=rng.random() < 0.3,
        diabetes_family=rng.random() < 0.3,
        stroke_family=rng.random() < 0.2,
        cancer_family=rng.random() < 0.2,
        medications=tuple(f"med{i}" for i in range(n_meds)),
        chronic_conditions=tuple(f"cond{i}" for i in range(n_cond)),
    )


def test_overall_band_boundaries():
    expected = {
        60: "low",
        61: "moderate",
        120: "moderate",
        121: "high",
        180: "high",
        181: "very-high",
        -11: "low",
        420: "very-high",
    }
    for score, level in expected.items():
        got = overall_risk_level(score)
        assert got.level == level, score
        assert got.score == score


def test_base_profile_score():
    out = assess(_profile())
    assert out.overall_risk.score == 33
    assert out.overall_risk.level == "low"
    assert out.overall_risk.description == "Low risk - Excellent health profile!"


def test_heavy_risk_profile_is_very_high_with_capped_cardiovascular_risk():
    out = assess(Profile(**HEAVY))
    assert out.overall_risk.level == "very-high"
    assert out.overall_risk.score == 262

    cvd = out.specific_risks[0]
    assert cvd.type == "Cardiovascular Disease"
    assert cvd.level == "very-high"
    assert cvd.percentage == 85
    assert cvd.description == "85% 10-year risk based on current factors"


def test_ideal_profile_is_low_with_deductions_and_no_recommendations():
    out = assess(Profile(**IDEAL))
    assert out.overall_risk.level == "low"
    # vigorous exercise (-5), excellent diet (-3), excellent mental health (-3)
    assert out.overall_risk.score == -11
    assert [t["points"] for t in out.trace] == [-5, -3, -3]
    assert out.recommendations == ()
    assert all(r.level == "low" for r in out.specific_risks)


def test_ideal_profile_summary_lists_only_literal_strengths():
    out = assess(Profile(**IDEAL))
    # excellent sleep/diet do not list a strength; only "good" does
    assert out.summary.strengths == ("Non-smoker", "Regular exercise", "Low stress levels")
    assert out.summary.areas_to_monitor == ()

    good = assess(Profile(**{**IDEAL, "sleep_quality": "good", "diet_quality": "good"}))
    assert "Good sleep quality" in good.summary.strengths
    assert "Healthy diet" in good.summary.strengths


def test_stress_area_to_monitor_only_for_very_high():
    assert "Stress management" not in assess(_profile(stress_level="high")).summary.areas_to_monitor
    assert "Stress management" in assess(_profile(stress_level="very-high")).summary.areas_to_monitor


def test_conditions_and_medications_are_unbounded_linear():
    base = assess(_profile()).overall_risk.score
    for n in (1, 3, 10, 40):
        with_conditions = assess(_profile(chronic_conditions=tuple(f"c{i}" for i in range(n))))
        with_meds = assess(_profile(medications=tuple(f"m{i}" for i in range(n))))
        assert with_conditions.overall_risk.score - base == 8 * n
        assert with_meds.overall_risk.score - base == 3 * n


def test_score_has_no_upper_clamp():
    out = assess(Profile(**{**HEAVY, "chronic_conditions": tuple("abcdefghij")}))
    assert out.overall_risk.score > 300


def test_smoking_addends_stack_only_for_current_smokers():
    never = assess(_profile()).overall_risk.score
    current = assess(_profile(smoking_status="current", cigarettes_per_day=21, smoking_years=21)).overall_risk.score
    former = assess(_profile(smoking_status="former", cigarettes_per_day=40, smoking_years=30)).overall_risk.score
    assert current - never == 25 + 10 + 8
    assert former - never == 8


def test_sleep_hours_penalty_is_flat():
    base = assess(_profile()).overall_risk.score
    for hours in (3, 5.9, 9.1, 12):
        assert assess(_profile(sleep_hours=hours)).overall_risk.score - base == 6
    for hours in (6, 9):
        assert assess(_profile(sleep_hours=hours)).overall_risk.score == base


def test_assess_is_deterministic_and_trace_sums_to_score():
    rng = random.Random(20261019)
    for _ in range(150):
        p = _rand_profile(rng)
        a = assess(p)
        b = assess(p)
        assert a == b
        assert sum(t["points"] for t in a.trace) == a.overall_risk.score


def test_recommendation_order_follows_rule_order():
    rng = random.Random(7)
    for _ in range(200):
        out = assess(_rand_profile(rng))
        cats = [r.category for r in out.recommendations]
        idx = [RULE_ORDER.index(c) for c in cats]
        assert idx == sorted(idx)
        assert len(set(cats)) == len(cats)
        assert all(r.priority in PRIORITIES for r in out.recommendations)
        assert out.overall_risk.level in RISK_LEVELS


def test_recommendations_are_not_sorted_by_priority():
    out = assess(Profile(**{**HEAVY, "sleep_quality": "poor", "last_checkup": "more-than-2-years"}))
    cats = [r.category for r in out.recommendations]
    assert cats == [
        "Weight Management",
        "Blood Pressure",
        "Blood Sugar",
        "Physical Activity",
        "Smoking Cessation",
        "Sleep Quality",
        "Nutrition",
        "Medical Care",
    ]
    assert out.recommendations[0].text.startswith("Your BMI is 32.9.")
    assert out.recommendations[4].priority == "critical"


def test_specific_risks_fixed_order_and_caps():
    rng = random.Random(99)
    caps = {"Cardiovascular Disease": 85, "Type 2 Diabetes": 75, "Stroke": 60, "Metabolic Syndrome": 80}
    for _ in range(200):
        out = assess(_rand_profile(rng))
        assert [r.type for r in out.specific_risks] == list(caps)
        for r in out.specific_risks:
            assert 0 <= r.percentage <= caps[r.type]


def test_derived_values_and_categories_present():
    out = assess(_profile())
    assert round(out.derived.bmi, 2) == 22.86
    assert round(out.derived.waist_to_height_ratio, 3) == 0.486
    assert out.categorized_metrics["bmi"].category == "Normal"
    assert out.categorized_metrics["blood_pressure"].category == "High (Stage 1)"
    assert out.categorized_metrics["smoking"].category == "Never"
    assert out.categorized_metrics["family_history"].category == "None"

    cancer_only = assess(_profile(cancer_family=True))
    assert cancer_only.categorized_metrics["family_history"].category == "None"


def test_quick_text_mentions_each_disease_and_recommendation():
    p = Profile(**HEAVY)
    out = assess(p)
    txt = render_quick_text(out, p)
    for r in out.specific_risks:
        assert r.type in txt
    assert "Smoking Cessation" in txt
    assert "BP 165/102" in txt


def test_heart_rate_ladder_boundaries():
    base = assess(_profile()).overall_risk.score
    for bpm, points in ((80, 0), (81, 4), (100, 4), (101, 8)):
        assert assess(_profile(resting_heart_rate=bpm)).overall_risk.score - base == points, bpm


def test_alcohol_ladder():
    base = assess(_profile()).overall_risk.score
    for level, points in (("none", 0), ("light", 0), ("moderate", 4), ("heavy", 12)):
        assert assess(_profile(alcohol_consumption=level)).overall_risk.score - base == points, level


def test_water_intake_below_six_glasses():
    base = assess(_profile()).overall_risk.score
    for glasses, points in ((6, 0), (5, 3), (0, 3)):
        assert assess(_profile(water_intake=glasses)).overall_risk.score - base == points, glasses


def test_last_checkup_ladder():
    base = assess(_profile()).overall_risk.score
    for interval, points in (
        ("less-than-6-months", 0),
        ("6-12-months", 0),
        ("1-2-years", 5),
        ("more-than-2-years", 10),
    ):
        assert assess(_profile(last_checkup=interval)).overall_risk.score - base == points, interval


def test_waist_to_height_steps_are_exclusive():
    # height 175: waist 87.5 -> 0.5, waist 105 -> 0.6
    base = assess(_profile()).overall_risk.score
    for waist, points in ((87.5, 0), (88, 4), (105, 4), (106, 8)):
        assert assess(_profile(waist_circumference=waist)).overall_risk.score - base == points, waist


def test_assessment_mappings_are_read_only():
    out = assess(_profile())
    with pytest.raises(TypeError):
        out.categorized_metrics["bmi"] = None
    with pytest.raises(TypeError):
        out.version["engine"] = "tampered"
    with pytest.raises(TypeError):
        out.trace[0]["points"] = 0
