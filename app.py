# app.py
# ============================================================
# Health Risk Assessment: Streamlit app with:
# - Five-step input form (values kept in session_state between steps)
# - Optional paste-to-prefill ("Label: value" block)
# - Per-step validation messages; engine runs only on a complete profile
# - Results: overall gauge, disease cards, metric categories,
#   recommendations, summary, quick text, score breakdown
# ============================================================

from __future__ import annotations

from typing import Any, Dict

import streamlit as st
import structlog

from config import settings
from log_config import configure_logging
from profile_builder import (
    DEFAULT_FORM_VALUES,
    SECTIONS,
    ProfileBuilder,
    ProfileValidationError,
    split_items,
)
from profile_ingest.parser import parse_profile_text
from risk_engine import (
    ALCOHOL_LEVELS,
    CHECKUP_INTERVALS,
    EXERCISE_FREQUENCIES,
    EXERCISE_INTENSITIES,
    GENDERS,
    QUALITY_LEVELS,
    SMOKING_STATUSES,
    STRESS_LEVELS,
    VERSION,
    assess,
    render_quick_text,
)
from risk_output_adapter import assessment_to_dict
from ui_components import (
    render_recommendation,
    render_risk_gauge,
    render_section_progress,
    render_specific_risk_card,
    severity_badge,
)

configure_logging(settings)
logger = structlog.get_logger(__name__)


# ============================================================
# Styling
# ============================================================

st.set_page_config(page_title=settings.app_name, layout="wide")

st.markdown(
    """
<style>
html, body, [class*="css"] {
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Inter, "Helvetica Neue", Arial, sans-serif;
  color: #111827;
}

.smallcaps {
  font-variant: all-small-caps;
  letter-spacing: 0.06em;
  color: rgba(17,24,39,0.72);
}

.card {
  background: #ffffff;
  border: 1px solid rgba(17,24,39,0.12);
  border-radius: 16px;
  padding: 16px;
}

.muted {
  color: rgba(17,24,39,0.65);
  font-size: 0.92rem;
}

pre {
  white-space: pre-wrap !important;
  word-wrap: break-word !important;
}
</style>
""",
    unsafe_allow_html=True,
)


# ============================================================
# Session state
# ============================================================

if "form_values" not in st.session_state:
    st.session_state["form_values"] = dict(DEFAULT_FORM_VALUES)
if "step" not in st.session_state:
    st.session_state["step"] = 0

values: Dict[str, Any] = st.session_state["form_values"]

LABELS = {
    "exercise_frequency": {
        "none": "No exercise", "low": "1-2 times per week",
        "moderate": "3-4 times per week", "high": "5+ times per week",
    },
    "exercise_intensity": {
        "light": "Light (walking, gentle yoga)", "moderate": "Moderate (brisk walking, cycling)",
        "vigorous": "Vigorous (running, HIIT, sports)",
    },
    "smoking_status": {"never": "Never smoked", "former": "Former smoker", "current": "Current smoker"},
    "alcohol_consumption": {
        "none": "None", "light": "Light (1-3 drinks per week)",
        "moderate": "Moderate (4-7 drinks per week)", "heavy": "Heavy (8+ drinks per week)",
    },
    "last_checkup": {
        "less-than-6-months": "Less than 6 months ago", "6-12-months": "6-12 months ago",
        "1-2-years": "1-2 years ago", "more-than-2-years": "More than 2 years ago",
    },
}


def _select(name: str, label: str, options) -> None:
    opts = list(options)
    current = values.get(name, opts[0])
    labels = LABELS.get(name, {})
    values[name] = st.selectbox(
        label, opts,
        index=opts.index(current) if current in opts else 0,
        format_func=lambda o: labels.get(o, o.replace("-", " ").title()),
        key=f"f_{name}",
    )


def _clamped(name: str, lo: float, hi: float) -> float:
    v = values.get(name)
    return lo if v is None else min(max(float(v), lo), hi)


def _int(name: str, label: str, lo: int, hi: int) -> None:
    values[name] = int(st.number_input(label, lo, hi, value=int(_clamped(name, lo, hi)), step=1, key=f"f_{name}"))


def _float(name: str, label: str, lo: float, hi: float, step: float) -> None:
    values[name] = float(st.number_input(label, float(lo), float(hi), value=_clamped(name, float(lo), float(hi)), step=float(step), key=f"f_{name}"))


# ============================================================
# Header
# ============================================================

st.markdown(
    f"""
<div class="card">
  <div style="display:flex;justify-content:space-between;align-items:center;gap:12px;">
    <div>
      <div class="smallcaps">{settings.app_name}</div>
      <div style="font-size:1.35rem;font-weight:700;margin-top:4px;">Profile → validate → assess</div>
      <div class="muted" style="margin-top:4px;">Rule-based screening estimate. Not a diagnosis; review results with a clinician.</div>
    </div>
    <div style="text-align:right;">
      <span class="smallcaps">Engine {VERSION['engine']} · App v{settings.version}</span>
    </div>
  </div>
</div>
""",
    unsafe_allow_html=True,
)

result = st.session_state.get("last_result")


# ============================================================
# Form
# ============================================================

if result is None:
    with st.expander("Paste a profile block to pre-fill (optional)"):
        raw_text = st.text_area("Label: value lines", height=180, key="raw_text",
                                placeholder="Age: 52\nSex: female\nBlood pressure: 134/86\nHbA1c: 5.9\n...")
        if st.button("Parse and pre-fill"):
            report = parse_profile_text(raw_text)
            values.update(report.extracted)
            for k in report.extracted:
                st.session_state.pop(f"f_{k}", None)
            for w in report.warnings:
                st.warning(w)
            st.success(f"Pre-filled {len(report.extracted)} field(s).")

    step = st.session_state["step"]
    st.markdown(render_section_progress(step, SECTIONS), unsafe_allow_html=True)

    if step == 0:
        c1, c2 = st.columns(2)
        with c1:
            _int("age", "Age", 18, 120)
            _select("gender", "Gender", GENDERS)
            _float("weight", "Weight (kg)", 30, 300, 0.5)
        with c2:
            _float("height", "Height (cm)", 120, 250, 0.5)
            _float("waist_circumference", "Waist Circumference (cm)", 50, 200, 0.5)
            _select("last_checkup", "Last Medical Checkup", CHECKUP_INTERVALS)

    elif step == 1:
        c1, c2 = st.columns(2)
        with c1:
            _int("systolic_bp", "Systolic BP (mmHg)", 80, 250)
            _int("diastolic_bp", "Diastolic BP (mmHg)", 40, 150)
            _int("resting_heart_rate", "Resting Heart Rate (bpm)", 40, 120)
            _float("glucose", "Fasting Glucose (mg/dL)", 50, 400, 1.0)
            _float("hba1c", "HbA1c (%)", 4, 15, 0.1)
        with c2:
            _float("cholesterol", "Total Cholesterol (mg/dL)", 100, 400, 1.0)
            _float("hdl_cholesterol", "HDL Cholesterol (mg/dL)", 20, 100, 1.0)
            _float("ldl_cholesterol", "LDL Cholesterol (mg/dL)", 50, 300, 1.0)
            _float("triglycerides", "Triglycerides (mg/dL)", 50, 1000, 1.0)

    elif step == 2:
        c1, c2 = st.columns(2)
        with c1:
            _select("exercise_frequency", "Exercise Frequency", EXERCISE_FREQUENCIES)
            _select("exercise_intensity", "Exercise Intensity", EXERCISE_INTENSITIES)
            _select("smoking_status", "Smoking Status", SMOKING_STATUSES)
            if values.get("smoking_status") != "never":
                _int("smoking_years", "Years Smoking", 0, 80)
                _int("cigarettes_per_day", "Cigarettes per Day", 0, 100)
            _select("alcohol_consumption", "Alcohol Consumption", ALCOHOL_LEVELS)
        with c2:
            _select("diet_quality", "Diet Quality", QUALITY_LEVELS)
            _int("water_intake", "Water Intake (glasses/day)", 0, 20)
            _float("sleep_hours", "Sleep Hours per Night", 3, 12, 0.5)
            _select("sleep_quality", "Sleep Quality", QUALITY_LEVELS)
            _select("stress_level", "Stress Level", STRESS_LEVELS)

    elif step == 3:
        c1, c2 = st.columns(2)
        with c1:
            st.markdown("**Family history**")
            for name, label in [
                ("heart_disease_family", "Heart Disease"),
                ("diabetes_family", "Diabetes"),
                ("stroke_family", "Stroke"),
                ("cancer_family", "Cancer"),
            ]:
                values[name] = st.checkbox(label, value=bool(values.get(name)), key=f"f_{name}")
        with c2:
            meds = st.text_area("Current Medications (comma-separated)", value=", ".join(values.get("medications") or []),
                                placeholder="e.g., Lisinopril, Metformin, Aspirin", key="f_medications")
            conds = st.text_area("Chronic Conditions (comma-separated)", value=", ".join(values.get("chronic_conditions") or []),
                                 placeholder="e.g., Hypertension, Type 2 Diabetes, Arthritis", key="f_chronic_conditions")
            values["medications"] = split_items(meds)
            values["chronic_conditions"] = split_items(conds)

    else:
        _select("mental_health_status", "Mental Health Status", QUALITY_LEVELS)

    builder = ProfileBuilder(values)
    problems = builder.section_errors(step)
    for p in problems:
        st.warning(p)

    b1, b2, _ = st.columns([1, 1, 3])
    with b1:
        if st.button("Back", disabled=(step == 0), use_container_width=True):
            st.session_state["step"] = step - 1
            st.rerun()
    with b2:
        last = step == len(SECTIONS) - 1
        if st.button("Assess" if last else "Next", type="primary", disabled=bool(problems), use_container_width=True):
            if not last:
                st.session_state["step"] = step + 1
                st.rerun()
            try:
                profile = builder.build()
            except ProfileValidationError as e:
                for msg in e.errors:
                    st.error(msg)
            else:
                st.session_state["last_profile"] = profile
                st.session_state["last_result"] = assess(profile)
                logger.info("assessment_rendered", level=st.session_state["last_result"].overall_risk.level)
                st.rerun()


# ============================================================
# Results
# ============================================================

else:
    profile = st.session_state.get("last_profile")
    lvl = result.overall_risk

    st.markdown(render_risk_gauge(lvl.level, lvl.score, lvl.description), unsafe_allow_html=True)

    st.markdown("#### Disease-specific risk")
    cols = st.columns(len(result.specific_risks))
    for col, risk in zip(cols, result.specific_risks):
        with col:
            st.markdown(render_specific_risk_card(risk), unsafe_allow_html=True)

    st.markdown("#### Health metrics")
    d = result.derived
    m = result.categorized_metrics
    rows = [
        ("BMI", f"{d.bmi:.1f}", m["bmi"]),
        ("Waist-to-height", f"{d.waist_to_height_ratio:.2f}", m["waist_to_height"]),
        ("Blood pressure", f"{profile.systolic_bp}/{profile.diastolic_bp}", m["blood_pressure"]),
        ("Resting heart rate", f"{profile.resting_heart_rate} bpm", m["resting_heart_rate"]),
        ("Glucose", f"{profile.glucose:g} mg/dL", m["glucose"]),
        ("HbA1c", f"{profile.hba1c:g}%", m["hba1c"]),
        ("Total cholesterol", f"{profile.cholesterol:g} mg/dL", m["cholesterol"]),
        ("HDL", f"{profile.hdl_cholesterol:g} mg/dL", m["hdl_cholesterol"]),
        ("LDL", f"{profile.ldl_cholesterol:g} mg/dL", m["ldl_cholesterol"]),
        ("Triglycerides", f"{profile.triglycerides:g} mg/dL", m["triglycerides"]),
        ("Exercise", "", m["exercise"]),
        ("Sleep", "", m["sleep"]),
        ("Stress", "", m["stress"]),
        ("Smoking", "", m["smoking"]),
        ("Family history", "", m["family_history"]),
    ]
    c1, c2 = st.columns(2)
    half = (len(rows) + 1) // 2
    for col, chunk in ((c1, rows[:half]), (c2, rows[half:])):
        with col:
            for label, val, cat in chunk:
                st.markdown(f"{label}: {val} {severity_badge(cat.category, cat.severity)}", unsafe_allow_html=True)

    st.markdown("#### Personalized recommendations")
    if result.recommendations:
        for rec in result.recommendations:
            st.markdown(render_recommendation(rec.category, rec.priority, rec.text), unsafe_allow_html=True)
    else:
        st.markdown('<div class="muted">No specific recommendations — keep it up.</div>', unsafe_allow_html=True)

    st.markdown("#### Health summary & next steps")
    s1, s2, s3 = st.columns(3)
    with s1:
        st.markdown("**Strengths**")
        for item in result.summary.strengths:
            st.markdown(f"- {item}")
    with s2:
        st.markdown("**Areas to monitor**")
        for item in result.summary.areas_to_monitor:
            st.markdown(f"- {item}")
    with s3:
        st.markdown("**Immediate actions**")
        for item in result.summary.immediate_actions:
            st.markdown(f"- {item}")

    st.markdown("#### Quick text")
    st.code(render_quick_text(result, profile))

    if settings.show_score_trace:
        with st.expander("Score breakdown"):
            st.table([{"rule": t["rule"], "value": str(t["value"]), "points": t["points"]} for t in result.trace])

    with st.expander("Debug: JSON output"):
        st.json(assessment_to_dict(result))

    if st.button("Start a new assessment", type="primary"):
        for k in ("last_result", "last_profile"):
            st.session_state.pop(k, None)
        st.session_state["step"] = 0
        st.rerun()
