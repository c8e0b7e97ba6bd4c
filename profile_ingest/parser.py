# profile_ingest/parser.py
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class ParseReport:
    extracted: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)


def _norm(s: str) -> str:
    return (s or "").strip()


def _to_float(s: str) -> Optional[float]:
    if not s:
        return None
    m = re.search(r"-?\d+(?:\.\d+)?", s.replace(",", ""))
    return float(m.group(0)) if m else None


def _to_int(s: str) -> Optional[int]:
    v = _to_float(s)
    return int(round(v)) if v is not None else None


def _yesno(s: str) -> Optional[bool]:
    if s is None:
        return None
    t = _norm(str(s)).lower()
    if t.startswith("yes") or t in ("y", "true"):
        return True
    if t.startswith("no") or t in ("n", "false", "none"):
        return False
    return None


def _line_value(text: str, label_regex: str) -> Optional[str]:
    """
    Extracts 'Label: value' lines (case-insensitive, multiline).
    label_regex should be regex-safe (e.g., r"HbA1c", r"Waist(?: circumference)?").
    """
    pat = re.compile(rf"^\s*{label_regex}\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE)
    m = pat.search(text or "")
    return _norm(m.group(1)) if m else None


def _first_line_value(text: str, *label_regexes: str) -> Optional[str]:
    for rx in label_regexes:
        v = _line_value(text, rx)
        if v:
            return v
    return None


def _choice(raw: Optional[str], options: Dict[str, Tuple[str, ...]]) -> Optional[str]:
    """
    Map free text to one of the closed option sets.
    options: {value: (keywords...)}; first keyword hit wins, checked in dict order.
    """
    if not raw:
        return None
    t = _norm(raw).lower()
    for value, keywords in options.items():
        if any(k in t for k in keywords):
            return value
    logger.debug("unrecognized_choice", raw=raw, options=list(options))
    return None


# Whole-value answers meaning "nothing to list"
_EMPTY_LIST_TOKENS = ("no", "none", "n/a", "na", "nil", "-")

def _items(raw: Optional[str]) -> List[str]:
    if not raw or _norm(raw).lower().rstrip(".") in _EMPTY_LIST_TOKENS:
        return []
    return [x.strip() for x in re.split(r"[,;]", raw) if x.strip()]


_GENDER = {"female": ("female", "woman"), "male": ("male", "man")}
_SMOKING = {"never": ("never", "non"), "former": ("former", "ex-", "quit"), "current": ("current", "smoker", "smokes")}
_EXERCISE = {"none": ("none", "no exercise", "sedentary"), "low": ("low", "1-2"), "moderate": ("moderate", "3-4"), "high": ("high", "5+", "daily")}
_INTENSITY = {"vigorous": ("vigorous", "running", "hiit"), "moderate": ("moderate", "brisk", "cycling"), "light": ("light", "walking", "gentle")}
_QUALITY = {"excellent": ("excellent",), "good": ("good",), "fair": ("fair",), "poor": ("poor",)}
_STRESS = {"very-high": ("very high", "very-high"), "high": ("high",), "moderate": ("moderate",), "low": ("low",)}
_ALCOHOL = {"none": ("none", "never", "abstain"), "heavy": ("heavy",), "moderate": ("moderate",), "light": ("light", "occasional")}
_CHECKUP = {
    "less-than-6-months": ("less than 6", "<6", "< 6"),
    "6-12-months": ("6-12", "6 to 12"),
    "1-2-years": ("1-2", "1 to 2"),
    "more-than-2-years": ("more than 2", ">2", "> 2", "never"),
}

# Fields the engine cannot run without; reported when absent
_KEY_FIELDS = [
    ("age", "Age"),
    ("gender", "Gender"),
    ("weight", "Weight"),
    ("height", "Height"),
    ("systolic_bp", "Blood pressure"),
    ("glucose", "Glucose"),
    ("hba1c", "HbA1c"),
    ("cholesterol", "Total cholesterol"),
    ("hdl_cholesterol", "HDL"),
    ("ldl_cholesterol", "LDL"),
    ("triglycerides", "Triglycerides"),
]


def parse_profile_text(text: str) -> ParseReport:
    """
    Best-effort extraction from a pasted 'Label: value' block (intake notes,
    device exports). Returns builder field names → values plus warnings for
    key fields that were not found. Never raises on odd text.
    """
    t = text or ""
    out: Dict[str, Any] = {}
    warnings: List[str] = []

    # ---------- Demographics / body ----------
    age = _line_value(t, r"Age")
    if age:
        out["age"] = _to_int(age)

    g = _choice(_first_line_value(t, r"Sex", r"Gender"), _GENDER)
    if g:
        out["gender"] = g

    w = _first_line_value(t, r"Weight")
    if w:
        val = _to_float(w)
        if val is not None and re.search(r"\blbs?\b", w, re.IGNORECASE):
            val = round(val * 0.45359237, 1)
        out["weight"] = val

    h = _first_line_value(t, r"Height")
    if h:
        out["height"] = _to_float(h)

    waist = _first_line_value(t, r"Waist(?:\s+circumference)?")
    if waist:
        out["waist_circumference"] = _to_float(waist)

    # ---------- Vitals ----------
    bp = _first_line_value(t, r"Blood pressure", r"BP")
    if bp:
        m = re.search(r"(\d{2,3})\s*/\s*(\d{2,3})", bp)
        if m:
            out["systolic_bp"], out["diastolic_bp"] = int(m.group(1)), int(m.group(2))
        else:
            warnings.append(f"Blood pressure not in systolic/diastolic form: {bp}")

    hr = _first_line_value(t, r"Resting heart rate", r"Heart rate", r"Pulse")
    if hr:
        out["resting_heart_rate"] = _to_int(hr)

    # ---------- Labs ----------
    glucose = _first_line_value(t, r"(?:Fasting\s+)?Glucose")
    if glucose:
        out["glucose"] = _to_float(glucose)

    a1c = _first_line_value(t, r"HbA1c", r"A1c")
    if a1c:
        out["hba1c"] = _to_float(a1c)

    tc = _first_line_value(t, r"Total cholesterol", r"Cholesterol")
    if tc:
        out["cholesterol"] = _to_float(tc)

    hdl = _first_line_value(t, r"HDL(?:\s+cholesterol)?")
    if hdl:
        out["hdl_cholesterol"] = _to_float(hdl)

    ldl = _first_line_value(t, r"LDL(?:-C)?(?:\s+cholesterol)?")
    if ldl:
        out["ldl_cholesterol"] = _to_float(ldl)

    tg = _first_line_value(t, r"Triglycerides", r"TG")
    if tg:
        out["triglycerides"] = _to_float(tg)

    # ---------- Lifestyle ----------
    sm = _choice(_first_line_value(t, r"Smoking(?:\s+status)?", r"Tobacco"), _SMOKING)
    if sm:
        out["smoking_status"] = sm

    cpd = _first_line_value(t, r"Cigarettes(?:\s+per\s+day)?")
    if cpd:
        out["cigarettes_per_day"] = _to_int(cpd)

    sy = _first_line_value(t, r"Smoking years", r"Years smoked")
    if sy:
        out["smoking_years"] = _to_int(sy)

    for key, labels, options in [
        ("exercise_frequency", (r"Exercise(?:\s+frequency)?",), _EXERCISE),
        ("exercise_intensity", (r"Exercise intensity", r"Intensity"), _INTENSITY),
        ("sleep_quality", (r"Sleep quality",), _QUALITY),
        ("stress_level", (r"Stress(?:\s+level)?",), _STRESS),
        ("alcohol_consumption", (r"Alcohol(?:\s+consumption)?",), _ALCOHOL),
        ("diet_quality", (r"Diet(?:\s+quality)?",), _QUALITY),
        ("mental_health_status", (r"Mental health(?:\s+status)?", r"Mood"), _QUALITY),
        ("last_checkup", (r"Last checkup", r"Last medical checkup"), _CHECKUP),
    ]:
        v = _choice(_first_line_value(t, *labels), options)
        if v:
            out[key] = v

    sleep = _first_line_value(t, r"Sleep(?:\s+hours)?")
    if sleep:
        out["sleep_hours"] = _to_float(sleep)

    water = _first_line_value(t, r"Water(?:\s+intake)?")
    if water:
        out["water_intake"] = _to_int(water)

    # ---------- Family history / medical ----------
    for key, label in [
        ("heart_disease_family", r"Family history of heart disease|Heart disease in family"),
        ("diabetes_family", r"Family history of diabetes|Diabetes in family"),
        ("stroke_family", r"Family history of stroke|Stroke in family"),
        ("cancer_family", r"Family history of cancer|Cancer in family"),
    ]:
        yn = _yesno(_line_value(t, rf"(?:{label})"))
        if yn is not None:
            out[key] = yn

    meds = _first_line_value(t, r"Medications", r"Current medications")
    if meds is not None:
        out["medications"] = _items(meds)

    cond = _first_line_value(t, r"Chronic conditions", r"Conditions")
    if cond is not None:
        out["chronic_conditions"] = _items(cond)

    # drop anything that failed numeric conversion
    out = {k: v for k, v in out.items() if v is not None}

    for key, label in _KEY_FIELDS:
        if key not in out:
            warnings.append(f"{label} not detected")

    return ParseReport(extracted=out, warnings=warnings)
