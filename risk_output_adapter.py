# risk_output_adapter.py
# Output adapter: converts the engine's Assessment into the camelCase JSON
# contract the web front end consumes, and camelCase HealthData back into a Profile.

import re
from typing import Any, Dict

from profile_builder import ProfileBuilder, ProfileForm
from risk_engine import Assessment, Category, Profile, SCORE_GAUGE_MAX


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)

def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


# Front-end keys that do not follow the plain snake→camel rule
_PROFILE_KEY_OVERRIDES = {
    "systolicBP": "systolic_bp",
    "diastolicBP": "diastolic_bp",
    "hba1c": "hba1c",
}

def _category(c: Category) -> Dict[str, str]:
    return {"category": c.category, "severity": c.severity}

def gauge_percent(score: int) -> float:
    """Overall-score bar fill; the score itself is never clamped."""
    return max(0.0, min(score / SCORE_GAUGE_MAX * 100, 100.0))


def assessment_to_dict(out: Assessment) -> Dict[str, Any]:
    """
    CamelCase assessment contract.
    Order of specificRisks and recommendations is preserved from the engine.
    """
    lvl = out.overall_risk
    return {
        "version": dict(out.version),
        "overallRisk": {
            "level": lvl.level,
            "score": lvl.score,
            "description": lvl.description,
            "gaugePercent": round(gauge_percent(lvl.score), 1),
        },
        "specificRisks": [
            {
                "type": r.type,
                "level": r.level,
                "percentage": r.percentage,
                "description": r.description,
            }
            for r in out.specific_risks
        ],
        "categorizedMetrics": {_camel(k): _category(v) for k, v in out.categorized_metrics.items()},
        "recommendations": [
            {"category": rec.category, "priority": rec.priority, "text": rec.text}
            for rec in out.recommendations
        ],
        "derived": {
            "bmi": round(out.derived.bmi, 1),
            "waistToHeightRatio": round(out.derived.waist_to_height_ratio, 2),
        },
        "summary": {
            "strengths": list(out.summary.strengths),
            "areasToMonitor": list(out.summary.areas_to_monitor),
            "immediateActions": list(out.summary.immediate_actions),
        },
        "scoreTrace": [dict(t) for t in out.trace],
    }


def profile_fields_from_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map HealthData-style keys (camelCase) to builder field names.
    Unknown keys (e.g. the unused `familyHistory` flag) are dropped.
    """
    known = set(ProfileForm.model_fields)
    fields: Dict[str, Any] = {}
    for key, value in (data or {}).items():
        name = _PROFILE_KEY_OVERRIDES.get(key) or _snake(key)
        if name in known:
            fields[name] = value
    return fields


def profile_from_dict(data: Dict[str, Any]) -> Profile:
    """Build a validated Profile from a camelCase payload (raises ProfileValidationError)."""
    return ProfileBuilder(profile_fields_from_dict(data)).build()
