# profile_builder.py
# Collects form values step by step and only hands the engine a complete,
# validated Profile. Bounds live here (the engine itself never re-validates).

from typing import Any, Dict, List, Literal, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from risk_engine import Profile

logger = structlog.get_logger(__name__)


SECTIONS = (
    "Personal Information",
    "Vital Signs & Lab Results",
    "Lifestyle Factors",
    "Family History & Medical",
    "Mental Health & Wellness",
)

SECTION_FIELDS: Tuple[Tuple[str, ...], ...] = (
    ("age", "gender", "weight", "height", "waist_circumference", "last_checkup"),
    (
        "systolic_bp", "diastolic_bp", "resting_heart_rate", "glucose", "hba1c",
        "cholesterol", "hdl_cholesterol", "ldl_cholesterol", "triglycerides",
    ),
    (
        "exercise_frequency", "exercise_intensity", "smoking_status", "smoking_years",
        "cigarettes_per_day", "alcohol_consumption", "diet_quality", "water_intake",
        "sleep_hours", "sleep_quality", "stress_level",
    ),
    (
        "heart_disease_family", "diabetes_family", "stroke_family", "cancer_family",
        "medications", "chronic_conditions",
    ),
    ("mental_health_status",),
)

LIST_FIELDS = ("medications", "chronic_conditions")

# Starting values of the web form
DEFAULT_FORM_VALUES: Dict[str, Any] = {
    "age": 30,
    "gender": "male",
    "weight": 70,
    "height": 175,
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
    "heart_disease_family": False,
    "diabetes_family": False,
    "stroke_family": False,
    "cancer_family": False,
    "medications": [],
    "chronic_conditions": [],
    "waist_circumference": 85,
    "diet_quality": "fair",
    "water_intake": 8,
    "mental_health_status": "good",
    "last_checkup": "6-12-months",
}

Quality = Literal["poor", "fair", "good", "excellent"]


class ProfileForm(BaseModel):
    """Validated form payload; mirrors the input bounds of the web form."""

    model_config = ConfigDict(extra="forbid")

    age: int = Field(ge=18, le=120)
    gender: Literal["male", "female"]
    weight: float = Field(ge=30, le=300)
    height: float = Field(ge=120, le=250)
    waist_circumference: float = Field(ge=50, le=200)

    systolic_bp: int = Field(ge=80, le=250)
    diastolic_bp: int = Field(ge=40, le=150)
    resting_heart_rate: int = Field(ge=40, le=120)
    glucose: float = Field(ge=50, le=400)
    hba1c: float = Field(ge=4, le=15)
    cholesterol: float = Field(ge=100, le=400)
    hdl_cholesterol: float = Field(ge=20, le=100)
    ldl_cholesterol: float = Field(ge=50, le=300)
    triglycerides: float = Field(ge=50, le=1000)

    smoking_status: Literal["never", "former", "current"]
    smoking_years: int = Field(default=0, ge=0, le=80)
    cigarettes_per_day: int = Field(default=0, ge=0, le=100)
    exercise_frequency: Literal["none", "low", "moderate", "high"]
    exercise_intensity: Literal["light", "moderate", "vigorous"]
    sleep_hours: float = Field(ge=3, le=12)
    sleep_quality: Quality
    stress_level: Literal["low", "moderate", "high", "very-high"]
    alcohol_consumption: Literal["none", "light", "moderate", "heavy"]
    diet_quality: Quality
    water_intake: int = Field(ge=0, le=20)
    mental_health_status: Quality
    last_checkup: Literal["less-than-6-months", "6-12-months", "1-2-years", "more-than-2-years"]

    heart_disease_family: bool = False
    diabetes_family: bool = False
    stroke_family: bool = False
    cancer_family: bool = False
    medications: List[str] = Field(default_factory=list)
    chronic_conditions: List[str] = Field(default_factory=list)

    @field_validator("medications", "chronic_conditions", mode="before")
    @classmethod
    def split_comma_list(cls, v):
        """Accept the form's comma-separated text as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return split_items(v)
        return [str(item).strip() for item in v if str(item).strip()]


class ProfileValidationError(ValueError):
    """Raised when collected values do not form a complete, in-range profile."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def split_items(text: str) -> List[str]:
    return [item.strip() for item in (text or "").split(",") if item.strip()]


def _format_errors(exc: ValidationError) -> List[str]:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "profile"
        problems.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return problems


class ProfileBuilder:
    """Accumulates field values across the form steps."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = {}
        if values:
            self.update(**values)

    @classmethod
    def with_defaults(cls) -> "ProfileBuilder":
        return cls(DEFAULT_FORM_VALUES)

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    def set(self, name: str, value: Any) -> "ProfileBuilder":
        if name not in ProfileForm.model_fields:
            raise KeyError(f"Unknown profile field: {name}")
        if name in LIST_FIELDS:
            value = split_items(value) if isinstance(value, str) else list(value or [])
        self._values[name] = value
        return self

    def set_list(self, name: str, text: str) -> "ProfileBuilder":
        return self.set(name, split_items(text))

    def update(self, **values: Any) -> "ProfileBuilder":
        for name, value in values.items():
            self.set(name, value)
        return self

    def missing(self) -> List[str]:
        required = [n for n, f in ProfileForm.model_fields.items() if f.is_required()]
        return [n for n in required if self._values.get(n) is None]

    def section_errors(self, index: int) -> List[str]:
        """Problems for the fields of one form step (empty list = step is fine)."""
        fields = SECTION_FIELDS[index]
        try:
            ProfileForm.model_validate(self._values)
        except ValidationError as exc:
            return [
                msg for msg, err in zip(_format_errors(exc), exc.errors())
                if err.get("loc") and err["loc"][0] in fields
            ]
        return []

    def build(self) -> Profile:
        try:
            form = ProfileForm.model_validate(self._values)
        except ValidationError as exc:
            problems = _format_errors(exc)
            logger.info("profile_rejected", problems=len(problems), fields=[p.split(":", 1)[0] for p in problems])
            raise ProfileValidationError(problems) from exc

        data = form.model_dump()
        for name in LIST_FIELDS:
            data[name] = tuple(data[name])
        return Profile(**data)
