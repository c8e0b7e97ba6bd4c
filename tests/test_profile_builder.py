import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from profile_builder import (
    DEFAULT_FORM_VALUES,
    SECTION_FIELDS,
    SECTIONS,
    ProfileBuilder,
    ProfileValidationError,
    split_items,
)
from risk_engine import Profile, assess


def test_defaults_build_a_complete_profile():
    p = ProfileBuilder.with_defaults().build()
    assert isinstance(p, Profile)
    assert p.age == 30
    assert p.medications == ()
    assert assess(p).overall_risk.level == "low"


def test_every_field_belongs_to_exactly_one_section():
    flat = [f for fields in SECTION_FIELDS for f in fields]
    assert len(SECTION_FIELDS) == len(SECTIONS)
    assert sorted(flat) == sorted(DEFAULT_FORM_VALUES)


def test_empty_builder_reports_missing_and_refuses_to_build():
    b = ProfileBuilder()
    missing = b.missing()
    assert "age" in missing and "gender" in missing
    assert "medications" not in missing

    with pytest.raises(ProfileValidationError) as exc:
        b.build()
    assert any(e.startswith("age:") for e in exc.value.errors)


def test_out_of_range_values_are_rejected_by_field():
    b = ProfileBuilder.with_defaults().update(age=17, weight=400)
    with pytest.raises(ProfileValidationError) as exc:
        b.build()
    fields = {e.split(":", 1)[0] for e in exc.value.errors}
    assert fields == {"age", "weight"}


def test_unknown_enum_value_rejected():
    b = ProfileBuilder.with_defaults().set("stress_level", "extreme")
    with pytest.raises(ProfileValidationError):
        b.build()


def test_unknown_field_name_raises_key_error():
    with pytest.raises(KeyError):
        ProfileBuilder().set("blood_type", "O+")


def test_list_fields_accept_comma_separated_text():
    b = ProfileBuilder.with_defaults()
    b.set_list("medications", "Metformin, , Aspirin ")
    b.set("chronic_conditions", "Hypertension,Arthritis")
    p = b.build()
    assert p.medications == ("Metformin", "Aspirin")
    assert p.chronic_conditions == ("Hypertension", "Arthritis")


def test_default_lists_are_not_shared_between_builders():
    a = ProfileBuilder.with_defaults()
    a.values["medications"].append("leak")
    assert ProfileBuilder.with_defaults().build().medications == ()
    assert DEFAULT_FORM_VALUES["medications"] == []


def test_section_errors_only_report_fields_of_that_step():
    b = ProfileBuilder.with_defaults().update(systolic_bp=300)
    assert b.section_errors(0) == []
    errs = b.section_errors(1)
    assert len(errs) == 1
    assert errs[0].startswith("systolic_bp:")


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        ProfileBuilder.with_defaults().update(gender="other").build()


def test_split_items_drops_blanks_and_whitespace():
    assert split_items(" Lisinopril ,,Aspirin, ") == ["Lisinopril", "Aspirin"]
    assert split_items("") == []
    assert split_items(None) == []
