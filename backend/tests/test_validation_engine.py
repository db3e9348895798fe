"""Struct walker tests: required suppression, rule keys, not-zero, records and registries."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import pytest
from pydantic import BaseModel

from carecommon.validators import (
    ErrorList,
    ErrorMap,
    InvalidTagError,
    NotAStructureError,
    StructValidator,
    ValidationFailedError,
    default_registry,
    describe,
    validate_struct,
    validation_field,
)
from carecommon.validators.models import (
    EMAIL_MESSAGE,
    REQUIRED_MESSAGE,
    TOO_LONG_MESSAGE,
    TOO_SHORT_MESSAGE,
    VALID_VALUE_MESSAGE,
)


class BasicRecord(BaseModel):
    required_email: str = validation_field("required,email", default="")
    required_valid_value: str = validation_field("required,values:one|two|three", default="")
    valid_value: str = validation_field("values:alpha|beta|gamma", default="")
    insensitive_valid_value: str = validation_field("values-insensitive:alpha|beta|gamma", default="")
    too_short_value: str = validation_field("min-length:3", default="")
    too_long_value: str = validation_field("max-length:30", default="")


@dataclass
class OptionalRecord:
    required_email: Optional[str] = field(default=None, metadata={"validation": "required,email"})
    required_valid_value: Optional[str] = field(default=None, metadata={"validation": "required,values:one|two|three"})
    valid_value: Optional[str] = field(default=None, metadata={"validation": "values:alpha|beta|gamma"})
    insensitive_valid_value: Optional[str] = field(
        default=None, metadata={"validation": "values-insensitive:alpha|beta|gamma"}
    )
    too_short_value: Optional[str] = field(default=None, metadata={"validation": "min-length:3"})
    too_long_value: Optional[str] = field(default=None, metadata={"validation": "max-length:30"})


VALID = {
    "required_email": "test@example.local",
    "required_valid_value": "three",
    "valid_value": "gamma",
    "insensitive_valid_value": "BETA",
    "too_short_value": "foo",
    "too_long_value": "foo",
}


def make_records(**overrides: Optional[str]) -> list:
    """The same values as a plain-string pydantic record and an Optional dataclass record."""
    values = {**VALID, **overrides}
    basic = BasicRecord(**{k: v if v is not None else "" for k, v in values.items()})
    return [basic, OptionalRecord(**values)]


class TestStructValidation:
    def test_valid_records_pass(self) -> None:
        for record in make_records():
            errors = ErrorMap()
            assert validate_struct(record, errors) is True
            assert errors == {}

    def test_required_failures(self) -> None:
        for record in make_records(required_email="", required_valid_value=""):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {
                "required_email": REQUIRED_MESSAGE,
                "required_valid_value": REQUIRED_MESSAGE,
            }

    def test_absent_optional_fails_required(self) -> None:
        errors = ErrorMap()
        assert validate_struct(OptionalRecord(**{**VALID, "required_email": None}), errors) is False
        assert errors == {"required_email": REQUIRED_MESSAGE}

    def test_blank_string_fails_required(self) -> None:
        for record in make_records(required_email="   "):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {"required_email": REQUIRED_MESSAGE}

    def test_required_suppresses_other_rules(self) -> None:
        for record in make_records(required_valid_value=""):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {"required_valid_value": REQUIRED_MESSAGE}

    def test_present_value_checked_after_required(self) -> None:
        for record in make_records(required_valid_value="foo"):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {
                "required_valid_value": VALID_VALUE_MESSAGE.format("one, two, three"),
            }
            assert errors["required_valid_value"] == "This must be one of the following values: one, two, three"

    def test_invalid_email(self) -> None:
        for record in make_records(required_email="bad-email"):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {"required_email": EMAIL_MESSAGE}

    def test_values_insensitive_accepts_other_case(self) -> None:
        for record in make_records(insensitive_valid_value="BETA"):
            errors = ErrorMap()
            assert validate_struct(record, errors) is True

    def test_values_is_case_sensitive(self) -> None:
        for record in make_records(valid_value="BETA"):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {"valid_value": VALID_VALUE_MESSAGE.format("alpha, beta, gamma")}

    def test_values_insensitive_failure(self) -> None:
        for record in make_records(insensitive_valid_value="BET"):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {"insensitive_valid_value": VALID_VALUE_MESSAGE.format("alpha, beta, gamma")}

    def test_empty_values_pass_non_required_rules(self) -> None:
        for record in make_records(valid_value="", insensitive_valid_value="", too_short_value="", too_long_value=""):
            errors = ErrorMap()
            assert validate_struct(record, errors) is True
        for record in make_records(valid_value=None, too_short_value=None):
            assert validate_struct(record, ErrorMap()) is True

    def test_too_short_value(self) -> None:
        for record in make_records(too_short_value="oo"):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {"too_short_value_too_short": TOO_SHORT_MESSAGE.format(3)}
            assert errors["too_short_value_too_short"] == "This must be at least 3 characters"

    def test_min_length_boundary_uses_trimmed_length(self) -> None:
        for record in make_records(too_short_value="  foo  "):
            assert validate_struct(record, ErrorMap()) is True
        for record in make_records(too_short_value="  oo  "):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert list(errors) == ["too_short_value_too_short"]

    def test_too_long_value(self) -> None:
        for record in make_records(too_long_value="foo  foo  foo  foo  foo  foo  foo  "):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert errors == {"too_long_value_too_long": TOO_LONG_MESSAGE.format(30)}

    def test_failures_on_several_fields_are_all_reported(self) -> None:
        for record in make_records(required_email="bad-email", too_short_value="oo", valid_value="delta"):
            errors = ErrorMap()
            assert validate_struct(record, errors) is False
            assert set(errors) == {"required_email", "too_short_value_too_short", "valid_value"}


class TestRuleLeniency:
    def test_unknown_rule_is_ignored(self) -> None:
        @dataclass
        class Typo:
            name: str = field(default="anything", metadata={"validation": "bogus-rule"})

        errors = ErrorMap()
        assert validate_struct(Typo(), errors) is True
        assert errors == {}

    def test_unknown_rule_does_not_hide_known_rules(self) -> None:
        @dataclass
        class Typo:
            name: str = field(default="", metadata={"validation": "bogus-rule, required"})

        errors = ErrorMap()
        assert validate_struct(Typo(), errors) is False
        assert errors == {"name": REQUIRED_MESSAGE}

    def test_required_then_min_length_reports_required_only(self) -> None:
        @dataclass
        class Nick:
            nickname: Optional[str] = field(default=None, metadata={"validation": "min-length:3,required"})

        for value in (None, "", "  "):
            errors = ErrorList()
            assert validate_struct(Nick(nickname=value), errors) is False
            assert errors == [("nickname", REQUIRED_MESSAGE)]

    def test_untagged_fields_are_skipped(self) -> None:
        class Loose(BaseModel):
            free_text: Optional[str] = None
            tagged: str = validation_field("", default="")

        errors = ErrorMap()
        assert validate_struct(Loose(), errors) is True
        assert errors == {}

    def test_both_length_rules_use_distinct_keys(self) -> None:
        @dataclass
        class Impossible:
            code: str = field(default="abcd", metadata={"validation": "min-length:5,max-length:3"})

        errors = ErrorList()
        assert validate_struct(Impossible(), errors) is False
        assert errors.fields() == ["code_too_short", "code_too_long"]


class TestNotZero:
    def test_non_zero_values_pass(self) -> None:
        @dataclass
        class Values:
            integer: int = field(default=42, metadata={"validation": "not-zero"})
            number: float = field(default=42.0, metadata={"validation": "not-zero"})
            timestamp: datetime = field(
                default_factory=lambda: datetime.now(timezone.utc), metadata={"validation": "not-zero"}
            )

        @dataclass
        class OptionalValues:
            integer: Optional[int] = field(default=42, metadata={"validation": "not-zero"})
            number: Optional[float] = field(default=42.0, metadata={"validation": "not-zero"})
            timestamp: Optional[datetime] = field(
                default_factory=lambda: datetime.now(timezone.utc), metadata={"validation": "not-zero"}
            )

        for record in (Values(), OptionalValues()):
            errors = ErrorMap()
            assert validate_struct(record, errors) is True
            assert errors == {}

    def test_zero_values_fail_with_required_message(self) -> None:
        @dataclass
        class Values:
            integer: int = field(default=0, metadata={"validation": "not-zero"})
            number: float = field(default=0.0, metadata={"validation": "not-zero"})
            timestamp: datetime = field(default=datetime.min, metadata={"validation": "not-zero"})

        errors = ErrorMap()
        assert validate_struct(Values(), errors) is False
        assert errors == {
            "integer": REQUIRED_MESSAGE,
            "number": REQUIRED_MESSAGE,
            "timestamp": REQUIRED_MESSAGE,
        }

    def test_absent_optional_fails_without_required(self) -> None:
        class Reading(BaseModel):
            integer: Optional[int] = validation_field("not-zero", default=None)
            number: Optional[float] = validation_field("not-zero", default=None)
            timestamp: Optional[datetime] = validation_field("not-zero", default=None)

        errors = ErrorMap()
        assert validate_struct(Reading(), errors) is False
        assert errors == {
            "integer": REQUIRED_MESSAGE,
            "number": REQUIRED_MESSAGE,
            "timestamp": REQUIRED_MESSAGE,
        }

    def test_present_zero_behind_optional_fails(self) -> None:
        class Reading(BaseModel):
            integer: Optional[int] = validation_field("not-zero", default=None)
            timestamp: Optional[datetime] = validation_field("not-zero", default=None)

        errors = ErrorMap()
        assert validate_struct(Reading(integer=0, timestamp=datetime.min), errors) is False
        assert set(errors) == {"integer", "timestamp"}

    def test_negative_zero_is_not_the_zero_value(self) -> None:
        @dataclass
        class Signed:
            number: float = field(default=-0.0, metadata={"validation": "not-zero"})

        assert validate_struct(Signed(), ErrorMap()) is True

    def test_other_types_pass(self) -> None:
        @dataclass
        class Other:
            flag: bool = field(default=False, metadata={"validation": "not-zero"})
            label: str = field(default="", metadata={"validation": "not-zero"})

        assert validate_struct(Other(), ErrorMap()) is True


class TestRecordShapes:
    @pytest.mark.parametrize("value", [{"email": "x"}, ["x"], "x", 42, None, BasicRecord])
    def test_non_records_are_rejected(self, value) -> None:
        errors = ErrorMap()
        with pytest.raises(NotAStructureError):
            validate_struct(value, errors)
        assert errors == {}

    def test_not_a_structure_is_a_type_error(self) -> None:
        with pytest.raises(TypeError):
            validate_struct({"a": 1}, ErrorMap())

    def test_pydantic_alias_names_the_field(self) -> None:
        class Contact(BaseModel):
            home_address: str = validation_field("required", default="", alias="address1")

        errors = ErrorMap()
        assert validate_struct(Contact(), errors) is False
        assert errors == {"address1": REQUIRED_MESSAGE}

    def test_dataclass_json_metadata_names_the_field(self) -> None:
        @dataclass
        class Contact:
            first: str = field(default="", metadata={"validation": "required", "json": "first_name,omitempty"})
            second: str = field(default="", metadata={"validation": "required", "json": "-"})
            third: str = field(default="", metadata={"validation": "min-length:4", "json": "nick"})

        errors = ErrorMap()
        assert validate_struct(Contact(third="ab"), errors) is False
        assert errors == {
            "first_name": REQUIRED_MESSAGE,
            "second": REQUIRED_MESSAGE,
            "nick_too_short": TOO_SHORT_MESSAGE.format(4),
        }

    def test_descriptors_keep_declaration_order(self) -> None:
        names = [d.name for d in describe(BasicRecord)]
        assert names == list(VALID)

    def test_descriptor_table_is_built_once(self) -> None:
        assert describe(BasicRecord) is describe(BasicRecord)

    def test_malformed_length_tag_raises(self) -> None:
        @dataclass
        class Broken:
            code: str = field(default="abc", metadata={"validation": "min-length:three"})

        with pytest.raises(InvalidTagError):
            validate_struct(Broken(), ErrorMap())


class TestValidatorInstances:
    def test_reduced_registry_skips_missing_rules(self) -> None:
        validator = StructValidator(default_registry.only("required"))
        for record in make_records(required_email="bad-email", too_short_value="oo"):
            errors = ErrorMap()
            assert validator.validate(record, errors) is True
            assert errors == {}

    def test_registry_argument_of_validate_struct(self) -> None:
        registry = default_registry.only("email")
        for record in make_records(required_email="", required_valid_value=""):
            errors = ErrorMap()
            assert validate_struct(record, errors, registry=registry) is True

    def test_validate_or_raise(self) -> None:
        validator = StructValidator()
        record = make_records(required_email="bad-email")[0]
        with pytest.raises(ValidationFailedError) as exc_info:
            validator.validate_or_raise(record)
        assert exc_info.value.errors == {"required_email": EMAIL_MESSAGE}

        assert validator.validate_or_raise(make_records()[0]) == {}

    def test_return_value_reflects_only_this_walk(self) -> None:
        errors = ErrorMap({"earlier": "left over from another check"})
        record = make_records()[0]
        assert validate_struct(record, errors) is True
        assert errors == {"earlier": "left over from another check"}
