"""Struct walker: applies declarative validation tags to flat records.

A record is a pydantic model or a dataclass instance whose fields carry a
validation tag:

    class Signup(BaseModel):
        email: Optional[str] = validation_field("required,email,max-length:255")
        plan: str = validation_field("values-insensitive:free|pro", alias="plan_name")

    @dataclass
    class Invite:
        code: str = field(default="", metadata={"validation": "min-length:6", "json": "invite_code"})

Usage:
    errors = ErrorMap()
    if not validate_struct(signup, errors):
        # errors == {"email": "This is a required field", ...}

Rule failures are never raised; they are appended to the caller's sink so a
single walk reports every field at once.
"""

import dataclasses
from functools import lru_cache
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field
from pydantic_core import PydanticUndefined

from carecommon.validators.models import (
    ErrorMap,
    ErrorSink,
    FieldDescriptor,
    NotAStructureError,
    ValidationFailedError,
)
from carecommon.validators.rules import RuleRegistry, default_registry
from carecommon.validators.tags import parse_tag

logger = structlog.get_logger()

# Key under which a field's tag is stored (json_schema_extra / dataclass metadata)
TAG_KEY = "validation"
# Dataclass metadata key holding the serialization name
ALIAS_KEY = "json"


def validation_field(tag: str, default: Any = PydanticUndefined, **kwargs: Any) -> Any:
    """pydantic `Field(...)` carrying a validation tag."""
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[TAG_KEY] = tag
    return Field(default, json_schema_extra=extra, **kwargs)


def is_record(value: Any) -> bool:
    """True for pydantic model instances and dataclass instances (not classes)."""
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _model_descriptors(record_type: type[BaseModel]) -> list[FieldDescriptor]:
    descriptors = []
    for attribute, info in record_type.model_fields.items():
        extra = info.json_schema_extra
        tag = extra.get(TAG_KEY, "") if isinstance(extra, dict) else ""
        name = info.serialization_alias or info.alias or attribute
        descriptors.append(FieldDescriptor(
            name=name,
            attribute=attribute,
            tag=tag,
            rules=tuple(parse_tag(tag)),
        ))
    return descriptors


def _dataclass_descriptors(record_type: type) -> list[FieldDescriptor]:
    descriptors = []
    for f in dataclasses.fields(record_type):
        tag = f.metadata.get(TAG_KEY, "")
        # "name,omitempty" style aliases: only the part before the first comma counts
        alias = f.metadata.get(ALIAS_KEY, "").split(",", 1)[0].strip()
        name = f.name if alias in ("", "-") else alias
        descriptors.append(FieldDescriptor(
            name=name,
            attribute=f.name,
            tag=tag,
            rules=tuple(parse_tag(tag)),
        ))
    return descriptors


@lru_cache(maxsize=None)
def describe(record_type: type) -> tuple[FieldDescriptor, ...]:
    """Build (once per type) the descriptor table for a record type.

    Raises:
        NotAStructureError: the type is neither a pydantic model nor a dataclass
        InvalidTagError: a known rule is declared with a malformed parameter
    """
    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        return tuple(_model_descriptors(record_type))
    if dataclasses.is_dataclass(record_type):
        return tuple(_dataclass_descriptors(record_type))
    raise NotAStructureError(record_type)


class StructValidator:
    """Walks a record's fields and evaluates their tags against a rule registry.

    Stateless apart from the (immutable) registry, so one instance can serve
    any number of concurrent callers as long as each brings its own sink.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None):
        self.registry = registry if registry is not None else default_registry

    def validate(self, record: Any, sink: ErrorSink) -> bool:
        """Validate every tagged field of `record`, reporting failures to `sink`.

        Returns:
            True if no field failed, False if at least one entry was appended

        Raises:
            NotAStructureError: `record` is not a pydantic model or dataclass instance
        """
        if not is_record(record):
            raise NotAStructureError(record)

        failures = 0
        for descriptor in describe(type(record)):
            if not descriptor.rules:
                continue
            failures += self._check_field(descriptor, descriptor.read(record), sink)

        logger.debug(
            "struct_validated",
            record=type(record).__name__,
            passed=failures == 0,
            failures=failures,
        )
        return failures == 0

    def validate_or_raise(self, record: Any) -> ErrorMap:
        """Validate into a fresh ErrorMap and raise ValidationFailedError if it is non-empty."""
        errors = ErrorMap()
        if not self.validate(record, errors):
            raise ValidationFailedError(errors)
        return errors

    def _check_field(self, descriptor: FieldDescriptor, value: Any, sink: ErrorSink) -> int:
        """Evaluate one field. Returns the number of entries appended to the sink."""
        required = descriptor.required
        if required is not None:
            rule = self.registry.lookup(required.name)
            if rule is not None and not rule.check(value, required.param):
                # A missing value only reports "required", never the other rules
                sink.append_error_field(descriptor.name, rule.message_for(required.param))
                return 1

        failures = 0
        for invocation in descriptor.other_rules:
            rule = self.registry.lookup(invocation.name)
            if rule is None:
                continue
            if not rule.check(value, invocation.param):
                sink.append_error_field(rule.key_for(descriptor.name), rule.message_for(invocation.param))
                failures += 1
        return failures


# Module-level singleton
struct_validator = StructValidator()


def validate_struct(record: Any, sink: ErrorSink, registry: Optional[RuleRegistry] = None) -> bool:
    """Validate `record` into `sink` using `registry` (default: the built-in rules)."""
    validator = struct_validator if registry is None else StructValidator(registry)
    return validator.validate(record, sink)
