"""Tag-driven struct validation.

Usage:
    from carecommon.validators import ErrorMap, validate_struct

    errors = ErrorMap()
    if not validate_struct(profile, errors):
        # errors maps field names to messages
"""

from carecommon.validators.engine import (
    StructValidator,
    describe,
    struct_validator,
    validate_struct,
    validation_field,
)
from carecommon.validators.models import (
    ErrorList,
    ErrorMap,
    ErrorSink,
    FieldDescriptor,
    IntParam,
    InvalidTagError,
    ListParam,
    NoParam,
    NotAStructureError,
    RuleDefinition,
    RuleInvocation,
    RuleKind,
    ValidationFailedError,
)
from carecommon.validators.rules import BUILTIN_RULES, RuleRegistry, default_registry
from carecommon.validators.tags import parse_tag

__all__ = [
    "StructValidator",
    "describe",
    "struct_validator",
    "validate_struct",
    "validation_field",
    "ErrorList",
    "ErrorMap",
    "ErrorSink",
    "FieldDescriptor",
    "IntParam",
    "InvalidTagError",
    "ListParam",
    "NoParam",
    "NotAStructureError",
    "RuleDefinition",
    "RuleInvocation",
    "RuleKind",
    "ValidationFailedError",
    "BUILTIN_RULES",
    "RuleRegistry",
    "default_registry",
    "parse_tag",
]
