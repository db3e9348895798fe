"""Validation models: rule kinds, parameters, invocations, descriptors and error sinks.

Everything here is plain data. Behaviour lives in rules.py (what each rule
checks), tags.py (how a tag string becomes invocations) and engine.py (how a
record is walked).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

from carecommon.errors import CareCommonError


class RuleKind(str, Enum):
    """Closed set of built-in rules, keyed by their tag name."""

    REQUIRED = "required"
    EMAIL = "email"
    MIN_LENGTH = "min-length"
    MAX_LENGTH = "max-length"
    VALUES = "values"
    VALUES_INSENSITIVE = "values-insensitive"
    NOT_ZERO = "not-zero"

    @classmethod
    def from_name(cls, name: str) -> Optional["RuleKind"]:
        """Return the kind for a tag name, or None when the name is unknown."""
        try:
            return cls(name)
        except ValueError:
            return None


# Rules whose parameter is an integer length
LENGTH_RULES = frozenset({RuleKind.MIN_LENGTH, RuleKind.MAX_LENGTH})

# Rules whose parameter is a "|" separated allow-list
LIST_RULES = frozenset({RuleKind.VALUES, RuleKind.VALUES_INSENSITIVE})


# ── Messages ──

REQUIRED_MESSAGE = "This is a required field"
EMAIL_MESSAGE = "This is not a valid email address"
TOO_SHORT_MESSAGE = "This must be at least {} characters"
TOO_LONG_MESSAGE = "This must not be longer than {} characters"
VALID_VALUE_MESSAGE = "This must be one of the following values: {}"


# ── Parameters ──

@dataclass(frozen=True)
class NoParam:
    """Rule takes no parameter."""

    def render(self) -> str:
        return ""


@dataclass(frozen=True)
class IntParam:
    """Integer parameter (min-length / max-length)."""

    value: int

    def render(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ListParam:
    """Allow-list parameter (values / values-insensitive), in declared order."""

    values: tuple[str, ...]

    def render(self) -> str:
        return ", ".join(self.values)


RuleParam = Union[NoParam, IntParam, ListParam]

NO_PARAM = NoParam()


@dataclass(frozen=True)
class RuleInvocation:
    """One `name` or `name:param` token of a validation tag.

    `kind` is None when the name does not belong to the built-in rule set;
    such invocations are carried through parsing and skipped by the walker.
    """

    name: str
    raw_param: Optional[str] = None
    kind: Optional[RuleKind] = None
    param: RuleParam = NO_PARAM


RuleCheck = Callable[[Any, RuleParam], bool]


@dataclass(frozen=True)
class RuleDefinition:
    """A named predicate plus the message reported when it fails."""

    name: str
    kind: RuleKind
    message: str
    check: RuleCheck
    key_suffix: str = ""

    def message_for(self, param: RuleParam) -> str:
        """Interpolate the parameter into the message template."""
        if isinstance(param, NoParam):
            return self.message
        return self.message.format(param.render())

    def key_for(self, field_name: str) -> str:
        """Error sink key for a failure of this rule on `field_name`."""
        return f"{field_name}{self.key_suffix}"


@dataclass(frozen=True)
class FieldDescriptor:
    """Everything the walker needs to know about one field of a record type."""

    name: str
    attribute: str
    tag: str
    rules: tuple[RuleInvocation, ...] = field(default_factory=tuple)

    def read(self, record: Any) -> Any:
        """Read the field's current value from a record instance."""
        return getattr(record, self.attribute, None)

    @property
    def required(self) -> Optional[RuleInvocation]:
        for invocation in self.rules:
            if invocation.kind is RuleKind.REQUIRED:
                return invocation
        return None

    @property
    def other_rules(self) -> tuple[RuleInvocation, ...]:
        return tuple(r for r in self.rules if r.kind is not RuleKind.REQUIRED)


# ── Error sinks ──

@runtime_checkable
class ErrorSink(Protocol):
    """Receives (field identifier, message) pairs produced during a walk."""

    def append_error_field(self, name: str, message: str) -> None:
        ...


class ErrorMap(dict):
    """Mapping-backed sink. A later message for the same key replaces the earlier one."""

    def append_error_field(self, name: str, message: str) -> None:
        self[name] = message

    def __str__(self) -> str:
        return ", ".join(f"{k}: {v}" for k, v in self.items())


class ErrorList(list):
    """Ordered sink keeping every (field, message) pair, duplicates included."""

    def append_error_field(self, name: str, message: str) -> None:
        self.append((name, message))

    def fields(self) -> list[str]:
        return [name for name, _ in self]


# ── Exceptions ──

class NotAStructureError(CareCommonError, TypeError):
    """The value handed to the walker is not a validatable record."""

    def __init__(self, value: Any):
        super().__init__(
            f"Incorrect kind of argument {type(value).__name__!r}. "
            "Must be a pydantic model or dataclass instance."
        )
        self.value = value


class InvalidTagError(CareCommonError, ValueError):
    """A known rule was declared with a missing or malformed parameter."""

    def __init__(self, tag: str, token: str, reason: str):
        super().__init__(f"Invalid validation tag {tag!r} at {token!r}: {reason}")
        self.tag = tag
        self.token = token


class ValidationFailedError(CareCommonError):
    """Raised by validate_or_raise when a walk reported at least one error."""

    def __init__(self, errors: ErrorMap):
        super().__init__(f"Validation failed: {errors}")
        self.errors = errors
