"""Built-in rule set and the immutable rule registry.

Every check has the signature `(value, param) -> bool` and returns True when
the value passes. Apart from `required` and `not-zero`, rules let empty
values through: presence is the required rule's job, and reporting
"too short" for a missing value would only duplicate that error.
"""

import re
import struct
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Optional

from carecommon.validators.models import (
    EMAIL_MESSAGE,
    REQUIRED_MESSAGE,
    TOO_LONG_MESSAGE,
    TOO_SHORT_MESSAGE,
    VALID_VALUE_MESSAGE,
    IntParam,
    ListParam,
    RuleDefinition,
    RuleKind,
    RuleParam,
)

# Exactly one @, a dot somewhere after it, no whitespace
EMAIL_RE = re.compile(r"([^@\s]+)@([^@\s]+)\.([^@\s]+)")

_ZERO_FLOAT_BITS = struct.pack("<d", 0.0)


# ── Helpers ──

def field_text(value: Any) -> str:
    """Render a field value as text for the string rules."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    return str(value)


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.fullmatch(email) is not None


# ── Checks ──

def required_value_present(value: Any, param: RuleParam) -> bool:
    """Present, and for string data non-blank. Other types only need to be non-None."""
    if value is None:
        return False
    if isinstance(value, str):
        return field_text(value).strip() != ""
    return True


def is_email_valid(value: Any, param: RuleParam) -> bool:
    email = field_text(value)
    if email.strip() == "":
        return True
    return is_valid_email(email)


def is_minimum_length(value: Any, param: IntParam) -> bool:
    text = field_text(value).strip()
    if not text:
        return True
    return len(text) >= param.value


def is_below_maximum_length(value: Any, param: IntParam) -> bool:
    text = field_text(value).strip()
    if not text:
        return True
    return len(text) <= param.value


def is_value_valid(value: Any, param: ListParam) -> bool:
    text = field_text(value).strip()
    if not text:
        return True
    return text in param.values


def is_value_valid_insensitive(value: Any, param: ListParam) -> bool:
    text = field_text(value).strip().lower()
    if not text:
        return True
    return text in {v.lower() for v in param.values}


def is_not_zero(value: Any, param: RuleParam) -> bool:
    """Zero means: None, integer 0, +0.0, or the minimum datetime/date."""
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        # -0.0 has a sign bit set and is therefore not the zero value
        return struct.pack("<d", value) != _ZERO_FLOAT_BITS
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) != datetime.min
    if isinstance(value, date):
        return value != date.min
    return True


BUILTIN_RULES: tuple[RuleDefinition, ...] = (
    RuleDefinition(
        name=RuleKind.REQUIRED.value,
        kind=RuleKind.REQUIRED,
        message=REQUIRED_MESSAGE,
        check=required_value_present,
    ),
    RuleDefinition(
        name=RuleKind.EMAIL.value,
        kind=RuleKind.EMAIL,
        message=EMAIL_MESSAGE,
        check=is_email_valid,
    ),
    RuleDefinition(
        name=RuleKind.MIN_LENGTH.value,
        kind=RuleKind.MIN_LENGTH,
        message=TOO_SHORT_MESSAGE,
        check=is_minimum_length,
        key_suffix="_too_short",
    ),
    RuleDefinition(
        name=RuleKind.MAX_LENGTH.value,
        kind=RuleKind.MAX_LENGTH,
        message=TOO_LONG_MESSAGE,
        check=is_below_maximum_length,
        key_suffix="_too_long",
    ),
    RuleDefinition(
        name=RuleKind.VALUES.value,
        kind=RuleKind.VALUES,
        message=VALID_VALUE_MESSAGE,
        check=is_value_valid,
    ),
    RuleDefinition(
        name=RuleKind.VALUES_INSENSITIVE.value,
        kind=RuleKind.VALUES_INSENSITIVE,
        message=VALID_VALUE_MESSAGE,
        check=is_value_valid_insensitive,
    ),
    RuleDefinition(
        name=RuleKind.NOT_ZERO.value,
        kind=RuleKind.NOT_ZERO,
        message=REQUIRED_MESSAGE,
        check=is_not_zero,
    ),
)


class RuleRegistry:
    """Read-only lookup table from rule name to RuleDefinition.

    Built once and never mutated, so a single instance can be shared by any
    number of concurrent walks.
    """

    def __init__(self, definitions: Iterable[RuleDefinition]):
        self._rules = MappingProxyType({d.name: d for d in definitions})

    def lookup(self, name: str) -> Optional[RuleDefinition]:
        """Return the rule registered under `name`, or None."""
        return self._rules.get(name)

    def only(self, *names: str) -> "RuleRegistry":
        """Build a reduced registry holding just the named rules."""
        return RuleRegistry(d for n, d in self._rules.items() if n in names)

    def names(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[RuleDefinition]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)


# Module-level default
default_registry = RuleRegistry(BUILTIN_RULES)
