"""Validation tag parser.

Grammar:
    tag   := rule ("," rule)*
    rule  := name | name ":" param
    param := value ("|" value)*      (values / values-insensitive)
           | integer                 (min-length / max-length)

Usage:
    parse_tag("required, max-length:255, values:a|b")
"""

from typing import Optional

from carecommon.validators.models import (
    LENGTH_RULES,
    LIST_RULES,
    NO_PARAM,
    IntParam,
    InvalidTagError,
    ListParam,
    RuleInvocation,
    RuleKind,
    RuleParam,
)

RULE_SEPARATOR = ","
PARAM_SEPARATOR = ":"
LIST_SEPARATOR = "|"


def split_tokens(tag: str, separator: str = RULE_SEPARATOR) -> list[str]:
    """Split on `separator`, trim every token and drop the empty ones."""
    return [token.strip() for token in tag.split(separator) if token.strip()]


def resolve_param(tag: str, token: str, kind: RuleKind, raw: Optional[str]) -> RuleParam:
    """Turn a raw parameter string into the typed parameter its rule expects."""
    if kind in LENGTH_RULES:
        if raw is None or not raw.strip():
            raise InvalidTagError(tag, token, f"'{kind.value}' needs an integer length")
        try:
            length = int(raw.strip())
        except ValueError:
            raise InvalidTagError(tag, token, f"'{raw.strip()}' is not an integer") from None
        if length < 0:
            raise InvalidTagError(tag, token, "length cannot be negative")
        return IntParam(length)

    if kind in LIST_RULES:
        values = tuple(split_tokens(raw or "", LIST_SEPARATOR))
        if not values:
            raise InvalidTagError(tag, token, f"'{kind.value}' needs at least one value")
        return ListParam(values)

    return NO_PARAM


def parse_rule(tag: str, token: str) -> RuleInvocation:
    # Only the first colon separates name from param; the rest belongs to the param
    name, sep, raw = token.partition(PARAM_SEPARATOR)
    name = name.strip()
    raw_param = raw if sep else None

    kind = RuleKind.from_name(name)
    if kind is None:
        return RuleInvocation(name=name, raw_param=raw_param)

    return RuleInvocation(
        name=name,
        raw_param=raw_param,
        kind=kind,
        param=resolve_param(tag, token, kind, raw_param),
    )


def parse_tag(tag: str) -> list[RuleInvocation]:
    """Parse a validation tag into rule invocations, in declaration order.

    Unknown rule names are kept (with `kind=None`) so the walker can skip
    them; malformed parameters of known rules raise InvalidTagError.
    """
    if not tag:
        return []
    return [parse_rule(tag, token) for token in split_tokens(tag)]
