"""Translate QueryCriteria into a DynamoDB scan filter."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal

from .errors import CallerError
from .models import QueryCriteria

# "length" is a DynamoDB reserved word and must be referenced through an alias
LENGTH_ALIAS = "#len"
ATTRIBUTE_NAMES = {LENGTH_ALIAS: "length"}

# Plain decimal literals only; DynamoDB rejects underscores, NaN and Infinity
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

# DynamoDB number limits
MAX_SIGNIFICANT_DIGITS = 38
MIN_EXPONENT = -130
MAX_EXPONENT = 125

# criteria field -> stored attribute name, in predicate order after spindle/length
_EQUALITY_FIELDS = [
    ("holder_angle", "holderAngle"),
    ("extension_angle", "extensionAngle"),
    ("tool_type", "toolType"),
    ("thread", "thread"),
    ("bore_diameter", "boreDiameter"),
    ("edge_radius", "edgeRadius"),
    ("cutting_diameter", "cuttingDiameter"),
]


@dataclass
class FilterSpec:
    """Conjunctive predicates plus their bound values and attribute aliases."""

    predicates: list[str] = field(default_factory=list)
    values: dict[str, dict[str, str]] = field(default_factory=dict)
    names: dict[str, str] = field(default_factory=lambda: dict(ATTRIBUTE_NAMES))

    @property
    def expression(self) -> str:
        return " AND ".join(self.predicates)

    def add(self, predicate: str, values: dict[str, dict[str, str]]) -> None:
        self.predicates.append(predicate)
        self.values.update(values)


def _number(text: str, original: str) -> dict[str, str]:
    text = text.strip()
    if not _NUMBER_RE.fullmatch(text):
        raise CallerError(f"Invalid number {text!r} in length filter {original!r}")

    value = Decimal(text)
    if value:
        digits = "".join(map(str, value.as_tuple().digits)).strip("0")
        if len(digits) > MAX_SIGNIFICANT_DIGITS:
            raise CallerError(f"Number {text!r} in length filter {original!r} has too many digits")
        if not MIN_EXPONENT <= value.adjusted() <= MAX_EXPONENT:
            raise CallerError(f"Number {text!r} in length filter {original!r} is out of range")
    return {"N": text}


def parse_length_range(length: str) -> tuple[str, dict[str, dict[str, str]]]:
    """Parse the length mini-language into a predicate and its bound values.

    Recognised forms, checked in this order:
        "<=120"   -> length <= 120
        "50-100"  -> length BETWEEN 50 AND 100 (inclusive, split on the first "-")
        ">30"     -> length > 30
        "75"      -> length = 75

    Raises:
        CallerError: if a number does not parse, or a range is missing a bound
            or is inverted.
    """
    if length.startswith("<="):
        return f"{LENGTH_ALIAS} <= :length", {":length": _number(length[2:], length)}

    if "-" in length:
        start, end = length.split("-", 1)
        if not start.strip() or not end.strip():
            raise CallerError(f"Length range {length!r} needs both a start and an end")
        start_value, end_value = _number(start, length), _number(end, length)
        if Decimal(start_value["N"]) > Decimal(end_value["N"]):
            raise CallerError(f"Length range {length!r} starts after it ends")
        return (
            f"{LENGTH_ALIAS} BETWEEN :lengthStart AND :lengthEnd",
            {":lengthStart": start_value, ":lengthEnd": end_value},
        )

    if length.startswith(">"):
        return f"{LENGTH_ALIAS} > :length", {":length": _number(length[1:], length)}

    return f"{LENGTH_ALIAS} = :length", {":length": _number(length, length)}


def build_filter(criteria: QueryCriteria) -> FilterSpec:
    """Build the AND-only filter for every present criteria field."""
    spec = FilterSpec()

    if criteria.spindle:
        spec.add("spindle = :spindle", {":spindle": {"S": criteria.spindle}})

    if criteria.length:
        predicate, values = parse_length_range(criteria.length)
        spec.add(predicate, values)

    for field_name, attribute in _EQUALITY_FIELDS:
        value = getattr(criteria, field_name)
        if value:
            spec.add(f"{attribute} = :{attribute}", {f":{attribute}": {"S": value}})

    return spec
