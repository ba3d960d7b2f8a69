"""Required-field rules for profile operations."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Rule:
    """A field that must be present and non-blank."""

    field: str
    message: str


PROFILE_RULES = (Rule("status", "Status is required"),)

EXPERIENCE_RULES = (
    Rule("title", "Title is required"),
    Rule("company", "Company is required"),
    Rule("from", "From date is required"),
)

EDUCATION_RULES = (
    Rule("school", "School is required"),
    Rule("degree", "Degree is required"),
    Rule("fieldofstudy", "Field of study is required"),
    Rule("from", "From date is required"),
)


def is_blank(value: Any) -> bool:
    """None or a string with nothing but whitespace."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def check_required(data: Mapping[str, Any], rules: Iterable[Rule]) -> list[dict[str, Any]]:
    """
    Return one violation per rule whose field is missing or blank.

    An empty list means the data is valid.
    """
    return [
        {"msg": rule.message, "param": rule.field, "location": "body"}
        for rule in rules
        if is_blank(data.get(rule.field))
    ]
