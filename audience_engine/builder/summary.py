"""
Rule Summarizer — renders editor sections as plain-English sentences.

Used by the dashboard next to the rule editor, e.g.

    Entry all of the following in the last 30 days
      Age is at least 30
      Exclude if Country equals CA
"""

from typing import Any, Dict, List, Sequence, Union

from audience_engine.models.query import ComparisonOperator, DateOperator
from audience_engine.models.rules import MatchType, Rule, RuleGroup, Section

OPERATOR_LABELS: Dict[str, str] = {
    "equals": "equals",
    "notEquals": "does not equal",
    "contains": "contains",
    "notContains": "does not contain",
    "startsWith": "starts with",
    "endsWith": "ends with",
    "greaterThan": "is greater than",
    "lessThan": "is less than",
    "greaterThanOrEqual": "is at least",
    "lessThanOrEqual": "is at most",
    "between": "is between",
    "isTrue": "is true",
    "isFalse": "is false",
    "before": "is before",
    "after": "is after",
    "last7days": "in the last 7 days",
    "last30days": "in the last 30 days",
    "last90days": "in the last 90 days",
    "lastYear": "in the last year",
    "allTime": "all time",
}

TIME_PERIOD_LABELS: Dict[str, str] = {
    "last7days": "in the last 7 days",
    "last30days": "in the last 30 days",
    "last90days": "in the last 90 days",
    "lastYear": "in the last year",
    "allTime": "all time",
    "customRange": "in custom range",
}

MATCH_TYPE_LABELS = {MatchType.ALL: "all of", MatchType.ANY: "any of"}


def format_value(value: Any) -> str:
    """Render a rule value the way the editor displays it (30.0 -> "30")."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_valueless(operator: str) -> bool:
    if operator in (ComparisonOperator.IS_TRUE.value, ComparisonOperator.IS_FALSE.value):
        return True
    return operator.startswith("last") or operator == DateOperator.ALL_TIME.value


def _sentence(*parts: str) -> str:
    return " ".join(p for p in parts if p)


def rule_to_sentence(rule: Rule) -> str:
    prefix = "Exclude if" if rule.excluded else ""
    operator = rule.operator or ""
    label = OPERATOR_LABELS.get(operator, operator)

    if operator and _is_valueless(operator):
        return _sentence(prefix, rule.property_name, label)

    if operator == ComparisonOperator.BETWEEN.value and rule.value is not None and rule.value2 is not None:
        return _sentence(
            prefix, rule.property_name, label,
            format_value(rule.value), "and", format_value(rule.value2),
        )

    if rule.value is not None:
        return _sentence(prefix, rule.property_name, label, format_value(rule.value))

    # Incomplete rule: property name only
    return _sentence(prefix, rule.property_name)


def rule_group_to_sentence(group: RuleGroup) -> str:
    """A nested group reads as ``any of: A; B``."""
    inner = "; ".join(item_sentences(group.items))
    return f"{MATCH_TYPE_LABELS[group.match_type]}: {inner}" if inner else ""


def item_sentences(items: Sequence[Union[Rule, RuleGroup]]) -> List[str]:
    sentences = []
    for item in items:
        sentence = rule_group_to_sentence(item) if isinstance(item, RuleGroup) else rule_to_sentence(item)
        if sentence:
            sentences.append(sentence)
    return sentences


def section_to_summary(section: Section) -> str:
    """Headline for a section, e.g. ``Entry any of the following in the last 7 days``."""
    if not section.items:
        return f"{section.title} (no rules)"

    time_label = TIME_PERIOD_LABELS.get(section.time_period, TIME_PERIOD_LABELS["last30days"])
    return f"{section.title} {MATCH_TYPE_LABELS[section.match_type]} the following {time_label}"


def summarize_sections(sections: Sequence[Section]) -> List[dict]:
    return [
        {
            "id": section.id,
            "summary": section_to_summary(section),
            "rules": item_sentences(section.items),
        }
        for section in sections
    ]
