"""
Condition Builder — lowers editable sections of rules into a ConditionGroup.

Only the entry section defines audience membership by default; goal/exit
sections carry display data and are folded in only when requested by id.

Per section (and recursively per rule group):
  1. Drop incomplete rules (disabled, no operator, or missing a value the
     operator needs)
  2. Split the rest into included and excluded rules
  3. Turn each rule into a fact or engagement condition; a rule whose
     parent or property cannot be resolved, or whose number value does not
     parse, is skipped with a warning
  4. Included conditions become direct children; excluded ones are
     collected into one trailing AND subgroup

Excluded rules are NOT negated: the condition language has no NOT, so the
excluded subgroup is evaluated with the same polarity as included rules.
"""

import math
import re
from typing import Any, List, Optional, Sequence, Union

import structlog

from audience_engine.evaluation.comparator import parse_datetime
from audience_engine.models.query import (
    ComparisonOperator,
    ConditionGroup,
    DateOperator,
    EngagementCondition,
    FactCondition,
    LogicalOperator,
    TimeWindow,
)
from audience_engine.models.rules import MatchType, Rule, RuleGroup, Section
from audience_engine.models.schema import DataType, PropertyDefinition, SchemaData

logger = structlog.get_logger(__name__)

ENTRY_SECTION_ID = "entry"

VALUELESS_OPERATORS = frozenset({
    ComparisonOperator.IS_TRUE.value,
    ComparisonOperator.IS_FALSE.value,
    DateOperator.LAST_7_DAYS.value,
    DateOperator.LAST_30_DAYS.value,
    DateOperator.LAST_90_DAYS.value,
    DateOperator.LAST_YEAR.value,
    DateOperator.ALL_TIME.value,
})

LeafCondition = Union[FactCondition, EngagementCondition]

# Leading decimal number; trailing text such as units is ignored.
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_valueless_operator(operator: str) -> bool:
    return operator in VALUELESS_OPERATORS


def is_rule_complete(rule: Rule) -> bool:
    """A rule participates only if enabled, has an operator, and has a value when needed."""
    if rule.disabled:
        return False
    if not rule.operator:
        return False
    if is_valueless_operator(rule.operator):
        return True
    return rule.value is not None and rule.value != ""


def parse_number(text: str) -> float:
    """Read the leading number of ``text`` (``"10%"`` reads as 10.0); NaN when there is none."""
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return math.nan
    return float(match.group(0))


def convert_value(value: Any, data_type: DataType) -> Any:
    """Coerce a raw editor value to the property's data type."""
    if value is None:
        return value

    if data_type == DataType.NUMBER:
        if isinstance(value, str):
            return parse_number(value)
        return value
    if data_type == DataType.BOOLEAN:
        return value is True or value == "true"
    if data_type == DataType.DATE:
        if isinstance(value, str):
            parsed = parse_datetime(value)
            return parsed if parsed is not None else value
        return value
    return value


def convert_time_window(time_period: str) -> TimeWindow:
    """Map a section time period to a TimeWindow; unknown periods mean last 30 days."""
    try:
        return TimeWindow(time_period)
    except ValueError:
        return TimeWindow.LAST_30_DAYS


def _find_property(rule: Rule, parent_properties: List[PropertyDefinition]) -> Optional[PropertyDefinition]:
    for prop in [*rule.properties, *parent_properties]:
        if prop.id == rule.property_id:
            return prop
    return None


def _has_nan(value: Any) -> bool:
    values = value if isinstance(value, list) else [value]
    return any(isinstance(v, float) and math.isnan(v) for v in values)


def rule_to_condition(
    rule: Rule,
    section: Section,
    schema: SchemaData,
) -> Optional[LeafCondition]:
    """Convert one complete rule; None when its references cannot be resolved."""
    parent = schema.find_parent(rule.parent_name)
    if parent is None:
        logger.warning(
            "rule_parent_not_found",
            rule_id=rule.id,
            parent_name=rule.parent_name,
            section_id=section.id,
        )
        return None

    prop = _find_property(rule, parent.properties)
    if prop is None:
        logger.warning(
            "rule_property_not_found",
            rule_id=rule.id,
            property_id=rule.property_id,
            parent_name=rule.parent_name,
            section_id=section.id,
        )
        return None

    operator = rule.operator
    value = convert_value(rule.value, prop.data_type)
    if operator == ComparisonOperator.BETWEEN.value and rule.value2 is not None:
        value = [value, convert_value(rule.value2, prop.data_type)]

    if _has_nan(value):
        logger.warning(
            "rule_value_unparseable",
            rule_id=rule.id,
            property_id=rule.property_id,
            value=rule.value,
            value2=rule.value2,
            section_id=section.id,
        )
        return None

    if schema.is_engagement(rule.parent_name):
        return EngagementCondition(
            engagement=parent.id,
            property=rule.property_id,
            operator=operator,
            value=value,
            time_window=convert_time_window(section.time_period),
        )

    return FactCondition(
        field=parent.id,
        property=rule.property_id,
        operator=operator,
        value=value,
    )


def _lower_items(
    items: Sequence[Union[Rule, RuleGroup]],
    match_type: MatchType,
    section: Section,
    schema: SchemaData,
) -> ConditionGroup:
    included = []
    excluded = []

    for item in items:
        if isinstance(item, RuleGroup):
            nested = _lower_items(item.items, item.match_type, section, schema)
            if nested.conditions:
                included.append(nested)
            continue

        if not is_rule_complete(item):
            continue
        condition = rule_to_condition(item, section, schema)
        if condition is None:
            continue
        if item.excluded:
            excluded.append(condition)
        else:
            included.append(condition)

    conditions = list(included)
    if excluded:
        conditions.append(ConditionGroup(operator=LogicalOperator.AND, conditions=excluded))

    if not conditions:
        return ConditionGroup(operator=LogicalOperator.AND, conditions=[])

    return ConditionGroup(
        operator=LogicalOperator.AND if match_type == MatchType.ALL else LogicalOperator.OR,
        conditions=conditions,
    )


def section_to_condition_group(section: Section, schema: SchemaData) -> ConditionGroup:
    """Lower one section; a section with no usable rules yields an empty (match-all) group."""
    group = _lower_items(section.items, section.match_type, section, schema)
    logger.debug(
        "section_lowered",
        section_id=section.id,
        item_count=len(section.items),
        condition_count=len(group.conditions),
    )
    return group


def sections_to_condition_group(
    sections: Sequence[Section],
    schema: SchemaData,
    section_ids: Optional[Sequence[str]] = None,
) -> ConditionGroup:
    """
    Build the membership condition tree from the editor's sections.

    By default only the entry section is used. When several section ids are
    requested, their non-empty groups are combined with AND.
    """
    wanted = list(section_ids) if section_ids else [ENTRY_SECTION_ID]
    by_id = {s.id: s for s in sections}

    groups = []
    for section_id in wanted:
        section = by_id.get(section_id)
        if section is None:
            logger.debug("section_not_found", section_id=section_id)
            continue
        group = section_to_condition_group(section, schema)
        if group.conditions:
            groups.append(group)

    if not groups:
        return ConditionGroup(operator=LogicalOperator.AND, conditions=[])
    if len(groups) == 1:
        return groups[0]
    return ConditionGroup(operator=LogicalOperator.AND, conditions=groups)
