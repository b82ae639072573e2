"""
Condition tree — the boolean targeting language the evaluator runs.

A Condition is one of three variants:

  FactCondition        {type: "fact", field, property, operator, value}
  EngagementCondition  {type: "engagement", engagement, property?, operator,
                        value, timeWindow, aggregation?}
  ConditionGroup       {operator: "AND" | "OR", conditions: [...]}

Leaves carry an explicit ``type`` tag; groups are recognised by their
``conditions`` list. An empty group matches every customer.
"""

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import Discriminator, Tag

from audience_engine.models.base import WireModel


class ComparisonOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    BETWEEN = "between"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    IS_TRUE = "isTrue"
    IS_FALSE = "isFalse"


class DateOperator(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    BETWEEN = "between"
    LAST_7_DAYS = "last7days"
    LAST_30_DAYS = "last30days"
    LAST_90_DAYS = "last90days"
    LAST_YEAR = "lastYear"
    ALL_TIME = "allTime"
    CUSTOM_RANGE = "customRange"


class TimeWindow(str, Enum):
    LAST_7_DAYS = "last7days"
    LAST_30_DAYS = "last30days"
    LAST_90_DAYS = "last90days"
    LAST_YEAR = "lastYear"
    ALL_TIME = "allTime"
    CUSTOM_RANGE = "customRange"


class AggregationFunction(str, Enum):
    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"


class LogicalOperator(str, Enum):
    AND = "AND"
    OR = "OR"


# Operators are kept as plain strings on conditions: an operator the
# comparator does not know simply never matches.


class FactCondition(WireModel):
    """Predicate over one property of one Fact group."""

    type: Literal["fact"] = "fact"
    field: str                                  # Fact id, e.g. "purchaseHistory"
    property: str                               # Property id, e.g. "total_orders"
    operator: str
    value: Any = None                           # Scalar, or [low, high] for between


class EngagementCondition(WireModel):
    """Predicate over a customer's engagement history of one type."""

    type: Literal["engagement"] = "engagement"
    engagement: str                             # Engagement id
    property: Optional[str] = None              # None = count the engagements
    operator: str
    value: Any = None
    time_window: TimeWindow = TimeWindow.ALL_TIME
    aggregation: Optional[AggregationFunction] = None


def _condition_tag(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        if "conditions" in value:
            return "group"
        return value.get("type")
    if isinstance(value, ConditionGroup):
        return "group"
    return getattr(value, "type", None)


Condition = Annotated[
    Union[
        Annotated[FactCondition, Tag("fact")],
        Annotated[EngagementCondition, Tag("engagement")],
        Annotated["ConditionGroup", Tag("group")],
    ],
    Discriminator(_condition_tag),
]


class ConditionGroup(WireModel):
    """Boolean combination of child conditions."""

    operator: LogicalOperator = LogicalOperator.AND
    conditions: List[Condition] = []


ConditionGroup.model_rebuild()
