"""
Condition Evaluator — decides whether one customer satisfies a condition.

Behavioral Contract:
- Accepts a Customer and any Condition variant (fact, engagement, group)
- Recurses through groups; an empty group is satisfied by everyone
- Missing data or unsupported comparisons make the condition False for that
  customer only; nothing here raises on malformed input
- Pure function of (customer, condition, now): no I/O, no shared state
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, List, Optional

import structlog

from audience_engine.evaluation.comparator import compare, is_number, parse_datetime
from audience_engine.models.customer import Customer, Engagement
from audience_engine.models.query import (
    AggregationFunction,
    ConditionGroup,
    EngagementCondition,
    FactCondition,
    LogicalOperator,
    TimeWindow,
)
from audience_engine.time_window.resolver import resolve_time_window, utc_now

logger = structlog.get_logger(__name__)


def evaluate_condition(
    customer: Customer,
    condition: Any,
    now: Optional[datetime] = None,
) -> bool:
    """Evaluate ``condition`` against ``customer``, dispatching on its variant."""
    if now is None:
        now = utc_now()

    if isinstance(condition, ConditionGroup):
        return _evaluate_group(customer, condition, now)
    if isinstance(condition, FactCondition):
        return _evaluate_fact(customer, condition, now)
    if isinstance(condition, EngagementCondition):
        return _evaluate_engagement(customer, condition, now)

    logger.warning(
        "unknown_condition_variant",
        customer_id=customer.id,
        condition_type=type(condition).__name__,
    )
    return False


def _evaluate_group(customer: Customer, group: ConditionGroup, now: datetime) -> bool:
    if not group.conditions:
        return True

    results = (evaluate_condition(customer, c, now) for c in group.conditions)
    if group.operator == LogicalOperator.AND:
        return all(results)
    return any(results)


def _evaluate_fact(customer: Customer, condition: FactCondition, now: datetime) -> bool:
    fact = customer.facts.get(condition.field)
    if not isinstance(fact, Mapping):
        return False

    value = fact.get(condition.property)
    if value is None:
        return False

    return compare(value, condition.operator, condition.value, now)


def _evaluate_engagement(
    customer: Customer,
    condition: EngagementCondition,
    now: datetime,
) -> bool:
    selected = _select_engagements(customer, condition, now)

    # No property: the condition is a test on how many engagements occurred.
    if not condition.property:
        return compare(len(selected), condition.operator, condition.value, now)

    values = [
        e.properties.get(condition.property)
        for e in selected
        if e.properties.get(condition.property) is not None
    ]
    if not values:
        return False

    if condition.aggregation is not None:
        aggregated = apply_aggregation(values, condition.aggregation)
        return compare(aggregated, condition.operator, condition.value, now)

    return any(compare(v, condition.operator, condition.value, now) for v in values)


def _select_engagements(
    customer: Customer,
    condition: EngagementCondition,
    now: datetime,
) -> List[Engagement]:
    """Engagements of the condition's type that fall inside its time window."""
    selected = [e for e in customer.engagements if e.type == condition.engagement]

    if condition.time_window == TimeWindow.ALL_TIME:
        return selected

    cutoff = resolve_time_window(condition.time_window, now)
    if cutoff is None:
        return selected

    in_window = []
    for engagement in selected:
        occurred_at = parse_datetime(engagement.timestamp)
        if occurred_at is None:
            logger.debug(
                "engagement_timestamp_unparseable",
                customer_id=customer.id,
                engagement_type=engagement.type,
                timestamp=engagement.timestamp,
            )
            continue
        if occurred_at >= cutoff:
            in_window.append(engagement)
    return in_window


def apply_aggregation(values: List[Any], aggregation: AggregationFunction) -> float:
    """
    Reduce extracted property values to a single number.

    count uses every value; sum/avg/min/max use only the numeric ones and
    yield 0 when there are none.
    """
    if aggregation == AggregationFunction.COUNT:
        return len(values)

    numbers = [v for v in values if is_number(v)]
    if not numbers:
        return 0

    if aggregation == AggregationFunction.SUM:
        return sum(numbers)
    if aggregation == AggregationFunction.AVG:
        return sum(numbers) / len(numbers)
    if aggregation == AggregationFunction.MIN:
        return min(numbers)
    if aggregation == AggregationFunction.MAX:
        return max(numbers)
    return len(values)
