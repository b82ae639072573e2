"""
Audience Filter / Sizer — applies the evaluator across a population.

Each customer is evaluated independently against the same condition group,
so a population can be split across workers freely. ``now`` is fixed once
per call so every customer in a scan sees the same relative-time cutoffs.
Nothing is cached: every call rescans the whole population.
"""

from datetime import datetime
from typing import Iterable, Iterator, List, Optional

from audience_engine.evaluation.evaluator import evaluate_condition
from audience_engine.models.customer import Customer
from audience_engine.models.query import ConditionGroup
from audience_engine.time_window.resolver import utc_now


def iter_matching_customers(
    customers: Iterable[Customer],
    conditions: ConditionGroup,
    now: Optional[datetime] = None,
) -> Iterator[Customer]:
    """Yield matching customers lazily; callers may stop between items."""
    if now is None:
        now = utc_now()
    for customer in customers:
        if evaluate_condition(customer, conditions, now):
            yield customer


def filter_customers(
    customers: Iterable[Customer],
    conditions: ConditionGroup,
    now: Optional[datetime] = None,
) -> List[Customer]:
    """Return the customers that satisfy ``conditions``, in input order."""
    return list(iter_matching_customers(customers, conditions, now))


def calculate_audience_size(
    customers: Iterable[Customer],
    conditions: ConditionGroup,
    now: Optional[datetime] = None,
) -> int:
    """Count the customers that satisfy ``conditions``."""
    return sum(1 for _ in iter_matching_customers(customers, conditions, now))
