"""Tests for the Audience Filter / Sizer."""

from datetime import datetime, timedelta, timezone

from audience_engine.audience.sizer import (
    calculate_audience_size,
    filter_customers,
    iter_matching_customers,
)
from audience_engine.models.customer import Customer, Engagement
from audience_engine.models.query import (
    ConditionGroup,
    EngagementCondition,
    FactCondition,
    LogicalOperator,
    TimeWindow,
)

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def _make_population():
    return [
        Customer(id="c1", facts={"purchaseHistory": {"total_orders": 5}}),
        Customer(id="c2", facts={"purchaseHistory": {"total_orders": 0}}),
        Customer(id="c3", facts={"purchaseHistory": {"total_orders": 2}}),
    ]


def _ordered_at_least_once() -> ConditionGroup:
    return ConditionGroup(operator=LogicalOperator.AND, conditions=[
        FactCondition(
            field="purchaseHistory",
            property="total_orders",
            operator="greaterThanOrEqual",
            value=1,
        ),
    ])


class TestFilterCustomers:
    def test_fact_filter(self):
        matched = filter_customers(_make_population(), _ordered_at_least_once(), NOW)
        assert [c.id for c in matched] == ["c1", "c3"]

    def test_empty_group_returns_everyone(self):
        population = _make_population()
        assert filter_customers(population, ConditionGroup(), NOW) == population

    def test_empty_population(self):
        assert filter_customers([], _ordered_at_least_once(), NOW) == []

    def test_engagement_recency(self):
        customers = [
            Customer(id="c1", engagements=[
                Engagement(type="purchase", timestamp=(NOW - timedelta(days=3)).isoformat()),
            ]),
            Customer(id="c2", engagements=[
                Engagement(type="purchase", timestamp=(NOW - timedelta(days=40)).isoformat()),
            ]),
        ]
        group = ConditionGroup(conditions=[
            EngagementCondition(
                engagement="purchase",
                operator="greaterThanOrEqual",
                value=1,
                time_window=TimeWindow.LAST_30_DAYS,
            ),
        ])
        assert [c.id for c in filter_customers(customers, group, NOW)] == ["c1"]
        assert calculate_audience_size(customers, group, NOW) == 1


class TestCalculateAudienceSize:
    def test_size(self):
        assert calculate_audience_size(_make_population(), _ordered_at_least_once(), NOW) == 2

    def test_idempotent(self):
        population = _make_population()
        group = _ordered_at_least_once()
        first = calculate_audience_size(population, group, NOW)
        second = calculate_audience_size(population, group, NOW)
        assert first == second == 2

    def test_accepts_any_iterable(self):
        population = (c for c in _make_population())
        assert calculate_audience_size(population, _ordered_at_least_once(), NOW) == 2


class TestIterMatchingCustomers:
    def test_lazy(self):
        matches = iter_matching_customers(_make_population(), _ordered_at_least_once(), NOW)
        assert next(matches).id == "c1"
        assert next(matches).id == "c3"

    def test_chunked_scan_matches_full_scan(self):
        population = _make_population() * 4
        group = _ordered_at_least_once()
        chunked = 0
        for start in range(0, len(population), 5):
            chunked += calculate_audience_size(population[start:start + 5], group, NOW)
        assert chunked == calculate_audience_size(population, group, NOW)
