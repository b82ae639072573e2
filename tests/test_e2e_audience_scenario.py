"""
End-to-end test: building and sizing audiences from editor state.

Walks the dashboard flow: sections of rules -> condition builder ->
condition tree -> evaluator per customer -> audience size.

  1. Fact threshold: customers with at least one order
  2. Engagement recency: purchased in the last 30 days
  3. Section match "all": age >= 30 AND country = US
  4. Inclusive numeric between
  5. Disabled rules drop out of the built tree
"""

from datetime import datetime, timedelta, timezone

from audience_engine.audience.sizer import calculate_audience_size, filter_customers
from audience_engine.builder.sections import sections_to_condition_group
from audience_engine.models.customer import Customer, Engagement
from audience_engine.models.rules import MatchType, Rule, Section
from audience_engine.models.schema import (
    DataType,
    EngagementDefinition,
    FactDefinition,
    IndustrySchema,
    PropertyDefinition,
)

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

PURCHASE_HISTORY = [
    PropertyDefinition(id="total_orders", name="Total Orders", data_type=DataType.NUMBER),
    PropertyDefinition(id="lifetime_value", name="Lifetime Value", data_type=DataType.NUMBER),
]
DEMOGRAPHICS = [
    PropertyDefinition(id="age", name="Age", data_type=DataType.NUMBER),
    PropertyDefinition(id="country", name="Country", data_type=DataType.STRING),
]
PURCHASE = [PropertyDefinition(id="amount", name="Amount", data_type=DataType.NUMBER)]


class TestAudienceBuilderE2E:
    """Full flow from rule state to audience size."""

    def setup_method(self):
        self.schema = IndustrySchema(
            industry_name="E-commerce",
            industry_id="ecommerce",
            facts=[
                FactDefinition(id="purchaseHistory", name="Purchase History", properties=PURCHASE_HISTORY),
                FactDefinition(id="demographics", name="Demographics", properties=DEMOGRAPHICS),
            ],
            engagements=[EngagementDefinition(id="purchase", name="Purchase", properties=PURCHASE)],
        )

    def _size(self, customers, *rules, match_type=MatchType.ALL, time_period="last30days"):
        section = Section(id="entry", title="Entry", items=list(rules), match_type=match_type,
                          time_period=time_period)
        group = sections_to_condition_group([section], self.schema)
        return (
            calculate_audience_size(customers, group, NOW),
            [c.id for c in filter_customers(customers, group, NOW)],
        )

    def test_fact_threshold(self):
        customers = [
            Customer(id="C1", facts={"purchaseHistory": {"total_orders": 5}}),
            Customer(id="C2", facts={"purchaseHistory": {"total_orders": 0}}),
            Customer(id="C3", facts={"purchaseHistory": {"total_orders": 2}}),
        ]
        rule = Rule(id="r1", property_id="total_orders", parent_name="Purchase History",
                    properties=PURCHASE_HISTORY, operator="greaterThanOrEqual", value="1")
        assert self._size(customers, rule) == (2, ["C1", "C3"])

    def test_engagement_recency(self):
        customers = [
            Customer(id="C1", engagements=[Engagement(
                type="purchase", timestamp=(NOW - timedelta(days=3)).isoformat(), properties={"amount": 10},
            )]),
            Customer(id="C2", engagements=[Engagement(
                type="purchase", timestamp=(NOW - timedelta(days=40)).isoformat(), properties={"amount": 10},
            )]),
        ]
        rule = Rule(id="r1", property_id="amount", parent_name="Purchase", properties=PURCHASE,
                    operator="greaterThanOrEqual", value="1")
        assert self._size(customers, rule, time_period="last30days") == (1, ["C1"])
        assert self._size(customers, rule, time_period="allTime") == (2, ["C1", "C2"])

    def test_match_all_section(self):
        customers = [
            Customer(id="young", facts={"demographics": {"age": 25, "country": "US"}}),
            Customer(id="adult", facts={"demographics": {"age": 35, "country": "US"}}),
        ]
        rules = [
            Rule(id="r1", property_id="age", parent_name="Demographics", properties=DEMOGRAPHICS,
                 operator="greaterThanOrEqual", value="30"),
            Rule(id="r2", property_id="country", parent_name="Demographics", properties=DEMOGRAPHICS,
                 operator="equals", value="US"),
        ]
        assert self._size(customers, *rules) == (1, ["adult"])
        assert self._size(customers, *rules, match_type=MatchType.ANY) == (2, ["young", "adult"])

    def test_inclusive_between(self):
        customers = [
            Customer(id="at_high", facts={"purchaseHistory": {"lifetime_value": 200}}),
            Customer(id="above", facts={"purchaseHistory": {"lifetime_value": 200.01}}),
            Customer(id="at_low", facts={"purchaseHistory": {"lifetime_value": 100}}),
            Customer(id="below", facts={"purchaseHistory": {"lifetime_value": 99.99}}),
        ]
        rule = Rule(id="r1", property_id="lifetime_value", parent_name="Purchase History",
                    properties=PURCHASE_HISTORY, operator="between", value="100", value2="200")
        assert self._size(customers, rule) == (2, ["at_high", "at_low"])

    def test_disabled_rule_drops_out(self):
        def build(disabled):
            section = Section(id="entry", items=[
                Rule(id="r1", property_id="age", parent_name="Demographics", properties=DEMOGRAPHICS,
                     operator="greaterThanOrEqual", value="30"),
                Rule(id="r2", property_id="country", parent_name="Demographics", properties=DEMOGRAPHICS,
                     operator="equals", value="US", disabled=disabled),
            ])
            return sections_to_condition_group([section], self.schema)

        assert len(build(False).conditions) - len(build(True).conditions) == 1

        customers = [Customer(id="ca", facts={"demographics": {"age": 40, "country": "CA"}})]
        assert calculate_audience_size(customers, build(False), NOW) == 0
        assert calculate_audience_size(customers, build(True), NOW) == 1
