"""Audience engine data models."""

from audience_engine.models.audience import Audience, AudienceListItem
from audience_engine.models.customer import Customer, Engagement
from audience_engine.models.query import (
    AggregationFunction,
    ComparisonOperator,
    Condition,
    ConditionGroup,
    DateOperator,
    EngagementCondition,
    FactCondition,
    LogicalOperator,
    TimeWindow,
)
from audience_engine.models.rules import MatchType, Rule, RuleGroup, Section
from audience_engine.models.schema import (
    DataType,
    EngagementDefinition,
    FactDefinition,
    IndustrySchema,
    PropertyDefinition,
    PropertyReference,
    SchemaData,
)

__all__ = [
    "AggregationFunction",
    "Audience",
    "AudienceListItem",
    "ComparisonOperator",
    "Condition",
    "ConditionGroup",
    "Customer",
    "DataType",
    "DateOperator",
    "Engagement",
    "EngagementCondition",
    "EngagementDefinition",
    "FactCondition",
    "FactDefinition",
    "IndustrySchema",
    "LogicalOperator",
    "MatchType",
    "PropertyDefinition",
    "PropertyReference",
    "Rule",
    "RuleGroup",
    "SchemaData",
    "Section",
    "TimeWindow",
]
