"""Fact and Engagement definitions a dataset exposes."""

from enum import Enum
from typing import List, Literal, Optional, Union

from audience_engine.models.base import WireModel


class DataType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


class PropertyDefinition(WireModel):
    """A single typed attribute of a Fact or an Engagement."""

    id: str
    name: str
    description: str = ""
    data_type: DataType
    allowed_values: Optional[Union[List[str], List[float]]] = None


class FactDefinition(WireModel):
    """A group of relatively static customer attributes."""

    id: str
    name: str
    description: str = ""
    category: Optional[str] = None
    properties: List[PropertyDefinition] = []


class EngagementDefinition(WireModel):
    """A repeatable, timestamped customer event type."""

    id: str
    name: str
    description: str = ""
    properties: List[PropertyDefinition] = []


class SchemaData(WireModel):
    """The Fact and Engagement catalog the condition builder resolves rules against."""

    facts: List[FactDefinition] = []
    engagements: List[EngagementDefinition] = []

    def find_parent(self, name_or_id: str) -> Optional[Union[FactDefinition, EngagementDefinition]]:
        """Find a Fact or Engagement by display name or id; facts take precedence."""
        for parent in [*self.facts, *self.engagements]:
            if parent.name == name_or_id or parent.id == name_or_id:
                return parent
        return None

    def is_engagement(self, name_or_id: str) -> bool:
        return any(
            e.name == name_or_id or e.id == name_or_id for e in self.engagements
        )


class IndustrySchema(SchemaData):
    """Schema for one industry dataset (e-commerce, airlines, insurance...)."""

    industry_name: str = ""
    industry_id: str = ""


class PropertyReference(WireModel):
    """Points at a specific property within a Fact or Engagement."""

    type: Literal["fact", "engagement"]
    parent_id: str
    parent_name: str
    property: PropertyDefinition
