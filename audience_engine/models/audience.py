"""A saved audience: a named condition tree with its last computed size."""

from datetime import datetime

from audience_engine.models.base import WireModel
from audience_engine.models.query import ConditionGroup


class Audience(WireModel):
    id: str
    name: str
    description: str = ""
    created_at: datetime
    updated_at: datetime
    conditions: ConditionGroup
    size: int = 0


class AudienceListItem(WireModel):
    """Audience summary for list views (conditions omitted)."""

    id: str
    name: str
    description: str = ""
    created_at: datetime
    updated_at: datetime
    size: int
