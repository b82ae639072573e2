"""Customer profiles: the population audiences are carved out of."""

from datetime import datetime
from typing import Dict, List, Optional, Union

from audience_engine.models.base import WireModel

PropertyValue = Union[bool, int, float, str, datetime]


class Engagement(WireModel):
    """One occurrence of an engagement event."""

    type: str                                   # Engagement definition id
    timestamp: str                              # ISO 8601
    properties: Dict[str, Optional[PropertyValue]] = {}


class Customer(WireModel):
    """A customer profile: fact groups plus an unordered engagement history."""

    id: str
    facts: Dict[str, Dict[str, Optional[PropertyValue]]] = {}
    engagements: List[Engagement] = []
