"""
Audience Store — in-memory registry of saved audiences.

Sizes are recomputed against the store's customer population whenever an
audience is created or its conditions change. Nothing is persisted.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence
from uuid import uuid4

import structlog

from audience_engine.audience.sizer import calculate_audience_size
from audience_engine.models.audience import Audience, AudienceListItem
from audience_engine.models.customer import Customer
from audience_engine.models.query import ConditionGroup
from audience_engine.time_window.resolver import utc_now

logger = structlog.get_logger(__name__)


class AudienceStore:
    """
    In-memory audience store for the dashboard.
    Production would back this with a database.
    """

    def __init__(
        self,
        customers: Sequence[Customer] = (),
        audiences: Sequence[Audience] = (),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._customers: List[Customer] = list(customers)
        self._audiences: Dict[str, Audience] = {a.id: a for a in audiences}
        self._clock = clock

    @property
    def customers(self) -> List[Customer]:
        return self._customers

    def create(
        self,
        name: str,
        description: str,
        conditions: ConditionGroup,
    ) -> Audience:
        """Save a new audience and compute its size."""
        now = self._clock()
        audience = Audience(
            id=f"aud_{uuid4().hex[:12]}",
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
            conditions=conditions,
            size=calculate_audience_size(self._customers, conditions, now),
        )
        self._audiences[audience.id] = audience
        logger.info("audience_created", audience_id=audience.id, size=audience.size)
        return audience

    def update(
        self,
        audience_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        conditions: Optional[ConditionGroup] = None,
    ) -> Optional[Audience]:
        """Apply updates to an audience; returns None when it does not exist."""
        existing = self._audiences.get(audience_id)
        if existing is None:
            return None

        now = self._clock()
        new_conditions = conditions if conditions is not None else existing.conditions
        updated = existing.model_copy(
            update={
                "name": name if name is not None else existing.name,
                "description": description if description is not None else existing.description,
                "conditions": new_conditions,
                "updated_at": now,
                "size": calculate_audience_size(self._customers, new_conditions, now),
            }
        )
        self._audiences[audience_id] = updated
        logger.info("audience_updated", audience_id=audience_id, size=updated.size)
        return updated

    def delete(self, audience_id: str) -> bool:
        """Remove an audience."""
        if audience_id in self._audiences:
            del self._audiences[audience_id]
            return True
        return False

    def get(self, audience_id: str) -> Optional[Audience]:
        return self._audiences.get(audience_id)

    def list_items(self) -> List[AudienceListItem]:
        """Summaries of all audiences in creation order."""
        return [
            AudienceListItem(
                id=a.id,
                name=a.name,
                description=a.description,
                created_at=a.created_at,
                updated_at=a.updated_at,
                size=a.size,
            )
            for a in self._audiences.values()
        ]

    def count(self) -> int:
        return len(self._audiences)
