"""
Audience Engine API — FastAPI endpoints.

Exposes the engine to the audience-builder dashboard:
- Schema and population inspection
- Audience sizing and preview for a condition tree
- Lowering editor sections into a condition tree
- Plain-English section summaries
- Saved audience management
"""

from pathlib import Path
from typing import List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from audience_engine.audience.sizer import (
    calculate_audience_size,
    iter_matching_customers,
)
from audience_engine.audience.store import AudienceStore
from audience_engine.builder.sections import sections_to_condition_group
from audience_engine.builder.summary import summarize_sections
from audience_engine.config import Settings, get_settings
from audience_engine.data.loader import (
    IndustryData,
    get_available_industries,
    load_industry_data,
)
from audience_engine.logging import configure_logging
from audience_engine.models.query import ConditionGroup
from audience_engine.models.rules import Section

logger = structlog.get_logger(__name__)


# --- Request/Response Models ---

class PreviewRequest(BaseModel):
    conditions: ConditionGroup
    limit: Optional[int] = None


class SectionsRequest(BaseModel):
    sections: List[Section]
    section_ids: Optional[List[str]] = None


class SizeResponse(BaseModel):
    size: int
    total: int


class AudienceCreateRequest(BaseModel):
    name: str
    description: str = ""
    conditions: ConditionGroup = ConditionGroup()


class AudienceUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    conditions: Optional[ConditionGroup] = None


# --- Application Factory ---

def _load_default_data(settings: Settings) -> IndustryData:
    industry_dir = Path(settings.data_dir) / settings.industry_id
    if not industry_dir.is_dir():
        logger.warning(
            "industry_data_missing",
            industry_id=settings.industry_id,
            data_dir=settings.data_dir,
        )
        return IndustryData()
    return load_industry_data(settings.industry_id, settings.data_dir)


def create_app(
    industry_data: Optional[IndustryData] = None,
    audience_store: Optional[AudienceStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.service_name, settings.log_level)

    app = FastAPI(
        title="Audience Engine API",
        description="Audience segmentation rule evaluation",
        version="0.1.0",
    )

    data = industry_data or _load_default_data(settings)
    store = audience_store or AudienceStore(
        customers=data.customers, audiences=data.audiences
    )
    schema = data.industry_schema

    app.state.settings = settings
    app.state.industry_data = data
    app.state.audience_store = store

    # === DATASET ===

    @app.get("/health")
    def health():
        return {"status": "ok", "customers": len(store.customers)}

    @app.get("/industries")
    def list_industries():
        """Industries with bundled datasets."""
        return get_available_industries()

    @app.get("/schema")
    def get_schema():
        """Fact and engagement definitions of the loaded dataset."""
        return schema.model_dump(mode="json", by_alias=True)

    @app.get("/customers/count")
    def count_customers():
        return {"total": len(store.customers)}

    # === EVALUATION ===

    @app.post("/audience/size", response_model=SizeResponse)
    def audience_size(conditions: ConditionGroup):
        """Number of customers matching a condition tree."""
        size = calculate_audience_size(store.customers, conditions)
        return SizeResponse(size=size, total=len(store.customers))

    @app.post("/audience/preview")
    def audience_preview(req: PreviewRequest):
        """Ids of the first matching customers."""
        limit = req.limit or settings.preview_limit
        ids = []
        for customer in iter_matching_customers(store.customers, req.conditions):
            ids.append(customer.id)
            if len(ids) >= limit:
                break
        return {"customer_ids": ids, "limit": limit}

    # === RULE BUILDER ===

    @app.post("/sections/conditions")
    def build_conditions(req: SectionsRequest):
        """Lower editor sections into a condition tree."""
        group = sections_to_condition_group(
            req.sections, schema, req.section_ids or [settings.entry_section_id]
        )
        return group.model_dump(mode="json", by_alias=True, exclude_none=True)

    @app.post("/sections/size")
    def sections_size(req: SectionsRequest):
        """Lower editor sections and size the resulting audience."""
        group = sections_to_condition_group(
            req.sections, schema, req.section_ids or [settings.entry_section_id]
        )
        return {
            "conditions": group.model_dump(mode="json", by_alias=True, exclude_none=True),
            "size": calculate_audience_size(store.customers, group),
            "total": len(store.customers),
        }

    @app.post("/sections/summary")
    def sections_summary(req: SectionsRequest):
        """Plain-English headline and rule sentences for each section."""
        return summarize_sections(req.sections)

    # === AUDIENCES ===

    @app.post("/audiences")
    def create_audience(req: AudienceCreateRequest):
        audience = store.create(req.name, req.description, req.conditions)
        return audience.model_dump(mode="json", by_alias=True)

    @app.get("/audiences")
    def list_audiences():
        return [a.model_dump(mode="json", by_alias=True) for a in store.list_items()]

    @app.get("/audiences/{audience_id}")
    def get_audience(audience_id: str):
        audience = store.get(audience_id)
        if not audience:
            raise HTTPException(404, "Audience not found")
        return audience.model_dump(mode="json", by_alias=True)

    @app.put("/audiences/{audience_id}")
    def update_audience(audience_id: str, req: AudienceUpdateRequest):
        audience = store.update(
            audience_id,
            name=req.name,
            description=req.description,
            conditions=req.conditions,
        )
        if not audience:
            raise HTTPException(404, "Audience not found")
        return audience.model_dump(mode="json", by_alias=True)

    @app.delete("/audiences/{audience_id}")
    def delete_audience(audience_id: str):
        if not store.delete(audience_id):
            raise HTTPException(404, "Audience not found")
        return {"status": "deleted", "audience_id": audience_id}

    return app


# Default application instance
app = create_app()
