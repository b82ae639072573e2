"""
Data Loader — reads an industry dataset from JSON files.

Layout on disk:

    <data_dir>/<industry_id>/schema.json
    <data_dir>/<industry_id>/customers.json
    <data_dir>/<industry_id>/audiences.json   (optional)
"""

import json
from pathlib import Path
from typing import List, Union

import structlog
from pydantic import BaseModel, ValidationError

from audience_engine.models.audience import Audience
from audience_engine.models.customer import Customer
from audience_engine.models.schema import IndustrySchema

logger = structlog.get_logger(__name__)

AVAILABLE_INDUSTRIES = [
    {"id": "ecommerce", "name": "E-commerce"},
    {"id": "airlines", "name": "Airlines"},
    {"id": "insurance", "name": "Insurance"},
]


class DataLoadError(Exception):
    """Raised when an industry dataset cannot be read or validated."""
    pass


class IndustryData(BaseModel):
    """Everything the dashboard needs for one industry."""

    industry_schema: IndustrySchema = IndustrySchema()
    customers: List[Customer] = []
    audiences: List[Audience] = []


def get_available_industries() -> List[dict]:
    return [dict(i) for i in AVAILABLE_INDUSTRIES]


def _read_json(path: Path):
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def load_industry_data(industry_id: str, data_dir: Union[str, Path]) -> IndustryData:
    """Load schema, customers and saved audiences for ``industry_id``."""
    base = Path(data_dir) / industry_id
    try:
        schema = IndustrySchema.model_validate(_read_json(base / "schema.json"))
        customers = [
            Customer.model_validate(c) for c in _read_json(base / "customers.json")
        ]
        audiences_path = base / "audiences.json"
        audiences = (
            [Audience.model_validate(a) for a in _read_json(audiences_path)]
            if audiences_path.exists()
            else []
        )
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("industry_data_load_failed", industry_id=industry_id, path=str(base), error=str(e))
        raise DataLoadError(f"Failed to load industry data for {industry_id}: {e}") from e

    logger.info(
        "industry_data_loaded",
        industry_id=industry_id,
        customers=len(customers),
        audiences=len(audiences),
    )
    return IndustryData(industry_schema=schema, customers=customers, audiences=audiences)
