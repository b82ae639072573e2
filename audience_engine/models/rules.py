"""Editable rule state produced by the visual rule builder.

Sections hold rules (and nested rule groups) as the operator edits them.
The condition builder reads this state once per recomputation and never
mutates it.
"""

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import Discriminator, Tag

from audience_engine.models.base import WireModel
from audience_engine.models.schema import PropertyDefinition


class MatchType(str, Enum):
    ALL = "all"     # every rule must match
    ANY = "any"     # at least one rule must match


class Rule(WireModel):
    """A single targeting rule bound to one property of a Fact or Engagement."""

    kind: Literal["rule"] = "rule"
    id: str
    property_id: str
    property_name: str = ""
    parent_name: str                            # Fact/Engagement name (or id)
    properties: List[PropertyDefinition] = []   # Properties of the parent
    operator: Optional[str] = None
    value: Optional[Union[bool, int, float, str]] = None
    value2: Optional[Union[int, float, str]] = None  # Upper bound for between
    excluded: bool = False
    disabled: bool = False
    comment: Optional[str] = None
    track_variable: Optional[str] = None


def _item_tag(value: Any) -> str:
    if isinstance(value, dict):
        return "group" if "items" in value else "rule"
    return "group" if isinstance(value, RuleGroup) else "rule"


RuleItem = Annotated[
    Union[
        Annotated[Rule, Tag("rule")],
        Annotated["RuleGroup", Tag("group")],
    ],
    Discriminator(_item_tag),
]


class RuleGroup(WireModel):
    """Rules grouped under their own match type; groups may nest."""

    kind: Literal["group"] = "group"
    id: str
    items: List[RuleItem] = []
    match_type: MatchType = MatchType.ALL


class Section(WireModel):
    """A titled block of rules (entry, goal, exit...) with one time period."""

    id: str
    title: str = ""
    items: List[RuleItem] = []
    match_type: MatchType = MatchType.ALL
    time_period: str = "last30days"
    is_collapsed: bool = False


RuleGroup.model_rebuild()
Section.model_rebuild()
