"""Payload models describing a price tree as plain data.

A payload is the declarative form of a tree: leaves carry a name and a
price, containers carry an ordered list of child payloads.  Payloads are
validated by pydantic and turned into live ``composite`` objects by
``catalog.build``.
"""

from __future__ import annotations

import math
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Leaf payload
# ---------------------------------------------------------------------------

class LeafPayload(BaseModel):
    """A single product."""

    kind: Literal["leaf"] = "leaf"
    name: str
    price: float = Field(..., ge=0)

    @field_validator("price")
    @classmethod
    def price_not_nan(cls, v: float) -> float:
        if math.isnan(v):
            raise ValueError("Leaf price must be a number >= 0, got NaN")
        return v


# ---------------------------------------------------------------------------
# Container payload
# ---------------------------------------------------------------------------

class ContainerPayload(BaseModel):
    """A group of products and/or nested groups, in insertion order."""

    kind: Literal["container"] = "container"
    children: list[ItemPayload] = Field(default_factory=list)


ItemPayload = Annotated[
    Union[LeafPayload, ContainerPayload],
    Field(discriminator="kind"),
]

ContainerPayload.model_rebuild()
