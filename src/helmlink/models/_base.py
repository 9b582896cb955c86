"""Base model and unit-tagged scalar types.

Every inbound wire model inherits from :class:`HelmLinkBaseModel` which
provides:

* frozen, hashable instances that can be handed across threads;
* ``extra="ignore"`` so platform-side schema additions do not break
  decoding;
* a ``model_validator(mode="before")`` that drops ``None`` and NaN
  values so the field default is used;
* a ``raw`` dict that captures the original payload.

Angles and lengths are declared with the :data:`Degrees`, :data:`Radians`
and :data:`Meters` aliases so the unit of every field is explicit at the
point of declaration.  The only radian-to-degree conversion in the
library is :func:`degrees_from_radians`.
"""

from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

Degrees = Annotated[float, Field(allow_inf_nan=False, json_schema_extra={"unit": "deg"})]
"""Angle in degrees."""

Radians = Annotated[float, Field(allow_inf_nan=False, json_schema_extra={"unit": "rad"})]
"""Angle in radians."""

Meters = Annotated[float, Field(allow_inf_nan=False, json_schema_extra={"unit": "m"})]
"""Length in meters."""


def degrees_from_radians(value: float) -> float:
    """Convert an angle reported in radians to degrees."""
    return value * 180.0 / math.pi


class HelmLinkBaseModel(BaseModel):
    """Base for inbound message models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)
    """Original payload dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop null/NaN values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        # Keep a caller-supplied raw= when constructing from kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
