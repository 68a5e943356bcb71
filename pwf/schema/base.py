"""Base model for PWF documents."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PwfModel(BaseModel):
    """Base for every document record.

    Unknown keys are ignored and camelCase aliases may be populated by field name.
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)
