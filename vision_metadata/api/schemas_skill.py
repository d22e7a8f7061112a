from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------
# Trigger event (document-store webhook body)
# ---------

class CreatedBy(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)


class TriggerSource(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    created_by: Optional[CreatedBy] = None


class TriggerEvent(BaseModel):
    """
    Only source.id and source.created_by.id are read; the store sends much more.
    """
    model_config = ConfigDict(extra="ignore")

    source: TriggerSource


# ---------
# Response
# ---------

class InvokeSkillResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_id: str
    # template key -> the exact document written under it
    written: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    duration_ms: int


# ---------
# Error payload (global schema)
# ---------

class ErrorBody(BaseModel):
    code: str
    message: str
    request_id: Optional[str] = None


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: ErrorBody
