"""Data contracts for the service-date projection endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fieldservice.core.recurrence import MAX_FREQUENCY_VALUE


class NextServiceDateRequest(BaseModel):
    """Inputs for a single next-service-date projection."""

    model_config = ConfigDict(extra="forbid")

    baseDate: datetime = Field(..., description="Start date of the most recently completed visit.")
    # free text on purpose: unknown tags are answered with kind="unsupported"
    serviceFrequency: str = Field(..., description="Cadence tag, e.g. MONTHLY.")
    frequencyValue: int = Field(
        1, ge=1, le=MAX_FREQUENCY_VALUE, description="Multiplier applied to the cadence period."
    )


class NextServiceDateResponse(BaseModel):
    kind: str
    nextServiceDate: Optional[datetime] = None
    label: str


class UpcomingServiceDatesRequest(NextServiceDateRequest):
    count: int = Field(4, ge=1, description="How many future dates to list.")


class UpcomingServiceDatesResponse(BaseModel):
    kind: str
    label: str
    dates: List[datetime]
