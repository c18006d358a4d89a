from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fieldservice.core.recurrence import MAX_FREQUENCY_VALUE, ServiceFrequency


class ContractStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AppointmentType(str, Enum):
    SERVICE = "SERVICE"
    MAINTENANCE = "MAINTENANCE"
    INSTALLATION = "INSTALLATION"
    REPAIR = "REPAIR"
    INSPECTION = "INSPECTION"
    CONSULTATION = "CONSULTATION"


def same_offset_kind(first: datetime, second: datetime) -> bool:
    """True when both datetimes are naive or both are aware, i.e. they can be compared."""
    return (first.utcoffset() is None) == (second.utcoffset() is None)


class ContractDraft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    clientId: str
    clientName: str = ""
    serviceType: str = "MAINTENANCE"
    startDate: datetime
    endDate: Optional[datetime] = None
    serviceFrequency: ServiceFrequency = ServiceFrequency.MONTHLY
    frequencyValue: int = Field(default=1, ge=1, le=MAX_FREQUENCY_VALUE)
    amount: float = Field(default=0.0, ge=0)
    description: Optional[str] = None
    autoRenew: bool = False

    @model_validator(mode="after")
    def ensure_validity(self) -> "ContractDraft":
        if self.endDate is not None and not same_offset_kind(self.startDate, self.endDate):
            raise ValueError("startDate and endDate must both carry a timezone offset or neither")
        if self.endDate is not None and self.endDate <= self.startDate:
            raise ValueError("endDate must be after startDate")
        return self


class ServiceContract(ContractDraft):
    id: str
    contractNumber: str
    status: ContractStatus = ContractStatus.ACTIVE
    # stored contracts may carry tags this version does not know;
    # the projector treats those as unsupported instead of failing the load
    serviceFrequency: str = ServiceFrequency.MONTHLY.value
    lastServiceDate: Optional[datetime] = None
    nextServiceDate: Optional[datetime] = None


class Appointment(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    type: AppointmentType = AppointmentType.SERVICE
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    startDate: datetime
    endDate: Optional[datetime] = None
    technicianId: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    serviceContractId: Optional[str] = None


class ContractServiceUpdate(BaseModel):
    """Fields to overwrite on a contract after one of its visits is completed."""

    model_config = ConfigDict(extra="forbid")

    contractId: str
    lastServiceDate: datetime
    nextServiceDate: datetime
