"""Data contracts for contract and appointment endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fieldservice.models import (
    Appointment,
    AppointmentStatus,
    ContractDraft,
    ContractServiceUpdate,
    ServiceContract,
)


class CreateContractRequest(ContractDraft):
    """A contract draft plus the last number issued to the tenant."""

    lastContractNumber: Optional[str] = None


class ScheduleServiceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    contract: ServiceContract
    openAppointments: List[Appointment] = Field(default_factory=list)
    startDate: datetime
    endDate: Optional[datetime] = None
    technicianId: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None


class StatusChangeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    appointment: Appointment
    status: AppointmentStatus
    contract: Optional[ServiceContract] = None

    @model_validator(mode="after")
    def ensure_contract_reference(self) -> "StatusChangeRequest":
        if self.contract is not None and self.appointment.serviceContractId is None:
            raise ValueError("contract supplied for an appointment without serviceContractId")
        return self


class StatusChangeResponse(BaseModel):
    appointment: Appointment
    contractUpdate: Optional[ContractServiceUpdate] = None
