"""Service-contract lifecycle: numbering, scheduling and completion bookkeeping."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional
from uuid import uuid4

from fieldservice.core.recurrence import (
    project_next_service_date,
    project_recurrence,
)
from fieldservice.models import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
    ContractDraft,
    ContractServiceUpdate,
    ContractStatus,
    ServiceContract,
    same_offset_kind,
)

logger = logging.getLogger(__name__)

CONTRACT_NUMBER_PREFIX = "CON"

OPEN_APPOINTMENT_STATUSES: FrozenSet[AppointmentStatus] = frozenset(
    {AppointmentStatus.SCHEDULED, AppointmentStatus.IN_PROGRESS}
)

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
        }
    ),
    AppointmentStatus.IN_PROGRESS: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

_SERVICE_TYPE_LABELS = {
    "MAINTENANCE": "Maintenance",
    "SUPPORT": "Support",
    "FULL_SERVICE": "Full service",
    "INSPECTION": "Inspection",
    "CONSULTATION": "Consultation",
}


class SchedulingError(ValueError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class ContractNotActive(SchedulingError):
    pass


class PendingAppointmentExists(SchedulingError):
    pass


class ContractMismatch(SchedulingError):
    pass


class InvalidStatusTransition(SchedulingError):
    pass


@dataclass
class StatusChangeResult:
    appointment: Appointment
    contract_update: Optional[ContractServiceUpdate] = None

    @property
    def changed(self) -> bool:
        return self.contract_update is not None


def next_contract_number(last_number: Optional[str], year: int) -> str:
    """CON-<year>-<NNNNN>, one past the trailing digits of the last issued number."""
    sequence = 1
    if last_number:
        match = re.search(r"(\d+)$", last_number.strip())
        if match:
            sequence = int(match.group(1)) + 1
    return f"{CONTRACT_NUMBER_PREFIX}-{year}-{sequence:05d}"


def draft_contract(
    draft: ContractDraft,
    last_number: Optional[str] = None,
    year: Optional[int] = None,
    contract_id: Optional[str] = None,
) -> ServiceContract:
    """Turn a validated draft into an ACTIVE contract with its first service date projected."""
    year = year or draft.startDate.year
    frequency = draft.serviceFrequency

    next_date = project_next_service_date(draft.startDate, frequency, draft.frequencyValue)

    contract = ServiceContract(
        **draft.model_dump(exclude={"serviceFrequency"}),
        serviceFrequency=frequency.value,
        id=contract_id or uuid4().hex,
        contractNumber=next_contract_number(last_number, year),
        status=ContractStatus.ACTIVE,
        nextServiceDate=next_date,
    )
    logger.info(
        "Drafted contract %s (%s x%d), next service %s",
        contract.contractNumber,
        frequency.value,
        draft.frequencyValue,
        next_date.isoformat() if next_date else "none",
    )
    return contract


def ensure_transition(current: AppointmentStatus, new: AppointmentStatus) -> None:
    if new == current:
        return
    if new not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(
            [f"cannot move appointment from {current.value} to {new.value}"]
        )


def record_completed_service(
    contract: ServiceContract, appointment: Appointment
) -> Optional[ContractServiceUpdate]:
    """
    Contract bookkeeping for a completed visit.

    lastServiceDate becomes the visit's start date and nextServiceDate is
    projected from it. ONE_TIME contracts and unknown cadences produce no
    update at all, so nothing is written.
    """
    projection = project_recurrence(
        appointment.startDate, contract.serviceFrequency, contract.frequencyValue
    )
    if not projection.recurs:
        logger.info(
            "Contract %s not rescheduled (%s)", contract.contractNumber, projection.kind.value
        )
        return None

    return ContractServiceUpdate(
        contractId=contract.id,
        lastServiceDate=appointment.startDate,
        nextServiceDate=projection.next_date,
    )


def change_appointment_status(
    appointment: Appointment,
    new_status: AppointmentStatus,
    contract: Optional[ServiceContract] = None,
) -> StatusChangeResult:
    """
    Apply a status change to an appointment.

    The contract is only touched when the status really moves to COMPLETED
    and the appointment belongs to a contract; re-sending COMPLETED for an
    already completed appointment is a no-op.
    """
    ensure_transition(appointment.status, new_status)

    completing = (
        new_status == AppointmentStatus.COMPLETED
        and appointment.status != AppointmentStatus.COMPLETED
    )
    updated = appointment.model_copy(update={"status": new_status})

    if not completing or appointment.serviceContractId is None:
        return StatusChangeResult(appointment=updated)

    if contract is None:
        # caller could not load the contract (deleted, other tenant)
        logger.warning(
            "Appointment %s completed but contract %s was not supplied",
            appointment.id,
            appointment.serviceContractId,
        )
        return StatusChangeResult(appointment=updated)

    if contract.id != appointment.serviceContractId:
        raise ContractMismatch(
            [
                f"appointment {appointment.id} belongs to contract "
                f"{appointment.serviceContractId}, not {contract.id}"
            ]
        )

    return StatusChangeResult(
        appointment=updated,
        contract_update=record_completed_service(contract, appointment),
    )


def schedule_contract_service(
    contract: ServiceContract,
    open_appointments: Iterable[Appointment],
    start_date: datetime,
    end_date: Optional[datetime] = None,
    technician_id: Optional[str] = None,
    description: Optional[str] = None,
    notes: Optional[str] = None,
    appointment_id: Optional[str] = None,
) -> Appointment:
    """Book the next visit of an ACTIVE contract with no visit already pending."""
    if contract.status != ContractStatus.ACTIVE:
        raise ContractNotActive([f"contract {contract.contractNumber} is not active"])

    pending = [
        appt
        for appt in open_appointments
        if appt.serviceContractId == contract.id and appt.status in OPEN_APPOINTMENT_STATUSES
    ]
    if pending:
        raise PendingAppointmentExists(
            [f"contract {contract.contractNumber} already has pending appointment {pending[0].id}"]
        )

    if end_date is not None and not same_offset_kind(start_date, end_date):
        raise SchedulingError(["startDate and endDate must both carry a timezone offset or neither"])
    if end_date is not None and end_date < start_date:
        raise SchedulingError(["endDate must not be before startDate"])

    label = _SERVICE_TYPE_LABELS.get(contract.serviceType, "Service")
    client = contract.clientName or contract.clientId

    return Appointment(
        id=appointment_id or uuid4().hex,
        title=f"{label} - {client}",
        type=(
            AppointmentType.MAINTENANCE
            if contract.serviceType == "MAINTENANCE"
            else AppointmentType.SERVICE
        ),
        status=AppointmentStatus.SCHEDULED,
        startDate=start_date,
        endDate=end_date,
        technicianId=technician_id,
        description=description or f"Scheduled service for contract {contract.contractNumber}",
        notes=notes,
        serviceContractId=contract.id,
    )


__all__ = [
    "ALLOWED_TRANSITIONS",
    "ContractMismatch",
    "ContractNotActive",
    "InvalidStatusTransition",
    "OPEN_APPOINTMENT_STATUSES",
    "PendingAppointmentExists",
    "SchedulingError",
    "StatusChangeResult",
    "change_appointment_status",
    "draft_contract",
    "ensure_transition",
    "next_contract_number",
    "record_completed_service",
    "schedule_contract_service",
]
