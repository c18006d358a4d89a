"""HTTP routes for the Flask API."""

import logging
from datetime import datetime
from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from fieldservice.core.contracts import (
    InvalidStatusTransition,
    SchedulingError,
    change_appointment_status,
    draft_contract,
    schedule_contract_service,
)
from fieldservice.core.recurrence import (
    RecurrenceError,
    describe_frequency,
    project_recurrence,
    project_schedule,
)
from fieldservice.models import ContractDraft
from fieldservice.schemas.contracts import (
    CreateContractRequest,
    ScheduleServiceRequest,
    StatusChangeRequest,
    StatusChangeResponse,
)
from fieldservice.schemas.health import HealthResponse
from fieldservice.schemas.recurrence import (
    NextServiceDateRequest,
    NextServiceDateResponse,
    UpcomingServiceDatesRequest,
    UpcomingServiceDatesResponse,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _payload() -> Dict[str, Any]:
    return request.get_json(force=True, silent=False)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return (
        jsonify({"detail": exc.errors(include_url=False, include_context=False)}),
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )


@api_bp.errorhandler(InvalidStatusTransition)
def _handle_invalid_transition(exc: InvalidStatusTransition):
    return jsonify({"error": exc.errors}), HTTPStatus.CONFLICT


@api_bp.errorhandler(SchedulingError)
@api_bp.errorhandler(RecurrenceError)
def _handle_domain_error(exc):
    """Business-rule violations are the caller's fault: 400 with the messages."""
    logger.info("Rejected request to %s: %s", request.path, exc)
    return jsonify({"error": exc.errors}), HTTPStatus.BAD_REQUEST


@api_bp.get("/health")
def health() -> Any:
    """Health-check endpoint."""
    settings = current_app.config["SETTINGS"]
    response = HealthResponse(status="ok", service=settings.project_name)
    return jsonify(response.model_dump())


@api_bp.post("/service-dates/next")
def next_service_date() -> Any:
    """Project the next service date of a contract cadence."""
    payload = NextServiceDateRequest.model_validate(_payload())
    projection = project_recurrence(
        payload.baseDate, payload.serviceFrequency, payload.frequencyValue
    )
    response = NextServiceDateResponse(
        kind=projection.kind.value,
        nextServiceDate=projection.next_date,
        label=describe_frequency(payload.serviceFrequency, payload.frequencyValue),
    )
    return jsonify(response.model_dump(mode="json"))


@api_bp.post("/service-dates/upcoming")
def upcoming_service_dates_preview() -> Any:
    """List the next N service dates, capped by MAX_UPCOMING_DATES."""
    payload = UpcomingServiceDatesRequest.model_validate(_payload())
    limit = current_app.config["SETTINGS"].max_upcoming_dates
    if payload.count > limit:
        raise RecurrenceError([f"count must not exceed {limit}"])

    projection, dates = project_schedule(
        payload.baseDate, payload.serviceFrequency, payload.frequencyValue, payload.count
    )
    response = UpcomingServiceDatesResponse(
        kind=projection.kind.value,
        label=describe_frequency(payload.serviceFrequency, payload.frequencyValue),
        dates=dates,
    )
    return jsonify(response.model_dump(mode="json"))


@api_bp.post("/service-contracts")
def create_contract() -> Any:
    """Number a new contract and project its first service date."""
    payload = CreateContractRequest.model_validate(_payload())
    draft = ContractDraft.model_validate(payload.model_dump(exclude={"lastContractNumber"}))
    contract = draft_contract(
        draft,
        last_number=payload.lastContractNumber,
        year=datetime.utcnow().year,
    )
    return jsonify(contract.model_dump(mode="json")), HTTPStatus.CREATED


@api_bp.post("/service-contracts/schedule")
def schedule_service() -> Any:
    """Book the next visit of an active contract."""
    payload = ScheduleServiceRequest.model_validate(_payload())
    appointment = schedule_contract_service(
        payload.contract,
        payload.openAppointments,
        start_date=payload.startDate,
        end_date=payload.endDate,
        technician_id=payload.technicianId,
        description=payload.description,
        notes=payload.notes,
    )
    return jsonify(appointment.model_dump(mode="json")), HTTPStatus.CREATED


@api_bp.put("/appointments/<appointment_id>/status")
def update_appointment_status(appointment_id: str) -> Any:
    """Change an appointment's status; completing it reschedules its contract."""
    payload = StatusChangeRequest.model_validate(_payload())
    if payload.appointment.id != appointment_id:
        raise SchedulingError(
            [f"appointment id {payload.appointment.id} does not match the URL ({appointment_id})"]
        )

    result = change_appointment_status(payload.appointment, payload.status, payload.contract)
    response = StatusChangeResponse(
        appointment=result.appointment,
        contractUpdate=result.contract_update,
    )
    return jsonify(response.model_dump(mode="json"))
