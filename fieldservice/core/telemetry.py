"""Route to business-event mapping used by the request telemetry hook."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BusinessEvent:
    name: str
    category: str


# "*" stands for exactly one path segment (an id).
BUSINESS_EVENTS: Dict[str, BusinessEvent] = {
    # scheduling
    "POST /api/service-dates/next": BusinessEvent("ServiceDate_Projected", "Operations"),
    "POST /api/service-dates/upcoming": BusinessEvent("ServiceDates_Previewed", "Operations"),
    # contracts
    "POST /api/service-contracts": BusinessEvent("Contract_Created", "Operations"),
    "PUT /api/service-contracts/*": BusinessEvent("Contract_Updated", "Operations"),
    "POST /api/service-contracts/schedule": BusinessEvent("Contract_Scheduled", "Operations"),
    "POST /api/service-contracts/*/schedule": BusinessEvent("Contract_Scheduled", "Operations"),
    # appointments
    "POST /api/appointments": BusinessEvent("Appointment_Scheduled", "Operations"),
    "PUT /api/appointments/*": BusinessEvent("Appointment_Updated", "Operations"),
    "DELETE /api/appointments/*": BusinessEvent("Appointment_Cancelled", "Operations"),
    "POST /api/appointments/*/complete-task": BusinessEvent("Task_Completed", "Operations"),
    "PUT /api/appointments/*/status": BusinessEvent("Appointment_StatusChanged", "Operations"),
    # clients
    "POST /api/clients": BusinessEvent("Client_Created", "CRM"),
    "PUT /api/clients/*": BusinessEvent("Client_Updated", "CRM"),
    "DELETE /api/clients/*": BusinessEvent("Client_Deleted", "CRM"),
    # sales
    "POST /api/quotes": BusinessEvent("Quote_Created", "Sales"),
    "POST /api/quotes/*/send": BusinessEvent("Quote_Sent", "Sales"),
    "POST /api/invoices": BusinessEvent("Invoice_Created", "Sales"),
    "POST /api/invoices/*/payments": BusinessEvent("Payment_Received", "Finance"),
    # reports
    "GET /api/reports/*": BusinessEvent("Report_Generated", "Analytics"),
}


def _compile(pattern: str) -> re.Pattern:
    # escape everything, then turn the escaped "*" back into one segment
    return re.compile("^" + re.escape(pattern).replace(r"\*", "[^/]+") + "$")


_WILDCARD_PATTERNS: List[Tuple[re.Pattern, BusinessEvent]] = [
    (_compile(key), event) for key, event in BUSINESS_EVENTS.items() if "*" in key
]


def match_route(method: str, path: str) -> Optional[BusinessEvent]:
    """Business event for ``METHOD /path``; exact keys win over wildcard keys."""
    if len(path) > 1:
        path = path.rstrip("/")
    key = f"{method.upper()} {path}"

    exact = BUSINESS_EVENTS.get(key)
    if exact is not None:
        return exact

    for regex, event in _WILDCARD_PATTERNS:
        if regex.match(key):
            return event
    return None


def track_business_event(
    method: str,
    path: str,
    status_code: int,
    log: Optional[logging.Logger] = None,
) -> Optional[BusinessEvent]:
    event = match_route(method, path)
    if event is None:
        return None

    log = log or logger
    success = status_code < 400
    log.log(
        logging.INFO if success else logging.WARNING,
        "[BusinessEvent] %s category=%s path=%s status=%s success=%s",
        event.name,
        event.category,
        path,
        status_code,
        success,
    )
    return event


__all__ = [
    "BUSINESS_EVENTS",
    "BusinessEvent",
    "match_route",
    "track_business_event",
]
