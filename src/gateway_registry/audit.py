"""Audit trail recorder for gateway-affecting actions."""

from __future__ import annotations

from enum import Enum
from typing import Any

from .ports import IGatewayLogRepository


class GatewayAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DEVICE_ATTACHED = "DEVICE_ATTACHED"
    DEVICE_DETACHED = "DEVICE_DETACHED"
    DELETED = "DELETED"


class AuditLogRecorder:
    """Append one immutable entry per gateway action.

    Writes are synchronous and are not part of the mutation's transaction:
    the mutation is already committed when ``record`` runs. A failed write
    raises instead of being dropped.
    """

    def __init__(self, logs: IGatewayLogRepository) -> None:
        self._logs = logs

    def record(self, gateway_id: str, action: GatewayAction, details: dict[str, Any]) -> None:
        self._logs.append(gateway_id, action.value, details)
