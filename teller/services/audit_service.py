"""
Search Audit Service.

Records every teller search, customer selection and card listing.
Recording never breaks the calling operation: a failed append is logged
and reported as ``None``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import ValidationError

from teller.exceptions import AuditWriteError
from teller.logger import StructuredLogger
from teller.models.audit_models import AuditLogRequest, AuditLogResult, SearchAuditLogEntry
from teller.repositories.audit_repository import AuditRepository
from teller.services.base_service import BaseService
from teller.utils.audit import log_audit_event
from teller.utils.card_security import sanitize_for_logging
from teller.utils.general import convert_to_json_safe

DEFAULT_HISTORY_LIMIT: int = 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditService(BaseService):
    """Append-only audit trail of teller actions."""

    def __init__(
        self,
        audit_repo: AuditRepository,
        logger: StructuredLogger,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        super().__init__(logger)
        self._repo = audit_repo
        self._history_limit = history_limit
        self._clock = clock

    def record(self, request: AuditLogRequest) -> Optional[AuditLogResult]:
        """Append one entry.

        ``search_criteria`` is sanitised (card numbers masked, ``cvv``
        removed) before it is logged or stored.

        Returns:
            The stored entry's id and timestamp, or ``None`` if the entry
            could not be built or written.
        """
        criteria = convert_to_json_safe(sanitize_for_logging(request.search_criteria))
        try:
            entry = SearchAuditLogEntry(
                id=str(uuid.uuid4()),
                cashier_id=request.cashier_id,
                search_timestamp=self._clock(),
                search_criteria=criteria,
                results_count=request.results_count,
                selected_customer_id=request.selected_customer_id,
                action_type=request.action_type,
            )
        except ValidationError as exc:
            self._logger.error("Audit entry rejected: %s", exc.errors())
            return None

        log_audit_event(
            logger=self._logger,
            action=entry.action_type,
            cashier_id=entry.cashier_id,
            search_criteria=entry.search_criteria,
            results_count=entry.results_count,
            selected_customer_id=entry.selected_customer_id,
            timestamp=entry.search_timestamp,
        )

        try:
            self._repo.append(entry)
        except AuditWriteError as exc:
            self._logger.error(
                "Audit entry for cashier %s was not persisted: %s", entry.cashier_id, exc,
            )
            return None

        return AuditLogResult(
            id=entry.id,
            timestamp=entry.search_timestamp,
            cashier_id=entry.cashier_id,
        )

    def history(self, cashier_id: str, limit: Optional[int] = None) -> list[SearchAuditLogEntry]:
        """The cashier's entries, newest first.

        Raises:
            RegistryQueryError: If the audit trail cannot be read.
        """
        return self._repo.list_by_cashier(cashier_id, limit or self._history_limit)
