"""
Base Service Class.

Services receive their logger (and any repositories) through ``__init__``.
``_failure`` is the one place a caught domain exception becomes an error
envelope: the exception and its traceback go to the log, the teller gets
the Spanish message from :mod:`teller.utils.user_feedback`.
"""

from __future__ import annotations

from typing import Optional

from teller.logger import StructuredLogger
from teller.models.service_models import ServiceResult, UserFeedbackMessage
from teller.utils.user_feedback import map_error_to_user_message


class BaseService:
    """Base class for all teller services."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger

    def _failure(
        self,
        exc: Exception,
        status_code: int = 500,
        feedback: Optional[UserFeedbackMessage] = None,
    ) -> ServiceResult:
        """Log *exc* with its traceback and wrap the teller-facing message.

        *feedback* replaces the message derived from the exception type.
        """
        self._logger.error(
            "%s: %s", type(exc).__name__, exc,
            exc_info=True, extra={"status_code": status_code},
        )
        if feedback is None:
            feedback = map_error_to_user_message(exc)
        return ServiceResult(
            success=False,
            error=feedback.message,
            status_code=status_code,
            feedback=feedback,
        )
