"""
Teller-Facing Feedback Messages.

Maps exceptions and empty outcomes to the Spanish messages shown at the
teller window.  Technical details never reach the teller; they stay in
the logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from teller.exceptions import (
    CardFetchError,
    CustomerDetailError,
    CustomerSearchError,
    LocationLookupError,
    OfflineModeError,
    RegistryQueryError,
)
from teller.models.service_models import UserFeedbackMessage

__all__ = [
    "CARD_LOAD_FAILED",
    "CUSTOMER_NOT_FOUND",
    "MISSING_FILTERS",
    "NO_RESULTS",
    "OFFLINE_MODE",
    "create_card_load_failure_message",
    "create_customer_not_found_message",
    "create_missing_filters_message",
    "create_no_results_message",
    "create_offline_mode_message",
    "map_error_to_user_message",
]

MISSING_FILTERS: str = "Campos necesarios faltantes"
NO_RESULTS: str = "No hay información de búsqueda"
CARD_LOAD_FAILED: str = "No se pudieron cargar las Tarjetas"
OFFLINE_MODE: str = "Sistema en modo fuera de línea"
CUSTOMER_NOT_FOUND: str = "Cliente no encontrado"

_RETRY: str = "Reintentar"
_CHECK_STATUS: str = "Verificar estado"


def map_error_to_user_message(error: BaseException) -> UserFeedbackMessage:
    """Translate an exception raised by the service layer.

    Unknown exception types map to the generic "unexpected error"
    message; the original exception must already have been logged.
    """
    if isinstance(error, OfflineModeError):
        return UserFeedbackMessage(
            type="error",
            title="Sistema fuera de línea",
            message=(
                "El sistema no está en modo en línea. Por favor, verifica la "
                "conectividad con Cliente Único y el IIB Broker."
            ),
            action_label=_CHECK_STATUS,
        )

    if isinstance(error, CardFetchError):
        return UserFeedbackMessage(
            type="error",
            title="Error al cargar tarjetas",
            message=(
                "No se pudieron cargar las tarjetas del cliente. Por favor, "
                "intenta nuevamente."
            ),
            action_label=_RETRY,
        )

    if isinstance(
        error,
        (RegistryQueryError, CustomerSearchError, CustomerDetailError, LocationLookupError),
    ):
        return UserFeedbackMessage(
            type="error",
            title="Error del sistema",
            message=(
                "Ocurrió un error al acceder a la base de datos. Por favor, "
                "intenta nuevamente en unos momentos."
            ),
            action_label=_RETRY,
        )

    return UserFeedbackMessage(
        type="error",
        title="Error inesperado",
        message=(
            "Ocurrió un error inesperado. Por favor, intenta nuevamente o "
            "contacta al soporte técnico si el problema persiste."
        ),
        action_label=_RETRY,
    )


# ---------------------------------------------------------------------------
# Outcome-specific messages
# ---------------------------------------------------------------------------

def create_missing_filters_message(filled_count: int, required_count: int = 2) -> UserFeedbackMessage:
    return UserFeedbackMessage(
        type="warning",
        title=MISSING_FILTERS,
        message=(
            f"Se requieren al menos {required_count} filtros de búsqueda. "
            f"Actualmente has completado {filled_count}."
        ),
    )


def create_no_results_message(search_criteria: Mapping[str, str]) -> UserFeedbackMessage:
    """Shown when a valid search matched nobody."""
    criteria_count = sum(1 for value in search_criteria.values() if value and value.strip())
    return UserFeedbackMessage(
        type="info",
        title=NO_RESULTS,
        message=(
            f"No se encontraron clientes que coincidan con los {criteria_count} "
            "criterios de búsqueda. Por favor, intenta con filtros diferentes "
            "o menos restrictivos."
        ),
    )


def create_card_load_failure_message() -> UserFeedbackMessage:
    return UserFeedbackMessage(
        type="error",
        title=CARD_LOAD_FAILED,
        message=(
            "No se pudieron cargar las tarjetas asociadas a este cliente. Por "
            "favor, verifica la conectividad e intenta nuevamente."
        ),
        action_label=_RETRY,
    )


def create_offline_mode_message(reasons: Sequence[str]) -> UserFeedbackMessage:
    """Offline banner listing each unavailable dependency."""
    reasons_text = ", ".join(reasons) if reasons else "Sin conexión"
    return UserFeedbackMessage(
        type="error",
        title=OFFLINE_MODE,
        message=(
            f"El sistema no puede realizar operaciones en este momento. "
            f"{reasons_text}. Por favor, verifica la conectividad de red."
        ),
        action_label=_CHECK_STATUS,
    )


def create_customer_not_found_message() -> UserFeedbackMessage:
    return UserFeedbackMessage(
        type="error",
        title=CUSTOMER_NOT_FOUND,
        message=(
            "No se encontró el cliente solicitado. Por favor, verifica el "
            "identificador e intenta nuevamente."
        ),
    )
