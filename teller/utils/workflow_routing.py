"""
Teller Workflow Step Gating.

The desk walks a fixed sequence of steps:
search -> selection -> customer-detail -> cards -> payment.
Later steps require a selected customer (and, for payment, a selected
card).  Inactive customers may be viewed but never progress to payment.
"""

from __future__ import annotations

from enum import StrEnum
from typing import NamedTuple, Optional

__all__ = [
    "CARD_REQUIRED_MESSAGE",
    "CUSTOMER_REQUIRED_MESSAGE",
    "INACTIVE_CUSTOMER_MESSAGE",
    "TransitionResult",
    "WorkflowStep",
    "can_navigate_to_step",
    "get_next_workflow_step",
    "get_previous_workflow_step",
    "get_step_title",
    "validate_workflow_transition",
]

CUSTOMER_REQUIRED_MESSAGE: str = "Debe seleccionar un cliente antes de continuar."
CARD_REQUIRED_MESSAGE: str = "Debe seleccionar una tarjeta antes de continuar."
INACTIVE_CUSTOMER_MESSAGE: str = (
    "El cliente está inactivo. No es posible continuar al pago."
)


class WorkflowStep(StrEnum):
    SEARCH = "search"
    SELECTION = "selection"
    CUSTOMER_DETAIL = "customer-detail"
    CARDS = "cards"
    PAYMENT = "payment"


class _StepConfig(NamedTuple):
    title: str
    requires_customer: bool
    requires_card: bool


_STEP_ORDER: tuple[WorkflowStep, ...] = tuple(WorkflowStep)

_STEP_CONFIG: dict[WorkflowStep, _StepConfig] = {
    WorkflowStep.SEARCH: _StepConfig("Búsqueda de cliente", False, False),
    WorkflowStep.SELECTION: _StepConfig("Selección de cliente", False, False),
    WorkflowStep.CUSTOMER_DETAIL: _StepConfig("Información del Cliente", True, False),
    WorkflowStep.CARDS: _StepConfig("Gestión de tarjetas", True, False),
    WorkflowStep.PAYMENT: _StepConfig("Procesamiento de pago", True, True),
}


class TransitionResult(NamedTuple):
    valid: bool
    error: Optional[str] = None


def get_next_workflow_step(current: WorkflowStep) -> Optional[WorkflowStep]:
    """Return the following step, or ``None`` at payment."""
    index = _STEP_ORDER.index(current)
    if index == len(_STEP_ORDER) - 1:
        return None
    return _STEP_ORDER[index + 1]


def get_previous_workflow_step(current: WorkflowStep) -> Optional[WorkflowStep]:
    """Return the preceding step, or ``None`` at search."""
    index = _STEP_ORDER.index(current)
    if index == 0:
        return None
    return _STEP_ORDER[index - 1]


def get_step_title(step: WorkflowStep) -> str:
    return _STEP_CONFIG[step].title


def can_navigate_to_step(target: WorkflowStep, has_customer: bool, has_card: bool) -> bool:
    config = _STEP_CONFIG[target]
    if config.requires_customer and not has_customer:
        return False
    if config.requires_card and not has_card:
        return False
    return True


def validate_workflow_transition(
    target: WorkflowStep,
    has_customer: bool,
    has_card: bool,
    customer_is_active: bool = True,
) -> TransitionResult:
    """Check whether the desk may move to *target*.

    Args:
        target: The step being navigated to.
        has_customer: A customer is currently selected.
        has_card: A card is currently selected.
        customer_is_active: Status of the selected customer; an inactive
            customer blocks the payment step.

    Returns:
        ``TransitionResult(valid, error)`` with the teller-facing reason
        when the move is refused.
    """
    if not can_navigate_to_step(target, has_customer, has_card):
        if _STEP_CONFIG[target].requires_customer and not has_customer:
            return TransitionResult(False, CUSTOMER_REQUIRED_MESSAGE)
        return TransitionResult(False, CARD_REQUIRED_MESSAGE)

    if target == WorkflowStep.PAYMENT and not customer_is_active:
        return TransitionResult(False, INACTIVE_CUSTOMER_MESSAGE)

    return TransitionResult(True)
