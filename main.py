"""
Teller Desk Entry Point.

Bootstraps the dependency graph via constructor injection, initialises
the local SQLite registry mirror and runs one teller-workflow command.
Every subsystem is wired here; no module-level globals.

Usage::

    python main.py --cashier EMP001 health
    python main.py --cashier EMP001 search --first-name Juan --last-name Pérez
    python main.py --cashier EMP001 detail <customer-id>
    python main.py --cashier EMP001 cards <customer-id>
    python main.py --cashier EMP001 select <customer-id> <card-id>
"""

from __future__ import annotations

import argparse
import atexit
import json
import sys
from collections.abc import Sequence
from typing import Optional

from teller.auth import SessionManager
from teller.config import get_config
from teller.database import DatabaseManager
from teller.logger import StructuredLogger, get_logger
from teller.models.search_models import CustomerSearchFilters
from teller.models.service_models import ServiceResult
from teller.schema import initialize_schema
from teller.services import ServiceContainer, create_services
from teller.utils.card_security import is_pci_compliant_display
from teller.utils.general import convert_to_json_safe
from teller.utils.workflow_routing import (
    WorkflowStep,
    get_next_workflow_step,
    get_previous_workflow_step,
    get_step_title,
)

# Step of the teller workflow each command lands on.
_COMMAND_STEPS: dict[str, WorkflowStep] = {
    "search": WorkflowStep.SEARCH,
    "detail": WorkflowStep.CUSTOMER_DETAIL,
    "cards": WorkflowStep.CARDS,
    "select": WorkflowStep.PAYMENT,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teller-desk",
        description="Customer search and card selection for teller windows.",
    )
    parser.add_argument(
        "--cashier",
        required=True,
        metavar="EMPLOYEE_ID",
        help="Employee id of the cashier operating the window.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("health", help="Report online-mode status.")

    search = commands.add_parser("search", help="Search the customer registry.")
    for name, field in CustomerSearchFilters.model_fields.items():
        search.add_argument(
            f"--{name.replace('_', '-')}",
            dest=name,
            default="",
            help=f"Filter on {field.alias or name}.",
        )

    detail = commands.add_parser("detail", help="Show a customer's full profile.")
    detail.add_argument("customer_id")

    cards = commands.add_parser("cards", help="List a customer's cards.")
    cards.add_argument("customer_id")

    select = commands.add_parser("select", help="Select a card for payment.")
    select.add_argument("customer_id")
    select.add_argument("card_id")

    commands.add_parser("states", help="List states.")

    municipalities = commands.add_parser("municipalities", help="List a state's municipalities.")
    municipalities.add_argument("state_id")

    neighborhoods = commands.add_parser(
        "neighborhoods", help="List a municipality's neighborhoods.",
    )
    neighborhoods.add_argument("municipality_id")

    commands.add_parser("history", help="Show this cashier's audit trail.")

    return parser


def _dispatch(
    args: argparse.Namespace, services: ServiceContainer, cashier_id: str,
) -> ServiceResult:
    workflow = services["teller_workflow_service"]

    if args.command == "health":
        return workflow.health()
    if args.command == "search":
        filters = {name: getattr(args, name) for name in CustomerSearchFilters.model_fields}
        return workflow.search_customers(filters, cashier_id)
    if args.command == "detail":
        return workflow.get_customer_detail(args.customer_id, cashier_id)
    if args.command == "cards":
        return workflow.list_customer_cards(args.customer_id, cashier_id)
    if args.command == "select":
        return workflow.select_card_for_payment(args.customer_id, args.card_id, cashier_id)
    if args.command == "states":
        return workflow.list_states()
    if args.command == "municipalities":
        return workflow.list_municipalities(args.state_id)
    if args.command == "neighborhoods":
        return workflow.list_neighborhoods(args.municipality_id)
    if args.command == "history":
        return workflow.audit_history(cashier_id)
    raise ValueError(f"Unknown command: {args.command!r}")


def _workflow_context(step: WorkflowStep) -> dict[str, Optional[str]]:
    following = get_next_workflow_step(step)
    preceding = get_previous_workflow_step(step)
    return {
        "step": step.value,
        "title": get_step_title(step),
        "next": following.value if following else None,
        "previous": preceding.value if preceding else None,
    }


def _render(
    result: ServiceResult,
    logger: StructuredLogger,
    step: Optional[WorkflowStep] = None,
) -> str:
    """Serialise *result* for stdout, refusing anything that carries a PAN.

    When *step* is given the output also names the workflow step the
    command landed on and its neighbours.
    """
    payload = result.model_dump()
    if step is not None:
        payload["workflow"] = _workflow_context(step)
    text = json.dumps(
        convert_to_json_safe(payload),
        ensure_ascii=False,
        indent=2,
    )
    if not is_pci_compliant_display(text):
        logger.critical("Refusing to print a response containing an unmasked card number.")
        raise RuntimeError("Response withheld: unmasked card number detected.")
    return text


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Application entry point; wire dependencies and run one command."""
    args = _build_parser().parse_args(argv)

    logger: StructuredLogger = get_logger("main")
    logger.info("Starting teller desk...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Database Manager (Supabase registry, or the local SQLite mirror)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=config.SQLITE_PATH,
        logger=get_logger("database"),
    )

    # DatabaseManager.close() is idempotent; the explicit close below is
    # the primary path.
    atexit.register(db.close)

    # ------------------------------------------------------------------
    # 3. SQLite Schema Initialization (idempotent)
    # ------------------------------------------------------------------
    initialize_schema(db.sqlite, get_logger("schema"))

    # ------------------------------------------------------------------
    # 4. Service Container (repositories + services, single composition root)
    # ------------------------------------------------------------------
    services = create_services(db=db, config=config)

    # ------------------------------------------------------------------
    # 5. Cashier session
    # ------------------------------------------------------------------
    session = SessionManager()
    try:
        cashier = services["cashier_repository"].find_by_employee_id(args.cashier)
        if cashier is None:
            logger.error("Unknown cashier %s", args.cashier)
            return 2
        try:
            session.set_current_cashier(cashier)
        except PermissionError as exc:
            logger.error("%s", exc)
            return 2
        logger = logger.with_context(cashier_id=session.current_cashier_id)

        # --------------------------------------------------------------
        # 6. Run the command
        # --------------------------------------------------------------
        result = _dispatch(args, services, session.current_cashier_id)
        print(_render(result, logger, _COMMAND_STEPS.get(args.command)))
        return 0 if result.success else 1
    finally:
        session.clear()
        db.close()
        logger.info("Teller desk shut down.")


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
