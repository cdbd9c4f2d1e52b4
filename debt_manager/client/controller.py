import asyncio
import logging
import os
import uuid
from decimal import Decimal
from typing import Callable, Optional

from pydantic import ValidationError as FormValidationError

from debt_manager.client.api import CustomerApiClient
from debt_manager.client.state import (
    HIGH_DEBT_THRESHOLD,
    CustomerForm,
    DashboardState,
    SummaryStats,
    compute_stats,
    filter_customers,
)
from debt_manager.exceptions import TransportError
from debt_manager.schemas.customer import CustomerCreate, CustomerOut, CustomerUpdate
from debt_manager.schemas.transaction import TransactionIn
from debt_manager.services.advisory_service import UNAVAILABLE_MESSAGE


logger = logging.getLogger(__name__)

CONNECTION_ERROR = "Erro ao conectar ao servidor."
SAVE_ERROR = "Erro ao salvar."
UPDATE_ERROR = "Erro ao atualizar."
INVALID_FORM = "Dados do cliente inválidos."

REFRESH_FULL = "full"
REFRESH_MERGE = "merge"


class ServerAdvisor:
    """Advisor backed by the server's strategy endpoint."""

    def __init__(self, api: CustomerApiClient):
        self.api = api

    async def get_debt_strategy(self, customer, transactions: list[TransactionIn] | None = None) -> str:
        customer_id = getattr(customer, "id", None)
        try:
            return await asyncio.to_thread(self.api.get_strategy, customer_id)
        except Exception:
            logger.exception("strategy request failed", extra={"customer_id": customer_id})
            return UNAVAILABLE_MESSAGE


class DashboardController:
    """Owns the dashboard state and every call to the customers API.

    The loaded set is replaced wholesale by `load()`; stats and the search
    view are derived from it on every read. Each list fetch carries a
    sequence number and a response older than the last applied one is
    dropped, so a slow stale fetch cannot overwrite fresher data.

    `refresh_mode` controls what happens after a successful create/edit:
    "full" re-lists everything, "merge" patches the single record locally.
    """

    def __init__(
        self,
        api: CustomerApiClient,
        *,
        advisor=None,
        alert: Optional[Callable[[str], None]] = None,
        refresh_mode: str = REFRESH_FULL,
        high_debt_threshold: Decimal | None = None,
        search_email: bool = False,
        id_factory: Callable[[], str] | None = None,
    ):
        if refresh_mode not in (REFRESH_FULL, REFRESH_MERGE):
            raise ValueError(f"unknown refresh_mode: {refresh_mode}")

        self.api = api
        self.advisor = advisor or ServerAdvisor(api)
        self.alert = alert or self._log_alert
        self.refresh_mode = refresh_mode
        self.search_email = search_email
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

        if high_debt_threshold is None:
            env_threshold = os.getenv("HIGH_DEBT_THRESHOLD")
            high_debt_threshold = Decimal(env_threshold) if env_threshold else HIGH_DEBT_THRESHOLD
        self.high_debt_threshold = high_debt_threshold

        self.state = DashboardState()
        self._last_requested = 0
        self._last_applied = 0

    @staticmethod
    def _log_alert(message: str):
        logger.warning("alert: %s", message)

    # ─── loading ──────────────────────────────────────────────────

    def mount(self):
        self.load()

    def load(self) -> bool:
        self._last_requested += 1
        seq = self._last_requested

        self.state.loading = True
        self.state.error = None
        try:
            customers = self.api.list_customers()
        except TransportError as e:
            if self._is_stale(seq):
                return False
            logger.error("customer list failed", extra={"seq": seq, "error": str(e)})
            self._apply(seq, [], error=CONNECTION_ERROR)
            return False

        if self._is_stale(seq):
            logger.debug("discarding stale customer list", extra={"seq": seq, "last_applied": self._last_applied})
            return False

        self._apply(seq, customers)
        return True

    def _is_stale(self, seq: int) -> bool:
        return seq <= self._last_applied

    def _apply(self, seq: int, customers: list[CustomerOut], error: str | None = None):
        self._last_applied = seq
        self.state.customers = list(customers)
        self.state.error = error
        if seq == self._last_requested:
            self.state.loading = False

    # ─── derived views ────────────────────────────────────────────

    @property
    def stats(self) -> SummaryStats:
        return compute_stats(self.state.customers, self.high_debt_threshold)

    @property
    def filtered(self) -> list[CustomerOut]:
        return filter_customers(self.state.customers, self.state.search_term, include_email=self.search_email)

    def set_search(self, term: str):
        self.state.search_term = term or ""

    # ─── create ───────────────────────────────────────────────────

    def open_create(self):
        self.state.is_adding = True
        self.state.form = None

    def cancel_create(self):
        self.state.is_adding = False
        self.state.form = None

    def _validate_form(self, form) -> CustomerForm | None:
        if isinstance(form, CustomerForm):
            form = form.model_dump()
        try:
            return CustomerForm.model_validate(form)
        except FormValidationError as e:
            logger.info("customer form rejected", extra={"errors": e.errors(include_url=False)})
            self.alert(INVALID_FORM)
            return None

    def submit_create(self, form) -> bool:
        self.state.form = form
        valid = self._validate_form(form)
        if valid is None:
            return False

        payload = CustomerCreate(
            id=self.id_factory(),
            name=valid.name,
            phone=valid.phone,
            email=str(valid.email),
            totalDebt=valid.debt,
        )
        try:
            self.api.create_customer(payload)
        except TransportError:
            self.alert(SAVE_ERROR)
            return False

        if self.refresh_mode == REFRESH_MERGE:
            created = CustomerOut(
                id=payload.id,
                name=payload.name,
                phone=payload.phone,
                email=payload.email,
                total_debt=payload.totalDebt,
            )
            self.state.customers = [created, *self.state.customers]
        else:
            self.load()

        self.state.is_adding = False
        self.state.form = None
        return True

    # ─── edit ─────────────────────────────────────────────────────

    def open_edit(self, customer: CustomerOut) -> CustomerForm:
        self.state.selected = customer
        self.state.form = CustomerForm.from_customer(customer)
        return self.state.form

    def cancel_edit(self):
        self.state.selected = None
        self.state.form = None

    def submit_edit(self, form) -> bool:
        selected = self.state.selected
        if selected is None:
            raise RuntimeError("no customer selected for edit")

        self.state.form = form
        valid = self._validate_form(form)
        if valid is None:
            return False

        payload = CustomerUpdate(
            name=valid.name,
            phone=valid.phone,
            email=str(valid.email),
            totalDebt=valid.debt,
        )
        try:
            self.api.update_customer(selected.id, payload)
        except TransportError:
            self.alert(UPDATE_ERROR)
            return False

        if self.refresh_mode == REFRESH_MERGE:
            updated = selected.model_copy(
                update={
                    "name": payload.name,
                    "phone": payload.phone,
                    "email": payload.email,
                    "total_debt": payload.totalDebt,
                }
            )
            self.state.customers = [updated if c.id == selected.id else c for c in self.state.customers]
        else:
            self.load()

        self.state.selected = None
        self.state.form = None
        return True

    # ─── advisory ─────────────────────────────────────────────────

    async def request_strategy(self, customer: CustomerOut, transactions: list[TransactionIn] | None = None) -> str:
        self.state.loading_strategy = True
        self.state.strategy = None
        try:
            text = await self.advisor.get_debt_strategy(customer, transactions)
        except Exception:
            logger.exception("advisor raised", extra={"customer_id": customer.id})
            text = UNAVAILABLE_MESSAGE
        finally:
            self.state.loading_strategy = False

        self.state.strategy = text
        return text
