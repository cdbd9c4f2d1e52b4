"""Dashboard controller against the real app and against scripted transports."""

import asyncio
from decimal import Decimal

import httpx
import pytest

from debt_manager.client.api import CustomerApiClient
from debt_manager.client.controller import (
    CONNECTION_ERROR,
    INVALID_FORM,
    SAVE_ERROR,
    UPDATE_ERROR,
    DashboardController,
    ServerAdvisor,
)
from debt_manager.client.state import CustomerForm
from debt_manager.exceptions import TransportError
from debt_manager.schemas.customer import CustomerOut
from debt_manager.schemas.transaction import TransactionIn, TransactionType
from debt_manager.services.advisory_service import UNAVAILABLE_MESSAGE


ANA = {"name": "Ana", "email": "ana@empresa.com.br", "phone": "11 99999-0000", "debt": "5500"}


class Ids:
    def __init__(self, *ids: str):
        self.ids = list(ids)

    def __call__(self) -> str:
        return self.ids.pop(0)


@pytest.fixture
def alerts() -> list[str]:
    return []


@pytest.fixture
def api(client) -> CustomerApiClient:
    return CustomerApiClient(http=client)


@pytest.fixture
def controller(api, alerts) -> DashboardController:
    return DashboardController(api, alert=alerts.append, id_factory=Ids("a1", "b2", "c3"))


def scripted_api(handler) -> CustomerApiClient:
    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://debt.test")
    return CustomerApiClient(http=http)


class TestLoad:
    def test_empty_store(self, controller: DashboardController) -> None:
        controller.mount()

        assert controller.state.customers == []
        assert controller.state.loading is False
        assert controller.state.error is None
        assert controller.stats.active_customers == 0
        assert controller.stats.total_receivable == 0

    def test_server_error_empties_the_set(self) -> None:
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                return httpx.Response(200, json=[{"id": "a1", "name": "Ana", "totalDebt": 10}])
            return httpx.Response(500, json={"detail": "Internal server error"})

        controller = DashboardController(scripted_api(handler))
        controller.load()
        assert len(controller.state.customers) == 1

        assert controller.load() is False
        assert controller.state.customers == []
        assert controller.state.error == CONNECTION_ERROR
        assert controller.state.loading is False

    def test_connection_refused(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        controller = DashboardController(scripted_api(handler))
        controller.mount()
        assert controller.state.error == CONNECTION_ERROR
        assert controller.state.customers == []

    def test_stale_response_is_discarded(self) -> None:
        fresh = [CustomerOut(id="new", name="Fresh", total_debt="1")]
        stale = [CustomerOut(id="old", name="Stale", total_debt="2")]

        class RacingApi:
            def __init__(self):
                self.controller = None
                self.depth = 0

            def list_customers(self):
                self.depth += 1
                if self.depth == 1:
                    # A newer fetch starts and finishes while this one is in flight.
                    self.controller.load()
                    return stale
                return fresh

        racing = RacingApi()
        controller = DashboardController(racing)
        racing.controller = controller

        assert controller.load() is False
        assert [c.id for c in controller.state.customers] == ["new"]
        assert controller.state.loading is False


class TestCreate:
    def test_create_refetches_and_updates_stats(self, controller: DashboardController, alerts) -> None:
        controller.mount()
        controller.open_create()

        assert controller.submit_create(ANA) is True

        assert alerts == []
        assert controller.state.is_adding is False
        assert controller.state.form is None
        [ana] = controller.state.customers
        assert ana.id == "a1"
        assert ana.total_debt == Decimal("5500.00")
        assert controller.stats.high_debt_count == 1
        assert controller.stats.total_receivable == Decimal("5500.00")

    def test_duplicate_id_alerts_and_keeps_form(self, api, alerts) -> None:
        controller = DashboardController(api, alert=alerts.append, id_factory=Ids("a1", "a1"))
        controller.mount()
        controller.submit_create(ANA)

        controller.open_create()
        other = {**ANA, "name": "Other"}
        assert controller.submit_create(other) is False

        assert alerts == [SAVE_ERROR]
        assert controller.state.is_adding is True
        assert controller.state.form == other
        assert [c.name for c in controller.state.customers] == ["Ana"]

    def test_invalid_form_never_reaches_server(self, controller: DashboardController, alerts) -> None:
        controller.mount()
        assert controller.submit_create({**ANA, "email": "nope"}) is False
        assert controller.submit_create({**ANA, "debt": "-3"}) is False

        assert alerts == [INVALID_FORM, INVALID_FORM]
        controller.load()
        assert controller.state.customers == []

    def test_merge_mode_skips_refetch(self, api, alerts) -> None:
        list_calls = []
        original = api.list_customers

        def counting_list():
            list_calls.append(1)
            return original()

        api.list_customers = counting_list
        controller = DashboardController(api, alert=alerts.append, refresh_mode="merge", id_factory=Ids("a1", "b2"))
        controller.mount()

        controller.submit_create(ANA)
        controller.submit_create({**ANA, "name": "Bruno", "debt": "10"})

        assert len(list_calls) == 1
        assert [c.id for c in controller.state.customers] == ["b2", "a1"]
        assert controller.stats.total_receivable == Decimal("5510.00")


class TestEdit:
    def test_edit_full_replace(self, controller: DashboardController) -> None:
        controller.mount()
        controller.submit_create(ANA)
        [ana] = controller.state.customers

        form = controller.open_edit(ana)
        assert form.name == "Ana"

        edited = form.model_copy(update={"name": "Ana Maria", "debt": Decimal("0")})
        assert controller.submit_edit(edited) is True

        [after] = controller.state.customers
        assert after.id == "a1"
        assert after.name == "Ana Maria"
        assert after.total_debt == 0
        assert after.created_at == ana.created_at
        assert controller.state.selected is None
        assert controller.stats.high_debt_count == 0

    def test_edit_failure_alerts(self, alerts) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "PUT":
                return httpx.Response(404, json={"detail": "Customer not found"})
            return httpx.Response(200, json=[{"id": "a1", "name": "Ana", "email": "ana@empresa.com.br", "totalDebt": 1}])

        controller = DashboardController(scripted_api(handler), alert=alerts.append)
        controller.mount()
        form = controller.open_edit(controller.state.customers[0])

        assert controller.submit_edit(form) is False
        assert alerts == [UPDATE_ERROR]
        assert controller.state.selected is not None

    def test_submit_without_selection(self, controller: DashboardController) -> None:
        with pytest.raises(RuntimeError):
            controller.submit_edit(CustomerForm(name="Ana", email="ana@empresa.com.br"))


def test_search_filters_loaded_set(controller: DashboardController) -> None:
    controller.mount()
    controller.submit_create(ANA)
    controller.submit_create({**ANA, "name": "Bruno"})

    controller.set_search("ana")
    assert [c.name for c in controller.filtered] == ["Ana"]

    controller.set_search("xyz")
    assert controller.filtered == []
    assert len(controller.state.customers) == 2


class TestStrategy:
    def test_server_advisor(self, controller: DashboardController) -> None:
        controller.mount()
        controller.submit_create(ANA)
        ana = controller.state.customers[0]

        text = asyncio.run(controller.request_strategy(ana))

        assert text == "Negotiate a 3x installment plan."
        assert controller.state.strategy == text
        assert controller.state.loading_strategy is False

    def test_raising_advisor_degrades(self, api) -> None:
        class BrokenAdvisor:
            async def get_debt_strategy(self, customer, transactions=None):
                raise TransportError("boom")

        controller = DashboardController(api, advisor=BrokenAdvisor())
        customer = CustomerOut(id="a1", name="Ana", total_debt="1")

        assert asyncio.run(controller.request_strategy(customer)) == UNAVAILABLE_MESSAGE
        assert controller.state.loading_strategy is False


def test_unknown_refresh_mode(api) -> None:
    with pytest.raises(ValueError):
        DashboardController(api, refresh_mode="eventual")


class TestServerAdvisor:
    def test_response_without_strategy_degrades(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"customerId": "a1"})

        advisor = ServerAdvisor(scripted_api(handler))
        customer = CustomerOut(id="a1", name="Ana", total_debt="1")

        assert asyncio.run(advisor.get_debt_strategy(customer)) == UNAVAILABLE_MESSAGE

    def test_returns_server_text(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/customers/a1/strategy"
            return httpx.Response(200, json={"customerId": "a1", "strategy": "Call on Monday."})

        advisor = ServerAdvisor(scripted_api(handler))
        customer = CustomerOut(id="a1", name="Ana", total_debt="1")

        assert asyncio.run(advisor.get_debt_strategy(customer)) == "Call on Monday."


def test_request_strategy_passes_history(api) -> None:
    seen = {}

    class RecordingAdvisor:
        async def get_debt_strategy(self, customer, transactions=None):
            seen["transactions"] = transactions
            return "ok"

    controller = DashboardController(api, advisor=RecordingAdvisor())
    history = [TransactionIn(amount=Decimal("50"), type=TransactionType.PAYMENT)]

    assert asyncio.run(controller.request_strategy(CustomerOut(id="a1", name="Ana"), history)) == "ok"
    assert seen["transactions"] == history
