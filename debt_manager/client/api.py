import logging
import os

import httpx
from pydantic import TypeAdapter

from debt_manager.exceptions import TransportError
from debt_manager.schemas.customer import CustomerCreate, CustomerOut, CustomerUpdate


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3001"

_customer_list = TypeAdapter(list[CustomerOut])


class CustomerApiClient:
    """Synchronous client for the customers endpoints.

    Any transport failure or non-2xx status raises TransportError.
    """

    def __init__(self, base_url: str | None = None, *, http: httpx.Client | None = None, timeout: float | None = None):
        if http is None:
            base_url = base_url or os.getenv("DEBT_API_URL") or DEFAULT_API_URL
            timeout = timeout if timeout is not None else float(os.getenv("DEBT_API_TIMEOUT") or "10")
            http = httpx.Client(base_url=base_url, timeout=httpx.Timeout(timeout))
        self.http = http

    def close(self):
        self.http.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("request failed", extra={"method": method, "path": path, "error": str(e)})
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            logger.warning("request rejected", extra={"method": method, "path": path, "status": response.status_code})
            raise TransportError(f"Status: {response.status_code}", status_code=response.status_code)
        return response

    def list_customers(self) -> list[CustomerOut]:
        response = self._request("GET", "/customers")
        try:
            data = response.json()
            if not isinstance(data, list):
                return []
            return _customer_list.validate_python(data)
        except ValueError as e:
            raise TransportError(f"malformed customer list: {e}", status_code=response.status_code) from e

    def create_customer(self, payload: CustomerCreate) -> dict:
        return self._request("POST", "/customers", json=payload.model_dump(mode="json")).json()

    def update_customer(self, customer_id: str, payload: CustomerUpdate) -> dict:
        return self._request("PUT", f"/customers/{customer_id}", json=payload.model_dump(mode="json")).json()

    def get_strategy(self, customer_id: str) -> str:
        return self._request("GET", f"/customers/{customer_id}/strategy").json()["strategy"]
