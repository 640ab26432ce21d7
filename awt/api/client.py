"""Portal backend API client implementation."""

import logging
import os
from typing import Any

import backoff
import requests

from awt.core.classifier import SearchMode
from awt.core.constants import API_PREFIX, TEST_ROUTE_PREFIX, APIConstants, PaginationConstants
from awt.exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    InvalidQueryError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    TimeoutError,
    UnavailableError,
)
from awt.models.api import APIResponse, AuditLog
from awt.models.integration import IntegrationRequest, IntegrationStatus
from awt.models.logs import LogEvent, XMLIntegrationResult, parse_log_bundle
from awt.models.product import (
    CreateProductRequest,
    DeParaProduct,
    IntegrationTable,
    TableOptions,
    UpdateProductRequest,
)
from awt.models.stock import StockItem

# Database errors the backend reports verbatim inside a 500 response
NOT_FOUND_MARKERS = ("not found",)
CONFLICT_MARKERS = ("duplicate key", "primary key", "unique constraint", "already exists")


class PortalAPIClient:
    """Client for the Amazonas portal REST backend."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        use_test_routes: bool = False,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: Backend base URL (defaults to AWT_API_BASE_URL env var)
            api_token: Bearer token (defaults to AWT_API_TOKEN env var)
            use_test_routes: Call the unauthenticated /api/v1/test/* routes

        Raises:
            ConfigurationError: If no base URL is configured, or no token is
                available for the authenticated routes

        """
        self.logger = logging.getLogger(__name__)

        self.base_url = (base_url or os.getenv("AWT_API_BASE_URL") or "").rstrip("/")
        self.api_token = api_token or os.getenv("AWT_API_TOKEN")
        self.use_test_routes = use_test_routes

        self.logger.info("Initializing PortalAPIClient")
        self.logger.debug(f"Base URL: {self.base_url} (test routes: {self.use_test_routes})")

        if not self.base_url:
            self.logger.error("Base URL not provided")
            raise ConfigurationError("Backend URL must be provided as parameter or via AWT_API_BASE_URL")

        if not self.api_token and not self.use_test_routes:
            self.logger.error("API token not provided")
            raise ConfigurationError("API token must be provided as parameter or via AWT_API_TOKEN")

        self.session: requests.Session | None = None
        self.logger.info("PortalAPIClient initialized successfully")

    def __enter__(self) -> "PortalAPIClient":
        """Enter context."""
        self.logger.info("Opening client session")
        self.session = requests.Session()
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context."""
        self.logger.info("Closing client session")
        if self.session:
            self.session.close()
            self.session = None
        else:
            self.logger.warning("No session to close")

    @property
    def headers(self) -> dict[str, str]:
        """Get request headers."""
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _url(self, endpoint: str) -> str:
        prefix = f"{API_PREFIX}{TEST_ROUTE_PREFIX}" if self.use_test_routes else API_PREFIX
        return f"{self.base_url}{prefix}{endpoint}"

    def _send(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> requests.Response:
        if not self.session:
            raise RuntimeError("Client not initialized. Use context manager.")

        return self.session.request(
            method,
            self._url(endpoint),
            headers=self.headers,
            params=params,
            json=json_body,
            timeout=APIConstants.REQUEST_TIMEOUT,
        )

    @backoff.on_exception(
        backoff.expo,
        (requests.exceptions.ConnectionError,),
        max_tries=APIConstants.BACKOFF_MAX_TRIES,
        factor=APIConstants.BACKOFF_FACTOR,
        max_value=APIConstants.BACKOFF_MAX_VALUE,
    )
    def _send_with_retry(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> requests.Response:
        """Send a read request, retrying connection failures."""
        return self._send(method, endpoint, params, json_body)

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        retry: bool = False,
    ) -> APIResponse:
        """Make an API request and unwrap the response envelope.

        Args:
            method: HTTP method
            endpoint: API endpoint path (after /api/v1)
            params: Query parameters
            json_body: JSON request body
            retry: Retry connection failures (only for reads)

        Returns:
            Response envelope

        """
        method_name = f"{method} {endpoint}"
        self.logger.debug(f"Making request: {method_name}")

        try:
            if retry:
                response = self._send_with_retry(method, endpoint, params, json_body)
            else:
                response = self._send(method, endpoint, params, json_body)
        except requests.exceptions.Timeout:
            self.logger.error(f"Timeout in {method_name}")
            raise TimeoutError(method_name, APIConstants.REQUEST_TIMEOUT) from None
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Backend unreachable in {method_name}: {e}")
            raise UnavailableError(f"Failed to reach backend in {method_name}: {e}", status_code=0) from e

        return self._handle_response(response, method_name)

    def _parse_envelope(self, response: requests.Response) -> APIResponse | None:
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        return APIResponse.model_validate(payload)

    def _handle_response(self, response: requests.Response, method_name: str) -> APIResponse:
        envelope = self._parse_envelope(response)
        response_text = response.text

        if 200 <= response.status_code < 300:
            if envelope is None:
                raise APIError(response.status_code, f"Invalid JSON response in {method_name}", response_text)
            if not envelope.success:
                raise APIError(response.status_code, envelope.message or f"Request failed in {method_name}", response_text)
            return envelope

        detail = ""
        if envelope is not None:
            detail = envelope.error or envelope.message
        message = f"{detail} ({method_name})" if detail else method_name

        # Map status codes to exceptions
        error_map = {
            400: lambda: InvalidQueryError(detail or None, f"Invalid request: {message}"),
            401: lambda: AuthenticationError(f"Unauthorized access in {message}", response_text),
            403: lambda: PermissionError(f"Access forbidden in {message}", response_text),
            404: lambda: NotFoundError(f"Resource not found in {message}", response_text),
            408: lambda: TimeoutError(method_name, APIConstants.REQUEST_TIMEOUT),
            409: lambda: ConflictError(f"Conflict in {message}", response_text),
            429: lambda: RateLimitError(
                f"Rate limit exceeded in {method_name}",
                response_text,
                int(response.headers.get("Retry-After", 0)) if response.headers.get("Retry-After") else None,
            ),
        }

        self.logger.error(f"{method_name} failed with status {response.status_code}: {detail}")

        if response.status_code in error_map:
            raise error_map[response.status_code]()
        elif 500 <= response.status_code < 600:
            raise self._classify_server_error(response.status_code, detail, message, response_text)
        else:
            raise APIError(
                response.status_code,
                f"Unexpected response status {response.status_code} in {message}",
                response_text,
            )

    def _classify_server_error(self, status_code: int, detail: str, message: str, response_text: str) -> APIError:
        """Recover not-found and duplicate-key failures the backend reports as 500s."""
        lowered = detail.lower()
        if any(marker in lowered for marker in NOT_FOUND_MARKERS):
            return NotFoundError(f"Resource not found in {message}", response_text)
        if any(marker in lowered for marker in CONFLICT_MARKERS):
            return ConflictError(f"Conflict in {message}", response_text)
        return UnavailableError(f"Server error in {message}", status_code, response_text)

    def check_health(self) -> None:
        """Check that the backend answers its health endpoint.

        Raises:
            UnavailableError: If the backend is unreachable or unhealthy

        """
        with requests.Session() as health_session:
            try:
                response = health_session.get(f"{self.base_url}/health", timeout=APIConstants.REQUEST_TIMEOUT)
            except requests.RequestException as e:
                raise UnavailableError(f"Failed to connect to backend at {self.base_url}: {e}", status_code=0) from e
            if response.status_code != 200:
                raise UnavailableError(
                    f"Backend health check failed with status {response.status_code}",
                    response.status_code,
                    response.text,
                )

    def list_tables(self) -> list[IntegrationTable]:
        """List the integration tables the backend can search."""
        self.logger.info("Fetching integration tables")
        envelope = self._make_request("GET", "/depara/tables", retry=True)
        tables = [IntegrationTable.model_validate(item) for item in envelope.data or []]
        self.logger.info(f"Found {len(tables)} tables")
        return tables

    def get_table_options(self) -> TableOptions:
        """Get the company, account and marketplace values for table selection."""
        envelope = self._make_request("GET", "/depara/options", retry=True)
        return TableOptions.model_validate(envelope.data or {})

    def search_products(
        self,
        table_name: str,
        query: str,
        mode: SearchMode | None = None,
    ) -> list[DeParaProduct]:
        """Fetch the complete result set for a DePara query.

        The backend slices results into pages; every page is drained here so
        callers always receive the full, ordered set.

        Args:
            table_name: Integration table to search
            query: Trimmed search string
            mode: Search mode; the backend auto-detects when omitted

        Returns:
            All matching products in server order

        """
        self.logger.info(f"Searching {table_name} for {query!r} ({mode.value if mode else 'auto'})")

        body: dict[str, Any] = {"table_name": table_name, "query": query}
        if mode:
            body["search_by"] = mode.value

        products: list[DeParaProduct] = []
        page = 1
        while True:
            params = {"page": page, "page_size": PaginationConstants.MAX_PAGE_SIZE}
            envelope = self._make_request("POST", "/depara/search", params=params, json_body=body, retry=True)
            data = envelope.data or {}
            products.extend(DeParaProduct.model_validate(item) for item in data.get("products") or [])

            if not data.get("has_next"):
                break
            page += 1

        self.logger.info(f"Found {len(products)} products")
        return products

    def get_product(self, product_id: str, table_name: str) -> DeParaProduct:
        """Get a single product by listing id."""
        self.logger.info(f"Fetching product {product_id}")
        envelope = self._make_request("GET", f"/depara/{product_id}", params={"table": table_name}, retry=True)
        return DeParaProduct.model_validate(envelope.data)

    def create_product(self, request: CreateProductRequest) -> str:
        """Create a product.

        Returns:
            Id of the created product

        """
        self.logger.info(f"Creating product {request.id} in {request.table_name}")
        envelope = self._make_request("POST", "/depara", json_body=request.model_dump())
        data = envelope.data or {}
        return str(data.get("id") or request.id)

    def update_product(self, product_id: str, request: UpdateProductRequest, table_name: str) -> None:
        """Update the SKU and company of a product."""
        self.logger.info(f"Updating product {product_id} in {table_name}")
        self._make_request(
            "PUT",
            f"/depara/{product_id}",
            params={"table": table_name},
            json_body=request.model_dump(),
        )

    def delete_product(self, product_id: str, table_name: str) -> None:
        """Delete a product."""
        self.logger.info(f"Deleting product {product_id} from {table_name}")
        self._make_request("DELETE", f"/depara/{product_id}", params={"table": table_name})

    def get_audit_logs(
        self,
        table_name: str,
        record_id: str | None = None,
        limit: int = APIConstants.AUDIT_DEFAULT_LIMIT,
    ) -> list[AuditLog]:
        """Get the audit trail for a table or one of its records."""
        limit = min(max(1, limit), APIConstants.AUDIT_MAX_LIMIT)
        params: dict[str, Any] = {"table": table_name, "limit": limit}
        if record_id:
            params["record_id"] = record_id

        envelope = self._make_request("GET", "/audit/logs", params=params, retry=True)
        data = envelope.data or {}
        logs = [AuditLog.model_validate(item) for item in data.get("logs") or []]
        self.logger.debug(f"Got {len(logs)} audit entries")
        return logs

    def process_xml_integration(self, num_pedido: str) -> XMLIntegrationResult:
        """Run the XML integration for an order and wait for its result."""
        self.logger.info(f"Processing XML integration for order {num_pedido}")
        envelope = self._make_request("POST", "/xml-integrator/process", json_body={"num_pedido": num_pedido})
        return XMLIntegrationResult.model_validate(envelope.data or {})

    def fetch_job_log_bundle(self, process_id: str) -> list[LogEvent] | None:
        """Get a job's complete log bundle.

        Returns:
            The events in delivered order, or None while the job has no logs yet

        """
        envelope = self._make_request("GET", f"/xml-integrator/logs/{process_id}", retry=True)
        data = envelope.data or {}
        raw_logs = data.get("logs") or []
        if not raw_logs:
            self.logger.debug(f"No logs yet for process {process_id}")
            return None
        return parse_log_bundle(raw_logs, process_id)

    def search_stock(self, sku: str) -> list[StockItem]:
        """Get the stock position of a part across the group's companies."""
        self.logger.info(f"Searching stock for {sku!r}")
        envelope = self._make_request("POST", "/stock/search", json_body={"sku": sku}, retry=True)
        data = envelope.data or {}
        items = [StockItem.model_validate(item) for item in data.get("items") or []]
        self.logger.info(f"Found {len(items)} stock positions for {data.get('sku') or sku}")
        return items

    def execute_integration(self, request: IntegrationRequest) -> XMLIntegrationResult:
        """Integrate a marketplace order into the ERP."""
        self.logger.info(f"Integrating order {request.num_pedido} ({request.conta}/{request.marketplace})")
        envelope = self._make_request("POST", "/integration/execute", json_body=request.model_dump())
        return XMLIntegrationResult.model_validate(envelope.data or {})

    def integration_status(self, integration_id: str) -> IntegrationStatus:
        """Get the execution status of an integration."""
        envelope = self._make_request("GET", f"/integration/status/{integration_id}", retry=True)
        return IntegrationStatus.model_validate({"integration_id": integration_id, **(envelope.data or {})})

    def fetch_integration_bundle(self, integration_id: str) -> list[LogEvent] | None:
        """Get the closing event of an integration.

        Returns:
            A single summary event, or None while the integration is running

        """
        status = self.integration_status(integration_id)
        if not status.is_finished:
            self.logger.debug(f"Integration {integration_id} at {status.progress}% ({status.status})")
            return None
        return [status.to_event()]
