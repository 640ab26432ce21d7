"""DePara editing session bound to the portal backend."""

import logging

from awt.api.client import PortalAPIClient
from awt.cache import Command, Create, Delete, Load, ResultCache, TurnPage, Update
from awt.core.classifier import SearchMode, classify, validate_query
from awt.core.constants import DEFAULT_TABLE_NAME, APIConstants, PaginationConstants
from awt.core.search import RecordSearcher
from awt.exceptions import AWTError, DuplicateRecordError, InvalidQueryError, RecordNotFoundError
from awt.models.api import AuditLog
from awt.models.cache import PageView
from awt.models.product import CreateProductRequest, DeParaProduct, UpdateProductRequest, build_request

logger = logging.getLogger(__name__)


class DeParaSession:
    """Search, paginate, filter and edit the products of one integration table.

    Every backend result is held in a ``ResultCache``; page turns and local
    filters never go back to the backend. Writes are sent to the backend
    first and only applied to the cache once confirmed.
    """

    def __init__(
        self,
        client: PortalAPIClient,
        table_name: str = DEFAULT_TABLE_NAME,
        page_size: int = PaginationConstants.DEFAULT_PAGE_SIZE,
        searcher: RecordSearcher | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            client: Portal API client with an open session
            table_name: Integration table to work on
            page_size: Records per page
            searcher: Local filter implementation
        """
        self.client = client
        self.table_name = table_name
        self.cache: ResultCache[DeParaProduct] = ResultCache(page_size)
        self.searcher = searcher or RecordSearcher()
        self.mode: SearchMode | None = None
        self.journal: list[Command] = []

        self._filtered: ResultCache[DeParaProduct] | None = None
        self._filter_args: dict[str, str | None] = {}

    @property
    def page_size(self) -> int:
        return self.cache.page_size

    @property
    def query(self) -> str:
        return self.cache.query

    @property
    def is_filtered(self) -> bool:
        return self._filtered is not None

    @property
    def active(self) -> ResultCache[DeParaProduct]:
        """The cache pages are served from: the filtered epoch if one is open."""
        return self._filtered if self._filtered is not None else self.cache

    @property
    def view(self) -> PageView:
        return self.active.view()

    def _apply(self, command: Command) -> PageView:
        view = self.cache.dispatch(command)
        self.journal.append(command)
        return view

    def select_table(self, table_name: str) -> None:
        """Switch tables, discarding the cached result set."""
        if table_name == self.table_name:
            return
        logger.info(f"Switching table to {table_name}")
        self.table_name = table_name
        self.mode = None
        self.clear_filter()
        self._apply(Load("", []))

    def search(self, raw: str | None, mode: SearchMode | None = None) -> PageView:
        """Run a backend search and open a new cache epoch on page 1.

        Args:
            raw: Search text as entered
            mode: Forced search mode; classified from the text when omitted

        Returns:
            The first page

        Raises:
            InvalidQueryError: If the query is empty
            UnavailableError: If the backend fails (the cache is unchanged)
        """
        query = validate_query(raw)
        mode = mode or classify(query)

        records = self.client.search_products(self.table_name, query, mode)

        self.mode = mode
        self.clear_filter()
        view = self._apply(Load(query, records))
        logger.info(f"Search {query!r} ({mode.value}) returned {view.total_count} records")
        return view

    def reload(self) -> PageView:
        """Fetch the current query again, staying on the same page when it still exists."""
        if not self.cache.query:
            raise InvalidQueryError(self.cache.query, "No search to reload")

        page = self.active.current_page
        records = self.client.search_products(self.table_name, self.cache.query, self.mode)
        self._apply(Load(self.cache.query, records))
        self._refresh_filter()
        return self.turn_page(page)

    def turn_page(self, page: int) -> PageView:
        """Show a page of the active result set; out-of-range numbers are clamped."""
        if self._filtered is not None:
            return self._filtered.dispatch(TurnPage(page))
        return self._apply(TurnPage(page))

    def next_page(self) -> PageView:
        return self.turn_page(self.active.current_page + 1)

    def prev_page(self) -> PageView:
        return self.turn_page(self.active.current_page - 1)

    def filter(
        self,
        text: str | None = None,
        updated_after: str | None = None,
        updated_before: str | None = None,
    ) -> PageView:
        """Narrow the cached result set locally, opening a filtered epoch on page 1.

        Calling without any criteria clears the filter.
        """
        if not any(value and value.strip() for value in (text, updated_after, updated_before)):
            self.clear_filter()
            return self.view

        matches = self.searcher.filter(
            self.cache.records,
            text=text,
            updated_after=updated_after,
            updated_before=updated_before,
        )
        self._filter_args = {"text": text, "updated_after": updated_after, "updated_before": updated_before}
        self._filtered = self.cache.subset(matches)
        logger.debug(f"Filter kept {len(matches)} of {self.cache.total_count} records")
        return self._filtered.view()

    def clear_filter(self) -> None:
        self._filtered = None
        self._filter_args = {}

    def _refresh_filter(self) -> None:
        """Recompute the filtered epoch after the full set changed, keeping its page."""
        if self._filtered is None:
            return
        page = self._filtered.current_page
        matches = self.searcher.filter(self.cache.records, **self._filter_args)
        self._filtered = self.cache.subset(matches)
        self._filtered.get_page(page)

    def create(self, request: CreateProductRequest) -> DeParaProduct:
        """Create a product and add it to the cached result set.

        Raises:
            DuplicateRecordError: If the id is already cached (the backend is not called)
            ConflictError: If the backend reports a duplicate
        """
        if request.table_name != self.table_name:
            request = request.model_copy(update={"table_name": self.table_name})

        if self.cache.contains(request.id):
            raise DuplicateRecordError(request.id)

        product_id = self.client.create_product(request)

        try:
            record = self.client.get_product(product_id, self.table_name)
        except AWTError as e:
            logger.warning(f"Could not read back product {product_id}, caching request values: {e}")
            record = request.to_product()

        self._apply(Create(record))
        self._refresh_filter()
        return record

    def update(self, product_id: str, sku: str, company: str) -> DeParaProduct:
        """Update the SKU and company of a cached product.

        Raises:
            ValidationError: If sku or company is blank
            RecordNotFoundError: If the product is not cached (the backend is not called)
        """
        request = build_request(UpdateProductRequest, sku=sku, company=company)

        if not self.cache.contains(product_id):
            raise RecordNotFoundError(product_id)

        self.client.update_product(product_id, request, self.table_name)

        self._apply(Update(product_id, request.model_dump()))
        self._refresh_filter()
        return self.cache.get(product_id)  # type: ignore[return-value]

    def delete(self, product_id: str) -> DeParaProduct:
        """Delete a cached product.

        Returns:
            The removed record

        Raises:
            RecordNotFoundError: If the product is not cached (the backend is not called)
        """
        removed = self.cache.get(product_id)
        if removed is None:
            raise RecordNotFoundError(product_id)

        self.client.delete_product(product_id, self.table_name)

        self._apply(Delete(product_id))
        self._refresh_filter()
        return removed

    def audit_trail(self, product_id: str, limit: int = APIConstants.AUDIT_DEFAULT_LIMIT) -> list[AuditLog]:
        """Get the audit entries recorded for a product."""
        return self.client.get_audit_logs(self.table_name, product_id, limit)
