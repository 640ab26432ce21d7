"""TUI mode for paging through and editing DePara search results."""

import logging
from typing import ClassVar

import pyperclip
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import DataTable, Footer, Header, Input, Static

from awt.cli.utils.columns import PRODUCT_COLUMNS, cell_value, product_row
from awt.core.highlighting import highlight_text
from awt.exceptions import AWTError, NotFoundError
from awt.models.cache import PageView
from awt.models.product import DeParaProduct
from awt.services.depara import DeParaSession

# Modal dialog constants
DIALOG_WIDTH_PERCENT = 60  # Dialog width as percentage
DIALOG_MAX_WIDTH = 80  # Maximum width for dialogs

# UI constants
STATUS_BAR_HEIGHT = 1  # Height of the status bar
CSS_PADDING = 1  # Standard padding value for CSS

logger = logging.getLogger(__name__)


def _dialog_css(screen: str) -> str:
    return f"""
    {screen} {{
        align: center middle;
    }}

    {screen} > Vertical {{
        width: {DIALOG_WIDTH_PERCENT}%;
        max-width: {DIALOG_MAX_WIDTH};
        height: auto;
        background: $surface;
        border: solid $primary;
        padding: {CSS_PADDING};
    }}

    {screen} Input {{
        margin: {CSS_PADDING} 0;
    }}
    """


class FilterScreen(ModalScreen[str | None]):
    """Modal screen asking for local filter text."""

    DEFAULT_CSS = _dialog_css("FilterScreen")

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel", "Close", show=False),
    ]

    def __init__(self, current: str = ""):
        super().__init__()
        self.current = current

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("[bold]Filter results[/bold]")
            yield Input(value=self.current, placeholder="Text to match (empty clears the filter)", id="filter-input")
            yield Static("[dim]Press Enter to apply, ESC to close[/dim]")

    def on_mount(self) -> None:
        self.query_one("#filter-input", Input).focus()

    @on(Input.Submitted, "#filter-input")
    def on_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def action_cancel(self) -> None:
        self.dismiss(None)


class EditScreen(ModalScreen[tuple[str, str] | None]):
    """Modal screen for editing the SKU and company of a product."""

    DEFAULT_CSS = _dialog_css("EditScreen")

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel", "Close", show=False),
    ]

    def __init__(self, product: DeParaProduct):
        super().__init__()
        self.product = product

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(f"[bold]Edit {self.product.id}[/bold]")
            yield Input(value=self.product.sku, placeholder="SKU", id="sku-input")
            yield Input(value=self.product.company, placeholder="Empresa", id="company-input")
            yield Static("[dim]Enter on the last field saves, Tab moves between fields, ESC cancels[/dim]")

    def on_mount(self) -> None:
        self.query_one("#sku-input", Input).focus()

    @on(Input.Submitted, "#sku-input")
    def on_sku_submitted(self) -> None:
        self.query_one("#company-input", Input).focus()

    @on(Input.Submitted, "#company-input")
    def on_company_submitted(self) -> None:
        sku = self.query_one("#sku-input", Input).value
        company = self.query_one("#company-input", Input).value
        self.dismiss((sku, company))

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no confirmation."""

    DEFAULT_CSS = _dialog_css("ConfirmScreen")

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("y", "answer(True)", "Yes", show=True),
        Binding("n", "answer(False)", "No", show=True),
        Binding("escape", "answer(False)", "No", show=False),
    ]

    def __init__(self, question: str):
        super().__init__()
        self.question = question

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(self.question)
            yield Static("[dim]y = yes, n = no[/dim]")

    def action_answer(self, answer: bool) -> None:
        self.dismiss(answer)


class DeParaTUI(App[None]):
    """Interactive table over one page of a DePara session."""

    CSS = f"""
    DataTable {{
        height: 1fr;
    }}

    .status-bar {{
        dock: bottom;
        height: {STATUS_BAR_HEIGHT};
        background: $surface;
        color: $text;
        padding: 0 {CSS_PADDING};
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True),
        Binding("n", "next_page", "Next", show=True),
        Binding("p", "prev_page", "Prev", show=True),
        Binding("/", "filter", "Filter", show=True),
        Binding("e", "edit", "Edit", show=True),
        Binding("d", "delete", "Delete", show=True),
        Binding("c", "copy_cell", "Copy Cell", show=True),
        Binding("r", "reload", "Reload", show=True),
    ]

    def __init__(self, session: DeParaSession, highlight: list[str] | None = None):
        super().__init__()
        self.session = session
        self.highlight = [pattern for pattern in highlight or [] if pattern]
        self.filter_text = ""
        self.title = f"DePara {session.table_name}"
        self.sub_title = session.query

    def compose(self) -> ComposeResult:
        yield Header()
        yield DataTable(cursor_type="cell", zebra_stripes=True)
        yield Static("", classes="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.show_row_labels = True
        for column in PRODUCT_COLUMNS:
            table.add_column(column.label, width=column.width, key=column.key)
        self.render_page(self.session.view)
        table.focus()

    def render_page(self, view: PageView, message: str = "") -> None:
        """Redraw the table from a page view and keep the cursor in range."""
        table = self.query_one(DataTable)
        cursor = table.cursor_coordinate
        table.clear()

        patterns = [*self.highlight, self.filter_text] if self.filter_text else self.highlight
        for offset, product in enumerate(view.records):
            row = product_row(product)
            cells = [highlight_text(cell, patterns) for cell in row] if patterns else list(row)
            table.add_row(*cells, key=product.id, label=str(view.first_index + offset))

        if view.records:
            table.move_cursor(row=min(cursor.row, view.count - 1), column=cursor.column, animate=False)
        self.update_status(view, message)

    def update_status(self, view: PageView, message: str = "") -> None:
        status = f"Page {view.page}/{view.total_pages} | Total: {view.total_count}"
        if self.session.is_filtered:
            status += f" (filtered from {self.session.cache.total_count})"
        if message:
            status += f" | {message}"
        self.query_one(".status-bar", Static).update(status)

    def current_product(self) -> DeParaProduct | None:
        view = self.session.view
        row = self.query_one(DataTable).cursor_coordinate.row
        if 0 <= row < view.count:
            return view.records[row]
        return None

    def report(self, error: AWTError) -> None:
        """Show an error without leaving the TUI."""
        logger.debug(f"TUI action failed: {error}")
        hint = " (press r to reload)" if isinstance(error, NotFoundError) else ""
        self.notify(f"{error}{hint}", severity="error", timeout=6)
        self.update_status(self.session.view, "[red]Error[/red]")

    def action_next_page(self) -> None:
        self.render_page(self.session.next_page())

    def action_prev_page(self) -> None:
        self.render_page(self.session.prev_page())

    def action_reload(self) -> None:
        try:
            view = self.session.reload()
        except AWTError as e:
            self.report(e)
            return
        self.render_page(view, "[green]Reloaded[/green]")

    def action_filter(self) -> None:
        def apply_filter(text: str | None) -> None:
            if text is None:
                return
            try:
                view = self.session.filter(text or None)
            except AWTError as e:
                self.report(e)
                return
            self.filter_text = text
            self.render_page(view)

        self.push_screen(FilterScreen(self.filter_text), apply_filter)

    def action_edit(self) -> None:
        product = self.current_product()
        if product is None:
            return

        def save(values: tuple[str, str] | None) -> None:
            if values is None:
                return
            try:
                updated = self.session.update(product.id, *values)
            except AWTError as e:
                self.report(e)
                return
            self.render_page(self.session.view, f"[green]Updated {updated.id}[/green]")

        self.push_screen(EditScreen(product), save)

    def action_delete(self) -> None:
        product = self.current_product()
        if product is None:
            return

        def confirm(answer: bool | None) -> None:
            if not answer:
                return
            try:
                self.session.delete(product.id)
            except AWTError as e:
                self.report(e)
                return
            self.render_page(self.session.view, f"[green]Deleted {product.id}[/green]")

        self.push_screen(ConfirmScreen(f"Delete [bold]{product.id}[/bold] ({product.sku})?"), confirm)

    def action_copy_cell(self) -> None:
        """Copy the current cell content to clipboard."""
        product = self.current_product()
        column = self.query_one(DataTable).cursor_coordinate.column
        if product is None or column >= len(PRODUCT_COLUMNS):
            return

        content = cell_value(product, PRODUCT_COLUMNS[column].key)
        try:
            pyperclip.copy(content)
        except pyperclip.PyperclipException:
            self.update_status(self.session.view, "[red]Copy failed - clipboard not available[/red]")
            return
        self.update_status(self.session.view, "[green]Copied to clipboard![/green]")


def launch_depara_tui(session: DeParaSession, highlight: list[str] | None = None) -> None:
    """Launch the TUI app over a session that already holds a search result."""
    app = DeParaTUI(session, highlight)
    app.run()
