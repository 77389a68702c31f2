import logging
from typing import Callable, Iterable, List, Optional, Set, Tuple
from artworks.core.models import Artwork, Page
from artworks.core.persistence import SelectionStore
from artworks.services.page_cache import PageCache
from artworks.services.selection import SelectionReconciler, BulkSelector

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[Page], List[Artwork]], None]

class SelectionManager:
    """
    State container for the artworks table: the loaded page, the durable
    selection, the visible selection derived from both, and the pending text
    of the bulk-select dialog.

    The visible selection is recomputed from the store whenever a page is
    applied. Between page loads a row toggle may set it directly, which is
    how an unchecked row disappears from the current render while its id
    stays in the store (unless persist_deselection is enabled).
    """

    def __init__(self, page_cache: PageCache, store: SelectionStore, persist_deselection: bool = False):
        self.page_cache = page_cache
        self.store = store
        self.persist_deselection = persist_deselection
        self.visible_selection: List[Artwork] = []
        self.pending_input: Optional[str] = None
        self.listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def page(self) -> Optional[Page]:
        return self.page_cache.page

    @property
    def selection(self) -> Set[int]:
        return self.store.ids

    @property
    def position(self) -> Optional[Tuple[int, int]]:
        """(first, rows) of the loaded page, in paginator terms."""
        if self.page is None:
            return None
        return self.page.first, self.page.page_size

    @property
    def bulk_dialog_open(self) -> bool:
        return self.pending_input is not None

    def is_selected(self, record: Artwork) -> bool:
        return SelectionReconciler.is_selected(record, self.store.ids)

    def register(self, listener: Listener):
        self.listeners.append(listener)

    def unregister(self, listener: Listener):
        if listener in self.listeners:
            self.listeners.remove(listener)

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------
    async def start(self, first: int = 0, rows: int = 12) -> Optional[List[Artwork]]:
        self.store.load()
        return await self.on_page_change(first, rows)

    async def on_page_request(self, page_number: int, page_size: int) -> Optional[List[Artwork]]:
        """
        Loads the page and recomputes the visible selection. Returns None when
        a newer request superseded this one. PageLoadError propagates with the
        previous page and visible selection left as they were.
        """
        page = await self.page_cache.load_page(page_number, page_size)
        if page is None:
            return None

        self.visible_selection = SelectionReconciler.visible_selection(page, self.store.ids)
        self._notify()
        return list(self.visible_selection)

    async def on_page_change(self, first: int, rows: int) -> Optional[List[Artwork]]:
        if rows < 1:
            raise ValueError(f"Rows per page must be >= 1, got {rows}")
        page_number = max(first, 0) // rows + 1
        return await self.on_page_request(page_number, rows)

    # ------------------------------------------------------------------
    # Row selection
    # ------------------------------------------------------------------
    def on_row_selection_toggle(self, newly_selected: Iterable[Artwork]) -> List[Artwork]:
        selected = SelectionReconciler.restrict_to_page(self.page, newly_selected)
        self.visible_selection = selected
        self.store.merge(r.id for r in selected)

        if self.persist_deselection:
            removed = SelectionReconciler.deselected(self.page, selected)
            if removed:
                self.store.discard(removed)

        self._notify()
        return list(self.visible_selection)

    def clear_selection(self) -> List[Artwork]:
        self.store.clear()
        self.visible_selection = []
        self._notify()
        return []

    # ------------------------------------------------------------------
    # Bulk select dialog
    # ------------------------------------------------------------------
    def open_bulk_dialog(self):
        self.pending_input = ""

    def set_pending_input(self, text: Optional[str]):
        if not self.bulk_dialog_open:
            logger.debug("Ignoring input while bulk dialog is closed")
            return
        self.pending_input = text or ""

    def cancel_bulk_dialog(self):
        self.pending_input = None

    def on_bulk_select_submit(self, raw: Optional[str] = None) -> List[Artwork]:
        text = raw if raw is not None else self.pending_input
        # Submitting always closes the dialog, valid or not
        self.pending_input = None

        if BulkSelector.parse_count(text) is None or self.page is None:
            logger.info(f"Bulk select ignored for input {text!r}")
            return list(self.visible_selection)

        selected = BulkSelector.select_first_k(self.page, text)
        self.visible_selection = selected
        self.store.merge(r.id for r in selected)
        logger.info(f"Bulk selected {len(selected)} artworks on page {self.page.page_number}")
        self._notify()
        return list(self.visible_selection)

    def _notify(self):
        for listener in list(self.listeners):
            try:
                listener(self.page, list(self.visible_selection))
            except Exception as e:
                logger.error(f"Selection listener failed: {e}")
