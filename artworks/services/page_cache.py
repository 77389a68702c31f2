import logging
from typing import Awaitable, Callable, List, Optional
from artworks.core.models import Page

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int, int], Awaitable[Page]]

class PageLoadError(Exception):
    def __init__(self, page_number: int, page_size: int, message: str):
        super().__init__(message)
        self.page_number = page_number
        self.page_size = page_size

class PageCache:
    """
    Holds the most recently requested page of the remote collection.

    Every load_page() call takes a ticket. A response is applied only if its
    ticket is still the newest one issued, so a late response for an older
    request never overwrites the page the user navigated to last. Failures
    leave the held page untouched.
    """

    def __init__(self, fetcher: PageFetcher):
        self.fetcher = fetcher
        self.page: Optional[Page] = None
        self.listeners: List[Callable[[Page], None]] = []
        self._issued = 0
        self._completed = 0

    @property
    def pending(self) -> bool:
        return self._completed < self._issued

    def register(self, listener: Callable[[Page], None]):
        self.listeners.append(listener)

    def unregister(self, listener: Callable[[Page], None]):
        if listener in self.listeners:
            self.listeners.remove(listener)

    async def load_page(self, page_number: int, page_size: int) -> Optional[Page]:
        """Returns the applied page, or None if a newer request superseded this one."""
        if page_number < 1:
            raise ValueError(f"Page number must be >= 1, got {page_number}")
        if page_size < 1:
            raise ValueError(f"Page size must be >= 1, got {page_size}")

        self._issued += 1
        ticket = self._issued

        try:
            page = await self.fetcher(page_number, page_size)
        except Exception as e:
            if ticket != self._issued:
                logger.info(f"Ignoring failure of superseded request for page {page_number}: {e}")
                return None
            self._completed = ticket
            logger.warning(f"Failed to load page {page_number}, keeping previous page: {e}")
            raise PageLoadError(page_number, page_size, f"Failed to load page {page_number}: {e}") from e

        if ticket != self._issued:
            logger.info(f"Discarding stale response for page {page_number}")
            return None

        self._completed = ticket
        self.page = page
        logger.info(f"Loaded page {page.page_number} ({len(page.records)} of {page.total_count} artworks)")
        self._notify(page)
        return page

    def _notify(self, page: Page):
        for listener in list(self.listeners):
            try:
                listener(page)
            except Exception as e:
                logger.error(f"Page listener failed: {e}")
