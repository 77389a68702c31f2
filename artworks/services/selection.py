import re
import logging
from typing import Any, Iterable, List, Optional, Set
from artworks.core.models import Artwork, Page

logger = logging.getLogger(__name__)

COUNT_PATTERN = re.compile(r'^[+-]?\d+$')

class SelectionReconciler:
    @staticmethod
    def visible_selection(page: Optional[Page], selection_set: Set[int]) -> List[Artwork]:
        """Records of the page whose id is selected, in page order."""
        if page is None:
            return []
        return [r for r in page.records if r.id in selection_set]

    @staticmethod
    def is_selected(record: Artwork, selection_set: Set[int]) -> bool:
        return record.id in selection_set

    @staticmethod
    def restrict_to_page(page: Optional[Page], records: Iterable[Artwork]) -> List[Artwork]:
        """
        Maps incoming records (e.g. rows echoed back by the table widget) onto
        the loaded page, keeping page order and dropping anything not on it.
        """
        if page is None:
            return []
        wanted = {r.id for r in records}
        return [r for r in page.records if r.id in wanted]

    @staticmethod
    def deselected(page: Optional[Page], selected: Iterable[Artwork]) -> Set[int]:
        """Ids on the page that are not part of the given selection."""
        if page is None:
            return set()
        keep = {r.id for r in selected}
        return {i for i in page.ids if i not in keep}

class BulkSelector:
    @staticmethod
    def parse_count(raw: Any) -> Optional[int]:
        """Positive integer count from dialog input, or None if the input is not usable."""
        if isinstance(raw, bool):
            return None
        if isinstance(raw, int):
            value = raw
        elif isinstance(raw, str):
            text = raw.strip()
            if not COUNT_PATTERN.match(text):
                return None
            value = int(text)
        else:
            return None

        return value if value > 0 else None

    @staticmethod
    def select_first_k(page: Optional[Page], k: Any) -> List[Artwork]:
        """
        The first k records of the loaded page.

        Only the loaded page is considered: no further pages are fetched and the
        collection's total count is not used, so a k larger than the page selects
        the whole page. Invalid k selects nothing.
        """
        count = BulkSelector.parse_count(k)
        if count is None:
            logger.info(f"Rejected bulk select count: {k!r}")
            return []
        if page is None:
            logger.info("Bulk select requested with no page loaded")
            return []

        if count > len(page.records):
            logger.info(f"Bulk select of {count} capped to the {len(page.records)} loaded artworks")
        return list(page.records[:count])
