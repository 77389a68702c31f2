import requests
import asyncio
import logging
from collections import Counter
from typing import List, Optional
from pydantic import ValidationError
from nicegui import run
from artworks.core.models import Artwork, Page
from artworks.core.config import config_manager

ARTWORK_FIELDS = ["id", "title", "place_of_origin", "artist_display", "inscriptions", "date_start", "date_end"]

logger = logging.getLogger(__name__)

class ArticApiError(Exception):
    pass

def parse_artworks(data: List[dict]) -> List[Artwork]:
    return [Artwork(**a) for a in data]

class ArticService:
    """Fetches pages of the Art Institute of Chicago artwork collection."""

    def __init__(self, api_url: Optional[str] = None, timeout: Optional[float] = None):
        self.api_url = api_url or config_manager.get_api_url()
        self.timeout = timeout if timeout is not None else config_manager.get_request_timeout()

    async def fetch_page(self, page_number: int, page_size: int) -> Page:
        params = {
            "page": page_number,
            "limit": page_size,
            "fields": ",".join(ARTWORK_FIELDS)
        }
        logger.info(f"Fetching artworks page {page_number} (size {page_size})")

        try:
            try:
                response = await run.io_bound(requests.get, self.api_url, params=params, timeout=self.timeout)
            except RuntimeError:
                # Fallback for environments without a running NiceGUI app
                response = await asyncio.to_thread(requests.get, self.api_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request for page {page_number} failed: {e}")
            raise ArticApiError(f"Request failed: {e}") from e

        # io_bound returns None when the app is shutting down
        if response is None:
            raise ArticApiError(f"Request for page {page_number} was cancelled")

        if response.status_code != 200:
            logger.error(f"API Error: {response.status_code}")
            raise ArticApiError(f"API Error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise ArticApiError(f"Invalid JSON in response for page {page_number}") from e

        return self.parse_page(payload, page_number, page_size)

    def parse_page(self, payload: dict, page_number: int, page_size: int) -> Page:
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise ArticApiError(f"Unexpected response shape for page {page_number}")

        try:
            records = parse_artworks(payload["data"])
        except ValidationError as e:
            raise ArticApiError(f"Invalid artwork record on page {page_number}: {e}") from e

        duplicates = [i for i, n in Counter(r.id for r in records).items() if n > 1]
        if duplicates:
            logger.warning(f"Page {page_number} contains duplicate artwork ids: {duplicates}")

        pagination = payload.get("pagination") or {}
        total = pagination.get("total")
        if isinstance(total, bool) or not isinstance(total, int):
            # Lower bound: everything up to and including this page
            total = (page_number - 1) * page_size + len(records)
            logger.warning(f"No total count in response for page {page_number}, assuming at least {total}")

        return Page(records=records, total_count=total, page_number=page_number, page_size=page_size)

artic_service = ArticService()
