from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

# --- Remote Collection Models ---

class Artwork(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    id: int
    title: Optional[Any] = None
    place_of_origin: Optional[Any] = None
    artist_display: Optional[Any] = None
    inscriptions: Optional[Any] = None
    date_start: Optional[Any] = None
    date_end: Optional[Any] = None

    def to_row(self) -> Dict[str, Any]:
        """Flat dict for the table widget. Missing display fields become empty strings."""
        row = self.model_dump()
        for key in ("title", "place_of_origin", "artist_display", "inscriptions", "date_start", "date_end"):
            if row.get(key) is None:
                row[key] = ""
        return row

class Page(BaseModel):
    records: List[Artwork] = []
    total_count: int = 0
    page_number: int = Field(1, ge=1)
    page_size: int = Field(12, ge=1)

    @property
    def ids(self) -> List[int]:
        return [r.id for r in self.records]

    @property
    def first(self) -> int:
        """0-based offset of the first record, as the paginator counts."""
        return (self.page_number - 1) * self.page_size

    @property
    def total_pages(self) -> int:
        return max(1, (self.total_count + self.page_size - 1) // self.page_size)
