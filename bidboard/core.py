from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Status(str, Enum):
    ACTIVE = "Active"
    ENDED = "Ended"
    ENDED_VERIFYING = "Ended - Verifying bids"
    ERROR = "Error"

    @property
    def is_ended(self) -> bool:
        return "Ended" in self.value


class FetchError(RuntimeError):
    """Raised when a listing page cannot be retrieved at the transport level."""


class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ListingDescriptor(_Camel):
    id: str
    property_number: str = Field(alias="propertyNumber")


class ExtractionResult(_Camel):
    current_price: int = Field(default=0, ge=0, alias="currentPrice")
    has_bids: bool = Field(default=False, alias="hasBids")
    status: Status = Status.ERROR
    auction_end: Optional[str] = Field(default=None, alias="auctionEnd")
    minutes_left: Optional[int] = Field(default=None, alias="minutesLeft")


class PropertyRecord(_Camel):
    id: str
    property_number: str = Field(alias="propertyNumber")
    url: str
    current_price: int = Field(ge=0, alias="currentPrice")
    has_bids: bool = Field(alias="hasBids")
    status: Status
    auction_end: Optional[str] = Field(default=None, alias="auctionEnd")
    minutes_left: Optional[int] = Field(default=None, alias="minutesLeft")

    @classmethod
    def build(
        cls, listing: ListingDescriptor, url: str, result: ExtractionResult
    ) -> "PropertyRecord":
        return cls(
            id=listing.id,
            property_number=listing.property_number,
            url=url,
            current_price=result.current_price,
            has_bids=result.has_bids,
            status=result.status,
            auction_end=result.auction_end,
            minutes_left=result.minutes_left,
        )


class BatchResult(_Camel):
    properties: List[PropertyRecord] = Field(default_factory=list)
    total: int = 0
    timestamp: str

    def to_json_dict(self) -> dict:
        """Wire form: camelCase keys, absent optional fields dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def calculate_total(properties: List[PropertyRecord]) -> int:
    return sum(p.current_price for p in properties)
