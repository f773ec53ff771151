# eda_workshop/wishlist.py
"""
Wire contracts shared by the CDK stack and the client tooling:
the wishlist request shape, the event names and the routing predicates.
"""
import json
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

WISHLIST_RECEIVED = "WishlistReceived"
INGRESS_SOURCE = "workshop.eda"
GIFT_REQUESTED = "GiftRequested"
DEAR_SANTA_PATH = "dear-santa"

GIFT_TYPES = ("lego", "surprise")

# Field definitions for the API Gateway request model
WISHLIST_PROPERTIES = {
    "from": {"description": "Name of wishlist creator"},
    "gift": {"description": "Type of gift on the wishlist", "enum": list(GIFT_TYPES)},
    "legoSKU": {"description": "LEGO product ID"},
}
WISHLIST_REQUIRED = ("from", "gift")

# Detail fields handed to each gift's workflow
GIFT_ROUTES = {
    "lego": ("from", "legoSKU"),
    "surprise": ("from",),
}


class WishlistRequest(BaseModel):
    """
    A wishlist as posted to /dear-santa.
    The body is forwarded verbatim, so unknown fields are kept.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sender: str = Field(..., alias="from")
    gift: Literal["lego", "surprise"]
    lego_sku: Optional[str] = Field(None, alias="legoSKU")

    def to_payload(self) -> dict:
        """Returns the request body using the wire field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


def ingress_event_pattern() -> dict:
    """Matches every wishlist published by the ingress, regardless of content."""
    return {"detail_type": [WISHLIST_RECEIVED]}


def gift_event_pattern(gift: str) -> dict:
    """
    Builds the predicate selecting wishlists for one gift type.

    Args:
        gift: One of GIFT_TYPES.

    Returns:
        Keyword arguments for events.EventPattern.

    Raises:
        ValueError: If the gift type has no route.
    """
    if gift not in GIFT_ROUTES:
        raise ValueError(f"No route for gift type: {gift!r}")
    return {
        "detail": {"gift": [gift]},
        "detail_type": [WISHLIST_RECEIVED],
        "source": [INGRESS_SOURCE],
    }


def put_events_request_template(event_bus_name: str) -> str:
    """
    VTL template turning the verbatim request body into a single PutEvents entry.
    """
    return json.dumps({
        "Entries": [
            {
                "Detail": "$util.escapeJavaScript($input.body)",
                "DetailType": WISHLIST_RECEIVED,
                "EventBusName": event_bus_name,
                "Source": INGRESS_SOURCE,
            }
        ]
    })
