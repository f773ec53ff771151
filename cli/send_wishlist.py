# cli/send_wishlist.py
import os
import sys
import json
import argparse
import boto3
import requests
from botocore.exceptions import ClientError
from dotenv import load_dotenv
from pydantic import ValidationError

from eda_workshop.wishlist import GIFT_TYPES, INGRESS_SOURCE, WISHLIST_RECEIVED, WishlistRequest

# Load environment variables from a .env file for local testing
load_dotenv()


def build_wishlist(sender: str, gift: str, lego_sku: str = None) -> dict:
    """
    Validates a wishlist and returns the JSON body expected by /dear-santa.

    Raises:
        ValidationError: If the wishlist does not match the request model.
    """
    wishlist = WishlistRequest(sender=sender, gift=gift, lego_sku=lego_sku)
    if wishlist.gift == "lego" and not wishlist.lego_sku:
        print("⚠️ Warning: lego wishlist without a legoSKU, the elves will not know which set to build.")
    return wishlist.to_payload()


def send_wishlist(payload: dict, endpoint: str) -> int | None:
    """
    Posts a wishlist to the API.

    Returns:
        The HTTP status code, or None if the request could not be made.
    """
    if not endpoint:
        print("❌ ERROR: WISHLIST_API environment variable not set. Please create a .env file or pass --endpoint.")
        return None

    print(f"Sending wishlist to {endpoint}: {json.dumps(payload)}")
    try:
        response = requests.post(endpoint, json=payload, timeout=10)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        print(f"❌ Failed to send wishlist. Error: {e}")
        return None

    print(f"✅ Wishlist accepted. Status Code: {response.status_code}")
    return response.status_code


def publish_wishlist_event(events_client, event_bus_name: str, payload: dict) -> str | None:
    """
    Publishes the same event the API integration would, straight onto the bus.

    Returns:
        The EventId, or None if EventBridge rejected the entry.
    """
    if not event_bus_name:
        print("❌ ERROR: EVENT_BUS_NAME environment variable not set. Please create a .env file or pass --event-bus.")
        return None

    try:
        response = events_client.put_events(Entries=[{
            "Detail": json.dumps(payload),
            "DetailType": WISHLIST_RECEIVED,
            "EventBusName": event_bus_name,
            "Source": INGRESS_SOURCE,
        }])
    except ClientError as e:
        print(f"❌ Could not publish wishlist event: {e.response['Error']['Message']}")
        return None

    entry = response["Entries"][0]
    if response.get("FailedEntryCount") or "EventId" not in entry:
        print(f"❌ EventBridge rejected the wishlist event: {entry.get('ErrorCode')} {entry.get('ErrorMessage')}")
        return None

    print(f"✅ Wishlist event published to {event_bus_name}. EventId: {entry['EventId']}")
    return entry["EventId"]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send a wishlist to Santa's event-driven workshop.")
    parser.add_argument("--from", dest="sender", required=True, help="Name of the wishlist creator")
    parser.add_argument("--gift", required=True, choices=GIFT_TYPES, help="Type of gift on the wishlist")
    parser.add_argument("--lego-sku", help="LEGO product ID (lego gifts only)")
    parser.add_argument("--endpoint", default=os.environ.get("WISHLIST_API"),
                        help="The /dear-santa URL (defaults to $WISHLIST_API)")
    parser.add_argument("--direct", action="store_true",
                        help="Publish straight to the event bus instead of calling the API")
    parser.add_argument("--event-bus", default=os.environ.get("EVENT_BUS_NAME"),
                        help="Event bus name for --direct (defaults to $EVENT_BUS_NAME)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        payload = build_wishlist(args.sender, args.gift, args.lego_sku)
    except ValidationError as e:
        print(f"❌ Invalid wishlist: {e}")
        return 1

    if args.direct:
        result = publish_wishlist_event(boto3.client("events"), args.event_bus, payload)
    else:
        result = send_wishlist(payload, args.endpoint)

    return 0 if result else 1


if __name__ == "__main__":
    sys.exit(main())
