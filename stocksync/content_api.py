"""Content API client: paginated listing of product cards."""

from typing import Any, Callable, Dict, List, Optional, Sequence

import requests  # type: ignore[import-untyped]

__all__ = [
    "build_cards_request",
    "get_cards_list",
    "fetch_all_cards",
    "create_session",
]

from stocksync.config import CARDS_PAGE_LIMIT, CONTENT_API_TIMEOUT, CONTENT_API_URL
from stocksync.logging_config import get_logger, log_sync_event
from stocksync.models import CardsPage, CatalogCursor, ProductCard

logger = get_logger("content_api")

FetchPage = Callable[[CatalogCursor], CardsPage]


def create_session(api_key: str) -> requests.Session:
    """Create a requests Session carrying the content API headers."""
    session = requests.Session()
    session.headers.update({
        "Authorization": api_key,
        "Content-Type": "application/json",
    })
    return session


def build_cards_request(cursor: CatalogCursor, object_ids: Sequence[int]) -> Dict[str, Any]:
    """Build the cards/list request body for a cursor position."""
    cursor_body: Dict[str, Any] = {"limit": CARDS_PAGE_LIMIT}
    if cursor.updated_at:
        cursor_body["updatedAt"] = cursor.updated_at
    if cursor.nm_id:
        cursor_body["nmID"] = cursor.nm_id

    return {
        "settings": {
            "cursor": cursor_body,
            "filter": {
                "withPhoto": 1,
                "objectIDs": list(object_ids),
            },
        },
    }


def get_cards_list(
    session: requests.Session,
    cursor: CatalogCursor,
    object_ids: Sequence[int],
) -> CardsPage:
    """Request one page of cards.

    Raises:
        requests.RequestException: On transport errors or non-2xx status
        ValueError: If the body is not valid JSON or not a cards/list object
    """
    resp = session.post(
        CONTENT_API_URL,
        json=build_cards_request(cursor, object_ids),
        timeout=CONTENT_API_TIMEOUT,
    )
    resp.raise_for_status()
    return CardsPage.from_api(resp.json())


def fetch_all_cards(
    session: requests.Session,
    object_ids: Sequence[int],
    fetch_page: Optional[FetchPage] = None,
) -> List[ProductCard]:
    """Walk the cursor until the API runs out of cards.

    Stops on an empty batch, a terminal cursor (empty timestamp or zero
    id) or a cursor that did not advance. A failed request ends the walk
    and the cards collected so far are returned.
    """
    if fetch_page is None:
        def fetch_page(c: CatalogCursor) -> CardsPage:
            return get_cards_list(session, c, object_ids)

    all_cards: List[ProductCard] = []
    cursor = CatalogCursor()

    while True:
        try:
            page = fetch_page(cursor)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Cards request failed: {e}")
            log_sync_event("cards_request_failed", {
                "error": str(e),
                "cards_so_far": len(all_cards),
            }, logger_name="content_api")
            break

        if not page.cards:
            logger.info("No more cards to load.")
            break

        all_cards.extend(page.cards)

        if page.cursor.is_terminal or page.cursor == cursor:
            break
        cursor = page.cursor
        logger.info(f"Loaded {len(all_cards)} cards, continuing...")

    return all_cards
