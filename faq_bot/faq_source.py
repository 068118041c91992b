"""
FAQ Source Module

Fetches question/answer records from a Strapi-style content API and
normalizes them into flat FAQEntry pairs.

Payload shape (one page):
    {
        "data": [
            {"id": 1, "attributes": {
                "Question": "...",
                "Answer": [{"type": "paragraph", "children": [{"text": "..."}]}]
            }}
        ],
        "meta": {"pagination": {"page": 1, "pageSize": 25, "pageCount": 1, "total": 1}}
    }

Known limitations:
- Only the first block's first child of the rich-text Answer is read.
  Multi-paragraph answers lose everything after the first block.
- Records without a Question or a first Answer block are logged and skipped.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from config.settings import SourceConfig
from faq_bot.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FAQEntry:
    """A single normalized FAQ record."""

    question: str
    answer: str

    @property
    def text(self) -> str:
        """Text that gets chunked and embedded."""
        return f"{self.question}\n{self.answer}"


def extract_entry(item: Dict[str, Any]) -> FAQEntry:
    """
    Normalize one raw API record.

    Raises:
        SourceUnavailable: If the record doesn't have the expected shape
    """
    try:
        attributes = item["attributes"]
        question = attributes["Question"]
        answer = attributes["Answer"][0]["children"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise SourceUnavailable(f"Malformed FAQ record: missing {e}")

    if not isinstance(question, str) or not isinstance(answer, str):
        raise SourceUnavailable("Malformed FAQ record: Question/Answer must be text")

    return FAQEntry(question=question, answer=answer)


class FAQSource:
    """
    Adapter for the FAQ content API.

    Every call to fetch() performs fresh HTTP requests; nothing is cached.

    Example:
        source = FAQSource(SourceConfig(base_url="http://localhost:1337"))
        entries = source.fetch()
    """

    def __init__(
        self,
        config: Optional[SourceConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the FAQ source.

        Args:
            config: Source configuration (base URL, path, timeout, paging)
            session: Optional requests session (for connection reuse/tests)
        """
        self.config = config or SourceConfig()
        self._session = session

        logger.info(f"FAQSource initialized: url={self.config.url}")

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.api_token:
            headers["Authorization"] = f"Bearer {self.config.api_token}"
        return headers

    def _get_page(self, page: int) -> Dict[str, Any]:
        """GET one page of FAQ records."""
        params = {
            "pagination[page]": page,
            "pagination[pageSize]": self.config.page_size,
        }
        http = self._session or requests

        try:
            response = http.get(
                self.config.url,
                params=params,
                headers=self._headers(),
                timeout=self.config.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise SourceUnavailable(f"FAQ source request failed: {e}")
        except ValueError as e:
            raise SourceUnavailable(f"FAQ source returned invalid JSON: {e}")

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise SourceUnavailable("FAQ source payload has no 'data' list")

        return payload

    @staticmethod
    def _page_count(payload: Dict[str, Any]) -> int:
        pagination = (payload.get("meta") or {}).get("pagination") or {}
        page_count = pagination.get("pageCount", 1)
        return page_count if isinstance(page_count, int) and page_count > 0 else 1

    def fetch_or_raise(self) -> List[FAQEntry]:
        """
        Fetch every page and normalize all records.

        Returns:
            List of FAQEntry objects in API order

        Raises:
            SourceUnavailable: On network failure, non-2xx status or bad payload
        """
        entries: List[FAQEntry] = []
        page = 1

        while True:
            payload = self._get_page(page)
            for item in payload["data"]:
                try:
                    entries.append(extract_entry(item))
                except SourceUnavailable as e:
                    record_id = item.get("id") if isinstance(item, dict) else None
                    logger.warning(f"Skipping FAQ record id={record_id}: {e.message}")

            page_count = self._page_count(payload)
            if page >= page_count:
                break
            if page >= self.config.max_pages:
                logger.warning(
                    f"Stopping FAQ fetch at page {page} of {page_count} "
                    f"(max_pages={self.config.max_pages})"
                )
                break
            page += 1

        logger.info(f"Fetched {len(entries)} FAQ entries from {page} page(s)")
        return entries

    def fetch(self) -> List[FAQEntry]:
        """
        Fetch the FAQ corpus, degrading to an empty corpus on failure.

        Returns:
            List of FAQEntry objects, or [] if the source is unavailable
        """
        try:
            return self.fetch_or_raise()
        except SourceUnavailable as e:
            logger.error(f"Error fetching FAQ data: {e.message}")
            return []
