"""RSS headline adapter."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from email.utils import parsedate_to_datetime
from typing import Any

from bs4 import BeautifulSoup, Tag

from mirror.services.fetcher import fetch_text
from mirror.services.text_cleaner import MAX_DESCRIPTION_LENGTH, clean_text, escape_cdata

logger = logging.getLogger(__name__)

ITEMS_PER_FEED = 5
MAX_ARTICLES = 8
DEDUPE_PREFIX = 50


@dataclass(frozen=True)
class NewsFeed:
    url: str
    source: str


NEWS_FEEDS: tuple[NewsFeed, ...] = (
    # Local
    NewsFeed("https://www.wane.com/feed/", "WANE 15"),
    NewsFeed("https://www.wishtv.com/feed/", "WISH-TV"),
    NewsFeed("https://www.ibj.com/feed", "IBJ"),
    # National
    NewsFeed("https://rss.nytimes.com/services/xml/rss/nyt/HomePage.xml", "NY Times"),
    NewsFeed("https://feeds.bbci.co.uk/news/world/rss.xml", "BBC"),
    NewsFeed("https://www.npr.org/rss/rss.php?id=1001", "NPR"),
)


def _field(item: Tag, name: str) -> str | None:
    tag = item.find(name)
    return tag.get_text() if tag is not None else None


def _parse_pub_date(raw: str | None) -> datetime:
    if raw:
        try:
            parsed = parsedate_to_datetime(raw.strip())
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
        except (TypeError, ValueError):
            pass
    return datetime.now(UTC)


def parse_rss(text: str, source: str, limit: int = ITEMS_PER_FEED) -> list[dict[str, Any]]:
    """Extract the first *limit* items from an RSS document.

    ``<link>`` is a void element to an HTML parser, so void handling is turned
    off. Tag names come back lowercased (``pubDate`` is ``pubdate``).
    """
    soup = BeautifulSoup(escape_cdata(text), "html.parser", empty_element_tags=set())
    articles: list[dict[str, Any]] = []
    for item in soup.find_all("item", limit=limit):
        title = clean_text(_field(item, "title"))
        if not title:
            continue
        link = (_field(item, "link") or "").strip()
        guid = (_field(item, "guid") or "").strip()
        description = clean_text(_field(item, "description"), MAX_DESCRIPTION_LENGTH)
        articles.append(
            {
                "id": guid or link or f"{source}-{len(articles)}",
                "title": title,
                "source": source,
                "link": link,
                "pubDate": _parse_pub_date(_field(item, "pubdate")),
                "description": description or None,
            }
        )
    return articles


def merge_articles(batches: list[list[dict[str, Any]]]) -> list[dict[str, Any]]:
    """Newest first, drop near-duplicate titles, keep at most eight."""
    merged = sorted(
        (a for batch in batches for a in batch), key=lambda a: a["pubDate"], reverse=True
    )
    seen: set[str] = set()
    result = []
    for article in merged:
        key = article["title"].lower()[:DEDUPE_PREFIX]
        if key in seen:
            continue
        seen.add(key)
        result.append({**article, "pubDate": article["pubDate"].isoformat()})
        if len(result) == MAX_ARTICLES:
            break
    return result


async def _fetch_feed(feed: NewsFeed) -> list[dict[str, Any]]:
    text = await fetch_text(feed.url)
    if text is None:
        return []
    articles = parse_rss(text, feed.source)
    logger.info("Fetched %d articles from %s", len(articles), feed.source)
    return articles


async def fetch_news(feeds: tuple[NewsFeed, ...] = NEWS_FEEDS) -> dict[str, Any]:
    """Fetch every feed concurrently. Returns demo headlines if nothing came back."""
    batches = await asyncio.gather(*(_fetch_feed(feed) for feed in feeds))
    articles = merge_articles(list(batches))
    if not articles:
        logger.warning("No news articles fetched, using demo headlines")
        return demo_news()
    return {"articles": articles, "lastUpdated": datetime.now(UTC).isoformat(), "isDemo": False}


def demo_news() -> dict[str, Any]:
    now = datetime.now(UTC)
    headlines = (
        ("Scientists Discover New Method for Carbon Capture", "Science Daily", 0.5),
        ("Tech Giants Report Strong Quarterly Earnings", "Bloomberg", 1),
        ("Local Community Celebrates Annual Winter Festival", "Fort Wayne Journal", 2),
        ("New Study Reveals Benefits of Morning Exercise", "Health Today", 3),
        ("Space Agency Announces Mars Mission Timeline", "NASA News", 4),
    )
    return {
        "articles": [
            {
                "id": str(i),
                "title": title,
                "source": source,
                "link": "#",
                "pubDate": (now - timedelta(hours=hours)).isoformat(),
                "description": None,
            }
            for i, (title, source, hours) in enumerate(headlines, start=1)
        ],
        "lastUpdated": now.isoformat(),
        "isDemo": True,
    }
