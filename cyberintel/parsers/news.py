"""
Security / venture news RSS fetcher.

Pulls recent items from a handful of public feeds and returns them as
ArticleText records for the funding extractor. Only items that look like a
funding announcement (keyword scan on title + description) are kept.

Sources:
    - TechCrunch security
    - SecurityWeek
    - Help Net Security
    - Dark Reading
"""

from __future__ import annotations

import asyncio
import logging
import re

import aiohttp

from cyberintel import config
from cyberintel.parsers.funding_extractor import ArticleText

logger = logging.getLogger(__name__)

RSS_FEEDS = {
    "techcrunch": {
        "url": "https://techcrunch.com/category/security/feed/",
        "name": "TechCrunch",
    },
    "securityweek": {
        "url": "https://www.securityweek.com/feed/",
        "name": "SecurityWeek",
    },
    "helpnetsecurity": {
        "url": "https://www.helpnetsecurity.com/feed/",
        "name": "Help Net Security",
    },
    "darkreading": {
        "url": "https://www.darkreading.com/rss.xml",
        "name": "Dark Reading",
    },
}

FUNDING_KEYWORDS = (
    "raises", "raised", "funding", "series", "seed", "investment",
    "secures", "closes", "valuation", "led by",
)

RATE_LIMIT_SECONDS = 1.0

_ITEM = re.compile(r"<item>(.*?)</item>", re.DOTALL)
_TITLE = re.compile(r"<title>(.*?)</title>", re.DOTALL)
_LINK = re.compile(r"<link>(.*?)</link>", re.DOTALL)
_PUBDATE = re.compile(r"<pubDate>(.*?)</pubDate>")
_DESC = re.compile(r"<description>(.*?)</description>", re.DOTALL)
_CONTENT = re.compile(r"<content:encoded>(.*?)</content:encoded>", re.DOTALL)


def clean_xml_text(text: str) -> str:
    """Remove CDATA wrappers, HTML tags and XML entities."""
    text = re.sub(r"<!\[CDATA\[(.*?)\]\]>", r"\1", text, flags=re.DOTALL)
    text = re.sub(r"<[^>]+>", " ", text)
    text = text.replace("&amp;", "&").replace("&lt;", "<").replace("&gt;", ">")
    text = text.replace("&quot;", '"').replace("&apos;", "'").replace("&#8217;", "'")
    return re.sub(r"\s+", " ", text).strip()


def looks_like_funding(text: str) -> bool:
    lowered = text.lower()
    return "$" in lowered and any(kw in lowered for kw in FUNDING_KEYWORDS)


def parse_feed(xml_text: str, source_name: str) -> list[ArticleText]:
    """Parse RSS items with regexes; keep the ones that mention funding."""
    articles = []
    for match in _ITEM.finditer(xml_text):
        item_xml = match.group(1)

        title_m = _TITLE.search(item_xml)
        title = clean_xml_text(title_m.group(1)) if title_m else ""

        body_m = _CONTENT.search(item_xml) or _DESC.search(item_xml)
        body = clean_xml_text(body_m.group(1)) if body_m else ""

        text = f"{title}. {body}" if body else title
        if not looks_like_funding(text):
            continue

        link_m = _LINK.search(item_xml)
        pubdate_m = _PUBDATE.search(item_xml)
        articles.append(
            ArticleText(
                title=title,
                url=clean_xml_text(link_m.group(1)) if link_m else "",
                source=source_name,
                raw_text=text,
                published_date=pubdate_m.group(1).strip() if pubdate_m else None,
            )
        )
    return articles


async def fetch_funding_articles(timeout: int = 15) -> list[ArticleText]:
    """Fetch every configured feed; a failing feed is logged and skipped."""
    articles: list[ArticleText] = []
    headers = {"User-Agent": f"CyberIntel/{config.APP_VERSION}"}

    async with aiohttp.ClientSession(headers=headers) as session:
        for feed_id, feed in RSS_FEEDS.items():
            try:
                async with session.get(feed["url"], timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
                    if resp.status != 200:
                        logger.warning("Feed %s returned HTTP %d", feed_id, resp.status)
                        continue
                    xml_text = await resp.text()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.warning("Feed %s failed: %s", feed_id, e)
                continue

            found = parse_feed(xml_text, feed["name"])
            logger.info("Feed %s: %d funding candidates", feed_id, len(found))
            articles.extend(found)
            await asyncio.sleep(RATE_LIMIT_SECONDS)

    return articles
