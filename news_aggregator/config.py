"""Configuration and constants for the news aggregator."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Paths
DATA_DIR = Path(os.getenv("NEWS_DATA_DIR", "data"))
DB_PATH = Path(os.getenv("NEWS_DB_PATH", str(DATA_DIR / "news.db")))

# Storage
STORE_BACKEND = os.getenv("STORE_BACKEND", "sqlite").lower()
NEWS_COLLECTION = os.getenv("NEWS_COLLECTION", "news")
FIREBASE_CREDENTIALS = os.getenv("FIREBASE_CREDENTIALS", "")  # path to a service-account JSON
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")

# Fetching
RECENCY_WINDOW_DAYS = float(os.getenv("RECENCY_WINDOW_DAYS", "7"))
FETCH_DELAY_SECONDS = float(os.getenv("FETCH_DELAY_SECONDS", "1.0"))
FETCH_TIMEOUT_SECONDS = float(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))
USER_AGENT = os.getenv("USER_AGENT", "NewsAggregator/1.0 (+rss)")

# Attribution written on every aggregated article
CREATED_BY = "news-aggregator"
DEFAULT_TITLE = "Untitled"

# API Keys
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")

# Email
EMAIL_TO = os.getenv("EMAIL_TO", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "News Aggregator <news@example.com>")

# Runtime options
DRY_RUN = os.getenv("DRY_RUN", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "8080"))

# Article categories
CATEGORIES = ["immigration", "tax", "market"]

# News sources, grouped for iteration and logging. A source's own category is
# what lands on its articles.
NEWS_SOURCES = {
    "immigration": [
        {
            "name": "USCIS News",
            "url": "https://www.uscis.gov/rss/news-releases.xml",
            "category": "immigration",
            "tags": ["USA", "USCIS", "immigration"],
            "enabled": True,
        },
        {
            "name": "UK Visas and Immigration",
            "url": "https://www.gov.uk/government/organisations/uk-visas-and-immigration.atom",
            "category": "immigration",
            "tags": ["UK", "immigration", "visa"],
            "enabled": True,
        },
        {
            "name": "IRCC Canada",
            "url": "https://www.canada.ca/en/immigration-refugees-citizenship.atom.xml",
            "category": "immigration",
            "tags": ["Canada", "immigration", "PR"],
            "enabled": True,
        },
    ],
    "tax": [
        {
            "name": "IRS Tax News",
            "url": "https://www.irs.gov/rss/rss-news-releases.xml",
            "category": "tax",
            "tags": ["USA", "tax", "IRS"],
            "enabled": True,
        },
        {
            "name": "India Tax Updates",
            "url": "https://economictimes.indiatimes.com/news/economy/policy/rssfeeds/1373380680.cms",
            "category": "tax",
            "tags": ["India", "tax", "policy"],
            "enabled": True,
        },
    ],
    "investment": [
        {
            "name": "Economic Times - Markets",
            "url": "https://economictimes.indiatimes.com/markets/rssfeeds/1977021501.cms",
            "category": "market",
            "tags": ["India", "market", "investment"],
            "enabled": True,
        },
        {
            "name": "Reuters India Business",
            "url": "https://www.reuters.com/business/india/feed",
            "category": "market",
            "tags": ["India", "business", "market"],
            "enabled": True,
        },
    ],
}


def get_enabled_news_sources() -> dict[str, list[dict]]:
    """Return enabled news sources, keeping their groups and declaration order."""
    enabled = {}
    for group, sources in NEWS_SOURCES.items():
        group_sources = [s for s in sources if s.get("enabled", True)]
        if group_sources:
            enabled[group] = group_sources
    return enabled
