"""System constants and enumerations.

This module defines constants used throughout the application for consistency
and maintainability.
"""

from enum import Enum


class Category(str, Enum):
    """Normalized news categories served by the feed."""

    GENERAL = "general"
    BUSINESS = "business"
    SPORTS = "sports"
    TECHNOLOGY = "technology"
    ENTERTAINMENT = "entertainment"
    POLITICS = "politics"
    HEALTH = "health"
    SCIENCE = "science"


class SourceName(str, Enum):
    """Supported content providers."""

    NEWSAPI = "newsapi"
    PA_MEDIA = "pa_media"
    NEWSDATA = "newsdata"
    YOUTUBE = "youtube"
    BRAVE = "brave"


# Category names the client is allowed to send besides the normalized set
CATEGORY_ALIASES: dict[str, Category] = {
    "all": Category.GENERAL,
    "top": Category.GENERAL,
    "news": Category.GENERAL,
    "sport": Category.SPORTS,
    "football": Category.SPORTS,
    "finance": Category.BUSINESS,
    "tech": Category.TECHNOLOGY,
}


def normalize_category(value: str | None) -> Category:
    """Map a client supplied category onto the normalized set.

    Unknown values fall back to ``Category.GENERAL``.
    """
    if not value:
        return Category.GENERAL

    key = value.strip().lower()
    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key]

    try:
        return Category(key)
    except ValueError:
        return Category.GENERAL


# Subcategory browser: parent category -> subcategory -> search query
SUBCATEGORY_QUERIES: dict[str, dict[str, str]] = {
    "finance": {
        "stocks": (
            'stocks OR shares OR equity OR "stock market" OR NYSE OR NASDAQ OR '
            '"S&P 500" OR "Dow Jones" OR indices OR trading OR CFDs'
        ),
        "crypto": (
            'cryptocurrency OR bitcoin OR ethereum OR crypto OR blockchain OR '
            '"digital currency" OR "crypto trading"'
        ),
        "business": (
            'business OR corporate OR company OR enterprise OR earnings OR revenue OR '
            '"quarterly results" OR IPO OR merger'
        ),
        "global trade": (
            'trade OR import OR export OR tariff OR "international trade" OR '
            '"global commerce" OR "trade deals"'
        ),
    },
    "football": {
        "my team": "football OR soccer OR team OR club OR match OR league",
        "premier league": (
            "Premier League OR EPL OR English football OR Manchester OR Arsenal OR "
            "Chelsea OR Liverpool"
        ),
        "uefa": "UEFA OR Champions League OR Europa League OR European football OR UCL",
        "international": (
            "FIFA OR World Cup OR international football OR national team OR Euro OR "
            "Copa America"
        ),
    },
}

# Category each subcategory group is fetched under
SUBCATEGORY_PARENT_CATEGORY: dict[str, Category] = {
    "finance": Category.BUSINESS,
    "football": Category.SPORTS,
}

# Article defaults
DEFAULT_TITLE = "Untitled"
CHARS_PER_MINUTE = 200
VIDEO_READ_TIME_FALLBACK = "Video"

# Quality thresholds
MIN_TITLE_LENGTH = 10
MIN_CONTENT_LENGTH = 100
MIN_SUMMARY_LENGTH = 20

# Request bounds
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Publisher allow-list applied to keyword searches
_TRUSTED_GENERAL_DOMAINS = (
    "bbc.co.uk",
    "bbc.com",
    "theguardian.com",
    "sky.com",
    "independent.co.uk",
    "reuters.com",
    "apnews.com",
)

SEARCH_DOMAINS: dict[Category, tuple[str, ...]] = {
    Category.GENERAL: _TRUSTED_GENERAL_DOMAINS,
    Category.POLITICS: _TRUSTED_GENERAL_DOMAINS,
    Category.BUSINESS: _TRUSTED_GENERAL_DOMAINS
    + ("ft.com", "cnbc.com", "bloomberg.com", "marketwatch.com", "coindesk.com"),
    Category.SPORTS: _TRUSTED_GENERAL_DOMAINS
    + ("skysports.com", "espn.co.uk", "goal.com", "uefa.com", "fifa.com"),
    Category.TECHNOLOGY: _TRUSTED_GENERAL_DOMAINS
    + ("theverge.com", "techcrunch.com", "wired.com", "arstechnica.com"),
    Category.ENTERTAINMENT: _TRUSTED_GENERAL_DOMAINS + ("variety.com", "hollywoodreporter.com"),
    Category.HEALTH: _TRUSTED_GENERAL_DOMAINS + ("nhs.uk", "who.int"),
    Category.SCIENCE: _TRUSTED_GENERAL_DOMAINS + ("nature.com", "newscientist.com"),
}

# Keyword query used where a provider has no matching category
CATEGORY_KEYWORD_QUERIES: dict[Category, str] = {
    Category.GENERAL: "news",
    Category.BUSINESS: "business OR economy OR markets",
    Category.SPORTS: "football OR tennis OR rugby OR cricket OR sport",
    Category.TECHNOLOGY: "technology OR tech OR AI OR computer",
    Category.ENTERTAINMENT: "entertainment OR film OR music OR television",
    Category.POLITICS: "politics OR government OR election OR parliament",
    Category.HEALTH: "health OR medicine OR NHS",
    Category.SCIENCE: "science OR research OR space",
}


def search_domains_for(category: Category) -> tuple[str, ...]:
    return SEARCH_DOMAINS.get(category, _TRUSTED_GENERAL_DOMAINS)


def is_allowed_domain(hostname: str, category: Category) -> bool:
    """True when ``hostname`` is an allow-listed domain or one of its subdomains."""
    host = hostname.lower()
    return any(host == domain or host.endswith(f".{domain}") for domain in search_domains_for(category))
