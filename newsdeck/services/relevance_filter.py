"""Keyword relevance filter for free-text and subcategory queries.

Accepts or rejects an article against the query that narrowed its category.
It never scores: ordering stays with the adapters and the interleaver.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

from newsdeck.models.domain.article import Article
from newsdeck.utils.logging import get_logger

logger = get_logger(__name__)

CRIME_TERMS = (
    "murder", "murdered", "stabbing", "shooting", "homicide", "manslaughter",
    "assault", "arrested", "kidnap", "robbery", "burglary", "police said",
)
CELEBRITY_TERMS = (
    "celebrity", "kardashian", "red carpet", "premiere", "box office", "film",
    "movie", "actor", "actress", "oscars", "grammy", "album", "reality tv",
    "royal family",
)
SPORTS_TERMS = (
    "football", "soccer", "premier league", "nfl", "nba", "cricket", "tennis",
    "rugby", "golf", "olympics", "world cup", "transfer window",
)
POLITICS_TERMS = (
    "election", "campaign trail", "senate", "congress", "parliament",
    "prime minister", "polling", "ballot", "mps", "labour party", "republican",
    "democrat",
)
US_SPORTS_TERMS = (
    "nfl", "nba", "mlb", "nhl", "super bowl", "baseball", "basketball",
    "american football", "touchdown",
)

NEGATIVE_TERMS_BY_GROUP: dict[str, tuple[str, ...]] = {
    "finance": CRIME_TERMS + CELEBRITY_TERMS + SPORTS_TERMS + POLITICS_TERMS,
    "football": CRIME_TERMS + CELEBRITY_TERMS + US_SPORTS_TERMS,
}
DEFAULT_NEGATIVE_TERMS = CRIME_TERMS + CELEBRITY_TERMS

_STOP_TOKENS = {"or", "and"}
_PUNCTUATION_RE = re.compile(r"[^\w\s&-]")


@dataclass(frozen=True)
class SubcategoryProfile:
    """Curated keywords for one subcategory.

    Attributes:
        name: Subcategory name as shown in the category browser
        group: Parent tab (``finance`` or ``football``)
        lead_term: First term of the subcategory's search query
        keywords: Terms counted as positive matches
        min_matches: Matches required to accept an article
    """

    name: str
    group: str
    lead_term: str
    keywords: tuple[str, ...]
    min_matches: int = 1


SUBCATEGORY_PROFILES: tuple[SubcategoryProfile, ...] = (
    SubcategoryProfile(
        name="stocks",
        group="finance",
        lead_term="stocks",
        keywords=(
            "stock", "shares", "equity", "equities", "stock market", "nyse",
            "nasdaq", "s&p 500", "dow jones", "ftse", "index", "indices",
            "trading", "traders", "cfd", "futures", "options trading",
            "volatility", "bull market", "bear market", "wall street", "investor",
        ),
        min_matches=2,
    ),
    SubcategoryProfile(
        name="crypto",
        group="finance",
        lead_term="cryptocurrency",
        keywords=(
            "crypto", "bitcoin", "ethereum", "blockchain", "digital currency",
            "altcoin", "defi", "nft", "web3", "stablecoin", "token", "coinbase",
            "binance",
        ),
        min_matches=1,
    ),
    SubcategoryProfile(
        name="business",
        group="finance",
        lead_term="business",
        keywords=(
            "business", "corporate", "company", "companies", "enterprise",
            "earnings", "revenue", "profit", "quarterly results", "ipo", "merger",
            "acquisition", "ceo", "startup", "market share", "shareholders",
        ),
        min_matches=2,
    ),
    SubcategoryProfile(
        name="global trade",
        group="finance",
        lead_term="trade",
        keywords=(
            "trade", "import", "export", "tariff", "international trade",
            "global commerce", "trade deal", "trade war", "supply chain",
            "customs", "trade deficit", "trade surplus", "wto", "shipping",
        ),
        min_matches=2,
    ),
    SubcategoryProfile(
        name="my team",
        group="football",
        lead_term="football",
        keywords=("football", "soccer", "team", "club", "match", "league", "manager", "goal"),
        min_matches=1,
    ),
    SubcategoryProfile(
        name="premier league",
        group="football",
        lead_term="premier league",
        keywords=(
            "premier league", "epl", "english football", "manchester", "arsenal",
            "chelsea", "liverpool", "tottenham", "newcastle", "aston villa",
        ),
        min_matches=1,
    ),
    SubcategoryProfile(
        name="uefa",
        group="football",
        lead_term="uefa",
        keywords=(
            "uefa", "champions league", "europa league", "conference league",
            "european football", "ucl",
        ),
        min_matches=1,
    ),
    SubcategoryProfile(
        name="international",
        group="football",
        lead_term="fifa",
        keywords=(
            "fifa", "world cup", "international football", "national team",
            "euro", "copa america", "qualifier", "friendly",
        ),
        min_matches=2,
    ),
)


@lru_cache(maxsize=512)
def _term_pattern(term: str) -> re.Pattern[str]:
    # Word-boundary prefix: "stock" matches "stocks", "ipo" does not match "hippo"
    return re.compile(r"(?<![\w])" + re.escape(term.strip()))


def contains_term(text: str, term: str) -> bool:
    return _term_pattern(term.lower()).search(text) is not None


def count_matches(text: str, terms: Iterable[str]) -> int:
    """Number of terms found in ``text`` at non-overlapping positions.

    Longer phrases claim their span first, so "stock market" is one match
    and does not also count as "stock".
    """
    claimed: list[tuple[int, int]] = []
    for term in sorted(set(terms), key=lambda t: (-len(t), t)):
        for match in _term_pattern(term.lower()).finditer(text):
            start, end = match.span()
            if all(end <= other_start or start >= other_end for other_start, other_end in claimed):
                claimed.append((start, end))
                break
    return len(claimed)


def split_query_terms(query: str) -> list[str]:
    """Split a boolean-ish query into its terms (``a OR "b c"`` -> ``[a, b c]``)."""
    parts = re.split(r"\s+(?:or|and)\s+", query.strip(), flags=re.IGNORECASE)
    return [p.strip().strip('"').strip().lower() for p in parts if p.strip().strip('"').strip()]


def tokenize_query(query: str) -> list[str]:
    """Tokens used for unmapped queries.

    Splits on whitespace, drops ``or``/``and``, strips punctuation and
    discards tokens of two characters or fewer.
    """
    tokens = []
    for raw in query.lower().split():
        token = _PUNCTUATION_RE.sub("", raw).strip("-&")
        if token in _STOP_TOKENS or len(token) <= 2:
            continue
        tokens.append(token)
    return tokens


def resolve_subcategory(
    query: str,
    profiles: tuple[SubcategoryProfile, ...] = SUBCATEGORY_PROFILES,
) -> SubcategoryProfile | None:
    """Find the subcategory a query stands for.

    Matches either the subcategory name itself (``"stocks"``) or the first
    term of the query (``"stocks OR shares"``, ``"cryptocurrency OR bitcoin"``).
    """
    normalized = query.strip().lower()
    if not normalized:
        return None

    for profile in profiles:
        if normalized == profile.name:
            return profile

    terms = split_query_terms(normalized)
    if not terms:
        return None

    lead = terms[0]
    for profile in profiles:
        if lead == profile.lead_term:
            return profile
    return None


class RelevanceFilter:
    """Two-stage keyword filter.

    1. Reject when the article mentions an off-topic term from the negative
       list of the query's subcategory group.
    2. Accept when enough subcategory keywords (or, for unmapped queries,
       enough query tokens) appear in the title and summary.
    """

    def __init__(
        self,
        profiles: tuple[SubcategoryProfile, ...] = SUBCATEGORY_PROFILES,
        negative_terms_by_group: dict[str, tuple[str, ...]] | None = None,
        default_negative_terms: tuple[str, ...] = DEFAULT_NEGATIVE_TERMS,
    ) -> None:
        self.profiles = profiles
        self.negative_terms_by_group = negative_terms_by_group or NEGATIVE_TERMS_BY_GROUP
        self.default_negative_terms = default_negative_terms

    def is_relevant(self, article: Article, query: str) -> bool:
        """Return True if the article is on-topic for the query."""
        text = article.combined_text
        profile = resolve_subcategory(query, self.profiles)

        negative_terms = (
            self.negative_terms_by_group.get(profile.group, self.default_negative_terms)
            if profile
            else self.default_negative_terms
        )
        for term in negative_terms:
            if contains_term(text, term):
                logger.debug(
                    f"Rejected off-topic article: {article.title[:60]}",
                    extra={"term": term},
                )
                return False

        if profile is not None:
            matches = count_matches(text, profile.keywords)
            return matches >= profile.min_matches

        tokens = tokenize_query(query)
        if not tokens:
            return True

        required = min(2, len(tokens))
        matches = count_matches(text, tokens)
        return matches >= required

    def filter(self, articles: list[Article], query: str) -> list[Article]:
        return [article for article in articles if self.is_relevant(article, query)]
