"""
SEO metadata helpers: keyword taxonomy and title option parsing.
"""

from typing import Any, Dict, List

from ..models import TitleOptions
from ..utils.text_processing import clean_list_item


KEYWORD_CATEGORIES = (
    "primaryKeywords",
    "longTailKeywords",
    "semanticKeywords",
    "questionKeywords",
    "trendingHashtags",
    "competitiveKeywords",
    "relatedTopics",
    "youtubeSearchKeywords",
    "browseFeedKeywords",
    "shortsOptimizedKeywords",
    "algorithmBoostKeywords",
    "retentionKeywords",
    "engagementTriggerKeywords",
)

MAX_TITLE_OPTIONS = 5

_TITLE_NOISE = ("here are", "optimized", "based on", "psychological triggers")


def default_keywords() -> Dict[str, List[str]]:
    """Keyword taxonomy with every category present and empty."""
    return {category: [] for category in KEYWORD_CATEGORIES}


def normalize_keywords(data: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Coerce decoded keyword JSON into the full taxonomy.

    Missing or non-list categories become empty lists; items are stringified.
    """
    keywords = default_keywords()
    for category in KEYWORD_CATEGORIES:
        value = data.get(category)
        if isinstance(value, list):
            keywords[category] = [str(item).strip() for item in value if str(item).strip()]
    return keywords


def parse_title_options(response: str) -> TitleOptions:
    """
    Extract clean titles from a numbered LLM answer.

    Intro lines, commentary and fragments are skipped; numbering, quotes and
    bold markers are removed.

    Args:
        response: Raw title generation output

    Returns:
        Up to five options, the first one recommended
    """
    titles = []
    for line in response.splitlines():
        trimmed = line.strip()
        lowered = trimmed.lower()
        if (
            not trimmed
            or any(noise in lowered for noise in _TITLE_NOISE)
            or trimmed.startswith(("*", "("))
            or len(trimmed) < 10
        ):
            continue

        title = clean_list_item(trimmed)
        if 10 <= len(title) <= 200:
            titles.append(title)

    options = titles[:MAX_TITLE_OPTIONS]
    return TitleOptions(options=options, recommended=options[0] if options else "Optimized Title")
