"""
Content modules: prompt templates, style catalog and SEO helpers.
"""

from .styles import STYLE_TEMPLATES, DEFAULT_STYLE, get_style, default_style
from .seo import KEYWORD_CATEGORIES, default_keywords, normalize_keywords, parse_title_options

__all__ = [
    "STYLE_TEMPLATES",
    "DEFAULT_STYLE",
    "get_style",
    "default_style",
    "KEYWORD_CATEGORIES",
    "default_keywords",
    "normalize_keywords",
    "parse_title_options",
]
