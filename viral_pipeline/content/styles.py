"""
Visual style catalog.

A style is picked once per video and its template opens every image prompt
generated for that video.
"""

from types import MappingProxyType
from typing import Optional

from ..models import StyleSelection


DEFAULT_STYLE = "beyondbeing"

STYLE_TEMPLATES = MappingProxyType({
    "minimalist": "ULTRA-CLEAN design with maximum contrast, single focal point, no decorative elements, edge-to-edge canvas usage, optimized for mobile clarity and engagement",
    "realistic": "clean photorealistic style with high contrast, simple composition, clear focal point, full canvas usage, mobile-optimized visibility and click-through appeal",
    "illustration": "simple vector illustration with bold contrast, minimal elements, clean composition, full canvas coverage, optimized for thumbnail clarity and engagement",
    "corporate": "clean professional design with maximum readability, single authoritative element, high contrast, full canvas usage, mobile-first optimization",
    "vibrant": "high-impact design with strategic color contrast, single bold element, full canvas usage edge-to-edge, maximum contrast, mobile-optimized for click-through rate",
    "tech": "clean technology aesthetic with high contrast, minimal elements, full canvas usage edge-to-edge, mobile-friendly clarity and professional appeal",
    "educational": "clear instructional design with maximum readability contrast, simple visual hierarchy, full canvas usage edge-to-edge, mobile engagement optimization",
    "beyondbeing": "inspiring motivational aesthetic with uplifting blues, teals and warm whites, clean modern composition, soft cinematic lighting, full canvas usage edge-to-edge, premium professional finish",
})

STYLE_SUMMARIES = MappingProxyType({
    "minimalist": "Clean, simple, modern",
    "realistic": "Photorealistic, professional",
    "illustration": "Hand-drawn, artistic",
    "corporate": "Professional, business-oriented",
    "vibrant": "Colorful, energetic",
    "tech": "Modern, digital, futuristic",
    "educational": "Clear, informative diagrams",
    "beyondbeing": "Inspiring motivational aesthetic with uplifting colors and professional composition",
})


def get_style(name: Optional[str]) -> StyleSelection:
    """
    Resolve a style name to a selection, falling back to the default style.

    Args:
        name: Raw style name, e.g. an LLM answer (case and whitespace ignored)

    Returns:
        StyleSelection for a catalog style, never None
    """
    key = (name or "").strip().strip('."\'').lower()
    if key not in STYLE_TEMPLATES:
        key = DEFAULT_STYLE
    return StyleSelection(
        style=key,
        template=STYLE_TEMPLATES[key],
        description=f"Consistent {key} style throughout the video",
    )


def default_style() -> StyleSelection:
    return get_style(DEFAULT_STYLE)
