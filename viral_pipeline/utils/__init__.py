"""
Utility modules for the enhancement pipeline.
"""

from .json_parser import parse_llm_json, decode_structured
from .text_processing import split_sentences, excerpt, clean_list_item, normalize_whitespace

__all__ = [
    "parse_llm_json",
    "decode_structured",
    "split_sentences",
    "excerpt",
    "clean_list_item",
    "normalize_whitespace",
]
