"""
Text processing utilities for the enhancement pipeline.

Provides sentence splitting, excerpts and cleanup of list-style LLM output.
"""

import re
from typing import List


# Splits after "." or "?" (and "!") while leaving abbreviations like "e.g." or "Dr." intact
_SENTENCE_BOUNDARY = re.compile(r'(?<!\w\.\w.)(?<![A-Z][a-z]\.)(?<=\.|\?|!)\s')


def split_sentences(text: str) -> List[str]:
    """
    Split text into sentences on terminal punctuation.

    Args:
        text: Script text

    Returns:
        Non-empty, stripped sentences in order
    """
    return [sentence.strip() for sentence in _SENTENCE_BOUNDARY.split(text) if sentence.strip()]


def excerpt(text: str, max_chars: int) -> str:
    """Return the first `max_chars` characters of text (empty for None)."""
    return (text or "")[:max_chars]


def clean_list_item(line: str) -> str:
    """
    Strip numbering, markdown bold and wrapping quotes from a list line.

    Args:
        line: One line of a numbered LLM answer

    Returns:
        The bare item text
    """
    item = line.strip()
    item = re.sub(r'^\d+\.\s*', '', item)
    item = re.sub(r'^\**"?', '', item)
    item = re.sub(r'"?\**$', '', item)
    item = item.replace('**', '')
    return item.strip()


def normalize_whitespace(text: str) -> str:
    """Collapse runs of blank lines and spaces."""
    text = re.sub(r'\n{3,}', '\n\n', text)
    text = re.sub(r'  +', ' ', text)
    return text.strip()
