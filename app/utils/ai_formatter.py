"""
Best-effort formatter for the flower assistant's free-text replies.

Replies that list flowers as ``label: value`` lines (English or Indonesian
labels) are turned into card records; anything else falls back to tidied
plain text. This is a lossy presentation heuristic, not a parser: it never
raises and silently drops whatever it cannot recognise.
"""
import logging
import re
from typing import Dict, List

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "name": ("nama", "name"),
    "description": ("deskripsi", "description", "desc"),
    "price": ("harga", "price"),
    "color": ("warna", "color"),
    "size": ("ukuran", "size"),
    "style": ("style", "gaya"),
    "rating": ("rating", "nilai"),
    "category": ("kategori", "category"),
}

# a new record starts right before every name label
SECTION_SPLIT = re.compile(r"(?=\b(?:nama|name):)", re.IGNORECASE)

FIELD_PATTERNS = {
    field: re.compile(r"\b(?:" + "|".join(labels) + r"):[ \t]*([^\n]+)", re.IGNORECASE)
    for field, labels in FIELD_LABELS.items()
}


def _extract_record(section: str) -> Dict[str, str]:
    record = {}
    for field, pattern in FIELD_PATTERNS.items():
        match = pattern.search(section)
        if match:
            value = match.group(1).strip()
            if value:
                record[field] = value
    return record


def extract_flowers(text) -> List[Dict[str, str]]:
    """Pull zero or more flower records out of ``text``; only sections with a name count."""
    if not isinstance(text, str) or not text.strip():
        return []

    try:
        flowers = []
        for section in SECTION_SPLIT.split(text):
            if not section.strip():
                continue
            record = _extract_record(section)
            if record.get("name"):
                flowers.append(record)
        return flowers
    except (re.error, TypeError, ValueError):
        logger.warning("Could not extract flower cards from assistant reply", exc_info=True)
        return []


def format_plain_text(text) -> str:
    if not isinstance(text, str):
        return ""
    lines = [line.strip() for line in text.split("\n")]
    return "\n\n".join(line for line in lines if line)


def format_ai_response(text) -> dict:
    flowers = extract_flowers(text)
    return {
        "flowers": flowers,
        "text": format_plain_text(text) if not flowers else (text or ""),
    }
