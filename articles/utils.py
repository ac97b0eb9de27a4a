"""
Text helpers for Bengali content: URL slugs, normalisation, numerals and
dates.
"""

import re
import unicodedata
from datetime import date, datetime
from urllib.parse import unquote

from django.utils.html import strip_tags

# Bengali block, zero width joiner, Arabic and Hebrew blocks, ASCII word
# characters, whitespace, hyphen and underscore survive in a slug
_SLUG_DISALLOWED = re.compile(
    r"[^\u0980-\u09FF\u200D\u0600-\u06FF\u0590-\u05FFa-z0-9\s_-]"
)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

BENGALI_DIGITS = str.maketrans("0123456789", "০১২৩৪৫৬৭৮৯")

BENGALI_MONTHS = [
    "জানুয়ারি",
    "ফেব্রুয়ারি",
    "মার্চ",
    "এপ্রিল",
    "মে",
    "জুন",
    "জুলাই",
    "আগস্ট",
    "সেপ্টেম্বর",
    "অক্টোবর",
    "নভেম্বর",
    "ডিসেম্বর",
]

# Monday first, matching date.weekday()
BENGALI_WEEKDAYS = [
    "সোমবার",
    "মঙ্গলবার",
    "বুধবার",
    "বৃহস্পতিবার",
    "শুক্রবার",
    "শনিবার",
    "রবিবার",
]


def generate_bengali_slug(text: str) -> str:
    if not text:
        return ""

    slug = text.strip().lower()
    slug = _SLUG_DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def decode_slug(value: str) -> str:
    """
    URL-decode a slug taken from a path. Slugs that were encoded twice by a
    client are decoded twice.
    """
    if not value:
        return value
    try:
        decoded = unquote(value, errors="strict")
        if "%" in decoded:
            decoded = unquote(decoded, errors="strict")
        return decoded
    except UnicodeDecodeError:
        return value


def normalize_bengali_text(text: str) -> str:
    if not text:
        return ""
    return unicodedata.normalize("NFC", text).strip().lower()


def to_bengali_digits(value) -> str:
    return str(value).translate(BENGALI_DIGITS)


def format_bengali_date(value, with_weekday: bool = False) -> str:
    """
    ``date(2024, 1, 15)`` becomes ``১৫ জানুয়ারি ২০২৪``, or
    ``সোমবার, ১৫ জানুয়ারি ২০২৪`` with the weekday.
    """
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return ""
    formatted = (
        f"{to_bengali_digits(value.day)} {BENGALI_MONTHS[value.month - 1]} "
        f"{to_bengali_digits(value.year)}"
    )
    if with_weekday:
        return f"{BENGALI_WEEKDAYS[value.weekday()]}, {formatted}"
    return formatted


def make_excerpt(content: str, length: int = 200) -> str:
    text = _WHITESPACE.sub(" ", strip_tags(content or "")).strip()
    if len(text) <= length:
        return text
    return text[:length] + "..."


def estimate_read_time(content: str, words_per_minute: int = 200) -> int:
    words = len(strip_tags(content or "").split())
    return max(1, round(words / words_per_minute))


def build_article_url(article, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/article/{article.slug}"
