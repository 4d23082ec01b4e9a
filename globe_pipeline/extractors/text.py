"""Plain-text cleanup and language detection for extracted article bodies."""

import html
import re
from typing import Optional

from langdetect import DetectorFactory, LangDetectException, detect
from rich.console import Console

console = Console()

DetectorFactory.seed = 0  # Deterministic language detection

# Characters fed to the language detector
LANGUAGE_SAMPLE_LENGTH = 1000

# Phrases stripped from article bodies (photo credits leaking into captions)
DENYLIST_PHRASES = ["Getty Images"]

SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.DOTALL | re.IGNORECASE)
BLOCK_TAG_RE = re.compile(
    r"</?(?:p|div|h[1-6]|li|blockquote|section|article|header|footer|nav|figure|"
    r"figcaption|aside|details|summary|address|br)\b[^>]*>",
    re.IGNORECASE,
)
TAG_RE = re.compile(r"<[^>]+>")
HORIZONTAL_SPACE_RE = re.compile(r"[^\S\n]+")
DENYLIST_RE = re.compile(r"\b(?:" + "|".join(re.escape(p) for p in DENYLIST_PHRASES) + r")\b")


def _unescape_all(text: str) -> str:
    """Decode entities until none are left. Each decode shortens the string."""
    while True:
        decoded = html.unescape(text)
        if decoded == text:
            return text
        text = decoded


def _clean_pass(text: str) -> str:
    text = _unescape_all(text)
    text = SCRIPT_STYLE_RE.sub("", text)
    text = BLOCK_TAG_RE.sub("\n", text)
    text = TAG_RE.sub("", text)
    text = DENYLIST_RE.sub("", text)
    text = HORIZONTAL_SPACE_RE.sub(" ", text)
    lines = (line.strip() for line in text.split("\n"))
    return "\n\n".join(line for line in lines if line)


def clean_text(text: Optional[str]) -> str:
    """Turn HTML-laden text into paragraphs of plain text.

    Entities are decoded, script/style blocks dropped, block-level tags turned
    into paragraph breaks and every other tag stripped. Paragraphs come back
    trimmed and separated by one blank line.

    The pass is repeated until nothing changes: decoding can surface new
    markup (``&lt;b&gt;``) and removing a denylisted phrase can join two
    halves of another one. A pass either drops non-whitespace characters or
    only normalizes whitespace, which settles in one pass, so the loop ends.
    """
    if not text:
        return ""

    while True:
        cleaned = _clean_pass(text)
        if cleaned == text:
            return text
        text = cleaned


def detect_language(text: Optional[str]) -> Optional[str]:
    """Detect the dominant language of cleaned text as an ISO 639-1 code."""
    if not text or not text.strip():
        return None

    try:
        code = detect(text[:LANGUAGE_SAMPLE_LENGTH])
    except LangDetectException as e:
        console.print(f"[dim]Language detection failed: {e}[/dim]")
        return None

    # langdetect reports some languages with a region ("zh-cn")
    return code.split("-")[0] if code else None
