"""Article metadata extraction.

This module provides a multi-strategy extractor that:
1. Fetches HTML from news article URLs (or accepts raw HTML)
2. Extracts metadata field by field using ordered fallback chains:
   - OpenGraph / standard meta tags
   - Schema.org JSON-LD
   - CSS selector heuristics (bylines, standfirsts, hero images)
   - Readability main-content extraction
3. Returns cleaned, normalized article data
"""

from globe_pipeline.extractors.article import ArticleExtractor, extract_article
from globe_pipeline.extractors.fetch import create_http_client, fetch_html
from globe_pipeline.extractors.heuristics import first_non_empty
from globe_pipeline.extractors.structured import find_in_json_ld, normalize_date
from globe_pipeline.extractors.text import clean_text, detect_language

__all__ = [
    "ArticleExtractor",
    "extract_article",
    "create_http_client",
    "fetch_html",
    "first_non_empty",
    "find_in_json_ld",
    "normalize_date",
    "clean_text",
    "detect_language",
]
