"""Code snippets (curl, fetch, Net::HTTP, PHP cURL, requests) for an operation."""

from specdesk.snippets.generator import (
    DEFAULT_LANGUAGE,
    LANGUAGES,
    LEXERS,
    SnippetContext,
    build_snippet,
)

__all__ = ["DEFAULT_LANGUAGE", "LANGUAGES", "LEXERS", "SnippetContext", "build_snippet"]
