# search/text_query.py
import re
from typing import Optional

from search.predicates import (
    MatchAll,
    Or,
    Pattern,
    Predicate,
    TextSearch,
)

# Queries at least this long go to literal matching instead of the text index
MAX_INDEXED_QUERY_LENGTH = 50
LITERAL_MARKERS = ('"', "*")

# Literal matching covers the same fields as the text index
LITERAL_MATCH_FIELDS = (
    "metadata.skills",
    "metadata.jobTitles",
    "metadata.education",
    "content",
)


def uses_text_index(query: str) -> bool:
    """Short queries without quotes or wildcards are served by the text index"""
    return len(query) < MAX_INDEXED_QUERY_LENGTH and not any(
        marker in query for marker in LITERAL_MARKERS
    )


def build_text_query(query: Optional[str]) -> Predicate:
    """
    Build the lexical predicate for a free-text query.

    Short plain queries use the store's text index (and its relevance score).
    Anything longer, or containing a quote or wildcard, is matched as a
    literal, case-insensitive substring across content, skills, job titles and
    education; regex metacharacters are escaped so user input can never form
    an invalid pattern.
    """
    if not query:
        return MatchAll()
    if uses_text_index(query):
        return TextSearch(query)
    literal = re.escape(query)
    return Or(
        tuple(
            Pattern(field, literal, ignore_case=True) for field in LITERAL_MATCH_FIELDS
        )
    )
