"""Literal, case-insensitive search over extracted page texts."""

import re
from collections.abc import Sequence

from pdfglance.models import Match


class SearchEngine:
    """Find every occurrence of a query in a document's page texts.

    Matching is case-insensitive and literal: the query is escaped before it
    is compiled, so ``"a.b"`` only matches a dot. Matches never overlap
    (scanning resumes at the end of each hit) and never span pages.
    """

    def search(self, query: str, page_texts: Sequence[str]) -> list[Match]:
        """Search all pages.

        Args:
            query: User-supplied search string. Empty yields no matches.
            page_texts: Text of each page, indexed by page number.

        Returns:
            Matches ordered by (page_index, start).
        """
        if not query:
            return []

        pattern = re.compile(re.escape(query), re.IGNORECASE)
        matches = []
        for page_index, text in enumerate(page_texts):
            if not text:
                continue
            for m in pattern.finditer(text):
                matches.append(Match(page_index, m.start(), m.end()))
        return matches

    def count(self, query: str, page_texts: Sequence[str]) -> int:
        return len(self.search(query, page_texts))

    @staticmethod
    def pages_with_matches(matches: Sequence[Match]) -> dict[int, int]:
        """Map page index -> number of matches on that page, in page order."""
        pages: dict[int, int] = {}
        for match in matches:
            pages[match.page_index] = pages.get(match.page_index, 0) + 1
        return pages
