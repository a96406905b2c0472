"""URL deduplication keys and first-occurrence-wins deduplication.

Dedupe keys come in three strictness tiers:
1. exact: canonical URL string with the host lowercased
2. loose: exact + http/https folded, leading "www." dropped, default port
   dropped, one trailing non-root slash dropped
3. aggressive: loose + repeated path slashes collapsed and query parameters
   sorted by (key, value)

Keys are scoped to one dedupe pass and never persisted.
"""

import re
from typing import Callable, Iterable, TypeVar
from urllib.parse import parse_qsl, urlencode

from linkpack.core.constants import DedupeMode
from linkpack.core.models import NormalizedUrl
from linkpack.urls.normalizer import parse_url


T = TypeVar("T")

_REPEATED_SLASHES = re.compile(r"/{2,}")


def _coerce_mode(mode: DedupeMode | str) -> DedupeMode:
    if isinstance(mode, DedupeMode):
        return mode
    try:
        return DedupeMode(str(mode))
    except ValueError:
        return DedupeMode.EXACT


def dedupe_key(url: str, mode: DedupeMode | str = DedupeMode.EXACT) -> str:
    """Build the dedupe key for an effective URL.

    Args:
        url: Effective (privacy-applied) URL
        mode: Strictness tier

    Returns:
        Key string; unparsable input falls back to the raw string
    """
    parsed = parse_url(str(url or ""))
    if parsed is None:
        return str(url or "")

    mode = _coerce_mode(mode)
    if mode is DedupeMode.EXACT:
        return parsed.to_string()

    host = parsed.host
    if host.startswith("www."):
        host = host[4:]

    # parse_url already dropped the default port for the original scheme
    path = parsed.path
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    query = parsed.query
    if mode is DedupeMode.AGGRESSIVE:
        path = _REPEATED_SLASHES.sub("/", path)
        if query:
            pairs = parse_qsl(query, keep_blank_values=True)
            query = urlencode(sorted(pairs))

    port = parsed.port
    if parsed.scheme == "http" and port == 443:
        port = None

    return NormalizedUrl(
        scheme="https",
        host=host,
        path=path,
        query=query,
        fragment=parsed.fragment,
        port=port,
        userinfo=parsed.userinfo,
    ).to_string()


class URLDeduper:
    """Deduplicate URLs (or items carrying URLs) by dedupe key.

    First occurrence wins and input order is preserved. A deduper holds
    no state between calls; every call starts with an empty seen-set.
    """

    def __init__(self, mode: DedupeMode | str = DedupeMode.EXACT):
        """Initialize URLDeduper.

        Args:
            mode: Dedupe key strictness tier
        """
        self.mode = _coerce_mode(mode)

    def key(self, url: str) -> str:
        return dedupe_key(url, self.mode)

    def deduplicate_items(
        self,
        items: Iterable[T],
        url_of: Callable[[T], str],
    ) -> tuple[list[T], int]:
        """Deduplicate arbitrary items by the key of their URL.

        Args:
            items: Items in input order
            url_of: Function returning the URL to key each item by

        Returns:
            Tuple of (kept items in input order, number removed)
        """
        seen: set[str] = set()
        kept: list[T] = []
        removed = 0

        for item in items:
            key = self.key(url_of(item))
            if key in seen:
                removed += 1
                continue
            seen.add(key)
            kept.append(item)

        return kept, removed

    def deduplicate(self, urls: Iterable[str]) -> list[str]:
        """Deduplicate a list of URL strings (preserves first occurrence order)."""
        kept, _ = self.deduplicate_items(urls, lambda u: u)
        return kept

    def get_duplicates(self, urls: Iterable[str]) -> dict[str, list[str]]:
        """Find duplicate URL groups.

        Returns:
            Dictionary mapping dedupe keys to the URLs sharing them
            (only groups with more than one member)
        """
        groups: dict[str, list[str]] = {}
        for url in urls:
            groups.setdefault(self.key(url), []).append(url)
        return {key: members for key, members in groups.items() if len(members) > 1}
