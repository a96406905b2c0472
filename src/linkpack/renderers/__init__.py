"""Shortcut file renderers (html redirect page, .url, .webloc)."""

from linkpack.renderers.shortcuts import (
    CONTENT_SECURITY_POLICY,
    ShortcutRenderer,
    render_file,
    to_safe_http_url,
)


__all__ = [
    "CONTENT_SECURITY_POLICY",
    "ShortcutRenderer",
    "render_file",
    "to_safe_http_url",
]
