"""Shortcut file renderers.

This module renders one URL into the contents of a shortcut file using
Jinja2 templates:
- html: redirect page with meta refresh, locked-down CSP and a fallback link
- url: Windows [InternetShortcut] key=value file
- webloc: macOS property list

URLs are re-checked before rendering. An unsafe URL never fails the
render; it produces a well-formed placeholder instead.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from linkpack.core.constants import MEDIA_TYPES, OutputType
from linkpack.core.models import RenderedFile
from linkpack.urls.normalizer import normalize_url


logger = logging.getLogger(__name__)

CONTENT_SECURITY_POLICY = (
    "default-src 'none'; "
    "style-src 'unsafe-inline'; "
    "img-src data:; "
    "base-uri 'none'; "
    "form-action 'none'; "
    "frame-ancestors 'none'"
)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_HTTP_PREFIX = re.compile(r"^https?://", re.IGNORECASE)


def to_safe_http_url(raw: Optional[str]) -> str:
    """Strict archive-time re-check of a URL.

    Rejects control characters, anything not already an absolute http(s)
    URL, and anything that fails canonicalization.

    Returns:
        The canonical URL, or "" when unsafe
    """
    s = str(raw or "").strip()
    if not s or _CONTROL_CHARS.search(s):
        return ""
    if not _HTTP_PREFIX.match(s):
        return ""

    result = normalize_url(s)
    if not result.ok or _CONTROL_CHARS.search(result.url):
        return ""
    return result.url


class ShortcutRenderer:
    """Render URLs into shortcut file contents.

    Templates are autoescaped for html/xml; the key=value template is
    plain text and relies on the control-character check instead.
    """

    TEMPLATES = {
        OutputType.HTML: "redirect.html.j2",
        OutputType.URL: "shortcut.url.j2",
        OutputType.WEBLOC: "webloc.xml.j2",
    }
    PLACEHOLDER_TEMPLATE = "invalid.html.j2"

    def __init__(self, templates_dir: Optional[Path] = None):
        """Initialize renderer with Jinja2 environment.

        Args:
            templates_dir: Directory holding the templates (defaults to the packaged ones)
        """
        templates_dir = templates_dir or Path(__file__).parent.parent / "templates"

        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml", "html.j2", "xml.j2"]),
            keep_trailing_newline=True,
        )

    def render_html(self, url: str) -> str:
        safe_url = to_safe_http_url(url)
        if not safe_url:
            logger.warning(f"Unsafe URL replaced by placeholder page: {url!r}")
            template = self.env.get_template(self.PLACEHOLDER_TEMPLATE)
            return template.render(csp=CONTENT_SECURITY_POLICY)
        template = self.env.get_template(self.TEMPLATES[OutputType.HTML])
        return template.render(url=safe_url, csp=CONTENT_SECURITY_POLICY)

    def render_internet_shortcut(self, url: str) -> str:
        safe_url = to_safe_http_url(url)
        if not safe_url:
            logger.warning(f"Unsafe URL rendered as empty shortcut: {url!r}")
        return self.env.get_template(self.TEMPLATES[OutputType.URL]).render(url=safe_url)

    def render_webloc(self, url: str) -> str:
        safe_url = to_safe_http_url(url)
        if not safe_url:
            logger.warning(f"Unsafe URL rendered as empty webloc: {url!r}")
        return self.env.get_template(self.TEMPLATES[OutputType.WEBLOC]).render(url=safe_url)

    def render(self, url: str, output_type: OutputType) -> RenderedFile:
        """Render one URL as the given shortcut format."""
        output_type = OutputType(output_type)
        if output_type is OutputType.HTML:
            contents = self.render_html(url)
        elif output_type is OutputType.URL:
            contents = self.render_internet_shortcut(url)
        else:
            contents = self.render_webloc(url)
        return RenderedFile(contents=contents, media_type=MEDIA_TYPES[output_type])


_default_renderer: Optional[ShortcutRenderer] = None


def get_renderer() -> ShortcutRenderer:
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = ShortcutRenderer()
    return _default_renderer


def render_file(url: str, output_type: OutputType | str) -> RenderedFile:
    """Render one URL with the packaged templates."""
    return get_renderer().render(url, OutputType(output_type))
