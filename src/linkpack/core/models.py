"""Core data models for linkpack.

This module defines the data structures shared by the pipeline: canonical
URLs, batch options, plans, rendered files, archive results and session state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from linkpack.core.constants import (
    ARCHIVE_DEFAULT_BASE_NAME,
    DEFAULTS,
    DedupeMode,
    EXPORT_FIELDS,
    OutputType,
)


# ============================================================================
# URL Models
# ============================================================================

@dataclass(frozen=True)
class NormalizedUrl:
    """Canonical http(s) URL split into its components.

    Host is lowercased (IDNA-encoded when non-ASCII) and the port is None
    when it equals the scheme default.
    """
    scheme: str
    host: str
    path: str = "/"
    query: str = ""
    fragment: str = ""
    port: Optional[int] = None
    userinfo: str = ""

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is not None:
            host = f"{host}:{self.port}"
        if self.userinfo:
            host = f"{self.userinfo}@{host}"
        return host

    def to_string(self) -> str:
        out = f"{self.scheme}://{self.netloc}{self.path}"
        if self.query:
            out += f"?{self.query}"
        if self.fragment:
            out += f"#{self.fragment}"
        return out

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class NormalizeResult:
    """Outcome of canonicalizing one raw string. Never raised, always returned."""
    ok: bool
    url: str = ""
    reason: str = ""
    parsed: Optional[NormalizedUrl] = None

    @classmethod
    def success(cls, parsed: NormalizedUrl) -> "NormalizeResult":
        return cls(ok=True, url=parsed.to_string(), parsed=parsed)

    @classmethod
    def failure(cls, reason: str) -> "NormalizeResult":
        return cls(ok=False, reason=reason)


# ============================================================================
# Options
# ============================================================================

_ECC_LEVELS = ("L", "M", "Q", "H")


def _clamp(value: Any, low: int, high: int, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


@dataclass
class QRRenderOptions:
    """Appearance of rendered QR images."""
    scale: int = DEFAULTS["qr_scale"]           # pixels per module
    margin: int = DEFAULTS["qr_margin"]         # quiet zone in modules
    ecc: str = DEFAULTS["qr_ecc"]
    foreground: str = DEFAULTS["qr_foreground"]
    background: str = DEFAULTS["qr_background"]
    transparent: bool = False

    def __post_init__(self) -> None:
        self.scale = _clamp(self.scale, 1, 64, DEFAULTS["qr_scale"])
        self.margin = _clamp(self.margin, 0, 32, DEFAULTS["qr_margin"])
        ecc = str(self.ecc or "").upper()
        self.ecc = ecc if ecc in _ECC_LEVELS else DEFAULTS["qr_ecc"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "scale": self.scale,
            "margin": self.margin,
            "ecc": self.ecc,
            "foreground": self.foreground,
            "background": self.background,
            "transparent": self.transparent,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "QRRenderOptions":
        if not isinstance(data, dict):
            return cls()
        defaults = cls()
        return cls(
            scale=data.get("scale", defaults.scale),
            margin=data.get("margin", defaults.margin),
            ecc=data.get("ecc", defaults.ecc),
            foreground=str(data.get("foreground") or defaults.foreground),
            background=str(data.get("background") or defaults.background),
            transparent=bool(data.get("transparent", False)),
        )


@dataclass
class BatchOptions:
    """Per-invocation configuration bag for planning, export and archiving."""
    dedupe: bool = DEFAULTS["dedupe"]
    dedupe_mode: DedupeMode = DEFAULTS["dedupe_mode"]
    export_csv: bool = DEFAULTS["export_csv"]
    export_json: bool = DEFAULTS["export_json"]
    export_fields: Optional[list[str]] = None   # None means "use exporter default"
    qr_png: bool = DEFAULTS["qr_png"]
    qr_svg: bool = DEFAULTS["qr_svg"]
    qr_render: QRRenderOptions = field(default_factory=QRRenderOptions)

    @property
    def wants_qr(self) -> bool:
        return self.qr_png or self.qr_svg

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase keys used by session files and manifests."""
        data: dict[str, Any] = {
            "dedupe": self.dedupe,
            "dedupeMode": self.dedupe_mode.value,
            "exportCsv": self.export_csv,
            "exportJson": self.export_json,
            "qrPng": self.qr_png,
            "qrSvg": self.qr_svg,
            "qrRender": self.qr_render.to_dict(),
        }
        if self.export_fields is not None:
            data["exportFields"] = list(self.export_fields)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "BatchOptions":
        """Build options from a contract dict, keeping only well-typed values."""
        options = cls()
        if not isinstance(data, dict):
            return options

        for key, attr in (
            ("dedupe", "dedupe"),
            ("exportCsv", "export_csv"),
            ("exportJson", "export_json"),
            ("qrPng", "qr_png"),
            ("qrSvg", "qr_svg"),
        ):
            if isinstance(data.get(key), bool):
                setattr(options, attr, data[key])

        mode = data.get("dedupeMode")
        if isinstance(mode, str) and mode in {m.value for m in DedupeMode}:
            options.dedupe_mode = DedupeMode(mode)

        fields = data.get("exportFields")
        if isinstance(fields, list):
            options.export_fields = [f for f in fields if isinstance(f, str)]

        if "qrRender" in data:
            options.qr_render = QRRenderOptions.from_dict(data["qrRender"])

        return options


# ============================================================================
# Plan Models
# ============================================================================

@dataclass(frozen=True)
class BatchItem:
    """One valid line of a batch, alive for a single plan."""
    raw: str
    effective_url: str                      # after the privacy mode
    normalized_url: str                     # canonical, before the privacy mode
    dedupe_key: str = ""
    source: str = DEFAULTS["source"]


@dataclass(frozen=True)
class InvalidItem:
    """A line that failed canonicalization."""
    raw: str
    reason: str


@dataclass
class Plan:
    """Validated, deduplicated representation of one batch operation.

    Invariant: deduped is an order-preserving subset of valid and
    removed_count == len(valid) - len(deduped).
    """
    lines: list[str]
    valid: list[BatchItem]
    invalid: list[InvalidItem]
    deduped: list[BatchItem]
    removed_count: int
    options: BatchOptions
    output_type: OutputType = OutputType.HTML
    archive_base_name: str = ARCHIVE_DEFAULT_BASE_NAME

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def has_valid(self) -> bool:
        return bool(self.deduped)


# ============================================================================
# Output Models
# ============================================================================

@dataclass(frozen=True)
class RenderedFile:
    """Contents of one shortcut file plus its media type."""
    contents: str
    media_type: str


@dataclass
class ArchiveManifest:
    """Description of an archive's contents. Produced only, never read back."""
    created_at: datetime
    output_type: OutputType
    link_file_count: int
    exports: dict[str, bool]
    options: dict[str, Any]
    version: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "createdAt": self.created_at.isoformat(),
            "outputType": self.output_type.value,
            "linkFileCount": self.link_file_count,
            "exports": dict(self.exports),
            "options": self.options,
        }


@dataclass
class ArchiveResult:
    """Finished archive: bytes, chosen filename and the rows exported with it."""
    data: bytes
    filename: str
    file_count: int
    export_rows: list[dict[str, Any]]
    manifest: ArchiveManifest
    entries: list[str] = field(default_factory=list)


# ============================================================================
# Session Model
# ============================================================================

@dataclass
class SessionState:
    """Batch state restored from a session file."""
    lines: list[str]
    output_type: OutputType
    archive_base_name: str
    options: BatchOptions
    created_at: Optional[str] = None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def is_known_export_field(key: str) -> bool:
    return key in EXPORT_FIELDS
