"""Configuration models describing cidview settings."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MIME = "application/octet-stream"

DEFAULT_ARCHIVE_TYPES: List[str] = [
    "application/zip",
    "application/x-zip-compressed",
    "application/x-rar-compressed",
    "application/x-7z-compressed",
    "application/gzip",
    "application/x-gzip",
    "application/x-tar",
    "application/x-bzip2",
]

DEFAULT_EXTENSIONS: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "application/pdf": "pdf",
    "application/zip": "zip",
    "application/x-rar-compressed": "rar",
    "application/x-7z-compressed": "7z",
    "text/plain": "txt",
    "text/html": "html",
    "application/json": "json",
}


class CidviewBaseModel(BaseModel):
    """Shared configuration for cidview Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class FetchSettings(CidviewBaseModel):
    """Options for retrieving payloads through an HTTP gateway.

    Attributes:
        gateway: Base URL of the path gateway that serves content-addressed locators.
        timeout_seconds: Total request timeout.
        follow_redirects: Whether gateway redirects are followed.
        user_agent: User-Agent header sent with every request.
    """

    gateway: str = "https://ipfs.io"
    timeout_seconds: float = Field(default=30.0, gt=0)
    follow_redirects: bool = True
    user_agent: str = "cidview"


class DetectionSettings(CidviewBaseModel):
    """Signature detection options.

    Attributes:
        sniff_bytes: Number of leading payload bytes handed to the detector.
    """

    sniff_bytes: int = Field(default=8192, gt=0)


class RenderingSettings(CidviewBaseModel):
    """Rendering policies shared by every renderer.

    Attributes:
        default_mime: Type used when neither a declared nor a detected type exists.
        text_encoding: Codec used to decode text, markup, and JSON payloads.
        json_indent: Indentation used when pretty-printing JSON.
        hex_preview_bytes: Maximum number of bytes included in a hex dump.
        hex_line_bytes: Number of bytes rendered on each hex dump line.
        sandbox_policy: Value of the sandbox attribute for embedded markup.
        fallback_extension: Extension used when a MIME type has no table entry.
        archive_types: MIME types classified as archives.
        extensions: MIME type to file extension lookup table.
    """

    default_mime: str = Field(default=DEFAULT_MIME, min_length=1)
    text_encoding: str = "utf-8"
    json_indent: int = Field(default=2, ge=0)
    hex_preview_bytes: int = Field(default=256, gt=0)
    hex_line_bytes: int = Field(default=24, gt=0)
    sandbox_policy: str = ""
    fallback_extension: str = "bin"
    archive_types: List[str] = Field(default_factory=lambda: list(DEFAULT_ARCHIVE_TYPES))
    extensions: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_EXTENSIONS))


class LoggingSettings(CidviewBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(CidviewBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        json_default: Whether commands emit JSON by default.
    """

    quiet_default: bool = False
    json_default: bool = False


class CidviewConfig(CidviewBaseModel):
    """Top-level configuration struct for cidview.

    Attributes:
        fetch: Gateway retrieval settings.
        detection: Signature detection settings.
        rendering: Rendering policies and lookup tables.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    fetch: FetchSettings = Field(default_factory=FetchSettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    rendering: RenderingSettings = Field(default_factory=RenderingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_ARCHIVE_TYPES",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_MIME",
    "CidviewBaseModel",
    "FetchSettings",
    "DetectionSettings",
    "RenderingSettings",
    "LoggingSettings",
    "CLIOptions",
    "CidviewConfig",
]
