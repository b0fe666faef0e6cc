"""Upload intake: validate remote content and quarantine it on disk.

Pipeline: EXTENSION → SUFFIX → SIZE ESTIMATE → DECODE → MATERIALIZE

Everything that can reject an upload runs before the temp directory is
created, so a rejected upload leaves nothing on disk. A failed write removes
the directory it was writing into.
"""

from __future__ import annotations

import base64
import binascii
import math
import re
from enum import StrEnum
from pathlib import PurePath

import structlog

from cupsmcp.config.models import UploadConfig
from cupsmcp.domain.errors import ValidationError
from cupsmcp.infrastructure.artifacts import UPLOAD_DIR_PREFIX, UploadedArtifact, make_private_dir

log = structlog.get_logger(__name__)

DEFAULT_UPLOAD_SUFFIX = ".txt"
_SAFE_SUFFIX = re.compile(r"\.[A-Za-z0-9_-]{1,16}")
_MIB = 1024 * 1024


class UploadEncoding(StrEnum):
    BASE64 = "base64"
    TEXT = "text"

    @classmethod
    def parse(cls, value: str) -> UploadEncoding:
        normalized = value.strip().lower()
        if normalized in ("utf8", "utf-8"):
            return cls.TEXT
        try:
            return cls(normalized)
        except ValueError:
            msg = f"Unsupported encoding {value!r}; use 'base64' or 'text'."
            raise ValidationError(msg, detail={"encoding": value}) from None


def upload_extension(filename: str) -> str:
    """Lowercase extension of *filename* without the dot ('' if none)."""
    return PurePath(filename).suffix.lstrip(".").lower()


def _utf8(content: str) -> bytes:
    try:
        return content.encode("utf-8")
    except UnicodeEncodeError as exc:
        msg = f"Content is not valid UTF-8 text: {exc.reason} at position {exc.start}"
        raise ValidationError(msg, detail={"encoding": UploadEncoding.TEXT.value}) from exc


def estimate_decoded_size(content: str, encoding: UploadEncoding) -> int:
    """Decoded byte size, computed without decoding.

    Base64 packs 3 bytes into 4 characters; text is measured as UTF-8.
    """
    if encoding is UploadEncoding.BASE64:
        return math.ceil(len(content) * 3 / 4)
    return len(_utf8(content))


def _format_mb(size: int) -> str:
    return f"{size / _MIB:.1f}MB"


class UploadIntake:
    """Turns ``(filename, content, encoding)`` into an :class:`UploadedArtifact`."""

    def __init__(self, config: UploadConfig) -> None:
        self._config = config

    def validate_extension(self, filename: str) -> None:
        ext = upload_extension(filename)
        if ext and ext in self._config.blocked_extensions:
            blocked = ", ".join(sorted(self._config.blocked_extensions))
            msg = f"File extension '.{ext}' is blocked for security reasons. Blocked: {blocked}"
            raise ValidationError(msg, detail={"extension": ext})

    def upload_suffix(self, filename: str) -> str:
        """Suffix for the quarantined file; only short alphanumeric suffixes are kept."""
        suffix = PurePath(filename).suffix
        if not suffix:
            return DEFAULT_UPLOAD_SUFFIX
        if _SAFE_SUFFIX.fullmatch(suffix) is None:
            msg = f"Unsupported file extension {suffix!r} in {filename!r}."
            raise ValidationError(msg, detail={"filename": filename})
        return suffix

    def validate_size(self, content: str, encoding: UploadEncoding) -> int:
        size = estimate_decoded_size(content, encoding)
        limit = self._config.max_size
        if size > limit:
            msg = (
                f"Upload size ({_format_mb(size)}, {size} bytes) exceeds maximum allowed "
                f"({_format_mb(limit)}, {limit} bytes). Raise upload.max_size to allow it."
            )
            raise ValidationError(msg, detail={"size": size, "max_size": limit})
        return size

    def decode(self, content: str, encoding: UploadEncoding) -> bytes:
        if encoding is UploadEncoding.TEXT:
            return _utf8(content)
        try:
            # Line-wrapped base64 (MIME style) is common; whitespace is not data.
            return base64.b64decode("".join(content.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            msg = f"Content is not valid base64: {exc}"
            raise ValidationError(msg, detail={"encoding": encoding.value}) from exc

    def intake(self, filename: str, content: str, encoding: str = "base64") -> UploadedArtifact:
        """Validate and quarantine an upload.

        Raises:
            ValidationError: blocked extension, oversized content, unsafe
                suffix, unknown encoding, undecodable content, or a failed
                write. Nothing is left on disk.
        """
        parsed = UploadEncoding.parse(encoding)
        self.validate_extension(filename)
        suffix = self.upload_suffix(filename)
        self.validate_size(content, parsed)
        payload = self.decode(content, parsed)

        directory = make_private_dir(UPLOAD_DIR_PREFIX)
        artifact = UploadedArtifact(
            directory=directory,
            path=directory / f"upload{suffix}",
            original_name=filename,
            size=len(payload),
        )
        try:
            artifact.path.write_bytes(payload)
        except (OSError, ValueError) as exc:
            artifact.cleanup()
            msg = f"Could not store upload {filename!r}: {exc}"
            raise ValidationError(msg, detail={"filename": filename}) from exc
        except BaseException:
            artifact.cleanup()
            raise
        log.debug("upload.materialized", filename=filename, size=len(payload))
        return artifact
