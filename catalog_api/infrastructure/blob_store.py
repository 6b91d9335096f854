"""Blob storage for uploaded product images."""

from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

import structlog

from catalog_api.domain.exceptions import ValidationError

logger = structlog.get_logger()

# Accepted image types and the extensions stored for them
IMAGE_TYPES = {
    "image/png": (".png",),
    "image/jpeg": (".jpg", ".jpeg"),
    "image/gif": (".gif",),
    "image/webp": (".webp",),
}
IMAGE_EXTENSIONS = frozenset(ext for exts in IMAGE_TYPES.values() for ext in exts)


def image_suffix(filename: str | None) -> str:
    """Return the lower-cased image extension of a filename, or ''."""
    suffix = Path(filename or "").suffix.lower()
    return suffix if suffix in IMAGE_EXTENSIONS else ""


@dataclass(frozen=True)
class ImageUpload:
    """Image received from a client, not yet stored.

    Attributes:
        filename: Original client filename.
        content_type: Declared MIME type.
        content: File bytes.
    """

    filename: str | None
    content_type: str | None
    content: bytes

    def validate(self, max_bytes: int) -> None:
        """Check the upload is a non-empty image within the size limit.

        Both the declared type and the file extension must name one of the
        accepted image formats.

        Raises:
            ValidationError: If the upload is not acceptable.
        """
        content_type = (self.content_type or "").split(";")[0].strip().lower()
        if content_type not in IMAGE_TYPES:
            raise ValidationError(
                "Only PNG, JPEG, GIF and WebP images are allowed",
                fields=["image"],
            )
        if image_suffix(self.filename) not in IMAGE_TYPES[content_type]:
            raise ValidationError(
                "Image file extension does not match its type",
                fields=["image"],
            )
        if not self.content:
            raise ValidationError("Uploaded image is empty", fields=["image"])
        if len(self.content) > max_bytes:
            raise ValidationError(
                f"Uploaded image exceeds {max_bytes} bytes",
                fields=["image"],
            )


class LocalBlobStore:
    """Stores uploaded files in a local directory.

    Files get a generated unique name that keeps the original extension
    when it is an image extension, and are addressed by
    ``<url_prefix>/<name>``.
    """

    def __init__(self, directory: str | Path, url_prefix: str = "/uploads") -> None:
        """Initialize blob store.

        Args:
            directory: Directory that receives the files.
            url_prefix: Public URL prefix the directory is served under.
        """
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def ensure_directory(self) -> None:
        """Create the upload directory if needed."""
        self.directory.mkdir(parents=True, exist_ok=True)

    def store(self, filename: str | None, content: bytes) -> str:
        """Write a file and return its URL.

        The bytes go to a temporary file that is renamed into place, so a
        served name never points at a partial file.

        Args:
            filename: Original client filename, used for its extension.
            content: File bytes.

        Returns:
            Public URL of the stored file.
        """
        self.ensure_directory()
        name = f"{uuid4().hex}{image_suffix(filename)}"
        target = self.directory / name
        partial = self.directory / f".{name}.part"

        try:
            partial.write_bytes(content)
            partial.replace(target)
        except OSError:
            partial.unlink(missing_ok=True)
            raise

        logger.info("Stored upload", name=name, size=len(content))
        return f"{self.url_prefix}/{name}"

    def delete(self, url: str) -> None:
        """Remove a stored file by its URL; unknown URLs are ignored."""
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return
        name = url[len(prefix):]
        if not name or "/" in name or name.startswith("."):
            return
        (self.directory / name).unlink(missing_ok=True)
        logger.info("Removed upload", name=name)
