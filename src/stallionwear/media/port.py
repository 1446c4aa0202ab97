"""Media store port (abstract interface).

Product images are kept in an external media store. The core only needs to
upload files, learn where they ended up, and delete them again; adapters
decide where the bytes actually go.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ValidationError

from stallionwear.errors import UpstreamFailure

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MediaFile:
    """A file handed to the core for upload."""

    filename: str
    content: bytes


@dataclass(frozen=True)
class UploadResult:
    """A file stored in the media store."""

    url: str
    public_id: str
    original_filename: str | None = None


@dataclass(frozen=True)
class UploadFailure:
    filename: str
    error: str


@dataclass(frozen=True)
class BatchUploadResult:
    """Outcome of ``upload_many``; partial failure is reported, not raised."""

    successful: list[UploadResult] = field(default_factory=list)
    failed: list[UploadFailure] = field(default_factory=list)

    @property
    def has_successes(self) -> bool:
        return bool(self.successful)


class MediaStore(ABC):
    """Abstract media store interface."""

    @abstractmethod
    def upload(self, file: MediaFile) -> UploadResult:
        """Store one file. Raises ``UpstreamFailure`` when the store rejects it."""
        ...

    @abstractmethod
    def delete(self, public_id: str) -> bool:
        """Delete a stored file. Returns False when nothing was deleted."""
        ...

    def upload_many(self, files: list[MediaFile]) -> BatchUploadResult:
        """Upload every file, collecting failures instead of stopping at the first one."""
        if not files:
            raise ValidationError({"files": ["At least one file is required for upload"]})

        successful, failed = [], []
        for file in files:
            try:
                successful.append(self.upload(file))
            except UpstreamFailure as exc:
                logger.warning("media_upload_failed", filename=file.filename, error=str(exc.messages))
                failed.append(UploadFailure(filename=file.filename, error=str(exc.messages)))

        return BatchUploadResult(successful=successful, failed=failed)
