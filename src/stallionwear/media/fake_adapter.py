"""Configurable in-memory media store for development and testing.

Nothing leaves the process. Individual filenames, or every upload, can be
made to fail so callers can exercise partial-failure handling.
"""

from uuid import uuid4

from stallionwear.errors import UpstreamFailure
from stallionwear.media.port import MediaFile, MediaStore, UploadResult


class FakeMediaStore(MediaStore):
    """In-memory media store."""

    def __init__(self, folder: str = "StallionWear", base_url: str = "https://media.example.test") -> None:
        self.folder = folder
        self.base_url = base_url.rstrip("/")
        self.files: dict[str, bytes] = {}
        self.should_succeed: bool = True
        self.failing_filenames: set[str] = set()
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool = True, failing_filenames=None) -> None:
        """Configure store behavior at runtime."""
        self.should_succeed = should_succeed
        self.failing_filenames = set(failing_filenames or [])

    def upload(self, file: MediaFile) -> UploadResult:
        self.calls.append({"method": "upload", "filename": file.filename})

        if not self.should_succeed or file.filename in self.failing_filenames:
            raise UpstreamFailure({"media": [f"Failed to upload {file.filename}"]})

        public_id = f"{self.folder}/{uuid4().hex[:12]}"
        self.files[public_id] = file.content
        return UploadResult(
            url=f"{self.base_url}/{public_id}",
            public_id=public_id,
            original_filename=file.filename,
        )

    def delete(self, public_id: str) -> bool:
        self.calls.append({"method": "delete", "public_id": public_id})
        return self.files.pop(public_id, None) is not None
