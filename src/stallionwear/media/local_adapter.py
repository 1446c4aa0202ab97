"""Filesystem media store: files under a root directory, served from a base URL."""

from pathlib import Path
from uuid import uuid4

from stallionwear.errors import UpstreamFailure
from stallionwear.media.port import MediaFile, MediaStore, UploadResult


class LocalMediaStore(MediaStore):
    def __init__(self, root: str | Path, base_url: str, folder: str = "StallionWear") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.folder = folder

    def _path_for(self, public_id: str) -> Path:
        path = (self.root / public_id).resolve()
        if self.root.resolve() not in path.parents:
            raise UpstreamFailure({"media": [f"Invalid public id {public_id}"]})
        return path

    def upload(self, file: MediaFile) -> UploadResult:
        suffix = Path(file.filename).suffix.lower()
        public_id = f"{self.folder}/{uuid4().hex}{suffix}"
        path = self._path_for(public_id)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(file.content)
        except OSError as exc:
            raise UpstreamFailure({"media": [f"Failed to store {file.filename}"]}, upstream=exc) from exc

        return UploadResult(
            url=f"{self.base_url}/{public_id}",
            public_id=public_id,
            original_filename=file.filename,
        )

    def delete(self, public_id: str) -> bool:
        path = self._path_for(public_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise UpstreamFailure({"media": [f"Failed to delete {public_id}"]}, upstream=exc) from exc
        return True
