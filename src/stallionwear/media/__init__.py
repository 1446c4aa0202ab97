"""Media store factory.

One store is installed per process at startup (see ``stallionwear.app``) and
handed to every upload call site:
- FakeMediaStore for development and testing
- LocalMediaStore for serving files from disk
"""

from stallionwear.config import Settings
from stallionwear.media.fake_adapter import FakeMediaStore
from stallionwear.media.local_adapter import LocalMediaStore
from stallionwear.media.port import MediaStore

_current_store: MediaStore | None = None


def build_media_store(settings: Settings) -> MediaStore:
    """Construct the store selected by ``settings.media_backend``."""
    if settings.media_backend == "local":
        return LocalMediaStore(
            root=settings.media_root,
            base_url=settings.media_base_url,
            folder=settings.media_folder,
        )
    if settings.media_backend == "fake":
        return FakeMediaStore(folder=settings.media_folder)
    raise ValueError(f"Unknown media backend: {settings.media_backend}")


def get_media_store() -> MediaStore:
    """Return the current media store. Defaults to FakeMediaStore."""
    global _current_store
    if _current_store is None:
        _current_store = FakeMediaStore()
    return _current_store


def set_media_store(store: MediaStore) -> None:
    """Install the process-wide media store."""
    global _current_store
    _current_store = store


def reset_media_store() -> None:
    """Reset to default store."""
    global _current_store
    _current_store = None
