"""
Key-value storage port for the three persisted blobs.

``MemoryStorage`` backs the tests, ``DatabaseStorage`` keeps each blob as a
row of the ``stored_blobs`` table.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from extensions import db
from models.blob import StoredBlob


class BlobStorage(ABC):

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or None when absent."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def clear(self, key: str) -> None:
        pass


class MemoryStorage(BlobStorage):

    def __init__(self, initial: Dict[str, str] = None):
        self.blobs = dict(initial or {})

    def read(self, key):
        return self.blobs.get(key)

    def write(self, key, value):
        self.blobs[key] = value

    def clear(self, key):
        self.blobs.pop(key, None)


class DatabaseStorage(BlobStorage):
    """Blob storage on the application database. Needs an app context."""

    def read(self, key):
        blob = db.session.get(StoredBlob, key)
        return blob.value if blob else None

    def write(self, key, value):
        blob = db.session.get(StoredBlob, key)
        if blob is None:
            blob = StoredBlob(key=key, value=value)
            db.session.add(blob)
        else:
            blob.value = value
        db.session.commit()

    def clear(self, key):
        blob = db.session.get(StoredBlob, key)
        if blob is not None:
            db.session.delete(blob)
            db.session.commit()
