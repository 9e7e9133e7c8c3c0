import json
import logging
from typing import List

from pydantic import ValidationError

from models.dream import Collection, Dream
from services.errors import StorageReadError

logger = logging.getLogger(__name__)

DREAMS_KEY = 'somnium_dreams_v1'
SECTIONS_KEY = 'somnium_sections_v1'
PREMIUM_KEY = 'somnium_premium_v1'


class EntityStore:
    """
    Durable storage of dreams, collections and the premium flag.

    Reads never fail: a blob that is missing or not a JSON list is logged
    and treated as empty, and a single malformed record is logged and
    skipped without discarding the rest. Dreams are kept most recent
    first; updates and deletes of unknown ids are silent no-ops.
    """

    def __init__(self, storage):
        self.storage = storage

    def _load(self, key, model):
        raw = self.storage.read(key)
        if not raw:
            return []
        try:
            documents = json.loads(raw)
        except ValueError as e:
            raise StorageReadError(f"Blob {key} is corrupt: {e}") from e
        if not isinstance(documents, list):
            raise StorageReadError(f"Blob {key} is not a list")

        records = []
        for index, document in enumerate(documents):
            try:
                records.append(model.model_validate(document))
            except ValidationError as e:
                logger.warning(f"Skipping malformed record {index} in {key}: {e}")
        return records

    def _load_or_empty(self, key, model):
        try:
            return self._load(key, model)
        except StorageReadError as e:
            logger.warning(f"Failed to load {key}, treating as empty: {e}")
            return []

    def _save(self, key, records):
        self.storage.write(key, json.dumps([r.to_document() for r in records]))

    # Dreams

    def list_dreams(self) -> List[Dream]:
        return self._load_or_empty(DREAMS_KEY, Dream)

    def get_dream(self, dream_id):
        for dream in self.list_dreams():
            if dream.id == dream_id:
                return dream
        return None

    def create_dream(self, dream: Dream) -> None:
        self._save(DREAMS_KEY, [dream] + self.list_dreams())

    def update_dream(self, dream: Dream) -> None:
        dreams = self.list_dreams()
        for index, existing in enumerate(dreams):
            if existing.id == dream.id:
                dreams[index] = dream
                self._save(DREAMS_KEY, dreams)
                return

    def delete_dream(self, dream_id) -> None:
        dreams = self.list_dreams()
        remaining = [d for d in dreams if d.id != dream_id]
        if len(remaining) != len(dreams):
            self._save(DREAMS_KEY, remaining)

    # Collections

    def list_collections(self) -> List[Collection]:
        return self._load_or_empty(SECTIONS_KEY, Collection)

    def get_collection(self, collection_id):
        for collection in self.list_collections():
            if collection.id == collection_id:
                return collection
        return None

    def create_collection(self, collection: Collection) -> None:
        self._save(SECTIONS_KEY, self.list_collections() + [collection])

    def delete_collection(self, collection_id) -> None:
        collections = self.list_collections()
        remaining = [c for c in collections if c.id != collection_id]
        if len(remaining) != len(collections):
            self._save(SECTIONS_KEY, remaining)

        # Dreams filed under the deleted collection become unassigned
        dreams = self.list_dreams()
        orphaned = False
        for index, dream in enumerate(dreams):
            if dream.section_id == collection_id:
                dreams[index] = dream.model_copy(update={'section_id': None})
                orphaned = True
        if orphaned:
            self._save(DREAMS_KEY, dreams)

    # Premium flag

    def get_entitlement(self) -> bool:
        return self.storage.read(PREMIUM_KEY) == 'true'

    def set_entitlement(self, is_premium: bool) -> None:
        self.storage.write(PREMIUM_KEY, 'true' if is_premium else 'false')
