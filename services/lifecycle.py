import logging
import uuid

from models.dream import Dream, merge_labels, utcnow
from services.entitlement import Denied, GatedAction
from services.errors import AnalysisError, IllustrationError

logger = logging.getLogger(__name__)


def _keep_image(image_url):
    return image_url


class DreamWorkflow:
    """
    Creation and editing of dreams.

    Creation runs analysis, then illustration, then persistence, in that
    order. Analysis failures abort the creation; illustration failures only
    drop the image.
    """

    def __init__(self, store, gate, analyzer, illustrator, normalize_image=None):
        self.store = store
        self.gate = gate
        self.analyzer = analyzer
        self.illustrator = illustrator
        self.normalize_image = normalize_image or _keep_image

    def create(self, content, is_lucid=False, is_favorite=False, section_id=None, custom_labels=()):
        """
        Interpret ``content`` and store it as a new dream.

        Returns the new ``Dream`` or a ``Denied`` result when premium is
        required. Raises ``AnalysisError`` when interpretation fails; nothing
        is stored in that case.
        """
        if not content or not content.strip():
            raise ValueError("Dream content is empty")

        decision = self.gate.attempt(GatedAction.SUBMIT_FOR_INTERPRETATION)
        if isinstance(decision, Denied):
            return decision

        try:
            analysis = self.analyzer.analyze(content)
        except AnalysisError as e:
            logger.error(f"Dream analysis failed: {e}")
            raise

        image_url = None
        try:
            image_url = self.illustrator.illustrate(content, analysis.mood)
        except IllustrationError as e:
            logger.warning(f"Image generation failed, skipping: {e}")

        if image_url:
            image_url = self._normalize(image_url)

        dream = Dream(
            id=str(uuid.uuid4()),
            date=utcnow(),
            content=content,
            analysis=analysis,
            image_url=image_url,
            is_favorite=is_favorite,
            is_lucid=is_lucid,
            custom_labels=merge_labels([], custom_labels),
            section_id=section_id or None,
        )
        self.store.create_dream(dream)
        return dream

    def _normalize(self, image_url):
        try:
            return self.normalize_image(image_url)
        except Exception as e:
            logger.warning(f"Image normalization failed, storing original: {e}")
            return image_url

    def edit(self, dream, content=None, date=None, custom_labels=None):
        """Overwrite the given fields. The analysis and image are left as they are."""
        changes = {}
        if content is not None:
            changes['content'] = content
        if date is not None:
            changes['date'] = date
        if custom_labels is not None:
            changes['custom_labels'] = merge_labels([], custom_labels)
        # Re-validate so naive dates are pinned to UTC
        updated = Dream.model_validate({**dream.model_dump(), **changes})
        self.store.update_dream(updated)
        return updated

    def toggle_favorite(self, dream):
        decision = self.gate.attempt(GatedAction.TOGGLE_FAVORITE)
        if isinstance(decision, Denied):
            return decision
        updated = dream.model_copy(update={'is_favorite': not dream.is_favorite})
        self.store.update_dream(updated)
        return updated

    def set_collection(self, dream, section_id=None):
        updated = dream.model_copy(update={'section_id': section_id or None})
        self.store.update_dream(updated)
        return updated
