import threading

from flask import current_app

from services.entitlement import EntitlementGate
from services.entity_store import EntityStore
from services.lifecycle import DreamWorkflow
from services.view_state import ViewStateController


class DreamLab:
    """
    The journal's collaborators, wired once per application.

    The view controller holds a single user's screen state, so requests
    are served one at a time under ``lock``.
    """

    def __init__(self, storage, analyzer, illustrator, oracle, promo_code, normalize_image=None):
        self.store = EntityStore(storage)
        self.gate = EntitlementGate(self.store, promo_code)
        self.workflow = DreamWorkflow(self.store, self.gate, analyzer, illustrator, normalize_image)
        self.view = ViewStateController(self.store, self.gate, oracle)
        self.lock = threading.Lock()


def current_lab() -> DreamLab:
    return current_app.extensions['dreamlab']
