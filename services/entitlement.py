import logging
from enum import Enum

logger = logging.getLogger(__name__)

UPGRADE_PROMPT = "Unlock the Oracle with Dream Lab Premium."


class GatedAction(Enum):
    TOGGLE_FAVORITE = 'toggle-favorite'
    CREATE_COLLECTION = 'create-collection'
    SUBMIT_FOR_INTERPRETATION = 'submit-for-interpretation'


class Allowed:

    allowed = True

    def __repr__(self):
        return '<Allowed>'


class Denied:
    """The action was refused; the caller should open the upgrade prompt."""

    allowed = False

    def __init__(self, action, prompt=UPGRADE_PROMPT):
        self.action = action
        self.prompt = prompt

    def __repr__(self):
        return f'<Denied {self.action.value}>'


ALLOWED = Allowed()


class EntitlementGate:
    def __init__(self, store, promo_code):
        self.store = store
        self.promo_code = promo_code
        self.is_premium = store.get_entitlement()

    def attempt(self, action: GatedAction):
        if self.is_premium:
            return ALLOWED
        logger.info(f"{action.value} requires premium")
        return Denied(action)

    def grant(self, source):
        self.is_premium = True
        self.store.set_entitlement(True)
        logger.info(f"Premium granted via {source}")

    def redeem(self, code) -> bool:
        """Grant premium when ``code`` matches the promo code, ignoring case."""
        if (code or '').strip().lower() != self.promo_code.lower():
            return False
        self.grant('promo code')
        return True
