"""
Screen flow of the journal.

The current screen is a ``ViewState`` value. ``ViewStateController`` holds
it together with the loaded dreams and collections, and every navigation is
an explicit method call. Entering a list screen or the insights screen
reloads from the store so changes made elsewhere are visible at once.
"""
import logging
import uuid
from enum import Enum
from typing import NamedTuple, Optional

from models.dream import Collection
from services.entitlement import Denied, GatedAction
from services.errors import ChatError

logger = logging.getLogger(__name__)

SILENT_ORACLE = "The oracle is silent right now. Please try again later."
PAYMENT_NOTICE = "Premium Activated! Thank you for your support."


class Screen(Enum):
    DASHBOARD = 'dashboard'
    COMPOSER = 'composer'
    DETAIL = 'detail'
    STATS = 'stats'
    FAVORITES = 'favorites'
    COLLECTION = 'collection'


class ViewState(NamedTuple):
    screen: Screen
    # Dream id for DETAIL, collection id for COLLECTION
    target: Optional[str] = None


DASHBOARD = ViewState(Screen.DASHBOARD)
COMPOSER = ViewState(Screen.COMPOSER)
STATS = ViewState(Screen.STATS)
FAVORITES = ViewState(Screen.FAVORITES)

LIST_SCREENS = (Screen.DASHBOARD, Screen.FAVORITES, Screen.COLLECTION)


def derive_view(dreams, state):
    """Dreams shown on ``state``, in journal order."""
    if state.screen == Screen.FAVORITES:
        return [d for d in dreams if d.is_favorite]
    if state.screen == Screen.COLLECTION:
        return [d for d in dreams if d.section_id == state.target]
    return list(dreams)


class ChatMessage:
    def __init__(self, role, text):
        self.role = role
        self.text = text

    def to_dict(self):
        return {'role': self.role, 'text': self.text}


class CreationTask:
    """
    Handle for one in-flight dream creation.

    Once detached (the composer was left or replaced) ``finish`` does
    nothing and returns False.
    """

    def __init__(self, on_complete):
        self.id = str(uuid.uuid4())
        self.detached = False
        self._on_complete = on_complete

    def detach(self):
        self.detached = True

    def finish(self, dream):
        if self.detached:
            logger.debug(f"Creation {self.id} finished after its composer was left")
            return False
        self.detached = True
        self._on_complete(dream)
        return True


class ViewStateController:
    def __init__(self, store, gate, oracle=None):
        self.store = store
        self.gate = gate
        self.oracle = oracle
        self.state = DASHBOARD
        self.return_state = DASHBOARD
        self.dreams = []
        self.collections = []
        self.selected_dream = None
        self.transcript = []
        self.oracle_session = None
        self.pending_creation = None
        self.upgrade_prompt_open = False
        self.notice = None
        self.reload()

    def reload(self):
        self.dreams = self.store.list_dreams()
        self.collections = self.store.list_collections()

    def visible_dreams(self):
        return derive_view(self.dreams, self.state)

    def current_collection(self):
        if self.state.screen != Screen.COLLECTION:
            return None
        for collection in self.collections:
            if collection.id == self.state.target:
                return collection
        return None

    def _enter(self, state):
        previous = self.state
        if previous.screen == Screen.DETAIL and state != previous:
            # The oracle transcript belongs to the open dream only
            self.selected_dream = None
            self.transcript = []
            self.oracle_session = None
        if previous.screen == Screen.COMPOSER and state.screen != Screen.COMPOSER:
            self._detach_creation()
        self.state = state
        if state.screen in LIST_SCREENS or state.screen == Screen.STATS:
            self.reload()

    def _detach_creation(self):
        if self.pending_creation is not None:
            self.pending_creation.detach()
            self.pending_creation = None

    # Navigation

    def show_dashboard(self):
        self._enter(DASHBOARD)

    def show_favorites(self):
        self._enter(FAVORITES)

    def show_stats(self):
        self._enter(STATS)

    def select_collection(self, collection_id):
        self._enter(ViewState(Screen.COLLECTION, collection_id))

    def new_entry(self):
        if self.state.screen != Screen.COMPOSER:
            self._enter(COMPOSER)

    def cancel_entry(self):
        self._enter(DASHBOARD)

    def open_entry(self, dream_id):
        """Open the detail screen for ``dream_id``. Returns the dream or None."""
        self.reload()
        dream = next((d for d in self.dreams if d.id == dream_id), None)
        if dream is None:
            return None

        if self.state.screen in (Screen.FAVORITES, Screen.COLLECTION):
            self.return_state = self.state
        elif self.state.screen != Screen.DETAIL:
            self.return_state = DASHBOARD
        target = ViewState(Screen.DETAIL, dream_id)
        reopening = self.state == target
        self._enter(target)
        self.selected_dream = dream
        if not reopening:
            self._open_oracle(dream)
        return dream

    def back(self):
        if self.state.screen != Screen.DETAIL:
            self._enter(DASHBOARD)
            return
        target, self.return_state = self.return_state, DASHBOARD
        self._enter(target)

    # Creation

    def begin_creation(self):
        self.new_entry()
        self._detach_creation()
        task = CreationTask(self._creation_finished)
        self.pending_creation = task
        return task

    def abandon_creation(self, task):
        """Drop a creation that failed; the composer stays open."""
        task.detach()
        if self.pending_creation is task:
            self.pending_creation = None

    def _creation_finished(self, dream):
        self.pending_creation = None
        if self.state.screen == Screen.COMPOSER:
            self._enter(DASHBOARD)

    # Mutations routed through the store

    def dream_changed(self, dream):
        if self.selected_dream is not None and self.selected_dream.id == dream.id:
            self.selected_dream = dream
        self.reload()

    def delete_dream(self, dream_id):
        self.store.delete_dream(dream_id)
        if self.state == ViewState(Screen.DETAIL, dream_id):
            self.return_state = DASHBOARD
            self._enter(DASHBOARD)
        else:
            self.reload()

    def add_collection(self, name):
        decision = self.gate.attempt(GatedAction.CREATE_COLLECTION)
        if isinstance(decision, Denied):
            self.prompt_upgrade()
            return decision
        collection = Collection(id=str(uuid.uuid4()), name=name.strip())
        self.store.create_collection(collection)
        self.reload()
        return collection

    def delete_collection(self, collection_id):
        self.store.delete_collection(collection_id)
        if self.return_state.target == collection_id:
            self.return_state = DASHBOARD
        if self.state == ViewState(Screen.COLLECTION, collection_id):
            self._enter(DASHBOARD)
        else:
            self.reload()
        if self.selected_dream is not None and self.selected_dream.section_id == collection_id:
            self.selected_dream = self.selected_dream.model_copy(update={'section_id': None})

    # Premium

    def prompt_upgrade(self):
        self.upgrade_prompt_open = True

    def close_upgrade_prompt(self):
        self.upgrade_prompt_open = False

    def complete_payment(self):
        self.gate.grant('payment')
        self.upgrade_prompt_open = False
        self.notice = PAYMENT_NOTICE

    def redeem(self, code):
        if not self.gate.redeem(code):
            return False
        self.upgrade_prompt_open = False
        return True

    def pop_notice(self):
        notice, self.notice = self.notice, None
        return notice

    # Oracle

    def _open_oracle(self, dream):
        if self.oracle is None:
            return
        try:
            self.oracle_session = self.oracle.open_session(dream.content)
        except ChatError as e:
            logger.error(f"Failed to open oracle session: {e}")
            self.oracle_session = None

    def send_chat(self, text):
        """
        Run one oracle turn on the open dream.

        Fragments are appended to the last transcript message as they
        arrive. Returns False when no dream is open.
        """
        if self.state.screen != Screen.DETAIL:
            return False

        self.transcript.append(ChatMessage('user', text))
        reply = ChatMessage('model', '')
        self.transcript.append(reply)
        try:
            if self.oracle_session is None:
                raise ChatError("No oracle session")
            for fragment in self.oracle.send_turn(self.oracle_session, text):
                reply.text += fragment
        except ChatError as e:
            logger.error(f"Chat error: {e}")
            if reply.text:
                self.transcript.append(ChatMessage('model', SILENT_ORACLE))
            else:
                reply.text = SILENT_ORACLE
        return True
