"""Unit tests for the screen state machine and list derivations."""

import pytest

from conftest import FakeOracle
from models.dream import Collection
from services.entitlement import Denied
from services.view_state import (
    COMPOSER,
    DASHBOARD,
    FAVORITES,
    SILENT_ORACLE,
    STATS,
    Screen,
    ViewState,
    ViewStateController,
    derive_view,
)


@pytest.fixture
def view(store, premium_gate, make_dream):
    store.create_collection(Collection(id="s1", name="Flying"))
    store.create_collection(Collection(id="s2", name="Water"))
    store.create_dream(make_dream("a", day=1, is_favorite=True, section_id="s1"))
    store.create_dream(make_dream("b", day=2))
    store.create_dream(make_dream("c", day=3, is_favorite=True, section_id="s2"))
    return ViewStateController(store, premium_gate, FakeOracle())


class TestDeriveView:
    def test_favorites_keep_relative_order(self, make_dream):
        dreams = [
            make_dream("1", is_favorite=True),
            make_dream("2", is_favorite=False),
            make_dream("3", is_favorite=True),
        ]

        assert [d.id for d in derive_view(dreams, FAVORITES)] == ["1", "3"]

    def test_dashboard_is_identity(self, make_dream):
        dreams = [make_dream("1"), make_dream("2")]
        assert derive_view(dreams, DASHBOARD) == dreams

    def test_collection_filter(self, make_dream):
        dreams = [make_dream("1", section_id="s1"), make_dream("2"), make_dream("3", section_id="s1")]
        state = ViewState(Screen.COLLECTION, "s1")

        assert [d.id for d in derive_view(dreams, state)] == ["1", "3"]


class TestNavigation:
    def test_starts_on_dashboard_with_everything_loaded(self, view):
        assert view.state == DASHBOARD
        assert [d.id for d in view.visible_dreams()] == ["c", "b", "a"]
        assert len(view.collections) == 2

    def test_list_screens_reload_from_store(self, view, store, make_dream):
        view.show_favorites()
        store.create_dream(make_dream("d", is_favorite=True))

        view.show_dashboard()
        view.show_favorites()

        assert [d.id for d in view.visible_dreams()] == ["d", "c", "a"]

    def test_select_collection(self, view):
        view.show_stats()
        view.select_collection("s2")

        assert view.state == ViewState(Screen.COLLECTION, "s2")
        assert view.current_collection().name == "Water"
        assert [d.id for d in view.visible_dreams()] == ["c"]

    def test_composer_round_trip(self, view):
        view.new_entry()
        assert view.state == COMPOSER
        view.cancel_entry()
        assert view.state == DASHBOARD

    def test_stats_reloads(self, view, store, make_dream):
        store.create_dream(make_dream("d"))
        view.show_stats()
        assert view.state == STATS
        assert len(view.dreams) == 4


class TestDetail:
    def test_open_unknown_dream(self, view):
        assert view.open_entry("missing") is None
        assert view.state == DASHBOARD

    @pytest.mark.parametrize("enter, expected", [
        (lambda v: v.show_favorites(), FAVORITES),
        (lambda v: v.select_collection("s1"), ViewState(Screen.COLLECTION, "s1")),
        (lambda v: v.show_dashboard(), DASHBOARD),
        (lambda v: v.show_stats(), DASHBOARD),
        (lambda v: v.new_entry(), DASHBOARD),
    ])
    def test_back_returns_to_filtered_view(self, view, enter, expected):
        enter(view)
        view.open_entry("a")
        assert view.state == ViewState(Screen.DETAIL, "a")

        view.back()

        assert view.state == expected

    def test_deleting_open_dream_returns_to_dashboard(self, view, store):
        view.show_favorites()
        view.open_entry("a")

        view.delete_dream("a")

        assert view.state == DASHBOARD
        assert view.selected_dream is None
        assert store.get_dream("a") is None

    def test_deleting_other_dream_keeps_screen(self, view):
        view.show_favorites()
        view.delete_dream("b")
        view.delete_dream("b")

        assert view.state == FAVORITES
        assert [d.id for d in view.dreams] == ["c", "a"]

    def test_leaving_detail_discards_transcript(self, view):
        view.open_entry("a")
        view.send_chat("What does flying mean?")
        assert view.transcript

        view.back()
        view.open_entry("a")

        assert view.transcript == []

    def test_dream_changed_refreshes_selection(self, view, store):
        view.open_entry("b")
        updated = store.get_dream("b").model_copy(update={"content": "new"})
        store.update_dream(updated)

        view.dream_changed(updated)

        assert view.selected_dream.content == "new"


class TestCollections:
    def test_deleting_selected_collection_returns_to_dashboard(self, view, store):
        view.select_collection("s1")

        view.delete_collection("s1")

        assert view.state == DASHBOARD
        assert [c.id for c in view.collections] == ["s2"]
        assert store.get_dream("a").section_id is None

    def test_deleting_other_collection_keeps_screen(self, view):
        view.select_collection("s1")
        view.delete_collection("s2")

        assert view.state == ViewState(Screen.COLLECTION, "s1")
        assert [d.id for d in view.visible_dreams()] == ["a"]

    def test_back_after_return_collection_deleted(self, view):
        view.select_collection("s1")
        view.open_entry("a")
        view.delete_collection("s1")

        assert view.selected_dream.section_id is None
        view.back()
        assert view.state == DASHBOARD

    def test_add_collection_requires_premium(self, store, free_gate):
        view = ViewStateController(store, free_gate)

        result = view.add_collection("Nightmares")

        assert isinstance(result, Denied)
        assert view.upgrade_prompt_open is True
        assert store.list_collections() == []

    def test_add_collection(self, view):
        collection = view.add_collection("  Nightmares ")

        assert collection.name == "Nightmares"
        assert view.collections[-1] == collection


class TestCreationTask:
    def test_finish_returns_to_dashboard(self, view):
        task = view.begin_creation()
        assert view.state == COMPOSER

        assert task.finish(object()) is True
        assert view.state == DASHBOARD
        assert view.pending_creation is None

    def test_finish_after_leaving_composer_is_noop(self, view):
        task = view.begin_creation()
        view.open_entry("b")

        assert task.detached is True
        assert task.finish(object()) is False
        assert view.state == ViewState(Screen.DETAIL, "b")

    def test_new_creation_detaches_previous(self, view):
        first = view.begin_creation()
        second = view.begin_creation()

        assert first.finish(object()) is False
        assert view.state == COMPOSER
        assert second.finish(object()) is True

    def test_abandon_keeps_composer_open(self, view):
        task = view.begin_creation()
        view.abandon_creation(task)

        assert view.state == COMPOSER
        assert task.finish(object()) is False


class TestOracle:
    def test_fragments_build_one_reply(self, view):
        view.open_entry("a")

        assert view.send_chat("Why was I flying?") is True

        assert [m.to_dict() for m in view.transcript] == [
            {"role": "user", "text": "Why was I flying?"},
            {"role": "model", "text": "The moon listens."},
        ]

    def test_failure_before_any_text_becomes_substitute(self, store, premium_gate, make_dream):
        store.create_dream(make_dream("a"))
        view = ViewStateController(store, premium_gate, FakeOracle(fail_after=0))
        view.open_entry("a")

        view.send_chat("hello")

        assert view.transcript[-1].text == SILENT_ORACLE
        assert len(view.transcript) == 2

    def test_failure_mid_stream_appends_substitute(self, store, premium_gate, make_dream):
        store.create_dream(make_dream("a"))
        view = ViewStateController(store, premium_gate, FakeOracle(fail_after=2))
        view.open_entry("a")

        view.send_chat("hello")
        view.send_chat("again")

        texts = [m.text for m in view.transcript]
        assert texts == ["hello", "The moon ", SILENT_ORACLE, "again", "The moon ", SILENT_ORACLE]

    def test_chat_requires_open_dream(self, view):
        assert view.send_chat("hello") is False
        assert view.transcript == []

    def test_session_uses_dream_content(self, view):
        view.open_entry("c")
        assert view.oracle.opened == ["Dream c"]


class TestPremium:
    def test_payment_grants_and_sets_notice_once(self, store, free_gate):
        view = ViewStateController(store, free_gate)
        view.prompt_upgrade()

        view.complete_payment()

        assert free_gate.is_premium is True
        assert view.upgrade_prompt_open is False
        assert view.pop_notice()
        assert view.pop_notice() is None

    def test_redeem_wrong_code_keeps_prompt(self, store, free_gate):
        view = ViewStateController(store, free_gate)
        view.prompt_upgrade()

        assert view.redeem("nope") is False
        assert view.upgrade_prompt_open is True
