from __future__ import annotations

import pytest

from agentx.models.actions import Confirm, Evict, ViewScores
from agentx.models.game import GameState
from agentx.services.io_utils import dumps, loads
from agentx.services.persistence import PersistenceGateway, game_key
from agentx.services.session_store import create_session, drop_session, get_session, list_all_session_ids
from agentx.services.storage import FileStore, MemoryStore, build_store

from conftest import to_voting


class BrokenStore(MemoryStore):
    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("storage unavailable")

    def keys(self, prefix=""):
        raise OSError("storage unavailable")


def _reachable_states(make_session):
    session = make_session(["A", "B", "C", "D"], imposter=2, voting=False)
    states = [GameState(session_id="test-session"), session.state]
    to_voting(session)
    states.append(session.state)
    for action in (Evict(seat=0), Confirm(), Evict(seat=2), Confirm(), ViewScores()):
        session.dispatch(action)
        states.append(session.state)
    return states


def test_record_round_trip_for_reachable_states(make_session):
    for state in _reachable_states(make_session):
        record = state.to_record()
        assert GameState.model_validate(loads(dumps(record))) == state


def test_record_uses_camel_case_and_tagged_phase(make_session):
    session = make_session(["A", "B", "C"], imposter=1)
    session.dispatch(Evict(seat=1))
    record = session.state.to_record()

    assert set(record) == {
        "sessionId",
        "phase",
        "players",
        "playerCountInput",
        "playerNames",
        "roundNumber",
        "cards",
        "imposterIndex",
    }
    assert record["phase"] == {"kind": "Elimination", "eliminatedIndex": 1, "wasImposter": True}
    assert record["players"][0] == {"name": "A", "score": 0, "isEliminated": False}
    assert record["cards"][1]["type"] == "Imposter"


def test_save_twice_then_load(gateway, make_session):
    state = make_session(["A", "B", "C"]).state
    gateway.save_state(state)
    gateway.save_state(state)
    assert gateway.load_state(state.session_id) == state
    assert gateway.list_saved_games() == [state.session_id]


def test_every_mutation_is_saved_in_full(store, make_session):
    session = make_session(["A", "B", "C", "D"], imposter=0)
    saved = []
    session.dispatch(Evict(seat=2), save=saved.append)
    session.dispatch(Confirm(), save=saved.append)

    assert [s.phase.kind for s in saved] == ["Elimination", "Voting"]
    assert saved[-1] == session.state

    session.dispatch(Evict(seat=3))
    record = loads(store.get(game_key(session.session_id)))
    assert record["phase"] == {"kind": "Elimination", "eliminatedIndex": 3, "wasImposter": False}
    assert record["roundNumber"] == 2
    assert record["players"][2]["isEliminated"] is True


def test_missing_or_corrupt_record_means_fresh_start(gateway, store):
    assert gateway.load_state("nobody") is None

    store.set(game_key("bad-json"), "{not json")
    assert gateway.load_state("bad-json") is None

    record = GameState(session_id="misaligned").to_record()
    record["players"] = [{"name": "A", "score": 0, "isEliminated": False}]
    record["cards"] = [{"type": "Normal", "word": "Tea"}, {"type": "Imposter", "word": "Coffee"}]
    store.set(game_key("misaligned"), dumps(record))
    assert gateway.load_state("misaligned") is None

    store.set(game_key("other"), dumps(GameState(session_id="someone-else").to_record()))
    assert gateway.load_state("other") is None


def test_session_id_is_issued_once_and_reused(gateway, store):
    first = gateway.resolve_session_id()
    assert store.get("agent_x_session_id") == first
    assert gateway.resolve_session_id() == first

    other_device = MemoryStore()
    assert gateway.resolve_session_id(id_store=other_device) != first


def test_broken_storage_never_breaks_the_game():
    gateway = PersistenceGateway(store=BrokenStore())
    sid = gateway.resolve_session_id()
    assert sid
    assert gateway.load_state(sid) is None
    gateway.save_state(GameState(session_id=sid))
    assert gateway.list_saved_games() == []


def test_file_store_round_trip(tmp_path, make_session):
    gateway = PersistenceGateway(store=FileStore(root=tmp_path))
    state = make_session(["A", "B", "C"]).state

    gateway.save_state(state)
    assert (tmp_path / f"agent_x_game_{state.session_id}.json").exists()
    assert gateway.load_state(state.session_id) == state
    assert gateway.list_saved_games() == [state.session_id]

    gateway.delete_state(state.session_id)
    assert gateway.load_state(state.session_id) is None
    assert gateway.list_saved_games() == []


def test_file_store_ignores_unreadable_files(tmp_path):
    store = FileStore(root=tmp_path)
    store.set("agent_x_game_ok", "{}")
    (tmp_path / "garbage.json").write_bytes(b"\x00not json")
    assert store.keys("agent_x_game_") == ["agent_x_game_ok"]


def test_registry_restores_saved_game(gateway, make_session):
    state = make_session(["A", "B", "C"], imposter=1).state
    gateway.save_state(state)
    drop_session(state.session_id)

    restored = get_session(state.session_id)
    assert restored.state == state
    assert get_session(state.session_id) is restored


def test_registry_deals_when_restoring_empty_card_view(gateway, store):
    record = GameState(session_id="mid-deal").to_record()
    record["phase"] = {"kind": "CardView", "currentPlayerIndex": 0}
    record["players"] = [{"name": n, "score": 0, "isEliminated": False} for n in "ABC"]
    store.set(game_key("mid-deal"), dumps(record))

    session = get_session("mid-deal")
    assert len(session.state.cards) == 3
    assert gateway.load_state("mid-deal").cards == session.state.cards


def test_create_session_persists_setup(gateway):
    session = create_session()
    assert gateway.load_state(session.session_id) == session.state
    assert session.session_id in list_all_session_ids()


@pytest.mark.parametrize("backend", ["memory", "file"])
def test_build_store(backend):
    assert build_store(backend) is not None
    with pytest.raises(ValueError):
        build_store("redis")


def test_record_breaking_roster_or_deal_rules_is_treated_as_absent(gateway, store):
    record = GameState(session_id="two-seats").to_record()
    record["phase"] = {"kind": "Voting"}
    record["players"] = [{"name": n, "score": 0, "isEliminated": False} for n in "AB"]
    store.set(game_key("two-seats"), dumps(record))
    assert gateway.load_state("two-seats") is None

    record = GameState(session_id="no-cards").to_record()
    record["phase"] = {"kind": "Voting"}
    record["players"] = [{"name": n, "score": 0, "isEliminated": False} for n in "ABC"]
    store.set(game_key("no-cards"), dumps(record))
    assert gateway.load_state("no-cards") is None


def test_file_store_keeps_similar_keys_apart(tmp_path):
    store = FileStore(root=tmp_path)
    store.set("table 1", "spaced")
    store.set("table_1", "underscored")
    store.set("table/1", "slashed")

    assert store.get("table 1") == "spaced"
    assert store.get("table_1") == "underscored"
    assert store.get("table/1") == "slashed"
    assert store.keys("table") == ["table 1", "table/1", "table_1"]


def test_late_snapshot_never_overwrites_newer_save(gateway, make_session):
    session = make_session(["A", "B", "C", "D"], imposter=0)
    queued = []
    session.dispatch(Evict(seat=2), save=lambda state: queued.append((state, session.version)))
    session.dispatch(Confirm(), save=lambda state: queued.append((state, session.version)))

    # exécution des tâches dans le désordre
    for state, version in reversed(queued):
        session.save_snapshot(state, version)

    saved = gateway.load_state(session.session_id)
    assert saved == session.state
    assert saved.phase.kind == "Voting"


def test_fresh_sessions_start_with_one_name_slot_per_player(gateway):
    assert get_session("brand-new").state.player_names == ["", "", ""]
    created = create_session("created")
    assert created.state.player_names == ["", "", ""]
    assert gateway.load_state("created").player_names == ["", "", ""]
