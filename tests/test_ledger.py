"""Tests for the single-pick selection ledger."""

import random
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.exceptions import AlreadyPickedError, NoParticipantsError, StorageError
from database import InMemoryStore
from services import SelectionLedger, StaticParticipantSource
from tests.conftest import PARTICIPANTS


def test_first_pick_succeeds_and_is_recorded(ledger, store):
    record = ledger.pick("10.0.0.1", "pytest-agent")

    assert record.selected_participant in PARTICIPANTS
    assert record.identity == "10.0.0.1"
    assert record.user_agent == "pytest-agent"
    assert store.is_identity_used("10.0.0.1")
    assert store.count_picks() == 1
    assert store.list_picks()[0].selected_participant == record.selected_participant


def test_second_pick_with_same_identity_is_rejected(ledger, store):
    ledger.pick("10.0.0.1")

    for _ in range(3):
        with pytest.raises(AlreadyPickedError) as exc_info:
            ledger.pick("10.0.0.1")
        assert exc_info.value.code == "ALREADY_PICKED"

    assert store.count_picks() == 1
    assert store.count_identities() == 1


def test_eligibility_tracks_used_identities(ledger):
    assert ledger.check_eligibility("10.0.0.2").eligible is True
    assert ledger.check_eligibility("10.0.0.2").total_participants == len(PARTICIPANTS)

    ledger.pick("10.0.0.2")

    assert ledger.check_eligibility("10.0.0.2").eligible is False
    assert ledger.check_eligibility("10.0.0.3").eligible is True


def test_empty_participant_list_writes_nothing(store):
    ledger = SelectionLedger(store, StaticParticipantSource([]))

    with pytest.raises(NoParticipantsError):
        ledger.pick("10.0.0.1")

    assert store.count_picks() == 0
    assert store.count_identities() == 0
    # The failed attempt does not consume the identity
    assert ledger.check_eligibility("10.0.0.1").eligible is True


def test_duplicate_participants_are_drawn_as_entries():
    ledger = SelectionLedger(
        InMemoryStore(),
        StaticParticipantSource(["Alice", "Alice", "Bob"]),
        rng=random.Random(7),
    )
    picks = Counter(ledger.pick(f"id-{i}").selected_participant for i in range(3000))

    assert set(picks) == {"Alice", "Bob"}
    assert picks["Alice"] > picks["Bob"]


def test_selection_is_uniform():
    """Chi-square goodness of fit for N=10 participants over M=10000 draws."""
    names = [f"participant-{i}" for i in range(10)]
    ledger = SelectionLedger(InMemoryStore(), StaticParticipantSource(names), rng=random.Random(2024))
    trials = 10000

    counts = Counter(ledger.pick(f"caller-{i}").selected_participant for i in range(trials))

    expected = trials / len(names)
    chi_square = sum((counts[name] - expected) ** 2 / expected for name in names)
    # Critical value for 9 degrees of freedom at p = 0.001
    assert chi_square < 27.877
    assert set(counts) == set(names)


def test_concurrent_picks_for_one_identity_yield_single_success(store, participants):
    ledger = SelectionLedger(store, participants)
    workers = 16
    barrier = threading.Barrier(workers)

    def attempt():
        barrier.wait()
        try:
            return ledger.pick("203.0.113.7")
        except AlreadyPickedError:
            return None

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda _: attempt(), range(workers)))

    successes = [result for result in results if result is not None]
    assert len(successes) == 1
    assert results.count(None) == workers - 1
    assert store.count_picks() == 1
    assert store.count_identities() == 1


def test_concurrent_picks_for_distinct_identities_all_succeed(store, participants):
    ledger = SelectionLedger(store, participants)

    with ThreadPoolExecutor(max_workers=8) as pool:
        records = list(pool.map(lambda i: ledger.pick(f"10.1.0.{i}"), range(40)))

    assert len(records) == 40
    assert store.count_picks() == 40
    assert store.count_identities() == 40


def test_reset_allows_identity_to_pick_again(ledger, store):
    ledger.pick("10.0.0.1")
    ledger.pick("10.0.0.2")

    ledger.reset_all()

    assert ledger.picks_log().total_picks == 0
    assert ledger.picks_log().recent == []
    assert ledger.pick("10.0.0.1").identity == "10.0.0.1"
    assert store.count_picks() == 1


def test_picks_log_keeps_latest_entries(ledger):
    for i in range(60):
        ledger.pick(f"10.2.0.{i}")

    log = ledger.picks_log()

    assert log.total_picks == 60
    assert log.total_unique_identities == 60
    assert len(log.recent) == 50
    assert log.recent[0].identity == "10.2.0.10"
    assert log.recent[-1].identity == "10.2.0.59"


def test_storage_failure_aborts_pick(participants):
    class BrokenStore(InMemoryStore):
        def record_pick(self, used, record):
            raise StorageError("disk full")

    store = BrokenStore()
    ledger = SelectionLedger(store, participants)

    with pytest.raises(StorageError):
        ledger.pick("10.0.0.1")

    assert store.count_picks() == 0
    assert ledger.check_eligibility("10.0.0.1").eligible is True


def test_identity_recorded_by_another_writer_is_rejected(participants):
    class RacingStore(InMemoryStore):
        """Reports the identity unused but refuses the insert."""

        def is_identity_used(self, identity):
            return False

        def record_pick(self, used, record):
            return False

    ledger = SelectionLedger(RacingStore(), participants)

    with pytest.raises(AlreadyPickedError):
        ledger.pick("10.0.0.1")


def test_identity_locks_are_released(ledger):
    for i in range(200):
        ledger.pick(f"10.3.0.{i}")
    with pytest.raises(AlreadyPickedError):
        ledger.pick("10.3.0.1")

    assert len(ledger._locks) == 0
