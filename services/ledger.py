"""Single-pick selection ledger."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, List, Optional

from core import get_logger, PickerDefaults
from core.exceptions import AlreadyPickedError, NoParticipantsError
from database.models import PickRecord, PicksLog, UsedIdentity, utcnow
from database.store import LedgerStore
from services.participants import ParticipantSource
from utils.locks import KeyedLock
from utils.performance import monitor

logger = get_logger(__name__)


@dataclass(frozen=True)
class Eligibility:
    eligible: bool
    total_participants: int


class SelectionLedger:
    """Grants each caller identity at most one uniformly random selection.

    The eligibility check and the write of the used identity plus its audit
    record run under a lock held for that identity, and the store writes both
    records in one call. Draws use a non-cryptographic PRNG: fairness is
    required, unpredictability is not.
    """

    def __init__(
        self,
        store: LedgerStore,
        participants: ParticipantSource,
        rng: Optional[random.Random] = None,
        clock: Callable = utcnow,
    ) -> None:
        self.store = store
        self.participants = participants
        self._rng = rng or random.Random()
        self._clock = clock
        self._locks = KeyedLock()

    def list_participants(self) -> List[str]:
        return self.participants.list_participants()

    def check_eligibility(self, identity: str) -> Eligibility:
        """Report whether the identity can still pick."""
        return Eligibility(
            eligible=not self.store.is_identity_used(identity),
            total_participants=len(self.list_participants()),
        )

    def pick(self, identity: str, user_agent: str = PickerDefaults.UNKNOWN_USER_AGENT) -> PickRecord:
        """Draw one participant for ``identity`` and record it durably.

        Raises:
            AlreadyPickedError: If the identity already picked
            NoParticipantsError: If the participant list is empty
            StorageError: If the outcome could not be recorded
        """
        with self._locks.hold(identity), monitor.track_draw():
            if self.store.is_identity_used(identity):
                monitor.record_pick("already_picked")
                raise AlreadyPickedError()

            participants = self.list_participants()
            if not participants:
                monitor.record_pick("no_participants")
                raise NoParticipantsError()

            selected = participants[self._rng.randrange(len(participants))]
            timestamp = self._clock()
            record = PickRecord(
                identity=identity,
                selected_participant=selected,
                timestamp=timestamp,
                user_agent=user_agent,
            )
            used = UsedIdentity(identity=identity, timestamp=timestamp, user_agent=user_agent)

            # Another process sharing the database may have won the insert
            if not self.store.record_pick(used, record):
                monitor.record_pick("already_picked")
                raise AlreadyPickedError()

        monitor.record_pick("success")
        logger.info("Pick made by %s: %s", identity, selected)
        return record

    def picks_log(self, limit: int = PickerDefaults.PICKS_LOG_LIMIT) -> PicksLog:
        return PicksLog(
            recent=self.store.list_picks(limit=limit),
            total_picks=self.store.count_picks(),
            total_unique_identities=self.store.count_identities(),
        )

    def reset_all(self) -> None:
        """Forget every used identity and the whole pick log."""
        self.store.clear_picks()
        logger.warning("All picks have been reset")
