import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable

from config import (
    CHALLENGE_TTL_SECONDS,
    DISPLAY_ROTATION_MAX_DEG,
    DISPLAY_SCALE_MIN,
    DISPLAY_SCALE_MAX,
)

logger = logging.getLogger("uvicorn.error")

_rng = secrets.SystemRandom()


@dataclass
class Challenge:
    id: str
    issued_at: float
    expires_at: float
    shape: str | None = None

    # Cosmetic only: matching is rotation/scale invariant
    display_rotation: float = 0.0
    display_scale: float = 1.0

    used: bool = False

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ChallengeLedger:
    """Short-lived, one-shot verification tokens.

    A challenge is valid while it is unused and unexpired. Consuming it evicts
    it, so a captured winning trace can never be resubmitted under the same
    id. Every operation takes the same lock, which makes check-then-consume
    on one id a critical section.
    """

    def __init__(self, ttl_seconds: float = CHALLENGE_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._challenges: dict[str, Challenge] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._challenges)

    def issue(self, shape: str | None = None) -> Challenge:
        now = self._clock()
        challenge = Challenge(
            id=secrets.token_urlsafe(24),
            issued_at=now,
            expires_at=now + self.ttl_seconds,
            shape=shape,
            display_rotation=_rng.uniform(-DISPLAY_ROTATION_MAX_DEG, DISPLAY_ROTATION_MAX_DEG),
            display_scale=_rng.uniform(DISPLAY_SCALE_MIN, DISPLAY_SCALE_MAX),
        )
        with self._lock:
            self._challenges[challenge.id] = challenge
        logger.info(f"[Ledger] issued {challenge.id[:8]}..., shape={shape}, ttl={self.ttl_seconds:.0f}s")
        return challenge

    def _lookup(self, challenge_id: str | None) -> Challenge | None:
        # Caller holds the lock
        if not challenge_id:
            return None
        challenge = self._challenges.get(challenge_id)
        if challenge is None:
            return None
        if challenge.used or challenge.is_expired(self._clock()):
            del self._challenges[challenge_id]
            return None
        return challenge

    def get(self, challenge_id: str | None) -> Challenge | None:
        """Return the challenge if it is still valid, else None."""
        with self._lock:
            return self._lookup(challenge_id)

    def is_valid(self, challenge_id: str | None) -> bool:
        return self.get(challenge_id) is not None

    def consume(self, challenge_id: str | None) -> bool:
        """Mark used and evict. True only for the caller that consumed a valid id."""
        with self._lock:
            challenge = self._lookup(challenge_id)
            if challenge is None:
                return False
            challenge.used = True
            del self._challenges[challenge_id]
        logger.info(f"[Ledger] consumed {challenge_id[:8]}...")
        return True

    def sweep(self) -> int:
        """Evict every expired challenge in a single pass. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [cid for cid, ch in self._challenges.items() if ch.used or ch.is_expired(now)]
            for cid in stale:
                del self._challenges[cid]
        if stale:
            logger.info(f"[Ledger] swept {len(stale)} stale challenges")
        return len(stale)
