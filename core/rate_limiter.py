"""
Per-user action rate limiter.

Each named action (``send_message``, ``like_testimony`` ...) gets a fixed
window with a maximum number of attempts plus a cooldown between attempts.
State is a small JSON document kept in a pluggable store:

    {"send_message": {"attempts": [1700000000000, ...], "lastAttempt": 1700000000000}}

Timestamps are epoch milliseconds. The limiter is advisory: it throttles
honest clients and is never an authorization boundary. Callers check, do the
work, then ``record_attempt``.
"""

import json
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import structlog
from django.conf import settings
from django.core.cache import cache

from core.exceptions import RateLimitExceeded

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    max_attempts: int
    window_ms: int
    cooldown_ms: int


RATE_LIMITS: Dict[str, RateLimitRule] = {
    # Messaging
    'send_message': RateLimitRule(max_attempts=10, window_ms=60000, cooldown_ms=5000),
    'send_group_message': RateLimitRule(max_attempts=15, window_ms=60000, cooldown_ms=3000),

    # Social actions
    'send_friend_request': RateLimitRule(max_attempts=5, window_ms=300000, cooldown_ms=10000),
    'create_group': RateLimitRule(max_attempts=3, window_ms=600000, cooldown_ms=30000),

    # Content creation
    'create_testimony': RateLimitRule(max_attempts=1, window_ms=3600000, cooldown_ms=60000),
    'update_profile': RateLimitRule(max_attempts=5, window_ms=300000, cooldown_ms=5000),
    'generate_testimony': RateLimitRule(max_attempts=3, window_ms=3600000, cooldown_ms=30000),

    # Reactions
    'add_reaction': RateLimitRule(max_attempts=30, window_ms=60000, cooldown_ms=500),
    'like_testimony': RateLimitRule(max_attempts=20, window_ms=60000, cooldown_ms=1000),

    # Uploads
    'upload_image': RateLimitRule(max_attempts=5, window_ms=300000, cooldown_ms=10000),
}


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    retry_after: Optional[int] = None
    reason: Optional[str] = None

    def __bool__(self):
        return self.allowed


def _seconds(n):
    return f"{n} second{'' if n == 1 else 's'}"


def _now_ms():
    return int(time.time() * 1000)


def configured_rules():
    """
    Return the action table with ``settings.LIGHTNING_RATE_LIMITS`` applied.

    Overrides are dicts keyed by action with any of ``max_attempts``,
    ``window_ms`` and ``cooldown_ms``; unknown actions are added.
    """
    rules = dict(RATE_LIMITS)
    overrides = getattr(settings, 'LIGHTNING_RATE_LIMITS', None) or {}
    for action, values in overrides.items():
        base = rules.get(action)
        rules[action] = RateLimitRule(
            max_attempts=values.get('max_attempts', base.max_attempts if base else 0),
            window_ms=values.get('window_ms', base.window_ms if base else 0),
            cooldown_ms=values.get('cooldown_ms', base.cooldown_ms if base else 0),
        )
    return rules


class InMemoryRateLimitStore:
    """Holds rate-limit state in a plain dict. Used in tests and scripts."""

    def __init__(self, data=None):
        self._data = data or {}

    def load(self):
        return json.loads(json.dumps(self._data))

    def save(self, data):
        self._data = json.loads(json.dumps(data))

    def clear(self):
        self._data = {}


class CacheRateLimitStore:
    """
    Holds rate-limit state as a JSON string under one Django cache key.

    A corrupt or unreadable value is treated as empty state.
    """

    def __init__(self, key, timeout=None):
        self.key = key
        self.timeout = timeout if timeout is not None else getattr(
            settings, 'LIGHTNING_RATE_LIMIT_STATE_TTL', 3600)

    def load(self):
        raw = cache.get(self.key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("rate_limit_state_corrupt", key=self.key)
            return {}
        if not isinstance(data, dict):
            logger.warning("rate_limit_state_corrupt", key=self.key)
            return {}
        return data

    def save(self, data):
        cache.set(self.key, json.dumps(data), self.timeout)

    def clear(self):
        cache.delete(self.key)


class RateLimiter:
    """
    Fixed-window plus cooldown limiter over a rate-limit store.

    ``clock`` returns the current time in epoch milliseconds.
    """

    def __init__(self, store, rules=None, clock: Callable[[], int] = None):
        self.store = store
        self.rules = rules if rules is not None else configured_rules()
        self.clock = clock or _now_ms

    def get_rule(self, action) -> Optional[RateLimitRule]:
        return self.rules.get(action)

    def _recent_attempts(self, action_data, rule, now):
        return [
            ts for ts in action_data.get('attempts', [])
            if now - ts < rule.window_ms
        ]

    def check(self, action) -> RateLimitResult:
        rule = self.get_rule(action)
        if rule is None:
            logger.warning("rate_limit_unknown_action", action=action)
            return RateLimitResult(allowed=True)

        now = self.clock()
        action_data = self.store.load().get(action) or {}
        recent = self._recent_attempts(action_data, rule, now)

        last_attempt = action_data.get('lastAttempt')
        if last_attempt is not None:
            since_last = now - last_attempt
            if since_last < rule.cooldown_ms:
                retry_after = math.ceil((rule.cooldown_ms - since_last) / 1000)
                return RateLimitResult(
                    allowed=False,
                    retry_after=retry_after,
                    reason=f"Please wait {_seconds(retry_after)} before trying again.",
                )

        if len(recent) >= rule.max_attempts:
            oldest = min(recent) if recent else now
            retry_after = math.ceil((rule.window_ms - (now - oldest)) / 1000)
            return RateLimitResult(
                allowed=False,
                retry_after=retry_after,
                reason=f"You're doing that too much. Please wait {_seconds(retry_after)}.",
            )

        return RateLimitResult(allowed=True)

    def record_attempt(self, action):
        rule = self.get_rule(action)
        if rule is None:
            return

        now = self.clock()
        data = self.store.load()
        recent = self._recent_attempts(data.get(action) or {}, rule, now)
        recent.append(now)
        data[action] = {'attempts': recent, 'lastAttempt': now}
        self.store.save(data)

    def require(self, action):
        """Raise ``RateLimitExceeded`` when ``action`` is currently limited."""
        result = self.check(action)
        if not result.allowed:
            logger.info(
                "rate_limit_exceeded",
                action=action,
                retry_after=result.retry_after,
            )
            raise RateLimitExceeded(retry_after=result.retry_after, reason=result.reason)
        return result

    def check_and_notify(self, action, notify=None) -> bool:
        """Check ``action`` and hand the denial reason to ``notify``."""
        result = self.check(action)
        if not result.allowed and notify is not None:
            notify(result.reason)
        return result.allowed

    def remaining_attempts(self, action) -> Optional[int]:
        """Attempts left in the current window; ``None`` means unlimited."""
        rule = self.get_rule(action)
        if rule is None:
            return None

        action_data = self.store.load().get(action) or {}
        recent = self._recent_attempts(action_data, rule, self.clock())
        return max(0, rule.max_attempts - len(recent))

    def clear(self, action=None):
        if action is None:
            self.store.clear()
            return

        data = self.store.load()
        if data.pop(action, None) is not None:
            self.store.save(data)


def rate_limiter_for_user(user, **kwargs) -> RateLimiter:
    """Return a limiter whose state lives in the cache under this user's key."""
    return RateLimiter(CacheRateLimitStore(f"rate_limits:{user.pk}"), **kwargs)
