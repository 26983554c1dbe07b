"""Thread-safe in-memory rate limiter and suspicious-activity log."""

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, Optional, Set

logger = logging.getLogger(__name__)

ACTIVITY_CAPACITY = 200
RECENT_ACTIVITY_COUNT = 50


class RateLimitKind(str, Enum):
    GENERAL = "general"
    LOGIN = "login"


_WINDOWS = {
    RateLimitKind.GENERAL: 60,
    RateLimitKind.LOGIN: 3600,
}


def severity_for(activity_type: str) -> str:
    """``high`` for failed/blocked events, ``medium`` otherwise."""
    if "failed" in activity_type or "blocked" in activity_type:
        return "high"
    return "medium"


@dataclass
class SecurityActivity:
    """One entry of the suspicious-activity log."""

    type: str
    details: Dict[str, Any] = field(default_factory=dict)
    severity: str = "medium"
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SecurityMonitor:
    """Rate limiting and activity auditing for one client instance.

    Blocking IPs is advisory: the monitor only tracks the set for callers.
    """

    def __init__(self, max_requests_per_minute: int = 60, max_login_attempts_per_hour: int = 10):
        """Initialize monitor.

        Args:
            max_requests_per_minute: Allowed general requests per rolling minute
            max_login_attempts_per_hour: Allowed login attempts per rolling hour
        """
        self.max_requests_per_minute = max_requests_per_minute
        self.max_login_attempts_per_hour = max_login_attempts_per_hour
        self._ledgers: Dict[RateLimitKind, Dict[str, Deque[float]]] = {
            RateLimitKind.GENERAL: {},
            RateLimitKind.LOGIN: {},
        }
        self._activities: Deque[SecurityActivity] = deque(maxlen=ACTIVITY_CAPACITY)
        self._blocked_ips: Set[str] = set()
        self._lock = threading.RLock()

    def _limit_for(self, kind: RateLimitKind) -> int:
        if kind == RateLimitKind.LOGIN:
            return self.max_login_attempts_per_hour
        return self.max_requests_per_minute

    @staticmethod
    def _prune(ledger: Dict[str, Deque[float]], now: float, window: int) -> None:
        for key in list(ledger):
            entries = ledger[key]
            while entries and now - entries[0] > window:
                entries.popleft()
            if not entries:
                del ledger[key]

    def check_rate_limit(self, identifier: str, kind: str = RateLimitKind.GENERAL) -> bool:
        """Record an attempt and tell whether it is within the limit.

        Args:
            identifier: Caller identity (already hashed when it is a username)
            kind: ``general`` (1 minute window) or ``login`` (1 hour window)

        Returns:
            True if allowed; False after logging ``rate_limit_exceeded``
        """
        kind = RateLimitKind(kind)
        window = _WINDOWS[kind]

        with self._lock:
            now = time.time()
            ledger = self._ledgers[kind]
            entries = ledger.setdefault(identifier, deque())
            entries.append(now)
            self._prune(ledger, now, window)

            allowed = len(entries) <= self._limit_for(kind)
            if not allowed:
                self.log_suspicious_activity(
                    "rate_limit_exceeded", {"identifier": identifier, "type": kind.value}
                )
            return allowed

    def log_suspicious_activity(self, activity_type: str, details: Optional[Dict[str, Any]] = None) -> SecurityActivity:
        """Append an event to the bounded activity log (oldest evicted first)."""
        activity = SecurityActivity(
            type=activity_type,
            details=dict(details or {}),
            severity=severity_for(activity_type),
        )
        with self._lock:
            self._activities.append(activity)
        logger.warning(f"Suspicious activity: {activity_type} ({activity.severity}) {activity.details}")
        return activity

    def block_ip(self, ip: str) -> None:
        with self._lock:
            self._blocked_ips.add(ip)

    def is_blocked(self, ip: str) -> bool:
        with self._lock:
            return ip in self._blocked_ips

    def clear_blocked_ips(self) -> None:
        with self._lock:
            self._blocked_ips.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get monitor statistics.

        Returns:
            Dictionary with blocked IP count, activity totals, the 50 most
            recent activities and the number of live ledger entries per kind
        """
        with self._lock:
            recent = list(self._activities)[-RECENT_ACTIVITY_COUNT:]
            return {
                "blocked_ips": len(self._blocked_ips),
                "total_suspicious_activities": len(self._activities),
                "recent_activities": [a.to_dict() for a in recent],
                "active_rate_limits": {
                    kind.value: sum(len(entries) for entries in ledger.values())
                    for kind, ledger in self._ledgers.items()
                },
            }
