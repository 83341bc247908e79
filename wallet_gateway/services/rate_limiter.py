import threading
import time
from typing import Callable

from loguru import logger

from wallet_gateway.core.config import settings
from wallet_gateway.core.exceptions.rate_limiter import (
    RateLimitBucketRetiredError,
    RateLimitConfigurationError,
)
from wallet_gateway.core.types import RateLimitInfoDict

Clock = Callable[[], float]

DEFAULT_CAPACITY = 10.0
DEFAULT_FILL_RATE = 1.0


def _validate(capacity: float, fill_rate: float) -> None:
    if capacity <= 0:
        raise RateLimitConfigurationError(f"Bucket capacity must be positive, got {capacity}")
    if fill_rate < 0:
        raise RateLimitConfigurationError(f"Fill rate must not be negative, got {fill_rate}")


class TokenBucket:
    """
    Token bucket for a single key.

    Refill is computed lazily on each consume, so idle buckets cost nothing
    and no background scheduler is needed. Invariant: 0 <= tokens <= capacity.

    Refill and consume run under one lock, so concurrent callers can never
    spend the same token twice. The lock is a plain threading.Lock and is
    never held across an await.

    A registry retires a bucket under that same lock before dropping it, so
    a debit either lands before the retirement or is refused afterwards.
    """

    def __init__(
        self,
        capacity: float = DEFAULT_CAPACITY,
        fill_rate: float = DEFAULT_FILL_RATE,
        clock: Clock = time.monotonic,
    ):
        _validate(capacity, fill_rate)

        self.capacity = float(capacity)
        self.fill_rate = float(fill_rate)
        self._clock = clock
        self._tokens = self.capacity
        self._last_refill = clock()
        self._last_used = self._last_refill
        self._retired = False
        self._lock = threading.Lock()

    @property
    def tokens(self) -> float:
        """Token count as of the last refill."""
        return self._tokens

    @property
    def last_refill(self) -> float:
        return self._last_refill

    @property
    def retired(self) -> bool:
        return self._retired

    def _refill_locked(self) -> None:
        now = self._clock()
        # A clock that steps backwards adds nothing
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.fill_rate)
        self._last_refill = max(now, self._last_refill)

    def refill(self) -> None:
        with self._lock:
            self._refill_locked()

    def try_consume(self, tokens: float = 1) -> bool:
        """
        Take `tokens` from the bucket if enough are available.

        Args:
            tokens: Amount to consume (default: 1)

        Returns:
            bool: True if consumed, False if the bucket was left untouched

        Raises:
            RateLimitConfigurationError: If tokens is not positive
            RateLimitBucketRetiredError: If the bucket was pruned from its registry
        """
        if tokens <= 0:
            raise RateLimitConfigurationError(f"Tokens to consume must be positive, got {tokens}")

        with self._lock:
            if self._retired:
                raise RateLimitBucketRetiredError("Bucket was retired by its registry")

            self._refill_locked()
            self._last_used = self._last_refill

            if self._tokens >= tokens:
                self._tokens -= tokens
                return True

            return False

    def retire_if_idle(self, max_idle: float) -> bool:
        """
        Retire the bucket if it is full again and unused for `max_idle` seconds.

        A retired bucket refuses every later consume.
        """
        with self._lock:
            if self._retired:
                return True

            self._refill_locked()
            if self._tokens >= self.capacity and self._last_refill - self._last_used >= max_idle:
                self._retired = True

            return self._retired

    def info(self) -> RateLimitInfoDict:
        return RateLimitInfoDict(limit=int(self.capacity), remaining=int(self._tokens))


class RateLimiterRegistry:
    """
    Owns one TokenBucket per key.

    Built once at startup and handed to request handlers (app.state), so
    tests can create isolated registries. Buckets are created lazily at full
    capacity. Once the registry holds more than `max_keys` buckets, idle
    ones are pruned to bound memory, at most once per `prune_interval`
    seconds so a registry full of active keys is not rescanned per request.

    Example:
        ```python
        registry = RateLimiterRegistry(capacity=10, fill_rate=1)

        is_allowed, bucket = registry.acquire("ratelimit:wallet-connect:10.0.0.1")
        if not is_allowed:
            raise TooManyRequestsException(...)
        ```
    """

    def __init__(
        self,
        capacity: float = DEFAULT_CAPACITY,
        fill_rate: float = DEFAULT_FILL_RATE,
        clock: Clock = time.monotonic,
        max_keys: int | None = None,
        max_idle: float = 600.0,
        prune_interval: float = 60.0,
    ):
        _validate(capacity, fill_rate)

        self.capacity = capacity
        self.fill_rate = fill_rate
        self.max_keys = max_keys
        self.max_idle = max_idle
        self.prune_interval = prune_interval
        self._clock = clock
        self._last_prune_at: float | None = None
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "RateLimiterRegistry":
        return cls(
            capacity=settings.rate_limit_capacity,
            fill_rate=settings.rate_limit_fill_rate,
            max_keys=settings.rate_limit_max_keys,
            max_idle=settings.rate_limit_max_idle_seconds,
            prune_interval=settings.rate_limit_prune_interval_seconds,
        )

    def __len__(self) -> int:
        return len(self._buckets)

    def __contains__(self, key: str) -> bool:
        return key in self._buckets

    def get_or_create(
        self,
        key: str,
        capacity: float | None = None,
        fill_rate: float | None = None,
    ) -> TokenBucket:
        """
        Return the bucket for `key`, creating a full one if none exists.

        Capacity and fill rate only apply on creation; an existing bucket
        keeps its own parameters.
        """
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is not None:
                return bucket

            if self._prune_due_locked():
                self._prune_locked(self.max_idle)

            bucket = TokenBucket(
                capacity=self.capacity if capacity is None else capacity,
                fill_rate=self.fill_rate if fill_rate is None else fill_rate,
                clock=self._clock,
            )
            self._buckets[key] = bucket
            return bucket

    def acquire(self, key: str, tokens: float = 1) -> tuple[bool, TokenBucket]:
        """
        Consume `tokens` from the bucket for `key`.

        If a prune retires the bucket between lookup and debit, the debit is
        retried against the key's current bucket.

        Returns:
            tuple[bool, TokenBucket]: Whether the tokens were consumed, and
                the bucket that was charged
        """
        while True:
            bucket = self.get_or_create(key)
            try:
                return bucket.try_consume(tokens), bucket
            except RateLimitBucketRetiredError:
                logger.debug(f"Rate limit bucket for {key} was pruned mid-request, retrying")

    def try_consume(self, key: str, tokens: float = 1) -> bool:
        is_allowed, _ = self.acquire(key, tokens)
        return is_allowed

    def _prune_due_locked(self) -> bool:
        if self.max_keys is None or len(self._buckets) < self.max_keys:
            return False
        if self._last_prune_at is None:
            return True
        return self._clock() - self._last_prune_at >= self.prune_interval

    def _prune_locked(self, max_idle: float) -> int:
        self._last_prune_at = self._clock()
        # Retired under each bucket's own lock, so no debit is lost with the bucket
        idle_keys = [
            key for key, bucket in self._buckets.items() if bucket.retire_if_idle(max_idle)
        ]
        for key in idle_keys:
            del self._buckets[key]

        if idle_keys:
            logger.debug(f"Pruned {len(idle_keys)} idle rate limit buckets")
        elif self.max_keys is not None and len(self._buckets) >= self.max_keys:
            logger.warning(
                f"Rate limit registry holds {len(self._buckets)} active buckets "
                f"(max_keys={self.max_keys}); nothing idle to prune"
            )

        return len(idle_keys)

    def prune(self, max_idle: float | None = None) -> int:
        """
        Drop buckets that are full and unused for `max_idle` seconds.

        Dropping such a bucket is invisible to clients: a recreated bucket
        starts full, exactly as the pruned one would have been.

        Returns:
            int: Number of buckets removed
        """
        with self._lock:
            return self._prune_locked(self.max_idle if max_idle is None else max_idle)
