# -*- coding: utf-8 -*-
"""Configuration data structures for rtrvr-core."""

import math
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from rtrvr_core.common.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_RETRIABLE_STATUS_CODES,
    MAX_ATTEMPTS_LIMIT,
    MIN_BASE_DELAY_MS,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry and backoff policy for transport calls.

    Attributes:
        max_attempts: Total attempts including the first one (clamped 1-10)
        base_delay_ms: Delay before the second attempt, doubled per attempt
        max_delay_ms: Upper bound for any single delay (never below base)
        retriable_status_codes: HTTP statuses that trigger another attempt
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS
    retriable_status_codes: FrozenSet[int] = field(
        default_factory=lambda: DEFAULT_RETRIABLE_STATUS_CODES
    )

    @classmethod
    def create(
        cls,
        max_attempts: Optional[float] = None,
        base_delay_ms: Optional[float] = None,
        max_delay_ms: Optional[float] = None,
        retriable_status_codes: Optional[Iterable[int]] = None,
    ) -> "RetryPolicy":
        """Build a normalised policy from loosely typed inputs."""
        attempts = DEFAULT_MAX_ATTEMPTS if max_attempts is None else math.floor(max_attempts)
        attempts = max(1, min(MAX_ATTEMPTS_LIMIT, attempts))

        base = DEFAULT_BASE_DELAY_MS if base_delay_ms is None else math.floor(base_delay_ms)
        base = max(MIN_BASE_DELAY_MS, base)

        ceiling = DEFAULT_MAX_DELAY_MS if max_delay_ms is None else math.floor(max_delay_ms)
        ceiling = max(base, ceiling)

        codes = frozenset(int(code) for code in (retriable_status_codes or ()))
        if not codes:
            codes = DEFAULT_RETRIABLE_STATUS_CODES

        return cls(
            max_attempts=attempts,
            base_delay_ms=base,
            max_delay_ms=ceiling,
            retriable_status_codes=codes,
        )

    def normalized(self) -> "RetryPolicy":
        """Return a copy with every field clamped into its valid range."""
        return RetryPolicy.create(
            max_attempts=self.max_attempts,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
            retriable_status_codes=self.retriable_status_codes,
        )
