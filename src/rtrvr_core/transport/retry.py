# -*- coding: utf-8 -*-
"""Retry decisions and exponential backoff for transport calls."""

import asyncio
import random
from typing import Callable, Optional

from ..common.constants import BACKOFF_JITTER_RATIO
from ..common.exceptions import OperationCancelled, TransportError
from ..contracts import RetryPolicy


def should_retry(
    error: TransportError,
    attempt: int,
    policy: RetryPolicy,
    cancel_event: Optional[asyncio.Event] = None,
) -> bool:
    """Decide whether a failed attempt is followed by another one.

    Network-level failures (no status) are always retried; HTTP failures only
    when their status is in the policy's retriable set. Nothing is retried once
    the attempts are used up or the caller has cancelled.
    """
    if isinstance(error, OperationCancelled):
        return False
    if attempt >= policy.max_attempts:
        return False
    if cancel_event is not None and cancel_event.is_set():
        return False
    if error.status is None:
        return True
    return error.status in policy.retriable_status_codes


def backoff_delay_ms(
    attempt: int,
    policy: RetryPolicy,
    rand: Callable[[], float] = random.random,
) -> float:
    """Delay after failed ``attempt``: capped exponential plus up to 20% jitter."""
    exponential = min(policy.max_delay_ms, policy.base_delay_ms * (2 ** (attempt - 1)))
    jitter = rand() * exponential * BACKOFF_JITTER_RATIO
    return exponential + jitter
