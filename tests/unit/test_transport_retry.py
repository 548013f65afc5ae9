# -*- coding: utf-8 -*-
"""Unit tests for retry decisions and backoff delays."""

import asyncio

import pytest

from rtrvr_core.common.exceptions import OperationCancelled, TransportError
from rtrvr_core.contracts import RetryPolicy
from rtrvr_core.transport import backoff_delay_ms, should_retry

POLICY = RetryPolicy(max_attempts=3, base_delay_ms=100, max_delay_ms=300)


@pytest.mark.parametrize("status", [408, 425, 429, 500, 502, 503, 504])
def test_retriable_statuses_are_retried(status):
    assert should_retry(TransportError("x", status=status), 1, POLICY)


@pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
def test_client_errors_are_not_retried(status):
    assert not should_retry(TransportError("x", status=status), 1, POLICY)


def test_network_errors_are_retried_until_attempts_exhausted():
    error = TransportError("connection reset")

    assert should_retry(error, 1, POLICY)
    assert should_retry(error, 2, POLICY)
    assert not should_retry(error, 3, POLICY)


def test_cancellation_stops_retries():
    cancel_event = asyncio.Event()
    cancel_event.set()

    assert not should_retry(TransportError("x", status=503), 1, POLICY, cancel_event)
    assert not should_retry(OperationCancelled(), 1, POLICY)


@pytest.mark.parametrize(
    "attempt, expected",
    [(1, 100), (2, 200), (3, 300), (6, 300)],
)
def test_backoff_without_jitter_is_capped_exponential(attempt, expected):
    assert backoff_delay_ms(attempt, POLICY, rand=lambda: 0.0) == expected


def test_backoff_jitter_adds_at_most_twenty_percent():
    assert backoff_delay_ms(2, POLICY, rand=lambda: 0.5) == pytest.approx(220)
    assert backoff_delay_ms(3, POLICY, rand=lambda: 0.999) < 300 * 1.2

    for _ in range(50):
        delay = backoff_delay_ms(1, POLICY)
        assert 100 <= delay < 120
