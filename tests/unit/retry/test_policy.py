r"""Unit tests for RetryPolicy, the decisions shared by both retry loops."""

from __future__ import annotations

import httpx
import pytest

from tests.helpers import GENESIS_HASH, TXID
from waterfalls_client import endpoints
from waterfalls_client.backoff import ConstantBackoff, ExponentialBackoff
from waterfalls_client.exceptions import (
    DecodeError,
    ExhaustedRetriesError,
    ServerError,
    TransactionNotFoundError,
    TransportError,
)
from waterfalls_client.executor import AttemptOutcome
from waterfalls_client.retry import RetryConfig, RetryPolicy


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy(
        RetryConfig(max_retries=2, backoff_strategy=ExponentialBackoff(base_delay=1.0))
    )


def test_retry_policy_max_attempts(policy: RetryPolicy) -> None:
    assert policy.max_attempts == 3


def test_retry_policy_success_returns_decoded_value(policy: RetryPolicy) -> None:
    step = policy.evaluate(
        endpoints.get_tip_hash(), AttemptOutcome.from_response(200, GENESIS_HASH.encode()), 0
    )
    assert step.value == GENESIS_HASH
    assert step.error is None
    assert not step.should_retry


def test_retry_policy_retryable_status_schedules_retry(policy: RetryPolicy) -> None:
    call = endpoints.get_tip_hash()
    outcome = AttemptOutcome.from_response(503, b"busy")
    first = policy.evaluate(call, outcome, 0)
    second = policy.evaluate(call, outcome, 1)
    assert first.should_retry
    assert first.delay == 1.0
    assert first.reason == "status 503"
    assert second.delay == 2.0


def test_retry_policy_exhausted_after_max_retries(policy: RetryPolicy) -> None:
    step = policy.evaluate(
        endpoints.get_tip_hash(), AttemptOutcome.from_response(500, b"internal error"), 2
    )
    assert not step.should_retry
    assert isinstance(step.error, ExhaustedRetriesError)
    assert step.error.attempts == 3
    last_error = step.error.last_error
    assert isinstance(last_error, ServerError)
    assert last_error.status_code == 500
    assert last_error.server_message == "internal error"
    assert last_error.attempts == 3
    assert step.error.__cause__ is last_error


def test_retry_policy_retryable_transport_error(policy: RetryPolicy) -> None:
    step = policy.evaluate(
        endpoints.get_tip_hash(), AttemptOutcome.from_error(httpx.ConnectTimeout("slow")), 0
    )
    assert step.should_retry
    assert step.reason == "ConnectTimeout"


def test_retry_policy_exhausted_transport_error_keeps_cause(policy: RetryPolicy) -> None:
    cause = httpx.ReadTimeout("slow")
    step = policy.evaluate(endpoints.get_tip_hash(), AttemptOutcome.from_error(cause), 2)
    assert isinstance(step.error, ExhaustedRetriesError)
    last_error = step.error.last_error
    assert isinstance(last_error, TransportError)
    assert last_error.timeout
    assert last_error.cause is cause
    assert last_error.__cause__ is cause
    assert last_error.message == "GET request to /blocks/tip/hash timed out"


def test_retry_policy_non_retryable_transport_error_is_terminal(policy: RetryPolicy) -> None:
    step = policy.evaluate(
        endpoints.get_tip_hash(),
        AttemptOutcome.from_error(httpx.UnsupportedProtocol("ftp")),
        0,
    )
    assert isinstance(step.error, TransportError)
    assert not step.error.timeout
    assert step.error.attempts == 1


def test_retry_policy_non_retryable_status_is_terminal(policy: RetryPolicy) -> None:
    step = policy.evaluate(
        endpoints.get_tip_hash(), AttemptOutcome.from_response(400, b"bad request"), 0
    )
    assert isinstance(step.error, ServerError)
    assert step.error.status_code == 400
    assert step.error.message == "bad request"
    assert step.error.attempts == 1


def test_retry_policy_decode_error_is_terminal(policy: RetryPolicy) -> None:
    step = policy.evaluate(
        endpoints.waterfalls("wpkh(xpub)"), AttemptOutcome.from_response(200, b'{"txs_se'), 1
    )
    assert isinstance(step.error, DecodeError)
    assert step.error.attempts == 2
    assert not step.should_retry


def test_retry_policy_body_decoding_error_is_decode_error(policy: RetryPolicy) -> None:
    cause = httpx.DecodingError("Error -3 while decompressing data: incorrect header check")
    step = policy.evaluate(endpoints.get_tip_hash(), AttemptOutcome.from_error(cause), 0)
    assert isinstance(step.error, DecodeError)
    assert step.error.shape == "block hash"
    assert step.error.attempts == 1
    assert step.error.__cause__ is cause
    assert not step.should_retry


def test_retry_policy_too_many_redirects_is_terminal(policy: RetryPolicy) -> None:
    cause = httpx.TooManyRedirects("Exceeded maximum allowed redirects.")
    step = policy.evaluate(endpoints.get_tip_hash(), AttemptOutcome.from_error(cause), 0)
    assert isinstance(step.error, TransportError)
    assert step.error.cause is cause
    assert step.error.attempts == 1
    assert not step.should_retry


def test_retry_policy_not_found_as_none(policy: RetryPolicy) -> None:
    step = policy.evaluate(endpoints.get_tx(TXID), AttemptOutcome.from_response(404, b""), 0)
    assert step.error is None
    assert step.value is None
    assert not step.should_retry


def test_retry_policy_not_found_as_error(policy: RetryPolicy) -> None:
    step = policy.evaluate(
        endpoints.get_tx(TXID, required=True), AttemptOutcome.from_response(404, b""), 0
    )
    assert isinstance(step.error, TransactionNotFoundError)
    assert step.error.txid == TXID


def test_retry_policy_zero_retries_exhausts_immediately() -> None:
    policy = RetryPolicy(RetryConfig(max_retries=0, backoff_strategy=ConstantBackoff(0.01)))
    step = policy.evaluate(
        endpoints.get_tip_hash(), AttemptOutcome.from_response(503, b""), 0
    )
    assert isinstance(step.error, ExhaustedRetriesError)
    assert step.error.attempts == 1


def test_retry_policy_max_wait_time_caps_delay() -> None:
    policy = RetryPolicy(
        RetryConfig(
            max_retries=10,
            backoff_strategy=ExponentialBackoff(base_delay=1.0),
            max_wait_time=1.5,
        )
    )
    step = policy.evaluate(endpoints.get_tip_hash(), AttemptOutcome.from_response(500, b""), 4)
    assert step.delay == 1.5
