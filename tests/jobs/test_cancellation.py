"""Tests for the cancellation token."""

import asyncio

import pytest

from autorank.jobs.cancellation import CancellationToken


def test_cancel_keeps_first_reason() -> None:
    token = CancellationToken()
    assert token.cancelled is False

    token.cancel("Shutting down")
    token.cancel("Second request")

    assert token.cancelled is True
    assert token.reason == "Shutting down"


@pytest.mark.asyncio
async def test_wait_times_out() -> None:
    token = CancellationToken()
    assert await token.wait(0.01) is False


@pytest.mark.asyncio
async def test_wait_returns_early_on_cancel() -> None:
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    loop.call_later(0.01, token.cancel)

    started = loop.time()
    assert await token.wait(5) is True
    assert loop.time() - started < 1
    assert token.reason == "Job stopped by user."


@pytest.mark.asyncio
async def test_wait_without_timeout_reports_state() -> None:
    token = CancellationToken()
    assert await token.wait(0) is False
    token.cancel()
    assert await token.wait(0) is True
