"""Polling of judge submissions until they reach a terminal status."""

import asyncio
import logging
import time
from typing import Dict, Iterable, List, Optional

import httpx

from e2c.clients.judge0 import Judge0Client, JudgeResponseError
from e2c.config import Settings
from e2c.errors import PollTimeoutError, ValidationCancelledError
from e2c.schemas.judge import SubmissionResult
from e2c.services.validation.chunker import chunk

logger = logging.getLogger(__name__)


class ResultPoller:
    """Re-queries outstanding tokens with exponential backoff.

    Polling stops when every token is terminal, when ``deadline`` seconds
    have elapsed, or when ``max_retries`` consecutive rounds fail at the
    transport level. Both failure modes raise ``PollTimeoutError`` naming
    the tokens that are still outstanding.
    """

    def __init__(
        self,
        client: Judge0Client,
        *,
        interval: float = 1.0,
        backoff_factor: float = 1.5,
        max_interval: float = 5.0,
        max_retries: int = 3,
        deadline: float = 120.0,
        batch_size: int = 20,
    ):
        self.client = client
        self.interval = interval
        self.backoff_factor = backoff_factor
        self.max_interval = max_interval
        self.max_retries = max_retries
        self.deadline = deadline
        self.batch_size = batch_size

    @classmethod
    def from_settings(cls, client: Judge0Client, settings: Settings) -> "ResultPoller":
        return cls(
            client,
            interval=settings.judge0_poll_interval,
            backoff_factor=settings.judge0_poll_backoff_factor,
            max_interval=settings.judge0_poll_max_interval,
            max_retries=settings.judge0_poll_max_retries,
            deadline=settings.judge0_poll_deadline_seconds,
            batch_size=settings.judge0_batch_size,
        )

    async def poll(
        self,
        tokens: Iterable[str],
        cancel: Optional[asyncio.Event] = None,
    ) -> Dict[str, SubmissionResult]:
        """Wait for all ``tokens`` to finish; returns token -> result."""
        requested = list(dict.fromkeys(tokens))
        outstanding = list(requested)
        results: Dict[str, SubmissionResult] = {}
        started = time.monotonic()
        delay = self.interval
        failures = 0
        rounds = 0

        while outstanding:
            if cancel is not None and cancel.is_set():
                raise ValidationCancelledError()

            rounds += 1
            try:
                fetched = await self._fetch(outstanding)
            except (httpx.HTTPError, JudgeResponseError, ValueError) as exc:
                failures += 1
                if failures > self.max_retries:
                    logger.error(
                        "Giving up polling after %d failed attempts: %s", failures, exc
                    )
                    raise PollTimeoutError(
                        outstanding, reason="judge unreachable"
                    ) from exc
                logger.warning(
                    "Poll round %d failed (%d/%d): %s",
                    rounds,
                    failures,
                    self.max_retries,
                    exc,
                )
            else:
                failures = 0
                pending = set(outstanding)
                for result in fetched:
                    if result.token in pending and result.is_terminal:
                        results[result.token] = result
                outstanding = [t for t in outstanding if t not in results]
                logger.debug(
                    "Poll round %d: %d done, %d outstanding",
                    rounds,
                    len(results),
                    len(outstanding),
                )
                if not outstanding:
                    break

            remaining = self.deadline - (time.monotonic() - started)
            if remaining <= 0:
                logger.error(
                    "Poll deadline of %.1fs exceeded with %d outstanding",
                    self.deadline,
                    len(outstanding),
                )
                raise PollTimeoutError(outstanding)
            await self._wait(min(delay, remaining), cancel)
            delay = min(delay * self.backoff_factor, self.max_interval)

        return {token: results[token] for token in requested}

    async def _fetch(self, tokens: List[str]) -> List[SubmissionResult]:
        fetched: List[SubmissionResult] = []
        for group in chunk(tokens, self.batch_size):
            fetched.extend(await self.client.get_batch_results(group))
        return fetched

    @staticmethod
    async def _wait(delay: float, cancel: Optional[asyncio.Event]) -> None:
        if cancel is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise ValidationCancelledError()
