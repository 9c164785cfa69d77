"""Submission of request batches to the judge."""

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx

from e2c.clients.judge0 import Judge0Client, JudgeResponseError
from e2c.errors import BatchSubmissionError, ValidationCancelledError
from e2c.schemas.judge import SubmissionRequest

logger = logging.getLogger(__name__)


class BatchSubmitter:
    """Sends one batch per call and returns the judge's tokens in order."""

    def __init__(self, client: Judge0Client):
        self.client = client

    async def submit(
        self,
        batch: Sequence[SubmissionRequest],
        batch_index: int,
        cancel: Optional[asyncio.Event] = None,
    ) -> List[str]:
        if cancel is not None and cancel.is_set():
            raise ValidationCancelledError()
        try:
            tokens = await self.client.submit_batch(batch)
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Judge rejected batch %d: HTTP %s", batch_index, exc.response.status_code
            )
            raise BatchSubmissionError(
                batch_index, f"HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Could not reach judge for batch %d: %s", batch_index, exc)
            raise BatchSubmissionError(batch_index, exc) from exc
        except (JudgeResponseError, ValueError) as exc:
            logger.error("Malformed judge response for batch %d: %s", batch_index, exc)
            raise BatchSubmissionError(batch_index, exc) from exc

        logger.info("Submitted batch %d (%d submissions)", batch_index, len(tokens))
        return tokens
