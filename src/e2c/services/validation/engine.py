"""Reference solution validation against the judge."""

import asyncio
import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from e2c.clients.judge0 import Judge0Client
from e2c.config import Settings
from e2c.schemas.judge import (
    JudgeStatus,
    SubmissionRequest,
    ValidationOutcome,
    ValidationReport,
)
from e2c.schemas.problems import Testcase
from e2c.services.validation import languages
from e2c.services.validation.chunker import chunk
from e2c.services.validation.poller import ResultPoller
from e2c.services.validation.submitter import BatchSubmitter

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Runs every reference solution against every testcase.

    For each language the testcases are chunked, each chunk is submitted and
    polled to completion, and results are scanned in testcase order. The
    first non-accepted result is that language's failure; later chunks of
    the same language are not submitted.
    """

    def __init__(
        self,
        submitter: BatchSubmitter,
        poller: ResultPoller,
        *,
        batch_size: int = 20,
        concurrent: bool = False,
    ):
        self.submitter = submitter
        self.poller = poller
        self.batch_size = batch_size
        self.concurrent = concurrent

    @classmethod
    def from_settings(
        cls, settings: Settings, client: Optional[Judge0Client] = None
    ) -> "ValidationEngine":
        client = client or Judge0Client.from_settings(settings)
        return cls(
            BatchSubmitter(client),
            ResultPoller.from_settings(client, settings),
            batch_size=settings.judge0_batch_size,
            concurrent=settings.validate_languages_concurrently,
        )

    async def validate(
        self,
        testcases: Sequence[Testcase],
        reference_solutions: Mapping[str, str],
        cancel: Optional[asyncio.Event] = None,
    ) -> ValidationReport:
        """Validate all reference solutions; languages keep declaration order."""
        # Unknown languages fail here, before anything reaches the judge
        resolved = languages.resolve_all(reference_solutions)

        if self.concurrent and len(resolved) > 1:
            outcomes = await self._validate_concurrently(
                resolved, testcases, reference_solutions, cancel
            )
        else:
            outcomes = []
            for language, language_id in resolved:
                outcome = await self._validate_language(
                    language,
                    language_id,
                    reference_solutions[language],
                    testcases,
                    cancel,
                )
                outcomes.append(outcome)
                if not outcome.passed:
                    break

        return ValidationReport(outcomes=outcomes)

    async def _validate_concurrently(
        self,
        resolved: List[Tuple[str, int]],
        testcases: Sequence[Testcase],
        reference_solutions: Mapping[str, str],
        cancel: Optional[asyncio.Event],
    ) -> List[ValidationOutcome]:
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(
                        self._validate_language(
                            language,
                            language_id,
                            reference_solutions[language],
                            testcases,
                            cancel,
                        )
                    )
                    for language, language_id in resolved
                ]
        except BaseExceptionGroup as errors:
            raise errors.exceptions[0]
        return [task.result() for task in tasks]

    async def _validate_language(
        self,
        language: str,
        language_id: int,
        source_code: str,
        testcases: Sequence[Testcase],
        cancel: Optional[asyncio.Event],
    ) -> ValidationOutcome:
        requests = [
            SubmissionRequest(
                source_code=source_code,
                language_id=language_id,
                stdin=testcase.input,
                expected_output=testcase.output,
            )
            for testcase in testcases
        ]

        offset = 0
        for batch_index, batch in enumerate(chunk(requests, self.batch_size)):
            tokens = await self.submitter.submit(batch, batch_index, cancel)
            results = await self.poller.poll(tokens, cancel)
            # tokens[i] belongs to batch[i], i.e. testcase offset + i + 1
            for position, token in enumerate(tokens):
                result = results[token]
                if result.status is not JudgeStatus.accepted:
                    testcase = offset + position + 1
                    logger.warning(
                        "Testcase %d failed for language %s: %s",
                        testcase,
                        language,
                        result.status_description or result.status.value,
                    )
                    return ValidationOutcome(
                        language=language,
                        passed=False,
                        failed_testcase=testcase,
                        result=result,
                    )
            offset += len(batch)

        logger.info(
            "Reference solution for %s passed %d testcase(s)", language, len(requests)
        )
        return ValidationOutcome(language=language, passed=True)
