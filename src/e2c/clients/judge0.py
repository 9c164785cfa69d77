"""Judge0 API client."""

import logging
from typing import Dict, List, Optional, Sequence

import httpx

from e2c.config import Settings
from e2c.schemas.judge import SubmissionRequest, SubmissionResult

logger = logging.getLogger(__name__)

RESULT_FIELDS = "token,status,stdout,stderr,compile_output,message,time,memory"


class JudgeResponseError(Exception):
    """The judge answered with a body we could not interpret."""


class Judge0Client:
    """Client for the Judge0 batch submission API."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        host: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        base_url = base_url.strip()
        if not base_url.startswith(("http://", "https://")):
            base_url = "http://" + base_url
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.host = host
        self.timeout = httpx.Timeout(timeout, connect=5.0)
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Judge0Client":
        return cls(
            settings.judge0_api_url,
            api_key=settings.judge0_api_key,
            host=settings.judge0_host,
            timeout=settings.judge0_timeout_s,
            transport=transport,
        )

    async def submit_batch(self, submissions: Sequence[SubmissionRequest]) -> List[str]:
        """Create submissions in one call; returns tokens in request order."""
        payload = {"submissions": [s.model_dump() for s in submissions]}
        logger.debug("Submitting %d submission(s) to %s", len(submissions), self.base_url)
        async with self._client() as client:
            response = await client.post(
                "/submissions/batch",
                params={"base64_encoded": "false"},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()

        items = data.get("submissions") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise JudgeResponseError(f"unexpected batch response: {data!r:.200}")

        tokens: List[str] = []
        for item in items:
            token = item.get("token") if isinstance(item, dict) else None
            if not token:
                raise JudgeResponseError(f"batch item without token: {item!r:.200}")
            tokens.append(token)
        if len(tokens) != len(submissions):
            raise JudgeResponseError(
                f"expected {len(submissions)} tokens, got {len(tokens)}"
            )
        return tokens

    async def get_batch_results(self, tokens: Sequence[str]) -> List[SubmissionResult]:
        """Fetch the current state of several submissions."""
        if not tokens:
            return []
        async with self._client() as client:
            response = await client.get(
                "/submissions/batch",
                params={
                    "tokens": ",".join(tokens),
                    "base64_encoded": "false",
                    "fields": RESULT_FIELDS,
                },
            )
            response.raise_for_status()
            data = response.json()

        # Judge0 batch GET returns {"submissions": [...]}
        items = data.get("submissions") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise JudgeResponseError(f"unexpected results response: {data!r:.200}")
        return [
            SubmissionResult.from_judge(item)
            for item in items
            if isinstance(item, dict) and item.get("token")
        ]

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._get_headers(),
            timeout=self.timeout,
            transport=self.transport,
        )

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for judge API calls."""
        headers = {"Content-Type": "application/json"}
        if self.api_key and self.host:
            headers["X-RapidAPI-Key"] = self.api_key
            headers["X-RapidAPI-Host"] = self.host
        return headers
