"""
Submission gate: authorizes the single downstream submit once every zone is
signed, and packages the signatures in zone creation order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx

from models import Zone
from core.signing import SigningSession

logger = logging.getLogger(__name__)

SignaturePayload = List[Dict[str, str]]
Submitter = Callable[[SignaturePayload], Any]


class SubmissionRejected(Exception):
    """Raised by a submitter when the endpoint refuses the payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SubmissionOutcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    INCOMPLETE = "incomplete"
    IN_FLIGHT = "in_flight"
    ALREADY_SUBMITTED = "already_submitted"
    DISABLED = "disabled"


@dataclass(frozen=True)
class SubmissionResult:
    outcome: SubmissionOutcome
    signatures_count: int = 0
    message: str = ""
    response: Any = None

    @property
    def ok(self) -> bool:
        return self.outcome is SubmissionOutcome.ACCEPTED


class SubmissionGate:
    def __init__(self, zones: Iterable[Zone], session: SigningSession):
        # `zones` may be a ZoneStore or any iterable; it is re-read on every check.
        self._zones = zones
        self._session = session
        self.in_flight = False
        self.submitted = False
        self.last_error: Optional[str] = None

    def _all_zones(self) -> List[Zone]:
        return list(self._zones)

    @property
    def is_open(self) -> bool:
        return self._session.is_complete(self._all_zones())

    def build_payload(self) -> SignaturePayload:
        """[{zone_id, signature_data}] for signed zones, in creation order."""
        return [
            {"zone_id": rec.zone_id, "signature_data": rec.to_data_uri()}
            for rec in self._session.records_for(self._all_zones())
        ]

    def submit(self, submitter: Submitter) -> SubmissionResult:
        if self.submitted:
            return SubmissionResult(SubmissionOutcome.ALREADY_SUBMITTED, message="Already submitted")
        if self.in_flight:
            return SubmissionResult(SubmissionOutcome.IN_FLIGHT, message="Submission in progress")
        if not self.is_open:
            progress = self._session.progress(self._all_zones())
            return SubmissionResult(
                SubmissionOutcome.INCOMPLETE,
                signatures_count=progress.signed,
                message=f"{progress} zones signed",
            )

        payload = self.build_payload()
        self.in_flight = True
        try:
            response = submitter(payload)
        except SubmissionRejected as e:
            # Local zones and signatures stay as they are so the signer can retry.
            self.last_error = str(e)
            logger.warning(f"Submission rejected: {e}")
            return SubmissionResult(
                SubmissionOutcome.REJECTED,
                signatures_count=len(payload),
                message=str(e),
            )
        finally:
            self.in_flight = False

        self.submitted = True
        self.last_error = None
        logger.info(f"Submitted {len(payload)} signatures")
        return SubmissionResult(
            SubmissionOutcome.ACCEPTED,
            signatures_count=len(payload),
            message="Signatures submitted",
            response=response,
        )


class HttpSubmitter:
    """
    Posts {"signatures": [...]} to the submission endpoint.

    Any transport error or non-2xx answer becomes SubmissionRejected.
    """

    def __init__(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        if not url:
            raise ValueError("submission url is required")
        self.url = url
        self.headers = headers or {}
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "HttpSubmitter":
        return cls(settings.submission_url or "", timeout=settings.submission_timeout_s, **kwargs)

    def __call__(self, payload: SignaturePayload) -> Dict[str, Any]:
        body = {"signatures": payload}
        try:
            if self._client is not None:
                response = self._client.post(self.url, json=body, headers=self.headers)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    response = client.post(self.url, json=body, headers=self.headers)
        except httpx.TimeoutException:
            raise SubmissionRejected("Submission timeout")
        except httpx.RequestError as e:
            raise SubmissionRejected(f"Failed to submit signatures: {e}")
        except httpx.InvalidURL as e:
            raise SubmissionRejected(f"Invalid submission URL: {e}")

        if response.status_code >= 400:
            raise SubmissionRejected(_error_detail(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            return {}


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(data, dict):
        return str(data.get("detail") or data.get("error") or f"HTTP {response.status_code}")
    return f"HTTP {response.status_code}"
