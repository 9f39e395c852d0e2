"""
Tests for the submission gate and the HTTP submitter.

Run with: pytest tests/test_submission.py -v
"""
import json

import httpx
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import Zone
from settings import Settings
from core.signing import SigningSession
from core.submission import (
    HttpSubmitter,
    SubmissionGate,
    SubmissionOutcome,
    SubmissionRejected,
)
from core.zone_store import ZoneStore

Z1 = Zone(id="z1", page=1, x=10, y=10, width=30, height=10, label="Signature 1")
Z2 = Zone(id="z2", page=2, x=10, y=50, width=30, height=10, label="Signature 2")


class RecordingSubmitter:
    def __init__(self, fail_times=0):
        self.calls = []
        self.fail_times = fail_times

    def __call__(self, payload):
        self.calls.append(payload)
        if len(self.calls) <= self.fail_times:
            raise SubmissionRejected("endpoint down", status_code=503)
        return {"ok": True}


class TestSubmissionGate:

    def test_scenario_payload(self):
        session = SigningSession()
        gate = SubmissionGate([Z1], session)
        assert not gate.is_open

        session.sign("z1", b"B")
        assert gate.is_open
        assert gate.build_payload() == [
            {"zone_id": "z1", "signature_data": "data:image/png;base64,Qg=="},
        ]

    def test_no_zones_never_opens(self):
        assert not SubmissionGate([], SigningSession()).is_open

    def test_incomplete_does_not_call_submitter(self):
        session = SigningSession()
        session.sign("z1", b"B")
        submitter = RecordingSubmitter()
        result = SubmissionGate([Z1, Z2], session).submit(submitter)

        assert result.outcome is SubmissionOutcome.INCOMPLETE
        assert result.signatures_count == 1
        assert result.message == "1 / 2 zones signed"
        assert submitter.calls == []

    def test_payload_in_creation_order(self):
        store = ZoneStore([Z2, Z1])
        session = SigningSession()
        session.sign("z1", b"1")
        session.sign("z2", b"2")
        payload = SubmissionGate(store, session).build_payload()
        assert [p["zone_id"] for p in payload] == ["z2", "z1"]

    def test_live_zone_source(self):
        """The gate re-reads the store, so a new zone closes it again."""
        store = ZoneStore([Z1])
        session = SigningSession()
        session.sign("z1", b"1")
        gate = SubmissionGate(store, session)
        assert gate.is_open
        store.add(Z2)
        assert not gate.is_open

    def test_accepted_once(self):
        session = SigningSession()
        session.sign("z1", b"B")
        gate = SubmissionGate([Z1], session)
        submitter = RecordingSubmitter()

        first = gate.submit(submitter)
        assert first.ok
        assert first.signatures_count == 1
        assert first.response == {"ok": True}

        second = gate.submit(submitter)
        assert second.outcome is SubmissionOutcome.ALREADY_SUBMITTED
        assert len(submitter.calls) == 1

    def test_rejection_keeps_state_and_allows_retry(self):
        session = SigningSession()
        session.sign("z1", b"B")
        gate = SubmissionGate([Z1], session)
        submitter = RecordingSubmitter(fail_times=1)

        rejected = gate.submit(submitter)
        assert rejected.outcome is SubmissionOutcome.REJECTED
        assert rejected.message == "endpoint down"
        assert gate.last_error == "endpoint down"
        assert session.is_signed("z1")
        assert not gate.in_flight

        retry = gate.submit(submitter)
        assert retry.ok
        assert submitter.calls[0] == submitter.calls[1]

    def test_in_flight_guard(self):
        session = SigningSession()
        session.sign("z1", b"B")
        gate = SubmissionGate([Z1], session)
        nested = []

        def reentrant(payload):
            nested.append(gate.submit(lambda p: None))
            return {}

        assert gate.submit(reentrant).ok
        assert nested[0].outcome is SubmissionOutcome.IN_FLIGHT


class TestHttpSubmitter:

    def _client(self, handler):
        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_posts_signatures(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"success": True, "signatures_count": 1})

        submitter = HttpSubmitter(
            "https://example.test/tasks/42/signatures",
            headers={"Authorization": "Bearer t"},
            client=self._client(handler),
        )
        payload = [{"zone_id": "z1", "signature_data": "data:image/png;base64,Qg=="}]
        assert submitter(payload) == {"success": True, "signatures_count": 1}
        assert seen["url"] == "https://example.test/tasks/42/signatures"
        assert seen["body"] == {"signatures": payload}
        assert seen["auth"] == "Bearer t"

    def test_error_status(self):
        def handler(request):
            return httpx.Response(400, json={"detail": "INCOMPLETE_SIGNATURES"})

        submitter = HttpSubmitter("https://example.test/s", client=self._client(handler))
        with pytest.raises(SubmissionRejected) as exc:
            submitter([])
        assert str(exc.value) == "INCOMPLETE_SIGNATURES"
        assert exc.value.status_code == 400

    def test_error_without_json(self):
        def handler(request):
            return httpx.Response(502, text="bad gateway")

        submitter = HttpSubmitter("https://example.test/s", client=self._client(handler))
        with pytest.raises(SubmissionRejected) as exc:
            submitter([])
        assert str(exc.value) == "HTTP 502"

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        submitter = HttpSubmitter("https://example.test/s", client=self._client(handler))
        with pytest.raises(SubmissionRejected):
            submitter([])

    def test_malformed_url_is_rejected(self):
        session = SigningSession()
        session.sign("z1", b"B")
        gate = SubmissionGate([Z1], session)
        result = gate.submit(HttpSubmitter("http://[::1"))
        assert result.outcome is SubmissionOutcome.REJECTED
        assert result.message.startswith("Invalid submission URL")
        assert gate.is_open

    def test_empty_body(self):
        submitter = HttpSubmitter(
            "https://example.test/s",
            client=self._client(lambda request: httpx.Response(204)),
        )
        assert submitter([]) == {}

    def test_gate_with_http_submitter(self):
        session = SigningSession()
        session.sign("z1", b"B")
        gate = SubmissionGate([Z1], session)
        submitter = HttpSubmitter(
            "https://example.test/s",
            client=self._client(lambda request: httpx.Response(500, json={"error": "boom"})),
        )
        result = gate.submit(submitter)
        assert result.outcome is SubmissionOutcome.REJECTED
        assert result.message == "boom"

    def test_from_settings(self):
        submitter = HttpSubmitter.from_settings(
            Settings(submission_url="https://example.test/s", submission_timeout_s=5)
        )
        assert submitter.url == "https://example.test/s"
        assert submitter.timeout == 5

    def test_url_required(self):
        with pytest.raises(ValueError):
            HttpSubmitter("")
