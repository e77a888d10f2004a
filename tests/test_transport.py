from __future__ import annotations

import httpx

from backend.notifications import MessageLevel, Notifier
from backend.settings import Destination
from backend.transport import SnapshotTransport
from core.config.export import REMEDIATION_HINT
from core.serializer import SerializedPayload
from tests.fakes.fake_host import MessageRecorder, RecordingReceiver, refuse_connection

PAYLOAD = SerializedPayload(tick=61, body=b"<?xml version='1.0' encoding='utf-8'?>\n<GameData />")


def _transport(handler, recorder: MessageRecorder | None = None) -> SnapshotTransport:
    return SnapshotTransport(Notifier(recorder), transport=httpx.MockTransport(handler))


def test_posts_payload_with_protocol_headers() -> None:
    receiver = RecordingReceiver()

    result = _transport(receiver).send(PAYLOAD, Destination("localhost", 5500))

    assert result.ok is True
    assert result.status_code == 200
    (request,) = receiver.requests
    assert request.method == "POST"
    assert str(request.url) == "http://localhost:5500/GameData"
    assert request.headers["Content-Type"] == "application/xml"
    assert request.headers["Accept"] == "application/xml"
    assert request.headers["X-RimIODataVersion"] == "1"
    assert request.content == PAYLOAD.body


def test_destination_change_takes_effect_on_next_send() -> None:
    receiver = RecordingReceiver()
    transport = _transport(receiver)

    transport.send(PAYLOAD, Destination("localhost", 5500))
    transport.send(PAYLOAD, Destination("10.0.0.7", 6000))

    assert [str(r.url) for r in receiver.requests] == [
        "http://localhost:5500/GameData",
        "http://10.0.0.7:6000/GameData",
    ]


def test_non_success_status_is_a_failure() -> None:
    recorder = MessageRecorder()

    result = _transport(RecordingReceiver(status=500), recorder).send(PAYLOAD, Destination("localhost", 5500))

    assert result.ok is False
    assert result.error is not None
    assert result.error.url == "http://localhost:5500/GameData"
    assert len(recorder.texts(MessageLevel.REJECT)) == 2


def test_refused_connection_reports_destination_and_hint() -> None:
    recorder = MessageRecorder()

    result = _transport(refuse_connection, recorder).send(PAYLOAD, Destination("localhost", 5500))

    assert result.ok is False
    failure, hint = recorder.texts(MessageLevel.REJECT)
    assert failure.startswith("RimIO failed to POST to http://localhost:5500/ --> ")
    assert "Connection refused" in failure
    assert hint == REMEDIATION_HINT


def test_timeout_is_reported_like_any_other_failure() -> None:
    recorder = MessageRecorder()

    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    result = _transport(slow, recorder).send(PAYLOAD, Destination("localhost", 5500, timeout=0.5))

    assert result.ok is False
    assert len(recorder.texts(MessageLevel.REJECT)) == 2


def test_each_failure_is_reported_again() -> None:
    recorder = MessageRecorder()
    transport = _transport(refuse_connection, recorder)

    for _ in range(3):
        transport.send(PAYLOAD, Destination("localhost", 5500))

    assert len(recorder.texts(MessageLevel.REJECT)) == 6
