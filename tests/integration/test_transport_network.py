"""Delivery against real sockets: silent listeners and closed ports."""

import socket
import threading
import time

import pytest

from backend.notifications import MessageLevel, Notifier
from backend.settings import Destination
from backend.transport import SnapshotTransport
from core.serializer import SerializedPayload
from tests.fakes.fake_host import MessageRecorder

PAYLOAD = SerializedPayload(tick=1, body=b"<GameData />")


@pytest.fixture
def silent_listener():
    """A listening socket that completes the handshake but never answers."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(8)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


@pytest.fixture
def closed_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_unresponsive_receiver_times_out_quickly(silent_listener) -> None:
    recorder = MessageRecorder()
    transport = SnapshotTransport(Notifier(recorder))

    start = time.perf_counter()
    result = transport.send(PAYLOAD, Destination("127.0.0.1", silent_listener, timeout=1.0))
    elapsed = time.perf_counter() - start

    assert result.ok is False
    assert 0.5 <= elapsed < 3.0
    assert len(recorder.texts(MessageLevel.REJECT)) == 2


def test_refused_port_fails_fast(closed_port) -> None:
    recorder = MessageRecorder()
    transport = SnapshotTransport(Notifier(recorder))

    result = transport.send(PAYLOAD, Destination("127.0.0.1", closed_port, timeout=1.0))

    assert result.ok is False
    assert result.elapsed_ms < 3000
    assert recorder.texts(MessageLevel.REJECT)[0].startswith(f"RimIO failed to POST to http://127.0.0.1:{closed_port}/")


def test_stalled_receiver_on_background_thread_does_not_block_caller(silent_listener) -> None:
    transport = SnapshotTransport()
    done = threading.Event()

    def work():
        transport.send(PAYLOAD, Destination("127.0.0.1", silent_listener, timeout=1.0))
        done.set()

    start = time.perf_counter()
    threading.Thread(target=work, daemon=True).start()
    handed_off = time.perf_counter() - start

    assert handed_off < 0.1
    assert done.wait(5)
