import logging

from backend.notifications import MessageLevel, Notifier
from tests.fakes.fake_host import MessageRecorder


def test_messages_reach_callback_with_level() -> None:
    recorder = MessageRecorder()
    notifier = Notifier(recorder)

    notifier.silent("stats")
    notifier.caution("rimio map loaded")
    notifier.reject("RimIO failed to POST")

    assert recorder.messages == [
        ("stats", MessageLevel.SILENT),
        ("rimio map loaded", MessageLevel.CAUTION),
        ("RimIO failed to POST", MessageLevel.REJECT),
    ]


def test_messages_are_logged_at_matching_level(caplog) -> None:
    notifier = Notifier()

    with caplog.at_level(logging.DEBUG, logger="backend.notifications"):
        notifier.silent("stats")
        notifier.reject("delivery failed")

    levels = {record.getMessage(): record.levelno for record in caplog.records}
    assert levels["stats"] == logging.DEBUG
    assert levels["delivery failed"] == logging.WARNING


def test_broken_callback_does_not_propagate(caplog) -> None:
    def broken(text, level):
        raise ValueError("ticker closed")

    notifier = Notifier(broken)

    with caplog.at_level(logging.ERROR, logger="backend.notifications"):
        notifier.caution("hello")

    assert any("Message callback failed" in r.getMessage() for r in caplog.records)
