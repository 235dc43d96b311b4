"""Unit tests for InMemoryNotifier fan-out."""

import logging

from docsync.domain.enums import ChangeSubject, ChangeType
from docsync.infrastructure.messaging import InMemoryNotifier, path_matches


def test_path_matches_prefix_boundaries() -> None:
    assert path_matches("/a", "/a")
    assert path_matches("/a/b", "/a")
    assert path_matches("/a/b", "/a/")
    assert not path_matches("/ab", "/a")
    assert path_matches("/anything", None)
    assert path_matches("/anything", "")


def test_notify_fans_out_to_matching_subscribers() -> None:
    notifier = InMemoryNotifier()
    everything, under_a, docs_only = [], [], []
    notifier.subscribe(everything.append)
    notifier.subscribe(under_a.append, path_prefix="/a")
    notifier.subscribe(docs_only.append, subjects={ChangeSubject.DOCUMENT})

    notifier.notify(ChangeSubject.COLLECTION, ChangeType.ADDED, {"collection_id": "x", "path": "/a"})
    notifier.notify(ChangeSubject.DOCUMENT, ChangeType.DELETED, {"key": "k", "path": "/b"})

    assert [e.path for e in everything] == ["/a", "/b"]
    assert [e.type for e in under_a] == [ChangeType.ADDED]
    assert [e.subject for e in docs_only] == [ChangeSubject.DOCUMENT]


def test_unsubscribe_stops_delivery() -> None:
    notifier = InMemoryNotifier()
    received = []
    unsubscribe = notifier.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    notifier.notify(ChangeSubject.DOCUMENT, ChangeType.ADDED, {"path": "/"})

    assert received == []
    assert notifier.subscriber_count == 0


def test_failing_listener_is_isolated(caplog) -> None:
    notifier = InMemoryNotifier()
    received = []

    def broken(event) -> None:
        raise RuntimeError("listener bug")

    notifier.subscribe(broken)
    notifier.subscribe(received.append)

    with caplog.at_level(logging.ERROR):
        notifier.notify(ChangeSubject.DOCUMENT, ChangeType.UPDATED, {"path": "/x"})

    assert len(received) == 1
    assert "Change listener failed" in caplog.text


def test_history_is_bounded_and_optional() -> None:
    bounded = InMemoryNotifier(history_size=2)
    disabled = InMemoryNotifier()
    for i in range(3):
        bounded.notify(ChangeSubject.DOCUMENT, ChangeType.ADDED, {"path": f"/{i}"})
        disabled.notify(ChangeSubject.DOCUMENT, ChangeType.ADDED, {"path": f"/{i}"})

    assert [e.path for e in bounded.history] == ["/1", "/2"]
    assert disabled.history == []


def test_payload_is_copied() -> None:
    notifier = InMemoryNotifier(history_size=1)
    payload = {"path": "/a", "key": "k"}

    notifier.notify(ChangeSubject.DOCUMENT, ChangeType.ADDED, payload)
    payload["key"] = "changed"

    assert notifier.history[0].payload["key"] == "k"
