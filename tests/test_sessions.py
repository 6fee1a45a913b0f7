from unittest.mock import MagicMock

from geoguess.services.sessions import SessionRegistry


def test_get_or_create_reuses_controller():
    factory = MagicMock(side_effect=lambda: object())
    registry = SessionRegistry(factory, max_sessions=4)

    first = registry.get_or_create("a")
    assert registry.get_or_create("a") is first
    assert registry.get("a") is first
    assert registry.get("missing") is None
    assert factory.call_count == 1


def test_least_recently_used_session_is_evicted():
    registry = SessionRegistry(lambda: object(), max_sessions=2)
    registry.get_or_create("a")
    registry.get_or_create("b")
    registry.get("a")  # touch a, so b is now the oldest
    registry.get_or_create("c")

    assert len(registry) == 2
    assert registry.get("b") is None
    assert registry.get("a") is not None


def test_discard():
    registry = SessionRegistry(lambda: object())
    registry.get_or_create("a")
    registry.discard("a")
    registry.discard("never")
    assert len(registry) == 0
