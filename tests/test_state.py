"""Tests for Observable."""

from listenai.state import Observable


class TestObservable:
    """Tests for Observable."""

    def test_set_notifies_listeners(self):
        obs = Observable(0)
        seen = []
        obs.subscribe(seen.append)
        obs.set(1)
        obs.set(2)
        assert seen == [1, 2]
        assert obs.value == 2

    def test_same_value_does_not_notify(self):
        obs = Observable("x")
        seen = []
        obs.subscribe(seen.append)
        obs.set("x")
        assert seen == []

    def test_unsubscribe(self):
        obs = Observable(0)
        seen = []
        unsubscribe = obs.subscribe(seen.append)
        obs.set(1)
        unsubscribe()
        unsubscribe()
        obs.set(2)
        assert seen == [1]
