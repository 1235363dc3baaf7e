"""Tests for avd.lazy module."""

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock

import pytest

from avd.lazy import Deferred, Lazy


class TestLazy:
    def test_factory_not_called_until_get(self):
        factory = MagicMock(return_value=42)
        lazy = Lazy(factory, name="answer")
        assert lazy.evaluated is False
        factory.assert_not_called()
        assert lazy.get() == 42
        assert lazy.evaluated is True

    def test_factory_called_once(self):
        factory = MagicMock(return_value=object())
        lazy = Lazy(factory)
        first = lazy.get()
        assert lazy.get() is first
        assert lazy.get() is first
        factory.assert_called_once_with()

    def test_failure_is_memoized_not_retried(self):
        factory = MagicMock(side_effect=RuntimeError("boom"))
        lazy = Lazy(factory)
        with pytest.raises(RuntimeError, match="boom"):
            lazy.get()
        with pytest.raises(RuntimeError, match="boom"):
            lazy.get()
        factory.assert_called_once_with()
        assert lazy.evaluated is True

    def test_repeated_failures_keep_traceback_bounded(self):
        def broken_factory():
            raise RuntimeError("boom")

        lazy = Lazy(broken_factory)
        depths = []
        for _ in range(5):
            with pytest.raises(RuntimeError) as exc:
                lazy.get()
            depths.append(len(exc.traceback))
            assert exc.traceback[-1].name == "broken_factory"
        assert len(set(depths)) == 1

    def test_concurrent_first_access_builds_once(self):
        calls = []

        def factory():
            calls.append(1)
            time.sleep(0.05)
            return object()

        lazy = Lazy(factory)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(lazy.get())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert len(results) == 8
        assert all(r is results[0] for r in results)

    def test_repr_shows_state(self):
        lazy = Lazy(lambda: 1, name="thing")
        assert "pending" in repr(lazy)
        lazy.get()
        assert "evaluated" in repr(lazy)


class TestDeferred:
    def test_abandoned_handle_never_runs(self):
        compute = MagicMock(return_value="x")
        handle = Deferred(compute)
        del handle
        compute.assert_not_called()

    def test_get_runs_once(self):
        compute = MagicMock(return_value="x")
        handle = Deferred(compute)
        assert handle.get() == "x"
        assert handle.get() == "x"
        compute.assert_called_once_with()

    def test_map_is_lazy(self):
        compute = MagicMock(return_value=2)
        mapped = Deferred(compute).map(lambda v: v * 10)
        compute.assert_not_called()
        assert mapped.evaluated is False
        assert mapped.get() == 20
        compute.assert_called_once_with()

    def test_of_wraps_value(self):
        assert Deferred.of("value").get() == "value"

    def test_error_surfaces_on_observation(self):
        handle = Deferred(MagicMock(side_effect=ValueError("bad")))
        with pytest.raises(ValueError, match="bad"):
            handle.get()
