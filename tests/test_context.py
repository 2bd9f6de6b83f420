"""Unit tests for the loading context."""

import threading
from typing import List

import pytest

from datapack_loader.context import (
    STATIC_SEED,
    Deferred,
    FinishHandle,
    active_load,
    get_context,
)
from datapack_loader.errors import ContextError


class TestStaticContext:
    """Test the context seen outside any load."""

    def test_static_outside_load(self) -> None:
        """Test get_context falls back to the static context."""
        assert get_context().is_static

    def test_static_random_is_reproducible(self) -> None:
        """Test every access starts a fresh stream from the static seed."""
        first = get_context().random.random()
        second = get_context().random.random()
        assert first == second
        assert get_context().seed == STATIC_SEED

    def test_static_rejects_finishers(self) -> None:
        """Test finishers cannot be registered outside a load."""
        with pytest.raises(ContextError):
            get_context().register_finisher(lambda handle: None)
        with pytest.raises(ContextError):
            get_context().finish(object())


class TestActiveLoad:
    """Test the lifecycle of a loading context."""

    def test_context_is_scoped(self) -> None:
        """Test the context is active only inside the block."""
        with active_load(seed=7) as context:
            assert get_context() is context
            assert not context.is_static
            assert context.seed == 7
        assert get_context().is_static

    def test_seeded_random_stream(self) -> None:
        """Test two loads with one seed draw the same numbers."""
        with active_load(seed=42) as context:
            first = [context.random.random() for _ in range(3)]
        with active_load(seed=42) as context:
            second = [context.random.random() for _ in range(3)]
        assert first == second

    def test_nested_load_is_rejected(self) -> None:
        """Test one load per context at a time."""
        with active_load():
            with pytest.raises(ContextError):
                with active_load():
                    pass

    def test_finishers_run_in_order_with_the_pack(self) -> None:
        """Test finishers run FIFO and all see the same pack."""
        pack = object()
        seen: List[object] = []
        order: List[int] = []

        with active_load() as context:
            for index in range(3):
                context.register_finisher(
                    lambda handle, index=index: (order.append(index), seen.append(handle.pack))
                )
            assert context.pending == 3
            context.finish(pack)

        assert order == [0, 1, 2]
        assert all(item is pack for item in seen)
        assert context.finished

    def test_finisher_registered_while_draining(self) -> None:
        """Test a finisher may queue another one, which runs last."""
        order: List[str] = []

        with active_load() as context:

            def first(handle: FinishHandle) -> None:
                order.append("first")
                get_context().register_finisher(lambda h: order.append("late"))

            context.register_finisher(first)
            context.register_finisher(lambda h: order.append("second"))
            context.finish(None)

        assert order == ["first", "second", "late"]

    def test_finish_twice(self) -> None:
        """Test a context can only be drained once."""
        with active_load() as context:
            context.finish(None)
            with pytest.raises(ContextError):
                context.finish(None)
            with pytest.raises(ContextError):
                context.register_finisher(lambda handle: None)

    def test_aborted_load_discards_finishers(self) -> None:
        """Test finishers of a failing load never run."""
        ran: List[bool] = []
        with pytest.raises(RuntimeError):
            with active_load() as context:
                context.register_finisher(lambda handle: ran.append(True))
                raise RuntimeError("decode exploded")
        assert ran == []
        assert get_context().is_static

    def test_threads_have_independent_contexts(self) -> None:
        """Test concurrent loads in two threads do not see each other."""
        entered = threading.Event()
        release = threading.Event()
        observed: List[bool] = []

        def worker() -> None:
            with active_load(seed=1) as inner:
                entered.set()
                release.wait(timeout=5)
                observed.append(get_context() is inner and inner.seed == 1)

        thread = threading.Thread(target=worker)
        thread.start()
        entered.wait(timeout=5)
        with active_load(seed=2) as context:
            assert get_context() is context
            release.set()
            thread.join()
            assert get_context() is context

        assert observed == [True]


class TestDeferred:
    """Test write-once cells."""

    def test_unresolved(self) -> None:
        """Test reading an empty cell fails."""
        cell: Deferred[int] = Deferred()
        assert not cell.resolved
        with pytest.raises(ContextError):
            cell.get()

    def test_write_once(self) -> None:
        """Test a cell can be filled exactly once."""
        cell: Deferred[int] = Deferred()
        cell.set(3)
        assert cell.resolved
        assert cell.get() == 3
        with pytest.raises(ContextError):
            cell.set(4)

    def test_none_is_a_value(self) -> None:
        """Test None counts as resolved."""
        cell: Deferred[None] = Deferred()
        cell.set(None)
        assert cell.resolved
        assert cell.get() is None
