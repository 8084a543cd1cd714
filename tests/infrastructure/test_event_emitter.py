import asyncio

import pytest

from infrastructure.networking.websocket import EventEmitter, EventName


class TestEventEmitter:

    @pytest.fixture
    def emitter(self):
        return EventEmitter('test')

    @pytest.mark.asyncio
    async def test_handlers_run_in_registration_order(self, emitter):
        calls = []
        emitter.on(EventName.OPEN, lambda: calls.append('first'))
        emitter.on(EventName.OPEN, lambda: calls.append('second'))

        count = await emitter.emit(EventName.OPEN)

        assert count == 2
        assert calls == ['first', 'second']

    @pytest.mark.asyncio
    async def test_async_handlers_are_awaited(self, emitter):
        calls = []

        async def slow(value):
            await asyncio.sleep(0.01)
            calls.append(('slow', value))

        emitter.on(EventName.MESSAGE, slow)
        emitter.on(EventName.MESSAGE, lambda value: calls.append(('fast', value)))

        await emitter.emit(EventName.MESSAGE, 1)
        assert calls == [('slow', 1), ('fast', 1)]

    @pytest.mark.asyncio
    async def test_failing_handler_is_isolated(self, emitter):
        calls = []

        def broken(payload):
            raise RuntimeError("boom")

        emitter.on(EventName.ERROR, broken)
        emitter.on(EventName.ERROR, calls.append)

        await emitter.emit(EventName.ERROR, 'payload')
        assert calls == ['payload']

    @pytest.mark.asyncio
    async def test_duplicate_registration_invoked_twice(self, emitter):
        calls = []
        emitter.on(EventName.CLOSE, calls.append)
        emitter.on(EventName.CLOSE, calls.append)

        await emitter.emit(EventName.CLOSE, 'x')
        assert calls == ['x', 'x']
        assert emitter.listener_count(EventName.CLOSE) == 2

    @pytest.mark.asyncio
    async def test_off_removes_first_identical_handler(self, emitter):
        calls = []

        def handler(payload):
            calls.append(payload)

        emitter.on(EventName.CLOSE, handler)
        emitter.on(EventName.CLOSE, handler)

        assert emitter.off(EventName.CLOSE, handler)
        assert emitter.listener_count(EventName.CLOSE) == 1
        assert emitter.off(EventName.CLOSE, handler)
        assert not emitter.off(EventName.CLOSE, handler)

    @pytest.mark.asyncio
    async def test_once(self, emitter):
        calls = []
        emitter.once(EventName.OPEN, lambda: calls.append(1))

        await emitter.emit(EventName.OPEN)
        await emitter.emit(EventName.OPEN)

        assert calls == [1]
        assert emitter.listener_count(EventName.OPEN) == 0

    def test_non_callable_rejected(self, emitter):
        with pytest.raises(TypeError):
            emitter.on(EventName.OPEN, "not callable")

    def test_remove_all_listeners(self, emitter):
        emitter.on(EventName.OPEN, lambda: None)
        emitter.on(EventName.CLOSE, lambda: None)

        emitter.remove_all_listeners(EventName.OPEN)
        assert emitter.listener_count(EventName.OPEN) == 0
        assert emitter.listener_count(EventName.CLOSE) == 1

        emitter.remove_all_listeners()
        assert emitter.listener_count(EventName.CLOSE) == 0
