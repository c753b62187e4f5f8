# tests/core/test_fallback.py
import asyncio

import pytest

from reinvent.core.domain.exceptions import AllProvidersFailedError, TransportError, UpstreamError
from reinvent.core.domain.models import GenerationOptions
from reinvent.core.fallback import FallbackOrchestrator
from tests.fakes import ScriptedProvider, failing

OPTIONS = GenerationOptions()


class SlowProvider:
    name = "slow"
    configured = True

    def __init__(self):
        self.cancelled = False

    async def invoke(self, *args):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return "too late"


@pytest.mark.asyncio
class TestFallbackOrchestrator:

    async def test_first_success_short_circuits(self):
        """
        Scenario: [A, B, C] where A and B fail and C succeeds.
        Expected: C's result; A and B invoked exactly once, in order, before C.
        """
        # Arrange
        order = []
        a, b = failing("a"), failing("b", kind="transport")
        c = ScriptedProvider("c", ["from-c"])
        d = ScriptedProvider("d", ["from-d"])
        for provider in (a, b, c, d):
            original = provider.invoke

            async def tracked(*args, _name=provider.name, _original=original):
                order.append(_name)
                return await _original(*args)

            provider.invoke = tracked

        # Act
        result = await FallbackOrchestrator().run([a, b, c, d], "sys", "user", OPTIONS, operation="test")

        # Assert
        assert result == "from-c"
        assert order == ["a", "b", "c"]
        assert len(a.calls) == len(b.calls) == len(c.calls) == 1
        assert d.calls == []

    async def test_arguments_are_forwarded_unchanged(self):
        provider = ScriptedProvider("only", ["ok"])
        await FallbackOrchestrator().run([provider], "system text", "user text", OPTIONS)
        assert provider.calls == [("system text", "user text", OPTIONS)]

    async def test_exhaustion_wraps_last_error(self):
        """Expected: the aggregate error carries the last provider's failure, not the first."""
        first = failing("first", kind="config")
        last = failing("last", kind="upstream")

        with pytest.raises(AllProvidersFailedError) as excinfo:
            await FallbackOrchestrator().run([first, last], "s", "u", OPTIONS, operation="deconstruct")

        error = excinfo.value
        assert isinstance(error.last_error, UpstreamError)
        assert error.last_error.provider == "last"
        assert error.attempts == ["first", "last"]
        assert error.operation == "deconstruct"
        assert error.detail == "UpstreamError from last (HTTP 500)"

    async def test_configuration_error_moves_to_next_provider(self):
        result = await FallbackOrchestrator().run(
            [failing("no-key", kind="config"), ScriptedProvider("ok", ["fine"])], "s", "u", OPTIONS
        )
        assert result == "fine"

    async def test_empty_provider_list(self):
        with pytest.raises(AllProvidersFailedError) as excinfo:
            await FallbackOrchestrator().run([], "s", "u", OPTIONS, operation="simulate")

        assert excinfo.value.last_error is None
        assert excinfo.value.detail == "No providers configured"

    async def test_timeout_cancels_attempt_and_counts_as_transport_error(self):
        slow = SlowProvider()
        backup = ScriptedProvider("backup", ["rescued"])

        result = await FallbackOrchestrator(timeout=0.05).run([slow, backup], "s", "u", OPTIONS)

        assert result == "rescued"
        assert slow.cancelled is True

    async def test_timeout_on_last_provider_is_reported(self):
        with pytest.raises(AllProvidersFailedError) as excinfo:
            await FallbackOrchestrator(timeout=0.05).run([SlowProvider()], "s", "u", OPTIONS)

        assert isinstance(excinfo.value.last_error, TransportError)
        assert excinfo.value.last_error.provider == "slow"

    async def test_zero_timeout_disables_it(self):
        assert FallbackOrchestrator(timeout=0).timeout is None

    async def test_programming_errors_are_not_swallowed(self):
        """Only ProviderError advances the list; anything else is a bug and propagates."""
        broken = ScriptedProvider("broken", [KeyError("oops")])
        untouched = ScriptedProvider("untouched", ["never"])

        with pytest.raises(KeyError):
            await FallbackOrchestrator().run([broken, untouched], "s", "u", OPTIONS)
        assert untouched.calls == []
