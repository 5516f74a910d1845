"""Shared fixtures: a fixed clock and fake upstream sources."""

from datetime import date
from typing import Any, Dict, List, Optional

import pytest

from agents_dashboard.analyzers.usage import UsageLoader
from agents_dashboard.models import EmptyState
from agents_dashboard.sources.invoker import InvocationError

# A Wednesday
TODAY = date(2024, 3, 13)


class FakeInvoker:
    """Stands in for SourceInvoker; returns canned payloads per period."""

    def __init__(self, payloads: Optional[Dict[str, Any]] = None, error: Optional[str] = None):
        self.payloads = payloads or {}
        self.error = error
        self.calls: List[tuple] = []

    def invoke(self, agent, period, window, options=None) -> Any:
        self.calls.append((agent.value, period.value, window, options))
        if self.error:
            raise InvocationError(self.error)
        return self.payloads.get(period.value, [])


class FakeLibrary:
    """Stands in for UsageDataLoader."""

    def __init__(self, records: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.records = records or {}
        self.calls: List[tuple] = []

    @staticmethod
    def supports(period) -> bool:
        return period.value in {"daily", "weekly", "monthly", "session"}

    def load(self, period, options=None) -> List[Dict[str, Any]]:
        self.calls.append((period.value, options))
        return self.records.get(period.value, [])


def has_data(agent) -> EmptyState:
    return EmptyState(is_empty=False)


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def fake_library() -> FakeLibrary:
    return FakeLibrary()


@pytest.fixture
def make_loader():
    """Build a UsageLoader wired to fakes and the fixed clock."""

    def _make(
        invoker: Optional[FakeInvoker] = None,
        library: Optional[FakeLibrary] = None,
        detector=has_data,
        use_library: bool = True,
    ) -> UsageLoader:
        return UsageLoader(
            invoker=invoker or FakeInvoker(),
            library=library or FakeLibrary(),
            empty_state_detector=detector,
            today=lambda: TODAY,
            use_library=use_library,
        )

    return _make
