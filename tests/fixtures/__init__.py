"""Shared test fixtures: entity builders and fake pipeline collaborators."""

from tests.fixtures.fakes import FakeAnalyzer, FakeCapturer
from tests.fixtures.reports import (
    FAKE_PNG,
    full_dimensions,
    make_comparison,
    make_dimension,
    make_finding,
    make_report,
    make_synthesis,
)

__all__ = [
    "FAKE_PNG",
    "FakeAnalyzer",
    "FakeCapturer",
    "full_dimensions",
    "make_comparison",
    "make_dimension",
    "make_finding",
    "make_report",
    "make_synthesis",
]
