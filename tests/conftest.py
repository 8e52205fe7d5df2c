"""
Pytest configuration and fixtures for watershed-extractor tests.
"""

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from watershed_extractor import BaseClient, StructuredDocument


@pytest.fixture
def plan_data() -> dict[str, Any]:
    """A small ground truth plan in its camelCase JSON shape."""
    return {
        "reportSummary": {"totalGoals": 2, "totalBMPs": 2, "completionRate": 0.5},
        "goals": [
            {"description": "Reduce sediment loading by 20% within 5 years"},
            {"description": "Restore riparian buffers along Bell Creek"},
        ],
        "bmps": [
            {"name": "Cover Crops", "type": "Sediment", "quantity": 500, "unit": "ac"},
            {"name": "Grade Stabilization Structures", "estimatedCost": 120000},
        ],
        "implementation": [
            {"description": "Install grade stabilization structures", "status": "completed"},
            {"description": "Host annual field day for producers", "status": "planned"},
        ],
        "monitoring": [
            {"description": "Monthly turbidity sampling at three sites", "frequency": "monthly"},
        ],
        "outreach": [
            {"name": "Field Day", "description": "Annual field day demonstrating cover crops"},
        ],
        "geographicAreas": [
            {"name": "Bell Creek Watershed", "huc": "080302040101", "counties": ["Tate"]},
        ],
        "contacts": [{"name": "Jane Doe", "role": "Coordinator"}],
        "organizations": [{"name": "Tate County SWCD"}],
    }


@pytest.fixture
def plan(plan_data: dict[str, Any]) -> StructuredDocument:
    """The sample plan as a StructuredDocument."""
    return StructuredDocument.model_validate(plan_data)


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock client that simulates any BaseClient."""
    client = MagicMock(spec=BaseClient)
    client.model = "mock-model"
    return client


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Factory for mock LLM responses."""

    def _make(
        parsed: Any = None,
        content: str | None = None,
        model: str = "mock-model",
        cached: bool = False,
    ) -> MagicMock:
        response = MagicMock()
        response.parsed = parsed
        if content is None and parsed is not None:
            content = json.dumps(parsed.model_dump(mode="json", by_alias=True))
        response.content = content
        response.model = model
        response.cached = cached
        response.usage.total_tokens = 1200
        response.tracking = None
        return response

    return _make
