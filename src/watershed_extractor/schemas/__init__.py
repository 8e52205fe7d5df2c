"""Extraction schema for watershed management plans.

This module provides the Pydantic models describing the structured
content extracted from watershed plans and stored as ground truth.
"""

from watershed_extractor.schemas.plan import (
    BMP,
    CATEGORIES,
    Category,
    Contact,
    EventDetail,
    GeographicArea,
    Goal,
    ImplementationActivity,
    LandUseType,
    MonitoringMetric,
    Organization,
    OutreachActivity,
    ReportSummary,
    StructuredDocument,
    Threshold,
)

__all__ = [
    # Document
    "StructuredDocument",
    "ReportSummary",
    "Category",
    "CATEGORIES",
    # Records
    "Goal",
    "BMP",
    "ImplementationActivity",
    "MonitoringMetric",
    "Threshold",
    "OutreachActivity",
    "EventDetail",
    "GeographicArea",
    "LandUseType",
    # Parties
    "Contact",
    "Organization",
]
