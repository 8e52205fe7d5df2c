"""Watershed plan extraction schema.

Models the structured content of a watershed-management plan: goals,
best management practices (BMPs), implementation activities, monitoring
metrics, outreach, and the geographic areas the plan covers.

Field names are snake_case in Python and camelCase on the wire, so ground
truth files and LLM responses use the same JSON shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    """The six scored record categories of a watershed plan."""

    GOALS = "goals"
    BMPS = "bmps"
    IMPLEMENTATION = "implementation"
    MONITORING = "monitoring"
    OUTREACH = "outreach"
    GEOGRAPHIC_AREAS = "geographicAreas"


# Scoring and reporting order
CATEGORIES: tuple[Category, ...] = tuple(Category)


class PlanModel(BaseModel):
    """Base for all plan models: camelCase aliases, tolerant of extra fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    # Field that receives the value when a record is given as a bare string
    text_field: ClassVar[str | None] = None

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_text(cls, value: Any) -> Any:
        if isinstance(value, str) and cls.text_field is not None:
            return {cls.text_field: value}
        return value

    @field_validator("*", mode="before")
    @classmethod
    def _lenient_list(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields.get(info.field_name or "")
        if field is None or field.default_factory is not list:
            return value
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            return [value]
        return value


class Contact(PlanModel):
    """A person, team member or agency contact."""

    text_field = "name"

    name: str | None = Field(default=None, description="Contact name")
    role: str | None = Field(default=None, description="Their role")
    organization: str | None = Field(default=None, description="Their organization")
    phone: str | None = Field(default=None, description="Phone number")
    email: str | None = Field(default=None, description="Email address")


class Organization(PlanModel):
    """An organization or agency involved in the plan."""

    text_field = "name"

    name: str | None = Field(default=None, description="Organization name")
    contact: Contact | None = Field(default=None, description="Contact person")


class ReportSummary(PlanModel):
    """Summary counts of the plan."""

    total_goals: int = Field(default=0, ge=0, description="Number of items in goals")
    total_bmps: int = Field(
        default=0, ge=0, alias="totalBMPs", description="Number of items in bmps"
    )
    completion_rate: float = Field(
        default=0.0,
        ge=0.0,
        description="Completed implementation items / all implementation items",
    )

    @field_validator("total_goals", "total_bmps", "completion_rate", mode="before")
    @classmethod
    def _none_as_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class Goal(PlanModel):
    """A watershed management goal or objective."""

    text_field = "description"

    id: str | None = Field(default=None, description="Optional identifier")
    description: str | None = Field(default=None, description="Goal description")
    objective: str | None = Field(default=None, description="Specific objective")
    target_area: str | None = Field(default=None, description="Geographic target area")
    schedule: str | None = Field(default=None, description="Timeline or schedule")
    contacts: list[Contact] = Field(default_factory=list)
    desired_outcomes: list[str] = Field(default_factory=list)
    source_excerpt: str | None = Field(
        default=None,
        description="Exact text from the document where this goal was found",
    )


class BMP(PlanModel):
    """A Best Management Practice."""

    text_field = "name"

    name: str | None = Field(default=None, description="BMP name")
    description: str | None = Field(default=None, description="BMP description")
    type: str | None = Field(default=None, description="Nutrient, Pathogen, Sediment or other")
    target_areas: list[str] = Field(default_factory=list)
    quantity: str | float | None = Field(default=None, description="Planned quantity")
    unit: str | None = Field(default=None, description="Unit of quantity, e.g. ft, ac, ea")
    estimated_cost: str | float | None = Field(default=None, description="Estimated cost in USD")
    partners: list[Organization] = Field(default_factory=list)
    schedule: str | None = Field(default=None, description="Implementation schedule")
    priority_factors: list[str] = Field(default_factory=list)


class ImplementationActivity(PlanModel):
    """An implementation activity or milestone."""

    text_field = "description"

    description: str | None = Field(default=None, description="Activity description")
    responsible_parties: list[Organization] = Field(default_factory=list)
    start_date: str | None = Field(default=None, description="YYYY-MM-DD or descriptive date")
    end_date: str | None = Field(default=None, description="YYYY-MM-DD or descriptive date")
    status: str | None = Field(default=None, description="Status description")
    outcome: str | None = Field(default=None, description="Expected or actual outcome")
    probable_completion_date: str | None = Field(default=None, description="Completion date")


class Threshold(PlanModel):
    """Numeric or narrative threshold for a monitored parameter."""

    parameter: str | None = Field(default=None, description="e.g. Dissolved Oxygen")
    value: str | float | None = Field(default=None, description="Threshold value")
    units: str | None = Field(default=None)


class MonitoringMetric(PlanModel):
    """A monitoring metric, threshold, or method."""

    text_field = "description"

    description: str | None = Field(default=None, description="Monitoring description")
    indicator: str | None = Field(default=None, description="What is being measured")
    method: str | None = Field(default=None, description="Monitoring method")
    frequency: str | None = Field(default=None, description="How often")
    thresholds: list[Threshold] = Field(default_factory=list)
    responsible_parties: list[Organization] = Field(default_factory=list)
    sample_locations: list[str] = Field(default_factory=list)
    sample_schedule: str | None = Field(default=None, description="When samples are taken")


class EventDetail(PlanModel):
    """Detail for a single outreach event."""

    type: str | None = Field(default=None, description="Event type")
    audience: str | None = Field(default=None)
    materials_provided: list[str] = Field(default_factory=list)
    estimated_participants: str | int | None = Field(default=None)
    cost: str | float | None = Field(default=None)
    date: str | None = Field(default=None)


class OutreachActivity(PlanModel):
    """An education or outreach event or program."""

    text_field = "name"

    name: str | None = Field(default=None, description="Outreach activity name")
    description: str | None = Field(default=None, description="Activity description")
    partners: list[Organization] = Field(default_factory=list)
    indicators: str | None = Field(default=None, description="Success indicators")
    schedule: str | None = Field(default=None, description="Activity schedule")
    budget: str | float | None = Field(default=None)
    events: list[EventDetail] = Field(default_factory=list)
    target_audience: str | None = Field(default=None, description="Primary audience")


class LandUseType(PlanModel):
    """Land use type and share of the area."""

    type: str | None = Field(default=None, description="e.g. cropland")
    percent: str | float | None = Field(default=None, description="e.g. 11")


class GeographicArea(PlanModel):
    """A watershed, subwatershed, or other area of interest."""

    text_field = "name"

    name: str | None = Field(default=None, description="Area name")
    counties: list[str] = Field(default_factory=list)
    acreage: str | float | None = Field(default=None)
    land_use_types: list[LandUseType] = Field(default_factory=list)
    population: str | int | None = Field(default=None)
    towns: list[str] = Field(default_factory=list)
    huc: str | None = Field(default=None, description="Hydrologic Unit Code if available")
    description: str | None = Field(default=None, description="Area description")


class StructuredDocument(PlanModel):
    """Structured content of a watershed management plan.

    Used both as the LLM response schema and as the ground truth format.
    Absent or null collections load as empty lists, and a single record or
    value given in place of a list is wrapped in one.

    Example:
        ```python
        doc = StructuredDocument.model_validate(json.loads(path.read_text()))
        print(len(doc.bmps))
        doc.model_dump(by_alias=True)  # camelCase JSON shape
        ```
    """

    report_summary: ReportSummary | None = Field(default=None)
    goals: list[Goal] = Field(default_factory=list)
    bmps: list[BMP] = Field(default_factory=list)
    implementation: list[ImplementationActivity] = Field(default_factory=list)
    monitoring: list[MonitoringMetric] = Field(default_factory=list)
    outreach: list[OutreachActivity] = Field(default_factory=list)
    geographic_areas: list[GeographicArea] = Field(default_factory=list)
    contacts: list[Contact] = Field(default_factory=list)
    organizations: list[Organization] = Field(default_factory=list)
    model: str | None = Field(default=None, description="Model that produced this document")

    def records(self, category: Category | str) -> list[dict[str, Any]]:
        """Return one category's collection as plain camelCase dicts."""
        category = Category(category)
        items = getattr(self, _ATTRIBUTES[category])
        return [item.model_dump(by_alias=True, exclude_none=True) for item in items]

    def with_summary(self) -> StructuredDocument:
        """Return a copy whose report summary is filled from the collections.

        An existing summary is kept as-is.
        """
        if self.report_summary is not None:
            return self
        completed = sum(1 for item in self.implementation if item.status == "completed")
        total = len(self.implementation)
        summary = ReportSummary(
            total_goals=len(self.goals),
            total_bmps=len(self.bmps),
            completion_rate=completed / total if total else 0.0,
        )
        return self.model_copy(update={"report_summary": summary})


_ATTRIBUTES: dict[Category, str] = {
    Category.GOALS: "goals",
    Category.BMPS: "bmps",
    Category.IMPLEMENTATION: "implementation",
    Category.MONITORING: "monitoring",
    Category.OUTREACH: "outreach",
    Category.GEOGRAPHIC_AREAS: "geographic_areas",
}
