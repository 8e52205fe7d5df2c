"""Tests for the prompt builder."""

import json

from pydantic import BaseModel, Field

from watershed_extractor.prompts.builder import COMPARISON_RULES, PromptBuilder
from watershed_extractor.schemas.plan import GeographicArea, ReportSummary, StructuredDocument


class SimpleModel(BaseModel):
    """A simple test model."""

    name: str = Field(description="The area's name")
    acreage: float | None = Field(default=None, ge=0, description="Area in acres")


class TestPromptBuilder:
    """Tests for PromptBuilder class."""

    def test_build_system_prompt_default(self) -> None:
        """Test default system prompt generation."""
        prompt = PromptBuilder().build_system_prompt()

        assert "watershed management documents" in prompt
        assert "JSON" in prompt

    def test_build_system_prompt_custom(self) -> None:
        """Test custom system prompt."""
        custom = "You are a specialized TMDL extractor."

        assert PromptBuilder().build_system_prompt(custom_prompt=custom) == custom

    def test_describe_schema_simple(self) -> None:
        """Test schema description for simple model."""
        description = PromptBuilder()._describe_schema(SimpleModel)

        assert "**SimpleModel**" in description
        assert "**name** (str, required): The area's name" in description
        assert "**acreage** (float | null, optional)" in description
        assert "[Constraints: >=0]" in description

    def test_describe_schema_without_descriptions(self) -> None:
        """Test field descriptions can be left out."""
        description = PromptBuilder(include_field_descriptions=False)._describe_schema(
            SimpleModel
        )

        assert "The area's name" not in description

    def test_describe_schema_uses_aliases(self) -> None:
        """Test fields are named by their camelCase JSON names."""
        description = PromptBuilder()._describe_schema(StructuredDocument)

        assert "**geographicAreas**" in description
        assert "**reportSummary**" in description
        assert "**totalBMPs**" in description
        assert "geographic_areas" not in description

    def test_describe_schema_nested_once(self) -> None:
        """Test nested models are described once each."""
        description = PromptBuilder()._describe_schema(StructuredDocument)

        assert "### Nested Types" in description
        assert description.count("**GeographicArea**") == 1
        assert description.count("**Organization**") == 1

    def test_describe_schema_with_hints(self) -> None:
        """Test hints are attached by JSON name or field name."""
        builder = PromptBuilder()

        by_alias = builder._describe_schema(GeographicArea, {"landUseTypes": "percent of area"})
        by_name = builder._describe_schema(ReportSummary, {"completion_rate": "0 to 1"})

        assert "[Hint: percent of area]" in by_alias
        assert "[Hint: 0 to 1]" in by_name

    def test_build_extraction_prompt(self) -> None:
        """Test the extraction prompt has schema, document and task sections."""
        prompt = PromptBuilder().build_extraction_prompt(
            document="Bell Creek Watershed Plan",
            schema=StructuredDocument,
        )

        assert prompt.index("## Extraction Schema") < prompt.index("## Document")
        assert prompt.index("## Document") < prompt.index("## Task")
        assert "Bell Creek Watershed Plan" in prompt
        assert "totalBMPs = exact count" in prompt
        assert "sourceExcerpt" in prompt

    def test_build_extraction_prompt_truncates(self) -> None:
        """Test the document is cut to max_document_chars."""
        prompt = PromptBuilder(max_document_chars=5).build_extraction_prompt(
            document="ABCDEFGHIJ",
            schema=SimpleModel,
        )

        assert "ABCDE" in prompt
        assert "ABCDEF" not in prompt

    def test_build_comparison_prompt(self) -> None:
        """Test the comparison prompt carries both documents as JSON."""
        truth = {"bmps": [{"name": "Bande enherbée"}]}
        extracted = {"bmps": [{"name": "Cover Crops"}]}

        prompt = PromptBuilder().build_comparison_prompt(extracted, truth)

        assert prompt.startswith(COMPARISON_RULES)
        assert prompt.index("## GROUND TRUTH") < prompt.index("## EXTRACTED")
        assert "Bande enherbée" in prompt
        ground_truth_json = prompt.split("## GROUND TRUTH\n\n")[1].split("\n\n## EXTRACTED")[0]
        assert json.loads(ground_truth_json) == truth

    def test_format_type_basic(self) -> None:
        """Test basic type formatting."""
        builder = PromptBuilder()

        assert builder._format_type(str) == "str"
        assert builder._format_type(None) == "any"
        assert builder._format_type(str | float | None) == "str | float | null"
        assert builder._format_type(str | int) == "str | int"

    def test_format_type_list(self) -> None:
        """Test list type formatting."""
        builder = PromptBuilder()

        assert builder._format_type(list[str]) == "list[str]"
        assert builder._format_type(list[GeographicArea]) == "list[GeographicArea]"
