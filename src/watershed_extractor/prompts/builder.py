"""Prompt builder for plan extraction and AI-based comparison."""

import json
import types
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

EXTRACTION_RULES = """\
IMPORTANT INSTRUCTIONS:
1. Extract all information into the appropriate arrays first.
2. THEN fill reportSummary from what you extracted:
   - totalGoals = exact count of items in "goals"
   - totalBMPs = exact count of items in "bmps"
   - completionRate = "completed" implementation items / all implementation items \
(0 if there are none)
3. Do NOT use null for counts - use 0 when an array is empty.
4. Capture quantitative data accurately: numbers with units (acres, feet, dollars,
   percentages), cost estimates, quantities, target values, thresholds and dates.
5. GOALS: a goal is an intended outcome, milestone or management action the plan
   explicitly states as something to be achieved. Extract only goals stated in the
   text, using the document's own language, and put the literal passage you relied
   on in sourceExcerpt.
6. Extract only information explicitly stated in the document. If a field is not
   found, omit it or set it to null."""

COMPARISON_RULES = """\
Compare the EXTRACTED data against the GROUND TRUTH for each category: goals, bmps,
implementation, monitoring, outreach, geographicAreas.

For each category:
- An extracted item is correct when it describes the same real-world item as a ground
  truth item, even if worded differently.
- correctCount = number of correct extracted items
- totalExtracted = number of extracted items, totalExpected = number of ground truth items
- precision = correctCount / totalExtracted (0 if totalExtracted is 0)
- recall = correctCount / totalExpected (0 if totalExpected is 0)
- f1Score = 2 * precision * recall / (precision + recall) (0 if both are 0)

List one comparison per extracted item ("perfect_match" or "surplus_actual") and one per
ground truth item nothing matched ("missing_expected").

Return ONLY valid JSON in this exact shape:
{
  "metrics": {"precision": number, "recall": number, "f1Score": number},
  "details": {
    "<category>": {"precision": number, "recall": number, "f1Score": number,
                   "correctCount": number, "totalExtracted": number, "totalExpected": number}
  },
  "detailedComparisons": {
    "<category>": [
      {"type": "perfect_match|missing_expected|surplus_actual", "category": "<category>",
       "expected": "ground truth text or null", "actual": "extracted text or null",
       "message": "short explanation"}
    ]
  }
}"""


class PromptBuilder:
    """Builds extraction and comparison prompts for watershed plans."""

    DEFAULT_SYSTEM_PROMPT = (
        "You are an expert at extracting structured information from environmental "
        "and agricultural watershed management documents. Return only valid JSON."
    )

    COMPARISON_SYSTEM_PROMPT = (
        "You are an expert reviewer of watershed management plans. You judge whether "
        "data extracted from a plan matches a manually authored ground truth, and you "
        "return only valid JSON."
    )

    def __init__(
        self,
        include_field_descriptions: bool = True,
        max_document_chars: int = 8000,
    ) -> None:
        """Initialize the prompt builder.

        Args:
            include_field_descriptions: Whether to include field descriptions in prompts
            max_document_chars: Document text beyond this length is cut off
        """
        self.include_field_descriptions = include_field_descriptions
        self.max_document_chars = max_document_chars

    def build_system_prompt(self, custom_prompt: str | None = None) -> str:
        """Build the extraction system prompt."""
        return custom_prompt or self.DEFAULT_SYSTEM_PROMPT

    def build_extraction_prompt(
        self,
        document: str,
        schema: type[BaseModel],
        field_hints: dict[str, str] | None = None,
    ) -> str:
        """Build the user prompt for plan extraction.

        Args:
            document: The cleaned document text
            schema: The Pydantic model defining the extraction schema
            field_hints: Optional hints for specific fields

        Returns:
            The formatted extraction prompt
        """
        parts: list[str] = [
            "Extract structured information from this watershed management document. "
            "Return ONLY valid JSON matching the schema below.",
            f"## Extraction Schema\n\n{self._describe_schema(schema, field_hints)}",
            f"## Document\n\n{document[: self.max_document_chars]}",
            f"## Task\n\n{EXTRACTION_RULES}",
        ]
        return "\n\n".join(parts)

    def build_comparison_prompt(
        self,
        extracted: dict[str, Any],
        ground_truth: dict[str, Any],
    ) -> str:
        """Build the user prompt asking an LLM to score an extraction.

        Both documents are expected to be summarized already.
        """
        return "\n\n".join(
            [
                COMPARISON_RULES,
                "## GROUND TRUTH\n\n" + json.dumps(ground_truth, indent=1, ensure_ascii=False),
                "## EXTRACTED\n\n" + json.dumps(extracted, indent=1, ensure_ascii=False),
            ]
        )

    def _describe_schema(
        self,
        schema: type[BaseModel],
        field_hints: dict[str, str] | None = None,
        indent: int = 0,
        described_models: set[str] | None = None,
    ) -> str:
        """Generate a human-readable description of the schema.

        Field names are given by their JSON alias, which is the name the
        model must use in its response.

        Args:
            schema: The Pydantic model to describe
            field_hints: Optional hints for specific fields
            indent: Indentation level for nested schemas
            described_models: Set of already described model names to avoid recursion

        Returns:
            A formatted schema description
        """
        field_hints = field_hints or {}
        described_models = described_models if described_models is not None else set()
        lines: list[str] = []
        indent_str = "  " * indent

        lines.append(f"{indent_str}**{schema.__name__}**")
        if schema.__doc__ and indent == 0:
            summary = schema.__doc__.strip().split("\n\n")[0]
            lines.append(f"\n{indent_str}{summary}")

        lines.append(f"\n{indent_str}Fields:")

        nested_models: list[type[BaseModel]] = []

        for field_name, field_info in schema.model_fields.items():
            name = field_info.alias or field_name
            hint = field_hints.get(name) or field_hints.get(field_name)
            lines.append(self._describe_field(name, field_info, hint, indent + 1))

            for model in self._get_nested_models(field_info.annotation):
                if model.__name__ not in described_models:
                    nested_models.append(model)
                    described_models.add(model.__name__)

        if nested_models and indent == 0:
            lines.append(f"\n{indent_str}### Nested Types")
            described_models.add(schema.__name__)
            for nested_model in nested_models:
                lines.append("")
                lines.append(
                    self._describe_schema(
                        nested_model, field_hints, indent=0, described_models=described_models
                    )
                )

        return "\n".join(lines)

    def _get_nested_models(self, annotation: Any) -> list[type[BaseModel]]:
        """Extract nested Pydantic models from a type annotation."""
        models: list[type[BaseModel]] = []

        if annotation is None:
            return models

        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            models.append(annotation)
            return models

        if get_origin(annotation) is not None:
            for arg in get_args(annotation):
                models.extend(self._get_nested_models(arg))

        return models

    def _describe_field(
        self,
        name: str,
        field_info: FieldInfo,
        hint: str | None = None,
        indent: int = 0,
    ) -> str:
        """Describe a single field with its type and constraints."""
        indent_str = "  " * indent
        type_str = self._format_type(field_info.annotation)
        required_str = "required" if field_info.is_required() else "optional"

        parts = [f"{indent_str}- **{name}** ({type_str}, {required_str})"]

        if self.include_field_descriptions and field_info.description:
            parts.append(f": {field_info.description}")

        if hint:
            parts.append(f" [Hint: {hint}]")

        constraints = self._get_field_constraints(field_info)
        if constraints:
            parts.append(f" {constraints}")

        return "".join(parts)

    def _get_field_constraints(self, field_info: FieldInfo) -> str:
        """Extract numeric bound constraints from Pydantic metadata."""
        constraints: list[str] = []

        for meta in field_info.metadata:
            meta_type = type(meta).__name__
            if meta_type == "Ge":
                constraints.append(f">={getattr(meta, 'ge', '?')}")
            elif meta_type == "Le":
                constraints.append(f"<={getattr(meta, 'le', '?')}")

        if constraints:
            return f"[Constraints: {', '.join(constraints)}]"
        return ""

    def _format_type(self, annotation: Any) -> str:
        """Format a type annotation as a readable string."""
        if annotation is None:
            return "any"

        origin = get_origin(annotation)

        if origin is not None:
            args = get_args(annotation)

            if origin is Union or origin is types.UnionType:
                non_none_args = [a for a in args if a is not type(None)]
                formatted = " | ".join(self._format_type(a) for a in non_none_args)
                if type(None) in args:
                    return f"{formatted} | null"
                return formatted

            if origin is list:
                inner = self._format_type(args[0]) if args else "any"
                return f"list[{inner}]"

        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            return annotation.__name__

        if hasattr(annotation, "__name__"):
            return annotation.__name__

        return str(annotation)
