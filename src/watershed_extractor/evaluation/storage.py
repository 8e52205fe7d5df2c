"""File-backed ground truth, preset test cases and result snapshots.

A data directory is laid out as::

    <data_dir>/
        pdfs/<pdf_file>
        ground-truth/<ground_truth_file>
        results/<case>-result.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from watershed_extractor.core.exceptions import ConfigurationError, GroundTruthNotFoundError
from watershed_extractor.evaluation.types import AccuracyTestResult
from watershed_extractor.schemas.plan import StructuredDocument

logger = logging.getLogger(__name__)

PDF_DIR = "pdfs"
GROUND_TRUTH_DIR = "ground-truth"
RESULTS_DIR = "results"


class GroundTruthStore:
    """Loads manually authored ground truth documents from a directory.

    Example:
        ```python
        store = GroundTruthStore("test-data/ground-truth")
        truth = store.load("Bell_Creek_Muddy_Creek_Watershed_Plan_2012")
        ```
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, case_id: str) -> Path:
        """Path of the ground truth file; `.json` is appended when missing."""
        filename = case_id if case_id.endswith(".json") else f"{case_id}.json"
        return self.root / filename

    def exists(self, case_id: str) -> bool:
        return self.path_for(case_id).is_file()

    def load(self, case_id: str) -> StructuredDocument:
        """Load and validate a ground truth document.

        Raises:
            GroundTruthNotFoundError: If no file exists for the case.
            pydantic.ValidationError: If the file is not a plan document.
        """
        path = self.path_for(case_id)
        if not path.is_file():
            raise GroundTruthNotFoundError(case_id, path=path)

        logger.debug("Loading ground truth %s", path)
        data = json.loads(path.read_text(encoding="utf-8"))
        return StructuredDocument.model_validate(data)

    def list_cases(self) -> list[str]:
        """Names of all ground truth files, without extension, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(path.stem for path in self.root.glob("*.json"))


class PresetTestCase(BaseModel):
    """A plan PDF paired with its ground truth file."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Preset identifier, e.g. 'preset1'")
    name: str = Field(description="Human-readable plan name")
    pdf_file: str = Field(description="PDF filename under the pdfs directory")
    ground_truth_file: str = Field(description="JSON filename under the ground-truth directory")
    pdf_file_size: str | None = Field(default=None, description="Display size of the PDF")


DEFAULT_PRESETS: tuple[PresetTestCase, ...] = (
    PresetTestCase(
        id="preset1",
        name="Broken Pumpkin 9 Key Element Plan 2019",
        pdf_file="Broken_Pumpkin_9_Key_Element_Plan_2019.pdf",
        ground_truth_file="Broken_Pumpkin_9_Key_Element_Plan_2019.json",
        pdf_file_size="939 KB",
    ),
    PresetTestCase(
        id="preset2",
        name="Basket Creek Hickahala Creek 9 Key Element Plan 2018",
        pdf_file="Basket_Creek_Hickahala_Creek_9_Key_Element_Plan_2018.pdf",
        ground_truth_file="Basket_Creek_Hickahala_Creek_9_Key_Element_Plan_2018.json",
        pdf_file_size="1.04 MB",
    ),
    PresetTestCase(
        id="preset3",
        name="Pickwick Reservoir Watershed Plan 2009",
        pdf_file="Pickwick_Reservoir_Watershed_Plan_2009.pdf",
        ground_truth_file="Pickwick_Reservoir_Watershed_Plan_2009.json",
        pdf_file_size="6.73 MB",
    ),
    PresetTestCase(
        id="preset4",
        name="Bell Creek Muddy Creek Watershed Plan 2012",
        pdf_file="Bell_Creek_Muddy_Creek_Watershed_Plan_2012.pdf",
        ground_truth_file="Bell_Creek_Muddy_Creek_Watershed_Plan_2012.json",
        pdf_file_size="1.79 MB",
    ),
)


class PresetCatalog(BaseModel):
    """The preset test cases available to the accuracy runner.

    Example:
        ```python
        catalog = PresetCatalog.from_yaml("presets.yaml")
        case = catalog.get("preset2")
        ```
    """

    model_config = ConfigDict(frozen=True)

    presets: list[PresetTestCase] = Field(default_factory=lambda: list(DEFAULT_PRESETS))

    @field_validator("presets")
    @classmethod
    def _validate_unique_ids(cls, value: list[PresetTestCase]) -> list[PresetTestCase]:
        ids = [preset.id for preset in value]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate preset ids: {', '.join(duplicates)}")
        return value

    @property
    def ids(self) -> list[str]:
        return [preset.id for preset in self.presets]

    def get(self, preset_id: str) -> PresetTestCase:
        """Look up a preset by id.

        Raises:
            ConfigurationError: If the id is unknown.
        """
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        raise ConfigurationError(
            f"Unknown preset {preset_id!r}. Available presets: {', '.join(self.ids)}"
        )

    def to_yaml(self, path: str | Path | None = None) -> str:
        """Serialize the catalog to YAML, optionally writing it to `path`."""
        data = self.model_dump(exclude_none=True)
        yaml_str: str = yaml.dump(data, default_flow_style=False, sort_keys=False)

        if path:
            Path(path).write_text(yaml_str)

        return yaml_str

    @classmethod
    def from_yaml(cls, source: str | Path) -> PresetCatalog:
        """Load a catalog from a YAML file or string.

        Raises:
            ConfigurationError: If the YAML does not describe a catalog.
        """
        if isinstance(source, Path) or (
            isinstance(source, str) and "\n" not in source and Path(source).exists()
        ):
            content = Path(source).read_text()
        else:
            content = source

        data = yaml.safe_load(content)
        if not isinstance(data, dict) or "presets" not in data:
            raise ConfigurationError("Preset catalog YAML must contain a 'presets' list")
        return cls.model_validate(data)


class SnapshotWriter:
    """Persists one JSON snapshot per scored test case.

    The snapshot holds `{"extractedData": ..., "accuracyResult": ...}`,
    both in their camelCase JSON shape.
    """

    def __init__(self, results_dir: str | Path) -> None:
        self.results_dir = Path(results_dir)

    def path_for(self, case_id: str) -> Path:
        return self.results_dir / f"{case_id}-result.json"

    def write(
        self,
        case_id: str,
        extracted: StructuredDocument,
        result: AccuracyTestResult,
    ) -> Path:
        """Write the snapshot, replacing any previous one for the case."""
        snapshot: dict[str, Any] = {
            "extractedData": extracted.model_dump(mode="json", by_alias=True, exclude_none=True),
            "accuracyResult": result.to_dict(),
        }
        self.results_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(case_id)
        path.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Wrote result snapshot %s", path)
        return path

    def read(self, case_id: str) -> dict[str, Any]:
        """Load a previously written snapshot as plain JSON data."""
        return json.loads(self.path_for(case_id).read_text(encoding="utf-8"))
