from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from azarch.model.types import ArchitectureModel
from azarch.schemas import (
    AssessmentSummary,
    CafArchitecture,
    DiagramOptions,
    ExportOptions,
    LayoutOptions,
)


@dataclass
class StageFailure:
    stage: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"stage": self.stage, "message": self.message}


@dataclass
class PipelineContext:
    # Raw input (authoritative)
    source: Union[AssessmentSummary, CafArchitecture, None] = None
    builder: str = "assessment"  # assessment | landing-zone | caf

    diagram_options: DiagramOptions = field(default_factory=DiagramOptions)
    layout_options: LayoutOptions = field(default_factory=LayoutOptions)
    export_options: ExportOptions = field(default_factory=ExportOptions)

    # Last-known-good stage outputs
    model: Optional[ArchitectureModel] = None
    document: Optional[str] = None

    # CAF builder extras
    validation_errors: List[str] = field(default_factory=list)
    meta: Optional[Any] = None

    failures: List[StageFailure] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def add_error(self, stage: str, message: str):
        self.failures.append(StageFailure(stage=stage, message=message))

    def add_diagnostic(self, message: str):
        self.diagnostics.append(message)
