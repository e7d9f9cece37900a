import logging
from typing import Optional, Union

from azarch.model.types import ArchitectureModel
from azarch.pipeline.build_stage import BuildStage
from azarch.pipeline.context import PipelineContext
from azarch.pipeline.export_stage import ExportStage
from azarch.pipeline.layout_stage import LayoutStage
from azarch.pipeline.optimize_stage import OptimizeStage
from azarch.schemas import (
    AssessmentSummary,
    CafArchitecture,
    DiagramOptions,
    ExportOptions,
    LayoutOptions,
)

logger = logging.getLogger(__name__)


class PipelineController:
    """
    build -> optimize -> layout -> export.

    A failing stage never stops the run: the context keeps the last-known-good
    model (or the build/export fallback) and the next stage works from that.
    """

    def __init__(self):
        self.build_stage = BuildStage()
        self.stages = [
            OptimizeStage(),
            LayoutStage(),
            ExportStage(),
        ]

    def run(
        self,
        source: Union[AssessmentSummary, CafArchitecture, None],
        builder: str = "assessment",
        diagram_options: Optional[DiagramOptions] = None,
        layout_options: Optional[LayoutOptions] = None,
        export_options: Optional[ExportOptions] = None,
    ) -> PipelineContext:
        context = PipelineContext(
            source=source,
            builder=builder,
            diagram_options=diagram_options or DiagramOptions(),
            layout_options=layout_options or LayoutOptions(),
            export_options=export_options or ExportOptions(),
        )
        return self.run_context(context)

    def run_context(self, context: PipelineContext) -> PipelineContext:
        self.build_stage.execute(context)
        if context.model is None:
            context.model = ArchitectureModel()

        for stage in self.stages:
            stage.execute(context)

        if context.failures:
            logger.warning(
                "[PipelineController] finished with %d failed stage(s): %s",
                len(context.failures), ", ".join(f.stage for f in context.failures),
            )
        else:
            logger.info(
                "[PipelineController] finished: %d nodes, %d edges",
                len(context.model.nodes), len(context.model.edges),
            )
        return context
