from azarch.builder import build_from_assessment, build_from_caf, build_landing_zone
from azarch.builder.caf_tree import CafBuildResult
from azarch.model.types import ArchitectureModel, ArchNode, Layer, NodeType, ServiceMeta
from azarch.pipeline.context import PipelineContext
from azarch.pipeline.stage import PipelineStage


def placeholder_model() -> ArchitectureModel:
    """The model shown when an assessment could not be turned into anything."""
    return ArchitectureModel(nodes=[
        ArchNode(
            id="vm-placeholder",
            type=NodeType.VM,
            label="VM (No Assessment Data)",
            layer=Layer.COMPUTE,
            meta=ServiceMeta(placeholder=True),
        )
    ])


class BuildStage(PipelineStage):
    name = "BuildStage"

    def run(self, context: PipelineContext):
        if context.builder == "caf":
            return build_from_caf(context.source, context.diagram_options)
        if context.builder == "landing-zone":
            return build_landing_zone(context.source, context.diagram_options)
        return build_from_assessment(context.source, context.diagram_options)

    def commit(self, context: PipelineContext, result):
        if isinstance(result, CafBuildResult):
            context.model = result.model
            context.validation_errors = list(result.validation_errors)
            context.meta = result.meta
        else:
            context.model = result

    def fallback(self, context: PipelineContext):
        context.model = ArchitectureModel() if context.builder == "caf" else placeholder_model()
