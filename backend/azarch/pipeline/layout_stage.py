from azarch.layout import apply_layout
from azarch.pipeline.context import PipelineContext
from azarch.pipeline.stage import PipelineStage


class LayoutStage(PipelineStage):
    name = "LayoutStage"

    def run(self, context: PipelineContext):
        return apply_layout(context.model, context.layout_options)

    def commit(self, context: PipelineContext, result):
        unplaced = [node.id for node in result.nodes if node.bounds is None]
        if unplaced:
            context.add_diagnostic(f"{len(unplaced)} node(s) could not be placed: {', '.join(unplaced)}")
        context.model = result
