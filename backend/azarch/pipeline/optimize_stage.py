from azarch.optimizer import optimize_graph, validate_model
from azarch.pipeline.context import PipelineContext
from azarch.pipeline.stage import PipelineStage


class OptimizeStage(PipelineStage):
    name = "OptimizeStage"

    def run(self, context: PipelineContext):
        return optimize_graph(context.model, context.diagram_options)

    def commit(self, context: PipelineContext, result):
        context.model = result
        check = validate_model(result, context.diagram_options.max_connectors_per_node)
        for error in check.errors:
            context.add_diagnostic(error)
