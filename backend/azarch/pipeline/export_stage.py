from azarch.export import empty_document, export_model, validate_for_export
from azarch.pipeline.context import PipelineContext
from azarch.pipeline.stage import PipelineStage


class ExportStage(PipelineStage):
    name = "ExportStage"

    def run(self, context: PipelineContext):
        return export_model(context.model, context.export_options)

    def commit(self, context: PipelineContext, result):
        for message in validate_for_export(context.model):
            context.add_diagnostic(message)
        context.document = result

    def fallback(self, context: PipelineContext):
        context.document = empty_document(context.export_options)
