from azarch.pipeline.context import PipelineContext, StageFailure
from azarch.pipeline.controller import PipelineController
from azarch.pipeline.stage import PipelineStage

__all__ = [
    "PipelineContext",
    "PipelineController",
    "PipelineStage",
    "StageFailure",
]
