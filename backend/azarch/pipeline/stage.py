import logging
from abc import ABC, abstractmethod
from typing import Any

from azarch.pipeline.context import PipelineContext

logger = logging.getLogger(__name__)


class PipelineStage(ABC):
    name: str

    @abstractmethod
    def run(self, context: PipelineContext) -> Any:
        """
        Must:
        - read from context
        - return the stage output without touching context
        - NEVER call other stages
        """

    @abstractmethod
    def commit(self, context: PipelineContext, result: Any) -> None:
        """Store the output of a successful run on the context."""

    def fallback(self, context: PipelineContext) -> None:
        """Called after a failed run. The default keeps the last-known-good state."""

    def execute(self, context: PipelineContext) -> bool:
        try:
            result = self.run(context)
        except Exception as e:
            logger.exception("[%s] stage failed, keeping last-known-good output", self.name)
            context.add_error(self.name, f"{type(e).__name__}: {e}")
            self.fallback(context)
            return False

        self.commit(context, result)
        return True
