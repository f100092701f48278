from cvoptima.ingestion.models import IngestionState
from cvoptima.ingestion.pipeline import PipelineContext, PipelineStep
from cvoptima.logging.logger import Log


class IngestionProcessor:
    """Runs ingestion steps in order and undoes the upload when a later step fails.

    Pipeline: validate -> authenticate -> upload -> extract -> persist.
    """

    def __init__(self, steps: list[PipelineStep], rollback_step: PipelineStep) -> None:
        self._steps = steps
        self._rollback_step = rollback_step

    def process(self, context: PipelineContext) -> PipelineContext:
        """Run every step; on any exception roll back if needed and re-raise."""
        try:
            for step in self._steps:
                if context.state is not step.state:
                    Log.debug(f"Ingestion of '{context.candidate.filename}': {step.state.value}")
                context.state = step.state
                context = step.run(context)
        except Exception as exc:
            context.failed_state = context.state
            context.error_message = str(exc)
            if context.stored_blob is not None:
                context.state = IngestionState.ROLLING_BACK
                self._rollback_step.run(context)
            context.state = IngestionState.FAILED
            raise

        context.state = IngestionState.DONE
        return context
