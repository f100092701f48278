from unittest.mock import MagicMock

import pytest

from cvoptima.ingestion.exceptions import IngestionError
from cvoptima.ingestion.models import IngestionErrorKind, IngestionState, UploadCandidate
from cvoptima.ingestion.pipeline import PipelineContext, PipelineStep
from cvoptima.ingestion.processor import IngestionProcessor
from cvoptima.storage.base import StoredBlob


class _RecordingStep(PipelineStep):
    def __init__(
        self,
        state: IngestionState,
        calls: list[str],
        error: Exception | None = None,
        stores_blob: bool = False,
    ) -> None:
        self.state = state
        self._calls = calls
        self._error = error
        self._stores_blob = stores_blob

    def run(self, context: PipelineContext) -> PipelineContext:
        self._calls.append(self.state.value)
        if self._stores_blob:
            context.stored_blob = StoredBlob(path="u/cv.pdf", locator="file:///u/cv.pdf")
        if self._error is not None:
            raise self._error
        return context


def _make_context() -> PipelineContext:
    return PipelineContext(
        candidate=UploadCandidate(content=b"%PDF-", filename="cv.pdf", content_type="application/pdf")
    )


class TestIngestionProcessor:
    def test_runs_steps_in_order(self) -> None:
        calls: list[str] = []
        rollback = MagicMock()
        processor = IngestionProcessor(
            steps=[
                _RecordingStep(IngestionState.VALIDATING, calls),
                _RecordingStep(IngestionState.UPLOADING, calls, stores_blob=True),
                _RecordingStep(IngestionState.EXTRACTING, calls),
                _RecordingStep(IngestionState.PERSISTING, calls),
            ],
            rollback_step=rollback,
        )

        context = processor.process(_make_context())

        assert calls == ["VALIDATING", "UPLOADING", "EXTRACTING", "PERSISTING"]
        assert context.state is IngestionState.DONE
        assert context.failed_state is None
        rollback.run.assert_not_called()

    def test_failure_after_upload_rolls_back(self) -> None:
        calls: list[str] = []
        rollback = MagicMock()
        error = IngestionError(IngestionErrorKind.EXTRACTION_NO_TEXT, "no text")
        processor = IngestionProcessor(
            steps=[
                _RecordingStep(IngestionState.UPLOADING, calls, stores_blob=True),
                _RecordingStep(IngestionState.EXTRACTING, calls, error=error),
                _RecordingStep(IngestionState.PERSISTING, calls),
            ],
            rollback_step=rollback,
        )
        context = _make_context()

        with pytest.raises(IngestionError):
            processor.process(context)

        assert calls == ["UPLOADING", "EXTRACTING"]
        assert context.state is IngestionState.FAILED
        assert context.failed_state is IngestionState.EXTRACTING
        assert context.error_message == "no text"
        rollback.run.assert_called_once_with(context)

    def test_failure_before_upload_skips_rollback(self) -> None:
        rollback = MagicMock()
        error = IngestionError(IngestionErrorKind.VALIDATION_EMPTY, "empty")
        processor = IngestionProcessor(
            steps=[_RecordingStep(IngestionState.VALIDATING, [], error=error)],
            rollback_step=rollback,
        )
        context = _make_context()

        with pytest.raises(IngestionError):
            processor.process(context)

        assert context.failed_state is IngestionState.VALIDATING
        rollback.run.assert_not_called()

    def test_unexpected_exception_is_reraised_after_rollback(self) -> None:
        rollback = MagicMock()
        processor = IngestionProcessor(
            steps=[
                _RecordingStep(IngestionState.UPLOADING, [], stores_blob=True),
                _RecordingStep(IngestionState.PERSISTING, [], error=RuntimeError("boom")),
            ],
            rollback_step=rollback,
        )
        context = _make_context()

        with pytest.raises(RuntimeError, match="boom"):
            processor.process(context)

        rollback.run.assert_called_once()
        assert context.state is IngestionState.FAILED
