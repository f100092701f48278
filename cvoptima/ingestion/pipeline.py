from abc import ABC, abstractmethod
from dataclasses import dataclass

from cvoptima.database.models import ResumeRecord
from cvoptima.extraction.models import DocumentKind, ExtractionSuccess
from cvoptima.identity.base import CurrentUser
from cvoptima.ingestion.models import IngestionState, UploadCandidate
from cvoptima.storage.base import StoredBlob


@dataclass(slots=True)
class PipelineContext:
    candidate: UploadCandidate
    title: str | None = None
    state: IngestionState = IngestionState.VALIDATING
    failed_state: IngestionState | None = None
    document_kind: DocumentKind | None = None
    user: CurrentUser | None = None
    stored_blob: StoredBlob | None = None
    extraction: ExtractionSuccess | None = None
    record: ResumeRecord | None = None
    error_message: str = ""


class PipelineStep(ABC):
    state: IngestionState

    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
