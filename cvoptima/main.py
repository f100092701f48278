import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from cvoptima.config.settings import Settings
from cvoptima.database.connection import close_pool, init_pool
from cvoptima.database.repositories.resumes_repository import ResumesRepository
from cvoptima.identity.base import StaticIdentityProvider
from cvoptima.ingestion.ingestor import build_ingestor, utc_now
from cvoptima.ingestion.library import OrphanBlobSweeper, ResumeLibrary
from cvoptima.ingestion.models import IngestionResult
from cvoptima.ingestion.validation import ALLOWED_FILE_TYPES, file_extension, format_file_size
from cvoptima.logging.logger import Log
from cvoptima.storage.factory import BlobStoreFactory


def guess_content_type(filename: str) -> str:
    """Declared MIME type for a local file, from the allowlisted extensions."""
    extension = file_extension(filename)
    for mime_type, (allowed_extension, _kind) in ALLOWED_FILE_TYPES.items():
        if extension == allowed_extension:
            return mime_type
    return "application/octet-stream"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cvoptima", description="Resume vault ingestion")
    parser.add_argument("--user", help="id of the user the command acts as")
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="upload a PDF or DOCX resume")
    ingest.add_argument("path", type=Path)
    ingest.add_argument("--title")
    ingest.add_argument("--content-type")

    delete = commands.add_parser("delete", help="delete a resume and its file")
    delete.add_argument("resume_id")

    commands.add_parser("list", help="list the user's resumes")
    commands.add_parser("usage", help="show the user's storage usage")
    commands.add_parser("cleanup-orphans", help="delete files no resume refers to")
    return parser


def _print(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def run(args: argparse.Namespace, settings: Settings) -> int:
    identity = StaticIdentityProvider(args.user)
    blob_store = BlobStoreFactory.create(settings)
    resumes_repo = ResumesRepository()

    if args.command == "ingest":
        try:
            content = args.path.read_bytes()
        except OSError as exc:
            Log.error(f"Could not read {args.path}: {exc}")
            _print(asdict(IngestionResult(
                success=False, error=f"Could not read {args.path}: {exc.strerror or exc}"
            )))
            return 1
        ingestor = build_ingestor(settings, identity, blob_store=blob_store)
        result = ingestor.ingest(
            content,
            filename=args.path.name,
            content_type=args.content_type or guess_content_type(args.path.name),
            title=args.title,
        )
        _print(asdict(result))
        return 0 if result.success else 1

    if args.command == "delete":
        ingestor = build_ingestor(settings, identity, blob_store=blob_store)
        deletion = ingestor.delete(args.resume_id)
        _print(asdict(deletion))
        return 0 if deletion.success else 1

    if args.command == "cleanup-orphans":
        deleted = OrphanBlobSweeper(resumes_repo, blob_store).sweep(utc_now())
        _print({"deleted_count": deleted})
        return 0

    library = ResumeLibrary(identity, resumes_repo, blob_store)
    if args.command == "list":
        listing = library.list_resumes()
        if listing.success:
            _print([
                {
                    "id": r.id,
                    "title": r.title,
                    "file_type": r.file_type,
                    "size": format_file_size(r.file_size or 0),
                    "created_at": r.created_at,
                }
                for r in listing.data
            ])
            return 0
        _print(asdict(listing))
        return 1

    usage = library.storage_usage()
    if usage.success:
        _print({"bytes_used": usage.data.bytes_used, "mb_used": usage.data.mb_used})
        return 0
    _print(asdict(usage))
    return 1


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse args -> initialize pool -> run one command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    try:
        return run(args, settings)
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
