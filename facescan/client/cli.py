"""
CLI entry point: scan a shared folder and find a face in it.

Usage:
    python -m facescan.client --folder-url <url> --face photo.jpg [options]
"""

import argparse
import logging
import mimetypes
import sys
from pathlib import Path

from facescan import __version__
from facescan.client.driver import ClientDriver, JobSnapshot
from facescan.client.exceptions import TransportError
from facescan.client.transport import HttpJobTransport
from facescan.configs.client import ClientSettings
from facescan.core.batch.models import ProcessingProgress
from facescan.core.exceptions import FaceScanException
from facescan.observability.logger import configure_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else "WARNING")

    face_path: Path = args.face
    if not face_path.is_file():
        parser.error(f"face image not found: {face_path}")

    settings = ClientSettings()
    base_url = args.base_url or settings.base_url
    transport = HttpJobTransport(base_url, timeout=settings.request_timeout)

    try:
        if args.job_id:
            job_id = args.job_id
        else:
            scan = transport.create_scan(args.folder_url)
            job_id = scan["job_id"]
            print(f"Scanned folder: {scan['item_count']} images (job {job_id})")

        driver = ClientDriver(
            transport,
            settings=settings,
            batch_size=args.batch_size,
            on_progress=_print_progress,
        )
        content_type = mimetypes.guess_type(face_path.name)[0] or "image/jpeg"
        snapshot = driver.run(job_id, face_path.read_bytes(), content_type)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except TransportError as e:
        print(f"\nRequest failed: {e.message}", file=sys.stderr)
        return 2
    except FaceScanException as e:
        print(f"\n{e.message}", file=sys.stderr)
        return 1

    _print_summary(snapshot)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="facescan",
        description=f"FaceScan v{__version__} - find a face in a shared folder",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--base-url", help="API base URL (default: CLIENT_BASE_URL)")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--folder-url", help="Shared folder to scan")
    target.add_argument("--job-id", help="Resume an existing job instead of scanning")
    parser.add_argument("--face", type=Path, required=True, help="Reference face image")
    parser.add_argument("--batch-size", type=int, default=None, help="Images per call")
    return parser


def _print_progress(progress: ProcessingProgress) -> None:
    print(f"\rProcessed {progress.processed}/{progress.total}", end="", flush=True)


def _print_summary(snapshot: JobSnapshot) -> None:
    matches = snapshot.matches
    failed = [r for r in snapshot.results if r.error]
    print(f"\n\nAnalysis complete:")
    print(f"  Images:   {snapshot.processing.total}")
    print(f"  Matches:  {len(matches)}")
    print(f"  Errors:   {len(failed)}")
    for result in sorted(matches, key=lambda r: r.similarity, reverse=True):
        print(f"  {result.similarity:6.2f}%  {result.name or result.item_id}  {result.view_url or ''}")
