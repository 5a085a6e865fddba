# src/main.py - v1
"""CLI entry point: checklist, browse, open and capture commands.

Usage:
    robodoc checklist --context Incoming --type SCARA
    robodoc browse [TYPE [SERIAL [CONTEXT]]]
    robodoc open TYPE SERIAL CONTEXT FILE
    robodoc capture --serial 2525 --type SCARA --context Incoming \
        --photo 1=box.jpg --photo 3=overview.jpg [--no-finish]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

from robodoc.config.checklists import CONTEXTS, ROBOT_TYPES, get_checklist_for, load_checklists
from robodoc.config.settings import MISSING_STORAGE_MESSAGE, Settings
from robodoc.core.models import PhotoFile, Screen
from robodoc.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = Settings()
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def cli() -> None:
    sys.exit(main())


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="robodoc",
        description=f"RoboDoc v{__version__}: guided robot photo documentation",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- checklist ---
    p_checklist = subparsers.add_parser(
        "checklist", help="Show the checklist of a context and robot type",
    )
    p_checklist.add_argument("--context", required=True, help="Context key (e.g. Incoming)")
    p_checklist.add_argument("--type", dest="robot_type", default="SCARA", choices=ROBOT_TYPES)
    p_checklist.set_defaults(func=_cmd_checklist)

    # --- browse ---
    p_browse = subparsers.add_parser(
        "browse", help="List uploaded folders and files",
    )
    p_browse.add_argument("robot_type", nargs="?", default="", help="Robot type folder")
    p_browse.add_argument("serial", nargs="?", default="", help="Serial folder")
    p_browse.add_argument("context", nargs="?", default="", help="Context folder")
    p_browse.set_defaults(func=_cmd_browse)

    # --- open ---
    p_open = subparsers.add_parser(
        "open", help="Print a (signed or public) URL for an uploaded file",
    )
    p_open.add_argument("robot_type")
    p_open.add_argument("serial")
    p_open.add_argument("context")
    p_open.add_argument("file_name")
    p_open.set_defaults(func=_cmd_open)

    # --- capture ---
    p_capture = subparsers.add_parser(
        "capture", help="Run a guided documentation session non-interactively",
    )
    p_capture.add_argument("--serial", required=True, help="Robot serial number")
    p_capture.add_argument("--type", dest="robot_type", default="SCARA", choices=ROBOT_TYPES)
    p_capture.add_argument("--context", required=True, help="Context key (e.g. Incoming)")
    p_capture.add_argument(
        "--photo", action="append", default=[], metavar="STEP=PATH",
        help="Photo for a checklist step id (repeatable)",
    )
    p_capture.add_argument(
        "--no-finish", action="store_true",
        help="Stop at the summary without updating the manifest",
    )
    p_capture.set_defaults(func=_cmd_capture)

    return parser


async def _cmd_checklist(args: argparse.Namespace, settings: Settings) -> int:
    """Print the checklist for (context, robot type)."""
    checklist = get_checklist_for(
        args.context, args.robot_type, load_checklists(settings.checklists_file)
    )
    if not checklist:
        print(f"No checklist configured for {args.context} / {args.robot_type}")
        return 1
    print(f"\nChecklist {args.context} / {args.robot_type}:")
    for step in checklist:
        marker = "*" if step.required else " "
        print(f"  {marker} [{step.id}] {step.label}")
    print("  (* = required)")
    return 0


async def _cmd_browse(args: argparse.Namespace, settings: Settings) -> int:
    """List one level of the upload hierarchy."""
    from robodoc.dashboard.browser import DashboardBrowser
    from robodoc.storage.storage_factory import create_storage_or_none

    browser = DashboardBrowser(create_storage_or_none(settings), settings)
    names: list[str] = await browser.load_robot_types()
    if args.robot_type:
        names = await browser.select_type(args.robot_type)
    if args.robot_type and args.serial:
        names = await browser.select_serial(args.serial)

    if args.robot_type and args.serial and args.context:
        files = await browser.select_context(args.context)
        if browser.preview_task is not None:
            browser.preview_task.cancel()
        print(f"\n{browser.active_path}")
        if not files and not browser.error:
            print("  No files found in this folder.")
        for entry in files:
            print(f"  {entry.name}  ({entry.size} bytes)")
    else:
        print(f"\n{browser.active_path}")
        for name in names:
            print(f"  {name}/")

    if browser.error:
        print(browser.error, file=sys.stderr)
        return 1
    return 0


async def _cmd_open(args: argparse.Namespace, settings: Settings) -> int:
    """Print a URL for one file."""
    from robodoc.dashboard.browser import DashboardBrowser
    from robodoc.storage.storage_factory import create_storage_or_none

    browser = DashboardBrowser(create_storage_or_none(settings), settings)
    browser.selected_type = args.robot_type
    browser.selected_serial = args.serial
    browser.selected_context = args.context
    url = await browser.open_file(args.file_name)
    if url is None:
        print(browser.error, file=sys.stderr)
        return 1
    print(url)
    return 0


def _parse_photo_args(values: list[str]) -> list[tuple[str, Path]]:
    photos: list[tuple[str, Path]] = []
    for value in values:
        step_id, sep, path = value.partition("=")
        if not sep or not step_id or not path:
            raise ValueError(f"Invalid --photo value {value!r}; expected STEP=PATH")
        photos.append((step_id.strip(), Path(path)))
    return photos


def _read_photo(path: Path) -> PhotoFile:
    return PhotoFile(
        filename=path.name,
        content=path.read_bytes(),
        content_type=mimetypes.guess_type(path.name)[0] or "",
    )


async def _cmd_capture(args: argparse.Namespace, settings: Settings) -> int:
    """Walk the guided workflow with photos given on the command line."""
    from robodoc.session.controller import SessionController
    from robodoc.storage.storage_factory import create_storage_or_none

    photos = _parse_photo_args(args.photo)
    controller = SessionController(create_storage_or_none(settings), settings)
    try:
        if not controller.start(args.serial, args.robot_type):
            logger.error("Serial number and robot type are required")
            return 1
        if not controller.select_context(args.context):
            enabled = ", ".join(c.key for c in CONTEXTS if c.enabled)
            logger.error("Context %r cannot be selected (enabled: %s)", args.context, enabled)
            return 1

        while controller.screen == Screen.CHECKLIST:
            step = controller.active_step
            if step is not None:
                for step_id, path in photos:
                    if step_id != step.id:
                        continue
                    photo = await controller.upload(_read_photo(path))
                    if photo is None:
                        print(f"Upload failed for step {step.id}: {controller.upload_error}",
                              file=sys.stderr)
                        return 1
                    print(f"  uploaded {photo.path}")
            if not controller.can_go_next:
                print(f"Step {step.id} ({step.label}) requires a photo", file=sys.stderr)
                return 1
            controller.next()

        completeness = controller.completeness
        print(f"\nSummary for {controller.upload_target}")
        print(f"  Required complete: {completeness.completed_count}/{completeness.required_count}")
        print(f"  Total photos:      {completeness.total_photos}")
        print(f"  Status:            {'Complete' if completeness.complete else 'Incomplete'}")

        if args.no_finish:
            return 0
        manifest = await controller.finish()
        if manifest is None:
            print(controller.manifest_error or MISSING_STORAGE_MESSAGE, file=sys.stderr)
            return 1
        print(f"\nRecords saved successfully (workflow {manifest.workflow.id}).")
        return 0
    finally:
        controller.close()


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from robodoc.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
