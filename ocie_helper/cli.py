"""
ocie-helper command line.

Commands:
  serve                      run the web app with uvicorn (HOST/PORT from settings)
  import FILE [--images DIR] load a JSON equipment list into the store

Examples:
  ocie-helper import equipment.json --images public/images
  ocie-helper import equipment.json --allow-duplicates
  ocie-helper serve --reload

Exit codes:
  0 = success
  1 = some items failed to import
  2 = the input file could not be read
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger("ocie_helper.cli")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="ocie-helper", description="OCIE Helper equipment catalogue.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the web application.")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting).")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT setting).")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes.")

    imp = sub.add_parser("import", help="Import equipment from a JSON file.")
    imp.add_argument("file", type=Path, help="JSON array of equipment items.")
    imp.add_argument("--images", type=Path, default=None,
                     help="Folder holding the image files named in the JSON.")
    imp.add_argument("--allow-duplicates", action="store_true",
                     help="Insert items even when their partial NSN already exists.")
    return p.parse_args(argv)


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .core.config import settings

    uvicorn.run(
        "ocie_helper.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=args.reload,
    )
    return 0


def _import(args: argparse.Namespace) -> int:
    from .db.session import Base, SessionLocal, engine
    from .services.blob_store import get_blob_store
    from .services.importer import import_records, load_items

    try:
        items = load_items(args.file)
    except (OSError, ValueError) as exc:
        logger.error("cannot read %s: %s", args.file, exc)
        return 2

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        report = import_records(
            db,
            get_blob_store(),
            items,
            image_dir=args.images,
            skip_existing=not args.allow_duplicates,
        )
    finally:
        db.close()

    print(f"Created: {report.created}")
    print(f"Skipped: {report.skipped}")
    print(f"Failed:  {report.failed}")
    print(f"Total:   {report.total}")
    for line in report.errors:
        print(f"  {line}", file=sys.stderr)
    return 0 if report.ok else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    from .core.logging import setup_logging

    setup_logging("DEBUG" if args.verbose else None)
    if args.command == "serve":
        return _serve(args)
    return _import(args)


if __name__ == "__main__":
    sys.exit(main())
