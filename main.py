#!/usr/bin/env python3
"""
Thumbnail Wizard - Command Line
===============================
Run the web app or use the generation pipeline without a browser.

Usage:
    python main.py                                  # Start the web server
    python main.py --init-db                        # Create the database
    python main.py --list-styles                    # Show the style catalog
    python main.py --add-style neon-glow.jpg        # Upload a style asset
    python main.py --generate --face me.jpg --title "I Spent $10,000"
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project directory to path
PROJECT_DIR = Path(__file__).parent
sys.path.insert(0, str(PROJECT_DIR))

from config import SERVER_HOST, SERVER_PORT, DEBUG_MODE, STYLES_BUCKET
from exceptions import ThumbnailWizardError, ValidationError
from generation_proxy import GenerationProxy
from prompt_generation import GenerationRequest
from storage import get_bucket, guess_content_type
from style_resolver import StyleResolver, STYLE_FILE_PATTERN
from utils import setup_logger, encode_data_uri

logger = setup_logger("thumbnail_wizard")


# =============================================================================
# COMMANDS
# =============================================================================

def face_reference(value: str) -> str:
    """A local file becomes a data URI; URLs and data URIs pass through."""
    path = Path(value)
    if path.exists():
        return encode_data_uri(path.read_bytes(), guess_content_type(path.name))
    return value


async def generate_once(args) -> int:
    request = GenerationRequest(
        face_image=face_reference(args.face or ""),
        video_title=args.title or "",
        video_description=args.description,
        thumbnail_details=args.details,
        thumbnail_text=args.text,
        style=args.style,
    )

    try:
        result = await GenerationProxy().generate(request)
    except ValidationError as e:
        logger.error(f"Invalid request: {e}")
        return 2
    except ThumbnailWizardError as e:
        logger.error(f"Generation failed: {e}")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        if not result.result_url.startswith("data:"):
            print(f"Thumbnail: {result.result_url}")
        print(result.description)
    return 0


async def list_styles() -> int:
    catalog = await StyleResolver().fetch_catalog()
    for warning in catalog.warnings:
        logger.warning(warning)

    if not catalog.options:
        logger.info("No styles in the catalog")
        return 0

    for option in catalog.options:
        print(f"{option.id:<24} {option.display_name:<24} {option.preview_url}")
    return 0


async def add_styles(paths: list[Path]) -> int:
    bucket = get_bucket(STYLES_BUCKET)
    failures = 0

    for path in paths:
        if not path.exists():
            logger.error(f"File not found: {path}")
            failures += 1
            continue
        if not STYLE_FILE_PATTERN.match(path.name):
            logger.error(f"Not a style image (jpg, jpeg, png, gif, webp): {path.name}")
            failures += 1
            continue

        try:
            url = await bucket.upload(path.name, path.read_bytes(), guess_content_type(path.name))
        except ThumbnailWizardError as e:
            logger.error(f"Upload failed for {path.name}: {e}")
            failures += 1
            continue
        logger.success(f"Added style {path.stem}: {url}")

    return 0 if failures == 0 else 1


async def init_database() -> int:
    from database.db import init_db, close_db

    await init_db()
    await close_db()
    return 0


def serve(args) -> int:
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        reload_dirs=[str(PROJECT_DIR)] if args.reload else None
    )
    return 0


# =============================================================================
# CLI
# =============================================================================

def main():
    parser = argparse.ArgumentParser(
        description='YouTube Thumbnail Wizard',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                   # Start the web server
  python main.py --port 8080 --no-reload           # Custom port, no autoreload
  python main.py --list-styles                     # Show the style catalog
  python main.py --add-style styles/*.jpg          # Seed the styles bucket
  python main.py --generate --face me.jpg --title "My Video" --style "Neon Glow"
        """
    )

    # Modes
    parser.add_argument('--generate', action='store_true', help='Generate one thumbnail and exit')
    parser.add_argument('--list-styles', action='store_true', help='List the style catalog and exit')
    parser.add_argument('--add-style', type=Path, nargs='+', metavar='FILE', help='Upload style images to the styles bucket')
    parser.add_argument('--init-db', action='store_true', help='Create the database tables and exit')

    # Generation fields
    parser.add_argument('--face', help='Face image: local file, URL or data URI')
    parser.add_argument('--title', help='Video title')
    parser.add_argument('--description', help='Video description or keywords')
    parser.add_argument('--details', help='Thumbnail details')
    parser.add_argument('--text', help='Text to display in the thumbnail')
    parser.add_argument('--style', help='Style name')
    parser.add_argument('--json', action='store_true', help='Print the result as JSON')

    # Server
    parser.add_argument('--host', default=SERVER_HOST, help=f'Server host (default: {SERVER_HOST})')
    parser.add_argument('--port', type=int, default=SERVER_PORT, help=f'Server port (default: {SERVER_PORT})')
    parser.add_argument('--no-reload', dest='reload', action='store_false', default=DEBUG_MODE,
                        help='Disable autoreload (enabled when DEBUG_MODE=true)')

    args = parser.parse_args()

    if args.init_db:
        return asyncio.run(init_database())

    if args.list_styles:
        return asyncio.run(list_styles())

    if args.add_style:
        return asyncio.run(add_styles(args.add_style))

    if args.generate:
        return asyncio.run(generate_once(args))

    return serve(args)


if __name__ == "__main__":
    sys.exit(main())
