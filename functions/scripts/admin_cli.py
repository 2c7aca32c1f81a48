"""
Operator command line for the portfolio content.

The backend variant and its locations come from PORTFOLIO_* settings.
Mutating commands ask for the write token each time they run, unless
--token-env names an environment variable that holds it.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from admin.config import ClientSettings
from admin.credentials import CredentialProvider, env_credential, prompt_credential
from admin.errors import BackendError
from admin.session import AdminSession, build_session
from admin.uploads import MediaFile
from gateway.documents import JsonDocumentStore
from shared.content import galleries_to_dict

logger = logging.getLogger(__name__)


async def show(session: AdminSession, args: argparse.Namespace) -> int:
    model = session.model
    await model.load()
    for key, slides in model.galleries.items():
        print(f"[{key}]")
        for index, slide in enumerate(slides):
            print(f"  {index:>3}  {slide.kind:<22} {slide.title or ''}")
    print("sections:")
    for section in model.site.sections:
        print(f"  {section.key:<16} {section.status:<5} {section.label}")
    return 0


async def upload(session: AdminSession, args: argparse.Namespace, credentials: CredentialProvider) -> int:
    files = [await asyncio.to_thread(MediaFile.from_path, path) for path in args.files]
    result = await session.uploads.route(files, args.target, credentials())
    for reference in result.references:
        print(reference)

    if args.gallery is None:
        return 0
    model = session.model
    await model.load()
    model.apply_upload(args.gallery, args.slide, result)
    saved = await model.save_galleries(credentials)
    print(f"galleries: {saved.status}")
    return 0 if saved.ok else 1


async def export(session: AdminSession, args: argparse.Namespace) -> int:
    model = session.model
    await model.load()
    store = JsonDocumentStore(args.directory)
    await asyncio.to_thread(store.write_galleries, galleries_to_dict(model.galleries))
    await asyncio.to_thread(store.write_site, model.site.to_dict())
    logger.info(f"Wrote {store.galleries_path} and {store.site_path}")
    return 0


async def set_shader(session: AdminSession, args: argparse.Namespace, credentials: CredentialProvider) -> int:
    text = await asyncio.to_thread(Path(args.file).read_text, encoding="utf-8")
    result = await session.model.save_shader(text, credentials)
    print(f"shader: {result.status}")
    return 0 if result.ok else 1


async def run(args: argparse.Namespace) -> int:
    credentials = env_credential(args.token_env) if args.token_env else prompt_credential()
    session = build_session(ClientSettings())
    try:
        if args.command == "show":
            return await show(session, args)
        if args.command == "upload":
            return await upload(session, args, credentials)
        if args.command == "export":
            return await export(session, args)
        return await set_shader(session, args, credentials)
    except (BackendError, OSError, KeyError, IndexError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        await session.aclose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Portfolio content admin")
    parser.add_argument(
        "--token-env",
        type=str,
        default=None,
        help="Read the write token from this environment variable instead of prompting",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("show", help="List galleries, slides and sections")

    upload_parser = commands.add_parser("upload", help="Upload media files")
    upload_parser.add_argument("files", nargs="+", type=Path)
    upload_parser.add_argument(
        "--target",
        default="modalGallery",
        help="Slide field the references are for (src, video, modalImage, modalGallery)",
    )
    upload_parser.add_argument("--gallery", default=None, help="Write the references into this gallery")
    upload_parser.add_argument("--slide", type=int, default=0, help="Slide position within --gallery")

    export_parser = commands.add_parser("export", help="Write galleries.json and site.json snapshots")
    export_parser.add_argument("directory", type=Path)

    shader_parser = commands.add_parser("set-shader", help="Replace the mobile shader source")
    shader_parser.add_argument("file", type=Path)

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
