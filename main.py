"""
Command-line entry point for atmopics
"""
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path

import typer

from atmopics.core.collections import share_link
from atmopics.core.config import Settings
from atmopics.core.errors import ContentError, Disposition

app = typer.Typer(help="Resolve and preview atmo.pics records.", no_args_is_help=True)

NOT_FOUND_EXIT_CODE = 2
TRANSIENT_EXIT_CODE = 3

LOADERS = {
    "code": "load_code",
    "image": "load_image",
    "markdown": "load_markdown",
    "video": "load_video",
}


def setup_logging(settings: Settings, verbose: bool = False):
    """Configure application logging"""
    from atmopics.utils.logging_config import setup_logging as setup_categorized_logging

    logging_manager = setup_categorized_logging(settings, log_dir=settings.log_dir)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    return logging_manager


def _exit_for(error: ContentError) -> None:
    typer.echo(f"{type(error).__name__}: {error}", err=True)
    if error.disposition is Disposition.TRANSIENT:
        raise typer.Exit(TRANSIENT_EXIT_CODE)
    raise typer.Exit(NOT_FOUND_EXIT_CODE)


async def _with_context(settings: Settings, call):
    from atmopics.core.context import CoreContext

    ctx = CoreContext(settings=settings)
    try:
        return await call(ctx)
    finally:
        await ctx.aclose()


@app.command()
def resolve(
    identifier: str = typer.Argument(..., help="Handle or DID"),
    kind: str = typer.Argument(..., help="code | image | markdown | video"),
    rkey: str = typer.Argument(..., help="Record key"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Resolve a record and print its page data as JSON."""
    settings = Settings()
    setup_logging(settings, verbose)
    if kind not in LOADERS:
        raise typer.BadParameter(f"unknown kind {kind!r}", param_hint="kind")

    async def run(ctx):
        return await getattr(ctx.content, LOADERS[kind])(identifier, rkey)

    try:
        page = asyncio.run(_with_context(settings, run))
    except ContentError as e:
        _exit_for(e)
    address = page.record.address
    output = dataclasses.asdict(page)
    output["share"] = share_link(settings.public_origin, address.did, address.collection, address.rkey)
    typer.echo(json.dumps(output, indent=2, default=str))


@app.command()
def preview(
    identifier: str = typer.Argument(..., help="Handle or DID"),
    kind: str = typer.Argument(..., help="code | image | markdown | video"),
    rkey: str = typer.Argument(..., help="Record key"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Print the preview-card markup handed to the rasterizer."""
    settings = Settings()
    setup_logging(settings, verbose)

    async def run(ctx):
        return await ctx.content.build_preview(kind, identifier, rkey)

    try:
        card = asyncio.run(_with_context(settings, run))
    except KeyError as e:
        raise typer.BadParameter(str(e), param_hint="kind")
    except ContentError as e:
        _exit_for(e)
    typer.echo(card.markup)


@app.command()
def thumbnail(
    video: Path = typer.Argument(..., exists=True, dir_okay=False, help="Video file"),
    output: Path = typer.Argument(..., help="Where to write the still image"),
):
    """Extract the first frame of a video as a WebP still."""
    settings = Settings()
    setup_logging(settings)
    from atmopics.core.context import CoreContext
    from atmopics.media.processor import MediaProber, save_thumbnail

    if not CoreContext.check_ffmpeg_availability():
        raise typer.Exit(1)
    try:
        thumb = MediaProber().generate_thumbnail(video)
    except ContentError as e:
        typer.echo(f"{type(e).__name__}: {e}", err=True)
        raise typer.Exit(1)
    save_thumbnail(thumb, output)
    typer.echo(json.dumps({
        "output": str(output),
        "mimeType": thumb.mime_type,
        "aspectRatio": dataclasses.asdict(thumb.aspect_ratio),
    }))


def main():
    """Main application entry point"""
    try:
        app()
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
