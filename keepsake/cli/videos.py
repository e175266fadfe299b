"""CLI commands for browsing and uploading videos."""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

import keepsake.lib.cli as click
from keepsake.core import di
from keepsake.model import LocalFile, Notice, UploadDraft
from keepsake.model.enum import NoticeLevel
from keepsake.sync import ActorHandle, KeepsakeError, ListVideosQuery, UploadFormController
from keepsake.view import GalleryView

console = Console()

NoticeStyles = {
    NoticeLevel.Info: "cyan",
    NoticeLevel.Success: "green",
    NoticeLevel.Error: "red",
}


def print_notice(notice: Notice) -> None:
    console.print(f"[{NoticeStyles[notice.level]}]{notice.message}[/]")


def render_gallery(view: GalleryView) -> Table:
    table = Table(title=f"Our Videos ({view.summary})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Uploaded")
    table.add_column("Size", justify="right")
    table.add_column("URL", overflow="fold")
    for i, card in enumerate(view.cards):
        table.add_row(str(i), card.title, card.upload_date, card.file_size, card.url)
    return table


@click.group("videos")
def videos():
    """Browse and upload videos."""
    ...


@videos.command("list")
@di.inject
def list_videos(
    handle: ActorHandle = di.Provide["sync.handle"],
    query: ListVideosQuery = di.Provide["sync.videos"],
) -> None:
    """Show every video in the collection."""

    async def _list() -> GalleryView:
        try:
            await handle.connect()
            try:
                await query.read()
            except KeepsakeError:
                # the view carries the error next to whatever was loaded before
                pass
            return GalleryView.from_query(query)
        finally:
            await handle.aclose()

    try:
        view = asyncio.run(_list())
    except KeepsakeError as e:
        raise click.ClickException(str(e)) from e

    if view.error:
        console.print(f"[red]{view.error}[/]")
        if not view.cards:
            raise SystemExit(1)
    if view.is_empty:
        console.print("No videos yet. Upload your first memory!")
        return
    console.print(render_gallery(view))


@videos.command("upload")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--title", "-t", default="", help="Video title (defaults to the file name)")
@click.option("--content-type", default=None, help="Override the detected content type, e.g. video/mp4")
@di.inject
def upload(
    path: Path,
    title: str,
    content_type: str | None,
    handle: ActorHandle = di.Provide["sync.handle"],
    form: UploadFormController = di.Provide["sync.form"],
) -> None:
    """Upload the video at PATH."""
    form.set_title(title)
    if not form.select_file(LocalFile.from_path(path, content_type=content_type)):
        for notice in form.notices:
            print_notice(notice)
        raise SystemExit(1)

    async def _upload() -> bool:
        try:
            try:
                await handle.connect()
            except KeepsakeError:
                # submit reports the unavailable service as a notice
                pass
            with Progress(
                TextColumn("[bold]{task.description}"), BarColumn(), TaskProgressColumn(), console=console
            ) as progress:
                task = progress.add_task(form.draft.title, total=100)

                def update(draft: UploadDraft) -> None:
                    progress.update(task, completed=draft.progress)

                unsubscribe = form.subscribe(update)
                try:
                    return await form.submit()
                finally:
                    unsubscribe()
        finally:
            await handle.aclose()

    ok = asyncio.run(_upload())
    for notice in form.notices:
        print_notice(notice)
    if not ok:
        raise SystemExit(1)
