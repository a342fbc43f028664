"""
Command-line interface for PDF to Image.
"""

import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeRemainingColumn
from rich.table import Table

from pdf_to_image import __version__
from pdf_to_image.backends import PdfiumBackend
from pdf_to_image.capabilities import Capabilities, detect_capabilities
from pdf_to_image.exceptions import PDFToImageException
from pdf_to_image.naming import base_name_of, dpi_of, name_of
from pdf_to_image.orchestrator import BatchOrchestrator
from pdf_to_image.pipeline import ConversionPipeline
from pdf_to_image.preferences import JsonPreferenceStore, SAVE_PATH_KEY
from pdf_to_image.types import ConversionOptions, ConversionStatus, SourceFile
from pdf_to_image.utils import configure_logging, format_file_size

console = Console()

ENV_PREFIX = "PDF_TO_IMAGE"

_STATUS_STYLES = {
    ConversionStatus.PROCESSING: "[yellow]processing[/yellow]",
    ConversionStatus.COMPLETED: "[green]completed[/green]",
    ConversionStatus.ERROR: "[red]error[/red]",
}


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option(
    '--config-dir',
    type=click.Path(file_okay=False),
    default=None,
    help='Directory holding preferences.json (defaults to the user config dir)'
)
@click.pass_context
def cli(ctx, verbose, config_dir):
    """
    PDF to Image - Convert PDF pages into PNG or JPEG images.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['preferences'] = JsonPreferenceStore.default(config_dir)


def _capabilities_for(save_mode):
    if save_mode == 'native':
        return Capabilities(native_filesystem=True)
    if save_mode == 'download':
        return Capabilities(native_filesystem=False)
    return detect_capabilities()


@cli.command(name="convert")
@click.argument('input_pdfs', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--format', '-f', 'image_format',
    default='png',
    help='Output image format',
    type=click.Choice(['png', 'jpeg'], case_sensitive=False)
)
@click.option(
    '--scale', '-s',
    default=2.0,
    help='Render scale (1.0 = 150 DPI, 2.0 = 300 DPI, 3.0 = 450 DPI)',
    type=click.FloatRange(min=0, min_open=True)
)
@click.option(
    '--quality', '-q',
    default=0.95,
    help='JPEG quality between 0 and 1',
    type=click.FloatRange(0, 1)
)
@click.option(
    '--output-dir', '-o',
    default='.',
    help='Download directory used when not saving interactively',
    type=click.Path(file_okay=False)
)
@click.option(
    '--combined/--per-file',
    default=False,
    help='Save all images as one combined archive instead of per file'
)
@click.option(
    '--save-mode',
    default='auto',
    help='download writes without prompting, native asks where to save',
    type=click.Choice(['auto', 'download', 'native'])
)
@click.option(
    '--workers', '-w',
    default=4,
    help='Number of files converted concurrently',
    type=click.IntRange(min=1)
)
@click.pass_context
def convert(ctx, input_pdfs, image_format, scale, quality, output_dir, combined, save_mode, workers):
    """
    Convert PDF files into images and save them.

    Examples:

        pdf-to-image convert report.pdf

        pdf-to-image convert a.pdf b.pdf -f jpeg -s 1.0 --combined

        pdf-to-image convert scan.pdf --save-mode native
    """
    try:
        options = ConversionOptions(format=image_format.lower(), scale=scale, quality=quality)
        orchestrator = BatchOrchestrator(
            pipeline=ConversionPipeline(backend=PdfiumBackend()),
            capabilities=_capabilities_for(save_mode),
            preferences=ctx.obj['preferences'],
            options=options,
            download_dir=output_dir,
            max_workers=workers,
        )

        duplicates = orchestrator.add_files(SourceFile.from_path(path) for path in input_pdfs)
        for name in duplicates:
            console.print(f"[yellow]⚠ Skipping duplicate:[/yellow] {name}")

        files = orchestrator.files
        console.print(
            f"\n[bold cyan]Converting {len(files)} file(s) at {options.dpi} DPI "
            f"({options.format.value})...[/bold cyan]"
        )

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=console
        ) as progress:
            tasks = {
                source.id: progress.add_task(source.name, total=None)
                for source in files
            }

            def update_progress(file_id, event):
                progress.update(
                    tasks[file_id],
                    total=max(event.total_pages, 1),
                    completed=event.current_page if event.total_pages else 1,
                )

            summary = orchestrator.start_conversion(on_progress=update_progress)

        table = Table(title="Conversion Results")
        table.add_column("File", style="cyan")
        table.add_column("Pages", justify="right")
        table.add_column("Status")
        table.add_column("Details", style="dim")
        for entry in orchestrator.file_progresses:
            event = entry.progress
            table.add_row(
                entry.file.name,
                str(event.total_pages),
                _STATUS_STYLES[event.status],
                event.error or f"{len(entry.images)} image(s)",
            )
        console.print(table)

        if combined:
            saved = orchestrator.export_all_files()
        else:
            saved = []
            for index in range(len(files)):
                saved.extend(orchestrator.export_file(index))

        if saved:
            console.print(f"\n[bold green]✓ Saved {len(saved)} file(s)[/bold green]")
            sample_size = min(5, len(saved))
            for file_path in saved[:sample_size]:
                console.print(f"  • {file_path}")
            if len(saved) > sample_size:
                console.print(f"  ... and {len(saved) - sample_size} more")
        else:
            console.print("\n[yellow]Nothing was saved.[/yellow]")
        console.print()

        if summary.failed:
            sys.exit(1)

    except PDFToImageException as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


@cli.command(name="info")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--scale', '-s',
    default=2.0,
    help='Render scale used for the sample output name',
    type=click.FloatRange(min=0, min_open=True)
)
@click.option(
    '--format', '-f', 'image_format',
    default='png',
    type=click.Choice(['png', 'jpeg'], case_sensitive=False)
)
def show_info(input_pdf, scale, image_format):
    """
    Display page count and output naming for a PDF file.

    Example:

        pdf-to-image info input.pdf
    """
    try:
        source = SourceFile.from_path(input_pdf)
        with PdfiumBackend().load(source.read_bytes()) as document:
            page_count = document.page_count

        dpi = dpi_of(scale)
        base_name = base_name_of(source.name)

        table = Table(title=f"PDF Information: {os.path.basename(input_pdf)}")
        table.add_column("Property", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")

        table.add_row("File Path", os.path.abspath(input_pdf))
        table.add_row("File Size", format_file_size(source.size))
        table.add_row("Number of Pages", str(page_count))
        table.add_row("Output DPI", str(dpi))
        table.add_row("First Image", name_of(base_name, dpi, image_format.lower(), 1))

        console.print()
        console.print(table)
        console.print()

    except PDFToImageException as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


@cli.group(name="save-path")
def save_path():
    """
    Manage the remembered save directory.
    """


@save_path.command(name="show")
@click.pass_context
def show_save_path(ctx):
    """Print the remembered save directory."""
    saved = ctx.obj['preferences'].get(SAVE_PATH_KEY)
    if saved:
        console.print(saved)
    else:
        console.print("[dim]No save directory stored; the working directory is used.[/dim]")


@save_path.command(name="set")
@click.argument('directory', type=click.Path(file_okay=False))
@click.pass_context
def set_save_path(ctx, directory):
    """Remember DIRECTORY as the save directory."""
    resolved = str(Path(directory).expanduser().resolve())
    ctx.obj['preferences'].set(SAVE_PATH_KEY, resolved)
    console.print(f"[bold green]✓ Save directory set:[/bold green] {resolved}")


@save_path.command(name="clear")
@click.pass_context
def clear_save_path(ctx):
    """Forget the remembered save directory."""
    ctx.obj['preferences'].clear(SAVE_PATH_KEY)
    console.print("[bold green]✓ Save directory cleared[/bold green]")


def main():
    cli(auto_envvar_prefix=ENV_PREFIX)


if __name__ == '__main__':
    main()
