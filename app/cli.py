from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.excalidraw.url_encoder import build_share_url
from adapters.filesystem.scene_repository import FileSystemSceneRepository
from app.config import AppSettings, load_settings
from app.wiring import build_converter, build_generate_diagram, build_normalizer
from domain.errors import DiagramError
from domain.models import OutputFormat
from domain.services.extract_mermaid_syntax import extract_mermaid_syntax
from domain.services.sanitize_mermaid_syntax import sanitize_mermaid_syntax

app = typer.Typer(no_args_is_help=True)
console = Console()

MERMAID_INPUT_HELP = "Mermaid source or a generator response, '-' for stdin."


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _settings(ctx: typer.Context) -> AppSettings:
    return ctx.obj


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
    log_level: Optional[str] = typer.Option(None, help="Override the configured log level."),
) -> None:
    settings = load_settings(config)
    configure_logging(log_level.upper() if log_level else settings.log_level)
    ctx.obj = settings


def _read_text(input_path: Path) -> str:
    if str(input_path) == "-":
        return sys.stdin.read()
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    return input_path.read_text(encoding="utf-8")


@app.command("sanitize")
def sanitize(
    input_path: Path = typer.Argument(..., help=MERMAID_INPUT_HELP),
) -> None:
    syntax = sanitize_mermaid_syntax(extract_mermaid_syntax(_read_text(input_path)))
    typer.echo(syntax)


@app.command("normalize")
def normalize(
    input_path: Path = typer.Argument(..., help="Partial scene JSON file."),
    output_path: Path = typer.Option(..., "--output", "-o", help="Where to write the scene."),
    seed: Optional[int] = typer.Option(None, help="Seed for reproducible ids and nonces."),
) -> None:
    repo = FileSystemSceneRepository()
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    document = build_normalizer(seed).normalize_scene(repo.load(input_path))
    repo.save(document, output_path)
    console.print(f"[green]Wrote[/] {output_path} ({len(document.elements)} elements)")


@app.command("convert")
def convert(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help=MERMAID_INPUT_HELP),
    output_path: Path = typer.Option(..., "--output", "-o", help="Where to write the scene."),
) -> None:
    converter = build_converter(_settings(ctx))
    try:
        converted = asyncio.run(converter.convert(_read_text(input_path)))
    except DiagramError as exc:
        console.print(f"[red]Conversion failed:[/] {exc}")
        raise typer.Exit(code=1) from exc
    document = build_normalizer().normalize_scene(converted.to_scene_payload())
    FileSystemSceneRepository().save(document, output_path)
    console.print(f"[green]Wrote[/] {output_path} ({len(document.elements)} elements)")


@app.command("generate")
def generate(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="What the diagram should show."),
    output_path: Path = typer.Option(..., "--output", "-o", help="Where to write the scene."),
    scene_path: Optional[Path] = typer.Option(None, "--scene", help="Current scene to refine."),
    output_format: str = typer.Option("mermaid", "--format", help="mermaid or excalidraw."),
) -> None:
    if output_format not in ("mermaid", "excalidraw"):
        console.print(f"[red]Unsupported format:[/] {output_format}")
        raise typer.Exit(code=1)
    repo = FileSystemSceneRepository()
    current_scene = repo.load(scene_path) if scene_path else None
    generator = build_generate_diagram(_settings(ctx))
    try:
        result = asyncio.run(
            generator.run(prompt, current_scene=current_scene, output_format=_format(output_format))
        )
    except DiagramError as exc:
        console.print(f"[red]Generation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc
    repo.save(result.scene, output_path)
    console.print(
        f"[green]Wrote[/] {output_path} ({result.format}, {len(result.scene.elements)} elements)"
    )


@app.command("share-url")
def share_url(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Scene JSON file to open in the editor."),
) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    document = build_normalizer().normalize_scene(FileSystemSceneRepository().load(input_path))
    typer.echo(build_share_url(_settings(ctx).excalidraw_base_url, document))


def _format(value: str) -> OutputFormat:
    return "excalidraw" if value == "excalidraw" else "mermaid"


if __name__ == "__main__":
    app()
