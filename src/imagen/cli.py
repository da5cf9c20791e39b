"""
CLI entry point for Imagen.

This module provides the Typer-based command-line interface. It parses
and validates arguments, builds one GenerationRequest, hands it to the
generator chosen from the environment and writes the returned images.

Environment:
    IMAGEN_REPLAY   Replay generation calls from a cassette (no network)
    IMAGEN_REC      Record live calls: "1" for a timestamped cassette, or a path
    IMAGEN_CONFIG   Config file override
    GEMINI_API_KEY / OPENAI_API_KEY   Provider API keys

Architecture Note:
    The CLI is intentionally thin - every decision about live, record or
    replay lives in imagen.context so the same wiring works programmatically.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from imagen import __version__
from imagen.cassette.recorder import RecordingImageGenerator
from imagen.config import Config, Settings, discover_config_path
from imagen.context import build_live_generator, select_generator
from imagen.errors import GenerationError, ImagenError, InvalidArgumentError, RecordingPersistError
from imagen.generator.gemini import GeminiGenerator
from imagen.generator.openai import OpenAIGenerator
from imagen.model import Provider, detect_provider, resolve_model
from imagen.output import numbered_path, resolve_output_path, save_image
from imagen.params import (
    validate_aspect_ratio,
    validate_format,
    validate_quality,
    validate_size,
    validate_thinking,
)
from imagen.schema import GenerationRequest, ImageResponse

# Initialize Typer app with metadata
app = typer.Typer(
    name="imagen",
    help="AI image generation CLI - unified interface for Gemini and OpenAI.",
    add_completion=False,
)

# Status and errors go to stderr so stdout stays clean for scripting
err_console = Console(stderr=True, soft_wrap=True)

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        err_console.print(f"[bold]imagen[/bold] version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def resolve_prompt(prompt: str | None, prompt_file: Path | None) -> str:
    """
    Resolve the prompt from the positional argument or --prompt-file.

    Raises:
        InvalidArgumentError: If both or neither are given, or the file is unreadable
    """
    if prompt is not None and prompt_file is not None:
        raise InvalidArgumentError(
            message="Provide either a prompt string or -p/--prompt-file, not both",
            argument="prompt",
            value=prompt,
        )
    if prompt is not None:
        return prompt
    if prompt_file is not None:
        try:
            return prompt_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidArgumentError(
                message=f"Failed to read prompt file {prompt_file}: {e}",
                argument="prompt_file",
                value=str(prompt_file),
            ) from e
    raise InvalidArgumentError(
        message="Provide a prompt string or use -p/--prompt-file",
        argument="prompt",
        value="",
    )


def build_request(
    prompt: str,
    config: Config,
    *,
    model: str | None = None,
    aspect_ratio: str | None = None,
    size: str | None = None,
    quality: str | None = None,
    fmt: str | None = None,
    count: int = 1,
    thinking: str | None = None,
) -> tuple[GenerationRequest, Provider]:
    """
    Merge options with config defaults, validate them and build the request.

    Raises:
        InvalidArgumentError: If any parameter is unsupported
    """
    defaults = config.defaults
    model_name = model or defaults.model
    resolved = resolve_model(model_name)
    provider = detect_provider(resolved)

    logger.debug("Model: %s (resolved from '%s')", resolved, model_name)
    logger.debug("Provider: %s", provider.value)

    request = GenerationRequest(
        model=resolved,
        prompt=prompt,
        aspect_ratio=aspect_ratio or defaults.aspect_ratio,
        size=size or defaults.size,
        quality=quality or defaults.quality,
        format=fmt or defaults.format,
        count=count,
        thinking=thinking,
    )

    validate_aspect_ratio(request.aspect_ratio, provider)
    validate_size(request.size)
    validate_quality(request.quality)
    validate_format(request.format)
    if request.thinking is not None:
        validate_thinking(request.thinking, provider)

    return request, provider


async def _generate(
    request: GenerationRequest,
    provider: Provider,
    config: Config,
    settings: Settings,
    verbose: bool,
) -> tuple[ImageResponse, Path | None]:
    """Run one generation call through the selected backend."""
    live: list[GeminiGenerator | OpenAIGenerator] = []

    def live_factory() -> GeminiGenerator | OpenAIGenerator:
        generator = build_live_generator(provider, config, settings)
        live.append(generator)
        return generator

    record_target = settings.record_target()
    generator = select_generator(live_factory, replay=settings.replay, record=record_target)

    if verbose:
        if settings.replay is not None:
            err_console.print(f"[dim]Replaying from: {escape(settings.replay)}[/dim]")
        elif record_target is not None:
            err_console.print(f"[dim]Recording to: {escape(str(record_target))}[/dim]")

    cassette_path = generator.path if isinstance(generator, RecordingImageGenerator) else None

    try:
        try:
            return await generator.generate(request), cassette_path
        except RecordingPersistError as e:
            err_console.print(f"[yellow]Warning: failed to save cassette: {escape(str(e))}[/yellow]")
            if e.generation_error is not None:
                raise e.generation_error from e
            return e.response, None
        except GenerationError:
            # Recorded failures are on disk too
            if cassette_path is not None:
                err_console.print(f"Cassette saved: {escape(str(cassette_path))}")
            raise
    finally:
        for g in live:
            await g.aclose()


@app.command()
def main(
    prompt: Annotated[
        Optional[str],
        typer.Argument(help="Text prompt describing the desired image."),
    ] = None,
    prompt_file: Annotated[
        Optional[Path],
        typer.Option("--prompt-file", "-p", help="Path to a file containing the prompt text."),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", "-m", help="Model name or short alias (default: nano-banana)."),
    ] = None,
    aspect_ratio: Annotated[
        Optional[str],
        typer.Option("--aspect-ratio", "-a", help="Aspect ratio, e.g. 1:1, 16:9, 9:16."),
    ] = None,
    size: Annotated[
        Optional[str],
        typer.Option("--size", "-s", help="Image size: 1K, 2K, 4K."),
    ] = None,
    quality: Annotated[
        Optional[str],
        typer.Option("--quality", "-q", help="Quality (OpenAI only): auto, low, medium, high."),
    ] = None,
    fmt: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format: jpeg, png, webp."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path (auto-generated if not specified)."),
    ] = None,
    count: Annotated[
        int,
        typer.Option("--count", "-n", min=1, help="Number of images to generate."),
    ] = 1,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", help="Config file path override."),
    ] = None,
    thinking: Annotated[
        Optional[str],
        typer.Option("--thinking", "-t", help="Thinking level (Gemini only): none, minimal, low, medium, high."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output."),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Generate images from a text prompt.

    Example:
        $ imagen "a cat wearing a hat" --model gpt-1 --aspect-ratio 16:9
    """
    _configure_logging(verbose)

    try:
        settings = Settings()
        config = Config.load(discover_config_path(config_path, settings))
        prompt_text = resolve_prompt(prompt, prompt_file)
        request, provider = build_request(
            prompt_text,
            config,
            model=model,
            aspect_ratio=aspect_ratio,
            size=size,
            quality=quality,
            fmt=fmt,
            count=count,
            thinking=thinking,
        )
        if verbose:
            err_console.print(f"[dim]Model: {request.model} ({provider.value})[/dim]")

        response, cassette_path = asyncio.run(_generate(request, provider, config, settings, verbose))
    except ImagenError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    base_path = resolve_output_path(output, prompt_text, request.format)
    total = len(response.images)
    for index, image in enumerate(response.images):
        path = numbered_path(base_path, index, total)
        try:
            save_image(image.data, image.mime_type, request.format, path)
        except OSError as e:
            err_console.print(f"[red]Error: failed to write {escape(str(path))}: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        err_console.print(f"Saved: {escape(str(path))}")

    if cassette_path is not None:
        err_console.print(f"Cassette saved: {escape(str(cassette_path))}")
