"""Command line entry point for fieldvoice."""

import sys
import asyncio
import logging
from pathlib import Path
from typing import Optional

import click
from pubsub import pub
from rich.console import Console
from rich.table import Table

from .audio.wav import WavAssembler
from .config import FieldVoiceConfig
from .correction import SHOP_CONTEXT, PRODUCT_CONTEXT, VocabularyCorrector, soundex as soundex_code
from .dispatch import DispatchRegistry
from .errors import FieldVoiceError, PermissionDenied
from .matching import HttpEmbeddingBackend, SemanticMatcher, product_search, shop_search
from .models import RoundFailed, PipelineResult
from .models.catalog import load_commands, load_products, load_shops
from .services import PIPELINE_ERROR_TOPIC, PIPELINE_RESULT_TOPIC, VoiceCommandPipeline

logger = logging.getLogger(__name__)
console = Console()


def setup_logging(config: FieldVoiceConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/fieldvoice.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("fieldvoice starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def _embedding_backend(config: FieldVoiceConfig) -> HttpEmbeddingBackend:
    return HttpEmbeddingBackend(
        base_url=config.get('embedding.base_url'),
        model=config.get('embedding.model'),
        api_key_env=config.get('embedding.api_key_env'),
    )


async def _build_matcher(config: FieldVoiceConfig, backend: HttpEmbeddingBackend) -> SemanticMatcher:
    if not await backend.initialize():
        raise click.ClickException("Embedding backend could not be initialized")

    matcher = SemanticMatcher(
        backend,
        threshold=config.get('matching.command_threshold'),
        quick_threshold=config.get('matching.quick_threshold'),
    )
    await matcher.build_index(
        load_commands(config.get('catalog.commands')),
        load_products(config.get('catalog.products')),
        load_shops(config.get('catalog.shops')),
    )
    return matcher


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Path to configuration YAML file")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging level (overrides config)")
@click.version_option(package_name="fieldvoice")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]) -> None:
    """fieldvoice - voice commands for field data collection."""
    config = FieldVoiceConfig(config_path)
    setup_logging(config, log_level or config.get('logging.level', 'INFO'))
    ctx.obj = config


@cli.command()
@click.option("--page", default="all-shops", show_default=True, help="Page scope that has focus")
@click.option("--duration", type=int, default=0, help="Stop after this many seconds (0 runs until Ctrl-C)")
@click.pass_obj
def listen(config: FieldVoiceConfig, page: str, duration: int) -> None:
    """Listen on the microphone and print matched commands."""
    from .transcription.google_backend import GoogleSpeechBackend

    def on_result(result: PipelineResult) -> None:
        if result.ignored:
            console.print(f"[dim]#{result.round_id} ignored:[/dim] {result.raw_text!r}")
        else:
            console.print(f"[green]#{result.round_id}[/green] {result.command.encode()} "
                          f"[dim]({result.raw_text!r})[/dim]")

    def on_error(failure: RoundFailed) -> None:
        console.print(f"[yellow]#{failure.round_id} {failure.message}[/yellow]")

    def on_command(wire: str) -> bool:
        console.print(f"[bold cyan]-> {wire}[/bold cyan]")
        return True

    async def run() -> None:
        transcriber = GoogleSpeechBackend(
            credentials_path=config.get('transcription.credentials_path'),
            sample_rate=config.get('audio.sample_rate'),
            language=config.get('transcription.language'),
        )
        transcriber.initialize()

        backend = _embedding_backend(config)
        matcher = await _build_matcher(config, backend)
        registry = DispatchRegistry()
        registry.register(page, on_command)

        pipeline = VoiceCommandPipeline.from_config(config, transcriber, matcher, registry, page=page)
        pub.subscribe(on_result, PIPELINE_RESULT_TOPIC)
        pub.subscribe(on_error, PIPELINE_ERROR_TOPIC)
        try:
            await pipeline.start()
            console.print(f"Listening on page [bold]{page}[/bold]. Press Ctrl-C to stop.")
            if duration:
                await asyncio.sleep(duration)
            else:
                while True:
                    await asyncio.sleep(1)
        finally:
            await pipeline.close()
            await backend.cleanup()
            transcriber.cleanup()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\nStopped.")
    except PermissionDenied as e:
        console.print(f"[red]{e.message}[/red]")
        sys.exit(1)


@cli.command()
@click.argument("text")
@click.option("--context", type=click.Choice([SHOP_CONTEXT, PRODUCT_CONTEXT]), default=None,
              help="Correction vocabulary (default: global)")
def correct(text: str, context: Optional[str]) -> None:
    """Correct TEXT against the domain vocabulary."""
    console.print(VocabularyCorrector().correct(text, context))


@cli.command()
@click.argument("words", nargs=-1, required=True)
def soundex(words) -> None:
    """Print the Soundex code of each WORD."""
    table = Table("word", "code")
    for word in words:
        table.add_row(word, soundex_code(word))
    console.print(table)


@cli.command()
@click.argument("text")
@click.option("--page", default="global", show_default=True, help="Page scope to match on")
@click.pass_obj
def match(config: FieldVoiceConfig, text: str, page: str) -> None:
    """Match TEXT to a command on PAGE using the embedding backend."""

    async def run():
        backend = _embedding_backend(config)
        try:
            matcher = await _build_matcher(config, backend)
            return await matcher.match(text, page)
        finally:
            await backend.cleanup()

    try:
        result = asyncio.run(run())
    except FieldVoiceError as e:
        raise click.ClickException(e.message)

    command = result.to_command()
    console.print(f"corrected: {result.corrected_text!r}")
    console.print(f"score:     {result.score:.3f}")
    console.print(f"command:   {command.encode() if command else '[dim]none[/dim]'}")


@cli.command()
@click.argument("query", default="")
@click.option("--kind", type=click.Choice(["shop", "product"]), default="shop", show_default=True)
@click.pass_obj
def search(config: FieldVoiceConfig, query: str, kind: str) -> None:
    """Fuzzy search the shop or product catalog."""
    threshold = config.get('search.fuzzy_threshold')
    if kind == "shop":
        index = shop_search(load_shops(config.get('catalog.shops')), threshold)
        columns = ("id", "name", "address")
    else:
        index = product_search(load_products(config.get('catalog.products')), threshold)
        columns = ("id", "name", "brand", "category")

    table = Table(*columns, "distance")
    for record, distance in index.search_scored(query):
        table.add_row(*(str(getattr(record, column)) for column in columns), f"{distance:.2f}")
    console.print(table)


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("destination", type=click.Path(dir_okay=False))
@click.pass_obj
def wav(config: FieldVoiceConfig, source: str, destination: str) -> None:
    """Wrap raw 16-bit PCM from SOURCE in a WAV header."""
    assembler = WavAssembler(
        sample_rate=config.get('audio.sample_rate'),
        channels=config.get('audio.channels'),
        bits_per_sample=config.get('audio.bits_per_sample'),
    )
    try:
        data = Path(source).read_bytes()
        path = assembler.write([data] if data else [], destination)
    except FieldVoiceError as e:
        raise click.ClickException(str(e))
    console.print(f"Wrote {path}")


def main() -> None:
    """Main entry point for fieldvoice."""
    cli()


if __name__ == "__main__":
    main()
