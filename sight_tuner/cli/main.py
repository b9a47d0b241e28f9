"""Main entry point for the Sight Tuner CLI."""

import random
import sys
from typing import List, Optional

import click
import pyfiglet

from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..core.interfaces import IRenderer
from ..detection.stability_filter import SMOOTHING_MODES
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import DISPLAY_MODES, SILENT, GuessResult
from ..note_utils import note_name, remove_octave
from ..services.tuner_service import analyze_stream
from ..staff import DrawCommand, is_flat, needs_ledger_line

logger = get_logger(__name__)


class ConsoleRenderer(IRenderer):
    """Prints tuner output to the terminal."""

    def __init__(self):
        self._last_text: Optional[str] = None

    def show_value(self, text: str) -> None:
        # Only print changes, the tuner repeats itself every frame
        if text != self._last_text:
            click.echo(f"  {text}")
            self._last_text = text

    def show_guess(self, result: GuessResult) -> None:
        if result.correct:
            click.echo(click.style(f"  ✔ {result.played} is right!", fg="green", bold=True))
        else:
            click.echo(
                click.style(f"  ✘ {result.played} is not {remove_octave(result.target)}", fg="red")
            )

    def show_target(self, note: str, commands: List[DrawCommand]) -> None:
        click.echo("Play this note:")
        click.echo(pyfiglet.figlet_format(note))
        details = []
        if is_flat(note):
            details.append("flat")
        if needs_ledger_line(note):
            details.append("ledger line")
        if details:
            click.echo(f"({', '.join(details)})")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override log level for all sight_tuner modules",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default ~/.config/sight_tuner)",
)
@click.pass_context
def cli(ctx, log_level, config_dir):
    """Sight Tuner - read notes off the staff and play them."""
    setup_logging(log_level)
    ctx.obj = ComponentFactory(ConfigManager(config_dir))


def validate_smoothing(ctx, param, value):
    """Accept built-in smoothing modes and any defined in the config."""
    if value is None:
        return value
    modes = ctx.find_object(ComponentFactory).config_manager.smoothing_modes()
    if value not in modes:
        raise click.BadParameter(f"'{value}' is not one of {', '.join(sorted(modes))}")
    return value


smoothing_option = click.option(
    "--smoothing",
    default=None,
    callback=validate_smoothing,
    help=f"Smoothing mode: {', '.join(SMOOTHING_MODES)} or one from config (default from config)",
)
display_option = click.option(
    "--display",
    type=click.Choice(list(DISPLAY_MODES)),
    default=None,
    help="Show pitch classes, whole Hz, or raw Hz (default from config)",
)


@cli.command()
@click.option("--duration", "-t", type=float, default=None, help="Stop after N seconds")
@click.option("--device", type=int, default=None, help="Audio input device ID")
@click.option("--no-game", is_flag=True, help="Tuner only, no target notes")
@smoothing_option
@display_option
@click.pass_obj
def listen(factory, duration, device, no_game, smoothing, display):
    """Listen to the microphone and judge played notes."""
    pipeline = factory.create_pipeline(
        smoothing=smoothing, display=display, with_game=not no_game
    )
    renderer = ConsoleRenderer()
    pipeline.attach_renderer(renderer)

    service = factory.create_service(factory.create_live_provider(device), pipeline)
    try:
        service.run(duration)
    except KeyboardInterrupt:
        service.stop()
    finally:
        pipeline.events.detach_renderer(renderer)

    if pipeline.game is not None:
        stats = pipeline.game.stats
        click.echo(f"\nCorrect: {stats['correct_notes']} / {stats['total_notes']}")
        if stats["times"]:
            avg_time = sum(stats["times"]) / len(stats["times"])
            click.echo(f"Average time per note: {avg_time:.2f} seconds")


@cli.command()
@click.argument("wav_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--target", default=None, help="Initial target note (e.g. C4)")
@click.option("--seed", type=int, default=None, help="Seed for target selection")
@smoothing_option
@display_option
@click.pass_obj
def analyze(factory, wav_file, target, seed, smoothing, display):
    """Run a recording through the tuner and print what it would show."""
    pipeline = factory.create_pipeline(
        smoothing=smoothing,
        display=display,
        rng=random.Random(seed),
        initial_target=target,
    )
    provider = factory.create_wav_provider(wav_file, realtime=False)
    audio_config = factory.config_manager.get_config("audio_input")

    click.echo(f"Target: {pipeline.game.current_target}")
    last_text = None
    for result in analyze_stream(
        pipeline,
        provider.chunks(),
        provider.sample_rate,
        buffer_size=audio_config["buffer_size"],
        frame_rate=audio_config["frame_rate"],
    ):
        if result.stable is not None and result.stable.display_text() != last_text:
            last_text = result.stable.display_text()
            click.echo(f"  {last_text}")
        if result.guess is not None:
            verdict = "match" if result.guess.correct else "no match"
            click.echo(
                f"  {result.guess.timestamp:7.2f}s {result.guess.played} vs "
                f"{result.guess.target}: {verdict}"
            )

    stats = pipeline.game.stats
    click.echo(f"Correct: {stats['correct_notes']} / {stats['total_notes']}")


@cli.command()
@click.argument("wav_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--buffer-size", type=int, default=None, help="Samples per window")
@click.pass_obj
def estimate(factory, wav_file, buffer_size):
    """Print the raw pitch estimate for each window of a recording."""
    buffer_size = buffer_size or factory.config_manager.get_config("audio_input")["buffer_size"]
    estimator = factory.create_estimator()
    provider = factory.create_wav_provider(wav_file, chunk_size=buffer_size, realtime=False)

    for index, chunk in enumerate(provider.chunks()):
        if chunk.size < buffer_size:
            break
        frequency = estimator.estimate(chunk, provider.sample_rate)
        start = index * buffer_size / provider.sample_rate
        if frequency is SILENT:
            click.echo(f"{start:7.2f}s  silent")
        else:
            click.echo(f"{start:7.2f}s  {frequency:8.2f} Hz  {note_name(frequency)}")


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        cli.main(args=args, prog_name="sight-tuner", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
