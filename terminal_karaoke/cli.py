from __future__ import annotations

from pathlib import Path

import typer

from terminal_karaoke.app import describe_schedule, load_document, play
from terminal_karaoke.config import PlayerConfig, load_config
from terminal_karaoke.errors import LyricsFileNotFound, NoTimedLyrics
from terminal_karaoke.logging_setup import setup_logging
from terminal_karaoke.render.finale import FinaleKind


app = typer.Typer(add_completion=False)


def _override(cfg: PlayerConfig, **changes) -> PlayerConfig:
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        return cfg
    return cfg.__class__(**{**cfg.__dict__, **changes})


@app.command()
def main_command(
    lrc_path: Path = typer.Argument(..., metavar="LRC_FILE", help="Lyrics file with [mm:ss.xx] timestamps"),
    speed: float | None = typer.Option(None, "--speed", help="Playback speed multiplier (> 0, default 1.0)"),
    typing: int | None = typer.Option(None, "--typing", help="Milliseconds per typed character, 0 = instant (default 18)"),
    offset_ms: int | None = typer.Option(None, "--offset-ms", "--offsetMs", help="Shift every lyric by this many ms (may be negative)"),
    finale: FinaleKind | None = typer.Option(None, "--finale", case_sensitive=False, help="Animation after the last line"),
    bpm: float | None = typer.Option(None, "--bpm", help="Tempo for the beat pulse, 0 = off"),
    pulse: bool | None = typer.Option(None, "--pulse/--no-pulse", help="Show the beat pulse (needs --bpm)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the parsed schedule instead of playing"),
):
    """
    Type out timed lyrics in the terminal, in sync with a virtual clock.
    """
    setup_logging(debug)
    cfg = _override(
        load_config(),
        speed=speed,
        typing_ms=typing,
        offset_ms=offset_ms,
        finale=finale,
        bpm=bpm,
        pulse=pulse,
    ).normalized()

    try:
        if dry_run:
            doc, stats = load_document(lrc_path)
            typer.echo(f"lines_total={stats.lines_total}")
            typer.echo(f"lines_with_timestamps={stats.lines_with_timestamps}")
            typer.echo(f"lines_ignored={stats.lines_ignored}")
            typer.echo(f"events_total={stats.events_total}")
            typer.echo(f"tags={doc.tags or {}}")
            for line in describe_schedule(cfg, doc):
                typer.echo(line)
            return
        code = play(cfg, lrc_path)
    except LyricsFileNotFound as e:
        typer.secho(str(e), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except NoTimedLyrics as e:
        typer.secho(str(e), err=True, fg=typer.colors.YELLOW)
        raise typer.Exit(code=0)

    raise typer.Exit(code=code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
