"""
Command-line interface for musicpak.

This module implements the CLI using Click, providing commands to build,
inspect and edit music packages (.dmpak) and to preview their lyrics.
rich-click is used for the output colors.

Commands:
    musicpak new <output>                 Create a package from files
    musicpak info <package>               Show metadata and assets
    musicpak edit <package>               Change fields or replace assets
    musicpak extract <package> <dir>      Write the assets out as files
    musicpak lyrics <package>             Print parsed lyrics
    musicpak preview <package>            Play lyrics along a simulated clock

Usage:
    # Build a package (empty tags are filled from the audio file)
    musicpak new song.dmpak --audio song.mp3 --cover cover.png \\
        --lyrics song.lrc --title "Song"

    # Build into a directory; the filename comes from artist and title
    musicpak new ~/Packages --audio song.mp3

    # Edit in place, or save as a new file
    musicpak edit song.dmpak --set year=2024 --set comment=
    musicpak edit song.dmpak --remove-cover -o song-nocover.dmpak

    # Lyrics
    musicpak lyrics song.dmpak --at 75000
    musicpak preview song.dmpak --speed 4

Configuration:
    An optional config.yaml in the current directory (or --config) sets the
    default audio filename, the lyrics poll interval, the preview temp
    directory and file logging.

Exit Codes:
    1: Configuration error or invalid usage
    2: Package could not be loaded
    3: Package could not be saved
    4: Any other error (unreadable input file, empty input, ...)
"""

import sys
import time
from pathlib import Path
from typing import Optional

import rich_click as click
import yaml
from tqdm import tqdm

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "musicpak new": [
        {
            "name": "Assets",
            "options": ["--audio", "--cover", "--lyrics", "--lyrics-format"],
        },
        {
            "name": "Metadata",
            "options": ["--title", "--artist", "--album", "--genre", "--year", "--comment", "--set"],
        },
    ],
    "musicpak edit": [
        {
            "name": "Assets",
            "options": ["--audio", "--cover", "--lyrics", "--lyrics-format", "--remove-cover", "--clear-lyrics"],
        },
        {
            "name": "Metadata",
            "options": ["--set"],
        },
    ],
}

from musicpak import __version__
from musicpak.core import (
    Config,
    ConfigError,
    LoadError,
    SaveError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from musicpak.core.logger import format_status_message
from musicpak.lyrics import LyricFormat, LyricsCursor, format_lyric_time
from musicpak.package import FIELD_NAMES, EditorSession, PackageModel
from musicpak.playback import LyricsPoller, SimulatedClock
from musicpak.utils import (
    ensure_directory,
    generate_package_filename,
    parse_assignment,
    sanitize_filename,
)

logger = get_logger(__name__)


# Simulated tail after the last lyric line when the duration is unknown
PREVIEW_TAIL_MS = 5000

LYRIC_FORMAT_CHOICES = [fmt.name.lower().replace("_", "-") for fmt in LyricFormat]


@click.group(invoke_without_command=True)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml if present)"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug output on the console"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool, version: bool) -> None:
    """
    musicpak: Build and edit DMusicPak music packages.

    A package bundles one audio track with its metadata, an optional cover
    image and optional (synchronized) lyrics in a single .dmpak file.

    \b
    BASIC USAGE:
        musicpak new song.dmpak --audio song.mp3 --lyrics song.lrc
        musicpak info song.dmpak
        musicpak edit song.dmpak --set title="New Title"
    """
    if version:
        click.echo(f"musicpak {__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    level = "DEBUG" if verbose else config.logging.level
    setup_logging(config.logging.directory, level)
    ctx.call_on_close(shutdown_logging)
    ctx.obj = config


# =============================================================================
# new
# =============================================================================

@cli.command()
@click.argument("output", type=click.Path(path_type=Path))
@click.option("--audio", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Audio file to embed")
@click.option("--cover", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Cover image (jpg, png, webp, bmp)")
@click.option("--lyrics", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Lyrics file (.lrc is read as timed lyrics)")
@click.option("--lyrics-format", type=click.Choice(LYRIC_FORMAT_CHOICES, case_sensitive=False),
              default=None, help="Declared lyrics format")
@click.option("--title", default=None, help="Track title")
@click.option("--artist", default=None, help="Artist name")
@click.option("--album", default=None, help="Album name")
@click.option("--genre", default=None, help="Genre")
@click.option("--year", default=None, help="Release year")
@click.option("--comment", default=None, help="Free-form comment")
@click.option("--set", "assignments", multiple=True, metavar="<field=value>",
              help="Set any metadata field (repeatable)")
@click.option("--force", is_flag=True, help="Overwrite an existing package")
@click.pass_obj
def new(
    config: Config,
    output: Path,
    audio: Optional[Path],
    cover: Optional[Path],
    lyrics: Optional[Path],
    lyrics_format: Optional[str],
    title: Optional[str],
    artist: Optional[str],
    album: Optional[str],
    genre: Optional[str],
    year: Optional[str],
    comment: Optional[str],
    assignments: tuple[str, ...],
    force: bool
) -> None:
    """
    Create a new package.

    OUTPUT is the package file to write, or an existing directory, in which
    case the filename is built from the artist and title.
    """
    fields = _collect_assignments(assignments)
    explicit = {
        "title": title, "artist": artist, "album": album,
        "genre": genre, "year": year, "comment": comment,
    }
    fields.update({name: value for name, value in explicit.items() if value is not None})

    session = EditorSession(config)
    _check(session, session.new_package())

    # Explicit values first, so the audio tags only fill what is left
    for name, value in fields.items():
        _check(session, session.edit_field(name, value))
    if audio is not None:
        _check(session, session.import_audio_file(audio))
    if cover is not None:
        _check(session, session.import_cover_file(cover))
    if lyrics is not None:
        _check(session, session.import_lyrics_file(lyrics, _lyric_format(lyrics_format)))
    elif lyrics_format is not None:
        _check(session, session.set_lyrics_format(_lyric_format(lyrics_format)))

    if output.is_dir():
        metadata = session.model.get_metadata()
        output = output / generate_package_filename(metadata.title, metadata.artist)
    if output.exists() and not force:
        raise click.UsageError(f"{output} already exists (use --force to overwrite)")

    _check(session, session.save_package(output))
    click.echo(format_status_message(True, f"Created {output}"))


# =============================================================================
# info
# =============================================================================

@cli.command()
@click.argument("package", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def info(config: Config, package: Path) -> None:
    """Show the metadata and assets of PACKAGE."""
    model = _open_model(config, package)
    metadata = model.get_metadata()

    click.echo("=" * 60)
    click.echo(package.name)
    click.echo("=" * 60)
    for name in FIELD_NAMES:
        value = getattr(metadata, name)
        if name == "duration_ms" and value:
            value = f"{value} ({format_lyric_time(value)})"
        click.echo(f"{name + ':':<18}{value}")
    click.echo("-" * 60)

    audio = model.get_audio()
    if audio is not None:
        click.echo(f"{'Audio:':<18}{audio.filename} • {audio.content_type} • {audio.display_size}")
    else:
        click.echo(f"{'Audio:':<18}(none)")

    cover = model.get_cover()
    if cover is not None:
        click.echo(f"{'Cover:':<18}{cover.format.name} • {cover.info_text}")
    else:
        click.echo(f"{'Cover:':<18}(none)")

    lyrics = model.get_lyrics()
    if lyrics is not None:
        detail = f"{len(lyrics.lines)} timed lines" if lyrics.is_synced else f"{len(lyrics.text)} characters"
        click.echo(f"{'Lyrics:':<18}{lyrics.format.name} • {detail}")
    else:
        click.echo(f"{'Lyrics:':<18}(none)")
    click.echo("=" * 60)


# =============================================================================
# edit
# =============================================================================

@cli.command()
@click.argument("package", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--set", "assignments", multiple=True, metavar="<field=value>",
              help="Set a metadata field (repeatable, empty value clears text)")
@click.option("--audio", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Replace the audio")
@click.option("--cover", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Replace the cover")
@click.option("--lyrics", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Replace the lyrics text")
@click.option("--lyrics-format", type=click.Choice(LYRIC_FORMAT_CHOICES, case_sensitive=False),
              default=None, help="Change the declared lyrics format")
@click.option("--remove-cover", is_flag=True, help="Remove the cover")
@click.option("--clear-lyrics", is_flag=True, help="Remove the lyrics")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Save to another file instead of in place")
@click.pass_obj
def edit(
    config: Config,
    package: Path,
    assignments: tuple[str, ...],
    audio: Optional[Path],
    cover: Optional[Path],
    lyrics: Optional[Path],
    lyrics_format: Optional[str],
    remove_cover: bool,
    clear_lyrics: bool,
    output: Optional[Path]
) -> None:
    """Change metadata fields or replace assets of PACKAGE."""
    if cover is not None and remove_cover:
        raise click.UsageError("Cannot use both --cover and --remove-cover")
    if lyrics is not None and clear_lyrics:
        raise click.UsageError("Cannot use both --lyrics and --clear-lyrics")

    fields = _collect_assignments(assignments)

    session = EditorSession(config)
    _check(session, session.open_package(package))

    for name, value in fields.items():
        _check(session, session.edit_field(name, value))
    if audio is not None:
        _check(session, session.import_audio_file(audio))
    if cover is not None:
        _check(session, session.import_cover_file(cover))
    if remove_cover:
        _check(session, session.remove_cover())
    if clear_lyrics:
        _check(session, session.clear_lyrics())
    if lyrics is not None:
        _check(session, session.import_lyrics_file(lyrics, _lyric_format(lyrics_format)))
    elif lyrics_format is not None:
        _check(session, session.set_lyrics_format(_lyric_format(lyrics_format)))

    if not session.model.is_modified and output is None:
        click.echo("Nothing to change")
        return

    _check(session, session.save_package(output))
    click.echo(format_status_message(True, f"Saved {output or package}"))


# =============================================================================
# extract
# =============================================================================

@cli.command()
@click.argument("package", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path))
@click.pass_obj
def extract(config: Config, package: Path, directory: Path) -> None:
    """
    Write the assets of PACKAGE into DIRECTORY.

    \b
    Files written:
        <audio filename>    Audio exactly as stored
        cover.<ext>         Cover image, if any
        lyrics.lrc / .txt   Lyrics text, if any
        metadata.yaml       Metadata fields
    """
    model = _open_model(config, package)

    try:
        ensure_directory(directory)
        written = []

        audio = model.get_audio()
        if audio is not None:
            audio_path = directory / (sanitize_filename(audio.filename) or config.editor.default_audio_filename)
            audio_path.write_bytes(audio.data)
            written.append(audio_path)

        cover = model.get_cover()
        if cover is not None:
            cover_path = directory / f"cover{cover.format.extension}"
            cover_path.write_bytes(cover.data)
            written.append(cover_path)

        lyrics = model.get_lyrics()
        if lyrics is not None:
            lyrics_path = directory / ("lyrics.lrc" if lyrics.is_synced else "lyrics.txt")
            lyrics_path.write_bytes(lyrics.data)
            written.append(lyrics_path)

        metadata_path = directory / "metadata.yaml"
        metadata_path.write_text(
            yaml.safe_dump(model.get_metadata().to_dict(), allow_unicode=True, sort_keys=False),
            encoding="utf-8",
        )
        written.append(metadata_path)
    except OSError as e:
        click.echo(f"Error: failed to extract: {e}", err=True)
        logger.error(f"Extract failed: {e}", exc_info=True)
        sys.exit(4)

    for path in written:
        click.echo(f"  {path}")
    click.echo(format_status_message(True, f"Extracted {len(written)} files to {directory}"))


# =============================================================================
# lyrics / preview
# =============================================================================

@cli.command()
@click.argument("package", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--at", "at_ms", type=int, default=None, metavar="<ms>",
              help="Mark the line that is current at this position")
@click.pass_obj
def lyrics(config: Config, package: Path, at_ms: Optional[int]) -> None:
    """Print the lyrics of PACKAGE, with timestamps for timed lyrics."""
    model = _open_model(config, package)
    asset = model.get_lyrics()
    if asset is None:
        click.echo("No lyrics")
        return

    if not asset.lines:
        click.echo(asset.text)
        return

    cursor = LyricsCursor(asset.lines)
    if at_ms is not None:
        cursor.update(at_ms)

    for index, line in enumerate(asset.lines):
        marker = ">" if index == cursor.index else " "
        click.echo(f"{marker} [{format_lyric_time(line.time_ms)}] {line.text}")


@cli.command()
@click.argument("package", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--speed", type=click.FloatRange(min=0, min_open=True), default=1.0,
              show_default=True, help="Playback speed multiplier")
@click.option("--interval", "interval_ms", type=click.IntRange(min=1), default=None,
              metavar="<ms>", help="Poll interval (default from config)")
@click.pass_obj
def preview(config: Config, package: Path, speed: float, interval_ms: Optional[int]) -> None:
    """
    Play the lyrics of PACKAGE along a simulated clock.

    The package audio is written to a temporary file for an external
    player while the lyrics run; it is removed when the preview ends.
    """
    session = EditorSession(config)
    _check(session, session.open_package(package))

    lines = session.cursor.lines
    if not lines:
        click.echo("No timed lyrics to preview")
        return

    duration_ms = session.model.get_metadata().duration_ms or lines[-1].time_ms + PREVIEW_TAIL_MS
    interval_ms = interval_ms or config.playback.poll_interval_ms

    buffer = session.prepare_preview()
    if buffer is not None:
        click.echo(f"Audio: {buffer.path} ({buffer.content_type})")

    clock = SimulatedClock(duration_ms, speed=speed)
    poller = LyricsPoller(clock, session.cursor, interval_ms=interval_ms,
                          on_ended=session.on_playback_ended)

    with tqdm(total=duration_ms // 1000, unit="s", desc="Preview", leave=False) as progress:
        def on_line_changed(old_index: int, new_index: int) -> None:
            if new_index >= 0:
                line = lines[new_index]
                tqdm.write(f"[{format_lyric_time(line.time_ms)}] {line.text}")

        session.cursor.add_listener(on_line_changed)
        clock.start()
        try:
            while poller.tick():
                session.position_ms = clock.position_ms
                progress.n = session.position_ms // 1000
                progress.set_postfix_str(session.playback_time_text)
                time.sleep(interval_ms / 1000)
        except KeyboardInterrupt:
            click.echo("\nInterrupted by user", err=True)
        finally:
            session.cursor.remove_listener(on_line_changed)
            session.close()

    click.echo(format_status_message(True, "Playback finished"))


# =============================================================================
# Helpers
# =============================================================================

def _collect_assignments(assignments: tuple[str, ...]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for text in assignments:
        try:
            name, value = parse_assignment(text)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--set") from e
        if name not in FIELD_NAMES:
            raise click.BadParameter(
                f"Unknown field {name!r} (choose from {', '.join(FIELD_NAMES)})",
                param_hint="--set"
            )
        fields[name] = value
    return fields


def _lyric_format(choice: Optional[str]) -> Optional[LyricFormat]:
    return LyricFormat.from_name(choice) if choice else None


def _open_model(config: Config, package: Path) -> PackageModel:
    model = PackageModel(window_title=config.editor.window_title)
    try:
        model.load(package)
    except LoadError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Load failed: {e.message} ({e.details})")
        sys.exit(2)
    return model


def _check(session: EditorSession, ok: bool) -> None:
    """Exit with the matching code if a session operation failed."""
    if ok:
        return

    error = session.last_error
    click.echo(format_status_message(False, session.status_text), err=True)
    if isinstance(error, LoadError):
        sys.exit(2)
    if isinstance(error, SaveError):
        sys.exit(3)
    sys.exit(4)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `musicpak` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
