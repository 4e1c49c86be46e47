"""Command-line interface for typst-spell."""

from pathlib import Path

import click
from loguru import logger
from pydantic import ValidationError
from rich.console import Console

from typst_spell import __version__, configure_logging, install_exception_hook
from typst_spell.config import Settings, get_settings
from typst_spell.dictionary import Dictionary
from typst_spell.output import Reporter
from typst_spell.walker import check_text
from typst_spell.watcher import FileWatcher
from typst_spell.word_list import WordListManager

console = Console()

TYPST_SUFFIX = ".typ"


def configure_verbose_logging(log_file: str | None = None) -> None:
    """Print debug logging through the console."""
    configure_logging(
        log_file=log_file,
        level="DEBUG",
        sink=lambda msg: console.print(msg, end="", markup=False, highlight=False),
    )
    console.print("[dim]Debug logging enabled[/dim]")


def configure_quiet_logging(log_file: str | None = None) -> None:
    """Log warnings to the log file only; the console shows reported problems instead."""
    configure_logging(log_file=log_file, level="WARNING", console=False)


def load_settings_or_abort() -> Settings:
    """Load settings from the environment or abort with a helpful error message."""
    try:
        return get_settings()
    except ValidationError as e:
        console.print("[bold red]Error:[/bold red] Invalid configuration")
        console.print("\nCheck the TYPST_SPELL_* variables in your environment or .env file.")
        console.print(f"Details: {e}", markup=False)
        raise click.Abort from e


def validate_word_file(words_file: Path) -> None:
    """Validate that the word file exists and is a file."""
    if not words_file.exists():
        console.print(f"[bold red]Error:[/bold red] Word file not found: {words_file}")
        raise click.Abort

    if not words_file.is_file():
        console.print(
            f"[bold red]Error:[/bold red] Path is not a file (it's a directory): {words_file}"
        )
        raise click.Abort


def load_words(dictionary: Dictionary, words_file: Path, word_lists: WordListManager) -> None:
    """Merge the supplementary word list into the dictionary or abort."""
    try:
        words = word_lists.load_from_file(words_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] Failed to load word list: {e}")
        raise click.Abort from e
    dictionary.add_words(word_lists.unmerged(words))


def reload_words(dictionary: Dictionary, words_file: Path, word_lists: WordListManager) -> None:
    """Merge the words a changed word list gained, keeping the old words on failure."""
    logger.info(f"Reloading word list {words_file}")
    try:
        words = word_lists.load_from_file(words_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold yellow]Warning:[/bold yellow] Word list not reloaded: {e}")
        return
    dictionary.add_words(word_lists.unmerged(words))


def build_dictionary(
    settings: Settings,
    languages: tuple[str, ...],
    words_file: Path | None,
    word_lists: WordListManager,
) -> Dictionary:
    """Load the dictionaries and the supplementary word list, or abort."""
    try:
        dictionary = Dictionary.load(
            languages or settings.language,
            distance=settings.distance,
            max_suggestions=settings.max_suggestions,
        )
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise click.Abort from e

    if words_file is not None:
        load_words(dictionary, words_file, word_lists)
    return dictionary


def collect_documents(path: Path) -> list[Path]:
    """Return the Typst documents at ``path``: the file itself or all .typ files below it."""
    if path.is_dir():
        return sorted(candidate for candidate in path.rglob(f"*{TYPST_SUFFIX}") if candidate.is_file())
    return [path]


def check_file(path: Path, dictionary: Dictionary, reporter: Reporter) -> int:
    """Run one complete check pass over a document.

    Args:
        path: Document to check
        dictionary: Dictionary to check against
        reporter: Sink printing the diagnostics

    Returns:
        Number of unknown words found

    Raises:
        FileNotFoundError: If the document does not exist
        ValueError: If the document is not valid UTF-8
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        msg = f"File encoding error in {path}: {e}"
        logger.error(msg)
        raise ValueError(msg) from e

    logger.debug(f"Checking {path}")
    reporter.begin()
    diagnostics = check_text(
        text,
        dictionary,
        str(path),
        on_diagnostic=lambda diagnostic: reporter.report(diagnostic, text),
    )
    reporter.end()
    logger.debug(f"Found {len(diagnostics)} unknown word(s) in {path}")
    return len(diagnostics)


def common_options(func):
    """Attach the arguments and options shared by ``check`` and ``watch``."""
    decorators = [
        click.argument(
            "path",
            type=click.Path(exists=True, file_okay=True, dir_okay=True, path_type=Path),
        ),
        click.option(
            "--language",
            "-l",
            "languages",
            multiple=True,
            help="Document language (repeatable, e.g. -l en -l de). Default: en",
        ),
        click.option(
            "--style",
            "-s",
            type=click.Choice(["pretty", "plain", "json"]),
            default=None,
            help="Output style. Use plain for easy regex evaluation. Default: pretty",
        ),
        click.option(
            "--context-length",
            type=click.IntRange(min=0),
            default=None,
            help="Characters shown before and after the word with pretty output. Default: 80",
        ),
        click.option(
            "--words",
            "-w",
            "words_file",
            type=click.Path(path_type=Path),
            default=None,
            help="Path to a file with additional words (one word per line)",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Enable debug logging",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def prepare(
    languages: tuple[str, ...],
    style: str | None,
    context_length: int | None,
    words_file: Path | None,
    verbose: bool,
    word_lists: WordListManager,
) -> tuple[Settings, Dictionary, Reporter, Path | None]:
    """Configure logging and build the collaborators of a run."""
    settings = load_settings_or_abort()

    if verbose:
        configure_verbose_logging(settings.log_file)
    else:
        configure_quiet_logging(settings.log_file)

    if words_file is None and settings.words_file:
        words_file = Path(settings.words_file)
    if words_file is not None:
        validate_word_file(words_file)

    dictionary = build_dictionary(settings, languages, words_file, word_lists)
    reporter = Reporter(
        style=style or settings.style,
        context_length=settings.context_length if context_length is None else context_length,
        console=console,
    )
    return settings, dictionary, reporter, words_file


def run_checks(documents: list[Path], dictionary: Dictionary, reporter: Reporter) -> int:
    """Check every document, aborting on unreadable files."""
    total = 0
    for document in documents:
        try:
            total += check_file(document, dictionary, reporter)
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[bold red]Error:[/bold red] Failed to check {document}: {e}")
            raise click.Abort from e
    return total


@click.group()
@click.version_option(__version__, prog_name="typst-spell")
def cli() -> None:
    """Spell check Typst documents."""
    install_exception_hook()


@cli.command()
@common_options
def check(
    path: Path,
    languages: tuple[str, ...],
    style: str | None,
    context_length: int | None,
    words_file: Path | None,
    verbose: bool,
) -> None:
    """Check PATH, a .typ file or a directory of them, for unknown words."""
    _, dictionary, reporter, _ = prepare(
        languages, style, context_length, words_file, verbose, WordListManager()
    )

    documents = collect_documents(path)
    if not documents:
        console.print(f"[bold yellow]Warning:[/bold yellow] No {TYPST_SUFFIX} files found in {path}")
        return

    total = run_checks(documents, dictionary, reporter)
    logger.info(f"Found {total} unknown word(s) in {len(documents)} document(s)")


@cli.command()
@common_options
@click.option(
    "--delay",
    "-d",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Delay in seconds between checks for changes. Default: 0.1",
)
def watch(
    path: Path,
    languages: tuple[str, ...],
    style: str | None,
    context_length: int | None,
    words_file: Path | None,
    verbose: bool,
    delay: float | None,
) -> None:
    """Check PATH, then check every .typ file below it again whenever it changes.

    Changes to the word list are merged into the dictionary before the next check.
    """
    word_lists = WordListManager()
    settings, dictionary, reporter, words_file = prepare(
        languages, style, context_length, words_file, verbose, word_lists
    )
    run_checks(collect_documents(path), dictionary, reporter)

    watched_words = words_file.resolve() if words_file is not None else None
    watcher = FileWatcher(
        path,
        settings.delay if delay is None else delay,
        extra_files=[watched_words] if watched_words is not None else [],
    )
    logger.info(f"Watching {path} for changes")

    try:
        for changed in watcher.watch():
            # New words apply to the documents of the same batch
            if watched_words in changed:
                reload_words(dictionary, watched_words, word_lists)
            for changed_path in changed:
                if changed_path == watched_words or changed_path.suffix != TYPST_SUFFIX:
                    continue
                try:
                    check_file(changed_path, dictionary, reporter)
                except (FileNotFoundError, ValueError) as e:
                    console.print(f"[bold yellow]Warning:[/bold yellow] Skipping {changed_path}: {e}")
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching[/dim]")


if __name__ == "__main__":
    cli()
