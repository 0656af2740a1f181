import argparse
import asyncio
import logging
import sys
from collections.abc import AsyncIterator

from .config import DATABASE_URL, LOG_FORMAT, LOG_LEVEL
from .constants import SAMPLE_FEEDBACK, SEPARATOR_LENGTH, TIME_FORMAT
from .exceptions import ProxyNodeError
from .models.category import Category
from .models.feedback import FeedbackRecord, InputModality
from .models.model_state import ModelPhase, ModelState
from .processing import BatchSubmitter, FeedbackRepository
from .providers import MockInferenceProvider, OllamaProvider

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging to stdout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else LOG_LEVEL,
        format=LOG_FORMAT,
        stream=sys.stdout,
    )

    # Suppress HTTP request logging from httpx/OpenAI
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proxynode",
        description="Anonymize, summarize and categorize student feedback on-device.",
    )
    parser.add_argument("--db", default=DATABASE_URL, help="SQLAlchemy database URL")
    parser.add_argument(
        "--mock", action="store_true", help="Use the mock inference provider"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("init", help="Check, download and load the local model")

    submit = commands.add_parser("submit", help="Analyze and store one feedback text")
    submit.add_argument("text")
    submit.add_argument(
        "--voice", action="store_true", help="Mark the text as spoken input"
    )

    commands.add_parser("history", help="Show feedback submitted from this device")

    listing = commands.add_parser("list", help="Show all stored feedback")
    listing.add_argument(
        "--category",
        choices=[category.value for category in Category],
        help="Only show one category",
    )

    commands.add_parser("stats", help="Show feedback counts per category")
    commands.add_parser("seed", help="Submit the built-in sample feedback")

    clear = commands.add_parser("clear", help="Delete all stored feedback")
    clear.add_argument("--yes", action="store_true", help="Skip confirmation")
    return parser


def print_state(state: ModelState) -> None:
    # Download progress rewrites one line
    if state.phase is ModelPhase.DOWNLOADING:
        print(f"\r{state.describe()}", end="", flush=True)
    elif state.phase is ModelPhase.LOADING_INTO_MEMORY:
        print(f"\n{state.describe()}")
    else:
        print(state.describe())


def print_records(records: list[FeedbackRecord]) -> None:
    if not records:
        print("No feedback stored.")
        return
    for record in records:
        source = "voice" if record.is_voice_input else "typed"
        print("-" * SEPARATOR_LENGTH)
        print(
            f"#{record.id}  {record.created_at.strftime(TIME_FORMAT)}  "
            f"[{record.category.display_name}]  ({source})"
        )
        print(f"Summary:    {record.summary}")
        print(f"Anonymized: {record.anonymized_text}")
    print("-" * SEPARATOR_LENGTH)


async def first_snapshot(stream: AsyncIterator[list[FeedbackRecord]]) -> list[FeedbackRecord]:
    """Read the current snapshot of a live stream and stop listening."""
    try:
        return await anext(stream)
    finally:
        await stream.aclose()


async def run_command(args: argparse.Namespace, repository: FeedbackRepository) -> int:
    if args.command == "init":
        repository.model_manager.add_state_listener(print_state)
        ready = await repository.initialize_ai()
        return 0 if ready else 1

    if args.command == "submit":
        result = await repository.submit(
            args.text, InputModality.from_voice_flag(args.voice)
        )
        if not result.ok:
            print(f"Submission failed: {result.error}")
            return 1
        print(f"Stored feedback #{result.record_id}")
        return 0

    if args.command == "history":
        print_records(await first_snapshot(repository.stream_user_feedback()))
        return 0

    if args.command == "list":
        if args.category:
            stream = repository.stream_by_category(Category.from_string(args.category))
        else:
            stream = repository.stream_all()
        print_records(await first_snapshot(stream))
        return 0

    if args.command == "stats":
        print((await repository.compute_stats()).to_display_string())
        return 0

    if args.command == "seed":
        submitter = BatchSubmitter(repository)
        submitter.set_progress_callback(
            lambda done, total: print(f"\rSubmitted {done}/{total}", end="", flush=True)
        )
        results = await submitter.submit_all(SAMPLE_FEEDBACK)
        print()
        failures = [r for r in results if not r.ok]
        for failure in failures:
            print(f"Submission failed: {failure.error}")
        return 1 if failures else 0

    if args.command == "clear":
        if not args.yes:
            answer = input("Delete all stored feedback? This cannot be undone [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                print("Aborted.")
                return 1
        removed = await repository.clear_all()
        print(f"Deleted {removed} records")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


async def run(args: argparse.Namespace) -> int:
    provider = MockInferenceProvider() if args.mock else OllamaProvider()
    repository = FeedbackRepository.create(provider=provider, database_url=args.db)
    try:
        return await run_command(args, repository)
    except ProxyNodeError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    finally:
        await repository.aclose()


def main(argv: list[str] | None = None) -> None:
    """Run the ProxyNode command line."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
