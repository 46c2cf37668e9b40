"""CLI entry point for the career mentor assistant."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from mentor.assistant import Assistant, export_markdown
from mentor.core.config import Settings
from mentor.core.errors import EmptyInputError, InvalidStateError, UnsupportedFormatError
from mentor.core.schemas import Category, SearchPayload
from mentor.curator.results import is_search_link
from mentor.llm import available_providers

_EXIT_WORDS = {"exit", "quit", ":q"}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Career mentor - skill scan, roadmap, mock interview, job search",
    )
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--provider",
        choices=available_providers(),
        help="Override the LLM provider from settings",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    onboard = subparsers.add_parser("onboard", help="Create a profile via an intake chat")
    onboard.add_argument("--name", required=True)
    onboard.add_argument("--email", required=True)
    onboard.add_argument("--github", default="")
    onboard.add_argument("--linkedin", default="")
    onboard.add_argument("--cv", help="Path to a CV file (PDF, DOCX, TXT, MD)")

    scan = subparsers.add_parser("scan", help="Analyze code or a skills description")
    scan.add_argument("input", help="Text to analyze, or @path to read it from a file")

    for name, help_text in (
        ("roadmap", "Generate a learning roadmap"),
        ("project", "Generate a portfolio project idea"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("request", nargs="?", default="")
        p.add_argument("--export", help="Write the result to a Markdown file")

    subparsers.add_parser("interview", help="Mock interview chat")

    search = subparsers.add_parser("search", help="Search jobs and internships")
    search.add_argument("query", nargs="?", default="")
    search.add_argument("--category", help="Only show vacancies with a matching tag")

    cover = subparsers.add_parser("cover-letter", help="Write a cover letter for a job")
    cover.add_argument("job", help="Job description, or @path to read it from a file")

    history = subparsers.add_parser("history", help="List saved history")
    history.add_argument("category", choices=[c.value for c in Category])

    integrations = subparsers.add_parser("integrations", help="Toggle an integration flag")
    integrations.add_argument("name", choices=["notion", "obsidian"])

    subparsers.add_parser("logout", help="Drop the profile and all history")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _read_arg(value: str) -> str:
    """Return the argument, or the file contents for ``@path``."""
    if value.startswith("@"):
        return Path(value[1:]).read_text(encoding="utf-8")
    return value


def print_search(payload: SearchPayload, assistant: Assistant) -> None:
    view = assistant.browsing
    visible = view.visible()
    print(f"\n{payload.summary}")
    print(f"Vacancies: {len(visible)} (total {len(payload.vacancies)})")
    for c in visible:
        link = "search" if is_search_link(c.url) else "direct"
        print(f"  - {c.title} @ {c.company} [{c.location}] {c.date_posted}")
        print(f"    {c.url} ({link})")
    if payload.internships:
        print(f"Internships: {len(payload.internships)}")
        for c in payload.internships:
            print(f"  - {c.title} @ {c.company}: {c.url}")
    categories = view.categories()
    if categories:
        print("Categories: " + ", ".join(f"{tag} ({n})" for tag, n in categories))


async def cmd_onboard(assistant: Assistant, args: argparse.Namespace) -> None:
    cv_text = ""
    if args.cv:
        try:
            cv_text = assistant.load_cv(args.cv)
            print(f"Extracted {len(cv_text)} characters from {args.cv}.")
        except UnsupportedFormatError as e:
            print(f"{e} You can paste your CV text into the chat instead.", file=sys.stderr)

    session = await assistant.start_intake(
        args.name, args.email, args.github, args.linkedin, cv_text,
    )
    print(session.transcript[-1].text)
    print("(type 'done' to finish)")
    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        if line.strip().lower() == "done":
            break
        if not line.strip():
            continue
        print(await assistant.send_intake(line))

    profile = await assistant.finish_intake()
    print(f"\nProfile saved for {profile.name}.\n{profile.bio_summary}")


async def cmd_interview(assistant: Assistant) -> None:
    session = await assistant.start_interview()
    for turn in session.transcript:
        prefix = "you" if turn.speaker == "user" else "mentor"
        print(f"[{prefix}] {turn.text}")
    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        if line.strip().lower() in _EXIT_WORDS:
            break
        if not line.strip():
            continue
        print(await assistant.send_interview(line))
    assistant.sessions.terminate(session)


async def run(assistant: Assistant, args: argparse.Namespace) -> None:
    """Dispatch one subcommand."""
    if args.command == "onboard":
        await cmd_onboard(assistant, args)
        return
    if args.command == "logout":
        assistant.logout()
        print("Profile and history removed.")
        return
    if assistant.profile is None:
        print("No profile found. Run: python main.py onboard --name ... --email ...",
              file=sys.stderr)
        sys.exit(1)

    if args.command == "scan":
        entry = await assistant.scan(_read_arg(args.input))
        print(entry.payload)
    elif args.command in ("roadmap", "project"):
        generate = assistant.roadmap if args.command == "roadmap" else assistant.project
        entry = await generate(args.request)
        print(entry.payload)
        if args.export:
            print(f"Written to {export_markdown(entry, args.export)}")
    elif args.command == "interview":
        await cmd_interview(assistant)
    elif args.command == "search":
        await assistant.search(args.query)
        assistant.browsing.set_filter(args.category)
        print_search(assistant.browsing.payload, assistant)
    elif args.command == "cover-letter":
        entry = await assistant.cover_letter(_read_arg(args.job))
        print(entry.payload)
    elif args.command == "history":
        for entry in assistant.ledger.list(Category(args.category)):
            print(f"{entry.created_at:%Y-%m-%d %H:%M}  {entry.title}")
    elif args.command == "integrations":
        profile = assistant.profiles.toggle_integration(args.name)
        state = "on" if getattr(profile.integrations, args.name) else "off"
        print(f"{args.name}: {state}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)
    if args.provider:
        settings.llm.provider = args.provider

    try:
        assistant = Assistant.open(settings)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(run(assistant, args))
    except (EmptyInputError, InvalidStateError, FileNotFoundError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        assistant.close()


if __name__ == "__main__":
    main()
