"""Command-line interface: ``ai-client generic`` and ``ai-client prompt``.

Input comes from the positional arguments (joined with spaces) or, when none
are given, from standard input. The response is printed between separator
lines; the exit status reflects the kind of failure.
"""

import argparse
import asyncio
from collections.abc import Callable, Sequence
import logging
import sys
from typing import TextIO, TypeAlias

from ai_client.config import ClientSettings, load_settings
from ai_client.constants import DEFAULT_MODEL, DEFAULT_REQUEST_TIMEOUT
from ai_client.exceptions import AIClientError, ErrorKind, ValidationError
from ai_client.gemini_client import GeminiClient, GenerativeModel
from ai_client.prompts import PromptBuilder, PromptTemplates
from ai_client.runner import Runner

log = logging.getLogger(__name__)

SEPARATOR = "=" * 46

EXIT_OK = 0
EXIT_TIMEOUT = 124
EXIT_INTERRUPTED = 130
EXIT_CODES = {
    ErrorKind.CONFIGURATION: 2,
    ErrorKind.INVALID_INPUT: 2,
    ErrorKind.CONTENT_BLOCKED: 3,
    ErrorKind.TRANSPORT: 4,
    ErrorKind.RETRIES_EXHAUSTED: 5,
    ErrorKind.UPLOAD: 6,
}

ClientFactory: TypeAlias = Callable[[ClientSettings], GenerativeModel]


def build_parser(templates: PromptTemplates | None = None) -> argparse.ArgumentParser:
    templates = templates or PromptTemplates.default()
    parser = argparse.ArgumentParser(
        prog="ai-client",
        description="Send text to the Gemini API and print the response.",
    )
    parser.add_argument(
        "-m",
        "--model",
        default=None,
        help=f"Gemini model name (default: $GEMINI_MODEL or {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help=f"Request timeout in seconds (default: {DEFAULT_REQUEST_TIMEOUT:g})",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--env-file", help="Read settings from this .env file")

    commands = parser.add_subparsers(dest="command", required=True)

    generic = commands.add_parser(
        "generic",
        help="Send the input text to the model unchanged",
        description="Send the input text to the model as-is, without a template.",
    )
    generic.add_argument("text", nargs="*", help="Input text (default: stdin)")

    prompt = commands.add_parser(
        "prompt",
        help="Render the input through a prompt template first",
        description="Convert the input into a script using a prompt template.",
    )
    prompt.add_argument("text", nargs="*", help="Input text (default: stdin)")
    prompt.add_argument(
        "-d",
        "--mode",
        choices=templates.modes,
        default="solo",
        help="Template mode (default: solo)",
    )
    return parser


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def read_input(words: Sequence[str], stdin: TextIO) -> str:
    """Join positional words, or read all of stdin when there are none.

    Raises:
        ValidationError: No input text was provided, or stdin is not valid
            UTF-8.
    """
    try:
        text = " ".join(words) if words else stdin.read()
    except UnicodeDecodeError as e:
        raise ValidationError(f"Input is not valid UTF-8 text: {e}") from e
    if not text or not text.strip():
        raise ValidationError(
            "No input text provided via command-line arguments or standard input"
        )
    return text


def print_response(out: TextIO, text: str, model: str, mode: str) -> None:
    print(f"\n{SEPARATOR}", file=out)
    print(f"|| Response (model: {model}, mode: {mode}) ||", file=out)
    print(SEPARATOR, file=out)
    print(text, file=out)
    print(SEPARATOR, file=out)


def main(
    argv: Sequence[str] | None = None,
    *,
    client_factory: ClientFactory | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Run the CLI and return the process exit status."""
    templates = PromptTemplates.default()
    args = build_parser(templates).parse_args(argv)
    configure_logging(args.verbose)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    factory = client_factory or GeminiClient.from_settings

    mode = args.mode if args.command == "prompt" else None
    mode_display = mode or "generic (no template)"
    try:
        text = read_input(args.text, stdin)
        settings = load_settings(args.env_file, model=args.model, timeout=args.timeout)
        log.debug("Resolved settings: %s", settings.to_dict())
        runner = Runner(
            factory(settings),
            prompt_builder=PromptBuilder(templates),
            model=settings.model,
            timeout=settings.timeout,
        )
        print(
            f"Generating response with model {settings.model} "
            f"(mode: {mode_display}, timeout: {settings.timeout:g}s)...",
            file=sys.stderr,
        )
        result = asyncio.run(runner.run(text, mode))
    except AIClientError as e:
        log.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CODES.get(e.kind, 1)
    except TimeoutError:
        print(
            f"Error: request timed out after {settings.timeout:g}s",
            file=sys.stderr,
        )
        return EXIT_TIMEOUT
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED

    print_response(stdout, result.text, settings.model, mode_display)
    return EXIT_OK
