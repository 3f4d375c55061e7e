"""
=============================================================================
HTTPCODEC CLI ENTRY POINT
=============================================================================

Shell access to the codec, the URL decoder and the negotiator.

    python -m httpcodec hex "hello"                 # 68656c6c6f
    echo -n hi | python -m httpcodec hex            # reads stdin
    python -m httpcodec base-n 8 "A"                # 01
    python -m httpcodec parse-int ff --base 16      # 255
    python -m httpcodec url-decode "a%20b"          # a b
    python -m httpcodec negotiate --accept "gzip;q=0.8"
                                                    # compress=yes set-header=yes

Malformed input exits with status 2 and the offending text on stderr.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .codec import MalformedNumber, bytes_to_base_n, bytes_to_hex, parse_unsigned_int
from .config import EncodingConfig, configure_logging
from .encoding import negotiate
from .urldecoding import url_decode


logger = logging.getLogger(__name__)


def _read_input(text: Optional[str]) -> bytes:
    if text is not None:
        return text.encode("utf-8")
    return sys.stdin.buffer.read()


def _cmd_hex(args: argparse.Namespace) -> str:
    data = _read_input(args.text)
    return bytes_to_hex(data, args.offset, args.length)


def _cmd_base_n(args: argparse.Namespace) -> str:
    return bytes_to_base_n(_read_input(args.text), args.base)


def _cmd_parse_int(args: argparse.Namespace) -> str:
    return str(parse_unsigned_int(args.text, args.offset, args.length, args.base))


def _cmd_url_decode(args: argparse.Namespace) -> str:
    return url_decode(args.text, args.encoding, plus_as_space=args.plus)


def _cmd_negotiate(args: argparse.Namespace) -> str:
    config = EncodingConfig.from_env()
    require = args.require_wants or config.require_wants_header
    result = negotiate(args.accept, args.content_encoding, require)
    return (
        f"compress={'yes' if result.compress else 'no'} "
        f"set-header={'yes' if result.set_header else 'no'}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpcodec",
        description="Byte/text codec and content-encoding negotiation tools",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: $HTTPCODEC_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httpcodec {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("hex", help="Render bytes as hex (high nibble uppercase)")
    p.add_argument("text", nargs="?", help="Text to encode as UTF-8 (default: stdin)")
    p.add_argument("--offset", type=int, default=0)
    p.add_argument("--length", type=int, default=None)
    p.set_defaults(func=_cmd_hex)

    p = sub.add_parser("base-n", help="Render bytes as two digits per byte in BASE")
    p.add_argument("base", type=int)
    p.add_argument("text", nargs="?", help="Text to encode as UTF-8 (default: stdin)")
    p.set_defaults(func=_cmd_base_n)

    p = sub.add_parser("parse-int", help="Parse an unsigned integer")
    p.add_argument("text")
    p.add_argument("--base", "-b", type=int, default=10)
    p.add_argument("--offset", type=int, default=0)
    p.add_argument("--length", type=int, default=-1)
    p.set_defaults(func=_cmd_parse_int)

    p = sub.add_parser("url-decode", help="Decode percent escapes")
    p.add_argument("text")
    p.add_argument("--plus", action="store_true", help="Treat '+' as a space")
    p.add_argument("--encoding", default="utf-8")
    p.set_defaults(func=_cmd_url_decode)

    p = sub.add_parser("negotiate", help="Show the gzip negotiation decision")
    p.add_argument("--accept", "-a", action="append", default=[],
                   help="Accept-Encoding value (repeatable)")
    p.add_argument("--content-encoding", "-c", default=None,
                   help="Content-Encoding already on the response")
    p.add_argument("--require-wants", action="store_true",
                   help="Only compress if the response already declares gzip")
    p.set_defaults(func=_cmd_negotiate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = EncodingConfig.from_env()
        if args.log_level:
            config.log_level = args.log_level
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)
    logger.debug(f"Running {args.command}")

    try:
        print(args.func(args))
    except MalformedNumber as e:
        print(f"Malformed number: {e.text}", file=sys.stderr)
        return 2
    except (ValueError, IndexError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
