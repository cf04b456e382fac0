"""Local stand-in for an LLM CLI, used by CLI backend integration tests."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
    """Echo the prompt back with a prefix, or fail on request.

    Streams are handled as bytes so tests can check exactly what the
    backend wrote to the child and how it treats malformed replies.
    """

    parser = argparse.ArgumentParser()
    parser.add_argument("--model", default="")
    parser.add_argument("--prompt", default=None)
    parser.add_argument("--prefix", default="echo: ")
    parser.add_argument("--exit-code", type=int, default=0)
    parser.add_argument("--error", default="")
    parser.add_argument("--silent", action="store_true")
    parser.add_argument("--output-hex", default=None, help="Write these raw bytes as the reply.")
    parser.add_argument("--save-stdin", type=Path, default=None, help="Copy stdin bytes to a file.")
    args = parser.parse_args(argv)

    prompt = os.fsencode(args.prompt) if args.prompt is not None else sys.stdin.buffer.read()
    if args.save_stdin is not None:
        args.save_stdin.write_bytes(prompt)
    if args.error:
        sys.stderr.write(args.error + "\n")
    if args.exit_code:
        return args.exit_code
    if args.silent:
        return 0

    if args.output_hex is not None:
        reply = bytes.fromhex(args.output_hex)
    else:
        model = f"[{args.model}] " if args.model else ""
        reply = os.fsencode(f"{args.prefix}{model}") + prompt
    sys.stdout.buffer.write(reply)
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
