"""Command-line helpers to create and print record files."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from extsort.files import DEFAULT_SEED, format_records, generate_random_file, read_file


def create_file_main(argv: Sequence[str] | None = None) -> int:
    """Create a random record file: ``num_records max_payload_length path``."""
    parser = argparse.ArgumentParser(prog="create-file", description="Write a random record file.")
    parser.add_argument("num_records", type=int)
    parser.add_argument("max_payload_length", type=int)
    parser.add_argument("path", type=Path)
    args = parser.parse_args(argv)
    generate_random_file(args.path, args.num_records, args.max_payload_length, DEFAULT_SEED)
    print(f"File created successfully at {Path.cwd()}/{args.path}")
    return 0


def read_file_main(argv: Sequence[str] | None = None) -> int:
    """Print every record of a record file: ``path``."""
    parser = argparse.ArgumentParser(prog="read-file", description="Print a record file.")
    parser.add_argument("path", type=Path)
    args = parser.parse_args(argv)
    print(format_records(read_file(args.path)))
    return 0