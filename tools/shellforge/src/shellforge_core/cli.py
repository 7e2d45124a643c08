from __future__ import annotations

import argparse
import sys

from .core import BACKENDS, ShellForgeError
from .commands import (
    command_build,
    command_hash_key,
    command_list_commands,
    command_schema,
    command_validate,
)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shellforge",
        description="Compile a cli.json menu description into a bash script and a Windows batch script.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Generate the shell scripts and their web wrappers.")
    build.add_argument(
        "--directory",
        default=".",
        help="Project directory containing cli.json and funcs/ (default: current directory).",
    )
    build.add_argument("--out-dir", help="Output directory (default: <directory>/out).")
    build.add_argument("--check", action="store_true", help="Fail with exit code 1 if outputs are stale.")
    build.add_argument("--dry-run", action="store_true", help="Compute outputs without writing files.")
    build.add_argument("--print-diff", action="store_true", help="Print unified diff for changed files.")
    build.add_argument("--report-json", help="Write build report JSON to path.")
    build.set_defaults(func=command_build)

    validate = sub.add_parser("validate", help="Load and validate cli.json and the script fragments.")
    validate.add_argument(
        "--directory",
        default=".",
        help="Project directory containing cli.json and funcs/ (default: current directory).",
    )
    validate.set_defaults(func=command_validate)

    list_commands = sub.add_parser("list-commands", help="List the commands shown by help for each menu.")
    list_commands.add_argument(
        "--directory",
        default=".",
        help="Project directory containing cli.json and funcs/ (default: current directory).",
    )
    list_commands.add_argument("--menu", help="Only list this menu.")
    list_commands.add_argument(
        "--backend",
        choices=[backend.name for backend in BACKENDS],
        default="bash",
        help="Backend whose script fragments decide visibility (default: bash).",
    )
    list_commands.add_argument("--auth-level", type=int, default=0, help="Show the commands of this auth tier.")
    list_commands.set_defaults(func=command_list_commands)

    schema = sub.add_parser("schema", help="Print the bundled cli.json JSON Schema.")
    schema.set_defaults(func=command_schema)

    hash_key = sub.add_parser("hash-key", help="Print the SHA-1 digest of a key for an auth entry.")
    hash_key.add_argument("key", help="Key to hash.")
    hash_key.set_defaults(func=command_hash_key)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return int(args.func(args))
    except ShellForgeError as exc:
        print(f"shellforge error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
