#!/usr/bin/env python3
from __future__ import annotations

import asyncio
import datetime as dt
import difflib
import hashlib
import json
import math
import re
import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Union

import jsonschema

TOOL_VERSION = "1.0.0"
CLI_FILE_NAME = "cli.json"
FUNCS_DIRECTORY = "funcs"
OUT_DIRECTORY = "out"
WINDOWS_OUT_DIRECTORY = "w"
SCHEMA_FILE_NAME = "cli.schema.json"

DEFAULT_PROMPT_PREFIX = "> "
DEFAULT_PROMPT_FORMAT = "{PROMPT}: "

COLOR_CODES = {
    "RESET": 0,
    "BLACK": 30,
    "RED": 31,
    "GREEN": 32,
    "YELLOW": 33,
    "BLUE": 34,
    "MAGENTA": 35,
    "CYAN": 36,
    "GREY": 37,
    "DARK_GREY": 90,
    "BRIGHT_RED": 91,
    "BRIGHT_GREEN": 92,
    "BRIGHT_YELLOW": 93,
    "BRIGHT_BLUE": 94,
    "BRIGHT_PURPLE": 95,
    "BRIGHT_CYAN": 96,
    "WHITE": 97,
    "BG_BLACK": 40,
    "BG_RED": 41,
    "BG_GREEN": 42,
    "BG_YELLOW": 43,
    "BG_BLUE": 44,
    "BG_MAGENTA": 45,
    "BG_CYAN": 46,
    "BG_GREY": 47,
    "BG_DARK_GREY": 100,
    "BG_BRIGHT_RED": 101,
    "BG_BRIGHT_GREEN": 102,
    "BG_BRIGHT_YELLOW": 103,
    "BG_BRIGHT_BLUE": 104,
    "BG_BRIGHT_PURPLE": 105,
    "BG_BRIGHT_CYAN": 106,
    "BG_WHITE": 107,
}

RAINBOW = "rainbow"
RAINBOW_PALETTE = ("RED", "YELLOW", "GREEN", "CYAN", "BLUE", "MAGENTA")

# Variables every generated script defines, whatever the dialect.
VARIABLES = {
    "AUTH_LEVEL": "0",
}

BASH_VARIABLES = {
    "USER": "$(whoami)",
}

BATCH_VARIABLES = {
    "USER": "%USERNAME%",
    "exit": "0",
}

# Dynamic variables cmd.exe provides without an assignment.
BATCH_ADDITIONAL_VARIABLE_NAMES = ("TIME", "DATE", "CD", "RANDOM", "USERNAME", "COMPUTERNAME")

BASH_TIME_VARIABLES = 'TIME=`date "+%m/%d/%Y %H:%M:%S"`'

# Globals the generated scripts assign at runtime. cmd.exe compares names case-insensitively.
RUNTIME_VARIABLE_NAMES = frozenset(
    name.lower()
    for name in (
        *VARIABLES,
        *BASH_VARIABLES,
        *BATCH_VARIABLES,
        *COLOR_CODES,
        *BATCH_ADDITIONAL_VARIABLE_NAMES,
        "parts",
        "input",
        "key",
        "hashed_key",
        "func",
        "errMsg",
        "non_numeric",
        "auth_known",
        "c",
        "INPUT_DEVICE",
        "IFS",
        "PATH",
    )
)

BASH_ESCAPE_CHARACTER = "\\"
BASH_ESCAPE_CHARACTERS = ("\\", '"', "`", "'")
BATCH_ESCAPE_CHARACTER = "^"
BATCH_ESCAPE_CHARACTERS = (">", "<", "|")


class ShellForgeError(Exception):
    pass


class BuildError(ShellForgeError):
    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"{name}: {message}")
        self.name = name
        self.reason = message


class FileNotFound(BuildError):
    def __init__(self, file_path: Path | str) -> None:
        self.file_path = str(file_path)
        name = "FileNotFound" if Path(self.file_path).suffix else "DirectoryNotFound"
        super().__init__(name, f"'{self.file_path}' does not exist.")


class FileError(BuildError):
    def __init__(self, name: str, message: str, file_path: Path | str, line: int = 0, column: int = 0) -> None:
        super().__init__(name, message)
        self.file_path = str(file_path)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return f"::error file={self.file_path},line={self.line},col={self.column}::{self.args[0]}"


class InvalidJSONSchema(FileError):
    REASON_UNKNOWN = "Reason Unknown"

    def __init__(self, file_path: Path | str, errors: list[str] | None) -> None:
        self.errors = list(errors or [])
        message = self.errors[0] if self.errors and self.errors[0] else self.REASON_UNKNOWN
        super().__init__("InvalidJSONSchema", message, file_path)


class InvalidJSONSyntax(FileError):
    def __init__(self, file_path: Path | str, reason: str, line: int = 0, column: int = 0) -> None:
        super().__init__("InvalidJSONSyntax", reason, file_path, line, column)


def load_json(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ShellForgeError(f"Unable to read JSON file '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise InvalidJSONSyntax(path, exc.msg, exc.lineno, exc.colno) from exc


def write_json(path: Path, value: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(value, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def get_schema_path() -> Path:
    return Path(__file__).resolve().parent / "schemas" / SCHEMA_FILE_NAME


def load_cli_schema() -> dict[str, Any]:
    schema_path = get_schema_path()
    if not schema_path.exists():
        raise FileNotFound(schema_path)
    return load_json(schema_path)


def collect_schema_violations(payload: Any, schema: dict[str, Any]) -> list[str]:
    validator = jsonschema.Draft7Validator(schema)
    violations = sorted(validator.iter_errors(payload), key=lambda error: error.json_path)
    messages: list[str] = []
    for error in violations:
        if error.json_path == "$":
            messages.append(error.message)
        else:
            messages.append(f"{error.json_path}: {error.message}")
    return messages


def read_text_file(path: Path) -> str:
    if not path.exists():
        raise FileNotFound(path)
    try:
        return path.read_bytes().decode("utf-8")
    except OSError as exc:
        raise ShellForgeError(f"Unable to read file '{path}': {exc}") from exc


def load_cli_document(path: Path) -> dict[str, Any]:
    if not path.parent.exists():
        raise FileNotFound(path.parent)
    if not path.exists():
        raise FileNotFound(path)
    payload = load_json(path)
    violations = collect_schema_violations(payload, load_cli_schema())
    if violations:
        raise InvalidJSONSchema(path, violations)
    return payload


def to_repo_relative(path: Path, repo_root: Path) -> str:
    try:
        return path.resolve().relative_to(repo_root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def now_utc() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(microsecond=0)


def utc_timestamp_now() -> str:
    return now_utc().isoformat().replace("+00:00", "Z")


def hash_key(key: str) -> str:
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_identifier(value: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_]", "_", value)
    return cleaned or "_"


def read_text_if_exists(path: Path) -> str:
    if not path.exists():
        return ""
    try:
        return path.read_bytes().decode("utf-8")
    except OSError as exc:
        raise ShellForgeError(f"Unable to read file '{path}': {exc}") from exc


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline="")


def normalized_lines(value: str) -> list[str]:
    return value.replace("\r\n", "\n").splitlines()


def compute_unified_diff(old_content: str, new_content: str, old_label: str, new_label: str) -> str:
    diff_lines = difflib.unified_diff(
        normalized_lines(old_content),
        normalized_lines(new_content),
        fromfile=old_label,
        tofile=new_label,
        lineterm="",
    )
    return "\n".join(diff_lines)


def write_artifact_if_changed(
    *,
    path: Path,
    content: str,
    dry_run: bool,
    check: bool,
) -> tuple[str, str]:
    old_content = read_text_if_exists(path)
    if old_content == content:
        return "unchanged", ""
    if check:
        return "drift", compute_unified_diff(old_content, content, f"a/{path}", f"b/{path}")
    if dry_run:
        return "would_write", compute_unified_diff(old_content, content, f"a/{path}", f"b/{path}")
    write_text(path, content)
    return "updated", compute_unified_diff(old_content, content, f"a/{path}", f"b/{path}")
