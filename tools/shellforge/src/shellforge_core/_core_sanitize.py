from __future__ import annotations

from ._core_base import *  # noqa: F401,F403

PLACEHOLDER_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def sanitize_string(value: str, escape_character: str, escape_characters: tuple[str, ...] | list[str]) -> str:
    # Backslash must come first in escape_characters so inserted escapes are not escaped again.
    for character in escape_characters:
        value = value.replace(character, escape_character + character)
    return value


def bash_variables() -> dict[str, str]:
    variables = dict(VARIABLES)
    variables.update(BASH_VARIABLES)
    for color_name, number in COLOR_CODES.items():
        variables[color_name] = f"'\\e[{number}m'"
    return variables


def batch_variables() -> dict[str, str]:
    variables = dict(VARIABLES)
    variables.update(BATCH_VARIABLES)
    for color_name, number in COLOR_CODES.items():
        variables[color_name] = f"\x1b[{number}m"
    return variables


def batch_variable_names() -> frozenset[str]:
    return frozenset(batch_variables().keys()) | frozenset(BATCH_ADDITIONAL_VARIABLE_NAMES)


def convert_variables(value: str, variable_names: frozenset[str] | set[str] | None = None) -> str:
    names = batch_variable_names() if variable_names is None else variable_names

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        if name not in names:
            return match.group(0)
        return f"%{name}%"

    return PLACEHOLDER_PATTERN.sub(_replace, value)


def sanitize_bash_string(value: str) -> str:
    return sanitize_string(value, BASH_ESCAPE_CHARACTER, BASH_ESCAPE_CHARACTERS)


def sanitize_batch_string(value: str) -> str:
    return sanitize_string(convert_variables(value), BATCH_ESCAPE_CHARACTER, BATCH_ESCAPE_CHARACTERS)


def printf_format(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "%%")


def sanitize_bash_printf(value: str) -> str:
    return sanitize_bash_string(printf_format(value))


def double_quote_bash(value: str) -> str:
    escaped = value
    for character in ("\\", '"', "$", "`"):
        escaped = escaped.replace(character, "\\" + character)
    return f'"{escaped}"'


def quote_bash_value(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return shlex.quote(value)


def format_batch_value(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
