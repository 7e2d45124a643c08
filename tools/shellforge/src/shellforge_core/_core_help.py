from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_model import CommandSpec

HELP_COLUMN_GAP = 4


def help_term(command: CommandSpec) -> str:
    term = "|".join(command.names)
    placeholders = [arg.placeholder for arg in command.args]
    if placeholders:
        term = f"{term} {' '.join(placeholders)}"
    return term


def render_help(heading: str, commands: Mapping[str, CommandSpec]) -> str:
    terms = [(help_term(command), command.description) for command in commands.values()]
    width = max((len(term) for term, _ in terms), default=0) + HELP_COLUMN_GAP
    lines = [heading, ""]
    for term, description in terms:
        lines.append(f"{term.ljust(width)}${{GREY}}{description}${{RESET}}")
    return "\n".join(lines) + "\n"
