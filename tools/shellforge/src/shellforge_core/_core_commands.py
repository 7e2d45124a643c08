from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_help import render_help
from ._core_model import (
    ArgSpec,
    AuthMethod,
    Backend,
    Builtin,
    CliSpec,
    CommandBody,
    CommandSpec,
    MenuSpec,
    ScriptRef,
    ScriptRegistry,
    Unsupported,
)

CommandTable = dict[str, CommandSpec]


@dataclass(frozen=True)
class PlannedCommand:
    command: CommandSpec
    body: CommandBody | None

    @property
    def is_supported(self) -> bool:
        return not isinstance(self.body, Unsupported)


@dataclass(frozen=True)
class HelpSection:
    auth_level: int
    text: str


@dataclass(frozen=True)
class MenuPlan:
    menu: MenuSpec
    commands: tuple[PlannedCommand, ...]
    help_sections: tuple[HelpSection, ...]

    @property
    def name(self) -> str:
        return self.menu.name

    def fragments(self) -> list[PlannedCommand]:
        return [planned for planned in self.commands if isinstance(planned.body, ScriptRef)]


def build_command_table(
    menu_name: str,
    menu_commands: Mapping[str, CommandSpec],
    auth: Mapping[int, AuthMethod] | None = None,
) -> CommandTable:
    table: CommandTable = dict(menu_commands)
    table["clear"] = CommandSpec(
        name="clear",
        description="Clear the screen.",
        aliases=("cls", "c"),
        builtin=Builtin.CLEAR,
    )
    table["exit"] = CommandSpec(
        name="exit",
        description="Exit the CLI.",
        aliases=("ex", "e"),
        builtin=Builtin.EXIT,
    )
    table["help"] = CommandSpec(
        name="help",
        description=f"Show all the commands for the {menu_name} menu.",
        aliases=("?", "h"),
        builtin=Builtin.HELP,
    )
    if auth:
        table["auth"] = CommandSpec(
            name="auth",
            description="Authenticate to an access level.",
            args=(ArgSpec(name="level", min_value=1, max_value=max(auth.keys()) + 1),),
            builtin=Builtin.AUTH,
        )
    table["*"] = CommandSpec(
        name="*",
        description="Invalid command.",
        builtin=Builtin.CATCH_ALL,
    )
    return table


def filter_for_help(
    table: Mapping[str, CommandSpec],
    script_files: set[str] | frozenset[str],
    file_extension: str,
    auth_level: int = 0,
) -> CommandTable:
    visible: CommandTable = {}
    for name, command in table.items():
        if command.is_catch_all:
            continue
        if command.visible is False:
            continue
        if command.script is not None and f"{command.script}.{file_extension}" not in script_files:
            continue
        if auth_level == 0 and command.access is not None:
            continue
        if auth_level > 0 and command.access != auth_level:
            continue
        visible[name] = command
    return visible


def resolve_body(command: CommandSpec, backend: Backend, registry: ScriptRegistry) -> CommandBody | None:
    if command.builtin is not None:
        return None
    if command.script is not None and registry.has(command.script):
        return ScriptRef(command.script)
    inline = command.inline.get(backend.name)
    if inline is not None:
        return inline
    return Unsupported()


def build_help_sections(
    menu_name: str,
    table: Mapping[str, CommandSpec],
    registry: ScriptRegistry,
    auth_levels: list[int],
) -> tuple[HelpSection, ...]:
    script_files = registry.known_files()
    sections = [
        HelpSection(
            auth_level=0,
            text=render_help(
                f"Showing commands for the {menu_name} menu.",
                filter_for_help(table, script_files, registry.extension, 0),
            ),
        )
    ]
    for level in auth_levels:
        commands = filter_for_help(table, script_files, registry.extension, level)
        if not commands:
            continue
        sections.append(HelpSection(auth_level=level, text=render_help(f"Auth level {level} commands.", commands)))
    return tuple(sections)


def plan_menu(
    menu: MenuSpec,
    table: Mapping[str, CommandSpec],
    backend: Backend,
    registry: ScriptRegistry,
    auth_levels: list[int],
) -> MenuPlan:
    commands = tuple(PlannedCommand(command, resolve_body(command, backend, registry)) for command in table.values())
    return MenuPlan(
        menu=menu,
        commands=commands,
        help_sections=build_help_sections(menu.name, table, registry, auth_levels),
    )


def build_command_tables(spec: CliSpec) -> dict[str, CommandTable]:
    return {name: build_command_table(name, menu.commands, spec.auth) for name, menu in spec.menus.items()}


def plan_menus(
    spec: CliSpec,
    tables: Mapping[str, CommandTable],
    backend: Backend,
    registry: ScriptRegistry,
) -> list[MenuPlan]:
    auth_levels = sorted(spec.auth.keys())
    return [plan_menu(menu, tables[name], backend, registry, auth_levels) for name, menu in spec.menus.items()]


def fragment_function_name(menu_name: str, command_name: str) -> str:
    return f"fragment_{to_identifier(menu_name)}_{to_identifier(command_name)}"
