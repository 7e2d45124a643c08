from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_banner import FontRenderer, build_splash, render_figlet
from ._core_commands import CommandTable, MenuPlan, PlannedCommand, fragment_function_name, plan_menus
from ._core_model import (
    BASH,
    ArgSpec,
    AuthMethod,
    BuildContext,
    Builtin,
    CliSpec,
    CommandSpec,
    MultiLine,
    ScriptRef,
    ScriptRegistry,
    SingleLine,
)
from ._core_sanitize import (
    bash_variables,
    double_quote_bash,
    quote_bash_value,
    sanitize_bash_printf,
)

__all__ = ["BASH_SHEBANG", "build_bash"]

BASH_SHEBANG = "#!/usr/bin/env bash"
CASE_INDENT = "        "


def build_func(name: str, description: str, code: str) -> str:
    return f"\n# {description}\n{name} ()\n{{\n{code.rstrip()}\n}}\n"


def build_variables() -> str:
    lines = ["# Variables"]
    for name, value in bash_variables().items():
        lines.append(f"{name}={value}")
    lines.append("if { : < /dev/tty; } 2> /dev/null;")
    lines.append("then")
    lines.append("    INPUT_DEVICE=/dev/tty")
    lines.append("else")
    lines.append("    INPUT_DEVICE=/dev/stdin")
    lines.append("fi")
    return "\n".join(lines) + "\n"


def build_error() -> str:
    return build_func("error", "The error function.", 'printf "${RED}Error: %s${RESET}\\n" "$1"')


def error(message: str) -> str:
    return f"error {double_quote_bash(message)}"


def success(message: str) -> str:
    return f'printf "${{GREEN}}%s${{RESET}}\\n" {double_quote_bash(message)}'


def prompt(prefix: str, variable: str = "input", hidden: bool = False) -> list[str]:
    flags = "-r -s" if hidden else "-r"
    lines = [
        f'printf "{sanitize_bash_printf(prefix)}"',
        f'read {flags} {variable} < "$INPUT_DEVICE"',
        'printf "${RESET}"',
    ]
    if hidden:
        lines.append('echo ""')
    return lines


def build_auth_method(method: AuthMethod) -> str:
    if method.type != "hash":
        raise BuildError("InvalidAuthType", f"Auth type '{method.type}' is invalid.")
    lines = [
        "if ! command -v shasum &> /dev/null;",
        "then",
        f"    {error('shasum was not found.')}",
        "    return 1",
        "fi",
        *prompt("Key: ", "key", hidden=True),
        "hashed_key=`printf '%s' \"$key\" | shasum | awk '{print $1}'`",
        f'if [ "$hashed_key" != "{method.digest}" ];',
        "then",
        f"    {error('Invalid key.')}",
        "    return 1",
        "fi",
        f"AUTH_LEVEL={method.level}",
        success(f"Authenticated to level {method.level} access."),
        "return 0",
    ]
    return build_func(f"auth_{method.level}", f"Authenticate to level {method.level}.", "\n".join(lines))


def build_auth(spec: CliSpec) -> str:
    return "".join(build_auth_method(method) for method in spec.auth.values())


def include_scripts(plans: list[MenuPlan], registry: ScriptRegistry) -> str:
    scripts = ""
    for plan in plans:
        for planned in plan.fragments():
            command = planned.command
            defined_args = [f"{arg.name}=${index}" for index, arg in enumerate(command.args, start=1)]
            script = registry.read(planned.body.name)
            scripts += build_func(
                fragment_function_name(plan.name, command.name),
                command.description,
                "\n".join([*defined_args, script.rstrip("\n")]),
            )
    return scripts


def build_help_command(plan: MenuPlan) -> list[str]:
    lines: list[str] = []
    for section in plan.help_sections:
        text = sanitize_bash_printf(section.text)
        if section.auth_level == 0:
            lines.append(f'printf "{text}"')
            continue
        lines.append(f'if [ "$AUTH_LEVEL" == "{section.auth_level}" ];')
        lines.append("then")
        lines.append(f'    printf "\\n{text}"')
        lines.append("fi")
    return lines


def build_header(plan: MenuPlan) -> list[str]:
    if not plan.menu.header:
        return []
    return [
        BASH_TIME_VARIABLES,
        f'printf "${{BG_DARK_GREY}}{sanitize_bash_printf(plan.menu.header)}${{RESET}}\\n"',
        'echo ""',
    ]


def build_arg_check(command: CommandSpec) -> list[str]:
    if not command.args:
        return []
    lines = ["# Argument validation."]
    for index, arg in enumerate(command.args, start=1):
        lines.extend(build_single_arg_check(arg, index))
    return lines


def build_single_arg_check(arg: ArgSpec, index: int) -> list[str]:
    name = arg.name
    lines = [
        f"{name}=${{parts[{index}]}}",
        f'if [ "${name}" == "" ];',
        "then",
    ]
    if arg.has_default:
        lines.append(f"    {name}={quote_bash_value(arg.default)}")
    else:
        lines.extend(f"    {line}" for line in prompt(arg.prompt_text(), name, hidden=arg.hidden))
    lines.append("fi")
    if arg.has_bounds:
        lines.extend(reject_when(f'! [[ "${name}" =~ ^-?[0-9]+$ ]]', f"Arg '{name}' must be a number."))
    if arg.min_value is not None:
        lines.extend(
            reject_when(f'[ "${name}" -lt "{arg.min_value}" ]', f"Arg '{name}' must be at least {arg.min_value}.")
        )
    if arg.max_value is not None:
        lines.extend(
            reject_when(f'[ "${name}" -ge "{arg.max_value}" ]', f"Arg '{name}' must be less than {arg.max_value}.")
        )
    return lines


def reject_when(condition: str, message: str) -> list[str]:
    return [
        f"if {condition};",
        "then",
        f"    {error(message)}",
        "    return 1",
        "fi",
    ]


def build_auth_check(command: CommandSpec) -> list[str]:
    if command.access is None:
        return []
    return [
        f'if [ "$AUTH_LEVEL" != "{command.access}" ];',
        "then",
        f"    auth_{command.access} || return 1",
        "fi",
    ]


def build_builtin_body(plan: MenuPlan, command: CommandSpec) -> list[str]:
    if command.builtin is Builtin.CLEAR:
        return [f"{plan.name} true"]
    if command.builtin is Builtin.EXIT:
        return ["clear", "exit 0"]
    if command.builtin is Builtin.HELP:
        return build_help_command(plan)
    if command.builtin is Builtin.AUTH:
        return [
            'if ! declare -F "auth_$level" > /dev/null;',
            "then",
            '    error "Auth level $level does not exist."',
            "    return 1",
            "fi",
            "auth_$level",
        ]
    if command.builtin is Builtin.CATCH_ALL:
        return ['error "\\"${parts[0]}\\" is not a valid command."', "return 1"]
    raise ShellForgeError(f"Unknown builtin command '{command.name}'.")


def build_body(plan: MenuPlan, planned: PlannedCommand) -> list[str]:
    command = planned.command
    body = planned.body
    if command.builtin is not None:
        return build_builtin_body(plan, command)
    if isinstance(body, ScriptRef):
        call_args = " ".join(f'"${arg.name}"' for arg in command.args)
        return [f"{fragment_function_name(plan.name, command.name)} {call_args}".rstrip()]
    if isinstance(body, SingleLine):
        return [body.text]
    if isinstance(body, MultiLine):
        return list(body.lines)
    return [error(f"The '{command.name}' command is not supported for {BASH.platform_label}."), "return 1"]


def build_case(plan: MenuPlan, planned: PlannedCommand) -> str:
    command = planned.command
    if command.is_catch_all:
        pattern = "*"
    else:
        pattern = " | ".join(double_quote_bash(name) for name in command.names)
    generated: list[str] = []
    if planned.is_supported:
        generated.extend(build_auth_check(command))
        generated.extend(build_arg_check(command))
    lines = [f"    # {command.description}", f"    {pattern})"]
    lines.extend(f"{CASE_INDENT}{line}" for line in generated)
    lines.extend(f"{CASE_INDENT}{line}" for line in build_body(plan, planned))
    lines.append(f"{CASE_INDENT};;")
    return "\n".join(lines)


def build_process(plan: MenuPlan) -> str:
    lines = ["IFS=' ' read -ra parts <<< \"$1\"", 'case "${parts[0]}" in']
    for planned in plan.commands:
        lines.append(build_case(plan, planned))
    lines.append("esac")
    return build_func(f"process_{plan.name}", f"Process a {plan.name} command.", "\n".join(lines))


def build_prompt(plan: MenuPlan) -> str:
    lines = [
        f'printf "{sanitize_bash_printf(plan.menu.prefix)}"',
        'if ! read -r input < "$INPUT_DEVICE";',
        "then",
        '    printf "${RESET}\\n"',
        "    return 0",
        "fi",
        'printf "${RESET}"',
        'if [ "$input" != "" ];',
        "then",
        f'    process_{plan.name} "$input"',
        "fi",
        "",
        f"prompt_{plan.name}",
    ]
    return build_func(f"prompt_{plan.name}", f"Create the {plan.name} prompt.", "\n".join(lines))


async def build_menu(plan: MenuPlan, renderer: FontRenderer = render_figlet) -> str:
    splash = await build_splash(sanitize_bash_printf, plan.menu.splash, renderer)
    lines = ["clear", *build_header(plan)]
    if splash:
        lines.append(f'printf "{splash}"')
        lines.append('echo ""')
    lines.extend(
        [
            "",
            'if [ "$1" != true ];',
            "then",
            f"    prompt_{plan.name}",
            "fi",
        ]
    )
    return build_process(plan) + build_prompt(plan) + build_func(plan.name, f"The {plan.name} menu.", "\n".join(lines))


def build_short_command(main_menu: str) -> str:
    lines = [
        "",
        "# Run a single command when invoked with arguments or as c=<command>,<args...>",
        'if [ "$#" -gt 0 ];',
        "then",
        f'    process_{main_menu} "$*"',
        "    exit",
        "fi",
        'if [ "$c" != "" ];',
        "then",
        "    IFS=',' read -ra parts <<< \"$c\"",
        f'    process_{main_menu} "${{parts[*]}}"',
        "    exit",
        "fi",
        "",
        main_menu,
    ]
    return "\n".join(lines) + "\n"


async def build_bash(
    context: BuildContext,
    tables: Mapping[str, CommandTable],
    renderer: FontRenderer = render_figlet,
) -> str:
    spec = context.spec
    registry = context.registry(BASH)
    plans = plan_menus(spec, tables, BASH, registry)

    parts = [BASH_SHEBANG + "\n", build_variables(), build_error(), build_auth(spec), include_scripts(plans, registry)]
    for plan in plans:
        parts.append(await build_menu(plan, renderer))
    parts.append(build_short_command(spec.main_menu))
    return "".join(parts)
