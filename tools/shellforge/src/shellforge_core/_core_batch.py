from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_banner import FontRenderer, build_splash, render_figlet
from ._core_commands import CommandTable, MenuPlan, PlannedCommand, fragment_function_name, plan_menus
from ._core_model import (
    BATCH,
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
from ._core_sanitize import batch_variables, format_batch_value, sanitize_batch_string

__all__ = ["BATCH_HEADER", "build_batch"]

BATCH_HEADER = "@echo off & setlocal EnableDelayedExpansion"
KEY_FILE = "%TEMP%\\shellforge_key.txt"


def build_func(name: str, description: str, code: str) -> str:
    return f""": {description}
:func_{name}
if NOT "%func%" == "{name}" goto end_func_{name}
{code.rstrip()}
exit /b
:end_func_{name}
"""


def call_func(name: str, *args: str) -> list[str]:
    return [f"set func={name}", f"call :func_{name} {' '.join(args)}".rstrip()]


def build_variables() -> str:
    lines = [": Variables"]
    for name, value in batch_variables().items():
        lines.append(f'set "{name}={value}"')
    return "\n".join(lines) + "\n"


def build_error() -> str:
    return build_func("error", "The error function.", "echo !RED!Error: !errMsg!!RESET!")


def error(message: str) -> list[str]:
    return [f'set "errMsg={message}"', *call_func("error")]


def fail(message: str) -> list[str]:
    return ["(", *(f"    {line}" for line in error(message)), "    exit /b 1", ")"]


def multiline_echo(text: str) -> list[str]:
    return [f"echo {line}" if line.strip() else "echo." for line in text.split("\n")]


def prompt(prefix: str, variable: str = "input") -> list[str]:
    return [f'set "{variable}="', f"set /p {variable}={sanitize_batch_string(prefix)}"]


def hidden_prompt(label: str, variable: str) -> list[str]:
    ps_label = label.replace("'", "''")
    command = (
        f"$p = Read-Host -AsSecureString -Prompt '{ps_label}'; "
        "[Runtime.InteropServices.Marshal]::PtrToStringAuto("
        "[Runtime.InteropServices.Marshal]::SecureStringToBSTR($p))"
    )
    return [
        f'set "{variable}="',
        f'for /f "usebackq delims=" %%p in (`powershell -NoProfile -Command "{command}"`) do set "{variable}=%%p"',
    ]


def build_auth_method(method: AuthMethod) -> str:
    if method.type != "hash":
        raise BuildError("InvalidAuthType", f"Auth type '{method.type}' is invalid.")
    lines = [
        "where certutil >nul 2>nul",
        "if errorlevel 1 " + "\n".join(fail("certutil was not found.")),
        *hidden_prompt("Key", "key"),
        'set "hashed_key="',
        f'<nul set /p "=!key!" > "{KEY_FILE}"',
        f'for /f "skip=1 delims=" %%h in (\'certutil -hashfile "{KEY_FILE}" SHA1\') do '
        'if not defined hashed_key set "hashed_key=%%h"',
        f'del "{KEY_FILE}" >nul 2>nul',
        'if defined hashed_key set "hashed_key=!hashed_key: =!"',
        f'if /i NOT "!hashed_key!" == "{method.digest}" ' + "\n".join(fail("Invalid key.")),
        f'set "AUTH_LEVEL={method.level}"',
        f"echo !GREEN!Authenticated to level {method.level} access.!RESET!",
        "exit /b 0",
    ]
    return build_func(f"auth_{method.level}", f"Authenticate to level {method.level}.", "\n".join(lines))


def build_auth(spec: CliSpec) -> str:
    return "".join(build_auth_method(method) for method in spec.auth.values())


def include_scripts(plans: list[MenuPlan], registry: ScriptRegistry) -> str:
    scripts = ""
    for plan in plans:
        for planned in plan.fragments():
            command = planned.command
            defined_args = [f'set "{arg.name}=%~{index}"' for index, arg in enumerate(command.args, start=1)]
            script = registry.read(planned.body.name).replace("\r\n", "\n")
            scripts += build_func(
                fragment_function_name(plan.name, command.name),
                command.description,
                "\n".join([*defined_args, script.rstrip("\n")]),
            )
    return scripts


def build_help_command(plan: MenuPlan) -> list[str]:
    lines: list[str] = []
    for section in plan.help_sections:
        echo_lines = multiline_echo(sanitize_batch_string(section.text.rstrip("\n")))
        if section.auth_level == 0:
            lines.extend(echo_lines)
            continue
        skip_label = f"skip_help_{plan.name}_{section.auth_level}"
        lines.append(f'if NOT "%AUTH_LEVEL%" == "{section.auth_level}" goto {skip_label}')
        lines.append("echo.")
        lines.extend(echo_lines)
        lines.append(f":{skip_label}")
    return lines


def build_header(plan: MenuPlan) -> list[str]:
    if not plan.menu.header:
        return []
    return [sanitize_batch_string(f"echo ${{BG_DARK_GREY}}{plan.menu.header}${{RESET}}"), "echo."]


def build_arg_check(plan: MenuPlan, index: int, command: CommandSpec) -> list[str]:
    if not command.args:
        return []
    lines = [": Argument validation."]
    for position, arg in enumerate(command.args, start=2):
        lines.extend(build_single_arg_check(arg, position, f"has_arg_{plan.name}_{index}_{arg.name}"))
    return lines


def build_single_arg_check(arg: ArgSpec, position: int, label: str) -> list[str]:
    name = arg.name
    lines = [
        f'set "{name}=%~{position}"',
        f'if NOT "%{name}%" == "" goto {label}',
    ]
    if arg.has_default:
        lines.append(f'set "{name}={format_batch_value(arg.default)}"')
    elif arg.hidden:
        lines.extend(hidden_prompt(arg.prompt_message or capitalize(name), name))
    else:
        lines.extend(prompt(arg.prompt_text(), name))
    lines.append(f":{label}")
    if arg.has_bounds:
        lines.append('set "non_numeric="')
        lines.append(f'for /f "delims=-0123456789" %%i in ("%{name}%") do set "non_numeric=%%i"')
        lines.append(f'if "%{name}%" == "" set "non_numeric=1"')
        lines.append("if defined non_numeric " + "\n".join(fail(f"Arg '{name}' must be a number.")))
    if arg.min_value is not None:
        lines.append(
            f"if %{name}% LSS {arg.min_value} " + "\n".join(fail(f"Arg '{name}' must be at least {arg.min_value}."))
        )
    if arg.max_value is not None:
        lines.append(
            f"if %{name}% GEQ {arg.max_value} " + "\n".join(fail(f"Arg '{name}' must be less than {arg.max_value}."))
        )
    return lines


def build_auth_check(plan: MenuPlan, index: int, command: CommandSpec) -> list[str]:
    if command.access is None:
        return []
    label = f"authorized_{plan.name}_{index}"
    return [
        f'if "%AUTH_LEVEL%" == "{command.access}" goto {label}',
        *call_func(f"auth_{command.access}"),
        "if errorlevel 1 exit /b 1",
        f":{label}",
    ]


def build_auth_command(levels: list[int]) -> list[str]:
    lines = ['set "auth_known=0"']
    for level in levels:
        lines.append(f'if "%level%" == "{level}" set "auth_known=1"')
    lines.append('if "%auth_known%" == "0" ' + "\n".join(fail("Auth level %level% does not exist.")))
    lines.append("set func=auth_%level%")
    lines.append("call :func_auth_%level%")
    return lines


def build_builtin_body(plan: MenuPlan, command: CommandSpec, auth_levels: list[int]) -> list[str]:
    if command.builtin is Builtin.CLEAR:
        return call_func(plan.name, "true")
    if command.builtin is Builtin.EXIT:
        return ["echo %RED%Exiting...%RESET%", 'set "exit=1"']
    if command.builtin is Builtin.HELP:
        return build_help_command(plan)
    if command.builtin is Builtin.AUTH:
        return build_auth_command(auth_levels)
    raise ShellForgeError(f"Unknown builtin command '{command.name}'.")


def build_body(plan: MenuPlan, planned: PlannedCommand, auth_levels: list[int]) -> list[str]:
    command = planned.command
    body = planned.body
    if command.builtin is not None:
        return build_builtin_body(plan, command, auth_levels)
    if isinstance(body, ScriptRef):
        return call_func(fragment_function_name(plan.name, command.name), *(f'"%{arg.name}%"' for arg in command.args))
    if isinstance(body, SingleLine):
        return [body.text]
    if isinstance(body, MultiLine):
        return list(body.lines)
    return [*error(f"The '{command.name}' command is not supported for {BATCH.platform_label}."), "exit /b 1"]


def build_match(plan: MenuPlan, index: int, command: CommandSpec) -> list[str]:
    end_label = f"end_command_{plan.name}_{index}"
    if len(command.names) == 1:
        return [f'if NOT "%~1" == "{command.name}" goto {end_label}']
    flag = f"is_command_{to_identifier(command.name)}"
    lines = [f'set "{flag}=0"']
    for name in command.names:
        lines.append(f'if "%~1" == "{name}" set "{flag}=1"')
    lines.append(f'if "%{flag}%" == "0" goto {end_label}')
    return lines


def build_command(plan: MenuPlan, index: int, planned: PlannedCommand, auth_levels: list[int]) -> list[str]:
    command = planned.command
    lines = [f": {command.description}", *build_match(plan, index, command)]
    if planned.is_supported:
        lines.extend(build_auth_check(plan, index, command))
        lines.extend(build_arg_check(plan, index, command))
    lines.extend(build_body(plan, planned, auth_levels))
    lines.append("exit /b")
    lines.append(f":end_command_{plan.name}_{index}")
    return lines


def build_process(plan: MenuPlan, auth_levels: list[int]) -> str:
    lines: list[str] = []
    for index, planned in enumerate(plan.commands):
        if planned.command.is_catch_all:
            continue
        lines.extend(build_command(plan, index, planned, auth_levels))
    lines.append(": Invalid command.")
    lines.extend(error('"%~1" is not a valid command.'))
    lines.append("exit /b 1")
    return build_func(f"process_{plan.name}", f"Process a {plan.name} command.", "\n".join(lines))


def build_prompt(plan: MenuPlan) -> str:
    lines = [
        *prompt(plan.menu.prefix),
        f"if not defined input goto end_switch_{plan.name}",
        *call_func(f"process_{plan.name}", "%input%"),
        f":end_switch_{plan.name}",
        'if "%exit%" == "0" (',
        *(f"    {line}" for line in call_func(f"prompt_{plan.name}")),
        ")",
    ]
    return build_func(f"prompt_{plan.name}", f"Create the {plan.name} prompt.", "\n".join(lines))


async def build_menu(plan: MenuPlan, auth_levels: list[int], renderer: FontRenderer = render_figlet) -> str:
    splash = await build_splash(sanitize_batch_string, plan.menu.splash, renderer)
    lines = ["cls", *build_header(plan)]
    if splash:
        lines.extend(multiline_echo(splash))
        lines.append("echo.")
    lines.append('if "%~1" == "true" exit /b')
    lines.extend(call_func(f"prompt_{plan.name}"))
    return (
        build_process(plan, auth_levels)
        + build_prompt(plan)
        + build_func(plan.name, f"The {plan.name} menu.", "\n".join(lines))
    )


def build_short_command(main_menu: str) -> str:
    lines = [
        ": Run a single command when invoked with arguments or c=<command>,<args...>",
        'if NOT "%~1" == "" goto run_arguments',
        'if "%c%" == "" goto interactive',
        'set "parts=%c:,= %"',
        "goto dispatch",
        ":run_arguments",
        'set "parts=%*"',
        ":dispatch",
        *call_func(f"process_{main_menu}", "%parts%"),
        "exit /b",
        ":interactive",
        *call_func(main_menu),
        ":cleanup",
        "cls",
        "exit /b 0",
    ]
    return "\n".join(lines) + "\n"


async def build_batch(
    context: BuildContext,
    tables: Mapping[str, CommandTable],
    renderer: FontRenderer = render_figlet,
) -> str:
    spec = context.spec
    registry = context.registry(BATCH)
    plans = plan_menus(spec, tables, BATCH, registry)
    auth_levels = sorted(spec.auth.keys())

    parts = [BATCH_HEADER + "\n", build_variables(), build_error(), build_auth(spec), include_scripts(plans, registry)]
    for plan in plans:
        parts.append(await build_menu(plan, auth_levels, renderer))
    parts.append(build_short_command(spec.main_menu))
    return "".join(parts)
