from __future__ import annotations

import argparse

from ..core import *  # noqa: F401,F403
from .common import resolve_directory, resolve_menu_names, unsupported_commands

def command_validate(args: argparse.Namespace) -> int:
    directory = resolve_directory(args.directory)
    context = create_build_context(directory)
    spec = context.spec
    command_count = sum(len(menu.commands) for menu in spec.menus.values())
    print(
        f"[{spec.title}] valid: menus={len(spec.menus)} commands={command_count} "
        f"auth_levels={len(spec.auth)} main_menu={spec.main_menu}"
    )
    for backend in BACKENDS:
        registry = context.registry(backend)
        unsupported = unsupported_commands(context, backend)
        print(f"[{backend.name}] fragments={len(registry.fragments)} unsupported={len(unsupported)}")
        for menu_name, command_name in unsupported:
            print(f"  {menu_name}.{command_name}: not supported for {backend.platform_label}")
    return 0


def command_list_commands(args: argparse.Namespace) -> int:
    directory = resolve_directory(args.directory)
    context = create_build_context(directory)
    spec = context.spec
    backend = get_backend(args.backend)
    registry = context.registry(backend)
    auth_level = int(args.auth_level or 0)
    if auth_level and auth_level not in spec.auth:
        known = ", ".join(str(level) for level in spec.auth) or "none"
        raise ShellForgeError(f"Unknown auth level '{auth_level}'. Known levels: {known}")

    tables = build_command_tables(spec)
    for menu_name in resolve_menu_names(spec, args.menu):
        visible = filter_for_help(tables[menu_name], registry.known_files(), registry.extension, auth_level)
        print(f"[{menu_name}] {len(visible)} commands")
        for command in visible.values():
            print(f"  {help_term(command)}: {command.description}")
    return 0


def command_schema(args: argparse.Namespace) -> int:
    print(json.dumps(load_cli_schema(), indent=2))
    return 0


def command_hash_key(args: argparse.Namespace) -> int:
    print(hash_key(args.key))
    return 0
