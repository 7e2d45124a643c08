from __future__ import annotations

from ..core import *  # noqa: F401,F403

def resolve_directory(value: str | None) -> Path:
    return Path(value or ".").resolve()


def resolve_out_dir(directory: Path, value: str | None) -> Path:
    if value:
        return Path(value).resolve()
    return (directory / OUT_DIRECTORY).resolve()


def resolve_menu_names(spec: CliSpec, menu_name: str | None) -> list[str]:
    if menu_name:
        if menu_name not in spec.menus:
            known = ", ".join(spec.menus.keys())
            raise ShellForgeError(f"Unknown menu '{menu_name}'. Known menus: {known}")
        return [menu_name]
    return list(spec.menus.keys())


def unsupported_commands(context: BuildContext, backend: Backend) -> list[tuple[str, str]]:
    registry = context.registry(backend)
    out: list[tuple[str, str]] = []
    for menu in context.spec.menus.values():
        for command in menu.commands.values():
            if isinstance(resolve_body(command, backend, registry), Unsupported):
                out.append((menu.name, command.name))
    return out
