from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_banner import FontRenderer, render_figlet
from ._core_bash import build_bash
from ._core_batch import build_batch
from ._core_commands import build_command_tables
from ._core_model import BACKENDS, BASH, BATCH, Backend, BuildContext, CliSpec, ScriptRegistry, parse_cli_spec
from ._core_wrappers import (
    BATCH_FILE_NAME,
    CNAME_FILE_NAME,
    HIDDEN_MARKERS,
    INDEX_FILE_NAME,
    readability_file_name,
    render_index_document,
    render_readability_script,
    render_windows_accessor,
)


@dataclass(frozen=True)
class BuildOutput:
    bash: str
    batch: str


def load_cli_spec(directory: Path) -> CliSpec:
    cli_path = directory / CLI_FILE_NAME
    return parse_cli_spec(load_cli_document(cli_path), cli_path)


def load_script_registry(directory: Path, spec: CliSpec, backend: Backend) -> ScriptRegistry:
    funcs_dir = directory / FUNCS_DIRECTORY
    fragments: dict[str, str] = {}
    for menu in spec.menus.values():
        for command in menu.commands.values():
            if command.script is None or command.script in fragments:
                continue
            path = funcs_dir / f"{command.script}.{backend.extension}"
            if path.is_file():
                fragments[command.script] = read_text_file(path)
    return ScriptRegistry(extension=backend.extension, fragments=fragments)


def create_build_context(directory: Path | str) -> BuildContext:
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFound(root)
    spec = load_cli_spec(root)
    registries = {backend.name: load_script_registry(root, spec, backend) for backend in BACKENDS}
    return BuildContext(directory=root, spec=spec, registries=registries)


async def build_scripts(context: BuildContext, renderer: FontRenderer = render_figlet) -> BuildOutput:
    tables = build_command_tables(context.spec)
    bash = await build_bash(context, tables, renderer)
    batch = await build_batch(context, tables, renderer)
    return BuildOutput(bash=bash, batch=batch)


def to_crlf(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\n", "\r\n")


def build_artifacts(context: BuildContext, output: BuildOutput) -> dict[str, str]:
    spec = context.spec
    return {
        INDEX_FILE_NAME: render_index_document(spec, output.bash, BASH),
        readability_file_name(BASH): render_readability_script(spec.title, BASH.name, HIDDEN_MARKERS[BASH.name]),
        BATCH_FILE_NAME: to_crlf(render_index_document(spec, output.batch, BATCH)),
        readability_file_name(BATCH): render_readability_script(spec.title, BATCH.name, HIDDEN_MARKERS[BATCH.name]),
        f"{WINDOWS_OUT_DIRECTORY}/{INDEX_FILE_NAME}": to_crlf(render_windows_accessor(spec.uri)),
        CNAME_FILE_NAME: f"{spec.uri}\n",
    }


def build_project(
    directory: Path | str,
    renderer: FontRenderer = render_figlet,
) -> tuple[BuildContext, dict[str, str]]:
    context = create_build_context(directory)
    output = asyncio.run(build_scripts(context, renderer))
    return context, build_artifacts(context, output)


def write_artifacts(
    *,
    out_dir: Path,
    artifacts: Mapping[str, str],
    dry_run: bool,
    check: bool,
) -> dict[str, Any]:
    results: dict[str, Any] = {}
    statuses: list[str] = []
    for relative_path, content in artifacts.items():
        path = out_dir / relative_path
        status, diff = write_artifact_if_changed(path=path, content=content, dry_run=dry_run, check=check)
        results[relative_path] = {
            "path": path.as_posix(),
            "status": status,
            "diff": diff,
        }
        statuses.append(status)
    return {
        "artifacts": results,
        "has_drift": any(status in {"drift", "would_write"} for status in statuses),
    }
