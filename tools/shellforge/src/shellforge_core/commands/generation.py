from __future__ import annotations

import argparse

from ..core import *  # noqa: F401,F403
from .common import resolve_directory, resolve_out_dir, unsupported_commands

def command_build(args: argparse.Namespace) -> int:
    directory = resolve_directory(args.directory)
    out_dir = resolve_out_dir(directory, args.out_dir)
    context, artifacts = build_project(directory)

    for backend in BACKENDS:
        for menu_name, command_name in unsupported_commands(context, backend):
            print(f"[{menu_name}] {command_name}: not supported for {backend.platform_label}")

    result = write_artifacts(
        out_dir=out_dir,
        artifacts=artifacts,
        dry_run=args.dry_run,
        check=args.check,
    )
    for relative_path, artifact in result["artifacts"].items():
        print(f"[{relative_path}] {artifact['status']}")
        if args.print_diff and artifact["diff"]:
            print(artifact["diff"])

    if args.report_json:
        report = {
            "generated_at_utc": utc_timestamp_now(),
            "tool_version": TOOL_VERSION,
            "title": context.spec.title,
            "out_dir": to_repo_relative(out_dir, directory),
            "artifacts": {
                relative_path: {
                    "path": to_repo_relative(Path(artifact["path"]), directory),
                    "status": artifact["status"],
                }
                for relative_path, artifact in result["artifacts"].items()
            },
            "has_drift": result["has_drift"],
        }
        write_json(Path(args.report_json).resolve(), report)

    if args.check and result["has_drift"]:
        return 1
    return 0
