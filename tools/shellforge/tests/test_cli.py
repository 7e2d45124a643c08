from __future__ import annotations

import argparse
import contextlib
import hashlib
import io
import json
import tempfile
import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
import shellforge_core as shellforge  # noqa: E402
from shellforge_core import cli as shellforge_cli  # noqa: E402
from cli_fixtures import SAMPLE_URI, write_project  # noqa: E402


class ShellForgeCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = write_project(Path(self.temp_dir.name) / "project")
        self.out_dir = self.root / "out"

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def run_main(self, *argv: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            exit_code = shellforge_cli.main(list(argv))
        return exit_code, stdout.getvalue(), stderr.getvalue()

    def _run_build(self, **overrides: object) -> tuple[int, str]:
        options: dict[str, object] = {
            "directory": str(self.root),
            "out_dir": None,
            "check": False,
            "dry_run": False,
            "print_diff": False,
            "report_json": None,
        }
        options.update(overrides)
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            exit_code = shellforge.command_build(argparse.Namespace(**options))
        return exit_code, stdout.getvalue()

    def test_build_writes_all_artifacts(self) -> None:
        exit_code, output = self._run_build()
        self.assertEqual(exit_code, 0)
        for name in ("index.html", "readability_bash.js", "cmd.bat", "readability_batch.js", "w/index.html", "CNAME"):
            self.assertTrue((self.out_dir / name).exists(), name)
            self.assertIn(f"[{name}] updated", output)
        self.assertEqual((self.out_dir / "CNAME").read_text(encoding="utf-8"), f"{SAMPLE_URI}\n")
        self.assertIn(b"\r\n", (self.out_dir / "cmd.bat").read_bytes())
        self.assertIn("[main] winver: not supported for Unix", output)
        self.assertIn("[main] hidden: not supported for Windows", output)

    def test_check_detects_drift(self) -> None:
        self._run_build()
        exit_code, output = self._run_build(check=True)
        self.assertEqual(exit_code, 0)
        self.assertIn("[cmd.bat] unchanged", output)

        (self.out_dir / "CNAME").write_text("stale.example.com\n", encoding="utf-8")
        exit_code, output = self._run_build(check=True, print_diff=True)
        self.assertEqual(exit_code, 1)
        self.assertIn("[CNAME] drift", output)
        self.assertIn("-stale.example.com", output)
        self.assertEqual((self.out_dir / "CNAME").read_text(encoding="utf-8"), "stale.example.com\n")

    def test_crlf_artifact_is_unchanged_after_write(self) -> None:
        path = self.out_dir / "cmd.bat"
        content = "@echo off\r\necho hi\r\n"
        status, _ = shellforge.write_artifact_if_changed(path=path, content=content, dry_run=False, check=False)
        self.assertEqual(status, "updated")
        status, diff = shellforge.write_artifact_if_changed(path=path, content=content, dry_run=False, check=True)
        self.assertEqual(status, "unchanged")
        self.assertEqual(diff, "")
        self.assertEqual(path.read_bytes(), content.encode("utf-8"))

    def test_dry_run_writes_nothing(self) -> None:
        exit_code, output = self._run_build(dry_run=True)
        self.assertEqual(exit_code, 0)
        self.assertIn("[index.html] would_write", output)
        self.assertFalse(self.out_dir.exists())

    def test_build_report_json(self) -> None:
        report_path = self.root / "reports" / "build.json"
        custom_out = self.root / "site"
        exit_code, _ = self._run_build(out_dir=str(custom_out), report_json=str(report_path))
        self.assertEqual(exit_code, 0)
        report = json.loads(report_path.read_text(encoding="utf-8"))
        self.assertEqual(report["title"], "Demo CLI")
        self.assertEqual(report["out_dir"], "site")
        self.assertFalse(report["has_drift"])
        self.assertEqual(report["artifacts"]["w/index.html"]["path"], "site/w/index.html")
        self.assertTrue((custom_out / "index.html").exists())

    def test_validate(self) -> None:
        exit_code, output, _ = self.run_main("validate", "--directory", str(self.root))
        self.assertEqual(exit_code, 0)
        self.assertIn("[Demo CLI] valid: menus=2 commands=7 auth_levels=1 main_menu=main", output)
        self.assertIn("[bash] fragments=1 unsupported=1", output)
        self.assertIn("[batch] fragments=1 unsupported=2", output)

    def test_list_commands(self) -> None:
        exit_code, output, _ = self.run_main("list-commands", "--directory", str(self.root), "--menu", "main")
        self.assertEqual(exit_code, 0)
        self.assertIn("[main] 8 commands", output)
        self.assertIn("  greet|hi <name>: Greet someone.", output)
        self.assertIn("  auth <level>: Authenticate to an access level.", output)
        self.assertNotIn("secret", output)

        exit_code, output, _ = self.run_main(
            "list-commands",
            "--directory",
            str(self.root),
            "--menu",
            "main",
            "--auth-level",
            "1",
        )
        self.assertEqual(exit_code, 0)
        self.assertIn("[main] 1 commands", output)
        self.assertIn("  secret: Show the secret.", output)

    def test_list_commands_rejects_unknown_menu(self) -> None:
        exit_code, _, error = self.run_main("list-commands", "--directory", str(self.root), "--menu", "nope")
        self.assertEqual(exit_code, 2)
        self.assertIn("shellforge error: Unknown menu 'nope'. Known menus: main, tools", error)

    def test_schema(self) -> None:
        exit_code, output, _ = self.run_main("schema")
        self.assertEqual(exit_code, 0)
        self.assertIn("mainMenu", json.loads(output)["properties"])

    def test_hash_key(self) -> None:
        exit_code, output, _ = self.run_main("hash-key", "opensesame")
        self.assertEqual(exit_code, 0)
        self.assertEqual(output.strip(), hashlib.sha1(b"opensesame").hexdigest())

    def test_missing_directory_is_reported(self) -> None:
        exit_code, _, error = self.run_main("build", "--directory", str(self.root / "missing"))
        self.assertEqual(exit_code, 2)
        self.assertTrue(error.startswith("shellforge error: DirectoryNotFound: "))

    def test_syntax_error_uses_annotation_format(self) -> None:
        (self.root / "cli.json").write_text("{\n", encoding="utf-8")
        exit_code, _, error = self.run_main("validate", "--directory", str(self.root))
        self.assertEqual(exit_code, 2)
        self.assertIn("shellforge error: ::error file=", error)
        self.assertIn("::InvalidJSONSyntax: ", error)


if __name__ == "__main__":
    unittest.main()
