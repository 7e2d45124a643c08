from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from shellforge_core import core as shellforge_core  # noqa: E402
from cli_fixtures import make_cli_document  # noqa: E402


def sample_cli() -> shellforge_core.CliSpec:
    return shellforge_core.parse_cli_spec(make_cli_document())


class CommandTableTests(unittest.TestCase):
    def test_builtins_follow_declared_commands(self) -> None:
        spec = sample_cli()
        table = shellforge_core.build_command_table("main", spec.menus["main"].commands, spec.auth)
        self.assertEqual(
            list(table.keys()),
            ["ping", "greet", "count", "secret", "winver", "hidden", "clear", "exit", "help", "auth", "*"],
        )
        self.assertEqual(table["clear"].aliases, ("cls", "c"))
        self.assertEqual(table["exit"].aliases, ("ex", "e"))
        self.assertEqual(table["help"].aliases, ("?", "h"))
        self.assertTrue(table["*"].is_catch_all)

    def test_auth_builtin_bounds_cover_declared_levels(self) -> None:
        auth = {
            1: shellforge_core.AuthMethod(1, "hash", "0" * 40),
            3: shellforge_core.AuthMethod(3, "hash", "1" * 40),
        }
        table = shellforge_core.build_command_table("main", {}, auth)
        level = table["auth"].args[0]
        self.assertEqual(level.name, "level")
        self.assertEqual(level.min_value, 1)
        self.assertEqual(level.max_value, 4)
        self.assertFalse(level.has_default)

    def test_auth_builtin_omitted_without_auth(self) -> None:
        table = shellforge_core.build_command_table("tools", {})
        self.assertEqual(list(table.keys()), ["clear", "exit", "help", "*"])

    def test_help_filter_default_tier(self) -> None:
        spec = sample_cli()
        table = shellforge_core.build_command_table("main", spec.menus["main"].commands, spec.auth)
        visible = shellforge_core.filter_for_help(table, frozenset({"greet.sh"}), "sh")
        self.assertEqual(list(visible.keys()), ["ping", "greet", "count", "winver", "clear", "exit", "help", "auth"])

    def test_help_filter_drops_script_without_fragment(self) -> None:
        spec = sample_cli()
        table = shellforge_core.build_command_table("main", spec.menus["main"].commands, spec.auth)
        visible = shellforge_core.filter_for_help(table, frozenset(), "sh")
        self.assertNotIn("greet", visible)

    def test_help_filter_auth_tier_lists_only_that_tier(self) -> None:
        spec = sample_cli()
        table = shellforge_core.build_command_table("main", spec.menus["main"].commands, spec.auth)
        visible = shellforge_core.filter_for_help(table, frozenset({"greet.sh"}), "sh", 1)
        self.assertEqual(list(visible.keys()), ["secret"])

    def test_resolve_body_prefers_known_fragment(self) -> None:
        spec = sample_cli()
        greet = spec.menus["main"].commands["greet"]
        registry = shellforge_core.ScriptRegistry("sh", {"greet": "echo hi\n"})
        body = shellforge_core.resolve_body(greet, shellforge_core.BASH, registry)
        self.assertEqual(body, shellforge_core.ScriptRef("greet"))

    def test_resolve_body_falls_back_to_inline_then_unsupported(self) -> None:
        spec = sample_cli()
        commands = spec.menus["main"].commands
        registry = shellforge_core.ScriptRegistry("bat")
        self.assertEqual(
            shellforge_core.resolve_body(commands["ping"], shellforge_core.BATCH, registry),
            shellforge_core.SingleLine("echo pong"),
        )
        self.assertIsInstance(
            shellforge_core.resolve_body(commands["count"], shellforge_core.BASH, registry),
            shellforge_core.MultiLine,
        )
        self.assertIsInstance(
            shellforge_core.resolve_body(commands["hidden"], shellforge_core.BATCH, registry),
            shellforge_core.Unsupported,
        )
        self.assertIsInstance(
            shellforge_core.resolve_body(commands["greet"], shellforge_core.BATCH, registry),
            shellforge_core.Unsupported,
        )

    def test_menu_plan_sections_per_auth_level(self) -> None:
        spec = sample_cli()
        tables = shellforge_core.build_command_tables(spec)
        registry = shellforge_core.ScriptRegistry("sh", {"greet": "echo hi\n"})
        plans = shellforge_core.plan_menus(spec, tables, shellforge_core.BASH, registry)
        self.assertEqual([plan.name for plan in plans], ["main", "tools"])
        main_plan = plans[0]
        self.assertEqual([section.auth_level for section in main_plan.help_sections], [0, 1])
        self.assertTrue(main_plan.help_sections[0].text.startswith("Showing commands for the main menu.\n\n"))
        self.assertTrue(main_plan.help_sections[1].text.startswith("Auth level 1 commands.\n\n"))
        self.assertEqual([planned.command.name for planned in main_plan.fragments()], ["greet"])
        self.assertEqual([section.auth_level for section in plans[1].help_sections], [0])

    def test_fragment_function_name_is_identifier(self) -> None:
        self.assertEqual(shellforge_core.fragment_function_name("main", "deploy-app"), "fragment_main_deploy_app")


class HelpTextTests(unittest.TestCase):
    def test_columns_pad_to_longest_term_plus_gap(self) -> None:
        commands = {
            "ping": shellforge_core.CommandSpec(name="ping", description="Reply."),
            "greet": shellforge_core.CommandSpec(
                name="greet",
                description="Greet.",
                aliases=("hi",),
                args=(shellforge_core.ArgSpec(name="name"),),
            ),
        }
        text = shellforge_core.render_help("Heading.", commands)
        width = len("greet|hi <name>") + 4
        self.assertEqual(
            text,
            "Heading.\n"
            "\n"
            f"{'ping'.ljust(width)}${{GREY}}Reply.${{RESET}}\n"
            f"{'greet|hi <name>'.ljust(width)}${{GREY}}Greet.${{RESET}}\n",
        )

    def test_optional_args_use_brackets(self) -> None:
        command = shellforge_core.CommandSpec(
            name="count",
            description="Count.",
            args=(
                shellforge_core.ArgSpec(name="limit", has_default=True, default=3),
                shellforge_core.ArgSpec(name="step"),
            ),
        )
        self.assertEqual(shellforge_core.help_term(command), "count [limit] <step>")

    def test_prompt_text_defaults_to_capitalized_name(self) -> None:
        self.assertEqual(shellforge_core.ArgSpec(name="name").prompt_text(), "Name: ")
        self.assertEqual(shellforge_core.ArgSpec(name="x", prompt_message="Your x").prompt_text(), "Your x: ")


if __name__ == "__main__":
    unittest.main()
