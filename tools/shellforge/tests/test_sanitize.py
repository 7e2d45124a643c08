from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from shellforge_core import core as shellforge_core  # noqa: E402


class SanitizeTests(unittest.TestCase):
    def test_bash_string_escapes_quotes_backslashes_and_backticks(self) -> None:
        value = shellforge_core.sanitize_bash_string('say "hi" \\ `x` \'y\'')
        self.assertEqual(value, 'say \\"hi\\" \\\\ \\`x\\` \\\'y\\\'')

    def test_bash_string_keeps_placeholders(self) -> None:
        self.assertEqual(shellforge_core.sanitize_bash_string("${RED}Hi $USER"), "${RED}Hi $USER")

    def test_bash_printf_doubles_percent(self) -> None:
        self.assertEqual(shellforge_core.sanitize_bash_printf('100% "done"'), '100%% \\"done\\"')

    def test_bash_printf_keeps_backslashes_literal(self) -> None:
        value = shellforge_core.sanitize_bash_printf("C:\\new\\temp \\\\server `x`")
        self.assertEqual(value, "C:\\\\\\\\new\\\\\\\\temp \\\\\\\\\\\\\\\\server \\`x\\`")

    def test_batch_string_escapes_redirection_and_pipes(self) -> None:
        self.assertEqual(shellforge_core.sanitize_batch_string("a > b | c < d"), "a ^> b ^| c ^< d")

    def test_batch_string_converts_known_variables(self) -> None:
        value = shellforge_core.sanitize_batch_string("${GREY}help|?${RESET} $USER $HOME")
        self.assertEqual(value, "%GREY%help^|?%RESET% %USER% $HOME")

    def test_convert_variables_honours_explicit_names(self) -> None:
        value = shellforge_core.convert_variables("$A ${B} $C", frozenset({"A", "B"}))
        self.assertEqual(value, "%A% %B% $C")

    def test_batch_variables_include_dynamic_names(self) -> None:
        names = shellforge_core.batch_variable_names()
        self.assertIn("TIME", names)
        self.assertIn("AUTH_LEVEL", names)
        self.assertIn("BG_DARK_GREY", names)

    def test_color_tables_per_dialect(self) -> None:
        self.assertEqual(shellforge_core.bash_variables()["RED"], "'\\e[31m'")
        self.assertEqual(shellforge_core.batch_variables()["RED"], "\x1b[31m")
        self.assertEqual(shellforge_core.batch_variables()["USER"], "%USERNAME%")
        self.assertEqual(shellforge_core.bash_variables()["AUTH_LEVEL"], "0")

    def test_quote_bash_value(self) -> None:
        self.assertEqual(shellforge_core.quote_bash_value("two words"), "'two words'")
        self.assertEqual(shellforge_core.quote_bash_value(True), "true")
        self.assertEqual(shellforge_core.quote_bash_value(3), "3")
        self.assertEqual(shellforge_core.format_batch_value(False), "false")

    def test_double_quote_bash(self) -> None:
        self.assertEqual(shellforge_core.double_quote_bash('a"$b'), '"a\\"\\$b"')


if __name__ == "__main__":
    unittest.main()
