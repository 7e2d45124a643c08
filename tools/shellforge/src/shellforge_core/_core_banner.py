from __future__ import annotations

import pyfiglet

from ._core_base import *  # noqa: F401,F403
from ._core_model import Splash, SplashSpec

FontRenderer = Callable[[str, str], Any]


def _figlet_text(text: str, font: str) -> str:
    try:
        return pyfiglet.figlet_format(text, font=font)
    except pyfiglet.FontNotFound as exc:
        raise BuildError("FontNotFound", f"Figlet font '{font}' is not available.") from exc


async def render_figlet(text: str, font: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _figlet_text, text, font)


def trim_art(art: str) -> list[str]:
    lines = [line.rstrip() for line in art.replace("\r\n", "\n").split("\n")]
    while lines and not lines[-1]:
        lines.pop()
    return lines


def rainbow_stride(line_count: int) -> int:
    return max(1, round_half_up(line_count / len(RAINBOW_PALETTE)))


def rainbow_color_for_line(index: int, stride: int) -> str:
    return RAINBOW_PALETTE[min(index // stride, len(RAINBOW_PALETTE) - 1)]


def colorize_rainbow(lines: list[str]) -> str:
    if not lines:
        return ""
    stride = rainbow_stride(len(lines))
    colored = [f"${{{rainbow_color_for_line(index, stride)}}}{line}" for index, line in enumerate(lines)]
    colored[-1] = f"{colored[-1]}${{RESET}}"
    return "\n".join(colored)


def colorize_block(lines: list[str], color: str) -> str:
    return f"${{{color.upper()}}}" + "\n".join(lines) + "${RESET}"


async def build_splash(
    sanitize: Callable[[str], str],
    splash: Splash | None = None,
    renderer: FontRenderer = render_figlet,
) -> str:
    if splash is None:
        return ""
    if isinstance(splash, str):
        return sanitize(splash)
    if not isinstance(splash, SplashSpec):
        raise ShellForgeError(f"Unsupported splash value: {splash!r}")
    if splash.color and splash.color.lower() != RAINBOW and splash.color.upper() not in COLOR_CODES:
        raise BuildError("InvalidColor", f"Splash color '{splash.color}' is not a known color.")
    lines = trim_art(await renderer(splash.text, splash.font))
    if not splash.color:
        colored = "\n".join(lines)
    elif splash.color.lower() == RAINBOW:
        colored = colorize_rainbow(lines)
    else:
        colored = colorize_block(lines, splash.color)
    return sanitize(colored)
