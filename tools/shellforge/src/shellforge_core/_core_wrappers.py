from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_model import BASH, BATCH, Backend, CliSpec

PRISM_VERSION = "1.16.0"
PRISM_CDN = f"https://cdnjs.cloudflare.com/ajax/libs/prism/{PRISM_VERSION}"
DEFAULT_DESCRIPTION = "Remote CLI."

INDEX_FILE_NAME = "index.html"
BATCH_FILE_NAME = "cmd.bat"
CNAME_FILE_NAME = "CNAME"
ACCESSOR_FILE_NAME = "shell.bat"

HIDDEN_MARKERS = {
    BASH.name: "##",
    BATCH.name: "REM",
}

COMMENT_MARKERS = {
    BASH.name: "#",
    BATCH.name: "::",
}


def readability_file_name(backend: Backend) -> str:
    return f"readability_{backend.name}.js"


def run_command(spec: CliSpec, backend: Backend) -> str:
    if backend is BATCH:
        target = f"%TEMP%\\{ACCESSOR_FILE_NAME}"
        return f"curl -sL https://{spec.uri}/{BATCH_FILE_NAME} -o {target} && {target}"
    return f"bash <(curl -sL https://{spec.uri})"


def short_form_command(spec: CliSpec, backend: Backend) -> str:
    if backend is BATCH:
        return f'set "c=help" & %TEMP%\\{ACCESSOR_FILE_NAME}'
    return f"c=help bash <(curl -sL https://{spec.uri})"


def section(comment: str, title: str) -> list[str]:
    rule = "=" * 42
    return [f"{comment} {rule}", f"{comment}   {title}", f"{comment} {rule}", ""]


def render_index_document(spec: CliSpec, script: str, backend: Backend) -> str:
    hidden = HIDDEN_MARKERS[backend.name]
    comment = COMMENT_MARKERS[backend.name]
    first_line, _, rest = script.partition("\n")

    lines = [
        first_line,
        "",
        f'{hidden} <script src="./{readability_file_name(backend)}"></script>',
        f'{hidden} <link href="{PRISM_CDN}/themes/prism-okaidia.min.css" rel="stylesheet" />',
        f'{hidden} <script src="{PRISM_CDN}/components/prism-core.min.js" data-manual></script>',
        f'{hidden} <script src="{PRISM_CDN}/components/prism-{backend.name}.min.js"></script>',
        f"{hidden} <style>body {{color: #272822; background-color: #272822; font-size: 0.8em;}} </style>",
        *section(comment, "Introduction"),
        f"{comment} {spec.description or DEFAULT_DESCRIPTION}",
        comment,
        f"{comment}   {run_command(spec, backend)}",
        comment,
        "",
        *section(comment, "Advanced Usage"),
        f"{comment} A single command can be run without entering the menu by setting",
        f"{comment} the c variable to the command and its arguments, separated by commas.",
        comment,
        f"{comment}   {short_form_command(spec, backend)}",
        comment,
        "",
        *section(comment, "Source Code"),
        f"{comment} This script contains a large amount of comments so you can understand",
        f"{comment} how it interacts with your system. If you're not interested in the",
        f"{comment} technical details, you can just run the command above.",
        "",
        rest.rstrip("\n"),
        "",
        f"{comment} ------------------------------------------",
        f"{comment}   Notes",
        f"{comment} ------------------------------------------",
        comment,
        f"{comment} This script contains hidden JavaScript which is used to improve",
        f"{comment} readability in the browser (via syntax highlighting, etc), right-click",
        f'{comment} and "View source" of this page to see the entire {backend.name} script!',
        comment,
    ]
    return "\n".join(lines) + "\n"


def render_readability_script(title: str, language: str, ignore_marker: str) -> str:
    title_literal = json.dumps(title)
    return f"""window.addEventListener("load", () => {{
    const $head = document.querySelector("head");
    const $body = document.querySelector("body");
    const script = $body.innerHTML.split("\\n");
    const content = script.reduce(
        (content, line) => {{
            if (line.slice(0, {len(ignore_marker)}) === "{ignore_marker}") {{
                content.head.push(line.slice({len(ignore_marker)}));
            }} else {{
                content.body.push(line);
            }}
            return content;
        }},
        {{ head: [], body: [] }},
    );

    const code = Prism.highlight(
        content.body.join("\\n"),
        Prism.languages.{language},
        "{language}",
    );

    $body.innerHTML =
        "<pre class='language-{language}'><code class='language-{language}'>" +
        code +
        "</code></pre>";
    const $title = document.createElement("title");
    $title.textContent = {title_literal};
    $head.innerHTML = content.head.join("\\n");
    $head.appendChild($title);
}});
"""


def render_windows_accessor(uri: str) -> str:
    lines = [
        "@echo off",
        f"powershell -NoProfile -Command \"(Invoke-WebRequest -UseBasicParsing https://{uri}/{BATCH_FILE_NAME}).Content"
        f' | Out-File -Encoding ascii $env:TEMP\\{ACCESSOR_FILE_NAME}"',
        f'start "" "%TEMP%\\{ACCESSOR_FILE_NAME}"',
        "exit",
    ]
    return "\n".join(lines) + "\n"
