from __future__ import annotations

from ._core_base import *  # noqa: F401,F403


@dataclass(frozen=True)
class Backend:
    name: str
    extension: str
    inline_field: str
    platform_label: str


BASH = Backend(name="bash", extension="sh", inline_field="bashCommand", platform_label="Unix")
BATCH = Backend(name="batch", extension="bat", inline_field="batchCommand", platform_label="Windows")
BACKENDS = (BASH, BATCH)


def get_backend(name: str) -> Backend:
    for backend in BACKENDS:
        if backend.name == name:
            return backend
    known = ", ".join(backend.name for backend in BACKENDS)
    raise ShellForgeError(f"Unknown backend '{name}'. Known backends: {known}")


@dataclass(frozen=True)
class ScriptRef:
    name: str


@dataclass(frozen=True)
class SingleLine:
    text: str


@dataclass(frozen=True)
class MultiLine:
    lines: tuple[str, ...]


@dataclass(frozen=True)
class Unsupported:
    pass


CommandBody = Union[ScriptRef, SingleLine, MultiLine, Unsupported]


class Builtin(str, Enum):
    CLEAR = "clear"
    EXIT = "exit"
    HELP = "help"
    AUTH = "auth"
    CATCH_ALL = "*"


@dataclass(frozen=True)
class ArgSpec:
    name: str
    has_default: bool = False
    default: str | int | float | bool | None = None
    min_value: int | None = None
    max_value: int | None = None
    prompt_message: str | None = None
    hidden: bool = False

    @property
    def placeholder(self) -> str:
        return f"[{self.name}]" if self.has_default else f"<{self.name}>"

    @property
    def has_bounds(self) -> bool:
        return self.min_value is not None or self.max_value is not None

    def prompt_text(self) -> str:
        return DEFAULT_PROMPT_FORMAT.replace("{PROMPT}", self.prompt_message or capitalize(self.name))


@dataclass(frozen=True)
class CommandSpec:
    name: str
    description: str
    aliases: tuple[str, ...] = ()
    args: tuple[ArgSpec, ...] = ()
    access: int | None = None
    visible: bool | None = None
    script: str | None = None
    inline: Mapping[str, CommandBody] = field(default_factory=dict)
    builtin: Builtin | None = None

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    @property
    def is_catch_all(self) -> bool:
        return self.builtin is Builtin.CATCH_ALL


@dataclass(frozen=True)
class AuthMethod:
    level: int
    type: str
    digest: str


@dataclass(frozen=True)
class SplashSpec:
    text: str
    font: str
    color: str | None = None


Splash = Union[str, SplashSpec]


@dataclass(frozen=True)
class MenuSpec:
    name: str
    header: str | None = None
    prefix: str = DEFAULT_PROMPT_PREFIX
    splash: Splash | None = None
    commands: Mapping[str, CommandSpec] = field(default_factory=dict)


@dataclass(frozen=True)
class CliSpec:
    title: str
    uri: str
    main_menu: str
    menus: Mapping[str, MenuSpec]
    description: str | None = None
    auth: Mapping[int, AuthMethod] = field(default_factory=dict)


@dataclass(frozen=True)
class ScriptRegistry:
    """Script fragments found on disk for one backend during one build."""

    extension: str
    fragments: Mapping[str, str] = field(default_factory=dict)

    def known_files(self) -> frozenset[str]:
        return frozenset(f"{name}.{self.extension}" for name in self.fragments)

    def has(self, name: str) -> bool:
        return name in self.fragments

    def read(self, name: str) -> str:
        if name not in self.fragments:
            raise ShellForgeError(f"Script fragment '{name}.{self.extension}' was not loaded for this build.")
        return self.fragments[name]


@dataclass(frozen=True)
class BuildContext:
    directory: Path
    spec: CliSpec
    registries: Mapping[str, ScriptRegistry]

    def registry(self, backend: Backend) -> ScriptRegistry:
        registry = self.registries.get(backend.name)
        if registry is None:
            return ScriptRegistry(extension=backend.extension)
        return registry


def parse_inline_body(value: Any) -> CommandBody | None:
    if isinstance(value, str):
        return SingleLine(value)
    if isinstance(value, list):
        return MultiLine(tuple(str(line) for line in value))
    return None


def parse_arg(name: str, payload: dict[str, Any]) -> ArgSpec:
    return ArgSpec(
        name=name,
        has_default="default" in payload,
        default=payload.get("default"),
        min_value=payload.get("minValue"),
        max_value=payload.get("maxValue"),
        prompt_message=payload.get("promptMessage"),
        hidden=bool(payload.get("hidden", False)),
    )


def parse_command(name: str, payload: dict[str, Any]) -> CommandSpec:
    args_obj = payload.get("args")
    args = tuple(parse_arg(arg_name, arg) for arg_name, arg in (args_obj or {}).items())
    inline: dict[str, CommandBody] = {}
    for backend in BACKENDS:
        body = parse_inline_body(payload.get(backend.inline_field))
        if body is not None:
            inline[backend.name] = body
    return CommandSpec(
        name=name,
        description=str(payload.get("description") or ""),
        aliases=tuple(payload.get("aliases") or ()),
        args=args,
        access=payload.get("access"),
        visible=payload.get("visible"),
        script=payload.get("script"),
        inline=inline,
    )


def parse_splash(value: Any) -> Splash | None:
    if value is None or isinstance(value, str):
        return value
    return SplashSpec(text=value["text"], font=value["font"], color=value.get("color"))


def parse_menu(name: str, payload: dict[str, Any]) -> MenuSpec:
    commands = {
        command_name: parse_command(command_name, command)
        for command_name, command in (payload.get("commands") or {}).items()
    }
    return MenuSpec(
        name=name,
        header=payload.get("header"),
        prefix=payload.get("prefix") or DEFAULT_PROMPT_PREFIX,
        splash=parse_splash(payload.get("splash")),
        commands=commands,
    )


def check_cli_invariants(spec: CliSpec) -> list[str]:
    problems: list[str] = []
    if spec.main_menu not in spec.menus:
        known = ", ".join(spec.menus.keys())
        problems.append(f"mainMenu '{spec.main_menu}' is not defined in menus (known menus: {known})")
    for menu in spec.menus.values():
        for command in menu.commands.values():
            if command.access is not None and command.access not in spec.auth:
                problems.append(
                    f"$.menus.{menu.name}.commands.{command.name}.access: "
                    f"auth level {command.access} is not declared in auth"
                )
            for arg in command.args:
                if arg.name.lower() in RUNTIME_VARIABLE_NAMES:
                    problems.append(
                        f"$.menus.{menu.name}.commands.{command.name}.args.{arg.name}: "
                        "name is reserved by the generated scripts"
                    )
                if arg.min_value is not None and arg.max_value is not None and arg.min_value >= arg.max_value:
                    problems.append(
                        f"$.menus.{menu.name}.commands.{command.name}.args.{arg.name}: "
                        f"minValue {arg.min_value} must be less than maxValue {arg.max_value}"
                    )
    return problems


def parse_cli_spec(payload: dict[str, Any], source: Path | str = CLI_FILE_NAME) -> CliSpec:
    auth: dict[int, AuthMethod] = {}
    for level_key, method in (payload.get("auth") or {}).items():
        level = int(level_key)
        auth[level] = AuthMethod(level=level, type=method["type"], digest=str(method["hash"]).lower())
    spec = CliSpec(
        title=payload["title"],
        uri=payload["uri"],
        description=payload.get("description"),
        main_menu=payload["mainMenu"],
        menus={name: parse_menu(name, menu) for name, menu in payload["menus"].items()},
        auth=dict(sorted(auth.items())),
    )
    problems = check_cli_invariants(spec)
    if problems:
        raise InvalidJSONSchema(source, problems)
    return spec
