"""Settings persistence (TOML) and config schema."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import tomli_w

from alpa.command import (
    CANCEL,
    Autocomplete,
    Clipboard,
    ClipboardLoad,
    Command,
    GenerateSpec,
    PROMPT_PLACEHOLDER,
    NewlineBehavior,
    Prompt,
    SingleLineUi,
)
from alpa.exceptions import ConfigurationError
from alpa.keycode import parse_keys

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config schema
# ---------------------------------------------------------------------------


@dataclass
class WindowConfig:
    # Size of the single-line prompt popup
    width: int = 640
    height: int = 32


@dataclass
class StyleConfig:
    # Empty string = built-in default
    font: str = ""  # e.g. "Segoe UI 12"
    bg_color: str = ""
    input_bg_color: str = ""
    hovered_bg_color: str = ""
    selected_bg_color: str = ""
    text_color: str = ""
    stroke_color: str = ""


@dataclass
class EngineConfig:
    # Any OpenAI-compatible server exposing /completions (llama.cpp, vLLM, ...)
    base_url: str = "http://localhost:8080/v1"
    api_key: str = ""
    model: str = ""
    temperature: float = 0.8
    max_tokens: int = 512
    stop: list[str] = field(default_factory=list)


@dataclass
class CommandConfig:
    keys: list[str] = field(default_factory=list)
    action: str = "generate"  # "generate" or "cancel"
    input: str = "single-line-ui"  # "single-line-ui" or "clipboard"
    clipboard_load: str = ""  # "" or "line"
    mode: str = "autocomplete"  # "autocomplete" or "prompt"
    template: str = ""  # used when mode = "prompt"; must contain {{PROMPT}}
    newline: str = "enter"  # "stop", "enter" or "shift-enter"


def _default_commands() -> list[CommandConfig]:
    return [
        CommandConfig(
            keys=["LControl", "LAlt", "F1"],
            input="single-line-ui",
            mode="prompt",
            template=(
                "Below is an instruction that describes a task. "
                "Write a response that appropriately completes the request.\n\n"
                "### Instruction:\n{{PROMPT}}\n\n### Response:\n"
            ),
            newline="enter",
        ),
        CommandConfig(
            keys=["LControl", "LAlt", "F2"],
            input="clipboard",
            clipboard_load="line",
            mode="autocomplete",
            newline="stop",
        ),
        CommandConfig(keys=["LAlt", "Escape"], action="cancel"),
    ]


@dataclass
class AppConfig:
    window: WindowConfig = field(default_factory=WindowConfig)
    style: StyleConfig = field(default_factory=StyleConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    commands: list[CommandConfig] = field(default_factory=_default_commands)


# ---------------------------------------------------------------------------
# Command conversion
# ---------------------------------------------------------------------------


_COMMAND_STRING_FIELDS = ("action", "input", "clipboard_load", "mode", "template", "newline")


def command_from_config(entry: CommandConfig) -> Command:
    """Build an immutable :class:`Command` from a config entry.

    Raises:
        ConfigurationError: If any field has an unknown value.
    """
    if not isinstance(entry.keys, list) or not all(isinstance(k, str) for k in entry.keys):
        raise ConfigurationError("keys must be a list of key names")
    if not entry.keys:
        raise ConfigurationError("Command has no keys")
    keys = parse_keys(entry.keys)

    for name in _COMMAND_STRING_FIELDS:
        value = getattr(entry, name)
        if not isinstance(value, str):
            raise ConfigurationError(f"{name} must be a string, got {value!r}")

    if entry.action == "cancel":
        return Command(keys, CANCEL)
    if entry.action != "generate":
        raise ConfigurationError(f"Unknown action {entry.action!r}")

    if entry.input == "single-line-ui":
        input_method = SingleLineUi()
    elif entry.input == "clipboard":
        if entry.clipboard_load == "":
            input_method = Clipboard()
        else:
            try:
                input_method = Clipboard(ClipboardLoad(entry.clipboard_load))
            except ValueError:
                raise ConfigurationError(
                    f"Unknown clipboard_load {entry.clipboard_load!r}"
                ) from None
    else:
        raise ConfigurationError(f"Unknown input {entry.input!r}")

    if entry.mode == "autocomplete":
        mode = Autocomplete()
    elif entry.mode == "prompt":
        if PROMPT_PLACEHOLDER not in entry.template:
            logger.warning("Template for %s has no %s placeholder", entry.keys, PROMPT_PLACEHOLDER)
        mode = Prompt(entry.template)
    else:
        raise ConfigurationError(f"Unknown mode {entry.mode!r}")

    try:
        newline = NewlineBehavior(entry.newline)
    except ValueError:
        raise ConfigurationError(f"Unknown newline {entry.newline!r}") from None

    return Command(keys, GenerateSpec(input_method, mode, newline))


def build_commands(config: AppConfig) -> list[Command]:
    """Convert every configured command, preserving order.

    Raises:
        ConfigurationError: Naming the first invalid entry.
    """
    commands: list[Command] = []
    for index, entry in enumerate(config.commands):
        try:
            commands.append(command_from_config(entry))
        except ConfigurationError as exc:
            raise ConfigurationError(
                f"commands[{index}] (keys={entry.keys!r}): {exc}"
            ) from exc
    return commands


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_config_path() -> Path:
    """Return the path to the config file (~/.alpa/config.toml)."""
    return Path.home() / ".alpa" / "config.toml"


def _merge_into_dataclass(cls: type, data: dict) -> object:
    """Create a dataclass instance from *data*, ignoring unknown keys."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


def _deep_merge(defaults: dict, overrides: dict) -> dict:
    """Recursively merge *overrides* into *defaults* (non-destructive)."""
    merged = defaults.copy()
    for key, value in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(data: dict, name: str) -> dict:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{name}' must be a table")
    return value


def _dict_to_config(data: dict) -> AppConfig:
    """Build an AppConfig from a plain dict (e.g. parsed TOML)."""
    window = _merge_into_dataclass(WindowConfig, _section(data, "window"))
    style = _merge_into_dataclass(StyleConfig, _section(data, "style"))
    engine = _merge_into_dataclass(EngineConfig, _section(data, "engine"))

    stop = engine.stop  # type: ignore[attr-defined]
    if not isinstance(stop, list) or not all(isinstance(s, str) for s in stop):
        raise ConfigurationError("engine.stop must be a list of strings")

    commands_data = data.get("commands", [])
    if not isinstance(commands_data, list):
        raise ConfigurationError("'commands' must be an array of tables")
    commands = []
    for entry in commands_data:
        if not isinstance(entry, dict):
            raise ConfigurationError("Each entry in 'commands' must be a table")
        commands.append(_merge_into_dataclass(CommandConfig, entry))

    return AppConfig(window=window, style=style, engine=engine, commands=commands)  # type: ignore[arg-type]


def _config_to_dict(config: AppConfig) -> dict:
    """Convert an AppConfig to a plain dict suitable for TOML serialization."""
    return asdict(config)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> AppConfig:
    """Load config from file, merge with defaults.

    Creates a default config file if one does not exist.  A file that lists
    ``commands`` replaces the default command list entirely.

    Raises:
        ConfigurationError: If the file is not valid TOML or has the wrong shape.
    """
    path = path or get_config_path()

    if not path.exists():
        logger.info("No config at %s, writing defaults", path)
        config = AppConfig()
        save_config(config, path)
        return config

    try:
        with open(path, "rb") as f:
            file_data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc

    default_data = _config_to_dict(AppConfig())
    merged = _deep_merge(default_data, file_data)
    try:
        return _dict_to_config(merged)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid config in {path}: {exc}") from exc


def save_config(config: AppConfig, path: Path | None = None) -> None:
    """Save *config* to the TOML config file.

    Creates the parent directory if it does not exist.
    """
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)
