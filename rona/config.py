import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import List

import tomli_w
from appdirs import AppDirs
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_COMMIT_TYPES, DEFAULT_EDITOR, PROJECT_CONFIG_FILE_NAME
from .errors import ConfigAlreadyExists, ConfigNotFound, InvalidConfig
from .template import DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)

# Initialize AppDirs
dirs = AppDirs("rona", "rona")
CONFIG_DIR = Path(dirs.user_config_dir)
LOG_DIR = Path(dirs.user_log_dir)
LEGACY_GLOBAL_CONFIG = Path.home() / ".config" / "rona.toml"


class RonaSettings(BaseSettings):
    """
    Environment overrides, read from RONA_* variables.
    """

    # Replaces the user config directory (RONA_CONFIG_DIR)
    config_dir: Path | None = None
    # Replaces the default log file location (RONA_LOG_FILE)
    log_file: Path | None = None

    model_config = SettingsConfigDict(env_prefix="RONA_", extra="ignore")

    @property
    def global_config_file(self) -> Path:
        return (self.config_dir or CONFIG_DIR) / "config.toml"

    @property
    def global_config_files(self) -> List[Path]:
        if self.config_dir:
            return [self.global_config_file]
        return [self.global_config_file, LEGACY_GLOBAL_CONFIG]

    @property
    def log_path(self) -> Path:
        return self.log_file or LOG_DIR / "rona.log"


class ProjectConfig(BaseModel):
    """
    Settings merged from the global and project TOML files.
    Template variables: {commit_number}, {commit_type}, {branch_name}, {message},
    {date}, {time}, {author}, {email}
    """

    editor: str = DEFAULT_EDITOR
    commit_types: List[str] = list(DEFAULT_COMMIT_TYPES)
    template: str = DEFAULT_TEMPLATE


@dataclass
class RuntimeOptions:
    verbose: bool = False
    dry_run: bool = False


def config_sources(
    settings: RonaSettings,
    project_dir: Path,
    config_path: Path | None = None,
) -> List[Path]:
    """TOML files in precedence order; later files override earlier ones."""
    sources = [config_path] if config_path else settings.global_config_files
    return [*sources, project_dir / PROJECT_CONFIG_FILE_NAME]


def _read_toml(path: Path) -> dict:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise InvalidConfig(f"{path}: {e}") from e


def load_project_config(
    settings: RonaSettings | None = None,
    project_dir: Path | None = None,
    config_path: Path | None = None,
) -> ProjectConfig:
    """
    Loads and merges every existing TOML source.
    An explicit config_path must exist; the default sources are optional.
    """
    settings = settings or RonaSettings()
    project_dir = project_dir or Path.cwd()

    if config_path and not config_path.is_file():
        raise ConfigNotFound(config_path)

    data: dict = {}
    for path in config_sources(settings, project_dir, config_path):
        if path.is_file():
            logger.debug(f"Reading config from {path}")
            data.update(_read_toml(path))

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise InvalidConfig(str(e)) from e


def write_config_file(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(data, f)
    logger.info(f"Wrote config file {path}")


def create_config_file(path: Path, editor: str, base: ProjectConfig | None = None) -> None:
    """Creates a new config file. Refuses to overwrite an existing one."""
    if path.exists():
        raise ConfigAlreadyExists(path)

    config = (base or ProjectConfig()).model_copy(update={"editor": editor})
    write_config_file(path, config.model_dump())


def set_editor(path: Path, editor: str) -> None:
    """Changes the editor in an existing config file, keeping its other keys."""
    if not path.is_file():
        raise ConfigNotFound(path)

    data = _read_toml(path)
    data["editor"] = editor
    write_config_file(path, data)
