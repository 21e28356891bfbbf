"""Configuration loading.

The resolver reads a handful of switches that change which helper tools a
manifest needs. They live in a small TOML file read with tomlkit:

    use_external_7zip = true
    innosetup_use_innoextract = false

Keys are matched case-insensitively, so upper-case spellings such as
``INNOSETUP_USE_INNOEXTRACT`` work too. ``7ZIPEXTRACT_USE_EXTERNAL`` is
accepted as another name for ``use_external_7zip``. Unknown keys are an
error, so a misspelled switch is reported instead of ignored. The loaded
Config is passed explicitly to the detector and extractor rather than read
from global state.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError

CONFIG_ENV_VAR = "DEPWALK_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/depwalk/config.toml")


class Config(BaseModel):
    """Switches that affect helper-tool requirements.

    Attributes:
        use_external_7zip: An external 7-Zip handles archives, so the 7zip
            helper is never reported as a dependency.
        innosetup_use_innoextract: Unpack Inno Setup installers with
            innoextract instead of innounp.
    """

    model_config = ConfigDict(extra="forbid")

    use_external_7zip: bool = Field(
        default=False,
        validation_alias=AliasChoices("use_external_7zip", "7zipextract_use_external"),
    )
    innosetup_use_innoextract: bool = False

    def get(self, key: str, default: Any = None) -> Any:
        """Read a setting by name, case-insensitively."""
        key = key.lower()
        if key in type(self).model_fields:
            return getattr(self, key)
        return default


def default_config_path() -> Path:
    """Return $DEPWALK_CONFIG if set, else ~/.config/depwalk/config.toml."""
    env = os.environ.get(CONFIG_ENV_VAR)
    return Path(env) if env else DEFAULT_CONFIG_PATH.expanduser()


def parse_config(text: str) -> Config:
    """Build a Config from TOML text.

    Raises:
        ConfigError: If the text is not valid TOML, names an unknown switch,
            or a switch has the wrong type.
    """
    try:
        doc = tomlkit.parse(text)
    except TOMLKitError as exc:
        raise ConfigError(f"Invalid TOML in config: {exc}") from exc

    values = {str(k).lower(): v for k, v in doc.unwrap().items()}
    try:
        return Config.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc


def load_config(path: Path | None = None) -> Config:
    """Load configuration from disk.

    A missing file is not an error: the defaults apply.

    Args:
        path: Config file to read. Defaults to default_config_path().
    """
    path = path or default_config_path()
    if not path.exists():
        return Config()
    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    return parse_config(text)
