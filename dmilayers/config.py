# Configuration file representation

from typing import Optional

import attr
import cattr
import cattr.errors
import cattr.preconf.tomlkit
import tomlkit
import tomlkit.exceptions


class ConfigError(Exception):
    pass


@attr.define
class LayersConfig:
    raw_data_key: str = "DMI_RawData"
    state_name_key: str = "DMI_StateName"
    warn_on_truncation: bool = True
    compress_level: int = 9


def load_config(filename: Optional[str] = None) -> LayersConfig:
    if not filename:
        return LayersConfig()

    toml_converter = cattr.preconf.tomlkit.make_converter(
        forbid_extra_keys=True
    )
    try:
        with open(filename) as file:
            toml_data = tomlkit.load(file)
        config = toml_converter.structure(toml_data.unwrap(), LayersConfig)
    except (
        tomlkit.exceptions.TOMLKitError,
        cattr.errors.BaseValidationError,
        cattr.errors.ForbiddenExtraKeysError,
    ) as exc:
        raise ConfigError(f"Bad config ({filename}): {exc}") from exc

    if not 0 <= config.compress_level <= 9:
        raise ConfigError(f"Bad compress_level: {config.compress_level}")
    return config
