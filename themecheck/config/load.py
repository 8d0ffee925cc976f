from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .model import ThemeCheckConfig
from .typed import ConfigLoadError
from ..fs import AbstractFileSystem, paths

logger = logging.getLogger(__name__)

_yaml = YAML(typ="safe")

CONFIG_FILE_NAME = ".theme-check.yml"


def config_uri(root: str) -> str:
    return paths.join(root, CONFIG_FILE_NAME)


async def load_config(
    fs: AbstractFileSystem,
    root: str,
    data: Optional[Mapping[str, Any]] = None,
) -> ThemeCheckConfig:
    """
    Load the run configuration of a theme.

    With *data* given, it is used as the config file's contents; otherwise
    ``.theme-check.yml`` at the theme root is read through *fs*. A missing file
    means defaults. A file that does not parse or has the wrong shape yields a
    config with ``load_error`` set and default settings, so the run goes on.
    """
    uri = config_uri(root)
    if data is None:
        try:
            text = await fs.read_file(uri)
        except FileNotFoundError:
            logger.debug("No %s in %s, using defaults", CONFIG_FILE_NAME, root)
            return ThemeCheckConfig(uri=uri)
        try:
            data = _yaml.load(text) or {}
        except YAMLError as e:
            logger.warning("Failed to parse %s: %s", uri, e)
            return ThemeCheckConfig(uri=uri, load_error=f"Invalid YAML: {e}")

    if not isinstance(data, Mapping):
        return ThemeCheckConfig(uri=uri, load_error=f"{CONFIG_FILE_NAME} must be a mapping")

    try:
        return ThemeCheckConfig.from_mapping(data, uri)
    except ConfigLoadError as e:
        logger.warning("Invalid %s: %s", uri, e)
        return ThemeCheckConfig(uri=uri, load_error=str(e))


__all__ = ["CONFIG_FILE_NAME", "config_uri", "load_config"]
