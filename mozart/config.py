"""Server configuration loaded from YAML.

Example ``mozart.yaml``::

    server_name: mozart
    log_level: DEBUG
    defaults:
      bpm: 96
      numerator: 3
      denominator: 4
      ppq: 960
    search_limit: 500

Every key is optional. The file is located through the ``MOZART_CONFIG``
environment variable, falling back to ``mozart.yaml`` in the working
directory.
"""

import dataclasses
import logging
import os
import typing

import yaml

import mozart.constants
import mozart.registry


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MOZART_CONFIG"
DEFAULT_CONFIG_PATH = "mozart.yaml"


@dataclasses.dataclass
class Config:

	"""Runtime settings for the MCP server."""

	server_name: str = "mozart"
	log_level: str = "INFO"
	defaults: mozart.registry.Defaults = dataclasses.field(default_factory=mozart.registry.Defaults)
	search_limit: int = mozart.constants.SEARCH_RESULT_LIMIT


def config_path () -> str:
	return os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)


def load_config (path: typing.Optional[str] = None) -> Config:

	"""
	Load configuration from a YAML file.

	A missing file is not an error: the defaults are used and a warning is
	logged. Unknown keys are ignored with a warning.
	"""

	path = path or config_path()
	config = Config()

	if not os.path.exists(path):
		logger.warning(f"Config file {path} not found. Using defaults.")
		return config

	with open(path, 'r') as f:
		raw = yaml.safe_load(f) or {}

	if not isinstance(raw, dict):
		raise ValueError(f"Config file {path} must contain a mapping")

	for key, value in raw.items():

		if key == "defaults":
			config.defaults = _load_defaults(value or {})

		elif key in ("server_name", "log_level"):
			setattr(config, key, str(value))

		elif key == "search_limit":
			config.search_limit = int(value)

			if config.search_limit <= 0:
				raise ValueError(f"search_limit must be positive, got {value}")

		else:
			logger.warning(f"Ignoring unknown config key '{key}'")

	return config


def _load_defaults (raw: typing.Dict[str, typing.Any]) -> mozart.registry.Defaults:

	defaults = mozart.registry.Defaults()

	for key, value in raw.items():

		if key == "bpm":
			defaults.bpm = float(value)

		elif key in ("numerator", "denominator", "ppq"):
			setattr(defaults, key, int(value))

		else:
			logger.warning(f"Ignoring unknown config key 'defaults.{key}'")

	return defaults
