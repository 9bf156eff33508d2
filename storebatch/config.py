"""
Loading of settings from a YAML configuration file.
"""
import logging.config
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Self

import yaml

from storebatch.batch.config import BatchConfig
from storebatch.batch.exception import BatchValueError
from storebatch.exception import ConfigError
from storebatch.log.logger import StoreBatchLogger
from storebatch.storage import StorageAdapter, LocalStorage, MemoryStorage, HTTPStorage

STORAGE_KINDS: frozenset[str] = frozenset({"local", "memory", "http"})


class Config:
    """
    Settings for the package as loaded from a config file.

    :param settings: The parsed config as a mapping of section name to section settings.
    """

    __slots__ = ("logger", "_settings")

    @property
    def log_settings(self) -> dict[str, Any] | None:
        """The ``logging.config.dictConfig`` mapping to configure logging with"""
        return self._section("logging", required=False)

    @property
    def storage(self) -> dict[str, Any]:
        """The settings for the storage backend"""
        return self._section("storage", required=True)

    @property
    def batch(self) -> BatchConfig:
        """The :py:class:`BatchConfig` to use for batch requests"""
        settings = self._section("batch", required=False) or {}

        output = settings.get("output")
        if output is not None and (not isinstance(output, Mapping) or "bucket" not in output):
            raise ConfigError("Output must be a mapping with a 'bucket' key", key="batch.output", value=output)

        show_progress = settings.get("show_progress", False)
        if not isinstance(show_progress, bool):
            raise ConfigError("Show progress must be true or false", key="batch.show_progress", value=show_progress)

        config = BatchConfig(encoding=settings.get("encoding", "utf8"), show_progress=show_progress)
        try:
            config = config.with_concurrency(settings.get("concurrency"))
        except BatchValueError as ex:
            raise ConfigError(str(ex), key="batch.concurrency", value=settings.get("concurrency")) from ex

        if output is not None:
            config = config.with_target(output["bucket"], prefix=output.get("prefix", ""))
        return config

    @classmethod
    def from_file(cls, path: str | Path) -> Self:
        """Load the config from the YAML file at the given ``path``"""
        path = Path(path)
        if not path.is_file():
            raise ConfigError("Config file not found", value=str(path))

        with open(path, "r", encoding="utf-8") as file:
            settings = yaml.safe_load(file)

        return cls(settings or {})

    def __init__(self, settings: Mapping[str, Any]):
        # noinspection PyTypeChecker
        #: The :py:class:`StoreBatchLogger` for this  object
        self.logger: StoreBatchLogger = logging.getLogger(__name__)

        if not isinstance(settings, Mapping):
            raise ConfigError("Config must be a mapping of sections", value=settings)
        self._settings = dict(settings)

    def _section(self, key: str, required: bool) -> dict[str, Any] | None:
        section = self._settings.get(key)
        if section is None:
            if required:
                raise ConfigError("Missing required config section", key=key)
            return

        if not isinstance(section, Mapping):
            raise ConfigError("Config section must be a mapping", key=key, value=section)
        return dict(section)

    def configure_logging(self) -> None:
        """Configure logging with the ``logging`` section of the config if present"""
        if not self.log_settings:
            return

        logging.config.dictConfig({"version": 1, "disable_existing_loggers": False, **self.log_settings})
        self.logger.debug("Logging configured from config file")

    def create_storage(self) -> StorageAdapter:
        """Create the storage backend defined in the ``storage`` section of the config"""
        settings = self.storage
        kind = str(settings.get("kind", "")).casefold()
        if kind not in STORAGE_KINDS:
            raise ConfigError(f"Storage kind must be one of {sorted(STORAGE_KINDS)}", key="storage.kind", value=kind)

        match kind:
            case "local":
                if not settings.get("path"):
                    raise ConfigError("Local storage requires a path", key="storage.path")
                return LocalStorage(path=Path(settings["path"]).expanduser())
            case "http":
                if not settings.get("endpoint"):
                    raise ConfigError("HTTP storage requires an endpoint", key="storage.endpoint")
                return HTTPStorage.create(endpoint=settings["endpoint"], headers=settings.get("headers"))
            case _:
                return MemoryStorage()


def load_config(path: str | Path) -> Config:
    """Load the :py:class:`Config` from the YAML file at the given ``path``"""
    return Config.from_file(path)
