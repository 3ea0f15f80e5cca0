"""Logging setup: JSON records on stderr, optionally mirrored to a file."""

import io
import logging
import logging.config
from importlib import resources
from typing import IO, Optional

import yaml
from pythonjsonlogger import jsonlogger

DEFAULT_LOGGING_CONFIG_PATH_INI = "awala_pong.config:default_logging_config.ini"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def load_resource(path: str, encoding: str = None) -> Optional[IO]:
    """
    Open a file from the filesystem or, for `package:file` paths, from a package.

    Returns:
        The open stream, or None if the file does not exist

    """
    package, sep, resource = path.rpartition(":")
    try:
        if not sep:
            return open(path, encoding=encoding)
        stream = resources.files(package).joinpath(resource).open("rb")
    except (OSError, ModuleNotFoundError):
        return None
    return io.TextIOWrapper(stream, encoding=encoding) if encoding else stream


def add_json_file_handler(log_file: str):
    """Write every record of the root logger to `log_file` as JSON lines."""
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    logging.root.addHandler(handler)


class LoggingConfigurator:
    """Configure logging from an INI or YAML file."""

    default_config_path = DEFAULT_LOGGING_CONFIG_PATH_INI

    @classmethod
    def configure(
        cls,
        log_config_path: str = None,
        log_level: str = None,
        log_file: str = None,
    ):
        """
        Configure the root logger.

        Args:
            log_config_path: INI file or `.yml` dict config; the bundled
                INI config by default
            log_level: Level overriding the one in the config
            log_file: File that also receives the records

        """
        log_config_path = log_config_path or cls.default_config_path
        if log_config_path.endswith((".yml", ".yaml")):
            with open(log_config_path, "r") as stream:
                logging.config.dictConfig(yaml.safe_load(stream))
        else:
            stream = load_resource(log_config_path, "utf-8")
            if stream is None:
                logging.basicConfig(level=logging.WARNING)
                logging.root.warning("Logging config file not found: %s", log_config_path)
            else:
                with stream as config_stream:
                    logging.config.fileConfig(
                        config_stream, disable_existing_loggers=False
                    )

        if log_file:
            add_json_file_handler(log_file)
        if log_level:
            logging.root.setLevel(log_level.upper())
