import logging
from logging import Logger
from .logger import setup_logger
from .hal.builder import CubeParseBuilder


class Assistant:

    def __init__(self, name: str):
        self.log: Logger = setup_logger(name, task_name="cube-parse")

    def set_log_level(self, level: str):
        """Sets the logging level based on a string input."""
        log: Logger = self.log
        numeric_level = getattr(logging, level.upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(f'Invalid log level: {level}')
        log.setLevel(numeric_level)
        log.debug(f"Log level set to {level.upper()}")

    def run(self, **kwargs) -> bool:
        log: Logger = self.log
        log.debug("running assistant", extra={"arguments": kwargs})

        if kwargs.get("action") == "generate":
            builder = CubeParseBuilder(logger=self.log, **kwargs)
            return builder.build()

        action = kwargs.get("action")
        raise Exception(f"No valid action specified in run command. Got: {action}")
