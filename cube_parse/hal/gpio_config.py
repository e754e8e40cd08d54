from logging import Logger
from typing import List, Optional
from .mcu_config import parse_xml_input
from .parsers import parse_gpio_pins
from .pin_signal import GpioPin


class GpioModesConfiguration:
    """
    Parses IP/GPIO-<version>_Modes.xml to provide the alternate function signals
    available on every pin of a GPIO revision.
    """

    def __init__(self, file_path: str, logger: Logger, source_name: str = "Unknown"):
        self.log = logger
        self.source_name = source_name
        self.version: Optional[str] = None
        self.pins: List[GpioPin] = []

        tree = parse_xml_input(file_path, logger, source_name)
        self.is_loaded: bool = tree is not None
        if tree is None:
            return

        root = tree.getroot()
        self.version = root.get("Version")
        self.pins = parse_gpio_pins(root, self.log)
        self.log.debug("GPIO modes parsed", extra={"source": source_name, "count": len(self.pins)})
