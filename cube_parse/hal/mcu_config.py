import xml.etree.ElementTree as ET
from logging import Logger
from typing import Optional


def parse_xml_input(file_path: str, log: Logger, source_name: str) -> Optional[ET.ElementTree]:
    try:
        return ET.parse(file_path)
    except ET.ParseError:
        log.error("Malformed XML tree in input", extra={"source": source_name, "path": file_path})
    except OSError as e:
        log.error(f"Failed to read XML data: {str(e)}", extra={"source": source_name, "path": file_path})
    return None


class McuConfiguration:
    """
    Convenience methods used to get data from a CubeMX MCU description file
    (e.g. mcu/STM32L051C(6-8)Tx.xml), which lists the IP blocks of a single MCU
    together with their versions. Namespaces are ignored.
    """

    def __init__(self, file_path: str, logger: Logger, source_name: str = "Unknown"):
        self.log = logger
        self.source_name = source_name
        self._tree: Optional[ET.ElementTree] = parse_xml_input(file_path, logger, source_name)

    def get_ip_version(self, ip_name: str) -> Optional[str]:
        """Gets the version of an IP block, e.g. "STM32L051_gpio_v1_0" for GPIO."""
        if self._tree is None:
            return None

        for node in self._tree.getroot().findall("{*}IP"):
            if node.get("Name") == ip_name:
                return node.get("Version")

        self.log.error("Cannot locate IP %s in MCU description", ip_name, extra={"source": self.source_name})
        return None

    def get_package_name(self) -> Optional[str]:
        if self._tree is None:
            return None
        return self._tree.getroot().get("Package")
