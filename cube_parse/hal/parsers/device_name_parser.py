import re
from logging import Logger
from typing import Dict, Optional, Tuple

# Note: revision groups are expected to carry a single revision each.
GPIO_VERSION_RE = re.compile(r"^(?P<group>[^_]+)_gpio_(?P<revision>v\d+_\d+)$")

MCU_REF_NAME_RE = re.compile(
    r"^(?P<line>STM32[A-Z]{1,2}\d\w*?)"
    r"(?P<pin_count>[A-Z])"
    r"(?P<flash_size>[0-9A-Z])"
    r"(?P<package>[A-Z])"
    r"(?P<temperature>[0-9x])"
    r"(?P<option>[A-Z]?)$"
)


def parse_gpio_version(version: str, log: Logger) -> Optional[Tuple[str, str]]:
    """
    Splits a GPIO IP version into (revision group, revision),
    e.g. "STM32L152x8_gpio_v1_0" -> ("STM32L152x8", "v1_0").
    """
    match = GPIO_VERSION_RE.match(version or "")
    if not match:
        log.warning("Could not parse GPIO version %s", version, extra={"gpio_version": version})
        return None
    return match.group("group"), match.group("revision")


def parse_mcu_ref_name(ref_name: str, log: Logger) -> Optional[Dict[str, str]]:
    """
    Decomposes an STM32 reference name, e.g. "STM32L051K8Tx" into line "STM32L051",
    pin count "K", flash size "8", package "T", temperature "x".
    """
    match = MCU_REF_NAME_RE.match(ref_name or "")
    if not match:
        log.warning("Could not parse MCU name %s", ref_name, extra={"mcu": ref_name})
        return None
    return match.groupdict()
