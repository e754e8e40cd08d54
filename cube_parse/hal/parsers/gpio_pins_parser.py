from logging import Logger
import xml.etree.ElementTree as ET
from typing import List, Optional
from ..pin_signal import GpioPin, PinLocation, RawSignal


def _find_parameter_value(node: ET.Element, parameter_name: str) -> Optional[str]:
    """Returns the PossibleValue text of the SpecificParameter named `parameter_name`."""
    for param in node.findall("{*}SpecificParameter"):
        if param.get("Name") != parameter_name:
            continue
        value = param.find("{*}PossibleValue")
        if value is not None and value.text:
            return value.text.strip()
    return None


def _parse_location(pin: ET.Element, log: Logger) -> Optional[PinLocation]:
    # PortName="PA" and GPIO_PIN_9 give PA9, regardless of decorations in Name
    port_name = pin.get("PortName", "")
    pin_value = _find_parameter_value(pin, "GPIO_Pin")
    if pin_value is None:
        return None

    parts = pin_value.split("_")
    if len(parts) < 3 or not parts[2].isdigit() or not port_name.startswith("P"):
        log.warning("Malformed GPIO pin %s", pin.get("Name"),
                    extra={"port_name": port_name, "gpio_pin": pin_value})
        return None
    return PinLocation(port_name[1:], int(parts[2]))


def parse_gpio_pins(root: ET.Element, log: Logger) -> List[GpioPin]:
    """
    Parses the <GPIO_Pin> entries of a GPIO modes file into pins with their raw
    alternate function signals. Pins without a GPIO_Pin parameter are not routable
    and are skipped.
    """
    log.debug("Parsing GPIO pins")
    pins: List[GpioPin] = []

    for pin in root.findall("{*}GPIO_Pin"):
        location = _parse_location(pin, log)
        if location is None:
            continue

        signals = []
        for sig in pin.findall("{*}PinSignal"):
            signal_name = sig.get("Name")
            af_literal = _find_parameter_value(sig, "GPIO_AF")
            if not signal_name or af_literal is None:
                # Remap-style signals carry no GPIO_AF parameter.
                continue
            signals.append(RawSignal(location=location, name=signal_name, af_literal=af_literal))

        pins.append(GpioPin(location=location, name=pin.get("Name", str(location)), signals=tuple(signals)))

    log.debug("Parsed GPIO pins", extra={"count": len(pins)})
    return pins
