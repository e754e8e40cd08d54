from .signal_name_parser import parse_signal, parse_signal_name, parse_af_literal, ROLELESS_STEMS
from .device_name_parser import parse_gpio_version, parse_mcu_ref_name
from .gpio_pins_parser import parse_gpio_pins
