from .builder import CubeParseBuilder
from .loader import CubeDatabaseLoader
from .errors import InvalidFilterError
from .generator_config import GeneratorOptions, load_generator_options
from .mcu_set import McuSet
from .pin_signal import GpioPin, McuRecord, ParsedSignal, PinLocation, RawSignal
