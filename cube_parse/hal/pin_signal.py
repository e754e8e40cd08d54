from typing import NamedTuple, Optional, Tuple
from dataclasses import dataclass


class PinLocation(NamedTuple):
    port: str    # e.g., "A"
    number: int    # e.g., 9

    def __str__(self) -> str:
        return f"P{self.port}{self.number}"


@dataclass(frozen=True)
class RawSignal:
    location: PinLocation
    name: str    # e.g., "USART2_TX"
    af_literal: str    # e.g., "GPIO_AF7_USART2"


@dataclass(frozen=True)
class ParsedSignal:
    stem: str    # e.g., "USART"
    device: str    # e.g., "USART2"
    af_code: str    # e.g., "7"
    io_role: str    # e.g., "TX"

    def __repr__(self) -> str:
        return f"ParsedSignal({self.device}_{self.io_role} -> AF{self.af_code})"


@dataclass(frozen=True)
class GpioPin:
    location: PinLocation
    name: str    # e.g., "PC14-OSC32_IN"
    signals: Tuple[RawSignal, ...] = ()

    def __repr__(self) -> str:
        return f"GpioPin({self.location} -> {len(self.signals)} signals)"


@dataclass(frozen=True)
class McuRecord:
    name: str    # e.g., "STM32L051C(6-8)Tx", names the MCU file
    ref_name: str    # e.g., "STM32L051C6Tx"
    package: Optional[str] = None    # e.g., "LQFP48"
    subfamily: Optional[str] = None    # e.g., "STM32L0x1"
