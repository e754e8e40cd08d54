import re
from typing import Iterable, List, Tuple
from natsort import natsort_keygen

_SEGMENT_RE = re.compile(r"(\d+)|([A-Z])([A-Z]+|[a-z]+)?|([a-z])([a-z]+)?")

_natsort_key = natsort_keygen()


def natural_key(value: str) -> Tuple[tuple, str]:
    """
    Sort key comparing digit runs by numeric value, so "PA2" sorts before "PA10".
    The raw string breaks ties ("PA01" vs "PA1") to keep the order total.
    """
    return _natsort_key(value), value


def natural_sorted(values: Iterable[str]) -> List[str]:
    return sorted(values, key=natural_key)


def to_pascalcase(value: str) -> str:
    """Converts "USART" to "Usart", "CH1N" to "Ch1N", "JTCK-SWCLK" to "JtckSwclk"."""
    segments = []
    for m in _SEGMENT_RE.finditer(value):
        digits, big, big_rest, little, little_rest = m.groups()
        if digits:
            segments.append(digits)
        elif big:
            segments.append(big.upper() + (big_rest or "").lower())
        else:
            segments.append(little.upper() + (little_rest or "").lower())
    return "".join(segments)


def wrap_names(names: List[str], width: int = 80, indent: str = "    ") -> List[str]:
    """
    Wraps a comma separated enumeration of names into lines no wider than `width` where possible.
    Names are never reordered or split; a name longer than the budget gets its own line.
    """
    lines: List[str] = []
    current = ""
    for i, name in enumerate(names):
        token = name + ("," if i < len(names) - 1 else "")
        candidate = f"{current} {token}" if current else f"{indent}{token}"
        if current and len(candidate) > width:
            lines.append(current)
            candidate = f"{indent}{token}"
        current = candidate
    if current:
        lines.append(current)
    return lines
