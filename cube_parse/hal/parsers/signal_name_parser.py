import re
from logging import Logger
from typing import Optional, Tuple
from ..pin_signal import ParsedSignal

# I2C and I2S carry a digit inside the stem, so they are matched before the generic stem.
SIGNAL_NAME_RE = re.compile(
    r"^(?P<stem>I2C|I2S|[A-Z][A-Z-]*?)"
    r"(?P<instance>\d*)"
    r"(?P<ext>ext)?"
    r"(?:_(?P<role>.+))?$"
)

AF_LITERAL_RE = re.compile(r"^GPIO_AF(?P<code>[0-9A-Z]+)_(?P<rest>.+)$")

# Stems that legitimately have no role suffix (e.g. "EVENTOUT", "MCO1").
ROLELESS_STEMS = frozenset(["EVENTOUT", "MCO"])


def parse_signal_name(name: str, log: Logger) -> Optional[Tuple[str, str, str]]:
    """
    Splits a pin signal name into (stem, device, io_role):
    "USART2_TX" -> ("USART", "USART2", "TX"), "I2S2ext_SD" -> ("I2S", "I2S2ext", "SD").
    """
    match = SIGNAL_NAME_RE.match(name)
    if not match:
        log.warning("Unable to parse signal name %s", name, extra={"signal": name})
        return None

    stem = match.group("stem")
    device = stem + match.group("instance") + (match.group("ext") or "")
    role = match.group("role")

    if not role:
        if stem not in ROLELESS_STEMS:
            log.warning("Signal %s of device %s has no io role, using stem %s as role",
                        name, device, stem,
                        extra={"signal": name, "device": device, "stem": stem})
        role = stem

    return stem, device, role


def parse_af_literal(literal: str, log: Logger) -> Optional[str]:
    """Extracts the AF code from an alternate function literal, "GPIO_AF7_USART2" -> "7"."""
    match = AF_LITERAL_RE.match(literal or "")
    if not match:
        log.warning("Unable to parse alternate function %s", literal, extra={"af_literal": literal})
        return None
    return match.group("code")


def parse_signal(name: str, af_literal: str, log: Logger) -> Optional[ParsedSignal]:
    """
    Parses a signal name and its alternate function literal.
    Returns None when either part does not match; the failure is logged and the signal
    should be dropped from aggregation.
    """
    fields = parse_signal_name(name, log)
    if fields is None:
        return None
    stem, device, role = fields

    af_code = parse_af_literal(af_literal, log)
    if af_code is None:
        log.warning("Dropping signal %s of device %s with invalid alternate function %s",
                    name, device, af_literal,
                    extra={"signal": name, "device": device, "stem": stem})
        return None

    return ParsedSignal(stem=stem, device=device, af_code=af_code, io_role=role)
