import re
from logging import Logger
from typing import Dict, List, Set
from ..generator_config import GeneratorOptions
from ..parsers import parse_gpio_version, parse_mcu_ref_name
from ..pin_signal import McuRecord
from ..utils import natural_key, natural_sorted


def _sanitize_flag(value: str) -> str:
    return re.sub(r"[^0-9A-Za-z_-]+", "_", value).strip("_")


def render_features(mcu_gpio_map: Dict[str, List[McuRecord]], options: GeneratorOptions, log: Logger) -> str:
    """
    Renders the IO features, followed by MCU features that act as aliases for the IO
    features (plus family and package features when enabled). Every section is sorted
    alphanumerically.
    """
    io_flags: Set[str] = set()
    family_flags: Set[str] = set()
    package_flags: Set[str] = set()
    aliases: Dict[str, List[str]] = {}
    mcu_revisions: Dict[str, str] = {}

    for gpio_version in natural_sorted(mcu_gpio_map):
        version = parse_gpio_version(gpio_version, log)
        if version is None:
            continue
        revision_group, revision = version
        io_flag = options.io_flag(revision_group)

        for mcu in mcu_gpio_map[gpio_version]:
            fields = parse_mcu_ref_name(mcu.ref_name, log)
            if fields is None:
                continue

            mcu_flag = options.mcu_flag(mcu.ref_name)
            if mcu_flag in aliases:
                if mcu_revisions[mcu_flag] != gpio_version:
                    log.warning("MCU %s listed under %s and %s, using %s",
                                mcu.ref_name, mcu_revisions[mcu_flag], gpio_version, mcu_revisions[mcu_flag],
                                extra={"mcu": mcu.ref_name, "gpio_version": gpio_version})
                continue

            depends = [io_flag]
            if options.family_flags:
                family_flag = fields["line"].lower()
                family_flags.add(family_flag)
                depends.append(family_flag)
            if options.package_flags and mcu.package:
                package_flag = options.package_flag(_sanitize_flag(mcu.package))
                package_flags.add(package_flag)
                depends.append(package_flag)

            io_flags.add(io_flag)
            aliases[mcu_flag] = depends
            mcu_revisions[mcu_flag] = gpio_version

    lines = [
        "// Features based on the GPIO peripheral version.",
        "// This determines the pin function mapping of the MCU.",
    ]
    lines.extend(f"{flag} = []" for flag in natural_sorted(io_flags))

    if family_flags:
        lines.append("\n// Features based on the MCU line.")
        lines.extend(f"{flag} = []" for flag in natural_sorted(family_flags))

    if package_flags:
        lines.append("\n// Features based on the MCU package.")
        lines.extend(f"{flag} = []" for flag in natural_sorted(package_flags))

    lines.append("\n// Per-MCU aliases for the GPIO peripheral version.")
    for mcu_flag in sorted(aliases, key=natural_key):
        depends = ", ".join(f'"{flag}"' for flag in aliases[mcu_flag])
        lines.append(f"{mcu_flag} = [{depends}]")

    log.debug("Rendered features", extra={"io_features": len(io_flags), "mcu_aliases": len(aliases)})
    return "\n".join(lines) + "\n"
