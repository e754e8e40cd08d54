import re
from logging import Logger
from typing import List, Tuple
from .aggregation_tree import Leaf
from .variant_grouper import GroupedTree
from ..generator_config import GeneratorOptions
from ..mcu_set import McuSet
from ..pin_signal import PinLocation
from ..utils import natural_sorted, to_pascalcase, wrap_names

BLOCK_INDENT = " " * 8
PERIPHERAL_PARAM = "PER"


def role_trait_name(stem: str, role: str) -> str:
    """USART + TX gives UsartTxPin; role-less stems such as EVENTOUT give EventoutPin."""
    if role == stem:
        return f"{to_pascalcase(stem)}Pin"
    return f"{to_pascalcase(stem)}{to_pascalcase(role)}Pin"


def combined_trait_name(stem: str) -> str:
    return f"{to_pascalcase(stem)}Pins"


def role_param(role: str) -> str:
    return re.sub(r"\W", "_", role).upper()


def pin_type(location: PinLocation) -> str:
    return f"gpio{location.port.lower()}::{location}"


def _enumeration(opening: str, names: List[str], closing: str, indent: str, width: int) -> List[str]:
    """
    Renders `opening` + names + `closing` on one line when it fits, otherwise one wrapped
    name list per line between the opening and closing lines.
    """
    single = f"{indent}{opening}{', '.join(names)}{closing}"
    if len(single) <= width:
        return [single]
    wrapped = wrap_names(names, width, indent + "    ")
    wrapped[-1] += ","
    return [f"{indent}{opening}"] + wrapped + [f"{indent}{closing.lstrip(',')}"]


def _cfg_block(mcus: McuSet, body: List[str], options: GeneratorOptions) -> List[str]:
    flags = [f'feature = "{options.mcu_flag(mcu)}"' for mcu in mcus]
    block = ["cfg_if::cfg_if! {"]
    block.extend(_enumeration("if #[cfg(any(", flags, "))] {", "    ", options.line_width))
    block.extend(body)
    block.append("    }")
    block.append("}")
    return block


def _use_blocks(title: str, path: str, groups: List[Tuple[McuSet, List[str]]], options: GeneratorOptions) -> List[str]:
    lines = [f"// {title}"]
    for mcus, names in groups:
        body = _enumeration(f"use {path}::{{", names, "};", BLOCK_INDENT, options.line_width)
        lines.extend(_cfg_block(mcus, body, options))
    return lines


def _role_traits(interfaces: List[Tuple[str, str]]) -> List[str]:
    return [f"{BLOCK_INDENT}pub trait {role_trait_name(stem, role)}<{PERIPHERAL_PARAM}> {{}}"
            for stem, role in interfaces]


def _combined_trait(stem: str, roles: List[str], width: int) -> List[str]:
    """A trait implemented by a tuple holding one pin for every role of the stem."""
    name = combined_trait_name(stem)
    params = [role_param(role) for role in roles]
    lines = [f"{BLOCK_INDENT}pub trait {name}<{PERIPHERAL_PARAM}> {{}}"]
    lines.extend(_enumeration("impl<", [PERIPHERAL_PARAM] + params, f"> {name}<{PERIPHERAL_PARAM}>",
                              BLOCK_INDENT, width))
    # A one-element tuple needs its trailing comma.
    lines.extend(_enumeration("for (", params, ",)" if len(params) == 1 else ")", BLOCK_INDENT, width))
    lines.append(f"{BLOCK_INDENT}where")
    for role, param in zip(roles, params):
        lines.append(f"{BLOCK_INDENT}    {param}: {role_trait_name(stem, role)}<{PERIPHERAL_PARAM}>,")
    lines.append(f"{BLOCK_INDENT}{{}}")
    return lines


def _implementation(leaf: Leaf) -> str:
    trait = role_trait_name(leaf.stem, leaf.io_role)
    return f"{BLOCK_INDENT}impl {trait}<{leaf.device}> for {leaf.location}<Alternate<AF{leaf.af_code}>> {{}}"


def render_pin_traits(grouped: GroupedTree, options: GeneratorOptions, log: Logger) -> str:
    """
    Renders the capability source: shared-use declarations, interface declarations and
    one conditional implementation block per group of MCU variants.
    """
    lines: List[str] = [
        "// Generated from the STM32CubeMX database.",
        "",
        "use crate::gpio::Alternate;",
        "",
    ]

    lines.extend(_use_blocks("Peripheral devices", "crate::pac", list(grouped.devices.items()), options))
    lines.append("")
    lines.extend(_use_blocks("Alternate functions", "crate::gpio",
                             [(mcus, [f"AF{af}" for af in afs]) for mcus, afs in grouped.af_codes.items()],
                             options))
    lines.append("")
    lines.extend(_use_blocks("Pins", "crate::gpio",
                             [(mcus, [pin_type(loc) for loc in locs]) for mcus, locs in grouped.pins.items()],
                             options))
    lines.append("")

    lines.append("// Pin interfaces")
    for mcus, interfaces in grouped.interfaces.items():
        lines.extend(_cfg_block(mcus, _role_traits(interfaces), options))
    lines.append("")

    lines.append("// Combined pin interfaces")
    for mcus, combined in grouped.combined.items():
        body: List[str] = []
        for stem, roles in combined:
            body.extend(_combined_trait(stem, list(roles), options.line_width))
        lines.extend(_cfg_block(mcus, body, options))
    lines.append("")

    lines.append("// Pin implementations")
    for mcus, leaves in grouped.implementations:
        lines.extend(_cfg_block(mcus, [_implementation(leaf) for leaf in leaves], options))

    log.debug("Rendered pin traits", extra={
        "implementation_blocks": len(grouped.implementations),
        "stems": natural_sorted(grouped.stem_roles),
    })
    return "\n".join(lines) + "\n"
