from logging import Logger
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, Iterable, List, Set, Tuple, TypeVar
from .aggregation_tree import AggregationTree, Leaf
from ..mcu_set import McuSet
from ..pin_signal import PinLocation
from ..utils import natural_key, natural_sorted

V = TypeVar("V", bound=Hashable)
Interface = Tuple[str, str]    # (stem, io_role)
CombinedInterface = Tuple[str, Tuple[str, ...]]    # (stem, io_roles)


def group_by_support(support: Dict[V, McuSet], key: Callable[[V], object] = None) -> Dict[McuSet, List[V]]:
    """
    Partitions values into equivalence classes of identical MCU support.

    The MCU set itself is the class key, so values supported by exactly the same MCUs
    share a group; subsets and supersets stay separate groups. Groups are ordered by
    their MCU set, members by `key` (natural order of str(value) by default).
    """
    if key is None:
        key = lambda v: natural_key(str(v))
    classes: Dict[McuSet, List[V]] = {}
    for value, mcus in support.items():
        classes.setdefault(mcus, []).append(value)
    return {mcus: sorted(classes[mcus], key=key) for mcus in sorted(classes, key=lambda m: m.sort_key)}


def flatten_groups(groups: Dict[McuSet, List[V]]) -> Dict[V, McuSet]:
    """Inverse of group_by_support: maps every member back to its group's MCU set."""
    return {value: mcus for mcus, values in groups.items() for value in values}


def _collect(leaves: Iterable[Leaf], value_of: Callable[[Leaf], V]) -> Dict[V, McuSet]:
    support: Dict[V, List[str]] = {}
    for leaf in leaves:
        support.setdefault(value_of(leaf), []).extend(leaf.mcus)
    return {value: McuSet(mcus) for value, mcus in support.items()}


def device_usage(leaves: List[Leaf]) -> Dict[McuSet, List[str]]:
    return group_by_support(_collect(leaves, lambda leaf: leaf.device))


def af_usage(leaves: List[Leaf]) -> Dict[McuSet, List[str]]:
    return group_by_support(_collect(leaves, lambda leaf: leaf.af_code))


def pin_usage(leaves: List[Leaf]) -> Dict[McuSet, List[PinLocation]]:
    return group_by_support(_collect(leaves, lambda leaf: leaf.location), key=lambda loc: loc)


def interface_usage(leaves: List[Leaf]) -> Dict[McuSet, List[Interface]]:
    return group_by_support(_collect(leaves, lambda leaf: (leaf.stem, leaf.io_role)),
                            key=lambda i: (natural_key(i[0]), natural_key(i[1])))


def combined_usage(leaves: List[Leaf]) -> Dict[McuSet, List[CombinedInterface]]:
    """
    Groups the role sets of every stem by the MCUs offering exactly that set, so a
    combined interface only names roles that all MCUs of its group provide.
    """
    roles_per_mcu: Dict[Tuple[str, str], Set[str]] = {}
    for leaf in leaves:
        for mcu in leaf.mcus:
            roles_per_mcu.setdefault((leaf.stem, mcu), set()).add(leaf.io_role)

    support: Dict[CombinedInterface, List[str]] = {}
    for (stem, mcu), roles in roles_per_mcu.items():
        support.setdefault((stem, tuple(natural_sorted(roles))), []).append(mcu)
    return group_by_support({combined: McuSet(mcus) for combined, mcus in support.items()},
                            key=lambda c: (natural_key(c[0]), [natural_key(role) for role in c[1]]))


def implementation_groups(leaves: List[Leaf]) -> Dict[McuSet, List[Leaf]]:
    """Groups leaves by their exact MCU set, keeping tree order inside each group."""
    groups: Dict[McuSet, List[Leaf]] = {}
    for leaf in leaves:
        groups.setdefault(leaf.mcus, []).append(leaf)
    return {mcus: groups[mcus] for mcus in sorted(groups, key=lambda m: m.sort_key)}


@dataclass
class GroupedTree:
    leaves: List[Leaf]
    stem_roles: Dict[str, List[str]]
    devices: Dict[McuSet, List[str]] = field(default_factory=dict)
    af_codes: Dict[McuSet, List[str]] = field(default_factory=dict)
    pins: Dict[McuSet, List[PinLocation]] = field(default_factory=dict)
    interfaces: Dict[McuSet, List[Interface]] = field(default_factory=dict)
    combined: Dict[McuSet, List[CombinedInterface]] = field(default_factory=dict)
    implementations: List[Tuple[McuSet, List[Leaf]]] = field(default_factory=list)


def group_tree(tree: AggregationTree, log: Logger, group_variants: bool = True) -> GroupedTree:
    """
    Derives the grouped projection of the tree used for rendering. The tree is left
    untouched. With group_variants disabled every leaf becomes its own implementation
    block, in tree order.
    """
    leaves = list(tree.leaves())
    grouped = GroupedTree(
        leaves=leaves,
        stem_roles={stem: tree.roles(stem) for stem in tree.stems()},
        devices=device_usage(leaves),
        af_codes=af_usage(leaves),
        pins=pin_usage(leaves),
        interfaces=interface_usage(leaves),
        combined=combined_usage(leaves),
    )

    if group_variants:
        grouped.implementations = list(implementation_groups(leaves).items())
    else:
        grouped.implementations = [(leaf.mcus, [leaf]) for leaf in leaves]

    log.debug("Grouped variants", extra={
        "leaves": len(leaves),
        "device_groups": len(grouped.devices),
        "af_groups": len(grouped.af_codes),
        "pin_groups": len(grouped.pins),
        "interface_groups": len(grouped.interfaces),
        "combined_groups": len(grouped.combined),
        "implementation_blocks": len(grouped.implementations),
    })
    return grouped
