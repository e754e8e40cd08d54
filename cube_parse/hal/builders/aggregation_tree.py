from logging import Logger
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple
from ..errors import InvalidFilterError
from ..mcu_set import McuSet
from ..parsers import parse_signal
from ..pin_signal import GpioPin, ParsedSignal, PinLocation
from ..utils import natural_key, natural_sorted

AfRole = Tuple[str, str]    # (af_code, io_role)
RevisionMap = Dict[str, McuSet]    # revision -> MCUs
GroupMap = Dict[str, RevisionMap]    # revision group -> revisions
LocationMap = Dict[PinLocation, GroupMap]
AfRoleMap = Dict[AfRole, LocationMap]
DeviceMap = Dict[str, AfRoleMap]


def _af_role_key(af_role: AfRole):
    return natural_key(af_role[0]), natural_key(af_role[1])


class Leaf(NamedTuple):
    stem: str
    device: str
    af_code: str
    io_role: str
    location: PinLocation
    mcus: McuSet


class AggregationTree:
    """
    Ordered multi-level map of every parsed signal across MCU variants:

        stem -> device -> (af_code, io_role) -> pin location -> revision group -> revision -> MCUs

    The shape is unknown until the whole dataset has been scanned, so every level is
    created on first visit. Iteration always follows natural order at every level.
    """

    def __init__(self, log: Logger):
        self.log = log
        self._stems: Dict[str, DeviceMap] = {}
        self._mcu_sets: Dict[McuSet, McuSet] = {}
        self.conflicts: int = 0

    def _intern(self, mcus: Iterable[str]) -> McuSet:
        mcu_set = McuSet(mcus)
        return self._mcu_sets.setdefault(mcu_set, mcu_set)

    def insert(self, parsed: ParsedSignal, location: PinLocation, revision_group: str, revision: str,
               mcu_set: Iterable[str]):
        """
        Inserts one signal. A second insertion of a different MCU set under the same key
        is logged as a duplicate and discarded; the first insertion wins.
        """
        mcus = self._intern(mcu_set)
        devices = self._stems.setdefault(parsed.stem, {})
        af_roles = devices.setdefault(parsed.device, {})
        locations = af_roles.setdefault((parsed.af_code, parsed.io_role), {})
        groups = locations.setdefault(location, {})
        revisions = groups.setdefault(revision_group, {})

        existing = revisions.get(revision)
        if existing is None:
            revisions[revision] = mcus
            return
        if existing != mcus:
            self.conflicts += 1
            self.log.warning("Duplicate entry for %s AF%s %s on %s (%s %s), keeping first",
                             parsed.device, parsed.af_code, parsed.io_role, location, revision_group, revision,
                             extra={
                                 "device": parsed.device,
                                 "pin": str(location),
                                 "kept": list(existing),
                                 "discarded": list(mcus),
                             })

    def insert_pins(self, pins: List[GpioPin], revision_group: str, revision: str, mcu_set: Iterable[str]) -> int:
        """Parses and inserts all signals of the given pins. Returns the number of inserted signals."""
        mcus = self._intern(mcu_set)
        count = 0
        for pin in pins:
            for raw in pin.signals:
                parsed = parse_signal(raw.name, raw.af_literal, self.log)
                if parsed is None:
                    continue
                self.insert(parsed, raw.location, revision_group, revision, mcus)
                count += 1
        self.log.debug("Inserted signals", extra={"revision_group": revision_group, "revision": revision,
                                                  "count": count})
        return count

    def resolve_mcus(self, groups: GroupMap, context: str = "") -> McuSet:
        """
        Collapses a leaf to the MCUs supporting it. Only the first revision of each
        revision group is considered; additional revisions are reported.
        """
        mcus: List[str] = []
        for group in natural_sorted(groups):
            revisions = natural_sorted(groups[group])
            if len(revisions) > 1:
                self.log.warning("Multiple GPIO revisions for %s%s, using %s",
                                 group, f" at {context}" if context else "", revisions[0],
                                 extra={"revision_group": group, "revisions": revisions})
            mcus.extend(groups[group][revisions[0]])
        return self._intern(mcus)

    def stems(self) -> List[str]:
        return natural_sorted(self._stems)

    def devices(self, stem: str) -> List[str]:
        return natural_sorted(self._stems[stem])

    def roles(self, stem: str) -> List[str]:
        """All io roles of a stem across its devices."""
        found = {role for af_roles in self._stems[stem].values() for (_, role) in af_roles}
        return natural_sorted(found)

    def leaves(self) -> Iterator[Leaf]:
        for stem in self.stems():
            devices = self._stems[stem]
            for device in natural_sorted(devices):
                af_roles = devices[device]
                for af_code, io_role in sorted(af_roles, key=_af_role_key):
                    locations = af_roles[(af_code, io_role)]
                    for location in sorted(locations):
                        context = f"{device} AF{af_code} {io_role} {location}"
                        mcus = self.resolve_mcus(locations[location], context)
                        yield Leaf(stem, device, af_code, io_role, location, mcus)

    def mcus_for(self, stem: str, device: str, af_role: AfRole, location: PinLocation) -> Optional[McuSet]:
        try:
            groups = self._stems[stem][device][af_role][location]
        except KeyError:
            return None
        return self.resolve_mcus(groups)

    def select(self, stems: Optional[Iterable[str]]) -> "AggregationTree":
        """
        Returns a tree restricted to the given stems. Raises InvalidFilterError naming
        every requested stem that is absent from the tree.
        """
        if stems is None:
            return self
        requested = list(stems)
        invalid = [s for s in requested if s not in self._stems]
        if invalid:
            raise InvalidFilterError(invalid, self.stems())

        selected = AggregationTree(self.log)
        selected._mcu_sets = self._mcu_sets
        for stem in requested:
            selected._stems[stem] = self._stems[stem]
        return selected

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested dictionary in tree order, suitable for YAML dumps."""
        data: Dict[str, Any] = {}
        for stem in self.stems():
            devices = self._stems[stem]
            data[stem] = {}
            for device in natural_sorted(devices):
                af_roles = devices[device]
                data[stem][device] = {}
                for af_role in sorted(af_roles, key=_af_role_key):
                    locations = af_roles[af_role]
                    entry = {}
                    for location in sorted(locations):
                        groups = locations[location]
                        entry[str(location)] = {
                            group: {rev: list(groups[group][rev]) for rev in natural_sorted(groups[group])}
                            for group in natural_sorted(groups)
                        }
                    data[stem][device][f"AF{af_role[0]}_{af_role[1]}"] = entry
        return data

    def __contains__(self, stem: str) -> bool:
        return stem in self._stems

    def __iter__(self) -> Iterator[str]:
        return iter(self.stems())

    def __len__(self) -> int:
        return len(self._stems)
