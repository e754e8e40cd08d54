from typing import Iterable, Tuple
from .utils import natural_key


class McuSet(tuple):
    """
    Immutable, naturally ordered set of MCU names.

    Two sets are equal iff they hold the same names, so an McuSet doubles as the key
    of an equivalence class and gives its members in a reproducible order.
    """

    def __new__(cls, names: Iterable[str] = ()):
        return super().__new__(cls, sorted(set(names), key=natural_key))

    @property
    def sort_key(self) -> Tuple[tuple, ...]:
        return tuple(natural_key(name) for name in self)

    def __repr__(self) -> str:
        return f"McuSet({', '.join(self)})"
