"""Game content patches, ordered oldest to newest."""

from enum import IntEnum


class Patch(IntEnum):
    ARR = 1
    HW = 2
    SB = 3
    SHB = 4
    EW = 5
    DT = 6


def parse_patch(name: str) -> Patch:
    '''
    Parses a dataset patch key into a Patch. Keys are matched case-insensitively ("ew" -> Patch.EW).

    :param name: Patch key as found in the dataset or in configuration.
    :raises ValueError: If the key does not name a known patch.
    '''
    key = str(name).strip().upper()
    try:
        return Patch[key]
    except KeyError:
        raise ValueError(f"Unknown patch: {name}") from None
