"""Addressing configuration and the shelter letter alphabet."""

from enum import Enum

from pydantic import BaseModel, Field

# A..Z without I and O, which read as 1 and 0 on painted door plates.
SHELTER_LETTERS: tuple[str, ...] = (
    "A", "B", "C", "D", "E", "F", "G", "H", "J", "K", "L", "M",
    "N", "P", "Q", "R", "S", "T", "U", "V", "W", "X", "Y", "Z",
)

DEFAULT_RANK_MULTIPLIER = 1_000_000.0

# Door points are digitized on shelter walls, which usually sit a few metres
# back from the centreline of the path they open onto.
DEFAULT_DOOR_SNAP_TOLERANCE = 5.0


class TieBreak(str, Enum):
    """How a target picks one reference when several match."""

    LARGEST_OVERLAP_AREA = "largest_overlap_area"
    FIRST_INTERSECTING = "first_intersecting"
    NEAREST = "nearest"


class AddressingConfig(BaseModel):
    """Tunable parameters of an addressing run.

    ``door_snap_tolerance`` is the largest distance, in CRS units, between a door
    point and the sequence line it opens onto. The default of 5 m covers doors
    placed on the shelter wall rather than on the path centreline; camps with
    access lines closer together than that should lower it so doors do not jump
    to the neighbouring path.
    """

    rank_multiplier: float = Field(DEFAULT_RANK_MULTIPLIER, gt=0)
    door_snap_tolerance: float = Field(DEFAULT_DOOR_SNAP_TOLERANCE, ge=0)
    structure_tie_break: TieBreak = TieBreak.LARGEST_OVERLAP_AREA
    line_tie_break: TieBreak = TieBreak.NEAREST
    door_tie_break: TieBreak = TieBreak.FIRST_INTERSECTING
    camp_field: str = "campId"
    line_field: str = "lineId"
    fail_on_overflow: bool = False
    workers: int = Field(1, ge=1)
