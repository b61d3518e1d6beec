"""Exceptions raised by the addressing pipeline."""

from __future__ import annotations


class AddressingError(Exception):
    """Base class for addressing failures."""


class InputIntegrityError(AddressingError, ValueError):
    """A layer is unusable as given; nothing was processed."""

    def __init__(self, layer: str, message: str, fids: list[int] | None = None):
        self.layer = layer
        self.fids = list(fids or [])
        detail = f"{layer}: {message}"
        if self.fids:
            shown = ", ".join(str(f) for f in self.fids[:10])
            more = f" (+{len(self.fids) - 10} more)" if len(self.fids) > 10 else ""
            detail += f" [fids: {shown}{more}]"
        super().__init__(detail)


class RankKeyError(InputIntegrityError):
    """A distance or line id cannot be encoded under the rank multiplier."""


class LetterOverflowError(AddressingError):
    """A structure run has more shelters than there are letters."""

    def __init__(self, camp_id: str, structure_number: int, size: int):
        self.camp_id = camp_id
        self.structure_number = structure_number
        self.size = size
        super().__init__(
            f"{camp_id} structure {structure_number} has {size} shelters, "
            f"more than the letter alphabet can label"
        )
