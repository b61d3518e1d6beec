"""Sub-block addressing: structure numbers and shelter letters in walking order.

Within one sub-block, ranked shelters are sorted by rank (input order breaks
ties) and cut into runs of consecutive shelters sharing a structure. Runs are
numbered 1, 2, 3, ... in the order they are walked, so a building the path
passes twice gets two numbers. Shelters inside a run are lettered from
``SHELTER_LETTERS``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from itertools import groupby

from .config import SHELTER_LETTERS
from .errors import LetterOverflowError
from .models import Diagnostic, DiagnosticKind, RankedShelter, Severity, ShelterAddress, SubBlockResult

logger = logging.getLogger(__name__)


def format_address(
    camp_id: str,
    structure_number: int | None = None,
    shelter_letter: str | None = None,
) -> str:
    """``"{camp}-{number}{letter}"``, or just the camp id when no letter was assigned."""
    if shelter_letter is None or structure_number is None:
        return camp_id
    return f"{camp_id}-{structure_number}{shelter_letter}"


def _run_key(shelter: RankedShelter):
    # A shelter with no structure is never merged with its neighbours.
    if shelter.structure_id is None:
        return ("unassigned", shelter.fid)
    return ("structure", shelter.structure_id)


def address_sub_block(
    camp_id: str,
    shelters: list[RankedShelter],
    fail_on_overflow: bool = False,
) -> SubBlockResult:
    """Number the structures and letter the shelters of one sub-block."""
    diagnostics: list[Diagnostic] = []
    ranked = sorted((s for s in shelters if s.rank is not None), key=lambda s: (s.rank, s.fid))

    if not ranked:
        diagnostics.append(Diagnostic(
            kind=DiagnosticKind.EMPTY_SUB_BLOCK,
            severity=Severity.LOW,
            message=f"Sub-block {camp_id} has no ranked shelters; all {len(shelters)} fall back to the camp id",
            camp_id=camp_id,
        ))

    for prev, cur in zip(ranked, ranked[1:]):
        if prev.rank == cur.rank:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.DUPLICATE_RANK,
                severity=Severity.MEDIUM,
                message=f"Shelters {prev.fid} and {cur.fid} share rank {cur.rank}; ordered by input order",
                camp_id=camp_id,
                fid=cur.fid,
            ))

    numbering: dict[int, tuple[int, str | None]] = {}
    for number, (_, run) in enumerate(groupby(ranked, key=_run_key), start=1):
        run = list(run)
        if len(run) > len(SHELTER_LETTERS):
            if fail_on_overflow:
                raise LetterOverflowError(camp_id, number, len(run))
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.LETTER_OVERFLOW,
                severity=Severity.HIGH,
                message=(
                    f"Structure {number} in {camp_id} has {len(run)} shelters; "
                    f"{len(run) - len(SHELTER_LETTERS)} left without a letter"
                ),
                camp_id=camp_id,
                fid=run[len(SHELTER_LETTERS)].fid,
            ))
        for i, shelter in enumerate(run):
            letter = SHELTER_LETTERS[i] if i < len(SHELTER_LETTERS) else None
            numbering[shelter.fid] = (number, letter)

    addressed = []
    for shelter in sorted(shelters, key=lambda s: s.fid):
        number, letter = numbering.get(shelter.fid, (None, None))
        addressed.append(ShelterAddress(
            fid=shelter.fid,
            camp_id=camp_id,
            structure_id=shelter.structure_id,
            rank=shelter.rank,
            structure_number=number,
            shelter_letter=letter,
            address=format_address(camp_id, number, letter),
        ))

    return SubBlockResult(camp_id=camp_id, shelters=addressed, diagnostics=diagnostics)


def address_sub_blocks(
    shelters: list[RankedShelter],
    workers: int = 1,
    fail_on_overflow: bool = False,
) -> list[SubBlockResult]:
    """Address every sub-block; results come back ordered by camp id.

    Sub-blocks share nothing, so with ``workers > 1`` they are spread over a
    process pool. The output is the same either way.
    """
    groups: dict[str, list[RankedShelter]] = defaultdict(list)
    for shelter in shelters:
        groups[shelter.camp_id].append(shelter)
    camp_ids = sorted(groups)

    run = partial(_address_group, fail_on_overflow=fail_on_overflow)
    items = [(camp_id, groups[camp_id]) for camp_id in camp_ids]

    if workers > 1 and len(items) > 1:
        logger.info("Addressing %d sub-blocks on %d workers", len(items), workers)
        with ProcessPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(run, items))

    logger.info("Addressing %d sub-blocks", len(items))
    return [run(item) for item in items]


def _address_group(item: tuple[str, list[RankedShelter]], fail_on_overflow: bool) -> SubBlockResult:
    camp_id, shelters = item
    return address_sub_block(camp_id, shelters, fail_on_overflow)
