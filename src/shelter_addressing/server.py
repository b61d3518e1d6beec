"""FastAPI server for camp shelter addressing."""

from __future__ import annotations

import io
import logging
import tempfile
import zipfile
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from .config import DEFAULT_DOOR_SNAP_TOLERANCE, DEFAULT_RANK_MULTIPLIER, AddressingConfig
from .errors import AddressingError
from .models import AddressedShelter
from .pipeline import address_shapefiles
from .writer import shelters_to_csv

logger = logging.getLogger(__name__)

app = FastAPI(title="Shelter Addressing", version="0.1.0")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/address")
async def address_camp(
    structures: UploadFile,
    shelters: UploadFile,
    lines: UploadFile,
    doors: UploadFile,
    format: str = Query("csv", pattern="^(csv|json)$"),
    rank_multiplier: float = Query(DEFAULT_RANK_MULTIPLIER, gt=0),
    door_snap_tolerance: float = Query(DEFAULT_DOOR_SNAP_TOLERANCE, ge=0),
):
    """Address every shelter of a camp.

    Each upload is a .zip holding one shapefile (.shp, .shx, .dbf and
    optionally .prj). Returns the shelter address table as CSV, or the full
    result including structures and diagnostics as JSON.
    """
    config = AddressingConfig(rank_multiplier=rank_multiplier, door_snap_tolerance=door_snap_tolerance)

    with tempfile.TemporaryDirectory() as workdir:
        paths = {}
        for name, upload in (
            ("structures", structures),
            ("shelters", shelters),
            ("lines", lines),
            ("doors", doors),
        ):
            paths[name] = await _extract_zip(upload, Path(workdir) / name)

        try:
            result, _ = address_shapefiles(
                paths["structures"], paths["shelters"], paths["lines"], paths["doors"], config
            )
        except AddressingError as e:
            logger.warning("Rejected upload: %s", e)
            raise HTTPException(status_code=400, detail=str(e)) from e

    if format == "json":
        return result

    return _shelters_to_csv_response(result.shelters)


async def _extract_zip(upload: UploadFile, target: Path) -> Path:
    """Extract a zipped shapefile and return the path of its .shp."""
    content = await upload.read()
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as zf:
            zf.extractall(target)
    except zipfile.BadZipFile as e:
        raise HTTPException(status_code=400, detail=f"{upload.filename} is not a zip archive") from e

    shp_files = sorted(target.rglob("*.shp"))
    if not shp_files:
        raise HTTPException(status_code=400, detail=f"No .shp file found in {upload.filename}")
    return shp_files[0]


def _shelters_to_csv_response(shelters: list[AddressedShelter]) -> StreamingResponse:
    """Stream the shelter address table as a CSV attachment."""
    return StreamingResponse(
        iter([shelters_to_csv(shelters)]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=shelter_addresses.csv"},
    )
