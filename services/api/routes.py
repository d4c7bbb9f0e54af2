from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, Response, status
from loguru import logger

from roomplan.geometry.snap import find_nearest_endpoint, resolve_point
from roomplan.schema import FurnitureInstance, FurnitureTemplate, GridConfig, LayoutSnapshot, Line

from services.api.schemas import (
    DeleteTemplateResponse,
    FurnitureCreate,
    FurnitureMove,
    ImportResponse,
    LineCreate,
    LineUpdate,
    ScaleUpdate,
    SnapRequest,
    SnapResponse,
    TemplateCreate,
)
from services.api.session import LayoutSession

router = APIRouter(prefix="/v1")


def _session(request: Request) -> LayoutSession:
    return request.app.state.session


@router.get("/layout", response_model=LayoutSnapshot, tags=["layout"])
def get_layout(request: Request) -> LayoutSnapshot:
    return _session(request).snapshot()


@router.get("/layout/export", tags=["layout"])
def export_layout(request: Request) -> Response:
    payload = _session(request).export_layout()
    filename = f"room-layout-{datetime.now(timezone.utc).date().isoformat()}.json"
    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/layout/import", response_model=ImportResponse, tags=["layout"])
async def import_layout(request: Request) -> ImportResponse:
    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="Layout must be UTF-8 encoded JSON") from exc
    if not _session(request).import_layout(text):
        raise HTTPException(status_code=400, detail="Failed to import layout. Please check the file format.")
    return ImportResponse(imported=True)


@router.delete("/layout", status_code=status.HTTP_204_NO_CONTENT, tags=["layout"])
def clear_layout(request: Request) -> Response:
    with _session(request).edit() as document:
        document.clear()
    logger.info("Layout cleared")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/layout/scale", response_model=GridConfig, tags=["layout"])
def set_scale(payload: ScaleUpdate, request: Request) -> GridConfig:
    with _session(request).edit() as document:
        return document.set_scale(payload.inchesPerCell)


@router.post("/lines", response_model=Line, status_code=status.HTTP_201_CREATED, tags=["lines"])
def add_line(payload: LineCreate, request: Request) -> Line:
    with _session(request).edit() as document:
        return document.add_line(payload.start, payload.end, payload.type)


@router.patch("/lines/{line_id}", response_model=Line, tags=["lines"])
def update_line(line_id: str, payload: LineUpdate, request: Request) -> Line:
    with _session(request).edit() as document:
        line = document.get_line(line_id)
        if payload.start is not None or payload.end is not None or payload.type is not None:
            line = document.update_line(line_id, start=payload.start, end=payload.end, line_type=payload.type)
        if payload.lengthInches is not None:
            line = document.set_line_length(line_id, payload.lengthInches)
        return line


@router.delete("/lines/{line_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["lines"])
def delete_line(line_id: str, request: Request) -> Response:
    with _session(request).edit() as document:
        document.delete_line(line_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/templates", response_model=FurnitureTemplate, status_code=status.HTTP_201_CREATED, tags=["furniture"])
def add_template(payload: TemplateCreate, request: Request) -> FurnitureTemplate:
    with _session(request).edit() as document:
        return document.add_template(
            payload.name,
            payload.width,
            payload.height,
            color=payload.color,
            category=payload.category,
        )


@router.delete("/templates/{template_id}", response_model=DeleteTemplateResponse, tags=["furniture"])
def delete_template(template_id: str, request: Request) -> DeleteTemplateResponse:
    with _session(request).edit() as document:
        removed = document.delete_template(template_id)
    return DeleteTemplateResponse(id=template_id, removedFurniture=removed)


@router.post("/furniture", response_model=FurnitureInstance, status_code=status.HTTP_201_CREATED, tags=["furniture"])
def place_furniture(payload: FurnitureCreate, request: Request) -> FurnitureInstance:
    with _session(request).edit() as document:
        return document.place_furniture(payload.templateId, payload.position, payload.rotation)


@router.patch("/furniture/{furniture_id}", response_model=FurnitureInstance, tags=["furniture"])
def move_furniture(furniture_id: str, payload: FurnitureMove, request: Request) -> FurnitureInstance:
    with _session(request).edit() as document:
        return document.move_furniture(furniture_id, payload.position)


@router.post("/furniture/{furniture_id}/rotate", response_model=FurnitureInstance, tags=["furniture"])
def rotate_furniture(furniture_id: str, request: Request) -> FurnitureInstance:
    with _session(request).edit() as document:
        return document.rotate_furniture(furniture_id)


@router.delete("/furniture/{furniture_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["furniture"])
def delete_furniture(furniture_id: str, request: Request) -> Response:
    with _session(request).edit() as document:
        document.delete_furniture(furniture_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/geometry/snap", response_model=SnapResponse, tags=["geometry"])
def snap_point(payload: SnapRequest, request: Request) -> SnapResponse:
    document = _session(request).document
    config = document.config
    point = resolve_point(payload.point, config, document.lines, payload.anchor)
    on_endpoint = False
    if not config.grid_aligned_mode and config.snap_to_endpoints:
        on_endpoint = find_nearest_endpoint(payload.point, document.lines, config.snap_distance) is not None
    return SnapResponse(point=point, snappedToEndpoint=on_endpoint)


__all__ = ["router"]
