from __future__ import annotations

import json

import pytest

pytest.importorskip("loguru")

from httpx import ASGITransport, AsyncClient

from roomplan.schema import GridConfig
from roomplan.settings import Settings
from services.api.main import create_app


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture()
def app():
    return create_app(Settings())


def _line(x1, y1, x2, y2, **extra):
    return {"start": {"x": x1, "y": y1}, "end": {"x": x2, "y": y2}, **extra}


@pytest.mark.asyncio()
async def test_add_and_list_lines(app):
    async with _client(app) as client:
        response = await client.post("/v1/lines", json=_line(0, 0, 100, 0, type="door"))
        assert response.status_code == 201
        line = response.json()
        assert line["type"] == "door"
        assert line["thickness"] == 2.0
        assert line["color"] == "#8B4513"

        layout = (await client.get("/v1/layout")).json()

    assert [item["id"] for item in layout["lines"]] == [line["id"]]
    assert layout["version"] == "1.0"
    assert layout["exportedAt"].endswith("Z")


@pytest.mark.asyncio()
async def test_zero_length_line_is_rejected(app):
    async with _client(app) as client:
        response = await client.post("/v1/lines", json=_line(10, 10, 10, 10))

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio()
async def test_update_and_delete_line(app):
    async with _client(app) as client:
        line = (await client.post("/v1/lines", json=_line(0, 0, 100, 0))).json()

        response = await client.patch(f"/v1/lines/{line['id']}", json={"lengthInches": 120})
        assert response.status_code == 200
        assert response.json()["end"] == {"x": 200.0, "y": 0.0}

        response = await client.patch(f"/v1/lines/{line['id']}", json={"type": "window"})
        assert response.json()["color"] == "#4169E1"

        assert (await client.delete(f"/v1/lines/{line['id']}")).status_code == 204
        missing = await client.delete(f"/v1/lines/{line['id']}")

    assert missing.status_code == 404
    assert missing.json()["error"] == "LineNotFoundError"


@pytest.mark.asyncio()
async def test_patch_unknown_line_is_404(app):
    async with _client(app) as client:
        response = await client.patch("/v1/lines/nope", json={"lengthInches": 12})
    assert response.status_code == 404


@pytest.mark.asyncio()
async def test_set_scale(app):
    async with _client(app) as client:
        bad = await client.put("/v1/layout/scale", json={"inchesPerCell": 0})
        assert bad.status_code == 400
        assert bad.json()["message"] == "Please enter a valid positive number"

        out_of_range = await client.put("/v1/layout/scale", json={"inchesPerCell": 500})
        assert out_of_range.status_code == 400

        response = await client.put("/v1/layout/scale", json={"inchesPerCell": 24})
        assert response.status_code == 200
        assert response.json()["inches_per_cell"] == 24

        layout = (await client.get("/v1/layout")).json()
    assert layout["gridScale"] == 24


@pytest.mark.asyncio()
async def test_furniture_lifecycle(app):
    async with _client(app) as client:
        template = (await client.post("/v1/templates", json={"name": "Table", "width": 36, "height": 24})).json()
        assert template["color"] == "#3498db"

        response = await client.post(
            "/v1/furniture",
            json={"templateId": template["id"], "position": {"x": 0, "y": 0}},
        )
        assert response.status_code == 201
        item = response.json()
        assert item["rotation"] == 0

        rotated = (await client.post(f"/v1/furniture/{item['id']}/rotate")).json()
        assert rotated["rotation"] == 90

        moved = (await client.patch(f"/v1/furniture/{item['id']}", json={"position": {"x": 4, "y": 5}})).json()
        assert moved["position"] == {"x": 4.0, "y": 5.0}

        removed = (await client.delete(f"/v1/templates/{template['id']}")).json()
        layout = (await client.get("/v1/layout")).json()

    assert removed == {"id": template["id"], "removedFurniture": 1}
    assert layout["furniture"] == []
    assert layout["templates"] == []


@pytest.mark.asyncio()
async def test_invalid_template_is_400(app):
    async with _client(app) as client:
        response = await client.post("/v1/templates", json={"name": "Rug", "width": -1, "height": 10})
    assert response.status_code == 400


@pytest.mark.asyncio()
async def test_furniture_for_unknown_template_is_404(app):
    async with _client(app) as client:
        response = await client.post("/v1/furniture", json={"templateId": "nope", "position": {"x": 0, "y": 0}})
    assert response.status_code == 404
    assert response.json()["error"] == "TemplateNotFoundError"


@pytest.mark.asyncio()
async def test_overlap_prevention_returns_conflict():
    app = create_app(Settings(grid=GridConfig(prevent_overlapping=True)))
    async with _client(app) as client:
        await client.post("/v1/lines", json=_line(0, 50, 100, 50))
        response = await client.post("/v1/lines", json=_line(50, 0, 50, 100))

    assert response.status_code == 409
    assert response.json()["error"] == "PlacementRejectedError"


@pytest.mark.asyncio()
async def test_export_and_import(app):
    async with _client(app) as client:
        await client.post("/v1/lines", json=_line(0, 0, 100, 0))
        response = await client.get("/v1/layout/export")

    assert response.status_code == 200
    assert response.headers["content-disposition"].startswith('attachment; filename="room-layout-')
    exported = response.json()
    assert len(exported["lines"]) == 1

    target = create_app(Settings())
    async with _client(target) as client:
        response = await client.post("/v1/layout/import", content=json.dumps(exported))
        assert response.status_code == 200
        assert response.json() == {"imported": True}
        layout = (await client.get("/v1/layout")).json()

    assert layout["lines"] == exported["lines"]
    assert [line.id for line in target.state.session.document.lines] == [exported["lines"][0]["id"]]


@pytest.mark.asyncio()
async def test_import_rejects_invalid_json(app):
    async with _client(app) as client:
        response = await client.post("/v1/layout/import", content="not json")
        binary = await client.post("/v1/layout/import", content=b"\xff\xfe")

    assert response.status_code == 400
    assert binary.status_code == 400


@pytest.mark.asyncio()
async def test_clear_layout_keeps_templates(app):
    async with _client(app) as client:
        await client.post("/v1/lines", json=_line(0, 0, 100, 0))
        await client.post("/v1/templates", json={"name": "Chair"})
        assert (await client.delete("/v1/layout")).status_code == 204
        layout = (await client.get("/v1/layout")).json()

    assert layout["lines"] == []
    assert [t["name"] for t in layout["templates"]] == ["Chair"]


@pytest.mark.asyncio()
async def test_snap_endpoint(app):
    async with _client(app) as client:
        await client.post("/v1/lines", json=_line(45, 0, 45, 100))
        near_endpoint = (await client.post("/v1/geometry/snap", json={"point": {"x": 41, "y": 1}})).json()
        on_grid = (await client.post("/v1/geometry/snap", json={"point": {"x": 81, "y": 59}})).json()

    assert near_endpoint == {"point": {"x": 45.0, "y": 0.0}, "snappedToEndpoint": True}
    assert on_grid == {"point": {"x": 80.0, "y": 60.0}, "snappedToEndpoint": False}
