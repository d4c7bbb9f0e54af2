"""Layout persistence codec over a key-value storage port.

Collections are stored as JSON arrays under fixed keys. Reads are forgiving:
malformed stored JSON yields an empty collection, and entries that fail
validation are dropped with a warning. Import is a permissive merge that only
fails when the payload is not JSON at all.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from roomplan.exceptions import LayoutImportError, RoomPlannerError, ValidationError
from roomplan.geometry.contract import LAYOUT_VERSION
from roomplan.schema import FurnitureInstance, FurnitureTemplate, LayoutSnapshot, Line, validate_grid_scale
from roomplan.storage import KeyValueStorage

STORAGE_KEYS = {
    "FURNITURE_TEMPLATES": "roomPlanner_furnitureTemplates",
    "LAYOUT_LINES": "roomPlanner_lines",
    "LAYOUT_FURNITURE": "roomPlanner_furniture",
    "GRID_SCALE": "roomPlanner_gridScale",
}

ModelT = TypeVar("ModelT", bound=BaseModel)


def iso_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_models(model: Type[ModelT], items: Any, label: str) -> List[ModelT]:
    """Validate each entry independently, dropping the ones that do not fit ``model``."""
    if not isinstance(items, list):
        logger.warning("Expected a list of {label}, got {kind}; using an empty list", label=label, kind=type(items).__name__)
        return []
    result: List[ModelT] = []
    for index, item in enumerate(items):
        try:
            result.append(model.model_validate(item))
        except PydanticValidationError as exc:
            logger.warning(
                "Dropping invalid {label} entry #{index}: {errors}",
                label=label,
                index=index,
                errors=exc.error_count(),
            )
    return result


def coerce_grid_scale(value: Any) -> Optional[float]:
    """Stored or imported scale if it passes the 1 to 120 inches-per-cell check, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning("Ignoring invalid gridScale {value!r}", value=value)
        return None
    try:
        return validate_grid_scale(value)
    except ValidationError as exc:
        logger.warning("Ignoring invalid gridScale {value!r}: {message}", value=value, message=exc.message)
        return None


def parse_layout(json_string: str) -> dict[str, Any]:
    """
    Parse an imported layout document.

    Raises:
        LayoutImportError: If the text is not valid JSON.

    A JSON value that is not an object parses to an empty mapping, so importing
    it changes nothing.
    """
    try:
        data = json.loads(json_string)
    except (json.JSONDecodeError, TypeError) as exc:
        raise LayoutImportError("Layout is not valid JSON", {"error": str(exc)}) from exc
    if not isinstance(data, dict):
        return {}
    return data


class LayoutStore:
    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage

    def _write(self, key: str, payload: Any) -> bool:
        try:
            self.storage.set(key, json.dumps(payload))
        except RoomPlannerError as exc:
            logger.error("Failed to save {key}: {message}", key=key, message=exc.message)
            return False
        return True

    def _read(self, key: str) -> Any:
        try:
            raw = self.storage.get(key)
        except RoomPlannerError as exc:
            logger.error("Failed to load {key}: {message}", key=key, message=exc.message)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.error("Stored value for {key} is not valid JSON", key=key)
            return None

    def _load_list(self, key: str, model: Type[ModelT], label: str) -> List[ModelT]:
        data = self._read(key)
        if data is None:
            return []
        return coerce_models(model, data, label)

    @staticmethod
    def _dump(items: Iterable[BaseModel]) -> list[dict[str, Any]]:
        return [item.model_dump(mode="json", exclude_none=True) for item in items]

    def save_lines(self, lines: Iterable[Line]) -> bool:
        return self._write(STORAGE_KEYS["LAYOUT_LINES"], self._dump(lines))

    def load_lines(self) -> List[Line]:
        return self._load_list(STORAGE_KEYS["LAYOUT_LINES"], Line, "line")

    def save_furniture(self, furniture: Iterable[FurnitureInstance]) -> bool:
        return self._write(STORAGE_KEYS["LAYOUT_FURNITURE"], self._dump(furniture))

    def load_furniture(self) -> List[FurnitureInstance]:
        return self._load_list(STORAGE_KEYS["LAYOUT_FURNITURE"], FurnitureInstance, "furniture")

    def save_templates(self, templates: Iterable[FurnitureTemplate]) -> bool:
        return self._write(STORAGE_KEYS["FURNITURE_TEMPLATES"], self._dump(templates))

    def load_templates(self) -> List[FurnitureTemplate]:
        return self._load_list(STORAGE_KEYS["FURNITURE_TEMPLATES"], FurnitureTemplate, "template")

    def save_grid_scale(self, inches_per_cell: float | None) -> bool:
        return self._write(STORAGE_KEYS["GRID_SCALE"], inches_per_cell)

    def load_grid_scale(self) -> Optional[float]:
        data = self._read(STORAGE_KEYS["GRID_SCALE"])
        if data is None:
            return None
        return coerce_grid_scale(data)

    def snapshot(self, now: datetime | None = None) -> LayoutSnapshot:
        return LayoutSnapshot(
            lines=self.load_lines(),
            furniture=self.load_furniture(),
            templates=self.load_templates(),
            gridScale=self.load_grid_scale(),
            version=LAYOUT_VERSION,
            exportedAt=iso_timestamp(now),
        )

    def export_layout(self, now: datetime | None = None) -> str:
        """Serialize the stored layout as indented JSON."""
        snapshot = self.snapshot(now)
        payload = snapshot.model_dump(mode="json")
        # category is optional and omitted rather than exported as null
        payload["templates"] = self._dump(snapshot.templates)
        return json.dumps(payload, indent=2)

    def import_layout(self, json_string: str) -> bool:
        """
        Merge an exported layout into storage.

        Each of ``lines``, ``furniture``, ``templates`` and ``gridScale`` replaces
        the stored value only when present and not null. Returns False only when
        the text is not valid JSON.
        """
        try:
            data = parse_layout(json_string)
        except LayoutImportError as exc:
            logger.error("Failed to import layout: {error}", error=exc.details.get("error", exc.message))
            return False

        if data.get("lines") is not None:
            self.save_lines(coerce_models(Line, data["lines"], "line"))
        if data.get("furniture") is not None:
            self.save_furniture(coerce_models(FurnitureInstance, data["furniture"], "furniture"))
        if data.get("templates") is not None:
            self.save_templates(coerce_models(FurnitureTemplate, data["templates"], "template"))
        if data.get("gridScale") is not None:
            scale = coerce_grid_scale(data["gridScale"])
            if scale is not None:
                self.save_grid_scale(scale)

        logger.info(
            "Imported layout keys: {keys}",
            keys=sorted(k for k in ("lines", "furniture", "templates", "gridScale") if data.get(k) is not None),
        )
        return True

    def clear(self) -> None:
        for key in STORAGE_KEYS.values():
            self.storage.delete(key)


__all__ = ["LayoutStore", "STORAGE_KEYS", "coerce_models", "iso_timestamp", "parse_layout"]
