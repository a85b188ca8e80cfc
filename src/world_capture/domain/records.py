"""Domain models for captured clone records."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal

from world_capture.errors import RecordInvariantError

Vector3 = tuple[float, float, float]


class CloneStatus(str, Enum):
    """Lifecycle states of a clone record."""

    DRAFT = "draft"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


GENERATABLE_STATUSES = frozenset({CloneStatus.DRAFT, CloneStatus.ERROR})


@dataclass(frozen=True)
class SceneObject:
    """A glTF asset or primitive placed into the generated world."""

    id: str
    source: Literal["gltf", "primitive"]
    url: str
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale: Vector3 = (1.0, 1.0, 1.0)
    kind: Literal["object"] = "object"


@dataclass(frozen=True)
class MaskVolume:
    """A volume that hides splats falling inside it."""

    id: str
    shape: Literal["box", "sphere"]
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    size: Vector3 = (1.0, 1.0, 1.0)
    enabled: bool = True
    kind: Literal["mask"] = "mask"


SceneEdit = SceneObject | MaskVolume
AssetKind = Literal["primary", "collider"]


@dataclass(frozen=True)
class SceneEdits:
    """Edits applied on top of a generated world."""

    objects: tuple[SceneObject, ...] = ()
    masks: tuple[MaskVolume, ...] = ()


@dataclass(frozen=True)
class CloneRecord:
    """Represents one captured object and its generation state."""

    id: str
    name: str
    created_at: datetime
    status: CloneStatus
    images: tuple[bytes, ...]
    thumbnail: str
    operation_id: str | None = None
    world_id: str | None = None
    primary_asset: bytes | None = field(default=None, repr=False)
    collider_asset: bytes | None = field(default=None, repr=False)
    edits: SceneEdits | None = None
    error: str | None = None

    def check_invariants(self) -> None:
        """Raise if the optional fields contradict the status."""
        if self.status is CloneStatus.DRAFT and self.operation_id is not None:
            raise RecordInvariantError(f"Draft record {self.id} has an operation id")
        ready = self.status is CloneStatus.READY
        assets = (self.world_id, self.primary_asset, self.collider_asset)
        if ready and any(value is None for value in assets):
            raise RecordInvariantError(f"Ready record {self.id} is missing assets")
        if not ready and any(value is not None for value in assets):
            raise RecordInvariantError(
                f"Record {self.id} carries assets while {self.status.value}"
            )
        failed = self.status is CloneStatus.ERROR
        if failed and not self.error:
            raise RecordInvariantError(f"Failed record {self.id} has no error message")
        if not failed and self.error is not None:
            raise RecordInvariantError(
                f"Record {self.id} carries an error while {self.status.value}"
            )


@dataclass(frozen=True)
class RecordSummary:
    """Record metadata without image or asset payloads, used for listings."""

    id: str
    name: str
    created_at: datetime
    status: CloneStatus
    thumbnail: str
    image_count: int
    operation_id: str | None = None
    world_id: str | None = None
    has_primary_asset: bool = False
    has_collider_asset: bool = False
    error: str | None = None

    @classmethod
    def from_record(cls, record: CloneRecord) -> "RecordSummary":
        return cls(
            id=record.id,
            name=record.name,
            created_at=record.created_at,
            status=record.status,
            thumbnail=record.thumbnail,
            image_count=len(record.images),
            operation_id=record.operation_id,
            world_id=record.world_id,
            has_primary_asset=record.primary_asset is not None,
            has_collider_asset=record.collider_asset is not None,
            error=record.error,
        )


def edits_to_json(edits: SceneEdits) -> dict[str, object]:
    """Serialize scene edits to a JSON-compatible dict."""
    return {
        "objects": [_edit_to_json(item) for item in edits.objects],
        "masks": [_edit_to_json(item) for item in edits.masks],
    }


def edits_from_json(payload: dict[str, object]) -> SceneEdits:
    """Parse scene edits, rejecting entries of unknown kind."""
    objects: list[SceneObject] = []
    masks: list[MaskVolume] = []
    for raw in [*_as_list(payload.get("objects")), *_as_list(payload.get("masks"))]:
        edit = _edit_from_json(raw)
        if isinstance(edit, SceneObject):
            objects.append(edit)
        else:
            masks.append(edit)
    return SceneEdits(objects=tuple(objects), masks=tuple(masks))


def _edit_to_json(edit: SceneEdit) -> dict[str, object]:
    if isinstance(edit, SceneObject):
        return {
            "kind": edit.kind,
            "id": edit.id,
            "type": edit.source,
            "url": edit.url,
            "position": list(edit.position),
            "rotation": list(edit.rotation),
            "scale": list(edit.scale),
        }
    if isinstance(edit, MaskVolume):
        return {
            "kind": edit.kind,
            "id": edit.id,
            "shape": edit.shape,
            "position": list(edit.position),
            "rotation": list(edit.rotation),
            "size": list(edit.size),
            "enabled": edit.enabled,
        }
    raise TypeError(f"Unsupported scene edit: {edit!r}")


def _edit_from_json(raw: object) -> SceneEdit:
    if not isinstance(raw, dict):
        raise ValueError(f"Scene edit must be an object, got {raw!r}")
    kind = raw.get("kind")
    if kind == "object":
        if raw.get("type") not in {"gltf", "primitive"}:
            raise ValueError(f"Unknown scene object type: {raw.get('type')!r}")
        return SceneObject(
            id=str(raw["id"]),
            source=raw["type"],
            url=str(raw["url"]),
            position=_vector(raw.get("position"), 0.0),
            rotation=_vector(raw.get("rotation"), 0.0),
            scale=_vector(raw.get("scale"), 1.0),
        )
    if kind == "mask":
        if raw.get("shape") not in {"box", "sphere"}:
            raise ValueError(f"Unknown mask shape: {raw.get('shape')!r}")
        return MaskVolume(
            id=str(raw["id"]),
            shape=raw["shape"],
            position=_vector(raw.get("position"), 0.0),
            rotation=_vector(raw.get("rotation"), 0.0),
            size=_vector(raw.get("size"), 1.0),
            enabled=bool(raw.get("enabled", True)),
        )
    raise ValueError(f"Unknown scene edit kind: {kind!r}")


def _vector(raw: object, default: float) -> Vector3:
    if raw is None:
        return (default, default, default)
    if not isinstance(raw, list | tuple) or len(raw) != 3:
        raise ValueError(f"Expected a 3-component vector, got {raw!r}")
    x, y, z = (float(value) for value in raw)
    return (x, y, z)


def _as_list(raw: object) -> list[object]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of scene edits, got {raw!r}")
    return raw
