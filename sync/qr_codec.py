# sync/qr_codec.py
"""
QR identity codec.

Two identity schemes exist for printed asset labels:

- ``asset:<asset id>``: the namespaced reference rendered by the QR modal.
- a stored tag (``ASSET-<epoch ms>-<serial>``, older ``QR<epoch ms>-...``)
  written to ``assets.qr_code`` at registration and unrelated to the id.

A payload is classified before any lookup. Precedence: namespace prefix,
then a JSON label carrying an ``id``, then the stored-tag shape. Anything
else is a foreign code.
"""
import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone

NAMESPACE = "asset"
_PREFIX = f"{NAMESPACE}:"

_TAG_PATTERN = re.compile(r"^(ASSET-\d{10,}-.+|QR\d{10,}-.+)$")


@dataclass(frozen=True)
class ByAssetId:
    asset_id: str


@dataclass(frozen=True)
class ByTag:
    tag: str


@dataclass(frozen=True)
class Unrecognized:
    payload: str


ScanIdentity = ByAssetId | ByTag | Unrecognized


def encode(asset_id: str) -> str:
    """Payload to render into the asset's QR code."""
    if not asset_id:
        raise ValueError("asset_id is required")
    return f"{_PREFIX}{asset_id}"


def decode(payload: str | None) -> str | None:
    """Asset id carried by a namespaced payload, else None."""
    if not payload:
        return None
    payload = payload.strip()
    if not payload.startswith(_PREFIX):
        return None
    asset_id = payload[len(_PREFIX):].strip()
    return asset_id or None


def _id_from_json_label(payload: str) -> str | None:
    if not payload.startswith("{"):
        return None
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    asset_id = data.get("id")
    if asset_id is None or str(asset_id).strip() == "":
        return None
    return str(asset_id).strip()


def classify(payload: str | None) -> ScanIdentity:
    """Decide how a scanned payload identifies an asset."""
    raw = (payload or "").strip()
    if not raw:
        return Unrecognized(raw)

    asset_id = decode(raw)
    if asset_id is not None:
        return ByAssetId(asset_id)
    if raw.startswith(_PREFIX):
        # Namespace with nothing after it
        return Unrecognized(raw)

    asset_id = _id_from_json_label(raw)
    if asset_id is not None:
        return ByAssetId(asset_id)

    if _TAG_PATTERN.match(raw):
        return ByTag(raw)

    return Unrecognized(raw)


def generate_tag(serial_number: str, now: datetime | None = None) -> str:
    """Opaque tag stored in ``assets.qr_code`` when an asset is registered."""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"ASSET-{millis}-{serial_number.strip()}"
