from datetime import datetime, timezone

import pytest

from sync import qr_codec
from sync.qr_codec import ByAssetId, ByTag, Unrecognized


def test_encode_decode_namespaced_payload():
    payload = qr_codec.encode("3f2a-77")
    assert payload == "asset:3f2a-77"
    assert qr_codec.decode(payload) == "3f2a-77"


def test_encode_rejects_empty_id():
    with pytest.raises(ValueError):
        qr_codec.encode("")


@pytest.mark.parametrize("payload", [None, "", "hello", "ASSET-123", "asset:", "asset:   "])
def test_decode_without_id_returns_none(payload):
    assert qr_codec.decode(payload) is None


def test_decode_strips_whitespace():
    assert qr_codec.decode("  asset: abc \n") == "abc"


def test_classify_namespace_first():
    # Namespaced payload wins even when the id itself looks like a tag
    assert qr_codec.classify("asset:ASSET-1700000000000-SN1") == ByAssetId("ASSET-1700000000000-SN1")


def test_classify_json_label():
    label = '{"id": "a-42", "name": "Dell Latitude", "serial": "SN1"}'
    assert qr_codec.classify(label) == ByAssetId("a-42")


def test_classify_json_without_id_is_unrecognized():
    assert qr_codec.classify('{"serial": "SN1"}') == Unrecognized('{"serial": "SN1"}')


@pytest.mark.parametrize(
    "payload",
    [
        "ASSET-1718000000000-DL5520-001",
        "ASSET-1718000000000-serial with spaces",
        "QR1718000000000-a-42-2024",
    ],
)
def test_classify_stored_tags(payload):
    assert qr_codec.classify(payload) == ByTag(payload)


@pytest.mark.parametrize("payload", ["", "   ", "asset:", "https://example.com/x", "ASSET-12-SN", "12345"])
def test_classify_foreign_codes(payload):
    assert isinstance(qr_codec.classify(payload), Unrecognized)


def test_generate_tag_uses_epoch_millis():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    tag = qr_codec.generate_tag(" SN-9 ", now)
    assert tag == f"ASSET-{int(now.timestamp() * 1000)}-SN-9"
    assert qr_codec.classify(tag) == ByTag(tag)
