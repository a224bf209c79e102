import pytest

from atmopics.core.blobs import blob_url, extract_blob, extract_optional_blob
from atmopics.core.dto.blob import BlobReference, BlobVariant
from atmopics.core.dto.identity import RepositoryLocation
from atmopics.core.errors import BlobAbsentError, BlobMalformedError, Disposition, Stage

from tests.conftest import DID, PDS, blob

REF = BlobReference(cid="bafkreigh2akiscaildc", mime_type="image/jpeg", size=1234)
LOCATION = RepositoryLocation(did=DID, endpoint=PDS)


def test_extracts_valid_blob():
    ref = extract_blob({"image": blob()}, "image")
    assert ref == REF


def test_null_field_is_absent():
    with pytest.raises(BlobAbsentError) as excinfo:
        extract_blob({"image": None}, "image")
    assert excinfo.value.stage is Stage.EXTRACT_BLOB
    assert excinfo.value.disposition is Disposition.NOT_FOUND
    assert not excinfo.value.log_worthy


def test_missing_field_is_absent():
    with pytest.raises(BlobAbsentError):
        extract_blob({}, "image")


def test_wrong_discriminator_is_malformed():
    with pytest.raises(BlobMalformedError) as excinfo:
        extract_blob({"image": {"$type": "other"}}, "image")
    assert excinfo.value.log_worthy
    assert excinfo.value.field == "image"


@pytest.mark.parametrize("raw", [
    "bafkrei",
    {"ref": {"$link": "bafkrei"}},
    {"$type": "blob"},
    {"$type": "blob", "ref": "bafkrei"},
    {"$type": "blob", "ref": {"$link": ""}},
])
def test_malformed_shapes(raw):
    with pytest.raises(BlobMalformedError):
        extract_blob({"video": raw}, "video")


def test_custom_discriminator():
    raw = {"$type": "pics.atmo.blob", "ref": {"$link": "bafk"}}
    assert extract_blob({"x": raw}, "x", expected_type="pics.atmo.blob").cid == "bafk"


def test_optional_blob():
    assert extract_optional_blob({"thumbnail": None}, "thumbnail") is None
    assert extract_optional_blob({"thumbnail": blob()}, "thumbnail") == REF
    with pytest.raises(BlobMalformedError):
        extract_optional_blob({"thumbnail": {"$type": "other"}}, "thumbnail")


def test_optional_metadata_is_tolerated():
    ref = extract_blob({"image": {"$type": "blob", "ref": {"$link": "bafk"}, "size": "big"}}, "image")
    assert ref.size is None and ref.mime_type is None


def test_raw_url_points_at_repository_host():
    url = blob_url(DID, REF, BlobVariant.RAW, location=LOCATION)
    assert url == (
        f"{PDS}/xrpc/com.atproto.sync.getBlob?did=did%3Aplc%3Aewvi7nxzyoun6zhxrhs64oiz"
        f"&cid=bafkreigh2akiscaildc"
    )


def test_cdn_urls():
    assert blob_url(DID, REF, BlobVariant.CDN_JPEG) == (
        f"https://cdn.bsky.app/img/feed_thumbnail/plain/{DID}/bafkreigh2akiscaildc@jpeg"
    )
    assert blob_url(DID, REF, BlobVariant.CDN_WEBP, preset="feed_fullsize", cdn_url="https://cdn.test/") == (
        f"https://cdn.test/img/feed_fullsize/plain/{DID}/bafkreigh2akiscaildc@webp"
    )


def test_urls_are_deterministic():
    for variant in BlobVariant:
        first = blob_url(DID, REF, variant, location=LOCATION)
        second = blob_url(DID, BlobReference(REF.cid, REF.mime_type, REF.size), variant, location=LOCATION)
        assert first == second


def test_contract_violations():
    with pytest.raises(ValueError):
        blob_url(DID, BlobReference(cid="", mime_type=None, size=None), BlobVariant.CDN_JPEG)
    with pytest.raises(ValueError):
        blob_url(DID, REF, BlobVariant.RAW)
    with pytest.raises(ValueError):
        blob_url(DID, REF, BlobVariant.CDN_PNG, preset="avatar")


def test_only_raw_variant_targets_repository_host():
    for variant in BlobVariant:
        url = blob_url(DID, REF, variant, location=LOCATION)
        assert url.startswith("https://cdn.bsky.app/img/") is variant.is_cdn
        assert ("com.atproto.sync.getBlob" in url) is not variant.is_cdn
