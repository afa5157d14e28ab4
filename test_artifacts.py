from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from conftest import FakeObjectStore, record
from exgrip.artifacts import ArtifactResolver
from exgrip.errors import StoreError, StoreFatalError
from exgrip.models import ARTIFACT_ERROR, ARTIFACT_NOT_FOUND
from exgrip.object_store import S3ObjectStore

MESH = "3d-files/BBT40/A1+C1.STL"
CAD = "3d-files/BBT40/A1+C1.step"


class TestResolveKey:
    @pytest.mark.asyncio
    async def test_existing_key_is_signed(self):
        store = FakeObjectStore(existing={MESH})
        resolver = ArtifactResolver(store, "models", expiry_seconds=3600)

        access = await resolver.resolve_key(MESH)

        assert access.status == "available"
        assert access.url.startswith("https://models.s3.amazonaws.com/")
        assert access.link != ARTIFACT_NOT_FOUND
        assert store.sign_calls == [(MESH, 3600)]

    @pytest.mark.asyncio
    async def test_missing_key_is_sentinel_without_signing(self):
        store = FakeObjectStore()
        resolver = ArtifactResolver(store, "models")

        access = await resolver.resolve_key(MESH)

        assert access.status == "not_found"
        assert access.url is None
        assert access.link == ARTIFACT_NOT_FOUND
        assert store.sign_calls == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self):
        store = FakeObjectStore(failing={MESH: StoreFatalError("AccessDenied")})
        resolver = ArtifactResolver(store, "models")

        with pytest.raises(StoreError):
            await resolver.resolve_key(MESH)

    @pytest.mark.asyncio
    async def test_timeout_is_store_error(self):
        store = FakeObjectStore(existing={MESH}, delay=1)
        resolver = ArtifactResolver(store, "models", timeout=0.01)

        with pytest.raises(StoreFatalError, match="timed out"):
            await resolver.resolve_key(MESH)


class TestResolve:
    @pytest.mark.asyncio
    async def test_both_present(self):
        resolver = ArtifactResolver(FakeObjectStore(existing={MESH, CAD}), "models")
        result = await resolver.resolve(MESH, CAD)
        assert result.stl.status == "available"
        assert result.step.status == "available"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_kinds_are_independent(self):
        resolver = ArtifactResolver(FakeObjectStore(existing={CAD}), "models")
        result = await resolver.resolve(MESH, CAD)
        assert result.stl.link == ARTIFACT_NOT_FOUND
        assert result.step.status == "available"

    @pytest.mark.asyncio
    async def test_failure_on_one_kind_keeps_the_other(self):
        store = FakeObjectStore(existing={CAD}, failing={MESH: StoreFatalError("AccessDenied")})
        resolver = ArtifactResolver(store, "models")

        result = await resolver.resolve(MESH, CAD)

        assert result.stl.link == ARTIFACT_ERROR
        assert result.step.status == "available"
        assert "AccessDenied" in result.error

    @pytest.mark.asyncio
    async def test_checks_run_concurrently(self):
        store = FakeObjectStore(existing={MESH, CAD}, delay=0.05)
        resolver = ArtifactResolver(store, "models")
        await resolver.resolve(MESH, CAD)
        assert store.peak_in_flight == 2


class TestResolveRecords:
    @pytest.mark.asyncio
    async def test_order_follows_records(self):
        records = [
            record("1", master="EXGRIP-A1"),
            record("2", master="EXGRIP-A2", adapter="EXGRIP-B2"),
        ]
        store = FakeObjectStore(existing={"3d-files/BBT40/A2+B2+C1.STL"})
        resolver = ArtifactResolver(store, "models")

        results = await resolver.resolve_records(records)

        assert results[0].stl.link == ARTIFACT_NOT_FOUND
        assert results[1].stl.status == "available"
        assert "A2+B2+C1.STL" in results[1].stl.url
        assert results[1].step.link == ARTIFACT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_fan_out_is_bounded(self):
        records = [record(str(i), master=f"EXGRIP-A{i}") for i in range(6)]
        store = FakeObjectStore(delay=0.02)
        resolver = ArtifactResolver(store, "models", max_concurrency=1)

        await resolver.resolve_records(records)

        # one record at a time, two checks per record
        assert store.peak_in_flight == 2
        assert len(store.exists_calls) == 12

    @pytest.mark.asyncio
    async def test_records_run_concurrently_up_to_limit(self):
        records = [record(str(i), master=f"EXGRIP-A{i}") for i in range(6)]
        store = FakeObjectStore(delay=0.05)
        resolver = ArtifactResolver(store, "models", max_concurrency=3)

        await resolver.resolve_records(records)

        # three records at once, two checks each
        assert store.peak_in_flight == 6
        assert len(store.exists_calls) == 12

    @pytest.mark.asyncio
    async def test_failing_record_does_not_affect_siblings(self):
        # Improvement over all-or-nothing enrichment: the failure stays on its own record.
        records = [record("1", master="EXGRIP-A1"), record("2", master="EXGRIP-A2")]
        store = FakeObjectStore(
            existing={"3d-files/BBT40/A2+C1.STL", "3d-files/BBT40/A2+C1.step"},
            failing={
                "3d-files/BBT40/A1+C1.STL": StoreFatalError("SlowDown"),
                "3d-files/BBT40/A1+C1.step": StoreFatalError("SlowDown"),
            },
        )
        resolver = ArtifactResolver(store, "models")

        results = await resolver.resolve_records(records)

        assert results[0].error is not None
        assert results[0].stl.link == ARTIFACT_ERROR
        assert results[1].error is None
        assert results[1].stl.status == "available"
        assert results[1].step.status == "available"

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            ArtifactResolver(FakeObjectStore(), "models", max_concurrency=0)


def _client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestS3ObjectStore:
    @pytest.mark.asyncio
    async def test_exists(self):
        client = MagicMock()
        client.head_object.return_value = {"ContentLength": 10}
        store = S3ObjectStore(client)

        assert await store.exists("models", MESH) is True
        client.head_object.assert_called_once_with(Bucket="models", Key=MESH)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["404", "NoSuchKey", "NotFound"])
    async def test_not_found(self, code):
        client = MagicMock()
        client.head_object.side_effect = _client_error(code)
        assert await S3ObjectStore(client).exists("models", MESH) is False

    @pytest.mark.asyncio
    async def test_forbidden_is_fatal(self):
        client = MagicMock()
        client.head_object.side_effect = _client_error("403")
        with pytest.raises(StoreFatalError):
            await S3ObjectStore(client).exists("models", MESH)

    @pytest.mark.asyncio
    async def test_signed_url(self):
        client = MagicMock()
        client.generate_presigned_url.return_value = "https://signed"
        store = S3ObjectStore(client)

        assert await store.signed_url("models", CAD, 3600) == "https://signed"
        client.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "models", "Key": CAD},
            ExpiresIn=3600,
        )


@pytest.mark.asyncio
async def test_resolver_with_s3_store():
    client = MagicMock()
    client.head_object.side_effect = [{"ContentLength": 1}, _client_error("404")]
    client.generate_presigned_url.return_value = "https://signed"
    resolver = ArtifactResolver(S3ObjectStore(client), "models", max_concurrency=1)

    # sequential keys so the side_effect order is deterministic
    mesh = await resolver.resolve_key(MESH)
    cad = await resolver.resolve_key(CAD)

    assert mesh.url == "https://signed"
    assert cad.link == ARTIFACT_NOT_FOUND
    client.generate_presigned_url.assert_called_once()
