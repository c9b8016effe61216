import base64

import pytest

from core.domain.errors import MissingFieldError, SecretDecodeError, SecretNotFoundError
from core.services.secret_fetcher import SecretFetcher

from tests.conftest import CERT_PEM, KEY_PEM, FakeSecretStore, b64, tls_secret


@pytest.mark.asyncio
async def test_fetch_decodes_both_fields(store: FakeSecretStore) -> None:
    material = await SecretFetcher(store).fetch("prod", "tls-cert")
    assert material.certificate_pem == CERT_PEM
    assert material.private_key_pem == KEY_PEM
    assert store.calls == [("prod", "tls-cert")]


@pytest.mark.asyncio
async def test_material_is_not_exposed_in_repr(store: FakeSecretStore) -> None:
    material = await SecretFetcher(store).fetch("prod", "tls-cert")
    assert "PRIVATE KEY" not in repr(material)
    assert "CERTIFICATE" not in repr(material)


@pytest.mark.asyncio
async def test_every_fetch_rereads_the_store(store: FakeSecretStore) -> None:
    fetcher = SecretFetcher(store)
    await fetcher.fetch("prod", "tls-cert")
    store.secrets[("prod", "tls-cert")] = tls_secret(cert="-----BEGIN CERTIFICATE-----\nnew\n")
    material = await fetcher.fetch("prod", "tls-cert")
    assert material.certificate_pem.endswith("new\n")
    assert len(store.calls) == 2


@pytest.mark.asyncio
async def test_missing_secret() -> None:
    with pytest.raises(SecretNotFoundError, match="prod/absent"):
        await SecretFetcher(FakeSecretStore()).fetch("prod", "absent")


@pytest.mark.asyncio
async def test_missing_key_field_fails_before_decoding() -> None:
    # The certificate entry is not even valid base64: only the missing-field
    # check may have run.
    store = FakeSecretStore({("prod", "tls-cert"): {"tls.crt": "%%%not-base64%%%"}})
    with pytest.raises(MissingFieldError) as info:
        await SecretFetcher(store).fetch("prod", "tls-cert")
    assert info.value.field == "tls.key"


@pytest.mark.asyncio
async def test_missing_certificate_field() -> None:
    store = FakeSecretStore({("prod", "tls-cert"): {"tls.key": b64(KEY_PEM)}})
    with pytest.raises(MissingFieldError, match="tls.crt not found in secret"):
        await SecretFetcher(store).fetch("prod", "tls-cert")


@pytest.mark.asyncio
async def test_invalid_base64() -> None:
    store = FakeSecretStore({("prod", "tls-cert"): {"tls.crt": "%%%", "tls.key": b64(KEY_PEM)}})
    with pytest.raises(SecretDecodeError, match="tls.crt is not valid base64"):
        await SecretFetcher(store).fetch("prod", "tls-cert")


@pytest.mark.asyncio
async def test_invalid_utf8() -> None:
    not_utf8 = base64.b64encode(b"\xff\xfe\xfd").decode("ascii")
    store = FakeSecretStore({("prod", "tls-cert"): {"tls.crt": b64(CERT_PEM), "tls.key": not_utf8}})
    with pytest.raises(SecretDecodeError, match="tls.key is not valid UTF-8"):
        await SecretFetcher(store).fetch("prod", "tls-cert")
