import pytest

from irongolem.client.core import GolemClient
from irongolem.config.model import ClientConfig
from tests.fixtures.fake_transport import FakeTransportFactory


@pytest.fixture
def transport_factory():
    return FakeTransportFactory()


@pytest.fixture
def make_client(transport_factory):
    """Build a GolemClient wired to the fake transport factory."""

    def _make(**overrides):
        options = {"server": "play.example.net", "username": "Steve", "password": "hunter22"}
        options.update(overrides)
        credential_store = options.pop("credential_store", None)
        profiles = options.pop("server_profiles", ())
        return GolemClient(
            ClientConfig(**options),
            transport_factory,
            credential_store=credential_store,
            server_profiles=profiles,
        )

    return _make
