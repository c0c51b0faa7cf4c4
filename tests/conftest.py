import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fakes import PUBCHEM_URL, FakeEnzymeBackend, pubchem_transport
from kcat_portal.interfaces.schemas import User
from kcat_portal.services.name_resolver import PubChemNameResolver
from kcat_portal.services.session import SessionStore


@pytest.fixture()
def user() -> User:
    return User(id=7, username="ada", email="ada@example.org")


@pytest.fixture()
def session(user: User) -> SessionStore:
    store = SessionStore()
    store.set_session("token-123", user)
    return store


@pytest.fixture()
def backend() -> FakeEnzymeBackend:
    return FakeEnzymeBackend()


@pytest.fixture()
def resolver() -> PubChemNameResolver:
    return PubChemNameResolver(base_url=PUBCHEM_URL, transport=pubchem_transport("Ethanol"))


@pytest.fixture()
def failing_resolver() -> PubChemNameResolver:
    return PubChemNameResolver(base_url=PUBCHEM_URL, transport=pubchem_transport(fail=True))
