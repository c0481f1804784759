import pytest
from fastapi.testclient import TestClient

from finternet.main import create_auth_app, create_asset_app
from finternet.services.asset_service import AssetService
from finternet.services.credential_store import CredentialStore
from finternet.services.identity_service import IdentityService
from finternet.services.mfa_manager import MfaChallengeManager
from finternet.services.ownership_ledger import OwnershipLedger
from finternet.services.session_issuer import SessionIssuer

TEST_SECRET = "test-signing-key"


@pytest.fixture
def store():
    # Lowest bcrypt cost keeps the suite fast
    return CredentialStore(bcrypt_rounds=4)


@pytest.fixture
def issuer():
    return SessionIssuer(secret_key=TEST_SECRET)


@pytest.fixture
def mfa_manager(store):
    return MfaChallengeManager(store)


@pytest.fixture
def identity_service(store, issuer, mfa_manager):
    return IdentityService(store=store, issuer=issuer, mfa_manager=mfa_manager)


@pytest.fixture
def ledger():
    return OwnershipLedger()


@pytest.fixture
def asset_service(ledger, issuer):
    return AssetService(ledger, issuer)


@pytest.fixture
def auth_client(identity_service):
    with TestClient(create_auth_app(identity_service)) as client:
        yield client


@pytest.fixture
def asset_client(asset_service):
    with TestClient(create_asset_app(asset_service)) as client:
        yield client
