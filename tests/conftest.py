import pytest

from permissions_console.backend.memory import InMemoryLedgerBackend
from permissions_console.controller import PermissionsController
from permissions_console.domain.delegates import Delegate, Role, SecurityToken
from permissions_console.domain.features import PERMISSIONS_FEATURE
from permissions_console.domain.state import ApplicationState
from permissions_console.store.store import Store

ADMIN_ADDRESS = "0x" + "a1" * 20
OPERATOR_ADDRESS = "0x" + "b2" * 20
NEW_ADDRESS = "0x" + "c3" * 20


@pytest.fixture
def acme() -> SecurityToken:
    return SecurityToken(symbol="ACME", address="0x" + "01" * 20, name="Acme Series A")


@pytest.fixture
def beta() -> SecurityToken:
    return SecurityToken(symbol="BETA", name="Beta Fund")


@pytest.fixture
def sample_delegates() -> tuple[Delegate, ...]:
    return (
        Delegate(
            address=ADMIN_ADDRESS,
            description="Transfer agent",
            roles=(Role.PERMISSIONS_ADMINISTRATOR, Role.SHAREHOLDERS_OPERATOR),
        ),
        Delegate(
            address=OPERATOR_ADDRESS,
            description="Compliance desk",
            roles=(Role.PERMISSIONS_OPERATOR,),
        ),
    )


@pytest.fixture
def backend(
    acme: SecurityToken, beta: SecurityToken, sample_delegates: tuple[Delegate, ...]
) -> InMemoryLedgerBackend:
    backend = InMemoryLedgerBackend()
    backend.add_token(
        acme,
        {PERMISSIONS_FEATURE: True, "Shareholders": True, "UsdTieredSto": False},
        delegates=sample_delegates,
    )
    backend.add_token(beta, {PERMISSIONS_FEATURE: False, "Shareholders": False})
    return backend


@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def loaded_state(sample_delegates: tuple[Delegate, ...]) -> ApplicationState:
    from permissions_console.domain.delegates import flatten_delegates

    return ApplicationState(
        pm_enabled=True,
        features={"Shareholders": True},
        available_roles=(Role.PERMISSIONS_ADMINISTRATOR, Role.PERMISSIONS_OPERATOR),
        delegates=sample_delegates,
        records=flatten_delegates(sample_delegates),
    )


@pytest.fixture
async def controller(store: Store, backend: InMemoryLedgerBackend):
    controller = PermissionsController(store, backend)
    await controller.load_tokens()
    try:
        yield controller
    finally:
        await controller.close()
