import pytest

from modweave.application import Application
from modweave.context import ContextStore
from modweave.registry import ActionRegistry
from modweave.router import Router, State


@pytest.fixture
def store() -> State:
    return State()


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def ctx(store, router) -> ContextStore:
    return ContextStore.create(lambda: {"store": store, "router": router, "site_name": "Test"})


@pytest.fixture
def registry() -> ActionRegistry:
    return ActionRegistry()


@pytest.fixture
def app(ctx) -> Application:
    return Application(ctx)
