"""Tests for the module loader and application lifecycle."""

import asyncio

import pytest

from modweave.application import Application, AppState
from modweave.base_module import BaseModule, ModuleDescriptor
from modweave.context import ContextStore
from modweave.errors import (
    AlreadyInitializedError,
    ApplicationStateError,
    ContextMutationError,
    DuplicateNamespaceError,
    ModuleDescriptorError,
)


def _make_logging_module(name: str, log: list, namespace: str = None, fail: bool = False):
    """A module whose load hook appends its name to a shared log."""

    def load(ctx, actions):
        if fail:
            raise RuntimeError(f"{name} failed")
        log.append(name)

    return {
        "name": name,
        "actions": {namespace or name.lower(): {"ping": lambda ctx: name}},
        "load": load,
    }


def test_distinct_namespaces_merge_into_union(app):
    log = []
    app.load_modules([_make_logging_module(n, log) for n in ("A", "B", "C")])
    app.init()
    assert set(app.actions) == {"a", "b", "c"}
    assert app.invoke("b", "ping") == "B"


def test_states_progress(app):
    assert app.state is AppState.CONSTRUCTED
    app.load_module(_make_logging_module("A", []))
    assert app.state is AppState.LOADING
    app.init()
    assert app.state is AppState.INITIALIZED
    assert app.initialized
    app.run()
    assert app.state is AppState.RUNNING


def test_init_without_modules(app):
    app.init()
    assert app.state is AppState.INITIALIZED
    assert list(app.actions) == []


def test_hooks_run_in_load_order(app):
    log = []
    for name in ("A", "B", "C"):
        app.load_module(_make_logging_module(name, log))
    assert log == []
    app.init()
    assert log == ["A", "B", "C"]


def test_second_init_fails_and_hooks_run_once(app):
    log = []
    app.load_module(_make_logging_module("A", log))
    app.init()
    with pytest.raises(AlreadyInitializedError):
        app.init()
    assert log == ["A"]


def test_failing_hook_stops_initialization(app):
    log = []
    app.load_module(_make_logging_module("A", log))
    app.load_module(_make_logging_module("B", log, fail=True))
    app.load_module(_make_logging_module("C", log))
    with pytest.raises(RuntimeError, match="B failed"):
        app.init()
    assert log == ["A"]
    assert app.state is AppState.FAILED
    with pytest.raises(AlreadyInitializedError):
        app.init()
    assert log == ["A"]


def test_duplicate_namespace_aborts_whole_module(app, router):
    log = []
    app.load_module(_make_logging_module("A", log, namespace="posts"))
    before = (app.registry.namespaces(), app.registry.owner_of("posts"))

    routes_called = []
    second = _make_logging_module("B", log, namespace="posts")
    second["actions"]["extra"] = {"x": len}
    second["routes"] = lambda inject: routes_called.append(inject)

    with pytest.raises(DuplicateNamespaceError) as excinfo:
        app.load_module(second)
    assert excinfo.value.owner == "A"
    assert (app.registry.namespaces(), app.registry.owner_of("posts")) == before
    assert routes_called == []
    assert app.modules == ["A"]

    app.init()
    assert log == ["A"]


def test_load_module_after_init_is_rejected(app):
    app.init()
    with pytest.raises(ApplicationStateError):
        app.load_module(_make_logging_module("A", []))


def test_run_requires_init(app):
    with pytest.raises(ApplicationStateError):
        app.run()


def test_routes_run_immediately_with_binder(app, router):
    seen = []

    def routes(inject):
        seen.append(inject)
        inject.context["router"].register("/hello", inject(lambda context, actions, who="world": f"hi {who}"))

    app.load_module({"name": "hello", "routes": routes})
    assert seen == [app.inject]
    assert router.dispatch("/hello") == "hi world"
    assert router.dispatch("/hello", who="you") == "hi you"


def test_routes_see_actions_of_later_modules_at_render_time(app, router):
    def routes(inject):
        router.register("/count", inject(lambda context, actions: actions.posts.count()))

    app.load_module({"name": "page", "routes": routes})
    app.load_module({"name": "posts", "actions": {"posts": {"count": lambda ctx: 7}}})
    app.init()
    assert router.dispatch("/count") == 7


def test_failing_routes_roll_back_namespaces(app):
    def routes(inject):
        raise RuntimeError("router down")

    with pytest.raises(RuntimeError):
        app.load_module({"name": "bad", "actions": {"bad": {"a": len}}, "routes": routes})
    assert "bad" not in app.registry
    assert app.modules == []


def test_load_hook_receives_context_and_merged_actions(app, ctx):
    received = {}

    def load(context, actions):
        received["context"] = context
        received["namespaces"] = list(actions)
        received["ping"] = actions.second.ping(context)

    app.load_module({"name": "first", "load": load})
    app.load_module({"name": "second", "actions": {"second": {"ping": lambda c: c["site_name"]}}})
    app.init()
    assert received == {"context": ctx, "namespaces": ["second"], "ping": "Test"}
    assert received["context"] is ctx


def test_registry_sealed_after_init(app):
    app.init()
    assert app.registry.sealed
    with pytest.raises(ApplicationStateError):
        app.registry.register("late", {"a": len})


def test_hook_side_effects_are_not_rolled_back(app, store):
    def seed(ctx, actions):
        ctx["store"].add("posts", {"title": "kept"})

    def boom(ctx, actions):
        raise ValueError("boom")

    app.load_module({"name": "seed", "load": seed})
    app.load_module({"name": "boom", "load": boom})
    with pytest.raises(ValueError):
        app.init()
    assert store.count("posts") == 1


def test_context_cannot_be_mutated_by_modules(app):
    def load(ctx, actions):
        ctx["injected"] = True

    app.load_module({"name": "sneaky", "load": load})
    with pytest.raises(ContextMutationError):
        app.init()
    assert "injected" not in app.context


class Greeter(BaseModule):
    name = "greeter"

    def actions(self):
        greeting = self.params.get("greeting", "hello")
        return {"greet": {"say": lambda ctx, who: f"{greeting} {who}"}}

    def load(self, ctx, actions):
        ctx["store"].add("greetings", {"text": actions.greet.say(ctx, "init")})


def test_base_module_instances_are_accepted(app, store):
    app.load_module(Greeter({"greeting": "hey"}))
    app.init()
    assert app.invoke("greet", "say", "you") == "hey you"
    assert store.all("greetings") == [{"id": 1, "text": "hey init"}]
    assert app.modules == ["greeter"]


def test_plain_objects_are_coerced():
    class Plain:
        actions = {"plain": {"a": len}}

    app = Application({"k": 1})
    descriptor = app.load_module(Plain())
    assert descriptor.name == "Plain"
    assert "plain" in app.registry


@pytest.mark.parametrize(
    "bad",
    [
        {"unknown": 1},
        {"routes": "not callable"},
        {"load": 42},
        {"actions": {"ns": {"a": "not callable"}}},
        {"actions": {"": {"a": len}}},
        {"actions": ["ns"]},
        object(),
    ],
)
def test_malformed_descriptors_are_rejected(app, bad):
    with pytest.raises(ModuleDescriptorError):
        app.load_module(bad)
    assert len(app.registry) == 0
    assert app.state is AppState.CONSTRUCTED


def test_explicit_descriptor_and_name(app):
    descriptor = ModuleDescriptor(actions={"ns": {"a": len}})
    loaded = app.load_module(descriptor, name="named")
    assert loaded.name == "named"
    assert app.registry.owner_of("ns") == "named"


def test_context_factory_and_mapping_are_accepted():
    assert Application(lambda: {"a": 1}).context["a"] == 1
    assert Application({"a": 2}).context["a"] == 2
    store = ContextStore.from_dict({"a": 3})
    assert Application(store).context is store


def test_async_actions_return_awaitables(app):
    async def fetch(ctx, n):
        return n * 2

    app.load_module({"name": "aio", "actions": {"aio": {"fetch": fetch}}})
    app.init()
    assert asyncio.run(app.invoke("aio", "fetch", 21)) == 42
