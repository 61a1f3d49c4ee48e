"""Tests for wren.routing.router — registration, composition, fallbacks."""

import pytest

from wren.errors import ConfigurationError
from wren.routing.body import JsonBody
from wren.routing.router import Router


def _handler() -> str:
    return "ok"


def _other() -> str:
    return "other"


class TestRegistration:
    def test_add_route(self) -> None:
        r = Router()
        r.add_route("GET", "/x", _handler)
        assert r.find("GET", "/x").handler is _handler

    def test_method_is_uppercased(self) -> None:
        r = Router()
        r.add_route("get", "/x", _handler)
        assert r.find("GET", "/x").handler is _handler

    def test_custom_method(self) -> None:
        r = Router()
        r.add_route("PURGE", "/cache", _handler)
        assert r.find("PURGE", "/cache").handler is _handler

    def test_path_must_start_with_slash(self) -> None:
        with pytest.raises(ConfigurationError):
            Router().add_route("GET", "x", _handler)

    def test_empty_method_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            Router().add_route("", "/x", _handler)

    def test_route_decorator_defaults_to_get(self) -> None:
        r = Router()

        @r.route("/x")
        def handler():
            return "x"

        assert r.find("GET", "/x").handler is handler
        assert r.find("POST", "/x") is None

    def test_route_decorator_methods(self) -> None:
        r = Router()

        @r.route("/x", methods=["GET", "PUT"])
        def handler():
            return "x"

        assert r.find("GET", "/x").handler is handler
        assert r.find("PUT", "/x").handler is handler

    @pytest.mark.parametrize("verb", ["get", "put", "patch", "delete"])
    def test_verb_decorators(self, verb: str) -> None:
        r = Router()

        @getattr(r, verb)("/x")
        def handler():
            return "x"

        assert r.find(verb.upper(), "/x").handler is handler

    def test_decorator_returns_function(self) -> None:
        r = Router()

        @r.get("/x")
        def handler():
            return "x"

        assert handler() == "x"


class TestPostRegistration:
    def test_post_stores_json_wrapper(self) -> None:
        r = Router()

        @r.post("/items")
        def create(body):
            return body

        stored = r.find("POST", "/items").handler
        assert isinstance(stored, JsonBody)
        assert stored.handler is create
        assert stored.max_size == 1_048_576

    def test_post_size_override(self) -> None:
        r = Router()

        @r.post("/items", max_body_size=10)
        def create(body):
            return body

        assert r.find("POST", "/items").handler.max_size == 10

    def test_router_default_size(self) -> None:
        r = Router(max_body_size=2048)

        @r.post("/items")
        def create(body):
            return body

        assert r.find("POST", "/items").handler.max_size == 2048

    def test_wrapper_keeps_handler_name(self) -> None:
        r = Router()

        @r.post("/items")
        def create_item(body):
            return body

        route = r.routes[0]
        assert route.handler.__name__ == "create_item"


class TestComposition:
    def test_merge_union(self) -> None:
        a, b = Router(), Router()
        a.add_route("GET", "/x", _handler)
        b.add_route("GET", "/y", _other)

        a.merge(b)
        assert a.find("GET", "/x").handler is _handler
        assert a.find("GET", "/y").handler is _other

    def test_merge_collision_takes_source(self) -> None:
        a, b = Router(), Router()
        a.add_route("GET", "/x", _handler)
        b.add_route("GET", "/x", _other)

        a.merge(b)
        assert a.find("GET", "/x").handler is _other

    def test_merge_leaves_middleware_and_fallbacks(self) -> None:
        a, b = Router(), Router()
        b.add_middleware(lambda request: None)
        b.not_found(_handler)
        b.on_error(_other)

        a.merge(b)
        assert a.middleware == ()
        assert a.not_found_handler is None
        assert a.error_handler is None

    def test_nest(self) -> None:
        dest, api = Router(), Router()
        api.add_route("GET", "/items/:id", _handler)

        dest.nest("/api", api)
        match = dest.find("GET", "/api/items/42")
        assert match.handler is _handler
        assert match.path_params == {"id": "42"}

        still = api.find("GET", "/items/42")
        assert still.handler is _handler
        assert still.path_params == {"id": "42"}

    def test_nest_keeps_payload_wrapper(self) -> None:
        dest, api = Router(), Router()

        @api.post("/items", max_body_size=10)
        def create(body):
            return body

        dest.nest("/api", api)
        stored = dest.find("POST", "/api/items").handler
        assert isinstance(stored, JsonBody)
        assert stored.max_size == 10


class TestMiddlewareAndFallbacks:
    def test_add_middleware_order(self) -> None:
        r = Router()

        def first(request):
            pass

        def second(request):
            pass

        r.add_middleware(first)
        r.use(second)
        assert r.middleware == (first, second)

    def test_use_returns_middleware(self) -> None:
        r = Router()

        @r.use
        def mw(request):
            pass

        assert r.middleware == (mw,)

    def test_not_found_and_on_error(self) -> None:
        r = Router()

        @r.not_found
        def missing(request):
            return "missing"

        @r.on_error
        def failed(request, exc):
            return "failed"

        assert r.not_found_handler is missing
        assert r.error_handler is failed


class TestIntrospection:
    def test_routes(self) -> None:
        r = Router()
        r.add_route("GET", "/a", _handler)
        r.add_route("GET", "/b/:id", _other)

        assert [(route.method, route.path) for route in r.routes] == [
            ("GET", "/a"),
            ("GET", "/b/:id"),
        ]

    def test_format_tree(self) -> None:
        r = Router()
        r.add_route("GET", "/a", _handler)
        assert "[GET] _handler" in r.format_tree()


class TestFreeze:
    def test_frozen_router_rejects_changes(self) -> None:
        r = Router()
        r.add_route("GET", "/a", _handler)
        r.freeze()

        with pytest.raises(RuntimeError):
            r.add_route("GET", "/b", _handler)
        with pytest.raises(RuntimeError):
            r.add_middleware(lambda request: None)
        with pytest.raises(RuntimeError):
            r.nest("/api", Router())
        assert r.find("GET", "/a").handler is _handler
