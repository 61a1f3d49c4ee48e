"""Tests for the middleware pipeline — ordering, state, and faults."""

import json

from wren.app import App
from wren.errors import HTTPError
from wren.http.request import Request
from wren.testing import TestClient


class TestOrdering:
    async def test_runs_in_registration_order(self) -> None:
        app = App()
        calls: list[str] = []

        @app.use
        def first(request: Request) -> None:
            calls.append("first")

        @app.use
        async def second(request: Request) -> None:
            calls.append("second")

        @app.get("/")
        def index():
            calls.append("handler")
            return "ok"

        async with TestClient(app) as client:
            await client.get("/")
        assert calls == ["first", "second", "handler"]

    async def test_runs_before_lookup(self) -> None:
        app = App()
        calls: list[str] = []

        @app.use
        def record(request: Request) -> None:
            calls.append(request.path)

        async with TestClient(app) as client:
            response = await client.get("/no-such-route")
        assert response.status == 404
        assert calls == ["/no-such-route"]

    async def test_class_middleware(self) -> None:
        class Counter:
            def __init__(self) -> None:
                self.count = 0

            def __call__(self, request: Request) -> None:
                self.count += 1

        counter = Counter()

        app = App()
        app.add_middleware(counter)

        @app.get("/")
        def index():
            return "ok"

        async with TestClient(app) as client:
            await client.get("/")
            await client.get("/")
        assert counter.count == 2


class TestState:
    async def test_state_reaches_handler(self) -> None:
        app = App()

        @app.use
        def authenticate(request: Request) -> None:
            request.state["user"] = request.headers.get("x-user", "anonymous")

        @app.get("/me")
        def me(request: Request):
            return {"user": request.state["user"]}

        async with TestClient(app) as client:
            response = await client.get("/me", headers={"X-User": "ada"})
        assert json.loads(response.text) == {"user": "ada"}

    async def test_response_headers_on_every_response(self) -> None:
        app = App()

        @app.use
        def tag(request: Request) -> None:
            request.response_headers.append(("X-Served-By", "wren"))

        @app.get("/")
        def index():
            return "ok"

        @app.get("/boom")
        def boom():
            raise ValueError

        async with TestClient(app) as client:
            ok = await client.get("/")
            missing = await client.get("/missing")
            broken = await client.get("/boom")
        assert ok.header("x-served-by") == "wren"
        assert missing.header("x-served-by") == "wren"
        assert broken.header("x-served-by") == "wren"


class TestFaults:
    async def test_fault_goes_to_error_handler(self) -> None:
        app = App()
        reached = []

        @app.use
        def broken(request: Request) -> None:
            raise RuntimeError("middleware fault")

        @app.get("/")
        def index():
            reached.append(True)
            return "ok"

        @app.on_error
        def on_error(request, exc):
            return f"caught {exc}"

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 500
        assert response.text == "caught middleware fault"
        assert reached == []

    async def test_fault_stops_later_middleware(self) -> None:
        app = App()
        calls: list[str] = []

        @app.use
        def broken(request: Request) -> None:
            raise RuntimeError

        @app.use
        def later(request: Request) -> None:
            calls.append("later")

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 500
        assert calls == []

    async def test_http_error_short_circuits(self) -> None:
        app = App()

        @app.use
        def guard(request: Request) -> None:
            if "authorization" not in request.headers:
                raise HTTPError(401, "Unauthorized", headers=(("WWW-Authenticate", "Bearer"),))

        @app.get("/private")
        def private():
            return "secret"

        async with TestClient(app) as client:
            denied = await client.get("/private")
            allowed = await client.get("/private", headers={"Authorization": "Bearer x"})
        assert denied.status == 401
        assert denied.header("www-authenticate") == "Bearer"
        assert allowed.text == "secret"
