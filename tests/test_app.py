"""Tests for wren.app — setup, freezing, lifespan, and static wiring."""

import pytest

from wren.app import App
from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.routing.router import Router
from wren.static import StaticAssets
from wren.testing import TestClient


class TestConfig:
    def test_default_config(self) -> None:
        app = App()
        assert app.config == AppConfig()
        assert app.max_body_size == AppConfig().max_body_size

    def test_config_flows_into_router(self) -> None:
        app = App(AppConfig(max_body_size=64, strict_captures=False, route_backtracking=True))
        assert app.max_body_size == 64
        assert not app.tree.strict_captures
        assert app.tree.backtracking

    def test_app_is_a_router(self) -> None:
        assert isinstance(App(), Router)


class TestTemplateRegistration:
    def test_template_filter(self) -> None:
        app = App()

        @app.template_filter()
        def currency(value: float) -> str:
            return f"${value:.2f}"

        assert "currency" in app.template_filters

    def test_template_filter_custom_name(self) -> None:
        app = App()

        @app.template_filter("money")
        def fmt(value: float) -> str:
            return f"${value:.2f}"

        assert "money" in app.template_filters

    def test_template_global(self) -> None:
        app = App()

        @app.template_global()
        def site_name() -> str:
            return "Wren"

        assert "site_name" in app.template_globals


class TestFreeze:
    async def test_frozen_after_first_request(self) -> None:
        app = App()

        @app.get("/")
        def index():
            return "ok"

        assert not app.frozen
        async with TestClient(app) as client:
            await client.get("/")
        assert app.frozen

    async def test_registration_after_freeze_raises(self) -> None:
        app = App()
        async with TestClient(app) as client:
            await client.get("/")

        with pytest.raises(RuntimeError, match="Cannot modify"):
            app.add_route("GET", "/late", lambda: "late")
        with pytest.raises(RuntimeError):
            app.add_middleware(lambda request: None)
        with pytest.raises(RuntimeError):
            app.on_startup(lambda: None)

    async def test_filter_after_freeze_raises(self) -> None:
        app = App()
        app.seal()
        decorator = app.template_filter()
        with pytest.raises(RuntimeError):
            decorator(str.upper)

    def test_freeze_is_idempotent(self) -> None:
        app = App()
        app.seal()
        env = app.kida_env
        app.seal()
        assert app.kida_env is env


class TestLifespan:
    async def test_startup_and_shutdown_hooks(self) -> None:
        app = App()
        events: list[str] = []

        @app.on_startup
        async def connect():
            events.append("startup")

        @app.on_shutdown
        def disconnect():
            events.append("shutdown")

        messages = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict] = []

        async def receive():
            return messages.pop(0)

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert events == ["startup", "shutdown"]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        assert app.frozen

    async def test_failed_startup_reports(self) -> None:
        app = App()

        @app.on_startup
        def explode():
            raise RuntimeError("no database")

        sent: list[dict] = []

        async def receive():
            return {"type": "lifespan.startup"}

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert sent == [{"type": "lifespan.startup.failed", "message": "no database"}]

    async def test_test_client_runs_hooks(self) -> None:
        app = App()
        events: list[str] = []
        app.on_startup(lambda: events.append("up"))
        app.on_shutdown(lambda: events.append("down"))

        async with TestClient(app):
            assert events == ["up"]
        assert events == ["up", "down"]


class TestStaticWiring:
    async def test_static_argument(self, tmp_path) -> None:
        (tmp_path / "site.css").write_text("body { color: teal; }")
        app = App(static=StaticAssets(tmp_path))

        async with TestClient(app) as client:
            response = await client.get("/static/site.css")
        assert response.status == 200
        assert response.content_type == "text/css"
        assert response.text == "body { color: teal; }"

    async def test_mount_static(self, tmp_path) -> None:
        (tmp_path / "robots.txt").write_text("User-agent: *")
        app = App()
        assets = app.mount_static(tmp_path, prefix="/")
        assert assets.prefix == ""

        async with TestClient(app) as client:
            response = await client.get("/robots.txt")
        assert response.text == "User-agent: *"

    def test_missing_directory(self, tmp_path) -> None:
        app = App()
        with pytest.raises(ConfigurationError):
            app.mount_static(tmp_path / "nope")


class TestRun:
    def test_run_freezes_and_serves(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []

        def fake_server(app, host, port, **kwargs):
            calls.append((app, host, port, kwargs))

        monkeypatch.setattr("wren.server.dev.run_dev_server", fake_server)
        app = App(AppConfig(port=3000, debug=True))
        app.run(app_path="myapp:app")

        assert app.frozen
        (served, host, port, kwargs) = calls[0]
        assert served is app
        assert (host, port) == ("127.0.0.1", 3000)
        assert kwargs["reload"] is True
        assert kwargs["app_path"] == "myapp:app"

    def test_run_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr(
            "wren.server.dev.run_dev_server",
            lambda app, host, port, **kwargs: calls.append((host, port)),
        )
        App().run("0.0.0.0", 9000)
        assert calls == [("0.0.0.0", 9000)]
