from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from explorer.errors import StoreUnavailable
from explorer.main import register_routes
from explorer.services.explorer import ExplorerSession, HostPage, SelectionResult


class DummyExplorerSession(ExplorerSession):
    """Minimal ExplorerSession stub for route testing."""

    def __init__(self, *, fail: bool = False) -> None:  # pragma: no cover - nothing to initialise
        # Deliberately skip super().__init__ to avoid touching external systems.
        self.pages: list[HostPage] = []
        self.invalidated = False
        self.fail = fail

    async def start(self, page: HostPage | None = None) -> SelectionResult:  # type: ignore[override]
        if self.fail:
            raise StoreUnavailable("disk gone")
        assert page is not None
        self.pages.append(page)
        return SelectionResult(
            current_appid=3,
            next_appid=1,
            next_url="https://store.steampowered.com/app/1",
            diagnostics=["Fetching app list failed: HTTP 500"],
        )

    async def invalidate(self) -> None:  # type: ignore[override]
        self.invalidated = True


def _client(session: ExplorerSession) -> TestClient:
    app = FastAPI()
    register_routes(app)
    app.state.explorer_session = session
    return TestClient(app)


def test_activate_returns_selection_payload() -> None:
    session = DummyExplorerSession()

    with _client(session) as client:
        response = client.post(
            "/activate", json={"url": "https://store.steampowered.com/app/3/"}
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["nextAppid"] == 1
    assert payload["randomAppid"] is None
    assert payload["currentAppid"] == 3
    assert payload["diagnostics"] == ["Fetching app list failed: HTTP 500"]
    assert session.pages[0].url == "https://store.steampowered.com/app/3/"
    assert session.pages[0].html is None


def test_activate_reports_unavailable_store() -> None:
    with _client(DummyExplorerSession(fail=True)) as client:
        response = client.post("/activate", json={})

    assert response.status_code == 503


def test_invalidate_resets_cache() -> None:
    session = DummyExplorerSession()

    with _client(session) as client:
        response = client.post("/invalidate")

    assert response.status_code == 200
    assert response.json() == {"status": "invalidated"}
    assert session.invalidated is True


def test_healthcheck() -> None:
    with _client(DummyExplorerSession()) as client:
        assert client.get("/healthz").json() == {"status": "ok"}
