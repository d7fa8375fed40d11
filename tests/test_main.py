import httpx
from fastapi.testclient import TestClient

from devblog import dependencies as deps
from devblog.main import app
from tests.conftest import FakePostsService, make_session


def test_root_endpoint_runs_lifespan():
    with TestClient(app) as client:
        res = client.get("/")
        assert res.status_code == 200
        assert res.json() == {"message": "DevBlog API is running"}
        assert isinstance(app.state.http_client, httpx.AsyncClient)

    assert app.state.http_client.is_closed


def test_posts_routes_require_bearer_token():
    with TestClient(app) as client:
        res = client.get("/posts")
    assert res.status_code == 401


def test_posts_routes_are_mounted():
    original_overrides = dict(app.dependency_overrides)
    app.dependency_overrides[deps.get_session] = lambda: make_session()
    app.dependency_overrides[deps.get_posts_service] = lambda: FakePostsService()
    try:
        with TestClient(app) as client:
            res = client.get("/posts", headers={"Authorization": "Bearer gho_x"})
            assert res.status_code == 200
            assert res.json() == []
    finally:
        app.dependency_overrides = original_overrides
