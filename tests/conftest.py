import json

import pytest
from fastapi.testclient import TestClient

from mock_server.app import create_app
from mock_server.models import RouteTable

ROUTES = {
    "/status": "ok",
    "/api/v1/data": '{"items": [1, 2, 3]}',
    "/text/multiline": "line one\nline two\n",
    "/": "root",
}


@pytest.fixture
def route_table():
    return RouteTable.model_validate(ROUTES)


@pytest.fixture
def app(route_table):
    return create_app(route_table)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def config_file(tmp_path):
    """Route config JSON on disk."""
    path = tmp_path / "endpoints.json"
    path.write_text(json.dumps(ROUTES))
    return path
