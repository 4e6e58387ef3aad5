import httpx
import pytest
from fastapi.testclient import TestClient

from collab_editor.code_editor.execution import ExecutionGateway
from collab_editor.main import create_app
from collab_editor.rooms.registry import RoomRegistry

PISTON_OK = {
    "language": "python",
    "version": "3.10.0",
    "run": {"stdout": "X", "stderr": "", "code": 0, "signal": None, "output": "X"},
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def piston_requests():
    return []


@pytest.fixture
def piston_ok(piston_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        piston_requests.append(request)
        return httpx.Response(200, json=PISTON_OK)

    return ExecutionGateway(transport=httpx.MockTransport(handler))


@pytest.fixture
def piston_down():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return ExecutionGateway(transport=httpx.MockTransport(handler))


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def client(registry, piston_ok):
    # Context manager keeps every websocket on one event loop.
    with TestClient(create_app(registry=registry, gateway=piston_ok)) as test_client:
        yield test_client
