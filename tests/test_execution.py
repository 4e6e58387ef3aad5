import json

import httpx
import pytest

from collab_editor.code_editor.execution import (
    EXECUTION_ERROR_OUTPUT,
    PISTON_URL,
    ExecutionGateway,
    ExecutionUnavailable,
)


def gateway_for(handler):
    return ExecutionGateway(transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_execute_returns_body_unmodified(piston_ok, piston_requests):
    result = await piston_ok.execute("print('X')", "python", "3.10.0", "in")

    assert result["run"]["output"] == "X"
    assert result["version"] == "3.10.0"

    request = piston_requests[0]
    assert request.method == "POST"
    assert str(request.url) == PISTON_URL
    assert json.loads(request.content) == {
        "language": "python",
        "version": "3.10.0",
        "files": [{"content": "print('X')"}],
        "stdin": "in",
    }


@pytest.mark.anyio
async def test_execute_network_error_returns_fallback(piston_down):
    result = await piston_down.execute("x", "python", "*", "")

    assert result["run"]["output"] == EXECUTION_ERROR_OUTPUT
    assert result["language"] == "python"


@pytest.mark.anyio
async def test_execute_error_status_returns_fallback():
    gateway = gateway_for(lambda request: httpx.Response(500, json={"message": "boom"}))

    result = await gateway.execute("x", "python")
    assert result["run"]["output"] == EXECUTION_ERROR_OUTPUT


@pytest.mark.anyio
async def test_execute_timeout_returns_fallback():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = await gateway_for(handler).execute("x", "python")
    assert result["run"]["output"] == EXECUTION_ERROR_OUTPUT


@pytest.mark.anyio
async def test_execute_non_json_body_returns_fallback():
    gateway = gateway_for(lambda request: httpx.Response(200, text="<html>oops</html>"))

    result = await gateway.execute("x", "python")
    assert result["run"]["output"] == EXECUTION_ERROR_OUTPUT


@pytest.mark.anyio
async def test_runtimes_lists_api_runtimes():
    runtimes = [{"language": "python", "version": "3.10.0", "aliases": ["py"]}]
    gateway = gateway_for(lambda request: httpx.Response(200, json=runtimes))

    assert await gateway.runtimes() == runtimes


@pytest.mark.anyio
async def test_runtimes_raises_when_unavailable(piston_down):
    with pytest.raises(ExecutionUnavailable):
        await piston_down.runtimes()
