import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, HTTPException, Request

from collab_editor.models.event_models import RunCodeRequest

logger = logging.getLogger(__name__)

# Piston API URLs
PISTON_URL = "https://emkc.org/api/v2/piston/execute"
PISTON_RUNTIMES_URL = "https://emkc.org/api/v2/piston/runtimes"

EXECUTION_ERROR_OUTPUT = "Error compiling code or contacting API."


class ExecutionUnavailable(Exception):
    """Raised when the execution API cannot be reached for a lookup."""


def build_payload(code: str, language: str, version: str, stdin: str) -> Dict[str, Any]:
    return {
        "language": language,
        "version": version,
        "files": [{"content": code}],
        "stdin": stdin,
    }


def fallback_result(language: str, version: str) -> Dict[str, Any]:
    # Same shape as a Piston response so the UI reads `run.output` either way.
    return {
        "language": language,
        "version": version,
        "run": {
            "stdout": "",
            "stderr": EXECUTION_ERROR_OUTPUT,
            "code": None,
            "signal": None,
            "output": EXECUTION_ERROR_OUTPUT,
        },
    }


class ExecutionGateway:
    """Forwards code to the Piston execution API.

    `execute` never raises: any transport or API failure is folded into a
    fallback result carrying a fixed error message.
    """

    def __init__(
        self,
        url: str = PISTON_URL,
        runtimes_url: str = PISTON_RUNTIMES_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.runtimes_url = runtimes_url
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)

    async def execute(self, code: str, language: str, version: str = "*", stdin: str = "") -> Any:
        payload = build_payload(code, language, version, stdin)
        async with self._client() as client:
            try:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"❌ Compilation error for {language}/{version}: {e}")
                return fallback_result(language, version)

    async def runtimes(self) -> List[Dict[str, Any]]:
        async with self._client() as client:
            try:
                response = await client.get(self.runtimes_url)
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"❌ Could not fetch runtimes: {e}")
                raise ExecutionUnavailable(str(e)) from e


router = APIRouter()


@router.post("/run-code")
async def run_code(payload: RunCodeRequest, request: Request):
    gateway: ExecutionGateway = request.app.state.gateway
    return await gateway.execute(payload.code, payload.language, payload.version, payload.stdin)


@router.get("/api/runtimes")
async def list_runtimes(request: Request):
    gateway: ExecutionGateway = request.app.state.gateway
    try:
        return await gateway.runtimes()
    except ExecutionUnavailable:
        raise HTTPException(status_code=502, detail="Execution API unavailable")
