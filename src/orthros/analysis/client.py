"""
HTTP client for the analysis server.

Each call is one JSON-RPC POST. The blocking `requests` call runs in a worker
thread so callers can await it without stalling the event loop.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from loguru import logger
from pydantic import ValidationError

from orthros.exceptions import AnalysisError
from orthros.schemas import ExistingImport, ImportReply, Namespace
from .base import AnalysisService
from .config import ANALYSIS_CONFIG, RPC_METHODS
from .rpc_protocol import create_request, parse_rpc_response


class AnalysisClient(AnalysisService):
    """
    JSON-RPC session with a running analysis server.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ):
        self.host = host or ANALYSIS_CONFIG["host"]
        self.port = port or ANALYSIS_CONFIG["port"]
        self.timeout_ms = timeout_ms or ANALYSIS_CONFIG["timeout_ms"]

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def is_available(self, timeout_ms: Optional[int] = None) -> bool:
        """
        Fast check that the analysis server is up and healthy.

        Args:
            timeout_ms: Health check timeout in milliseconds

        Returns:
            True if the server answered its health endpoint
        """
        timeout_ms = timeout_ms or ANALYSIS_CONFIG["health_timeout_ms"]
        try:
            response = requests.get(
                self.base_url + ANALYSIS_CONFIG["health_path"],
                timeout=timeout_ms / 1000.0,
            )
            return response.status_code == 200 and response.json().get("healthy", False)
        except (requests.RequestException, ValueError):
            return False

    def _post(self, method: str, params: Dict[str, Any]) -> Any:
        """
        Send one JSON-RPC call and return its result.

        Raises:
            AnalysisError: If the call fails or the server returns an error
        """
        request = create_request(method, params)

        try:
            response = requests.post(
                self.base_url + ANALYSIS_CONFIG["rpc_path"],
                json=request.model_dump(),
                timeout=self.timeout_ms / 1000.0,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise AnalysisError(method, f"failed to reach analysis server: {e}") from e
        except ValueError as e:
            raise AnalysisError(method, f"response was not JSON: {e}") from e

        rpc_response = parse_rpc_response(data)
        if rpc_response.error is not None:
            raise AnalysisError(method, rpc_response.error.message, rpc_response.error.code)

        return rpc_response.result

    async def _call(self, name: str, **params: Any) -> Any:
        method = RPC_METHODS[name]
        logger.debug(f"Analysis call {method}")
        return await asyncio.to_thread(self._post, method, params)

    @staticmethod
    def _parse_imports(method: str, raw: Any) -> List[ExistingImport]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise AnalysisError(method, f"expected a list of imports, got {type(raw).__name__}")
        try:
            return [
                ExistingImport(module_name=item["module"], qualifier=item.get("qualifier"))
                for item in raw
            ]
        except (ValidationError, KeyError, TypeError, AttributeError) as e:
            raise AnalysisError(method, f"malformed import list: {e}") from e

    def _parse_reply(self, method: str, raw: Any) -> ImportReply:
        if not isinstance(raw, dict):
            raise AnalysisError(method, "expected an object with 'imports' and 'result'")
        imports = self._parse_imports(method, raw.get("imports"))
        try:
            return ImportReply.model_validate({"imports": imports, "outcome": raw.get("result")})
        except ValidationError as e:
            raise AnalysisError(method, f"malformed import reply: {e}") from e

    @staticmethod
    def _parse_text(method: str, raw: Any) -> Optional[str]:
        # A null result or a missing "text" means nothing to do
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise AnalysisError(method, f"expected an object with 'text', got {type(raw).__name__}")
        text = raw.get("text")
        if text is not None and not isinstance(text, str):
            raise AnalysisError(method, f"'text' must be a string, got {type(text).__name__}")
        return text

    async def list_imports(self, file_path: Path, text: str) -> List[ExistingImport]:
        method = RPC_METHODS["list_imports"]
        result = await self._call("list_imports", file=str(file_path), text=text)
        if result is None:
            return []
        if not isinstance(result, dict):
            raise AnalysisError(method, f"expected an object with 'imports', got {type(result).__name__}")
        return self._parse_imports(method, result.get("imports"))

    async def add_qualified_import(self, file_path: Path, text: str, module: str, qualifier: str) -> ImportReply:
        result = await self._call(
            "add_qualified_import",
            file=str(file_path),
            text=text,
            module=module,
            qualifier=qualifier,
        )
        return self._parse_reply(RPC_METHODS["add_qualified_import"], result)

    async def add_open_import(self, file_path: Path, text: str, module: str) -> Optional[str]:
        result = await self._call("add_open_import", file=str(file_path), text=text, module=module)
        return self._parse_text(RPC_METHODS["add_open_import"], result)

    async def add_explicit_import(
        self,
        file_path: Path,
        text: str,
        identifier: str,
        module: Optional[str] = None,
        qualifier: Optional[str] = None,
        namespace: Optional[Namespace] = None,
    ) -> ImportReply:
        result = await self._call(
            "add_explicit_import",
            file=str(file_path),
            text=text,
            identifier=identifier,
            module=module,
            qualifier=qualifier,
            namespace=namespace.value if namespace else None,
        )
        return self._parse_reply(RPC_METHODS["add_explicit_import"], result)

    async def organise_imports(self, file_path: Path, text: str) -> Optional[str]:
        result = await self._call("organise_imports", file=str(file_path), text=text)
        return self._parse_text(RPC_METHODS["organise_imports"], result)

    async def list_modules(self) -> List[str]:
        method = RPC_METHODS["list_modules"]
        result = await self._call("list_modules")
        if result is None:
            return []
        modules = result.get("modules", []) if isinstance(result, dict) else None
        if not isinstance(modules, list) or not all(isinstance(m, str) for m in modules):
            raise AnalysisError(method, "expected an object with a 'modules' list of names")
        return list(modules)
