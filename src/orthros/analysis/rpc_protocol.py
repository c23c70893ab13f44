"""
JSON-RPC 2.0 message models for talking to the analysis server.

Implements the client side of the JSON-RPC 2.0 specification:
https://www.jsonrpc.org/specification
"""

import itertools
from typing import Any, Dict, Optional, Union, List
from pydantic import BaseModel, Field, ValidationError
from loguru import logger


# === JSON-RPC 2.0 Schemas ===

class JSONRPCRequest(BaseModel):
    """
    JSON-RPC 2.0 Request.

    Example:
        {"jsonrpc": "2.0", "method": "imports/list", "params": {"file": "src/Main.purs"}, "id": 1}
    """
    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to invoke")
    params: Optional[Union[Dict[str, Any], List[Any]]] = Field(
        default=None,
        description="Method parameters (object or array)"
    )
    id: Optional[Union[str, int]] = Field(
        default=None,
        description="Request ID (null for notifications)"
    )


class JSONRPCError(BaseModel):
    """
    JSON-RPC 2.0 Error object.

    Standard error codes:
        -32700: Parse error
        -32600: Invalid Request
        -32601: Method not found
        -32602: Invalid params
        -32603: Internal error
        -32000 to -32099: Server error (custom)
    """
    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Optional[Any] = Field(default=None, description="Additional error data")


class JSONRPCResponse(BaseModel):
    """
    JSON-RPC 2.0 Response.

    Success example:
        {"jsonrpc": "2.0", "result": {...}, "id": 1}

    Error example:
        {"jsonrpc": "2.0", "error": {"code": -32601, "message": "Method not found"}, "id": 1}
    """
    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    result: Optional[Any] = Field(default=None, description="Result (on success)")
    error: Optional[JSONRPCError] = Field(default=None, description="Error (on failure)")
    id: Optional[Union[str, int]] = Field(default=None, description="Request ID")


class RPCErrorCode:
    """Standard JSON-RPC 2.0 error codes."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Analysis server error codes (server-defined)
    MODULE_NOT_FOUND = -32001
    FILE_NOT_LOADED = -32002


_request_ids = itertools.count(1)


def create_request(method: str, params: Optional[Dict[str, Any]] = None) -> JSONRPCRequest:
    """
    Build a JSON-RPC request with a fresh id.

    Args:
        method: Method name
        params: Method parameters

    Returns:
        JSONRPCRequest ready to serialise
    """
    return JSONRPCRequest(method=method, params=params or {}, id=next(_request_ids))


def parse_rpc_response(data: Any) -> JSONRPCResponse:
    """
    Parse raw JSON data into a JSON-RPC response.

    Args:
        data: Decoded JSON body

    Returns:
        JSONRPCResponse; malformed bodies become an INTERNAL_ERROR response
    """
    if not isinstance(data, dict):
        return JSONRPCResponse(
            error=JSONRPCError(
                code=RPCErrorCode.INTERNAL_ERROR,
                message="Response is not a JSON object",
            )
        )
    try:
        return JSONRPCResponse(**data)
    except ValidationError as e:
        logger.error(f"Failed to parse JSON-RPC response: {e}")
        return JSONRPCResponse(
            error=JSONRPCError(
                code=RPCErrorCode.INTERNAL_ERROR,
                message="Invalid response",
                data=str(e),
            )
        )
