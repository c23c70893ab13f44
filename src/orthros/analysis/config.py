"""
Configuration for the analysis server connection.
"""

ANALYSIS_CONFIG = {
    "host": "127.0.0.1",  # Localhost only
    "port": 4242,
    "timeout_ms": 5000,  # Per-call request timeout
    "health_timeout_ms": 200,  # Health check timeout
    "rpc_path": "/rpc",
    "health_path": "/health",
}

# JSON-RPC method names exposed by the analysis server
RPC_METHODS = {
    "list_imports": "imports/list",
    "add_qualified_import": "imports/addQualified",
    "add_open_import": "imports/addOpen",
    "add_explicit_import": "imports/addExplicit",
    "organise_imports": "imports/organise",
    "list_modules": "modules/list",
}
