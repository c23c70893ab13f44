# Custom exceptions for Orthros

class OrthrosError(Exception):
    """Base exception for all application-specific errors."""
    pass

class ConfigError(OrthrosError):
    """Raised for configuration-related problems."""
    pass

class AnalysisError(OrthrosError):
    """Raised when a call to the analysis server fails or returns an RPC error."""
    def __init__(self, method: str, message: str, code: int = None):
        self.method = method
        self.message = message
        self.code = code
        super().__init__(f"Analysis call '{method}' failed: {message}")

class AnalysisUnavailableError(OrthrosError):
    """Raised when no analysis session is active."""
    pass

class DocumentNotFoundError(OrthrosError):
    """Raised when a document store has no entry for a URI."""
    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Document not found: {uri}")


class MalformedCommandError(OrthrosError):
    """Raised when host command arguments do not match the expected shape."""

    def __init__(self, command: str, message: str, arguments: list = None):
        self.command = command
        self.arguments = arguments or []
        super().__init__(f"Malformed arguments for '{command}': {message}")
