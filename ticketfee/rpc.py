"""JSON-RPC client for the chain daemon."""

import json
import requests
from typing import Any

from .constants import DEFAULT_HTTP_TIMEOUT_SECS
from .errors import RPCError
from .logging import get_logger

logger = get_logger(__name__)


class RPCClient:
    """Daemon RPC client with persistent session."""
    
    def __init__(self, url: str, user: str, password: str,
                 timeout: float = DEFAULT_HTTP_TIMEOUT_SECS,
                 verify_tls: bool = True):
        """
        Initialize RPC client.
        
        Args:
            url: RPC URL (e.g., "https://127.0.0.1:14009")
            user: RPC username
            password: RPC password
            timeout: Per-request timeout in seconds
            verify_tls: Verify the daemon's TLS certificate (or a CA bundle path)
        """
        self.url = url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["content-type"] = "application/json"
        self.session.auth = (user, password)
        self.session.verify = verify_tls
        self._next_id = 0
    
    def call(self, method: str, *params: Any) -> Any:
        """
        Make an RPC call.
        
        Args:
            method: RPC method name
            *params: RPC method parameters
        
        Returns:
            RPC result
        
        Raises:
            RPCError: If RPC returns an error
            requests.RequestException: If HTTP request fails
        """
        self._next_id += 1
        payload = {
            "jsonrpc": "1.0",
            "id": self._next_id,
            "method": method,
            "params": list(params)
        }
        logger.debug(f"RPC {method} {list(params)}")
        response = self.session.post(self.url, data=json.dumps(payload), timeout=self.timeout)
        # The daemon reports RPC errors with a 500 status and a JSON body
        if response.status_code != 500:
            response.raise_for_status()
        try:
            result = response.json()
        except ValueError:
            response.raise_for_status()
            raise
        
        if not isinstance(result, dict):
            raise RPCError(method, f"malformed response body: {result!r}")

        error = result.get("error")
        if error:
            if isinstance(error, dict):
                raise RPCError(method, error.get("message", error), code=error.get("code"))
            raise RPCError(method, error)
        
        if "result" not in result:
            raise RPCError(method, "response has no result field")
        return result["result"]
