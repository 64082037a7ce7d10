"""
HTTP transport for the auth backend.

Wraps a single httpx.AsyncClient so that the credential cookie set by the
backend (on login/registration) is kept in the client's cookie jar and sent
with every later request. The cookie itself is never inspected.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from auth_session.config import Settings, get_settings
from auth_session.errors import ServerRejection, TransportFailure
from auth_session.schemas import ErrorResponse

logger = logging.getLogger(__name__)


class AuthTransport:
    """
    Cookie-carrying client for the /api/auth/* REST contract.
    
    One attempt per call: no retries, no queuing. Non-2xx responses raise
    ServerRejection, network errors and malformed bodies raise
    TransportFailure.
    """
    
    def __init__(
        self,
        base_url: str = None,
        timeout: Optional[float] = None,
        verify: bool = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize transport.
        
        Args:
            base_url: Backend base URL (default: AUTH_API_URL)
            timeout: Request timeout in seconds (default: AUTH_REQUEST_TIMEOUT, None = no timeout)
            verify: Verify TLS certificates (default: AUTH_VERIFY_SSL)
            client: Pre-built httpx client to use instead of creating one (not closed by us)
            transport: Custom httpx transport for the owned client (e.g. httpx.MockTransport)
            settings: Settings to read defaults from
        """
        settings = settings or get_settings()
        self.base_url = (base_url or settings.base_url).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.verify = settings.verify_ssl if verify is None else verify
        
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify,
                transport=transport,
            )
        self._client = client
        
        logger.debug(f"AuthTransport initialized: {self.base_url}")
    
    @property
    def cookies(self) -> httpx.Cookies:
        """Cookie jar holding the backend's credential cookie."""
        return self._client.cookies
    
    @property
    def is_closed(self) -> bool:
        return self._client.is_closed
    
    async def request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        expect_json: bool = True,
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON object.
        
        Args:
            method: HTTP method
            path: Path below the base URL, e.g. /api/auth/me
            json_data: JSON body (omitted when None)
            expect_json: If False, an empty or non-JSON success body is
                accepted and returned as {}
            
        Returns:
            Response body as dict
            
        Raises:
            ServerRejection: Backend answered with a non-2xx status
            TransportFailure: Network error or malformed response body
        """
        url = self._url(path)
        
        try:
            response = await self._client.request(method, url, json=json_data)
        except httpx.RequestError as e:
            logger.error(f"Request error: {method} {path}: {e}")
            raise TransportFailure(f"Request failed: {e}", details=repr(e)) from e
        
        logger.debug(f"{method} {path} -> {response.status_code}")
        
        if expect_json:
            body = self._decode(response, path)
        elif response.content:
            try:
                body = self._decode(response, path)
            except TransportFailure:
                body = {}
        else:
            body = {}

        if not response.is_success:
            raise ServerRejection(_error_message(body), response.status_code, details=response.text)

        return body
    
    async def get(self, path: str, **kwargs) -> Dict[str, Any]:
        return await self.request("GET", path, **kwargs)
    
    async def post(self, path: str, json_data: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        return await self.request("POST", path, json_data=json_data, **kwargs)
    
    async def delete(self, path: str, **kwargs) -> Dict[str, Any]:
        return await self.request("DELETE", path, **kwargs)
    
    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()
    
    async def __aenter__(self) -> "AuthTransport":
        return self
    
    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
    
    def _url(self, path: str) -> str:
        # An injected client may not carry our base_url
        if self._owns_client:
            return "/" + path.lstrip('/')
        return f"{self.base_url}/{path.lstrip('/')}"
    
    @staticmethod
    def _decode(response: httpx.Response, path: str) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Malformed JSON from {path} (status {response.status_code}): {response.text[:200]}")
            raise TransportFailure(f"Malformed JSON from {path}", details=response.text) from e
        
        if not isinstance(body, dict):
            logger.error(f"Unexpected JSON from {path}: expected object, got {type(body).__name__}")
            raise TransportFailure(f"Unexpected JSON from {path}", details=response.text)

        return body


def _error_message(body: Dict[str, Any]) -> Optional[str]:
    """Extract {message} from an error body, tolerating odd shapes."""
    if not body:
        return None
    try:
        return ErrorResponse.model_validate(body).message
    except ValidationError:
        return str(body.get("message"))
