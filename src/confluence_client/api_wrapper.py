"""API wrapper for Confluence Cloud REST API v2.

This module drives the REST v2 endpoints through the sessions of
atlassian-python-api Confluence clients (one per identity) and translates
non-success responses into our typed exception hierarchy. Every read and write
goes through an ordered list of authorization strategies: the primary identity
first, then the secondary identity only when the primary was told "not found".
It integrates with the retry logic for handling rate limits.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import parse_qs, urlparse

from atlassian import Confluence
from requests import Response
from requests.exceptions import Timeout, ConnectTimeout, ReadTimeout, ConnectionError

from .auth import Authenticator, Credentials
from .errors import (
    APIAccessError,
    APIUnreachableError,
    AuthAttempt,
    ExternalServiceError,
    InvalidCredentialsError,
    PageNotFoundError,
    SpaceNotFoundError,
    VersionConflictError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)

PAGES_PATH = "api/v2/pages"
SPACES_PATH = "api/v2/spaces"


@dataclass
class AuthorizationStrategy:
    """A named identity and the client that sends requests as it."""

    name: str
    client: Confluence


class APIWrapper:
    """Confluence REST v2 client with identity fallback and error translation.

    This class provides a thin wrapper over the Confluence API that:
    1. Builds one client per configured identity using the Authenticator
    2. Tries each request as the primary identity, then as the secondary
       identity when the primary got a 404
    3. Records every attempt (identity, status, body) for diagnostics
    4. Translates failures to typed exceptions
    5. Integrates retry logic for 429 rate limits

    Example:
        >>> auth = Authenticator()
        >>> api = APIWrapper(auth)
        >>> page = api.get_page_by_id("123456")
    """

    def __init__(self, authenticator: Authenticator):
        """Initialize the API wrapper with authentication credentials.

        Args:
            authenticator: Authenticator instance for loading credentials
        """
        self._authenticator = authenticator
        self._strategies: Optional[List[AuthorizationStrategy]] = None

    def _build_client(self, creds: Credentials) -> Confluence:
        """Create an atlassian-python-api client for one identity."""
        return Confluence(
            url=creds.url,
            username=creds.user,
            password=creds.api_token,
            cloud=True,
            timeout=30,
        )

    def _get_strategies(self) -> List[AuthorizationStrategy]:
        """Get or create the ordered authorization strategies.

        Clients are created lazily on first use so that constructing the
        wrapper never touches credentials.

        Returns:
            List with the primary ("app") strategy and, when configured,
            the secondary ("user") strategy

        Raises:
            InvalidCredentialsError: If primary credentials are missing
        """
        if self._strategies is None:
            strategies = [
                AuthorizationStrategy(
                    "app", self._build_client(self._authenticator.get_credentials())
                )
            ]
            fallback = self._authenticator.get_fallback_credentials()
            if fallback is not None:
                strategies.append(
                    AuthorizationStrategy("user", self._build_client(fallback))
                )
            self._strategies = strategies
        return self._strategies

    def _validate_page_id(self, page_id: str) -> None:
        """Validate that a page ID is in the correct format.

        Confluence page IDs are always numeric; anything else is rejected
        before it can be interpolated into a request path.

        Args:
            page_id: The page ID to validate

        Raises:
            ValueError: If page_id is not a valid numeric string
        """
        if not page_id or not str(page_id).strip():
            raise ValueError("page_id cannot be empty")

        page_id_str = str(page_id).strip()
        if not re.match(r'^\d+$', page_id_str):
            raise ValueError(
                f"Invalid page_id format: '{page_id}'. "
                f"Page IDs must contain only numeric characters."
            )

    def _sanitize_credentials(self, text: str) -> str:
        """Sanitize response bodies before logging to prevent credential leakage.

        Args:
            text: The error message or log text to sanitize

        Returns:
            str: Sanitized text with credentials masked
        """
        if not text:
            return text

        sanitized = re.sub(r'://([\w.-]+):([\w.-]+)@', r'://***:***@', text)
        sanitized = re.sub(
            r'Authorization:\s*[^\n\r]+',
            'Authorization: ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'(Bearer|Basic)\s+[^\s\n\r]+',
            r'\1 ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'(api_?token|token|password)["\']?\s*[:=]\s*["\']?([^"\'\s&]+)',
            r'\1=***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        return sanitized

    def _perform(
        self,
        strategy: AuthorizationStrategy,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Response:
        """Send one request as one identity and return the raw response.

        Raises:
            APIUnreachableError: On timeouts and connection failures
            ExternalServiceError: On 429 so that the rate limit retry kicks in
        """
        client = strategy.client
        try:
            if method == "GET":
                response = client.get(path, params=params, advanced_mode=True)
            elif method == "POST":
                response = client.post(path, data=data, params=params, advanced_mode=True)
            elif method == "PUT":
                response = client.put(path, data=data, params=params, advanced_mode=True)
            else:
                raise ValueError(f"Unsupported HTTP method: {method}")
        except (Timeout, ConnectTimeout, ReadTimeout, ConnectionError) as e:
            raise APIUnreachableError(endpoint=client.url) from e

        if response.status_code == 429:
            raise ExternalServiceError(operation, 429, response.text)
        return response

    def _send(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a request through the authorization strategies in order.

        The next identity is only tried when the previous one got a 404,
        which Confluence also returns for content the caller may not see.

        Returns:
            Parsed JSON body of the first successful response

        Raises:
            APIAccessError: If the primary got a 404 and the secondary also failed
            InvalidCredentialsError: If the primary identity got a 401
            ExternalServiceError: For any other non-success response
        """
        attempts: List[AuthAttempt] = []
        for strategy in self._get_strategies():
            response = retry_on_rate_limit(
                self._perform, strategy, method, path, operation,
                params=params, data=data,
            )
            attempts.append(
                AuthAttempt(strategy.name, response.status_code, response.text)
            )

            if response.ok:
                if len(attempts) > 1:
                    primary = attempts[0]
                    logger.warning(
                        f"{operation}: identity '{strategy.name}' succeeded while "
                        f"identity '{primary.identity}' got {primary.status}"
                    )
                return self._parse_body(response, operation)

            logger.info(
                f"{operation}: identity '{strategy.name}' failed with "
                f"{response.status_code}: {self._sanitize_credentials(response.text)}"
            )
            if response.status_code != 404:
                break

        raise self._error_for(operation, attempts)

    def _parse_body(self, response: Response, operation: str) -> Dict[str, Any]:
        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(
                operation, response.status_code, response.text
            ) from e

    def _error_for(self, operation: str, attempts: List[AuthAttempt]) -> Exception:
        """Translate the recorded attempts into a typed exception.

        The primary identity's status and body are always the ones surfaced.
        """
        primary = attempts[0]
        if len(attempts) > 1:
            return APIAccessError(
                f"{operation} failed: {primary.status} {primary.body}",
                attempts=attempts,
            )
        if primary.status == 401:
            creds = self._authenticator.get_credentials()
            return InvalidCredentialsError(user=creds.user, endpoint=creds.url)
        return ExternalServiceError(operation, primary.status, primary.body)

    def list_spaces(self, limit: int = 50) -> Iterator[Dict[str, Any]]:
        """Iterate over every space visible to the primary identity.

        Follows the cursor in ``_links.next`` until the collection is exhausted.

        Args:
            limit: Page size requested from the API

        Yields:
            Dicts with ``id``, ``key`` and ``name``
        """
        params: Dict[str, Any] = {"limit": limit}
        while True:
            data = self._send("GET", SPACES_PATH, "list_spaces", params=params)
            for space in data.get("results", []):
                yield {
                    "id": space.get("id"),
                    "key": space.get("key"),
                    "name": space.get("name"),
                }

            next_link = data.get("_links", {}).get("next")
            if not next_link:
                return
            cursor = parse_qs(urlparse(next_link).query).get("cursor")
            if not cursor:
                return
            params = {"limit": limit, "cursor": cursor[0]}

    def get_space_by_key(self, space_key: str) -> Optional[Dict[str, Any]]:
        """Fetch a space by its key.

        Returns:
            Space dict (``id``, ``key``, ``name``...), or None if no space matches
        """
        data = self._send(
            "GET", SPACES_PATH, f"get_space_by_key({space_key})",
            params={"keys": space_key, "limit": 1},
        )
        results = data.get("results") or []
        return results[0] if results else None

    def get_space_by_id(self, space_id: str) -> Dict[str, Any]:
        """Fetch a space by its numeric id.

        Raises:
            SpaceNotFoundError: If the space does not exist
        """
        try:
            return self._send(
                "GET", f"{SPACES_PATH}/{space_id}", f"get_space_by_id({space_id})"
            )
        except ExternalServiceError as e:
            if e.status == 404:
                raise SpaceNotFoundError(str(space_id)) from e
            raise

    def get_page_by_id(self, page_id: str) -> Dict[str, Any]:
        """Fetch a page by its ID with its storage-format body.

        Args:
            page_id: The Confluence page ID

        Returns:
            Dict with ``id``, ``title``, ``spaceId``, ``version``, ``body``, ``_links``

        Raises:
            PageNotFoundError: If no identity can see the page and no
                secondary identity is configured
            APIAccessError: If the primary got a 404 and the secondary failed too
        """
        self._validate_page_id(page_id)
        try:
            return self._send(
                "GET", f"{PAGES_PATH}/{page_id}", f"get_page_by_id({page_id})",
                params={"body-format": "storage"},
            )
        except ExternalServiceError as e:
            if e.status == 404:
                raise PageNotFoundError(page_id=str(page_id)) from e
            raise

    def find_page_by_title(self, space_id: str, title: str) -> Optional[Dict[str, Any]]:
        """Find a page by exact title within a space.

        Returns:
            Page dict, or None if no page with that title exists in the space
        """
        data = self._send(
            "GET", PAGES_PATH, f"find_page_by_title({space_id}, {title})",
            params={
                "space-id": space_id,
                "title": title,
                "body-format": "storage",
                "limit": 1,
            },
        )
        results = data.get("results") or []
        return results[0] if results else None

    def create_page(
        self,
        space_id: str,
        title: str,
        body: str,
        parent_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a new page in storage representation.

        Args:
            space_id: Numeric id of the space where the page will be created
            title: The page title
            body: The page content in storage format (XHTML)
            parent_id: Optional parent page ID

        Returns:
            Dict containing created page data
        """
        payload: Dict[str, Any] = {
            "spaceId": str(space_id),
            "status": "current",
            "title": title,
            "body": {"representation": "storage", "value": body},
        }
        if parent_id:
            payload["parentId"] = str(parent_id)

        return self._send(
            "POST", PAGES_PATH, f"create_page({space_id}, {title})", data=payload
        )

    def update_page(
        self,
        page_id: str,
        space_id: str,
        title: str,
        body: str,
        version_number: int,
        message: str = "",
    ) -> Dict[str, Any]:
        """Update a page with an explicit version number.

        Args:
            page_id: The Confluence page ID
            space_id: Numeric id of the page's space
            title: The page title
            body: The page content in storage format (XHTML)
            version_number: The version to write (current version + 1)
            message: Version message

        Returns:
            Dict containing updated page data

        Raises:
            VersionConflictError: If the store rejects the version number
        """
        self._validate_page_id(page_id)
        payload = {
            "id": str(page_id),
            "status": "current",
            "title": title,
            "spaceId": str(space_id),
            "body": {"representation": "storage", "value": body},
            "version": {"number": version_number, "message": message},
        }
        try:
            return self._send(
                "PUT", f"{PAGES_PATH}/{page_id}", f"update_page({page_id})",
                data=payload,
            )
        except ExternalServiceError as e:
            if e.status == 409:
                raise VersionConflictError(
                    str(page_id), version_number - 1, e.body
                ) from e
            raise
