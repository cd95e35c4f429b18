"""Authentication module for loading Confluence credentials.

This module handles loading Confluence Cloud credentials from environment variables
using python-dotenv. Two identities are supported: the primary identity that
performs every request first, and an optional secondary identity used only when
the primary one is told a resource does not exist (Confluence answers 404 both
for missing content and for content the caller may not see).
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError


class Credentials(NamedTuple):
    """Confluence API credentials."""
    url: str
    user: str
    api_token: str


class Authenticator:
    """Loads and validates Confluence credentials from environment variables.

    Credentials are loaded from a .env file using python-dotenv and are never
    cached or logged to prevent security risks.

    Required environment variables:
        CONFLUENCE_URL: Confluence instance URL (e.g., https://yourinstance.atlassian.net/wiki)
        CONFLUENCE_USER: Confluence user email address of the primary identity
        CONFLUENCE_API_TOKEN: Confluence API token of the primary identity

    Optional environment variables (secondary identity):
        CONFLUENCE_FALLBACK_USER: User email of the secondary identity
        CONFLUENCE_FALLBACK_API_TOKEN: API token of the secondary identity

    Raises:
        InvalidCredentialsError: If any required credential is missing

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.url}")
    """

    def __init__(self):
        """Initialize the authenticator by loading environment variables from .env file."""
        load_dotenv()

    def get_credentials(self) -> Credentials:
        """Get the primary identity's credentials from environment variables.

        Returns:
            Credentials: A named tuple containing url, user, and api_token

        Raises:
            InvalidCredentialsError: If any required credential is missing
        """
        url = os.getenv('CONFLUENCE_URL')
        user = os.getenv('CONFLUENCE_USER')
        api_token = os.getenv('CONFLUENCE_API_TOKEN')

        missing = []
        if not url:
            missing.append('CONFLUENCE_URL')
        if not user:
            missing.append('CONFLUENCE_USER')
        if not api_token:
            missing.append('CONFLUENCE_API_TOKEN')

        if missing:
            endpoint = url if url else "unknown"
            raise InvalidCredentialsError(
                user=user if user else "unknown",
                endpoint=endpoint
            )

        return Credentials(url=url, user=user, api_token=api_token)  # type: ignore[arg-type]

    def get_fallback_credentials(self) -> Optional[Credentials]:
        """Get the secondary identity's credentials, if configured.

        The secondary identity shares the instance URL with the primary one.

        Returns:
            Credentials for the secondary identity, or None when either
            CONFLUENCE_FALLBACK_USER or CONFLUENCE_FALLBACK_API_TOKEN is unset

        Raises:
            InvalidCredentialsError: If CONFLUENCE_URL is missing
        """
        user = os.getenv('CONFLUENCE_FALLBACK_USER')
        api_token = os.getenv('CONFLUENCE_FALLBACK_API_TOKEN')
        if not user or not api_token:
            return None

        url = os.getenv('CONFLUENCE_URL')
        if not url:
            raise InvalidCredentialsError(user=user, endpoint="unknown")

        return Credentials(url=url, user=user, api_token=api_token)
