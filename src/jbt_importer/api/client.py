"""Jira Jelly runner client implementation."""

from abc import ABC, abstractmethod
from typing import Dict, Optional

import requests
from loguru import logger

from ..config.config import JiraInstanceConfig
from ..exceptions import AuthenticationError, TransportError
from ..models.credentials import Credentials
from .response import SubmissionResponse, extract_token, parse_submission_response

TOKEN_PATH = 'secure/admin/util/JellyRunner!default.jspa'
RUNNER_PATH = 'secure/admin/util/JellyRunner.jspa'


class TokenProvider(ABC):
    """Obtains the security token required by script submissions."""

    @abstractmethod
    def obtain_token(self, credentials: Credentials) -> str:
        """Log in and return the security token.

        Args:
            credentials: Jira credentials

        Returns:
            Token string, empty if the page carried no token
        """
        pass


class SubmissionClient(ABC):
    """Submits one issue's Jelly script for execution."""

    @abstractmethod
    def submit(
        self, token: str, credentials: Credentials, xml_payload: str
    ) -> SubmissionResponse:
        """Run a Jelly script on the server.

        Args:
            token: Security token from :meth:`TokenProvider.obtain_token`
            credentials: Jira credentials
            xml_payload: Jelly script to execute

        Returns:
            Text extracted from the result page
        """
        pass


class JellyRunnerClient(TokenProvider, SubmissionClient):
    """Talks to Jira's Jelly runner admin page through form posts."""

    def __init__(self, config: JiraInstanceConfig):
        """Initialize Jelly runner client.

        Args:
            config: Jira instance configuration
        """
        self.config = config
        self.base_url = config.url.rstrip('/') + '/'
        self.session = requests.Session()
        self.session.headers.update({'User-Agent': 'jbt-importer/0.1.0'})

        proxies = config.proxy.proxies_for(self.base_url)
        if proxies:
            self.session.proxies.update(proxies)
            logger.info(f'Using proxy {next(iter(proxies.values()))}')

        logger.info(f'Initialized Jelly runner client for {config.url}')

    def _build_url(self, path: str) -> str:
        """Build a full URL from a server-relative path."""
        return self.base_url + path.lstrip('/')

    def _post_form(self, path: str, data: Dict[str, str]) -> requests.Response:
        """Post form fields and return the response.

        Raises:
            AuthenticationError: If Jira rejects the credentials outright
            TransportError: On network errors or other HTTP error statuses
        """
        url = self._build_url(path)

        try:
            response = self.session.post(url, data=data, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f'Network error during POST to {url}: {e}')
            raise TransportError(f'Error communicating with Jira: {e}') from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f'Jira rejected the credentials (HTTP {response.status_code})',
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise TransportError(
                f'Jira request failed: HTTP {response.status_code}',
                status_code=response.status_code,
            )
        return response

    def obtain_token(self, credentials: Credentials) -> str:
        """Fetch the Jelly runner form and read its ``atl_token`` field."""
        response = self._post_form(TOKEN_PATH, credentials.form_fields())
        token = extract_token(response.text)
        if token:
            logger.debug('Obtained Jira security token')
        else:
            logger.warning('No security token found on the Jelly runner page')
        return token

    def submit(
        self, token: str, credentials: Credentials, xml_payload: str
    ) -> SubmissionResponse:
        """Post a Jelly script to the runner and scan the result page."""
        if not token:
            raise AuthenticationError('The security token is not valid')

        data = credentials.form_fields()
        data.update({'atl_token': token, 'file': '', 'script': xml_payload})

        response = self._post_form(RUNNER_PATH, data)
        return parse_submission_response(response.text)

    def close(self):
        """Close the client session."""
        self.session.close()
        logger.info('Jelly runner client session closed')

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class JellyRunnerClientFactory:
    """Factory for creating Jelly runner clients."""

    @staticmethod
    def create_client(
        config: JiraInstanceConfig, credentials: Optional[Credentials] = None
    ) -> JellyRunnerClient:
        """Create a client from configuration.

        Args:
            config: Jira instance configuration
            credentials: Credentials the client will be used with

        Raises:
            AuthenticationError: If the credentials are blank
        """
        if credentials is not None and (
            not credentials.username.strip() or not credentials.password.strip()
        ):
            raise AuthenticationError('A valid username and password are required')

        return JellyRunnerClient(config)
