"""OAuth1 (RSA-SHA1) signed requests to JIRA.

JIRA application links authenticate consumers with RSA-SHA1 signatures: the
consumer key and private key identify the application, the access token
identifies the user who granted access.
"""

from typing import Any, Dict, Optional

import requests
import structlog
from oauthlib.oauth1 import SIGNATURE_RSA, SIGNATURE_TYPE_AUTH_HEADER
from requests_oauthlib import OAuth1

from ..core.exceptions import OAuth1Error, OAuth1HttpRequestError

logger = structlog.get_logger(__name__)


class OAuth1Provider:
    """Signing context for a single JIRA instance."""

    def __init__(
        self,
        consumer_key: str,
        private_key: str,
        timeout: int = 30,
        verify_ssl: bool = True,
    ):
        """Initialize the provider.

        Args:
            consumer_key: Consumer key of the JIRA application link
            private_key: PEM encoded RSA private key of the application link
            timeout: Transport timeout in seconds
            verify_ssl: Whether to verify the JIRA server certificate
        """
        if not consumer_key or not private_key:
            raise OAuth1Error("Consumer key and private key are required")

        self.consumer_key = consumer_key
        self.private_key = private_key
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def _auth(self, access_token: str) -> OAuth1:
        return OAuth1(
            client_key=self.consumer_key,
            rsa_key=self.private_key,
            resource_owner_key=access_token,
            signature_method=SIGNATURE_RSA,
            signature_type=SIGNATURE_TYPE_AUTH_HEADER,
        )

    def make_authorized_request(
        self,
        access_token: str,
        url: str,
        method: str,
        body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Send a request signed on behalf of the user owning the access token.

        Args:
            access_token: OAuth1 access token granted by the user
            url: Absolute JIRA API URL
            method: HTTP method
            body: Optional JSON payload

        Returns:
            The raw JIRA response

        Raises:
            OAuth1HttpRequestError: If JIRA answers with an error status
            OAuth1Error: If the request cannot be signed or sent
        """
        request = requests.Request(
            method,
            url,
            headers={"Accept": "application/json"},
            json=body,
            auth=self._auth(access_token),
        )

        with requests.Session() as session:
            try:
                prepared = session.prepare_request(request)
            except Exception as e:
                # Unusable RSA keys surface from oauthlib/PyJWT while signing
                logger.error("jira_request_signing_failed", method=method, url=url, error=str(e))
                raise OAuth1Error(f"Failed to sign request to {url}: {e}") from e

            send_kwargs = session.merge_environment_settings(
                prepared.url, {}, None, self.verify_ssl, None
            )
            try:
                response = session.send(prepared, timeout=self.timeout, **send_kwargs)
            except requests.exceptions.RequestException as e:
                logger.error("jira_signed_request_failed", method=method, url=url, error=str(e))
                raise OAuth1Error(f"Failed to send signed request to {url}: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                "jira_signed_request_rejected",
                method=method,
                url=url,
                status=response.status_code,
            )
            raise OAuth1HttpRequestError(response.text, response.status_code)

        logger.debug("jira_signed_request_completed", method=method, url=url, status=response.status_code)
        return response
