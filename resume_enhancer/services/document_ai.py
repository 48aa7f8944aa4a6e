"""
Google Document AI client for resume text extraction.

Authenticates with a service-account assertion (RS256 JWT exchanged for a
bearer token) and calls the processor's :process endpoint with the file
content inline.
"""
import base64
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from jose import jwt

from resume_enhancer.core.exceptions import DocumentExtractionError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_TTL_SECONDS = 3600


def load_credentials(path: str) -> Dict[str, Any]:
    """Read a service-account JSON key file."""
    credentials_path = Path(path)
    if not credentials_path.is_file():
        raise DocumentExtractionError(f"Google credentials file not found: {path}")
    return json.loads(credentials_path.read_text(encoding="utf-8"))


def build_assertion(credentials: Dict[str, Any], now: Optional[int] = None) -> str:
    """Sign the service-account assertion sent to the token endpoint."""
    issued_at = int(now if now is not None else time.time())
    claims = {
        "iss": credentials["client_email"],
        "sub": credentials["client_email"],
        "aud": TOKEN_URL,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_TTL_SECONDS,
        "scope": CLOUD_PLATFORM_SCOPE,
    }
    headers = {"kid": credentials["private_key_id"]} if credentials.get("private_key_id") else None
    return jwt.encode(claims, credentials["private_key"], algorithm="RS256", headers=headers)


class DocumentAIClient:
    def __init__(
        self,
        credentials: Dict[str, Any],
        processor_id: Optional[str],
        location: str = "us",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.project_id = credentials.get("project_id")
        self.processor_id = processor_id
        self.location = location
        self.transport = transport

    @classmethod
    def from_credentials_file(cls, path: str, processor_id: Optional[str], location: str = "us") -> "DocumentAIClient":
        return cls(load_credentials(path), processor_id, location)

    @property
    def processor_name(self) -> str:
        return f"projects/{self.project_id}/locations/{self.location}/processors/{self.processor_id}"

    @property
    def process_url(self) -> str:
        return f"https://{self.location}-documentai.googleapis.com/v1/{self.processor_name}:process"

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        try:
            assertion = build_assertion(self.credentials)
        except (KeyError, ValueError) as e:
            raise DocumentExtractionError(f"Invalid service account credentials: {e}") from e

        try:
            response = await client.post(
                TOKEN_URL,
                json={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            )
        except httpx.HTTPError as e:
            logger.error(f"Token exchange request failed: {e}")
            raise DocumentExtractionError("Failed to get access token") from e

        if response.status_code != 200:
            logger.error(f"Token exchange failed: status={response.status_code}")
            raise DocumentExtractionError("Failed to get access token")

        try:
            access_token = response.json().get("access_token")
        except ValueError as e:
            raise DocumentExtractionError("Failed to get access token") from e
        if not access_token:
            raise DocumentExtractionError("Failed to get access token")
        return access_token

    async def extract_text(self, content: bytes, mime_type: str) -> str:
        """
        Extract the text of a document.

        Args:
            content: Raw file bytes
            mime_type: MIME type of the file (application/pdf, image/png, ...)

        Returns:
            Full document text

        Raises:
            DocumentExtractionError: On missing configuration, failed token
                exchange, failed processing call, or an empty result
        """
        if not self.project_id or not self.processor_id:
            raise DocumentExtractionError("Missing Google Cloud configuration")

        request_body = {
            "name": self.processor_name,
            "rawDocument": {
                "content": base64.b64encode(content).decode("ascii"),
                "mimeType": mime_type,
            },
        }

        async with httpx.AsyncClient(transport=self.transport) as client:
            access_token = await self._get_access_token(client)
            try:
                response = await client.post(
                    self.process_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                    json=request_body,
                )
            except httpx.HTTPError as e:
                logger.error(f"Document AI request failed: {e}")
                raise DocumentExtractionError(f"Document AI API error: {e}") from e

        if response.status_code != 200:
            try:
                message = response.json().get("error", {}).get("message") or "Unknown error"
            except ValueError:
                message = "Unknown error"
            logger.error(f"Document AI API error: status={response.status_code}, message={message}")
            raise DocumentExtractionError(f"Document AI API error: {message}")

        try:
            text = (response.json().get("document") or {}).get("text")
        except ValueError as e:
            raise DocumentExtractionError("Document AI API error: invalid response body") from e
        if not text:
            raise DocumentExtractionError("No text extracted from document")

        logger.info(f"Extracted {len(text)} characters with Document AI ({mime_type})")
        return text
