"""
Supabase storage and auth helpers.

Wraps the supabase client for the few calls this service makes: resume file
upload/download, signed download URLs, and the OAuth/magic-link code
exchange used by the auth callback.
"""
import logging
from typing import Optional
from supabase import Client, create_client

from resume_enhancer.core.exceptions import ConfigurationError, StorageError

logger = logging.getLogger(__name__)

SIGNED_URL_TTL_SECONDS = 60 * 60


def processed_file_path(user_id: str, resume_id: str, extension: str) -> str:
    """Storage key for files derived from a resume."""
    return f"processed/{user_id}/{resume_id}.{extension}"


class SupabaseService:
    def __init__(self, client: Client, bucket: str = "resumes"):
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_config(cls, url: Optional[str], service_role_key: Optional[str], bucket: str = "resumes") -> "SupabaseService":
        if not url or not service_role_key:
            raise ConfigurationError("Supabase not configured - SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
        return cls(create_client(url, service_role_key), bucket)

    def upload(self, path: str, content: bytes, content_type: str, upsert: bool = True) -> str:
        """Upload bytes to the bucket, overwriting an existing object when upsert is set."""
        try:
            self.client.storage.from_(self.bucket).upload(
                path,
                content,
                file_options={"content-type": content_type, "upsert": "true" if upsert else "false"},
            )
        except Exception as e:
            logger.error(f"Storage upload failed: path={path}, error={e}")
            raise StorageError(f"Failed to upload {path}") from e

        logger.info(f"Uploaded {len(content)} bytes to {self.bucket}/{path}")
        return path

    def download(self, path: str) -> bytes:
        try:
            return self.client.storage.from_(self.bucket).download(path)
        except Exception as e:
            logger.error(f"Storage download failed: path={path}, error={e}")
            raise StorageError(f"Failed to download {path}") from e

    def create_signed_url(self, path: str, expires_in: int = SIGNED_URL_TTL_SECONDS) -> str:
        """Issue a time-limited download URL for an object."""
        try:
            result = self.client.storage.from_(self.bucket).create_signed_url(path, expires_in)
        except Exception as e:
            logger.error(f"Signed URL creation failed: path={path}, error={e}")
            raise StorageError(f"Failed to create download URL for {path}") from e

        # storage3 has returned both spellings across releases
        signed_url = result.get("signedURL") or result.get("signedUrl")
        if not signed_url:
            raise StorageError(f"No signed URL returned for {path}")
        return signed_url

    def exchange_code_for_session(self, code: str) -> None:
        """Trade an auth redirect code for a session."""
        self.client.auth.exchange_code_for_session({"auth_code": code})
