"""Fetches raw document text over HTTP(S) or from Google Cloud Storage."""
import logging
import re
from typing import Any, Optional, Tuple

import httpx
from google.api_core import exceptions as gcs_exceptions
from google.cloud import storage

from config import Settings, get_settings
from services.errors import FetchError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

GCS_URI_PATTERN = re.compile(r"^gs://([^/]+)/(.+)$")


def parse_gcs_uri(uri: str) -> Tuple[str, str]:
    """
    Split ``gs://bucket/path`` into ``(bucket, path)``.

    Raises:
        InvalidArgumentError: If the URI does not have that shape
    """
    match = GCS_URI_PATTERN.match(uri)
    if not match:
        raise InvalidArgumentError(f"Invalid GCS URI: {uri}", {"uri": uri})
    return match.group(1), match.group(2)


class ContentFetcher:
    """Loads source content for ingestion."""

    def __init__(self, settings: Optional[Settings] = None, storage_client: Any = None):
        """
        Args:
            settings: Process-wide settings (defaults to get_settings())
            storage_client: google.cloud.storage.Client; created on first use if omitted
        """
        settings = settings or get_settings()
        self.timeout = settings.request_timeout
        self.project = settings.gcp_project
        self._storage_client = storage_client

    @property
    def storage_client(self) -> Any:
        if self._storage_client is None:
            # Application Default Credentials
            self._storage_client = storage.Client(project=self.project)
        return self._storage_client

    def fetch_http(self, url: str) -> str:
        """
        GET a URL and return its body as text.

        Raises:
            FetchError: On transport failure, non-success status or empty body
        """
        logger.info(f"Fetching content over HTTP: {url}")
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                response = client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch content: {str(e)}", {"uri": url}) from e

        if not response.is_success:
            raise FetchError(
                f"Failed to fetch content: {response.status_code} {response.reason_phrase}",
                {"uri": url, "status_code": response.status_code}
            )

        if not response.text:
            raise FetchError(f"Fetched content is empty: {url}", {"uri": url})

        return response.text

    def fetch_object(self, uri: str) -> str:
        """
        Download a ``gs://bucket/path`` object and decode it as UTF-8.

        Raises:
            InvalidArgumentError: If the URI is malformed
            NotFoundError: If the object is missing or empty
            FetchError: On any other storage failure or undecodable content
        """
        bucket_name, path = parse_gcs_uri(uri)
        logger.info(f"Fetching content from object storage: bucket={bucket_name}, path={path}")

        try:
            blob = self.storage_client.bucket(bucket_name).blob(path)
            contents = blob.download_as_bytes(timeout=self.timeout)
        except gcs_exceptions.NotFound as e:
            raise NotFoundError(f"GCS file is empty or not found: {uri}", {"uri": uri}) from e
        except gcs_exceptions.GoogleAPIError as e:
            raise FetchError(f"Failed to download from GCS: {str(e)}", {"uri": uri}) from e

        if not contents:
            raise NotFoundError(f"GCS file is empty or not found: {uri}", {"uri": uri})

        try:
            return contents.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FetchError(f"GCS file is not valid UTF-8 text: {uri}", {"uri": uri}) from e

    def fetch(self, source_uri: str, source_type: str) -> str:
        """Dispatch on source type: "api" → HTTP, "gcs" → object storage."""
        if source_type == "api":
            return self.fetch_http(source_uri)
        if source_type == "gcs":
            return self.fetch_object(source_uri)
        raise InvalidArgumentError(
            f"Unsupported source type: {source_type}",
            {"source_type": source_type}
        )
