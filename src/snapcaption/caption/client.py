"""
Caption Client
==============

HTTP client for a hosted image-captioning inference endpoint.

This client:
    - Sends the image as a data URI first, then once more as bare Base64
    - Reads the response body on success and error statuses alike
    - Converts every network failure into a CaptionResult

Design Rules:
    - Fail fast on misconfiguration (missing token)
    - Never raise on API or network errors
    - Log all API calls
"""

import logging
from typing import Optional

import requests

from snapcaption.caption.parsing import NO_CAPTION, extract_generated_text
from snapcaption.models.result import CaptionResult, EncodedImage


logger = logging.getLogger(__name__)


class CaptionClient:
    """
    Caption API client with a single prefix-free fallback attempt.

    Attributes:
        api_url: Inference endpoint URL
        timeout: Seconds allowed per HTTP attempt
        retry_on_error_text: Also retry when the first caption merely
            contains the text "Error"

    Example:
        client = CaptionClient(api_url, api_token=os.environ["HF_TOKEN"])
        result = client.caption(encoded_image)
        print(result.text)
    """

    def __init__(
        self,
        api_url: str,
        api_token: Optional[str],
        timeout: float = 30.0,
        retry_on_error_text: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize caption client.

        Args:
            api_url: Inference endpoint URL
            api_token: Bearer token for the endpoint
            timeout: Seconds allowed per HTTP attempt
            retry_on_error_text: Keep the "contains Error" retry trigger
            session: Optional requests.Session (one is created if omitted)

        Raises:
            ValueError: If api_url or api_token is empty
        """
        if not api_url:
            raise ValueError("api_url is required")
        if not api_token:
            raise ValueError(
                "Caption API token is not configured. "
                "Set SNAPCAPTION_API_TOKEN or HF_TOKEN."
            )

        self.api_url = api_url
        self.timeout = timeout
        self.retry_on_error_text = retry_on_error_text

        self._api_token = api_token
        self._session = session or requests.Session()

        self._api_call_count: int = 0
        self._api_error_count: int = 0
        self._fallback_count: int = 0

    def caption(self, image: EncodedImage) -> CaptionResult:
        """
        Request a caption for an encoded image.

        Args:
            image: Compressed image to describe

        Returns:
            CaptionResult from the fallback attempt if one was made,
            otherwise from the first attempt.
        """
        first = self._send(image.to_data_uri())
        if not self._should_retry(first):
            return first

        self._fallback_count += 1
        logger.info(f"Retrying caption without data URI prefix (first result: {first.text!r})")
        second = self._send(image.to_base64())
        return CaptionResult(success=second.success, text=second.text, attempts=2)

    def _should_retry(self, result: CaptionResult) -> bool:
        if not result.success or result.text == NO_CAPTION:
            return True
        return self.retry_on_error_text and "Error" in result.text

    def _send(self, image_data: str) -> CaptionResult:
        """
        POST one payload and turn the response into a CaptionResult.

        A non-2xx status is a failure carrying the status and body text;
        the body is not searched for generated_text.
        """
        headers = {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }
        self._api_call_count += 1

        try:
            response = self._session.post(
                self.api_url,
                json={"inputs": image_data},
                headers=headers,
                timeout=self.timeout,
            )
            body = response.text
        except requests.RequestException as e:
            self._api_error_count += 1
            logger.error(f"Caption API request failed: {e}")
            return CaptionResult.failure(f"Error calling caption API: {e}")

        if not 200 <= response.status_code < 300:
            self._api_error_count += 1
            logger.error(f"Caption API returned HTTP {response.status_code}: {body}")
            return CaptionResult.failure(
                f"Error: caption API returned HTTP {response.status_code}: {body}"
            )

        text = extract_generated_text(body)
        if text == NO_CAPTION:
            logger.warning("Caption API response had no generated_text field")
            return CaptionResult.failure(NO_CAPTION)

        logger.debug(f"Caption API: {text!r}")
        return CaptionResult.ok(text)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    @property
    def api_call_count(self) -> int:
        """Total HTTP attempts made."""
        return self._api_call_count

    @property
    def api_error_count(self) -> int:
        """Total attempts that failed at the HTTP or network level."""
        return self._api_error_count

    def get_metrics(self) -> dict:
        """Get client metrics for observability."""
        return {
            "api_call_count": self._api_call_count,
            "api_error_count": self._api_error_count,
            "fallback_count": self._fallback_count,
        }
