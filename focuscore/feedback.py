"""
HTTP client for the reflection feedback service.
"""

from typing import Optional

import requests

from .config import FeedbackConfig
from .errors import FeedbackServiceError


class FeedbackClient:
    """
    Sends reflection text to the feedback service.

    Request body: {"reflectionText": "..."}
    Response body: {"feedback": "..."}; "answer" and "text" are accepted too.
    """

    RESPONSE_KEYS = ("feedback", "answer", "text")

    def __init__(self, config: FeedbackConfig, session: Optional[requests.Session] = None):
        self.config = config
        self._session = session or requests.Session()

    def get_feedback(self, reflection_text: str) -> str:
        """
        Raises:
            FeedbackServiceError: If the service is not configured, unreachable,
                times out, answers non-2xx, or returns no feedback text.
        """
        if not self.config.enabled:
            raise FeedbackServiceError("Feedback service URL is not configured")

        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        try:
            resp = self._session.post(
                self.config.url,
                json={"reflectionText": reflection_text},
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise FeedbackServiceError(f"Feedback request failed: {e}") from e
        except ValueError as e:
            raise FeedbackServiceError("Feedback response is not JSON") from e

        if isinstance(data, dict):
            for key in self.RESPONSE_KEYS:
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
        raise FeedbackServiceError("Feedback response has no feedback text")
