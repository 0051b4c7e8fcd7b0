# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import time
import logging

import httpx
from google import genai
from google.genai import errors
from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
QUERY_RESPONSE_MAX_OUTPUT_TOKENS = 8000
RETRY_BACKOFF_SECONDS = 1.0


class UpstreamError(Exception):
    """The completion service was unreachable or did not answer successfully."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def make_client(api_key: str, timeout_seconds: float | None = None) -> genai.Client:
    http_options = None
    if timeout_seconds:
        # google-genai takes the timeout in milliseconds.
        http_options = types.HttpOptions(timeout=int(timeout_seconds * 1000))
    return genai.Client(api_key=api_key, http_options=http_options)


def call_predict(
    client: genai.Client,
    query: str,
    model: str = DEFAULT_MODEL,
    temperature: float = 0.7,
) -> str:
    """
    Sends a single prompt to Gemini and returns the response text.

    Raises:
        UpstreamError: On API errors, transport failures or an empty response.
    """
    start_time = time.time()
    truncated_query = (query[:200] + "...") if len(query) > 200 else query
    logger.info("Calling Gemini model %s, prompt: '%s'", model, truncated_query)
    try:
        response = client.models.generate_content(
            model=model,
            contents=query,
            config=types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=QUERY_RESPONSE_MAX_OUTPUT_TOKENS,
            ),
        )
    except errors.APIError as e:
        raise UpstreamError(f"Gemini API error: {e.message}", e.code) from e
    except httpx.HTTPError as e:
        raise UpstreamError(f"Gemini request failed: {e}") from e

    logger.info("Gemini call took: %.2fs", time.time() - start_time)
    if not response.text:
        raise UpstreamError("Gemini returned an empty response")
    return response.text


def _is_retryable(error: UpstreamError) -> bool:
    status = error.status_code
    return status is None or status == 429 or status >= 500


def call_predict_with_retries(
    client: genai.Client,
    query: str,
    model: str = DEFAULT_MODEL,
    max_retries: int = 0,
) -> str:
    """
    Calls call_predict, retrying up to max_retries times on transport
    failures, rate limiting and server errors. Client errors such as a
    bad key or request are raised immediately.
    """
    attempt = 0
    while True:
        try:
            return call_predict(client, query, model=model)
        except UpstreamError as e:
            if attempt >= max_retries or not _is_retryable(e):
                raise
            attempt += 1
            logger.warning(
                "Gemini call failed (%s), retry %d of %d", e, attempt, max_retries
            )
            time.sleep(RETRY_BACKOFF_SECONDS * attempt)
