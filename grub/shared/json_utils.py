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

"""Recovery of JSON objects embedded in free-form model output."""

import json
import logging
import re

logger = logging.getLogger(__name__)

# Every pattern below matches a whole string literal first so that the
# repairs never touch text inside quotes.
_STRING_LITERAL = r'"(?:\\.|[^"\\])*"'

_COMMENT_PATTERN = re.compile(
    _STRING_LITERAL + r"|/\*.*?\*/|//[^\n]*", re.DOTALL
)
_TRAILING_COMMA_PATTERN = re.compile(_STRING_LITERAL + r"|,(\s*[}\]])")
_BARE_KEY_PATTERN = re.compile(
    _STRING_LITERAL + r"|(?<=[{,])(\s*)([A-Za-z_$][A-Za-z0-9_$]*)(\s*:)"
)


class MalformedResponseError(Exception):
    """No JSON object could be recovered from the model output.

    The raw text is kept on the exception for logging and is never part of
    the message.
    """

    def __init__(self, message: str, raw: str | None = None):
        super().__init__(message)
        self.raw = raw


def extract_object_span(raw: str) -> str | None:
    """Returns the text from the first '{' to the last '}', or None."""
    if not raw:
        return None
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return raw[start : end + 1]


def strip_comments(text: str) -> str:
    def _replace(match: re.Match) -> str:
        token = match.group(0)
        if token.startswith('"'):
            return token
        # A block comment may separate two tokens.
        return " " if token.startswith("/*") else ""

    return _COMMENT_PATTERN.sub(_replace, text)


def remove_trailing_commas(text: str) -> str:
    def _replace(match: re.Match) -> str:
        closing = match.group(1)
        return match.group(0) if closing is None else closing

    return _TRAILING_COMMA_PATTERN.sub(_replace, text)


def quote_bare_keys(text: str) -> str:
    def _replace(match: re.Match) -> str:
        if match.group(2) is None:
            return match.group(0)
        return f'{match.group(1)}"{match.group(2)}"{match.group(3)}'

    return _BARE_KEY_PATTERN.sub(_replace, text)


def repair_json_text(text: str) -> str:
    """Applies the comment, trailing comma and bare key repairs in order."""
    text = strip_comments(text)
    text = remove_trailing_commas(text)
    return quote_bare_keys(text)


def recover_json_object(raw: str) -> dict:
    """
    Recovers the JSON object embedded in a model response.

    Args:
        raw (str): The completion text, possibly wrapped in prose or
            markdown fences and containing comments, trailing commas or
            unquoted keys.

    Returns:
        dict: The parsed object.

    Raises:
        MalformedResponseError: If no '{...}' span exists, or the span still
            fails to parse after the repairs.
    """
    span = extract_object_span(raw)
    if span is None:
        raise MalformedResponseError("No JSON object found in model output", raw)

    repaired = repair_json_text(span)
    if repaired != span:
        logger.debug("Repaired model JSON (truncated): %s", repaired[:500])

    try:
        parsed = json.loads(repaired)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Model output is not valid JSON after repair: {e.msg}", raw
        ) from e
    except RecursionError as e:
        raise MalformedResponseError("Model output is nested too deeply", raw) from e
    return parsed
