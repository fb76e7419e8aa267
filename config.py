"""Shared configuration and the Gemini client for AuditLens."""

import functools
import logging
import os

import httpx
from dotenv import load_dotenv
from google import genai
from google.genai import errors as genai_errors

from errors import AnalysisError
from prompts import SECURITY_AUDIT_PROMPT

# ---------------------------------------------------------------------------
# Environment & logging (initialised once on first import)
# ---------------------------------------------------------------------------
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
USE_MOCK: bool = os.getenv("USE_MOCK", "false").lower() == "true"
DEFAULT_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-lite")

# Generation settings for the audit call (low temperature keeps output terse)
GENERATION_CONFIG: dict = {
    "system_instruction": SECURITY_AUDIT_PROMPT,
    "temperature": 0.1,
    "top_p": 0.95,
    "max_output_tokens": 8192,
    "response_mime_type": "application/json",
}


def get_gemini_api_key() -> str | None:
    """Return the configured Gemini key, or None when analysis is disabled."""
    return os.getenv("GEMINI_API_KEY") or None


# ---------------------------------------------------------------------------
# Cached API clients
# ---------------------------------------------------------------------------
@functools.lru_cache(maxsize=1)
def get_gemini_client() -> genai.Client:
    """Return a cached Gemini client (created once per process)."""
    api_key = get_gemini_api_key()
    if not api_key:
        raise ValueError("GEMINI_API_KEY not found. Set it in .env file.")
    return genai.Client(api_key=api_key)


# ---------------------------------------------------------------------------
# Gemini API call
# ---------------------------------------------------------------------------
def call_gemini(code: str, model: str = DEFAULT_MODEL) -> str:
    """Send *code* to Gemini under the security-audit instruction.

    Returns the raw completion text ("[]" when the model produced none).

    Raises:
        AnalysisError: on a non-success API status or a transport failure
    """
    client = get_gemini_client()
    try:
        response = client.models.generate_content(
            model=model,
            contents=code,
            config=GENERATION_CONFIG,
        )
    except genai_errors.APIError as e:
        raise AnalysisError(f"Gemini API returned {e.code}: {e.message}") from e
    except httpx.HTTPError as e:
        raise AnalysisError(f"Gemini API request failed: {e}") from e

    return response.text or "[]"
