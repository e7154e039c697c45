# app/services/analysis_service.py
"""
Analysis Adapter: turns uploaded document images into a structured verdict.

  data URLs → ImagePart list → prompt (today's date + declared type)
           → one Classifier call → fence-stripped JSON → analysis dict

The classifier's verdict is trusted verbatim: no expiry or field checks here.
Anything that is not a JSON object with a status raises AnalysisParseError.
"""

import json
import re
from datetime import date
from typing import Any, Optional

from app.errors import AnalysisParseError, ValidationError
from app.models.document import DRIVING_LICENSE
from app.services.classifier import Classifier, ImagePart
from app.utils.logger import get_logger

logger = get_logger(__name__)

DATA_URL_RE = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)
FENCE_OPEN_RE = re.compile(r"^\s*```[a-zA-Z]*\s*")
FENCE_CLOSE_RE = re.compile(r"\s*```\s*$")
DEFAULT_MIME_TYPE = "image/jpeg"

REGISTRATION_CERTIFICATE = "Registration Certificate"

TYPE_HINTS = {
    DRIVING_LICENSE: """
    The document is expected to be a "Driving License":
    - Look for "DL No", "Licence No", "License No", or patterns like "SS-RR-YYYY-NNNNNNN"
      or "SSRR YYYY NNNNNNN" (S = state code, R = RTO code, Y = year). Map it to "regNumber".
    - Look for "Valid Till", "Expires on" or "Validity" for the expiry date.
    - Look for "Class of Vehicle", "COV" or "Vehicle Class" (e.g. LMV, MCWG, HGMV).
    """,
    REGISTRATION_CERTIFICATE: """
    The document is expected to be a "Registration Certificate" (RC):
    - Look for "Regn No", "Registration No", or the main number plate string. Map it to "regNumber".
    - Look for "Class", "Vehicle Class" or "Type" (e.g. LMV, MCWG).
    """,
}

PROMPT_TEMPLATE = """
    Today's Date: {today}
    Analyze these vehicle document images/pages. They are supposed to be a {doc_type}.
    {hints}
    Extract the following information:
    - Document Type Detected (e.g. "Driving License", "Registration Certificate", "Insurance", "PUC")
    - Vehicle Registration Number / License Number (as "regNumber")
    - Owner Name (if visible)
    - Expiry Date (if visible, format DD-MM-YYYY if possible)
    - Class of Vehicle (if visible, e.g. LMV, MCWG) as "classOfVehicle"
    - Issues (e.g. blurry, edited, mismatch, expired)

    Determine the status: VALID, EXPIRED, MISSING or SUSPICIOUS.

    Return ONLY a JSON object with this structure:
    {{
      "detectedType": "string",
      "regNumber": "string",
      "ownerName": "string",
      "expiryDate": "string",
      "classOfVehicle": "string",
      "issues": ["string"],
      "status": "VALID" | "EXPIRED" | "MISSING" | "SUSPICIOUS"
    }}
"""


def parse_data_url(image: str) -> ImagePart:
    """Split "data:<mime>;base64,<payload>". Anything else is treated as raw JPEG base64."""
    match = DATA_URL_RE.match(image)
    if match:
        return ImagePart(mime_type=match.group(1), data=match.group(2))
    return ImagePart(mime_type=DEFAULT_MIME_TYPE, data=image)


def build_prompt(doc_type: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return PROMPT_TEMPLATE.format(
        today=today.strftime("%a %b %d %Y"),
        doc_type=doc_type,
        hints=TYPE_HINTS.get(doc_type, ""),
    )


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json and a trailing ``` marker, then whitespace."""
    text = FENCE_OPEN_RE.sub("", text, count=1)
    text = FENCE_CLOSE_RE.sub("", text, count=1)
    return text.strip()


def parse_analysis(text: str) -> dict[str, Any]:
    """Parse classifier output into the analysis dict, or raise AnalysisParseError."""
    cleaned = strip_code_fences(text or "")
    try:
        analysis = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"[ANALYSIS] Classifier returned non-JSON text: {text!r}")
        raise AnalysisParseError(f"Classifier output is not valid JSON: {e.msg}", raw_text=text) from e

    if not isinstance(analysis, dict):
        logger.error(f"[ANALYSIS] Classifier returned JSON that is not an object: {text!r}")
        raise AnalysisParseError("Classifier output is not a JSON object", raw_text=text)
    if not analysis.get("status"):
        logger.error(f"[ANALYSIS] Classifier verdict has no status: {text!r}")
        raise AnalysisParseError("Classifier output has no status", raw_text=text)
    return analysis


def analyze(classifier: Classifier, images: list[str], doc_type: str) -> dict[str, Any]:
    """Classify the submitted data-URL images as one call. No retry, no fallback verdict."""
    if not images:
        raise ValidationError("At least one image is required")
    if not doc_type:
        raise ValidationError("Document type is required")

    parts = [parse_data_url(img) for img in images]
    text = classifier.generate(build_prompt(doc_type), parts)
    analysis = parse_analysis(text)
    logger.info(
        f"[ANALYSIS] declared={doc_type} detected={analysis.get('detectedType')} "
        f"status={analysis.get('status')} issues={analysis.get('issues')!r}"
    )
    return analysis
