"""Pull structured JSON out of free-form model replies."""

import json
import logging
import re
from typing import Any, Optional, Tuple

from storefront.sales.invoice import InvoiceData

logger = logging.getLogger(__name__)

# A ```json fence whose object mentions invoice_data
INVOICE_BLOCK_RE = re.compile(r'```json\s*(\{[\s\S]*?"invoice_data"[\s\S]*?\})\s*```')

_decoder = json.JSONDecoder()


def extract_invoice_data(text: str) -> Tuple[str, Optional[InvoiceData]]:
    """
    Find an invoice block in a reply.

    Returns:
        (clean_text, invoice). When a parseable block is found, every
        invoice block is removed from the text. Otherwise the text is
        returned untouched and invoice is None.
    """
    match = INVOICE_BLOCK_RE.search(text or "")
    if not match:
        return text, None

    try:
        parsed = json.loads(match.group(1))
        invoice = InvoiceData.from_payload(parsed["invoice_data"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.error(f"Failed to parse invoice JSON: {e}")
        return text, None

    clean_text = INVOICE_BLOCK_RE.sub("", text).strip()
    return clean_text, invoice


def extract_json_payload(text: str) -> Optional[Any]:
    """
    Decode the first JSON array or object embedded in text.

    Tolerates prose or code fences around the payload. Returns None when
    nothing decodes.
    """
    if not text:
        return None

    for match in re.finditer(r"[\[{]", text):
        try:
            value, _ = _decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        return value

    logger.debug(f"No JSON payload found in response: {text[:200]}")
    return None
