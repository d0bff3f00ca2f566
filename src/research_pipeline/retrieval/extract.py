import trafilatura
from typing import Dict, Any

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

def extract_content(html: str, url: str) -> Dict[str, Any]:
    """
    Extracts main text from HTML.
    Returns dict with 'text' and 'url'.
    """
    extracted = trafilatura.extract(html, include_comments=False, include_tables=True, url=url)

    return {
        "text": extracted or "",
        "url": url
    }

def body_to_text(body: str, content_type: str, url: str) -> str:
    """
    Turns an HTTP response body into plain text.
    HTML goes through trafilatura; text, markdown and anything else is kept as-is.
    """
    if not body:
        return ""
    if any(t in content_type.lower() for t in HTML_CONTENT_TYPES):
        return extract_content(body, url)["text"].strip()
    return body.strip()
