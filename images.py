"""
University photo lookups for program cards and shortlists.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import quote

import httpx

from config import settings

logger = logging.getLogger(__name__)

WIKIPEDIA_SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary/"
OPENVERSE_IMAGES_URL = "https://api.openverse.org/v1/images/"
REQUEST_HEADERS = {"User-Agent": "grad-program-finder/1.0"}
PHOTO_TIMEOUT_SECONDS = 5.0

DEFAULT_UNIVERSITY_PHOTO = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/9/9d/"
    "Morgan_Hall_of_Williams_College_in_the_fall_%2827_October_2010%29.jpg/"
    "330px-Morgan_Hall_of_Williams_College_in_the_fall_%2827_October_2010%29.jpg"
)
DEFAULT_HERO_IMAGE = (
    "https://images.unsplash.com/photo-1562774053-701939374585"
    "?auto=format&fit=crop&w=1700&q=80"
)


def clean_university_name(name: str) -> str:
    """Drop parenthesised parts, e.g. "Massachusetts Institute of Technology (MIT)"."""
    return re.sub(r"\s+", " ", re.sub(r"\([^)]*\)", " ", name)).strip()


def fetch_university_photo(university_name: str) -> Optional[str]:
    """Thumbnail of the university's Wikipedia page, or None."""
    cleaned = clean_university_name(university_name)
    if not cleaned:
        return None

    url = WIKIPEDIA_SUMMARY_URL + quote(cleaned, safe="")
    try:
        with httpx.Client(timeout=PHOTO_TIMEOUT_SECONDS, follow_redirects=True, headers=REQUEST_HEADERS) as client:
            response = client.get(url)
    except httpx.HTTPError as e:
        logger.warning(f"[IMAGES] Wikipedia lookup failed for {cleaned}: {str(e)}")
        return None

    if response.status_code != 200:
        return None
    try:
        data = response.json()
    except ValueError:
        logger.warning(f"[IMAGES] Wikipedia returned a non-JSON body for {cleaned}")
        return None
    return (data.get("thumbnail") or {}).get("source")


def fetch_university_image_urls(university_name: str, page_size: int = 4) -> List[str]:
    """
    Search Openverse for campus images.

    Raises:
        httpx.HTTPError: request failed or Openverse answered with an error status
    """
    with httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS, headers=REQUEST_HEADERS) as client:
        response = client.get(
            OPENVERSE_IMAGES_URL,
            params={"q": university_name, "page_size": str(page_size)},
        )
        response.raise_for_status()
        data = response.json()

    return [item["url"] for item in data.get("results", []) if item.get("url")]
