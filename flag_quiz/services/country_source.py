import logging
from typing import Any, Dict, List
import requests
from ..config import settings
from ..errors import CountrySourceError
from ..models import Country

logger = logging.getLogger("flag_quiz")

def is_subdivision(code: str) -> bool:
    # flagcdn lists regions such as gb-eng or us-ca next to sovereign codes
    return "-" in code

def flag_url(code: str, template: str | None = None) -> str:
    return (template or settings.flag_url_template).format(code=code)

def build_countries(codes: Dict[str, Any], template: str | None = None) -> List[Country]:
    countries: List[Country] = []
    for code, name in codes.items():
        code = (code or "").strip().lower()
        name = (name or "").strip() if isinstance(name, str) else ""
        if not code or not name or is_subdivision(code):
            continue
        countries.append(Country(code=code, name=name, image_ref=flag_url(code, template)))
    return countries

class CountrySource:
    """Fetches the code -> display name mapping and turns it into Country records."""

    def __init__(self, url: str | None = None, timeout: float | None = None, template: str | None = None) -> None:
        self.url = url or settings.countries_url
        self.timeout = timeout if timeout is not None else settings.countries_timeout
        self.template = template or settings.flag_url_template

    def fetch(self) -> List[Country]:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.exception("country_fetch_failed")
            raise CountrySourceError(str(e)) from e
        if not isinstance(payload, dict):
            raise CountrySourceError("country payload is not a mapping")
        countries = build_countries(payload, self.template)
        logger.info({"event": "countries_fetched", "url": self.url, "received": len(payload), "kept": len(countries)})
        return countries
