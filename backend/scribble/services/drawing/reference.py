from urllib.parse import quote

import requests


DEFAULT_REFERENCE_URL = 'https://api.dicebear.com/7.x/shapes/png?seed={seed}&backgroundColor=ffffff'


class HttpReferenceProvider:
    """Fetches generated reference images keyed by a word's seed."""

    def __init__(self, url_template: str = DEFAULT_REFERENCE_URL, timeout: float = 5.0,
                 session: requests.Session = None):
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, seed: str) -> str:
        return self.url_template.format(seed=quote(seed.lower(), safe=''))

    def fetch(self, seed: str) -> bytes:
        response = self.session.get(self.url_for(seed), timeout=self.timeout)
        response.raise_for_status()
        return response.content
