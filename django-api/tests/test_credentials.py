"""Tests for ticket code generation and QR rendering.

Run with: pytest tests/test_credentials.py -v
"""

import base64
from datetime import timedelta

from tests.fakes import NOW
from ticketing.domain import TicketCode
from ticketing.services.credentials import CredentialFactory

PNG_PREFIX = "data:image/png;base64,"


class TestCredentialFactory:
    def test_codes_are_prefixed_and_unique(self):
        factory = CredentialFactory(code_bytes=8)
        codes = {factory.new_code().value for _ in range(50)}

        assert len(codes) == 50
        assert all(c.startswith("TK-") and len(c) == 3 + 16 for c in codes)

    def test_default_code_length_comes_from_settings(self, settings):
        settings.GATEPASS = {**settings.GATEPASS, "TICKET_CODE_BYTES": 4}
        assert len(CredentialFactory().new_code().value) == 3 + 8

    def test_render_produces_png_data_url(self):
        url = CredentialFactory().render(TicketCode("TK-ABC123"))

        assert url.startswith(PNG_PREFIX)
        assert base64.b64decode(url[len(PNG_PREFIX):]).startswith(b"\x89PNG")

    def test_expiry_adds_ttl(self):
        factory = CredentialFactory(qr_ttl=timedelta(hours=2))
        assert factory.expires_at(NOW) == NOW + timedelta(hours=2)
