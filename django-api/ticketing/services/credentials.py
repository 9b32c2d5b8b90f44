"""Ticket code generation and QR rendering."""

import base64
import io
from datetime import datetime, timedelta

import qrcode
from django.conf import settings

from ticketing.domain import TicketCode


class CredentialFactory:
    """Mints unguessable ticket codes and renders them as PNG data URLs."""

    def __init__(self, code_bytes: int | None = None, qr_ttl: timedelta | None = None) -> None:
        config = settings.GATEPASS
        self._code_bytes = code_bytes or config["TICKET_CODE_BYTES"]
        self._qr_ttl = qr_ttl or timedelta(seconds=config["QR_TTL_SECONDS"])

    def new_code(self) -> TicketCode:
        return TicketCode.generate(self._code_bytes)

    def render(self, code: TicketCode) -> str:
        qr = qrcode.QRCode(version=1, box_size=10, border=4)
        qr.add_data(code.value)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()

    def expires_at(self, now: datetime) -> datetime:
        return now + self._qr_ttl
