# destitutes/contact.py
# Contact form; delivery is a single POST to a form-relay service.
import logging
import re
from dataclasses import asdict, dataclass
from typing import Optional

import requests

from .errors import ConfigError, RelayError, ValidationError

log = logging.getLogger(__name__)

MESSAGE_MAX_CHARS = 1000
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class ContactForm:
    name: str = ""
    email: str = ""
    subject: str = ""
    message: str = ""

    def validate(self) -> None:
        for field in ("name", "email", "subject", "message"):
            if not getattr(self, field).strip():
                raise ValidationError(f"{field.capitalize()} is required")
        if not _EMAIL_RE.match(self.email.strip()):
            raise ValidationError("Please enter a valid email address")
        if len(self.message) > MESSAGE_MAX_CHARS:
            raise ValidationError(f"Message must be at most {MESSAGE_MAX_CHARS} characters")


class FormRelay:
    def __init__(self, endpoint: Optional[str], http: Optional[requests.Session] = None, timeout: float = 15.0):
        if not endpoint:
            raise ConfigError("Missing required settings: DOI_CONTACT_RELAY_URL")
        self.endpoint = endpoint
        self.http = http or requests.Session()
        self.timeout = timeout

    def send(self, form: ContactForm) -> None:
        form.validate()
        payload = {k: v.strip() for k, v in asdict(form).items()}
        try:
            r = self.http.post(self.endpoint, json=payload, headers={"Accept": "application/json"}, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("contact relay unreachable: %s", e)
            raise RelayError("Failed to send message. Please try again.") from e
        if not r.ok:
            log.warning("contact relay answered %s", r.status_code)
            raise RelayError("Failed to send message. Please try again.", code=str(r.status_code))
        log.info("contact message relayed")
