"""Contact details page and contact form submissions."""

from typing import Optional

from backoffice.gateway.base import Row
from backoffice.services.base import EntityService, SingletonService
from backoffice.services.validation import require, validate_email, validate_phone


class ContactService(SingletonService):
    table = "contacts"
    label = "contact"
    multilingual_fields = ("location",)

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        validate_email(payload.get("email"))
        validate_phone(payload.get("no_phone"))


class ContactFormService(EntityService):
    table = "contact_forms"
    label = "contact form"
    plain_search_fields = ("name", "email", "subject", "message")

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        if existing is None or "name" in payload:
            require(payload.get("name"), "Name is required", field="name")
        if existing is None or "email" in payload:
            require(payload.get("email"), "Email is required", field="email")
            validate_email(payload.get("email"))
        if existing is None or "message" in payload:
            require(payload.get("message"), "Message is required", field="message")
