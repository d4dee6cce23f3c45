"""Certificates with PDF/image attachments and skill links."""

from datetime import date
from typing import Any, List, Mapping, Optional

from backoffice.errors import EntityNotFoundError, EntityValidationError
from backoffice.gateway.base import Predicate, Row, any_of, eq, gte, is_null, lt, lte
from backoffice.services.base import AssetSpec, EntityService, LinkSpec, logged, utcnow
from backoffice.services.validation import coerce_date

CERTIFICATE_SKILLS = LinkSpec(
    name="skill_ids",
    junction="certificate_skills",
    parent_column="certificate_id",
    child_column="skill_id",
    child_table="skills",
    label="Skill",
)

FILE_KINDS = {"pdf": ("pdf",), "image": ("image",), "both": ("pdf", "image")}


class CertificateService(EntityService):
    table = "certificates"
    label = "certificate"
    multilingual_fields = ("title", "description")
    search_fields = ("title", "description")
    plain_search_fields = ("issued_by", "credential_id")
    sortable = ("created_at", "updated_at", "issued_date", "valid_until")
    link_filters = {"skill_id": "skill_ids"}
    date_fields = ("issued_date", "valid_until")
    asset_fields = {
        "pdf": AssetSpec("certificates", image=False),
        "image": AssetSpec("certificates"),
    }
    links = (CERTIFICATE_SKILLS,)

    async def build_filters(self, params: Mapping[str, Any]) -> Optional[List[Predicate]]:
        predicates = await super().build_filters(params)
        if predicates is None:
            return None
        if params.get("issued_date_start"):
            predicates.append(gte("issued_date", coerce_date(params["issued_date_start"], "issued_date_start")))
        if params.get("issued_date_end"):
            predicates.append(lte("issued_date", coerce_date(params["issued_date_end"], "issued_date_end")))
        is_valid = params.get("is_valid")
        if is_valid not in (None, ""):
            if str(is_valid).lower() in ("1", "true", "yes"):
                predicates.append(any_of(is_null("valid_until"), gte("valid_until", date.today())))
            else:
                predicates.append(lt("valid_until", date.today()))
        return predicates

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        issued = payload.get("issued_date", (existing or {}).get("issued_date"))
        valid_until = payload.get("valid_until", (existing or {}).get("valid_until"))
        issued = coerce_date(issued, "issued_date")
        valid_until = coerce_date(valid_until, "valid_until")
        if issued and valid_until and issued > valid_until:
            raise EntityValidationError("Issue date must be before valid-until date", field="issued_date")

    @logged("deleting files of")
    async def delete_files(self, certificate_id: Any, kind: str = "both") -> Row:
        """Clear the ``pdf`` and/or ``image`` columns and remove the stored files."""
        if kind not in FILE_KINDS:
            raise EntityValidationError(f"Unknown file kind: {kind}", field="kind")
        certificate = await self.get_by_id(certificate_id)
        if certificate is None:
            raise EntityNotFoundError("Certificate not found")
        columns = FILE_KINDS[kind]
        values: Row = {column: None for column in columns}
        values["updated_at"] = utcnow()
        row = self._check(
            await self.gateway.update(self.table, values, [eq("id", certificate_id)])
        ).first
        await self.remove_files_quietly(certificate.get(column) for column in columns)
        return row
