"""ContactImportService — bring external people and companies into the graph.

Two sources:

- **Contacts**: address-book style entries. Each organization is
  reconciled against existing company names (exact, then fuzzy); unknown
  organizations become new production companies. Every contact becomes an
  ``executive`` employed by its company.
- **Known landscape**: a curated list of companies with their principals.
  Companies already present by exact name are skipped; principals become
  ``producer`` people employed by their company.

Both runs finish with an auto-layout of whatever is still unplaced.
Per-entry failures become warnings; one bad entry never stops the run.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from coterie.config.models import LayoutConfig
from coterie.domain.fuzzy import best_match
from coterie.domain.models import GraphObject
from coterie.domain.taxonomy import ObjectClassId, RelationshipTypeId
from coterie.infrastructure.errors import Conflict, StoreError, ValidationError
from coterie.infrastructure.store.store import GraphStore
from coterie.services._helpers import error_result
from coterie.services.base import BaseService
from coterie.services.layout import LayoutService
from coterie.services.result import ServiceResult

logger = logging.getLogger(__name__)

CONTACT_SOURCE = "contacts"
DEFAULT_COMPANY_TYPE = "production_company"
CONTACT_PERSON_TYPE = "executive"
PRINCIPAL_PERSON_TYPE = "producer"
PRINCIPAL_ROLE = "Principal"
IMPORT_THRESHOLD = 0.75

# Landscape company types that map onto a company object type of the same id.
LANDSCAPE_COMPANY_TYPES = frozenset(
    {
        "studio",
        "production_company",
        "financier",
        "agency",
        "management",
        "network",
        "streamer",
        "distributor",
    }
)


class ContactEntry(BaseModel):
    """One address-book contact."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    given_name: str = ""
    family_name: str = ""
    organization: str = ""
    title: str = ""
    emails: list[str] = Field(default_factory=list)
    phones: list[str] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.given_name} {self.family_name}".strip()


class KnownCompany(BaseModel):
    """One company of a curated industry landscape."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    type: str = DEFAULT_COMPANY_TYPE
    tier: str | None = None
    parent: str | None = None
    specialty: list[str] | None = None
    location: str | None = None
    principals: list[str] | None = None
    deal: str | None = None
    notes: str | None = None

    @property
    def object_type(self) -> str:
        return self.type if self.type in LANDSCAPE_COMPANY_TYPES else DEFAULT_COMPANY_TYPE

    def attributes(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for key in ("location", "specialty", "deal", "notes", "parent", "tier"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


# ---------------------------------------------------------------------------
# File readers
# ---------------------------------------------------------------------------


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValidationError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON in {path}: {exc}") from exc


def load_contacts(path: Path) -> list[ContactEntry]:
    """Read a JSON array of contacts (or ``{"contacts": [...]}``)."""
    raw = _read_json(path)
    if isinstance(raw, dict):
        raw = raw.get("contacts", [])
    if not isinstance(raw, list):
        raise ValidationError(f"{path}: expected a list of contacts")
    try:
        return [ContactEntry.model_validate(item) for item in raw]
    except PydanticValidationError as exc:
        raise ValidationError(f"{path}: {exc}") from exc


def load_landscape(path: Path) -> list[KnownCompany]:
    """Read a landscape file.

    Accepts a plain list of companies, or an object with ``companies``,
    ``agencies`` and ``management_companies`` lists (concatenated in that
    order).
    """
    raw = _read_json(path)
    if isinstance(raw, dict):
        raw = [
            *raw.get("companies", []),
            *raw.get("agencies", []),
            *raw.get("management_companies", []),
        ]
    if not isinstance(raw, list):
        raise ValidationError(f"{path}: expected a list of companies")
    try:
        return [KnownCompany.model_validate(item) for item in raw]
    except PydanticValidationError as exc:
        raise ValidationError(f"{path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ContactImportService(BaseService):
    """Imports contacts and landscape companies through the store."""

    def __init__(
        self,
        store: GraphStore,
        *,
        layout_config: LayoutConfig | None = None,
        threshold: float = IMPORT_THRESHOLD,
    ) -> None:
        super().__init__(store)
        self._layout_config = layout_config
        self._threshold = threshold

    def _companies(self) -> list[GraphObject]:
        return self._store.snapshot.objects_of_class(ObjectClassId.COMPANY)

    def _resolve_company(self, organization: str) -> tuple[GraphObject | None, float | None]:
        """Existing company for *organization*: exact name first, then fuzzy."""
        companies = self._companies()
        wanted = organization.casefold()
        for company in companies:
            if company.name.casefold() == wanted:
                return company, 1.0
        match = best_match(organization, [c.name for c in companies], self._threshold)
        if match is None:
            return None, None
        company = next(c for c in companies if c.name == match.name)
        return company, match.score

    def _layout(self, warnings: list[str]) -> int:
        result = LayoutService(self._store, self._layout_config).auto_layout()
        if not result.ok:
            message = result.error.message if result.error else "unknown error"
            warnings.append(f"Auto-layout failed: {message}")
            return 0
        warnings.extend(result.warnings)
        return int(result.data["placed"])

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def import_contacts(self, contacts: Iterable[ContactEntry]) -> ServiceResult:
        op = "import_contacts"
        warnings: list[str] = []
        imported = 0
        skipped = 0
        companies_created: list[str] = []
        matches: list[dict[str, Any]] = []

        try:
            self._store.fetch_all()
        except StoreError as exc:
            return error_result(op, exc)

        for contact in contacts:
            name = contact.full_name
            if not name:
                skipped += 1
                continue
            try:
                company_id = self._contact_company(contact, companies_created, matches)
                data: dict[str, Any] = {"source": CONTACT_SOURCE}
                if contact.title:
                    data["title"] = contact.title
                if contact.emails:
                    data["email"] = contact.emails[0]
                if contact.phones:
                    data["phone"] = contact.phones[0]
                person = self._store.create_object(
                    ObjectClassId.PERSON, name, [CONTACT_PERSON_TYPE], data
                )
                if company_id is not None:
                    self._store.create_relationship(
                        person.id, company_id, RelationshipTypeId.EMPLOYED_BY
                    )
            except StoreError as exc:
                logger.warning("Failed to import contact %s: %s", name, exc.message)
                warnings.append(f"{name}: {exc.message}")
                continue
            imported += 1

        placed = self._layout(warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "imported": imported,
                "skipped": skipped,
                "companies_created": companies_created,
                "matched": matches,
                "placed": placed,
            },
            warnings=warnings,
        )

    def _contact_company(
        self,
        contact: ContactEntry,
        companies_created: list[str],
        matches: list[dict[str, Any]],
    ) -> str | None:
        organization = contact.organization.strip()
        if not organization:
            return None
        company, score = self._resolve_company(organization)
        if company is not None:
            if company.name != organization:
                matches.append(
                    {"organization": organization, "company": company.name, "score": score}
                )
            return company.id
        created = self._store.create_object(
            ObjectClassId.COMPANY,
            organization,
            [DEFAULT_COMPANY_TYPE],
            {"source": CONTACT_SOURCE},
        )
        companies_created.append(created.name)
        return created.id

    # ------------------------------------------------------------------
    # Known landscape
    # ------------------------------------------------------------------

    def import_landscape(self, companies: Iterable[KnownCompany]) -> ServiceResult:
        op = "import_landscape"
        warnings: list[str] = []
        created: list[str] = []
        skipped: list[str] = []
        people = 0

        try:
            self._store.fetch_all()
        except StoreError as exc:
            return error_result(op, exc)

        for known in companies:
            if any(c.name == known.name for c in self._companies()):
                skipped.append(known.name)
                continue
            try:
                company = self._store.create_object(
                    ObjectClassId.COMPANY, known.name, [known.object_type], known.attributes()
                )
            except StoreError as exc:
                warnings.append(f"{known.name}: {exc.message}")
                continue
            created.append(company.name)
            for principal in known.principals or []:
                try:
                    people += self._attach_principal(principal, company)
                except StoreError as exc:
                    warnings.append(f"{known.name} / {principal}: {exc.message}")

        placed = self._layout(warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "companies_created": created,
                "skipped": skipped,
                "people_created": people,
                "placed": placed,
            },
            warnings=warnings,
        )

    def _attach_principal(self, principal: str, company: GraphObject) -> int:
        """Employ *principal* at *company*; returns 1 when a person was created."""
        snap = self._store.snapshot
        person = next(
            (p for p in snap.objects_of_class(ObjectClassId.PERSON) if p.name == principal),
            None,
        )
        created = 0
        if person is None:
            person = self._store.create_object(
                ObjectClassId.PERSON, principal, [PRINCIPAL_PERSON_TYPE]
            )
            created = 1
        try:
            self._store.create_relationship(
                person.id,
                company.id,
                RelationshipTypeId.EMPLOYED_BY,
                {"role": PRINCIPAL_ROLE},
            )
        except Conflict:
            logger.debug("%s already employed by %s", principal, company.name)
        return created
