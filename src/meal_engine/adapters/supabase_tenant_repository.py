"""Supabase-backed tenant configuration lookups."""

from dataclasses import dataclass, field
from uuid import UUID

from supabase import Client

from meal_engine.adapters.rows import parse_decimal, parse_time
from meal_engine.domain.ledger import AccountType
from meal_engine.domain.tenants import TenantConfig, TenantDefaults

TENANT_COLUMNS = "id, budget, overdraft_limit, currency_code, timezone, cutoff_time"


@dataclass
class SupabaseTenantRepository:
    """Resolves company and project settings, filling gaps from defaults.

    A project inherits currency, timezone and cutoff from its company when it
    leaves them empty.
    """

    client: Client
    defaults: TenantDefaults = field(default_factory=TenantDefaults)

    def get_tenant_config(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> TenantConfig | None:
        company = self._fetch_one("companies", company_id)
        if company is None:
            return None
        if project_id is None:
            return self._to_config(company, company, company_id, AccountType.COMPANY)
        project = self._fetch_one("projects", project_id, company_id=company_id)
        if project is None:
            return None
        return self._to_config(project, company, company_id, AccountType.PROJECT)

    def list_project_tenants(self) -> list[TenantConfig]:
        projects = (
            self.client.table("projects")
            .select(f"{TENANT_COLUMNS}, company_id")
            .execute()
        ).data or []
        company_ids = sorted({str(row["company_id"]) for row in projects})
        companies: dict[str, dict[str, object]] = {}
        if company_ids:
            response = (
                self.client.table("companies")
                .select(TENANT_COLUMNS)
                .in_("id", company_ids)
                .execute()
            )
            companies = {str(row["id"]): row for row in response.data or []}
        return [
            self._to_config(
                row,
                companies.get(str(row["company_id"]), {}),
                UUID(str(row["company_id"])),
                AccountType.PROJECT,
            )
            for row in projects
        ]

    def _fetch_one(
        self, table: str, row_id: UUID, company_id: UUID | None = None
    ) -> dict[str, object] | None:
        query = self.client.table(table).select(TENANT_COLUMNS).eq("id", str(row_id))
        if company_id is not None:
            query = query.eq("company_id", str(company_id))
        response = query.limit(1).execute()
        if not response.data:
            return None
        return response.data[0]

    def _to_config(
        self,
        row: dict[str, object],
        company: dict[str, object],
        company_id: UUID,
        account_type: AccountType,
    ) -> TenantConfig:
        def inherited(column: str) -> object:
            return row.get(column) or company.get(column)

        return TenantConfig(
            account_id=UUID(str(row["id"])),
            account_type=account_type,
            company_id=company_id,
            budget=parse_decimal(row.get("budget")),
            overdraft_limit=parse_decimal(row.get("overdraft_limit")),
            currency_code=str(
                inherited("currency_code") or self.defaults.currency_code
            ),
            timezone=str(inherited("timezone") or self.defaults.timezone),
            cutoff_time=parse_time(inherited("cutoff_time"))
            or self.defaults.cutoff_time,
        )
