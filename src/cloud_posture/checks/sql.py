"""
Azure SQL database security checks
"""

from typing import Any, Dict, List

from ..core.errors import format_error
from ..core.framework import CheckContext, SecurityCheck, Status
from ..core.regions import AZURE
from ..core.settings import Tunable


DIAGNOSTIC_CATEGORIES = (
    r'Basic|InstanceAndAppAdvanced|WorkloadManagement|SQLInsights|Errors|Timeouts'
    r'|Blocks|Deadlocks|allLogs|audit'
)


def enabled_categories(diagnostic_settings: List[Dict[str, Any]]) -> List[str]:
    """Lower-cased log and metric categories enabled across all settings"""
    logs: List[str] = []
    metrics: List[str] = []
    for setting in diagnostic_settings:
        for log in setting.get('logs') or []:
            category = log.get('category') or log.get('categoryGroup')
            if log.get('enabled') and category and category not in logs:
                logs.append(category)
        for metric in setting.get('metrics') or []:
            category = metric.get('category')
            if metric.get('enabled') and category and category not in metrics:
                metrics.append(category)
    return [category.lower() for category in logs + metrics]


class DatabaseDiagnosticLoggingCheck(SecurityCheck):
    """Check that SQL databases send the minimum diagnostic logs and metrics"""

    def __init__(self):
        super().__init__()
        self.check_id = "dbDiagnosticLoggingEnabled"
        self.check_title = "Database Diagnostic Logging Enabled"
        self.service = "sqldatabases"
        self.domain = "Databases"
        self.description = "Ensures diagnostic logging is enabled for SQL databases."
        self.more_info = ("Enabling diagnostic logging provides valuable insights into SQL "
                          "database that helps to monitor resources for their availability, "
                          "performance, and operation.")
        self.link = ("https://learn.microsoft.com/en-us/azure/azure-sql/database/"
                     "monitoring-sql-database-azure-monitor?view=azuresql")
        self.recommended_action = ("Enable diagnostic logging for SQL databases with the minimum "
                                   "required data recording settings.")
        self.apis = ['servers:listSql', 'databases:listByServer',
                     'diagnosticSettings:listByDatabase']
        self.tunables = {
            'database_diagnostic_settings': Tunable(
                name='database_diagnostic_settings',
                description='Comma-separated diagnostic log and metric categories every '
                            'SQL database must have enabled',
                regex=rf'^({DIAGNOSTIC_CATEGORIES})(\s*,\s*({DIAGNOSTIC_CATEGORIES}))*$',
                default='basic,InstanceAndAppAdvanced,WorkloadManagement,audit',
            ),
        }
        self.provider = AZURE
        self.region_service = "servers"

    async def evaluate(self, ctx: CheckContext):
        value = self.tunable('database_diagnostic_settings', ctx.settings)
        required = [category.strip().lower() for category in value.split(',')
                    if category.strip()]

        await ctx.each_region(
            lambda region_ctx, location: self._check_location(region_ctx, location, required))

    async def _check_location(self, ctx: CheckContext, location: str, required: List[str]):
        servers = ctx.listing(['servers', 'listSql', location], location, 'SQL servers')
        if not servers:
            return

        await ctx.each(servers,
                       lambda server_ctx, server: self._check_server(server_ctx, location, server, required))

    def _check_server(self, ctx: CheckContext, location: str, server: Dict[str, Any],
                      required: List[str]):
        databases = ctx.listing(
            ['databases', 'listByServer', location, server.get('id')],
            location, 'SQL server databases', resource=server.get('id'),
            report_absent=True, empty_message='No databases found for SQL server')
        if not databases:
            return

        for database in databases:
            self._check_database(ctx, location, database, required)

    def _check_database(self, ctx: CheckContext, location: str, database: Dict[str, Any],
                        required: List[str]):
        database_id = database.get('id')
        entry = ctx.lookup(['diagnosticSettings', 'listByDatabase', location, database_id])

        if not entry.is_present:
            ctx.add_result(Status.UNKNOWN,
                           'Unable to query SQL database diagnostic settings: '
                           f'{format_error(entry)}', location, database_id)
            return

        if not entry.data:
            ctx.add_result(Status.FAIL, 'Diagnostic settings are not configured for SQL database',
                           location, database_id)
            return

        enabled = enabled_categories(entry.data)
        missing = [category for category in required if category not in enabled]
        if missing:
            ctx.add_result(Status.FAIL,
                           'Database diagnostic settings are not configured with minimum '
                           f'requirements. Missing: {", ".join(missing)}',
                           location, database_id)
        else:
            ctx.add_result(Status.OK,
                           'Database diagnostic settings are configured with minimum requirements',
                           location, database_id)
