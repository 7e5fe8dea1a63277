"""
Tests for the SQL database diagnostic logging check.
"""

from cloud_posture.checks.sql import DatabaseDiagnosticLoggingCheck, enabled_categories
from cloud_posture.core.framework import Status


SERVER_ID = "/subscriptions/123/resourceGroups/aqua-rg/providers/Microsoft.Sql/servers/test-server"
DATABASE_ID = SERVER_ID + "/databases/test-database"

servers = [{"id": SERVER_ID, "kind": "v12.0", "location": "eastus"}]
databases = [{"id": DATABASE_ID, "name": "test-database", "location": "eastus"}]

complete_settings = [
    {
        "id": DATABASE_ID + "/providers/microsoft.insights/diagnosticSettings/default",
        "logs": [
            {"category": None, "categoryGroup": "audit", "enabled": True},
            {"category": "SQLInsights", "enabled": False},
        ],
        "metrics": [
            {"category": "Basic", "enabled": True},
            {"category": "InstanceAndAppAdvanced", "enabled": True},
            {"category": "WorkloadManagement", "enabled": True},
        ],
    },
]

partial_settings = [
    {
        "id": DATABASE_ID + "/providers/microsoft.insights/diagnosticSettings/default",
        "logs": [{"categoryGroup": "audit", "enabled": True}],
        "metrics": [{"category": "Basic", "enabled": True}],
    },
]


def create_cache(server_list, database_list=None, diagnostics=None, location="eastus"):
    cache = {
        "servers": {"listSql": {location: {"data": server_list}}},
        "databases": {"listByServer": {location: {}}},
        "diagnosticSettings": {"listByDatabase": {location: {}}},
    }
    if database_list is not None:
        cache["databases"]["listByServer"][location][SERVER_ID] = {"data": database_list}
    if diagnostics is not None:
        cache["diagnosticSettings"]["listByDatabase"][location][DATABASE_ID] = diagnostics
    return cache


def run_check(cache, settings=None):
    captured = []
    DatabaseDiagnosticLoggingCheck().run(cache, settings or {}, lambda *args: captured.append(args))
    err, results, source = captured[0]
    assert err is None
    return results, source


def test_passes_if_no_servers_found():
    results, _ = run_check(create_cache([]))
    assert len(results) == 1
    assert results[0].status is Status.OK
    assert results[0].message == "No SQL servers found"
    assert results[0].region == "eastus"


def test_unknown_if_unable_to_list_servers():
    cache = {"servers": {"listSql": {"eastus": {"err": {"message": "server list failed"}}}}}
    results, _ = run_check(cache)
    assert len(results) == 1
    assert results[0].status is Status.UNKNOWN
    assert "Unable to query for SQL servers: server list failed" in results[0].message


def test_unknown_if_databases_not_collected():
    results, _ = run_check(create_cache(servers))
    assert len(results) == 1
    assert results[0].status is Status.UNKNOWN
    assert "Unable to query for SQL server databases" in results[0].message
    assert results[0].resource == SERVER_ID


def test_passes_if_no_databases_found():
    results, _ = run_check(create_cache(servers, []))
    assert len(results) == 1
    assert results[0].status is Status.OK
    assert results[0].message == "No databases found for SQL server"


def test_unknown_if_diagnostic_settings_errored():
    cache = create_cache(servers, databases, {"err": {"message": "forbidden"}})
    results, _ = run_check(cache)
    assert results[0].status is Status.UNKNOWN
    assert results[0].message == "Unable to query SQL database diagnostic settings: forbidden"
    assert results[0].resource == DATABASE_ID


def test_fails_if_diagnostic_settings_not_configured():
    results, _ = run_check(create_cache(servers, databases, {"data": []}))
    assert results[0].status is Status.FAIL
    assert results[0].message == "Diagnostic settings are not configured for SQL database"


def test_passes_with_minimum_requirements():
    results, _ = run_check(create_cache(servers, databases, {"data": complete_settings}))
    assert len(results) == 1
    assert results[0].status is Status.OK
    assert "configured with minimum requirements" in results[0].message


def test_fails_listing_missing_categories():
    results, _ = run_check(create_cache(servers, databases, {"data": partial_settings}))
    assert results[0].status is Status.FAIL
    assert results[0].message.endswith("Missing: instanceandappadvanced, workloadmanagement")


def test_custom_requirements_are_case_insensitive():
    settings = {"database_diagnostic_settings": "AUDIT, basic"}
    results, _ = run_check(create_cache(servers, databases, {"data": partial_settings}), settings)
    assert results[0].status is Status.OK


def test_invalid_requirements_fall_back_to_default():
    settings = {"database_diagnostic_settings": "everything"}
    results, _ = run_check(create_cache(servers, databases, {"data": partial_settings}), settings)
    assert results[0].status is Status.FAIL


def test_govcloud_locations():
    cache = create_cache(servers, [], location="usgovvirginia")
    results, _ = run_check(cache, {"govcloud": True})
    assert [f.region for f in results] == ["usgovvirginia"]

    results, _ = run_check(cache)
    assert results == []


def test_enabled_categories_deduplicates():
    settings = complete_settings + complete_settings
    assert enabled_categories(settings) == [
        "audit", "basic", "instanceandappadvanced", "workloadmanagement"]
