"""
Tests for the IAM users have tags check.
"""

from cloud_posture.checks.iam import IAMUsersHasTagsCheck
from cloud_posture.core.framework import Status


list_users = [
    {
        "Path": "/",
        "UserName": "tagged",
        "UserId": "AIDAYE32SRU5VD7JDZMFL",
        "Arn": "arn:aws:iam::111122223333:user/tagged",
        "CreateDate": "2021-09-21T17:59:41+00:00",
        "Tags": [{"Key": "team", "Value": "platform"}],
    },
    {
        "Path": "/",
        "UserName": "untagged",
        "UserId": "AIDAYE32SRU5VD7JDZMFM",
        "Arn": "arn:aws:iam::111122223333:user/untagged",
        "CreateDate": "2021-09-21T17:59:41+00:00",
        "Tags": [],
    },
]


def create_cache(users, region="us-east-1"):
    return {"iam": {"listUsers": {region: {"data": users}}}}


def create_error_cache():
    return {"iam": {"listUsers": {"us-east-1": {"err": {"message": "error listing users"}}}}}


def run_check(cache, settings=None):
    captured = []
    IAMUsersHasTagsCheck().run(cache, settings or {}, lambda *args: captured.append(args))
    err, results, source = captured[0]
    assert err is None
    return results, source


def test_passes_if_no_users_found():
    results, _ = run_check(create_cache([]))
    assert len(results) == 1
    assert results[0].status is Status.OK
    assert results[0].message == "No users found"
    assert results[0].region == "global"


def test_unknown_if_unable_to_list_users():
    results, _ = run_check(create_error_cache())
    assert len(results) == 1
    assert results[0].status is Status.UNKNOWN
    assert results[0].message == "Unable to query for users: error listing users"
    assert results[0].region == "global"


def test_reports_each_user():
    results, _ = run_check(create_cache(list_users))
    assert [(f.status, f.resource) for f in results] == [
        (Status.OK, "arn:aws:iam::111122223333:user/tagged"),
        (Status.FAIL, "arn:aws:iam::111122223333:user/untagged"),
    ]
    assert results[1].message == "IAM User has no Tag"


def test_user_without_tags_key_fails():
    user = {k: v for k, v in list_users[0].items() if k != "Tags"}
    results, _ = run_check(create_cache([user]))
    assert results[0].status is Status.FAIL


def test_nothing_reported_if_users_not_collected():
    results, source = run_check({})
    assert results == []
    assert ("iam", "listUsers", "us-east-1") in source


def test_uses_govcloud_default_region():
    results, source = run_check(create_cache(list_users, "us-gov-west-1"), {"govcloud": True})
    assert len(results) == 2
    assert ("iam", "listUsers", "us-gov-west-1") in source
