"""
Tests for error formatting.
"""

import pytest
from botocore.exceptions import ClientError

from cloud_posture.core.cache import CacheEntry
from cloud_posture.core.errors import MalformedCacheError, format_error


def test_formats_message_field():
    assert format_error({'message': 'error describing load balancers'}) == \
        'error describing load balancers'


def test_formats_errored_entry():
    entry = CacheEntry.errored({'message': 'AccessDenied for listUsers'})
    assert format_error(entry) == 'AccessDenied for listUsers'


def test_formats_client_error():
    error = ClientError(
        {'Error': {'Code': 'AccessDenied', 'Message': 'User is not authorized'}},
        'DescribeLoadBalancers',
    )
    assert format_error(error) == 'User is not authorized'


def test_falls_back_to_code():
    assert format_error({'code': 'Throttling'}) == 'Throttling'


@pytest.mark.parametrize('error', [
    None,
    {},
    {'message': ''},
    '',
    42,
    CacheEntry.absent(),
    CacheEntry.errored(None),
])
def test_unknown_error_fallback(error):
    assert format_error(error) == 'unknown error'


def test_formats_plain_string_and_exception():
    assert format_error('timed out') == 'timed out'
    assert format_error(RuntimeError('connection reset')) == 'connection reset'


def test_malformed_cache_error_names_path():
    error = MalformedCacheError(('iam', 'listUsers'), 'expected a mapping')
    assert 'iam/listUsers' in str(error)
    assert error.key_path == ('iam', 'listUsers')
