"""
Region and location catalogs, and resolution of the set a check iterates
"""

import functools
from typing import Any, Tuple

import boto3

from .config import DEFAULT_GOVCLOUD_REGION, DEFAULT_REGION
from .settings import Settings


RegionSet = Tuple[str, ...]

AWS = "aws"
AZURE = "azure"

AZURE_LOCATIONS: RegionSet = (
    'eastus', 'eastus2', 'westus', 'westus2', 'westus3', 'centralus',
    'northcentralus', 'southcentralus', 'westcentralus', 'canadacentral',
    'canadaeast', 'brazilsouth', 'northeurope', 'westeurope', 'uksouth',
    'ukwest', 'francecentral', 'germanywestcentral', 'norwayeast',
    'switzerlandnorth', 'swedencentral', 'eastasia', 'southeastasia',
    'japaneast', 'japanwest', 'koreacentral', 'koreasouth', 'australiaeast',
    'australiasoutheast', 'australiacentral', 'centralindia', 'southindia',
    'westindia', 'uaenorth', 'southafricanorth', 'qatarcentral',
)

AZURE_GOV_LOCATIONS: RegionSet = (
    'usgovvirginia', 'usgovtexas', 'usgovarizona', 'usdodcentral', 'usdodeast',
)


@functools.lru_cache(maxsize=None)
def aws_region_catalog(service: str = 'ec2', govcloud: bool = False) -> RegionSet:
    """Regions a service is offered in, from botocore's bundled endpoint data"""
    partition = 'aws-us-gov' if govcloud else 'aws'
    session = boto3.Session()
    return tuple(session.get_available_regions(service, partition_name=partition))


def azure_location_catalog(govcloud: bool = False) -> RegionSet:
    return AZURE_GOV_LOCATIONS if govcloud else AZURE_LOCATIONS


def catalog(provider: str = AWS, service: str = 'ec2', govcloud: bool = False) -> RegionSet:
    if provider == AZURE:
        return azure_location_catalog(govcloud)
    if provider == AWS:
        return aws_region_catalog(service, govcloud)
    raise ValueError(f"Unknown cloud provider: {provider}")


def resolve(settings: Any = None, provider: str = AWS, service: str = 'ec2') -> RegionSet:
    """Regions a check must iterate, in catalog order.

    With an allow-list in ``settings.regions`` only catalog regions named in it
    are kept; names outside the catalog are ignored, so the result may be
    empty.
    """
    settings = Settings.coerce(settings)
    regions = catalog(provider, service, settings.govcloud)
    if not settings.regions:
        return regions

    allowed = set(settings.regions)
    return tuple(region for region in regions if region in allowed)


def default_region(settings: Any = None) -> str:
    """Region used to look up global services such as IAM"""
    settings = Settings.coerce(settings)
    if settings.region:
        return settings.region
    return DEFAULT_GOVCLOUD_REGION if settings.govcloud else DEFAULT_REGION
