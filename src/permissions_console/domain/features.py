import re
from enum import Enum


class Feature(str, Enum):
    PERMISSIONS = "Permissions"
    SHAREHOLDERS = "Shareholders"
    ERC20_DIVIDENDS = "Erc20DividendsManager"
    ETH_DIVIDENDS = "EthDividendsManager"
    USD_TIERED_STO = "UsdTieredSto"
    RESTRICTED_PARTIAL_SALE = "RestrictedPartialSale"


PERMISSIONS_FEATURE = Feature.PERMISSIONS.value

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def feature_label(name: str) -> str:
    """Split a camel-case feature id into words for display.

    >>> feature_label("Erc20DividendsManager")
    'Erc20 Dividends Manager'
    """
    return _CAMEL_BOUNDARY.sub(" ", name)
