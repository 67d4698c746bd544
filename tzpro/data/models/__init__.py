"""Data models for indexer entities.

Architecture:
    Entities are Pydantic v2 models. All models are immutable (frozen=True)
    and declare zero-value defaults, so a row decoded from a subset of
    columns holds well-defined values for every field it did not receive.

Model Categories:
    - Pages: ResultPage
    - Contracts: Contract, ContractValue, ScriptMetadata
    - DEX: DexTicker
"""

from .contract import CONTRACT_DESCRIPTOR, Contract, ContractValue
from .dex_ticker import DEX_TICKER_DESCRIPTOR, DexTicker
from .page import ResultPage
from .script import ScriptMetadata

__all__ = [
    "CONTRACT_DESCRIPTOR",
    "Contract",
    "ContractValue",
    "DEX_TICKER_DESCRIPTOR",
    "DexTicker",
    "ResultPage",
    "ScriptMetadata",
]
