"""Application ports - interfaces for external adapters."""

from rowguard.application.ports.ability_provider import AbilityProvider
from rowguard.application.ports.filtered_repository import (
    FilteredRepository,
    FilteredRepositoryFactory,
)
from rowguard.application.ports.query_executor import QueryExecutor
from rowguard.application.ports.query_handle import (
    AliasAttribute,
    JoinAttribute,
    QueryHandle,
    RenderableQuery,
)
from rowguard.application.ports.rule_cache import RuleCache
from rowguard.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "AbilityProvider",
    "AliasAttribute",
    "FilteredRepository",
    "FilteredRepositoryFactory",
    "JoinAttribute",
    "QueryExecutor",
    "QueryHandle",
    "RenderableQuery",
    "RuleCache",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
