"""
Cacheable — result caching for Python callables

Provides:
- cacheable decorator — wraps a function with before-call / after-success hooks
- Cache Service (CacheService) — explicit owner of store, TTL and counters
- Key Builder (KeyBuilder) — deterministic keys from identity + arguments
- Argument Reconciler (ArgumentReconciler) — replays cached argument state on hits
"""

from .config import CacheConfig, load_config
from .coordinator import InterceptionCoordinator, InvocationContext
from .decorator import cacheable
from .entry import CacheEntry
from .expiry import is_expired
from .key_builder import KeyBuilder, KeyBuilderConfig
from .observability import CacheDecisionRecord
from .policy import KeyPolicy
from .reconciler import ArgumentReconciler
from .service import CacheService
from .store import CacheStore, InMemoryCacheStore

__all__ = [
    'cacheable', 'CacheService', 'CacheConfig', 'load_config',
    'KeyBuilder', 'KeyBuilderConfig', 'KeyPolicy', 'is_expired',
    'CacheEntry', 'CacheStore', 'InMemoryCacheStore',
    'ArgumentReconciler', 'InterceptionCoordinator', 'InvocationContext',
    'CacheDecisionRecord',
]
