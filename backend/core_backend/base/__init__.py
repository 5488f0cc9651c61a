"""
Core backend base components.

Foundational classes shared by every API app.
"""

from .viewsets import TenantScopedViewSet, TenantScopedReadOnlyViewSet
from .serializers import (
    BaseModelSerializer,
    TenantFilteredSerializerMixin,
    TimestampedSerializer,
)
from .mixins import TenantContextMixin, SerializerOptimizedMixin

__all__ = [
    # ViewSets
    'TenantScopedViewSet',
    'TenantScopedReadOnlyViewSet',

    # Serializers
    'BaseModelSerializer',
    'TenantFilteredSerializerMixin',
    'TimestampedSerializer',

    # Mixins
    'TenantContextMixin',
    'SerializerOptimizedMixin',
]
