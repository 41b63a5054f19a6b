"""资源视图与管理站点."""

from .definitions import ListQuery, ResourceDefinition, ResourceHandler
from .resource_views import (
    ResourceDeleteView,
    ResourceDetailView,
    ResourceFormView,
    ResourceListView,
    ResourceView,
)
from .site import AdminSite, assets_blueprint

__all__ = [
    "AdminSite",
    "ListQuery",
    "ResourceDefinition",
    "ResourceDeleteView",
    "ResourceDetailView",
    "ResourceFormView",
    "ResourceHandler",
    "ResourceListView",
    "ResourceView",
    "assets_blueprint",
]
