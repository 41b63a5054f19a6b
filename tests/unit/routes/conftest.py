"""视图测试 fixtures: 内存数据访问实现与挂载了管理站点的测试应用."""

from __future__ import annotations

import pytest

from adminkit import create_app
from adminkit.settings import Settings
from adminkit.views import AdminSite, ResourceDefinition

USER_ENTITY = {
    "label": "用户",
    "fields": {
        "name": {"type": "text", "required": True, "label": "姓名"},
        "email": {"type": "email", "label": "邮箱"},
        "role": {"type": "choice", "label": "角色", "choices": {"admin": "管理员", "editor": "编辑"}},
        "active": {"type": "boolean", "label": "启用"},
    },
}


class MemoryUserHandler:
    """以类属性字典保存数据,便于在测试中直接断言."""

    store: dict[str, dict[str, object]] = {}

    def load(self, resource_id):
        return self.store.get(str(resource_id))

    def save(self, data, resource):
        if resource is None:
            next_id = str(max((int(key) for key in self.store), default=0) + 1)
            resource = {"id": next_id}
            self.store[next_id] = resource
        resource.update(data)
        return resource

    def delete(self, resource):
        self.store.pop(str(resource["id"]), None)

    def query(self, query):
        rows = list(self.store.values())
        search = query.filters.get("search")
        if search:
            rows = [row for row in rows if search.lower() in str(row.get("name", "")).lower()]
        if query.sort_field:
            rows.sort(key=lambda row: str(row.get(query.sort_field) or ""), reverse=query.sort_direction == "desc")
        return rows[query.offset : query.offset + query.per_page], len(rows)


@pytest.fixture
def user_store():
    MemoryUserHandler.store.clear()
    MemoryUserHandler.store.update(
        {
            "1": {"id": "1", "name": "Alice", "email": "alice@example.com", "role": "admin", "active": True},
            "2": {"id": "2", "name": "Bob", "email": "bob@example.com", "role": "editor", "active": False},
        },
    )
    yield MemoryUserHandler.store
    MemoryUserHandler.store.clear()


def _build_app(upload_root, *, csrf_enabled: bool):
    site = AdminSite(title="测试后台")
    site.register(ResourceDefinition(name="users", entity_config=USER_ENTITY, handler_class=MemoryUserHandler))
    settings = Settings(
        FLASK_ENV="testing",
        SECRET_KEY="test-secret-key",
        WTF_CSRF_ENABLED=csrf_enabled,
        UPLOAD_ROOT=str(upload_root),
        BCRYPT_LOG_ROUNDS=4,
    )
    app = create_app(settings=settings, sites=(site,))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def admin_app(upload_root, user_store):
    return _build_app(upload_root, csrf_enabled=False)


@pytest.fixture
def client(admin_app):
    return admin_app.test_client()


@pytest.fixture
def csrf_client(upload_root, user_store):
    return _build_app(upload_root, csrf_enabled=True).test_client()
