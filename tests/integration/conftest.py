"""集成测试 fixtures: 带附件字段的文档资源与完整的测试应用."""

from __future__ import annotations

import pytest

from adminkit import create_app
from adminkit.settings import Settings
from adminkit.views import AdminSite, ResourceDefinition

DOCUMENT_ENTITY = {
    "label": "文档",
    "fields": {
        "title": {"type": "text", "required": True, "label": "标题", "maxlength": 100},
        "published_on": {"type": "date", "label": "发布日期"},
        "tags": {"type": "choice", "label": "标签", "multiple": True, "choices": {"news": "新闻", "report": "报告"}},
        "attachment": {"type": "file", "label": "附件", "allowed_types": ["pdf", "txt"]},
        "items": {
            "type": "collection",
            "label": "条目",
            "list_hidden": True,
            "entry_fields": {
                "name": {"type": "text", "required": True, "label": "名称"},
                "qty": {"type": "number", "min": 1, "label": "数量"},
            },
        },
    },
}


class MemoryDocumentHandler:
    store: dict[str, dict[str, object]] = {}

    def load(self, resource_id):
        return self.store.get(str(resource_id))

    def save(self, data, resource):
        if resource is None:
            resource = {"id": str(len(self.store) + 1)}
            self.store[resource["id"]] = resource
        resource.update(data)
        return resource

    def delete(self, resource):
        self.store.pop(resource["id"], None)

    def query(self, query):
        rows = list(self.store.values())
        return rows[query.offset : query.offset + query.per_page], len(rows)


@pytest.fixture
def document_store():
    MemoryDocumentHandler.store.clear()
    yield MemoryDocumentHandler.store
    MemoryDocumentHandler.store.clear()


@pytest.fixture
def upload_root(tmp_path):
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def client(upload_root, document_store):
    site = AdminSite(title="文档后台")
    site.register(
        ResourceDefinition(name="documents", entity_config=DOCUMENT_ENTITY, handler_class=MemoryDocumentHandler),
    )
    settings = Settings(
        FLASK_ENV="testing",
        SECRET_KEY="integration-secret",
        WTF_CSRF_ENABLED=False,
        UPLOAD_ROOT=str(upload_root),
        BCRYPT_LOG_ROUNDS=4,
    )
    app = create_app(settings=settings, sites=(site,))
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def failing_save(monkeypatch):
    """让文档保存在上传完成之后失败."""

    def _fail(self, data, resource):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(MemoryDocumentHandler, "save", _fail)
