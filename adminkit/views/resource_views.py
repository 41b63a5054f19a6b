"""通用资源视图.

列表、详情、新建/编辑与删除四类视图共享同一个 ResourceDefinition,
数据读写全部委托给宿主应用提供的 ResourceHandler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import current_app, flash, redirect, render_template, request, url_for
from flask.views import MethodView

from adminkit.constants import ErrorMessages, FlashCategory, SuccessMessages
from adminkit.errors import AppError, NotFoundError, SecurityError
from adminkit.fields.base import humanize
from adminkit.fields.uploads import UploadedFile
from adminkit.forms import FORM_ERROR_KEY, FormBuilder
from adminkit.security.csrf import FlaskWtfCsrfTokenStore
from adminkit.tables import TableBuilder
from adminkit.utils.entity_access import read_row_id, read_value
from adminkit.utils.form_payload import parse_form_payload
from adminkit.utils.route_safety import safe_route_call
from adminkit.views.definitions import ListQuery

if TYPE_CHECKING:
    from flask.typing import ResponseReturnValue

    from adminkit.types import TemplateContext
    from adminkit.views.definitions import ResourceDefinition, ResourceHandler
    from adminkit.views.site import AdminSite


class ResourceView(MethodView):
    """资源视图基类.

    Attributes:
        definition: 资源定义.
        site: 所属管理站点,提供菜单与面包屑.
        handler: 每个请求新建的数据访问实例.

    """

    def __init__(self, definition: ResourceDefinition, site: AdminSite) -> None:
        self.definition = definition
        self.site = site
        self.handler: ResourceHandler = definition.handler_class()

    def url_for_action(self, action: str, **values: object) -> str:
        return url_for(f"{self.site.name}.{self.definition.endpoint(action)}", **values)

    @property
    def base_url(self) -> str:
        return self.url_for_action("list")

    def load_or_404(self, resource_id: str) -> object:
        """读取资源,不存在时抛出 NotFoundError."""
        resource = self.handler.load(resource_id)
        if resource is None:
            raise NotFoundError(extra={"resource": self.definition.name, "resource_id": resource_id})
        return resource

    def csrf_enabled(self) -> bool:
        return bool(current_app.config.get("WTF_CSRF_ENABLED", True))

    def csrf_store(self) -> FlaskWtfCsrfTokenStore | None:
        if not self.csrf_enabled():
            return None
        return FlaskWtfCsrfTokenStore(time_limit=current_app.config.get("WTF_CSRF_TIME_LIMIT"))

    def render_page(self, template: str, **context: object) -> str:
        page_context: TemplateContext = {
            **self.site.page_context(),
            "definition": self.definition,
            "base_url": self.base_url,
            **context,
        }
        return render_template(template, **page_context)


class ResourceListView(ResourceView):
    """列表页: 解析分页、排序与筛选参数后查询并渲染表格."""

    def build_table(self) -> TableBuilder:
        config = {"base_url": self.base_url, **self.definition.table_config}
        return TableBuilder.from_entity_config(self.definition.entity_config, config)

    def get(self) -> ResponseReturnValue:
        table = self.build_table()
        table.apply_request_args(
            request.args,
            default_page_size=int(current_app.config.get("ADMINKIT_DEFAULT_PAGE_SIZE", 20)),
            max_page_size=int(current_app.config.get("ADMINKIT_MAX_PAGE_SIZE", 200)),
        )
        query = ListQuery(
            page=table.page,
            per_page=table.per_page,
            sort_field=table.sorting.field,
            sort_direction=table.sorting.direction,
            filters={key: value for key, value in table.filters.items() if value},
        )
        rows, total = safe_route_call(
            self.handler.query,
            module="resource_views",
            action=f"{self.definition.name}_list",
            public_error="加载列表失败",
            func_args=(query,),
            context={"resource": self.definition.name, "page": query.page},
        )
        table.paginate(total, query.page, query.per_page).set_data(rows)
        return self.render_page(
            self.definition.list_template,
            table_html=table.render(),
            total=total,
            create_url=self.url_for_action("new"),
        )


class ResourceDetailView(ResourceView):
    """详情页: 用字段类型的展示渲染逐项输出."""

    def get(self, resource_id: str) -> ResponseReturnValue:
        resource = self.load_or_404(resource_id)
        form = FormBuilder.from_entity_config(self.definition.entity_config, {"csrf_protection": False})
        items = [
            {
                "label": declaration.options.get("label") or humanize(name),
                "html": declaration.field_type.render_display(read_value(resource, name), declaration.options),
            }
            for name, declaration in form.fields.items()
            if declaration.type_name != "password"
        ]
        return self.render_page(
            self.definition.detail_template,
            resource=resource,
            resource_id=resource_id,
            items=items,
            edit_url=self.url_for_action("edit", resource_id=resource_id),
        )


class ResourceFormView(ResourceView):
    """新建与编辑页.

    GET 渲染表单;POST 依次完成 CSRF 校验、字段校验、上传处理与保存,
    成功后提示并重定向到列表页,失败时回填用户输入重新渲染.
    """

    def build_form(self, resource: object | None) -> FormBuilder:
        config = {"csrf_protection": self.csrf_enabled(), **self.definition.form_config}
        form = FormBuilder.from_entity_config(
            self.definition.entity_config,
            config,
            csrf_store=self.csrf_store() if config["csrf_protection"] else None,
        )
        if resource is not None:
            form.set_entity(resource)
        return form

    def get(self, resource_id: str | None = None) -> ResponseReturnValue:
        resource = self.load_or_404(resource_id) if resource_id is not None else None
        return self._render_form(self.build_form(resource), resource)

    def post(self, resource_id: str | None = None) -> ResponseReturnValue:
        resource = self.load_or_404(resource_id) if resource_id is not None else None
        form = self.build_form(resource)
        payload = parse_form_payload(request.form, request.files, convert_file=UploadedFile.from_file_storage)
        result = form.handle_request(payload)
        if not result.valid:
            flash(ErrorMessages.VALIDATION_ERROR, FlashCategory.ERROR)
            return self._render_form(form, resource)

        def _execute() -> object:
            data = form.process_uploads(result.data)
            try:
                return self.handler.save(data, resource)
            except Exception:
                form.discard_stored_uploads()
                raise

        try:
            instance = safe_route_call(
                _execute,
                module="resource_views",
                action=f"{self.definition.name}_save",
                public_error="保存失败",
                context={
                    "resource": self.definition.name,
                    "resource_id": resource_id,
                    "form_mode": "create" if resource is None else "edit",
                },
            )
        except AppError as exc:
            form.reject(payload, {FORM_ERROR_KEY: [exc.message]})
            flash(exc.message, FlashCategory.ERROR)
            return self._render_form(form, resource)

        flash(self.definition.success_message, FlashCategory.SUCCESS)
        instance_id = read_row_id(instance)
        if instance_id is not None and self.definition.form_config.get("redirect_to_detail"):
            return redirect(self.url_for_action("detail", resource_id=instance_id))
        return redirect(self.base_url)

    def _render_form(self, form: FormBuilder, resource: object | None) -> str:
        editing = resource is not None
        title = f"编辑{self.definition.label}" if editing else f"新建{self.definition.label}"
        return self.render_page(
            self.definition.form_template,
            resource=resource,
            form_mode="edit" if editing else "create",
            form_html=form.render_with_wrapper(title=title, cancel_url=self.base_url),
        )


class ResourceDeleteView(ResourceView):
    """删除操作,只接受 POST,令牌随表格前端脚本生成的表单一起提交."""

    def post(self, resource_id: str) -> ResponseReturnValue:
        store = self.csrf_store()
        if store is not None and not store.validate_token(request.form.get("csrf_token")):
            raise SecurityError(extra={"resource": self.definition.name, "resource_id": resource_id})
        resource = self.load_or_404(resource_id)
        safe_route_call(
            self.handler.delete,
            module="resource_views",
            action=f"{self.definition.name}_delete",
            public_error="删除失败",
            func_args=(resource,),
            context={"resource": self.definition.name, "resource_id": resource_id},
        )
        flash(SuccessMessages.DATA_DELETED, FlashCategory.SUCCESS)
        return redirect(self.base_url)


__all__ = [
    "ResourceDeleteView",
    "ResourceDetailView",
    "ResourceFormView",
    "ResourceListView",
    "ResourceView",
]
