"""表单构建器.

将若干命名字段组合成可渲染的表单,并按 CSRF 校验 → 字段校验 → 取值转换 的顺序处理提交.
构建器面向单次请求创建,不在请求之间共享.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from markupsafe import Markup

from adminkit.constants import ErrorMessages
from adminkit.errors import FormConfigurationError
from adminkit.fields.file import FileFieldType
from adminkit.fields.password import PasswordFieldType
from adminkit.fields.registry import get_default_registry
from adminkit.fields.uploads import StoredUpload, UploadedFile, discard_pending
from adminkit.forms.definitions import FieldDeclaration, FormSection, FormSubmissionResult, FormTab
from adminkit.types.converters import as_str
from adminkit.utils.entity_access import as_accessor
from adminkit.utils.entity_config import iter_entity_fields
from adminkit.utils.rendering import render_markup
from adminkit.utils.sensitive_data import scrub_sensitive_fields
from adminkit.utils.structlog_config import get_form_logger, log_debug

if TYPE_CHECKING:
    from adminkit.fields.base import FieldType
    from adminkit.fields.registry import FieldTypeRegistry
    from adminkit.security.csrf import CsrfTokenStore
    from adminkit.types import FieldOptions, FormErrors, SubmittedData
    from adminkit.utils.entity_access import EntityAccessor

FORM_ERROR_KEY = "_form"
TAB_ID_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")

DEFAULT_FORM_CONFIG: dict[str, object] = {
    "method": "POST",
    "action": "",
    "enctype": "multipart/form-data",
    "css_class": "adminkit-form",
    "csrf_protection": True,
    "csrf_field_name": "csrf_token",
    "validate_on_submit": True,
}


class FormBuilder:
    """表单构建器.

    Attributes:
        _fields: 按插入顺序保存的字段声明.
        _sections: 字段分组.
        _data: 上次提交的原始数据,优先用于回填.
        _entity: 被编辑实体的访问器.
        _errors: 当前错误映射.

    Example:
        >>> builder = FormBuilder(csrf_store=store)
        >>> builder.add("name", "text", {"required": True}).add("email", "email")
        >>> result = builder.handle_request(request_data)

    """

    def __init__(
        self,
        config: Mapping[str, object] | None = None,
        *,
        registry: FieldTypeRegistry | None = None,
        csrf_store: CsrfTokenStore | None = None,
    ) -> None:
        """初始化表单构建器.

        Args:
            config: 表单配置,覆盖 ``DEFAULT_FORM_CONFIG``.
            registry: 字段类型注册表,缺省使用共享的默认注册表.
            csrf_store: CSRF 令牌存储,启用 CSRF 保护时必须提供.

        Raises:
            FormConfigurationError: 启用 CSRF 保护但未提供令牌存储.

        """
        self._config: dict[str, object] = {**DEFAULT_FORM_CONFIG, **(config or {})}
        if self._config["csrf_protection"] and csrf_store is None:
            raise FormConfigurationError(message_key="CSRF_STORE_REQUIRED")
        self._registry = registry or get_default_registry()
        self._csrf_store = csrf_store
        self._fields: dict[str, FieldDeclaration] = {}
        self._sections: list[FormSection] = []
        self._tabs: list[FormTab] = []
        self._data: dict[str, object] = {}
        self._entity: EntityAccessor | None = None
        self._errors: FormErrors = {}
        self._stored_uploads: list[StoredUpload] = []

    # ------------------------------------------------------------------ #
    # 字段声明
    # ------------------------------------------------------------------ #
    def register_field_type(self, name: str, field_type: FieldType) -> FormBuilder:
        """注册自定义字段类型,只影响当前构建器."""
        if self._registry is get_default_registry():
            self._registry = self._registry.copy()
        self._registry.register(name, field_type)
        return self

    def add(self, name: str, type_name: str = "text", options: Mapping[str, object] | None = None) -> FormBuilder:
        """添加字段.

        Args:
            name: 字段名.
            type_name: 字段类型名.
            options: 字段配置,未声明的配置项原样保留.

        Raises:
            FieldTypeNotFoundError: 字段类型未注册.

        """
        field_type = self._registry.get(type_name)
        unknown = field_type.unknown_options(options)
        if unknown:
            log_debug("字段包含未声明的配置项", module="forms", field=name, field_type=type_name, options=unknown)
        self._fields[name] = FieldDeclaration(
            name=name,
            type_name=type_name,
            options=field_type.resolve_options(options),
            field_type=field_type,
        )
        return self

    def remove(self, name: str) -> FormBuilder:
        self._fields.pop(name, None)
        for section in self._sections:
            if name in section.fields:
                section.fields.remove(name)
        return self

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def get_field(self, name: str) -> FieldDeclaration | None:
        return self._fields.get(name)

    @property
    def fields(self) -> dict[str, FieldDeclaration]:
        return dict(self._fields)

    @property
    def config(self) -> dict[str, object]:
        return dict(self._config)

    @property
    def sections(self) -> list[FormSection]:
        return list(self._sections)

    def modify_field(self, name: str, options: Mapping[str, object]) -> FormBuilder:
        """合并新的字段配置,字段不存在时不做任何事."""
        declaration = self._fields.get(name)
        if declaration is not None:
            declaration.options.update(options)
        return self

    def set_required(self, name: str, required: bool = True) -> FormBuilder:
        return self.modify_field(name, {"required": required})

    def set_readonly(self, name: str, readonly: bool = True) -> FormBuilder:
        return self.modify_field(name, {"readonly": readonly})

    def add_css_class(self, name: str, css_class: str) -> FormBuilder:
        declaration = self._fields.get(name)
        if declaration is None:
            return self
        current = as_str(declaration.options.get("css_class"))
        return self.modify_field(name, {"css_class": f"{current} {css_class}".strip()})

    def _collect_group_fields(
        self,
        fields: Mapping[str, object] | Iterable[str],
        *,
        group_label: str,
        extra: dict[str, object],
    ) -> list[str]:
        names: list[str] = []
        if isinstance(fields, Mapping):
            for name, declared in fields.items():
                if isinstance(declared, str):
                    self.add(name, declared)
                elif isinstance(declared, Mapping):
                    options = declared.get("options")
                    self.add(
                        name,
                        as_str(declared.get("type"), default="text"),
                        options if isinstance(options, Mapping) else None,
                    )
                elif name not in self._fields:
                    self.add(name)
                names.append(name)
            return names
        for name in fields:
            if name not in self._fields:
                raise FormConfigurationError(
                    f"{group_label}引用了未添加的字段: {name}",
                    extra={**extra, "field": name},
                )
            names.append(name)
        return names

    def add_section(
        self,
        title: str,
        fields: Mapping[str, object] | Iterable[str],
        description: str | None = None,
        *,
        css_class: str = "",
    ) -> FormBuilder:
        """添加字段分组.

        ``fields`` 可以是已添加字段的名称列表,也可以是 ``{名称: 类型名}`` 或
        ``{名称: {"type": ..., "options": {...}}}`` 形式的映射(此时同时添加字段).

        Raises:
            FormConfigurationError: 分组引用了未添加的字段.

        """
        names = self._collect_group_fields(fields, group_label="分组", extra={"section": title})
        self._sections.append(FormSection(title=title, fields=names, description=description, css_class=css_class))
        return self

    def add_tab(
        self,
        tab_id: str,
        title: str,
        fields: Mapping[str, object] | Iterable[str],
        description: str | None = None,
        *,
        css_class: str = "",
    ) -> FormBuilder:
        """添加标签页,``fields`` 的写法与 ``add_section`` 相同.

        所有标签页合并为一组,输出在第一个标签页字段所在的位置;
        同时属于分组与标签页的字段只在标签页中渲染.

        Raises:
            FormConfigurationError: 标签页标识非法或重复,或引用了未添加的字段.

        """
        if not TAB_ID_PATTERN.fullmatch(tab_id):
            raise FormConfigurationError(f"标签页标识非法: {tab_id}", extra={"tab": tab_id})
        if any(tab.tab_id == tab_id for tab in self._tabs):
            raise FormConfigurationError(f"标签页已存在: {tab_id}", extra={"tab": tab_id})
        names = self._collect_group_fields(fields, group_label="标签页", extra={"tab": tab_id})
        self._tabs.append(
            FormTab(tab_id=tab_id, title=title, fields=names, description=description, css_class=css_class),
        )
        return self

    @property
    def tabs(self) -> list[FormTab]:
        return list(self._tabs)

    # ------------------------------------------------------------------ #
    # 数据绑定
    # ------------------------------------------------------------------ #
    def set_data(self, data: Mapping[str, object]) -> FormBuilder:
        self._data = dict(data)
        return self

    def set_entity(self, entity: object) -> FormBuilder:
        self._entity = as_accessor(entity) if entity is not None else None
        return self

    def set_errors(self, errors: FormErrors) -> FormBuilder:
        self._errors = {name: list(messages) for name, messages in errors.items() if messages}
        return self

    @property
    def errors(self) -> FormErrors:
        return {name: list(messages) for name, messages in self._errors.items()}

    def get_field_value(self, name: str) -> object:
        """按 提交数据 → 实体 → 字段默认值 的顺序取值."""
        value = self._data.get(name)
        if value is not None:
            return value
        if self._entity is not None:
            value = self._entity.get(name)
            if value is not None:
                return value
        declaration = self._fields.get(name)
        if declaration is None:
            return None
        return declaration.options.get("default_value")

    # ------------------------------------------------------------------ #
    # 提交处理
    # ------------------------------------------------------------------ #
    def _raw_value(self, declaration: FieldDeclaration, submitted: SubmittedData) -> object:
        return declaration.field_type.extract_value(declaration.name, submitted, declaration.options)

    def validate(self, submitted: SubmittedData) -> FormErrors:
        """逐个字段校验,只保留非空的错误列表."""
        errors: FormErrors = {}
        for declaration in self._fields.values():
            field_errors = declaration.field_type.validate(self._raw_value(declaration, submitted), declaration.options)
            if field_errors:
                errors[declaration.name] = field_errors
        return errors

    def process_data(self, submitted: SubmittedData) -> dict[str, object]:
        """将原始提交值转换为持久化类型,与校验相互独立."""
        return {
            declaration.name: declaration.field_type.process_form_value(
                self._raw_value(declaration, submitted),
                declaration.options,
            )
            for declaration in self._fields.values()
        }

    def handle_request(self, raw: SubmittedData) -> FormSubmissionResult:
        """处理一次提交.

        依次执行 CSRF 校验、字段校验与取值转换,任一步失败都会立即返回.
        CSRF 校验失败时不会执行任何字段的校验与转换.

        Args:
            raw: 解析后的提交数据.

        Returns:
            FormSubmissionResult: 处理结果,错误同时保存在构建器上用于回填渲染.

        """
        form_logger = get_form_logger()
        if self._config["csrf_protection"] and not self._verify_csrf(raw):
            form_logger.warning("CSRF 校验失败,拒绝处理表单", module="forms", action=as_str(self._config["action"]))
            errors: FormErrors = {FORM_ERROR_KEY: [ErrorMessages.CSRF_INVALID]}
            self.reject(raw, errors)
            return FormSubmissionResult.fail(errors)

        if self._config["validate_on_submit"]:
            errors = self.validate(raw)
            if errors:
                form_logger.info(
                    "表单校验未通过",
                    module="forms",
                    fields=sorted(errors),
                    submitted=scrub_sensitive_fields(raw, extra_keys=self._password_field_names()),
                )
                self.reject(raw, errors)
                return FormSubmissionResult.fail(errors)

        data = self.process_data(raw)
        self._errors = {}
        return FormSubmissionResult.ok(data)

    def _verify_csrf(self, raw: SubmittedData) -> bool:
        if self._csrf_store is None:
            return False
        token = raw.get(as_str(self._config["csrf_field_name"]))
        return self._csrf_store.validate_token(as_str(token) or None)

    def reject(self, raw: SubmittedData, errors: FormErrors) -> None:
        """记录错误并保留用户输入,同时释放本次提交的临时文件."""
        self._errors = errors
        retained: dict[str, object] = {}
        for declaration in self._fields.values():
            value = self._raw_value(declaration, raw)
            if isinstance(declaration.field_type, FileFieldType):
                discard_pending(value)
                continue
            if isinstance(declaration.field_type, PasswordFieldType):
                continue
            retained[declaration.name] = value
        self._data = retained

    def _password_field_names(self) -> list[str]:
        names: list[str] = []
        for declaration in self._fields.values():
            if isinstance(declaration.field_type, PasswordFieldType):
                names.append(declaration.name)
                names.append(declaration.field_type.confirmation_name(declaration.name, declaration.options))
        return names

    def _file_fields(self) -> list[tuple[FieldDeclaration, FileFieldType]]:
        return [
            (declaration, declaration.field_type)
            for declaration in self._fields.values()
            if isinstance(declaration.field_type, FileFieldType)
        ]

    def process_uploads(self, data: Mapping[str, object]) -> dict[str, object]:
        """保存 ``data`` 中所有待处理的上传文件,并替换为相对路径.

        任一文件失败时,本次已保存的文件与剩余临时文件都会被删除后再抛出异常.

        Raises:
            UploadRejectedError: 文件未通过安全检查.
            UploadError: 文件保存失败.

        """
        result = dict(data)
        self._stored_uploads = []
        try:
            for declaration, field_type in self._file_fields():
                value = result.get(declaration.name)
                items = value if isinstance(value, list) else [value]
                if not any(isinstance(item, UploadedFile) for item in items):
                    continue
                stored: list[object] = []
                for item in items:
                    if not isinstance(item, UploadedFile):
                        stored.append(item)
                        continue
                    saved = field_type.process_upload(item, declaration.options)
                    self._stored_uploads.append(saved)
                    stored.append(saved)
                result[declaration.name] = field_type.process_form_value(
                    stored if isinstance(value, list) else stored[0],
                    declaration.options,
                )
        except Exception as exc:
            for remaining in result.values():
                discard_pending(remaining)
            self.discard_stored_uploads()
            get_form_logger().warning(
                "上传文件处理失败,已清理本次保存的文件与剩余临时文件",
                module="forms",
                error_type=exc.__class__.__name__,
            )
            raise
        return result

    def discard_stored_uploads(self) -> None:
        """删除最近一次 ``process_uploads`` 保存的文件,用于后续持久化失败时回滚."""
        for stored in self._stored_uploads:
            stored.remove()
        self._stored_uploads = []

    def populate_entity(self, entity: object, data: Mapping[str, object]) -> object:
        """将转换后的值写回实体.

        禁用字段不会被提交,因此跳过;密码为空表示保持原值,同样跳过.
        """
        accessor = as_accessor(entity)
        for declaration in self._fields.values():
            if declaration.name not in data or declaration.options.get("disabled"):
                continue
            value = data[declaration.name]
            if value is None and isinstance(declaration.field_type, PasswordFieldType):
                continue
            accessor.set(declaration.name, value)
        return entity

    # ------------------------------------------------------------------ #
    # 渲染
    # ------------------------------------------------------------------ #
    def render_field(self, name: str) -> Markup:
        """渲染单个字段,包裹在 ``div.form-field`` 中."""
        declaration = self._fields[name]
        options: FieldOptions = dict(declaration.options)
        if name in self._errors:
            options["errors"] = list(self._errors[name])
        control = declaration.field_type.render_form_input(name, self.get_field_value(name), options)
        return Markup('<div class="form-field" data-field="{0}">{1}</div>').format(name, control)

    def _layout(self) -> list[dict[str, object]]:
        """按插入顺序排列字段,分组在其首个字段的位置整体输出.

        标签页整体作为一个块,出现在首个标签页字段的位置; 首个含错误的标签页默认激活.
        """
        tab_fields = {name for tab in self._tabs for name in tab.fields if name in self._fields}
        section_of = {name: section for section in self._sections for name in section.fields}
        rendered: set[str] = set()
        blocks: list[dict[str, object]] = []
        for name in self._fields:
            if name in rendered:
                continue
            if name in tab_fields:
                blocks.append({"kind": "tabs", "tabs": self._tab_blocks()})
                rendered.update(tab_fields)
                continue
            section = section_of.get(name)
            if section is None:
                blocks.append({"kind": "field", "html": self.render_field(name)})
                rendered.add(name)
                continue
            members = [member for member in section.fields if member in self._fields and member not in tab_fields]
            blocks.append(
                {
                    "kind": "section",
                    "section": section,
                    "fields": [self.render_field(member) for member in members],
                },
            )
            rendered.update(members)
        return blocks

    def _tab_blocks(self) -> list[dict[str, object]]:
        panes: list[dict[str, object]] = []
        for tab in self._tabs:
            members = [member for member in tab.fields if member in self._fields]
            panes.append(
                {
                    "tab": tab,
                    "fields": [self.render_field(member) for member in members],
                    "has_errors": any(self._errors.get(member) for member in members),
                    "active": False,
                },
            )
        active = next((pane for pane in panes if pane["has_errors"]), panes[0] if panes else None)
        if active is not None:
            active["active"] = True
        return panes

    def render(self, *, actions: Markup | None = None) -> Markup:
        """渲染完整的 ``<form>``,``actions`` 为放在表单末尾的按钮区."""
        csrf_token = None
        if self._config["csrf_protection"] and self._csrf_store is not None:
            csrf_token = self._csrf_store.generate_token()
        return render_markup(
            "adminkit/form/form.html",
            config=self._config,
            csrf_token=csrf_token,
            form_errors=self._errors.get(FORM_ERROR_KEY, []),
            blocks=self._layout(),
            actions=actions,
        )

    def render_with_wrapper(
        self,
        title: str = "",
        description: str = "",
        submit_text: str = "保存",
        cancel_url: str = "",
        *,
        show_cancel: bool = True,
        wrapper_class: str = "card adminkit-form-card",
    ) -> Markup:
        """渲染带标题与操作按钮的表单卡片,按钮位于 ``<form>`` 内部."""
        actions = render_markup(
            "adminkit/form/actions.html",
            submit_text=submit_text,
            cancel_url=cancel_url if show_cancel else "",
        )
        return render_markup(
            "adminkit/form/wrapper.html",
            form_html=self.render(actions=actions),
            title=title,
            description=description,
            wrapper_class=wrapper_class,
        )

    # ------------------------------------------------------------------ #
    # 工厂
    # ------------------------------------------------------------------ #
    @classmethod
    def from_entity_config(
        cls,
        entity_config: Mapping[str, object],
        form_config: Mapping[str, object] | None = None,
        *,
        registry: FieldTypeRegistry | None = None,
        csrf_store: CsrfTokenStore | None = None,
    ) -> FormBuilder:
        """根据实体配置创建表单,跳过标记为 ``form_hidden`` 的字段.

        Args:
            entity_config: 形如 ``{"fields": {名称: {"type": ..., 其他配置}}}`` 的实体配置.
            form_config: 表单配置.
            registry: 字段类型注册表.
            csrf_store: CSRF 令牌存储.

        Returns:
            FormBuilder: 已添加字段的构建器.

        """
        builder = cls(form_config, registry=registry, csrf_store=csrf_store)
        for name, type_name, options in iter_entity_fields(entity_config, hidden_flag="form_hidden"):
            builder.add(name, type_name, options)
        return builder


__all__ = ["DEFAULT_FORM_CONFIG", "FORM_ERROR_KEY", "FormBuilder"]
