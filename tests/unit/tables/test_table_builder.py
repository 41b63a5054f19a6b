"""表格构建器的单元测试."""

import pytest
from markupsafe import Markup

from adminkit.errors import FieldTypeNotFoundError
from adminkit.tables import TableBuilder

USERS = [
    {"id": 7, "name": "Alice", "email": "alice@example.com", "status": "active"},
    {"id": 8, "name": "Bob", "email": "bob@example.com", "status": "disabled"},
]


def _user_table(**config) -> TableBuilder:
    return (
        TableBuilder({"base_url": "/admin/users", **config})
        .add_column("name", "text", {"label": "姓名"})
        .add_column("email", "email", {"label": "邮箱"})
    )


@pytest.mark.unit
def test_empty_table_spans_every_rendered_column() -> None:
    html = str(_user_table().render())

    assert 'colspan="4"' in html
    assert "暂无数据" in html
    assert "select-all" in html


@pytest.mark.unit
def test_column_count_without_selection_and_actions() -> None:
    table = _user_table(show_actions=False).set_selectable(False)

    assert table.column_count() == 2
    assert 'colspan="2"' in str(table.render())


@pytest.mark.unit
def test_add_column_defaults_label_and_rejects_unknown_type() -> None:
    table = TableBuilder().add_column("created_at", "datetime")

    assert table.get_column("created_at").label == "Created at"
    with pytest.raises(FieldTypeNotFoundError):
        table.add_column("x", "missing")


@pytest.mark.unit
def test_apply_request_args_sets_sorting_for_sortable_columns_only() -> None:
    table = _user_table().add_column("bio", "textarea", {"sortable": False})

    table.apply_request_args({"sort": "email", "direction": "DESC"})
    assert table.sorting.field == "email"
    assert table.sorting.direction == "desc"

    for sort in ("bio", "password_hash"):
        fresh = _user_table().add_column("bio", "textarea", {"sortable": False})
        fresh.apply_request_args({"sort": sort})
        assert fresh.sorting.field is None


@pytest.mark.unit
def test_sort_links_toggle_direction_and_reset_page() -> None:
    table = _user_table().apply_request_args({"sort": "name", "direction": "asc", "page": "3", "search": "abc"})

    html = str(table.render())

    assert 'href="?sort=name&amp;direction=desc&amp;search=abc"' in html
    assert 'href="?sort=email&amp;direction=asc&amp;search=abc"' in html
    assert "▲" in html
    assert "↕" in html


@pytest.mark.unit
def test_descending_sort_shows_down_indicator_and_next_is_ascending() -> None:
    html = str(_user_table().apply_request_args({"sort": "name", "direction": "desc"}).render())

    assert "▼" in html
    assert 'href="?sort=name&amp;direction=asc"' in html


@pytest.mark.unit
def test_apply_request_args_resolves_page_and_page_size() -> None:
    table = _user_table().apply_request_args({"page": "0", "limit": "500"})
    assert (table.page, table.per_page) == (1, 200)

    table = _user_table().apply_request_args({"page": "4", "page_size": "15"})
    assert (table.page, table.per_page) == (4, 15)

    table = _user_table().apply_request_args({"page": "x"}, default_page_size=25, max_page_size=50)
    assert (table.page, table.per_page) == (1, 25)


@pytest.mark.unit
def test_paginate_clamps_page_and_renders_window() -> None:
    table = _user_table().paginate(95, page=3, per_page=10)

    assert table.pagination.total_pages == 10
    html = str(table.render())
    assert "第 3 / 10 页 (共 95 条)" in html
    assert 'href="?page=2" rel="prev"' in html
    assert 'href="?page=4" rel="next"' in html
    assert 'aria-current="page">3</a>' in html
    assert 'href="?page=5"' in html
    assert 'href="?page=6"' not in html

    assert _user_table().paginate(15, page=9, per_page=10).pagination.current_page == 2


@pytest.mark.unit
def test_single_page_renders_no_pagination() -> None:
    html = str(_user_table().paginate(5, page=1, per_page=10).set_data(USERS).render())

    assert "table-pagination" not in html


@pytest.mark.unit
def test_rows_render_default_actions() -> None:
    html = str(_user_table().set_data(USERS).render())

    assert 'data-id="7"' in html
    assert 'href="/admin/users/7"' in html
    assert 'href="/admin/users/7/edit"' in html
    assert 'data-url="/admin/users/7/delete"' in html
    assert 'data-method="POST"' in html
    assert 'data-confirm="确定要删除这条记录吗?"' in html
    assert 'href="mailto:bob@example.com"' in html


@pytest.mark.unit
def test_custom_actions_replace_and_remove_defaults() -> None:
    table = (
        _user_table()
        .remove_action("delete")
        .add_action("reset", "重置密码", "{base_url}/{id}/reset", method="post")
        .set_data(USERS[:1])
    )

    assert [action.name for action in table.row_actions] == ["view", "edit", "reset"]
    html = str(table.render())
    assert 'data-url="/admin/users/7/delete"' not in html
    assert 'data-url="/admin/users/7/reset"' in html


@pytest.mark.unit
def test_rows_without_id_fall_back_to_position() -> None:
    html = str(_user_table(show_actions=False).set_data([{"name": "匿名"}]).render())

    assert 'data-id="row-0"' in html


@pytest.mark.unit
def test_row_click_action_links_whole_row() -> None:
    html = str(_user_table().set_row_click_action("edit").set_data(USERS[:1]).render())

    assert 'data-href="/admin/users/7/edit"' in html


@pytest.mark.unit
def test_render_cell_escapes_callback_results_unless_markup() -> None:
    table = (
        TableBuilder()
        .add_column("name", "text", {"callback": lambda value, row, column: f"<b>{value}</b>"})
        .add_column("email", "text", {"callback": lambda value, row, column: Markup("<i>{0}</i>").format(value)})
    )
    row = {"name": "A&B", "email": "x@example.com"}

    assert str(table.render_cell(row, table.get_column("name"))) == "&lt;b&gt;A&amp;B&lt;/b&gt;"
    assert str(table.render_cell(row, table.get_column("email"))) == "<i>x@example.com</i>"


@pytest.mark.unit
def test_render_cell_uses_field_display() -> None:
    table = TableBuilder().add_column("name", "text")

    assert str(table.render_cell({"name": "<script>"}, table.get_column("name"))) == "<span>&lt;script&gt;</span>"
    assert 'class="text-muted"' in str(table.render_cell({}, table.get_column("name")))


@pytest.mark.unit
def test_filters_read_search_and_choice_columns() -> None:
    table = _user_table().add_column(
        "status",
        "choice",
        {"label": "状态", "choices": {"active": "启用", "disabled": "停用"}},
    )

    table.apply_request_args({"search": "  bob ", "filter_status": "active", "sort": "name"})

    assert table.filters == {
        "search": "bob",
        "filter_name": "",
        "filter_email": "",
        "filter_status": "active",
    }
    html = str(table.render())
    assert 'name="filter_status"' in html
    assert '<option value="active" selected>' in html
    assert 'value="bob"' in html
    assert '<input type="hidden" name="sort" value="name">' in html


@pytest.mark.unit
def test_from_entity_config_skips_list_hidden_fields() -> None:
    entity_config = {
        "fields": {
            "name": {"type": "text", "label": "姓名"},
            "password": {"type": "password", "list_hidden": True},
            "notes": {"type": "textarea", "form_hidden": True},
        },
    }

    table = TableBuilder.from_entity_config(entity_config, {"base_url": "/admin/users"})

    assert list(table.columns) == ["name", "notes"]
    assert table.get_column("name").label == "姓名"
    assert table.config["base_url"] == "/admin/users"
