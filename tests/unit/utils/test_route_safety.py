"""safe_route_call 的单元测试."""

import pytest

from adminkit.errors import AppError, NotFoundError, SystemError, UploadError
from adminkit.utils.route_safety import safe_route_call


@pytest.mark.unit
def test_safe_route_call_returns_result() -> None:
    result = safe_route_call(
        lambda a, b=0: a + b,
        module="tests",
        action="add",
        public_error="失败",
        func_args=(1,),
        func_kwargs={"b": 2},
    )

    assert result == 3


@pytest.mark.unit
def test_safe_route_call_reraises_app_errors_unchanged() -> None:
    error = NotFoundError()

    def _raise():
        raise error

    with pytest.raises(NotFoundError) as exc_info:
        safe_route_call(_raise, module="tests", action="load", public_error="加载失败")

    assert exc_info.value is error


@pytest.mark.unit
def test_safe_route_call_wraps_unexpected_errors() -> None:
    def _boom():
        raise RuntimeError("database down")

    with pytest.raises(SystemError) as exc_info:
        safe_route_call(_boom, module="tests", action="save", public_error="保存失败", context={"resource": "users"})

    assert exc_info.value.message == "保存失败"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.unit
def test_safe_route_call_honours_expected_and_fallback_exceptions() -> None:
    def _missing():
        raise KeyError("id")

    with pytest.raises(KeyError):
        safe_route_call(_missing, module="tests", action="read", public_error="读取失败", expected_exceptions=(KeyError,))

    with pytest.raises(UploadError) as exc_info:
        safe_route_call(_missing, module="tests", action="read", public_error="读取失败", fallback_exception=UploadError)

    assert isinstance(exc_info.value, AppError)
    assert exc_info.value.message == "读取失败"
