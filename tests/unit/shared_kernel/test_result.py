import pytest

from bigox.shared_kernel.result import Error, ErrorKind, Result, ResultStatus


def test_success_result():
    result = Result.success(3, message="done")

    assert result.is_success
    assert not result.is_failure
    assert result.status is ResultStatus.SUCCESS
    assert result.value == 3
    assert result.errors == ()
    assert result.first_error is None
    assert result.message == "done"


def test_failure_result_has_no_value():
    error = Error("Not found", "NotFound")
    result = Result.failure(error)

    assert result.is_failure
    assert result.value is None
    assert result.errors == (error,)
    assert result.first_error is error


def test_failure_requires_an_error():
    with pytest.raises(ValueError):
        Result.failure([])


def test_error_code_defaults_to_kind():
    assert Error("oops").code == "Default"
    unexpected = Error.unexpected(RuntimeError("crash"))
    assert unexpected.kind is ErrorKind.UNEXPECTED
    assert unexpected.code == "Unexpected"
    assert unexpected.message == "crash"
    assert isinstance(unexpected.exception, RuntimeError)


def test_map_and_bind_short_circuit_on_failure():
    failure = Result.failure(Error("bad"))

    assert Result.success(2).map(lambda v: v * 10).value == 20
    assert failure.map(lambda v: v * 10).is_failure
    assert Result.success(2).bind(lambda v: Result.success(v + 1)).value == 3
    assert failure.bind(lambda v: Result.success(v + 1)).errors == failure.errors


def test_match_dispatches_on_status():
    describe = lambda result: result.match(lambda v: f"ok:{v}", lambda errors: f"failed:{len(errors)}")

    assert describe(Result.success(1)) == "ok:1"
    assert describe(Result.failure([Error("a"), Error("b")])) == "failed:2"
