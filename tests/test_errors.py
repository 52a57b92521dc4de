import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError

from lidera.errors import (
    USER_MESSAGES,
    ErrorCode,
    StoreError,
    from_sqlalchemy,
    get_user_message,
    translate_error,
)


def test_store_error_defaults_to_code_message():
    error = StoreError(ErrorCode.NOT_FOUND, details={"id": "x"})

    assert error.message == "Registro não encontrado."
    assert str(error) == "Registro não encontrado."
    assert error.details == {"id": "x"}


def test_store_error_unknown_code_falls_back():
    assert StoreError("strange").message == USER_MESSAGES[ErrorCode.UNKNOWN]


@pytest.mark.parametrize("code", [
    ErrorCode.PERMISSION_DENIED,
    ErrorCode.UNAUTHENTICATED,
    ErrorCode.NOT_FOUND,
    ErrorCode.ALREADY_EXISTS,
    ErrorCode.FAILED_PRECONDITION,
    ErrorCode.RESOURCE_EXHAUSTED,
])
def test_translate_store_error_keeps_code(code):
    app_error = translate_error(StoreError(code))

    assert app_error.code == code
    assert app_error.message == USER_MESSAGES[code]


def test_translate_custom_store_message():
    app_error = translate_error(StoreError(ErrorCode.FAILED_PRECONDITION, "Selecione uma empresa."))
    assert app_error.message == "Selecione uma empresa."


def test_translate_plain_exception_uses_its_text():
    app_error = translate_error(ValueError("Nota inválida"))

    assert app_error.code == "error"
    assert app_error.message == "Nota inválida"


def test_translate_empty_exception_and_non_exceptions():
    assert translate_error(RuntimeError()).message == USER_MESSAGES[ErrorCode.UNKNOWN]
    assert translate_error("boom").code == ErrorCode.UNKNOWN


def test_from_sqlalchemy_mapping():
    integrity = IntegrityError("INSERT", {}, Exception("duplicate key"))
    operational = OperationalError("SELECT", {}, Exception("server gone"))

    assert from_sqlalchemy(integrity, "insert").code == ErrorCode.ALREADY_EXISTS
    assert from_sqlalchemy(PoolTimeoutError("pool")).code == ErrorCode.RESOURCE_EXHAUSTED
    unavailable = from_sqlalchemy(operational, "select")
    assert unavailable.code == ErrorCode.FAILED_PRECONDITION
    assert unavailable.details["operation"] == "select"


def test_get_user_message_for_database_errors():
    operational = OperationalError("SELECT", {}, Exception("server gone"))
    assert get_user_message(operational) == "Banco de dados indisponível no momento. Tente novamente."
