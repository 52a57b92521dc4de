import pytest

from lidera.auth import ROLE_COMPANY, ROLE_MASTER, AuthManager
from lidera.errors import ErrorCode, StoreError
from lidera.store import USER_ROLES, USERS


@pytest.fixture
def auth(store):
    return AuthManager(store)


def test_hash_password_uses_salt(auth):
    first, salt = auth.hash_password("segredo")
    again, _ = auth.hash_password("segredo", salt)
    other, other_salt = auth.hash_password("segredo")

    assert first == again
    assert salt != other_salt and first != other
    assert auth.verify_password("segredo", first, salt)
    assert not auth.verify_password("errada", first, salt)


def test_create_user_writes_user_and_role(store, auth, company):
    user_id = auth.create_user(" Gestor@Alpha.com ", "segredo", role=ROLE_COMPANY, company_id=company["id"])

    user = store.get(USERS, user_id)
    assert user["email"] == "gestor@alpha.com"
    assert user["name"] == "gestor"
    assert user["isActive"] is True
    assert "segredo" not in user.values()

    roles = store.query(USER_ROLES, userId=user_id)
    assert len(roles) == 1
    assert roles[0]["companyId"] == company["id"]
    assert auth.get_user_role(user_id) == {"role": ROLE_COMPANY, "companyId": company["id"]}


def test_create_user_rejects_duplicates_and_missing_company(auth):
    auth.create_user("admin@lidera.com", "segredo")

    with pytest.raises(StoreError) as exc_info:
        auth.create_user("ADMIN@lidera.com", "outra")
    assert exc_info.value.code == ErrorCode.ALREADY_EXISTS

    with pytest.raises(StoreError) as exc_info:
        auth.create_user("empresa@lidera.com", "segredo", role=ROLE_COMPANY)
    assert exc_info.value.code == ErrorCode.FAILED_PRECONDITION


def test_master_role_has_no_company(auth, company):
    user_id = auth.create_user("admin@lidera.com", "segredo", role=ROLE_MASTER, company_id=company["id"])
    assert auth.get_user_role(user_id) == {"role": ROLE_MASTER, "companyId": None}


def test_user_without_role_record_is_master(auth):
    assert auth.get_user_role("legacy-user") == {"role": ROLE_MASTER, "companyId": None}


def test_authenticate_success(store, auth, company):
    user_id = auth.create_user("gestor@alpha.com", "segredo", name="Gestor Alpha",
                               role=ROLE_COMPANY, company_id=company["id"])

    ok, info = auth.authenticate("GESTOR@alpha.com ", "segredo")

    assert ok
    assert info["id"] == user_id
    assert info["name"] == "Gestor Alpha"
    assert info["role"] == ROLE_COMPANY
    assert info["company_id"] == company["id"]
    assert "lastLogin" in store.get(USERS, user_id)


@pytest.mark.parametrize("email, password", [
    ("gestor@alpha.com", "errada"),
    ("ninguem@alpha.com", "segredo"),
])
def test_authenticate_rejects_bad_credentials(auth, email, password):
    auth.create_user("gestor@alpha.com", "segredo")

    assert auth.authenticate(email, password) == (False, {"error": "E-mail ou senha inválidos"})


def test_authenticate_inactive_user(store, auth):
    user_id = auth.create_user("gestor@alpha.com", "segredo")
    store.update(USERS, user_id, {"isActive": False})

    ok, info = auth.authenticate("gestor@alpha.com", "segredo")

    assert not ok
    assert info["error"] == "Conta inativa. Contate o administrador."
