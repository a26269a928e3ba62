import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from backend.auth import jwt_handler
from backend.auth.context import Role
from backend.auth.dependencies import actor_from_user, get_actor, get_current_user
from backend.auth.passwords import hash_password, verify_password
from backend.routes.auth_routes import LoginRequest, login, me


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_access_token_carries_subject_but_no_role() -> None:
    token = jwt_handler.create_access_token(subject='7')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == '7'
    assert 'role' not in payload
    assert payload['exp'] > payload['iat']


def test_get_current_user_resolves_token_subject(db, make_user) -> None:
    user = make_user('member@example.com')
    token = jwt_handler.create_access_token(subject=str(user.id))

    resolved = get_current_user(credentials=_credentials(token), db=db)

    assert resolved.id == user.id


@pytest.mark.parametrize(
    ('token', 'detail'),
    [
        ('not-a-jwt', 'Invalid token'),
        (jwt_handler.create_access_token(subject='member@example.com'), 'Invalid token subject'),
        (jwt_handler.create_access_token(subject='999'), 'User not found'),
    ],
)
def test_get_current_user_rejects_bad_tokens(db, make_user, token: str, detail: str) -> None:
    make_user('member@example.com')

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=_credentials(token), db=db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == detail


def test_get_actor_maps_role_to_enum(db, make_user) -> None:
    admin = make_user('boss@example.com', role='superadmin')

    actor = get_actor(current_user=admin)

    assert actor.actor_id == admin.id
    assert actor.role is Role.SUPERADMIN
    assert actor.is_privileged


def test_actor_from_user_rejects_unknown_role(db, make_user) -> None:
    user = make_user('odd@example.com', role='janitor')

    with pytest.raises(HTTPException) as exception_info:
        actor_from_user(user)

    assert exception_info.value.status_code == 401


@pytest.mark.parametrize('role', [Role.USER, Role.CONSULTANT])
def test_regular_roles_are_not_privileged(role: Role) -> None:
    assert not role.is_privileged


def test_password_hashing_round_trip() -> None:
    hashed = hash_password('s3cret-pass')

    assert hashed != 's3cret-pass'
    assert verify_password('s3cret-pass', hashed)
    assert not verify_password('wrong', hashed)
    assert not verify_password('s3cret-pass', '')


def test_login_returns_bearer_token(db, make_user) -> None:
    user = make_user('member@example.com', role='consultant', hashed_password=hash_password('s3cret-pass'))

    response = login(data=LoginRequest(email=' Member@Example.com ', password='s3cret-pass'), db=db)

    payload = jwt_handler.decode_access_token(response.access_token)
    assert response.token_type == 'bearer'
    assert payload['sub'] == str(user.id)
    assert 'role' not in payload


def test_login_rejects_wrong_password(db, make_user) -> None:
    make_user('member@example.com', hashed_password=hash_password('s3cret-pass'))

    with pytest.raises(HTTPException) as exception_info:
        login(data=LoginRequest(email='member@example.com', password='guess'), db=db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid email or password'


def test_me_returns_profile(db, make_user) -> None:
    user = make_user('member@example.com', name='Member')

    response = me(current_user=user)

    assert response.model_dump() == {'id': user.id, 'email': 'member@example.com', 'name': 'Member', 'role': 'user'}
