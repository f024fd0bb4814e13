"""
LocalAuthenticator 단위 테스트

테스트 대상:
- LocalAuthenticator.authenticate(): Verified / Rejected 결과
- 저장소 오류 전파
- parse_basic_credentials(): Basic 헤더 해석
"""
import base64

import pytest
import pytest_asyncio

from blogapi.auth import (
    BAD_PASSWORD,
    UNKNOWN_USERNAME,
    LocalAuthenticator,
    Rejected,
    Verified,
    parse_basic_credentials,
)
from blogapi.errors import UnexpectedStorageError
from conftest import InMemoryUserRepository


class FailingUserRepository(InMemoryUserRepository):
    async def find_by_username(self, username):
        raise UnexpectedStorageError()


@pytest_asyncio.fixture
async def populated_store(sample_user):
    store = InMemoryUserRepository()
    digest = await store.hash_password(sample_user['password'])
    await store.create(sample_user['username'], digest, 'Ada', 'Lovelace')
    return store


class TestLocalAuthenticator:

    @pytest.mark.asyncio
    async def test_valid_credentials_verified(self, populated_store, sample_user):
        authenticator = LocalAuthenticator(populated_store)

        outcome = await authenticator.authenticate(sample_user['username'], sample_user['password'])

        assert isinstance(outcome, Verified)
        assert outcome.user.username == sample_user['username']
        assert outcome.user.author.full_name == 'Ada Lovelace'

    @pytest.mark.asyncio
    async def test_unknown_username_rejected(self, populated_store, sample_user):
        authenticator = LocalAuthenticator(populated_store)

        outcome = await authenticator.authenticate('ghost', sample_user['password'])

        assert outcome == Rejected(UNKNOWN_USERNAME)

    @pytest.mark.asyncio
    async def test_bad_password_rejected(self, populated_store, sample_user):
        authenticator = LocalAuthenticator(populated_store)

        outcome = await authenticator.authenticate(sample_user['username'], 'WrongPassword123!')

        assert outcome == Rejected(BAD_PASSWORD)

    @pytest.mark.asyncio
    async def test_empty_password_rejected(self, populated_store, sample_user):
        authenticator = LocalAuthenticator(populated_store)

        outcome = await authenticator.authenticate(sample_user['username'], '')

        assert outcome == Rejected(BAD_PASSWORD)

    @pytest.mark.asyncio
    async def test_storage_error_propagates(self):
        authenticator = LocalAuthenticator(FailingUserRepository())

        with pytest.raises(UnexpectedStorageError):
            await authenticator.authenticate('anyone', 'anything')


class TestRequireUserLogging:

    def test_rejection_reason_logged_not_returned(self, client, sample_user, registered_user, caplog):
        from conftest import basic_auth_header

        with caplog.at_level('WARNING', logger='blogapi.auth'):
            response = client.delete(
                '/posts/000000000000000000000000',
                headers=basic_auth_header(sample_user['username'], 'nope'),
            )

        assert response.status_code == 401
        assert BAD_PASSWORD not in response.text
        assert any(BAD_PASSWORD in record.getMessage() for record in caplog.records)


def encode(raw: bytes) -> str:
    return 'Basic ' + base64.b64encode(raw).decode('ascii')


class TestParseBasicCredentials:

    def test_utf8_credentials(self):
        assert parse_basic_credentials(encode('josé:päss'.encode('utf-8'))) == ('josé', 'päss')

    def test_password_may_contain_colons(self):
        assert parse_basic_credentials(encode(b'ada:a:b:c')) == ('ada', 'a:b:c')

    def test_scheme_is_case_insensitive(self):
        assert parse_basic_credentials('basic ' + base64.b64encode(b'ada:pw').decode('ascii')) == ('ada', 'pw')

    @pytest.mark.parametrize('header', [
        None,
        '',
        'Basic',
        'Basic !!!notbase64',
        'Bearer abc',
        encode(b'no-colon'),
        encode(b'\xff\xfe:pw'),
        'Basic \u00e9\u00e9\u00e9\u00e9',
    ])
    def test_rejected_headers(self, header):
        assert parse_basic_credentials(header) is None
