"""
Tests for username validation.
"""
import pytest

from app import ValidationError, validate_username


@pytest.mark.parametrize('username', [
    'a',
    'octocat',
    'user_name-01',
    'ABCDEFGHIJKLMNO',  # 15 chars
    '___',
    '-',
])
def test_accepts_valid_usernames(username):
    assert validate_username(username) == username


@pytest.mark.parametrize('username', [
    'ABCDEFGHIJKLMNOP',  # 16 chars
    'has space',
    'dot.name',
    'emoji🙂',
    ' padded',
    'padded ',
    'trailing\n',
    'ümlaut',
])
def test_rejects_malformed_usernames(username):
    with pytest.raises(ValidationError) as exc:
        validate_username(username)
    assert exc.value.kind == 'invalid'


@pytest.mark.parametrize('username', ['', '   ', '\t', None])
def test_rejects_empty_usernames(username):
    with pytest.raises(ValidationError) as exc:
        validate_username(username)
    assert exc.value.kind == 'empty'
    assert 'empty' in str(exc.value)


def test_returns_original_string_not_a_copy():
    name = 'leet_coder'
    assert validate_username(name) is name


def test_non_string_input_is_invalid():
    with pytest.raises(ValidationError) as exc:
        validate_username(12345)
    assert exc.value.kind == 'invalid'
