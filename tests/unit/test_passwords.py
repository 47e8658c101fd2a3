"""Unit tests for temporary password generation and strength checks."""

import pytest
from libs.common.passwords import (
    DIGITS,
    LOWERCASE,
    SPECIAL,
    TEMPORARY_PASSWORD_LENGTH,
    UPPERCASE,
    generate_temporary_password,
    password_strength_error,
)


@pytest.mark.unit
def test_temporary_password_is_sixteen_characters():
    password = generate_temporary_password()
    assert len(password) == TEMPORARY_PASSWORD_LENGTH == 16


@pytest.mark.unit
def test_temporary_password_covers_every_character_class():
    for _ in range(50):
        password = generate_temporary_password()
        assert any(c in UPPERCASE for c in password)
        assert any(c in LOWERCASE for c in password)
        assert any(c in DIGITS for c in password)
        assert any(c in SPECIAL for c in password)


@pytest.mark.unit
def test_temporary_password_avoids_ambiguous_glyphs():
    for _ in range(50):
        assert not set(generate_temporary_password()) & set("IOl01")


@pytest.mark.unit
def test_temporary_passwords_differ():
    assert len({generate_temporary_password() for _ in range(20)}) == 20


@pytest.mark.unit
def test_too_short_length_rejected():
    with pytest.raises(ValueError):
        generate_temporary_password(3)


@pytest.mark.unit
@pytest.mark.parametrize(
    "password,message",
    [
        ("Ab1!", "Password must be at least 8 characters long"),
        ("abcdefg1!", "Password must contain at least one uppercase letter"),
        ("ABCDEFG1!", "Password must contain at least one lowercase letter"),
        ("Abcdefgh!", "Password must contain at least one number"),
        ("Abcdefgh1", "Password must contain at least one special character"),
    ],
)
def test_password_strength_errors(password, message):
    assert password_strength_error(password) == message


@pytest.mark.unit
def test_generated_password_passes_strength_check():
    assert password_strength_error(generate_temporary_password()) is None
