import pytest

from store_ratings.utils.validators import (
    validate_address,
    validate_email,
    validate_name,
    validate_password,
    validate_rating,
)


def test_password_accepts_uppercase_and_special():
    assert validate_password("Abcdef1!") is None


@pytest.mark.parametrize("password, message", [
    ("", "Password is required"),
    ("Ab1!", "Password must be at least 8 characters"),
    ("Abcdefgh1!Abcdefg", "Password must be at most 16 characters"),
    ("abcdefgh", "Password must include at least one uppercase letter"),
    ("Abcdefgh", "Password must include at least one special character"),
])
def test_password_rejections(password, message):
    assert validate_password(password) == message


def test_name_requires_twenty_characters():
    assert validate_name("John Doe") == "Name must be at least 20 characters"
    assert validate_name("Johnathan Doe Smithson") is None
    assert validate_name("x" * 61) == "Name must be at most 60 characters"
    assert validate_name("") == "Name is required"


def test_address_limit():
    assert validate_address("1 Main St") is None
    assert validate_address("a" * 401) == "Address must be at most 400 characters"
    assert validate_address(None) == "Address is required"


def test_email_shape():
    assert validate_email("owner@shop.com") is None
    assert validate_email("owner@shop") == "Invalid email format"
    assert validate_email("own er@shop.com") == "Invalid email format"


def test_rating_range():
    assert validate_rating(1) is None
    assert validate_rating(5) is None
    assert validate_rating(0) == "Rating must be between 1 and 5"
    assert validate_rating(6) == "Rating must be between 1 and 5"
