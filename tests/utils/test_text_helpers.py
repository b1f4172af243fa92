# -*- coding: utf-8 -*-
import pytest

from utils.reading_time import calculate_reading_time
from utils.validators import slugify, validate_slug, validate_email


@pytest.mark.parametrize(
    "html, minutes",
    [
        ("", 1),
        ("<p>" + "word " * 440 + "</p>", 2),
        ("<p>" + "word " * 1100 + "</p>", 5),
        ("<p>" + "가" * 1200 + "</p>", 2),
        ("<p>short</p>" + "<img src='a.png'>" * 18, 2),
        ("<pre>" + "\n".join(["x = 1"] * 45) + "</pre>", 2),
    ],
)
def test_calculate_reading_time(html, minutes):
    assert calculate_reading_time(html) == minutes


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello World", "hello-world"),
        ("  Flask & SQLAlchemy 2.0  ", "flask-sqlalchemy-2-0"),
        ("Café déjà vu", "cafe-deja-vu"),
        ("한국어 제목", ""),
        ("", ""),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_validate_slug_and_email():
    assert validate_slug("my-post-1")
    assert not validate_slug("My Post")
    assert validate_email("a.b@example.com")
    assert not validate_email("a@b")
