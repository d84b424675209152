from wallet.functional import (
    Some, Nothing, Left, Right,
    parse_number, safe_category, to_number,
)
from wallet.domain import Category


def test_maybe_map():
    assert Some(5).map(lambda x: x * 2).get_or_else(0) == 10
    assert Nothing().map(lambda x: x * 2).get_or_else(0) == 0
    assert Some(5).map(str) == Some("5")
    assert Nothing().is_none()
    assert not Some(0).is_none()


def test_either_accessors():
    right = Right(5)
    assert right.is_right()
    assert not right.is_left()
    assert right.get_or_else(0) == 5

    left = Left("error")
    assert left.is_left()
    assert left.get_error() == "error"
    assert left.get_or_else(0) == 0
    assert left == Left("error")
    assert left != Right("error")


def test_right_has_no_error():
    try:
        Right(1).get_error()
    except ValueError:
        pass
    else:
        raise AssertionError("expected ValueError")


def test_parse_number():
    assert parse_number(12) == Some(12)
    assert parse_number(" 12 ") == Some(12)
    assert parse_number("1.5") == Some(1.5)
    assert parse_number(True) == Some(1)
    assert parse_number("").is_none()
    assert parse_number("abc").is_none()
    assert parse_number(None).is_none()
    assert parse_number([1]).is_none()
    assert parse_number(float("nan")).is_none()
    assert parse_number("inf").is_none()


def test_to_number_defaults_to_zero():
    assert to_number("42") == 42
    assert to_number("-3.5") == -3.5
    assert to_number("x") == 0
    assert to_number(None) == 0
    assert to_number(float("inf")) == 0


def test_safe_category():
    cats = (Category("cat1", "Food", 50, 0), Category("cat2", "Rent", 50, 0))
    assert safe_category(cats, "cat2").map(lambda c: c.name).get_or_else("") == "Rent"
    assert safe_category(cats, "cat9").is_none()
    assert safe_category(cats, None).is_none()
    assert safe_category(cats, "").is_none()

