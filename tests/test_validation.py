import pytest

from unity_client.exceptions import ValidationError
from unity_client.validation import parse_retention_duration, require_id, validate_name


@pytest.mark.parametrize(
    ("duration", "seconds"),
    [
        ("0:00:00:00", 0),
        ("1:23:52:50", 172370),
        ("0:60:60:60", 3600 * 60 + 60 * 60 + 60),
        (" 2:0:0:1 ", 2 * 86400 + 1),
    ],
)
def test_parse_retention_duration(duration, seconds):
    assert parse_retention_duration(duration) == seconds


@pytest.mark.parametrize("duration", ["1:23:99:99", "0:61:00:00", "0:00:-1:00"])
def test_parse_retention_duration_out_of_range(duration):
    with pytest.raises(ValidationError, match="hours, minutes and seconds should be in between 0-60"):
        parse_retention_duration(duration)


@pytest.mark.parametrize("duration", ["", "1:23", "1:2:3:4:5", "a:b:c:d", "-1:00:00:00"])
def test_parse_retention_duration_bad_format(duration):
    with pytest.raises(ValidationError, match="invalid retention duration format"):
        parse_retention_duration(duration)


def test_validate_name_trims_whitespace():
    assert validate_name("  snap-1 ") == "snap-1"


def test_validate_name_boundaries():
    assert validate_name("n" * 63) == "n" * 63
    with pytest.raises(ValidationError, match="name too long error"):
        validate_name("n" * 64)
    with pytest.raises(ValidationError, match="name empty error"):
        validate_name("   ")


def test_require_id():
    assert require_id(" sv_1 ", "unused") == "sv_1"
    with pytest.raises(ValidationError, match="volume ID cannot be empty"):
        require_id(None, "volume ID cannot be empty")


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        validate_name("")
