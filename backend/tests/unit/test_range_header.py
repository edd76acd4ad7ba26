import pytest

from app.core.errors import RangeNotSatisfiableError
from app.services.media_service import parse_range_header


def test_no_header_means_whole_file():
    assert parse_range_header(None, 1000) is None
    assert parse_range_header("", 1000) is None


def test_explicit_range():
    assert parse_range_header("bytes=0-99", 1000) == (0, 99)


def test_open_ended_range_runs_to_last_byte():
    assert parse_range_header("bytes=500-", 1000) == (500, 999)


def test_end_is_clamped_to_file_size():
    assert parse_range_header("bytes=900-5000", 1000) == (900, 999)


def test_suffix_range_returns_last_bytes():
    assert parse_range_header("bytes=-100", 1000) == (900, 999)


def test_suffix_longer_than_file_returns_whole_file():
    assert parse_range_header("bytes=-5000", 1000) == (0, 999)


@pytest.mark.parametrize("header", ["bytes=1000-", "bytes=2000-3000", "bytes=50-10"])
def test_unsatisfiable_ranges(header):
    with pytest.raises(RangeNotSatisfiableError) as exc_info:
        parse_range_header(header, 1000)

    assert exc_info.value.status_code == 416
    assert exc_info.value.headers == {"Content-Range": "bytes */1000"}


@pytest.mark.parametrize("header", ["items=0-10", "bytes=0-10,20-30", "bytes=-", "garbage"])
def test_unparseable_headers_are_ignored(header):
    assert parse_range_header(header, 1000) is None
