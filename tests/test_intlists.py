import pytest

from imwire.intlists import join_int32s, join_int64s, split_int32s, split_int64s


def test_int32_round_trip():
    values = [1, 2, 3]
    assert split_int32s(join_int32s(values, ","), ",") == values


def test_int64_round_trip():
    values = [1, 2, 3]
    assert split_int64s(join_int64s(values, ","), ",") == values


def test_join_formats():
    assert join_int32s([1, -2, 3], ",") == "1,-2,3"
    assert join_int64s([7], ",") == "7"
    assert join_int64s([], ",") == ""


def test_join_multi_char_separator_drops_one_char():
    assert join_int64s([1, 2], "; ") == "1; 2;"


def test_split_empty():
    assert split_int32s("", ",") == []
    assert split_int64s("", ",") == []


def test_split_signs():
    assert split_int64s("-5,+7", ",") == [-5, 7]


def test_split_int32_range():
    assert split_int32s("2147483647,-2147483648", ",") == [2147483647, -2147483648]
    with pytest.raises(ValueError):
        split_int32s("2147483648", ",")
    assert split_int64s("2147483648", ",") == [2147483648]


def test_split_int64_range():
    with pytest.raises(ValueError):
        split_int64s("9223372036854775808", ",")


@pytest.mark.parametrize("text", ["1, 2", "1,,2", "a", "1_0", "1.5"])
def test_split_invalid(text):
    with pytest.raises(ValueError):
        split_int64s(text, ",")