from computations import equal_split
from utils import equal_share_text


def test_equal_share_text_even_split():
    assert equal_share_text(equal_split(90, ["a", "b", "c"])) == "Each person pays: ₹30.00"


def test_equal_share_text_shows_remainder_share():
    assert equal_share_text(equal_split(100, ["a", "b", "c"])) == \
        "Each person pays: ₹33.33 (last person: ₹33.34)"


def test_equal_share_text_no_participants():
    assert equal_share_text([]) == "Select at least one participant."
