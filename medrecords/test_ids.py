from medrecords.ids import next_id


def test_empty_starts_at_one():
    assert next_id("MED", []) == "MED001"


def test_max_plus_one_not_gap_fill():
    assert next_id("MED", ["MED001", "MED005"]) == "MED006"


def test_foreign_and_non_numeric_ids_ignored():
    ids = ["MED002", "PRE900", "MEDX10", "MED", "MED0a1", "XMED050"]
    assert next_id("MED", ids) == "MED003"


def test_prefix_is_matched_exactly():
    # "P" must not pick up "PRE..." ids
    assert next_id("P", ["P004", "PRE010"]) == "P005"


def test_width_grows_past_padding():
    assert next_id("APT", ["APT999"]) == "APT1000"
    assert next_id("D", ["D7"], width=2) == "D08"
