import pytest

from dgl_core import Hole, PlayerEntry, ValidationError, calculate_stats, get_first_birdie_hole
from dgl_core.stats import NO_BIRDIE_HOLE, HoleResult, classify_hole


def _holes(*pars: int) -> list[Hole]:
    return [Hole(number=idx + 1, par=par) for idx, par in enumerate(pars)]


def test_all_birdies_round() -> None:
    holes = _holes(3, 4, 3, 4, 5)
    stats = calculate_stats([2, 3, 2, 3, 4], holes)

    assert stats.birdies == 5
    assert stats.pars == 0
    assert stats.first_birdie_hole == 1


def test_mixed_round_counts_every_category() -> None:
    holes = _holes(3, 3, 3, 4, 3, 3, 5, 3, 4)
    scores = [1, 3, 2, 2, 3, 4, 4, 3, 6]

    stats = calculate_stats(scores, holes)

    assert stats.aces == 1
    assert stats.eagles == 1
    assert stats.birdies == 2
    assert stats.pars == 3
    assert stats.bogeys == 1
    assert stats.double_bogeys_or_worse == 1
    assert stats.holes_played == len(holes)
    assert stats.first_birdie_hole == 3


def test_hole_in_one_is_an_ace_on_any_par() -> None:
    assert classify_hole(1, 3) is HoleResult.ACE
    assert classify_hole(1, 4) is HoleResult.ACE
    assert classify_hole(1, 2) is HoleResult.ACE

    stats = calculate_stats([1, 1], _holes(3, 5))
    assert stats.aces == 2
    assert stats.eagles == 0


def test_albatross_counts_as_eagle() -> None:
    assert classify_hole(2, 5) is HoleResult.EAGLE
    assert classify_hole(3, 5) is HoleResult.EAGLE
    assert classify_hole(7, 4) is HoleResult.DOUBLE_BOGEY_OR_WORSE


def test_first_birdie_hole_uses_hole_numbers() -> None:
    holes = [Hole(number=10, par=3), Hole(number=11, par=4), Hole(number=12, par=3)]

    assert get_first_birdie_hole([3, 3, 2], holes) == 11


def test_first_birdie_hole_ignores_aces_and_eagles() -> None:
    holes = _holes(3, 4, 3)

    assert get_first_birdie_hole([1, 2, 3], holes) == NO_BIRDIE_HOLE
    assert get_first_birdie_hole([4, 4, 4], holes) == NO_BIRDIE_HOLE


def test_length_mismatch_is_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        calculate_stats([3, 3], _holes(3, 3, 3))

    assert excinfo.value.field == "hole_scores"


def test_entry_derives_missing_totals() -> None:
    holes = _holes(3, 3, 4, 3)
    entry = PlayerEntry.from_hole_scores("Sam", [2, 3, 5, 3], holes)

    assert entry.total_strokes == 13
    assert entry.total_score == 0
    assert entry.performance.birdies == 1
    assert entry.performance.bogeys == 1


def test_entry_keeps_card_totals_when_they_disagree(caplog: pytest.LogCaptureFixture) -> None:
    holes = _holes(3, 3, 3, 3)

    entry = PlayerEntry.from_hole_scores("Sam", [3, 3, 3, 3], holes, total_score=-1)

    assert entry.total_score == -1
    assert "differs from hole-by-hole" in caplog.text
