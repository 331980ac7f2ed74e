"""
Tests for interval normalization and overlap detection.
"""

import datetime
import pytest

from timeledger.domain.conflicts import find_conflict, overlaps
from timeledger.domain.errors import UnsupportedSpan, ValidationError
from timeledger.domain.normalizer import correct_wraparound, normalize
from timeledger.domain.timeutil import LAST_INSTANT, round_minutes
from tests.conftest import at, draft


class TestWraparound:
    def test_end_before_start_moves_to_next_day(self):
        assert correct_wraparound(at(10, 23), at(10, 7)) == at(11, 7)

    def test_end_after_start_is_untouched(self):
        assert correct_wraparound(at(10, 9), at(10, 10)) == at(10, 10)


class TestNormalize:
    def test_same_day_interval_stays_whole(self):
        pieces = normalize(draft("Deep work", at(10, 9), at(10, 11, 30), tags=["Focus"]))
        assert len(pieces) == 1
        assert pieces[0].duration == 150
        assert pieces[0].tags == ["Focus"]

    def test_midnight_crossing_is_split_at_day_boundary(self):
        first, second = normalize(draft("Sleep", at(10, 23, 30), at(10, 1)))

        assert first.start_time == at(10, 23, 30)
        assert first.end_time.time() == LAST_INSTANT
        assert first.duration == 30
        assert second.start_time == at(11, 0)
        assert second.end_time == at(11, 1)
        assert second.duration == 60
        assert first.id != second.id
        assert first.title == second.title == "Sleep"

    def test_end_exactly_at_midnight_gives_one_piece(self):
        pieces = normalize(draft("Late", at(10, 22), at(11, 0)))
        assert len(pieces) == 1
        assert pieces[0].start_time == at(10, 22)

    def test_zero_length_is_rejected(self):
        with pytest.raises(ValidationError):
            normalize(draft("Nothing", at(10, 9), at(10, 9)))

    def test_more_than_one_midnight_is_rejected(self):
        with pytest.raises(UnsupportedSpan):
            normalize(draft("Retreat", at(10, 9), at(12, 10)))

    def test_end_days_before_start_is_rejected(self):
        # one day of wraparound still leaves the end before the start
        with pytest.raises(ValidationError):
            normalize(draft("Backwards", at(12, 10), at(10, 9)))

    def test_overlong_title_is_a_ledger_error(self):
        with pytest.raises(ValidationError):
            normalize(draft("x" * 201, at(10, 9), at(10, 10)))


class TestRounding:
    @pytest.mark.parametrize("seconds,expected", [
        (29, 0),
        (30, 1),
        (89, 1),
        (90, 2),
        (150, 3),
    ])
    def test_halves_round_up(self, seconds, expected):
        assert round_minutes(datetime.timedelta(seconds=seconds)) == expected


class TestConflicts:
    def test_touching_entries_do_not_overlap(self):
        a, = normalize(draft("A", at(10, 10), at(10, 11)))
        b, = normalize(draft("B", at(10, 11), at(10, 12)))
        assert not overlaps(a, b)
        assert find_conflict([b], [a]) is None

    def test_strict_overlap_is_found(self):
        a, = normalize(draft("A", at(10, 10), at(10, 11)))
        b, = normalize(draft("B", at(10, 10, 30), at(10, 12)))
        conflict = find_conflict([b], [a])
        assert conflict is not None
        assert conflict.existing is a

    def test_only_same_start_day_is_compared(self):
        """An entry that ends on the next day is not checked against that day"""
        late, = normalize(draft("Late", at(10, 22), at(11, 0)))
        # Straddles midnight as a stored, unsplit interval (e.g. after an update)
        late = late.model_copy(update={"end_time": at(11, 2)})
        early, = normalize(draft("Early", at(11, 1), at(11, 3)))
        assert find_conflict([early], [late]) is None

    def test_excluded_id_is_skipped(self):
        a, = normalize(draft("A", at(10, 10), at(10, 11)))
        moved = a.model_copy(update={"start_time": at(10, 10, 30)})
        assert find_conflict([moved], [a], exclude_id=a.id) is None
