import random
import unittest

from luckydraw.roster import Roster
from luckydraw.sampler import MAX_SAMPLE_ATTEMPTS, ValueSampler
from luckydraw.types import DrawRange, RosterEntry


class StuckRandom(random.Random):
    """Always lands on the same range value."""

    def __init__(self, value: int) -> None:
        super().__init__(0)
        self._value = value
        self.randint_calls = 0

    def randint(self, a, b):
        self.randint_calls += 1
        return self._value


class RosterSamplingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.entries = [RosterEntry(number=n, owner=f"user-{n}") for n in (3, 15, 42, 108, 999)]
        self.sampler = ValueSampler(rng=random.Random(7))
        self.draw_range = DrawRange(digit_count=3, min_value=0, max_value=999)

    def test_roster_draws_never_repeat(self) -> None:
        roster = Roster(self.entries)
        exclusion = set()
        seen = []
        for expected_remaining in range(len(self.entries) - 1, -1, -1):
            result = self.sampler.sample(roster, self.draw_range, exclusion)
            seen.append((result.value, result.owner))
            self.assertEqual(roster.remaining_count, expected_remaining)

        self.assertEqual(len(set(seen)), len(self.entries))
        self.assertEqual(
            sorted(seen),
            sorted((str(e.number).zfill(3), e.owner) for e in self.entries),
        )
        self.assertEqual(exclusion, set())

    def test_roster_mode_ignores_exclusion(self) -> None:
        roster = Roster([RosterEntry(number=5, owner="Ada")])
        exclusion = {str(n).zfill(3) for n in range(1000)}

        result = self.sampler.sample(roster, self.draw_range, exclusion)

        self.assertEqual(result.value, "005")
        self.assertEqual(result.owner, "Ada")

    def test_falls_back_to_range_when_roster_used_up(self) -> None:
        roster = Roster([RosterEntry(number=1, owner="Ada")])
        exclusion = set()
        self.sampler.sample(roster, self.draw_range, exclusion)

        result = self.sampler.sample(roster, self.draw_range, exclusion)

        self.assertIsNone(result.owner)
        self.assertIn(result.value, exclusion)
        self.assertEqual(len(result.value), 3)


class RangeSamplingTests(unittest.TestCase):
    def test_value_is_zero_padded(self) -> None:
        sampler = ValueSampler(rng=random.Random(1))
        result = sampler.sample(Roster(), DrawRange(digit_count=3, min_value=7, max_value=7), set())
        self.assertEqual(result.value, "007")
        self.assertIsNone(result.owner)

    def test_excluded_values_are_never_returned(self) -> None:
        sampler = ValueSampler(rng=random.Random(3))
        draw_range = DrawRange(digit_count=1, min_value=0, max_value=9)
        exclusion = {str(n) for n in range(9)}
        before = set(exclusion)

        result = sampler.sample(Roster(), draw_range, exclusion)

        self.assertEqual(result.value, "9")
        self.assertNotIn(result.value, before)
        self.assertEqual(exclusion, before | {"9"})

    def test_every_value_drawn_once_before_exhaustion(self) -> None:
        sampler = ValueSampler(rng=random.Random(11))
        draw_range = DrawRange(digit_count=2, min_value=10, max_value=29)
        exclusion = set()
        values = [sampler.sample(Roster(), draw_range, exclusion).value for _ in range(20)]

        self.assertEqual(sorted(values), [str(n) for n in range(10, 30)])
        self.assertIsNone(sampler.sample(Roster(), draw_range, exclusion))

    def test_exhausted_when_exclusion_covers_range(self) -> None:
        sampler = ValueSampler(rng=random.Random(0))
        exclusion = {"0", "1"}

        result = sampler.sample(Roster(), DrawRange(digit_count=1, min_value=0, max_value=1), exclusion)

        self.assertIsNone(result)
        self.assertEqual(exclusion, {"0", "1"})

    def test_retry_bound_reports_exhaustion(self) -> None:
        rng = StuckRandom(4)
        sampler = ValueSampler(rng=rng)
        exclusion = {"4"}

        result = sampler.sample(Roster(), DrawRange(digit_count=1, min_value=0, max_value=9), exclusion)

        self.assertIsNone(result)
        self.assertEqual(rng.randint_calls, MAX_SAMPLE_ATTEMPTS)
        self.assertEqual(exclusion, {"4"})

    def test_collisions_use_formatted_value(self) -> None:
        rng = StuckRandom(5)
        sampler = ValueSampler(rng=rng, max_attempts=3)
        # "5" and "05" are different displayed values
        result = sampler.sample(Roster(), DrawRange(digit_count=2, min_value=0, max_value=9), {"5"})
        self.assertEqual(result.value, "05")


if __name__ == "__main__":
    unittest.main()
