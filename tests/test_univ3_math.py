from __future__ import annotations

import unittest

from liquidity_walls.domain.services.univ3_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    sqrt_price_x96_to_price,
    sqrt_ratio_at_tick,
    tick_to_word,
)


class SqrtRatioAtTickTests(unittest.TestCase):
    def test_tick_zero_is_exactly_q96(self):
        self.assertEqual(sqrt_ratio_at_tick(0), 2**96)

    def test_bounds_match_on_chain_constants(self):
        self.assertEqual(sqrt_ratio_at_tick(MIN_TICK), MIN_SQRT_RATIO)
        self.assertEqual(sqrt_ratio_at_tick(MAX_TICK), MAX_SQRT_RATIO)

    def test_matches_float_power_of_base(self):
        for tick in (-50000, -1000, -1, 1, 1000, 50000):
            expected = 1.0001 ** (tick / 2)
            self.assertAlmostEqual(sqrt_ratio_at_tick(tick) / 2**96 / expected, 1.0, places=12)

    def test_out_of_range_tick_raises(self):
        with self.assertRaises(ValueError):
            sqrt_ratio_at_tick(MAX_TICK + 1)

    def test_price_from_sqrt_price_applies_decimals(self):
        price = sqrt_price_x96_to_price(sqrt_ratio_at_tick(0), 18, 6)
        self.assertAlmostEqual(float(price), 1e12, delta=1.0)


class TickWordTests(unittest.TestCase):
    def test_word_floors_negative_ticks(self):
        self.assertEqual(tick_to_word(0, 60), 0)
        self.assertEqual(tick_to_word(-1, 60), -1)
        self.assertEqual(tick_to_word(-60 * 256, 60), -1)
        self.assertEqual(tick_to_word(-60 * 256 - 60, 60), -2)
        self.assertEqual(tick_to_word(60 * 256, 60), 1)
