import datetime
import unittest

import pytz

from adhelper.timestamps import (
    EPOCH_DELTA_SECONDS,
    INTERVALS_PER_SECOND,
    LEGACY_LOCAL_OFFSET,
    NEVER,
    filetime_to_datetime,
    filetime_to_seconds,
    filetime_to_utc,
    is_never,
)

# 2020-12-03 08:00:00 UTC
TICKS = 132_514_560_000_000_000


class TestFiletime(unittest.TestCase):

    def test_seconds(self):
        self.assertEqual(filetime_to_seconds(TICKS), 1_606_982_400)
        self.assertEqual(
            filetime_to_seconds(TICKS, offset=LEGACY_LOCAL_OFFSET), 1_606_957_200
        )

    def test_utc_datetime(self):
        self.assertEqual(
            filetime_to_datetime(TICKS), datetime.datetime(2020, 12, 3, 8, 0, 0)  # noqa: DTZ001
        )

    def test_legacy_offset(self):
        self.assertEqual(
            filetime_to_datetime(TICKS, offset=LEGACY_LOCAL_OFFSET),
            datetime.datetime(2020, 12, 3, 1, 0, 0),  # noqa: DTZ001
        )

    def test_result_is_naive(self):
        self.assertIsNone(filetime_to_datetime(TICKS).tzinfo)

    def test_sub_second_ticks_are_floored(self):
        self.assertEqual(
            filetime_to_datetime(TICKS + INTERVALS_PER_SECOND - 1),
            filetime_to_datetime(TICKS),
        )
        self.assertEqual(filetime_to_datetime(TICKS).microsecond, 0)

    def test_zero_saturates_to_epoch(self):
        epoch = datetime.datetime(1970, 1, 1)  # noqa: DTZ001
        self.assertEqual(filetime_to_datetime(0), epoch)
        self.assertEqual(filetime_to_datetime(0, offset=LEGACY_LOCAL_OFFSET), epoch)

    def test_offset_saturates_at_epoch(self):
        ticks = (EPOCH_DELTA_SECONDS + 60) * INTERVALS_PER_SECOND
        self.assertEqual(
            filetime_to_datetime(ticks, offset=LEGACY_LOCAL_OFFSET),
            datetime.datetime(1970, 1, 1),  # noqa: DTZ001
        )

    def test_never_clamps_to_max(self):
        self.assertEqual(
            filetime_to_datetime(NEVER),
            datetime.datetime.max.replace(microsecond=0),
        )

    def test_aware_utc(self):
        self.assertEqual(
            filetime_to_utc(TICKS),
            datetime.datetime(2020, 12, 3, 8, 0, 0, tzinfo=pytz.UTC),
        )

    def test_is_never(self):
        self.assertTrue(is_never(0))
        self.assertTrue(is_never(0x7FFF_FFFF_FFFF_FFFF))
        self.assertFalse(is_never(TICKS))
