from __future__ import annotations

from datetime import datetime

import pytest

from cadence.errors import ValidationError
from cadence.model.month_key import (
    days_in_month,
    month_end,
    month_index,
    month_key_for,
    month_start,
    parse_month_key,
    shift_month,
)


class DescribeMonthKey:
    def it_should_parse_well_formed_keys(self):
        assert parse_month_key("2025-03") == (2025, 3)

    @pytest.mark.parametrize("bad", ["2025-3", "2025-13", "2025-00", "25-03", "", "2025/03"])
    def it_should_reject_malformed_keys(self, bad):
        with pytest.raises(ValidationError):
            parse_month_key(bad)

    def it_should_derive_key_from_datetime(self):
        assert month_key_for(datetime(2024, 7, 31, 18, 0)) == "2024-07"

    def it_should_shift_across_year_boundaries(self):
        assert shift_month("2024-11", 3) == "2025-02"
        assert shift_month("2025-01", -1) == "2024-12"

    def it_should_compute_month_bounds(self):
        assert month_start("2024-02") == datetime(2024, 2, 1)
        assert month_end("2024-02") == datetime(2024, 2, 29, 23, 59, 59, 999999)
        assert days_in_month("2023-02") == 28

    def it_should_order_month_indexes_chronologically(self):
        assert month_index("2024-12") + 1 == month_index("2025-01")
