"""
@file job_growth.py
@brief Year-over-year job growth
"""

from typing import Optional


def calculate_job_growth(most_recent_value: float, previous_year_value: Optional[float]) -> Optional[float]:
    """
    @brief Relative change from the previous year's value

    @return (most_recent - previous) / previous, negative for job losses,
    or None when the previous value is missing or zero
    """
    if not previous_year_value:
        return None
    return (most_recent_value - previous_year_value) / previous_year_value
