"""Domain model for tube logistics instances and solutions."""

from tubenet.model.instance import (
    Arc,
    City,
    Cohort,
    Instance,
    SampleType,
    Solution,
    Tube,
)

__all__ = [
    "Arc",
    "City",
    "Cohort",
    "Instance",
    "SampleType",
    "Solution",
    "Tube",
]
