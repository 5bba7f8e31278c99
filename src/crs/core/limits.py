from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class RosterLimits:
    min_court_size: int = 1
    max_court_size: int = 6
    bench_capacity: int = 3
    default_court_size: int = 6
    default_minimum_protected: int = 2

    def validate(self) -> None:
        if self.min_court_size < 1:
            raise ValueError("min_court_size must be at least 1")
        if self.max_court_size < self.min_court_size:
            raise ValueError("max_court_size must not be below min_court_size")
        if not self.min_court_size <= self.default_court_size <= self.max_court_size:
            raise ValueError("default_court_size must lie within court size bounds")
        if self.bench_capacity < 0:
            raise ValueError("bench_capacity must not be negative")
        if not 0 <= self.default_minimum_protected <= self.default_court_size:
            raise ValueError("default_minimum_protected must lie within 0..default_court_size")

    def court_size_allowed(self, size: int) -> bool:
        return self.min_court_size <= size <= self.max_court_size


def default_limit_profiles() -> dict[str, RosterLimits]:
    return {
        "standard": RosterLimits(),
        "recreational": RosterLimits(min_court_size=4, max_court_size=6),
        "extended": RosterLimits(min_court_size=1, max_court_size=12, bench_capacity=6),
    }


def resolve_limits(profile: str) -> RosterLimits:
    profiles = default_limit_profiles()
    if profile not in profiles:
        raise ValueError(f"unknown limits profile '{profile}'; expected one of {', '.join(sorted(profiles))}")
    limits = profiles[profile]
    limits.validate()
    return limits
