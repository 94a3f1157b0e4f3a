"""SQLAlchemy ORM models."""

from mothership.models.base import Base
from mothership.models.builder_verification import BuilderVerification
from mothership.models.channel_scan import ChannelScan
from mothership.models.problem import Problem, Solution
from mothership.models.rate_limit import RateLimitCounter
from mothership.models.search_cache import SearchCache

__all__ = [
    "Base",
    "BuilderVerification",
    "ChannelScan",
    "Problem",
    "RateLimitCounter",
    "SearchCache",
    "Solution",
]
