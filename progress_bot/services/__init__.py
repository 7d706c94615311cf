"""Сервисы бизнес-логики."""
from progress_bot.services.aggregation import aggregate, hours_by_month, weekly_summary, to_series
from progress_bot.services.progress import collect_observations, track_levels, level_series, build_milestones
from progress_bot.services.projection import journey_metrics, project_completion
from progress_bot.services.methods import score_methods
from progress_bot.services.matching import match_to_level, suggest_level, get_extractor

__all__ = [
    "aggregate",
    "hours_by_month",
    "weekly_summary",
    "to_series",
    "collect_observations",
    "track_levels",
    "level_series",
    "build_milestones",
    "journey_metrics",
    "project_completion",
    "score_methods",
    "match_to_level",
    "suggest_level",
    "get_extractor",
]
