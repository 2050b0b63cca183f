"""
AI services module
"""

from lvlai_api.ai.context_collector import context_collector, format_context_for_prompt
from lvlai_api.ai.model_gateway import ModelProvider, ProviderName, select_provider
from lvlai_api.ai.models import (
    TaskRecommendation,
    WorkloadOptimizationResult,
)
from lvlai_api.ai.organizer_agent import OrganizerAgent, organizer_agent
from lvlai_api.ai.recommendation_extractor import extract_recommendations

__all__ = [
    "context_collector",
    "format_context_for_prompt",
    "ModelProvider",
    "ProviderName",
    "select_provider",
    "TaskRecommendation",
    "WorkloadOptimizationResult",
    "OrganizerAgent",
    "organizer_agent",
    "extract_recommendations",
]
