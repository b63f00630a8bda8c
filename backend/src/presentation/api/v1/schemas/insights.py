"""
Search Insights Schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from application.services.insights.insights_cache import InsightsResult


class RecommendedBoardSchema(BaseModel):
    name: str
    url: str
    reason: str


class InsightsResponse(BaseModel):
    keywords: List[str]
    recommended_boards: List[RecommendedBoardSchema]
    market_insights: str
    personalized_strategy: str
    generated_at: Optional[datetime] = None
    cached: bool
    stale: bool = False

    @classmethod
    def from_result(cls, result: InsightsResult) -> "InsightsResponse":
        insights = result.insights
        return cls(
            keywords=insights.keywords,
            recommended_boards=[RecommendedBoardSchema(**b.to_dict()) for b in insights.recommended_boards],
            market_insights=insights.market_insights,
            personalized_strategy=insights.personalized_strategy,
            generated_at=insights.generated_at,
            cached=result.cached,
            stale=result.stale,
        )
