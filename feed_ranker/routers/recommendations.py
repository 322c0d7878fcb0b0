"""
Recommendation endpoints:
  GET /recommendations/trending              — popularity only, no viewer needed
  GET /recommendations/for-you               — anonymous For You (most liked)
  GET /recommendations/{viewer_id}           — recommended posts
  GET /recommendations/{viewer_id}/videos    — recommended short videos
  GET /recommendations/{viewer_id}/users     — people to follow
  GET /recommendations/{viewer_id}/for-you   — followed + trending mix

All return {"recommendations": [id, ...]}. An empty list is a normal answer;
callers re-fetch the full entities for display.
"""
import logging

from fastapi import APIRouter, Depends, Query

from feed_ranker.config import settings
from feed_ranker.dependencies import get_ranking_service
from feed_ranker.engine.service import RankingService
from feed_ranker.schemas import ContentKind, RecommendationResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/trending", response_model=RecommendationResponse)
async def trending(
    kind: ContentKind = Query(ContentKind.POST),
    limit: int = Query(20, ge=1, le=settings.max_limit),
    service: RankingService = Depends(get_ranking_service),
):
    ids = await service.get_trending(kind, limit)
    return RecommendationResponse(recommendations=ids)


@router.get("/for-you", response_model=RecommendationResponse)
async def anonymous_for_you(
    limit: int = Query(30, ge=1, le=settings.max_limit),
    service: RankingService = Depends(get_ranking_service),
):
    ids = await service.get_for_you_feed("", limit)
    return RecommendationResponse(recommendations=ids)


@router.get("/{viewer_id}", response_model=RecommendationResponse)
async def recommended_posts(
    viewer_id: str,
    limit: int = Query(20, ge=1, le=settings.max_limit),
    service: RankingService = Depends(get_ranking_service),
):
    ids = await service.get_recommended_posts(viewer_id, limit)
    return RecommendationResponse(recommendations=ids)


@router.get("/{viewer_id}/videos", response_model=RecommendationResponse)
async def recommended_videos(
    viewer_id: str,
    limit: int = Query(20, ge=1, le=settings.max_limit),
    service: RankingService = Depends(get_ranking_service),
):
    ids = await service.get_recommended_videos(viewer_id, limit)
    return RecommendationResponse(recommendations=ids)


@router.get("/{viewer_id}/users", response_model=RecommendationResponse)
async def recommended_users(
    viewer_id: str,
    limit: int = Query(10, ge=1, le=settings.max_limit),
    service: RankingService = Depends(get_ranking_service),
):
    ids = await service.get_recommended_users(viewer_id, limit)
    return RecommendationResponse(recommendations=ids)


@router.get("/{viewer_id}/for-you", response_model=RecommendationResponse)
async def for_you(
    viewer_id: str,
    limit: int = Query(30, ge=1, le=settings.max_limit),
    service: RankingService = Depends(get_ranking_service),
):
    ids = await service.get_for_you_feed(viewer_id, limit)
    return RecommendationResponse(recommendations=ids)
