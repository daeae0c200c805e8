import logging
from typing import List, Optional

from event_reactions.core.exceptions import BaseAppException
from event_reactions.models.reaction import (
    Aggregates,
    ReactionRecord,
    ReactionSubmission,
    SubmitReactionResponse,
)
from event_reactions.services.reaction_service import get_reaction_service
from fastapi import APIRouter, Query, Request, status

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/reactions", response_model=SubmitReactionResponse)
async def submit_reaction(request: Request, submission: ReactionSubmission):
    """
    Submit a reaction and receive the updated sentiment scores for its event.
    """
    try:
        reaction_service = get_reaction_service(request)
        scores = await reaction_service.submit_reaction(submission)

        return SubmitReactionResponse(
            message="Reaction received", sentiment_scores=scores
        )

    except BaseAppException:
        # Let service-level exceptions bubble up to centralized error handler
        raise
    except Exception as e:
        logger.error(f"Error recording reaction: {e!s}", exc_info=True)
        raise BaseAppException(
            detail="An error occurred while recording your reaction",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="REACTION_SUBMISSION_FAILED",
        ) from e


@router.get("/sentiment", response_model=Aggregates)
async def get_sentiment(
    request: Request,
    event_id: Optional[str] = Query(default=None, alias="eventId"),
):
    """
    Get sentiment totals and emoji counts for an event.
    """
    try:
        reaction_service = get_reaction_service(request)
        return await reaction_service.get_aggregates(event_id)

    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Error computing sentiment aggregates: {e!s}", exc_info=True)
        raise BaseAppException(
            detail="An error occurred while retrieving sentiment statistics",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="SENTIMENT_AGGREGATES_FAILED",
        ) from e


@router.get("/reactions/user/{user_id}", response_model=List[ReactionRecord])
async def list_user_reactions(request: Request, user_id: str):
    """
    Get all reactions submitted by a user, newest first.
    """
    try:
        reaction_service = get_reaction_service(request)
        return await reaction_service.list_for_user(user_id)

    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Error listing reactions for user: {e!s}", exc_info=True)
        raise BaseAppException(
            detail="An error occurred while retrieving reactions",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="REACTION_LIST_FAILED",
        ) from e


@router.get("/reactions/event/{event_id}", response_model=List[ReactionRecord])
async def list_event_reactions(request: Request, event_id: str):
    """
    Get all reactions for an event, newest first.
    """
    try:
        reaction_service = get_reaction_service(request)
        return await reaction_service.list_for_event(event_id)

    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Error listing reactions for event: {e!s}", exc_info=True)
        raise BaseAppException(
            detail="An error occurred while retrieving reactions",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="REACTION_LIST_FAILED",
        ) from e
