"""Trip endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...persistence.trips import get_trip_store
from ...schemas.trips import TripCreateRequest, TripModel, TripOptimizationResponse
from ...services.routing.exceptions import InvalidStopDataError, TripNotFoundError
from ...services.routing.service import optimize_trip

router = APIRouter(prefix="/trips", tags=["trips"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[TripModel], status_code=status.HTTP_200_OK)
def list_trips() -> list[TripModel]:
    return [TripModel.from_domain(trip) for trip in get_trip_store().list_trips()]


@router.post("", response_model=TripModel, status_code=status.HTTP_201_CREATED)
def create_trip(payload: TripCreateRequest) -> TripModel:
    store = get_trip_store()
    try:
        trip = store.create_trip(
            start_lat=payload.start_lat,
            start_lng=payload.start_lng,
            start_address=payload.start_address,
            name=payload.name,
            scheduled_at=payload.scheduled_at,
            locations=[location.model_dump() for location in payload.locations],
        )
        return TripModel.from_domain(trip, store.get_stops_for_trip(trip.id))
    except Exception as exc:
        logger.exception(f"Error creating trip: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create trip: {str(exc)}"
        ) from exc


@router.get("/{trip_id}", response_model=TripModel, status_code=status.HTTP_200_OK)
def get_trip(trip_id: int) -> TripModel:
    store = get_trip_store()
    try:
        trip = store.get_trip(trip_id)
        return TripModel.from_domain(trip, store.get_stops_for_trip(trip_id))
    except TripNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidStopDataError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


@router.post("/{trip_id}/optimize", response_model=TripOptimizationResponse, status_code=status.HTTP_200_OK)
def optimize(trip_id: int) -> TripOptimizationResponse:
    try:
        return TripOptimizationResponse.from_report(optimize_trip(trip_id))
    except TripNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidStopDataError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing trip {trip_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize trip: {str(exc)}"
        ) from exc
