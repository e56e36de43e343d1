"""
Ride management routes.
"""
from fastapi import APIRouter, Depends, Response, status
from typing import List, Optional
from grouprides.core.exceptions import NotFoundError, AuthorizationError
from grouprides.models.ride import Ride
from grouprides.models.user import User
from grouprides.schemas.ride import (
    RideCreate, RideUpdate, RideResponse, RideFilters, RideParticipantResponse
)
from grouprides.services.storage import Storage
from grouprides.api.dependencies import get_current_user, get_storage

router = APIRouter(prefix="/rides", tags=["rides"])


def get_ride_or_404(ride_id: str, storage: Storage) -> Ride:
    ride = storage.get_ride(ride_id)
    if not ride:
        raise NotFoundError("Ride not found")
    return ride


def check_ride_owner(ride_id: str, user: User, storage: Storage) -> Ride:
    """Return the ride if ``user`` organizes it."""
    ride = get_ride_or_404(ride_id, storage)
    if ride.organizer_id != user.id:
        raise AuthorizationError("Only the organizer can modify this ride")
    return ride


@router.get("", response_model=List[RideResponse])
def list_rides(
    difficulty: Optional[str] = None,
    date: Optional[str] = None,
    location: Optional[str] = None,
    search: Optional[str] = None,
    storage: Storage = Depends(get_storage)
):
    """List rides, soonest first, filtered by any combination of query params."""
    filters = RideFilters(difficulty=difficulty, date=date, location=location, search=search)
    return storage.list_rides(filters)


@router.get("/{ride_id}", response_model=RideResponse)
def get_ride(ride_id: str, storage: Storage = Depends(get_storage)):
    """Get a single ride."""
    return get_ride_or_404(ride_id, storage)


@router.post("", response_model=RideResponse, status_code=status.HTTP_201_CREATED)
def create_ride(
    ride_data: RideCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Create a ride organized by the current user."""
    return storage.create_ride(
        ride_data.model_dump(),
        organizer_id=current_user.id,
        organizer_name=current_user.display_name
    )


@router.patch("/{ride_id}", response_model=RideResponse)
def update_ride(
    ride_id: str,
    ride_data: RideUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Partially update a ride. Organizer only."""
    check_ride_owner(ride_id, current_user, storage)
    ride = storage.update_ride(ride_id, ride_data.model_dump(exclude_unset=True))
    if not ride:
        raise NotFoundError("Ride not found")
    return ride


@router.delete("/{ride_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_ride(
    ride_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Delete a ride and all of its participants. Organizer only."""
    check_ride_owner(ride_id, current_user, storage)
    if not storage.delete_ride(ride_id):
        raise NotFoundError("Ride not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{ride_id}/participants", response_model=List[RideParticipantResponse])
def get_participants(ride_id: str, storage: Storage = Depends(get_storage)):
    """List riders who joined, most recent first."""
    get_ride_or_404(ride_id, storage)
    return storage.list_participants(ride_id)


@router.post(
    "/{ride_id}/join",
    response_model=RideParticipantResponse,
    status_code=status.HTTP_201_CREATED
)
def join_ride(
    ride_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Join a ride as the current user."""
    participant = storage.join_ride(ride_id, current_user.id, current_user.display_name)
    if not participant:
        raise NotFoundError("Ride not found")
    return participant


@router.delete(
    "/{ride_id}/participants/{participant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response
)
def leave_ride(
    ride_id: str,
    participant_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Leave a ride. The organizer may also remove other riders."""
    ride = get_ride_or_404(ride_id, storage)
    if participant_id != current_user.id and ride.organizer_id != current_user.id:
        raise AuthorizationError("You can only remove yourself from a ride")

    if not storage.leave_ride(ride_id, participant_id):
        raise NotFoundError("Participant not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
