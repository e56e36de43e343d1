"""
Storage service: the only writer of ride, participant and user rows.

``Storage`` is the interface the API layer depends on; ``DatabaseStorage``
is the SQLAlchemy implementation. Not-found lookups return ``None``/``False``
instead of raising. Bad input raises ``ValidationError``. Database errors
propagate untouched.
"""
import abc
import logging
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from grouprides.core.exceptions import ValidationError
from grouprides.models.ride import Ride, RideParticipant, Difficulty
from grouprides.models.user import User
from grouprides.schemas.ride import RideFilters
from grouprides.services.ride_validation import validate_ride, parse_filter_date

logger = logging.getLogger(__name__)

# Fields a ride update may touch; identity, organizer and counter are excluded
RIDE_MUTABLE_FIELDS = frozenset({
    "title", "description", "date", "start_time", "start_location",
    "start_latitude", "start_longitude", "distance", "duration", "difficulty",
    "is_recurring", "recurring_type", "max_participants", "requires_approval",
    "has_route_map",
})

USER_MUTABLE_FIELDS = frozenset({
    "email", "hashed_password", "first_name", "last_name", "bio", "location",
    "experience_level", "preferred_distance", "bike_type", "is_active",
})


class Storage(abc.ABC):
    """Persistence operations for rides, participants and users."""

    # ----- Rides -----

    @abc.abstractmethod
    def list_rides(self, filters: Optional[RideFilters] = None) -> List[Ride]:
        ...

    @abc.abstractmethod
    def get_ride(self, ride_id: str) -> Optional[Ride]:
        ...

    @abc.abstractmethod
    def create_ride(self, data: Dict[str, Any], organizer_id: str, organizer_name: str) -> Ride:
        ...

    @abc.abstractmethod
    def update_ride(self, ride_id: str, changes: Dict[str, Any]) -> Optional[Ride]:
        ...

    @abc.abstractmethod
    def delete_ride(self, ride_id: str) -> bool:
        ...

    # ----- Participants -----

    @abc.abstractmethod
    def list_participants(self, ride_id: str) -> List[RideParticipant]:
        ...

    @abc.abstractmethod
    def join_ride(self, ride_id: str, participant_id: str, participant_name: str) -> Optional[RideParticipant]:
        ...

    @abc.abstractmethod
    def leave_ride(self, ride_id: str, participant_id: str) -> bool:
        ...

    # ----- Users -----

    @abc.abstractmethod
    def list_users(self) -> List[User]:
        ...

    @abc.abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abc.abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    @abc.abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abc.abstractmethod
    def create_user(self, data: Dict[str, Any], hashed_password: str) -> User:
        ...

    @abc.abstractmethod
    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        ...


class DatabaseStorage(Storage):
    """
    SQLAlchemy-backed storage bound to one session.

    Join and leave lock the ride row (``SELECT ... FOR UPDATE``) and recompute
    ``participant_count`` from a live count before committing, so concurrent
    joins cannot lose updates. SQLite ignores ``FOR UPDATE``; there the
    participant INSERT/DELETE is the first write and takes the database lock,
    and the unique constraint and delete rowcount decide the race.
    """

    def __init__(self, db: Session):
        self.db = db

    # ----- Rides -----

    def list_rides(self, filters: Optional[RideFilters] = None) -> List[Ride]:
        query = self.db.query(Ride)

        if filters is not None:
            if filters.difficulty:
                try:
                    difficulty = Difficulty(filters.difficulty)
                except ValueError:
                    raise ValidationError.for_field("difficulty", "Unknown difficulty")
                query = query.filter(Ride.difficulty == difficulty)

            if filters.date:
                day_start = datetime.combine(parse_filter_date(filters.date), time.min)
                query = query.filter(
                    Ride.date >= day_start,
                    Ride.date < day_start + timedelta(days=1)
                )

            if filters.location:
                query = query.filter(Ride.start_location.icontains(filters.location, autoescape=True))

            if filters.search:
                term = filters.search
                query = query.filter(or_(
                    Ride.title.icontains(term, autoescape=True),
                    Ride.description.icontains(term, autoescape=True),
                    Ride.start_location.icontains(term, autoescape=True),
                ))

        return query.order_by(Ride.date.asc(), Ride.created_at.asc()).all()

    def get_ride(self, ride_id: str) -> Optional[Ride]:
        return self.db.get(Ride, ride_id)

    def create_ride(self, data: Dict[str, Any], organizer_id: str, organizer_name: str) -> Ride:
        record = {field: data.get(field) for field in RIDE_MUTABLE_FIELDS}
        cleaned = validate_ride(record)

        ride = Ride(
            **cleaned,
            organizer_id=organizer_id,
            organizer_name=organizer_name,
            participant_count=0,
        )
        self.db.add(ride)
        self.db.commit()
        self.db.refresh(ride)

        logger.info(f"Created ride {ride.id} ({ride.title!r}) for organizer {organizer_id}")
        return ride

    def update_ride(self, ride_id: str, changes: Dict[str, Any]) -> Optional[Ride]:
        ride = self.get_ride(ride_id)
        if not ride:
            return None

        unknown = set(changes) - RIDE_MUTABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Invalid ride data",
                errors=[{"field": field, "message": f"{field} cannot be updated"} for field in sorted(unknown)]
            )

        merged = {field: getattr(ride, field) for field in RIDE_MUTABLE_FIELDS}
        merged.update(changes)
        # Turning recurrence off clears the cadence unless the caller set one explicitly
        if changes.get("is_recurring") is False and "recurring_type" not in changes:
            merged["recurring_type"] = None

        cleaned = validate_ride(merged)
        for field, value in cleaned.items():
            setattr(ride, field, value)

        self.db.commit()
        self.db.refresh(ride)

        logger.info(f"Updated ride {ride_id}: {sorted(changes)}")
        return ride

    def delete_ride(self, ride_id: str) -> bool:
        ride = self._lock_ride(ride_id)
        if not ride:
            self.db.rollback()
            return False

        self.db.query(RideParticipant).filter(
            RideParticipant.ride_id == ride_id
        ).delete(synchronize_session=False)
        self.db.delete(ride)
        self.db.commit()

        logger.info(f"Deleted ride {ride_id} and its participants")
        return True

    # ----- Participants -----

    def list_participants(self, ride_id: str) -> List[RideParticipant]:
        return self.db.query(RideParticipant).filter(
            RideParticipant.ride_id == ride_id
        ).order_by(RideParticipant.joined_at.desc()).all()

    def join_ride(self, ride_id: str, participant_id: str, participant_name: str) -> Optional[RideParticipant]:
        ride = self._lock_ride(ride_id)
        if not ride:
            self.db.rollback()
            return None

        existing = self.db.query(RideParticipant).filter(
            RideParticipant.ride_id == ride_id,
            RideParticipant.participant_id == participant_id
        ).first()
        if existing:
            self.db.rollback()
            raise ValidationError.for_field("participantId", "Already joined this ride")

        participant = RideParticipant(
            ride_id=ride_id,
            participant_id=participant_id,
            participant_name=participant_name
        )
        self.db.add(participant)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError.for_field("participantId", "Already joined this ride")

        count = self._sync_participant_count(ride)
        if ride.max_participants is not None and count > ride.max_participants:
            self.db.rollback()
            raise ValidationError.for_field("rideId", "Ride is full")

        self.db.commit()
        self.db.refresh(participant)

        logger.info(f"Participant {participant_id} joined ride {ride_id} ({count} riders)")
        return participant

    def leave_ride(self, ride_id: str, participant_id: str) -> bool:
        ride = self._lock_ride(ride_id)
        if not ride:
            self.db.rollback()
            return False

        # Single DELETE; its rowcount decides concurrent leaves on SQLite
        deleted = self.db.query(RideParticipant).filter(
            RideParticipant.ride_id == ride_id,
            RideParticipant.participant_id == participant_id
        ).delete(synchronize_session=False)
        if not deleted:
            self.db.rollback()
            return False

        count = self._sync_participant_count(ride)
        self.db.commit()

        logger.info(f"Participant {participant_id} left ride {ride_id} ({count} riders)")
        return True

    def _lock_ride(self, ride_id: str) -> Optional[Ride]:
        """Load a ride holding a row lock for the rest of the transaction."""
        return self.db.query(Ride).filter(Ride.id == ride_id).with_for_update().first()

    def _sync_participant_count(self, ride: Ride) -> int:
        """Recount participation rows inside the current transaction."""
        count = self.db.query(func.count(RideParticipant.id)).filter(
            RideParticipant.ride_id == ride.id
        ).scalar()
        ride.participant_count = count
        self.db.flush()
        return count

    # ----- Users -----

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.joined_at.asc()).all()

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, data: Dict[str, Any], hashed_password: str) -> User:
        if self.get_user_by_username(data["username"]):
            raise ValidationError.for_field("username", "Username already exists")
        if self.get_user_by_email(data["email"]):
            raise ValidationError.for_field("email", "Email already exists")

        fields = {k: v for k, v in data.items() if k in USER_MUTABLE_FIELDS or k == "username"}
        fields.pop("hashed_password", None)
        user = User(**fields, hashed_password=hashed_password)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration; report the key that collided
            self.db.rollback()
            if self.get_user_by_email(data["email"]):
                raise ValidationError.for_field("email", "Email already exists")
            raise ValidationError.for_field("username", "Username already exists")
        self.db.refresh(user)

        logger.info(f"Created user {user.id} ({user.username})")
        return user

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        user = self.get_user(user_id)
        if not user:
            return None

        unknown = set(changes) - USER_MUTABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Invalid user data",
                errors=[{"field": field, "message": f"{field} cannot be updated"} for field in sorted(unknown)]
            )

        new_email = changes.get("email")
        if new_email and new_email != user.email:
            other = self.get_user_by_email(new_email)
            if other and other.id != user.id:
                raise ValidationError.for_field("email", "Email already exists")

        for field, value in changes.items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Updated user {user_id}: {sorted(k for k in changes if k != 'hashed_password')}")
        return user
