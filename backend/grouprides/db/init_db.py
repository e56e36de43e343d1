"""
Database initialization script.

    python -m grouprides.db.init_db          # create tables
    python -m grouprides.db.init_db --seed   # create tables and add demo rides
"""
import sys
from datetime import date, timedelta
from grouprides.core.exceptions import ValidationError
from grouprides.core.security import get_password_hash
from grouprides.db.session import SessionLocal, init_db
from grouprides.models.user import ExperienceLevel, PreferredDistance
from grouprides.services.storage import DatabaseStorage

DEMO_ORGANIZER = {
    "username": "demo-organizer",
    "email": "organizer@example.com",
    "first_name": "Sarah",
    "last_name": "M.",
    "location": "San Francisco, CA",
    "experience_level": ExperienceLevel.ADVANCED,
    "preferred_distance": PreferredDistance.LONG,
    "bike_type": "Road",
}

# (days from today, ride fields)
DEMO_RIDES = [
    (0, {
        "title": "Morning Coffee Ride",
        "description": "A relaxing loop through Golden Gate Park with a cafe stop halfway. "
                       "Perfect for beginners and social riders.",
        "start_time": "08:00",
        "start_location": "Golden Gate Park, San Francisco, CA",
        "start_latitude": "37.7694",
        "start_longitude": "-122.4862",
        "distance": "15.00",
        "duration": "1.50",
        "difficulty": "easy",
        "is_recurring": True,
        "recurring_type": "weekly",
        "has_route_map": True,
    }),
    (2, {
        "title": "Hill Climb Challenge",
        "description": "Climbing practice on Twin Peaks. Intermediate to advanced riders welcome.",
        "start_time": "14:00",
        "start_location": "Twin Peaks, San Francisco, CA",
        "start_latitude": "37.7544",
        "start_longitude": "-122.4477",
        "distance": "25.00",
        "duration": "2.50",
        "difficulty": "intermediate",
        "has_route_map": True,
    }),
    (3, {
        "title": "Century Training Ride",
        "description": "Long distance training at a steady pace with rest stops every 20 miles.",
        "start_time": "06:00",
        "start_location": "Crissy Field, San Francisco, CA",
        "start_latitude": "37.8024",
        "start_longitude": "-122.4058",
        "distance": "100.00",
        "duration": "6.00",
        "difficulty": "advanced",
        "max_participants": 15,
        "requires_approval": True,
        "has_route_map": True,
    }),
]


def seed_demo_data() -> int:
    """Insert a demo organizer and sample rides. Returns the number of rides added."""
    db = SessionLocal()
    try:
        storage = DatabaseStorage(db)
        organizer = storage.get_user_by_username(DEMO_ORGANIZER["username"])
        if organizer is None:
            try:
                organizer = storage.create_user(DEMO_ORGANIZER, get_password_hash("demo-password"))
            except ValidationError as e:
                print(f"Could not create demo organizer: {e.errors}")
                return 0

        today = date.today()
        for offset, fields in DEMO_RIDES:
            ride_data = dict(fields, date=(today + timedelta(days=offset)).isoformat())
            storage.create_ride(ride_data, organizer.id, organizer.display_name)
        return len(DEMO_RIDES)
    finally:
        db.close()


if __name__ == "__main__":
    print("Initializing database...")
    init_db()
    print("Database initialized successfully!")
    if "--seed" in sys.argv[1:]:
        added = seed_demo_data()
        print(f"Seeded {added} demo rides")
