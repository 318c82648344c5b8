import logging
import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import DATABASE_URL

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

DEFAULT_SCENTS = ["Vanilla", "New Car", "Ocean Breeze", "Black Ice"]
DEFAULT_PRICING = [
    # vehicle type, interior, exterior, both
    ("Hatch / Sedan", 120, 100, 200),
    ("SUV / Wagon", 150, 120, 250),
    ("4WD / Van", 180, 140, 300),
]


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # Import models here to create tables
    from app.models import Pricing, Scent
    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    # Seed the catalog if empty
    db = sessionmaker(bind=bind)()
    try:
        if not db.query(Scent).first():
            db.add_all(Scent(id=str(uuid.uuid4()), name=name, enabled=True) for name in DEFAULT_SCENTS)
            logger.info("Seeded %d scents", len(DEFAULT_SCENTS))
        if not db.query(Pricing).first():
            db.add_all(
                Pricing(
                    id=str(uuid.uuid4()),
                    vehicle_type=vehicle_type,
                    interior_price=interior,
                    exterior_price=exterior,
                    both_price=both,
                    sort_order=i,
                )
                for i, (vehicle_type, interior, exterior, both) in enumerate(DEFAULT_PRICING)
            )
            logger.info("Seeded %d pricing rows", len(DEFAULT_PRICING))
        db.commit()
    finally:
        db.close()
