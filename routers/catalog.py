from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.repository import CatalogRepository

router = APIRouter()


@router.get("/scents")
def list_enabled_scents(db: Session = Depends(get_db)):
    """Scents offered on the booking form (enabled only)."""
    scents = CatalogRepository.list_scents(db, enabled_only=True)
    return {"scents": [{"id": s.id, "name": s.name} for s in scents]}


@router.get("/pricing")
def list_pricing(db: Session = Depends(get_db)):
    return {
        "pricing": [
            {
                "vehicleType": p.vehicle_type,
                "interiorPrice": p.interior_price,
                "exteriorPrice": p.exterior_price,
                "bothPrice": p.both_price,
            }
            for p in CatalogRepository.list_pricing(db)
        ]
    }
