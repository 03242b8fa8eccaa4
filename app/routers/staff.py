from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from app.core.database import get_db
from app.core.exceptions import DuplicateStaffError, StaffNotFoundError
from app.models.staff import StaffRole, StaffUser
from app.schemas.staff import StaffCreate, StaffUpdate, StaffResponse
from app.services.visitor_store import list_users_by_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/staff", tags=["Staff"])


def _get_staff_or_404(db: Session, staff_id: int) -> StaffUser:
    staff = db.query(StaffUser).filter(StaffUser.id == staff_id).first()
    if not staff:
        raise StaffNotFoundError(f"Staff member with ID {staff_id} not found")
    return staff


@router.get("/", response_model=List[StaffResponse], status_code=status.HTTP_200_OK)
def get_staff(
    role: Optional[StaffRole] = Query(None, description="Only return entries with this role"),
    db: Session = Depends(get_db)
):
    """
    List the staff directory ordered by name. The kiosk uses role=staff to
    populate the host picker.
    """
    users = list_users_by_role(db, role.value if role else None)
    return [StaffResponse.model_validate(user) for user in users]


@router.post("/", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def create_staff(staff_data: StaffCreate, db: Session = Depends(get_db)):
    """
    Add a staff directory entry.

    Raises:
        DuplicateStaffError: If the email is already registered
    """
    staff = StaffUser(**staff_data.model_dump())
    try:
        db.add(staff)
        db.commit()
        db.refresh(staff)
    except IntegrityError:
        db.rollback()
        raise DuplicateStaffError("Email already exists")

    logger.info(f"[Staff] Created {staff.role.value} '{staff.name}' ({staff.id})")
    return StaffResponse.model_validate(staff)


@router.put("/{staff_id}", response_model=StaffResponse, status_code=status.HTTP_200_OK)
def update_staff(staff_id: int, staff_data: StaffUpdate, db: Session = Depends(get_db)):
    """
    Update a staff directory entry.

    Raises:
        StaffNotFoundError: If the entry does not exist
        DuplicateStaffError: If the new email is already registered
    """
    staff = _get_staff_or_404(db, staff_id)

    for field, value in staff_data.model_dump(exclude_unset=True).items():
        setattr(staff, field, value)

    try:
        db.commit()
        db.refresh(staff)
    except IntegrityError:
        db.rollback()
        raise DuplicateStaffError("Email already exists")

    return StaffResponse.model_validate(staff)


@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(staff_id: int, db: Session = Depends(get_db)):
    """
    Remove a staff directory entry. Visitor history is kept.
    """
    staff = _get_staff_or_404(db, staff_id)
    db.delete(staff)
    db.commit()
    logger.info(f"[Staff] Deleted staff member {staff_id}")
    return None
