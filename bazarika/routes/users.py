from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from bazarika.database import get_session
from bazarika.models.address import Address
from bazarika.models.profile import Profile
from bazarika.schemas.address_schemas import AddressCreate, AddressUpdate
from bazarika.schemas.profile_schemas import ProfileUpdate
from bazarika.utils.token import get_current_user, is_admin

router = APIRouter()


def _profile_response(profile: Profile) -> dict:
    return {
        "id": profile.id,
        "email": profile.email,
        "full_name": profile.full_name,
        "phone": profile.phone,
        "avatar_url": profile.avatar_url,
        "role": profile.role,
        "is_admin": is_admin(profile),
        "created_at": profile.created_at,
    }


def _own_address(session: Session, address_id: int, user: Profile) -> Address:
    address = session.get(Address, address_id)

    if not address or address.user_id != user.id:
        raise HTTPException(404, "Address not found")

    return address


# -------- USER PROFILE --------

@router.get("/me")
def get_my_profile(current_user: Profile = Depends(get_current_user)):
    return _profile_response(current_user)


@router.put("/me")
def update_my_profile(
    data: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(current_user, key, value)

    current_user.updated_at = datetime.utcnow()
    session.add(current_user)
    session.commit()
    session.refresh(current_user)

    return {"message": "Profile updated successfully", "user": _profile_response(current_user)}


# -------- ADDRESSES --------

@router.get("/me/addresses")
def list_addresses(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    return session.exec(
        select(Address)
        .where(Address.user_id == current_user.id)
        .order_by(Address.is_default.desc(), Address.created_at, Address.id)
    ).all()


@router.post("/me/addresses", status_code=201)
def add_address(
    data: AddressCreate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    has_any = session.exec(
        select(Address.id).where(Address.user_id == current_user.id)
    ).first()

    # the first address becomes the default one
    address = Address(user_id=current_user.id, is_default=has_any is None, **data.model_dump())

    session.add(address)
    session.commit()
    session.refresh(address)

    return {"message": "Address added", "address": address}


@router.put("/me/addresses/{address_id}")
def update_address(
    address_id: int,
    data: AddressUpdate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    address = _own_address(session, address_id, current_user)

    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(address, key, value)

    address.updated_at = datetime.utcnow()
    session.add(address)
    session.commit()
    session.refresh(address)

    return {"message": "Address updated", "address": address}


@router.put("/me/addresses/{address_id}/default")
def set_default_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    address = _own_address(session, address_id, current_user)

    others = session.exec(
        select(Address).where(Address.user_id == current_user.id, Address.is_default == True)  # noqa: E712
    ).all()
    for other in others:
        other.is_default = False
        session.add(other)

    address.is_default = True
    address.updated_at = datetime.utcnow()
    session.add(address)
    session.commit()
    session.refresh(address)

    return {"message": "Default address updated", "address": address}


@router.delete("/me/addresses/{address_id}")
def delete_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    # orders keep their own copy of the address, so deleting is always safe
    address = _own_address(session, address_id, current_user)

    session.delete(address)
    session.commit()
    return {"message": "Address deleted"}
