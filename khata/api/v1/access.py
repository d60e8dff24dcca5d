"""/v1/access - role check and sign-up allow list (admin only)"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from khata.api.v1.schemas import AccessResponse, AllowedEmailCreate, AllowedEmailResponse
from khata.api.v1.converters import allowed_email_response
from khata.api.dependencies import ADMIN_ROLE, get_current_user_id, get_request_id, require_admin, parse_uuid
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import AccessRepository
from khata.domain.exceptions import DuplicateEntryError

router = APIRouter()


@router.get("/access/me", response_model=AccessResponse)
def get_my_access(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    roles = AccessRepository(db).roles_for(user_id)
    return AccessResponse(user_id=user_id, roles=roles, is_admin=ADMIN_ROLE in roles)


@router.get("/access/allowed-emails", response_model=List[AllowedEmailResponse])
def list_allowed_emails(
    _: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [allowed_email_response(e) for e in AccessRepository(db).list_allowed_emails()]


@router.post("/access/allowed-emails", response_model=AllowedEmailResponse, status_code=201)
def add_allowed_email(
    body: AllowedEmailCreate,
    request: Request,
    admin_id: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        db_email = AccessRepository(db).add_allowed_email(body.email)
        db.commit()
    except DuplicateEntryError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    logging.info(
        "Allowed email added",
        extra={"request_id": get_request_id(request), "admin_id": admin_id, "email": db_email.email},
    )
    return allowed_email_response(db_email)


@router.delete("/access/allowed-emails/{email_id}", status_code=204)
def delete_allowed_email(
    email_id: str,
    _: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    repo = AccessRepository(db)
    db_email = repo.get_allowed_email(parse_uuid(email_id, "allowed email"))
    if not db_email:
        raise HTTPException(status_code=404, detail="Allowed email not found")

    repo.delete_allowed_email(db_email)
    db.commit()
    return Response(status_code=204)
