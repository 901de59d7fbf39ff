# barbershop/routers/services_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.schemas import ServiceCreate, ServicePublic
from barbershop.auth import Actor, get_current_actor
from barbershop.catalog import create_service, list_services

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


@router.get("", response_model=List[ServicePublic])
def read_services(session: Session = Depends(get_session)):
    return list_services(session)


@router.post("", response_model=ServicePublic, status_code=201)
def add_service(
    body: ServiceCreate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
):
    return create_service(session, actor, **body.model_dump())
