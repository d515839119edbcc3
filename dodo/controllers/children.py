"""Child reference-data endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, status

from dodo.controllers.dependencies import StoreDep
from dodo.domain.models import Child
from dodo.views import ChildCreateRequest, ChildResponse

router = APIRouter(prefix="/children", tags=["children"])

logger = logging.getLogger(__name__)


def _serialize_child(child: Child) -> ChildResponse:
    return ChildResponse(
        id=child.id,
        name=child.name,
        ageMonths=child.age_months,
        createdAt=child.created_at,
    )


@router.post("", response_model=ChildResponse, status_code=status.HTTP_201_CREATED)
async def create_child(payload: ChildCreateRequest, store: StoreDep) -> ChildResponse:
    child = await store.children.insert(name=payload.name, age_months=payload.ageMonths)
    logger.info("Child %s registered", child.id)
    return _serialize_child(child)


@router.get("", response_model=List[ChildResponse])
async def list_children(store: StoreDep) -> List[ChildResponse]:
    """Children ordered oldest first."""

    return [_serialize_child(child) for child in await store.children.list()]
