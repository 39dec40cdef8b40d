"""
Groups Router

CRUD over the groups that bots are filed under.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from zyrotech.api.deps import get_group_service
from zyrotech.auth.dependencies import CurrentUser
from zyrotech.core.responses import success_response
from zyrotech.schemas.group import GroupResponse, GroupWrite
from zyrotech.services.group_service import GroupService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a group")
async def create_group(
    data: GroupWrite,
    current_user: CurrentUser,
    service: GroupService = Depends(get_group_service)
):
    group = await service.create_group(data.name)
    return success_response(
        GroupResponse.model_validate(group),
        "Group created successfully",
        status.HTTP_201_CREATED
    )


@router.get("", summary="List groups sorted by name")
async def list_groups(
    current_user: CurrentUser,
    service: GroupService = Depends(get_group_service)
):
    groups = await service.list_groups()
    return success_response([GroupResponse.model_validate(g) for g in groups])


@router.get("/{group_id}", summary="Get a group")
async def get_group(
    group_id: UUID,
    current_user: CurrentUser,
    service: GroupService = Depends(get_group_service)
):
    group = await service.get_group(group_id)
    return success_response(GroupResponse.model_validate(group))


@router.put("/{group_id}", summary="Rename a group")
async def update_group(
    group_id: UUID,
    data: GroupWrite,
    current_user: CurrentUser,
    service: GroupService = Depends(get_group_service)
):
    group = await service.update_group(group_id, data.name)
    return success_response(GroupResponse.model_validate(group), "Group updated successfully")


@router.delete("/{group_id}", summary="Delete an unused group")
async def delete_group(
    group_id: UUID,
    current_user: CurrentUser,
    service: GroupService = Depends(get_group_service)
):
    await service.delete_group(group_id)
    return success_response(message="Group deleted successfully")
