"""
Class Routes - create a class and look up its enrolled members.
"""
from fastapi import APIRouter, Depends
from auth import require_admin
from models import ApiResponse, CreateClassRequest
from models_orm import UserORM
from service_modules.class_service import ClassService, get_class_service

router = APIRouter()


@router.post("/admin/classes", response_model=ApiResponse)
async def create_class(
    payload: CreateClassRequest,
    admin: UserORM = Depends(require_admin),
    service: ClassService = Depends(get_class_service)
):
    result = service.create_class(payload.class_name, payload.skills, payload.difficulty_level)
    return ApiResponse(message="Class created", data=result)


@router.get("/classes/{class_id}", response_model=ApiResponse)
async def get_class(
    class_id: str,
    service: ClassService = Depends(get_class_service)
):
    return ApiResponse(message="Class loaded", data=service.get_class(class_id))
