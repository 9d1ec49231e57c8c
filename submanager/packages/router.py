# submanager/packages/router.py
"""API router for packages: readable by any user, writable by admins."""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from submanager.core.dependencies import ActorDep, AdminActorDep, SessionDep
from submanager.packages.dao import PackageDAO
from submanager.packages.schemas import PackageCreate, PackageRead, PackageUpdate
from submanager.packages.service import PackageService
from submanager.query.dependencies import TableQuery, get_table_query

router = APIRouter(prefix="/packages", tags=["packages"])


# ===== DEPENDENCY INJECTION =====

def get_package_reader(session: SessionDep, actor: ActorDep) -> PackageService:
    return PackageService(PackageDAO(session), actor)


def get_package_writer(session: SessionDep, actor: AdminActorDep) -> PackageService:
    return PackageService(PackageDAO(session), actor)


# ===== ENDPOINTS =====

@router.get("", response_model=List[PackageRead])
def list_packages(
    query: TableQuery = Depends(get_table_query),
    service: PackageService = Depends(get_package_reader),
) -> List[PackageRead]:
    return service.list_records(query.search, query.filters, query.sort)


@router.get("/{package_id}", response_model=PackageRead)
def get_package(package_id: str, service: PackageService = Depends(get_package_reader)):
    return service.get_by_id(package_id)


@router.post("", response_model=PackageRead, status_code=status.HTTP_201_CREATED)
def create_package(data: PackageCreate, service: PackageService = Depends(get_package_writer)):
    """Create a package; its account's linkedPackages goes up by one."""
    return service.create(data)


@router.put("/{package_id}", response_model=PackageRead)
def update_package(
    package_id: str, data: PackageUpdate, service: PackageService = Depends(get_package_writer)
):
    return service.update(package_id, data)


@router.delete("/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_package(package_id: str, service: PackageService = Depends(get_package_writer)):
    service.delete(package_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
