"""API route definitions for git-branch-manager."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from git_branch_manager.api.schemas import BranchRequest
from git_branch_manager.config import Config
from git_branch_manager.constants import DEFAULT_LIMIT, DEFAULT_PAGE
from git_branch_manager.services.branch_service import BranchService

router = APIRouter()


def get_service(request: Request) -> BranchService:
    return request.app.state.branch_service


def get_config(request: Request) -> Config:
    return request.app.state.config


@router.get("/health")
async def health(config: Config = Depends(get_config)) -> dict:
    """Lightweight endpoint for uptime checks."""
    return {"status": "healthy", "repository": config.repository_path}


@router.get("/config")
@router.get("/config.json", include_in_schema=False)
async def get_public_config(config: Config = Depends(get_config)) -> dict:
    """Configuration values the front end needs."""
    return config.public_dict()


# ============================================================================
# Branch listings
# ============================================================================


@router.get("/branches")
async def list_branches(
    page: int = Query(DEFAULT_PAGE, ge=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    skip_refresh: bool = Query(False, alias="skipRefresh"),
    service: BranchService = Depends(get_service),
) -> dict:
    """Local branches, protected ones first."""
    result = await service.list_branches(page, limit, skip_refresh)
    return result.to_dict()


@router.get("/remote-branches")
async def list_remote_branches(
    page: int = Query(DEFAULT_PAGE, ge=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    skip_refresh: bool = Query(False, alias="skipRefresh"),
    service: BranchService = Depends(get_service),
) -> dict:
    result = await service.list_remote_branches(page, limit, skip_refresh)
    return result.to_dict()


@router.get("/remote-branches/search")
async def search_remote_branches(
    q: str = Query(""),
    page: int = Query(DEFAULT_PAGE, ge=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    service: BranchService = Depends(get_service),
) -> dict:
    result = await service.search_remote_branches(q, page, limit)
    return result.to_dict()


# ============================================================================
# Mutations
# ============================================================================


@router.post("/checkout")
async def checkout(
    body: Optional[BranchRequest] = None,
    service: BranchService = Depends(get_service),
) -> dict:
    """Switch branch; a branch that only exists on the remote is created locally."""
    outcome = await service.checkout(body.branch if body else None)
    return outcome.to_dict()


@router.post("/delete-branch")
async def delete_branch(
    body: Optional[BranchRequest] = None,
    service: BranchService = Depends(get_service),
) -> dict:
    outcome = await service.delete_branch(body.branch if body else None)
    return outcome.to_dict()


@router.post("/pull")
async def pull(service: BranchService = Depends(get_service)) -> dict:
    outcome = await service.pull()
    return outcome.to_dict()


@router.post("/update-all-branches")
async def update_all_branches(service: BranchService = Depends(get_service)) -> dict:
    """Checkout and pull every branch with a live upstream, then switch back."""
    results = await service.update_all_branches()
    return {
        "success": True,
        "overallSuccess": all(result.success for result in results),
        "results": [result.to_dict() for result in results],
    }


@router.post("/cleanup")
async def cleanup(service: BranchService = Depends(get_service)) -> dict:
    """Delete local branches that no longer have a remote counterpart."""
    report = await service.cleanup()
    response = {
        "success": True,
        "message": report.message,
        "stdout": report.message if report.deleted else "",
        "stderr": "\n".join(report.warnings),
    }
    if report.warnings:
        response["warnings"] = report.warnings
    return response


@router.get("/status")
async def status(service: BranchService = Depends(get_service)) -> dict:
    result = await service.status()
    return {
        "success": True,
        "status": result.stdout,
        "stdout": result.stdout,
        "stderr": result.stderr,
    }
