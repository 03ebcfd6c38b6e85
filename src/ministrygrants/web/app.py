"""FastAPI web application for Ministry-Grants."""

from contextlib import asynccontextmanager
from typing import Annotated, List, Optional

import structlog
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Path, Query, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.config import Settings, get_settings
from ..core.database_manager import DatabaseManager
from ..core.dependencies import (
    get_dashboard_service,
    get_db_manager,
    get_donor_service,
    get_grant_service,
    get_ledger_service,
    get_ministry_service,
)
from ..core.exceptions import (
    BaseMinistryGrantsException,
    handle_generic_exception,
    handle_http_exception,
    handle_ministrygrants_exception,
    handle_request_validation_exception,
)
from ..models.database import MAX_ENTITY_ID, GrantStatus, MinistryCategory
from ..schemas import (
    ContributionRequest,
    DashboardStats,
    DonorCreate,
    DonorResponse,
    DonorSummaryResponse,
    ErrorResponse,
    GivingFundCreate,
    GivingFundResponse,
    GrantCreate,
    GrantRejectRequest,
    GrantResponse,
    GrantRollup,
    MinistryConnection,
    MinistryCreate,
    MinistryFilter,
    MinistryResponse,
    MinistryUpdate,
)
from ..services.dashboard_service import DashboardService
from ..services.donor_service import DonorService
from ..services.grant_service import GrantService
from ..services.ledger_service import LedgerService
from ..services.ministry_service import MinistryService
from ..utils.logging import configure_logging

logger = structlog.get_logger(__name__)

# Path ids beyond the INTEGER range fail validation instead of reaching the driver
EntityId = Annotated[int, Path(le=MAX_ENTITY_ID)]

ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Business rule or precondition violated"},
    422: {"model": ErrorResponse, "description": "Invalid input"},
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    configure_logging(settings)

    db_manager = DatabaseManager(settings)
    await db_manager.initialize()
    if settings.auto_create_schema:
        await db_manager.create_all()
    app.state.db_manager = db_manager
    logger.info("Starting Ministry-Grants API", version=settings.version)

    yield

    logger.info("Shutting down Ministry-Grants API")
    await db_manager.shutdown()


# Ministries

ministries_router = APIRouter(prefix="/api/ministries", tags=["ministries"])


@ministries_router.get("", response_model=MinistryConnection)
async def list_ministries(
    category: Optional[MinistryCategory] = Query(None, description="Exact category match"),
    verified: Optional[bool] = Query(None, description="Exact verification match"),
    active: Optional[bool] = Query(None, description="Exact active match"),
    state: Optional[str] = Query(None, description="Exact state match"),
    search: Optional[str] = Query(None, description="Case-insensitive substring of the name"),
    limit: Optional[int] = Query(None, description="Page size, clamped to 1..100"),
    after: Optional[str] = Query(None, description="Cursor of the last edge on the previous page"),
    service: MinistryService = Depends(get_ministry_service),
):
    """List ministries with cursor pagination."""
    filter = MinistryFilter(category=category, verified=verified, active=active, state=state, search=search)
    return await service.list_ministries(filter, limit=limit, after=after)


@ministries_router.post("", response_model=MinistryResponse, status_code=status.HTTP_201_CREATED)
async def create_ministry(data: MinistryCreate, service: MinistryService = Depends(get_ministry_service)):
    return await service.create_ministry(data)


@ministries_router.get("/{ministry_id}", response_model=MinistryResponse)
async def get_ministry(ministry_id: EntityId, service: MinistryService = Depends(get_ministry_service)):
    return await service.get_ministry(ministry_id)


@ministries_router.patch("/{ministry_id}", response_model=MinistryResponse)
async def update_ministry(
    ministry_id: EntityId,
    data: MinistryUpdate,
    service: MinistryService = Depends(get_ministry_service),
):
    """Partially update a ministry."""
    return await service.update_ministry(ministry_id, data)


@ministries_router.delete("/{ministry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ministry(ministry_id: EntityId, service: MinistryService = Depends(get_ministry_service)):
    """Delete a ministry that has no grants."""
    await service.delete_ministry(ministry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@ministries_router.post("/{ministry_id}/verify", response_model=MinistryResponse)
async def verify_ministry(ministry_id: EntityId, service: MinistryService = Depends(get_ministry_service)):
    return await service.verify_ministry(ministry_id)


@ministries_router.get("/{ministry_id}/summary", response_model=GrantRollup)
async def ministry_summary(ministry_id: EntityId, service: MinistryService = Depends(get_ministry_service)):
    """Funded total and grant counts for one ministry."""
    return await service.rollup(ministry_id)


# Donors

donors_router = APIRouter(prefix="/api/donors", tags=["donors"])


@donors_router.get("", response_model=List[DonorResponse])
async def list_donors(service: DonorService = Depends(get_donor_service)):
    return await service.list_donors()


@donors_router.post("", response_model=DonorResponse, status_code=status.HTTP_201_CREATED)
async def create_donor(data: DonorCreate, service: DonorService = Depends(get_donor_service)):
    return await service.create_donor(data.first_name, data.last_name, data.email, data.phone)


@donors_router.get("/{donor_id}", response_model=DonorSummaryResponse)
async def get_donor(donor_id: EntityId, service: DonorService = Depends(get_donor_service)):
    """A donor with the combined balance of their funds."""
    donor = await service.get_donor(donor_id)
    total_balance = await service.total_balance(donor_id)
    return DonorSummaryResponse(**DonorResponse.model_validate(donor).model_dump(), total_balance=total_balance)


# Giving funds

funds_router = APIRouter(prefix="/api/funds", tags=["funds"])


@funds_router.get("", response_model=List[GivingFundResponse])
async def list_funds(
    donor_id: Optional[int] = Query(None, alias="donorId", le=MAX_ENTITY_ID),
    service: LedgerService = Depends(get_ledger_service),
):
    return await service.list_funds(donor_id)


@funds_router.post("", response_model=GivingFundResponse, status_code=status.HTTP_201_CREATED)
async def create_fund(data: GivingFundCreate, service: LedgerService = Depends(get_ledger_service)):
    return await service.create_fund(data.donor_id, data.name, data.description, data.initial_balance)


@funds_router.get("/{fund_id}", response_model=GivingFundResponse)
async def get_fund(fund_id: EntityId, service: LedgerService = Depends(get_ledger_service)):
    return await service.get_fund(fund_id)


@funds_router.post("/{fund_id}/contributions", response_model=GivingFundResponse)
async def add_funds(
    fund_id: EntityId,
    data: ContributionRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """Add money to a giving fund."""
    return await service.contribute(fund_id, data.amount)


@funds_router.get("/{fund_id}/summary", response_model=GrantRollup)
async def fund_summary(fund_id: EntityId, service: LedgerService = Depends(get_ledger_service)):
    """Disbursed total and grant counts for one fund."""
    return await service.rollup(fund_id)


# Grants

grants_router = APIRouter(prefix="/api/grants", tags=["grants"])


@grants_router.get("", response_model=List[GrantResponse])
async def list_grants(
    status_filter: Optional[GrantStatus] = Query(None, alias="status"),
    ministry_id: Optional[int] = Query(None, alias="ministryId", le=MAX_ENTITY_ID),
    giving_fund_id: Optional[int] = Query(None, alias="givingFundId", le=MAX_ENTITY_ID),
    service: GrantService = Depends(get_grant_service),
):
    """Grants, most recently requested first."""
    return await service.list_grants(status=status_filter, ministry_id=ministry_id, giving_fund_id=giving_fund_id)


@grants_router.post("", response_model=GrantResponse, status_code=status.HTTP_201_CREATED)
async def create_grant_request(data: GrantCreate, service: GrantService = Depends(get_grant_service)):
    """Request a grant from a giving fund to a verified ministry."""
    return await service.create_grant_request(
        amount=data.amount,
        giving_fund_id=data.giving_fund_id,
        ministry_id=data.ministry_id,
        purpose=data.purpose,
    )


@grants_router.get("/{grant_id}", response_model=GrantResponse)
async def get_grant(grant_id: EntityId, service: GrantService = Depends(get_grant_service)):
    return await service.get_grant(grant_id)


@grants_router.post("/{grant_id}/approve", response_model=GrantResponse)
async def approve_grant(grant_id: EntityId, service: GrantService = Depends(get_grant_service)):
    return await service.approve_grant(grant_id)


@grants_router.post("/{grant_id}/reject", response_model=GrantResponse)
async def reject_grant(
    grant_id: EntityId,
    data: Optional[GrantRejectRequest] = None,
    service: GrantService = Depends(get_grant_service),
):
    return await service.reject_grant(grant_id, data.reason if data else None)


@grants_router.post("/{grant_id}/fund", response_model=GrantResponse)
async def fund_grant(grant_id: EntityId, service: GrantService = Depends(get_grant_service)):
    """Pay an approved grant out of its giving fund."""
    return await service.fund_grant(grant_id)


# Dashboard

dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@dashboard_router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(service: DashboardService = Depends(get_dashboard_service)):
    return await service.get_stats()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Ministry-Grants API",
        description="Donor-advised fund grant management: ministries, giving funds and the grant workflow",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseMinistryGrantsException, handle_ministrygrants_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_exception)
    app.add_exception_handler(Exception, handle_generic_exception)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "description": "Donor-advised fund grant management API",
            "docs": "/docs",
            "health": "/health",
        }

    @app.get("/health")
    async def health_check(db_manager: DatabaseManager = Depends(get_db_manager)):
        """Health check endpoint."""
        database = await db_manager.health_check()
        healthy = database["status"] == "healthy"
        return {
            "status": "healthy" if healthy else "unhealthy",
            "service": settings.app_name,
            "version": settings.version,
            "database": database,
        }

    app.include_router(ministries_router, responses=ERROR_RESPONSES)
    app.include_router(donors_router, responses=ERROR_RESPONSES)
    app.include_router(funds_router, responses=ERROR_RESPONSES)
    app.include_router(grants_router, responses=ERROR_RESPONSES)
    app.include_router(dashboard_router, responses=ERROR_RESPONSES)

    return app


app = create_app()


# Development server
if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "ministrygrants.web.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level="info",
    )
