"""
CMA Routes - Comparative Market Analysis generation

POST /cma/generate returns the report as JSON; POST /cma/report renders the
same report as a PDF.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator

from core.cma import CMAGenerator, CMAReport
from core.comp_engine import Condition, PropertyType, ReferenceProperty
from core.storage import PropertyStore
from reporting.cma_pdf import CMAReportGenerator, report_filename
from utils.config import Config
from web.deps import get_clock, get_config, get_store, run_bounded


MAX_LIMIT = 50


router = APIRouter(prefix="/cma", tags=["cma"])


class CMARequest(BaseModel):
    """Subject property for a CMA. The subject need not be a stored listing."""
    address: str = ""
    city: str
    state: str = ""
    bedrooms: int = Field(ge=0)
    bathrooms: Optional[float] = Field(default=None, ge=0)
    square_feet: int = Field(gt=0)
    year_built: Optional[int] = Field(default=None, ge=1600, le=2100)
    condition: Condition = Condition.AVERAGE
    pool: bool = False
    waterfront: bool = False
    property_type: Optional[str] = None
    price: Optional[int] = Field(default=None, gt=0)
    limit: Optional[int] = Field(default=None, ge=1, le=MAX_LIMIT)

    @field_validator("city")
    @classmethod
    def _city_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("city is required")
        return value

    @field_validator("condition", mode="before")
    @classmethod
    def _lower_condition(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def to_reference(self) -> ReferenceProperty:
        return ReferenceProperty(
            city=self.city,
            bedrooms=self.bedrooms,
            square_feet=self.square_feet,
            price=self.price,
            property_type=PropertyType.normalise(self.property_type),
            address=self.address.strip(),
            state=self.state.strip(),
            bathrooms=self.bathrooms,
            year_built=self.year_built,
            condition=self.condition,
            pool=self.pool,
            waterfront=self.waterfront,
        )


def _generator(store: PropertyStore, config: Config, clock=None) -> CMAGenerator:
    return CMAGenerator(
        store,
        base_rate_per_sqft=config.cma_base_rate_per_sqft,
        include_sold=config.cma_include_sold,
        clock=clock,
    )


async def _build_report(body: CMARequest, store: PropertyStore, config: Config, clock) -> CMAReport:
    generator = _generator(store, config, clock)
    return await run_bounded(
        generator.generate,
        body.to_reference(),
        body.limit or config.cma_default_limit,
        timeout=config.request_timeout,
    )


@router.post("/generate")
async def generate_cma(
    body: CMARequest,
    store: PropertyStore = Depends(get_store),
    config: Config = Depends(get_config),
    clock=Depends(get_clock),
):
    """Generate a CMA report for the subject property."""
    report = await _build_report(body, store, config, clock)
    return report.to_dict()


@router.post("/report")
async def generate_cma_report_pdf(
    body: CMARequest,
    store: PropertyStore = Depends(get_store),
    config: Config = Depends(get_config),
    clock=Depends(get_clock),
):
    """Generate the CMA report as a PDF document."""
    report = await _build_report(body, store, config, clock)
    pdf_bytes = await run_bounded(
        CMAReportGenerator().generate_to_buffer,
        report,
        timeout=config.request_timeout,
    )
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(report)}"'},
    )
