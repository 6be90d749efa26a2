"""
capfilter REST API Routes

Endpoints for compiling capture criteria into pcap-filter expressions.
"""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from capfilter.filters import (
    Attribute,
    FilterError,
    compile_expression,
    interface_supports_vlan,
    lookup_protocol,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["filters"])


# =============================================================================
# Request/Response Models
# =============================================================================


class AttributeRequest(BaseModel):
    """One capture criterion as submitted by a client."""

    type: str = Field(..., description="Attribute type, e.g. 'port' or 'section_match'")
    section: int | str = Field(..., description="VLAN depth 0-9, or 'preset'")
    match: str = Field(..., description="Operator, e.g. 'any_of' or 'untagged'")
    input: str = Field(default="", description="Whitespace separated values")


class CompileRequest(BaseModel):
    """Request to compile an ordered attribute collection."""

    attributes: list[AttributeRequest] = Field(default_factory=list)
    vlan_supported: bool | None = Field(
        default=None,
        description="Whether the interface carries VLAN tags (derived from interface if omitted)",
    )
    interface: str | None = Field(default=None, description="Capture interface name")


class CompileResponse(BaseModel):
    """Compiled filter expression."""

    expression: str = Field(..., description="pcap-filter expression; empty captures everything")
    vlan_supported: bool
    attributes: list[dict[str, Any]]


class ProtocolResponse(BaseModel):
    """Protocol table lookup result."""

    name: str
    number: int


# =============================================================================
# Helpers
# =============================================================================


def _build_attribute(request: AttributeRequest) -> Attribute:
    attribute = Attribute(request.type, request.section, request.match)
    attribute.set_input(request.input)
    return attribute


def _error_response(error: FilterError) -> HTTPException:
    logger.info("filter_request_rejected", **error.to_dict())
    return HTTPException(status_code=422, detail=error.to_dict())


# =============================================================================
# API Endpoints
# =============================================================================


@router.post("/compile", response_model=CompileResponse)
async def compile_filter(request: CompileRequest) -> CompileResponse:
    """
    Compile attributes into a pcap-filter expression.

    Returns 422 with the error type and offending token when the
    attributes are invalid or the combination cannot be expressed.
    """
    vlan_supported = request.vlan_supported
    if vlan_supported is None:
        vlan_supported = interface_supports_vlan(request.interface)

    try:
        attributes = [_build_attribute(a) for a in request.attributes]
        expression = compile_expression(attributes, vlan_supported=vlan_supported)
    except FilterError as e:
        raise _error_response(e)

    logger.info(
        "filter_compiled",
        interface=request.interface,
        attributes=len(attributes),
        expression=expression,
    )

    return CompileResponse(
        expression=expression,
        vlan_supported=vlan_supported,
        attributes=[a.to_dict() for a in attributes],
    )


@router.post("/attributes/validate")
async def validate_attribute(request: AttributeRequest) -> dict[str, Any]:
    """Validate a single attribute and return its compiled fragment."""
    try:
        attribute = _build_attribute(request)
    except FilterError as e:
        raise _error_response(e)

    return attribute.to_dict()


@router.get("/protocols/{name}", response_model=ProtocolResponse)
async def get_protocol(name: str) -> ProtocolResponse:
    """Look up a protocol number in the system protocol table."""
    number = lookup_protocol(name)
    if number is None:
        raise HTTPException(status_code=404, detail=f"Unknown protocol: {name}")

    return ProtocolResponse(name=name.lower(), number=number)
