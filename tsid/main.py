"""
FastAPI TSID Service

A small HTTP service that hands out TSIDs from one factory and decodes TSIDs
given in either of their two forms.

Key Features:
    - Single and batch TSID generation from one thread-safe factory
    - Decoding of the 13-character string form and the 64-bit integer form
    - Node and epoch configured from the environment (TSID_NODE, TSID_EPOCH)

Architecture:
    - FastAPI for the web framework and automatic API documentation
    - The shared factory from tsid.services.registry, created in the lifespan
      and injected into routes with Depends(get_factory)
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Path, Query, Request, status

from tsid.core.config import Settings
from tsid.core.exceptions import (
    ClockRegressionError,
    InvalidCharacterError,
    InvalidLengthError,
    OutOfRangeError,
    SequenceExhaustedError,
)
from tsid.core.identifier import Tsid
from tsid.schema import TsidBatchResponse, TsidResponse
from tsid.services import registry
from tsid.services.factory import TsidFactory
from tsid.services.logger import setup_logger

settings = Settings()
logger = setup_logger("tsid", settings.TSID_LOG_LEVEL)

MAX_BATCH_SIZE = 1000


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Creates the shared factory on startup and drops it on shutdown.

    Args:
        app (FastAPI): The FastAPI application instance

    Yields:
        None: Control to the application during its lifetime
    """
    logger.info("Starting TSID service...")
    app.state.factory = registry.instance()

    yield

    logger.info("TSID service is shutting down.")
    registry.reset()


app = FastAPI(title="TSID Service", lifespan=lifespan)


def get_factory(request: Request) -> TsidFactory:
    """Returns the factory owned by the running application."""
    return request.app.state.factory


def _generate(factory: TsidFactory, count: int) -> list[Tsid]:
    try:
        return factory.generate_many(count)
    except (SequenceExhaustedError, ClockRegressionError, OutOfRangeError) as e:
        logger.error("TSID generation failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="TSID generation failed",
        )


@app.get(
    "/tsid",
    response_model=TsidResponse,
    summary="Generate a TSID",
    description="""
    Generate one new TSID from the service's factory.

    The response carries both serialized forms along with the decoded
    timestamp, node and sequence.
    """,
    responses={
        503: {
            "description": "The factory could not produce an identifier",
            "content": {
                "application/json": {"example": {"detail": "TSID generation failed"}}
            },
        },
    },
)
async def create_tsid(factory: TsidFactory = Depends(get_factory)):
    """Generate a single TSID.

    Returns:
        TsidResponse: The new identifier.
    """
    (tsid,) = _generate(factory, 1)
    return TsidResponse.from_tsid(tsid)


@app.get(
    "/tsid/batch",
    response_model=TsidBatchResponse,
    summary="Generate TSIDs in batch",
    description="""
    Generate up to 1000 TSIDs in one request. The identifiers are produced
    under a single lock acquisition and returned in increasing order.
    """,
)
async def create_tsids(
    count: int = Query(
        10,
        ge=1,
        le=MAX_BATCH_SIZE,
        description="Number of identifiers to generate",
    ),
    factory: TsidFactory = Depends(get_factory),
):
    """Generate count TSIDs.

    Args:
        count (int): Number of identifiers to generate.

    Returns:
        TsidBatchResponse: The new identifiers, in order.
    """
    tsids = _generate(factory, count)
    return TsidBatchResponse(tsids=[TsidResponse.from_tsid(tsid) for tsid in tsids])


@app.get(
    "/tsid/int/{value}",
    response_model=TsidResponse,
    summary="Decode a TSID from its integer form",
)
async def decode_tsid_int(
    value: int = Path(
        ...,
        description="The packed 64-bit integer form",
        examples=[1541815603606036480],
    ),
):
    """Decode a TSID given as a 64-bit integer.

    Returns:
        TsidResponse: The decoded identifier.
    """
    try:
        return TsidResponse.from_tsid(Tsid.from_int(value))
    except OutOfRangeError as e:
        logger.warning("Invalid TSID integer %s: %s", value, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get(
    "/tsid/{text}",
    response_model=TsidResponse,
    summary="Decode a TSID from its string form",
    responses={
        400: {
            "description": "The string is not a valid TSID",
            "content": {
                "application/json": {
                    "example": {"detail": "TSID string length must be 13, got 4"}
                }
            },
        },
    },
)
async def decode_tsid_string(
    text: str = Path(
        ...,
        description="The 13-character Crockford Base32 form",
        examples=["2NJT27V22YG00"],
    ),
):
    """Decode a TSID given as a 13-character string.

    Returns:
        TsidResponse: The decoded identifier.
    """
    try:
        return TsidResponse.from_tsid(Tsid.from_string(text))
    except (InvalidLengthError, InvalidCharacterError, OutOfRangeError) as e:
        logger.warning("Invalid TSID string %r: %s", text, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
