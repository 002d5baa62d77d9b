"""
Scrape route for the Wishlist Scraper service.
Thin HTTP adapter over the extraction layer.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response

from wishlist_scraper.errors import InvalidInput
from wishlist_scraper.layers.auth import AuthenticationLayer, AuthResult
from wishlist_scraper.layers.extraction import ExtractionLayer
from wishlist_scraper.models.product import ExtractionRequest, ExtractionResult
from wishlist_scraper.utils.logger import get_logger

router = APIRouter(tags=["scrape"])

logger = get_logger("scrape_route")

# Initialize layers
extraction_layer = ExtractionLayer()
auth_layer = AuthenticationLayer()


def get_extraction_layer() -> ExtractionLayer:
    return extraction_layer


def get_auth_layer() -> AuthenticationLayer:
    return auth_layer


async def require_user(
    authorization: Optional[str] = Header(None),
    layer: AuthenticationLayer = Depends(get_auth_layer),
) -> AuthResult:
    """Reject the request unless it carries a valid bearer token (when enforced)."""
    return await layer.authenticate(authorization)


def parse_scrape_request(request: Request) -> ExtractionRequest:
    """Exactly one non-empty `url` query parameter is accepted."""
    values = request.query_params.getlist("url")
    if len(values) != 1 or not values[0]:
        raise InvalidInput()
    return ExtractionRequest(url=values[0])


@router.options("/scrape")
async def scrape_preflight():
    """Answer bare OPTIONS requests with an empty 200."""
    return Response(status_code=200)


@router.get("/scrape", response_model=ExtractionResult)
async def scrape(
    request: Request,
    auth: AuthResult = Depends(require_user),
    layer: ExtractionLayer = Depends(get_extraction_layer),
):
    """
    Extract wishlist-ready product metadata from a retailer URL.

    Returns title, description, image, price, currency and the URL itself.
    Unknown fields are empty strings; currency defaults to USD.
    """
    scrape_request = parse_scrape_request(request)

    logger.info(
        "scrape_request",
        url=scrape_request.url,
        auth_status=auth.status.value,
        user_id=auth.user_id
    )

    result = await layer.extract(scrape_request.url)

    logger.info(
        "scrape_completed",
        url=result.url,
        fields_present=result.get_present_fields(),
        currency=result.currency
    )

    return result
