"""OAuth callback router - exchanges the authorization code for a token."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from ...errors import UpstreamCallFailed
from ...lifecycle import LifecycleManager
from ...logging_config import get_logger
from ...schemas import Credential
from ..dependencies import get_lifecycle

logger = get_logger(__name__)

router = APIRouter(tags=["oauth"])


@router.get("/callback")
async def oauth_callback(
    request: Request,
    code: str | None = Query(None),
    next_url: str | None = Query(None, alias="next"),
    configuration_id: str | None = Query(None, alias="configurationId"),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> Response:
    if not code:
        return JSONResponse({"error": "Missing code parameter"}, status_code=400)

    base_url = str(request.base_url).rstrip("/")
    try:
        token = await lifecycle.vercel.exchange_code(code, f"{base_url}/callback")
    except UpstreamCallFailed:
        return JSONResponse({"error": "Token exchange failed"}, status_code=400)

    logger.info(
        "oauth_token_exchanged",
        installation_id=token.installation_id,
        user_id=token.user_id,
        team_id=token.team_id,
    )
    await lifecycle.credentials.store(
        token.installation_id,
        Credential(
            access_token=token.access_token,
            installation_id=token.installation_id,
            user_id=token.user_id,
            team_id=token.team_id,
        ),
    )

    if next_url:
        return RedirectResponse(next_url)
    return RedirectResponse(f"{base_url}/dashboard?configurationId={configuration_id}")
