"""
FastAPI dependencies - caller identity, shared services, rate limiting
"""

from fastapi import Depends, Request, Response

from chatrix.ai.service import AIChatService
from chatrix.api.schemas.identity import AuthenticatedUser, USER_ID_HEADER, USER_NAME_HEADER
from chatrix.ratelimit.identity import rate_limit_key
from chatrix.ratelimit.limiter import TieredRateLimiter
from chatrix.utils.errors import AuthenticationError, RateLimited


def get_current_user(request: Request) -> AuthenticatedUser:
    """Identity forwarded by the auth layer; 401 when absent."""
    user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
    if not user_id:
        raise AuthenticationError()
    full_name = (request.headers.get(USER_NAME_HEADER) or "").strip() or None
    return AuthenticatedUser(id=user_id, full_name=full_name)


def get_rate_limiter(request: Request) -> TieredRateLimiter:
    return request.app.state.rate_limiter


def get_ai_service(request: Request) -> AIChatService:
    return request.app.state.ai_service


def enforce_ai_rate_limits(
    request: Request,
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    limiter: TieredRateLimiter = Depends(get_rate_limiter),
) -> AuthenticatedUser:
    """
    Charge the request against burst, minute and daily tiers.

    Raises:
        RateLimited: First tier that denies, with its reset metadata
    """
    config = request.app.state.config
    key = rate_limit_key(
        user.id,
        peer_host=request.client.host if request.client else None,
        forwarded_for=request.headers.get("x-forwarded-for"),
        trust_proxy=config.trust_proxy,
    )
    decision = limiter.check(key)
    if not decision.allowed:
        denied = decision.decision
        raise RateLimited(
            denied.message,
            tier=denied.tier,
            limit=denied.limit,
            reset_after=denied.reset_after,
            window=denied.window,
        )

    tightest = decision.most_constrained()
    headers = {
        "RateLimit-Limit": str(tightest.limit),
        "RateLimit-Remaining": str(tightest.remaining),
        "RateLimit-Reset": str(max(0, int(-(-tightest.reset_after // 1)))),
        "RateLimit-Policy": f"{tightest.limit};w={int(tightest.window)}",
    }
    # Error responses raised later in the request pick these up in the exception handler
    request.state.rate_limit_headers = headers
    response.headers.update(headers)
    return user
