# Middleware package init
"""
Trophy API - Middleware Package
=================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Security Headers] → [Request ID] → [Logging] → [Body Limit]
            → [Origin Allow-List] → [CORS] → [Rate Limit] → [Error Catch-All]
            → Route Handler

    Why this order:
    1. Security headers outermost: every response, rejections included, gets them
    2. Request ID before logging: the access line carries the id
    3. Logging before the rejecting layers: 413/403/429 are logged too
    4. Body limit, then origin check, then rate limit: oversized or foreign
       requests never count against a client's quota
    5. Error catch-all innermost: unexpected exceptions become a 500 response
       that the outer layers still decorate and log

main.create_app() registers them in reverse, since Starlette runs the last
added middleware first.
"""
