"""API Layer - gatekeeper middleware stages, error handlers and mount points.

Invariants:
    - Every stage is plain ASGI middleware composed in main.build_gatekeeper()
    - All rejections and errors return structured responses, never raw tracebacks
"""
