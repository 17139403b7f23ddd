from middleware.case_transformer import (
    API_ENVELOPE_KEYS,
    CaseTransformerMiddleware,
    transform_request_payload,
    transform_response_payload,
)

__all__ = [
    "API_ENVELOPE_KEYS",
    "CaseTransformerMiddleware",
    "transform_request_payload",
    "transform_response_payload",
]
