"""
Prometheus metrics for the web3 signer service.

Exposed on GET /metrics:
- HTTP requests by route and status
- Signature verifications by outcome
- MFA registry operations by operation and outcome
"""

from prometheus_client import Counter, Histogram, Info

# ============================================================================
# Application Info
# ============================================================================

app_info = Info('web3_signer', 'Web3 signer service application info')

# ============================================================================
# HTTP Metrics
# ============================================================================

http_requests_total = Counter(
    'web3_signer_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'web3_signer_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

# ============================================================================
# Verification Metrics
# ============================================================================

signature_verifications_total = Counter(
    'web3_signer_signature_verifications_total',
    'Total signature verification requests',
    ['result']  # valid, invalid
)

mfa_operations_total = Counter(
    'web3_signer_mfa_operations_total',
    'Total MFA registry operations',
    ['operation', 'result']  # operation: setup, verify_setup, verify_login, disable; result: success, rejected, error
)
