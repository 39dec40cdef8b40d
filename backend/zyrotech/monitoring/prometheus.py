# backend/zyrotech/monitoring/prometheus.py
from prometheus_client import Counter, Gauge, Histogram
from starlette.requests import Request


def get_http_requests_total():
    """
    Returns a singleton Counter for total HTTP requests.
    Ensures the metric is only registered once per process.
    """
    if not hasattr(get_http_requests_total, "_counter"):
        get_http_requests_total._counter = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"]
        )
    return get_http_requests_total._counter


def get_http_request_duration_seconds():
    """
    Returns a singleton Histogram for HTTP request duration.
    Ensures the metric is only registered once per process.
    """
    if not hasattr(get_http_request_duration_seconds, "_histogram"):
        get_http_request_duration_seconds._histogram = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0]
        )
    return get_http_request_duration_seconds._histogram


def get_http_requests_in_progress():
    """
    Returns a singleton Gauge for in-progress HTTP requests.
    Ensures the metric is only registered once per process.
    """
    if not hasattr(get_http_requests_in_progress, "_gauge"):
        get_http_requests_in_progress._gauge = Gauge(
            "http_requests_in_progress",
            "Number of HTTP requests in progress"
        )
    return get_http_requests_in_progress._gauge


def get_api_errors_total():
    """
    Returns a singleton Counter for API errors, labelled by error code.
    """
    if not hasattr(get_api_errors_total, "_counter"):
        get_api_errors_total._counter = Counter(
            "api_errors_total",
            "Total count of API errors",
            ["error_type", "code", "status_code"]
        )
    return get_api_errors_total._counter


def get_otp_issued_total():
    """
    Returns a singleton Counter for issued one-time passwords.
    """
    if not hasattr(get_otp_issued_total, "_counter"):
        get_otp_issued_total._counter = Counter(
            "otp_issued_total",
            "Total one-time passwords issued",
            ["type"]
        )
    return get_otp_issued_total._counter


def get_emails_sent_total():
    """
    Returns a singleton Counter for outgoing emails by template and outcome.
    """
    if not hasattr(get_emails_sent_total, "_counter"):
        get_emails_sent_total._counter = Counter(
            "emails_sent_total",
            "Total emails handed to the SMTP server",
            ["template", "outcome"]
        )
    return get_emails_sent_total._counter


def endpoint_label(request: Request) -> str:
    """Use the route template so path parameters do not explode label cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path
