import logging

from devkit.observability import QuietPathsAccessFilter


def _access_line(path: str, status: int) -> logging.LogRecord:
    return logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("10.1.2.3:51000", "GET", path, "1.1", status),
        exc_info=None,
    )


def test_successful_scrapes_and_health_checks_are_dropped() -> None:
    access_filter = QuietPathsAccessFilter()

    assert access_filter.filter(_access_line("/healthz", 200)) is False
    assert access_filter.filter(_access_line("/readyz/", 200)) is False
    assert access_filter.filter(_access_line("/metrics?name[]=school_http_requests_total", 200)) is False


def test_school_traffic_and_failures_are_kept() -> None:
    access_filter = QuietPathsAccessFilter()

    assert access_filter.filter(_access_line("/listSchools?latitude=12.97&longitude=77.59", 200)) is True
    assert access_filter.filter(_access_line("/addSchool", 429)) is True
    assert access_filter.filter(_access_line("/readyz", 503)) is True


def test_non_access_records_pass_through() -> None:
    record = logging.LogRecord("uvicorn.access", logging.INFO, __file__, 1, "server started", None, None)
    assert QuietPathsAccessFilter(["/"]).filter(record) is True
