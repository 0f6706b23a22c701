"""Page capture for landing page analysis.

Use explicit imports:
    from worker.capture.browser import PageCapturer, BrowserCapturer, PageCapture, get_capturer
    from worker.capture.url import validate_url, validate_identifier
"""

__all__ = [
    "PageCapture",
    "PageCapturer",
    "BrowserCapturer",
    "CaptureConfig",
    "get_capturer",
    "validate_url",
    "validate_identifier",
]
