from shared.security.sanitize import clean_text, sanitize_html_text

__all__ = [
    "clean_text",
    "sanitize_html_text",
]
