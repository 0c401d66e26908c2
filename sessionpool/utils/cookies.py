from typing import Dict, Mapping

from starlette.requests import cookie_parser


def parse_cookie_header(header: str) -> Dict[str, str]:
    """Parse a raw ``Cookie`` header value into a name -> value dict."""
    if not header:
        return {}
    return {name: value for name, value in cookie_parser(header).items() if name}


def cookie_header(cookies: Mapping[str, str]) -> str:
    """Render cookies back into a single ``Cookie`` header value."""
    if not cookies:
        raise ValueError("Cookies not found")
    return "; ".join(f"{name}={value}" for name, value in cookies.items())
