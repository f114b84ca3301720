import requests


def read_json(resp: requests.Response) -> dict:
    """Decode an API reply; proxies and crashed workers can answer with HTML or nothing."""
    try:
        body = resp.json()
    except ValueError:
        return {"success": False, "error": f"HTTP {resp.status_code} (non-JSON response)"}
    if not isinstance(body, dict):
        return {"success": False, "error": f"HTTP {resp.status_code} (unexpected response)"}
    return body
