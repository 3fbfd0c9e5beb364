from typing import Any, Dict, Optional

from common.errors import ProcurementError


def success_response(message: str = "Success", **identifiers: Any) -> Dict[str, Any]:
    """
    Standard transition result: {success, message, ...identifiers}.
    """
    payload: Dict[str, Any] = {"success": True, "message": message}
    payload.update(identifiers)
    return payload


def error_response(error: str, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    """
    Standard error envelope.
    """
    payload: Dict[str, Any] = {"success": False, "error": error, "message": message}
    if details is not None:
        payload["details"] = details
    return payload


def error_from_exception(exc: ProcurementError) -> Dict[str, Any]:
    return error_response(exc.error, exc.message, exc.details)
