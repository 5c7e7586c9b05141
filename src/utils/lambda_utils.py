from typing import Dict, Any, Optional
import json
from decimal import Decimal


class DecimalEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            # Always return as string to preserve precision and ensure consistent type
            return str(obj)
        return super(DecimalEncoder, self).default(obj)


def create_response(status_code: int, body: Any) -> Dict[str, Any]:
    """Create a standardized API response."""
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Content-Type,Authorization",
            "Access-Control-Allow-Methods": "GET,POST,OPTIONS"
        },
        "body": json.dumps(body, cls=DecimalEncoder)
    }


def handle_error(status_code: int, message: str) -> Dict[str, Any]:
    """Create a standardized error response."""
    return create_response(status_code, {"message": message})


# extract query parameters from the event
def optional_query_parameter(event: Dict[str, Any], parameter_name: str) -> Optional[str]:
    """Extract a query parameter from the event."""
    return (event.get('queryStringParameters') or {}).get(parameter_name)


def mandatory_query_parameter(event: Dict[str, Any], parameter_name: str, message: Optional[str] = None) -> str:
    """Extract a mandatory query parameter from the event.
    Raises ValueError if the parameter is missing or blank.
    """
    if not parameter_name:
        raise KeyError("Parameter name is required")
    parameter_value = optional_query_parameter(event, parameter_name)
    if not parameter_value or not parameter_value.strip():
        raise ValueError(message or f"Query parameter {parameter_name} not found")
    return parameter_value
