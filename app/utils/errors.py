from typing import Any, Iterable, Mapping

VALUE_ERROR_PREFIX = "Value error, "


def validation_message(errors: Iterable[Mapping[str, Any]]) -> str:
    """
    Collapse pydantic/FastAPI validation errors into one line for the client.
    [{"loc": ("body", "units"), "msg": "..."}] -> "units: ..."
    """
    parts = []
    for err in errors:
        loc = [str(x) for x in err.get("loc", ()) if x != "body"]
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith(VALUE_ERROR_PREFIX):
            msg = msg[len(VALUE_ERROR_PREFIX):]
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"
