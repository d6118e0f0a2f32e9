"""Reading node transaction-info receipts."""

from typing import Any, Dict, Optional


def decode_message(msg: Any) -> str:
    # node error messages arrive hex encoded
    if not isinstance(msg, str):
        return str(msg)
    try:
        return bytes.fromhex(msg).decode("utf-8", errors="replace")
    except ValueError:
        return msg


def failure_reason(info: Dict[str, Any]) -> Optional[str]:
    """None for a successful receipt, otherwise the decoded failure reason."""
    outcome = (info.get("receipt") or {}).get("result")
    if info.get("result") == "FAILED" or (outcome and outcome != "SUCCESS"):
        return decode_message(info.get("resMessage", "")) or outcome or "FAILED"
    return None
