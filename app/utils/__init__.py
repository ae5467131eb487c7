import hashlib
from typing import Optional


def token_fingerprint(token: Optional[str]) -> str:
    """Stable, non-reversible identifier for a credential in logs."""
    if not token:
        return "<none>"
    digest = hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]
    return f"len={len(token)} sha256={digest}"
