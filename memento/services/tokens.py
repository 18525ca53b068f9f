import secrets
from typing import Optional
from urllib.parse import quote

PROOF_BYTES = 4


# Rotating perk proof: short and opaque, not a signature
def new_proof(previous: Optional[str] = None) -> str:
    while True:
        proof = secrets.token_hex(PROOF_BYTES)
        if proof != previous:
            return proof


def verify_url(host: str, partner_id: int, proof: str) -> str:
    return f"https://{host}/verify/{partner_id}?salt={proof}"


def scan_url(base_url: str, tag_id: str) -> str:
    """URL written on the NFC tag."""
    return f"{base_url.rstrip('/')}/?tag={quote(tag_id, safe='')}"
