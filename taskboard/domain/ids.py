"""
Row identifiers: 27-character base62 KSUIDs

Ids generated by one process sort in creation order: the payload starts with a
process-wide counter, so two ids minted in the same second still compare
correctly. Keyset pagination (`after_id`) relies on this ordering.
"""
import itertools
import secrets
import threading

from ksuid import Ksuid

from taskboard.domain import clock


ID_LENGTH = 27

_lock = threading.Lock()
_sequence = itertools.count(int.from_bytes(secrets.token_bytes(4), "big"))


def new_id() -> str:
    with _lock:
        now = clock.utc_now()
        seq = next(_sequence)
    payload = seq.to_bytes(8, "big") + secrets.token_bytes(8)
    return str(Ksuid(datetime=now, payload=payload))
