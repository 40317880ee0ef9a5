import hashlib
import json


def crypto_hash(*args):
    """
    Return a sha-256 hex digest of the given arguments.
    Order matters: ledger events hash their sequence number first, so two
    identical transfers still get distinct ids.
    """
    stringified_args = [json.dumps(data, sort_keys=True) for data in args]
    joined_data = "|".join(stringified_args)
    return hashlib.sha256(joined_data.encode("utf-8")).hexdigest()
