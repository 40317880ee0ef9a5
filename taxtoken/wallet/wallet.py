import hashlib
import json
import time
import uuid
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    encode_dss_signature,
    decode_dss_signature
)
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.exceptions import InvalidSignature

from taxtoken.config import ADDRESS_HEX_LENGTH, ZERO_ADDRESS
from taxtoken.errors import InvalidAddress, Unauthorized


class Wallet:
    """
    A secp256k1 key pair identifying one token account.
    """

    def __init__(self, private_key=None):
        if private_key:
            self.private_key = private_key
        else:
            self.private_key = ec.generate_private_key(ec.SECP256K1(), default_backend())
        self.public_key_obj = self.private_key.public_key()
        self.public_key = self.public_key_hex()
        self.address = Wallet.derive_address(self.public_key)

    def sign(self, data):
        return decode_dss_signature(
            self.private_key.sign(
                json.dumps(data, sort_keys=True).encode('utf-8'),
                ec.ECDSA(hashes.SHA256())
            ))

    def sign_call(self, action: str, params: dict):
        """
        Build a signed envelope authorising `action` with `params` on behalf of this account.
        """
        payload = {
            "action": action,
            "params": params,
            "timestamp": time.time_ns(),
            "nonce": uuid.uuid4().hex,
        }
        return {
            "public_key": self.public_key,
            "payload": payload,
            "signature": list(self.sign(payload)),
        }

    def public_key_hex(self):
        bytes_uncompressed = self.public_key_obj.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint
        )
        return bytes_uncompressed.hex()

    def private_key_hex(self):
        return self.private_key.private_numbers().private_value.to_bytes(32, 'big').hex()

    @staticmethod
    def derive_address(public_key: str) -> str:
        # last 40 hex chars of the public key hash, ETH-like
        digest = hashlib.sha256(bytes.fromhex(public_key)).hexdigest()
        return "0x" + digest[-ADDRESS_HEX_LENGTH:]

    @classmethod
    def from_private_key(cls, private_key_hex: str):
        errors = []
        private_key = None
        key_str = private_key_hex if isinstance(private_key_hex, str) else private_key_hex.decode()
        try:
            private_key = serialization.load_pem_private_key(
                key_str.encode("utf-8"),
                password=None,
                backend=default_backend()
            )
        except (ValueError, TypeError) as exc:
            errors.append(exc)

        if private_key is None:
            try:
                int_key = int(key_str.strip(), 16)
                private_key = ec.derive_private_key(int_key, ec.SECP256K1(), default_backend())
            except (ValueError, TypeError) as exc:
                errors.append(exc)

        if private_key is None:
            last_error = errors[-1] if errors else "unknown error"
            raise ValueError(f"Invalid private key: {last_error}")
        return cls(private_key=private_key)

    @staticmethod
    def verify(public_key, data, signature):
        public_bytes = bytes.fromhex(public_key)
        deserialized_public_key = ec.EllipticCurvePublicKey.from_encoded_point(
            ec.SECP256K1(),
            public_bytes
        )

        (r, s) = signature

        try:
            deserialized_public_key.verify(
                encode_dss_signature(r, s),
                json.dumps(data, sort_keys=True).encode('utf-8'),
                ec.ECDSA(hashes.SHA256())
            )

            return True
        except InvalidSignature:
            return False

    @staticmethod
    def verify_call(envelope, action: str):
        """
        Check a signed envelope and return (caller_address, params).
        Raises Unauthorized when the envelope is malformed, signed for another
        action, or carries a bad signature.
        """
        try:
            public_key = envelope["public_key"]
            payload = envelope["payload"]
            signature = envelope["signature"]
            if not isinstance(payload, dict):
                raise TypeError("payload must be an object")
            valid = Wallet.verify(public_key, payload, signature)
        except (KeyError, TypeError, ValueError) as exc:
            raise Unauthorized(f"Malformed signed call: {exc}")

        if not valid:
            raise Unauthorized("Invalid signature")
        if payload.get("action") != action:
            raise Unauthorized(f"Signature authorises {payload.get('action')!r}, not {action!r}")

        return Wallet.derive_address(public_key), payload.get("params") or {}


def is_zero_address(address) -> bool:
    return not address or address.lower() == ZERO_ADDRESS


def normalize_address(address):
    """
    Lower-case an account identifier so ledger keys and pool comparisons agree.
    None and "" pass through and are treated as the zero address downstream.
    """
    if address is None:
        return None
    if not isinstance(address, str):
        raise InvalidAddress(f"Address must be a string, got {type(address).__name__}")
    return address.strip().lower()


if __name__ == '__main__':
    wallet = Wallet()
    print(f'Wallet: {wallet.address}')

    envelope = wallet.sign_call('register_pool', {'address': Wallet().address})
    print(f'Envelope: {envelope}')
    print(f'Caller: {Wallet.verify_call(envelope, "register_pool")}')
