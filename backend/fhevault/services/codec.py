"""Mock FHE codec: reversible "encryption", scoring and "decryption".

Nothing here is cryptography. Values are embedded in hex-encoded strings so
that the simulated contract computation can read them back out; a real FHE
scheme would make that infeasible.
"""
import base64
import binascii
import json
import logging
import math
import re
import secrets
import time
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

FIELD_PREFIX = '0xenc_'
FIELD_BYTES = 32
LABELS = {'riskLevel': 'risk', 'allocation': 'alloc', 'timeframe': 'time'}

_VALUE_RE = re.compile(r'^(\d+)_')

BANDS = (
    (80, 95, 'excellent',
     'Excellent strategy performance. Your risk-adjusted approach shows strong potential.'),
    (65, 75, 'good',
     'Good strategy performance. Consider optimizing timeframe for better results.'),
    (45, 50, 'moderate',
     'Moderate performance. Review risk allocation balance for improvements.'),
    (None, 25, 'poor',
     'Strategy needs optimization. Consider adjusting risk parameters or extending timeframe.'),
)


@dataclass(frozen=True)
class KeyPair:
    public_key: str
    private_key: str


@dataclass(frozen=True)
class EncryptionResult:
    encrypted_data: str
    hash: str

    def to_dict(self):
        return {'encryptedData': self.encrypted_data, 'hash': self.hash}


@dataclass(frozen=True)
class DecodeResult:
    """Either a decoded integer or an undecodable marker with a reason."""
    value: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None

    def or_zero(self) -> int:
        return self.value if self.value is not None else 0


def undecodable(reason: str) -> DecodeResult:
    return DecodeResult(value=None, error=reason)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _dump(obj: dict) -> str:
    raw = json.dumps(obj, separators=(',', ':'))
    return base64.b64encode(raw.encode('utf-8')).decode('ascii')


def _load(payload: str) -> dict:
    raw = base64.b64decode(payload.encode('ascii'), validate=True)
    data = json.loads(raw.decode('utf-8'))
    if not isinstance(data, dict):
        raise ValueError('payload is not an object')
    return data


def generate_keypair() -> KeyPair:
    return KeyPair(
        public_key=f"0xpub_{secrets.token_hex(32)}",
        private_key=f"0xpriv_{secrets.token_hex(32)}",
    )


def encode(value: int, salt: str, label: str) -> str:
    """Embed ``value`` in an opaque-looking field string.

    The range of ``value`` is the caller's concern.
    """
    combined = f"{int(value)}_{salt[:16]}_{label}"
    return FIELD_PREFIX + combined.encode('utf-8').hex()[:FIELD_BYTES * 2]


def extract_value(field) -> DecodeResult:
    """Read the integer back out of an encoded field (simulation only)."""
    if not isinstance(field, str) or not field.startswith(FIELD_PREFIX):
        return undecodable('missing field prefix')
    body = field[len(FIELD_PREFIX):]
    try:
        text = bytes.fromhex(body).decode('utf-8', errors='replace')
    except ValueError:
        return undecodable('field body is not hex')
    match = _VALUE_RE.match(text)
    if not match:
        return undecodable('no value marker in field')
    return DecodeResult(value=int(match.group(1)))


def generate_hash(data: str) -> str:
    """Rolling 32-bit polynomial hash, not cryptographically secure."""
    h = 0
    for ch in data:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    hex_part = format(abs(h), 'x').rjust(16, '0')
    return f"0x{hex_part * 4}"[:66]


def encrypt_strategy(risk_level: int, allocation: int, timeframe: int, public_key: str,
                     timestamp: Optional[int] = None) -> EncryptionResult:
    payload = {
        'riskLevel': encode(risk_level, public_key, LABELS['riskLevel']),
        'allocation': encode(allocation, public_key, LABELS['allocation']),
        'timeframe': encode(timeframe, public_key, LABELS['timeframe']),
        'timestamp': _now_ms() if timestamp is None else int(timestamp),
    }
    encrypted_data = _dump(payload)
    return EncryptionResult(encrypted_data=encrypted_data, hash=generate_hash(encrypted_data))


def score_formula(risk_level: int, allocation: int, timeframe: int) -> int:
    score = 50 + (risk_level - 5) * 5 + allocation / 5 + min(timeframe / 10, 20)
    score = max(0, min(100, score))
    # half-up, not banker's rounding
    return int(math.floor(score + 0.5))


def decode_strategy(encrypted_data: str) -> dict:
    """Decode all three fields or raise ValueError naming the first bad one."""
    try:
        data = _load(encrypted_data)
    except (binascii.Error, UnicodeError, ValueError, AttributeError) as exc:
        raise ValueError(f"undecodable payload: {exc}") from exc
    values = {}
    for name in LABELS:
        result = extract_value(data.get(name))
        if not result.ok:
            raise ValueError(f"undecodable field {name}: {result.error}")
        values[name] = result.value
    return values


def compute_score(encrypted_data: str, public_key: Optional[str] = None) -> str:
    """Simulate the contract computation and return an encrypted score payload.

    Decode failures produce a zero score instead of an exception.
    """
    try:
        values = decode_strategy(encrypted_data)
        value = score_formula(values['riskLevel'], values['allocation'], values['timeframe'])
    except ValueError as exc:
        logger.warning("Computation fell back to zero score: %s", exc)
        return _dump({'value': 0, 'timestamp': _now_ms()})
    result = {'value': value, 'timestamp': _now_ms()}
    if public_key:
        result['computedWith'] = public_key[:16]
    return _dump(result)


def read_score(payload) -> DecodeResult:
    try:
        data = _load(payload)
    except (binascii.Error, UnicodeError, ValueError, AttributeError) as exc:
        return undecodable(f"undecodable payload: {exc}")
    value = data.get('value')
    if isinstance(value, bool) or not isinstance(value, int):
        return undecodable('score value missing or not an integer')
    return DecodeResult(value=value)


def decrypt_score(encrypted_score: str, private_key: str) -> int:
    # private_key mirrors a real FHE decrypt signature; the mock never reads it
    result = read_score(encrypted_score)
    if not result.ok:
        logger.warning("Decryption fell back to zero: %s", result.error)
    return result.or_zero()


def classify(score: int) -> dict:
    for floor, percentile, category, recommendation in BANDS:
        if floor is None or score >= floor:
            return {
                'percentile': percentile,
                'recommendation': recommendation,
                'category': category,
            }
