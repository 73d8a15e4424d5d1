"""
블라인딩 랜덤 소스
===================

하이딩 커밋먼트와 witness 마스킹에 쓰이는 필드 원소를 생성한다.

seed가 주어지면 SHA-256(seed ‖ counter) 스트림으로 결정론적으로 생성한다
(같은 seed → 같은 증명 바이트열, 테스트 재현용).
seed가 없으면 secrets 모듈로 암호학적 난수를 사용한다.
"""

import hashlib
import secrets

from zkp.marlin.field import FR, CURVE_ORDER


class BlindingRng:
    """FR 원소 랜덤 소스.

    속성:
        seed: 바이트열 seed 또는 None (운영 체제 난수)
    """

    def __init__(self, seed=None):
        if seed is not None and not isinstance(seed, bytes):
            seed = str(seed).encode()
        self.seed = seed
        self._counter = 0

    def random_fr(self):
        if self.seed is None:
            return FR(secrets.randbelow(CURVE_ORDER))
        # 2^512 mod r 축소 → 편향 무시 가능
        data = b""
        for part in (0, 1):
            data += hashlib.sha256(
                self.seed + self._counter.to_bytes(8, "big") + bytes([part])
            ).digest()
        self._counter += 1
        return FR(int.from_bytes(data, "big") % CURVE_ORDER)

    def random_frs(self, count):
        return [self.random_fr() for _ in range(count)]

    def fork(self, label):
        """독립적인 하위 스트림. seed가 없으면 역시 운영 체제 난수."""
        if self.seed is None:
            return BlindingRng()
        return BlindingRng(hashlib.sha256(self.seed + b"/" + label).digest())
