"""
Structured Reference String (SRS)
==================================

범용(universal) 신뢰 설정. 한 번 생성하면 최대 차수 이하의 모든 회로에
재사용할 수 있다.

  SRS = {
      G1 powers:       [G1, τ·G1, ..., τ^D·G1]
      γ·G1 powers:     [γ·G1, γτ·G1, ..., γτ^h·G1]   (하이딩, h = hiding_bound)
      G2 powers:       [G2, τ·G2]
  }

**하이딩 (Sonic 스타일)**:
  커밋먼트 C = p(τ)·G1 + r(τ)·γG1. r(X)은 차수 h 이하의 랜덤 다항식이다.
  γ를 모르는 사람은 C에서 p에 대한 정보를 얻을 수 없다.

**보안**:
  τ, γ를 아는 사람은 거짓 증명을 만들 수 있다. 여기서는 교육용으로
  seed에서 결정론적으로 생성한다. 실제 시스템에서는 MPC를 사용해야 한다.

사용 예시:
    >>> srs = SRS.generate(max_degree=64, seed=42)
    >>> vk = srs.verifier_key()
"""

import hashlib
import logging
import secrets

from zkp.marlin.field import FR, G1, G2, ec_mul, CURVE_ORDER

log = logging.getLogger(__name__)

DEFAULT_HIDING_BOUND = 2


class VerifierKey:
    """검증에 필요한 SRS 부분집합.

    속성:
        g1: G1 생성자
        gamma_g1: γ·G1
        g2: G2 생성자
        tau_g2: τ·G2
        max_degree: SRS 최대 차수 D (차수 한계 검사에 사용)
        hiding_bound: 블라인딩 다항식 최대 차수
    """

    def __init__(self, gamma_g1, tau_g2, max_degree, hiding_bound):
        self.g1 = G1
        self.gamma_g1 = gamma_g1
        self.g2 = G2
        self.tau_g2 = tau_g2
        self.max_degree = max_degree
        self.hiding_bound = hiding_bound


class SRS:
    """Structured Reference String: KZG 커밋먼트용 공개 파라미터.

    속성:
        g1_powers: [τ^i·G1], i = 0..D
        gamma_g1_powers: [γτ^i·G1], i = 0..h
        g2_powers: [G2, τ·G2]
        max_degree: D
        hiding_bound: h
    """

    def __init__(self, g1_powers, gamma_g1_powers, g2_powers, max_degree,
                 hiding_bound=DEFAULT_HIDING_BOUND):
        self.g1_powers = g1_powers
        self.gamma_g1_powers = gamma_g1_powers
        self.g2_powers = g2_powers
        self.max_degree = max_degree
        self.hiding_bound = hiding_bound

    @classmethod
    def generate(cls, max_degree, seed=None, hiding_bound=DEFAULT_HIDING_BOUND):
        """SRS를 생성한다.

        Args:
            max_degree: 지원할 최대 다항식 차수 D.
                        회로에 필요한 값은 max(2|H|, |H|+2, 6|K|+1).
            seed: 결정론적 생성을 위한 시드 (교육용)
            hiding_bound: 블라인딩 다항식 최대 차수
        """
        if max_degree < 1:
            raise ValueError(f"max_degree는 1 이상이어야 합니다: {max_degree}")
        if seed is not None:
            tau = _derive_scalar(str(seed).encode())
            gamma = _derive_scalar(str(seed).encode() + b":gamma")
        else:
            tau = FR(secrets.randbelow(CURVE_ORDER - 1) + 1)
            gamma = FR(secrets.randbelow(CURVE_ORDER - 1) + 1)

        log.debug("SRS 생성: max_degree=%d, hiding_bound=%d", max_degree, hiding_bound)

        g1_powers = []
        tau_power = FR(1)
        for _ in range(max_degree + 1):
            g1_powers.append(ec_mul(G1, tau_power))
            tau_power = tau_power * tau

        gamma_g1_powers = []
        tau_power = FR(1)
        for _ in range(hiding_bound + 1):
            gamma_g1_powers.append(ec_mul(G1, gamma * tau_power))
            tau_power = tau_power * tau

        g2_powers = [G2, ec_mul(G2, tau)]

        return cls(g1_powers, gamma_g1_powers, g2_powers, max_degree, hiding_bound)

    def verifier_key(self):
        return VerifierKey(self.gamma_g1_powers[0], self.g2_powers[1],
                           self.max_degree, self.hiding_bound)


def _derive_scalar(data):
    """SHA-256 → 0이 아닌 FR 원소."""
    n = int.from_bytes(hashlib.sha256(data).digest(), "big") % CURVE_ORDER
    return FR(n if n != 0 else 1)
