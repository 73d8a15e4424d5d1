"""
NonZeroOverK: 커밋된 다항식이 도메인 K 위에서 0이 아님을 증명
==================================================================

  ┌─────────────────────────────────────────────────────┐
  │  Prover:                                             │
  │    g(κ) = 1 / f(κ)   (κ ∈ K)                         │
  │    → [g]                                             │
  │  ZeroOverK (K): f(X)·g(X) - 1                        │
  ├─────────────────────────────────────────────────────┤
  │  Verifier:                                           │
  │    [g] 를 흡수하고 ZeroOverK 를 검증                  │
  └─────────────────────────────────────────────────────┘

f·g - 1 이 K 위에서 0이면 모든 κ에서 f(κ)·g(κ) = 1 이므로 f(κ) ≠ 0 이다.
f가 K의 어떤 점에서 0이면 역수 오라클 g를 만들 수 없으므로 Prover가 NotVanishing을 던진다.

f는 커밋먼트의 선형결합이어도 된다. 예를 들어 row - col 이 K 위에서
0이 아님을 보이려면 [row] - [col] 과 두 Randomness의 차를 넘긴다.

사용 예시:
    >>> nz = NonZeroOverK(domain_k, b"col")
    >>> proof = nz.prove(col, col_rand, Transcript(), srs, rng)
    >>> nz.check(col_comm, None, Transcript(), proof, srs.verifier_key())
"""

import logging

from zkp.marlin.errors import NotVanishing, VerificationFailed
from zkp.marlin.field import FR
from zkp.marlin.kzg import LabeledPolynomial, check_claims, commit_labeled
from zkp.marlin.zero_over_k import ZeroOverK

log = logging.getLogger(__name__)

PROTOCOL_LABEL = b"non-zero-over-k"


def inverse_check(x, values):
    """f·g - 1."""
    return values[0] * values[1] - 1


class NonZeroOverKProof:
    """NonZeroOverK 증명.

    속성:
        g_commitment: 역수 오라클 g 커밋먼트
        zero_over_k_proof: f·g - 1 에 대한 ZeroOverKProof
    """

    def __init__(self, g_commitment, zero_over_k_proof):
        self.g_commitment = g_commitment
        self.zero_over_k_proof = zero_over_k_proof


class NonZeroOverK:
    """도메인 K 위의 NonZeroOverK 인스턴스.

    Args:
        domain: 도메인 K
        label: 트랜스크립트 도메인 분리용 레이블
    """

    def __init__(self, domain, label=b"nz"):
        self.domain = domain
        self.label = label

    def _zero_over_k(self):
        return ZeroOverK(self.domain, inverse_check, self.label + b"/inverse")

    def prove(self, f, f_rand, transcript, srs, rng=None, config=None):
        """NonZeroOverK 증명을 생성한다.

        Args:
            f: LabeledPolynomial (이미 커밋/흡수된 것)
            f_rand: f의 Randomness

        Raises:
            NotVanishing: f가 K의 어떤 점에서 0일 때
        """
        transcript.append_message(PROTOCOL_LABEL, self.label)
        evals = self.domain.fft(f.polynomial)
        zeros = [k for k, e in enumerate(evals) if e == 0]
        if zeros:
            raise NotVanishing(f"{self.label!r}: K의 {zeros} 번째 점에서 0입니다")

        g = LabeledPolynomial(self.label + b"/g",
                              self.domain.interpolate([FR(1) / e for e in evals]))
        g_comm, g_rand = commit_labeled(g, srs, rng)
        transcript.append_commitment(b"g", g_comm)
        log.debug("NonZeroOverK(%s): 역수 오라클 커밋", self.label)

        proof = self._zero_over_k().prove(
            [f, g], [f_rand, g_rand], transcript, srs, rng, config,
        )
        return NonZeroOverKProof(g_comm, proof)

    def verify(self, f_commitment, degree_bound, transcript, proof, vk):
        """트랜스크립트를 재생하고 역수 관계를 검사한다.

        Returns:
            list: OpeningClaim 리스트

        Raises:
            VerificationFailed: ZeroOverK 검사 실패
        """
        transcript.append_message(PROTOCOL_LABEL, self.label)
        transcript.append_commitment(b"g", proof.g_commitment)
        return self._zero_over_k().verify(
            [f_commitment, proof.g_commitment], [degree_bound, None],
            transcript, proof.zero_over_k_proof, vk,
        )

    def check(self, f_commitment, degree_bound, transcript, proof, vk):
        """verify + 열기 증명을 즉시 검사한다."""
        claims = self.verify(f_commitment, degree_bound, transcript, proof, vk)
        u = transcript.challenge_scalar(b"u")
        if not check_claims(claims, vk, u):
            raise VerificationFailed("opening")
