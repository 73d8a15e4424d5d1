"""
Index-Private Marlin Prover: 라운드 오케스트레이터
===================================================

  ┌─────────────────────────────────────────────────────┐
  │  Round 0: 트랜스크립트 초기화                        │
  │  흡수: VerifyingKey 바이트열, 공개 입력 x           │
  ├─────────────────────────────────────────────────────┤
  │  Round 1: witness 인코딩                             │
  │  Prover → Verifier: [w], [z_A], [z_B], [z_C], [s]   │
  ├─────────────────────────────────────────────────────┤
  │  Round 2: 선형화 lincheck (첫 번째 sumcheck)         │
  │  Verifier → Prover: α, η_A, η_B, η_C                │
  │  Prover → Verifier: [t], [g₁] (차수 한계), [h₁]      │
  │  Verifier → Prover: β₁                              │
  ├─────────────────────────────────────────────────────┤
  │  Round 3: 만족성 ZeroOverK (H)                       │
  │  z_A·z_B - z_C = 0 on H                              │
  ├─────────────────────────────────────────────────────┤
  │  Round 4: 인덱스 일관성 (두 번째 sumcheck)            │
  │  Prover → Verifier: σ₂ = t(β₁), [g₂] (차수 한계)     │
  │  ZeroOverK (K): a - b·(X·g₂ + σ₂/|K|) = 0 on K      │
  ├─────────────────────────────────────────────────────┤
  │  Round 5: β₁에서의 일괄 열기                          │
  │  Prover → Verifier: w, z_A, z_B, z_C, s, g₁, h₁ (β₁) │
  │  Verifier → Prover: v                               │
  │  Prover → Verifier: 열기 증명                        │
  └─────────────────────────────────────────────────────┘

증명은 메모리에서 모두 만든 뒤 마지막에만 반환한다. 중간에 오류가 나면
부분 증명은 밖으로 나가지 않는다.

사용 예시:
    >>> from zkp.marlin.prover import prove
    >>> proof = prove(pk, z, seed=b"blinding")
"""

import logging

from zkp.marlin.ahp import TRANSCRIPT_LABEL
from zkp.marlin.config import resolve
from zkp.marlin.proof import Proof
from zkp.marlin.prover import round1, round2, round3, round4, round5
from zkp.marlin.rng import BlindingRng
from zkp.marlin.serialization import encode_verifying_key
from zkp.marlin.transcript import Transcript

log = logging.getLogger(__name__)


class ProverState:
    """라운드 간 공유되는 Prover 상태.

    속성 (입력):
        pk: ProvingKey
        z: 전체 witness 벡터 (길이 |H|로 패딩)
        public_input: x = z[1..l]
        rng: 블라인딩 랜덤 소스 (하이딩이 꺼져 있으면 None)
        config: MarlinConfig

    속성 (라운드 간 생성):
        w, z_a, z_b, z_c, mask, t, g_1, h_1, g_2: LabeledPolynomial
        rands: 레이블 → Randomness
        z_hat: 마스킹된 ẑ(X) = w(X)·V_x(X) + x̂(X)
        alpha, etas, beta, sigma_2: 챌린지 및 값
    """

    def __init__(self, pk, z, public_input, rng, config):
        self.pk = pk
        self.srs = pk.srs
        self.domain_h = pk.domain_h
        self.domain_k = pk.domain_k
        self.z = z
        self.public_input = public_input
        self.rng = rng
        self.config = config

        self.transcript = Transcript(TRANSCRIPT_LABEL)

        self.w = None
        self.z_a = None
        self.z_b = None
        self.z_c = None
        self.mask = None
        self.z_hat = None
        self.t = None
        self.g_1 = None
        self.h_1 = None
        self.g_2 = None
        self.rands = {}

        self.alpha = None
        self.etas = None
        self.beta = None
        self.sigma_2 = None

        self.proof = Proof()

    def build_proof(self):
        return self.proof


def prove(pk, witness, seed=None, config=None):
    """증명을 생성한다.

    Args:
        pk: ProvingKey
        witness: 전체 z = (1, x, w) 벡터
        seed: 블라인딩 seed (None이면 운영 체제 난수)
        config: MarlinConfig (None이면 환경 변수)

    Returns:
        Proof

    Raises:
        ConstraintUnsatisfied: witness가 회로를 만족하지 않을 때 (커밋 전에 발생)

    예시 (x³+x+5=35):
        >>> circuit, z = Circuit.x3_plus_x_plus_5_eq_35()
        >>> srs = SRS.generate(32, seed=42)
        >>> pk, vk = index(circuit, srs)
        >>> proof = prove(pk, z)
    """
    cfg = resolve(config)
    z, public_input = round1.check_witness(pk, witness)
    rng = BlindingRng(seed).fork(b"prove") if cfg.hiding else None
    state = ProverState(pk, z, public_input, rng, cfg)

    # ┌─────────────────────────────────────────────────────┐
    # │  Round 0: VerifyingKey와 공개 입력 흡수             │
    # └─────────────────────────────────────────────────────┘
    state.transcript.append_message(b"vk", encode_verifying_key(pk.vk))
    state.transcript.append_scalars(b"public_input", public_input)

    round1.execute(state)
    round2.execute(state)
    round3.execute(state)
    round4.execute(state)
    round5.execute(state)

    log.debug("prove: 완료 (|H|=%d, |K|=%d)", state.domain_h.size, state.domain_k.size)
    return state.build_proof()
