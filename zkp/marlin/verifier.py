"""
Index-Private Marlin Verifier
===============================

Verifier는 행렬을 모른다. VerifyingKey의 인덱스 커밋먼트와 증명만으로 검증한다.

**검증 과정**:
  1. 공개 입력 길이 확인
  2. 트랜스크립트 재생 → α, η, β₁, ZeroOverK 챌린지, v, u 복원
  3. 만족성 ZeroOverK (H): z_A·z_B - z_C 가 ρ에서 q(ρ)·Z_H(ρ) 와 같은지
  4. 인덱스 ZeroOverK (K): a - b·(X·g₂ + σ₂/|K|) 가 ρ'에서 q'(ρ')·Z_K(ρ') 와 같은지
     (인덱스 다항식의 ρ' 평가값은 증명마다 새 마스크로 가려져 있다)
  5. 첫 번째 sumcheck (β₁):
       s + u_H(α, β₁)·Σ η_M z_M - σ₂·ẑ(β₁) == h₁·Z_H(β₁) + β₁·g₁
     ẑ(β₁) = w(β₁)·V_x(β₁) + x̂(β₁) 는 공개 입력으로 직접 계산한다.
  6. 모든 일괄 열기 주장을 u로 결합하여 페어링 두 번으로 검사

**실패 보고**:
  운영 모드에서는 어떤 검사가 실패했는지 드러내지 않는다 (VerificationFailed()).
  진단 모드(diagnostic=True)에서는 검사 이름을 예외와 로그에 남긴다:
  public_input, zero_over_k_identity, first_sumcheck, degree_bound, opening

사용 예시:
    >>> from zkp.marlin.verifier import verify
    >>> verify(vk, [FR(35)], proof)  # True
"""

import logging

from zkp.marlin.ahp import (
    INDEX_LABEL, SATISFACTION_LABEL, TRANSCRIPT_LABEL,
    first_sumcheck_holds, index_combine, satisfaction_combine,
)
from zkp.marlin.config import resolve
from zkp.marlin.errors import DegreeBoundExceeded, VerificationFailed
from zkp.marlin.field import FR
from zkp.marlin.indexer import required_degree
from zkp.marlin.kzg import batch_claim, check_claims
from zkp.marlin.serialization import decode_proof, encode_verifying_key
from zkp.marlin.transcript import Transcript
from zkp.marlin.utils import evaluate_public_input, evaluate_public_vanishing
from zkp.marlin.zero_over_k import ZeroOverK

log = logging.getLogger(__name__)

BETA_LABELS = ("w", "z_a", "z_b", "z_c", "mask", "g_1", "h_1")


def verify(vk, public_input, proof, config=None):
    """증명을 검증한다.

    Args:
        vk: VerifyingKey
        public_input: 공개 입력 x (FR 또는 int 리스트)
        proof: Proof 또는 그 바이트열
        config: MarlinConfig (None이면 환경 변수)

    Returns:
        bool: 검증 성공 여부

    Raises:
        DecodingError: proof 바이트열 형식이 잘못된 경우
    """
    try:
        check(vk, public_input, proof, config)
    except VerificationFailed:
        return False
    return True


def check(vk, public_input, proof, config=None):
    """증명을 검증하고 실패하면 VerificationFailed를 던진다.

    Raises:
        DecodingError: proof 바이트열 형식이 잘못된 경우
        VerificationFailed: 검증 실패. 진단 모드에서만 .check 가 채워진다.
    """
    cfg = resolve(config)
    if isinstance(proof, (bytes, bytearray, memoryview)):
        proof = decode_proof(proof)
    try:
        _check(vk, public_input, proof)
    except VerificationFailed as e:
        if cfg.diagnostic:
            log.info("검증 실패: %s", e.check)
            raise
        raise VerificationFailed() from None
    log.debug("검증 성공")


def _check(vk, public_input, proof):
    # ── Step 1: 공개 입력 ──
    if len(public_input) != vk.num_public_inputs:
        raise VerificationFailed("public_input")
    public_input = [x if isinstance(x, FR) else FR(x) for x in public_input]

    domain_h = vk.domain_h
    domain_k = vk.domain_k
    pcs = vk.pcs
    if required_degree(domain_h.size, domain_k.size) > pcs.max_degree:
        raise VerificationFailed("degree_bound")

    # ── Step 2: 트랜스크립트 재생 (Round 0 ~ 2) ──
    transcript = Transcript(TRANSCRIPT_LABEL)
    transcript.append_message(b"vk", encode_verifying_key(vk))
    transcript.append_scalars(b"public_input", public_input)

    for label, comm in ((b"w", proof.w_comm), (b"z_a", proof.z_a_comm),
                        (b"z_b", proof.z_b_comm), (b"z_c", proof.z_c_comm),
                        (b"mask", proof.mask_comm)):
        transcript.append_commitment(label, comm)

    alpha = transcript.challenge_outside(b"alpha", domain_h)
    etas = (
        transcript.challenge_scalar(b"eta_a"),
        transcript.challenge_scalar(b"eta_b"),
        transcript.challenge_scalar(b"eta_c"),
    )

    for label, comm in ((b"t", proof.t_comm), (b"g_1", proof.g_1_comm),
                        (b"h_1", proof.h_1_comm)):
        transcript.append_commitment(label, comm)
    beta = transcript.challenge_outside(b"beta", domain_h)

    # ── Step 3: 만족성 ZeroOverK (H) ──
    satisfaction = ZeroOverK(domain_h, satisfaction_combine, SATISFACTION_LABEL)
    satisfaction_claims = satisfaction.verify(
        [proof.z_a_comm, proof.z_b_comm, proof.z_c_comm], [None, None, None],
        transcript, proof.satisfaction_proof, pcs,
    )
    log.debug("만족성 ZeroOverK 항등식 통과")

    # ── Step 4: 인덱스 ZeroOverK (K) ──
    sigma_2 = proof.sigma_2
    transcript.append_scalar(b"sigma_2", sigma_2)
    transcript.append_commitment(b"g_2", proof.g_2_comm)
    index_zero = ZeroOverK(
        domain_k,
        index_combine(alpha, beta, etas, sigma_2, domain_h, domain_k),
        INDEX_LABEL,
    )
    index_claims = index_zero.verify(
        list(vk.index_commitments) + [proof.g_2_comm],
        [None] * len(vk.index_commitments) + [domain_k.size - 2],
        transcript, proof.index_proof, pcs,
    )
    log.debug("인덱스 ZeroOverK 항등식 통과")

    # ── Step 5: 첫 번째 sumcheck (β₁) ──
    transcript.append_scalars(b"beta_evaluations", proof.beta_evaluations)
    v = transcript.challenge_scalar(b"v")
    transcript.append_opening(b"beta_opening", proof.beta_opening)

    if len(proof.beta_evaluations) != len(BETA_LABELS):
        raise VerificationFailed("first_sumcheck")
    evals = dict(zip(BETA_LABELS, proof.beta_evaluations))
    z_hat_beta = (evals["w"] * evaluate_public_vanishing(domain_h, len(public_input), beta)
                  + evaluate_public_input(domain_h, public_input, beta))
    if not first_sumcheck_holds(domain_h, alpha, beta, etas, sigma_2, evals, z_hat_beta):
        raise VerificationFailed("first_sumcheck")
    log.debug("첫 번째 sumcheck 통과")

    try:
        beta_claim = batch_claim(
            [proof.w_comm, proof.z_a_comm, proof.z_b_comm, proof.z_c_comm,
             proof.mask_comm, proof.t_comm, proof.g_1_comm, proof.h_1_comm],
            [None] * 6 + [domain_h.size - 2, None],
            beta,
            [evals["w"], evals["z_a"], evals["z_b"], evals["z_c"], evals["mask"],
             sigma_2, evals["g_1"], evals["h_1"]],
            v, proof.beta_opening, pcs,
        )
    except DegreeBoundExceeded:
        raise VerificationFailed("degree_bound")

    # ── Step 6: 결합 페어링 검사 ──
    u = transcript.challenge_scalar(b"u")
    if not check_claims(satisfaction_claims + index_claims + [beta_claim], pcs, u):
        raise VerificationFailed("opening")
