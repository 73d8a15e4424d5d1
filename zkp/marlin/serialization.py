"""
증명 / VerifyingKey 바이트 인코딩
===================================

**Proof**:
  | 순서 | 항목                         | 형식                        |
  |------|------------------------------|-----------------------------|
  | 1    | w, z_A, z_B, z_C, s          | G1 × 5                      |
  | 2    | t, g₁ (+shifted), h₁         | G1 × 4                      |
  | 3    | 만족성 ZeroOverK             | zero-over-k 블록 (아래)      |
  | 4    | σ₂                           | 스칼라                       |
  | 5    | g₂ (+shifted)                | G1 × 2                      |
  | 6    | 인덱스 ZeroOverK             | zero-over-k 블록             |
  | 7    | β₁ 평가값                     | 스칼라 리스트 (7개)          |
  | 8    | β₁ 열기 증명                  | 열기 증명                    |

  zero-over-k 블록 = 마스크 [rⱼ] (G1, 차수 한계 항은 +shifted) ‖ [q] (G1)
                    ‖ 스칼라 리스트 ‖ 열기 증명 리스트
  스칼라 리스트 = 4바이트 개수 ‖ 32바이트 × 개수
  열기 증명 = 4바이트 길이 (64 또는 96) ‖ π (G1) ‖ [random_v]
  열기 증명 리스트 = 4바이트 개수 ‖ 열기 증명 × 개수

  스칼라 개수는 프로토콜이 정한다 (만족성 4, 인덱스 11, β₁ 7).
  마스크는 만족성 3개, 인덱스 10개 (마지막 g₂ 마스크만 shifted 포함).
  Marlin의 두 ZeroOverK는 항등 매핑이므로 열기 증명은 각각 1개다.
  개수가 다르거나 남는 바이트가 있으면 DecodingError.

**VerifyingKey**:
  |H|, |K|, l, D, hiding_bound (각 4바이트) ‖ 인덱스 커밋먼트 × 9 ‖ γG1 ‖ τG2
"""

from zkp.marlin.errors import DecodingError
from zkp.marlin.field import (
    G1_SIZE, G2_SIZE, SCALAR_SIZE, TWO_ADICITY, decode_fr, decode_g1, decode_g2,
    encode_fr, encode_g1, encode_g2,
)
from zkp.marlin.indexer import VerifyingKey
from zkp.marlin.kzg import Commitment, OpeningProof
from zkp.marlin.proof import Proof
from zkp.marlin.srs import VerifierKey
from zkp.marlin.zero_over_k import ZeroOverKProof

NUM_INDEX_COMMITMENTS = 9
# 항별 마스크의 shifted 커밋먼트 여부
SATISFACTION_MASKS = (False, False, False)
INDEX_MASKS = (False,) * NUM_INDEX_COMMITMENTS + (True,)
# 항 평가값 + q(ρ)
SATISFACTION_EVALUATIONS = len(SATISFACTION_MASKS) + 1
INDEX_EVALUATIONS = len(INDEX_MASKS) + 1
BETA_EVALUATIONS = 7
ZERO_OVER_K_OPENINGS = 1

OPENING_SIZES = (G1_SIZE, G1_SIZE + SCALAR_SIZE)


class _Reader:
    """바이트열 순차 읽기."""

    def __init__(self, data):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise DecodingError(f"바이트열이 아닙니다: {type(data).__name__}")
        self.data = bytes(data)
        self.pos = 0

    def take(self, size):
        if self.pos + size > len(self.data):
            raise DecodingError("바이트열이 너무 짧습니다")
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def u32(self):
        return int.from_bytes(self.take(4), "big")

    def scalar(self):
        return decode_fr(self.take(SCALAR_SIZE))

    def g1(self):
        return decode_g1(self.take(G1_SIZE))

    def g2(self):
        return decode_g2(self.take(G2_SIZE))

    def scalars(self, expected):
        count = self.u32()
        if count != expected:
            raise DecodingError(f"스칼라 개수 {count} ≠ {expected}")
        return [self.scalar() for _ in range(count)]

    def opening(self):
        size = self.u32()
        if size not in OPENING_SIZES:
            raise DecodingError(f"열기 증명 길이 오류: {size}")
        w = self.g1()
        random_v = self.scalar() if size == OPENING_SIZES[1] else None
        return OpeningProof(w, random_v)

    def finish(self):
        if self.pos != len(self.data):
            raise DecodingError(f"남는 바이트 {len(self.data) - self.pos}개")


def _encode_scalars(values):
    return len(values).to_bytes(4, "big") + b"".join(encode_fr(v) for v in values)


def _encode_opening(proof):
    body = proof.to_bytes()
    return len(body).to_bytes(4, "big") + body


def _encode_zero_over_k(proof):
    out = b"".join(comm.to_bytes() for comm in proof.mask_commitments)
    out += encode_g1(proof.q_commitment.point)
    out += _encode_scalars(proof.evaluations)
    out += len(proof.openings).to_bytes(4, "big")
    out += b"".join(_encode_opening(o) for o in proof.openings)
    return out


def _decode_zero_over_k(reader, masks, num_evaluations):
    """masks: 항별 shifted 커밋먼트 여부."""
    mask_commitments = [
        Commitment(reader.g1(), reader.g1() if shifted else None) for shifted in masks
    ]
    q = Commitment(reader.g1())
    evaluations = reader.scalars(num_evaluations)
    count = reader.u32()
    if count != ZERO_OVER_K_OPENINGS:
        raise DecodingError(f"열기 증명 개수 {count} ≠ {ZERO_OVER_K_OPENINGS}")
    openings = [reader.opening() for _ in range(count)]
    return ZeroOverKProof(mask_commitments, q, evaluations, openings)


# ─────────────────────────────────────────────────────────────────────
# Proof
# ─────────────────────────────────────────────────────────────────────

def encode_proof(proof):
    """Proof → 바이트열."""
    out = b""
    for comm in (proof.w_comm, proof.z_a_comm, proof.z_b_comm, proof.z_c_comm,
                 proof.mask_comm, proof.t_comm):
        out += encode_g1(comm.point)
    out += encode_g1(proof.g_1_comm.point) + encode_g1(proof.g_1_comm.shifted)
    out += encode_g1(proof.h_1_comm.point)
    out += _encode_zero_over_k(proof.satisfaction_proof)
    out += encode_fr(proof.sigma_2)
    out += encode_g1(proof.g_2_comm.point) + encode_g1(proof.g_2_comm.shifted)
    out += _encode_zero_over_k(proof.index_proof)
    out += _encode_scalars(proof.beta_evaluations)
    out += _encode_opening(proof.beta_opening)
    return out


def decode_proof(data):
    """바이트열 → Proof.

    Raises:
        DecodingError: 길이, 개수, 점/스칼라 형식 오류 또는 남는 바이트
    """
    reader = _Reader(data)
    proof = Proof()
    proof.w_comm = Commitment(reader.g1())
    proof.z_a_comm = Commitment(reader.g1())
    proof.z_b_comm = Commitment(reader.g1())
    proof.z_c_comm = Commitment(reader.g1())
    proof.mask_comm = Commitment(reader.g1())
    proof.t_comm = Commitment(reader.g1())
    proof.g_1_comm = Commitment(reader.g1(), reader.g1())
    proof.h_1_comm = Commitment(reader.g1())
    proof.satisfaction_proof = _decode_zero_over_k(
        reader, SATISFACTION_MASKS, SATISFACTION_EVALUATIONS)
    proof.sigma_2 = reader.scalar()
    proof.g_2_comm = Commitment(reader.g1(), reader.g1())
    proof.index_proof = _decode_zero_over_k(reader, INDEX_MASKS, INDEX_EVALUATIONS)
    proof.beta_evaluations = reader.scalars(BETA_EVALUATIONS)
    proof.beta_opening = reader.opening()
    reader.finish()
    return proof


# ─────────────────────────────────────────────────────────────────────
# VerifyingKey
# ─────────────────────────────────────────────────────────────────────

def encode_verifying_key(vk):
    """VerifyingKey → 바이트열. 생성자 G1, G2 는 곡선 상수이므로 넣지 않는다."""
    out = b""
    for value in (vk.domain_h_size, vk.domain_k_size, vk.num_public_inputs,
                  vk.pcs.max_degree, vk.pcs.hiding_bound):
        out += value.to_bytes(4, "big")
    for comm in vk.index_commitments:
        out += encode_g1(comm.point)
    out += encode_g1(vk.pcs.gamma_g1)
    out += encode_g2(vk.pcs.tau_g2)
    return out


def decode_verifying_key(data):
    """바이트열 → VerifyingKey."""
    reader = _Reader(data)
    h_size, k_size, num_public, max_degree, hiding_bound = (reader.u32() for _ in range(5))
    for name, size in (("|H|", h_size), ("|K|", k_size)):
        if size < 2 or size & (size - 1) or size > (1 << TWO_ADICITY):
            raise DecodingError(f"{name}는 2 이상의 2의 거듭제곱이어야 합니다: {size}")
    if num_public + 1 > h_size:
        raise DecodingError("공개 입력 수가 도메인 크기를 초과합니다")
    commitments = [Commitment(reader.g1()) for _ in range(NUM_INDEX_COMMITMENTS)]
    gamma_g1 = reader.g1()
    tau_g2 = reader.g2()
    reader.finish()
    pcs = VerifierKey(gamma_g1, tau_g2, max_degree, hiding_bound)
    return VerifyingKey(h_size, k_size, num_public, pcs, commitments)
