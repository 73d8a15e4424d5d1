"""
Indexer: 회로 전처리
=====================

R1CS 회로를 한 번만 분석하여 Prover용 ProvingKey와
Verifier용 VerifyingKey를 만든다.

**인덱스 다항식**:
  행렬 M ∈ {A, B, C} 의 t번째 0이 아닌 원소 (r, c, m) ((행, 열) 오름차순)에 대해
  도메인 K = {κ₀, κ₁, ...} 위에서

    row_M(κ_t) = ω_H^r
    col_M(κ_t) = ω_H^c
    val_M(κ_t) = m · ω_H^c / |H|

  남는 자리(패딩)는 row = col = 1, val = 0.

  이 세 다항식으로 M의 저차 확장(low-degree extension)을 표현할 수 있다:
    M̂(X, Y) = Σ_κ u_H(X, row(κ)) · u_H(Y, col(κ)) · val(κ) · ...

**인덱스 프라이버시**:
  VerifyingKey에는 9개 인덱스 다항식의 (하이딩) 커밋먼트만 들어간다.
  행렬 계수 자체는 Verifier에게 전달되지 않는다.
  |K|는 A, B, C 가 공유하므로 행렬별 nnz도 드러나지 않는다.

**도메인 크기**:
  |H| = 2^⌈log₂ max(제약 수, 변수 수, min_constraint_domain_size)⌉
  |K| = 2^⌈log₂ max(nnz(A), nnz(B), nnz(C), min_nonzero_domain_size)⌉
  min_*_domain_size 로 공개 버킷까지 올려서 회로 크기를 숨길 수 있다.

**필요한 SRS 차수**:
  max(2|H|, |H| + 2, 6|K| + 1)
    2|H|   : 마스킹 다항식 s와 첫 번째 sumcheck
    |H|+2  : 만족성 ZeroOverK의 몫 다항식
    6|K|+1 : 인덱스 일관성 ZeroOverK의 몫 다항식
             (ZeroOverK 마스크 r·Z_K 로 각 오라클이 차수 |K| 가 된다)

사용 예시:
    >>> pk, vk = index(circuit, srs, seed=b"index")
    >>> vk.index_commitments  # 9개 커밋먼트
"""

import logging

from zkp.marlin.config import resolve
from zkp.marlin.domain import domain_for
from zkp.marlin.errors import DegreeBoundExceeded
from zkp.marlin.field import FR
from zkp.marlin.kzg import LabeledPolynomial, commit_labeled, sample_randomness
from zkp.marlin.parallel import batch_map
from zkp.marlin.rng import BlindingRng

log = logging.getLogger(__name__)

MATRIX_NAMES = ("a", "b", "c")
INDEX_LABELS = tuple(
    f"{kind}_{name}".encode() for name in MATRIX_NAMES for kind in ("row", "col", "val")
)


def required_degree(h_size, k_size):
    """회로에 필요한 최소 SRS 차수."""
    return max(2 * h_size, h_size + 2, 6 * k_size + 1)


class VerifyingKey:
    """Verifier용 공개 키. 행렬 계수는 포함하지 않는다.

    속성:
        domain_h_size, domain_k_size: |H|, |K|
        num_public_inputs: 공개 입력 수 l
        pcs: kzg VerifierKey (max_degree, hiding_bound, γG1, τG2)
        index_commitments: [row_A, col_A, val_A, row_B, ..., val_C] 커밋먼트
    """

    def __init__(self, domain_h_size, domain_k_size, num_public_inputs, pcs,
                 index_commitments):
        self.domain_h_size = domain_h_size
        self.domain_k_size = domain_k_size
        self.num_public_inputs = num_public_inputs
        self.pcs = pcs
        self.index_commitments = list(index_commitments)
        self._domains = None

    def _build_domains(self):
        if self._domains is None:
            self._domains = (domain_for(self.domain_h_size), domain_for(self.domain_k_size))
        return self._domains

    @property
    def domain_h(self):
        return self._build_domains()[0]

    @property
    def domain_k(self):
        return self._build_domains()[1]

    def __eq__(self, other):
        if not isinstance(other, VerifyingKey):
            return False
        from zkp.marlin.serialization import encode_verifying_key
        return encode_verifying_key(self) == encode_verifying_key(other)


class ProvingKey:
    """Prover용 키.

    속성:
        circuit: 원본 회로
        domain_h, domain_k: 평가 도메인
        index_polynomials: 9개 LabeledPolynomial (INDEX_LABELS 순서)
        index_rands: 각 인덱스 커밋먼트의 Randomness
        srs: SRS
        vk: 대응하는 VerifyingKey
    """

    def __init__(self, circuit, domain_h, domain_k, index_polynomials, index_rands,
                 srs, vk):
        self.circuit = circuit
        self.domain_h = domain_h
        self.domain_k = domain_k
        self.index_polynomials = index_polynomials
        self.index_rands = index_rands
        self.srs = srs
        self.vk = vk


def index_evaluations(matrix, domain_h, domain_k):
    """행렬 하나의 (row, col, val) K-평가값."""
    n_inv = FR(1) / FR(domain_h.size)
    rows, cols, vals = [], [], []
    for r, c, m in matrix.sorted_entries():
        col = domain_h.element(c)
        rows.append(domain_h.element(r))
        cols.append(col)
        vals.append(m * col * n_inv)
    padding = domain_k.size - len(rows)
    rows.extend([FR(1)] * padding)
    cols.extend([FR(1)] * padding)
    vals.extend([FR(0)] * padding)
    return rows, cols, vals


def index(circuit, srs, seed=None, config=None):
    """회로를 전처리하여 (ProvingKey, VerifyingKey)를 만든다.

    Args:
        circuit: Circuit
        srs: SRS
        seed: 인덱스 커밋먼트 블라인딩 seed (None이면 운영 체제 난수)
        config: MarlinConfig (None이면 환경 변수)

    Raises:
        DegreeBoundExceeded: 회로가 SRS 최대 차수로 감당할 수 없이 클 때
    """
    cfg = resolve(config)

    domain_h = domain_for(max(circuit.num_constraints, circuit.num_variables),
                          cfg.min_constraint_domain_size)
    domain_k = domain_for(circuit.max_nnz, cfg.min_nonzero_domain_size)
    needed = required_degree(domain_h.size, domain_k.size)
    log.debug("index: |H|=%d, |K|=%d, 필요 차수=%d, SRS 차수=%d",
              domain_h.size, domain_k.size, needed, srs.max_degree)
    if needed > srs.max_degree:
        raise DegreeBoundExceeded(
            f"회로에 차수 {needed}의 SRS가 필요하지만 SRS 최대 차수는 {srs.max_degree}입니다"
        )

    # ── 1. 인덱스 다항식 ──
    matrices = [circuit.matrices[name] for name in MATRIX_NAMES]
    evaluations = batch_map(lambda m: index_evaluations(m, domain_h, domain_k), matrices, cfg)
    flat_evals = [evals for triple in evaluations for evals in triple]
    polys = batch_map(domain_k.interpolate, flat_evals, cfg)
    labeled = [LabeledPolynomial(label, poly) for label, poly in zip(INDEX_LABELS, polys)]

    # ── 2. 커밋 (블라인딩은 먼저 순차적으로 샘플링) ──
    rng = BlindingRng(seed).fork(b"index") if cfg.hiding else None
    rands = [sample_randomness(lp, srs, rng) for lp in labeled]
    commitments = batch_map(
        lambda pair: commit_labeled(pair[0], srs, randomness=pair[1])[0],
        list(zip(labeled, rands)), cfg,
    )

    vk = VerifyingKey(domain_h.size, domain_k.size, circuit.num_public_inputs,
                      srs.verifier_key(), commitments)
    pk = ProvingKey(circuit, domain_h, domain_k, labeled, rands, srs, vk)
    log.debug("index: 완료 (nnz A/B/C = %d/%d/%d)",
              circuit.a.nnz, circuit.b.nnz, circuit.c.nnz)
    return pk, vk
