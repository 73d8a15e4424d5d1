"""
ZeroOverK: 가상 오라클이 도메인 K 위에서 0임을 증명
=====================================================

커밋된 다항식 f₀, ..., f_{n-1} 과 가상 오라클 F(X, 항₀, ..., 항_{t-1}) 에 대해
"모든 x ∈ K 에서 F(x, 항₀(x), ...) = 0" 임을 증명한다.
항ⱼ(X) = f_{m(j)}(αⱼ·X) 이다 (virtual_oracle 참고).
가장 단순한 형태 "p가 K에서 0" 은 F(X, p) = p 이다.

  ┌─────────────────────────────────────────────────────────┐
  │  Prover:                                                 │
  │    항별 마스크 rⱼ (랜덤 상수) → [rⱼ]                       │
  │    항ⱼ'(X) = f_{m(j)}(αⱼX) + rⱼ·Z_K(X)   (K 위에서 항ⱼ 와 같음) │
  │    q(X) = F(X, 항₀', ...) / Z_K(X)   (나머지 ≠ 0 → NotVanishing)│
  │    → [q]                                                 │
  │  Verifier → Prover: ρ ∉ K  (Fiat-Shamir)                 │
  │    → 항₀'(ρ), ..., q(ρ)                                  │
  │  Verifier → Prover: v  (일괄 열기 결합)                    │
  │    → 평가 점 αⱼρ 별 일괄 열기 증명                          │
  ├─────────────────────────────────────────────────────────┤
  │  Verifier:                                               │
  │    F(ρ, 항₀'(ρ), ...) == q(ρ)·Z_K(ρ)                      │
  │    항ⱼ'(ρ) 는 [f_{m(j)}] + Z_K(ρ)·[rⱼ] 를 αⱼρ 에서 연 값     │
  │    + 열기 증명 (즉시 검사 또는 누적기로 넘김)               │
  └─────────────────────────────────────────────────────────┘

**마스킹**:
  f(αρ) 를 그대로 내보내면 Verifier가 커밋된 다항식의 값을 하나씩 얻는다.
  인덱스 다항식처럼 숨겨야 하는 오라클은 증명마다 한 점씩 정보가 새므로
  항마다 새 rⱼ 를 뽑아 f(αρ) + rⱼ·Z_K(ρ) 만 공개한다 (Z_K(ρ) ≠ 0).
  하이딩이 꺼져 있으면(rng=None) rⱼ = 0 이고 원래 값이 그대로 드러난다.

결합 함수 F는 Prover에서는 Polynomial 위에서, Verifier에서는 FR 위에서
같은 코드로 실행된다. 따라서 F 안에서는 Polynomial을 항상 왼쪽에 둔다.

건전성: F(ρ,...) - q(ρ)Z_K(ρ) 는 0이 아닌 다항식이면 무작위 ρ에서
deg/|F| 이하의 확률로만 0이 된다 (Schwartz-Zippel).
"""

import logging

from zkp.marlin.errors import NotVanishing, VerificationFailed, DegreeBoundExceeded
from zkp.marlin.field import FR
from zkp.marlin.kzg import (
    LabeledPolynomial, batch_claim, batch_open, check_claims, commit_labeled,
)
from zkp.marlin.parallel import batch_map
from zkp.marlin.polynomial import Polynomial
from zkp.marlin.virtual_oracle import VirtualOracle

log = logging.getLogger(__name__)

PROTOCOL_LABEL = b"zero-over-k"


class ZeroOverKProof:
    """ZeroOverK 증명.

    속성:
        mask_commitments: 항별 마스크 rⱼ 커밋먼트
        q_commitment: 몫 다항식 커밋먼트
        evaluations: [항₀'(ρ), ..., 항_{t-1}'(ρ), q(ρ)]
        openings: 평가 점별 일괄 열기 증명 (opening_groups 순서)
    """

    def __init__(self, mask_commitments, q_commitment, evaluations, openings):
        self.mask_commitments = mask_commitments
        self.q_commitment = q_commitment
        self.evaluations = evaluations
        self.openings = openings


def opening_groups(terms, rho):
    """평가 점별로 항을 묶는다.

    Returns:
        list: [(점, [항 번호], q 포함 여부)]. 점은 처음 나타난 순서이고
            q는 ρ에서 열린다. 항등 매핑이면 ρ 하나뿐이다.
    """
    points = []
    for _, alpha in terms:
        point = alpha * rho
        if all(point != p for p in points):
            points.append(point)
    if all(rho != p for p in points):
        points.append(rho)
    return [
        (point, [j for j, (_, alpha) in enumerate(terms) if alpha * rho == point], point == rho)
        for point in points
    ]


class ZeroOverK:
    """도메인과 가상 오라클로 정의되는 ZeroOverK 인스턴스.

    Args:
        domain: 증명 대상 도메인 K
        oracle: VirtualOracle 또는 결합 함수 F(x, values) (항등 매핑)
        label: 트랜스크립트 도메인 분리용 레이블
    """

    def __init__(self, domain, oracle, label=b"zk"):
        if not isinstance(oracle, VirtualOracle):
            oracle = VirtualOracle(oracle)
        self.domain = domain
        self.oracle = oracle
        self.label = label

    def _mask_label(self, j):
        return self.label + b"/mask/" + str(j).encode()

    def prove(self, oracles, rands, transcript, srs, rng=None, config=None):
        """ZeroOverK 증명을 생성한다.

        Args:
            oracles: LabeledPolynomial 리스트 (이미 커밋/흡수된 것)
            rands: 각 오라클의 Randomness
            transcript: Prover 트랜스크립트
            srs: SRS
            rng: 블라인딩 랜덤 소스 (None이면 하이딩 없음)

        Raises:
            NotVanishing: F가 도메인 위에서 0이 아닐 때
            ValueError: 매핑 벡터가 없는 오라클을 가리킬 때
        """
        transcript.append_message(PROTOCOL_LABEL, self.label)
        polys = [o.polynomial for o in oracles]
        terms = self.oracle.terms(len(oracles))
        vanishing = self.domain.vanishing_polynomial()

        # ── 1. 항별 마스크 (순차 샘플링 후 흡수) ──
        masks = []
        mask_rands = []
        mask_comms = []
        for j, (i, _) in enumerate(terms):
            value = rng.random_fr() if rng is not None else FR(0)
            mask = LabeledPolynomial(self._mask_label(j), Polynomial([value]),
                                     oracles[i].degree_bound)
            comm, rand = commit_labeled(mask, srs, rng)
            transcript.append_commitment(b"mask", comm)
            masks.append(mask)
            mask_rands.append(rand)
            mask_comms.append(comm)

        # ── 2. 마스킹된 항과 몫 ──
        term_polys = [
            term + vanishing * mask.polynomial.coeffs[0]
            for term, mask in zip(self.oracle.term_polynomials(polys), masks)
        ]
        p = self.oracle.evaluate(Polynomial.x(), term_polys)
        q, remainder = self.domain.divide_by_vanishing(p)
        if not remainder.is_zero():
            raise NotVanishing(f"{self.label!r}: 가상 오라클이 도메인 위에서 0이 아닙니다")
        log.debug("ZeroOverK(%s): 항 %d개, deg p=%d, deg q=%d",
                  self.label, len(terms), p.degree, q.degree)

        q_labeled = LabeledPolynomial(self.label + b"/q", q)
        q_comm, q_rand = commit_labeled(q_labeled, srs, rng)
        transcript.append_commitment(b"q", q_comm)

        # ── 3. ρ 에서의 평가값 ──
        rho = transcript.challenge_outside(b"rho", self.domain)
        z_rho = self.domain.evaluate_vanishing(rho)
        raw = batch_map(lambda t: polys[t[0]].evaluate(t[1] * rho), terms, config)
        evaluations = [value + mask.polynomial.coeffs[0] * z_rho
                       for value, mask in zip(raw, masks)]
        evaluations.append(q.evaluate(rho))
        transcript.append_scalars(b"evaluations", evaluations)

        # ── 4. 평가 점별 일괄 열기: f_{m(j)} + Z_K(ρ)·rⱼ 를 αⱼρ 에서 ──
        v = transcript.challenge_scalar(b"v")
        openings = []
        for point, members, with_q in opening_groups(terms, rho):
            labeled = []
            group_rands = []
            for j in members:
                i = terms[j][0]
                labeled.append(LabeledPolynomial(
                    oracles[i].label, polys[i] + masks[j].polynomial.scale(z_rho),
                    oracles[i].degree_bound,
                ))
                group_rands.append(rands[i] + mask_rands[j].scale(z_rho))
            if with_q:
                labeled.append(q_labeled)
                group_rands.append(q_rand)
            openings.append(batch_open(labeled, group_rands, point, v, srs))
        for opening in openings:
            transcript.append_opening(b"opening", opening)

        return ZeroOverKProof(mask_comms, q_comm, evaluations, openings)

    def verify(self, commitments, degree_bounds, transcript, proof, vk):
        """트랜스크립트를 재생하고 항등식을 검사한다.

        Returns:
            list: 호출자가 누적기로 검사할 OpeningClaim (평가 점마다 하나)

        Raises:
            VerificationFailed: 항등식, 차수 한계, 열기 증명 개수 검사 실패
        """
        terms = self.oracle.terms(len(commitments))
        if (len(proof.mask_commitments) != len(terms)
                or len(proof.evaluations) != len(terms) + 1):
            raise VerificationFailed("zero_over_k_identity")

        transcript.append_message(PROTOCOL_LABEL, self.label)
        for comm in proof.mask_commitments:
            transcript.append_commitment(b"mask", comm)
        transcript.append_commitment(b"q", proof.q_commitment)
        rho = transcript.challenge_outside(b"rho", self.domain)
        transcript.append_scalars(b"evaluations", proof.evaluations)
        v = transcript.challenge_scalar(b"v")
        groups = opening_groups(terms, rho)
        if len(proof.openings) != len(groups):
            raise VerificationFailed("opening")
        for opening in proof.openings:
            transcript.append_opening(b"opening", opening)

        *term_evals, q_eval = proof.evaluations
        z_rho = self.domain.evaluate_vanishing(rho)
        if self.oracle.evaluate(rho, term_evals) != q_eval * z_rho:
            log.debug("ZeroOverK(%s): 항등식 불일치", self.label)
            raise VerificationFailed("zero_over_k_identity")

        claims = []
        try:
            for (point, members, with_q), opening in zip(groups, proof.openings):
                comms = [commitments[terms[j][0]] + proof.mask_commitments[j].scale(z_rho)
                         for j in members]
                bounds = [degree_bounds[terms[j][0]] for j in members]
                values = [term_evals[j] for j in members]
                if with_q:
                    comms.append(proof.q_commitment)
                    bounds.append(None)
                    values.append(q_eval)
                claims.append(batch_claim(comms, bounds, point, values, v, opening, vk))
        except DegreeBoundExceeded:
            raise VerificationFailed("degree_bound")
        return claims

    def check(self, commitments, degree_bounds, transcript, proof, vk):
        """verify + 열기 증명을 즉시 검사한다."""
        claims = self.verify(commitments, degree_bounds, transcript, proof, vk)
        u = transcript.challenge_scalar(b"u")
        if not check_claims(claims, vk, u):
            raise VerificationFailed("opening")
