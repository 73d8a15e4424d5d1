"""
입력 이동 가상 오라클 (Input-Shifting Virtual Oracle)
======================================================

구체 오라클(커밋된 다항식) f₀, ..., f_{n-1} 에서 항(term)을 만들고
결합 함수 F로 합친 다항식을 가상 오라클이라 한다.

  항ⱼ(X) = f_{m(j)}(αⱼ·X)
  가상 오라클(X) = F(X, 항₀(X), ..., 항_{t-1}(X))

  m: 매핑 벡터 (항 번호 → 구체 오라클 번호)
  α: 항별 입력 이동 계수

같은 오라클을 서로 다른 α로 여러 번 참조할 수 있다.
예를 들어 K의 생성원 γ에 대해

  F = h(γX) - r·h(X)     (m = [0, 0], α = [γ, 1])

은 "h의 K 위 평가값이 비율 r의 순환 등비수열" 이라는 관계가 된다.

매핑 벡터를 생략하면 항ⱼ = fⱼ(X) 이다 (항등 매핑, α = 1).
Verifier는 ρ에서 항ⱼ 의 값을 얻기 위해 f_{m(j)} 를 αⱼ·ρ 에서 연다.

사용 예시:
    >>> geo = VirtualOracle(lambda x, t: t[0] - r * t[1], [0, 0], [gamma, 1])
    >>> geo.terms(1)  # [(0, gamma), (0, 1)]
"""

from zkp.marlin.field import FR


class VirtualOracle:
    """매핑 벡터와 이동 계수로 정의되는 가상 오라클.

    Args:
        combine: F(x, terms) → 값. terms는 항 순서의 리스트.
        mapping_vector: 항별 구체 오라클 번호 (None이면 항등 매핑)
        shifting_coefficients: 항별 α (None이면 모두 1)

    Raises:
        ValueError: 매핑 벡터가 비었거나 이동 계수와 길이가 다를 때
    """

    def __init__(self, combine, mapping_vector=None, shifting_coefficients=None):
        if mapping_vector is None:
            if shifting_coefficients is not None:
                raise ValueError("이동 계수에는 매핑 벡터가 필요합니다")
        else:
            mapping_vector = list(mapping_vector)
            if not mapping_vector:
                raise ValueError("매핑 벡터가 비어 있습니다")
            if min(mapping_vector) < 0:
                raise ValueError("매핑 벡터에 음수 번호가 있습니다")
            if shifting_coefficients is None:
                shifting_coefficients = [FR(1)] * len(mapping_vector)
            if len(shifting_coefficients) != len(mapping_vector):
                raise ValueError("매핑 벡터와 이동 계수의 길이가 다릅니다")
            shifting_coefficients = [a if isinstance(a, FR) else FR(a)
                                     for a in shifting_coefficients]
        self.combine = combine
        self.mapping_vector = mapping_vector
        self.shifting_coefficients = shifting_coefficients

    def terms(self, num_oracles):
        """[(구체 오라클 번호, α), ...] 항 목록.

        Raises:
            ValueError: 매핑 벡터가 num_oracles 개보다 많은 오라클을 요구할 때
        """
        if self.mapping_vector is None:
            return [(i, FR(1)) for i in range(num_oracles)]
        needed = max(self.mapping_vector) + 1
        if needed > num_oracles:
            raise ValueError(
                f"매핑 벡터에는 오라클 {needed}개가 필요하지만 {num_oracles}개뿐입니다"
            )
        return list(zip(self.mapping_vector, self.shifting_coefficients))

    def term_polynomials(self, polys):
        """항ⱼ(X) = f_{m(j)}(αⱼ·X)."""
        return [polys[i] if alpha == 1 else polys[i].shift_input(alpha)
                for i, alpha in self.terms(len(polys))]

    def evaluate(self, x, term_values):
        return self.combine(x, term_values)

