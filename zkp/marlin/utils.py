"""
Index-Private Marlin 공유 유틸리티
===================================

**주요 기능**:
  - next_power_of_2: 도메인 크기 결정
  - public_input_vector: 공개 입력 x → (1, x₁, ..., x_l)
  - public_input_polynomial: x̂(X), H의 처음 l+1개 원소 위에서 보간
  - public_input_vanishing: V_x(X) = Π_{i≤l} (X - ω^i)

**공개 입력 분리**:
  witness z = (1, x, w)를 H 위에서 보간한 ẑ(X)에 대해
  ẑ(X) = w(X)·V_x(X) + x̂(X)
  가 성립하도록 w(X)를 정의한다. Verifier는 공개 입력만으로
  x̂(β), V_x(β)를 계산하여 ẑ(β)를 복원한다.
"""

from zkp.marlin.field import FR
from zkp.marlin.polynomial import Polynomial, interpolate, interpolate_eval


def next_power_of_2(n):
    """n 이상인 가장 작은 2의 거듭제곱."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def public_input_vector(public_input):
    """(1, x₁, ..., x_l)"""
    return [FR(1)] + [x if isinstance(x, FR) else FR(x) for x in public_input]


def public_input_polynomial(domain, public_input):
    """x̂(X): H[i] ↦ (1, x)[i], i = 0..l."""
    values = public_input_vector(public_input)
    points = domain.elements[:len(values)]
    return interpolate(points, values)


def public_input_vanishing(domain, num_public_inputs):
    """V_x(X) = Π_{i=0}^{l} (X - ω^i)."""
    return Polynomial.from_roots(domain.elements[:num_public_inputs + 1])


def evaluate_public_input(domain, public_input, point):
    """x̂(point)를 다항식 구성 없이 계산한다."""
    values = public_input_vector(public_input)
    points = domain.elements[:len(values)]
    return interpolate_eval(points, values, point)


def evaluate_public_vanishing(domain, num_public_inputs, point):
    """V_x(point)."""
    if not isinstance(point, FR):
        point = FR(point)
    result = FR(1)
    for h in domain.elements[:num_public_inputs + 1]:
        result = result * (point - h)
    return result
