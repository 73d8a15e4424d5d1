"""
다항식(Polynomial) 클래스 및 FFT
=================================

프로토콜에서 사용되는 모든 단변수 다항식 연산을 제공한다.

**Polynomial 클래스**:
  계수 표현 기반 다항식. p(x) = c₀ + c₁·x + c₂·x² + ...
  산술 연산자(+, -, *, 스칼라곱)와 평가(evaluation)를 지원한다.

**FFT/IFFT (Number Theoretic Transform)**:
  평가 표현 ↔ 계수 표현 변환. 재귀적 Cooley-Tukey radix-2.

**소거 다항식 나눗셈**:
  Z(x) = x^n - 1 로의 나눗셈은 계수를 접어서(folding) O(deg)로 계산한다.
  ZeroOverK와 sumcheck의 핵심 연산이다.

**선형 인수 나눗셈**:
  (p(x) - p(z)) / (x - z)는 조립제법(synthetic division)으로 계산한다.
  KZG 열기 증명에서 사용한다.

사용 예시:
    >>> p = Polynomial([FR(1), FR(2), FR(3)])  # 1 + 2x + 3x²
    >>> p.evaluate(FR(2))  # FR(17)
"""

from zkp.marlin.field import FR


# ─────────────────────────────────────────────────────────────────────
# Polynomial 클래스
# ─────────────────────────────────────────────────────────────────────

class Polynomial:
    """유한체 FR 위의 다항식.

    계수 리스트로 표현: coeffs = [c₀, c₁, c₂, ...] → c₀ + c₁x + c₂x² + ...

    프로토콜에서의 역할:
    - witness 다항식 w(x), z_A(x), z_B(x), z_C(x)
    - 인덱스 다항식 row_M(x), col_M(x), val_M(x)
    - sumcheck 다항식 t(x), g(x), h(x)
    - ZeroOverK 몫 다항식 q(x)
    """

    def __init__(self, coeffs=None):
        if coeffs is None:
            self.coeffs = [FR(0)]
        else:
            self.coeffs = [c if isinstance(c, FR) else FR(c) for c in coeffs]
            if not self.coeffs:
                self.coeffs = [FR(0)]
        self._trim()

    def _trim(self):
        """최고차 계수가 0인 항을 제거한다. 예: [1, 2, 0, 0] → [1, 2]"""
        while len(self.coeffs) > 1 and self.coeffs[-1] == 0:
            self.coeffs.pop()

    @property
    def degree(self):
        """다항식의 차수. 영 다항식의 차수는 0으로 정의한다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        return len(self.coeffs) == 1 and self.coeffs[0] == 0

    def evaluate(self, point):
        """Horner's method로 p(point)를 계산한다."""
        if not isinstance(point, FR):
            point = FR(point)
        result = FR(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __add__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        a, b = self.coeffs, other.coeffs
        if len(a) < len(b):
            a, b = b, a
        result = list(a)
        for i, c in enumerate(b):
            result[i] = result[i] + c
        return Polynomial(result)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        return self + (-other)

    def __rsub__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        return other.__sub__(self)

    def __neg__(self):
        return Polynomial([-c for c in self.coeffs])

    def __mul__(self, other):
        """다항식 곱셈 (O(n²) 컨볼루션) 또는 스칼라곱."""
        if isinstance(other, (int, FR)):
            if isinstance(other, int):
                other = FR(other)
            return Polynomial([c * other for c in self.coeffs])
        if self.is_zero() or other.is_zero():
            return Polynomial.zero()
        result = [FR(0)] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if a == 0:
                continue
            for j, b in enumerate(other.coeffs):
                result[i + j] = result[i + j] + a * b
        return Polynomial(result)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        if not isinstance(other, Polynomial):
            return False
        return self.coeffs == other.coeffs

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c == 0:
                continue
            if i == 0:
                terms.append(str(int(c)))
            elif i == 1:
                terms.append(f"{int(c)}*x")
            else:
                terms.append(f"{int(c)}*x^{i}")
        return "Poly(" + " + ".join(terms) + ")" if terms else "Poly(0)"

    def __len__(self):
        return len(self.coeffs)

    def scale(self, scalar):
        return self * scalar

    def shift_input(self, alpha):
        """p(α·x). 계수 cᵢ 를 cᵢ·αⁱ 로 바꾼다."""
        if not isinstance(alpha, FR):
            alpha = FR(alpha)
        coeffs = []
        power = FR(1)
        for c in self.coeffs:
            coeffs.append(c * power)
            power = power * alpha
        return Polynomial(coeffs)

    def shift(self, k):
        """x^k · p(x). 차수 한계(degree bound) 커밋먼트에 사용한다."""
        if self.is_zero():
            return Polynomial.zero()
        return Polynomial([FR(0)] * k + self.coeffs)

    def divmod_vanishing(self, n):
        """Z(x) = x^n - 1 로 나눈 (몫, 나머지)를 반환한다.

        x^i = x^(i-n)·(x^n - 1) + x^(i-n) 이므로 최고차부터
        계수를 n칸 아래로 접으면 된다.

        Returns:
            tuple: (몫 Polynomial, 나머지 Polynomial, 차수 < n)
        """
        remainder = list(self.coeffs)
        if len(remainder) <= n:
            return Polynomial.zero(), Polynomial(remainder)
        quotient = [FR(0)] * (len(remainder) - n)
        for i in range(len(remainder) - 1, n - 1, -1):
            c = remainder[i]
            if c == 0:
                continue
            quotient[i - n] = c
            remainder[i - n] = remainder[i - n] + c
            remainder[i] = FR(0)
        return Polynomial(quotient), Polynomial(remainder[:n])

    def divide_by_vanishing(self, n):
        """x^n - 1 로 나눈 몫. 나머지가 0이 아니면 ValueError."""
        q, r = self.divmod_vanishing(n)
        if not r.is_zero():
            raise ValueError("소거 다항식으로 나누어 떨어지지 않습니다")
        return q

    def divide_by_linear(self, point):
        """조립제법: p(x) = (x - point)·q(x) + p(point).

        Returns:
            tuple: (몫 Polynomial, 나머지 FR = p(point))
        """
        if not isinstance(point, FR):
            point = FR(point)
        coeffs = self.coeffs
        if len(coeffs) == 1:
            return Polynomial.zero(), coeffs[0]
        quotient = [FR(0)] * (len(coeffs) - 1)
        carry = FR(0)
        for i in range(len(coeffs) - 1, 0, -1):
            carry = carry * point + coeffs[i]
            quotient[i - 1] = carry
        remainder = carry * point + coeffs[0]
        return Polynomial(quotient), remainder

    @classmethod
    def zero(cls):
        return cls([FR(0)])

    @classmethod
    def one(cls):
        return cls([FR(1)])

    @classmethod
    def x(cls):
        """항등 다항식 id(x) = x."""
        return cls([FR(0), FR(1)])

    @classmethod
    def vanishing(cls, n):
        """소거 다항식 Z(x) = x^n - 1."""
        coeffs = [FR(0)] * (n + 1)
        coeffs[0] = FR(-1)
        coeffs[n] = FR(1)
        return cls(coeffs)

    @classmethod
    def from_roots(cls, roots):
        """Π (x - rᵢ)."""
        result = cls.one()
        for r in roots:
            result = result * cls([-r, FR(1)])
        return result

    @classmethod
    def random(cls, degree, rng):
        """차수 degree 이하의 랜덤 다항식. rng는 random_fr()를 제공해야 한다."""
        return cls([rng.random_fr() for _ in range(degree + 1)])


# ─────────────────────────────────────────────────────────────────────
# FFT / IFFT (Number Theoretic Transform)
# ─────────────────────────────────────────────────────────────────────

def fft(coeffs, omega):
    """계수 → 평가값. 재귀적 Cooley-Tukey radix-2.

    Args:
        coeffs: FR 원소 리스트 (길이는 2의 거듭제곱)
        omega: n차 원시 단위근

    Returns:
        list[FR]: [p(1), p(ω), ..., p(ω^{n-1})]
    """
    n = len(coeffs)
    if n == 1:
        return [coeffs[0] if isinstance(coeffs[0], FR) else FR(coeffs[0])]

    even = [coeffs[i] for i in range(0, n, 2)]
    odd = [coeffs[i] for i in range(1, n, 2)]

    omega_sq = omega * omega
    even_vals = fft(even, omega_sq)
    odd_vals = fft(odd, omega_sq)

    result = [FR(0)] * n
    omega_k = FR(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega

    return result


def ifft(evals, omega):
    """평가값 → 계수. ω^{-1}로 FFT 후 n으로 나눈다."""
    n = len(evals)
    omega_inv = FR(1) / omega
    coeffs = fft(evals, omega_inv)
    n_inv = FR(1) / FR(n)
    return [c * n_inv for c in coeffs]


# ─────────────────────────────────────────────────────────────────────
# 다항식 나눗셈 / 보간
# ─────────────────────────────────────────────────────────────────────

def poly_div(a, b):
    """다항식 긴 나눗셈: a(x) = b(x) · q(x) + r(x).

    Raises:
        ValueError: 제수가 영 다항식인 경우
    """
    if b.is_zero():
        raise ValueError("0으로 나눌 수 없습니다")

    remainder = list(a.coeffs)
    divisor = b.coeffs
    deg_b = len(divisor) - 1
    deg_a = len(remainder) - 1

    if deg_a < deg_b:
        return Polynomial.zero(), Polynomial(remainder)

    quotient = [FR(0)] * (deg_a - deg_b + 1)
    lead_inv = FR(1) / divisor[-1]

    for i in range(deg_a - deg_b, -1, -1):
        coeff = remainder[i + deg_b] * lead_inv
        quotient[i] = coeff
        if coeff == 0:
            continue
        for j in range(deg_b + 1):
            remainder[i + j] = remainder[i + j] - coeff * divisor[j]

    return Polynomial(quotient), Polynomial(remainder)


def lagrange_basis(points, i):
    """i번째 Lagrange 기저 다항식 L_i(x) (임의의 서로 다른 점들 위에서).

    성질: L_i(d_j) = δ_{ij}
    """
    result = Polynomial.one()
    denominator = FR(1)
    for j, d in enumerate(points):
        if j == i:
            continue
        result = result * Polynomial([-d, FR(1)])
        denominator = denominator * (points[i] - d)
    return result * (FR(1) / denominator)


def interpolate(points, values):
    """(pointsᵢ, valuesᵢ)를 지나는 차수 < len(points) 의 다항식."""
    result = Polynomial.zero()
    for i, value in enumerate(values):
        if value == 0:
            continue
        result = result + lagrange_basis(points, i) * value
    return result


def interpolate_eval(points, values, x):
    """보간 다항식을 만들지 않고 x에서의 값만 계산한다. O(len²)."""
    if not isinstance(x, FR):
        x = FR(x)
    total = FR(0)
    for i, value in enumerate(values):
        num = FR(1)
        den = FR(1)
        for j, d in enumerate(points):
            if j == i:
                continue
            num = num * (x - d)
            den = den * (points[i] - d)
        total = total + value * num / den
    return total
