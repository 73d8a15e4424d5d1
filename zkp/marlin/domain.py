"""
평가 도메인 (Evaluation Domain)
================================

크기 n = 2^k 인 곱셈 부분군 {1, ω, ω², ..., ω^(n-1)}.

프로토콜은 두 개의 도메인을 사용한다:
  - H: 제약/변수 도메인 (|H| ≥ 제약 수, 변수 수)
  - K: 0이 아닌 원소 도메인 (|K| ≥ 행렬 A, B, C의 최대 nnz)

**핵심 다항식**:
  Z(X) = X^n - 1                         (소거 다항식, 도메인 위에서 0)
  u_H(X, Y) = (X^n - Y^n) / (X - Y)      (두 변수 소거 몫)
  L_i(X) = ω^i · Z(X) / (n · (X - ω^i))  (Lagrange 기저)

u_H(x, ω^i)는 x ≠ ω^i 이면 (x^n - 1)/(x - ω^i), x = ω^i 이면 n·ω^(i(n-1)).
"""

from zkp.marlin.field import FR, get_root_of_unity
from zkp.marlin.polynomial import Polynomial, fft, ifft
from zkp.marlin.utils import next_power_of_2


class Domain:
    """곱셈 부분군 평가 도메인.

    속성:
        size: 원소 개수 n (2의 거듭제곱, ≥ 2)
        omega: n차 원시 단위근 ω
        elements: [1, ω, ..., ω^(n-1)]
    """

    def __init__(self, size):
        if size < 2 or (size & (size - 1)) != 0:
            raise ValueError(f"도메인 크기는 2 이상의 2의 거듭제곱이어야 합니다: {size}")
        self.size = size
        self.omega = get_root_of_unity(size)
        self.elements = []
        current = FR(1)
        for _ in range(size):
            self.elements.append(current)
            current = current * self.omega
        self._index = {int(e): i for i, e in enumerate(self.elements)}

    def __repr__(self):
        return f"Domain(size={self.size})"

    def __len__(self):
        return self.size

    def __eq__(self, other):
        return isinstance(other, Domain) and self.size == other.size

    def element(self, i):
        return self.elements[i % self.size]

    def contains(self, x):
        return int(x) in self._index

    # ─── 소거 다항식 ───

    def vanishing_polynomial(self):
        return Polynomial.vanishing(self.size)

    def evaluate_vanishing(self, x):
        """Z(x) = x^n - 1."""
        if not isinstance(x, FR):
            x = FR(x)
        return x ** self.size - FR(1)

    def divide_by_vanishing(self, poly):
        """(몫, 나머지) = poly divmod Z(X)."""
        return poly.divmod_vanishing(self.size)

    # ─── FFT / 보간 ───

    def fft(self, poly):
        """다항식을 도메인 위에서 평가한다.

        차수가 n 이상이면 X^n = 1 을 이용해 계수를 n개로 접은 뒤 FFT한다.
        """
        coeffs = poly.coeffs if isinstance(poly, Polynomial) else list(poly)
        folded = [FR(0)] * self.size
        for i, c in enumerate(coeffs):
            folded[i % self.size] = folded[i % self.size] + c
        return fft(folded, self.omega)

    def ifft(self, evals):
        """도메인 위의 평가값 → 계수 리스트."""
        if len(evals) != self.size:
            raise ValueError(f"평가값 개수 {len(evals)} ≠ 도메인 크기 {self.size}")
        return ifft([e if isinstance(e, FR) else FR(e) for e in evals], self.omega)

    def interpolate(self, evals):
        """도메인 위의 평가값 → Polynomial (차수 < n)."""
        return Polynomial(self.ifft(evals))

    # ─── Lagrange / u_H ───

    def lagrange_eval(self, i, x):
        """L_i(x). x가 도메인 원소이면 크로네커 델타."""
        if not isinstance(x, FR):
            x = FR(x)
        w_i = self.element(i)
        if x == w_i:
            return FR(1)
        z = self.evaluate_vanishing(x)
        if z == 0:
            return FR(0)
        return w_i * z / (FR(self.size) * (x - w_i))

    def evaluate_all_lagrange(self, x):
        """[L_0(x), ..., L_{n-1}(x)]."""
        return [self.lagrange_eval(i, x) for i in range(self.size)]

    def u_eval(self, x, y):
        """u_H(x, y) = (x^n - y^n)/(x - y). x = y 이면 n·x^(n-1)."""
        if not isinstance(x, FR):
            x = FR(x)
        if not isinstance(y, FR):
            y = FR(y)
        if x == y:
            return FR(self.size) * x ** (self.size - 1)
        return (x ** self.size - y ** self.size) / (x - y)

    def u_polynomial(self, alpha):
        """u_H(alpha, X) = Σ_{i<n} alpha^(n-1-i) X^i."""
        if not isinstance(alpha, FR):
            alpha = FR(alpha)
        coeffs = [FR(0)] * self.size
        power = FR(1)
        for i in range(self.size - 1, -1, -1):
            coeffs[i] = power
            power = power * alpha
        return Polynomial(coeffs)

    def u_evals_at(self, alpha):
        """[u_H(alpha, h) for h in H]."""
        return [self.u_eval(alpha, h) for h in self.elements]


def domain_for(count, minimum=2):
    """count 이상인 가장 작은 2의 거듭제곱 크기 도메인."""
    return Domain(next_power_of_2(max(count, minimum, 2)))
