"""
Index-Private Marlin 기반 모듈: 유한체(Finite Field) 및 타원곡선 연산
======================================================================

프로토콜 전체에서 사용되는 기본 대수적 도구와 정규(canonical) 바이트 인코딩을 정의한다.

**유한체 FR**:
  bn128(BN254) 타원곡선의 스칼라 필드. 모든 다항식 연산, 챌린지,
  평가값이 이 필드 위에서 계산된다.
  - 위수 r ≈ 2^254, p - 1 = 2^28 × m → 최대 2^28차 단위근 지원

**타원곡선 연산**:
  KZG 커밋먼트를 위한 G1, G2 그룹 연산 및 페어링.
  py_ecc의 optimized_bn128 (사영 좌표) 구현을 사용한다.
  항등원은 Z1이며, 점 비교는 반드시 ec_eq로 한다 (사영 좌표는 표현이 유일하지 않음).

**인코딩**:
  - 스칼라: 32바이트 빅엔디안, 값 < r
  - G1: 64바이트 (아핀 x ‖ y), 무한원점은 64바이트의 0
  - G2: 128바이트 (x.c0 ‖ x.c1 ‖ y.c0 ‖ y.c1)

사용 예시:
    >>> from zkp.marlin.field import FR, G1, ec_mul
    >>> a = FR(3) * FR(7)     # FR(21)
    >>> P = ec_mul(G1, 5)     # 5·G1
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc.fields import optimized_bn128_FQ as FQ_G1
from py_ecc.fields import optimized_bn128_FQ2 as FQ_G2
from py_ecc import optimized_bn128 as bn128

from zkp.marlin.errors import DecodingError


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 연산을 제공한다.

    주의:
        FR과 Polynomial을 섞어 쓸 때는 Polynomial을 왼쪽에 둔다.
        (FQ.__mul__은 알 수 없는 타입에 대해 TypeError를 던진다)
    """
    field_modulus = bn128.curve_order


CURVE_ORDER = bn128.curve_order
FIELD_MODULUS = bn128.field_modulus

# FR* 의 곱셈 생성자. ω = g^((r-1)/n)
MULTIPLICATIVE_GENERATOR = 5
TWO_ADICITY = 28

SCALAR_SIZE = 32
G1_SIZE = 64
G2_SIZE = 128


# ─────────────────────────────────────────────────────────────────────
# 타원곡선 상수 및 연산
# ─────────────────────────────────────────────────────────────────────

G1 = bn128.G1
G2 = bn128.G2

# G1 항등원 (사영 좌표 (1, 1, 0))
Z1 = bn128.Z1


def ec_mul(point, scalar):
    """타원곡선 스칼라 곱셈: scalar · point."""
    return bn128.multiply(point, int(scalar) % CURVE_ORDER)


def ec_add(p1, p2):
    """타원곡선 점 덧셈: p1 + p2."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """타원곡선 점의 역원: -point."""
    return bn128.neg(point)


def ec_sub(p1, p2):
    """p1 - p2."""
    return bn128.add(p1, bn128.neg(p2))


def ec_lincomb(points, scalars):
    """다중 스칼라 곱: Σᵢ scalarᵢ · pointᵢ.

    0 스칼라는 건너뛴다. 빈 입력이면 Z1을 반환한다.
    """
    result = Z1
    for point, scalar in zip(points, scalars):
        s = int(scalar) % CURVE_ORDER
        if s == 0:
            continue
        result = bn128.add(result, bn128.multiply(point, s))
    return result


def is_inf(point):
    """무한원점(항등원)인지 확인한다. G1, G2 모두 지원."""
    z = point[2]
    return z == type(z).zero()


def ec_eq(p1, p2):
    """사영 좌표 점의 동등 비교."""
    return bn128.eq(p1, p2)


def ec_pairing(g2_point, g1_point):
    """쌍선형 페어링 e(G1, G2) → GT.

    주의:
        py_ecc 페어링의 인자 순서는 (G2, G1)이다.
    """
    return bn128.pairing(g2_point, g1_point)


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근 ω를 반환한다.

    ω = g^((r-1)/n), g = 5

    Args:
        n: 단위근의 차수 (2의 거듭제곱, ≤ 2^28)

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << TWO_ADICITY):
        raise ValueError(f"n은 2^{TWO_ADICITY} 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)
    return FR(MULTIPLICATIVE_GENERATOR) ** ((CURVE_ORDER - 1) // n)


def get_roots_of_unity(n):
    """[1, ω, ω², ..., ω^(n-1)]"""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots


# ─────────────────────────────────────────────────────────────────────
# 정규 바이트 인코딩
# ─────────────────────────────────────────────────────────────────────

def encode_fr(value):
    """FR (또는 정수) → 32바이트 빅엔디안."""
    return (int(value) % CURVE_ORDER).to_bytes(SCALAR_SIZE, "big")


def decode_fr(data):
    """32바이트 → FR. 값이 r 이상이면 DecodingError (비정규 인코딩)."""
    if len(data) != SCALAR_SIZE:
        raise DecodingError(f"스칼라 길이 오류: {len(data)}")
    n = int.from_bytes(data, "big")
    if n >= CURVE_ORDER:
        raise DecodingError("스칼라가 필드 위수 이상입니다")
    return FR(n)


def encode_g1(point):
    """G1 점 → 64바이트 (아핀 x ‖ y)."""
    if is_inf(point):
        return b"\x00" * G1_SIZE
    x, y = bn128.normalize(point)
    return int(x).to_bytes(32, "big") + int(y).to_bytes(32, "big")


def decode_g1(data):
    """64바이트 → G1 점. 곡선 위의 점이 아니면 DecodingError."""
    if len(data) != G1_SIZE:
        raise DecodingError(f"G1 길이 오류: {len(data)}")
    if data == b"\x00" * G1_SIZE:
        return Z1
    x = int.from_bytes(data[:32], "big")
    y = int.from_bytes(data[32:], "big")
    if x >= FIELD_MODULUS or y >= FIELD_MODULUS:
        raise DecodingError("G1 좌표가 기저 필드 범위를 벗어났습니다")
    point = (FQ_G1(x), FQ_G1(y), FQ_G1.one())
    if not bn128.is_on_curve(point, bn128.b):
        raise DecodingError("G1 점이 곡선 위에 있지 않습니다")
    return point


def encode_g2(point):
    """G2 점 → 128바이트."""
    if is_inf(point):
        return b"\x00" * G2_SIZE
    x, y = bn128.normalize(point)
    out = b""
    for coord in (x, y):
        for c in coord.coeffs:
            out += int(c).to_bytes(32, "big")
    return out


def decode_g2(data):
    """128바이트 → G2 점."""
    if len(data) != G2_SIZE:
        raise DecodingError(f"G2 길이 오류: {len(data)}")
    if data == b"\x00" * G2_SIZE:
        return bn128.Z2
    limbs = [int.from_bytes(data[i:i + 32], "big") for i in range(0, G2_SIZE, 32)]
    if any(limb >= FIELD_MODULUS for limb in limbs):
        raise DecodingError("G2 좌표가 기저 필드 범위를 벗어났습니다")
    point = (FQ_G2(limbs[0:2]), FQ_G2(limbs[2:4]), FQ_G2.one())
    if not bn128.is_on_curve(point, bn128.b2):
        raise DecodingError("G2 점이 곡선 위에 있지 않습니다")
    return point
