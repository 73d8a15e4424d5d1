"""
독립 작업 병렬 처리
====================

트랜스크립트 경로는 항상 순차적이다. 한 라운드 안에서 서로 독립적인
계산(행렬-벡터 곱, 보간, 커밋)만 batch_map으로 처리한다.

랜덤값은 batch_map 호출 전에 모두 순차적으로 샘플링해야 한다.
그래야 병렬/순차 실행이 같은 증명 바이트열을 만든다.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from zkp.marlin.config import DEFAULT_CONFIG

log = logging.getLogger(__name__)


def batch_map(fn, items, config=None):
    """[fn(item) for item in items]. 입력 순서를 유지한다.

    config.parallel이 켜져 있으면 ThreadPoolExecutor를 사용한다.
    작업 중 예외는 호출자에게 그대로 전파된다.
    """
    cfg = config or DEFAULT_CONFIG
    items = list(items)
    if not cfg.parallel or len(items) <= 1:
        return [fn(item) for item in items]
    workers = cfg.max_workers or min(len(items), 8)
    log.debug("batch_map: %d items, %d workers", len(items), workers)
    with ThreadPoolExecutor(max_workers=workers) as tp:
        return list(tp.map(fn, items))
